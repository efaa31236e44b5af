"""Tests for grid.py — arena layout, lookup, dirty tracking and rebuild."""

from __future__ import annotations

import numpy as np
import pytest

from hexmap.config import DEFAULT_MAP, FLAT_TEST_MAP, GridConfig
from hexmap.grid import CellNotFoundError, HexGrid
from hexmap.mesh import MeshChannel
from hexmap.models import HexCoordinates, HexDirection


def two_chunks() -> GridConfig:
    return GridConfig(
        chunk_count_x=2, chunk_count_z=1, chunk_size_x=3, chunk_size_z=3,
        cell_perturb_strength=0.0, elevation_perturb_strength=0.0, perturb_vertices=False,
    )


@pytest.fixture
def grid():
    return HexGrid(FLAT_TEST_MAP)


# ═══════════════════════════════════════════════════════════════════
# Layout
# ═══════════════════════════════════════════════════════════════════


class TestLayout:
    def test_cell_and_chunk_counts(self):
        grid = HexGrid(DEFAULT_MAP)
        assert len(grid) == 20 * 15
        assert len(grid.chunks) == 12
        assert all(len(chunk.cell_indices) == 25 for chunk in grid.chunks)

    def test_row_major_order(self, grid):
        for i, cell in enumerate(grid):
            assert cell.index == i
            assert cell.coordinates.to_offset() == (i % 5, i // 5)

    def test_chunk_partition(self):
        grid = HexGrid(two_chunks())
        left = {grid.cells[i].coordinates.to_offset()[0] for i in grid.chunks[0].cell_indices}
        right = {grid.cells[i].coordinates.to_offset()[0] for i in grid.chunks[1].cell_indices}
        assert left == {0, 1, 2}
        assert right == {3, 4, 5}

    def test_neighbors_match_coordinates(self, grid):
        for cell in grid:
            for d in HexDirection:
                n = cell.get_neighbor(d)
                expected = cell.coordinates.neighbor(d)
                if n is None:
                    assert not grid.contains(expected)
                else:
                    assert n.coordinates == expected
                    assert n.get_neighbor(d.opposite()) is cell

    def test_positions(self, grid):
        a = grid.get_cell(HexCoordinates.from_offset(0, 0))
        b = grid.get_cell(HexCoordinates.from_offset(0, 1))
        assert a.position == (0.0, 0.0, 0.0)
        assert b.position[0] > a.position[0]
        assert b.position[2] == pytest.approx(15.0)


# ═══════════════════════════════════════════════════════════════════
# Lookup
# ═══════════════════════════════════════════════════════════════════


class TestLookup:
    def test_get_cell_by_coordinates(self, grid):
        for cell in grid:
            assert grid.get_cell(cell.coordinates) is cell

    @pytest.mark.parametrize("col, row", [(5, 0), (-1, 2), (0, 5), (2, -1), (7, 7)])
    def test_out_of_range_raises(self, grid, col, row):
        coords = HexCoordinates.from_offset(col, row)
        assert not grid.contains(coords)
        assert grid.find_cell(coords) is None
        with pytest.raises(CellNotFoundError):
            grid.get_cell(coords)

    def test_not_found_is_key_error(self, grid):
        with pytest.raises(KeyError):
            grid.get_cell(HexCoordinates(40, 40))

    def test_resolve_cell_centres(self, grid):
        for cell in grid:
            assert grid.resolve_coordinates(cell.position) == cell.coordinates
            assert grid.cell_at(cell.position) is cell

    def test_find_direction(self, grid):
        centre = HexCoordinates.from_offset(2, 2)
        for d in HexDirection:
            assert grid.find_direction(centre, centre.neighbor(d)) == d
        assert grid.find_direction(centre, centre) is None
        assert grid.find_direction(centre, HexCoordinates.from_offset(4, 4)) is None
        assert grid.find_direction(HexCoordinates(30, 30), centre) is None


# ═══════════════════════════════════════════════════════════════════
# Mutation and dirty chunks
# ═══════════════════════════════════════════════════════════════════


class TestMutation:
    def test_out_of_range_edits_are_ignored(self, grid):
        far = HexCoordinates.from_offset(9, 9)
        assert not grid.set_cell_elevation(far, 1)
        assert not grid.set_cell_terrain_type(far, 1)
        assert not grid.set_cell_water_level(far, 1)
        assert not grid.remove_river(far)
        assert not grid.set_outgoing_river(far, HexDirection.E)

    def test_edits_delegate_to_cell(self, grid):
        coords = HexCoordinates.from_offset(1, 1)
        assert grid.set_cell_elevation(coords, 2)
        assert grid.set_cell_terrain_type(coords, 3)
        assert grid.set_cell_water_level(coords, 4)
        cell = grid.get_cell(coords)
        assert (cell.elevation, cell.terrain_type_index, cell.water_level) == (2, 3, 4)
        assert grid.set_outgoing_river(coords, HexDirection.E)
        assert grid.remove_river(coords)

    def test_all_chunks_start_dirty(self):
        grid = HexGrid(two_chunks())
        assert len(grid.dirty_chunks) == 2
        grid.rebuild()
        assert grid.dirty_chunks == []

    def test_edit_marks_owning_chunk(self):
        grid = HexGrid(two_chunks())
        grid.rebuild()
        grid.set_cell_elevation(HexCoordinates.from_offset(0, 1), 1)
        assert [chunk.index for chunk in grid.dirty_chunks] == [0]

    def test_edit_on_border_marks_neighbor_chunk(self):
        grid = HexGrid(two_chunks())
        grid.rebuild()
        grid.set_cell_elevation(HexCoordinates.from_offset(2, 1), 1)
        assert [chunk.index for chunk in grid.dirty_chunks] == [0, 1]

    def test_noop_edit_leaves_chunks_clean(self):
        grid = HexGrid(two_chunks())
        grid.rebuild()
        assert not grid.set_cell_elevation(HexCoordinates.from_offset(0, 1), 0)
        assert grid.dirty_chunks == []

    def test_redirected_river_marks_previous_source_chunk(self):
        config = GridConfig(
            chunk_count_x=2, chunk_count_z=1, chunk_size_x=2, chunk_size_z=2,
            cell_perturb_strength=0.0, elevation_perturb_strength=0.0, perturb_vertices=False,
        )
        grid = HexGrid(config)
        source = HexCoordinates.from_offset(2, 0)
        target = HexCoordinates.from_offset(1, 0)
        assert grid.set_outgoing_river(source, HexDirection.W)
        grid.rebuild()
        assert not grid.mesh_for(1).rivers.is_empty()

        # (0, 0) takes over the target; the old source sits in chunk 1.
        assert grid.set_outgoing_river(HexCoordinates.from_offset(0, 0), HexDirection.E)
        assert not grid.get_cell(source).has_river
        assert grid.get_cell(target).incoming_river == HexDirection.W
        assert [chunk.index for chunk in grid.dirty_chunks] == [0, 1]

        grid.refresh()
        assert grid.mesh_for(1).rivers.is_empty()
        assert grid.dirty_chunks == []

    def test_invalid_river_direction_is_rejected(self, grid):
        grid.rebuild()
        assert not grid.set_outgoing_river(HexCoordinates.from_offset(2, 2), 9)
        assert grid.dirty_chunks == []

    def test_refresh_only_rebuilds_dirty(self):
        grid = HexGrid(two_chunks())
        grid.rebuild()
        before = grid.mesh_for(1)
        grid.set_cell_elevation(HexCoordinates.from_offset(0, 1), 1)
        meshes = grid.refresh()
        assert [mesh.chunk_index for mesh in meshes] == [0]
        assert grid.mesh_for(1) is before
        assert grid.dirty_chunks == []


# ═══════════════════════════════════════════════════════════════════
# Rebuild
# ═══════════════════════════════════════════════════════════════════


class TestRebuild:
    def test_meshes_per_chunk(self):
        grid = HexGrid(two_chunks())
        assert grid.meshes == []
        meshes = grid.rebuild()
        assert len(meshes) == 2
        assert [mesh.chunk_index for mesh in grid.meshes] == [0, 1]
        for mesh in meshes:
            assert set(mesh.channels) == set(MeshChannel)

    def test_rebuild_produces_fresh_meshes(self, grid):
        first = grid.rebuild()[0]
        second = grid.rebuild()[0]
        assert first is not second
        assert np.array_equal(first.terrain.positions, second.terrain.positions)

    def test_worker_pool_matches_serial(self):
        config = GridConfig(chunk_count_x=2, chunk_count_z=2, chunk_size_x=4, chunk_size_z=4, seed=9)
        serial = HexGrid(config)
        pooled = HexGrid(config)
        for g in (serial, pooled):
            g.set_cell_elevation(HexCoordinates.from_offset(3, 3), 2)
            g.set_cell_elevation(HexCoordinates.from_offset(4, 4), 1)
            g.set_cell_water_level(HexCoordinates.from_offset(6, 1), 1)
        a = serial.rebuild()
        b = pooled.rebuild(max_workers=4)
        for x, y in zip(a, b):
            for channel in MeshChannel:
                assert np.array_equal(x.channels[channel].positions, y.channels[channel].positions)
                assert np.array_equal(x.channels[channel].indices, y.channels[channel].indices)

    def test_seeded_geometry_is_deterministic(self):
        config = GridConfig(chunk_count_x=1, chunk_count_z=1, seed=11)
        a = HexGrid(config).rebuild()[0]
        b = HexGrid(config).rebuild()[0]
        assert np.array_equal(a.terrain.positions, b.terrain.positions)

    def test_stats_summary(self, grid):
        grid.rebuild()
        stats = grid.stats()
        assert stats["EdgeCase.NO_RIVER"] == 25 * 6
        assert stats["ConnectionKind.STRIP"] == 56
