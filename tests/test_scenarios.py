"""End-to-end triangulation scenarios on a 5 × 5 unperturbed grid."""

from __future__ import annotations

import numpy as np
import pytest

from hexmap.config import FLAT_TEST_MAP
from hexmap.geometry import add, scale
from hexmap.grid import HexGrid
from hexmap.metrics import (
    INNER_TO_OUTER,
    first_solid_corner,
    second_solid_corner,
    solid_edge_middle,
)
from hexmap.models import HexCoordinates, HexDirection
from hexmap.triangulation import (
    ConnectionKind,
    CornerKind,
    EdgeCase,
    RiverChannel,
    RiverSide,
    WaterCase,
)

# 5 × 5 grid: 56 neighbour connections and 32 three-cell corners.
CELLS = 25
CONNECTIONS = 56
CORNERS = 32
FAN_TRIANGLES = CELLS * 6 * 4


def coords(col: int, row: int) -> HexCoordinates:
    return HexCoordinates.from_offset(col, row)


@pytest.fixture
def grid():
    return HexGrid(FLAT_TEST_MAP)


def build(grid: HexGrid):
    meshes = grid.rebuild()
    assert len(meshes) == 1
    return meshes[0]


def has_point(data, point, atol=1e-3) -> bool:
    """True if any vertex of *data* sits at the x/z of *point*."""
    xz = data.positions[:, [0, 2]]
    return bool(np.any(np.all(np.abs(xz - [point[0], point[2]]) < atol, axis=1)))


# ═══════════════════════════════════════════════════════════════════
# Flat terrain
# ═══════════════════════════════════════════════════════════════════


class TestFlatGrid:
    def test_only_fans_strips_and_flat_corners(self, grid):
        mesh = build(grid)
        assert mesh.stats[EdgeCase.NO_RIVER] == CELLS * 6
        assert mesh.stats[ConnectionKind.STRIP] == CONNECTIONS
        assert mesh.stats[ConnectionKind.TERRACES] == 0
        assert mesh.stats[CornerKind.FLAT] == CORNERS
        for kind in (CornerKind.TERRACES, CornerKind.TERRACES_CLIFF, CornerKind.CLIFF_TERRACES):
            assert mesh.stats[kind] == 0

    def test_triangle_count(self, grid):
        mesh = build(grid)
        assert mesh.terrain.triangle_count == FAN_TRIANGLES + CONNECTIONS * 8 + CORNERS

    def test_no_river_or_water_geometry(self, grid):
        mesh = build(grid)
        assert mesh.rivers.is_empty()
        assert mesh.water.is_empty()
        assert mesh.water_shore.is_empty()

    def test_terrain_is_level(self, grid):
        mesh = build(grid)
        assert np.all(mesh.terrain.positions[:, 1] == 0.0)
        assert np.allclose(mesh.terrain.normals, [0.0, 1.0, 0.0], atol=1e-6)

    def test_splat_weights_sum_to_one(self, grid):
        mesh = build(grid)
        assert np.allclose(mesh.terrain.colors.sum(axis=1), 1.0)
        assert np.all(mesh.terrain.terrain_types == 0.0)

    def test_terrain_types_follow_cells(self, grid):
        for cell in grid:
            grid.set_cell_terrain_type(cell.coordinates, 2)
        mesh = build(grid)
        assert np.all(mesh.terrain.terrain_types == 2.0)


# ═══════════════════════════════════════════════════════════════════
# Terraces
# ═══════════════════════════════════════════════════════════════════


class TestRaisedCell:
    @pytest.fixture
    def mesh(self, grid):
        grid.set_cell_elevation(coords(2, 2), 1)
        return build(grid)

    def test_six_terraced_connections(self, mesh):
        assert mesh.stats[ConnectionKind.TERRACES] == 6
        assert mesh.stats[ConnectionKind.STRIP] == CONNECTIONS - 6

    def test_six_terraced_corners(self, mesh):
        assert mesh.stats[CornerKind.TERRACES] == 6
        assert mesh.stats[CornerKind.FLAT] == CORNERS - 6

    def test_triangle_count(self, mesh):
        connections = (CONNECTIONS - 6) * 8 + 6 * 5 * 8
        corners = (CORNERS - 6) + 6 * 9
        assert mesh.terrain.triangle_count == FAN_TRIANGLES + connections + corners

    def test_terrace_heights(self, mesh):
        heights = set(np.round(mesh.terrain.positions[:, 1], 4).tolist())
        assert heights == {0.0, 1.0, 2.0, 3.0}


class TestCliff:
    def test_cliff_is_single_strip(self, grid):
        grid.set_cell_elevation(coords(2, 2), 3)
        mesh = build(grid)
        assert mesh.stats[ConnectionKind.TERRACES] == 0
        assert mesh.stats[ConnectionKind.STRIP] == CONNECTIONS
        heights = set(np.round(mesh.terrain.positions[:, 1], 4).tolist())
        assert heights == {0.0, 9.0}

    def test_slope_cliff_corner_uses_boundary(self, grid):
        # Bottom 0, one side 1 (slope), other side 3 (cliff).
        grid.set_cell_elevation(coords(2, 3), 1)
        grid.set_cell_elevation(coords(3, 2), 3)
        mesh = build(grid)
        assert mesh.stats[CornerKind.TERRACES_CLIFF] + mesh.stats[CornerKind.CLIFF_TERRACES] > 0


# ═══════════════════════════════════════════════════════════════════
# Rivers
# ═══════════════════════════════════════════════════════════════════


class TestRivers:
    @pytest.fixture
    def mesh(self, grid):
        grid.set_outgoing_river(coords(1, 2), HexDirection.E)
        grid.set_outgoing_river(coords(2, 2), HexDirection.E)
        return build(grid)

    def test_edge_cases(self, mesh):
        assert mesh.stats[EdgeCase.RIVER_BEGIN_OR_END] == 2
        assert mesh.stats[EdgeCase.RIVER_THROUGH] == 2
        assert mesh.stats[EdgeCase.ADJACENT_TO_RIVER] == 14
        assert mesh.stats[EdgeCase.NO_RIVER] == CELLS * 6 - 18
        assert mesh.stats[RiverChannel.STRAIGHT] == 2
        assert mesh.stats[RiverSide.OUTSIDE_NEXT] == 2
        assert mesh.stats[RiverSide.OUTSIDE_PREVIOUS] == 2
        assert mesh.stats[RiverSide.INSIDE_BEND] == 0
        assert mesh.stats[RiverSide.NONE] == 10

    def test_river_surface(self, mesh):
        rivers = mesh.rivers
        assert not rivers.is_empty()
        assert np.allclose(rivers.positions[:, 1], -1.5)
        assert rivers.uvs.shape == (rivers.vertex_count, 2)
        assert np.all((rivers.uvs >= 0.0) & (rivers.uvs <= 1.0))

    def test_stream_bed_cut(self, mesh):
        assert np.isclose(mesh.terrain.positions[:, 1], -5.25).any()

    def test_sharp_bend(self, grid):
        # Enters (2, 2) from the west, leaves north-west.
        grid.set_outgoing_river(coords(1, 2), HexDirection.E)
        grid.set_outgoing_river(coords(2, 2), HexDirection.NW)
        mesh = build(grid)
        assert mesh.stats[RiverChannel.SHARP_NEXT] == 1
        assert mesh.stats[RiverChannel.SHARP_PREVIOUS] == 1
        assert mesh.stats[RiverChannel.STRAIGHT] == 0
        assert mesh.stats[RiverSide.NONE] == 14

        center = grid.get_cell(coords(2, 2)).position
        inner_corner = add(center, scale(second_solid_corner(HexDirection.W), 2.0 / 3.0))
        assert has_point(mesh.rivers, center)
        assert has_point(mesh.rivers, inner_corner)
        assert has_point(mesh.terrain, inner_corner)

    def test_smooth_bend(self, grid):
        # Enters (2, 2) from the west, leaves north-east.
        grid.set_outgoing_river(coords(1, 2), HexDirection.E)
        grid.set_outgoing_river(coords(2, 2), HexDirection.NE)
        mesh = build(grid)
        assert mesh.stats[RiverChannel.SMOOTH_NEXT] == 1
        assert mesh.stats[RiverChannel.SMOOTH_PREVIOUS] == 1
        assert mesh.stats[RiverSide.INSIDE_BEND] == 1
        assert mesh.stats[RiverSide.OUTSIDE_NEXT] == 0
        assert mesh.stats[RiverSide.OUTSIDE_PREVIOUS] == 0
        assert mesh.stats[RiverSide.NONE] == 13

        center = grid.get_cell(coords(2, 2)).position
        inside = add(center, scale(solid_edge_middle(HexDirection.NW), 0.5 * INNER_TO_OUTER))
        assert has_point(mesh.rivers, center)
        assert has_point(mesh.rivers, inside)
        assert has_point(mesh.terrain, inside)

    def test_straight_river_shifts_side_apexes(self, grid):
        # Apexes move a quarter corner toward the channel, so the side
        # fans' outer corners land at 0.625 of the solid corner.
        center = grid.get_cell(coords(2, 2)).position
        outside_next = add(center, scale(first_solid_corner(HexDirection.NE), 0.625))
        outside_previous = add(center, scale(second_solid_corner(HexDirection.SE), 0.625))
        flat = build(grid)
        assert not has_point(flat.terrain, outside_next)
        assert not has_point(flat.terrain, outside_previous)

        grid.set_outgoing_river(coords(1, 2), HexDirection.E)
        grid.set_outgoing_river(coords(2, 2), HexDirection.E)
        mesh = build(grid)
        assert has_point(mesh.terrain, outside_next)
        assert has_point(mesh.terrain, outside_previous)

    def test_lowering_source_removes_geometry(self, grid):
        grid.set_cell_elevation(coords(1, 2), 1)
        grid.set_cell_elevation(coords(2, 2), 1)
        grid.set_outgoing_river(coords(1, 2), HexDirection.E)
        assert not build(grid).rivers.is_empty()

        grid.set_cell_elevation(coords(1, 2), 0)
        mesh = grid.refresh()[0]
        assert mesh.rivers.is_empty()
        assert mesh.stats[EdgeCase.NO_RIVER] == CELLS * 6


# ═══════════════════════════════════════════════════════════════════
# Water
# ═══════════════════════════════════════════════════════════════════


class TestWater:
    def test_single_flooded_cell_is_all_shore(self, grid):
        grid.set_cell_water_level(coords(2, 2), 1)
        mesh = build(grid)
        assert mesh.stats[WaterCase.SHORE] == 6
        assert mesh.stats[WaterCase.OPEN] == 0
        assert mesh.water.triangle_count == 6 * 4
        assert mesh.water_shore.triangle_count == 6 * (4 * 2 + 1)
        assert np.allclose(mesh.water.positions[:, 1], 1.5)
        assert np.allclose(mesh.water_shore.positions[:, 1], 1.5)

    def test_shoreline_only_toward_dry_neighbors(self, grid):
        grid.set_cell_water_level(coords(2, 2), 1)
        grid.set_cell_water_level(coords(3, 2), 1)
        mesh = build(grid)
        assert mesh.stats[WaterCase.OPEN] == 2
        assert mesh.stats[WaterCase.SHORE] == 10
        # Shore fans, two open triangles and one bridging quad.
        assert mesh.water.triangle_count == 10 * 4 + 2 + 2
        assert mesh.water_shore.triangle_count == 10 * (4 * 2 + 1)

    def test_three_cell_lake_fills_corner(self, grid):
        # (2, 3) is the north-east and (3, 2) the east neighbour of (2, 2).
        for col, row in ((2, 2), (3, 2), (2, 3)):
            grid.set_cell_water_level(coords(col, row), 1)
        mesh = build(grid)
        assert mesh.stats[WaterCase.OPEN] == 6
        assert mesh.stats[WaterCase.SHORE] == 12
        # Shore fans, six open triangles, three bridging quads, one corner.
        assert mesh.water.triangle_count == 12 * 4 + 6 + 3 * 2 + 1
        assert np.allclose(mesh.water.positions[:, 1], 1.5)

    def test_shore_uvs(self, grid):
        grid.set_cell_water_level(coords(2, 2), 1)
        mesh = build(grid)
        uvs = mesh.water_shore.uvs
        assert np.all(uvs[:, 0] == 0.0)
        assert set(uvs[:, 1].tolist()) == {0.0, 1.0}

    def test_dry_land_has_no_water(self, grid):
        grid.set_cell_water_level(coords(2, 2), 1)
        grid.set_cell_elevation(coords(2, 2), 1)
        mesh = build(grid)
        assert mesh.water.is_empty()
        assert mesh.water_shore.is_empty()
