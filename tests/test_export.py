"""Tests for export.py — JSON mesh payload."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from hexmap.config import SMALL_MAP, GridConfig
from hexmap.editing import paint_demo_map
from hexmap.export import export_mesh_json, export_mesh_payload, validate_mesh_payload
from hexmap.grid import HexGrid

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "mesh.schema.json"


@pytest.fixture
def tmp_dir():
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def demo_grid():
    grid = HexGrid(SMALL_MAP)
    paint_demo_map(grid)
    return grid


class TestExportPayload:
    def test_top_level_keys(self, demo_grid):
        payload = export_mesh_payload(demo_grid)
        assert set(payload) == {"metadata", "cells", "chunks"}
        assert payload["metadata"]["generator"] == "hexmap.export"

    def test_builds_missing_meshes(self, demo_grid):
        assert demo_grid.meshes == []
        payload = export_mesh_payload(demo_grid)
        assert payload["metadata"]["chunk_count"] == 1
        assert len(demo_grid.meshes) == 1

    def test_counts(self, demo_grid):
        payload = export_mesh_payload(demo_grid)
        meta = payload["metadata"]
        assert meta["cell_count"] == len(payload["cells"]) == 25
        total = sum(
            channel["triangle_count"]
            for chunk in payload["chunks"]
            for channel in chunk["channels"].values()
        )
        assert meta["triangle_count"] == total

    def test_channel_attributes(self, demo_grid):
        channels = export_mesh_payload(demo_grid)["chunks"][0]["channels"]
        assert {"terrain", "rivers", "water", "water_shore"} <= set(channels)
        terrain = channels["terrain"]
        assert len(terrain["colors"]) == terrain["vertex_count"] * 3
        assert len(terrain["terrain_types"]) == terrain["vertex_count"] * 3
        assert "uvs" not in terrain
        assert len(channels["rivers"]["uvs"]) == channels["rivers"]["vertex_count"] * 2
        assert "colors" not in channels["water"]

    def test_empty_channels_skipped(self):
        grid = HexGrid(GridConfig(chunk_count_x=1, chunk_count_z=1))
        channels = export_mesh_payload(grid)["chunks"][0]["channels"]
        assert set(channels) == {"terrain"}

    def test_rivers_in_cells(self, demo_grid):
        cells = export_mesh_payload(demo_grid)["cells"]
        assert any(cell["outgoing_river"] == "E" for cell in cells)

    def test_rebuild_refreshes_dirty(self, demo_grid):
        export_mesh_payload(demo_grid)
        demo_grid.set_cell_water_level(demo_grid.cells[0].coordinates, 3)
        stale = export_mesh_payload(demo_grid)
        fresh = export_mesh_payload(demo_grid, rebuild=True)
        assert fresh["metadata"]["triangle_count"] > stale["metadata"]["triangle_count"]

    def test_json_serialisable(self, demo_grid):
        json.dumps(export_mesh_payload(demo_grid))


class TestExportJson:
    def test_writes_file(self, demo_grid, tmp_dir):
        out = export_mesh_json(demo_grid, tmp_dir / "nested" / "mesh.json")
        assert out.exists()
        payload = json.loads(out.read_text())
        assert payload["metadata"]["cell_count"] == 25


class TestValidation:
    def test_valid_payload(self, demo_grid):
        assert validate_mesh_payload(export_mesh_payload(demo_grid)) == []

    def test_missing_keys(self):
        errors = validate_mesh_payload({})
        assert any("metadata" in e for e in errors)

    def test_corrupted_channel(self, demo_grid):
        payload = export_mesh_payload(demo_grid)
        terrain = payload["chunks"][0]["channels"]["terrain"]
        terrain["positions"].pop()
        terrain["indices"].append(10 ** 6)
        errors = validate_mesh_payload(payload)
        assert any("positions" in e for e in errors)
        assert any("indices" in e for e in errors)

    def test_payload_validates_against_schema(self, demo_grid):
        import jsonschema

        schema = json.loads(SCHEMA_PATH.read_text())
        jsonschema.validate(instance=export_mesh_payload(demo_grid), schema=schema)

    def test_json_file_validates_against_schema(self, demo_grid, tmp_dir):
        import jsonschema

        schema = json.loads(SCHEMA_PATH.read_text())
        out = export_mesh_json(demo_grid, tmp_dir / "mesh.json")
        jsonschema.validate(instance=json.loads(out.read_text()), schema=schema)
