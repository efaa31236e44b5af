"""Save and load the editable state of a grid as JSON.

Only cell state is stored (elevation, water level, terrain type and
rivers) together with the :class:`~config.GridConfig` it was built
with.  Meshes are never stored; they are rebuilt after loading.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Union

from .config import GridConfig
from .grid import HexGrid
from .models import HexDirection


PathLike = Union[str, Path]

_FORMAT_VERSION = 1


def grid_to_dict(grid: HexGrid) -> Dict[str, Any]:
    cells = []
    for cell in grid:
        cells.append({
            "elevation": cell.elevation,
            "water_level": cell.water_level,
            "terrain_type": cell.terrain_type_index,
            "outgoing_river": cell.outgoing_river.name if cell.has_outgoing_river else None,
        })
    return {"version": _FORMAT_VERSION, "config": asdict(grid.config), "cells": cells}


def grid_from_dict(data: Dict[str, Any]) -> HexGrid:
    """Rebuild a grid from :func:`grid_to_dict` output.

    Elevations are applied to every cell before any river is set, so
    rivers are checked against the final terrain.
    """
    if data.get("version") != _FORMAT_VERSION:
        raise ValueError(f"Unsupported map format version: {data.get('version')!r}")

    grid = HexGrid(GridConfig(**data["config"]))
    entries = data["cells"]
    if len(entries) != len(grid):
        raise ValueError(f"Map has {len(entries)} cells, grid expects {len(grid)}")

    for cell, entry in zip(grid.cells, entries):
        cell.set_elevation(entry["elevation"])
        cell.set_water_level(entry["water_level"])
        cell.set_terrain_type(entry["terrain_type"])

    for cell, entry in zip(grid.cells, entries):
        if entry["outgoing_river"] is not None:
            cell.set_outgoing_river(HexDirection[entry["outgoing_river"]])

    return grid


def load_json(path: PathLike) -> HexGrid:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return grid_from_dict(data)


def save_json(grid: HexGrid, path: PathLike) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(grid_to_dict(grid), indent=2), encoding="utf-8")
