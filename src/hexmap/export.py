"""Mesh export — JSON payload of every chunk's triangulated channels.

Exports the latest meshes of a :class:`~grid.HexGrid` for consumption
by web viewers or any downstream tool that does not link against this
package.  For direct GPU upload use :meth:`MeshData.to_buffers` instead.

Functions
---------
- :func:`export_mesh_payload` — build the full export dict
- :func:`export_mesh_json` — write payload to a JSON file
- :func:`validate_mesh_payload` — structural check of a payload
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

from .grid import HexGrid
from .mesh import MeshChannel, MeshData

_EXPORT_VERSION = "1.0"
_DECIMALS = 6


def export_mesh_payload(grid: HexGrid, *, rebuild: bool = False) -> Dict[str, Any]:
    """Build a JSON-serialisable export of a grid's meshes.

    The returned dict has three top-level keys:

    ``metadata``
        Grid dimensions, seed, chunk and triangle counts.
    ``cells``
        Per-cell coordinates, elevation, water level, terrain type
        and rivers.
    ``chunks``
        Per-chunk dicts holding one entry per non-empty channel with
        flat ``positions``, ``normals``, ``indices`` and whichever of
        ``colors``, ``uvs`` and ``terrain_types`` the channel uses.

    Parameters
    ----------
    grid : HexGrid
    rebuild : bool
        Triangulate dirty chunks first.  Chunks never triangulated are
        always built.

    Returns
    -------
    dict
        JSON-serialisable payload.
    """
    if rebuild or any(chunk.mesh is None for chunk in grid.chunks):
        grid.refresh()

    config = grid.config
    meshes = grid.meshes

    # ── Metadata ────────────────────────────────────────────────────
    metadata = {
        "version": _EXPORT_VERSION,
        "generator": "hexmap.export",
        "seed": config.seed,
        "cell_count_x": config.cell_count_x,
        "cell_count_z": config.cell_count_z,
        "chunk_count": len(meshes),
        "cell_count": len(grid),
        "triangle_count": sum(mesh.triangle_count for mesh in meshes),
    }

    # ── Cells ───────────────────────────────────────────────────────
    cells: List[Dict[str, Any]] = []
    for cell in grid:
        cells.append({
            "x": cell.coordinates.x,
            "z": cell.coordinates.z,
            "elevation": cell.elevation,
            "water_level": cell.water_level,
            "terrain_type": cell.terrain_type_index,
            "incoming_river": cell.incoming_river.name if cell.has_incoming_river else None,
            "outgoing_river": cell.outgoing_river.name if cell.has_outgoing_river else None,
        })

    # ── Chunks ──────────────────────────────────────────────────────
    chunks: List[Dict[str, Any]] = []
    for mesh in meshes:
        channels = {
            channel.value: _channel_payload(data)
            for channel, data in mesh.channels.items()
            if not data.is_empty()
        }
        chunks.append({"index": mesh.chunk_index, "channels": channels})

    return {"metadata": metadata, "cells": cells, "chunks": chunks}


def _channel_payload(data: MeshData) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "vertex_count": data.vertex_count,
        "triangle_count": data.triangle_count,
        "positions": _flat(data.positions),
        "normals": _flat(data.normals),
        "indices": data.indices.astype(int).tolist(),
    }
    for name in ("colors", "uvs", "terrain_types"):
        array: Optional[np.ndarray] = getattr(data, name)
        if array is not None:
            entry[name] = _flat(array)
    return entry


def _flat(array: np.ndarray) -> List[float]:
    return np.round(array.astype(np.float64).ravel(), _DECIMALS).tolist()


def export_mesh_json(
    grid: HexGrid,
    path: Union[str, Path],
    *,
    rebuild: bool = False,
    indent: Optional[int] = None,
) -> Path:
    """Export grid meshes to a JSON file.

    Parameters
    ----------
    grid : HexGrid
    path : str or Path
        Output file path.
    rebuild : bool
        Forwarded to :func:`export_mesh_payload`.
    indent : int, optional
        JSON indentation (compact by default; the arrays are large).

    Returns
    -------
    Path
        The output path.
    """
    payload = export_mesh_payload(grid, rebuild=rebuild)
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload, indent=indent))
    return out


def validate_mesh_payload(payload: Dict[str, Any]) -> List[str]:
    """Validate a mesh export payload against expected structure.

    Returns a list of error messages (empty = valid).

    This is a lightweight structural validator, not a full JSON Schema
    check.  Use the ``schemas/mesh.schema.json`` file for formal
    validation with ``jsonschema``.
    """
    errors: List[str] = []

    for key in ("metadata", "cells", "chunks"):
        if key not in payload:
            errors.append(f"Missing top-level key: {key}")

    meta = payload.get("metadata", {})
    for key in ("version", "cell_count", "chunk_count", "triangle_count"):
        if key not in meta:
            errors.append(f"Missing metadata key: {key}")

    cells = payload.get("cells", [])
    if len(cells) != meta.get("cell_count", 0):
        errors.append(f"cell_count mismatch: metadata says {meta.get('cell_count')}, got {len(cells)}")

    chunks = payload.get("chunks", [])
    if len(chunks) != meta.get("chunk_count", 0):
        errors.append(f"chunk_count mismatch: metadata says {meta.get('chunk_count')}, got {len(chunks)}")

    valid_channels = {channel.value for channel in MeshChannel}
    for chunk in chunks:
        for name, channel in chunk.get("channels", {}).items():
            where = f"Chunk {chunk.get('index')} {name}"
            if name not in valid_channels:
                errors.append(f"{where}: unknown channel")
                continue
            count = channel.get("vertex_count", 0)
            if len(channel.get("positions", [])) != count * 3:
                errors.append(f"{where}: positions length does not match vertex_count")
            if len(channel.get("normals", [])) != count * 3:
                errors.append(f"{where}: normals length does not match vertex_count")
            indices = channel.get("indices", [])
            if len(indices) != channel.get("triangle_count", 0) * 3:
                errors.append(f"{where}: indices length does not match triangle_count")
            if indices and max(indices) >= count:
                errors.append(f"{where}: index out of range")

    return errors
