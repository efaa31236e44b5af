"""hexmap — hex-grid terrain cells and their triangulation into meshes.

Public API is organised into layers:

- **Core** — coordinates, metrics, cells, configuration, noise
- **Grid** — the cell arena, chunks, editing, I/O
- **Triangulation** — variant classification and mesh buffers
- **Output** — JSON export and preview rendering (requires matplotlib)
"""

# ── Core ────────────────────────────────────────────────────────────
from .models import EdgeType, HexCoordinates, HexDirection
from .geometry import EdgeVertices
from .config import DEFAULT_MAP, FLAT_TEST_MAP, SMALL_MAP, TERRAIN_TYPES, GridConfig
from .noise import NoiseSource, fbm
from .cell import HexCell

# ── Grid ────────────────────────────────────────────────────────────
from .grid import CellNotFoundError, HexGrid
from .chunk import ChunkMesh, HexGridChunk
from .editing import (
    CellEdit,
    Drag,
    DragTracker,
    RiverMode,
    apply_edit,
    brush_coordinates,
    paint_demo_map,
)
from .io import grid_from_dict, grid_to_dict, load_json, save_json

# ── Triangulation ───────────────────────────────────────────────────
from .mesh import HexMesh, MeshChannel, MeshData, MeshError, compute_normals
from .triangulation import (
    ChunkTriangulator,
    ConnectionKind,
    Corner,
    CornerKind,
    EdgeCase,
    RiverChannel,
    RiverSide,
    TriangulationResult,
    WaterCase,
    classify_connection,
    classify_corner,
    classify_edge,
    classify_river_channel,
    classify_river_side,
    classify_water,
    order_corner,
    terrace_edge_levels,
)

# ── Output ──────────────────────────────────────────────────────────
from .export import export_mesh_json, export_mesh_payload, validate_mesh_payload
from .visualize import render_mesh_png

__all__ = [
    # Core
    "EdgeType",
    "HexCoordinates",
    "HexDirection",
    "EdgeVertices",
    "GridConfig",
    "DEFAULT_MAP",
    "SMALL_MAP",
    "FLAT_TEST_MAP",
    "TERRAIN_TYPES",
    "NoiseSource",
    "fbm",
    "HexCell",
    # Grid
    "HexGrid",
    "CellNotFoundError",
    "HexGridChunk",
    "ChunkMesh",
    "CellEdit",
    "Drag",
    "DragTracker",
    "RiverMode",
    "apply_edit",
    "brush_coordinates",
    "paint_demo_map",
    "grid_to_dict",
    "grid_from_dict",
    "load_json",
    "save_json",
    # Triangulation
    "HexMesh",
    "MeshChannel",
    "MeshData",
    "MeshError",
    "compute_normals",
    "ChunkTriangulator",
    "TriangulationResult",
    "Corner",
    "EdgeCase",
    "RiverChannel",
    "RiverSide",
    "ConnectionKind",
    "CornerKind",
    "WaterCase",
    "classify_edge",
    "classify_river_channel",
    "classify_river_side",
    "classify_connection",
    "classify_corner",
    "classify_water",
    "order_corner",
    "terrace_edge_levels",
    # Output
    "export_mesh_payload",
    "export_mesh_json",
    "validate_mesh_payload",
    "render_mesh_png",
]
