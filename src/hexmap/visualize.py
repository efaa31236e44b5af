"""Top-down preview of triangulated chunks.

Draws the terrain, river and water channels of a :class:`~grid.HexGrid`
as flat triangles seen from above, coloured by the blended terrain
types and shaded by the mesh normals.  Meant for quick inspection and
for the ``hexmap render`` command, not as a renderer.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .grid import HexGrid
from .mesh import MeshChannel, MeshData


# ═══════════════════════════════════════════════════════════════════
# Colour palettes
# ═══════════════════════════════════════════════════════════════════

# One colour per terrain type index: sand, grass, earth, stone, snow.
_TERRAIN_PALETTE = np.array([
    (0.86, 0.80, 0.56),
    (0.42, 0.62, 0.28),
    (0.55, 0.42, 0.28),
    (0.50, 0.50, 0.52),
    (0.94, 0.95, 0.97),
])

_CHANNEL_COLORS: Dict[MeshChannel, Tuple[float, float, float, float]] = {
    MeshChannel.RIVERS: (0.18, 0.42, 0.78, 0.9),
    MeshChannel.WATER: (0.16, 0.36, 0.70, 0.6),
    MeshChannel.WATER_SHORE: (0.55, 0.75, 0.92, 0.6),
}

_LIGHT = np.array([-0.5, 1.0, 0.5]) / np.linalg.norm([-0.5, 1.0, 0.5])


def _ensure_mpl():
    """Lazy-import matplotlib; raise helpful error if missing."""
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from matplotlib.collections import PolyCollection
        return plt, PolyCollection
    except ImportError as exc:
        raise RuntimeError(
            "matplotlib is required for visualisation. "
            "Install with `pip install matplotlib`."
        ) from exc


# ═══════════════════════════════════════════════════════════════════
# Per-triangle colours
# ═══════════════════════════════════════════════════════════════════

def terrain_triangle_colors(data: MeshData, *, shade_strength: float = 0.5) -> np.ndarray:
    """RGB colour per triangle of a terrain channel.

    Each vertex mixes the palette colours of its three terrain types
    by its splat weights; a triangle takes the mean of its vertices,
    darkened by how far its normal faces away from the light.
    """
    palette = _TERRAIN_PALETTE
    types = np.clip(data.terrain_types.astype(int), 0, len(palette) - 1)
    weights = data.colors.astype(np.float64)
    vertex_rgb = np.einsum("nk,nkc->nc", weights, palette[types])

    tris = data.indices.reshape(-1, 3).astype(np.int64)
    rgb = vertex_rgb[tris].mean(axis=1)

    if shade_strength > 0:
        normals = data.normals[tris].mean(axis=1)
        lengths = np.linalg.norm(normals, axis=1)
        lambert = np.clip(normals @ _LIGHT / np.where(lengths > 0, lengths, 1.0), 0.0, 1.0)
        rgb = rgb * (1.0 - shade_strength + shade_strength * lambert)[:, None]

    return np.clip(rgb, 0.0, 1.0)


def _triangles_xz(data: MeshData) -> np.ndarray:
    tris = data.indices.reshape(-1, 3).astype(np.int64)
    return data.positions[tris][:, :, (0, 2)]


def _depth_order(data: MeshData) -> np.ndarray:
    """Triangle order from lowest to highest so tops are drawn last."""
    tris = data.indices.reshape(-1, 3).astype(np.int64)
    return np.argsort(data.positions[tris][:, :, 1].mean(axis=1), kind="stable")


# ═══════════════════════════════════════════════════════════════════
# Render
# ═══════════════════════════════════════════════════════════════════

def render_mesh_png(
    grid: HexGrid,
    output_path: Union[str, Path],
    *,
    channels: Sequence[MeshChannel] = (
        MeshChannel.TERRAIN,
        MeshChannel.RIVERS,
        MeshChannel.WATER,
        MeshChannel.WATER_SHORE,
    ),
    shade_strength: float = 0.5,
    figsize: Tuple[int, int] = (10, 10),
    dpi: int = 150,
    title: Optional[str] = None,
) -> Path:
    """Render the grid's latest meshes to a top-down PNG.

    Chunks that were never triangulated are built first.

    Parameters
    ----------
    grid : HexGrid
    output_path : str or Path
        Path for the output PNG.
    channels : sequence of MeshChannel
        Channels to draw, bottom to top.
    shade_strength : float
        Normal-based shading applied to terrain (0 disables it).
    figsize : tuple
        Figure size in inches.
    dpi : int
        Output resolution.
    title : str, optional
        Plot title.

    Returns
    -------
    Path
        The output path.
    """
    plt, PolyCollection = _ensure_mpl()

    if any(chunk.mesh is None for chunk in grid.chunks):
        grid.refresh()

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.set_aspect("equal")
    ax.axis("off")

    for channel in channels:
        polys: List[np.ndarray] = []
        colors: List[np.ndarray] = []
        for mesh in grid.meshes:
            data = mesh.channels[channel]
            if data.is_empty():
                continue
            order = _depth_order(data)
            polys.append(_triangles_xz(data)[order])
            if channel is MeshChannel.TERRAIN:
                rgb = terrain_triangle_colors(data, shade_strength=shade_strength)[order]
                colors.append(np.column_stack([rgb, np.ones(len(rgb))]))
            else:
                colors.append(np.tile(_CHANNEL_COLORS[channel], (len(order), 1)))
        if not polys:
            continue

        facecolors = np.concatenate(colors)
        collection = PolyCollection(
            np.concatenate(polys),
            facecolors=facecolors,
            edgecolors=facecolors,  # match face to hide seams
            linewidths=0.2,
        )
        ax.add_collection(collection)

    ax.autoscale_view()
    if title:
        ax.set_title(title, fontsize=14)

    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out, dpi=dpi, bbox_inches="tight", pad_inches=0.05)
    plt.close(fig)
    return out
