"""Mesh buffers — per-channel geometry accumulators.

A :class:`HexMesh` collects positions and per-vertex attributes while
the triangulator walks a chunk.  :meth:`HexMesh.finalize` validates the
buffer, recomputes normals from triangle winding and packs everything
into an immutable :class:`MeshData` of numpy arrays, ready for a
renderer to upload as-is.

Architecture
------------
- :class:`MeshChannel` — the four channels a chunk renders
  (terrain, rivers, water, water shore) and which attributes each uses.
- :class:`HexMesh` — the mutable accumulator (one pass only).
- :class:`MeshData` — the finalized, read-only arrays.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .geometry import Color, Vec2, Vec3

PerturbFn = Callable[[Vec3], Vec3]

# Chunk-local vertex counts fit 16-bit indices; larger buffers widen.
_MAX_U16_VERTICES = 1 << 16


class MeshError(ValueError):
    """A mesh buffer violates its attribute/index invariants."""


class MeshChannel(Enum):
    TERRAIN = "terrain"
    RIVERS = "rivers"
    WATER = "water"
    WATER_SHORE = "water_shore"

    @property
    def uses_colors(self) -> bool:
        return self is MeshChannel.TERRAIN

    @property
    def uses_terrain_types(self) -> bool:
        return self is MeshChannel.TERRAIN

    @property
    def uses_uvs(self) -> bool:
        return self in (MeshChannel.RIVERS, MeshChannel.WATER_SHORE)


# ═══════════════════════════════════════════════════════════════════
# Finalized data
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MeshData:
    """Packed geometry for one channel of one chunk.

    Attributes
    ----------
    channel : MeshChannel
    positions : ndarray, shape (N, 3), float32
    normals : ndarray, shape (N, 3), float32
    colors : ndarray (N, 3) or None
    uvs : ndarray (N, 2) or None
    terrain_types : ndarray (N, 3) or None
        Terrain type index of up to three blended cells, as floats.
    indices : ndarray, shape (3T,), uint16 (uint32 past 65536 vertices)
    """

    channel: MeshChannel
    positions: np.ndarray
    normals: np.ndarray
    colors: Optional[np.ndarray]
    uvs: Optional[np.ndarray]
    terrain_types: Optional[np.ndarray]
    indices: np.ndarray

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.indices.shape[0]) // 3

    def is_empty(self) -> bool:
        return self.vertex_count == 0

    def to_buffers(self) -> Dict[str, bytes]:
        """Return flat little-endian byte buffers keyed by attribute name."""
        buffers = {
            "positions": self.positions.astype("<f4").tobytes(),
            "normals": self.normals.astype("<f4").tobytes(),
            "indices": self.indices.astype(f"<u{self.indices.dtype.itemsize}").tobytes(),
        }
        for name in ("colors", "uvs", "terrain_types"):
            array = getattr(self, name)
            if array is not None:
                buffers[name] = array.astype("<f4").tobytes()
        return buffers


# ═══════════════════════════════════════════════════════════════════
# Accumulator
# ═══════════════════════════════════════════════════════════════════

class HexMesh:
    """Accumulates triangles for one :class:`MeshChannel`.

    *perturb*, when given, is applied to every vertex passed to
    :meth:`add_triangle` and :meth:`add_quad`.
    """

    def __init__(self, channel: MeshChannel, *, perturb: Optional[PerturbFn] = None) -> None:
        self.channel = channel
        self.use_colors = channel.uses_colors
        self.use_uvs = channel.uses_uvs
        self.use_terrain_types = channel.uses_terrain_types
        self._perturb = perturb

        self.vertices: List[Vec3] = []
        self.triangles: List[int] = []
        self.colors: List[Color] = []
        self.uvs: List[Vec2] = []
        self.terrain_types: List[Vec3] = []

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles) // 3

    # ── Triangles ───────────────────────────────────────────────────

    def add_triangle(self, v1: Vec3, v2: Vec3, v3: Vec3) -> None:
        if self._perturb is not None:
            v1, v2, v3 = self._perturb(v1), self._perturb(v2), self._perturb(v3)
        self.add_triangle_unperturbed(v1, v2, v3)

    def add_triangle_unperturbed(self, v1: Vec3, v2: Vec3, v3: Vec3) -> None:
        last = len(self.vertices)
        self.vertices.extend((v1, v2, v3))
        self.triangles.extend((last, last + 1, last + 2))

    def add_triangle_color(self, c1: Color, c2: Optional[Color] = None, c3: Optional[Color] = None) -> None:
        """One colour for all three vertices, or one per vertex."""
        if c2 is None or c3 is None:
            self.colors.extend((c1, c1, c1))
        else:
            self.colors.extend((c1, c2, c3))

    def add_triangle_uv(self, uv1: Vec2, uv2: Vec2, uv3: Vec2) -> None:
        self.uvs.extend((uv1, uv2, uv3))

    def add_triangle_terrain_types(self, types: Vec3) -> None:
        self.terrain_types.extend((types, types, types))

    # ── Quads ───────────────────────────────────────────────────────

    def add_quad(self, v1: Vec3, v2: Vec3, v3: Vec3, v4: Vec3) -> None:
        """Add a quad as two triangles (v1, v3, v2) and (v2, v3, v4)."""
        if self._perturb is not None:
            v1, v2, v3, v4 = (self._perturb(v) for v in (v1, v2, v3, v4))
        last = len(self.vertices)
        self.vertices.extend((v1, v2, v3, v4))
        self.triangles.extend((last, last + 2, last + 1, last + 1, last + 2, last + 3))

    def add_quad_color(
        self,
        c1: Color,
        c2: Optional[Color] = None,
        c3: Optional[Color] = None,
        c4: Optional[Color] = None,
    ) -> None:
        """Colour a quad.

        ``(c)`` colours all four vertices, ``(c1, c2)`` colours the first
        edge *c1* and the second edge *c2*, ``(c1, c2, c3, c4)`` colours
        each vertex.
        """
        if c3 is None or c4 is None:
            c2 = c1 if c2 is None else c2
            self.colors.extend((c1, c1, c2, c2))
        else:
            self.colors.extend((c1, c2, c3, c4))

    def add_quad_uv(self, u_min: float, u_max: float, v_min: float, v_max: float) -> None:
        self.uvs.extend(((u_min, v_min), (u_max, v_min), (u_min, v_max), (u_max, v_max)))

    def add_quad_terrain_types(self, types: Vec3) -> None:
        self.terrain_types.extend((types, types, types, types))

    # ── Finalize ────────────────────────────────────────────────────

    def validate(self) -> List[str]:
        """Return a list of invariant violations (empty = valid)."""
        errors: List[str] = []
        n = len(self.vertices)
        for enabled, name, values in (
            (self.use_colors, "colors", self.colors),
            (self.use_uvs, "uvs", self.uvs),
            (self.use_terrain_types, "terrain_types", self.terrain_types),
        ):
            if enabled and len(values) != n:
                errors.append(f"{self.channel.value}: {len(values)} {name} for {n} vertices")
            if not enabled and values:
                errors.append(f"{self.channel.value}: {name} written but not enabled")
        if len(self.triangles) % 3:
            errors.append(f"{self.channel.value}: index count {len(self.triangles)} is not a multiple of 3")
        if self.triangles and max(self.triangles) >= n:
            errors.append(f"{self.channel.value}: index {max(self.triangles)} out of range for {n} vertices")
        return errors

    def finalize(self) -> MeshData:
        """Validate, compute normals and pack into :class:`MeshData`.

        Raises :class:`MeshError` if the buffer is inconsistent.
        """
        errors = self.validate()
        if errors:
            raise MeshError("; ".join(errors))

        positions = np.asarray(self.vertices, dtype=np.float32).reshape(-1, 3)
        index_dtype = np.uint16 if len(self.vertices) <= _MAX_U16_VERTICES else np.uint32
        indices = np.asarray(self.triangles, dtype=index_dtype)

        return MeshData(
            channel=self.channel,
            positions=positions,
            normals=compute_normals(positions, indices),
            colors=_pack(self.colors, 3) if self.use_colors else None,
            uvs=_pack(self.uvs, 2) if self.use_uvs else None,
            terrain_types=_pack(self.terrain_types, 3) if self.use_terrain_types else None,
            indices=indices,
        )


def compute_normals(positions: np.ndarray, indices: np.ndarray) -> np.ndarray:
    """Per-vertex normals accumulated from triangle winding.

    For a triangle ``(a, b, c)`` the face normal is
    ``(c − b) × (a − b)``; each vertex sums the normals of the
    triangles that use it, then is normalised.  Unused vertices keep a
    zero normal.
    """
    normals = np.zeros_like(positions, dtype=np.float64)
    if len(indices) == 0:
        return normals.astype(np.float32)

    tris = indices.reshape(-1, 3).astype(np.int64)
    a = positions[tris[:, 0]].astype(np.float64)
    b = positions[tris[:, 1]].astype(np.float64)
    c = positions[tris[:, 2]].astype(np.float64)
    face = np.cross(c - b, a - b)

    for k in range(3):
        np.add.at(normals, tris[:, k], face)

    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    np.divide(normals, lengths, out=normals, where=lengths > 0)
    return normals.astype(np.float32)


def _pack(values: Sequence[Tuple[float, ...]], width: int) -> np.ndarray:
    return np.asarray(values, dtype=np.float32).reshape(-1, width)
