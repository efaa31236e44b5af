"""Grid configuration and named presets.

Usage
-----
>>> from hexmap.config import GridConfig, SMALL_MAP
>>> from hexmap.grid import HexGrid
>>> grid = HexGrid(SMALL_MAP)
>>> grid = HexGrid(GridConfig(chunk_count_x=2, chunk_count_z=2, seed=7))
"""

from __future__ import annotations

from dataclasses import dataclass

from .noise import NOISE_SCALE

# Terrain type indices understood by the terrain shader.
TERRAIN_TYPES = ("sand", "grass", "earth", "stone", "snow")


@dataclass(frozen=True)
class GridConfig:
    """Parameters for building a :class:`~grid.HexGrid`.

    Attributes
    ----------
    chunk_count_x, chunk_count_z : int
        Number of chunks along each axis.
    chunk_size_x, chunk_size_z : int
        Cells per chunk along each axis.
    seed : int
        Seed for the perturbation :class:`~noise.NoiseSource`.
    noise_scale : float
        World-to-noise scale.
    noise_octaves : int
        Octaves per noise channel.
    cell_perturb_strength : float
        Horizontal vertex jitter amplitude.
    elevation_perturb_strength : float
        Vertical cell-centre jitter amplitude.
    perturb_vertices : bool
        Jitter every emitted vertex horizontally.  Boundary triangles
        are always built from perturbed points when this is set.
    terrain_type_count : int
        Number of valid terrain type indices.
    """

    chunk_count_x: int = 4
    chunk_count_z: int = 3
    chunk_size_x: int = 5
    chunk_size_z: int = 5
    seed: int = 42
    noise_scale: float = NOISE_SCALE
    noise_octaves: int = 1
    cell_perturb_strength: float = 0.5
    elevation_perturb_strength: float = 1.5
    perturb_vertices: bool = True
    terrain_type_count: int = len(TERRAIN_TYPES)

    def __post_init__(self) -> None:
        for name in ("chunk_count_x", "chunk_count_z", "chunk_size_x", "chunk_size_z"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        if self.noise_octaves < 1:
            raise ValueError("noise_octaves must be >= 1")
        if self.terrain_type_count < 1:
            raise ValueError("terrain_type_count must be >= 1")
        if self.cell_perturb_strength < 0 or self.elevation_perturb_strength < 0:
            raise ValueError("perturb strengths must be >= 0")

    @property
    def cell_count_x(self) -> int:
        return self.chunk_count_x * self.chunk_size_x

    @property
    def cell_count_z(self) -> int:
        return self.chunk_count_z * self.chunk_size_z


# ═══════════════════════════════════════════════════════════════════
# Presets
# ═══════════════════════════════════════════════════════════════════

DEFAULT_MAP = GridConfig()

SMALL_MAP = GridConfig(chunk_count_x=1, chunk_count_z=1)

# No jitter anywhere: vertex positions are exact hex metrics.
FLAT_TEST_MAP = GridConfig(
    chunk_count_x=1,
    chunk_count_z=1,
    cell_perturb_strength=0.0,
    elevation_perturb_strength=0.0,
    perturb_vertices=False,
)
