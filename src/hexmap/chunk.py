"""Chunks — fixed-size groups of cells triangulated together."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Sequence

from .cell import HexCell
from .config import GridConfig
from .mesh import MeshChannel, MeshData
from .noise import NoiseSource
from .triangulation import ChunkTriangulator


@dataclass(frozen=True)
class ChunkMesh:
    """The result of triangulating one chunk."""

    chunk_index: int
    channels: Dict[MeshChannel, MeshData]
    stats: Counter

    @property
    def terrain(self) -> MeshData:
        return self.channels[MeshChannel.TERRAIN]

    @property
    def rivers(self) -> MeshData:
        return self.channels[MeshChannel.RIVERS]

    @property
    def water(self) -> MeshData:
        return self.channels[MeshChannel.WATER]

    @property
    def water_shore(self) -> MeshData:
        return self.channels[MeshChannel.WATER_SHORE]

    @property
    def triangle_count(self) -> int:
        return sum(data.triangle_count for data in self.channels.values())


class HexGridChunk:
    """A chunk owns a list of cell indices and its latest mesh.

    The chunk starts dirty; :meth:`triangulate` rebuilds every channel
    from scratch and clears the flag.
    """

    def __init__(self, index: int, arena: Sequence[HexCell]) -> None:
        self.index = index
        self._arena = arena
        self.cell_indices: List[int] = []
        self.dirty = True
        self.mesh: ChunkMesh | None = None

    def add_cell(self, cell: HexCell) -> None:
        self.cell_indices.append(cell.index)
        self.dirty = True

    @property
    def cells(self) -> List[HexCell]:
        return [self._arena[i] for i in self.cell_indices]

    def triangulate(self, noise: NoiseSource, config: GridConfig) -> ChunkMesh:
        result = ChunkTriangulator(noise, config).run(self.cells)
        self.mesh = ChunkMesh(chunk_index=self.index, channels=result.meshes, stats=result.stats)
        self.dirty = False
        return self.mesh
