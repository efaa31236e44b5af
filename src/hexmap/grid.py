"""HexGrid — the cell arena, its chunks and the rebuild loop.

The grid owns every :class:`~cell.HexCell` in a flat list (the arena)
in row-major offset order, links neighbours by index and partitions the
cells into :class:`~chunk.HexGridChunk` groups.  Editing goes through
coordinate-addressed mutators that mark the affected chunks dirty;
triangulation only happens in :meth:`HexGrid.rebuild` or
:meth:`HexGrid.refresh`.

Typical usage::

    grid = HexGrid(SMALL_MAP)
    grid.set_cell_elevation(HexCoordinates.from_offset(2, 2), 1)
    grid.rebuild()
    for mesh in grid.meshes:
        upload(mesh.terrain)
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, List, Optional, Sequence, Set

import structlog

from .cell import HexCell
from .chunk import ChunkMesh, HexGridChunk
from .config import DEFAULT_MAP, GridConfig
from .metrics import INNER_RADIUS, OUTER_RADIUS
from .models import HexCoordinates, HexDirection
from .noise import NoiseSource

logger = structlog.get_logger(__name__)


class CellNotFoundError(KeyError):
    """Raised when coordinates fall outside the grid."""


class HexGrid:
    """A rectangular hex map split into chunks.

    Parameters
    ----------
    config : GridConfig
        Grid dimensions, noise seed and perturbation settings.
    noise : NoiseSource, optional
        Shared perturbation source.  Built from *config* when omitted.
    """

    def __init__(self, config: GridConfig = DEFAULT_MAP, *, noise: Optional[NoiseSource] = None) -> None:
        self.config = config
        self.noise = noise if noise is not None else NoiseSource(
            config.seed,
            scale=config.noise_scale,
            octaves=config.noise_octaves,
            cell_perturb_strength=config.cell_perturb_strength,
        )
        self.cells: List[HexCell] = []
        self.chunks: List[HexGridChunk] = [
            HexGridChunk(i, self.cells)
            for i in range(config.chunk_count_x * config.chunk_count_z)
        ]
        self._create_cells()

    # ── Construction ────────────────────────────────────────────────

    def _create_cells(self) -> None:
        count_x = self.config.cell_count_x
        for z in range(self.config.cell_count_z):
            for x in range(count_x):
                self._create_cell(x, z, len(self.cells))

    def _create_cell(self, x: int, z: int, index: int) -> None:
        count_x = self.config.cell_count_x
        position = (
            (x + z * 0.5 - z // 2) * (INNER_RADIUS * 2.0),
            0.0,
            z * (OUTER_RADIUS * 1.5),
        )
        cell = HexCell(
            index,
            HexCoordinates.from_offset(x, z),
            position,
            self.cells,
            self.noise,
            self.config,
        )
        self.cells.append(cell)

        if x > 0:
            cell.set_neighbor(HexDirection.W, self.cells[index - 1])
        if z > 0:
            if z % 2 == 0:
                cell.set_neighbor(HexDirection.SE, self.cells[index - count_x])
                if x > 0:
                    cell.set_neighbor(HexDirection.SW, self.cells[index - count_x - 1])
            else:
                cell.set_neighbor(HexDirection.SW, self.cells[index - count_x])
                if x < count_x - 1:
                    cell.set_neighbor(HexDirection.SE, self.cells[index - count_x + 1])

        self.chunks[self._chunk_index_for(x, z)].add_cell(cell)

    def _chunk_index_for(self, x: int, z: int) -> int:
        return x // self.config.chunk_size_x + (z // self.config.chunk_size_z) * self.config.chunk_count_x

    # ── Lookup ──────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[HexCell]:
        return iter(self.cells)

    def resolve_coordinates(self, position: Sequence[float]) -> HexCoordinates:
        """World position → coordinates of the nearest hex centre."""
        return HexCoordinates.from_position(position)

    def index_of(self, coordinates: HexCoordinates) -> Optional[int]:
        """Arena index for *coordinates*, or ``None`` if outside the grid."""
        col, row = coordinates.to_offset()
        if not (0 <= col < self.config.cell_count_x and 0 <= row < self.config.cell_count_z):
            return None
        return coordinates.x + row * self.config.cell_count_x + row // 2

    def contains(self, coordinates: HexCoordinates) -> bool:
        return self.index_of(coordinates) is not None

    def get_cell(self, coordinates: HexCoordinates) -> HexCell:
        index = self.index_of(coordinates)
        if index is None:
            raise CellNotFoundError(f"No cell at {coordinates}")
        return self.cells[index]

    def find_cell(self, coordinates: HexCoordinates) -> Optional[HexCell]:
        index = self.index_of(coordinates)
        return None if index is None else self.cells[index]

    def cell_at(self, position: Sequence[float]) -> Optional[HexCell]:
        return self.find_cell(self.resolve_coordinates(position))

    def find_direction(self, source: HexCoordinates, target: HexCoordinates) -> Optional[HexDirection]:
        """Direction from *source* to its neighbour *target*, if adjacent."""
        cell = self.find_cell(source)
        if cell is None:
            return None
        for direction in HexDirection:
            neighbor = cell.get_neighbor(direction)
            if neighbor is not None and neighbor.coordinates == target:
                return direction
        return None

    # ── Mutation ────────────────────────────────────────────────────

    def set_cell_terrain_type(self, coordinates: HexCoordinates, index: int) -> bool:
        cell = self._cell_for_edit(coordinates, "set_cell_terrain_type")
        return cell is not None and self._mark_if(cell, cell.set_terrain_type(index))

    def set_cell_elevation(self, coordinates: HexCoordinates, elevation: int) -> bool:
        cell = self._cell_for_edit(coordinates, "set_cell_elevation")
        return cell is not None and self._mark_if(cell, cell.set_elevation(elevation))

    def set_cell_water_level(self, coordinates: HexCoordinates, water_level: int) -> bool:
        cell = self._cell_for_edit(coordinates, "set_cell_water_level")
        return cell is not None and self._mark_if(cell, cell.set_water_level(water_level))

    def remove_river(self, coordinates: HexCoordinates) -> bool:
        cell = self._cell_for_edit(coordinates, "remove_river")
        return cell is not None and self._mark_if(cell, cell.remove_river())

    def set_outgoing_river(self, coordinates: HexCoordinates, direction: HexDirection) -> bool:
        cell = self._cell_for_edit(coordinates, "set_outgoing_river")
        if cell is None or not cell.set_outgoing_river(direction):
            return False
        self.mark_dirty(cell)
        # The target may have dropped its previous source, two steps away.
        self.mark_dirty(cell.get_neighbor(cell.outgoing_river))
        return True

    def _cell_for_edit(self, coordinates: HexCoordinates, operation: str) -> Optional[HexCell]:
        cell = self.find_cell(coordinates)
        if cell is None:
            logger.warning("edit outside grid", operation=operation, coordinates=str(coordinates))
        return cell

    def _mark_if(self, cell: HexCell, changed: bool) -> bool:
        if changed:
            self.mark_dirty(cell)
        return changed

    def mark_dirty(self, cell: HexCell) -> None:
        """Flag the chunk owning *cell* and every chunk of its neighbours.

        Edits that only reach direct neighbours need nothing more.
        :meth:`set_outgoing_river` also marks around the target cell,
        whose previous river source may lie beyond this ring.
        """
        for index in self._chunks_touching(cell):
            self.chunks[index].dirty = True

    def _chunks_touching(self, cell: HexCell) -> Set[int]:
        indices = {self._chunk_of(cell)}
        for neighbor in cell.neighbors():
            if neighbor is not None:
                indices.add(self._chunk_of(neighbor))
        return indices

    def _chunk_of(self, cell: HexCell) -> int:
        x, z = cell.coordinates.to_offset()
        return self._chunk_index_for(x, z)

    # ── Triangulation ───────────────────────────────────────────────

    @property
    def dirty_chunks(self) -> List[HexGridChunk]:
        return [chunk for chunk in self.chunks if chunk.dirty]

    def rebuild(self, max_workers: Optional[int] = None) -> List[ChunkMesh]:
        """Triangulate every chunk and return the new meshes.

        With ``max_workers`` > 1 chunks are triangulated in a thread
        pool.  Cells must not be mutated while this runs.
        """
        return self._triangulate(self.chunks, max_workers)

    def refresh(self, max_workers: Optional[int] = None) -> List[ChunkMesh]:
        """Triangulate only the chunks dirtied since the last pass."""
        return self._triangulate(self.dirty_chunks, max_workers)

    def _triangulate(self, chunks: List[HexGridChunk], max_workers: Optional[int]) -> List[ChunkMesh]:
        start = time.perf_counter()
        if max_workers is not None and max_workers > 1 and len(chunks) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                meshes = list(pool.map(self._triangulate_chunk, chunks))
        else:
            meshes = [self._triangulate_chunk(chunk) for chunk in chunks]

        logger.info(
            "grid triangulated",
            chunks=len(meshes),
            vertices=sum(
                data.vertex_count for mesh in meshes for data in mesh.channels.values()
            ),
            elapsed_ms=round((time.perf_counter() - start) * 1000.0, 2),
        )
        return meshes

    def _triangulate_chunk(self, chunk: HexGridChunk) -> ChunkMesh:
        return chunk.triangulate(self.noise, self.config)

    @property
    def meshes(self) -> List[ChunkMesh]:
        """Latest mesh of every chunk triangulated at least once."""
        return [chunk.mesh for chunk in self.chunks if chunk.mesh is not None]

    def mesh_for(self, chunk_index: int) -> Optional[ChunkMesh]:
        return self.chunks[chunk_index].mesh

    def stats(self) -> Dict[str, int]:
        """Summed variant counts over the latest mesh of every chunk."""
        totals: Dict[str, int] = {}
        for mesh in self.meshes:
            for key, count in mesh.stats.items():
                name = f"{type(key).__name__}.{key.name}"
                totals[name] = totals.get(name, 0) + count
        return totals
