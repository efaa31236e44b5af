"""Brush editing — apply one edit to a hexagonal patch of cells.

An editor front end typically resolves the pointer to coordinates on
every move, feeds them to a :class:`DragTracker` and then calls
:func:`apply_edit`::

    tracker = DragTracker()
    edit = CellEdit(elevation=2, river=RiverMode.ADD)
    for position in pointer_positions:
        coords = grid.resolve_coordinates(position)
        drag = tracker.update(grid, coords)
        apply_edit(grid, coords, edit, brush_size=1, drag=drag)
    tracker.release()
    grid.refresh()
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .grid import HexGrid
from .models import HexCoordinates, HexDirection


class RiverMode(Enum):
    IGNORE = "ignore"
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class CellEdit:
    """What to change on each brushed cell.

    ``None`` leaves the attribute alone.
    """

    terrain_type: Optional[int] = None
    elevation: Optional[int] = None
    water_level: Optional[int] = None
    river: RiverMode = RiverMode.IGNORE


@dataclass(frozen=True)
class Drag:
    """A pointer move from *source* into its neighbour in *direction*."""

    source: HexCoordinates
    direction: HexDirection


def brush_coordinates(center: HexCoordinates, size: int) -> List[HexCoordinates]:
    """All coordinates within *size* steps of *center*.

    Rows are walked from the centre row upward, then downward.  The
    result may include coordinates outside any particular grid.
    """
    if size < 0:
        raise ValueError("brush size must be >= 0")
    if size == 0:
        return [center]

    cx, cz = center.x, center.z
    coords: List[HexCoordinates] = []
    for i in range(size + 1):
        for x in range(cx - size, cx + size - i + 1):
            coords.append(HexCoordinates(x, cz + i))
    for i in range(1, size + 1):
        for x in range(cx - size + i, cx + size + 1):
            coords.append(HexCoordinates(x, cz - i))
    return coords


def apply_edit(
    grid: HexGrid,
    center: HexCoordinates,
    edit: CellEdit,
    brush_size: int = 0,
    drag: Optional[Drag] = None,
) -> int:
    """Apply *edit* to every in-grid cell under the brush.

    With ``RiverMode.ADD`` a river is drawn along *drag* (from the
    previous cell into the current one); without a drag nothing is
    drawn.  Returns the number of mutations that changed state.
    """
    changed = 0
    for coords in brush_coordinates(center, brush_size):
        if not grid.contains(coords):
            continue
        if edit.terrain_type is not None:
            changed += grid.set_cell_terrain_type(coords, edit.terrain_type)
        if edit.elevation is not None:
            changed += grid.set_cell_elevation(coords, edit.elevation)
        if edit.water_level is not None:
            changed += grid.set_cell_water_level(coords, edit.water_level)
        if edit.river is RiverMode.REMOVE:
            changed += grid.remove_river(coords)

    if edit.river is RiverMode.ADD and drag is not None:
        changed += grid.set_outgoing_river(drag.source, drag.direction)
    return changed


class DragTracker:
    """Turns a sequence of pointer cells into neighbour-to-neighbour drags."""

    def __init__(self) -> None:
        self.previous: Optional[HexCoordinates] = None

    def update(self, grid: HexGrid, current: HexCoordinates) -> Optional[Drag]:
        """Record *current* and return the drag that led to it, if any.

        Staying on the same cell, jumping more than one cell, or the
        first event after :meth:`release` yields ``None``.
        """
        drag = None
        if self.previous is not None and self.previous != current:
            direction = grid.find_direction(self.previous, current)
            if direction is not None:
                drag = Drag(self.previous, direction)
        self.previous = current
        return drag

    def release(self) -> None:
        self.previous = None


def paint_demo_map(grid: HexGrid) -> None:
    """Paint a showcase map: a terraced plateau with a peak, a lake and a river between them.

    Positions scale with the grid size so the map works on any preset.
    """
    count_x = grid.config.cell_count_x
    count_z = grid.config.cell_count_z
    size = max(1, min(count_x, count_z) // 6)

    for cell in grid:
        grid.set_cell_terrain_type(cell.coordinates, 1)

    plateau = HexCoordinates.from_offset(count_x // 4, count_z // 2)
    apply_edit(grid, plateau, CellEdit(terrain_type=2, elevation=1), brush_size=size + 1)
    apply_edit(grid, plateau, CellEdit(terrain_type=3, elevation=2), brush_size=size)
    apply_edit(grid, plateau, CellEdit(terrain_type=4, elevation=4))

    lake = HexCoordinates.from_offset(3 * count_x // 4, count_z // 2)
    apply_edit(grid, lake, CellEdit(terrain_type=0, elevation=0, water_level=1), brush_size=size)

    tracker = DragTracker()
    river = CellEdit(river=RiverMode.ADD)
    coords = plateau
    while grid.contains(coords) and coords.to_offset()[0] <= lake.to_offset()[0]:
        apply_edit(grid, coords, river, drag=tracker.update(grid, coords))
        coords = coords.neighbor(HexDirection.E)
    tracker.release()
