"""Hex cell state and the invariants that guard it.

Cells live in an arena (a plain list owned by :class:`~grid.HexGrid`)
and refer to their neighbours by arena index, never by owning
reference.  Every state change goes through a mutation method that
keeps river state consistent with elevation and with the neighbour on
the other end of each river.

Mutations never raise.  A request that would break an invariant (a
river flowing uphill, a river toward a missing neighbour, a terrain
type outside the configured range) is a defined no-op: the method
returns ``False`` and logs at debug level.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

import structlog

from .config import GridConfig
from .geometry import Vec3
from .metrics import (
    ELEVATION_STEP,
    STREAM_BED_ELEVATION_OFFSET,
    WATER_ELEVATION_OFFSET,
    edge_type_for,
)
from .models import EdgeType, HexCoordinates, HexDirection
from .noise import NoiseSource

logger = structlog.get_logger(__name__)


class HexCell:
    """One hexagonal terrain cell.

    Parameters
    ----------
    index : int
        Position of this cell in *arena*.
    coordinates : HexCoordinates
        Immutable identity of the cell.
    position : Vec3
        World position of the cell centre at elevation 0.
    arena : list of HexCell
        The shared cell list neighbour indices point into.
    noise : NoiseSource
        Used to jitter the centre height.
    config : GridConfig
    """

    def __init__(
        self,
        index: int,
        coordinates: HexCoordinates,
        position: Vec3,
        arena: Sequence["HexCell"],
        noise: NoiseSource,
        config: GridConfig,
    ) -> None:
        self.index = index
        self._coordinates = coordinates
        self._arena = arena
        self._noise = noise
        self._config = config
        self._neighbors: List[Optional[int]] = [None] * 6

        self.position: Vec3 = position
        self.elevation = 0
        self.terrain_type_index = 0
        self.water_level = 0

        self.has_incoming_river = False
        self.incoming_river = HexDirection.E
        self.has_outgoing_river = False
        self.outgoing_river = HexDirection.E

        self._refresh_position()

    def __repr__(self) -> str:
        return (
            f"HexCell({self._coordinates}, elevation={self.elevation}, "
            f"water_level={self.water_level}, terrain={self.terrain_type_index})"
        )

    @property
    def coordinates(self) -> HexCoordinates:
        return self._coordinates

    # ── Derived state ───────────────────────────────────────────────

    @property
    def has_river(self) -> bool:
        return self.has_incoming_river or self.has_outgoing_river

    @property
    def has_river_begin_or_end(self) -> bool:
        return self.has_incoming_river != self.has_outgoing_river

    @property
    def is_underwater(self) -> bool:
        return self.water_level > self.elevation

    @property
    def stream_bed_y(self) -> float:
        return (self.elevation + STREAM_BED_ELEVATION_OFFSET) * ELEVATION_STEP

    @property
    def river_surface_y(self) -> float:
        return (self.elevation + WATER_ELEVATION_OFFSET) * ELEVATION_STEP

    @property
    def water_surface_y(self) -> float:
        return (self.water_level + WATER_ELEVATION_OFFSET) * ELEVATION_STEP

    def has_river_through_edge(self, direction: HexDirection) -> bool:
        return (
            self.has_incoming_river and self.incoming_river == direction
            or self.has_outgoing_river and self.outgoing_river == direction
        )

    # ── Neighbours ──────────────────────────────────────────────────

    def get_neighbor(self, direction: HexDirection) -> Optional["HexCell"]:
        index = self._neighbors[direction]
        if index is None:
            return None
        return self._arena[index]

    def set_neighbor(self, direction: HexDirection, cell: "HexCell") -> None:
        """Link *cell* in *direction* and link back from *cell*."""
        direction = HexDirection(direction)
        self._neighbors[direction] = cell.index
        cell._neighbors[direction.opposite()] = self.index

    def neighbors(self) -> List[Optional["HexCell"]]:
        return [self.get_neighbor(d) for d in HexDirection]

    def get_edge_type(self, other: Union[HexDirection, "HexCell"]) -> EdgeType:
        """Classify the connection toward a direction or another cell.

        Raises ``ValueError`` when asked about a direction with no
        neighbour.
        """
        if isinstance(other, HexCell):
            return edge_type_for(self.elevation, other.elevation)
        neighbor = self.get_neighbor(other)
        if neighbor is None:
            raise ValueError(f"Cell {self._coordinates} has no neighbour {HexDirection(other).name}")
        return edge_type_for(self.elevation, neighbor.elevation)

    # ── Mutation ────────────────────────────────────────────────────

    def set_elevation(self, elevation: int) -> bool:
        if elevation == self.elevation:
            return False
        self.elevation = int(elevation)
        self._refresh_position()

        if self.has_outgoing_river:
            neighbor = self.get_neighbor(self.outgoing_river)
            if neighbor is not None and self.elevation < neighbor.elevation:
                self.remove_outgoing_river()

        if self.has_incoming_river:
            neighbor = self.get_neighbor(self.incoming_river)
            if neighbor is not None and self.elevation > neighbor.elevation:
                self.remove_incoming_river()
        return True

    def set_terrain_type(self, index: int) -> bool:
        if not 0 <= index < self._config.terrain_type_count:
            logger.debug("terrain type ignored", cell=str(self._coordinates), index=index)
            return False
        if index == self.terrain_type_index:
            return False
        self.terrain_type_index = int(index)
        return True

    def set_water_level(self, water_level: int) -> bool:
        if water_level == self.water_level:
            return False
        self.water_level = int(water_level)
        return True

    def remove_outgoing_river(self) -> bool:
        if not self.has_outgoing_river:
            return False
        self.has_outgoing_river = False
        neighbor = self.get_neighbor(self.outgoing_river)
        if neighbor is not None:
            neighbor.has_incoming_river = False
        return True

    def remove_incoming_river(self) -> bool:
        if not self.has_incoming_river:
            return False
        self.has_incoming_river = False
        neighbor = self.get_neighbor(self.incoming_river)
        if neighbor is not None:
            neighbor.has_outgoing_river = False
        return True

    def remove_river(self) -> bool:
        removed_out = self.remove_outgoing_river()
        removed_in = self.remove_incoming_river()
        return removed_out or removed_in

    def set_outgoing_river(self, direction: HexDirection) -> bool:
        try:
            direction = HexDirection(direction)
        except ValueError:
            logger.debug("river ignored: bad direction", cell=str(self._coordinates), direction=direction)
            return False
        if self.has_outgoing_river and self.outgoing_river == direction:
            return False

        neighbor = self.get_neighbor(direction)
        if neighbor is None:
            logger.debug("river ignored: no neighbour", cell=str(self._coordinates), direction=direction.name)
            return False
        if self.elevation < neighbor.elevation:
            logger.debug("river ignored: uphill", cell=str(self._coordinates), direction=direction.name)
            return False

        self.remove_outgoing_river()
        if self.has_incoming_river and self.incoming_river == direction:
            self.remove_incoming_river()

        self.has_outgoing_river = True
        self.outgoing_river = direction

        neighbor.remove_incoming_river()
        neighbor.has_incoming_river = True
        neighbor.incoming_river = direction.opposite()
        return True

    # ── Internals ───────────────────────────────────────────────────

    def _refresh_position(self) -> None:
        y = self.elevation * ELEVATION_STEP
        strength = self._config.elevation_perturb_strength
        if strength:
            y += self._noise.sample(self.position)[1] * strength
        self.position = (self.position[0], y, self.position[2])
