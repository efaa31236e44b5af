from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Sequence, Tuple


class HexDirection(IntEnum):
    """The six edge directions of a pointy-top hex, clockwise from NE."""

    NE = 0
    E = 1
    SE = 2
    SW = 3
    W = 4
    NW = 5

    def opposite(self) -> "HexDirection":
        return HexDirection((self + 3) % 6)

    def next(self) -> "HexDirection":
        return HexDirection((self + 1) % 6)

    def previous(self) -> "HexDirection":
        return HexDirection((self - 1) % 6)

    def next2(self) -> "HexDirection":
        return HexDirection((self + 2) % 6)

    def previous2(self) -> "HexDirection":
        return HexDirection((self - 2) % 6)


class EdgeType(Enum):
    FLAT = "flat"
    SLOPE = "slope"
    CLIFF = "cliff"


# Axial (dx, dz) step for each direction.
_AXIAL_STEPS: dict[HexDirection, Tuple[int, int]] = {
    HexDirection.NE: (0, 1),
    HexDirection.E: (1, 0),
    HexDirection.SE: (1, -1),
    HexDirection.SW: (0, -1),
    HexDirection.W: (-1, 0),
    HexDirection.NW: (-1, 1),
}


@dataclass(frozen=True)
class HexCoordinates:
    """Axial hex coordinates.

    Only *x* and *z* are stored; *y* is derived so that the cube
    coordinate invariant ``x + y + z == 0`` always holds.
    """

    x: int
    z: int

    @property
    def y(self) -> int:
        return -self.x - self.z

    @classmethod
    def from_offset(cls, col: int, row: int) -> "HexCoordinates":
        """Convert offset grid indices (odd rows shifted right) to axial."""
        return cls(col - row // 2, row)

    @classmethod
    def from_position(cls, position: Sequence[float]) -> "HexCoordinates":
        """Return the coordinates of the hex nearest to a world position.

        Each cube coordinate is rounded independently.  When the rounded
        triple does not sum to zero, the axis with the largest rounding
        residual is recomputed from the other two.
        """
        from .metrics import INNER_RADIUS, OUTER_RADIUS

        x = position[0] / (INNER_RADIUS * 2.0)
        y = -x
        offset = position[2] / (OUTER_RADIUS * 3.0)
        x -= offset
        y -= offset

        ix = _round_half_away(x)
        iy = _round_half_away(y)
        iz = _round_half_away(-x - y)

        if ix + iy + iz != 0:
            dx = abs(x - ix)
            dy = abs(y - iy)
            dz = abs(-x - y - iz)
            if dx > dy and dx > dz:
                ix = -iy - iz
            elif dz > dy:
                iz = -ix - iy

        return cls(ix, iz)

    def to_offset(self) -> Tuple[int, int]:
        """Inverse of :meth:`from_offset`, as ``(col, row)``."""
        return self.x + self.z // 2, self.z

    def neighbor(self, direction: HexDirection) -> "HexCoordinates":
        dx, dz = _AXIAL_STEPS[HexDirection(direction)]
        return HexCoordinates(self.x + dx, self.z + dz)

    def distance_to(self, other: "HexCoordinates") -> int:
        return (
            abs(self.x - other.x) + abs(self.y - other.y) + abs(self.z - other.z)
        ) // 2

    def __str__(self) -> str:
        return f"({self.x}, {self.y}, {self.z})"


def _round_half_away(value: float) -> int:
    """Round to nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))
