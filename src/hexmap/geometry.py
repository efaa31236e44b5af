"""Vector helper functions used across the package."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence, Tuple

Vec3 = Tuple[float, float, float]
Vec2 = Tuple[float, float]
Color = Tuple[float, float, float]


def add(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale(a: Sequence[float], factor: float) -> Vec3:
    return (a[0] * factor, a[1] * factor, a[2] * factor)


def lerp(a: Sequence[float], b: Sequence[float], t: float) -> Vec3:
    """Linear interpolation between two 3-vectors (points or colours)."""
    return (
        a[0] + (b[0] - a[0]) * t,
        a[1] + (b[1] - a[1]) * t,
        a[2] + (b[2] - a[2]) * t,
    )


def with_y(a: Sequence[float], y: float) -> Vec3:
    return (a[0], y, a[2])


@dataclass(frozen=True)
class EdgeVertices:
    """Five points along one boundary segment of a cell.

    *v1* and *v5* are the segment's corners, *v3* its middle.  The
    inner points sit at *outer_step* from each corner (¼ by default).
    """

    v1: Vec3
    v2: Vec3
    v3: Vec3
    v4: Vec3
    v5: Vec3

    @classmethod
    def between(cls, corner1: Vec3, corner2: Vec3, outer_step: float = 0.25) -> "EdgeVertices":
        return cls(
            corner1,
            lerp(corner1, corner2, outer_step),
            lerp(corner1, corner2, 0.5),
            lerp(corner1, corner2, 1.0 - outer_step),
            corner2,
        )

    def points(self) -> Tuple[Vec3, Vec3, Vec3, Vec3, Vec3]:
        return (self.v1, self.v2, self.v3, self.v4, self.v5)

    def with_middle_y(self, y: float) -> "EdgeVertices":
        return replace(self, v3=with_y(self.v3, y))

    @classmethod
    def terrace_lerp(cls, a: "EdgeVertices", b: "EdgeVertices", step: int) -> "EdgeVertices":
        from .metrics import terrace_lerp

        return cls(*(terrace_lerp(p, q, step) for p, q in zip(a.points(), b.points())))
