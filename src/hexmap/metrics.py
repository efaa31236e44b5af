"""Fixed hex metrics — radii, corner vectors, elevation and terrace steps.

Every function in this module is pure: it maps a :class:`HexDirection`
(or a pair of points/colours) to a vector, with no dependency on cells
or grids.  Higher-level modules (:mod:`cell`, :mod:`triangulation`)
compose these into geometry.

Functions
---------
- :func:`first_corner`, :func:`second_corner` — full-radius corners
- :func:`first_solid_corner`, :func:`second_solid_corner` — inner corners
- :func:`solid_edge_middle` — midpoint of a solid edge
- :func:`first_water_corner`, :func:`second_water_corner` — water corners
- :func:`bridge`, :func:`water_bridge` — offsets across a connection
- :func:`terrace_lerp`, :func:`terrace_color_lerp` — stepped interpolation
- :func:`edge_type_for` — classify an elevation pair
"""

from __future__ import annotations

from typing import Tuple

from .geometry import Color, Vec3, add, lerp, scale
from .models import EdgeType, HexDirection

OUTER_TO_INNER = 0.866025404
INNER_TO_OUTER = 1.0 / OUTER_TO_INNER

OUTER_RADIUS = 10.0
INNER_RADIUS = OUTER_RADIUS * OUTER_TO_INNER

SOLID_FACTOR = 0.8
BLEND_FACTOR = 1.0 - SOLID_FACTOR

ELEVATION_STEP = 3.0

TERRACES_PER_SLOPE = 2
TERRACE_STEPS = TERRACES_PER_SLOPE * 2 + 1

HORIZONTAL_TERRACE_STEP_SIZE = 1.0 / TERRACE_STEPS
VERTICAL_TERRACE_STEP_SIZE = 1.0 / (TERRACES_PER_SLOPE + 1)

STREAM_BED_ELEVATION_OFFSET = -1.75
WATER_ELEVATION_OFFSET = -0.5

WATER_FACTOR = 0.6
WATER_BLEND_FACTOR = 1.0 - WATER_FACTOR

# Corner 6 repeats corner 0 so that ``CORNERS[d + 1]`` is always valid.
CORNERS: Tuple[Vec3, ...] = (
    (0.0, 0.0, OUTER_RADIUS),
    (INNER_RADIUS, 0.0, 0.5 * OUTER_RADIUS),
    (INNER_RADIUS, 0.0, -0.5 * OUTER_RADIUS),
    (0.0, 0.0, -OUTER_RADIUS),
    (-INNER_RADIUS, 0.0, -0.5 * OUTER_RADIUS),
    (-INNER_RADIUS, 0.0, 0.5 * OUTER_RADIUS),
    (0.0, 0.0, OUTER_RADIUS),
)

# Splat colours: one channel per cell taking part in a triangle.
COLOR_1: Color = (1.0, 0.0, 0.0)
COLOR_2: Color = (0.0, 1.0, 0.0)
COLOR_3: Color = (0.0, 0.0, 1.0)


# ═══════════════════════════════════════════════════════════════════
# Corner vectors
# ═══════════════════════════════════════════════════════════════════

def first_corner(direction: HexDirection) -> Vec3:
    return CORNERS[direction]


def second_corner(direction: HexDirection) -> Vec3:
    return CORNERS[direction + 1]


def first_solid_corner(direction: HexDirection) -> Vec3:
    return scale(CORNERS[direction], SOLID_FACTOR)


def second_solid_corner(direction: HexDirection) -> Vec3:
    return scale(CORNERS[direction + 1], SOLID_FACTOR)


def solid_edge_middle(direction: HexDirection) -> Vec3:
    return scale(add(CORNERS[direction], CORNERS[direction + 1]), 0.5 * SOLID_FACTOR)


def first_water_corner(direction: HexDirection) -> Vec3:
    return scale(CORNERS[direction], WATER_FACTOR)


def second_water_corner(direction: HexDirection) -> Vec3:
    return scale(CORNERS[direction + 1], WATER_FACTOR)


def bridge(direction: HexDirection) -> Vec3:
    """Offset from a solid edge to the facing neighbour's solid edge."""
    return scale(add(CORNERS[direction], CORNERS[direction + 1]), BLEND_FACTOR)


def water_bridge(direction: HexDirection) -> Vec3:
    return scale(add(CORNERS[direction], CORNERS[direction + 1]), WATER_BLEND_FACTOR)


# ═══════════════════════════════════════════════════════════════════
# Terrace interpolation
# ═══════════════════════════════════════════════════════════════════

def terrace_lerp(a: Vec3, b: Vec3, step: int) -> Vec3:
    """Interpolate along a terrace ribbon.

    x and z advance linearly with *step*; y only advances on odd steps,
    so that every other strip is a flat tread.
    """
    h = step * HORIZONTAL_TERRACE_STEP_SIZE
    v = ((step + 1) // 2) * VERTICAL_TERRACE_STEP_SIZE
    return (
        a[0] + (b[0] - a[0]) * h,
        a[1] + (b[1] - a[1]) * v,
        a[2] + (b[2] - a[2]) * h,
    )


def terrace_color_lerp(a: Color, b: Color, step: int) -> Color:
    return lerp(a, b, step * HORIZONTAL_TERRACE_STEP_SIZE)


def edge_type_for(elevation1: int, elevation2: int) -> EdgeType:
    if elevation1 == elevation2:
        return EdgeType.FLAT
    if abs(elevation2 - elevation1) == 1:
        return EdgeType.SLOPE
    return EdgeType.CLIFF
