"""Terrain triangulation — cells and their neighbours → mesh geometry.

For every cell and each of its six directions the triangulator builds
the cell's own wedge (a fan, possibly bent around a river), the
connection strip toward the neighbour (flat strip, cliff wall or
terrace ribbon), the corner triangle shared with the next neighbour,
and the water surface when the cell is submerged.

Each geometric decision is made once by a pure ``classify_*`` function
returning an explicit variant, then matched exhaustively:

- :class:`EdgeCase` — how the cell's own wedge is built
- :class:`RiverChannel` — channel shape for a river passing through
- :class:`RiverSide` — where a wedge beside a river puts its fan apex
- :class:`ConnectionKind` — terrace ribbon or single strip
- :class:`CornerKind` — terraced, slope/cliff boundary or flat corner
- :class:`WaterCase` — shoreline or open water

Connections are only built for NE, E and SE, and corners only for NE
and E, so that every shared piece of geometry is emitted exactly once.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .cell import HexCell
from .config import GridConfig
from .geometry import Color, EdgeVertices, Vec3, add, lerp, scale, with_y
from .mesh import HexMesh, MeshChannel, MeshData
from .metrics import (
    COLOR_1,
    COLOR_2,
    COLOR_3,
    INNER_TO_OUTER,
    TERRACE_STEPS,
    bridge,
    first_solid_corner,
    first_water_corner,
    second_solid_corner,
    second_water_corner,
    solid_edge_middle,
    terrace_color_lerp,
    terrace_lerp,
    water_bridge,
)
from .models import EdgeType, HexDirection
from .noise import NoiseSource


# ═══════════════════════════════════════════════════════════════════
# Variants
# ═══════════════════════════════════════════════════════════════════

class EdgeCase(Enum):
    RIVER_BEGIN_OR_END = "river_begin_or_end"
    RIVER_THROUGH = "river_through"
    ADJACENT_TO_RIVER = "adjacent_to_river"
    NO_RIVER = "no_river"


class RiverChannel(Enum):
    STRAIGHT = "straight"
    SHARP_NEXT = "sharp_next"
    SHARP_PREVIOUS = "sharp_previous"
    SMOOTH_NEXT = "smooth_next"
    SMOOTH_PREVIOUS = "smooth_previous"


class RiverSide(Enum):
    INSIDE_BEND = "inside_bend"
    OUTSIDE_NEXT = "outside_next"
    OUTSIDE_PREVIOUS = "outside_previous"
    NONE = "none"


class ConnectionKind(Enum):
    TERRACES = "terraces"
    STRIP = "strip"


class CornerKind(Enum):
    TERRACES = "terraces"
    TERRACES_CLIFF = "terraces_cliff"
    CLIFF_TERRACES = "cliff_terraces"
    FLAT = "flat"


class WaterCase(Enum):
    SHORE = "shore"
    OPEN = "open"


@dataclass(frozen=True)
class Corner:
    """A corner vertex together with the cell it belongs to."""

    position: Vec3
    cell: HexCell


# ═══════════════════════════════════════════════════════════════════
# Classification
# ═══════════════════════════════════════════════════════════════════

def classify_edge(cell: HexCell, direction: HexDirection) -> EdgeCase:
    if cell.has_river:
        if cell.has_river_through_edge(direction):
            if cell.has_river_begin_or_end:
                return EdgeCase.RIVER_BEGIN_OR_END
            return EdgeCase.RIVER_THROUGH
        return EdgeCase.ADJACENT_TO_RIVER
    return EdgeCase.NO_RIVER


def classify_river_channel(cell: HexCell, direction: HexDirection) -> RiverChannel:
    """Shape of a river entering through *direction* and leaving elsewhere."""
    if cell.has_river_through_edge(direction.opposite()):
        return RiverChannel.STRAIGHT
    if cell.has_river_through_edge(direction.next()):
        return RiverChannel.SHARP_NEXT
    if cell.has_river_through_edge(direction.previous()):
        return RiverChannel.SHARP_PREVIOUS
    if cell.has_river_through_edge(direction.next2()):
        return RiverChannel.SMOOTH_NEXT
    return RiverChannel.SMOOTH_PREVIOUS


def classify_river_side(cell: HexCell, direction: HexDirection) -> RiverSide:
    """Where the fan apex of a riverless wedge must move."""
    if cell.has_river_through_edge(direction.next()):
        if cell.has_river_through_edge(direction.previous()):
            return RiverSide.INSIDE_BEND
        if cell.has_river_through_edge(direction.previous2()):
            return RiverSide.OUTSIDE_NEXT
    elif (
        cell.has_river_through_edge(direction.previous())
        and cell.has_river_through_edge(direction.next2())
    ):
        return RiverSide.OUTSIDE_PREVIOUS
    return RiverSide.NONE


def classify_connection(cell: HexCell, neighbor: HexCell) -> ConnectionKind:
    if cell.get_edge_type(neighbor) is EdgeType.SLOPE:
        return ConnectionKind.TERRACES
    return ConnectionKind.STRIP


def order_corner(
    cell: Corner, neighbor: Corner, next_cell: Corner,
) -> Tuple[Corner, Corner, Corner]:
    """Rotate the three corners so the lowest cell comes first.

    Returns ``(bottom, left, right)`` keeping clockwise order.
    """
    if cell.cell.elevation <= neighbor.cell.elevation:
        if cell.cell.elevation <= next_cell.cell.elevation:
            return cell, neighbor, next_cell
        return next_cell, cell, neighbor
    if neighbor.cell.elevation <= next_cell.cell.elevation:
        return neighbor, next_cell, cell
    return next_cell, cell, neighbor


def classify_corner(
    bottom: Corner, left: Corner, right: Corner,
) -> Tuple[CornerKind, Corner, Corner, Corner]:
    """Pick the corner variant and the corner it must be rooted at.

    Returns ``(kind, begin, left, right)``; the corners are re-rooted
    when the variant is built from a side other than the bottom.
    """
    left_type = bottom.cell.get_edge_type(left.cell)
    right_type = bottom.cell.get_edge_type(right.cell)

    if left_type is EdgeType.SLOPE:
        if right_type is EdgeType.SLOPE:
            return CornerKind.TERRACES, bottom, left, right
        if right_type is EdgeType.FLAT:
            return CornerKind.TERRACES, left, right, bottom
        return CornerKind.TERRACES_CLIFF, bottom, left, right

    if right_type is EdgeType.SLOPE:
        if left_type is EdgeType.FLAT:
            return CornerKind.TERRACES, right, bottom, left
        return CornerKind.CLIFF_TERRACES, bottom, left, right

    if left.cell.get_edge_type(right.cell) is EdgeType.SLOPE:
        if left.cell.elevation < right.cell.elevation:
            return CornerKind.CLIFF_TERRACES, right, bottom, left
        return CornerKind.TERRACES_CLIFF, left, right, bottom

    return CornerKind.FLAT, bottom, left, right


def classify_water(cell: HexCell, direction: HexDirection) -> WaterCase:
    neighbor = cell.get_neighbor(direction)
    if neighbor is not None and not neighbor.is_underwater:
        return WaterCase.SHORE
    return WaterCase.OPEN


def terrace_edge_levels(begin: EdgeVertices, end: EdgeVertices) -> List[EdgeVertices]:
    """All edges of a terrace ribbon, *begin* and *end* included."""
    levels = [begin]
    levels.extend(EdgeVertices.terrace_lerp(begin, end, step) for step in range(1, TERRACE_STEPS))
    levels.append(end)
    return levels


# ═══════════════════════════════════════════════════════════════════
# Triangulator
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TriangulationResult:
    meshes: Dict[MeshChannel, MeshData]
    stats: Counter


class ChunkTriangulator:
    """Builds fresh mesh buffers for one set of cells.

    A triangulator is single-use: construct one per pass, call
    :meth:`run`, and keep the returned :class:`TriangulationResult`.

    Parameters
    ----------
    noise : NoiseSource
        Used to jitter vertices horizontally.
    config : GridConfig
    """

    def __init__(self, noise: NoiseSource, config: GridConfig) -> None:
        self._config = config
        self._perturb: Callable[[Vec3], Vec3] = (
            noise.perturb if config.perturb_vertices else _identity
        )
        mesh_perturb = noise.perturb if config.perturb_vertices else None

        self.terrain = HexMesh(MeshChannel.TERRAIN, perturb=mesh_perturb)
        self.rivers = HexMesh(MeshChannel.RIVERS, perturb=mesh_perturb)
        self.water = HexMesh(MeshChannel.WATER, perturb=mesh_perturb)
        self.water_shore = HexMesh(MeshChannel.WATER_SHORE, perturb=mesh_perturb)
        self.stats: Counter = Counter()
        self._done = False

    def run(self, cells: Iterable[HexCell]) -> TriangulationResult:
        if self._done:
            raise RuntimeError("ChunkTriangulator instances are single-use")
        self._done = True

        for cell in cells:
            for direction in HexDirection:
                self._triangulate_direction(cell, direction)

        meshes = {
            mesh.channel: mesh.finalize()
            for mesh in (self.terrain, self.rivers, self.water, self.water_shore)
        }
        return TriangulationResult(meshes=meshes, stats=self.stats)

    # ── Per direction ───────────────────────────────────────────────

    def _triangulate_direction(self, cell: HexCell, direction: HexDirection) -> None:
        center = cell.position
        e = EdgeVertices.between(
            add(center, first_solid_corner(direction)),
            add(center, second_solid_corner(direction)),
        )

        case = classify_edge(cell, direction)
        self.stats[case] += 1

        if case is EdgeCase.RIVER_BEGIN_OR_END:
            e = e.with_middle_y(cell.stream_bed_y)
            self._triangulate_river_begin_or_end(cell, center, e)
        elif case is EdgeCase.RIVER_THROUGH:
            e = e.with_middle_y(cell.stream_bed_y)
            self._triangulate_river_through(cell, direction, center, e)
        elif case is EdgeCase.ADJACENT_TO_RIVER:
            self._triangulate_adjacent_to_river(cell, direction, center, e)
        else:
            self._triangulate_edge_fan(center, e, self._type(cell))

        if direction <= HexDirection.SE:
            self._triangulate_connection(cell, direction, e)

        if cell.is_underwater:
            self._triangulate_water(cell, direction)

    # ── Rivers ──────────────────────────────────────────────────────

    def _triangulate_river_begin_or_end(self, cell: HexCell, center: Vec3, e: EdgeVertices) -> None:
        m = EdgeVertices.between(lerp(center, e.v1, 0.5), lerp(center, e.v5, 0.5))
        m = m.with_middle_y(e.v3[1])
        t = self._type(cell)

        self._triangulate_edge_strip(m, COLOR_1, t, e, COLOR_1, t)
        self._triangulate_edge_fan(center, m, t)

        reversed_ = cell.has_incoming_river
        y = cell.river_surface_y
        self._triangulate_river_quad(m.v2, m.v4, e.v2, e.v4, y, y, 0.6, reversed_)

        self.rivers.add_triangle(with_y(center, y), with_y(m.v2, y), with_y(m.v4, y))
        if reversed_:
            self.rivers.add_triangle_uv((0.5, 0.4), (1.0, 0.2), (0.0, 0.2))
        else:
            self.rivers.add_triangle_uv((0.5, 0.4), (0.0, 0.6), (1.0, 0.6))

    def _triangulate_river_through(
        self, cell: HexCell, direction: HexDirection, center: Vec3, e: EdgeVertices,
    ) -> None:
        channel = classify_river_channel(cell, direction)
        self.stats[channel] += 1

        if channel is RiverChannel.STRAIGHT:
            center_l = add(center, scale(first_solid_corner(direction.previous()), 0.25))
            center_r = add(center, scale(second_solid_corner(direction.next()), 0.25))
        elif channel is RiverChannel.SHARP_NEXT:
            center_l = center
            center_r = lerp(center, e.v5, 2.0 / 3.0)
        elif channel is RiverChannel.SHARP_PREVIOUS:
            center_l = lerp(center, e.v1, 2.0 / 3.0)
            center_r = center
        elif channel is RiverChannel.SMOOTH_NEXT:
            center_l = center
            center_r = add(center, scale(solid_edge_middle(direction.next()), 0.5 * INNER_TO_OUTER))
        else:
            center_l = add(center, scale(solid_edge_middle(direction.previous()), 0.5 * INNER_TO_OUTER))
            center_r = center

        # The channel floor runs through the centre at stream-bed depth.
        center = with_y(center, e.v3[1])

        m = EdgeVertices.between(
            lerp(center_l, e.v1, 0.5), lerp(center_r, e.v5, 0.5), outer_step=1.0 / 6.0,
        ).with_middle_y(e.v3[1])
        t = self._type(cell)
        types = (t, t, t)

        self._triangulate_edge_strip(m, COLOR_1, t, e, COLOR_1, t)

        self.terrain.add_triangle(center_l, m.v1, m.v2)
        self.terrain.add_quad(center_l, center, m.v2, m.v3)
        self.terrain.add_quad(center, center_r, m.v3, m.v4)
        self.terrain.add_triangle(center_r, m.v4, m.v5)

        self.terrain.add_triangle_color(COLOR_1)
        self.terrain.add_quad_color(COLOR_1)
        self.terrain.add_quad_color(COLOR_1)
        self.terrain.add_triangle_color(COLOR_1)

        self.terrain.add_triangle_terrain_types(types)
        self.terrain.add_quad_terrain_types(types)
        self.terrain.add_quad_terrain_types(types)
        self.terrain.add_triangle_terrain_types(types)

        reversed_ = cell.incoming_river == direction
        y = cell.river_surface_y
        self._triangulate_river_quad(center_l, center_r, m.v2, m.v4, y, y, 0.4, reversed_)
        self._triangulate_river_quad(m.v2, m.v4, e.v2, e.v4, y, y, 0.6, reversed_)

    def _triangulate_adjacent_to_river(
        self, cell: HexCell, direction: HexDirection, center: Vec3, e: EdgeVertices,
    ) -> None:
        side = classify_river_side(cell, direction)
        self.stats[side] += 1

        if side is RiverSide.INSIDE_BEND:
            center = add(center, scale(solid_edge_middle(direction), INNER_TO_OUTER * 0.5))
        elif side is RiverSide.OUTSIDE_NEXT:
            center = add(center, scale(first_solid_corner(direction), 0.25))
        elif side is RiverSide.OUTSIDE_PREVIOUS:
            center = add(center, scale(second_solid_corner(direction), 0.25))

        m = EdgeVertices.between(lerp(center, e.v1, 0.5), lerp(center, e.v5, 0.5))
        t = self._type(cell)
        self._triangulate_edge_strip(m, COLOR_1, t, e, COLOR_1, t)
        self._triangulate_edge_fan(center, m, t)

    def _triangulate_river_quad(
        self,
        v1: Vec3, v2: Vec3, v3: Vec3, v4: Vec3,
        y1: float, y2: float,
        v: float,
        reversed_: bool,
    ) -> None:
        self.rivers.add_quad(with_y(v1, y1), with_y(v2, y1), with_y(v3, y2), with_y(v4, y2))
        if reversed_:
            self.rivers.add_quad_uv(1.0, 0.0, 0.8 - v, 0.6 - v)
        else:
            self.rivers.add_quad_uv(0.0, 1.0, v, v + 0.2)

    # ── Fans and strips ─────────────────────────────────────────────

    def _triangulate_edge_fan(self, center: Vec3, edge: EdgeVertices, type_index: float) -> None:
        types = (type_index, type_index, type_index)
        points = edge.points()
        for a, b in zip(points, points[1:]):
            self.terrain.add_triangle(center, a, b)
            self.terrain.add_triangle_color(COLOR_1)
            self.terrain.add_triangle_terrain_types(types)

    def _triangulate_edge_strip(
        self,
        e1: EdgeVertices, c1: Color, type1: float,
        e2: EdgeVertices, c2: Color, type2: float,
    ) -> None:
        types = (type1, type2, type1)
        p1 = e1.points()
        p2 = e2.points()
        for i in range(4):
            self.terrain.add_quad(p1[i], p1[i + 1], p2[i], p2[i + 1])
            self.terrain.add_quad_color(c1, c2)
            self.terrain.add_quad_terrain_types(types)

    # ── Connections ─────────────────────────────────────────────────

    def _triangulate_connection(self, cell: HexCell, direction: HexDirection, e1: EdgeVertices) -> None:
        neighbor = cell.get_neighbor(direction)
        if neighbor is None:
            return

        b = bridge(direction)
        b = (b[0], neighbor.position[1] - cell.position[1], b[2])
        e2 = EdgeVertices.between(add(e1.v1, b), add(e1.v5, b))

        if cell.has_river_through_edge(direction):
            e2 = e2.with_middle_y(neighbor.stream_bed_y)
            reversed_ = cell.has_incoming_river and cell.incoming_river == direction
            self._triangulate_river_quad(
                e1.v2, e1.v4, e2.v2, e2.v4,
                cell.river_surface_y, neighbor.river_surface_y,
                0.8, reversed_,
            )

        kind = classify_connection(cell, neighbor)
        self.stats[kind] += 1
        if kind is ConnectionKind.TERRACES:
            self._triangulate_edge_terraces(e1, cell, e2, neighbor)
        else:
            self._triangulate_edge_strip(
                e1, COLOR_1, self._type(cell), e2, COLOR_2, self._type(neighbor),
            )

        if direction <= HexDirection.E:
            next_cell = cell.get_neighbor(direction.next())
            if next_cell is not None:
                v5 = with_y(add(e1.v5, bridge(direction.next())), next_cell.position[1])
                bottom, left, right = order_corner(
                    Corner(e1.v5, cell), Corner(e2.v5, neighbor), Corner(v5, next_cell),
                )
                self._triangulate_corner(bottom, left, right)

    def _triangulate_edge_terraces(
        self, begin: EdgeVertices, begin_cell: HexCell, end: EdgeVertices, end_cell: HexCell,
    ) -> None:
        t1 = self._type(begin_cell)
        t2 = self._type(end_cell)
        levels = terrace_edge_levels(begin, end)
        colors = [COLOR_1]
        colors.extend(terrace_color_lerp(COLOR_1, COLOR_2, step) for step in range(1, TERRACE_STEPS))
        colors.append(COLOR_2)

        for i in range(len(levels) - 1):
            self._triangulate_edge_strip(levels[i], colors[i], t1, levels[i + 1], colors[i + 1], t2)

    # ── Corners ─────────────────────────────────────────────────────

    def _triangulate_corner(self, bottom: Corner, left: Corner, right: Corner) -> None:
        kind, begin, left, right = classify_corner(bottom, left, right)
        self.stats[kind] += 1

        if kind is CornerKind.TERRACES:
            self._triangulate_corner_terraces(begin, left, right)
        elif kind is CornerKind.TERRACES_CLIFF:
            self._triangulate_corner_terraces_cliff(begin, left, right)
        elif kind is CornerKind.CLIFF_TERRACES:
            self._triangulate_corner_cliff_terraces(begin, left, right)
        else:
            self.terrain.add_triangle(begin.position, left.position, right.position)
            self.terrain.add_triangle_color(COLOR_1, COLOR_2, COLOR_3)
            self.terrain.add_triangle_terrain_types(self._corner_types(begin, left, right))

    def _triangulate_corner_terraces(self, begin: Corner, left: Corner, right: Corner) -> None:
        types = self._corner_types(begin, left, right)
        v3 = terrace_lerp(begin.position, left.position, 1)
        v4 = terrace_lerp(begin.position, right.position, 1)
        c3 = terrace_color_lerp(COLOR_1, COLOR_2, 1)
        c4 = terrace_color_lerp(COLOR_1, COLOR_3, 1)

        self.terrain.add_triangle(begin.position, v3, v4)
        self.terrain.add_triangle_color(COLOR_1, c3, c4)
        self.terrain.add_triangle_terrain_types(types)

        for step in range(2, TERRACE_STEPS):
            v1, v2, c1, c2 = v3, v4, c3, c4
            v3 = terrace_lerp(begin.position, left.position, step)
            v4 = terrace_lerp(begin.position, right.position, step)
            c3 = terrace_color_lerp(COLOR_1, COLOR_2, step)
            c4 = terrace_color_lerp(COLOR_1, COLOR_3, step)
            self.terrain.add_quad(v1, v2, v3, v4)
            self.terrain.add_quad_color(c1, c2, c3, c4)
            self.terrain.add_quad_terrain_types(types)

        self.terrain.add_quad(v3, v4, left.position, right.position)
        self.terrain.add_quad_color(c3, c4, COLOR_2, COLOR_3)
        self.terrain.add_quad_terrain_types(types)

    def _triangulate_corner_terraces_cliff(self, begin: Corner, left: Corner, right: Corner) -> None:
        b = abs(1.0 / (right.cell.elevation - begin.cell.elevation))
        boundary = lerp(self._perturb(begin.position), self._perturb(right.position), b)
        boundary_color = lerp(COLOR_1, COLOR_3, b)
        types = self._corner_types(begin, left, right)

        self._triangulate_boundary_triangle(begin, COLOR_1, left, COLOR_2, boundary, boundary_color, types)
        self._close_boundary(left, right, boundary, boundary_color, types)

    def _triangulate_corner_cliff_terraces(self, begin: Corner, left: Corner, right: Corner) -> None:
        b = abs(1.0 / (left.cell.elevation - begin.cell.elevation))
        boundary = lerp(self._perturb(begin.position), self._perturb(left.position), b)
        boundary_color = lerp(COLOR_1, COLOR_2, b)
        types = self._corner_types(begin, left, right)

        self._triangulate_boundary_triangle(right, COLOR_3, begin, COLOR_1, boundary, boundary_color, types)
        self._close_boundary(left, right, boundary, boundary_color, types)

    def _close_boundary(
        self, left: Corner, right: Corner, boundary: Vec3, boundary_color: Color, types: Vec3,
    ) -> None:
        """Fill the left-right side of a slope/cliff corner."""
        if left.cell.get_edge_type(right.cell) is EdgeType.SLOPE:
            self._triangulate_boundary_triangle(left, COLOR_2, right, COLOR_3, boundary, boundary_color, types)
        else:
            self.terrain.add_triangle_unperturbed(
                self._perturb(left.position), self._perturb(right.position), boundary,
            )
            self.terrain.add_triangle_color(COLOR_2, COLOR_3, boundary_color)
            self.terrain.add_triangle_terrain_types(types)

    def _triangulate_boundary_triangle(
        self,
        begin: Corner, begin_color: Color,
        left: Corner, left_color: Color,
        boundary: Vec3, boundary_color: Color,
        types: Vec3,
    ) -> None:
        v2 = self._perturb(terrace_lerp(begin.position, left.position, 1))
        c2 = terrace_color_lerp(begin_color, left_color, 1)

        self.terrain.add_triangle_unperturbed(self._perturb(begin.position), v2, boundary)
        self.terrain.add_triangle_color(begin_color, c2, boundary_color)
        self.terrain.add_triangle_terrain_types(types)

        for step in range(2, TERRACE_STEPS):
            v1, c1 = v2, c2
            v2 = self._perturb(terrace_lerp(begin.position, left.position, step))
            c2 = terrace_color_lerp(begin_color, left_color, step)
            self.terrain.add_triangle_unperturbed(v1, v2, boundary)
            self.terrain.add_triangle_color(c1, c2, boundary_color)
            self.terrain.add_triangle_terrain_types(types)

        self.terrain.add_triangle_unperturbed(v2, self._perturb(left.position), boundary)
        self.terrain.add_triangle_color(c2, left_color, boundary_color)
        self.terrain.add_triangle_terrain_types(types)

    # ── Water ───────────────────────────────────────────────────────

    def _triangulate_water(self, cell: HexCell, direction: HexDirection) -> None:
        center = with_y(cell.position, cell.water_surface_y)
        case = classify_water(cell, direction)
        self.stats[case] += 1

        if case is WaterCase.SHORE:
            self._triangulate_water_shore(cell, direction, cell.get_neighbor(direction), center)
        else:
            self._triangulate_open_water(cell, direction, cell.get_neighbor(direction), center)

    def _triangulate_open_water(
        self, cell: HexCell, direction: HexDirection, neighbor: Optional[HexCell], center: Vec3,
    ) -> None:
        c1 = add(center, first_water_corner(direction))
        c2 = add(center, second_water_corner(direction))
        self.water.add_triangle(center, c1, c2)

        if direction <= HexDirection.SE and neighbor is not None:
            b = water_bridge(direction)
            e1 = add(c1, b)
            e2 = add(c2, b)
            self.water.add_quad(c1, c2, e1, e2)

            if direction <= HexDirection.E:
                next_cell = cell.get_neighbor(direction.next())
                if next_cell is not None and next_cell.is_underwater:
                    self.water.add_triangle(c2, e2, add(c2, water_bridge(direction.next())))

    def _triangulate_water_shore(
        self, cell: HexCell, direction: HexDirection, neighbor: HexCell, center: Vec3,
    ) -> None:
        e1 = EdgeVertices.between(
            add(center, first_water_corner(direction)),
            add(center, second_water_corner(direction)),
        )
        points = e1.points()
        for a, b in zip(points, points[1:]):
            self.water.add_triangle(center, a, b)

        center2 = with_y(neighbor.position, center[1])
        opposite = direction.opposite()
        e2 = EdgeVertices.between(
            add(center2, second_solid_corner(opposite)),
            add(center2, first_solid_corner(opposite)),
        )
        shore = e2.points()
        for i in range(4):
            self.water_shore.add_quad(points[i], points[i + 1], shore[i], shore[i + 1])
            self.water_shore.add_quad_uv(0.0, 0.0, 0.0, 1.0)

        next_cell = cell.get_neighbor(direction.next())
        if next_cell is not None:
            if next_cell.is_underwater:
                v3 = add(next_cell.position, first_water_corner(direction.previous()))
            else:
                v3 = add(next_cell.position, first_solid_corner(direction.previous()))
            v3 = with_y(v3, center[1])
            self.water_shore.add_triangle(e1.v5, e2.v5, v3)
            self.water_shore.add_triangle_uv(
                (0.0, 0.0), (0.0, 1.0), (0.0, 0.0 if next_cell.is_underwater else 1.0),
            )

    # ── Helpers ─────────────────────────────────────────────────────

    def _type(self, cell: HexCell) -> float:
        index = cell.terrain_type_index
        assert 0 <= index < self._config.terrain_type_count, (
            f"terrain type {index} out of range for cell {cell.coordinates}"
        )
        return float(index)

    def _corner_types(self, begin: Corner, left: Corner, right: Corner) -> Vec3:
        return (self._type(begin.cell), self._type(left.cell), self._type(right.cell))


def _identity(position: Vec3) -> Vec3:
    return position
