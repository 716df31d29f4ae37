from __future__ import annotations

import heapq
import itertools
import logging
import math
from dataclasses import replace

from .grid import Grid
from .styles import ARROW_HEAD
from .types import (
    Arrowhead,
    ArrowheadPolicy,
    Box,
    Config,
    NodeShape,
    Point,
    ResolvedConnection,
    ResolvedNode,
    Side,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Connection routing
#
# Paths are orthogonal polylines. Each path leaves its source perpendicular
# to the source side and enters its destination perpendicular to the
# destination side. Between the two, the path runs through the gap lanes
# around the grid cells and through empty cells, never across another
# node: every route starts with a stub reaching half a gap past the source
# box and ends with a stub starting half a gap past the destination box.
#
# Overlapping segments of different connections are drawn as they are.
# ============================================================================

# Outward unit normal of each side (y grows downward)
SIDE_NORMALS: dict[str, tuple[int, int]] = {
    "n": (0, -1),
    "s": (0, 1),
    "w": (-1, 0),
    "e": (1, 0),
}

# Shapes drawn inside a centered square of side min(width, height)
SQUARE_SHAPES = {"square", "circle", "angled_square"}

_EPSILON = 1e-9


# ============================================================================
# Anchor points
# ============================================================================


def shape_extents(shape: NodeShape, box: Box) -> tuple[float, float]:
    """Half width and half height of the outline drawn for `shape` in `box`."""
    if shape in SQUARE_SHAPES:
        half = min(box.width, box.height) / 2
        return half, half
    return box.width / 2, box.height / 2


def boundary_point(shape: NodeShape, box: Box, dx: float, dy: float) -> Point:
    """Intersect the ray from the box center along (dx, dy) with the shape outline."""
    length = math.hypot(dx, dy)
    if length < _EPSILON:
        return Point(x=box.cx, y=box.cy)
    ux, uy = dx / length, dy / length
    hw, hh = shape_extents(shape, box)

    if shape in ("ellipse", "circle"):
        t = 1 / math.sqrt((ux / hw) ** 2 + (uy / hh) ** 2)
    elif shape in ("diamond", "angled_square"):
        t = 1 / (abs(ux) / hw + abs(uy) / hh)
    else:
        t = min(
            hw / abs(ux) if abs(ux) > _EPSILON else math.inf,
            hh / abs(uy) if abs(uy) > _EPSILON else math.inf,
        )
    return Point(x=box.cx + t * ux, y=box.cy + t * uy)


def anchor_point(shape: NodeShape, box: Box, side: Side) -> Point:
    """Point where a connection touches `side` of a node's outline."""
    dx, dy = SIDE_NORMALS[side]
    return boundary_point(shape, box, dx, dy)


# ============================================================================
# Routing lattice
#
# Odd indices run through cell centers, even indices through the gap lanes
# between cells; 0 and 2 * n are the border lanes. A lattice point whose two
# indices are odd is a cell center and can only be crossed when the cell is
# empty, so every route stays in the gaps or in empty cells.
# ============================================================================

LatticePoint = tuple[int, int]

# Lattice steps in preference order for equally good routes
LATTICE_STEPS: tuple[tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))

# Turns are minimized first, then length
_TURN_COST = 10_000


def stub_index(node: ResolvedNode, side: Side) -> LatticePoint:
    """Lattice point in the gap lane just outside `side` of a node's cell."""
    dx, dy = SIDE_NORMALS[side]
    return 2 * node.col + 1 + dx, 2 * node.row + 1 + dy


def lattice_to_pixel(point: LatticePoint, config: Config) -> Point:
    return Point(
        x=_lattice_coord(point[0], config.node_width, config.gap_x),
        y=_lattice_coord(point[1], config.node_height, config.gap_y),
    )


def _lattice_coord(index: int, size: float, gap: float) -> float:
    cell, offset = divmod(index, 2)
    base = cell * (size + gap)
    if offset:
        return base + gap + size / 2
    return base + gap / 2


def find_lattice_path(
    grid: Grid,
    start: LatticePoint,
    start_heading: tuple[int, int],
    goal: LatticePoint,
    goal_heading: tuple[int, int],
) -> list[LatticePoint]:
    """Fewest-turn walk over the lattice, then shortest among those.

    The walk leaves `start` moving along `start_heading`, never doubles
    back, and must reach `goal` able to continue along `goal_heading`.
    """
    cols, rows = 2 * grid.cols + 1, 2 * grid.rows + 1
    order = itertools.count()
    start_state = (start, start_heading)
    best = {start_state: 0}
    parents: dict[tuple, tuple | None] = {start_state: None}
    heap: list = [(0, next(order), start_state, False)]

    while heap:
        cost, _, state, arrived = heapq.heappop(heap)
        if arrived:
            return _unwind(parents, state)
        if cost > best[state]:
            continue

        point, heading = state
        if point == goal and heading != _reverse(goal_heading):
            turn = _TURN_COST if heading != goal_heading else 0
            heapq.heappush(heap, (cost + turn, next(order), state, True))

        for step in LATTICE_STEPS:
            if step == _reverse(heading):
                continue
            x, y = point[0] + step[0], point[1] + step[1]
            if not (0 <= x < cols and 0 <= y < rows):
                continue
            if x % 2 and y % 2 and grid.get(y // 2, x // 2) is not None:
                continue
            next_state = ((x, y), step)
            next_cost = cost + 1 + (_TURN_COST if step != heading else 0)
            if next_cost < best.get(next_state, math.inf):
                best[next_state] = next_cost
                parents[next_state] = state
                heapq.heappush(heap, (next_cost, next(order), next_state, False))

    raise RuntimeError(f"no lattice route from {start} to {goal}")


def _unwind(parents: dict, state: tuple) -> list[LatticePoint]:
    points: list[LatticePoint] = []
    current = state
    while current is not None:
        points.append(current[0])
        current = parents[current]
    points.reverse()
    return points


def _reverse(heading: tuple[int, int]) -> tuple[int, int]:
    return -heading[0], -heading[1]


# ============================================================================
# Paths
# ============================================================================


def route_connection(
    source: ResolvedNode,
    target: ResolvedNode,
    connection: ResolvedConnection,
    grid: Grid,
    config: Config,
) -> list[Point]:
    """Compute the polyline drawn for one connection."""
    assert source.box is not None and target.box is not None

    start = anchor_point(source.shape, source.box, connection.source_side)
    end = anchor_point(target.shape, target.box, connection.dest_side)

    if source.index == target.index and connection.source_side == connection.dest_side:
        return _same_side_loop(start, source.box, connection.source_side, config)

    lattice = find_lattice_path(
        grid,
        stub_index(source, connection.source_side),
        SIDE_NORMALS[connection.source_side],
        stub_index(target, connection.dest_side),
        _reverse(SIDE_NORMALS[connection.dest_side]),
    )
    middle = [lattice_to_pixel(p, config) for p in lattice]
    return simplify_path([start, *middle, end])


def simplify_path(points: list[Point]) -> list[Point]:
    """Drop repeated points and the middle of straight, same-direction runs."""
    deduped: list[Point] = []
    for p in points:
        if not deduped or not _same_point(deduped[-1], p):
            deduped.append(p)

    if len(deduped) < 3:
        return deduped

    out: list[Point] = [deduped[0]]
    for i in range(1, len(deduped) - 1):
        a = out[-1]
        b = deduped[i]
        c = deduped[i + 1]
        if _direction(a, b) == _direction(b, c):
            continue
        out.append(b)
    out.append(deduped[-1])
    return out


def _same_side_loop(anchor: Point, box: Box, side: Side, config: Config) -> list[Point]:
    # Small closed rectangle hanging off the stem that leaves and re-enters `side`
    nx, ny = SIDE_NORMALS[side]
    depth = (config.gap_y if nx == 0 else config.gap_x) / 2
    width = min(depth, (box.width if nx == 0 else box.height) / 4)
    tx, ty = -ny, nx
    outer = Point(x=anchor.x + nx * depth, y=anchor.y + ny * depth)
    inner = Point(x=anchor.x + nx * depth / 2, y=anchor.y + ny * depth / 2)
    return [
        anchor,
        outer,
        Point(x=outer.x + tx * width, y=outer.y + ty * width),
        Point(x=inner.x + tx * width, y=inner.y + ty * width),
        inner,
        anchor,
    ]


def _direction(a: Point, b: Point) -> tuple[int, int]:
    dx = b.x - a.x
    dy = b.y - a.y
    return (
        0 if abs(dx) < _EPSILON else (1 if dx > 0 else -1),
        0 if abs(dy) < _EPSILON else (1 if dy > 0 else -1),
    )


def _same_point(a: Point, b: Point) -> bool:
    return abs(a.x - b.x) < _EPSILON and abs(a.y - b.y) < _EPSILON


# ============================================================================
# Arrowheads
# ============================================================================


def build_arrowheads(
    points: list[Point],
    policy: ArrowheadPolicy,
    size: float = ARROW_HEAD["size"],
) -> list[Arrowhead]:
    """Arrowhead triangles for a routed path, start marker first."""
    if len(points) < 2:
        return []
    marks: list[Arrowhead] = []
    if policy in ("start", "both"):
        marks.append(arrowhead("start", points[0], points[1], size))
    if policy in ("end", "both"):
        marks.append(arrowhead("end", points[-1], points[-2], size))
    return marks


def arrowhead(end: str, apex: Point, previous: Point, size: float) -> Arrowhead:
    """Equilateral triangle with its apex at `apex`, pointing away from `previous`."""
    dx = apex.x - previous.x
    dy = apex.y - previous.y
    length = math.hypot(dx, dy)
    ux, uy = dx / length, dy / length
    depth = size * math.sqrt(3) / 2
    base = Point(x=apex.x - ux * depth, y=apex.y - uy * depth)
    px, py = -uy * size / 2, ux * size / 2
    return Arrowhead(
        end=end,  # type: ignore[arg-type]
        apex=Point(x=apex.x, y=apex.y),
        left=Point(x=base.x + px, y=base.y + py),
        right=Point(x=base.x - px, y=base.y - py),
    )


# ============================================================================
# Whole chart
# ============================================================================


def route_connections(
    nodes: list[ResolvedNode], grid: Grid, config: Config
) -> list[ResolvedNode]:
    """Route every connection; returns new node records with routed connections."""
    routed_nodes: list[ResolvedNode] = []
    for node in nodes:
        routed = []
        for connection in node.connections:
            points = route_connection(node, nodes[connection.target], connection, grid, config)
            routed.append(
                replace(
                    connection,
                    points=points,
                    arrowhead_marks=build_arrowheads(points, connection.arrowheads),
                )
            )
        routed_nodes.append(replace(node, connections=routed))

    logger.debug(
        "routed %d connections",
        sum(len(node.connections) for node in routed_nodes),
    )
    return routed_nodes
