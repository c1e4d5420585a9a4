"""
Perimeter Builder Module

Traces the exterior wall set into a closed polygon along the inner wall
faces, so the polygon covers usable floor area.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from ..constants import PERIMETER_SIMPLIFY_TOLERANCE
from .shapes import Perimeter, RoomBox, WallSegment

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _cross(prev: Point, current: Point, following: Point) -> float:
    ax, ay = current[0] - prev[0], current[1] - prev[1]
    bx, by = following[0] - current[0], following[1] - current[1]
    return ax * by - ay * bx


def simplify_polygon(
    vertices: Sequence[Point],
    tolerance: float = PERIMETER_SIMPLIFY_TOLERANCE
) -> List[Point]:
    """
    Remove redundant vertices from a closed polygon.

    First drops vertices closer than tolerance to their successor, then
    repeatedly drops vertices whose cross product with both neighbours is
    within tolerance (collinear points and back-tracking spurs).

    Args:
        vertices: Closed polygon vertices
        tolerance: Distance and cross-product tolerance

    Returns:
        New simplified vertex list
    """
    points = [(float(x), float(y)) for x, y in vertices]
    n = len(points)
    if n == 0:
        return []

    spaced = []
    for i, point in enumerate(points):
        successor = points[(i + 1) % n]
        if math.hypot(successor[0] - point[0], successor[1] - point[1]) >= tolerance:
            spaced.append(point)

    changed = True
    while changed and len(spaced) >= 3:
        changed = False
        for i in range(len(spaced)):
            prev = spaced[i - 1]
            following = spaced[(i + 1) % len(spaced)]
            if abs(_cross(prev, spaced[i], following)) <= tolerance:
                del spaced[i]
                changed = True
                break

    return spaced


def _select_extremes(walls: Sequence[WallSegment]):
    horizontal = [w for w in walls if w.is_horizontal]
    vertical = [w for w in walls if not w.is_horizontal]
    if len(horizontal) < 2 or len(vertical) < 2:
        return None

    top = min(horizontal, key=lambda w: w.center_y)
    bottom = max(horizontal, key=lambda w: w.center_y)
    left = min(vertical, key=lambda w: w.center_x)
    right = max(vertical, key=lambda w: w.center_x)
    if top is bottom or left is right:
        return None
    return horizontal, vertical, top, bottom, left, right


def trace_perimeter(exterior_walls: Sequence[WallSegment]) -> Optional[List[Point]]:
    """
    Trace exterior walls clockwise from the top-left inner corner.

    Each side emits its walls' endpoints at the side's inner face
    coordinate, followed by the next corner.

    Returns:
        Unsimplified vertex list, or None if a side is missing
    """
    extremes = _select_extremes(exterior_walls)
    if extremes is None:
        return None
    horizontal, vertical, top, bottom, left, right = extremes

    top_y = top.inner_face("top")
    bottom_y = bottom.inner_face("bottom")
    left_x = left.inner_face("left")
    right_x = right.inner_face("right")
    if right_x <= left_x or bottom_y <= top_y:
        logger.debug("Extreme walls overlap, no interior to trace")
        return None

    mid_y = (top.center_y + bottom.center_y) / 2
    mid_x = (left.center_x + right.center_x) / 2

    top_side = sorted((w for w in horizontal if w.center_y < mid_y), key=lambda w: w.x1)
    bottom_side = sorted((w for w in horizontal if w.center_y >= mid_y), key=lambda w: w.x2, reverse=True)
    right_side = sorted((w for w in vertical if w.center_x >= mid_x), key=lambda w: w.y1)
    left_side = sorted((w for w in vertical if w.center_x < mid_x), key=lambda w: w.y2, reverse=True)

    vertices: List[Point] = [(left_x, top_y)]
    for w in top_side:
        vertices.append((_clamp(w.x1, left_x, right_x), top_y))
        vertices.append((_clamp(w.x2, left_x, right_x), top_y))
    vertices.append((right_x, top_y))

    for w in right_side:
        vertices.append((right_x, _clamp(w.y1, top_y, bottom_y)))
        vertices.append((right_x, _clamp(w.y2, top_y, bottom_y)))
    vertices.append((right_x, bottom_y))

    for w in bottom_side:
        vertices.append((_clamp(w.x2, left_x, right_x), bottom_y))
        vertices.append((_clamp(w.x1, left_x, right_x), bottom_y))
    vertices.append((left_x, bottom_y))

    for w in left_side:
        vertices.append((left_x, _clamp(w.y2, top_y, bottom_y)))
        vertices.append((left_x, _clamp(w.y1, top_y, bottom_y)))

    return vertices


def build_perimeter(
    exterior_walls: Sequence[WallSegment],
    tolerance: float = PERIMETER_SIMPLIFY_TOLERANCE
) -> Optional[Perimeter]:
    """
    Build the exterior perimeter polygon from exterior walls.

    Args:
        exterior_walls: Walls classified as exterior
        tolerance: Simplification tolerance

    Returns:
        Perimeter, or None when a side is missing or fewer than
        3 vertices survive simplification
    """
    traced = trace_perimeter(exterior_walls)
    if traced is None:
        logger.info(f"Perimeter: missing extreme walls ({len(exterior_walls)} exterior walls)")
        return None

    simplified = simplify_polygon(traced, tolerance)
    if len(simplified) < 3:
        logger.info(f"Perimeter: only {len(simplified)} vertices after simplification")
        return None

    perimeter = Perimeter(tuple(simplified))
    if perimeter.is_self_intersecting():
        logger.warning("Perimeter polygon is self-intersecting")

    logger.info(f"Perimeter: {len(traced)} traced -> {len(perimeter)} vertices, area {perimeter.area:,.0f} px")
    return perimeter


def find_room_from_walls(
    walls: Sequence[WallSegment],
    x: float,
    y: float
) -> Optional[RoomBox]:
    """
    Room rectangle bounded by the nearest wall on each side of a point.

    Returns:
        RoomBox between the inner faces, or None if a side has no wall
    """
    above = [w for w in walls if w.is_horizontal and w.center_y < y]
    below = [w for w in walls if w.is_horizontal and w.center_y > y]
    left_of = [w for w in walls if not w.is_horizontal and w.center_x < x]
    right_of = [w for w in walls if not w.is_horizontal and w.center_x > x]
    if not (above and below and left_of and right_of):
        return None

    top = max(above, key=lambda w: w.center_y)
    bottom = min(below, key=lambda w: w.center_y)
    left = max(left_of, key=lambda w: w.center_x)
    right = min(right_of, key=lambda w: w.center_x)

    if right.x1 <= left.x2 or bottom.y1 <= top.y2:
        return None
    return RoomBox(left.x2, top.y2, right.x1, bottom.y1)
