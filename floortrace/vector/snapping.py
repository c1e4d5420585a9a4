"""
Snapping Helpers

Snap targets for interactive vertex editing: wall-line intersections,
nearest wall lines, corner points and secondary alignment of vertices.
"""

import math
from typing import List, Optional, Sequence, Tuple

from ..constants import SECONDARY_ALIGNMENT, SNAP_TO_INTERSECTION, SNAP_TO_LINE
from .segment import Intersection, LineSegment

Point = Tuple[float, float]


def line_intersection(seg_a: LineSegment, seg_b: LineSegment) -> Optional[Point]:
    """
    Crossing point of the infinite lines through two segments.

    Returns:
        (x, y), or None for parallel lines
    """
    dx_a, dy_a = seg_a.x2 - seg_a.x1, seg_a.y2 - seg_a.y1
    dx_b, dy_b = seg_b.x2 - seg_b.x1, seg_b.y2 - seg_b.y1

    denominator = dx_a * dy_b - dy_a * dx_b
    if abs(denominator) < 1e-9:
        return None

    t = ((seg_b.x1 - seg_a.x1) * dy_b - (seg_b.y1 - seg_a.y1) * dx_b) / denominator
    return (seg_a.x1 + t * dx_a, seg_a.y1 + t * dy_a)


def find_intersections(
    horizontal: Sequence[LineSegment],
    vertical: Sequence[LineSegment],
    max_extension: float = math.inf
) -> List[Intersection]:
    """
    Intersections between every horizontal and vertical wall line.

    Args:
        horizontal: Horizontal segments
        vertical: Vertical segments
        max_extension: Only keep crossings within this distance of both
            segments (infinite lines by default)

    Returns:
        List of Intersection
    """
    intersections = []
    for h in horizontal:
        for v in vertical:
            point = line_intersection(h, v)
            if point is None:
                continue
            if max_extension != math.inf and (
                h.distance_to_point(*point) > max_extension
                or v.distance_to_point(*point) > max_extension
            ):
                continue
            intersections.append(Intersection(point[0], point[1], h, v))
    return intersections


def find_nearest_point(
    position: Point,
    candidates: Sequence[Point],
    max_distance: float = SNAP_TO_INTERSECTION
) -> Optional[Point]:
    """
    Nearest candidate within max_distance of position.

    Candidates can be intersection points or detected corners.
    """
    best = None
    best_distance = math.inf
    for candidate in candidates:
        distance = math.hypot(position[0] - candidate[0], position[1] - candidate[1])
        if distance <= max_distance and distance < best_distance:
            best = (candidate[0], candidate[1])
            best_distance = distance
    return best


def snap_to_nearest_line(
    value: float,
    lines: Sequence[float],
    threshold: float = SNAP_TO_LINE
) -> Optional[float]:
    """Nearest line coordinate within threshold of value, or None."""
    best = None
    best_distance = math.inf
    for line in lines:
        distance = abs(line - value)
        if distance <= threshold and distance < best_distance:
            best = line
            best_distance = distance
    return best


def snap_edge_to_lines(
    position: float,
    size: float,
    lines: Sequence[float],
    threshold: float = SNAP_TO_LINE,
    start_edge: bool = True
) -> Tuple[float, float]:
    """
    Snap one edge of a box to the nearest wall line.

    Args:
        position: Box start coordinate (left or top)
        size: Box size along the axis
        lines: Wall line coordinates
        threshold: Snap distance
        start_edge: Snap the start edge if True, the end edge otherwise

    Returns:
        Tuple of (position, size)
    """
    if start_edge:
        snapped = snap_to_nearest_line(position, lines, threshold)
        if snapped is not None:
            return snapped, size + position - snapped
        return position, size

    snapped = snap_to_nearest_line(position + size, lines, threshold)
    if snapped is not None:
        return position, snapped - position
    return position, size


def apply_secondary_alignment(
    vertices: Sequence[Point],
    snapped_index: int,
    snapped_position: Point,
    align_distance: float = SECONDARY_ALIGNMENT
) -> List[Point]:
    """
    Align other vertices with a vertex that was just snapped.

    Vertices whose x (or y) lies within align_distance of the snapped
    position take the snapped x (or y).

    Returns:
        New vertex list; the input is not modified
    """
    aligned = [tuple(v) for v in vertices]
    if not 0 <= snapped_index < len(aligned):
        return aligned

    sx, sy = snapped_position
    aligned[snapped_index] = (sx, sy)
    for i, (x, y) in enumerate(aligned):
        if i == snapped_index:
            continue
        new_x = sx if abs(x - sx) <= align_distance else x
        new_y = sy if abs(y - sy) <= align_distance else y
        aligned[i] = (new_x, new_y)
    return aligned
