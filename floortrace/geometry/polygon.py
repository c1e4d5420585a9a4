"""
Polygon Utilities Module

Pure functions over vertex lists: area, perimeter length, centroid,
point-in-polygon and self-intersection checks. Inputs are never modified.
"""

import math
from typing import Optional, Sequence, Tuple

Point = Tuple[float, float]

# Below this absolute area the centroid falls back to the vertex mean
_DEGENERATE_AREA = 1e-4


def signed_area(vertices: Sequence[Point]) -> float:
    """
    Shoelace signed area.

    Positive for counter-clockwise winding in a y-up frame (clockwise on
    screen, where y grows downward).
    """
    n = len(vertices)
    if n < 3:
        return 0.0

    total = 0.0
    for i in range(n):
        x1, y1 = vertices[i]
        x2, y2 = vertices[(i + 1) % n]
        total += x1 * y2 - x2 * y1
    return total / 2.0


def polygon_area(vertices: Sequence[Point], scale: float = 1.0) -> float:
    """
    Absolute polygon area.

    Args:
        vertices: Polygon vertices (implicitly closed)
        scale: Real-world units per pixel

    Returns:
        Area in square units
    """
    return abs(signed_area(vertices)) * scale * scale


def polygon_perimeter(vertices: Sequence[Point], scale: float = 1.0) -> float:
    """Sum of edge lengths, including the closing edge."""
    n = len(vertices)
    if n < 2:
        return 0.0

    total = 0.0
    for i in range(n):
        x1, y1 = vertices[i]
        x2, y2 = vertices[(i + 1) % n]
        total += math.hypot(x2 - x1, y2 - y1)
    return total * scale


def polygon_centroid(vertices: Sequence[Point]) -> Optional[Point]:
    """
    Area-weighted centroid.

    Degenerate (near-zero area) polygons return the mean of their vertices.

    Returns:
        (x, y), or None for an empty vertex list
    """
    n = len(vertices)
    if n == 0:
        return None

    area = signed_area(vertices)
    if abs(area) < _DEGENERATE_AREA:
        return (
            sum(x for x, _ in vertices) / n,
            sum(y for _, y in vertices) / n,
        )

    cx = 0.0
    cy = 0.0
    for i in range(n):
        x1, y1 = vertices[i]
        x2, y2 = vertices[(i + 1) % n]
        cross = x1 * y2 - x2 * y1
        cx += (x1 + x2) * cross
        cy += (y1 + y2) * cross

    factor = 1.0 / (6.0 * area)
    return (cx * factor, cy * factor)


def point_in_polygon(point: Point, vertices: Sequence[Point]) -> bool:
    """
    Ray-casting point-in-polygon test.

    Points exactly on an edge may be reported either way.
    """
    x, y = point
    inside = False
    n = len(vertices)
    j = n - 1
    for i in range(n):
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def bounding_box(vertices: Sequence[Point]) -> Optional[Tuple[float, float, float, float]]:
    """
    Returns:
        (min_x, min_y, max_x, max_y), or None for no vertices
    """
    if not vertices:
        return None
    xs = [x for x, _ in vertices]
    ys = [y for _, y in vertices]
    return (min(xs), min(ys), max(xs), max(ys))


def _orientation(p: Point, q: Point, r: Point) -> int:
    value = (q[1] - p[1]) * (r[0] - q[0]) - (q[0] - p[0]) * (r[1] - q[1])
    if abs(value) < 1e-10:
        return 0
    return 1 if value > 0 else 2


def _on_segment(p: Point, q: Point, r: Point) -> bool:
    """True if q lies within the bounding box of p-r (q collinear with them)."""
    return (
        min(p[0], r[0]) <= q[0] <= max(p[0], r[0])
        and min(p[1], r[1]) <= q[1] <= max(p[1], r[1])
    )


def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """
    Check whether segment p1-p2 intersects segment p3-p4.

    Touching and collinear overlap count as intersection.
    """
    o1 = _orientation(p1, p2, p3)
    o2 = _orientation(p1, p2, p4)
    o3 = _orientation(p3, p4, p1)
    o4 = _orientation(p3, p4, p2)

    if o1 != o2 and o3 != o4:
        return True

    if o1 == 0 and _on_segment(p1, p3, p2):
        return True
    if o2 == 0 and _on_segment(p1, p4, p2):
        return True
    if o3 == 0 and _on_segment(p3, p1, p4):
        return True
    if o4 == 0 and _on_segment(p3, p2, p4):
        return True

    return False


def is_self_intersecting(vertices: Sequence[Point]) -> bool:
    """
    Check every pair of non-adjacent edges for intersection.
    """
    n = len(vertices)
    if n < 4:
        return False

    for i in range(n):
        a1, a2 = vertices[i], vertices[(i + 1) % n]
        for j in range(i + 2, n):
            # First and last edges share a vertex
            if i == 0 and j == n - 1:
                continue
            b1, b2 = vertices[j], vertices[(j + 1) % n]
            if segments_intersect(a1, a2, b1, b2):
                return True
    return False


def is_valid_polygon(vertices: Sequence[Point]) -> bool:
    """At least 3 vertices and no self-intersection."""
    return len(vertices) >= 3 and not is_self_intersecting(vertices)
