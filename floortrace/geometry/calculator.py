"""
Geometry Calculator Module

Real-unit measurements for perimeters and user-edited vertex lists,
cross-checked against shapely.
"""

import logging
from typing import List, Sequence, Tuple

from shapely.geometry import Polygon
from shapely.validation import explain_validity

from .polygon import is_self_intersecting, polygon_area, polygon_perimeter

logger = logging.getLogger(__name__)

# Relative disagreement tolerated between shoelace and shapely areas
_AREA_CROSS_CHECK_TOLERANCE = 1e-6


def to_shapely_polygon(vertices: Sequence[Tuple[float, float]]) -> Polygon:
    """
    Convert a vertex list to a shapely Polygon.

    Args:
        vertices: Polygon vertices (implicitly closed)

    Returns:
        Shapely Polygon
    """
    return Polygon([(float(x), float(y)) for x, y in vertices])


def calculate_floor_area(
    vertices: Sequence[Tuple[float, float]],
    scale: float = 1.0
) -> float:
    """
    Calculate floor area in real-world units.

    Args:
        vertices: Polygon vertices in pixels
        scale: Real-world units per pixel

    Returns:
        Area in square units (0 for fewer than 3 vertices)
    """
    if len(vertices) < 3:
        return 0.0

    if scale == 0:
        logger.warning("Scale is 0, cannot calculate area")
        return 0.0

    return polygon_area(vertices, scale)


def calculate_perimeter_length(
    vertices: Sequence[Tuple[float, float]],
    scale: float = 1.0
) -> float:
    """
    Calculate perimeter length in real-world units.

    Args:
        vertices: Polygon vertices in pixels
        scale: Real-world units per pixel

    Returns:
        Perimeter length
    """
    if scale == 0:
        logger.warning("Scale is 0, cannot calculate perimeter")
        return 0.0

    return polygon_perimeter(vertices, scale)


def validate_perimeter(vertices: Sequence[Tuple[float, float]]) -> List[str]:
    """
    Validate a perimeter polygon.

    Self-intersection is reported here, never repaired.

    Args:
        vertices: Polygon vertices

    Returns:
        List of warning strings (empty if valid)
    """
    warnings = []

    if len(vertices) < 3:
        warnings.append(f"Too few vertices: {len(vertices)}")
        return warnings

    if is_self_intersecting(vertices):
        warnings.append("Polygon is self-intersecting")

    polygon = to_shapely_polygon(vertices)
    if not polygon.is_valid:
        warnings.append(f"Invalid geometry: {explain_validity(polygon)}")

    area = polygon_area(vertices)
    if area == 0:
        warnings.append("Polygon has zero area")
    elif polygon.is_valid and abs(polygon.area - area) > _AREA_CROSS_CHECK_TOLERANCE * area:
        warnings.append(f"Area mismatch: shoelace {area:.2f} vs shapely {polygon.area:.2f}")

    for w in warnings:
        logger.debug(f"Perimeter validation: {w}")

    return warnings
