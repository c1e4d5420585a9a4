"""
Contour Perimeter Module

Fallback perimeter detectors that do not depend on wall segments:
the outer contour of the closed ink mask, and a default rectangle.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np
from shapely.validation import explain_validity

from ..constants import (
    CONTOUR_CLOSING_KERNEL,
    CONTOUR_EPSILON_RATIO,
    DEFAULT_PERIMETER_MARGIN,
    PERIMETER_SIMPLIFY_TOLERANCE,
)
from ..geometry.perimeter_builder import simplify_polygon
from ..geometry.shapes import Perimeter
from .preprocessor import morphological_close

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

# Contours smaller than this share of the image are ignored
MIN_CONTOUR_AREA_RATIO = 0.01


def make_rectilinear(vertices: Sequence[Point]) -> List[Point]:
    """
    Snap a roughly orthogonal polygon to horizontal/vertical edges.

    Each edge is classified as horizontal (dx > dy) or vertical and gets
    a single level (mean y or mean x of its endpoints). A vertex between a
    horizontal and a vertical edge moves to their crossing.

    Args:
        vertices: Polygon vertices

    Returns:
        New vertex list
    """
    n = len(vertices)
    if n < 4:
        return [tuple(v) for v in vertices]

    edges = []
    for i in range(n):
        (x1, y1), (x2, y2) = vertices[i], vertices[(i + 1) % n]
        horizontal = abs(x2 - x1) > abs(y2 - y1)
        level = (y1 + y2) / 2 if horizontal else (x1 + x2) / 2
        edges.append((horizontal, level))

    aligned = []
    for i in range(n):
        prev_horizontal, prev_level = edges[i - 1]
        next_horizontal, next_level = edges[i]
        x, y = vertices[i]

        if prev_horizontal and next_horizontal:
            y = (prev_level + next_level) / 2
        elif not prev_horizontal and not next_horizontal:
            x = (prev_level + next_level) / 2
        elif prev_horizontal:
            x, y = next_level, prev_level
        else:
            x, y = prev_level, next_level

        aligned.append((float(round(x)), float(round(y))))

    return aligned


def detect_contour_perimeter(
    binary: np.ndarray,
    closing_kernel: int = CONTOUR_CLOSING_KERNEL,
    epsilon_ratio: float = CONTOUR_EPSILON_RATIO,
    tolerance: float = PERIMETER_SIMPLIFY_TOLERANCE
) -> Optional[Perimeter]:
    """
    Perimeter from the outer contour of the closed ink mask.

    Args:
        binary: Binary mask (1 = ink)
        closing_kernel: Closing kernel used to seal door and window gaps
        epsilon_ratio: Douglas-Peucker epsilon as a fraction of contour length
        tolerance: Simplification tolerance

    Returns:
        Perimeter with at least 4 vertices, or None
    """
    height, width = binary.shape[:2]
    closed = morphological_close(binary.astype(np.uint8), closing_kernel)

    contours, _ = cv2.findContours(closed, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    if not contours:
        logger.debug("Contour perimeter: no contours")
        return None

    largest = max(contours, key=cv2.contourArea)
    if cv2.contourArea(largest) < MIN_CONTOUR_AREA_RATIO * width * height:
        logger.debug("Contour perimeter: largest contour too small")
        return None

    epsilon = epsilon_ratio * cv2.arcLength(largest, True)
    approx = cv2.approxPolyDP(largest, epsilon, True)
    points = [(float(pt[0][0]), float(pt[0][1])) for pt in approx]

    vertices = simplify_polygon(make_rectilinear(points), tolerance)
    if len(vertices) < 4:
        logger.debug(f"Contour perimeter: only {len(vertices)} vertices")
        return None

    perimeter = Perimeter(tuple(vertices))
    polygon = perimeter.to_polygon()
    if not polygon.is_valid:
        logger.warning(f"Contour perimeter is invalid: {explain_validity(polygon)}")

    logger.info(f"Contour perimeter: {len(approx)} -> {len(perimeter)} vertices")
    return perimeter


def default_perimeter(
    width: int,
    height: int,
    margin: int = DEFAULT_PERIMETER_MARGIN
) -> Perimeter:
    """
    Rectangle inset by margin from the image border.

    The margin shrinks for images too small to hold it.
    """
    margin = min(margin, max(0, (min(width, height) - 2) // 4))
    return Perimeter((
        (float(margin), float(margin)),
        (float(width - margin), float(margin)),
        (float(width - margin), float(height - margin)),
        (float(margin), float(height - margin)),
    ))
