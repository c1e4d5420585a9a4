"""
Wall Classifier Module

Turns line segments (or raw ink components) into WallSegment regions
and splits them into exterior and interior walls.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..constants import (
    COMPONENT_MIN_WALL_LENGTH,
    DEFAULT_WALL_THICKNESS,
    EXTERIOR_EDGE_RATIO,
    WALL_BAND_COVERAGE,
)
from ..geometry.shapes import WallSegment
from ..vector.filters import EdgeDistanceClassifier
from ..vector.segment import LineSegment

logger = logging.getLogger(__name__)


def _band_rows(
    ink: np.ndarray,
    row: int,
    start: int,
    stop: int,
    max_thickness: int,
    coverage: float
) -> Optional[Tuple[int, int]]:
    """
    Rows of a band around row whose ink coverage over [start, stop) passes.

    The seed is the best-covered row within half the thickness of row.
    Returns the inclusive (first, last) rows or None.
    """
    height = ink.shape[0]
    reach = max(1, max_thickness // 2 + 1)
    low, high = max(0, row - reach), min(height - 1, row + reach)
    if high < low or stop <= start:
        return None

    ratios = ink[low:high + 1, start:stop].mean(axis=1)
    seed = low + int(np.argmax(ratios))
    if ratios[seed - low] < coverage:
        return None

    def passes(r: int) -> bool:
        return 0 <= r < height and ink[r, start:stop].mean() >= coverage

    first = last = seed
    while last - first + 1 < max_thickness:
        grew = False
        if passes(first - 1):
            first -= 1
            grew = True
        if last - first + 1 < max_thickness and passes(last + 1):
            last += 1
            grew = True
        if not grew:
            break
    return first, last


def _wall_from_band(
    band: np.ndarray,
    row_offset: int,
    col_offset: int,
    is_horizontal: bool,
    score: float
) -> Optional[WallSegment]:
    ys, xs = np.nonzero(band)
    if len(xs) == 0:
        return None
    ys = ys + row_offset
    xs = xs + col_offset
    if not is_horizontal:
        # band was cut from the transposed mask
        xs, ys = ys, xs
    pixels = np.column_stack([xs, ys])
    return WallSegment(
        x1=int(xs.min()),
        y1=int(ys.min()),
        x2=int(xs.max()),
        y2=int(ys.max()),
        is_horizontal=is_horizontal,
        pixels=pixels,
        score=float(score),
    )


def _same_band(a: WallSegment, b: WallSegment) -> bool:
    """Same orientation, same rows (or columns) across the axis, overlapping spans."""
    if a.is_horizontal != b.is_horizontal:
        return False
    if a.is_horizontal:
        return (a.y1, a.y2) == (b.y1, b.y2) and a.x1 <= b.x2 and b.x1 <= a.x2
    return (a.x1, a.x2) == (b.x1, b.x2) and a.y1 <= b.y2 and b.y1 <= a.y2


def _add_or_merge(walls: List[WallSegment], wall: WallSegment) -> None:
    for i, existing in enumerate(walls):
        if _same_band(existing, wall):
            pixels = np.unique(np.vstack([existing.pixels, wall.pixels]), axis=0)
            walls[i] = WallSegment(
                x1=min(existing.x1, wall.x1),
                y1=min(existing.y1, wall.y1),
                x2=max(existing.x2, wall.x2),
                y2=max(existing.y2, wall.y2),
                is_horizontal=wall.is_horizontal,
                pixels=pixels,
                score=max(existing.score, wall.score),
            )
            return
    walls.append(wall)


def walls_from_segments(
    segments: Sequence[LineSegment],
    binary: np.ndarray,
    max_thickness: float = DEFAULT_WALL_THICKNESS * 2,
    coverage: float = WALL_BAND_COVERAGE
) -> List[WallSegment]:
    """
    Grow each axis-aligned segment into the band of ink it lies on.

    Args:
        segments: Post-processed line segments
        binary: Binary mask (1 = ink)
        max_thickness: Maximum band thickness in pixels
        coverage: Minimum share of ink along the span for a row/column
            to belong to the band

    Returns:
        Walls in segment order; segments lying on the same band with
        overlapping spans produce one wall
    """
    ink = binary.astype(bool)
    limit = max(1, int(round(max_thickness)))

    walls: List[WallSegment] = []
    skipped = 0
    for s in segments:
        if s.is_horizontal():
            mask, row = ink, int(round(s.center_y))
            start, stop = int(round(min(s.x1, s.x2))), int(round(max(s.x1, s.x2))) + 1
            horizontal = True
        elif s.is_vertical():
            mask, row = ink.T, int(round(s.center_x))
            start, stop = int(round(min(s.y1, s.y2))), int(round(max(s.y1, s.y2))) + 1
            horizontal = False
        else:
            skipped += 1
            continue

        start, stop = max(0, start), min(mask.shape[1], stop)
        rows = _band_rows(mask, row, start, stop, limit, coverage)
        if rows is None:
            skipped += 1
            continue

        first, last = rows
        wall = _wall_from_band(mask[first:last + 1, start:stop], first, start, horizontal, s.score)
        if wall is None:
            skipped += 1
            continue

        _add_or_merge(walls, wall)

    logger.debug(f"Walls from segments: {len(walls)} walls, {skipped} segments skipped")
    return walls


def detect_wall_components(
    binary: np.ndarray,
    min_wall_length: int = COMPONENT_MIN_WALL_LENGTH
) -> List[WallSegment]:
    """
    Treat long 4-connected ink components as walls.

    Args:
        binary: Binary mask (1 = ink)
        min_wall_length: Minimum length of the longer bounding-box side

    Returns:
        Walls in label order
    """
    num_labels, labels, stats, _ = cv2.connectedComponentsWithStats(
        binary.astype(np.uint8), connectivity=4
    )

    walls = []
    for label in range(1, num_labels):
        x = int(stats[label, cv2.CC_STAT_LEFT])
        y = int(stats[label, cv2.CC_STAT_TOP])
        w = int(stats[label, cv2.CC_STAT_WIDTH])
        h = int(stats[label, cv2.CC_STAT_HEIGHT])
        x2, y2 = x + w - 1, y + h - 1
        if max(x2 - x, y2 - y) < min_wall_length:
            continue

        ys, xs = np.nonzero(labels[y:y2 + 1, x:x2 + 1] == label)
        walls.append(WallSegment(
            x1=x, y1=y, x2=x2, y2=y2,
            is_horizontal=(x2 - x) > (y2 - y),
            pixels=np.column_stack([xs + x, ys + y]),
        ))

    logger.info(f"Component walls: {len(walls)} of {num_labels - 1} components")
    return walls


def split_by_orientation(walls: Sequence[WallSegment]) -> Tuple[List[WallSegment], List[WallSegment]]:
    """Horizontal walls sorted by centre y, vertical walls by centre x."""
    horizontal = sorted((w for w in walls if w.is_horizontal), key=lambda w: w.center_y)
    vertical = sorted((w for w in walls if not w.is_horizontal), key=lambda w: w.center_x)
    return horizontal, vertical


def classify_walls(
    walls: Sequence[WallSegment],
    width: int,
    height: int,
    edge_ratio: float = EXTERIOR_EDGE_RATIO
) -> Tuple[List[WallSegment], List[WallSegment]]:
    """
    Split walls by distance of their centre from the image border.

    Returns:
        Tuple of (exterior, interior)
    """
    classifier = EdgeDistanceClassifier(edge_ratio)
    exterior, interior = classifier.classify(list(walls), width, height)
    logger.debug(f"Wall classification: {len(exterior)} exterior, {len(interior)} interior")
    return exterior, interior
