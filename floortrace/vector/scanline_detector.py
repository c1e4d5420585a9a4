"""
Scan-Line Detector Module

Finds long horizontal and vertical ink runs by scanning rows and columns,
merges neighbouring runs into thick lines, and derives a rectangular
perimeter from the outermost lines.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from ..constants import SCAN_MAX_THICKNESS, SCAN_MERGE_PADDING, SCAN_MIN_LENGTH_RATIO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectedLine:
    """
    A thick axis-aligned line found by scanning.

    position is the top row (horizontal) or left column (vertical);
    start and end are inclusive coordinates along the line.
    """
    position: int
    start: int
    end: int
    thickness: int
    is_horizontal: bool

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def center(self) -> float:
        return self.position + self.thickness / 2

    @property
    def near_edge(self) -> int:
        """Top edge (horizontal) or left edge (vertical)."""
        return self.position

    @property
    def far_edge(self) -> int:
        """Bottom edge (horizontal) or right edge (vertical)."""
        return self.position + self.thickness


def _forward_run_lengths(ink: np.ndarray, cap: int) -> np.ndarray:
    """Consecutive ink pixels from each pixel toward increasing row index, capped."""
    height = ink.shape[0]
    runs = np.zeros(ink.shape, dtype=np.int32)
    runs[height - 1] = ink[height - 1]
    for y in range(height - 2, -1, -1):
        runs[y] = np.where(ink[y], runs[y + 1] + 1, 0)
    return np.minimum(runs, cap)


def _scan_rows(ink: np.ndarray, min_length: int, max_thickness: int, horizontal: bool) -> List[DetectedLine]:
    """Scan each row of ink for runs of at least min_length pixels."""
    height, width = ink.shape
    depth = _forward_run_lengths(ink, max_thickness)

    padded = np.zeros((height, width + 2), dtype=np.int8)
    padded[:, 1:-1] = ink
    diff = np.diff(padded, axis=1)
    starts = np.argwhere(diff == 1)
    ends = np.argwhere(diff == -1)

    lines = []
    for (row, start), (_, stop) in zip(starts, ends):
        if stop - start < min_length:
            continue
        # Crossing walls run deeper than the line itself
        thickness = int(np.median(depth[row, start:stop]))
        lines.append(DetectedLine(int(row), int(start), int(stop - 1), thickness, horizontal))
    return lines


def merge_parallel_lines(lines: List[DetectedLine], padding: int = SCAN_MERGE_PADDING) -> List[DetectedLine]:
    """
    Merge lines whose positions are within their thickness plus padding.

    Args:
        lines: Lines of one orientation
        padding: Extra distance tolerated between neighbouring lines

    Returns:
        Merged lines sorted by position
    """
    if not lines:
        return []

    ordered = sorted(lines, key=lambda l: l.position)
    groups = [[ordered[0]]]
    for line in ordered[1:]:
        previous = groups[-1][-1]
        if line.position - previous.position <= max(line.thickness, previous.thickness) + padding:
            groups[-1].append(line)
        else:
            groups.append([line])

    merged = []
    for group in groups:
        low = min(l.position for l in group)
        high = max(l.position + l.thickness for l in group)
        merged.append(DetectedLine(
            position=low,
            start=min(l.start for l in group),
            end=max(l.end for l in group),
            thickness=high - low,
            is_horizontal=group[0].is_horizontal,
        ))
    return merged


def detect_scan_lines(
    binary: np.ndarray,
    min_length_ratio: float = SCAN_MIN_LENGTH_RATIO,
    max_thickness: int = SCAN_MAX_THICKNESS
) -> Tuple[List[DetectedLine], List[DetectedLine]]:
    """
    Detect long horizontal and vertical lines.

    Args:
        binary: Binary mask (1 = ink)
        min_length_ratio: Minimum run length as a fraction of the image dimension
        max_thickness: Cap on measured line thickness

    Returns:
        Tuple of (horizontal lines, vertical lines)
    """
    ink = binary.astype(bool)
    height, width = ink.shape

    horizontal = _scan_rows(ink, max(1, int(width * min_length_ratio)), max_thickness, True)
    vertical = _scan_rows(ink.T, max(1, int(height * min_length_ratio)), max_thickness, False)

    horizontal = merge_parallel_lines(horizontal)
    vertical = merge_parallel_lines(vertical)

    logger.debug(f"Scan lines: {len(horizontal)} horizontal, {len(vertical)} vertical")
    return horizontal, vertical


def scan_line_perimeter_vertices(
    horizontal: List[DetectedLine],
    vertical: List[DetectedLine],
    use_interior: bool = True
) -> Optional[List[Tuple[float, float]]]:
    """
    Rectangle from the outermost scan lines.

    Args:
        horizontal: Horizontal lines
        vertical: Vertical lines
        use_interior: Use the wall faces toward the inside if True,
            the outside faces otherwise

    Returns:
        Four vertices clockwise from top-left, or None
    """
    if not horizontal or not vertical:
        return None

    top = min(horizontal, key=lambda l: l.position)
    bottom = max(horizontal, key=lambda l: l.position)
    left = min(vertical, key=lambda l: l.position)
    right = max(vertical, key=lambda l: l.position)

    if use_interior:
        top_y, bottom_y = top.far_edge, bottom.near_edge
        left_x, right_x = left.far_edge, right.near_edge
    else:
        top_y, bottom_y = top.near_edge, bottom.far_edge
        left_x, right_x = left.near_edge, right.far_edge

    if right_x <= left_x or bottom_y <= top_y:
        return None

    return [
        (float(left_x), float(top_y)),
        (float(right_x), float(top_y)),
        (float(right_x), float(bottom_y)),
        (float(left_x), float(bottom_y)),
    ]
