"""
Line Extractor Module

Extracts scored wall line segments from a wall likelihood map:
Sobel gradients, non-maximum suppression, chain tracing and a
principal-direction line fit per chain.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..constants import (
    ANGLE_TOLERANCE_RAD,
    LINE_MAX_GAP,
    LINE_MIN_LENGTH,
    LINE_MIN_SCORE,
)
from ..exceptions import ConfigurationError
from .segment import LineSegment, Orientation, make_segment

logger = logging.getLogger(__name__)

# Offsets (dx, dy) of the two neighbours across each quantized gradient direction
_NMS_NEIGHBOURS = {
    0: ((1, 0), (-1, 0)),
    1: ((1, 1), (-1, -1)),
    2: ((0, 1), (0, -1)),
    3: ((1, -1), (-1, 1)),
}


@dataclass
class LineExtractionConfig:
    """Configuration for line extraction."""
    min_length: float = LINE_MIN_LENGTH
    min_score: float = LINE_MIN_SCORE
    max_gap: int = LINE_MAX_GAP
    orientation_constraint: bool = True
    angle_tolerance: float = ANGLE_TOLERANCE_RAD

    def __post_init__(self):
        if self.min_length <= 0:
            raise ConfigurationError(f"min_length must be > 0: {self.min_length}")
        if not 0.0 <= self.min_score <= 1.0:
            raise ConfigurationError(f"min_score must be in [0, 1]: {self.min_score}")
        if self.max_gap < 1:
            raise ConfigurationError(f"max_gap must be >= 1: {self.max_gap}")
        if not 0.0 < self.angle_tolerance < math.pi / 4:
            raise ConfigurationError(f"angle_tolerance must be in (0, pi/4): {self.angle_tolerance}")


def compute_gradients(values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sobel gradient magnitude and direction.

    Border pixels get zero magnitude.

    Args:
        values: float map

    Returns:
        Tuple of (magnitude, direction in radians)
    """
    data = values.astype(np.float32)
    gx = cv2.Sobel(data, cv2.CV_32F, 1, 0, ksize=3)
    gy = cv2.Sobel(data, cv2.CV_32F, 0, 1, ksize=3)

    magnitude = np.sqrt(gx * gx + gy * gy)
    direction = np.arctan2(gy, gx)

    magnitude[0, :] = 0
    magnitude[-1, :] = 0
    magnitude[:, 0] = 0
    magnitude[:, -1] = 0

    return magnitude, direction


def quantize_directions(direction: np.ndarray) -> np.ndarray:
    """Quantize gradient directions into 4 bins (0, 45, 90, 135 degrees)."""
    return np.mod(np.round(direction / (math.pi / 4)).astype(np.int32), 4)


def non_maximum_suppression(magnitude: np.ndarray, direction: np.ndarray) -> np.ndarray:
    """
    Thin gradient ridges to single pixels.

    A pixel survives when its magnitude is at least that of both
    neighbours along the gradient direction.

    Args:
        magnitude: Gradient magnitude
        direction: Gradient direction (radians)

    Returns:
        Suppressed magnitude map
    """
    height, width = magnitude.shape
    padded = np.pad(magnitude, 1)
    bins = quantize_directions(direction)

    def neighbour(dx: int, dy: int) -> np.ndarray:
        return padded[1 + dy:1 + dy + height, 1 + dx:1 + dx + width]

    keep = np.zeros(magnitude.shape, dtype=bool)
    for bin_index, (first, second) in _NMS_NEIGHBOURS.items():
        is_max = (magnitude >= neighbour(*first)) & (magnitude >= neighbour(*second))
        keep |= (bins == bin_index) & is_max

    return np.where(keep, magnitude, 0.0).astype(np.float32)


def trace_chains(edges: np.ndarray, max_gap: int = LINE_MAX_GAP) -> List[np.ndarray]:
    """
    Group edge pixels into chains.

    Two pixels belong to the same chain when they are linked through
    pixels no more than max_gap apart (Chebyshev distance). A square
    dilation of size max_gap followed by 8-connected labelling gives
    exactly that grouping.

    Args:
        edges: Binary edge mask
        max_gap: Maximum pixel gap bridged inside a chain

    Returns:
        List of (N, 2) arrays of (x, y) pixel coordinates
    """
    mask = edges.astype(np.uint8)
    if not mask.any():
        return []

    if max_gap > 1:
        kernel = np.ones((max_gap, max_gap), dtype=np.uint8)
        grown = cv2.dilate(mask, kernel)
    else:
        grown = mask

    _, labels = cv2.connectedComponents(grown, connectivity=8)

    ys, xs = np.nonzero(mask)
    chain_ids = labels[ys, xs]
    order = np.argsort(chain_ids, kind="stable")
    chain_ids = chain_ids[order]
    points = np.column_stack([xs[order], ys[order]])

    boundaries = np.flatnonzero(np.diff(chain_ids)) + 1
    return np.split(points, boundaries)


def fit_line(points: np.ndarray) -> Optional[Tuple[float, float, float, float]]:
    """
    Least-squares line through a point cloud.

    Uses the principal eigenvector of the covariance matrix; endpoints are
    the extreme projections onto that direction.

    Args:
        points: (N, 2) array of (x, y)

    Returns:
        Tuple of (x1, y1, x2, y2), or None for fewer than 2 points
    """
    if len(points) < 2:
        return None

    pts = points.astype(np.float64)
    mean_x, mean_y = pts.mean(axis=0)
    dx = pts[:, 0] - mean_x
    dy = pts[:, 1] - mean_y

    cxx = float(np.mean(dx * dx))
    cyy = float(np.mean(dy * dy))
    cxy = float(np.mean(dx * dy))

    angle = 0.5 * math.atan2(2 * cxy, cxx - cyy)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)

    projections = dx * cos_a + dy * sin_a
    t_min = float(projections.min())
    t_max = float(projections.max())

    return (
        mean_x + t_min * cos_a,
        mean_y + t_min * sin_a,
        mean_x + t_max * cos_a,
        mean_y + t_max * sin_a,
    )


def sample_line_score(
    likelihood: np.ndarray,
    x1: float,
    y1: float,
    x2: float,
    y2: float
) -> float:
    """
    Mean likelihood sampled along a line.

    Takes ceil(length) + 1 samples; samples outside the map count as 0.
    """
    height, width = likelihood.shape
    length = math.hypot(x2 - x1, y2 - y1)
    samples = int(math.ceil(length)) + 1

    t = np.linspace(0.0, 1.0, samples)
    xs = np.round(x1 + t * (x2 - x1)).astype(np.int64)
    ys = np.round(y1 + t * (y2 - y1)).astype(np.int64)

    inside = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
    total = float(likelihood[ys[inside], xs[inside]].sum())
    return total / samples


def _chains_by_direction(
    edges: np.ndarray,
    direction: np.ndarray,
    max_gap: int
) -> List[np.ndarray]:
    """Trace chains separately per gradient-direction bin."""
    bins = quantize_directions(direction)
    chains = []
    for bin_index in range(4):
        chains.extend(trace_chains(edges & (bins == bin_index), max_gap))
    return chains


def detect_line_segments(
    likelihood: np.ndarray,
    config: Optional[LineExtractionConfig] = None
) -> List[LineSegment]:
    """
    Detect scored line segments in a wall likelihood map.

    Chains are traced within one gradient-direction bin so walls meeting at
    a corner yield separate chains.

    Args:
        likelihood: float map in [0, 1]
        config: Extraction options

    Returns:
        List of LineSegment
    """
    config = config or LineExtractionConfig()

    magnitude, direction = compute_gradients(likelihood)
    suppressed = non_maximum_suppression(magnitude, direction)
    edges = suppressed > config.min_score

    chains = _chains_by_direction(edges, direction, config.max_gap)

    segments = []
    skipped_short = 0
    skipped_diagonal = 0
    skipped_score = 0

    for chain in chains:
        if len(chain) < config.min_length / 2:
            skipped_short += 1
            continue

        fitted = fit_line(chain)
        if fitted is None:
            continue

        x1, y1, x2, y2 = fitted
        if math.hypot(x2 - x1, y2 - y1) < config.min_length:
            skipped_short += 1
            continue

        score = sample_line_score(likelihood, x1, y1, x2, y2)
        segment = make_segment(x1, y1, x2, y2, score)
        if segment is None:
            continue

        if config.orientation_constraint and \
                segment.orientation(config.angle_tolerance) == Orientation.DIAGONAL:
            skipped_diagonal += 1
            continue

        if segment.score < config.min_score:
            skipped_score += 1
            continue

        segments.append(segment)

    logger.info(
        f"Line extraction: {len(segments)} segments from {len(chains)} chains "
        f"(short={skipped_short}, diagonal={skipped_diagonal}, low score={skipped_score})"
    )
    return segments
