"""
Segment Filters

Post-processing filters for extracted wall segments:
- LengthFilter: Drops segments outside a length range
- OrientationFilter: Drops diagonal segments
- OrientationSnapper: Forces near-axis segments exactly horizontal/vertical
- GridSnapper: Rounds endpoints to a grid
- DuplicateFilter: Collapses near-identical segments
- SpacingConstraintFilter: Rejects implausible parallel wall spacing
- IsolationFilter: Drops segments with no nearby neighbour
- EdgeDistanceClassifier: Splits exterior and interior walls
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple

from shapely.geometry import LineString, Point
from shapely.strtree import STRtree

from ...constants import (
    ANGLE_TOLERANCE_RAD,
    CONNECTION_THRESHOLD,
    DUPLICATE_THRESHOLD,
    EXTERIOR_EDGE_RATIO,
    GRID_SIZE,
    MAX_WALL_SPACING,
    MIN_WALL_SPACING,
    POST_MAX_LENGTH,
    POST_MIN_LENGTH,
)
from ..consolidator import projected_gap
from ..segment import LineSegment, Orientation, angle_difference, make_segment

logger = logging.getLogger(__name__)


@dataclass
class FilterStats:
    """Statistics from a filter operation."""
    total_input: int = 0
    total_output: int = 0
    removed: int = 0
    reason: str = ""

    @property
    def removal_rate(self) -> float:
        if self.total_input == 0:
            return 0.0
        return self.removed / self.total_input


def _stats(before: List[LineSegment], after: List[LineSegment], reason: str) -> FilterStats:
    stats = FilterStats(
        total_input=len(before),
        total_output=len(after),
        removed=len(before) - len(after),
        reason=reason,
    )
    if stats.removed > 0:
        logger.debug(f"{reason}: removed {stats.removed} segments ({stats.removal_rate:.1%})")
    return stats


# =============================================================================
# LENGTH AND ORIENTATION
# =============================================================================

class LengthFilter:
    """Drops segments shorter than min_length or longer than max_length."""

    def __init__(self, min_length: float = POST_MIN_LENGTH, max_length: float = POST_MAX_LENGTH):
        self.min_length = min_length
        self.max_length = max_length

    def filter(self, segments: List[LineSegment]) -> Tuple[List[LineSegment], FilterStats]:
        kept = [s for s in segments if self.min_length <= s.length <= self.max_length]
        return kept, _stats(segments, kept, "length")


class OrientationFilter:
    """Drops segments that are neither horizontal nor vertical."""

    def __init__(self, angle_tolerance: float = ANGLE_TOLERANCE_RAD):
        self.angle_tolerance = angle_tolerance

    def filter(self, segments: List[LineSegment]) -> Tuple[List[LineSegment], FilterStats]:
        kept = [
            s for s in segments
            if s.orientation(self.angle_tolerance) != Orientation.DIAGONAL
        ]
        return kept, _stats(segments, kept, "orientation")


class OrientationSnapper:
    """
    Makes near-axis segments exactly axis-aligned.

    The off-axis coordinate of both endpoints is replaced by its average.
    """

    def __init__(self, angle_tolerance: float = ANGLE_TOLERANCE_RAD):
        self.angle_tolerance = angle_tolerance

    def snap(self, segment: LineSegment) -> LineSegment:
        orientation = segment.orientation(self.angle_tolerance)
        if orientation == Orientation.HORIZONTAL:
            y = segment.center_y
            return LineSegment(segment.x1, y, segment.x2, y, segment.score)
        if orientation == Orientation.VERTICAL:
            x = segment.center_x
            return LineSegment(x, segment.y1, x, segment.y2, segment.score)
        return segment

    def filter(self, segments: List[LineSegment]) -> Tuple[List[LineSegment], FilterStats]:
        snapped = [self.snap(s) for s in segments]
        return snapped, _stats(segments, snapped, "orientation_snap")


class GridSnapper:
    """Rounds endpoints to the nearest grid point; collapsed segments are dropped."""

    def __init__(self, grid_size: float = GRID_SIZE):
        self.grid_size = grid_size

    def _round(self, value: float) -> float:
        return round(value / self.grid_size) * self.grid_size

    def filter(self, segments: List[LineSegment]) -> Tuple[List[LineSegment], FilterStats]:
        snapped = []
        for s in segments:
            segment = make_segment(
                self._round(s.x1), self._round(s.y1),
                self._round(s.x2), self._round(s.y2),
                s.score,
            )
            if segment is not None:
                snapped.append(segment)
        return snapped, _stats(segments, snapped, "grid_snap")


# =============================================================================
# DUPLICATES AND SPACING
# =============================================================================

def endpoint_distance(seg_a: LineSegment, seg_b: LineSegment) -> float:
    """
    Sum of endpoint distances, minimized over reversal of seg_b.
    """
    forward = (
        math.hypot(seg_a.x1 - seg_b.x1, seg_a.y1 - seg_b.y1)
        + math.hypot(seg_a.x2 - seg_b.x2, seg_a.y2 - seg_b.y2)
    )
    backward = (
        math.hypot(seg_a.x1 - seg_b.x2, seg_a.y1 - seg_b.y2)
        + math.hypot(seg_a.x2 - seg_b.x1, seg_a.y2 - seg_b.y1)
    )
    return min(forward, backward)


class DuplicateFilter:
    """
    Collapses near-identical segments, keeping the highest score.

    Two segments are duplicates when the summed endpoint distance is at
    most twice the threshold.
    """

    def __init__(self, threshold: float = DUPLICATE_THRESHOLD):
        self.threshold = threshold

    def filter(self, segments: List[LineSegment]) -> Tuple[List[LineSegment], FilterStats]:
        ranked = sorted(range(len(segments)), key=lambda i: (-segments[i].score, i))
        kept: List[int] = []
        for i in ranked:
            if all(endpoint_distance(segments[i], segments[k]) > 2 * self.threshold for k in kept):
                kept.append(i)

        # Preserve input order among survivors
        result = [segments[i] for i in sorted(kept)]
        return result, _stats(segments, result, "duplicate")


class SpacingConstraintFilter:
    """
    Rejects segments whose nearest parallel neighbour is implausibly spaced.

    Only parallel neighbours that overlap along the segment's axis and do
    not lie on the same line are considered. Segments without such a
    neighbour are kept.
    """

    def __init__(
        self,
        min_spacing: float = MIN_WALL_SPACING,
        max_spacing: float = MAX_WALL_SPACING,
        angle_tolerance: float = ANGLE_TOLERANCE_RAD
    ):
        self.min_spacing = min_spacing
        self.max_spacing = max_spacing
        self.angle_tolerance = angle_tolerance

    def nearest_parallel_distance(self, segment: LineSegment, others: List[LineSegment]):
        nearest = None
        for other in others:
            if other is segment:
                continue
            if angle_difference(segment.angle, other.angle) >= self.angle_tolerance:
                continue
            if projected_gap(segment, other) > 0:
                continue
            distance = segment.line_distance_to_point(*other.midpoint)
            if distance < 1.0:
                continue
            if nearest is None or distance < nearest:
                nearest = distance
        return nearest

    def filter(self, segments: List[LineSegment]) -> Tuple[List[LineSegment], FilterStats]:
        kept = []
        for s in segments:
            nearest = self.nearest_parallel_distance(s, segments)
            if nearest is None or self.min_spacing <= nearest <= self.max_spacing:
                kept.append(s)
        return kept, _stats(segments, kept, "spacing")


# =============================================================================
# ISOLATION
# =============================================================================

class IsolationFilter:
    """
    Drops segments with no other segment near either endpoint.

    Distance is measured from each endpoint to the other segments' bodies,
    so T-junctions count as connections.
    """

    def __init__(self, connection_threshold: float = CONNECTION_THRESHOLD):
        self.connection_threshold = connection_threshold

    def filter(self, segments: List[LineSegment]) -> Tuple[List[LineSegment], FilterStats]:
        if len(segments) < 2:
            return [], _stats(segments, [], "isolated")

        lines = [LineString([s.start, s.end]) for s in segments]
        tree = STRtree(lines)

        kept = []
        for i, s in enumerate(segments):
            connected = False
            for endpoint in (Point(s.start), Point(s.end)):
                search_area = endpoint.buffer(self.connection_threshold)
                for j in tree.query(search_area):
                    j = int(j)
                    if j != i and lines[j].distance(endpoint) <= self.connection_threshold:
                        connected = True
                        break
                if connected:
                    break
            if connected:
                kept.append(s)

        return kept, _stats(segments, kept, "isolated")


# =============================================================================
# CLASSIFICATION
# =============================================================================

def distance_to_image_edge(x: float, y: float, width: float, height: float) -> float:
    """Distance from a point to the nearest image border."""
    return min(x, y, width - x, height - y)


class EdgeDistanceClassifier:
    """
    Splits walls into exterior and interior sets.

    A wall is exterior when its centre lies within edge_ratio * min(width,
    height) of an image border.
    """

    def __init__(self, edge_ratio: float = EXTERIOR_EDGE_RATIO):
        self.edge_ratio = edge_ratio

    def is_exterior(self, center_x: float, center_y: float, width: float, height: float) -> bool:
        threshold = self.edge_ratio * min(width, height)
        return distance_to_image_edge(center_x, center_y, width, height) < threshold

    def classify(
        self,
        segments: List[LineSegment],
        width: float,
        height: float
    ) -> Tuple[List[LineSegment], List[LineSegment]]:
        """
        Returns:
            Tuple of (exterior, interior)
        """
        exterior, interior = [], []
        for s in segments:
            if self.is_exterior(s.center_x, s.center_y, width, height):
                exterior.append(s)
            else:
                interior.append(s)
        return exterior, interior
