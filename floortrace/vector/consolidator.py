"""
Segment Consolidator Module

Merges collinear segments and bridges wall interruptions (doors, windows)
either at the segment level or at the pixel level with separable closing.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from ..constants import (
    ANGLE_TOLERANCE_RAD,
    BRIDGE_KERNEL_SIZE,
    BRIDGE_SEGMENT_SCORE,
    CONSOLIDATE_BOTH,
    CONSOLIDATE_BRIDGE,
    CONSOLIDATE_MERGE,
    CONSOLIDATION_MODES,
    GAP_ALIGNMENT_TOLERANCE,
    GAP_FILL_ALIGNMENT_TOLERANCE,
    GAP_FILL_MAX_LENGTH,
    MAX_DOOR_WIDTH,
    MAX_WINDOW_GAP,
    MERGE_ANGLE_TOLERANCE,
    MERGE_MAX_DISTANCE,
    MERGE_MAX_GAP,
)
from ..exceptions import ConfigurationError
from .segment import LineSegment, Orientation, angle_difference, make_segment

logger = logging.getLogger(__name__)


@dataclass
class ConsolidationConfig:
    """Configuration for segment consolidation."""
    mode: str = CONSOLIDATE_MERGE
    # Collinear merge
    max_distance: float = MERGE_MAX_DISTANCE
    max_gap: float = MERGE_MAX_GAP
    angle_tolerance: float = MERGE_ANGLE_TOLERANCE
    # Gap fill
    enable_gap_fill: bool = True
    max_gap_length: float = GAP_FILL_MAX_LENGTH
    alignment_tolerance: float = GAP_FILL_ALIGNMENT_TOLERANCE
    # Door/window bridging
    max_door_width: float = MAX_DOOR_WIDTH
    max_window_gap: float = MAX_WINDOW_GAP
    bridge_score: float = BRIDGE_SEGMENT_SCORE
    # Pixel-level bridging
    enable_morphological_bridging: bool = False
    bridge_kernel: int = BRIDGE_KERNEL_SIZE

    def __post_init__(self):
        if self.mode not in CONSOLIDATION_MODES:
            raise ConfigurationError(f"mode must be one of {CONSOLIDATION_MODES}: {self.mode}")
        for name in ("max_distance", "max_gap", "max_gap_length", "alignment_tolerance"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0: {getattr(self, name)}")
        if not 0 < self.angle_tolerance < math.pi / 2:
            raise ConfigurationError(f"angle_tolerance must be in (0, pi/2): {self.angle_tolerance}")
        if self.max_window_gap > self.max_door_width:
            raise ConfigurationError(
                f"max_window_gap ({self.max_window_gap}) exceeds max_door_width ({self.max_door_width})"
            )
        if not 0.0 <= self.bridge_score <= 1.0:
            raise ConfigurationError(f"bridge_score must be in [0, 1]: {self.bridge_score}")
        if self.bridge_kernel < 1:
            raise ConfigurationError(f"bridge_kernel must be >= 1: {self.bridge_kernel}")


@dataclass
class ConsolidationStats:
    """Statistics from consolidation."""
    input_count: int = 0
    merged_count: int = 0
    gap_filled_count: int = 0
    bridges_added: int = 0
    output_count: int = 0


@dataclass
class WallGap:
    """An opening between two aligned wall segments."""
    first: LineSegment
    second: LineSegment
    size: float
    orientation: Orientation
    x1: float
    y1: float
    x2: float
    y2: float


class _DisjointSet:
    """Union-find over segment indices."""

    def __init__(self, size: int):
        self.parent = list(range(size))

    def find(self, i: int) -> int:
        while self.parent[i] != i:
            self.parent[i] = self.parent[self.parent[i]]
            i = self.parent[i]
        return i

    def union(self, a: int, b: int):
        root_a, root_b = self.find(a), self.find(b)
        if root_a != root_b:
            self.parent[max(root_a, root_b)] = min(root_a, root_b)

    def groups(self) -> List[List[int]]:
        grouped: Dict[int, List[int]] = {}
        for i in range(len(self.parent)):
            grouped.setdefault(self.find(i), []).append(i)
        return [grouped[key] for key in sorted(grouped)]


def _projection_interval(segment: LineSegment, cos_a: float, sin_a: float) -> Tuple[float, float]:
    p1 = segment.x1 * cos_a + segment.y1 * sin_a
    p2 = segment.x2 * cos_a + segment.y2 * sin_a
    return min(p1, p2), max(p1, p2)


def projected_gap(seg_a: LineSegment, seg_b: LineSegment) -> float:
    """
    Gap between two segments projected onto seg_a's direction.

    Returns:
        0 when the projections overlap or touch
    """
    cos_a, sin_a = math.cos(seg_a.angle), math.sin(seg_a.angle)
    a_min, a_max = _projection_interval(seg_a, cos_a, sin_a)
    b_min, b_max = _projection_interval(seg_b, cos_a, sin_a)
    return max(0.0, max(a_min, b_min) - min(a_max, b_max))


def are_collinear(
    seg_a: LineSegment,
    seg_b: LineSegment,
    max_distance: float = MERGE_MAX_DISTANCE,
    max_gap: float = MERGE_MAX_GAP,
    angle_tolerance: float = MERGE_ANGLE_TOLERANCE
) -> bool:
    """
    Check whether two segments lie on the same line.

    Requires similar angle, every endpoint within max_distance of the other
    segment's line, and a projected gap no larger than max_gap.
    """
    if angle_difference(seg_a.angle, seg_b.angle) > angle_tolerance:
        return False

    offsets = (
        seg_a.line_distance_to_point(seg_b.x1, seg_b.y1),
        seg_a.line_distance_to_point(seg_b.x2, seg_b.y2),
        seg_b.line_distance_to_point(seg_a.x1, seg_a.y1),
        seg_b.line_distance_to_point(seg_a.x2, seg_a.y2),
    )
    if max(offsets) > max_distance:
        return False

    return projected_gap(seg_a, seg_b) <= max_gap


def merge_segment_group(group: List[LineSegment]) -> LineSegment:
    """
    Merge collinear segments into one spanning their extremes.

    The line runs along the longest member's direction through the
    length-weighted mean of the midpoints. Score is the mean score.
    """
    if len(group) == 1:
        return group[0]

    reference = max(group, key=lambda s: s.length)
    cos_a, sin_a = math.cos(reference.angle), math.sin(reference.angle)

    total_length = sum(s.length for s in group)
    center_x = sum(s.center_x * s.length for s in group) / total_length
    center_y = sum(s.center_y * s.length for s in group) / total_length

    projections = []
    for s in group:
        for x, y in (s.start, s.end):
            projections.append((x - center_x) * cos_a + (y - center_y) * sin_a)
    t_min, t_max = min(projections), max(projections)

    score = sum(s.score for s in group) / len(group)
    return LineSegment(
        center_x + t_min * cos_a,
        center_y + t_min * sin_a,
        center_x + t_max * cos_a,
        center_y + t_max * sin_a,
        score,
    )


def merge_collinear_segments(
    segments: List[LineSegment],
    config: Optional[ConsolidationConfig] = None
) -> List[LineSegment]:
    """
    Merge collinear segments until no pair can be merged.

    Groups are the transitive closure of the collinear relation, so the
    output does not depend on input order.

    Args:
        segments: Input segments
        config: Consolidation options

    Returns:
        Merged segment list
    """
    config = config or ConsolidationConfig()
    current = list(segments)

    while len(current) > 1:
        groups = _DisjointSet(len(current))
        for i in range(len(current)):
            for j in range(i + 1, len(current)):
                if are_collinear(current[i], current[j], config.max_distance,
                                 config.max_gap, config.angle_tolerance):
                    groups.union(i, j)

        merged_groups = groups.groups()
        if len(merged_groups) == len(current):
            break
        current = [merge_segment_group([current[i] for i in g]) for g in merged_groups]

    if len(current) != len(segments):
        logger.debug(f"Merged collinear segments: {len(segments)} -> {len(current)}")
    return current


def _split_by_orientation(
    segments: List[LineSegment],
    tolerance: float = ANGLE_TOLERANCE_RAD
) -> Tuple[List[LineSegment], List[LineSegment], List[LineSegment]]:
    horizontal, vertical, diagonal = [], [], []
    for s in segments:
        orientation = s.orientation(tolerance)
        if orientation == Orientation.HORIZONTAL:
            horizontal.append(s)
        elif orientation == Orientation.VERTICAL:
            vertical.append(s)
        else:
            diagonal.append(s)
    return horizontal, vertical, diagonal


def _axis_span(segment: LineSegment, horizontal: bool) -> Tuple[float, float, float]:
    """Return (start, end, perpendicular position) along the segment's axis."""
    if horizontal:
        return min(segment.x1, segment.x2), max(segment.x1, segment.x2), segment.center_y
    return min(segment.y1, segment.y2), max(segment.y1, segment.y2), segment.center_x


def _chain_axis_group(
    group: List[LineSegment],
    horizontal: bool,
    alignment_tolerance: float,
    max_gap_length: float
) -> List[LineSegment]:
    spans = [_axis_span(s, horizontal) for s in group]
    chains = _DisjointSet(len(group))

    for i in range(len(group)):
        start_i, end_i, pos_i = spans[i]
        for j in range(i + 1, len(group)):
            start_j, end_j, pos_j = spans[j]
            if abs(pos_i - pos_j) > alignment_tolerance:
                continue
            gap = max(start_i, start_j) - min(end_i, end_j)
            if gap <= max_gap_length:
                chains.union(i, j)

    result = []
    for chain in chains.groups():
        if len(chain) == 1:
            result.append(group[chain[0]])
            continue

        start = min(spans[i][0] for i in chain)
        end = max(spans[i][1] for i in chain)
        position = sum(spans[i][2] for i in chain) / len(chain)
        score = sum(group[i].score for i in chain) / len(chain)

        if horizontal:
            merged = make_segment(start, position, end, position, score)
        else:
            merged = make_segment(position, start, position, end, score)
        if merged is not None:
            result.append(merged)

    return result


def fill_gaps_in_segments(
    segments: List[LineSegment],
    config: Optional[ConsolidationConfig] = None
) -> List[LineSegment]:
    """
    Chain aligned horizontal/vertical segments across gaps.

    Each chain becomes one axis-aligned segment at the chain's mean
    perpendicular position. Diagonal segments pass through unchanged.

    Args:
        segments: Input segments
        config: Consolidation options

    Returns:
        Segment list with gaps bridged
    """
    config = config or ConsolidationConfig()
    horizontal, vertical, diagonal = _split_by_orientation(segments)

    filled = (
        _chain_axis_group(horizontal, True, config.alignment_tolerance, config.max_gap_length)
        + _chain_axis_group(vertical, False, config.alignment_tolerance, config.max_gap_length)
        + diagonal
    )

    if len(filled) != len(segments):
        logger.debug(f"Gap fill: {len(segments)} -> {len(filled)} segments")
    return filled


def analyze_gap(
    seg_a: LineSegment,
    seg_b: LineSegment,
    alignment_tolerance: float = GAP_ALIGNMENT_TOLERANCE
) -> Optional[WallGap]:
    """
    Describe the opening between two parallel, aligned segments.

    Returns:
        WallGap, or None if the segments are not parallel, not aligned
        or overlap along their axis
    """
    if angle_difference(seg_a.angle, seg_b.angle) > ANGLE_TOLERANCE_RAD:
        return None

    orientation = seg_a.orientation()
    if orientation == Orientation.DIAGONAL:
        return None
    horizontal = orientation == Orientation.HORIZONTAL

    start_a, end_a, pos_a = _axis_span(seg_a, horizontal)
    start_b, end_b, pos_b = _axis_span(seg_b, horizontal)

    if abs(pos_a - pos_b) > alignment_tolerance:
        return None

    if end_a <= start_b:
        gap_start, gap_end = end_a, start_b
    elif end_b <= start_a:
        gap_start, gap_end = end_b, start_a
    else:
        return None

    position = (pos_a + pos_b) / 2
    if horizontal:
        x1, y1, x2, y2 = gap_start, position, gap_end, position
    else:
        x1, y1, x2, y2 = position, gap_start, position, gap_end

    return WallGap(
        first=seg_a,
        second=seg_b,
        size=gap_end - gap_start,
        orientation=orientation,
        x1=x1, y1=y1, x2=x2, y2=y2,
    )


def find_wall_gaps(
    segments: List[LineSegment],
    max_gap_size: float = MAX_DOOR_WIDTH
) -> List[WallGap]:
    """
    Find door/window sized openings between aligned segments.

    Args:
        segments: Wall segments
        max_gap_size: Largest opening considered

    Returns:
        List of WallGap
    """
    gaps = []
    for i in range(len(segments)):
        for j in range(i + 1, len(segments)):
            gap = analyze_gap(segments[i], segments[j])
            if gap is not None and 0 < gap.size <= max_gap_size:
                gaps.append(gap)
    return gaps


def bridge_wall_gaps(
    segments: List[LineSegment],
    config: Optional[ConsolidationConfig] = None
) -> Tuple[List[LineSegment], List[WallGap]]:
    """
    Add bridging segments across small openings.

    Openings up to max_door_width are detected; those up to max_window_gap
    receive a bridge with the configured score. Only the smallest opening
    next to each segment end is bridged.

    Args:
        segments: Wall segments
        config: Consolidation options

    Returns:
        Tuple of (segments plus bridges, detected gaps)
    """
    config = config or ConsolidationConfig()
    gaps = find_wall_gaps(segments, config.max_door_width)

    bridges = []
    used_ends = set()
    for gap in sorted(gaps, key=lambda g: g.size):
        if gap.size > config.max_window_gap:
            continue
        ends = ((gap.x1, gap.y1), (gap.x2, gap.y2))
        if any(end in used_ends for end in ends):
            continue
        bridge = make_segment(gap.x1, gap.y1, gap.x2, gap.y2, config.bridge_score)
        if bridge is not None:
            bridges.append(bridge)
            used_ends.update(ends)

    logger.info(f"Gap bridging: {len(gaps)} openings found, {len(bridges)} bridged")
    return list(segments) + bridges, gaps


def morphological_gap_bridging(
    binary: np.ndarray,
    kernel_size: int = BRIDGE_KERNEL_SIZE
) -> np.ndarray:
    """
    Bridge openings at the pixel level with separable closing.

    A horizontal 1 x k closing is applied first, then a vertical k x 1 one.

    Args:
        binary: Binary mask (1 = ink)
        kernel_size: Closing length in pixels

    Returns:
        New bridged mask
    """
    mask = binary.astype(np.uint8)
    horizontal = np.ones((1, kernel_size), dtype=np.uint8)
    vertical = np.ones((kernel_size, 1), dtype=np.uint8)

    bridged = cv2.morphologyEx(mask, cv2.MORPH_CLOSE, horizontal)
    bridged = cv2.morphologyEx(bridged, cv2.MORPH_CLOSE, vertical)
    return bridged


def consolidate_segments(
    segments: List[LineSegment],
    config: Optional[ConsolidationConfig] = None
) -> Tuple[List[LineSegment], ConsolidationStats]:
    """
    Run the configured consolidation passes.

    Args:
        segments: Segments from the line extractor
        config: Consolidation options

    Returns:
        Tuple of (consolidated segments, ConsolidationStats)
    """
    config = config or ConsolidationConfig()
    stats = ConsolidationStats(input_count=len(segments))

    current = merge_collinear_segments(segments, config)
    stats.merged_count = len(segments) - len(current)

    if config.mode in (CONSOLIDATE_MERGE, CONSOLIDATE_BOTH) and config.enable_gap_fill:
        before = len(current)
        current = fill_gaps_in_segments(current, config)
        stats.gap_filled_count = before - len(current)

    if config.mode in (CONSOLIDATE_BRIDGE, CONSOLIDATE_BOTH):
        before = len(current)
        current, _ = bridge_wall_gaps(current, config)
        stats.bridges_added = len(current) - before

    stats.output_count = len(current)
    logger.info(
        f"Consolidation: {stats.input_count} -> {stats.output_count} segments "
        f"(merged {stats.merged_count}, gap-filled {stats.gap_filled_count}, "
        f"bridges {stats.bridges_added})"
    )
    return current, stats
