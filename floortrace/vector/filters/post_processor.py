"""
Segment Post-Processor

Runs the post-processing filters in a fixed order:
1. LengthFilter
2. OrientationFilter
3. OrientationSnapper
4. GridSnapper
5. DuplicateFilter
6. SpacingConstraintFilter (off by default)
7. IsolationFilter
8. EdgeDistanceClassifier

Each stage can be disabled through PostProcessConfig, and statistics are
kept for every stage that ran.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

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
from ...exceptions import ConfigurationError
from ..segment import LineSegment, Orientation
from .segment_filters import (
    DuplicateFilter,
    EdgeDistanceClassifier,
    FilterStats,
    GridSnapper,
    IsolationFilter,
    LengthFilter,
    OrientationFilter,
    OrientationSnapper,
    SpacingConstraintFilter,
)

logger = logging.getLogger(__name__)


@dataclass
class PostProcessConfig:
    """Configuration for segment post-processing."""
    # Enable/disable individual stages
    enable_length: bool = True
    enable_orientation: bool = True
    enable_orientation_snap: bool = True
    enable_grid_snap: bool = True
    enable_duplicates: bool = True
    enable_spacing: bool = False
    enable_isolation: bool = True
    enable_classification: bool = True

    min_length: float = POST_MIN_LENGTH
    max_length: float = POST_MAX_LENGTH
    angle_tolerance: float = ANGLE_TOLERANCE_RAD
    grid_size: float = GRID_SIZE
    duplicate_threshold: float = DUPLICATE_THRESHOLD
    connection_threshold: float = CONNECTION_THRESHOLD
    min_wall_spacing: float = MIN_WALL_SPACING
    max_wall_spacing: float = MAX_WALL_SPACING
    edge_ratio: float = EXTERIOR_EDGE_RATIO

    def __post_init__(self):
        if self.min_length < 0:
            raise ConfigurationError(f"min_length must be >= 0: {self.min_length}")
        if self.max_length < self.min_length:
            raise ConfigurationError(
                f"max_length ({self.max_length}) is below min_length ({self.min_length})"
            )
        if not 0 < self.angle_tolerance < math.pi / 4:
            raise ConfigurationError(f"angle_tolerance must be in (0, pi/4): {self.angle_tolerance}")
        if self.grid_size <= 0:
            raise ConfigurationError(f"grid_size must be > 0: {self.grid_size}")
        if self.duplicate_threshold < 0 or self.connection_threshold < 0:
            raise ConfigurationError("duplicate_threshold and connection_threshold must be >= 0")
        if self.min_wall_spacing > self.max_wall_spacing:
            raise ConfigurationError(
                f"min_wall_spacing ({self.min_wall_spacing}) exceeds max_wall_spacing ({self.max_wall_spacing})"
            )
        if not 0 <= self.edge_ratio <= 0.5:
            raise ConfigurationError(f"edge_ratio must be in [0, 0.5]: {self.edge_ratio}")


@dataclass
class PostProcessingResult:
    """Post-processed segments partitioned by orientation and location."""
    all: List[LineSegment] = field(default_factory=list)
    horizontal: List[LineSegment] = field(default_factory=list)
    vertical: List[LineSegment] = field(default_factory=list)
    exterior: List[LineSegment] = field(default_factory=list)
    interior: List[LineSegment] = field(default_factory=list)
    stage_stats: Dict[str, FilterStats] = field(default_factory=dict)

    def summary(self) -> str:
        """Generate a summary string of post-processing stats."""
        total_input = next(iter(self.stage_stats.values())).total_input if self.stage_stats else len(self.all)
        lines = [
            f"Post-processing: {total_input} -> {len(self.all)} segments "
            f"({len(self.horizontal)} H, {len(self.vertical)} V, "
            f"{len(self.exterior)} exterior, {len(self.interior)} interior)"
        ]
        for stage_name, stats in self.stage_stats.items():
            if stats.removed:
                lines.append(f"  {stage_name}: -{stats.removed} ({stats.removal_rate:.1%})")
        return "\n".join(lines)


class SegmentPostProcessor:
    """
    Configurable post-processing pipeline for wall segments.

    Usage:
        processor = SegmentPostProcessor(PostProcessConfig(grid_size=10))
        result = processor.process(segments, width, height)
    """

    def __init__(self, config: Optional[PostProcessConfig] = None):
        self.config = config or PostProcessConfig()
        self._stages = []
        self._classifier = None
        self._setup_filters()

    def _setup_filters(self) -> None:
        """Instantiate the enabled filters in execution order."""
        cfg = self.config
        candidates = [
            ("length", cfg.enable_length,
             lambda: LengthFilter(cfg.min_length, cfg.max_length)),
            ("orientation", cfg.enable_orientation,
             lambda: OrientationFilter(cfg.angle_tolerance)),
            ("orientation_snap", cfg.enable_orientation_snap,
             lambda: OrientationSnapper(cfg.angle_tolerance)),
            ("grid_snap", cfg.enable_grid_snap,
             lambda: GridSnapper(cfg.grid_size)),
            ("duplicate", cfg.enable_duplicates,
             lambda: DuplicateFilter(cfg.duplicate_threshold)),
            ("spacing", cfg.enable_spacing,
             lambda: SpacingConstraintFilter(cfg.min_wall_spacing, cfg.max_wall_spacing,
                                             cfg.angle_tolerance)),
            ("isolated", cfg.enable_isolation,
             lambda: IsolationFilter(cfg.connection_threshold)),
        ]
        self._stages = [(name, factory()) for name, enabled, factory in candidates if enabled]

        if cfg.enable_classification:
            self._classifier = EdgeDistanceClassifier(cfg.edge_ratio)

        logger.debug(f"Post-processor stages: {[name for name, _ in self._stages]}")

    def process(
        self,
        segments: List[LineSegment],
        width: float,
        height: float
    ) -> PostProcessingResult:
        """
        Run all enabled stages.

        Args:
            segments: Consolidated segments
            width: Image width in pixels
            height: Image height in pixels

        Returns:
            PostProcessingResult
        """
        result = PostProcessingResult()
        current = list(segments)

        for name, stage in self._stages:
            current, stats = stage.filter(current)
            result.stage_stats[name] = stats

        result.all = current
        for s in current:
            orientation = s.orientation(self.config.angle_tolerance)
            if orientation == Orientation.HORIZONTAL:
                result.horizontal.append(s)
            elif orientation == Orientation.VERTICAL:
                result.vertical.append(s)

        if self._classifier is not None:
            result.exterior, result.interior = self._classifier.classify(current, width, height)
        else:
            result.interior = list(current)

        logger.info(result.summary())
        return result


def post_process_segments(
    segments: List[LineSegment],
    width: float,
    height: float,
    config: Optional[PostProcessConfig] = None
) -> PostProcessingResult:
    """Convenience wrapper around SegmentPostProcessor."""
    return SegmentPostProcessor(config).process(segments, width, height)
