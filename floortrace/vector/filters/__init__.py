# Segment post-processing filters

from .segment_filters import (
    FilterStats,
    LengthFilter,
    OrientationFilter,
    OrientationSnapper,
    GridSnapper,
    DuplicateFilter,
    SpacingConstraintFilter,
    IsolationFilter,
    EdgeDistanceClassifier,
    endpoint_distance,
    distance_to_image_edge,
)

from .post_processor import (
    PostProcessConfig,
    PostProcessingResult,
    SegmentPostProcessor,
    post_process_segments,
)

__all__ = [
    # Filters
    "FilterStats",
    "LengthFilter",
    "OrientationFilter",
    "OrientationSnapper",
    "GridSnapper",
    "DuplicateFilter",
    "SpacingConstraintFilter",
    "IsolationFilter",
    "EdgeDistanceClassifier",
    "endpoint_distance",
    "distance_to_image_edge",
    # Pipeline
    "PostProcessConfig",
    "PostProcessingResult",
    "SegmentPostProcessor",
    "post_process_segments",
]
