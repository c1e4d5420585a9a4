# Vector (line segment) processing module

from .segment import (
    Orientation,
    LineSegment,
    Intersection,
    angle_difference,
    make_segment,
)

from .line_extractor import (
    LineExtractionConfig,
    compute_gradients,
    non_maximum_suppression,
    trace_chains,
    fit_line,
    sample_line_score,
    detect_line_segments,
)

from .consolidator import (
    ConsolidationConfig,
    ConsolidationStats,
    WallGap,
    are_collinear,
    merge_segment_group,
    merge_collinear_segments,
    fill_gaps_in_segments,
    analyze_gap,
    find_wall_gaps,
    bridge_wall_gaps,
    morphological_gap_bridging,
    consolidate_segments,
)

from .scanline_detector import (
    DetectedLine,
    detect_scan_lines,
    merge_parallel_lines,
    scan_line_perimeter_vertices,
)

from .snapping import (
    line_intersection,
    find_intersections,
    find_nearest_point,
    snap_to_nearest_line,
    snap_edge_to_lines,
    apply_secondary_alignment,
)

__all__ = [
    # Segment types
    "Orientation",
    "LineSegment",
    "Intersection",
    "angle_difference",
    "make_segment",
    # Line extraction
    "LineExtractionConfig",
    "compute_gradients",
    "non_maximum_suppression",
    "trace_chains",
    "fit_line",
    "sample_line_score",
    "detect_line_segments",
    # Consolidation
    "ConsolidationConfig",
    "ConsolidationStats",
    "WallGap",
    "are_collinear",
    "merge_segment_group",
    "merge_collinear_segments",
    "fill_gaps_in_segments",
    "analyze_gap",
    "find_wall_gaps",
    "bridge_wall_gaps",
    "morphological_gap_bridging",
    "consolidate_segments",
    # Scan lines
    "DetectedLine",
    "detect_scan_lines",
    "merge_parallel_lines",
    "scan_line_perimeter_vertices",
    # Snapping
    "line_intersection",
    "find_intersections",
    "find_nearest_point",
    "snap_to_nearest_line",
    "snap_edge_to_lines",
    "apply_secondary_alignment",
]
