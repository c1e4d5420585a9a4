# Detection module - wall detection orchestration and fallback chains

from .wall_classifier import (
    walls_from_segments,
    detect_wall_components,
    split_by_orientation,
    classify_walls,
)

from .fallbacks import (
    PerimeterConfig,
    RoomBoxResult,
    perimeter_from_scan_lines,
    detect_perimeter,
    find_room_box,
)

from .wall_detector import (
    SEGMENTATION_LINES,
    SEGMENTATION_COMPONENTS,
    DetectionObserver,
    LoggingObserver,
    DetectionConfig,
    DetectionResult,
    WallDetector,
    detect_walls,
    detect_walls_async,
)

__all__ = [
    # Wall classification
    "walls_from_segments",
    "detect_wall_components",
    "split_by_orientation",
    "classify_walls",
    # Fallback chains
    "PerimeterConfig",
    "RoomBoxResult",
    "perimeter_from_scan_lines",
    "detect_perimeter",
    "find_room_box",
    # Orchestration
    "SEGMENTATION_LINES",
    "SEGMENTATION_COMPONENTS",
    "DetectionObserver",
    "LoggingObserver",
    "DetectionConfig",
    "DetectionResult",
    "WallDetector",
    "detect_walls",
    "detect_walls_async",
]
