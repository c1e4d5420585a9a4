"""
floortrace - wall, perimeter and room detection for floor plan images.
"""

__version__ = "0.1.0"

from .exceptions import FloorTraceError, ConfigurationError
from .image.loader import ImageReadError, InvalidImageError, load_image
from .detection.wall_detector import (
    DetectionConfig,
    DetectionResult,
    WallDetector,
    detect_walls,
    detect_walls_async,
)

__all__ = [
    "__version__",
    "FloorTraceError",
    "ConfigurationError",
    "ImageReadError",
    "InvalidImageError",
    "load_image",
    "DetectionConfig",
    "DetectionResult",
    "WallDetector",
    "detect_walls",
    "detect_walls_async",
]
