"""
Corner Detector Module

Harris corner detection used to offer snap targets while editing.
Runs independently of the wall pipeline.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..constants import (
    CORNER_NMS_RADIUS,
    HARRIS_K,
    HARRIS_THRESHOLD,
    HARRIS_WINDOW_RADIUS,
    MAX_CORNERS,
)
from ..exceptions import ConfigurationError
from ..image.loader import validate_image
from .preprocessor import to_grayscale

logger = logging.getLogger(__name__)


@dataclass
class CornerConfig:
    """Configuration for Harris corner detection."""
    window_radius: int = HARRIS_WINDOW_RADIUS
    k: float = HARRIS_K
    threshold: float = HARRIS_THRESHOLD
    nms_radius: int = CORNER_NMS_RADIUS
    max_corners: int = MAX_CORNERS

    def __post_init__(self):
        if self.window_radius < 1:
            raise ConfigurationError(f"window_radius must be >= 1: {self.window_radius}")
        if not 0 < self.k < 0.25:
            raise ConfigurationError(f"k must be in (0, 0.25): {self.k}")
        if self.nms_radius < 0:
            raise ConfigurationError(f"nms_radius must be >= 0: {self.nms_radius}")
        if self.max_corners < 1:
            raise ConfigurationError(f"max_corners must be >= 1: {self.max_corners}")


def harris_response(gray: np.ndarray, config: Optional[CornerConfig] = None) -> np.ndarray:
    """
    Harris response det(M) - k * trace(M)^2 per pixel.

    M is the structure tensor of unnormalized Sobel gradients summed over a
    (2r + 1) square window. Pixels closer than r + 1 to the border get 0.

    Args:
        gray: Grayscale image (0-255)
        config: Corner options

    Returns:
        float64 response map
    """
    config = config or CornerConfig()
    values = gray.astype(np.float64)

    ix = cv2.Sobel(values, cv2.CV_64F, 1, 0, ksize=3)
    iy = cv2.Sobel(values, cv2.CV_64F, 0, 1, ksize=3)

    size = 2 * config.window_radius + 1
    window = (size, size)
    sxx = cv2.boxFilter(ix * ix, -1, window, normalize=False)
    syy = cv2.boxFilter(iy * iy, -1, window, normalize=False)
    sxy = cv2.boxFilter(ix * iy, -1, window, normalize=False)

    det = sxx * syy - sxy * sxy
    trace = sxx + syy
    response = det - config.k * trace * trace

    margin = config.window_radius + 1
    response[:margin, :] = 0
    response[-margin:, :] = 0
    response[:, :margin] = 0
    response[:, -margin:] = 0
    return response


def detect_corners(
    image: np.ndarray,
    config: Optional[CornerConfig] = None
) -> List[Tuple[int, int]]:
    """
    Detect corner points.

    Local maxima above the threshold survive when no pixel within
    nms_radius has a strictly greater response. The strongest corners are
    returned first, capped at max_corners.

    Args:
        image: RGBA, RGB or grayscale image
        config: Corner options

    Returns:
        List of (x, y) pixel coordinates

    Raises:
        InvalidImageError: If the image is empty or malformed
    """
    validate_image(image)
    config = config or CornerConfig()

    response = harris_response(to_grayscale(image), config)

    size = 2 * config.nms_radius + 1
    local_max = cv2.dilate(response, np.ones((size, size), dtype=np.uint8))
    candidates = (response > config.threshold) & (response >= local_max)

    ys, xs = np.nonzero(candidates)
    strengths = response[ys, xs]
    order = np.argsort(-strengths, kind="stable")[:config.max_corners]

    corners = [(int(xs[i]), int(ys[i])) for i in order]
    logger.info(f"Corner detection: {len(corners)} corners ({len(xs)} candidates)")
    return corners
