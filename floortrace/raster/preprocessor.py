"""
Image Preprocessor Module

Turns a floor plan raster into a binary ink mask (1 = ink, 0 = paper).
Each step is toggled through PreprocessConfig.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import cv2
import numpy as np

from ..constants import (
    ADAPTIVE_GAUSSIAN,
    ADAPTIVE_MEAN,
    DEFAULT_ADAPTIVE_C,
    DEFAULT_ADAPTIVE_WINDOW,
    DEFAULT_CLOSING_KERNEL,
    DEFAULT_GLOBAL_THRESHOLD,
    DEFAULT_MIN_COMPONENT_SIZE,
    DEFAULT_THRESHOLD_METHOD,
    THRESHOLD_ADAPTIVE,
    THRESHOLD_GLOBAL,
    THRESHOLD_METHODS,
    THRESHOLD_OTSU,
)
from ..exceptions import ConfigurationError
from ..image.loader import validate_image

logger = logging.getLogger(__name__)


@dataclass
class PreprocessConfig:
    """Configuration for preprocessing."""
    threshold_method: str = DEFAULT_THRESHOLD_METHOD
    global_threshold: int = DEFAULT_GLOBAL_THRESHOLD
    adaptive_window: int = DEFAULT_ADAPTIVE_WINDOW
    adaptive_c: float = DEFAULT_ADAPTIVE_C
    adaptive_method: str = ADAPTIVE_GAUSSIAN
    use_closing: bool = True
    closing_kernel: int = DEFAULT_CLOSING_KERNEL
    remove_noise: bool = True
    min_component_size: int = DEFAULT_MIN_COMPONENT_SIZE

    def __post_init__(self):
        if self.threshold_method not in THRESHOLD_METHODS:
            raise ConfigurationError(
                f"threshold_method must be one of {THRESHOLD_METHODS}, got '{self.threshold_method}'"
            )
        if not 0 <= self.global_threshold <= 255:
            raise ConfigurationError(f"global_threshold must be 0-255: {self.global_threshold}")
        if self.adaptive_window < 3 or self.adaptive_window % 2 == 0:
            raise ConfigurationError(f"adaptive_window must be odd and >= 3: {self.adaptive_window}")
        if self.adaptive_method not in (ADAPTIVE_GAUSSIAN, ADAPTIVE_MEAN):
            raise ConfigurationError(f"Unknown adaptive_method: {self.adaptive_method}")
        if self.closing_kernel < 1:
            raise ConfigurationError(f"closing_kernel must be >= 1: {self.closing_kernel}")
        if self.min_component_size < 0:
            raise ConfigurationError(f"min_component_size must be >= 0: {self.min_component_size}")


@dataclass
class PreprocessingResult:
    """Result of image preprocessing."""
    binary: np.ndarray
    grayscale: np.ndarray
    steps_applied: List[str] = field(default_factory=list)
    threshold: Optional[float] = None

    @property
    def ink_ratio(self) -> float:
        """Fraction of pixels marked as ink."""
        if self.binary.size == 0:
            return 0.0
        return float(np.count_nonzero(self.binary)) / self.binary.size


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert image to luminance-weighted grayscale.

    Alpha is ignored.

    Args:
        image: RGBA, RGB or grayscale image

    Returns:
        uint8 grayscale image
    """
    if image.ndim == 2:
        return image.astype(np.uint8, copy=True)
    if image.shape[2] == 1:
        return image[:, :, 0].astype(np.uint8, copy=True)
    if image.shape[2] == 4:
        return cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_RGBA2GRAY)
    return cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_RGB2GRAY)


def global_threshold(gray: np.ndarray, threshold: int = DEFAULT_GLOBAL_THRESHOLD) -> np.ndarray:
    """Mark pixels darker than a fixed threshold as ink."""
    return (gray < threshold).astype(np.uint8)


def compute_otsu_threshold(gray: np.ndarray) -> float:
    """
    Find the threshold that maximizes inter-class variance.

    Args:
        gray: uint8 grayscale image

    Returns:
        Threshold value in 0-255
    """
    threshold, _ = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return float(threshold)


def otsu_threshold(gray: np.ndarray) -> np.ndarray:
    """Binarize with an automatically chosen Otsu threshold."""
    threshold = compute_otsu_threshold(gray)
    return (gray <= threshold).astype(np.uint8)


def adaptive_threshold(
    gray: np.ndarray,
    window: int = DEFAULT_ADAPTIVE_WINDOW,
    c: float = DEFAULT_ADAPTIVE_C,
    method: str = ADAPTIVE_GAUSSIAN
) -> np.ndarray:
    """
    Binarize against a local-window mean.

    A pixel is ink when it is darker than its local mean minus c.
    Near the border the mean only covers in-bounds pixels.

    Args:
        gray: Grayscale image
        window: Odd window size
        c: Constant subtracted from the local mean
        method: "gaussian" (sigma = window / 6) or "mean"

    Returns:
        Binary mask (1 = ink)
    """
    values = gray.astype(np.float32)
    ones = np.ones_like(values)

    if method == ADAPTIVE_MEAN:
        total = cv2.boxFilter(values, -1, (window, window), normalize=False,
                              borderType=cv2.BORDER_CONSTANT)
        weight = cv2.boxFilter(ones, -1, (window, window), normalize=False,
                               borderType=cv2.BORDER_CONSTANT)
    else:
        sigma = window / 6.0
        total = cv2.GaussianBlur(values, (window, window), sigma,
                                 borderType=cv2.BORDER_CONSTANT)
        weight = cv2.GaussianBlur(ones, (window, window), sigma,
                                  borderType=cv2.BORDER_CONSTANT)

    local_mean = total / np.maximum(weight, 1e-6)
    return (values < local_mean - c).astype(np.uint8)


def dilate(binary: np.ndarray, kernel_size: int) -> np.ndarray:
    """Grow ink with a square kernel."""
    kernel = np.ones((kernel_size, kernel_size), dtype=np.uint8)
    return cv2.dilate(binary, kernel)


def erode(binary: np.ndarray, kernel_size: int) -> np.ndarray:
    """Shrink ink with a square kernel."""
    kernel = np.ones((kernel_size, kernel_size), dtype=np.uint8)
    return cv2.erode(binary, kernel)


def morphological_close(binary: np.ndarray, kernel_size: int = DEFAULT_CLOSING_KERNEL) -> np.ndarray:
    """
    Close small gaps in ink (dilate then erode).

    Args:
        binary: Binary mask
        kernel_size: Square kernel size

    Returns:
        New closed mask
    """
    return erode(dilate(binary, kernel_size), kernel_size)


def remove_small_components(
    binary: np.ndarray,
    min_size: int = DEFAULT_MIN_COMPONENT_SIZE
) -> np.ndarray:
    """
    Remove 4-connected ink components smaller than min_size pixels.

    Args:
        binary: Binary mask
        min_size: Minimum component size to keep

    Returns:
        New mask without the small components
    """
    num_labels, labels, stats, _ = cv2.connectedComponentsWithStats(
        binary.astype(np.uint8), connectivity=4
    )

    keep = stats[:, cv2.CC_STAT_AREA] >= min_size
    keep[0] = False  # background

    removed = int(np.count_nonzero(~keep[1:]))
    if removed:
        logger.debug(f"Removed {removed}/{num_labels - 1} components below {min_size} px")

    return keep[labels].astype(np.uint8)


def binarize(gray: np.ndarray, config: PreprocessConfig) -> np.ndarray:
    """Binarize a grayscale image with the configured method."""
    if config.threshold_method == THRESHOLD_GLOBAL:
        return global_threshold(gray, config.global_threshold)
    if config.threshold_method == THRESHOLD_OTSU:
        return otsu_threshold(gray)
    return adaptive_threshold(gray, config.adaptive_window, config.adaptive_c, config.adaptive_method)


def preprocess_image(
    image: np.ndarray,
    config: Optional[PreprocessConfig] = None
) -> PreprocessingResult:
    """
    Full preprocessing pipeline.

    Args:
        image: RGBA, RGB or grayscale floor plan image
        config: Preprocessing options (defaults if None)

    Returns:
        PreprocessingResult with binary mask and grayscale image

    Raises:
        InvalidImageError: If the image is empty or malformed
    """
    validate_image(image)
    config = config or PreprocessConfig()
    steps = []

    gray = to_grayscale(image)
    steps.append("grayscale")

    threshold = None
    if config.threshold_method == THRESHOLD_GLOBAL:
        threshold = float(config.global_threshold)
    elif config.threshold_method == THRESHOLD_OTSU:
        threshold = compute_otsu_threshold(gray)

    binary = binarize(gray, config)
    steps.append(f"binarize_{config.threshold_method}")

    if config.use_closing and config.closing_kernel > 1:
        binary = morphological_close(binary, config.closing_kernel)
        steps.append("closing")

    if config.remove_noise and config.min_component_size > 0:
        binary = remove_small_components(binary, config.min_component_size)
        steps.append("denoise")

    logger.info(f"Preprocessing complete: {', '.join(steps)}")

    return PreprocessingResult(
        binary=binary,
        grayscale=gray,
        steps_applied=steps,
        threshold=threshold,
    )
