"""
Image Loader Module

Functions for reading floor plan images and validating pixel buffers
before they enter the analysis pipeline.
"""

import io
import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..exceptions import FloorTraceError

logger = logging.getLogger(__name__)


class ImageReadError(FloorTraceError):
    """Raised when an image file cannot be read."""
    pass


class InvalidImageError(FloorTraceError):
    """Raised when a pixel buffer is empty or malformed."""
    pass


def load_image(filepath: Union[str, Path]) -> np.ndarray:
    """
    Load an image file as an RGBA array.

    Args:
        filepath: Path to a raster image (PNG, JPEG, TIFF, ...)

    Returns:
        uint8 array of shape (height, width, 4)

    Raises:
        ImageReadError: If the file is missing or cannot be decoded
        InvalidImageError: If the decoded image has zero size
    """
    path = Path(filepath)

    if not path.exists():
        raise ImageReadError(f"File not found: {filepath}")

    if not path.is_file():
        raise ImageReadError(f"Path is not a file: {filepath}")

    try:
        with Image.open(path) as img:
            rgba = np.array(img.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageReadError(f"Cannot decode image (may be corrupted): {filepath}. Error: {e}")

    validate_image(rgba)

    height, width = rgba.shape[:2]
    logger.info(f"Loaded image: {filepath} ({width}x{height})")
    return rgba


def image_from_bytes(data: bytes) -> np.ndarray:
    """
    Decode an in-memory encoded image (e.g. clipboard or upload) to RGBA.

    Raises:
        ImageReadError: If the bytes cannot be decoded
    """
    if not data:
        raise ImageReadError("Empty image data")

    try:
        with Image.open(io.BytesIO(data)) as img:
            rgba = np.array(img.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageReadError(f"Cannot decode image data: {e}")

    validate_image(rgba)
    return rgba


def validate_image(image: np.ndarray) -> Tuple[int, int]:
    """
    Check that a pixel buffer can be processed.

    Accepts grayscale (H, W), RGB (H, W, 3) or RGBA (H, W, 4) arrays.

    Args:
        image: Pixel buffer

    Returns:
        Tuple of (width, height)

    Raises:
        InvalidImageError: If the buffer is None, zero-size or malformed
    """
    if image is None:
        raise InvalidImageError("Image is None")

    if not isinstance(image, np.ndarray):
        raise InvalidImageError(f"Expected numpy array, got {type(image).__name__}")

    if image.ndim not in (2, 3):
        raise InvalidImageError(f"Image must be 2D or 3D, got {image.ndim} dimensions")

    if image.ndim == 3 and image.shape[2] not in (1, 3, 4):
        raise InvalidImageError(f"Unsupported channel count: {image.shape[2]}")

    height, width = image.shape[:2]
    if width == 0 or height == 0:
        raise InvalidImageError(f"Image has zero size: {width}x{height}")

    if not (np.issubdtype(image.dtype, np.integer) or np.issubdtype(image.dtype, np.floating)):
        raise InvalidImageError(f"Unsupported pixel type: {image.dtype}")

    return width, height


def image_from_array(image: np.ndarray) -> np.ndarray:
    """
    Normalize a decoded pixel buffer to uint8 RGBA.

    Args:
        image: Grayscale, RGB or RGBA array. Float buffers whose values
            all lie in [0, 1] are scaled to 0-255.

    Returns:
        New uint8 array of shape (height, width, 4)
    """
    validate_image(image)

    if np.issubdtype(image.dtype, np.floating) and image.max() <= 1.0:
        image = np.rint(image * 255.0)

    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    if image.ndim == 2:
        image = image[:, :, np.newaxis]

    channels = image.shape[2]
    if channels == 1:
        rgb = np.repeat(image, 3, axis=2)
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
        return np.concatenate([rgb, alpha], axis=2)
    if channels == 3:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
        return np.concatenate([image, alpha], axis=2)
    return image.copy()
