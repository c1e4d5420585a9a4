# Image input module

from .loader import (
    ImageReadError,
    InvalidImageError,
    load_image,
    image_from_bytes,
    image_from_array,
    validate_image,
)

__all__ = [
    "ImageReadError",
    "InvalidImageError",
    "load_image",
    "image_from_bytes",
    "image_from_array",
    "validate_image",
]
