"""
Wall Centerline Module

Skeletonization and distance-transform helpers used to estimate
wall thickness and wall centre lines from a binary mask.
"""

import logging

import cv2
import numpy as np
from skimage.morphology import skeletonize

from ..constants import DEFAULT_WALL_THICKNESS

logger = logging.getLogger(__name__)


def extract_skeleton(binary: np.ndarray) -> np.ndarray:
    """
    Thin ink to one-pixel-wide centre lines.

    Args:
        binary: Binary mask (1 = ink)

    Returns:
        uint8 skeleton mask
    """
    return skeletonize(binary.astype(bool)).astype(np.uint8)


def distance_transform(binary: np.ndarray) -> np.ndarray:
    """Euclidean distance from each ink pixel to the nearest paper pixel."""
    return cv2.distanceTransform(binary.astype(np.uint8), cv2.DIST_L2, 5)


def extract_wall_boundaries(binary: np.ndarray) -> np.ndarray:
    """
    Ink pixels with at least one 4-connected paper neighbour.

    Args:
        binary: Binary mask

    Returns:
        uint8 boundary mask
    """
    ink = binary.astype(np.uint8)
    cross = cv2.getStructuringElement(cv2.MORPH_CROSS, (3, 3))
    interior = cv2.erode(ink, cross, borderType=cv2.BORDER_CONSTANT, borderValue=0)
    return (ink & (1 - interior)).astype(np.uint8)


def estimate_wall_thickness(
    binary: np.ndarray,
    default: float = DEFAULT_WALL_THICKNESS
) -> float:
    """
    Estimate typical wall thickness in pixels.

    Twice the median distance-to-paper sampled along the skeleton.

    Args:
        binary: Binary mask
        default: Returned when the mask holds no ink

    Returns:
        Estimated thickness
    """
    skeleton = extract_skeleton(binary)
    if not skeleton.any():
        logger.debug(f"No skeleton pixels, using default wall thickness {default}")
        return float(default)

    distances = distance_transform(binary)[skeleton.astype(bool)]
    thickness = float(2.0 * np.median(distances))
    logger.debug(f"Estimated wall thickness: {thickness:.1f} px from {distances.size} skeleton px")
    return max(thickness, 1.0)
