"""
Room Box Module

Finds the rectangle of a room around an OCR label, either by flood
filling the open space around the label or by searching for the wall
combination that encloses it.
"""

import itertools
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..constants import (
    FLOOD_FILL_CAP_RATIO,
    MAX_ROOM_ASPECT_RATIO,
    MIN_ROOM_SIZE,
    ROOM_CANDIDATES_PER_SIDE,
    ROOM_FALLBACK_PADDING,
)
from ..exceptions import ConfigurationError
from ..geometry.shapes import RoomBox, WallSegment

logger = logging.getLogger(__name__)


@dataclass
class RoomBoxConfig:
    """Configuration for room box refinement."""
    min_room_size: float = MIN_ROOM_SIZE
    fill_cap_ratio: float = FLOOD_FILL_CAP_RATIO
    max_aspect_ratio: float = MAX_ROOM_ASPECT_RATIO
    candidates_per_side: int = ROOM_CANDIDATES_PER_SIDE
    fallback_padding: float = ROOM_FALLBACK_PADDING

    def __post_init__(self):
        if self.min_room_size <= 0:
            raise ConfigurationError(f"min_room_size must be > 0: {self.min_room_size}")
        if not 0 < self.fill_cap_ratio <= 1:
            raise ConfigurationError(f"fill_cap_ratio must be in (0, 1]: {self.fill_cap_ratio}")
        if self.max_aspect_ratio < 1:
            raise ConfigurationError(f"max_aspect_ratio must be >= 1: {self.max_aspect_ratio}")
        if self.candidates_per_side < 1:
            raise ConfigurationError(f"candidates_per_side must be >= 1: {self.candidates_per_side}")
        if self.fallback_padding < 0:
            raise ConfigurationError(f"fallback_padding must be >= 0: {self.fallback_padding}")


# =============================================================================
# STRATEGY A: FLOOD FILL
# =============================================================================

def bounded_flood_fill(
    open_space: np.ndarray,
    seed_x: int,
    seed_y: int,
    max_pixels: int
) -> np.ndarray:
    """
    4-connected flood fill grown one breadth-first layer at a time.

    Growth stops when the region is complete or the next layer would
    exceed max_pixels.

    Args:
        open_space: Mask of fillable pixels
        seed_x: Seed column
        seed_y: Seed row
        max_pixels: Pixel cap

    Returns:
        uint8 mask of the filled region
    """
    height, width = open_space.shape
    fillable = open_space.astype(np.uint8)
    region = np.zeros((height, width), dtype=np.uint8)
    region[seed_y, seed_x] = 1

    cross = cv2.getStructuringElement(cv2.MORPH_CROSS, (3, 3))
    count = 1
    x1 = x2 = seed_x
    y1 = y2 = seed_y

    while True:
        wx1, wy1 = max(0, x1 - 1), max(0, y1 - 1)
        wx2, wy2 = min(width - 1, x2 + 1), min(height - 1, y2 + 1)

        current = region[wy1:wy2 + 1, wx1:wx2 + 1]
        grown = cv2.dilate(current, cross) & fillable[wy1:wy2 + 1, wx1:wx2 + 1]

        grown_count = int(np.count_nonzero(grown))
        if grown_count == count or grown_count > max_pixels:
            break

        region[wy1:wy2 + 1, wx1:wx2 + 1] = grown
        count = grown_count

        ys, xs = np.nonzero(grown)
        x1, x2 = wx1 + int(xs.min()), wx1 + int(xs.max())
        y1, y2 = wy1 + int(ys.min()), wy1 + int(ys.max())

    return region


def refine_room_box(
    ink: np.ndarray,
    x1: int,
    y1: int,
    x2: int,
    y2: int
) -> Tuple[int, int, int, int]:
    """
    Push each side of a box outward until it meets ink.

    Scanning starts at the side itself. The left/top results are the first
    open column/row inside the wall, the right/bottom results the first
    ink column/row (exclusive bounds). Sides that never meet ink stop at
    the image border.

    Args:
        ink: Binary mask (1 = ink)
        x1, y1, x2, y2: Inclusive box in pixel coordinates

    Returns:
        Tuple of (left, top, right, bottom)
    """
    height, width = ink.shape
    rows = slice(y1, y2 + 1)
    cols = slice(x1, x2 + 1)

    left = 0
    for x in range(x1, -1, -1):
        if ink[rows, x].any():
            left = x + 1
            break

    right = width
    for x in range(x2, width):
        if ink[rows, x].any():
            right = x
            break

    top = 0
    for y in range(y1, -1, -1):
        if ink[y, cols].any():
            top = y + 1
            break

    bottom = height
    for y in range(y2, height):
        if ink[y, cols].any():
            bottom = y
            break

    return left, top, right, bottom


def flood_fill_room_box(
    binary: np.ndarray,
    label: RoomBox,
    config: Optional[RoomBoxConfig] = None
) -> Optional[RoomBox]:
    """
    Room rectangle by flood filling open space from the label centre.

    Label text ink is ignored. The fill is capped at fill_cap_ratio of the
    image area; its bounding box is then pushed out to the wall faces.

    Args:
        binary: Binary mask (1 = ink)
        label: Label bounding box
        config: Room box options

    Returns:
        RoomBox, or None if the seed is outside the image or on a wall,
        or the result is smaller than min_room_size
    """
    config = config or RoomBoxConfig()
    height, width = binary.shape[:2]

    seed_x = int(math.floor(label.center[0]))
    seed_y = int(math.floor(label.center[1]))
    if not (0 <= seed_x < width and 0 <= seed_y < height):
        logger.debug(f"Flood fill: seed ({seed_x}, {seed_y}) outside image")
        return None

    ink = binary.astype(bool)
    lx1, ly1 = max(0, int(label.x1)), max(0, int(label.y1))
    lx2, ly2 = min(width, int(math.ceil(label.x2))), min(height, int(math.ceil(label.y2)))
    ink[ly1:ly2, lx1:lx2] = False

    if ink[seed_y, seed_x]:
        logger.debug("Flood fill: seed lies on a wall")
        return None

    max_pixels = int(config.fill_cap_ratio * width * height)
    region = bounded_flood_fill(~ink, seed_x, seed_y, max_pixels)

    ys, xs = np.nonzero(region)
    left, top, right, bottom = refine_room_box(
        ink, int(xs.min()), int(ys.min()), int(xs.max()), int(ys.max())
    )

    if right <= left or bottom <= top:
        return None

    box = RoomBox(float(left), float(top), float(right), float(bottom))
    if not box.meets_minimum(config.min_room_size):
        logger.debug(f"Flood fill: box {box.width:.0f}x{box.height:.0f} below minimum")
        return None

    logger.debug(f"Flood fill: {len(xs)} px filled, box {box.width:.0f}x{box.height:.0f}")
    return box


# =============================================================================
# STRATEGY B: WALL-PAIR SEARCH
# =============================================================================

def _nearest(candidates: List[Tuple[float, WallSegment]], limit: int) -> List[WallSegment]:
    return [wall for _, wall in sorted(candidates, key=lambda c: c[0])[:limit]]


def wall_candidates(
    walls: Sequence[WallSegment],
    label: RoomBox,
    config: RoomBoxConfig
) -> Tuple[List[WallSegment], List[WallSegment], List[WallSegment], List[WallSegment]]:
    """
    Nearest walls on each side of a label.

    A wall qualifies for a side when it lies entirely beyond the label on
    that side and its span overlaps the label span widened by min_room_size.

    Returns:
        Tuple of (top, bottom, left, right) candidate lists, nearest first
    """
    reach = config.min_room_size
    top, bottom, left, right = [], [], [], []

    for wall in walls:
        if wall.is_horizontal:
            if wall.x2 < label.x1 - reach or wall.x1 > label.x2 + reach:
                continue
            if wall.y2 <= label.y1:
                top.append((label.y1 - wall.y2, wall))
            elif wall.y1 >= label.y2:
                bottom.append((wall.y1 - label.y2, wall))
        else:
            if wall.y2 < label.y1 - reach or wall.y1 > label.y2 + reach:
                continue
            if wall.x2 <= label.x1:
                left.append((label.x1 - wall.x2, wall))
            elif wall.x1 >= label.x2:
                right.append((wall.x1 - label.x2, wall))

    k = config.candidates_per_side
    return _nearest(top, k), _nearest(bottom, k), _nearest(left, k), _nearest(right, k)


def wall_pair_room_box(
    walls: Sequence[WallSegment],
    label: RoomBox,
    config: Optional[RoomBoxConfig] = None
) -> Optional[RoomBox]:
    """
    Largest plausible room rectangle formed by one wall per side.

    The rectangle between the walls' inner faces must contain the label,
    have both sides at least min_room_size and an aspect ratio at most
    max_aspect_ratio.

    Args:
        walls: Interior and exterior walls
        label: Label bounding box
        config: Room box options

    Returns:
        RoomBox with the largest area, or None
    """
    config = config or RoomBoxConfig()
    tops, bottoms, lefts, rights = wall_candidates(walls, label, config)

    if not (tops and bottoms and lefts and rights):
        logger.debug("Wall-pair search: a side has no candidate wall")
        return None

    best = None
    for top, bottom, left, right in itertools.product(tops, bottoms, lefts, rights):
        x1, y1, x2, y2 = left.x2, top.y2, right.x1, bottom.y1
        if x2 <= x1 or y2 <= y1:
            continue

        box = RoomBox(float(x1), float(y1), float(x2), float(y2))
        if not box.contains_box(label):
            continue
        if not box.meets_minimum(config.min_room_size):
            continue
        if box.aspect_ratio > config.max_aspect_ratio:
            continue
        if best is None or box.area > best.area:
            best = box

    if best is not None:
        logger.debug(f"Wall-pair search: box {best.width:.0f}x{best.height:.0f}")
    return best


def fallback_room_box(
    label: RoomBox,
    width: int,
    height: int,
    padding: float = ROOM_FALLBACK_PADDING
) -> RoomBox:
    """
    Label box padded on every side and clipped to the image.

    Falls back to the central half of the image if nothing remains.
    """
    padded = RoomBox(label.x1 - padding, label.y1 - padding, label.x2 + padding, label.y2 + padding)
    clipped = padded.clipped(width, height)
    if clipped is not None:
        return clipped
    return RoomBox(width * 0.25, height * 0.25, width * 0.75, height * 0.75)
