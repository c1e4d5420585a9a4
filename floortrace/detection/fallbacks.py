"""
Fallback Chains

Ordered strategy lists for the two places where detection can come up
empty: the exterior perimeter and the room box around a label. Each
strategy returns None when it cannot produce a result and the next one
is tried.

Perimeter strategies (default order):
1. wall     - trace exterior walls
2. contour  - outer contour of the closed ink mask
3. lines    - rectangle from the outermost scan lines
4. default  - rectangle inset from the image border

Room box strategies:
1. flood fill from the label centre
2. wall-pair search
3. padded label box
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from ..constants import (
    CONTOUR_CLOSING_KERNEL,
    CONTOUR_EPSILON_RATIO,
    DEFAULT_PERIMETER_MARGIN,
    DEFAULT_PERIMETER_STRATEGIES,
    PERIMETER_SIMPLIFY_TOLERANCE,
    SCAN_MAX_THICKNESS,
    SCAN_MIN_LENGTH_RATIO,
    PerimeterStrategy,
    RoomBoxMethod,
)
from ..exceptions import ConfigurationError
from ..geometry.perimeter_builder import build_perimeter
from ..geometry.shapes import Perimeter, RoomBox, WallSegment
from ..raster.contour_perimeter import default_perimeter, detect_contour_perimeter
from ..raster.room_box import (
    RoomBoxConfig,
    fallback_room_box,
    flood_fill_room_box,
    wall_pair_room_box,
)
from ..vector.scanline_detector import (
    DetectedLine,
    detect_scan_lines,
    scan_line_perimeter_vertices,
)

logger = logging.getLogger(__name__)

_KNOWN_STRATEGIES = (
    PerimeterStrategy.WALLS,
    PerimeterStrategy.CONTOUR,
    PerimeterStrategy.SCAN_LINES,
    PerimeterStrategy.DEFAULT,
)


@dataclass
class PerimeterConfig:
    """Configuration for perimeter detection."""
    strategies: Tuple[str, ...] = DEFAULT_PERIMETER_STRATEGIES
    tolerance: float = PERIMETER_SIMPLIFY_TOLERANCE
    closing_kernel: int = CONTOUR_CLOSING_KERNEL
    epsilon_ratio: float = CONTOUR_EPSILON_RATIO
    scan_min_length_ratio: float = SCAN_MIN_LENGTH_RATIO
    scan_max_thickness: int = SCAN_MAX_THICKNESS
    use_interior: bool = True
    margin: int = DEFAULT_PERIMETER_MARGIN

    def __post_init__(self):
        self.strategies = tuple(self.strategies)
        if not self.strategies:
            raise ConfigurationError("At least one perimeter strategy is required")
        unknown = [s for s in self.strategies if s not in _KNOWN_STRATEGIES]
        if unknown:
            raise ConfigurationError(
                f"Unknown perimeter strategies {unknown}, expected {_KNOWN_STRATEGIES}"
            )
        if self.tolerance < 0:
            raise ConfigurationError(f"tolerance must be >= 0: {self.tolerance}")
        if not 0 < self.epsilon_ratio < 1:
            raise ConfigurationError(f"epsilon_ratio must be in (0, 1): {self.epsilon_ratio}")
        if not 0 < self.scan_min_length_ratio <= 1:
            raise ConfigurationError(
                f"scan_min_length_ratio must be in (0, 1]: {self.scan_min_length_ratio}"
            )
        if self.margin < 0:
            raise ConfigurationError(f"margin must be >= 0: {self.margin}")


def perimeter_from_scan_lines(
    horizontal: Sequence[DetectedLine],
    vertical: Sequence[DetectedLine],
    use_interior: bool = True
) -> Optional[Perimeter]:
    """Four-vertex perimeter from the outermost scan lines, or None."""
    vertices = scan_line_perimeter_vertices(list(horizontal), list(vertical), use_interior)
    if vertices is None:
        return None
    return Perimeter(tuple(vertices))


def detect_perimeter(
    binary: np.ndarray,
    exterior_walls: Sequence[WallSegment],
    width: int,
    height: int,
    config: Optional[PerimeterConfig] = None
) -> Tuple[Optional[Perimeter], str]:
    """
    Walk the configured perimeter strategies until one succeeds.

    Args:
        binary: Binary mask (1 = ink)
        exterior_walls: Walls classified as exterior
        width: Image width
        height: Image height
        config: Perimeter options

    Returns:
        Tuple of (perimeter, strategy name); (None, "none") when every
        configured strategy failed
    """
    config = config or PerimeterConfig()

    for strategy in config.strategies:
        if strategy == PerimeterStrategy.WALLS:
            perimeter = build_perimeter(exterior_walls, config.tolerance)
        elif strategy == PerimeterStrategy.CONTOUR:
            perimeter = detect_contour_perimeter(
                binary, config.closing_kernel, config.epsilon_ratio, config.tolerance
            )
        elif strategy == PerimeterStrategy.SCAN_LINES:
            horizontal, vertical = detect_scan_lines(
                binary, config.scan_min_length_ratio, config.scan_max_thickness
            )
            perimeter = perimeter_from_scan_lines(horizontal, vertical, config.use_interior)
        else:
            perimeter = default_perimeter(width, height, config.margin)

        if perimeter is not None:
            logger.info(f"Perimeter found by '{strategy}' strategy ({len(perimeter)} vertices)")
            return perimeter, strategy
        logger.info(f"Perimeter strategy '{strategy}' found nothing")

    logger.warning("No perimeter strategy succeeded")
    return None, "none"


@dataclass(frozen=True)
class RoomBoxResult:
    """A refined room box and the strategy that produced it."""
    box: RoomBox
    method: str

    def to_dict(self):
        data = self.box.to_dict()
        data["method"] = self.method
        return data


def find_room_box(
    label: RoomBox,
    width: int,
    height: int,
    binary: Optional[np.ndarray] = None,
    walls: Sequence[WallSegment] = (),
    config: Optional[RoomBoxConfig] = None
) -> RoomBoxResult:
    """
    Room box around a dimension label.

    Flood fill runs when a mask is given, wall-pair search when walls are
    given, and the padded label box is the last resort.

    Args:
        label: Label bounding box in pixels
        width: Image width
        height: Image height
        binary: Optional binary mask (1 = ink)
        walls: Optional detected walls
        config: Room box options

    Returns:
        RoomBoxResult
    """
    config = config or RoomBoxConfig()

    if binary is not None:
        box = flood_fill_room_box(binary, label, config)
        if box is not None:
            return RoomBoxResult(box, RoomBoxMethod.FLOOD_FILL)

    if walls:
        box = wall_pair_room_box(walls, label, config)
        if box is not None:
            return RoomBoxResult(box, RoomBoxMethod.WALL_PAIR)

    logger.info(f"Room box: using padded label box around ({label.center[0]:.0f}, {label.center[1]:.0f})")
    box = fallback_room_box(label, width, height, config.fallback_padding)
    return RoomBoxResult(box, RoomBoxMethod.FALLBACK)
