"""
Line Segment Module

Immutable line segment and intersection types shared by the vector stages.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple

from ..constants import ANGLE_TOLERANCE_RAD


class Orientation(Enum):
    """Orientation class of a segment."""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL = "diagonal"


@dataclass(frozen=True)
class LineSegment:
    """A scored line segment in pixel coordinates."""
    x1: float
    y1: float
    x2: float
    y2: float
    score: float = 1.0

    def __post_init__(self):
        for name in ("x1", "y1", "x2", "y2", "score"):
            object.__setattr__(self, name, float(getattr(self, name)))
        if self.x1 == self.x2 and self.y1 == self.y2:
            raise ValueError(f"Zero-length segment at ({self.x1}, {self.y1})")
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"Score must be in [0, 1]: {self.score}")

    @property
    def start(self) -> Tuple[float, float]:
        return (self.x1, self.y1)

    @property
    def end(self) -> Tuple[float, float]:
        return (self.x2, self.y2)

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

    @property
    def angle(self) -> float:
        """Angle in radians, in (-pi, pi]."""
        angle = math.atan2(self.y2 - self.y1, self.x2 - self.x1)
        return math.pi if angle == -math.pi else angle

    @property
    def midpoint(self) -> Tuple[float, float]:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    @property
    def center_x(self) -> float:
        return (self.x1 + self.x2) / 2

    @property
    def center_y(self) -> float:
        return (self.y1 + self.y2) / 2

    def orientation(self, tolerance: float = ANGLE_TOLERANCE_RAD) -> Orientation:
        """Classify as horizontal, vertical or diagonal."""
        a = abs(self.angle) % math.pi
        if a < tolerance or a > math.pi - tolerance:
            return Orientation.HORIZONTAL
        if abs(a - math.pi / 2) < tolerance:
            return Orientation.VERTICAL
        return Orientation.DIAGONAL

    def is_horizontal(self, tolerance: float = ANGLE_TOLERANCE_RAD) -> bool:
        return self.orientation(tolerance) == Orientation.HORIZONTAL

    def is_vertical(self, tolerance: float = ANGLE_TOLERANCE_RAD) -> bool:
        return self.orientation(tolerance) == Orientation.VERTICAL

    def distance_to_point(self, x: float, y: float) -> float:
        """Shortest distance from a point to this segment."""
        dx = self.x2 - self.x1
        dy = self.y2 - self.y1
        t = ((x - self.x1) * dx + (y - self.y1) * dy) / (dx * dx + dy * dy)
        t = max(0.0, min(1.0, t))
        return math.hypot(x - (self.x1 + t * dx), y - (self.y1 + t * dy))

    def line_distance_to_point(self, x: float, y: float) -> float:
        """Perpendicular distance from a point to the infinite line."""
        dx = self.x2 - self.x1
        dy = self.y2 - self.y1
        return abs(dy * (x - self.x1) - dx * (y - self.y1)) / self.length

    def with_score(self, score: float) -> "LineSegment":
        return LineSegment(self.x1, self.y1, self.x2, self.y2, score)

    def reversed(self) -> "LineSegment":
        return LineSegment(self.x2, self.y2, self.x1, self.y1, self.score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x1": round(self.x1, 2),
            "y1": round(self.y1, 2),
            "x2": round(self.x2, 2),
            "y2": round(self.y2, 2),
            "score": round(self.score, 3),
            "length": round(self.length, 2),
            "orientation": self.orientation().value,
        }


@dataclass(frozen=True)
class Intersection:
    """Crossing point of two lines, used as a snap target."""
    x: float
    y: float
    first: LineSegment
    second: LineSegment

    @property
    def point(self) -> Tuple[float, float]:
        return (self.x, self.y)


def angle_difference(a: float, b: float) -> float:
    """
    Smallest difference between two undirected line angles.

    Returns:
        Difference in radians, in [0, pi/2]
    """
    diff = abs(a - b) % math.pi
    return min(diff, math.pi - diff)


def make_segment(x1: float, y1: float, x2: float, y2: float, score: float = 1.0):
    """Build a LineSegment, or None if it would have zero length."""
    if x1 == x2 and y1 == y2:
        return None
    return LineSegment(x1, y1, x2, y2, min(1.0, max(0.0, score)))
