"""
Geometry Shapes Module

Immutable wall, perimeter and room box types produced by the pipeline.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from shapely.geometry import Polygon

from .polygon import (
    bounding_box,
    is_self_intersecting,
    point_in_polygon,
    polygon_area,
    polygon_centroid,
    polygon_perimeter,
)


def _empty_pixels() -> np.ndarray:
    return np.empty((0, 2), dtype=np.int32)


@dataclass(frozen=True)
class WallSegment:
    """
    A wall region: its ink pixels and inclusive bounding box.

    For a horizontal wall, length runs along x and thickness along y.
    """
    x1: int
    y1: int
    x2: int
    y2: int
    is_horizontal: bool
    pixels: np.ndarray = field(default_factory=_empty_pixels, compare=False, repr=False)
    score: float = 1.0

    def __post_init__(self):
        if self.x2 < self.x1 or self.y2 < self.y1:
            raise ValueError(
                f"Invalid wall bounding box: ({self.x1}, {self.y1}, {self.x2}, {self.y2})"
            )
        pixels = np.array(self.pixels, dtype=np.int32).reshape(-1, 2)
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    @property
    def length(self) -> int:
        return self.width if self.is_horizontal else self.height

    @property
    def thickness(self) -> int:
        return self.height if self.is_horizontal else self.width

    @property
    def center_x(self) -> float:
        return (self.x1 + self.x2) / 2

    @property
    def center_y(self) -> float:
        return (self.y1 + self.y2) / 2

    @property
    def pixel_count(self) -> int:
        return len(self.pixels)

    def inner_face(self, side: str) -> int:
        """
        Coordinate of the wall face that looks into a room.

        Args:
            side: Which side of the room the wall bounds:
                "top", "bottom", "left" or "right"
        """
        faces = {"top": self.y2, "bottom": self.y1, "left": self.x2, "right": self.x1}
        if side not in faces:
            raise ValueError(f"Unknown side: {side}")
        return faces[side]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x1": int(self.x1),
            "y1": int(self.y1),
            "x2": int(self.x2),
            "y2": int(self.y2),
            "orientation": "horizontal" if self.is_horizontal else "vertical",
            "length": int(self.length),
            "thickness": int(self.thickness),
            "score": round(float(self.score), 3),
        }


@dataclass(frozen=True)
class Perimeter:
    """
    Closed polygon outlining the usable floor area.

    The last vertex connects back to the first.
    """
    vertices: Tuple[Tuple[float, float], ...]

    def __post_init__(self):
        vertices = tuple((float(x), float(y)) for x, y in self.vertices)
        if len(vertices) < 3:
            raise ValueError(f"Perimeter needs at least 3 vertices, got {len(vertices)}")
        object.__setattr__(self, "vertices", vertices)

    def __len__(self) -> int:
        return len(self.vertices)

    @property
    def area(self) -> float:
        return polygon_area(self.vertices)

    @property
    def length(self) -> float:
        return polygon_perimeter(self.vertices)

    @property
    def centroid(self) -> Tuple[float, float]:
        return polygon_centroid(self.vertices)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return bounding_box(self.vertices)

    def contains(self, x: float, y: float) -> bool:
        return point_in_polygon((x, y), self.vertices)

    def is_self_intersecting(self) -> bool:
        return is_self_intersecting(self.vertices)

    def to_polygon(self) -> Polygon:
        return Polygon(self.vertices)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vertices": [[round(x, 2), round(y, 2)] for x, y in self.vertices],
            "area": round(self.area, 2),
            "length": round(self.length, 2),
            "self_intersecting": self.is_self_intersecting(),
        }


@dataclass(frozen=True)
class RoomBox:
    """Axis-aligned room rectangle in pixel coordinates."""
    x1: float
    y1: float
    x2: float
    y2: float

    def __post_init__(self):
        if not (self.x2 > self.x1 and self.y2 > self.y1):
            raise ValueError(
                f"Invalid room box: ({self.x1}, {self.y1}, {self.x2}, {self.y2})"
            )

    @classmethod
    def from_xywh(cls, x: float, y: float, width: float, height: float) -> "RoomBox":
        return cls(x, y, x + width, y + height)

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        return max(self.width, self.height) / min(self.width, self.height)

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    @property
    def vertices(self) -> List[Tuple[float, float]]:
        return [(self.x1, self.y1), (self.x2, self.y1), (self.x2, self.y2), (self.x1, self.y2)]

    def meets_minimum(self, min_size: float) -> bool:
        return self.width >= min_size and self.height >= min_size

    def contains_box(self, other: "RoomBox") -> bool:
        return (
            self.x1 <= other.x1 and self.y1 <= other.y1
            and self.x2 >= other.x2 and self.y2 >= other.y2
        )

    def clipped(self, width: float, height: float) -> Optional["RoomBox"]:
        """Box clipped to an image, or None if nothing remains."""
        x1, y1 = max(0.0, self.x1), max(0.0, self.y1)
        x2, y2 = min(float(width), self.x2), min(float(height), self.y2)
        if x2 <= x1 or y2 <= y1:
            return None
        return RoomBox(x1, y1, x2, y2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x1": round(self.x1, 2),
            "y1": round(self.y1, 2),
            "x2": round(self.x2, 2),
            "y2": round(self.y2, 2),
            "width": round(self.width, 2),
            "height": round(self.height, 2),
        }
