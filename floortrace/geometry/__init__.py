# Geometry module - shapes, polygon utilities and perimeter construction

from .polygon import (
    signed_area,
    polygon_area,
    polygon_perimeter,
    polygon_centroid,
    point_in_polygon,
    bounding_box,
    segments_intersect,
    is_self_intersecting,
    is_valid_polygon,
)

from .shapes import (
    WallSegment,
    Perimeter,
    RoomBox,
)

from .calculator import (
    to_shapely_polygon,
    calculate_floor_area,
    calculate_perimeter_length,
    validate_perimeter,
)

from .perimeter_builder import (
    simplify_polygon,
    trace_perimeter,
    build_perimeter,
    find_room_from_walls,
)

__all__ = [
    # Polygon utilities
    "signed_area",
    "polygon_area",
    "polygon_perimeter",
    "polygon_centroid",
    "point_in_polygon",
    "bounding_box",
    "segments_intersect",
    "is_self_intersecting",
    "is_valid_polygon",
    # Shapes
    "WallSegment",
    "Perimeter",
    "RoomBox",
    # Calculator
    "to_shapely_polygon",
    "calculate_floor_area",
    "calculate_perimeter_length",
    "validate_perimeter",
    # Perimeter builder
    "simplify_polygon",
    "trace_perimeter",
    "build_perimeter",
    "find_room_from_walls",
]
