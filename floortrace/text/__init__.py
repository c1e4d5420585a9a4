# Text module - room dimension labels and length units

from .dimension_parser import (
    FORMAT_INCHES,
    FORMAT_DECIMAL,
    DimensionLabel,
    TextAnchor,
    normalize_text,
    parse_dimension_text,
    find_dimension_anchors,
    scale_from_room,
    decimal_to_feet_inches,
    feet_inches_to_decimal,
    format_length,
    parse_length,
)

__all__ = [
    "FORMAT_INCHES",
    "FORMAT_DECIMAL",
    "DimensionLabel",
    "TextAnchor",
    "normalize_text",
    "parse_dimension_text",
    "find_dimension_anchors",
    "scale_from_room",
    "decimal_to_feet_inches",
    "feet_inches_to_decimal",
    "format_length",
    "parse_length",
]
