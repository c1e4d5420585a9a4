"""
Dimension Parser Module

Parses room dimension labels such as 12'-6" x 10'-0" or 12.5 ft x 10 ft
from OCR text, locates them in OCR word boxes, and converts between
decimal feet and feet-inches.

Supported label formats:
- Feet and inches: 5' 10" x 6' 3", 3' - 7" x 12' - 0"
- Decimal feet: 5.2 ft x 6.3 ft, 21.3 feet x 11.1 feet
- Plain numbers (assumed feet): 12 x 10
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..constants import INCHES_PER_FOOT
from ..geometry.shapes import RoomBox

logger = logging.getLogger(__name__)

FORMAT_INCHES = "inches"
FORMAT_DECIMAL = "decimal"

FEET_INCHES_PATTERN = re.compile(
    r"(\d+)\s*'\s*-?\s*(\d+)\s*\"\s*x\s*(\d+)\s*'\s*-?\s*(\d+)\s*\"",
    re.IGNORECASE
)
DECIMAL_FEET_PATTERN = re.compile(
    r"(\d+(?:\.\d+)?)\s*(?:ft|feet)\s*x\s*(\d+(?:\.\d+)?)\s*(?:ft|feet)",
    re.IGNORECASE
)
PLAIN_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*x\s*(\d+(?:\.\d+)?)", re.IGNORECASE)

# OCR often returns typographic quotes and the multiplication sign
_NORMALIZE = str.maketrans({
    "‘": "'", "’": "'", "′": "'",
    "“": '"', "”": '"', "″": '"',
    "×": "x",
})


@dataclass(frozen=True)
class DimensionLabel:
    """A parsed room dimension in decimal feet."""
    width_ft: float
    height_ft: float
    match: str
    format: str
    start: int = 0
    end: int = 0

    @property
    def area_sqft(self) -> float:
        return self.width_ft * self.height_ft

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width_ft": round(self.width_ft, 3),
            "height_ft": round(self.height_ft, 3),
            "text": self.match,
            "format": self.format,
        }


@dataclass(frozen=True)
class TextAnchor:
    """OCR text bounding box in pixels."""
    x: float
    y: float
    width: float
    height: float
    text: str = ""
    dimension: Optional[DimensionLabel] = None

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def to_room_box(self) -> RoomBox:
        return RoomBox.from_xywh(self.x, self.y, self.width, self.height)


def normalize_text(text: str) -> str:
    return text.translate(_NORMALIZE)


def parse_dimension_text(text: str) -> Optional[DimensionLabel]:
    """
    Parse the first room dimension in a line of text.

    Args:
        text: OCR text line

    Returns:
        DimensionLabel in decimal feet, or None if no format matches
    """
    if not text:
        return None
    text = normalize_text(text)

    m = FEET_INCHES_PATTERN.search(text)
    if m:
        width = feet_inches_to_decimal(int(m.group(1)), int(m.group(2)))
        height = feet_inches_to_decimal(int(m.group(3)), int(m.group(4)))
        return DimensionLabel(width, height, m.group(0), FORMAT_INCHES, m.start(), m.end())

    m = DECIMAL_FEET_PATTERN.search(text)
    if m:
        return DimensionLabel(
            float(m.group(1)), float(m.group(2)), m.group(0), FORMAT_DECIMAL, m.start(), m.end()
        )

    m = PLAIN_PATTERN.search(text)
    if m:
        return DimensionLabel(
            float(m.group(1)), float(m.group(2)), m.group(0), FORMAT_DECIMAL, m.start(), m.end()
        )

    return None


def _word_bbox(word: Dict[str, Any]) -> Optional[Tuple[float, float, float, float]]:
    """(x0, y0, x1, y1) of an OCR word; accepts dict or list bboxes."""
    bbox = word.get("bbox")
    if bbox is None:
        return None
    if isinstance(bbox, dict):
        return float(bbox["x0"]), float(bbox["y0"]), float(bbox["x1"]), float(bbox["y1"])
    x0, y0, x1, y1 = bbox
    return float(x0), float(y0), float(x1), float(y1)


def find_dimension_anchors(lines: Sequence[Dict[str, Any]]) -> List[TextAnchor]:
    """
    Locate dimension labels in OCR output.

    Each line is a dict with "text" and "words", every word carrying its
    own "text" and "bbox" ({x0, y0, x1, y1} or [x0, y0, x1, y1]). The
    anchor box is the union of the words overlapping the matched text.

    Args:
        lines: OCR lines in reading order

    Returns:
        One TextAnchor per line holding a dimension label
    """
    anchors = []
    for line in lines:
        words = [w for w in line.get("words", []) if w.get("text") and _word_bbox(w)]
        if not words:
            continue

        # Rebuild the line from its words so character offsets map to boxes
        spans = []
        offset = 0
        for word in words:
            text = word["text"]
            spans.append((offset, offset + len(text), word))
            offset += len(text) + 1
        joined = " ".join(w["text"] for w in words)

        label = parse_dimension_text(joined)
        if label is None:
            continue

        boxes = [_word_bbox(w) for start, end, w in spans if start < label.end and end > label.start]
        x0 = min(b[0] for b in boxes)
        y0 = min(b[1] for b in boxes)
        x1 = max(b[2] for b in boxes)
        y1 = max(b[3] for b in boxes)
        if x1 <= x0 or y1 <= y0:
            logger.debug(f"Skipping degenerate label box for '{label.match}'")
            continue

        anchors.append(TextAnchor(x0, y0, x1 - x0, y1 - y0, label.match, label))
        logger.debug(f"Dimension label '{label.match}' at ({x0:.0f}, {y0:.0f})")

    logger.info(f"Found {len(anchors)} dimension labels in {len(lines)} OCR lines")
    return anchors


def scale_from_room(label: DimensionLabel, box: RoomBox) -> float:
    """
    Feet per pixel from a labelled room.

    The shorter labelled side is matched to the shorter box side.
    """
    return min(label.width_ft, label.height_ft) / min(box.width, box.height)


# =============================================================================
# UNIT CONVERSION
# =============================================================================

def decimal_to_feet_inches(decimal_feet: float) -> Tuple[int, int]:
    """
    Convert decimal feet to whole feet and rounded inches.

    Example:
        12.4 -> (12, 5)
    """
    feet = int(math.floor(decimal_feet))
    inches = int(round((decimal_feet - feet) * INCHES_PER_FOOT))
    if inches == INCHES_PER_FOOT:
        feet += 1
        inches = 0
    return feet, inches


def feet_inches_to_decimal(feet: float, inches: float) -> float:
    return feet + inches / INCHES_PER_FOOT


def format_length(decimal_feet: float, unit: str = FORMAT_DECIMAL) -> str:
    """
    Format a length for display.

    Args:
        decimal_feet: Length in decimal feet
        unit: "decimal" (12.4 ft) or "inches" (12' 5")
    """
    if unit == FORMAT_INCHES:
        feet, inches = decimal_to_feet_inches(decimal_feet)
        return f"{feet}' {inches}\""
    return f"{decimal_feet:.1f} ft"


_LENGTH_FEET_INCHES = re.compile(r"^(\d+(?:\.\d+)?)\s*(?:'\s*|\s+)(\d+(?:\.\d+)?)\s*\"?\s*$")
_LENGTH_FEET = re.compile(r"^(\d+(?:\.\d+)?)\s*'?\s*$")
_LENGTH_DECIMAL = re.compile(r"^(\d+(?:\.\d+)?)\s*(?:ft|feet)?\s*$", re.IGNORECASE)


def parse_length(text: str) -> Optional[float]:
    """
    Parse user input to decimal feet.

    Accepts 12.4, 12.4 ft, 12', 12' 4", 12'4" and 12 4.

    Returns:
        Length in decimal feet, or None if the input is not a length
    """
    if not text or not isinstance(text, str):
        return None
    value = normalize_text(text).strip()
    if not value:
        return None

    m = _LENGTH_FEET_INCHES.match(value)
    if m:
        return feet_inches_to_decimal(float(m.group(1)), float(m.group(2)))

    m = _LENGTH_FEET.match(value) or _LENGTH_DECIMAL.match(value)
    if m:
        return float(m.group(1))

    return None
