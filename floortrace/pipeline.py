"""
Pipeline Orchestration Module

Coordinates the full workflow from an image file to a JSON summary:
wall detection, perimeter, room boxes around dimension labels, corners,
and real-unit measurements.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .constants import DEFAULT_PERIMETER_STRATEGIES, THRESHOLD_ADAPTIVE
from .detection.fallbacks import PerimeterConfig, RoomBoxResult, find_room_box
from .detection.wall_detector import (
    SEGMENTATION_LINES,
    DetectionConfig,
    DetectionResult,
    LoggingObserver,
    WallDetector,
)
from .geometry.calculator import (
    calculate_floor_area,
    calculate_perimeter_length,
    validate_perimeter,
)
from .image.loader import load_image
from .raster.corner_detector import detect_corners
from .raster.preprocessor import PreprocessConfig
from .raster.room_box import RoomBoxConfig
from .text.dimension_parser import TextAnchor, find_dimension_anchors, scale_from_room
from .vector.consolidator import ConsolidationConfig

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Configuration for pipeline execution."""
    input_image: str
    output_path: str
    labels: List[Tuple[float, float, float, float]] = field(default_factory=list)
    ocr_json: Optional[str] = None
    threshold: str = THRESHOLD_ADAPTIVE
    corners: bool = False
    scale: Optional[float] = None
    perimeter_strategies: Tuple[str, ...] = DEFAULT_PERIMETER_STRATEGIES
    segmentation: str = SEGMENTATION_LINES
    bridge_gaps: bool = False
    verbose: bool = False

    def detection_config(self) -> DetectionConfig:
        return DetectionConfig(
            preprocess=PreprocessConfig(threshold_method=self.threshold),
            consolidation=ConsolidationConfig(enable_morphological_bridging=self.bridge_gaps),
            perimeter=PerimeterConfig(strategies=tuple(self.perimeter_strategies)),
            segmentation=self.segmentation,
        )


@dataclass
class RoomResult:
    """A room box found around one label."""
    anchor: TextAnchor
    result: RoomBoxResult

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "label": {
                "x": self.anchor.x,
                "y": self.anchor.y,
                "width": self.anchor.width,
                "height": self.anchor.height,
                "text": self.anchor.text,
            },
            "box": self.result.to_dict(),
        }
        if self.anchor.dimension is not None:
            data["dimension"] = self.anchor.dimension.to_dict()
        return data


@dataclass
class PipelineResult:
    """Result from full pipeline execution."""
    input_file: str
    output_path: str
    detection: DetectionResult
    rooms: List[RoomResult]
    corners: List[Tuple[int, int]]
    scale: Optional[float]
    scale_source: str
    floor_area: Optional[float]
    perimeter_length: Optional[float]
    warnings: List[str]
    processing_time: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_file": self.input_file,
            "detection": self.detection.to_dict(),
            "rooms": [r.to_dict() for r in self.rooms],
            "corners": [list(c) for c in self.corners],
            "scale": self.scale,
            "scale_source": self.scale_source,
            "floor_area_sqft": round(self.floor_area, 2) if self.floor_area is not None else None,
            "perimeter_ft": (
                round(self.perimeter_length, 2) if self.perimeter_length is not None else None
            ),
            "warnings": self.warnings,
            "processing_time": round(self.processing_time, 3),
        }


def load_ocr_lines(path: str) -> List[Dict[str, Any]]:
    """
    Read OCR output from JSON.

    Accepts a list of lines or an object with a "lines" key.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("lines", [])
    if not isinstance(data, list):
        raise ValueError(f"OCR JSON must hold a list of lines: {path}")
    return data


def collect_anchors(
    labels: Sequence[Tuple[float, float, float, float]],
    ocr_lines: Sequence[Dict[str, Any]] = ()
) -> List[TextAnchor]:
    """Anchors from explicit label boxes followed by OCR dimension labels."""
    anchors = [TextAnchor(x, y, w, h) for x, y, w, h in labels]
    if ocr_lines:
        anchors.extend(find_dimension_anchors(ocr_lines))
    return anchors


def refine_rooms(
    anchors: Sequence[TextAnchor],
    detection: DetectionResult,
    config: Optional[RoomBoxConfig] = None
) -> List[RoomResult]:
    """Find the room box around each anchor using the detection's mask and walls."""
    rooms = []
    for anchor in anchors:
        result = find_room_box(
            anchor.to_room_box(),
            detection.image_width,
            detection.image_height,
            binary=detection.binary,
            walls=detection.walls,
            config=config,
        )
        logger.info(
            f"Room at ({anchor.x:.0f}, {anchor.y:.0f}): {result.box.width:.0f}x"
            f"{result.box.height:.0f} px via {result.method}"
        )
        rooms.append(RoomResult(anchor, result))
    return rooms


def resolve_scale(manual_scale: Optional[float], rooms: Sequence[RoomResult]) -> Tuple[Optional[float], str]:
    """
    Feet per pixel from the manual value or the first labelled room.

    Returns:
        Tuple of (scale or None, source description)
    """
    if manual_scale:
        return manual_scale, "manual"
    for room in rooms:
        if room.anchor.dimension is not None:
            scale = scale_from_room(room.anchor.dimension, room.result.box)
            return scale, f"room label '{room.anchor.text}'"
    return None, "none"


def write_result_json(result: PipelineResult, path: str) -> None:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2)


def run_pipeline(args) -> PipelineResult:
    """
    Run the full analysis pipeline.

    Args:
        args: Parsed command-line arguments

    Returns:
        PipelineResult
    """
    start_time = time.time()

    config = PipelineConfig(
        input_image=args.input,
        output_path=args.output,
        labels=list(getattr(args, "label", None) or []),
        ocr_json=getattr(args, "ocr_json", None),
        threshold=args.threshold,
        corners=args.corners,
        scale=getattr(args, "scale", None),
        perimeter_strategies=tuple(args.perimeter_strategies),
        segmentation=getattr(args, "segmentation", SEGMENTATION_LINES),
        bridge_gaps=getattr(args, "bridge_gaps", False),
        verbose=args.verbose,
    )

    # Setup logging
    log_level = logging.DEBUG if config.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(message)s')

    logger.info(f"Processing: {config.input_image}")
    warnings = []

    image = load_image(config.input_image)

    observer = LoggingObserver(level=logging.DEBUG)
    detection = WallDetector(config.detection_config(), observer).detect(image)

    ocr_lines = load_ocr_lines(config.ocr_json) if config.ocr_json else []
    anchors = collect_anchors(config.labels, ocr_lines)
    if config.ocr_json and not any(a.dimension for a in anchors):
        warnings.append("No dimension labels found in OCR output")
    rooms = refine_rooms(anchors, detection)

    corners = detect_corners(image) if config.corners else []

    scale, scale_source = resolve_scale(config.scale, rooms)

    floor_area = None
    perimeter_length = None
    if detection.perimeter is None:
        warnings.append("No perimeter detected")
    else:
        warnings.extend(validate_perimeter(detection.perimeter.vertices))
        if scale is not None:
            floor_area = calculate_floor_area(detection.perimeter.vertices, scale)
            perimeter_length = calculate_perimeter_length(detection.perimeter.vertices, scale)
        else:
            warnings.append("No scale available, measurements left in pixels")

    result = PipelineResult(
        input_file=config.input_image,
        output_path=config.output_path,
        detection=detection,
        rooms=rooms,
        corners=corners,
        scale=scale,
        scale_source=scale_source,
        floor_area=floor_area,
        perimeter_length=perimeter_length,
        warnings=warnings,
        processing_time=time.time() - start_time,
    )

    write_result_json(result, config.output_path)
    logger.info(f"JSON written: {config.output_path}")

    # Summary
    logger.info(f"\nSummary:")
    logger.info(f"  Walls: {len(detection.walls)} ({len(detection.exterior)} exterior)")
    logger.info(f"  Perimeter: {detection.perimeter_method}")
    logger.info(f"  Rooms: {len(rooms)}")
    if floor_area is not None:
        logger.info(f"  Floor area: {floor_area:,.1f} SF (scale from {scale_source})")
    elif detection.perimeter is not None:
        logger.info(f"  Floor area: {detection.perimeter.area:,.0f} px")
    logger.info(f"  Processing time: {result.processing_time:.1f}s")

    if warnings and config.verbose:
        logger.info(f"\nWarnings ({len(warnings)}):")
        for w in warnings:
            logger.info(f"  - {w}")

    return result
