"""
Wall Detector Module

Orchestrates the full detection run on one floor plan image:

1. Preprocess to a binary ink mask
2. Estimate the wall likelihood map (neural classifier or classical)
3. Extract line segments from the likelihood map
4. Consolidate segments (merge, gap fill, door/window bridging)
5. Post-process segments (filters and snapping)
6. Grow segments into WallSegments and classify exterior/interior
7. Build the perimeter through the fallback chain

Each run produces a new, read-only DetectionResult.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np

from ..constants import COMPONENT_MIN_WALL_LENGTH, WALL_BAND_COVERAGE
from ..exceptions import ConfigurationError
from ..geometry.shapes import Perimeter, WallSegment
from ..image.loader import image_from_array
from ..raster.centerline import estimate_wall_thickness
from ..raster.likelihood import (
    LikelihoodConfig,
    LikelihoodResult,
    WallClassifier,
    estimate_wall_likelihood,
    estimate_wall_likelihood_async,
)
from ..raster.preprocessor import PreprocessConfig, PreprocessingResult, preprocess_image
from ..vector.consolidator import (
    ConsolidationConfig,
    consolidate_segments,
    morphological_gap_bridging,
)
from ..vector.filters import PostProcessConfig, SegmentPostProcessor
from ..vector.line_extractor import LineExtractionConfig, detect_line_segments
from ..vector.segment import LineSegment
from .fallbacks import PerimeterConfig, detect_perimeter
from .wall_classifier import (
    classify_walls,
    detect_wall_components,
    split_by_orientation,
    walls_from_segments,
)

logger = logging.getLogger(__name__)

SEGMENTATION_LINES = "lines"
SEGMENTATION_COMPONENTS = "components"


class DetectionObserver:
    """
    Receives progress notifications from a detection run.

    The base class ignores everything; subclass and override on_stage.
    """

    def on_stage(self, name: str, details: Dict[str, Any]) -> None:
        pass


class LoggingObserver(DetectionObserver):
    """Forwards stage notifications to a logger."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.log = log or logger
        self.level = level

    def on_stage(self, name: str, details: Dict[str, Any]) -> None:
        summary = ", ".join(f"{k}={v}" for k, v in details.items())
        self.log.log(self.level, f"[{name}] {summary}")


@dataclass
class DetectionConfig:
    """Configuration for a full detection run."""
    preprocess: PreprocessConfig = field(default_factory=PreprocessConfig)
    likelihood: LikelihoodConfig = field(default_factory=LikelihoodConfig)
    lines: LineExtractionConfig = field(default_factory=LineExtractionConfig)
    consolidation: ConsolidationConfig = field(default_factory=ConsolidationConfig)
    post_process: PostProcessConfig = field(default_factory=PostProcessConfig)
    perimeter: PerimeterConfig = field(default_factory=PerimeterConfig)
    segmentation: str = SEGMENTATION_LINES
    # None = estimate from the skeleton of the mask
    max_wall_thickness: Optional[float] = None
    wall_coverage: float = WALL_BAND_COVERAGE
    min_component_length: int = COMPONENT_MIN_WALL_LENGTH

    def __post_init__(self):
        if self.segmentation not in (SEGMENTATION_LINES, SEGMENTATION_COMPONENTS):
            raise ConfigurationError(f"Unknown segmentation: {self.segmentation}")
        if self.max_wall_thickness is not None and self.max_wall_thickness < 1:
            raise ConfigurationError(f"max_wall_thickness must be >= 1: {self.max_wall_thickness}")
        if not 0 < self.wall_coverage <= 1:
            raise ConfigurationError(f"wall_coverage must be in (0, 1]: {self.wall_coverage}")
        if self.min_component_length < 1:
            raise ConfigurationError(f"min_component_length must be >= 1: {self.min_component_length}")


@dataclass(frozen=True)
class DetectionResult:
    """Everything found in one detection run."""
    walls: Tuple[WallSegment, ...]
    horizontal: Tuple[WallSegment, ...]
    vertical: Tuple[WallSegment, ...]
    exterior: Tuple[WallSegment, ...]
    interior: Tuple[WallSegment, ...]
    segments: Tuple[LineSegment, ...]
    perimeter: Optional[Perimeter]
    perimeter_method: str
    image_width: int
    image_height: int
    used_neural: bool = False
    stats: Dict[str, Any] = field(default_factory=dict, compare=False)
    binary: Optional[np.ndarray] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.binary is not None:
            binary = np.array(self.binary, dtype=np.uint8)
            binary.flags.writeable = False
            object.__setattr__(self, "binary", binary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "image": {"width": self.image_width, "height": self.image_height},
            "used_neural": self.used_neural,
            "walls": {
                "all": [w.to_dict() for w in self.walls],
                "horizontal": len(self.horizontal),
                "vertical": len(self.vertical),
                "exterior": [w.to_dict() for w in self.exterior],
                "interior": [w.to_dict() for w in self.interior],
            },
            "segments": [s.to_dict() for s in self.segments],
            "perimeter": self.perimeter.to_dict() if self.perimeter else None,
            "perimeter_method": self.perimeter_method,
            "stats": self.stats,
        }


class WallDetector:
    """
    Runs wall and perimeter detection.

    Usage:
        detector = WallDetector(DetectionConfig(), observer=LoggingObserver())
        result = detector.detect(image)
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        observer: Optional[DetectionObserver] = None
    ):
        self.config = config or DetectionConfig()
        self.observer = observer or DetectionObserver()

    def _notify(self, name: str, **details) -> None:
        self.observer.on_stage(name, details)

    def _prepare(self, image: np.ndarray) -> Tuple[PreprocessingResult, np.ndarray]:
        """Preprocess and optionally bridge the mask before likelihood estimation."""
        image = image_from_array(image)

        prep = preprocess_image(image, self.config.preprocess)
        self._notify(
            "preprocess",
            steps=prep.steps_applied,
            threshold=prep.threshold,
            ink_ratio=round(prep.ink_ratio, 4),
        )

        binary = prep.binary
        if self.config.consolidation.enable_morphological_bridging:
            binary = morphological_gap_bridging(binary, self.config.consolidation.bridge_kernel)
            self._notify("bridge_mask", kernel=self.config.consolidation.bridge_kernel)
        return prep, binary

    def _segment_walls(self, binary: np.ndarray, segments, stats: Dict[str, Any]):
        cfg = self.config
        if cfg.segmentation == SEGMENTATION_COMPONENTS:
            return detect_wall_components(binary, cfg.min_component_length)

        thickness = cfg.max_wall_thickness
        if thickness is None:
            estimated = estimate_wall_thickness(binary)
            stats["estimated_wall_thickness"] = round(estimated, 2)
            thickness = max(3.0, 2.0 * estimated)
        return walls_from_segments(segments, binary, thickness, cfg.wall_coverage)

    def _finish(
        self,
        prep: PreprocessingResult,
        binary: np.ndarray,
        likelihood: LikelihoodResult
    ) -> DetectionResult:
        """Everything after the likelihood map."""
        cfg = self.config
        height, width = binary.shape[:2]
        stats: Dict[str, Any] = {
            "preprocessing": prep.steps_applied,
            "threshold": prep.threshold,
            "used_neural": likelihood.used_neural,
        }
        if likelihood.fallback_reason:
            stats["likelihood_fallback"] = likelihood.fallback_reason
        self._notify("likelihood", used_neural=likelihood.used_neural,
                     fallback=likelihood.fallback_reason)

        raw = detect_line_segments(likelihood.likelihood, cfg.lines)
        stats["raw_segments"] = len(raw)
        self._notify("lines", segments=len(raw))

        consolidated, consolidation_stats = consolidate_segments(raw, cfg.consolidation)
        stats["consolidation"] = asdict(consolidation_stats)
        self._notify("consolidate", **asdict(consolidation_stats))

        post = SegmentPostProcessor(cfg.post_process).process(consolidated, width, height)
        stats["post_processing"] = {name: s.removed for name, s in post.stage_stats.items()}
        self._notify("post_process", segments=len(post.all),
                     horizontal=len(post.horizontal), vertical=len(post.vertical))

        walls = self._segment_walls(binary, post.all, stats)
        horizontal, vertical = split_by_orientation(walls)
        exterior, interior = classify_walls(walls, width, height, cfg.post_process.edge_ratio)
        stats["walls"] = len(walls)
        self._notify("walls", total=len(walls), exterior=len(exterior), interior=len(interior))

        perimeter, method = detect_perimeter(binary, exterior, width, height, cfg.perimeter)
        stats["perimeter_method"] = method
        self._notify("perimeter", method=method,
                     vertices=len(perimeter) if perimeter else 0)

        logger.info(
            f"Detection complete: {len(walls)} walls ({len(exterior)} exterior), "
            f"perimeter via {method}"
        )
        return DetectionResult(
            walls=tuple(walls),
            horizontal=tuple(horizontal),
            vertical=tuple(vertical),
            exterior=tuple(exterior),
            interior=tuple(interior),
            segments=tuple(post.all),
            perimeter=perimeter,
            perimeter_method=method,
            image_width=width,
            image_height=height,
            used_neural=likelihood.used_neural,
            stats=stats,
            binary=binary,
        )

    def detect(
        self,
        image: np.ndarray,
        classifier: Optional[WallClassifier] = None
    ) -> DetectionResult:
        """
        Detect walls and the perimeter in an image.

        Args:
            image: RGBA, RGB or grayscale image array
            classifier: Optional neural wall classifier

        Returns:
            DetectionResult

        Raises:
            InvalidImageError: If the image is empty or malformed
        """
        prep, binary = self._prepare(image)
        likelihood = estimate_wall_likelihood(prep.grayscale, binary, classifier, self.config.likelihood)
        return self._finish(prep, binary, likelihood)

    async def detect_async(
        self,
        image: np.ndarray,
        classifier: Optional[WallClassifier] = None
    ) -> DetectionResult:
        """
        Async variant of detect.

        The classifier may return an awaitable; array stages run in worker
        threads so concurrent detections do not block each other.
        """
        prep, binary = await asyncio.to_thread(self._prepare, image)
        likelihood = await estimate_wall_likelihood_async(
            prep.grayscale, binary, classifier, self.config.likelihood
        )
        return await asyncio.to_thread(self._finish, prep, binary, likelihood)


def detect_walls(
    image: np.ndarray,
    config: Optional[DetectionConfig] = None,
    classifier: Optional[WallClassifier] = None,
    observer: Optional[DetectionObserver] = None
) -> DetectionResult:
    """Convenience wrapper around WallDetector.detect."""
    return WallDetector(config, observer).detect(image, classifier)


async def detect_walls_async(
    image: np.ndarray,
    config: Optional[DetectionConfig] = None,
    classifier: Optional[WallClassifier] = None,
    observer: Optional[DetectionObserver] = None
) -> DetectionResult:
    """Convenience wrapper around WallDetector.detect_async."""
    return await WallDetector(config, observer).detect_async(image, classifier)
