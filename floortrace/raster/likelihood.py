"""
Wall Likelihood Module

Per-pixel estimate that a pixel belongs to a wall. An external neural
classifier may be supplied; when it is absent or fails, the classical
run-length heuristic is used instead.
"""

import asyncio
import inspect
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

import cv2
import numpy as np

from ..constants import (
    LIKELIHOOD_BLUR_SIGMA,
    LIKELIHOOD_MAX_WALL_THICKNESS,
    LIKELIHOOD_MIN_WALL_LENGTH,
    LIKELIHOOD_RATIO_NORMALIZER,
    MODEL_INPUT_SIZE,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# grayscale (size x size, float32 in [0, 1]) -> probability map of the same size
WallClassifier = Callable[[np.ndarray], Any]


@dataclass
class LikelihoodConfig:
    """Configuration for wall likelihood estimation."""
    min_wall_length: int = LIKELIHOOD_MIN_WALL_LENGTH
    max_wall_thickness: int = LIKELIHOOD_MAX_WALL_THICKNESS
    blur_sigma: float = LIKELIHOOD_BLUR_SIGMA
    model_input_size: int = MODEL_INPUT_SIZE

    def __post_init__(self):
        if self.min_wall_length < 1:
            raise ConfigurationError(f"min_wall_length must be >= 1: {self.min_wall_length}")
        if self.max_wall_thickness < 1:
            raise ConfigurationError(f"max_wall_thickness must be >= 1: {self.max_wall_thickness}")
        if self.blur_sigma < 0:
            raise ConfigurationError(f"blur_sigma must be >= 0: {self.blur_sigma}")
        if self.model_input_size < 8:
            raise ConfigurationError(f"model_input_size too small: {self.model_input_size}")


@dataclass
class LikelihoodResult:
    """Likelihood map and how it was produced."""
    likelihood: np.ndarray
    used_neural: bool
    fallback_reason: Optional[str] = None


class ClassifierOutputError(ValueError):
    """Raised when a classifier returns an unusable probability map."""
    pass


def run_lengths(mask: np.ndarray, axis: int = 1) -> np.ndarray:
    """
    Length of the run of set pixels that each pixel belongs to.

    Args:
        mask: Binary mask
        axis: 1 for horizontal runs, 0 for vertical runs

    Returns:
        int32 array, 0 where the mask is unset
    """
    mask = mask.astype(bool)
    if axis == 0:
        return run_lengths(mask.T, axis=1).T

    height, width = mask.shape
    padded = np.zeros((height, width + 2), dtype=np.int8)
    padded[:, 1:-1] = mask
    diff = np.diff(padded, axis=1)

    # Row-major order pairs every run start with its end
    starts = np.argwhere(diff == 1)
    ends = np.argwhere(diff == -1)
    lengths = ends[:, 1] - starts[:, 1]

    result = np.zeros((height, width), dtype=np.int32)
    result[mask] = np.repeat(lengths, lengths)
    return result


def gaussian_blur(values: np.ndarray, sigma: float) -> np.ndarray:
    """
    Separable Gaussian blur with a zero border.

    Kernel size is 2 * ceil(3 * sigma) + 1.
    """
    if sigma <= 0:
        return values.astype(np.float32, copy=True)

    ksize = int(math.ceil(3 * sigma)) * 2 + 1
    kernel = cv2.getGaussianKernel(ksize, sigma).astype(np.float32)
    return cv2.sepFilter2D(
        values.astype(np.float32), -1, kernel, kernel,
        borderType=cv2.BORDER_CONSTANT
    )


def classical_wall_likelihood(
    binary: np.ndarray,
    config: Optional[LikelihoodConfig] = None
) -> np.ndarray:
    """
    Heuristic wall likelihood from run lengths.

    For each ink pixel the horizontal extent (run length excluding the
    pixel) is compared with the vertical thickness of the run through it,
    and vice versa. Long, thin runs score high. The result is blurred.

    Args:
        binary: Binary mask (1 = ink)
        config: Likelihood options

    Returns:
        float32 map in [0, 1]
    """
    config = config or LikelihoodConfig()
    ink = binary.astype(bool)

    h_runs = run_lengths(ink, axis=1)
    v_runs = run_lengths(ink, axis=0)

    def _score(extent: np.ndarray, thickness: np.ndarray) -> np.ndarray:
        valid = ink & (extent > config.min_wall_length) & (thickness <= config.max_wall_thickness)
        ratio = extent / np.maximum(thickness, 1) / LIKELIHOOD_RATIO_NORMALIZER
        return np.where(valid, np.minimum(1.0, ratio), 0.0)

    h_score = _score(h_runs - 1, v_runs)
    v_score = _score(v_runs - 1, h_runs)
    raw = np.maximum(h_score, v_score).astype(np.float32)

    blurred = gaussian_blur(raw, config.blur_sigma)
    return np.clip(blurred, 0.0, 1.0)


def _prepare_model_input(gray: np.ndarray, size: int) -> np.ndarray:
    resized = cv2.resize(gray.astype(np.float32), (size, size), interpolation=cv2.INTER_LINEAR)
    return resized / 255.0


def _restore_model_output(output: Any, size: int, width: int, height: int) -> np.ndarray:
    probabilities = np.asarray(output, dtype=np.float32)
    probabilities = np.squeeze(probabilities)

    if probabilities.shape != (size, size):
        raise ClassifierOutputError(
            f"Classifier returned shape {probabilities.shape}, expected ({size}, {size})"
        )
    if not np.all(np.isfinite(probabilities)):
        raise ClassifierOutputError("Classifier returned non-finite values")

    probabilities = np.clip(probabilities, 0.0, 1.0)
    restored = cv2.resize(probabilities, (width, height), interpolation=cv2.INTER_LINEAR)
    return np.clip(restored, 0.0, 1.0)


def neural_wall_likelihood(
    gray: np.ndarray,
    classifier: WallClassifier,
    config: Optional[LikelihoodConfig] = None
) -> np.ndarray:
    """
    Likelihood from an external classifier.

    Args:
        gray: uint8 grayscale image
        classifier: Callable taking a normalized square image
        config: Likelihood options

    Returns:
        float32 map in [0, 1] at the original image size

    Raises:
        ClassifierOutputError: If the output cannot be used
    """
    config = config or LikelihoodConfig()
    height, width = gray.shape[:2]
    size = config.model_input_size

    output = classifier(_prepare_model_input(gray, size))
    if inspect.isawaitable(output):
        raise ClassifierOutputError("Async classifier used from synchronous code")
    return _restore_model_output(output, size, width, height)


def estimate_wall_likelihood(
    gray: np.ndarray,
    binary: np.ndarray,
    classifier: Optional[WallClassifier] = None,
    config: Optional[LikelihoodConfig] = None
) -> LikelihoodResult:
    """
    Estimate the wall likelihood map, falling back to the classical heuristic.

    Classifier failures are logged and never raised.

    Args:
        gray: uint8 grayscale image
        binary: Binary mask used by the classical path
        classifier: Optional neural classifier
        config: Likelihood options

    Returns:
        LikelihoodResult
    """
    config = config or LikelihoodConfig()
    reason = "no classifier"

    if classifier is not None:
        try:
            likelihood = neural_wall_likelihood(gray, classifier, config)
            logger.info("Wall likelihood: neural classifier")
            return LikelihoodResult(likelihood=likelihood, used_neural=True)
        except Exception as e:
            reason = f"classifier failed: {e}"
            logger.warning(f"Wall classifier unavailable, using classical fallback ({e})")

    likelihood = classical_wall_likelihood(binary, config)
    logger.info(f"Wall likelihood: classical ({np.count_nonzero(likelihood > 0.5)} px > 0.5)")
    return LikelihoodResult(likelihood=likelihood, used_neural=False, fallback_reason=reason)


async def estimate_wall_likelihood_async(
    gray: np.ndarray,
    binary: np.ndarray,
    classifier: Optional[WallClassifier] = None,
    config: Optional[LikelihoodConfig] = None
) -> LikelihoodResult:
    """
    Async variant of estimate_wall_likelihood.

    Coroutine classifiers are awaited on the loop; plain callables and all
    array work run in a worker thread.
    """
    config = config or LikelihoodConfig()
    reason = "no classifier"

    if classifier is not None:
        height, width = gray.shape[:2]
        size = config.model_input_size
        try:
            model_input = await asyncio.to_thread(_prepare_model_input, gray, size)
            if inspect.iscoroutinefunction(classifier):
                output = await classifier(model_input)
            else:
                output = await asyncio.to_thread(classifier, model_input)
                if inspect.isawaitable(output):
                    output = await output
            likelihood = await asyncio.to_thread(_restore_model_output, output, size, width, height)
            logger.info("Wall likelihood: neural classifier")
            return LikelihoodResult(likelihood=likelihood, used_neural=True)
        except Exception as e:
            reason = f"classifier failed: {e}"
            logger.warning(f"Wall classifier unavailable, using classical fallback ({e})")

    likelihood = await asyncio.to_thread(classical_wall_likelihood, binary, config)
    return LikelihoodResult(likelihood=likelihood, used_neural=False, fallback_reason=reason)


def compute_attraction_field(likelihood: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Gradient field of the likelihood map, pointing toward wall centres.

    Args:
        likelihood: float map in [0, 1]

    Returns:
        Tuple of (gx, gy) float32 arrays
    """
    values = likelihood.astype(np.float32)
    gx = cv2.Sobel(values, cv2.CV_32F, 1, 0, ksize=3) / 8.0
    gy = cv2.Sobel(values, cv2.CV_32F, 0, 1, ksize=3) / 8.0
    return gx, gy
