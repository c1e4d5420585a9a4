"""
Preprocessor Tests

Tests for grayscale conversion, thresholding, morphology and noise removal.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np
import cv2

from floortrace.raster import (
    PreprocessConfig,
    to_grayscale,
    global_threshold,
    compute_otsu_threshold,
    otsu_threshold,
    adaptive_threshold,
    morphological_close,
    remove_small_components,
    preprocess_image,
)
from floortrace.exceptions import ConfigurationError
from floortrace.image import InvalidImageError


def create_plan_image(width: int = 600, height: int = 400) -> np.ndarray:
    """White plan with four 10 px exterior walls and one interior wall."""
    image = np.full((height, width), 255, dtype=np.uint8)
    image[50:60, 50:550] = 0
    image[340:350, 50:550] = 0
    image[50:350, 50:60] = 0
    image[50:350, 540:550] = 0
    image[60:340, 295:305] = 0
    return image


def test_to_grayscale():
    """Test grayscale conversion of RGB, RGBA and grayscale input."""
    rgb = np.full((10, 10, 3), 100, dtype=np.uint8)
    assert to_grayscale(rgb).shape == (10, 10)
    assert int(to_grayscale(rgb)[0, 0]) == 100

    rgba = np.zeros((10, 10, 4), dtype=np.uint8)
    rgba[:, :, :3] = 200
    assert int(to_grayscale(rgba)[5, 5]) == 200, "Alpha should be ignored"

    gray = np.full((10, 10), 42, dtype=np.uint8)
    converted = to_grayscale(gray)
    assert converted is not gray
    assert np.array_equal(converted, gray)

    print("  [PASS] Grayscale conversion")


def test_global_threshold():
    """Pixels darker than the threshold are ink."""
    gray = np.array([[0, 127, 128, 255]], dtype=np.uint8)
    binary = global_threshold(gray, 128)
    assert binary.tolist() == [[1, 1, 0, 0]], f"Got {binary.tolist()}"

    print("  [PASS] Global threshold")


def test_otsu_separates_bimodal_image():
    """Otsu splits a two-tone image exactly between its tones."""
    gray = np.full((100, 100), 220, dtype=np.uint8)
    gray[:, :50] = 30

    threshold = compute_otsu_threshold(gray)
    assert 30 <= threshold < 220, f"Threshold {threshold} outside the tones"

    binary = otsu_threshold(gray)
    assert binary[:, :50].all(), "Dark half should be ink"
    assert not binary[:, 50:].any(), "Light half should be paper"

    print(f"  [PASS] Otsu threshold (t={threshold:.0f})")


def test_adaptive_threshold():
    """A dark line on paper is ink; uniform paper is not."""
    gray = np.full((60, 60), 255, dtype=np.uint8)
    gray[29:32, 5:55] = 0

    binary = adaptive_threshold(gray, window=15, c=2)
    assert binary[30, 30] == 1, "Line should be ink"
    assert binary[5, 5] == 0, "Paper corner should not be ink"
    assert binary[50, 30] == 0, "Paper far from the line should not be ink"

    mean_binary = adaptive_threshold(gray, window=15, c=2, method="mean")
    assert mean_binary[30, 30] == 1

    print("  [PASS] Adaptive threshold")


def test_morphological_close():
    """Closing bridges a one-pixel gap without touching the input."""
    binary = np.zeros((20, 20), dtype=np.uint8)
    binary[5:15, 5:9] = 1
    binary[5:15, 10:14] = 1

    closed = morphological_close(binary, 3)
    assert closed[5:15, 9].all(), "Gap column should be closed"
    assert binary[5, 9] == 0, "Input must not be modified"

    print("  [PASS] Morphological close")


def test_remove_small_components():
    """Components below min_size disappear."""
    binary = np.zeros((40, 40), dtype=np.uint8)
    binary[5:15, 5:15] = 1    # 100 px
    binary[30:33, 30:33] = 1  # 9 px

    cleaned = remove_small_components(binary, min_size=50)
    assert cleaned[10, 10] == 1, "Large component should survive"
    assert cleaned[31, 31] == 0, "Small component should be removed"
    assert binary[31, 31] == 1, "Input must not be modified"

    print("  [PASS] Small component removal")


def test_preprocess_image():
    """Full preprocessing records its steps and produces a binary mask."""
    image = create_plan_image()
    result = preprocess_image(image, PreprocessConfig(threshold_method="otsu"))

    assert result.steps_applied[:2] == ["grayscale", "binarize_otsu"]
    assert "closing" in result.steps_applied
    assert "denoise" in result.steps_applied
    assert result.threshold is not None
    assert result.binary.shape == image.shape
    assert set(np.unique(result.binary).tolist()) <= {0, 1}
    assert result.binary[55, 300] == 1, "Wall pixel should be ink"
    assert result.binary[200, 150] == 0, "Room pixel should be paper"
    assert 0.0 < result.ink_ratio < 0.5

    print(f"  [PASS] Preprocess image (ink ratio {result.ink_ratio:.3f})")


def test_preprocess_removes_specks():
    """Isolated specks are cleaned away by the default pipeline."""
    image = create_plan_image()
    cv2.circle(image, (150, 200), 2, 0, -1)

    result = preprocess_image(image, PreprocessConfig(threshold_method="otsu"))
    assert result.binary[200, 150] == 0, "Speck should be removed"
    assert result.binary[55, 300] == 1

    print("  [PASS] Speck removal")


def test_config_validation():
    """Invalid configuration values raise ConfigurationError."""
    for kwargs in (
        {"threshold_method": "bogus"},
        {"adaptive_window": 4},
        {"global_threshold": 300},
        {"closing_kernel": 0},
    ):
        try:
            PreprocessConfig(**kwargs)
            assert False, f"Expected ConfigurationError for {kwargs}"
        except ConfigurationError:
            pass

    print("  [PASS] Config validation")


def test_invalid_image():
    """Empty buffers are rejected."""
    try:
        preprocess_image(np.zeros((0, 10), dtype=np.uint8))
        assert False, "Expected InvalidImageError"
    except InvalidImageError:
        pass

    print("  [PASS] Invalid image rejected")


def run_all_tests():
    """Run all preprocessor tests."""
    print("\n" + "=" * 60)
    print("Preprocessor Tests")
    print("=" * 60)

    sections = [
        ("Thresholding Tests", [
            test_to_grayscale,
            test_global_threshold,
            test_otsu_separates_bimodal_image,
            test_adaptive_threshold,
        ]),
        ("Morphology Tests", [
            test_morphological_close,
            test_remove_small_components,
        ]),
        ("Pipeline Tests", [
            test_preprocess_image,
            test_preprocess_removes_specks,
            test_config_validation,
            test_invalid_image,
        ]),
    ]

    passed = 0
    total = 0
    for title, tests in sections:
        print(f"\n{title}:")
        for test in tests:
            total += 1
            try:
                test()
                passed += 1
            except AssertionError as e:
                print(f"  [FAIL] {test.__name__}: {e}")

    print("\n" + "=" * 60)
    print(f"Preprocessor Results: {passed}/{total} tests passed")
    print("=" * 60)

    return passed == total


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
