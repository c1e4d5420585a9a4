"""
Corner Detector Tests

Tests for the Harris response and corner non-maximum suppression.
"""

import math
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np

from floortrace.raster import CornerConfig, harris_response, detect_corners
from floortrace.exceptions import ConfigurationError
from floortrace.image import InvalidImageError


def create_square_image() -> np.ndarray:
    """Black square on white paper."""
    image = np.full((100, 100, 3), 255, dtype=np.uint8)
    image[30:70, 30:70] = 0
    return image


def nearest_distance(point, corners):
    return min(math.hypot(point[0] - x, point[1] - y) for x, y in corners)


def test_square_corners_detected():
    """Each corner of a square has a detection nearby."""
    corners = detect_corners(create_square_image())

    assert len(corners) >= 4, f"Only {len(corners)} corners"
    for expected in ((30, 30), (69, 30), (69, 69), (30, 69)):
        distance = nearest_distance(expected, corners)
        assert distance <= 5, f"No corner near {expected} (nearest {distance:.1f} px)"

    print(f"  [PASS] Square corners ({len(corners)} detected)")


def test_edges_are_not_corners():
    """Straight edges give a negative response."""
    gray = create_square_image()[:, :, 0]
    response = harris_response(gray)
    assert response[30, 50] < 0, "Edge midpoint should not respond as a corner"
    assert response[50, 50] == 0, "Flat interior has no response"

    print("  [PASS] Edge response")


def test_border_is_zeroed():
    gray = np.random.RandomState(0).randint(0, 255, (50, 50)).astype(np.uint8)
    response = harris_response(gray, CornerConfig(window_radius=3))
    assert not response[:4, :].any()
    assert not response[:, -4:].any()

    print("  [PASS] Border suppression")


def test_max_corners_cap():
    corners = detect_corners(create_square_image(), CornerConfig(max_corners=2))
    assert len(corners) <= 2

    print("  [PASS] Max corners cap")


def test_uniform_image_has_no_corners():
    assert detect_corners(np.full((50, 50), 128, dtype=np.uint8)) == []

    print("  [PASS] Uniform image")


def test_config_and_input_validation():
    try:
        CornerConfig(k=0.3)
        assert False, "Expected ConfigurationError"
    except ConfigurationError:
        pass

    try:
        detect_corners(np.zeros((0, 0), dtype=np.uint8))
        assert False, "Expected InvalidImageError"
    except InvalidImageError:
        pass

    print("  [PASS] Validation")


def run_all_tests():
    """Run all corner detector tests."""
    print("\n" + "=" * 60)
    print("Corner Detector Tests")
    print("=" * 60)

    tests = [
        test_square_corners_detected,
        test_edges_are_not_corners,
        test_border_is_zeroed,
        test_max_corners_cap,
        test_uniform_image_has_no_corners,
        test_config_and_input_validation,
    ]

    passed = 0
    print("\nHarris Tests:")
    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            print(f"  [FAIL] {test.__name__}: {e}")

    print("\n" + "=" * 60)
    print(f"Corner Detector Results: {passed}/{len(tests)} tests passed")
    print("=" * 60)

    return passed == len(tests)


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
