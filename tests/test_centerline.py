"""
Centerline Tests

Tests for skeletonization, wall boundaries and wall thickness estimation.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np

from floortrace.raster import (
    extract_skeleton,
    distance_transform,
    extract_wall_boundaries,
    estimate_wall_thickness,
)


def create_bar(thickness: int = 8) -> np.ndarray:
    binary = np.zeros((60, 260), dtype=np.uint8)
    binary[26:26 + thickness, 30:230] = 1
    return binary


def test_extract_skeleton():
    """The skeleton is thin and lies inside the ink."""
    binary = create_bar()
    skeleton = extract_skeleton(binary)

    assert skeleton.dtype == np.uint8
    assert skeleton.any(), "Skeleton should not be empty"
    assert not (skeleton.astype(bool) & ~binary.astype(bool)).any(), "Skeleton must lie on ink"
    # Thin line through the middle of the bar
    assert 1 <= skeleton[:, 130].sum() <= 2

    print("  [PASS] Skeleton extraction")


def test_distance_transform():
    binary = create_bar()
    distances = distance_transform(binary)
    assert distances[0, 0] == 0
    assert distances[29, 130] > distances[26, 130]

    print("  [PASS] Distance transform")


def test_extract_wall_boundaries():
    """Only ink pixels touching paper are boundary pixels."""
    binary = np.zeros((20, 20), dtype=np.uint8)
    binary[5:15, 5:15] = 1
    boundary = extract_wall_boundaries(binary)

    assert boundary[5, 10] == 1, "Top edge is boundary"
    assert boundary[10, 10] == 0, "Interior is not boundary"
    assert boundary[0, 0] == 0, "Paper is not boundary"

    print("  [PASS] Wall boundaries")


def test_estimate_wall_thickness():
    """Thickness comes out close to the drawn bar thickness."""
    thickness = estimate_wall_thickness(create_bar(8))
    assert 6 <= thickness <= 10, f"Estimated {thickness}"

    print(f"  [PASS] Wall thickness ({thickness:.1f} px)")


def test_estimate_wall_thickness_empty():
    assert estimate_wall_thickness(np.zeros((20, 20), dtype=np.uint8), default=7) == 7.0

    print("  [PASS] Empty mask thickness default")


def run_all_tests():
    """Run all centerline tests."""
    print("\n" + "=" * 60)
    print("Centerline Tests")
    print("=" * 60)

    tests = [
        test_extract_skeleton,
        test_distance_transform,
        test_extract_wall_boundaries,
        test_estimate_wall_thickness,
        test_estimate_wall_thickness_empty,
    ]

    passed = 0
    print("\nSkeleton Tests:")
    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            print(f"  [FAIL] {test.__name__}: {e}")

    print("\n" + "=" * 60)
    print(f"Centerline Results: {passed}/{len(tests)} tests passed")
    print("=" * 60)

    return passed == len(tests)


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
