"""
Snapping Tests

Tests for the vertex-editing snap helpers.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from floortrace.vector import (
    LineSegment,
    line_intersection,
    find_intersections,
    find_nearest_point,
    snap_to_nearest_line,
    snap_edge_to_lines,
    apply_secondary_alignment,
)


def test_line_intersection():
    horizontal = LineSegment(0, 50, 100, 50)
    vertical = LineSegment(30, 0, 30, 100)

    x, y = line_intersection(horizontal, vertical)
    assert abs(x - 30) < 1e-9 and abs(y - 50) < 1e-9

    assert line_intersection(horizontal, LineSegment(0, 80, 100, 80)) is None

    print("  [PASS] Line intersection")


def test_find_intersections():
    """Infinite lines cross everywhere; max_extension keeps nearby crossings."""
    horizontal = [LineSegment(0, 50, 100, 50)]
    vertical = [LineSegment(30, 0, 30, 100), LineSegment(300, 0, 300, 100)]

    everything = find_intersections(horizontal, vertical)
    assert len(everything) == 2

    nearby = find_intersections(horizontal, vertical, max_extension=20)
    assert len(nearby) == 1
    x, y = nearby[0].point
    assert abs(x - 30) < 1e-9 and abs(y - 50) < 1e-9
    assert nearby[0].second is vertical[0]

    print("  [PASS] Intersections")


def test_find_nearest_point():
    candidates = [(100, 100), (110, 104), (300, 300)]

    assert find_nearest_point((108, 103), candidates) == (110, 104)
    assert find_nearest_point((200, 200), candidates) is None
    assert find_nearest_point((120, 100), candidates, max_distance=5) is None

    print("  [PASS] Nearest point")


def test_snap_to_nearest_line():
    assert snap_to_nearest_line(52, [50, 100]) == 50
    assert snap_to_nearest_line(98, [50, 100]) == 100
    assert snap_to_nearest_line(60, [50]) is None

    print("  [PASS] Nearest line")


def test_snap_edge_to_lines():
    """Snapping the start edge keeps the end edge fixed."""
    assert snap_edge_to_lines(52, 100, [50]) == (50, 102)
    assert snap_edge_to_lines(0, 98, [100], start_edge=False) == (0, 100)
    assert snap_edge_to_lines(30, 40, [100]) == (30, 40)

    print("  [PASS] Edge snapping")


def test_secondary_alignment():
    vertices = [(0, 0), (100, 3), (100, 100), (4, 100)]
    aligned = apply_secondary_alignment(vertices, 0, (2, 1))

    assert aligned == [(2, 1), (100, 1), (100, 100), (2, 100)]
    assert vertices == [(0, 0), (100, 3), (100, 100), (4, 100)], "Input must not be modified"

    # Out-of-range index leaves the vertices alone
    assert apply_secondary_alignment(vertices, 9, (2, 1)) == vertices

    print("  [PASS] Secondary alignment")


def run_all_tests():
    """Run all snapping tests."""
    print("\n" + "=" * 60)
    print("Snapping Tests")
    print("=" * 60)

    tests = [
        test_line_intersection,
        test_find_intersections,
        test_find_nearest_point,
        test_snap_to_nearest_line,
        test_snap_edge_to_lines,
        test_secondary_alignment,
    ]

    passed = 0
    print("\nSnap Tests:")
    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            print(f"  [FAIL] {test.__name__}: {e}")

    print("\n" + "=" * 60)
    print(f"Snapping Results: {passed}/{len(tests)} tests passed")
    print("=" * 60)

    return passed == len(tests)


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
