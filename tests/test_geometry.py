"""
Geometry Tests

Tests for polygon utilities, shape types and real-unit calculations.
"""

import dataclasses
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from floortrace.geometry import (
    signed_area,
    polygon_area,
    polygon_perimeter,
    polygon_centroid,
    point_in_polygon,
    bounding_box,
    segments_intersect,
    is_self_intersecting,
    is_valid_polygon,
    WallSegment,
    Perimeter,
    RoomBox,
    calculate_floor_area,
    calculate_perimeter_length,
    validate_perimeter,
)

SQUARE = [(0, 0), (10, 0), (10, 10), (0, 10)]
BOWTIE = [(0, 0), (10, 10), (10, 0), (0, 10)]
L_SHAPE = [(0, 0), (20, 0), (20, 10), (10, 10), (10, 20), (0, 20)]


def test_polygon_area():
    """Shoelace area for a square and an L shape."""
    assert polygon_area(SQUARE) == 100
    assert polygon_area(L_SHAPE) == 300
    assert polygon_area(SQUARE, scale=0.5) == 25
    assert signed_area(SQUARE) == -signed_area(list(reversed(SQUARE)))
    assert polygon_area([(0, 0), (1, 1)]) == 0

    print("  [PASS] Polygon area")


def test_area_invariants():
    """Area scales with k squared and ignores start vertex and winding."""
    for k in (2, 3.5):
        scaled = [(x * k, y * k) for x, y in L_SHAPE]
        assert abs(polygon_area(scaled) - 300 * k * k) < 1e-6

    for shift in range(len(L_SHAPE)):
        rotated = L_SHAPE[shift:] + L_SHAPE[:shift]
        assert polygon_area(rotated) == 300
    assert polygon_area(list(reversed(L_SHAPE))) == 300

    w, h = 37, 11
    rectangle = [(0, 0), (w, 0), (w, h), (0, h)]
    assert polygon_area(rectangle) == w * h
    assert polygon_perimeter(rectangle) == 2 * (w + h)

    print("  [PASS] Area invariants")


def test_polygon_perimeter():
    assert polygon_perimeter(SQUARE) == 40
    assert polygon_perimeter(L_SHAPE) == 80
    assert polygon_perimeter(SQUARE, scale=0.1) == 4.0

    print("  [PASS] Polygon perimeter")


def test_polygon_centroid():
    cx, cy = polygon_centroid(SQUARE)
    assert abs(cx - 5) < 1e-9 and abs(cy - 5) < 1e-9

    # Degenerate polygon falls back to the vertex mean
    assert polygon_centroid([(0, 0), (2, 0), (4, 0)]) == (2, 0)
    assert polygon_centroid([]) is None

    print("  [PASS] Polygon centroid")


def test_point_in_polygon():
    assert point_in_polygon((5, 5), SQUARE)
    assert not point_in_polygon((15, 5), SQUARE)
    assert point_in_polygon((5, 15), L_SHAPE)
    assert not point_in_polygon((15, 15), L_SHAPE), "Notch of the L is outside"

    hexagon = [(10, 0), (30, 0), (40, 17), (30, 34), (10, 34), (0, 17)]
    assert point_in_polygon(polygon_centroid(hexagon), hexagon)
    assert not point_in_polygon((1000, -1000), hexagon)

    print("  [PASS] Point in polygon")


def test_self_intersection():
    assert is_self_intersecting(BOWTIE)
    assert not is_self_intersecting(SQUARE)
    assert not is_self_intersecting(L_SHAPE)
    assert segments_intersect((0, 0), (10, 10), (0, 10), (10, 0))
    assert not segments_intersect((0, 0), (10, 0), (0, 5), (10, 5))
    assert is_valid_polygon(SQUARE)
    assert not is_valid_polygon(BOWTIE)

    print("  [PASS] Self-intersection")


def test_inputs_not_modified():
    vertices = list(L_SHAPE)
    polygon_area(vertices)
    polygon_centroid(vertices)
    is_self_intersecting(vertices)
    assert vertices == L_SHAPE

    print("  [PASS] Inputs unchanged")


def test_bounding_box():
    assert bounding_box(L_SHAPE) == (0, 0, 20, 20)
    assert bounding_box([]) is None

    print("  [PASS] Bounding box")


def test_wall_segment():
    """Walls are frozen and carry a read-only pixel array."""
    wall = WallSegment(50, 50, 549, 59, True, pixels=[[50, 50], [51, 50]])

    assert wall.length == 499
    assert wall.thickness == 9
    assert wall.pixel_count == 2
    assert wall.inner_face("top") == 59
    assert wall.inner_face("bottom") == 50
    assert wall.to_dict()["orientation"] == "horizontal"

    try:
        wall.pixels[0, 0] = 7
        assert False, "Pixels should be read-only"
    except ValueError:
        pass

    try:
        wall.x1 = 0
        assert False, "WallSegment should be frozen"
    except dataclasses.FrozenInstanceError:
        pass

    try:
        WallSegment(10, 10, 5, 20, False)
        assert False, "Inverted box should be rejected"
    except ValueError:
        pass

    print("  [PASS] WallSegment")


def test_perimeter_type():
    perimeter = Perimeter(SQUARE)

    assert len(perimeter) == 4
    assert perimeter.area == 100
    assert perimeter.length == 40
    assert perimeter.contains(5, 5)
    assert perimeter.bounds == (0, 0, 10, 10)
    assert perimeter.to_polygon().area == 100
    assert perimeter.to_dict()["self_intersecting"] is False

    try:
        Perimeter([(0, 0), (1, 1)])
        assert False, "Perimeter needs 3 vertices"
    except ValueError:
        pass

    print("  [PASS] Perimeter")


def test_room_box():
    box = RoomBox.from_xywh(10, 20, 100, 50)

    assert (box.x2, box.y2) == (110, 70)
    assert box.area == 5000
    assert box.aspect_ratio == 2
    assert box.center == (60, 45)
    assert box.contains_box(RoomBox(20, 30, 40, 40))
    assert box.meets_minimum(50) and not box.meets_minimum(60)
    assert box.clipped(50, 50) == RoomBox(10, 20, 50, 50)
    assert box.clipped(5, 5) is None

    try:
        RoomBox(10, 10, 10, 20)
        assert False, "Zero-width box should be rejected"
    except ValueError:
        pass

    print("  [PASS] RoomBox")


def test_calculator():
    """Real-unit area and length use the feet-per-pixel scale."""
    assert calculate_floor_area(SQUARE, 0.5) == 25
    assert calculate_floor_area([(0, 0), (1, 1)], 1.0) == 0
    assert calculate_floor_area(SQUARE, 0) == 0
    assert calculate_perimeter_length(SQUARE, 0.5) == 20

    print("  [PASS] Calculator")


def test_validate_perimeter():
    """Problems are reported as warnings, never repaired."""
    assert validate_perimeter(SQUARE) == []
    assert validate_perimeter(L_SHAPE) == []

    warnings = validate_perimeter(BOWTIE)
    assert "Polygon is self-intersecting" in warnings
    assert any(w.startswith("Invalid geometry") for w in warnings)

    assert validate_perimeter([(0, 0), (1, 0)]) == ["Too few vertices: 2"]
    assert "Polygon has zero area" in validate_perimeter([(0, 0), (5, 0), (10, 0)])

    print("  [PASS] Perimeter validation")


def run_all_tests():
    """Run all geometry tests."""
    print("\n" + "=" * 60)
    print("Geometry Tests")
    print("=" * 60)

    sections = [
        ("Polygon Tests", [
            test_polygon_area,
            test_area_invariants,
            test_polygon_perimeter,
            test_polygon_centroid,
            test_point_in_polygon,
            test_self_intersection,
            test_inputs_not_modified,
            test_bounding_box,
        ]),
        ("Shape Tests", [
            test_wall_segment,
            test_perimeter_type,
            test_room_box,
        ]),
        ("Calculator Tests", [
            test_calculator,
            test_validate_perimeter,
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
    print(f"Geometry Results: {passed}/{total} tests passed")
    print("=" * 60)

    return passed == total


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
