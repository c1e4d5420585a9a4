"""
Perimeter Fallback Tests

Tests for the contour, scan-line and default perimeter strategies and
the ordered fallback chain that walks them.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np

from floortrace.constants import PerimeterStrategy
from floortrace.detection import PerimeterConfig, detect_perimeter, perimeter_from_scan_lines
from floortrace.exceptions import ConfigurationError
from floortrace.geometry import WallSegment
from floortrace.raster import make_rectilinear, detect_contour_perimeter, default_perimeter
from floortrace.vector import DetectedLine, detect_scan_lines

WIDTH = 600
HEIGHT = 400


def create_box_binary() -> np.ndarray:
    """A single 10 px outer wall box, no interior walls."""
    binary = np.zeros((HEIGHT, WIDTH), dtype=np.uint8)
    binary[50:60, 50:550] = 1
    binary[340:350, 50:550] = 1
    binary[50:350, 50:60] = 1
    binary[50:350, 540:550] = 1
    return binary


def create_exterior_walls():
    return [
        WallSegment(50, 50, 549, 59, True),
        WallSegment(50, 340, 549, 349, True),
        WallSegment(50, 50, 59, 349, False),
        WallSegment(540, 50, 549, 349, False),
    ]


def test_make_rectilinear():
    """Slightly skewed edges are snapped to shared levels."""
    skewed = [(0, 0), (100, 2), (101, 100), (1, 98)]
    aligned = make_rectilinear(skewed)

    assert len(aligned) == 4
    for i in range(4):
        (x1, y1), (x2, y2) = aligned[i], aligned[(i + 1) % 4]
        assert x1 == x2 or y1 == y2, f"Edge {i} is not axis-aligned: {aligned}"

    print("  [PASS] Rectilinear snapping")


def test_contour_perimeter():
    perimeter = detect_contour_perimeter(create_box_binary())

    assert perimeter is not None
    assert len(perimeter) == 4
    assert 140_000 <= perimeter.area <= 152_000, f"Area {perimeter.area}"

    assert detect_contour_perimeter(np.zeros((HEIGHT, WIDTH), dtype=np.uint8)) is None

    print(f"  [PASS] Contour perimeter (area {perimeter.area:,.0f} px)")


def test_scan_lines():
    horizontal, vertical = detect_scan_lines(create_box_binary())

    assert [l.near_edge for l in horizontal] == [50, 340]
    assert [l.near_edge for l in vertical] == [50, 540]
    assert horizontal[-1].far_edge == 350

    print("  [PASS] Scan lines")


def test_scan_line_perimeter():
    """Outer and inner faces both give exact boxes."""
    horizontal, vertical = detect_scan_lines(create_box_binary())

    outer = perimeter_from_scan_lines(horizontal, vertical, use_interior=False)
    assert outer.vertices == ((50, 50), (550, 50), (550, 350), (50, 350))

    inner = perimeter_from_scan_lines(horizontal, vertical, use_interior=True)
    assert inner.vertices == ((60, 60), (540, 60), (540, 340), (60, 340))

    assert perimeter_from_scan_lines([], vertical) is None

    print("  [PASS] Scan-line perimeter")


def test_scan_line_interior_ignores_crossing_walls():
    """Walls running through a line do not thicken it."""
    binary = np.zeros((500, 600), dtype=np.uint8)
    binary[40:50, 40:560] = 1
    binary[450:460, 40:560] = 1
    binary[40:460, 40:50] = 1
    binary[40:460, 550:560] = 1
    # Interior partitions crossing the top and left walls
    binary[40:300, 200:210] = 1
    binary[200:210, 40:400] = 1

    horizontal, vertical = detect_scan_lines(binary)
    top = min(horizontal, key=lambda l: l.position)
    assert (top.near_edge, top.far_edge) == (40, 50)

    inner = perimeter_from_scan_lines(horizontal, vertical, use_interior=True)
    assert inner.vertices == ((50, 50), (550, 50), (550, 450), (50, 450))

    print("  [PASS] Crossing walls ignored")


def test_scan_line_overlap_rejected():
    top = DetectedLine(100, 0, 500, 10, True)
    bottom = DetectedLine(105, 0, 500, 10, True)
    left = DetectedLine(0, 0, 300, 10, False)
    right = DetectedLine(400, 0, 300, 10, False)

    assert perimeter_from_scan_lines([top, bottom], [left, right]) is None

    print("  [PASS] Overlapping scan lines")


def test_default_perimeter():
    perimeter = default_perimeter(WIDTH, HEIGHT)
    assert perimeter.vertices == ((50, 50), (550, 50), (550, 350), (50, 350))

    # Small images shrink the margin
    small = default_perimeter(60, 40)
    assert small.bounds == (9, 9, 51, 31)

    print("  [PASS] Default perimeter")


def test_chain_prefers_walls():
    perimeter, method = detect_perimeter(create_box_binary(), create_exterior_walls(), WIDTH, HEIGHT)

    assert method == PerimeterStrategy.WALLS
    assert perimeter.area == 481 * 281

    print("  [PASS] Wall strategy first")


def test_chain_falls_through():
    """Each failing strategy hands over to the next."""
    binary = create_box_binary()

    perimeter, method = detect_perimeter(binary, [], WIDTH, HEIGHT)
    assert method == PerimeterStrategy.CONTOUR

    config = PerimeterConfig(strategies=("wall", "lines"), use_interior=False)
    perimeter, method = detect_perimeter(binary, [], WIDTH, HEIGHT, config)
    assert method == PerimeterStrategy.SCAN_LINES
    assert perimeter.bounds == (50, 50, 550, 350)

    blank = np.zeros((HEIGHT, WIDTH), dtype=np.uint8)
    perimeter, method = detect_perimeter(blank, [], WIDTH, HEIGHT)
    assert method == PerimeterStrategy.DEFAULT
    assert perimeter.area == 500 * 300

    print("  [PASS] Fallthrough")


def test_chain_can_fail():
    config = PerimeterConfig(strategies=("wall", "contour"))
    blank = np.zeros((HEIGHT, WIDTH), dtype=np.uint8)

    assert detect_perimeter(blank, [], WIDTH, HEIGHT, config) == (None, "none")

    print("  [PASS] All strategies fail")


def test_config_validation():
    for kwargs in (
        {"strategies": ()},
        {"strategies": ("wall", "magic")},
        {"epsilon_ratio": 0},
        {"margin": -5},
    ):
        try:
            PerimeterConfig(**kwargs)
            assert False, f"Expected ConfigurationError for {kwargs}"
        except ConfigurationError:
            pass

    print("  [PASS] Config validation")


def run_all_tests():
    """Run all perimeter fallback tests."""
    print("\n" + "=" * 60)
    print("Perimeter Fallback Tests")
    print("=" * 60)

    sections = [
        ("Strategy Tests", [
            test_make_rectilinear,
            test_contour_perimeter,
            test_scan_lines,
            test_scan_line_perimeter,
            test_scan_line_interior_ignores_crossing_walls,
            test_scan_line_overlap_rejected,
            test_default_perimeter,
        ]),
        ("Chain Tests", [
            test_chain_prefers_walls,
            test_chain_falls_through,
            test_chain_can_fail,
            test_config_validation,
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
    print(f"Fallback Results: {passed}/{total} tests passed")
    print("=" * 60)

    return passed == total


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
