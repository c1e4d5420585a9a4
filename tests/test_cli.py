"""
CLI Tests

Tests for command-line argument parsing and validation.
"""

import argparse
import sys
import tempfile
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from floortrace.cli import (
    parse_label_box,
    parse_strategy_list,
    create_parser,
    validate_args,
    parse_args,
)
from floortrace.constants import DEFAULT_PERIMETER_STRATEGIES, DEFAULT_THRESHOLD_METHOD


def test_parse_label_box():
    """Test parsing a label box."""
    assert parse_label_box("120,80,60,20") == (120.0, 80.0, 60.0, 20.0)
    assert parse_label_box(" 1.5, 2 ,3,4 ") == (1.5, 2.0, 3.0, 4.0)

    for bad in ("1,2,3", "a,b,c,d", "10,10,0,5", "10,10,5,-1"):
        try:
            parse_label_box(bad)
            assert False, f"Should reject {bad!r}"
        except argparse.ArgumentTypeError:
            pass

    print("  [PASS] Parse label box")


def test_parse_strategy_list():
    """Test parsing perimeter strategies."""
    assert parse_strategy_list("wall,contour") == ["wall", "contour"]
    assert parse_strategy_list(" Lines , default ") == ["lines", "default"]

    for bad in ("wall,magic", "", " , "):
        try:
            parse_strategy_list(bad)
            assert False, f"Should reject {bad!r}"
        except argparse.ArgumentTypeError:
            pass

    print("  [PASS] Parse strategy list")


def test_create_parser():
    """Test parser creation."""
    parser = create_parser()

    assert parser is not None
    assert parser.prog == "floortrace"

    print("  [PASS] Create parser")


def test_parser_required_args():
    """Test parser required arguments."""
    parser = create_parser()

    try:
        parser.parse_args([])
        assert False, "Should have raised error"
    except SystemExit:
        pass

    print("  [PASS] Parser required args")


def test_parser_defaults():
    """Test parser default values."""
    args = create_parser().parse_args(["-i", "plan.png", "-o", "out.json"])

    assert args.threshold == DEFAULT_THRESHOLD_METHOD
    assert args.perimeter_strategies == list(DEFAULT_PERIMETER_STRATEGIES)
    assert args.segmentation == "lines"
    assert args.label is None
    assert args.scale is None
    assert not args.corners
    assert not args.bridge_gaps
    assert not args.verbose

    print("  [PASS] Parser defaults")


def test_parser_options():
    """Test repeatable labels and detection options."""
    args = create_parser().parse_args([
        "-i", "plan.png", "-o", "out.json",
        "--label", "10,10,50,20",
        "--label", "200,200,40,20",
        "--threshold", "otsu",
        "--perimeter-strategies", "contour,default",
        "--segmentation", "components",
        "--scale", "0.05",
        "--corners", "--bridge-gaps", "-v",
    ])

    assert args.label == [(10.0, 10.0, 50.0, 20.0), (200.0, 200.0, 40.0, 20.0)]
    assert args.threshold == "otsu"
    assert args.perimeter_strategies == ["contour", "default"]
    assert args.segmentation == "components"
    assert args.scale == 0.05
    assert args.corners and args.bridge_gaps and args.verbose

    print("  [PASS] Parser options")


def test_validate_args():
    """Test argument validation."""
    parser = create_parser()

    with tempfile.TemporaryDirectory() as tmpdir:
        image = Path(tmpdir) / "plan.png"
        image.write_bytes(b"")
        output = Path(tmpdir) / "nested" / "out.json"

        args = parser.parse_args(["-i", str(image), "-o", str(output)])
        is_valid, msg = validate_args(args)
        assert is_valid, msg
        assert output.parent.is_dir(), "Output directory should be created"

        args = parser.parse_args(["-i", str(Path(tmpdir) / "missing.png"), "-o", str(output)])
        is_valid, msg = validate_args(args)
        assert not is_valid and "not found" in msg

        args = parser.parse_args(["-i", tmpdir, "-o", str(output)])
        is_valid, msg = validate_args(args)
        assert not is_valid and "not a file" in msg

        args = parser.parse_args(["-i", str(image), "-o", str(output), "--scale", "-1"])
        is_valid, msg = validate_args(args)
        assert not is_valid and "Scale" in msg

        args = parser.parse_args(["-i", str(image), "-o", str(output), "--ocr-json", "nope.json"])
        is_valid, msg = validate_args(args)
        assert not is_valid and "OCR" in msg

    print("  [PASS] Validate args")


def test_parse_args_exits_on_invalid():
    try:
        parse_args(["-i", "/nonexistent/plan.png", "-o", "out.json"])
        assert False, "Should have exited"
    except SystemExit:
        pass

    print("  [PASS] Parse args exits on invalid input")


def run_all_tests():
    """Run all CLI tests."""
    print("\n" + "=" * 60)
    print("CLI Tests")
    print("=" * 60)

    tests = [
        test_parse_label_box,
        test_parse_strategy_list,
        test_create_parser,
        test_parser_required_args,
        test_parser_defaults,
        test_parser_options,
        test_validate_args,
        test_parse_args_exits_on_invalid,
    ]

    passed = 0
    print("\nArgument Tests:")
    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            print(f"  [FAIL] {test.__name__}: {e}")

    print("\n" + "=" * 60)
    print(f"CLI Results: {passed}/{len(tests)} tests passed")
    print("=" * 60)

    return passed == len(tests)


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
