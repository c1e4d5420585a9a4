"""
Command Line Interface Module

Parses command-line arguments for the floor plan analysis pipeline.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .constants import (
    DEFAULT_PERIMETER_STRATEGIES,
    DEFAULT_THRESHOLD_METHOD,
    THRESHOLD_METHODS,
    PerimeterStrategy,
)
from .detection.wall_detector import SEGMENTATION_COMPONENTS, SEGMENTATION_LINES

_STRATEGY_NAMES = (
    PerimeterStrategy.WALLS,
    PerimeterStrategy.CONTOUR,
    PerimeterStrategy.SCAN_LINES,
    PerimeterStrategy.DEFAULT,
)


def parse_label_box(value: str) -> Tuple[float, float, float, float]:
    """
    Parse a label box given as x,y,width,height.

    Examples:
        "120,80,60,20" -> (120.0, 80.0, 60.0, 20.0)
    """
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 4:
        raise argparse.ArgumentTypeError(f"Label must be x,y,width,height: {value}")
    try:
        x, y, w, h = (float(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Label values must be numbers: {value}")
    if w <= 0 or h <= 0:
        raise argparse.ArgumentTypeError(f"Label width and height must be positive: {value}")
    return x, y, w, h


def parse_strategy_list(value: str) -> List[str]:
    """Parse a comma-separated perimeter strategy list."""
    strategies = [s.strip().lower() for s in value.split(",") if s.strip()]
    unknown = [s for s in strategies if s not in _STRATEGY_NAMES]
    if unknown or not strategies:
        raise argparse.ArgumentTypeError(
            f"Unknown perimeter strategies {unknown}, choose from {', '.join(_STRATEGY_NAMES)}"
        )
    return strategies


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the pipeline."""
    parser = argparse.ArgumentParser(
        prog="floortrace",
        description="Detect walls, perimeter and room boxes in floor plan images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m floortrace.cli -i plan.png -o out.json
  python -m floortrace.cli -i plan.png -o out.json --label 420,310,90,24 --corners
  python -m floortrace.cli -i plan.png -o out.json --ocr-json lines.json --verbose
        """
    )

    # Required arguments
    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Input floor plan image (PNG, JPEG, ...)"
    )

    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Output JSON file path"
    )

    # Room labels
    parser.add_argument(
        "--label",
        action="append",
        type=parse_label_box,
        help="Room label box 'x,y,width,height' in pixels (repeatable)"
    )

    parser.add_argument(
        "--ocr-json",
        help="OCR lines with word boxes (JSON) to search for dimension labels"
    )

    # Measurement
    parser.add_argument(
        "--scale",
        type=float,
        help="Feet per pixel (default: derived from the first dimension label)"
    )

    parser.add_argument(
        "--corners",
        action="store_true",
        help="Detect corner points for snapping"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    # Detection options
    detection_group = parser.add_argument_group('detection')

    detection_group.add_argument(
        "--threshold",
        choices=THRESHOLD_METHODS,
        default=DEFAULT_THRESHOLD_METHOD,
        help=f"Binarization method (default: {DEFAULT_THRESHOLD_METHOD})"
    )

    detection_group.add_argument(
        "--perimeter-strategies",
        type=parse_strategy_list,
        default=list(DEFAULT_PERIMETER_STRATEGIES),
        help=f"Ordered perimeter fallbacks (default: {','.join(DEFAULT_PERIMETER_STRATEGIES)})"
    )

    detection_group.add_argument(
        "--segmentation",
        choices=[SEGMENTATION_LINES, SEGMENTATION_COMPONENTS],
        default=SEGMENTATION_LINES,
        help="Build walls from line segments or from ink components (default: lines)"
    )

    detection_group.add_argument(
        "--bridge-gaps",
        action="store_true",
        help="Close door and window openings in the mask before detection"
    )

    return parser


def validate_args(args: argparse.Namespace) -> Tuple[bool, str]:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments

    Returns:
        Tuple of (is_valid, error_message)
    """
    input_path = Path(args.input)
    if not input_path.exists():
        return False, f"Input file not found: {args.input}"

    if not input_path.is_file():
        return False, f"Input is not a file: {args.input}"

    if args.ocr_json and not Path(args.ocr_json).is_file():
        return False, f"OCR file not found: {args.ocr_json}"

    if args.scale is not None and args.scale <= 0:
        return False, f"Scale must be positive: {args.scale}"

    output_dir = Path(args.output).parent
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return False, f"Cannot create output directory: {e}"

    return True, ""


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse and validate command-line arguments.

    Args:
        args: Optional list of arguments (uses sys.argv if None)

    Returns:
        Parsed and validated arguments
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    is_valid, error_msg = validate_args(parsed)
    if not is_valid:
        parser.error(error_msg)

    return parsed


def main(argv: Optional[List[str]] = None):
    """Main entry point for CLI."""
    args = parse_args(argv)

    # Import pipeline and run
    from .pipeline import run_pipeline

    try:
        run_pipeline(args)
    except KeyboardInterrupt:
        print("\nProcessing cancelled by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
