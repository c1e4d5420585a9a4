"""
Image Loader Tests

Tests for decoding image files and bytes and validating pixel buffers.
"""

import io
import sys
import tempfile
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np
from PIL import Image

from floortrace.image import (
    ImageReadError,
    InvalidImageError,
    load_image,
    image_from_bytes,
    image_from_array,
    validate_image,
)


def create_png_bytes(mode: str = "RGB") -> bytes:
    image = Image.new(mode, (30, 20), color=0)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def test_load_image():
    """PNG files decode to RGBA."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "plan.png"
        path.write_bytes(create_png_bytes("L"))

        image = load_image(path)
        assert image.shape == (20, 30, 4)
        assert image.dtype == np.uint8
        assert (image[:, :, 3] == 255).all()

    print("  [PASS] Load image")


def test_load_image_errors():
    with tempfile.TemporaryDirectory() as tmpdir:
        for path in (Path(tmpdir) / "missing.png", Path(tmpdir)):
            try:
                load_image(path)
                assert False, f"Expected ImageReadError for {path}"
            except ImageReadError:
                pass

        corrupt = Path(tmpdir) / "corrupt.png"
        corrupt.write_bytes(b"not an image")
        try:
            load_image(corrupt)
            assert False, "Expected ImageReadError for corrupt file"
        except ImageReadError:
            pass

    print("  [PASS] Load errors")


def test_image_from_bytes():
    image = image_from_bytes(create_png_bytes())
    assert image.shape == (20, 30, 4)

    for data in (b"", b"garbage"):
        try:
            image_from_bytes(data)
            assert False, "Expected ImageReadError"
        except ImageReadError:
            pass

    print("  [PASS] Image from bytes")


def test_image_from_array():
    """Grayscale, RGB and float buffers normalize to uint8 RGBA copies."""
    gray = np.full((10, 12), 7, dtype=np.uint8)
    rgba = image_from_array(gray)
    assert rgba.shape == (10, 12, 4)
    assert (rgba[:, :, :3] == 7).all()

    rgb = np.zeros((10, 12, 3), dtype=np.uint8)
    assert image_from_array(rgb).shape == (10, 12, 4)

    floats = np.full((4, 4), 300.0)
    assert (image_from_array(floats)[:, :, 0] == 255).all()

    unit = np.zeros((4, 4))
    unit[0, 0] = 1.0
    unit[1, 1] = 0.5
    scaled = image_from_array(unit)[:, :, 0]
    assert scaled[0, 0] == 255 and scaled[1, 1] == 128 and scaled[2, 2] == 0
    assert (image_from_array(np.ones((4, 4)))[:, :, 0] == 255).all(), "Unit floats are white, not ink"

    source = np.zeros((5, 5, 4), dtype=np.uint8)
    copy = image_from_array(source)
    copy[0, 0, 0] = 9
    assert source[0, 0, 0] == 0, "Input must not be modified"

    print("  [PASS] Image from array")


def test_validate_image():
    assert validate_image(np.zeros((20, 30), dtype=np.uint8)) == (30, 20)

    for bad in (
        None,
        [[0, 0]],
        np.zeros((0, 5), dtype=np.uint8),
        np.zeros((5, 5, 2), dtype=np.uint8),
        np.zeros((2, 2, 2, 2), dtype=np.uint8),
        np.zeros((5, 5), dtype=bool),
    ):
        try:
            validate_image(bad)
            assert False, f"Expected InvalidImageError for {type(bad).__name__}"
        except InvalidImageError:
            pass

    print("  [PASS] Validate image")


def run_all_tests():
    """Run all image loader tests."""
    print("\n" + "=" * 60)
    print("Image Loader Tests")
    print("=" * 60)

    tests = [
        test_load_image,
        test_load_image_errors,
        test_image_from_bytes,
        test_image_from_array,
        test_validate_image,
    ]

    passed = 0
    print("\nLoader Tests:")
    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            print(f"  [FAIL] {test.__name__}: {e}")

    print("\n" + "=" * 60)
    print(f"Image Loader Results: {passed}/{len(tests)} tests passed")
    print("=" * 60)

    return passed == len(tests)


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
