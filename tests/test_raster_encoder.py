"""
Unit tests for the BMP raster encoder.

No service is involved: the encoder is a pure function.
"""

import hashlib
import struct

import pytest

from core.exceptions import (
    DimensionMismatchError,
    DimensionTooLargeError,
    InvalidBitmapError,
    InvalidDimensionsError,
    InvalidPixelError,
)
from modules.raster_encoder import (
    HEADER_SIZE,
    RasterEncoder,
    bitmap_size,
    encode_bitmap,
    is_bitmap,
    pixels_from_rgb,
    placeholder_pixel,
    read_bitmap_header,
    row_padding,
)


def _expected_size(width, height):
    padding = (4 - (3 * width) % 4) % 4
    return 54 + height * (3 * width + padding)


class TestLayout:
    """Header fields and file size."""

    @pytest.mark.parametrize("width,height", [(1, 1), (2, 2), (3, 5), (5, 3), (64, 64), (7, 1)])
    def test_file_length_matches_formula(self, width, height):
        """Output length is 54 + height * (3 * width + padding)."""
        pixels = [(1, 2, 3)] * (width * height)
        data = encode_bitmap(width, height, pixels)

        assert len(data) == _expected_size(width, height)
        assert len(data) == bitmap_size(width, height)

    def test_row_padding(self):
        """Rows are padded to a 4-byte boundary."""
        assert row_padding(1) == 1
        assert row_padding(2) == 2
        assert row_padding(3) == 3
        assert row_padding(4) == 0
        assert row_padding(64) == 0

    def test_header_fields(self):
        """File and info headers carry the standard values."""
        data = encode_bitmap(3, 2)

        signature, file_size, reserved1, reserved2, offset = struct.unpack_from("<2sIHHI", data, 0)
        assert signature == b"BM"
        assert file_size == len(data)
        assert (reserved1, reserved2) == (0, 0)
        assert offset == HEADER_SIZE == 54

        (header_size, width, height, planes, bpp, compression,
         image_size, xppm, yppm, colors, important) = struct.unpack_from("<IiiHHIIiiII", data, 14)
        assert header_size == 40
        assert (width, height) == (3, 2)
        assert planes == 1
        assert bpp == 24
        assert compression == 0
        assert image_size == len(data) - 54
        assert (xppm, yppm) == (2835, 2835)
        assert (colors, important) == (0, 0)

    def test_rows_bottom_up_and_bgr(self):
        """Bottom row is written first; channels are stored blue, green, red."""
        # 1x2 image: top pixel red, bottom pixel blue
        data = encode_bitmap(1, 2, [(255, 0, 0), (0, 0, 255)])
        rows = data[54:]

        # Each row: 3 bytes + 1 byte padding
        assert rows[0:4] == bytes([255, 0, 0, 0])   # bottom row, blue in BGR
        assert rows[4:8] == bytes([0, 0, 255, 0])   # top row, red in BGR

    def test_padding_bytes_are_zero(self):
        data = encode_bitmap(1, 3, [(9, 9, 9)] * 3)
        rows = data[54:]
        for row_start in range(0, len(rows), 4):
            assert rows[row_start + 3] == 0


class TestPlaceholder:
    """Synthetic gradient generation."""

    def test_placeholder_is_deterministic(self):
        """encode(2, 2, None) yields the same bytes on every call."""
        first = encode_bitmap(2, 2)
        second = encode_bitmap(2, 2)

        assert first == second
        assert hashlib.sha256(first).digest() == hashlib.sha256(second).digest()

    def test_placeholder_2x2_bytes(self):
        """Exact pixel bytes of the smallest interesting placeholder."""
        data = encode_bitmap(2, 2)
        rows = data[54:]

        # Bottom row first (y=1): (x=0) -> r=0, g=127, b=63 ; (x=1) -> r=127, g=127, b=127
        assert rows[0:8] == bytes([63, 127, 0, 127, 127, 127, 0, 0])
        # Top row (y=0): (x=0) -> 0,0,0 ; (x=1) -> r=127, g=0, b=63
        assert rows[8:16] == bytes([0, 0, 0, 63, 0, 127, 0, 0])

    def test_placeholder_pixel_formula(self):
        assert placeholder_pixel(0, 0, 64, 64) == (0, 0, 0)
        assert placeholder_pixel(63, 0, 64, 64) == (251, 0, 125)
        assert placeholder_pixel(63, 63, 64, 64) == (251, 251, 251)

    def test_larger_placeholder_reproducible(self):
        assert encode_bitmap(300, 200) == encode_bitmap(300, 200)
        assert len(encode_bitmap(300, 200)) == _expected_size(300, 200)

    def test_explicit_pixels_equal_placeholder(self):
        """Passing the gradient explicitly produces the same file."""
        width, height = 5, 3
        pixels = [placeholder_pixel(x, y, width, height) for y in range(height) for x in range(width)]

        assert encode_bitmap(width, height, pixels) == encode_bitmap(width, height)


class TestValidation:
    """Dimension and pixel count errors."""

    def test_pixel_count_mismatch(self):
        with pytest.raises(DimensionMismatchError) as exc_info:
            encode_bitmap(2, 2, [(0, 0, 0)] * 3)

        assert exc_info.value.pixel_count == 3

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (0, 0), (-1, 5)])
    def test_zero_or_negative_dimensions_fail(self, width, height):
        """Never returns a header-only file."""
        with pytest.raises(InvalidDimensionsError):
            encode_bitmap(width, height)

    def test_width_too_large(self):
        with pytest.raises(DimensionTooLargeError):
            encode_bitmap(70000, 1)

    def test_height_too_large(self):
        with pytest.raises(DimensionTooLargeError):
            encode_bitmap(1, 70000)

    def test_too_large_checked_before_pixels(self):
        with pytest.raises(DimensionTooLargeError):
            encode_bitmap(70000, 1, [])

    @pytest.mark.parametrize("pixel", [(256, 0, 0), (0, -1, 0), (0, 0, 300), (1.5, 0, 0), (0, 0)])
    def test_out_of_range_channel_fails(self, pixel):
        with pytest.raises(InvalidPixelError) as exc_info:
            encode_bitmap(2, 1, [(0, 0, 0), pixel])

        assert exc_info.value.index == 1

    def test_channel_bounds_accepted(self):
        data = encode_bitmap(1, 1, [(255, 0, 255)])

        assert data[HEADER_SIZE:HEADER_SIZE + 3] == bytes([255, 0, 255])


class TestRgbAndHeaderParsing:
    """Raw RGB conversion and header validation."""

    def test_pixels_from_rgb(self):
        assert pixels_from_rgb(bytes([1, 2, 3, 4, 5, 6]), 2, 1) == [(1, 2, 3), (4, 5, 6)]

    def test_pixels_from_rgb_wrong_length(self):
        with pytest.raises(DimensionMismatchError):
            pixels_from_rgb(bytes(5), 2, 1)

    def test_read_header_roundtrips_geometry(self):
        info = read_bitmap_header(encode_bitmap(7, 3))

        assert (info.width, info.height) == (7, 3)
        assert info.bits_per_pixel == 24
        assert info.pixel_offset == 54

    def test_read_header_rejects_garbage(self):
        with pytest.raises(InvalidBitmapError):
            read_bitmap_header(b"not a bitmap at all" * 5)

    def test_read_header_rejects_truncated(self):
        data = encode_bitmap(8, 8)
        with pytest.raises(InvalidBitmapError):
            read_bitmap_header(data[:-10])

    def test_is_bitmap(self):
        assert is_bitmap(encode_bitmap(4, 4)) is True
        assert is_bitmap(b"BM") is False
        assert is_bitmap(bytes(64 * 64 * 3)) is False


class TestRasterEncoder:
    """Class wrapper delegates to encode_bitmap()."""

    def test_encode_matches_function(self):
        encoder = RasterEncoder()
        assert encoder.encode(3, 3) == encode_bitmap(3, 3)
        assert encoder.placeholder(3, 3) == encode_bitmap(3, 3)

    def test_encode_rgb(self):
        encoder = RasterEncoder()
        data = encoder.encode_rgb(bytes([10, 20, 30]), 1, 1)

        assert data[54:57] == bytes([30, 20, 10])
        assert len(data) == 58
