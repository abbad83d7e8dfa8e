"""
24-bit uncompressed BMP encoder.

Pure functions only - no I/O, no shared state. The same inputs always
produce byte-identical output.

File layout:
    BITMAPFILEHEADER (14 bytes)  'BM', file size, reserved, pixel offset (54)
    BITMAPINFOHEADER (40 bytes)  geometry, 1 plane, 24 bpp, no compression
    Pixel rows                   bottom-to-top, BGR, each row zero-padded
                                 to a multiple of 4 bytes

Usage:
    data = encode_bitmap(64, 64)                     # placeholder gradient
    data = encode_bitmap(2, 1, [(255, 0, 0), (0, 0, 255)])
    info = read_bitmap_header(data)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from core.exceptions import (
    DimensionMismatchError,
    DimensionTooLargeError,
    InvalidBitmapError,
    InvalidDimensionsError,
    InvalidPixelError,
)

Pixel = Tuple[int, int, int]

FILE_HEADER_SIZE = 14
INFO_HEADER_SIZE = 40
HEADER_SIZE = FILE_HEADER_SIZE + INFO_HEADER_SIZE

# Width and height are limited to what fits a 16-bit field
MAX_DIMENSION = 65535

BITS_PER_PIXEL = 24
BYTES_PER_PIXEL = 3

# 72 DPI expressed in pixels per meter
PIXELS_PER_METER = 2835

_FILE_HEADER = struct.Struct("<2sIHHI")
_INFO_HEADER = struct.Struct("<IiiHHIIiiII")


@dataclass(frozen=True)
class BitmapInfo:
    """Geometry parsed from a bitmap header."""

    width: int
    height: int
    bits_per_pixel: int
    file_size: int
    pixel_offset: int


def row_padding(width: int) -> int:
    """Zero bytes appended to each row so its length is a multiple of 4."""
    return (4 - (BYTES_PER_PIXEL * width) % 4) % 4


def bitmap_size(width: int, height: int) -> int:
    """Total file size for a 24-bit bitmap of the given geometry."""
    return HEADER_SIZE + height * (BYTES_PER_PIXEL * width + row_padding(width))


def placeholder_pixel(x: int, y: int, width: int, height: int) -> Pixel:
    """
    Gradient pixel for the placeholder image.

    Red grows with x, green with y and blue with x + y, each scaled to 0..255.
    """
    r = (x * 255) // width
    g = (y * 255) // height
    b = ((x + y) * 255) // (width + height)
    return r, g, b


def encode_bitmap(
    width: int,
    height: int,
    pixels: Optional[Sequence[Pixel]] = None
) -> bytes:
    """
    Encode pixels as a complete 24-bit BMP file.

    Args:
        width: Image width in pixels (1..65535)
        height: Image height in pixels (1..65535)
        pixels: Row-major (r, g, b) tuples, top row first, exactly
            width * height of them. When None, the placeholder gradient
            is generated.

    Returns:
        Complete bitmap file bytes

    Raises:
        InvalidDimensionsError: If width or height is not positive
        DimensionTooLargeError: If width or height exceeds 65535
        DimensionMismatchError: If len(pixels) != width * height
        InvalidPixelError: If a pixel is not three integers in 0..255
    """
    _check_dimensions(width, height)
    if pixels is not None:
        if len(pixels) != width * height:
            raise DimensionMismatchError(width, height, len(pixels))
        _check_pixels(pixels)

    padding = row_padding(width)
    image_size = height * (BYTES_PER_PIXEL * width + padding)
    file_size = HEADER_SIZE + image_size

    out = bytearray()
    out += _FILE_HEADER.pack(b"BM", file_size, 0, 0, HEADER_SIZE)
    out += _INFO_HEADER.pack(
        INFO_HEADER_SIZE,
        width,
        height,             # positive height = bottom-up rows
        1,                  # color planes
        BITS_PER_PIXEL,
        0,                  # BI_RGB, no compression
        image_size,
        PIXELS_PER_METER,
        PIXELS_PER_METER,
        0,                  # colors used
        0,                  # important colors
    )

    pad = bytes(padding)
    for y in range(height - 1, -1, -1):
        for x in range(width):
            if pixels is None:
                r, g, b = placeholder_pixel(x, y, width, height)
            else:
                r, g, b = pixels[y * width + x]
            out.append(b)
            out.append(g)
            out.append(r)
        out += pad

    return bytes(out)


def pixels_from_rgb(data: bytes, width: int, height: int) -> List[Pixel]:
    """
    Split raw RGB bytes (top row first, no padding) into pixel tuples.

    Raises:
        DimensionMismatchError: If len(data) is not width * height * 3
    """
    if len(data) != width * height * BYTES_PER_PIXEL:
        raise DimensionMismatchError(width, height, len(data) // BYTES_PER_PIXEL)
    return [
        (data[i], data[i + 1], data[i + 2])
        for i in range(0, len(data), BYTES_PER_PIXEL)
    ]


def is_bitmap(data: bytes) -> bool:
    """True if data is a well-formed 24-bit uncompressed bitmap."""
    try:
        read_bitmap_header(data)
    except InvalidBitmapError:
        return False
    return True


def read_bitmap_header(data: bytes) -> BitmapInfo:
    """
    Parse and validate the headers of a 24-bit uncompressed bitmap.

    Only the layout produced by encode_bitmap() is accepted: BITMAPINFOHEADER,
    24 bpp, no compression, no color table, and enough pixel data for the
    declared geometry.

    Raises:
        InvalidBitmapError: If the bytes are not such a bitmap
    """
    if len(data) < HEADER_SIZE:
        raise InvalidBitmapError(f"Bitmap too short: {len(data)} bytes")

    signature, file_size, _, _, pixel_offset = _FILE_HEADER.unpack_from(data, 0)
    if signature != b"BM":
        raise InvalidBitmapError("Missing 'BM' signature")

    (header_size, width, height, planes, bpp, compression,
     _, _, _, _, _) = _INFO_HEADER.unpack_from(data, FILE_HEADER_SIZE)

    if header_size != INFO_HEADER_SIZE:
        raise InvalidBitmapError(f"Unsupported info header size {header_size}")
    if planes != 1 or bpp != BITS_PER_PIXEL or compression != 0:
        raise InvalidBitmapError(
            f"Unsupported bitmap: planes={planes}, bpp={bpp}, compression={compression}",
            {"bits_per_pixel": bpp, "compression": compression},
        )
    if width <= 0 or height <= 0:
        raise InvalidBitmapError(f"Unsupported geometry {width}x{height}")
    if pixel_offset < HEADER_SIZE:
        raise InvalidBitmapError(f"Pixel offset {pixel_offset} inside header")

    required = pixel_offset + height * (BYTES_PER_PIXEL * width + row_padding(width))
    if len(data) < required:
        raise InvalidBitmapError(
            f"Truncated bitmap: {len(data)} bytes, need {required}",
            {"width": width, "height": height},
        )

    return BitmapInfo(
        width=width,
        height=height,
        bits_per_pixel=bpp,
        file_size=file_size,
        pixel_offset=pixel_offset,
    )


class RasterEncoder:
    """
    Stateless wrapper around encode_bitmap().

    Exists so callers can take an encoder as a dependency; all instances
    behave identically.
    """

    def encode(
        self,
        width: int,
        height: int,
        pixels: Optional[Sequence[Pixel]] = None
    ) -> bytes:
        return encode_bitmap(width, height, pixels)

    def encode_rgb(self, data: bytes, width: int, height: int) -> bytes:
        """Encode raw RGB bytes (top row first) as a bitmap."""
        return encode_bitmap(width, height, pixels_from_rgb(data, width, height))

    def placeholder(self, width: int, height: int) -> bytes:
        """Deterministic gradient bitmap."""
        return encode_bitmap(width, height)


def _check_dimensions(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise InvalidDimensionsError(width, height)
    if width > MAX_DIMENSION or height > MAX_DIMENSION:
        raise DimensionTooLargeError(width, height, MAX_DIMENSION)


def _check_pixels(pixels: Sequence[Pixel]) -> None:
    for index, pixel in enumerate(pixels):
        if len(pixel) != 3 or not all(
            isinstance(channel, int) and 0 <= channel <= 255 for channel in pixel
        ):
            raise InvalidPixelError(index, pixel)


__all__ = [
    "BitmapInfo",
    "HEADER_SIZE",
    "MAX_DIMENSION",
    "RasterEncoder",
    "bitmap_size",
    "encode_bitmap",
    "is_bitmap",
    "pixels_from_rgb",
    "placeholder_pixel",
    "read_bitmap_header",
    "row_padding",
]
