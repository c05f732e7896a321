"""
Image dimension sniffing.

Reads pixel dimensions straight from PNG and JPEG headers without decoding the
image. Every failure is reported as ``None``; callers fall back to sizing
without an aspect ratio.
"""

from __future__ import annotations

import logging
import struct
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

Dimensions = Tuple[int, int]

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
PNG_IHDR_LENGTH = 13

JPEG_SOI = b"\xff\xd8"
JPEG_SOF_MARKERS = frozenset(range(0xC0, 0xC4))
JPEG_EOI = 0xD9
JPEG_SOS = 0xDA
# Markers that carry no length field
JPEG_STANDALONE_MARKERS = frozenset([0x01, *range(0xD0, 0xD8)])


def parse_png_dimensions(data: bytes) -> Optional[Dimensions]:
    """
    Read (width, height) from the IHDR chunk of a PNG stream.

    The IHDR chunk must be the first chunk and declare a length of 13.
    """
    if not data or len(data) < 24:
        return None
    if data[:8] != PNG_SIGNATURE:
        return None

    chunk_length, chunk_type = struct.unpack(">I4s", data[8:16])
    if chunk_type != b"IHDR" or chunk_length != PNG_IHDR_LENGTH:
        return None

    width, height = struct.unpack(">II", data[16:24])
    return width, height


def parse_jpeg_dimensions(data: bytes) -> Optional[Dimensions]:
    """
    Read (width, height) from the first baseline/progressive SOF segment.

    Segments are walked by their length fields; a segment that claims more
    bytes than the buffer holds ends the scan without a result.
    """
    if not data or len(data) <= 4 or data[:2] != JPEG_SOI:
        return None

    size = len(data)
    pos = 2
    while pos < size:
        if data[pos] != 0xFF:
            # not on a marker boundary, resync byte by byte
            pos += 1
            continue

        while pos < size and data[pos] == 0xFF:
            pos += 1
        if pos >= size:
            return None
        marker = data[pos]
        pos += 1

        if marker in JPEG_SOF_MARKERS:
            if pos + 7 > size:
                return None
            length, _precision, height, width = struct.unpack(">HBHH", data[pos:pos + 7])
            if length < 7:
                return None
            return width, height
        if marker in (JPEG_EOI, JPEG_SOS):
            return None
        if marker in JPEG_STANDALONE_MARKERS or marker == 0x00:
            continue

        if pos + 2 > size:
            return None
        (length,) = struct.unpack(">H", data[pos:pos + 2])
        if length < 2 or pos + length > size:
            return None
        pos += length

    return None


def sniff_dimensions(data: bytes, image_format: str) -> Optional[Dimensions]:
    """
    Detect pixel dimensions of an encoded image.

    Args:
        data: Raw image bytes
        image_format: ``png``, ``jpeg`` or ``jpg``

    Returns:
        (width, height) in pixels, or None if they cannot be determined
    """
    fmt = (image_format or "").lower()
    try:
        if fmt == "png":
            dimensions = parse_png_dimensions(data)
        elif fmt in ("jpeg", "jpg"):
            dimensions = parse_jpeg_dimensions(data)
        else:
            dimensions = None
    except (struct.error, TypeError, IndexError) as e:
        logger.debug(f"Could not read {fmt} header: {e}")
        return None

    if dimensions is None:
        logger.debug(f"No dimensions detected for {fmt or 'unknown'} image ({len(data or b'')} bytes)")
    return dimensions
