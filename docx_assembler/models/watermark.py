"""
Watermark image model.

Handles the decoded watermark image used for one composition: its bytes,
format, media filename and lazily detected pixel dimensions.
"""

from __future__ import annotations

from functools import cached_property
from typing import Optional, Tuple
import logging

from ..config import WATERMARK_BASENAME
from ..media.data_uri import parse_watermark_data_uri
from ..media.image_sniffer import sniff_dimensions

logger = logging.getLogger(__name__)


class WatermarkImage:
    """
    Represents the watermark image of one composition.

    The record lives only for the duration of a single package mutation.
    """

    def __init__(self, data: bytes, extension: str, filename: Optional[str] = None):
        """
        Initialize watermark image.

        Args:
            data: Encoded image bytes
            extension: Image format, ``png`` or ``jpeg``
            filename: Media filename (defaults to ``watermark.png`` / ``watermark.jpg``)
        """
        self.data = data
        self.extension = extension
        self.filename = filename or f"{WATERMARK_BASENAME}.{self.file_extension}"

        logger.debug(f"WatermarkImage initialized: {self.filename} ({len(data)} bytes)")

    @classmethod
    def from_data_uri(cls, watermark_data: Optional[str]) -> Optional["WatermarkImage"]:
        """
        Decode a watermark data URI.

        Returns:
            WatermarkImage, or None for empty, malformed or unsupported input
        """
        decoded = parse_watermark_data_uri(watermark_data or "")
        if decoded is None:
            return None
        return cls(decoded.data, decoded.extension)

    @property
    def file_extension(self) -> str:
        """Extension used for the media file and the content-type Default."""
        return "jpg" if self.extension == "jpeg" else self.extension

    @property
    def content_type(self) -> str:
        return f"image/{self.extension}"

    @property
    def target(self) -> str:
        """Media path relative to the ``word/`` folder."""
        return f"media/{self.filename}"

    @cached_property
    def dimensions(self) -> Optional[Tuple[int, int]]:
        """Pixel (width, height) read from the image header, if detectable."""
        return sniff_dimensions(self.data, self.extension)

    def __repr__(self) -> str:
        return f"WatermarkImage(filename={self.filename!r}, size={len(self.data)})"
