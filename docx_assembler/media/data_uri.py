"""
Data URI decoding.

Images reach the assembler either as ``data:image/<type>;base64,<payload>``
URIs or as plain URLs. Decoding never raises: anything malformed or of an
unsupported type comes back as ``None``.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from ..config import WATERMARK_MIME_EXTENSION

logger = logging.getLogger(__name__)

_MIME_RE = re.compile(r"image/[^;,\s]+", re.IGNORECASE)
_DATA_IMAGE_RE = re.compile(r"\Adata:(image/[^;]+);base64,(.+)\Z", re.DOTALL | re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")

# MIME type -> file extension used for body images
IMAGE_MIME_EXTENSION = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
}


@dataclass(frozen=True)
class DataImage:
    """Decoded image payload of a data URI."""

    mime: str
    extension: str
    data: bytes


def split_data_uri(value: str) -> Optional[Tuple[str, str]]:
    """Split ``metadata,payload`` at the first comma; None if there is no comma."""
    if not value or "," not in value:
        return None
    metadata, payload = value.split(",", 1)
    return metadata, payload


def decode_base64(payload: str) -> Optional[bytes]:
    """
    Decode a base64 payload, ignoring embedded whitespace and line breaks.

    Returns:
        Decoded bytes, or None when the payload is not valid base64 or empty
    """
    cleaned = _WHITESPACE_RE.sub("", payload or "")
    if not cleaned:
        return None
    try:
        data = base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Invalid base64 payload: {e}")
        return None
    return data or None


def mime_from_metadata(metadata: str) -> Optional[str]:
    match = _MIME_RE.search(metadata or "")
    return match.group(0).lower() if match else None


def parse_watermark_data_uri(value: str) -> Optional[DataImage]:
    """
    Decode a watermark data URI.

    Only PNG and JPEG are accepted. The extension reported is the image
    format (``png`` or ``jpeg``).
    """
    if not value or not value.strip():
        return None

    parts = split_data_uri(value.strip())
    if parts is None:
        logger.debug("Watermark data has no metadata section")
        return None
    metadata, payload = parts

    mime = mime_from_metadata(metadata)
    extension = WATERMARK_MIME_EXTENSION.get(mime) if mime else None
    if not extension:
        logger.debug(f"Unsupported watermark type: {mime or metadata[:40]!r}")
        return None

    data = decode_base64(payload)
    if data is None:
        return None
    return DataImage(mime=mime, extension=extension, data=data)


def parse_data_image(src: str) -> Optional[DataImage]:
    """
    Decode an ``<img src>`` data URI.

    Returns:
        DataImage with a ``png`` or ``jpg`` extension, or None when ``src`` is
        not a supported base64 image
    """
    match = _DATA_IMAGE_RE.match(src or "")
    if not match:
        return None

    mime = match.group(1).lower()
    extension = IMAGE_MIME_EXTENSION.get(mime)
    if not extension:
        return None

    data = decode_base64(match.group(2))
    if data is None:
        return None
    return DataImage(mime=mime, extension=extension, data=data)


def is_data_uri(src: str) -> bool:
    return (src or "").lstrip().lower().startswith("data:")
