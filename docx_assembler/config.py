"""
Configuration for DOCX assembly.

Holds the fixed OOXML vocabulary (namespaces, relationship and content types,
part names) and the tunables used by the patchers. Tables are read-only so they
can be shared freely between documents.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

# OPC / WordprocessingML namespaces
WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
OPC_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
CONTENT_TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
WP_NS = "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing"
DRAWING_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
PICTURE_NS = "http://schemas.openxmlformats.org/drawingml/2006/picture"

NAMESPACES: Mapping[str, str] = MappingProxyType({
    "w": WORD_NS,
    "r": REL_NS,
    "wp": WP_NS,
    "a": DRAWING_NS,
    "pic": PICTURE_NS,
})

# Relationship types
HEADER_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/header"
IMAGE_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"

# Content types
HEADER_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.header+xml"

# Fixed part names
DOCUMENT_PART = "word/document.xml"
NUMBERING_PART = "word/numbering.xml"
DOCUMENT_RELS_PART = "word/_rels/document.xml.rels"
CONTENT_TYPES_PART = "[Content_Types].xml"
MEDIA_DIR = "word/media"
WATERMARK_HEADER_PART = "word/header_watermark.xml"
WATERMARK_HEADER_RELS_PART = "word/_rels/header_watermark.xml.rels"

# Page margin defaults (twips), applied only when the attribute is missing
DEFAULT_HEADER_FOOTER_TWIPS = 708
DEFAULT_GUTTER_TWIPS = 0

# US-Letter page metrics used when the document does not declare its own
DEFAULT_PAGE_METRICS: Mapping[str, int] = MappingProxyType({
    "width_twips": 12_240,
    "height_twips": 15_840,
    "left_margin_twips": 1_440,
    "right_margin_twips": 1_440,
    "top_margin_twips": 1_440,
    "bottom_margin_twips": 1_440,
})

# Watermark drawing
WATERMARK_DEFAULT_EXTENT_EMU = 9_000_000
WATERMARK_SCALE_FACTOR = 0.85
WATERMARK_ALPHA_AMOUNT = 80_000
WATERMARK_IMAGE_REL_ID = "rId1"
WATERMARK_BASENAME = "watermark"

WATERMARK_ANCHOR_ATTRIBUTES: Mapping[str, str] = MappingProxyType({
    "distT": "0",
    "distB": "0",
    "distL": "0",
    "distR": "0",
    "simplePos": "0",
    "relativeHeight": "251658240",
    "behindDoc": "1",
    "locked": "0",
    "layoutInCell": "1",
    "allowOverlap": "1",
})

# MIME type -> internal image format
WATERMARK_MIME_EXTENSION: Mapping[str, str] = MappingProxyType({
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
})


@dataclass(frozen=True)
class AssemblerConfig:
    """
    Runtime settings for document assembly.

    Args:
        fetch_timeout: Seconds to wait for remote image assets (None waits forever)
        user_agent: User-Agent header sent with remote image requests
        media_dir: Package folder that receives image assets
    """

    fetch_timeout: Optional[float] = None
    user_agent: str = "docx-assembler"
    media_dir: str = MEDIA_DIR


DEFAULT_CONFIG = AssemblerConfig()
