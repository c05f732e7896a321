"""Renderers - parts rendered into a DOCX package."""

from .watermark_renderer import (
    add_header_reference_to_document,
    build_header_relationships_xml,
    build_watermark_header_xml,
    compose_watermark,
    extract_watermark_image,
)

__all__ = [
    "add_header_reference_to_document",
    "build_header_relationships_xml",
    "build_watermark_header_xml",
    "compose_watermark",
    "extract_watermark_image",
]
