"""
DOCX Assembler - builds Word documents from templates.

This package generates DOCX files from a template package and converted body
XML, and patches existing packages in place:

- Body injection into the template's main document
- Image assets collected from the body markup (inline or downloaded)
- Page margins applied to every section
- Image watermarks rendered as a dedicated page header

Main Components:
- Document: Template-based document generation
- Parser: Package store, relationship and content-type parts
- Layout: Page margins
- Media: Data URIs, image headers and image assets
- Engine: Watermark geometry
- Renderers: Watermark header rendering
- Utils: Units, XML helpers, IDs and logging
"""

from .exceptions import (
    DocxAssemblerError,
    PackageError,
    MissingPartError,
    MediaError,
    AssetFetchError,
)
from .config import AssemblerConfig, DEFAULT_CONFIG
from .parser import PackageStore, RelationshipsPart, ContentTypesPart
from .layout import MarginSpec, patch_margins
from .models import WatermarkImage
from .renderers import compose_watermark
from .export import Document, apply_margins_to_docx, apply_watermark_to_docx
from .utils.rich_logger import get_logger, setup_logging

__version__ = "0.1.0"

__all__ = [
    "Document",
    "apply_margins_to_docx",
    "apply_watermark_to_docx",
    "compose_watermark",
    "patch_margins",
    "MarginSpec",
    "WatermarkImage",
    "PackageStore",
    "RelationshipsPart",
    "ContentTypesPart",
    "AssemblerConfig",
    "DEFAULT_CONFIG",
    "DocxAssemblerError",
    "PackageError",
    "MissingPartError",
    "MediaError",
    "AssetFetchError",
    "get_logger",
    "setup_logging",
]
