"""Export module - DOCX generation from templates."""

from .docx_exporter import Document, apply_margins_to_docx, apply_watermark_to_docx

__all__ = [
    "Document",
    "apply_margins_to_docx",
    "apply_watermark_to_docx",
]
