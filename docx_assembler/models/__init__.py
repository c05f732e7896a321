"""Models for DOCX assembly."""

from .watermark import WatermarkImage

__all__ = ["WatermarkImage"]
