"""
Media module for DOCX assembly.

Handles data URI decoding, image header sniffing and image assets.
"""

from .data_uri import DataImage, parse_data_image, parse_watermark_data_uri
from .image_sniffer import parse_jpeg_dimensions, parse_png_dimensions, sniff_dimensions
from .media_store import ImageAsset, MediaStore, sanitize_filename

__all__ = [
    "DataImage",
    "parse_data_image",
    "parse_watermark_data_uri",
    "parse_png_dimensions",
    "parse_jpeg_dimensions",
    "sniff_dimensions",
    "ImageAsset",
    "MediaStore",
    "sanitize_filename",
]
