"""
Parser module for DOCX packages.

In-memory package store plus typed relationship and content-type parts.
"""

from .package_reader import PackageStore
from .relationships import ContentTypesPart, RelationshipsPart, image_content_type

__all__ = [
    "PackageStore",
    "RelationshipsPart",
    "ContentTypesPart",
    "image_content_type",
]
