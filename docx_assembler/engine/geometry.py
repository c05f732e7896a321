"""Geometry primitives and helpers for watermark placement."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from lxml import etree

from ..config import (
    DEFAULT_PAGE_METRICS,
    WATERMARK_DEFAULT_EXTENT_EMU,
    WATERMARK_SCALE_FACTOR,
    WORD_NS,
)
from ..utils.units import pixels_to_emu, twips_to_emu
from ..utils.xml_utils import parse_xml

logger = logging.getLogger(__name__)

_NS = {"w": WORD_NS}
_W = f"{{{WORD_NS}}}"


@dataclass(slots=True, frozen=True)
class ContentArea:
    """Printable area of a page (page size minus margins), in twips."""

    width_twips: int
    height_twips: int

    @property
    def width_emu(self) -> int:
        return twips_to_emu(self.width_twips)

    @property
    def height_emu(self) -> int:
        return twips_to_emu(self.height_twips)


@dataclass(slots=True, frozen=True)
class Extent:
    """Drawing size in EMU."""

    cx: int
    cy: int

    @classmethod
    def default(cls) -> "Extent":
        return cls(WATERMARK_DEFAULT_EXTENT_EMU, WATERMARK_DEFAULT_EXTENT_EMU)

    def as_attributes(self) -> dict:
        return {"cx": str(self.cx), "cy": str(self.cy)}


def _first(tree: etree._ElementTree, *paths: str) -> Optional[etree._Element]:
    for path in paths:
        found = tree.xpath(path, namespaces=_NS)
        if found:
            return found[0]
    return None


def _read_twips(element: etree._Element, name: str, metrics: dict, key: str) -> None:
    value = element.get(f"{_W}{name}")
    if value is not None:
        metrics[key] = int(float(value))


def extract_content_area(document_xml: Union[bytes, str]) -> Optional[ContentArea]:
    """
    Compute the content area of the first section.

    Reads ``w:pgSz`` and ``w:pgMar`` (preferring those inside ``w:sectPr``)
    and falls back to US-Letter metrics for anything not declared.

    Args:
        document_xml: Content of ``word/document.xml``

    Returns:
        ContentArea, or None if the document cannot be read
    """
    metrics = dict(DEFAULT_PAGE_METRICS)
    try:
        tree = parse_xml(document_xml)
        pg_sz = _first(tree, "//w:sectPr/w:pgSz", "//w:pgSz")
        if pg_sz is not None:
            _read_twips(pg_sz, "w", metrics, "width_twips")
            _read_twips(pg_sz, "h", metrics, "height_twips")

        pg_mar = _first(tree, "//w:sectPr/w:pgMar", "//w:pgMar")
        if pg_mar is not None:
            _read_twips(pg_mar, "left", metrics, "left_margin_twips")
            _read_twips(pg_mar, "right", metrics, "right_margin_twips")
            _read_twips(pg_mar, "top", metrics, "top_margin_twips")
            _read_twips(pg_mar, "bottom", metrics, "bottom_margin_twips")
    except (etree.XMLSyntaxError, ValueError, OverflowError) as e:
        logger.warning(f"Could not read page geometry: {e}")
        return None

    width = metrics["width_twips"] - metrics["left_margin_twips"] - metrics["right_margin_twips"]
    height = metrics["height_twips"] - metrics["top_margin_twips"] - metrics["bottom_margin_twips"]
    return ContentArea(width_twips=max(width, 1), height_twips=max(height, 1))


def plan_extent(
    content_area: Optional[ContentArea],
    dimensions: Optional[Tuple[int, int]] = None,
) -> Extent:
    """
    Size the watermark drawing.

    With known pixel dimensions the image keeps its aspect ratio, is never
    scaled up, is shrunk by WATERMARK_SCALE_FACTOR and stays inside the
    content area. Without dimensions it fills the content area.

    Args:
        content_area: Content area, or None when it could not be determined
        dimensions: Image (width, height) in pixels

    Returns:
        Extent in EMU
    """
    if content_area is None:
        return Extent.default()

    max_width = content_area.width_emu
    max_height = content_area.height_emu

    if dimensions:
        width_px, height_px = dimensions
        if width_px > 0 and height_px > 0:
            image_width = pixels_to_emu(width_px)
            image_height = pixels_to_emu(height_px)

            scale = min(max_width / image_width, max_height / image_height, 1.0)
            scale *= WATERMARK_SCALE_FACTOR

            target_width = max(int(image_width * scale), 1)
            target_height = max(int(image_height * scale), 1)
            return Extent(min(target_width, max_width), min(target_height, max_height))

    return Extent(max_width, max_height)


def calculate_watermark_extent(
    document_xml: Union[bytes, str],
    dimensions: Optional[Tuple[int, int]] = None,
) -> Extent:
    """Plan the watermark extent against the document's current page setup."""
    extent = plan_extent(extract_content_area(document_xml), dimensions)
    logger.debug(f"Watermark extent: {extent.cx}x{extent.cy} EMU (image {dimensions})")
    return extent
