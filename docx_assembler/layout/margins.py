"""
Page margin patching for WordprocessingML documents.

Sets the four page margins of every section while leaving header, footer and
gutter distances alone when the template already defines them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Union

from lxml import etree

from ..config import DEFAULT_GUTTER_TWIPS, DEFAULT_HEADER_FOOTER_TWIPS, WORD_NS
from ..utils.units import cm_to_twips
from ..utils.xml_utils import (
    SECT_PR_SEQUENCE,
    find_child,
    insert_in_schema_order,
    parse_xml,
    serialize_xml,
    set_attribute_if_absent,
)

logger = logging.getLogger(__name__)

MARGIN_SIDES = ("top", "right", "bottom", "left")


@dataclass(frozen=True)
class MarginSpec:
    """Page margins in centimeters."""

    top: float
    right: float
    bottom: float
    left: float

    @classmethod
    def from_mapping(cls, margins: Mapping[str, float]) -> "MarginSpec":
        """
        Build from a ``{top, right, bottom, left}`` mapping.

        Keys may be strings or any object whose ``str()`` is the side name.

        Raises:
            ValueError: If a side is missing or not numeric
        """
        values = {str(key): value for key, value in margins.items()}
        missing = [side for side in MARGIN_SIDES if side not in values]
        if missing:
            raise ValueError(f"Missing margin values: {', '.join(missing)}")
        try:
            return cls(**{side: float(values[side]) for side in MARGIN_SIDES})
        except (TypeError, ValueError) as e:
            raise ValueError(f"Margin values must be numbers: {e}") from e

    def to_twips(self) -> Dict[str, int]:
        return {side: cm_to_twips(getattr(self, side)) for side in MARGIN_SIDES}


MarginsInput = Union[MarginSpec, Mapping[str, float]]


def as_margin_spec(margins: MarginsInput) -> MarginSpec:
    return margins if isinstance(margins, MarginSpec) else MarginSpec.from_mapping(margins)


def margin_twips_from(margins: MarginsInput) -> Dict[str, int]:
    """Convert a margin request in centimeters into twips."""
    return as_margin_spec(margins).to_twips()


def patch_margins(document_xml: Union[bytes, str], margin_twips: Mapping[str, int]) -> bytes:
    """
    Apply page margins to every section of a document.

    Args:
        document_xml: Content of ``word/document.xml``
        margin_twips: ``{top, right, bottom, left}`` in twips

    Returns:
        The patched document XML
    """
    tree = parse_xml(document_xml)
    sect_prs = tree.xpath("//w:sectPr", namespaces={"w": WORD_NS})

    for sect_pr in sect_prs:
        namespace = etree.QName(sect_pr).namespace or WORD_NS
        pg_mar = find_child(sect_pr, f"{{{namespace}}}pgMar")
        if pg_mar is None:
            pg_mar = etree.Element(f"{{{namespace}}}pgMar")
            insert_in_schema_order(sect_pr, pg_mar, SECT_PR_SEQUENCE)
            logger.debug("Created missing w:pgMar")

        for side in MARGIN_SIDES:
            pg_mar.set(f"{{{namespace}}}{side}", str(margin_twips[side]))
        set_attribute_if_absent(pg_mar, f"{{{namespace}}}header", DEFAULT_HEADER_FOOTER_TWIPS)
        set_attribute_if_absent(pg_mar, f"{{{namespace}}}footer", DEFAULT_HEADER_FOOTER_TWIPS)
        set_attribute_if_absent(pg_mar, f"{{{namespace}}}gutter", DEFAULT_GUTTER_TWIPS)

    logger.debug(f"Patched margins in {len(sect_prs)} section(s)")
    return serialize_xml(tree)
