"""
XML utilities for DOCX parts.

Thin typed helpers over lxml used by the patchers: qualified names, parsing and
serialization of package parts, child lookup, conditional attributes,
schema-ordered insertion and namespace declaration on the document root.
"""

from __future__ import annotations

import copy
import logging
from typing import Iterable, Optional, Sequence, Union

from lxml import etree

from ..config import NAMESPACES

logger = logging.getLogger(__name__)

# Child order of w:sectPr (CT_SectPr)
SECT_PR_SEQUENCE: Sequence[str] = (
    "headerReference",
    "footerReference",
    "footnotePr",
    "endnotePr",
    "type",
    "pgSz",
    "pgMar",
    "paperSrc",
    "pgBorders",
    "lnNumType",
    "pgNumType",
    "cols",
    "formProt",
    "vAlign",
    "noEndnote",
    "titlePg",
    "textDirection",
    "bidi",
    "rtlGutter",
    "docGrid",
    "printerSettings",
    "sectPrChange",
)

_PARSER = etree.XMLParser(resolve_entities=False, remove_blank_text=False, huge_tree=True)


def qn(name: str) -> str:
    """
    Turn a prefixed name such as ``w:pgMar`` into Clark notation.

    Args:
        name: Prefixed tag or attribute name using a prefix from NAMESPACES

    Returns:
        ``{namespace}local`` string
    """
    prefix, _, local = name.partition(":")
    if not local:
        return name
    return f"{{{NAMESPACES[prefix]}}}{local}"


def parse_xml(data: Union[bytes, str]) -> etree._ElementTree:
    """Parse a package part. Malformed XML raises ``etree.XMLSyntaxError``."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return etree.ElementTree(etree.fromstring(data, _PARSER))


def serialize_xml(tree: Union[etree._ElementTree, etree._Element]) -> bytes:
    """Serialize a tree as a standalone UTF-8 XML document."""
    return etree.tostring(tree, xml_declaration=True, encoding="UTF-8", standalone=True)


def local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def find_child(parent: etree._Element, tag: str) -> Optional[etree._Element]:
    """Return the first direct child with the given Clark-notation tag."""
    for child in parent:
        if child.tag == tag:
            return child
    return None


def set_attribute_if_absent(element: etree._Element, name: str, value: object) -> bool:
    """
    Set an attribute only when the element does not carry it yet.

    Returns:
        True if the attribute was written
    """
    if element.get(name) is not None:
        return False
    element.set(name, str(value))
    return True


def insert_in_schema_order(
    parent: etree._Element,
    child: etree._Element,
    sequence: Sequence[str],
) -> etree._Element:
    """
    Insert ``child`` after every sibling that precedes it in ``sequence``.

    Siblings with the same local name stay ahead of the new child, so repeated
    elements keep their relative order. Unknown siblings are treated as
    belonging after the child.

    Args:
        parent: Element receiving the child
        child: Element to insert
        sequence: Local names in schema order

    Returns:
        The inserted child
    """
    try:
        rank = sequence.index(local_name(child))
    except ValueError:
        parent.append(child)
        return child

    position = 0
    for index, sibling in enumerate(parent):
        if not isinstance(sibling.tag, str):
            continue
        try:
            sibling_rank = sequence.index(local_name(sibling))
        except ValueError:
            continue
        if sibling_rank <= rank:
            position = index + 1
    parent.insert(position, child)
    return child


def ensure_root_namespace(tree: etree._ElementTree, prefix: str, uri: str) -> str:
    """
    Make sure the root element declares ``uri``.

    lxml namespace maps are read-only, so a missing declaration is added by
    rebuilding the root element and moving its children over. Comments and
    processing instructions around the root are carried along.

    Returns:
        The prefix bound to ``uri`` on the root
    """
    root = tree.getroot()
    for existing_prefix, existing_uri in root.nsmap.items():
        if existing_uri == uri and existing_prefix is not None:
            return existing_prefix

    chosen = prefix
    suffix = 1
    while chosen in root.nsmap:
        chosen = f"{prefix}{suffix}"
        suffix += 1

    nsmap = dict(root.nsmap)
    nsmap[chosen] = uri
    new_root = etree.Element(root.tag, attrib=dict(root.attrib), nsmap=nsmap)
    new_root.text = root.text
    for child in list(root):
        new_root.append(child)
    for sibling in reversed(list(root.itersiblings(preceding=True))):
        new_root.addprevious(copy.copy(sibling))
    for sibling in reversed(list(root.itersiblings())):
        new_root.addnext(copy.copy(sibling))
    tree._setroot(new_root)
    logger.debug(f"Declared namespace {chosen}={uri} on document root")
    return chosen


def remove_elements(elements: Iterable[etree._Element]) -> int:
    """Detach elements from their parents, keeping the parent's text flow intact."""
    removed = 0
    for element in list(elements):
        parent = element.getparent()
        if parent is None:
            continue
        if element.tail:
            previous = element.getprevious()
            if previous is not None:
                previous.tail = (previous.tail or "") + element.tail
            else:
                parent.text = (parent.text or "") + element.tail
        parent.remove(element)
        removed += 1
    return removed


def splice_between_anchors(
    source: str,
    start_anchor: str,
    end_anchor: str,
    fragment: str,
) -> Optional[str]:
    """
    Replace whatever sits between two structural anchors.

    The first ``start_anchor`` is kept, everything up to the next occurrence of
    ``end_anchor`` is replaced by ``fragment`` and the end anchor is kept.

    Returns:
        The spliced text, or None when either anchor is missing
    """
    start = source.find(start_anchor)
    if start == -1:
        return None
    content_start = start + len(start_anchor)
    end = source.find(end_anchor, content_start)
    if end == -1:
        return None
    return source[:content_start] + fragment + source[end:]
