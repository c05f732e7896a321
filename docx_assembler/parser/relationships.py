"""
Relationship and content-type parts.

Typed wrappers over ``*.rels`` parts and ``[Content_Types].xml`` that keep the
cross-references of a package consistent while parts are added.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Union

from lxml import etree

from ..config import CONTENT_TYPES_NS, OPC_NS
from ..utils.id_manager import RelationshipIdAllocator
from ..utils.xml_utils import parse_xml, remove_elements, serialize_xml

logger = logging.getLogger(__name__)


def _root_namespace(root: etree._Element, fallback: str) -> str:
    return etree.QName(root).namespace or fallback


class RelationshipsPart:
    """
    A parsed ``.rels`` part.

    Handles relationship lookup, removal and addition with collision-free IDs.
    """

    def __init__(self, tree: etree._ElementTree):
        self.tree = tree
        self.root = tree.getroot()
        self.namespace = _root_namespace(self.root, OPC_NS)
        self._allocator = RelationshipIdAllocator(self.ids())

    @classmethod
    def from_xml(cls, rels_xml: Union[bytes, str]) -> "RelationshipsPart":
        return cls(parse_xml(rels_xml))

    @classmethod
    def new(cls) -> "RelationshipsPart":
        root = etree.Element(f"{{{OPC_NS}}}Relationships", nsmap={None: OPC_NS})
        return cls(etree.ElementTree(root))

    @property
    def _tag(self) -> str:
        return f"{{{self.namespace}}}Relationship"

    def _elements(self) -> List[etree._Element]:
        return list(self.root.iter(self._tag))

    def ids(self) -> List[str]:
        return [element.get("Id") for element in self._elements() if element.get("Id")]

    def relationships(self) -> List[Dict[str, str]]:
        """All relationships as ``{Id, Type, Target[, TargetMode]}`` dicts."""
        return [dict(element.attrib) for element in self._elements()]

    def find_by_target(self, target: str) -> List[Dict[str, str]]:
        return [rel for rel in self.relationships() if rel.get("Target") == target]

    def remove_by_target(self, target: str) -> List[str]:
        """
        Remove every relationship pointing at ``target``.

        Returns:
            IDs of the removed relationships
        """
        stale = [element for element in self._elements() if element.get("Target") == target]
        removed_ids = [element.get("Id") for element in stale if element.get("Id")]
        remove_elements(stale)
        if removed_ids:
            logger.debug(f"Removed stale relationships to {target}: {removed_ids}")
        return removed_ids

    def add(
        self,
        rel_type: str,
        target: str,
        rel_id: Optional[str] = None,
        target_mode: Optional[str] = None,
    ) -> str:
        """
        Add a relationship.

        Args:
            rel_type: Relationship type URI
            target: Target path, relative to the source part
            rel_id: Explicit ID (allocated when omitted)
            target_mode: ``External`` for URLs

        Returns:
            The relationship ID
        """
        if rel_id is None:
            rel_id = self._allocator.allocate()
        else:
            self._allocator.register(rel_id)

        element = etree.SubElement(self.root, self._tag)
        element.set("Id", rel_id)
        element.set("Type", rel_type)
        element.set("Target", target)
        if target_mode:
            element.set("TargetMode", target_mode)

        logger.debug(f"Added relationship: {rel_id} ({rel_type}) -> {target}")
        return rel_id

    def to_xml(self) -> bytes:
        return serialize_xml(self.tree)


class ContentTypesPart:
    """A parsed ``[Content_Types].xml`` manifest."""

    def __init__(self, tree: etree._ElementTree):
        self.tree = tree
        self.root = tree.getroot()
        self.namespace = _root_namespace(self.root, CONTENT_TYPES_NS)

    @classmethod
    def from_xml(cls, content_types_xml: Union[bytes, str]) -> "ContentTypesPart":
        return cls(parse_xml(content_types_xml))

    def _elements(self, local: str) -> List[etree._Element]:
        return list(self.root.iter(f"{{{self.namespace}}}{local}"))

    def extensions(self) -> List[str]:
        return [element.get("Extension") for element in self._elements("Default") if element.get("Extension")]

    def overrides(self) -> Dict[str, str]:
        return {
            element.get("PartName"): element.get("ContentType")
            for element in self._elements("Override")
            if element.get("PartName")
        }

    def has_default(self, extension: str) -> bool:
        wanted = extension.lower()
        return any(ext.lower() == wanted for ext in self.extensions())

    def has_override(self, part_name: str) -> bool:
        return _part_name(part_name) in self.overrides()

    def ensure_default(self, extension: str, content_type: str) -> bool:
        """
        Declare a content type for a file extension unless one exists.

        Returns:
            True if an entry was added
        """
        if self.has_default(extension):
            return False
        element = etree.SubElement(self.root, f"{{{self.namespace}}}Default")
        element.set("Extension", extension)
        element.set("ContentType", content_type)
        logger.debug(f"Registered content type {content_type} for *.{extension}")
        return True

    def ensure_override(self, part_name: str, content_type: str) -> bool:
        """
        Declare a content type for a single part unless one exists.

        Returns:
            True if an entry was added
        """
        if self.has_override(part_name):
            return False
        element = etree.SubElement(self.root, f"{{{self.namespace}}}Override")
        element.set("PartName", _part_name(part_name))
        element.set("ContentType", content_type)
        logger.debug(f"Registered content type {content_type} for {_part_name(part_name)}")
        return True

    def ensure_defaults(self, defaults: Mapping[str, str]) -> List[str]:
        """Declare several extensions at once; returns those that were added."""
        return [ext for ext, content_type in defaults.items() if self.ensure_default(ext, content_type)]

    def to_xml(self) -> bytes:
        return serialize_xml(self.tree)


def _part_name(part_name: str) -> str:
    """Content-type part names are absolute (``/word/header1.xml``)."""
    return part_name if part_name.startswith("/") else f"/{part_name}"


def image_content_type(extension: str) -> str:
    """Content type for an image extension (``jpg`` -> ``image/jpeg``)."""
    ext = extension.lower()
    return f"image/{'jpeg' if ext == 'jpg' else ext}"

