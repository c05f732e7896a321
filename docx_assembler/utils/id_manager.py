"""
Relationship ID manager for DOCX packages.

Relationship IDs (``rId<N>``) must be unique within one ``.rels`` part. New IDs
continue after the highest numbered ID already present, probing upward when
the registry is sparse.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Set

logger = logging.getLogger(__name__)

RELATIONSHIP_ID_PREFIX = "rId"
_RELATIONSHIP_ID_RE = re.compile(r"^rId(.*)$")


def _numeric_suffix(rel_id: str) -> int:
    match = _RELATIONSHIP_ID_RE.match(rel_id or "")
    if not match:
        return 0
    suffix = match.group(1)
    return int(suffix) if suffix.isascii() and suffix.isdigit() else 0


def allocate_relationship_id(existing_ids: Iterable[str]) -> str:
    """
    Allocate a relationship ID that is not in ``existing_ids``.

    Args:
        existing_ids: IDs already used by the relationships part

    Returns:
        ``rId<N>`` with N above every numeric ``rId`` suffix in use
    """
    taken = {rel_id for rel_id in existing_ids if rel_id}
    index = max((_numeric_suffix(rel_id) for rel_id in taken), default=0) + 1

    candidate = f"{RELATIONSHIP_ID_PREFIX}{index}"
    while candidate in taken:
        index += 1
        candidate = f"{RELATIONSHIP_ID_PREFIX}{index}"
    return candidate


class RelationshipIdAllocator:
    """
    Hands out relationship IDs for one relationships part.

    Every issued ID is registered, so consecutive calls never collide with
    each other or with the IDs the part started with.
    """

    def __init__(self, existing_ids: Iterable[str] = ()):
        self.registered_ids: Set[str] = {rel_id for rel_id in existing_ids if rel_id}

    def allocate(self) -> str:
        rel_id = allocate_relationship_id(self.registered_ids)
        self.registered_ids.add(rel_id)
        logger.debug(f"Allocated relationship ID {rel_id}")
        return rel_id

    def register(self, rel_id: str) -> bool:
        """
        Register an externally chosen ID.

        Returns:
            True if registration succeeded, False if the ID was already taken
        """
        if rel_id in self.registered_ids:
            logger.warning(f"Relationship ID {rel_id} already registered")
            return False
        self.registered_ids.add(rel_id)
        return True

    def __contains__(self, rel_id: object) -> bool:
        return rel_id in self.registered_ids
