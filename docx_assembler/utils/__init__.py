"""
Utils module for DOCX assembly.

Unit conversion, XML tree helpers, relationship ID allocation and logging.
"""

from .units import (
    TWIPS_PER_CM,
    EMU_PER_TWIP,
    EMU_PER_INCH,
    PIXELS_PER_INCH,
    EMU_PER_PIXEL,
    cm_to_twips,
    twips_to_emu,
    pixels_to_emu,
)
from .id_manager import RelationshipIdAllocator, allocate_relationship_id
from .rich_logger import get_logger, setup_logging

__all__ = [
    "TWIPS_PER_CM",
    "EMU_PER_TWIP",
    "EMU_PER_INCH",
    "PIXELS_PER_INCH",
    "EMU_PER_PIXEL",
    "cm_to_twips",
    "twips_to_emu",
    "pixels_to_emu",
    "RelationshipIdAllocator",
    "allocate_relationship_id",
    "get_logger",
    "setup_logging",
]
