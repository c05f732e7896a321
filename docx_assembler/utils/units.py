"""
Unit conversion for DOCX page layout.

Word measures page geometry in twips (1/20 pt) and drawings in English Metric
Units (914400 per inch). Margins arrive in centimeters and images in pixels.
"""

from __future__ import annotations

import math

TWIPS_PER_CM = 567
EMU_PER_TWIP = 635
EMU_PER_INCH = 914_400
PIXELS_PER_INCH = 96
EMU_PER_PIXEL = EMU_PER_INCH // PIXELS_PER_INCH  # 9525


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def cm_to_twips(value: float) -> int:
    """Convert centimeters to twips."""
    return _round_half_up(float(value) * TWIPS_PER_CM)


def twips_to_emu(value: float) -> int:
    """Convert twips to English Metric Units."""
    return _round_half_up(float(value) * EMU_PER_TWIP)


def pixels_to_emu(value: float) -> int:
    """Convert pixels to English Metric Units assuming 96 DPI."""
    return _round_half_up(float(value) * EMU_PER_PIXEL)
