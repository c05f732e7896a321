"""Layout module - page margins of WordprocessingML sections."""

from .margins import MARGIN_SIDES, MarginSpec, as_margin_spec, margin_twips_from, patch_margins

__all__ = [
    "MARGIN_SIDES",
    "MarginSpec",
    "as_margin_spec",
    "margin_twips_from",
    "patch_margins",
]
