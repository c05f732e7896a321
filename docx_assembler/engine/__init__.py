"""Engine module - watermark placement geometry."""

from .geometry import ContentArea, Extent, calculate_watermark_extent, extract_content_area, plan_extent

__all__ = [
    "ContentArea",
    "Extent",
    "calculate_watermark_extent",
    "extract_content_area",
    "plan_extent",
]
