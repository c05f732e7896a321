"""
Tests for watermark geometry.
"""

import pytest

from docx_assembler.config import WATERMARK_DEFAULT_EXTENT_EMU
from docx_assembler.engine.geometry import (
    ContentArea,
    Extent,
    calculate_watermark_extent,
    extract_content_area,
    plan_extent,
)

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


def _document(sect_pr_children=""):
    return (
        f'<w:document xmlns:w="{WORD_NS}"><w:body><w:p/>'
        f'<w:sectPr>{sect_pr_children}</w:sectPr></w:body></w:document>'
    )


class TestExtractContentArea:
    """Test cases for extract_content_area."""

    def test_a4_with_margins(self, document_xml):
        """Test page size minus margins."""
        area = extract_content_area(document_xml)

        assert area == ContentArea(width_twips=11906 - 2880, height_twips=16838 - 2880)
        assert area.width_emu == 9026 * 635
        assert area.height_emu == 13958 * 635

    def test_us_letter_defaults(self):
        """Test missing nodes fall back to US-Letter."""
        area = extract_content_area(_document())
        assert area == ContentArea(width_twips=9360, height_twips=12960)

    def test_partial_margins(self):
        """Test undeclared sides keep their defaults."""
        area = extract_content_area(_document('<w:pgMar w:left="720" w:right="720"/>'))
        assert area == ContentArea(width_twips=12240 - 1440, height_twips=12960)

    def test_fractional_values_truncated(self):
        """Test decimal attribute values."""
        area = extract_content_area(_document('<w:pgSz w:w="12240.9" w:h="15840"/>'))
        assert area.width_twips == 9360

    def test_floor_at_one(self):
        """Test margins larger than the page."""
        area = extract_content_area(_document(
            '<w:pgSz w:w="1000" w:h="1000"/>'
            '<w:pgMar w:top="800" w:right="800" w:bottom="800" w:left="800"/>'
        ))
        assert area == ContentArea(width_twips=1, height_twips=1)

    def test_malformed_xml(self):
        """Test unreadable documents."""
        assert extract_content_area("<w:document") is None

    def test_non_numeric_attribute(self):
        """Test attributes that are not numbers."""
        assert extract_content_area(_document('<w:pgSz w:w="wide" w:h="15840"/>')) is None


class TestPlanExtent:
    """Test cases for plan_extent."""

    AREA = ContentArea(width_twips=9026, height_twips=13958)

    def test_unknown_content_area(self):
        """Test the fixed square fallback."""
        extent = plan_extent(None, (100, 100))
        assert extent == Extent(WATERMARK_DEFAULT_EXTENT_EMU, WATERMARK_DEFAULT_EXTENT_EMU)

    def test_unknown_dimensions(self):
        """Test the content area is filled without dimensions."""
        assert plan_extent(self.AREA) == Extent(self.AREA.width_emu, self.AREA.height_emu)
        assert plan_extent(self.AREA, (0, 10)) == Extent(self.AREA.width_emu, self.AREA.height_emu)

    def test_small_image_not_upscaled(self):
        """Test small images are only shrunk by the scale factor."""
        assert plan_extent(self.AREA, (1, 1)) == Extent(8096, 8096)
        assert plan_extent(self.AREA, (200, 100)) == Extent(int(200 * 9525 * 0.85), int(100 * 9525 * 0.85))

    @pytest.mark.parametrize("dimensions", [(4000, 2000), (2000, 4000), (10000, 10000), (5000, 50)])
    def test_large_image_fits(self, dimensions):
        """Test large images fit at 85% of the limiting side."""
        extent = plan_extent(self.AREA, dimensions)
        ratio = max(extent.cx / self.AREA.width_emu, extent.cy / self.AREA.height_emu)

        assert ratio <= 0.85 + 1e-6
        assert ratio == pytest.approx(0.85, abs=1e-3)
        assert extent.cx <= self.AREA.width_emu
        assert extent.cy <= self.AREA.height_emu

    def test_aspect_ratio_kept(self):
        """Test both sides use the same scale."""
        extent = plan_extent(self.AREA, (4000, 2000))
        assert extent.cx / extent.cy == pytest.approx(2.0, rel=1e-5)

    def test_tiny_content_area(self):
        """Test extents stay positive and within a degenerate area."""
        area = ContentArea(width_twips=1, height_twips=1)
        extent = plan_extent(area, (3000, 1))

        assert 1 <= extent.cx <= area.width_emu
        assert 1 <= extent.cy <= area.height_emu


class TestCalculateWatermarkExtent:
    """Test cases for calculate_watermark_extent."""

    def test_uses_document_geometry(self, document_xml):
        """Test the document's own page setup is used."""
        extent = calculate_watermark_extent(document_xml, (4000, 2000))
        assert extent.cx <= 9026 * 635

    def test_malformed_document(self):
        """Test unreadable documents use the fixed extent."""
        assert calculate_watermark_extent(b"not xml", (1, 1)) == Extent.default()

    def test_extent_attributes(self):
        """Test attribute rendering."""
        assert Extent(10, 20).as_attributes() == {"cx": "10", "cy": "20"}
