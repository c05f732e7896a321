"""
Tests for the image asset store.
"""

from unittest.mock import Mock, patch

import pytest
import requests
from lxml import etree

from docx_assembler.config import AssemblerConfig
from docx_assembler.exceptions import AssetFetchError, MediaError
from docx_assembler.media.media_store import (
    ImageAsset,
    MediaStore,
    extension_from_name,
    sanitize_filename,
)

CT_NS = "http://schemas.openxmlformats.org/package/2006/content-types"


class TestFilenames:
    """Test cases for filename helpers."""

    def test_sanitize(self):
        """Test reserved characters become underscores."""
        assert sanitize_filename('a\\b:c*d?e"f<g>h|i.png') == "a_b_c_d_e_f_g_h_i.png"
        assert sanitize_filename("plain-name.jpg") == "plain-name.jpg"

    @pytest.mark.parametrize("name, extension", [
        ("photo.JPG", "jpg"),
        ("https://example.com/a/photo.jpeg?size=large", "jpeg"),
        ("https://example.com/images/pic", "png"),
        ("https://example.com/images/", "png"),
        ("archive.tar.gz", "gz"),
        ("img/a.png?v=2", "png"),
        ("pics/b.JPG#top", "jpg"),
        ("/static/logo.gif?w=10#x", "gif"),
        ("", "png"),
    ])
    def test_extension_from_name(self, name, extension):
        """Test extension inference with png fallback."""
        assert extension_from_name(name) == extension


class TestCollect:
    """Test cases for MediaStore.collect."""

    def test_inline_and_remote(self, png_bytes, png_data_uri):
        """Test images are indexed in document order, empty src included."""
        source = (
            f'<div><img src="{png_data_uri}"/>'
            '<img src=""/>'
            '<img src="https://example.com/a/photo.JPG?x=1"/></div>'
        )
        store = MediaStore()
        assets = store.collect(source)

        assert [asset.filename for asset in assets] == ["image1.png", "image3.jpg"]
        assert assets[0].data == png_bytes
        assert assets[0].is_remote is False
        assert assets[1].url == "https://example.com/a/photo.JPG?x=1"
        assert assets[1].is_remote is True

    def test_provided_filename(self, png_data_uri):
        """Test data-filename names inline images, sanitized."""
        store = MediaStore()
        assets = store.collect(f'<p><img src="{png_data_uri}" data-filename="logo:v2?.png"/></p>')
        assert assets[0].filename == "logo_v2_.png"

    def test_remote_extension_from_provided_filename(self):
        """Test data-filename drives the extension of remote images."""
        store = MediaStore()
        assets = store.collect('<p><img src="https://cdn.example.com/x" data-filename="scan.JPEG"/></p>')
        assert assets[0].filename == "image1.jpeg"
        assert assets[0].extension == "jpeg"

    def test_relative_url_query_dropped(self):
        """Test relative sources with a query string keep a clean extension."""
        store = MediaStore()
        assets = store.collect('<p><img src="img/a.png?v=2"/><img src="b.JPG#top"/></p>')

        assert [asset.filename for asset in assets] == ["image1.png", "image2.jpg"]
        assert store.required_extensions() == ["png", "jpg"]
        assert assets[0].url == "img/a.png?v=2"

    def test_unsupported_data_uri_skipped(self, png_bytes, data_uri_factory):
        """Test unsupported inline images are dropped."""
        store = MediaStore()
        assets = store.collect(f'<p><img src="{data_uri_factory(png_bytes, "image/gif")}"/></p>')
        assert assets == []
        assert len(store) == 0

    def test_collision_free_names(self, png_data_uri):
        """Test names already in the template or the store get a suffix."""
        store = MediaStore(existing_media=["word/media/image1.png"])
        assets = store.collect(
            f'<div><img src="{png_data_uri}"/>'
            f'<img src="{png_data_uri}" data-filename="image1-2.png"/></div>'
        )
        assert [asset.filename for asset in assets] == ["image1-2.png", "image1-2-2.png"]

    def test_wordprocessingml_source(self, png_data_uri):
        """Test XML markup with prefixed tags is scanned."""
        source = f'<w:p><w:r><w:t>x</w:t></w:r></w:p><img src="{png_data_uri}"/>'
        assert len(MediaStore().collect(source)) == 1

    def test_empty_source(self):
        """Test nothing is collected from empty input."""
        store = MediaStore()
        assert store.collect("") == []
        assert store.collect(None) == []
        assert store.collect("   ") == []

    def test_accumulates_across_calls(self, png_data_uri):
        """Test the store keeps every collected asset."""
        store = MediaStore()
        store.collect(f'<p><img src="{png_data_uri}"/></p>')
        store.collect(f'<p><img src="{png_data_uri}"/></p>')

        assert [asset.filename for asset in store] == ["image1.png", "image1-2.png"]


class TestContentTypes:
    """Test cases for content-type registration."""

    def test_inject_missing_extensions(self, template_parts):
        """Test one Default per missing extension, jpg as image/jpeg."""
        store = MediaStore()
        store.assets = [
            ImageAsset("image1.png", "png", data=b"x"),
            ImageAsset("image2.jpg", "jpg", url="https://example.com/2.jpg"),
            ImageAsset("image3.png", "png", data=b"y"),
        ]

        output = store.inject_content_types(template_parts["[Content_Types].xml"])
        defaults = {
            element.get("Extension"): element.get("ContentType")
            for element in etree.fromstring(output).iter(f"{{{CT_NS}}}Default")
        }

        assert store.required_extensions() == ["png", "jpg"]
        assert defaults["png"] == "image/png"
        assert defaults["jpg"] == "image/jpeg"
        assert defaults["xml"] == "application/xml"

    def test_existing_extension_kept(self):
        """Test declared extensions are not duplicated."""
        store = MediaStore()
        store.assets = [ImageAsset("image1.png", "png", data=b"x")]
        source = f'<Types xmlns="{CT_NS}"><Default Extension="PNG" ContentType="image/png"/></Types>'

        output = store.inject_content_types(source)

        assert len(list(etree.fromstring(output).iter(f"{{{CT_NS}}}Default"))) == 1


class TestMaterialize:
    """Test cases for MediaStore.materialize."""

    def test_inline_bytes(self):
        """Test inline assets return their bytes."""
        assert MediaStore().materialize(ImageAsset("a.png", "png", data=b"abc")) == b"abc"

    @patch("docx_assembler.media.media_store.requests.get")
    def test_remote_download(self, mock_get):
        """Test remote assets are fetched with the configured timeout."""
        response = Mock()
        response.content = b"remote-bytes"
        mock_get.return_value = response
        store = MediaStore(config=AssemblerConfig(fetch_timeout=5, user_agent="tests"))

        data = store.materialize(ImageAsset("image1.png", "png", url="https://example.com/a.png"))

        assert data == b"remote-bytes"
        mock_get.assert_called_once_with(
            "https://example.com/a.png",
            timeout=5,
            headers={"User-Agent": "tests"},
        )
        response.raise_for_status.assert_called_once()

    @patch("docx_assembler.media.media_store.requests.get")
    def test_connection_error(self, mock_get):
        """Test network failures raise AssetFetchError."""
        mock_get.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(AssetFetchError) as exc_info:
            MediaStore().materialize(ImageAsset("image1.png", "png", url="https://example.com/a.png"))

        assert exc_info.value.url == "https://example.com/a.png"
        assert "unreachable" in str(exc_info.value)
        assert isinstance(exc_info.value, MediaError)

    @patch("docx_assembler.media.media_store.requests.get")
    def test_http_error_status(self, mock_get):
        """Test error statuses raise AssetFetchError."""
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        mock_get.return_value = response

        with pytest.raises(AssetFetchError):
            MediaStore().materialize(ImageAsset("image1.png", "png", url="https://example.com/missing.png"))

    def test_part_name(self):
        """Test assets land in the configured media folder."""
        store = MediaStore(config=AssemblerConfig(media_dir="word/media/"))
        assert store.part_name(ImageAsset("image1.png", "png", data=b"x")) == "word/media/image1.png"
