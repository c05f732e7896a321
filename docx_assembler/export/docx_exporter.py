"""
DOCX exporter - builds DOCX files from a template and converted body XML.

The template package is copied entry by entry; the body fragment is spliced
into the template's ``word/document.xml``, optional numbering and relationship
parts replace the template's, and the images referenced by the body are
written to the media folder. Page margins and an image watermark can then be
applied to the result.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from ..config import (
    CONTENT_TYPES_PART,
    DEFAULT_CONFIG,
    DOCUMENT_PART,
    DOCUMENT_RELS_PART,
    NUMBERING_PART,
    AssemblerConfig,
)
from ..exceptions import MissingPartError
from ..layout.margins import MarginsInput, as_margin_spec, margin_twips_from, patch_margins
from ..media.media_store import MediaStore
from ..parser.package_reader import PackageStore
from ..renderers.watermark_renderer import compose_watermark, extract_watermark_image
from ..utils.xml_utils import splice_between_anchors

logger = logging.getLogger(__name__)

BODY_START_ANCHOR = "<w:body>"
BODY_END_ANCHOR = "<w:sectPr"

TemplateInput = Union[str, Path, bytes]


class Document:
    """
    A DOCX document generated from a template.

    Usage:
        >>> document = Document("template.docx")
        >>> document.replace_files(body_xml, numbering_xml=numbering)
        >>> data = document.generate()
    """

    doc_xml_file = DOCUMENT_PART
    numbering_xml_file = NUMBERING_PART
    relations_xml_file = DOCUMENT_RELS_PART
    content_types_xml_file = CONTENT_TYPES_PART
    extension = ".docx"

    def __init__(self, template: TemplateInput, config: Optional[AssemblerConfig] = None):
        """
        Initialize document.

        Args:
            template: Path to the template ``.docx`` or its bytes
            config: Assembler configuration
        """
        self.config = config or DEFAULT_CONFIG
        if isinstance(template, (bytes, bytearray)):
            self.template = PackageStore.from_bytes(bytes(template))
        else:
            self.template = PackageStore.from_path(template)

        self.replaceable_files = {}
        self.media = MediaStore(self.template.get_media_files(self.config.media_dir), self.config)

    def replace_files(
        self,
        body_xml: Optional[str],
        numbering_xml: Optional[str] = None,
        relations_xml: Optional[str] = None,
        images_source: Optional[str] = None,
    ) -> None:
        """
        Record the content that replaces template parts.

        Args:
            body_xml: WordprocessingML fragment for the document body
            numbering_xml: Replacement ``word/numbering.xml``
            relations_xml: Replacement ``word/_rels/document.xml.rels``
            images_source: Markup scanned for ``<img>`` elements (defaults to the body)
        """
        body_xml = body_xml or ""
        self.replaceable_files[self.doc_xml_file] = body_xml
        if numbering_xml is not None:
            self.replaceable_files[self.numbering_xml_file] = numbering_xml
        if relations_xml is not None:
            self.replaceable_files[self.relations_xml_file] = relations_xml
        self.media.collect(images_source if images_source is not None else body_xml)

    def generate(self) -> bytes:
        """
        Build the DOCX package.

        Raises:
            MissingPartError: If the template has no ``word/document.xml``
            AssetFetchError: If a remote image cannot be downloaded
        """
        if self.doc_xml_file not in self.template:
            raise MissingPartError(self.doc_xml_file, "template has no main document")

        package = PackageStore()
        for part_name in self.template:
            data = self.template.read_part(part_name)
            if part_name == self.doc_xml_file and part_name in self.replaceable_files:
                data = self._splice_body(data, self.replaceable_files[part_name])
            elif part_name in self.replaceable_files:
                data = self.replaceable_files[part_name]
            elif part_name == self.content_types_xml_file and len(self.media):
                data = self.media.inject_content_types(data)
            package.write_part(part_name, data)

        # parts the template lacks are appended
        for part_name, content in self.replaceable_files.items():
            if part_name not in package:
                package.write_part(part_name, content)

        for asset in self.media:
            package.write_part(self.media.part_name(asset), self.media.materialize(asset))

        logger.info(f"Generated document: {len(package)} parts, {len(self.media)} image(s)")
        return package.to_bytes()

    def _splice_body(self, document_xml: bytes, body_xml: str) -> str:
        source = document_xml.decode("utf-8")
        spliced = splice_between_anchors(source, BODY_START_ANCHOR, BODY_END_ANCHOR, body_xml)
        if spliced is None:
            logger.warning("Template document has no <w:body>/<w:sectPr> anchors; body left unchanged")
            return source
        return spliced

    @classmethod
    def create(
        cls,
        body_xml: Optional[str],
        template: TemplateInput,
        margins: Optional[MarginsInput] = None,
        watermark: Optional[str] = None,
        config: Optional[AssemblerConfig] = None,
        **parts,
    ) -> bytes:
        """
        Generate a document and apply margins and watermark.

        Args:
            body_xml: WordprocessingML fragment for the document body
            template: Template path or bytes
            margins: ``{top, right, bottom, left}`` in centimeters
            watermark: Image data URI
            config: Assembler configuration
            **parts: ``numbering_xml``, ``relations_xml``, ``images_source``

        Returns:
            DOCX bytes
        """
        margin_spec = as_margin_spec(margins) if margins else None

        document = cls(template, config=config)
        document.replace_files(body_xml, **parts)
        data = document.generate()

        if margin_spec:
            data = apply_margins_to_docx(data, margin_spec)
        if watermark:
            data = apply_watermark_to_docx(data, watermark)
        return data

    @classmethod
    def create_with_content(cls, template: TemplateInput, body_xml: Optional[str], **kwargs) -> bytes:
        return cls.create(body_xml, template, **kwargs)

    @classmethod
    def create_and_save(
        cls,
        body_xml: Optional[str],
        file_path: Union[str, Path],
        template: TemplateInput,
        **kwargs,
    ) -> Path:
        """Generate a document and write it to ``file_path``."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(cls.create(body_xml, template, **kwargs))
        logger.info(f"Saved document: {path}")
        return path


def apply_margins_to_docx(docx_bytes: bytes, margins: MarginsInput) -> bytes:
    """
    Set the page margins of every section.

    Args:
        docx_bytes: DOCX package
        margins: ``{top, right, bottom, left}`` in centimeters, or a MarginSpec

    Raises:
        ValueError: If a margin is missing or not numeric
        MissingPartError: If the package has no ``word/document.xml``
    """
    margin_twips = margin_twips_from(margins)
    with PackageStore.working_copy(docx_bytes) as package:
        document_xml = package.read_part(DOCUMENT_PART)
        package.write_part(DOCUMENT_PART, patch_margins(document_xml, margin_twips))
        return package.to_bytes()


def apply_watermark_to_docx(docx_bytes: bytes, watermark_data: Optional[str]) -> bytes:
    """
    Add an image watermark.

    Returns:
        The watermarked package, or ``docx_bytes`` itself when the watermark
        data is invalid or the package cannot carry a watermark
    """
    image = extract_watermark_image(watermark_data)
    if image is None:
        logger.info("Watermark skipped: empty, malformed or unsupported image data")
        return docx_bytes

    with PackageStore.working_copy(docx_bytes) as package:
        if not compose_watermark(package, image):
            return docx_bytes
        return package.to_bytes()

