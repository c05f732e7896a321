"""
Watermark renderer for DOCX packages.

Renders an image watermark as a dedicated header part holding one drawing
anchored behind the text, centered on the page, and wires that header into
the document's relationships, section properties and content types.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Union

from lxml import etree

from ..config import (
    CONTENT_TYPES_PART,
    DOCUMENT_PART,
    DOCUMENT_RELS_PART,
    HEADER_CONTENT_TYPE,
    HEADER_REL_TYPE,
    IMAGE_REL_TYPE,
    NAMESPACES,
    REL_NS,
    WATERMARK_ALPHA_AMOUNT,
    WATERMARK_ANCHOR_ATTRIBUTES,
    WATERMARK_HEADER_PART,
    WATERMARK_HEADER_RELS_PART,
    WATERMARK_IMAGE_REL_ID,
    WORD_NS,
)
from ..engine.geometry import Extent, calculate_watermark_extent
from ..models.watermark import WatermarkImage
from ..parser.package_reader import PackageStore
from ..parser.relationships import ContentTypesPart, RelationshipsPart
from ..utils.xml_utils import (
    SECT_PR_SEQUENCE,
    ensure_root_namespace,
    insert_in_schema_order,
    parse_xml,
    qn,
    remove_elements,
    serialize_xml,
)

logger = logging.getLogger(__name__)

PICTURE_URI = "http://schemas.openxmlformats.org/drawingml/2006/picture"


def _sub(parent: etree._Element, name: str, attrib: Optional[Mapping[str, object]] = None) -> etree._Element:
    element = etree.SubElement(parent, qn(name))
    for key, value in (attrib or {}).items():
        element.set(qn(key), str(value))
    return element


def build_watermark_header_xml(
    image_rel_id: str = WATERMARK_IMAGE_REL_ID,
    extent: Optional[Extent] = None,
) -> bytes:
    """
    Build the header part carrying the watermark drawing.

    Args:
        image_rel_id: Header-local relationship ID of the image
        extent: Drawing size (defaults to the fixed square extent)

    Returns:
        Header part XML
    """
    extent = extent or Extent.default()
    size = extent.as_attributes()

    hdr = etree.Element(qn("w:hdr"), nsmap=dict(NAMESPACES))
    run = _sub(_sub(hdr, "w:p"), "w:r")
    drawing = _sub(run, "w:drawing")

    anchor = _sub(drawing, "wp:anchor", WATERMARK_ANCHOR_ATTRIBUTES)
    _sub(anchor, "wp:simplePos", {"x": 0, "y": 0})
    _sub(_sub(anchor, "wp:positionH", {"relativeFrom": "page"}), "wp:align").text = "center"
    _sub(_sub(anchor, "wp:positionV", {"relativeFrom": "page"}), "wp:align").text = "center"
    _sub(anchor, "wp:extent", size)
    _sub(anchor, "wp:effectExtent", {"l": 0, "t": 0, "r": 0, "b": 0})
    _sub(anchor, "wp:wrapNone")
    _sub(anchor, "wp:docPr", {"id": 1, "name": "Watermark"})
    _sub(_sub(anchor, "wp:cNvGraphicFramePr"), "a:graphicFrameLocks", {"noChangeAspect": 1})

    graphic_data = _sub(_sub(anchor, "a:graphic"), "a:graphicData", {"uri": PICTURE_URI})
    pic = _sub(graphic_data, "pic:pic")

    nv_pic_pr = _sub(pic, "pic:nvPicPr")
    _sub(nv_pic_pr, "pic:cNvPr", {"id": 0, "name": "Watermark"})
    _sub(nv_pic_pr, "pic:cNvPicPr")

    blip_fill = _sub(pic, "pic:blipFill")
    blip = _sub(blip_fill, "a:blip", {"r:embed": image_rel_id})
    _sub(blip, "a:alphaModFix", {"amt": WATERMARK_ALPHA_AMOUNT})
    _sub(_sub(blip_fill, "a:stretch"), "a:fillRect")

    sp_pr = _sub(pic, "pic:spPr")
    xfrm = _sub(sp_pr, "a:xfrm")
    _sub(xfrm, "a:off", {"x": 0, "y": 0})
    _sub(xfrm, "a:ext", size)
    _sub(_sub(sp_pr, "a:prstGeom", {"prst": "rect"}), "a:avLst")

    return serialize_xml(hdr)


def build_header_relationships_xml(image_rel_id: str, image_target: str) -> bytes:
    """
    Build the header's own relationships part.

    Targets resolve relative to the header part, so the image in
    ``word/media/`` is referenced as ``media/<file>``.
    """
    rels = RelationshipsPart.new()
    rels.add(IMAGE_REL_TYPE, image_target, rel_id=image_rel_id)
    return rels.to_xml()


def add_header_reference_to_document(
    document_xml: Union[bytes, str],
    header_rel_id: str,
    stale_ids: Iterable[str] = (),
) -> bytes:
    """
    Point every section at the watermark header.

    Header references bound to ``header_rel_id`` or to a relationship that was
    just removed are dropped first, so composing again does not pile up
    references.

    Args:
        document_xml: Content of ``word/document.xml``
        header_rel_id: Document-level relationship ID of the header
        stale_ids: IDs of previously registered watermark header relationships

    Returns:
        Patched document XML
    """
    tree = parse_xml(document_xml)
    ensure_root_namespace(tree, "r", REL_NS)

    drop_ids = {header_rel_id, *stale_ids}
    rel_id_attr = f"{{{REL_NS}}}id"
    ns = {"w": WORD_NS}

    sect_prs = tree.xpath("//w:sectPr", namespaces=ns)
    for sect_pr in sect_prs:
        outdated = [
            ref for ref in sect_pr.xpath("w:headerReference", namespaces=ns)
            if ref.get(rel_id_attr) in drop_ids
        ]
        remove_elements(outdated)

        header_reference = etree.Element(qn("w:headerReference"))
        header_reference.set(qn("w:type"), "default")
        header_reference.set(rel_id_attr, header_rel_id)
        insert_in_schema_order(sect_pr, header_reference, SECT_PR_SEQUENCE)

    logger.debug(f"Header {header_rel_id} referenced from {len(sect_prs)} section(s)")
    return serialize_xml(tree)


def ensure_header_content_type(content_types: ContentTypesPart, header_path: str = WATERMARK_HEADER_PART) -> bool:
    return content_types.ensure_override(header_path, HEADER_CONTENT_TYPE)


def ensure_image_content_type(content_types: ContentTypesPart, extension: str) -> bool:
    """Register the watermark image extension; JPEG is stored as ``jpg``."""
    ext = "jpg" if extension == "jpeg" else extension
    return content_types.ensure_default(ext, f"image/{extension}")


def extract_watermark_image(watermark_data: Optional[str]) -> Optional[WatermarkImage]:
    """Decode watermark input; None when it is empty, malformed or not PNG/JPEG."""
    return WatermarkImage.from_data_uri(watermark_data)


def compose_watermark(
    package: PackageStore,
    watermark_data: Union[str, WatermarkImage, None],
) -> bool:
    """
    Add an image watermark to a package.

    Nothing is written unless the watermark can be fully wired in: invalid
    watermark data or a package lacking its document, relationships or
    content-types part leaves the package untouched.

    Args:
        package: Package to modify in place
        watermark_data: ``data:image/png;base64,...`` or ``data:image/jpeg;base64,...``,
            or an already decoded WatermarkImage

    Returns:
        True if the watermark was added
    """
    if isinstance(watermark_data, WatermarkImage):
        image = watermark_data
    else:
        image = extract_watermark_image(watermark_data)
    if image is None:
        logger.info("Watermark skipped: empty, malformed or unsupported image data")
        return False

    document_xml = package.get_part(DOCUMENT_PART)
    relations_xml = package.get_part(DOCUMENT_RELS_PART)
    content_types_xml = package.get_part(CONTENT_TYPES_PART)
    if document_xml is None or relations_xml is None or content_types_xml is None:
        missing = [
            name for name, data in (
                (DOCUMENT_PART, document_xml),
                (DOCUMENT_RELS_PART, relations_xml),
                (CONTENT_TYPES_PART, content_types_xml),
            ) if data is None
        ]
        logger.warning(f"Watermark skipped: package lacks {', '.join(missing)}")
        return False

    header_target = WATERMARK_HEADER_PART.split("/", 1)[1]

    relations = RelationshipsPart.from_xml(relations_xml)
    stale_ids = relations.remove_by_target(header_target)
    header_rel_id = relations.add(HEADER_REL_TYPE, header_target)

    extent = calculate_watermark_extent(document_xml, image.dimensions)
    updated_document_xml = add_header_reference_to_document(document_xml, header_rel_id, stale_ids)

    header_xml = build_watermark_header_xml(WATERMARK_IMAGE_REL_ID, extent)
    header_rels_xml = build_header_relationships_xml(WATERMARK_IMAGE_REL_ID, image.target)

    content_types = ContentTypesPart.from_xml(content_types_xml)
    ensure_header_content_type(content_types, WATERMARK_HEADER_PART)
    ensure_image_content_type(content_types, image.extension)

    package.write_part(DOCUMENT_PART, updated_document_xml)
    package.write_part(DOCUMENT_RELS_PART, relations.to_xml())
    package.write_part(WATERMARK_HEADER_PART, header_xml)
    package.write_part(WATERMARK_HEADER_RELS_PART, header_rels_xml)
    package.write_part(f"word/{image.target}", image.data)
    package.write_part(CONTENT_TYPES_PART, content_types.to_xml())

    logger.info(f"Watermark {image.filename} added as {header_rel_id} ({extent.cx}x{extent.cy} EMU)")
    return True
