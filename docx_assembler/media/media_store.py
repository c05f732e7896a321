"""
Image asset store.

Collects the images referenced by ``<img>`` elements of the converted body
source, gives each one a unique media filename and turns them into package
bytes, either decoded inline from a data URI or downloaded from their URL.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Optional, Set, Union
from urllib.parse import urlsplit

import lxml.html
import requests

from ..config import DEFAULT_CONFIG, AssemblerConfig
from ..exceptions import AssetFetchError
from ..parser.relationships import ContentTypesPart, image_content_type
from .data_uri import is_data_uri, parse_data_image

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r'[\\:*?"<>|]')
DEFAULT_IMAGE_EXTENSION = "png"


@dataclass
class ImageAsset:
    """An image destined for ``word/media/<filename>``."""

    filename: str
    extension: str
    data: Optional[bytes] = None
    url: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return self.data is None


def sanitize_filename(filename: str) -> str:
    """Replace characters that are not allowed in package file names with ``_``."""
    return _UNSAFE_FILENAME_RE.sub("_", filename)


def extension_from_name(name: str) -> str:
    """Lower-cased extension of a file name or URL path, ``png`` when there is none."""
    path = urlsplit(name).path
    segment = path.rstrip("/").rsplit("/", 1)[-1]
    suffix = PurePosixPath(segment).suffix.lstrip(".").lower()
    return suffix or DEFAULT_IMAGE_EXTENSION


class MediaStore:
    """
    Registry of image assets for one generated document.

    Filenames are unique among the collected assets and the media already
    present in the template.
    """

    def __init__(self, existing_media: Iterable[str] = (), config: Optional[AssemblerConfig] = None):
        """
        Initialize media store.

        Args:
            existing_media: Part names or file names already in the media folder
            config: Assembler configuration (fetch timeout, user agent)
        """
        self.config = config or DEFAULT_CONFIG
        self.assets: List[ImageAsset] = []
        self._taken: Set[str] = {PurePosixPath(name).name.lower() for name in existing_media}

    def collect(self, source: Union[str, bytes, None]) -> List[ImageAsset]:
        """
        Scan ``<img>`` elements of an HTML or XML source.

        Args:
            source: Markup to scan

        Returns:
            The assets added by this call, in document order
        """
        if source is None:
            return []
        if isinstance(source, bytes):
            source = source.decode("utf-8")
        if not source.strip():
            return []

        root = lxml.html.fromstring(source)
        added: List[ImageAsset] = []
        for index, image in enumerate(root.iter("img"), start=1):
            asset = self._asset_from_element(image, index)
            if asset is not None:
                self.assets.append(asset)
                added.append(asset)

        logger.debug(f"Collected {len(added)} image asset(s)")
        return added

    def _asset_from_element(self, image, index: int) -> Optional[ImageAsset]:
        src = (image.get("src") or "").strip()
        if not src:
            return None
        provided = (image.get("data-filename") or "").strip()

        if is_data_uri(src):
            decoded = parse_data_image(src)
            if decoded is None:
                logger.warning(f"Skipping image {index}: unsupported or undecodable data URI")
                return None
            filename = self._claim(provided or f"image{index}.{decoded.extension}")
            return ImageAsset(filename=filename, extension=decoded.extension, data=decoded.data)

        extension = extension_from_name(provided or src)
        filename = self._claim(f"image{index}.{extension}")
        return ImageAsset(filename=filename, extension=extension, url=src)

    def _claim(self, filename: str) -> str:
        candidate = sanitize_filename(filename)
        path = PurePosixPath(candidate)
        counter = 2
        while candidate.lower() in self._taken:
            candidate = f"{path.stem}-{counter}{path.suffix}"
            counter += 1
        self._taken.add(candidate.lower())
        return candidate

    def required_extensions(self) -> List[str]:
        """Distinct asset extensions, in first-seen order."""
        seen: Dict[str, None] = {}
        for asset in self.assets:
            seen.setdefault(asset.extension.lower(), None)
        return list(seen)

    def inject_content_types(self, content_types_xml: Union[bytes, str]) -> bytes:
        """Add an image ``Default`` entry for every asset extension that is missing."""
        content_types = ContentTypesPart.from_xml(content_types_xml)
        added = content_types.ensure_defaults(
            {ext: image_content_type(ext) for ext in self.required_extensions()}
        )
        if added:
            logger.debug(f"Registered image extensions: {added}")
        return content_types.to_xml()

    def part_name(self, asset: ImageAsset) -> str:
        return f"{self.config.media_dir.rstrip('/')}/{asset.filename}"

    def materialize(self, asset: ImageAsset) -> bytes:
        """
        Get the bytes of an asset, downloading remote ones.

        Raises:
            AssetFetchError: If the download fails or returns an error status
        """
        if asset.data is not None:
            return asset.data

        logger.info(f"Fetching image asset: {asset.url}")
        try:
            response = requests.get(
                asset.url,
                timeout=self.config.fetch_timeout,
                headers={"User-Agent": self.config.user_agent},
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise AssetFetchError(asset.url, str(e)) from e
        return response.content

    def __len__(self) -> int:
        return len(self.assets)

    def __iter__(self):
        return iter(self.assets)
