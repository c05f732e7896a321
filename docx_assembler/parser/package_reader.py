"""
Package store for DOCX files.

Holds the parts of a DOCX (zip) package in memory, in archive order, and
writes them back out. Parts that are never written keep their original bytes.
"""

from __future__ import annotations

import io
import logging
import tempfile
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from ..config import MEDIA_DIR
from ..exceptions import MissingPartError, PackageError

logger = logging.getLogger(__name__)


class PackageStore:
    """
    Reads and manages DOCX package contents.

    Part names are unique; writing an existing name replaces its content in
    place, writing a new name appends it to the end of the archive.
    """

    def __init__(self, parts: Optional[Dict[str, bytes]] = None):
        """
        Initialize package store.

        Args:
            parts: Initial ``part_name -> bytes`` mapping, in archive order
        """
        self._parts: Dict[str, bytes] = dict(parts or {})
        self._modified: set = set()

    @classmethod
    def from_bytes(cls, data: bytes) -> "PackageStore":
        """
        Load a package from zip bytes.

        Raises:
            PackageError: If the data is not a zip archive
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data), "r") as archive:
                return cls._from_archive(archive)
        except zipfile.BadZipFile as e:
            raise PackageError("Not a DOCX package", str(e)) from e

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "PackageStore":
        """
        Load a package from a file.

        Raises:
            FileNotFoundError: If the file does not exist
            PackageError: If the file is not a zip archive
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"DOCX file not found: {path}")
        try:
            with zipfile.ZipFile(path, "r") as archive:
                store = cls._from_archive(archive)
        except zipfile.BadZipFile as e:
            raise PackageError(f"Not a DOCX package: {path}", str(e)) from e
        logger.debug(f"Opened DOCX package: {path} ({len(store)} parts)")
        return store

    @classmethod
    def _from_archive(cls, archive: zipfile.ZipFile) -> "PackageStore":
        parts: Dict[str, bytes] = {}
        for info in archive.infolist():
            if info.is_dir():
                continue
            parts[info.filename] = archive.read(info.filename)
        return cls(parts)

    @classmethod
    @contextmanager
    def working_copy(cls, data: bytes) -> Iterator["PackageStore"]:
        """
        Open a disposable working copy of a package.

        The bytes are staged in a temporary directory that is removed when the
        block exits, whether it succeeds or raises. The caller's bytes are
        never modified.
        """
        with tempfile.TemporaryDirectory(prefix="docx_assembler_") as temp_dir:
            staged = Path(temp_dir) / "input.docx"
            staged.write_bytes(data)
            yield cls.from_path(staged)

    def list_parts(self) -> List[str]:
        return list(self._parts)

    def has_part(self, part_name: str) -> bool:
        return part_name in self._parts

    def read_part(self, part_name: str) -> bytes:
        """
        Get the bytes of a part.

        Raises:
            MissingPartError: If the part does not exist
        """
        try:
            return self._parts[part_name]
        except KeyError:
            raise MissingPartError(part_name) from None

    def get_part(self, part_name: str) -> Optional[bytes]:
        """Get the bytes of a part, or None if it does not exist."""
        return self._parts.get(part_name)

    def get_xml_content(self, part_name: str) -> Optional[str]:
        data = self._parts.get(part_name)
        return data.decode("utf-8") if data is not None else None

    def write_part(self, part_name: str, data: Union[bytes, str]) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        action = "Replaced" if part_name in self._parts else "Added"
        self._parts[part_name] = data
        self._modified.add(part_name)
        logger.debug(f"{action} part {part_name} ({len(data)} bytes)")

    def get_media_files(self, media_dir: str = MEDIA_DIR) -> List[str]:
        """List parts stored in the media folder."""
        prefix = media_dir.rstrip("/") + "/"
        return [name for name in self._parts if name.startswith(prefix)]

    @property
    def modified_parts(self) -> List[str]:
        """Parts written since the store was loaded, in archive order."""
        return [name for name in self._parts if name in self._modified]

    def to_bytes(self) -> bytes:
        """Serialize the package as a zip archive."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for part_name, data in self._parts.items():
                archive.writestr(part_name, data)
        return buffer.getvalue()

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_bytes())
        logger.info(f"Saved DOCX package: {path}")
        return path

    def __contains__(self, part_name: object) -> bool:
        return part_name in self._parts

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> Iterator[str]:
        return iter(self._parts)
