"""Custom exceptions for DOCX Assembler."""

from typing import Optional


class DocxAssemblerError(Exception):
    """Base exception for DOCX Assembler errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class PackageError(DocxAssemblerError):
    """Exception raised when a DOCX package cannot be read or written."""

    pass


class MissingPartError(PackageError):
    """Exception raised when a required package part is absent."""

    def __init__(self, part_name: str, details: Optional[str] = None):
        super().__init__(f"Part not found: {part_name}", details)
        self.part_name = part_name


class MediaError(DocxAssemblerError):
    """Exception raised during media processing."""

    pass


class AssetFetchError(MediaError):
    """Exception raised when a remote image asset cannot be retrieved."""

    def __init__(self, url: str, details: Optional[str] = None):
        super().__init__(f"Failed to fetch image asset {url}", details)
        self.url = url
