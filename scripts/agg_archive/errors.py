"""
Exception hierarchy shared by the archive reader, override collector and
sprite-sheet codec.
"""

from typing import Optional


class ArchiveError(Exception):
    """Base exception for archive errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ArchiveFormatError(ArchiveError):
    """Raised when archive structures are inconsistent or out of bounds."""
    pass


class ArchiveIOError(ArchiveError, OSError):
    """Raised when the underlying file cannot be opened, seeked or read."""
    pass


class SpriteSheetError(ArchiveError):
    """Raised when an ICN sprite-sheet container is malformed."""
    pass


class ImageDecodeError(ArchiveError):
    """Raised when an override image cannot be decoded into RGBA pixels."""
    pass
