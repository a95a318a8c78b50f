"""
Utility modules for byte streams, image decoding, and directory listing.
"""

from .stream import ByteSource
from .image import ImageUtils, DecodedImage
from .fs import DirEntry, list_entries, list_files_with_extensions, strip_extension

__all__ = [
    "ByteSource",
    "ImageUtils",
    "DecodedImage",
    "DirEntry",
    "list_entries",
    "list_files_with_extensions",
    "strip_extension",
]
