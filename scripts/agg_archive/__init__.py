"""
AGG archive toolkit

Reads AGG asset archives, merges them with user override directories placed
next to them, and builds ICN sprite-sheet containers from folders of images.
"""

__version__ = "0.1.0"
__author__ = "AGG Archive Developers"

from .config import ArchiveConfig
from .errors import (
    ArchiveError,
    ArchiveFormatError,
    ArchiveIOError,
    SpriteSheetError,
    ImageDecodeError,
)
from .archive.agg_file import AggFile, OverrideUsed
from .archive.chain import ArchiveChain
from .archive.sprite_sheet import SpriteSheetSynthesizer, parse_sprite_sheet

__all__ = [
    "ArchiveConfig",
    "ArchiveError",
    "ArchiveFormatError",
    "ArchiveIOError",
    "SpriteSheetError",
    "ImageDecodeError",
    "AggFile",
    "OverrideUsed",
    "ArchiveChain",
    "SpriteSheetSynthesizer",
    "parse_sprite_sheet",
]
