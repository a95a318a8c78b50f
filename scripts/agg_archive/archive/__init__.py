"""
Archive directory parsing, override collection, sprite-sheet containers and read-time resolution.
"""

from .index import IndexEntry, parse_index
from .sprite_sheet import (
    SlotHeader,
    SpriteSheet,
    SpriteSheetSynthesizer,
    build_slot,
    build_sprite_sheet,
    parse_sprite_sheet,
)
from .overrides import OverrideCollector
from .agg_file import AggFile, OverrideUsed
from .chain import ArchiveChain

__all__ = [
    "IndexEntry",
    "parse_index",
    "SlotHeader",
    "SpriteSheet",
    "SpriteSheetSynthesizer",
    "build_slot",
    "build_sprite_sheet",
    "parse_sprite_sheet",
    "OverrideCollector",
    "AggFile",
    "OverrideUsed",
    "ArchiveChain",
]
