"""
Parser for the AGG archive directory.

Layout (little-endian)::

    [count: u16]
    [count x record: {unknown: u32, offset: u32, size: u32}]
    ... payload bytes ...
    [count x name: fixed-width text]     # last count * max_filename_size bytes

Record i and name i describe the same file.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..errors import ArchiveFormatError
from ..utils.stream import ByteSource

logger = logging.getLogger(__name__)

FILE_RECORD_SIZE = 12
DEFAULT_MAX_FILENAME_SIZE = 15


@dataclass(frozen=True)
class IndexEntry:
    """Location of one file inside the archive."""
    size: int
    offset: int

    @property
    def end(self) -> int:
        return self.offset + self.size

    def fits(self, file_size: int) -> bool:
        """Check that the entry lies entirely within a file of ``file_size`` bytes."""
        return self.end <= file_size


def _read_records(source: ByteSource, count: int) -> List[IndexEntry]:
    records = []
    for _ in range(count):
        source.read_u32le()  # unknown, possibly a CRC; never validated
        offset = source.read_u32le()
        size = source.read_u32le()
        records.append(IndexEntry(size=size, offset=offset))
    return records


def _read_names(source: ByteSource, count: int, max_filename_size: int) -> List[str]:
    return [source.read_string(max_filename_size).upper() for _ in range(count)]


def parse_index(source: ByteSource, max_filename_size: int = DEFAULT_MAX_FILENAME_SIZE) -> Dict[str, IndexEntry]:
    """
    Parse the archive directory into a name -> IndexEntry table.

    Args:
        source: Byte source positioned anywhere; parsing starts at offset 0
        max_filename_size: Fixed width of each name in the trailing name block

    Returns:
        Mapping of upper-cased file names to their entries

    Raises:
        ArchiveFormatError: If the declared count cannot fit in the file or
            names are not unique
        ArchiveIOError: If the underlying source fails
    """
    total_size = source.size()
    if total_size < 2:
        raise ArchiveFormatError(f"Archive too small: {total_size} bytes", path=source.name)

    source.seek(0)
    count = source.read_u16le()

    if count * (FILE_RECORD_SIZE + max_filename_size) >= total_size:
        raise ArchiveFormatError(
            f"Declared file count {count} does not fit in {total_size} bytes",
            path=source.name,
        )

    file_entries = source.sub_source(count * FILE_RECORD_SIZE)
    name_entries_size = max_filename_size * count
    source.seek(total_size - name_entries_size)
    name_entries = source.sub_source(name_entries_size)

    pairs: List[Tuple[str, IndexEntry]] = list(zip(
        _read_names(name_entries, count, max_filename_size),
        _read_records(file_entries, count),
    ))

    files: Dict[str, IndexEntry] = {}
    for name, entry in pairs:
        files.setdefault(name, entry)

    if len(files) != count:
        raise ArchiveFormatError(
            f"Archive lists {count} files but only {len(files)} names are unique",
            path=source.name,
        )

    logger.debug(f"Parsed {count} entries from {source.name}")
    return files
