"""
Read-side handle for AGG archives with override resolution.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Union

from ..config import ArchiveConfig
from ..errors import ArchiveFormatError
from ..utils.stream import ByteSource
from .index import IndexEntry, parse_index
from .overrides import OverrideCollector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverrideUsed:
    """Emitted whenever read() returns an override instead of archive bytes."""
    name: str
    archive_path: str
    size: int


OverrideListener = Callable[[OverrideUsed], None]


class AggFile:
    """
    An open AGG archive plus its override table.

    Not safe for concurrent read() calls; every read seeks the shared source.
    """

    def __init__(self, config: Optional[ArchiveConfig] = None):
        self.config = config or ArchiveConfig()
        self.path: Optional[str] = None
        self._source: Optional[ByteSource] = None
        self._files: Dict[str, IndexEntry] = {}
        self._overrides: Dict[str, bytes] = {}
        self._listeners: List[OverrideListener] = []

    def open(self, path: Union[str, Path]) -> bool:
        """
        Open an archive and collect its overrides.

        Returns:
            True on success, False if the archive directory is malformed

        Raises:
            ArchiveIOError: If the file cannot be opened or read
        """
        self.close()

        source = ByteSource.open(path)
        try:
            files = parse_index(source, self.config.max_filename_size)
            overrides = OverrideCollector(self.config).collect(path)
        except ArchiveFormatError as e:
            source.close()
            logger.warning(f"Cannot open archive {path}: {e}")
            return False
        except Exception:
            source.close()
            raise

        self.path = str(path)
        self._source = source
        self._files = files
        self._overrides = overrides
        logger.debug(f"Opened {path}: {len(files)} files, {len(overrides)} overrides")
        return True

    def close(self) -> None:
        """Release the archive file and forget all entries."""
        if self._source is not None:
            self._source.close()
        self._source = None
        self._files = {}
        self._overrides = {}
        self.path = None

    @property
    def is_open(self) -> bool:
        return self._source is not None

    def add_listener(self, listener: OverrideListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: OverrideListener) -> None:
        self._listeners.remove(listener)

    def names(self) -> List[str]:
        """Get all file names in archive order."""
        return list(self._files)

    def entry(self, name: str) -> Optional[IndexEntry]:
        return self._files.get(name.upper())

    @property
    def overrides(self) -> Mapping[str, bytes]:
        """Read-only view of collected overrides, including ones read() never returns."""
        return MappingProxyType(self._overrides)

    def has_override(self, name: str) -> bool:
        """Check whether read() would return an override for ``name``."""
        name = name.upper()
        entry = self._files.get(name)
        return entry is not None and entry.size > 0 and name in self._overrides

    def read(self, name: str) -> bytes:
        """
        Resolve a file by name.

        Returns:
            The override payload if one shadows the file, otherwise the file's
            bytes from the archive; empty bytes when the name is unknown or has
            size zero

        Raises:
            ArchiveFormatError: If the file's entry points outside the archive
            ArchiveIOError: If reading the archive fails
        """
        name = name.upper()
        entry = self._files.get(name)
        if entry is None or entry.size == 0 or self._source is None:
            # Not finding a file is routine: the expansion archive is checked
            # before the base one.
            return b""

        payload = self._overrides.get(name)
        if payload is not None:
            self._notify(OverrideUsed(name=name, archive_path=self.path, size=len(payload)))
            return payload

        if not entry.fits(self._source.size()):
            raise ArchiveFormatError(
                f"Entry {name} at {entry.offset}+{entry.size} exceeds archive size {self._source.size()}",
                path=self.path,
            )

        self._source.seek(entry.offset)
        return self._source.read_raw(entry.size)

    def _notify(self, event: OverrideUsed) -> None:
        for listener in list(self._listeners):
            listener(event)

    def __contains__(self, name: str) -> bool:
        return name.upper() in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __enter__(self) -> "AggFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
