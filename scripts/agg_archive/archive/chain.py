"""
Ordered lookup across several archives, e.g. the expansion archive before the
base archive.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..config import ArchiveConfig
from .agg_file import AggFile, OverrideListener

logger = logging.getLogger(__name__)


class ArchiveChain:
    """Resolves names against a list of open archives, first match wins."""

    def __init__(self, archives: Optional[Iterable[AggFile]] = None):
        self.archives: List[AggFile] = list(archives or [])

    @classmethod
    def open_paths(cls, paths: Iterable[Union[str, Path]],
                   config: Optional[ArchiveConfig] = None) -> "ArchiveChain":
        """
        Open every existing archive in ``paths``.

        Missing files and malformed archives are skipped.

        Raises:
            ArchiveIOError: If an existing archive cannot be read
        """
        config = config or ArchiveConfig()
        chain = cls()

        try:
            for path in paths:
                path = Path(path)
                if not path.is_file():
                    logger.debug(f"Archive {path} not present, skipping")
                    continue

                archive = AggFile(config)
                if archive.open(path):
                    chain.archives.append(archive)
                else:
                    logger.warning(f"Skipping malformed archive {path}")
        except Exception:
            chain.close()
            raise

        return chain

    @classmethod
    def from_config(cls, config: ArchiveConfig) -> "ArchiveChain":
        return cls.open_paths(config.archive_paths(), config)

    def add_listener(self, listener: OverrideListener) -> None:
        for archive in self.archives:
            archive.add_listener(listener)

    def read(self, name: str) -> bytes:
        """Return the first non-empty result, or empty bytes."""
        for archive in self.archives:
            data = archive.read(name)
            if data:
                return data
        return b""

    def locate(self, name: str) -> Optional[AggFile]:
        """Get the archive that read() would take ``name`` from."""
        for archive in self.archives:
            entry = archive.entry(name)
            if entry is not None and entry.size > 0:
                return archive
        return None

    def names(self) -> List[str]:
        seen = {}
        for archive in self.archives:
            for name in archive.names():
                seen.setdefault(name, None)
        return list(seen)

    def close(self) -> None:
        for archive in self.archives:
            archive.close()
        self.archives = []

    def __len__(self) -> int:
        return len(self.archives)

    def __enter__(self) -> "ArchiveChain":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
