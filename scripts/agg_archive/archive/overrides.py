"""
Collection of user override assets placed next to an archive.

For ``DATA/HEROES2.AGG`` the override directory is ``DATA/HEROES2``. Each
subdirectory named ``<NAME>.<TYPE>`` is turned into an asset by the
synthesizer registered for ``TYPE``; other entries are ignored.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from ..config import ArchiveConfig
from ..utils.fs import list_entries, strip_extension
from .sprite_sheet import SpriteSheetSynthesizer

logger = logging.getLogger(__name__)

Synthesizer = Callable[[Path], bytes]


class OverrideCollector:
    """Scans an archive's override directory and synthesizes override assets."""

    def __init__(self, config: Optional[ArchiveConfig] = None):
        self.config = config or ArchiveConfig()
        sprite_sheets = SpriteSheetSynthesizer(self.config.image_extensions)
        self._synthesizers: Dict[str, Synthesizer] = {
            self.config.sprite_sheet_type.upper(): sprite_sheets.synthesize,
        }

    def register(self, type_tag: str, synthesizer: Synthesizer) -> None:
        """Register a synthesizer for subdirectories ending in ``.<type_tag>``."""
        self._synthesizers[type_tag.upper()] = synthesizer

    @property
    def type_tags(self):
        return sorted(self._synthesizers)

    def override_directory(self, archive_path: Union[str, Path]) -> Optional[Path]:
        """Get the override directory path for an archive, whether or not it exists."""
        return strip_extension(archive_path, self.config.archive_extension)

    def collect(self, archive_path: Union[str, Path]) -> Dict[str, bytes]:
        """
        Build the override table for an archive.

        Returns:
            Mapping of upper-cased asset names to synthesized payloads; empty
            when there is no override directory or nothing usable in it
        """
        overrides: Dict[str, bytes] = {}

        directory = self.override_directory(archive_path)
        if directory is None or not directory.is_dir():
            return overrides

        try:
            entries = list_entries(directory, include_dirs=True)
        except OSError as e:
            logger.warning(f"Cannot scan override directory {directory}: {e}")
            return overrides

        for entry in entries:
            if not entry.is_dir:
                continue

            name = entry.name.upper()
            if name in (".", ".."):
                continue

            type_tag = name.split(".")[-1]
            synthesizer = self._synthesizers.get(type_tag)
            if synthesizer is None:
                logger.debug(f"Ignoring override directory {entry.path}: unknown type '{type_tag}'")
                continue

            try:
                payload = synthesizer(entry.path)
            except OSError as e:
                logger.warning(f"Skipping override {name}: {e}")
                continue

            if payload:
                overrides.setdefault(name, payload)
                logger.debug(f"Collected override {name} ({len(payload)} bytes)")

        if overrides:
            logger.info(f"Found {len(overrides)} override assets in {directory}")
        return overrides
