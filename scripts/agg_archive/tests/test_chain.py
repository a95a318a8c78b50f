"""
Tests for expansion-before-base archive lookup.
"""

import shutil
import struct
import tempfile
import unittest
from pathlib import Path

from ..archive.chain import ArchiveChain
from ..config import ArchiveConfig
from .fixtures import write_agg, write_png


class TestArchiveChain(unittest.TestCase):
    """Test ArchiveChain ordering and fallback."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.expansion = write_agg(self.temp_dir / "HEROES2X.AGG", [
            ("KNIGHT.ICN", b"expansion knight"),
            ("NEWUNIT.ICN", b"only in expansion"),
            ("GROUND32.TIL", b""),
        ])
        self.base = write_agg(self.temp_dir / "HEROES2.AGG", [
            ("KNIGHT.ICN", b"base knight"),
            ("GROUND32.TIL", b"base tiles"),
        ])
        self.config = ArchiveConfig(data_dir=str(self.temp_dir))

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_first_archive_wins(self):
        with ArchiveChain.from_config(self.config) as chain:
            self.assertEqual(len(chain), 2)
            self.assertEqual(chain.read("KNIGHT.ICN"), b"expansion knight")
            self.assertEqual(chain.locate("KNIGHT.ICN").path, str(self.expansion))

    def test_falls_back_to_base(self):
        """Test that empty results move on to the next archive."""
        with ArchiveChain.from_config(self.config) as chain:
            self.assertEqual(chain.read("NEWUNIT.ICN"), b"only in expansion")
            self.assertEqual(chain.read("GROUND32.TIL"), b"base tiles")
            self.assertEqual(chain.locate("GROUND32.TIL").path, str(self.base))

    def test_not_found_anywhere(self):
        with ArchiveChain.from_config(self.config) as chain:
            self.assertEqual(chain.read("MISSING.BIN"), b"")
            self.assertIsNone(chain.locate("MISSING.BIN"))

    def test_names_merged_in_order(self):
        with ArchiveChain.from_config(self.config) as chain:
            self.assertEqual(chain.names(), ["KNIGHT.ICN", "NEWUNIT.ICN", "GROUND32.TIL"])

    def test_missing_archive_skipped(self):
        self.expansion.unlink()
        with ArchiveChain.from_config(self.config) as chain:
            self.assertEqual(len(chain), 1)
            self.assertEqual(chain.read("KNIGHT.ICN"), b"base knight")

    def test_malformed_archive_skipped(self):
        self.expansion.write_bytes(struct.pack("<H", 999) + b"\x00" * 8)
        with self.assertLogs("agg_archive.archive.chain", level="WARNING"):
            chain = ArchiveChain.from_config(self.config)
        with chain:
            self.assertEqual(chain.read("KNIGHT.ICN"), b"base knight")

    def test_overrides_apply_per_archive(self):
        """Test that each archive consults its own override directory."""
        write_png(self.temp_dir / "HEROES2" / "KNIGHT.ICN" / "0.png", (1, 1))
        events = []

        with ArchiveChain.from_config(self.config) as chain:
            chain.add_listener(events.append)
            self.assertEqual(chain.read("KNIGHT.ICN"), b"expansion knight")
            self.assertEqual(events, [])

        self.expansion.unlink()
        with ArchiveChain.from_config(self.config) as chain:
            chain.add_listener(events.append)
            self.assertNotEqual(chain.read("KNIGHT.ICN"), b"base knight")
            self.assertEqual(len(events), 1)

    def test_close_releases_archives(self):
        chain = ArchiveChain.open_paths([self.expansion, self.base])
        archives = list(chain.archives)
        chain.close()

        self.assertEqual(len(chain), 0)
        self.assertTrue(all(not archive.is_open for archive in archives))


if __name__ == '__main__':
    unittest.main()
