"""
Tests for override directory collection.
"""

import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from ..archive import overrides as overrides_module
from ..archive.overrides import OverrideCollector
from ..archive.sprite_sheet import parse_sprite_sheet
from ..config import ArchiveConfig
from ..utils.fs import strip_extension
from .fixtures import write_agg, write_oversized_png, write_png


class TestStripExtension(unittest.TestCase):
    """Test override directory path derivation."""

    def test_strip_upper_case(self):
        self.assertEqual(strip_extension("data/HEROES2.AGG", ".AGG"), Path("data/HEROES2"))

    def test_strip_ignores_case(self):
        self.assertEqual(strip_extension("data/heroes2.agg", ".AGG"), Path("data/heroes2"))

    def test_no_match(self):
        self.assertIsNone(strip_extension("data/HEROES2.DAT", ".AGG"))
        self.assertIsNone(strip_extension(".AGG", ".AGG"))


class TestOverrideCollector(unittest.TestCase):
    """Test OverrideCollector against real directories."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.archive_path = write_agg(self.temp_dir / "HEROES2.AGG", [("KNIGHT.ICN", b"orig")])
        self.override_dir = self.temp_dir / "HEROES2"
        self.collector = OverrideCollector(ArchiveConfig())

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_no_override_directory(self):
        self.assertEqual(self.collector.collect(self.archive_path), {})

    def test_archive_without_extension(self):
        other = write_agg(self.temp_dir / "HEROES2.DAT", [("A.ICN", b"a")])
        write_png(self.override_dir / "A.ICN" / "0.png", (1, 1))
        self.assertEqual(self.collector.collect(other), {})

    def test_collects_sprite_sheet(self):
        """Test that NAME.ICN directories become containers keyed by NAME.ICN."""
        write_png(self.override_dir / "KNIGHT.ICN" / "0.png", (2, 1))
        write_png(self.override_dir / "KNIGHT.ICN" / "1.png", (2, 1))

        overrides = self.collector.collect(self.archive_path)

        self.assertEqual(list(overrides), ["KNIGHT.ICN"])
        sheet = parse_sprite_sheet(overrides["KNIGHT.ICN"])
        self.assertEqual(sheet.slot_count, 2)
        self.assertEqual(sheet.total_size, 42)

    def test_names_upper_cased(self):
        write_png(self.override_dir / "knight.icn" / "0.png", (1, 1))
        overrides = self.collector.collect(self.archive_path)
        self.assertIn("KNIGHT.ICN", overrides)

    def test_unknown_types_and_files_ignored(self):
        """Test that unrecognized type tags and plain files are skipped."""
        write_png(self.override_dir / "KNIGHT.ICN" / "0.png", (1, 1))
        write_png(self.override_dir / "GROUND32.TIL" / "0.png", (1, 1))
        write_png(self.override_dir / "NOEXTENSION" / "0.png", (1, 1))
        (self.override_dir / "LOOSE.ICN").write_bytes(b"a file, not a directory")

        overrides = self.collector.collect(self.archive_path)

        self.assertEqual(list(overrides), ["KNIGHT.ICN"])

    def test_empty_and_broken_directories_skipped(self):
        """Test that failed syntheses do not stop collection."""
        (self.override_dir / "EMPTY.ICN").mkdir(parents=True)
        write_png(self.override_dir / "BROKEN.ICN" / "0.png", (1, 1))
        (self.override_dir / "BROKEN.ICN" / "1.png").write_bytes(b"garbage")
        write_png(self.override_dir / "GOOD.ICN" / "0.png", (1, 1))

        overrides = self.collector.collect(self.archive_path)

        self.assertEqual(list(overrides), ["GOOD.ICN"])

    def test_oversized_image_skips_only_its_directory(self):
        write_oversized_png(self.override_dir / "BOMB.ICN" / "0.png")
        write_png(self.override_dir / "GOOD.ICN" / "0.png", (1, 1))

        overrides = self.collector.collect(self.archive_path)

        self.assertEqual(list(overrides), ["GOOD.ICN"])

    def test_filesystem_error_skips_only_its_directory(self):
        """Test that an unreadable override directory does not stop collection."""
        def unreadable(path):
            raise PermissionError(13, "Permission denied", str(path))

        (self.override_dir / "LOCKED.PAL").mkdir(parents=True)
        write_png(self.override_dir / "GOOD.ICN" / "0.png", (1, 1))
        self.collector.register("PAL", unreadable)

        with self.assertLogs("agg_archive.archive.overrides", level="WARNING") as logs:
            overrides = self.collector.collect(self.archive_path)

        self.assertEqual(list(overrides), ["GOOD.ICN"])
        self.assertIn("LOCKED.PAL", logs.output[0])

    def test_unreadable_override_directory(self):
        write_png(self.override_dir / "GOOD.ICN" / "0.png", (1, 1))

        with patch.object(overrides_module, "list_entries", side_effect=PermissionError("denied")):
            with self.assertLogs("agg_archive.archive.overrides", level="WARNING"):
                self.assertEqual(self.collector.collect(self.archive_path), {})

    def test_register_custom_type(self):
        """Test registering an additional synthesizer."""
        (self.override_dir / "PALETTE.PAL").mkdir(parents=True)
        self.collector.register("pal", lambda path: b"palette:" + path.name.encode())

        overrides = self.collector.collect(self.archive_path)

        self.assertEqual(overrides["PALETTE.PAL"], b"palette:PALETTE.PAL")
        self.assertEqual(self.collector.type_tags, ["ICN", "PAL"])

    def test_configured_sprite_sheet_type(self):
        collector = OverrideCollector(ArchiveConfig(sprite_sheet_type="SPR"))
        write_png(self.override_dir / "KNIGHT.SPR" / "0.png", (1, 1))
        write_png(self.override_dir / "KNIGHT.ICN" / "0.png", (1, 1))

        self.assertEqual(list(collector.collect(self.archive_path)), ["KNIGHT.SPR"])


if __name__ == '__main__':
    unittest.main()
