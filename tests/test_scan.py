"""Directory snapshot tests against real temporary directories."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from peekdir.metrics import COLOR_DIR, COLOR_EXEC
from peekdir.scan import ScanOptions, is_visible, scan_directory


class ScanDirectoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "b.txt").write_text("b", encoding="utf-8")
        (self.root / "a").write_text("a", encoding="utf-8")
        (self.root / ".hidden").write_text("h", encoding="utf-8")
        (self.root / "sub").mkdir()
        script = self.root / "run.sh"
        script.write_text("#!/bin/sh\n", encoding="utf-8")
        script.chmod(0o755)
        os.symlink("a", self.root / "link")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_entries_are_sorted_and_hidden_names_skipped(self) -> None:
        entries = scan_directory(str(self.root), ScanOptions())

        self.assertEqual([entry.name for entry in entries], [b"a", b"b.txt", b"link", b"run.sh", b"sub"])

    def test_show_hidden_includes_dotfiles_but_never_dot_entries(self) -> None:
        entries = scan_directory(os.fsencode(self.root), ScanOptions(show_hidden=True))
        names = [entry.name for entry in entries]

        self.assertEqual(names[0], b".hidden")
        self.assertNotIn(b".", names)
        self.assertNotIn(b"..", names)

    def test_indicators_and_colors_follow_file_type(self) -> None:
        entries = {entry.name: entry for entry in scan_directory(str(self.root), ScanOptions(indicate=True))}

        self.assertEqual(entries[b"sub"].indicator, "/")
        self.assertEqual(entries[b"sub"].color, COLOR_DIR)
        self.assertEqual(entries[b"link"].indicator, "@")
        self.assertEqual(entries[b"run.sh"].indicator, "*")
        self.assertEqual(entries[b"run.sh"].color, COLOR_EXEC)
        self.assertIsNone(entries[b"a"].indicator)

    def test_color_off_leaves_entries_plain(self) -> None:
        entries = scan_directory(str(self.root), ScanOptions(color=False))

        self.assertTrue(all(entry.color is None for entry in entries))

    def test_empty_directory_gives_empty_list(self) -> None:
        empty = self.root / "sub"

        self.assertEqual(scan_directory(str(empty), ScanOptions()), [])

    def test_unreadable_target_gives_none(self) -> None:
        self.assertIsNone(scan_directory(str(self.root / "missing"), ScanOptions()))
        self.assertIsNone(scan_directory(str(self.root / "a"), ScanOptions()))

    def test_undecodable_names_are_kept_as_bytes(self) -> None:
        raw = os.fsencode(self.root / "sub") + b"/\xffname"
        with open(raw, "wb"):
            pass

        entries = scan_directory(os.fsencode(self.root / "sub"), ScanOptions())

        self.assertEqual([entry.name for entry in entries], [b"\xffname"])
        self.assertEqual(entries[0].display_width, 4)


class VisibilityTests(unittest.TestCase):
    def test_is_visible(self) -> None:
        self.assertTrue(is_visible(b"a", False))
        self.assertFalse(is_visible(b".a", False))
        self.assertTrue(is_visible(b".a", True))
        self.assertFalse(is_visible(b"..", True))


if __name__ == "__main__":
    unittest.main()
