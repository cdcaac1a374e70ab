"""Regression tests for ANSI primitives.

Covers relative cursor moves and width-aware clipping of styled lines,
which the status line and header depend on.
"""

import unittest

from peekdir import ansi as ansi_mod


class CursorMoveTests(unittest.TestCase):
    def test_zero_moves_emit_nothing(self) -> None:
        self.assertEqual(ansi_mod.cursor_up(0), "")
        self.assertEqual(ansi_mod.cursor_down(-2), "")
        self.assertEqual(ansi_mod.cursor_right(0), "")

    def test_moves_are_relative(self) -> None:
        self.assertEqual(ansi_mod.cursor_up(3), "\x1b[3A")
        self.assertEqual(ansi_mod.cursor_down(1), "\x1b[1B")
        self.assertEqual(ansi_mod.cursor_right(12), "\x1b[12C")


class ClipAnsiLineTests(unittest.TestCase):
    def test_escapes_do_not_count_toward_width(self) -> None:
        self.assertEqual(ansi_mod.clip_ansi_line("\x1b[1mabcdef\x1b[0m", 3), "\x1b[1mabc")

    def test_wide_character_at_limit_is_dropped(self) -> None:
        self.assertEqual(ansi_mod.clip_ansi_line("a日b", 2), "a")
        self.assertEqual(ansi_mod.clip_ansi_line("a日b", 3), "a日")

    def test_non_positive_width_gives_empty_string(self) -> None:
        self.assertEqual(ansi_mod.clip_ansi_line("abc", 0), "")


if __name__ == "__main__":
    unittest.main()
