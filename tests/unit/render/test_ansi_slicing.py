"""Tests for ANSI-aware width measurement and viewport slicing."""

from __future__ import annotations

import unittest

from lazyfind.ansi import clip_ansi_line, display_width, slice_ansi_line


class AnsiWidthTests(unittest.TestCase):
    def test_escape_sequences_have_no_width(self) -> None:
        self.assertEqual(display_width("\033[31mred\033[0m"), 3)

    def test_wide_characters_take_two_columns(self) -> None:
        self.assertEqual(display_width("日本"), 4)


class AnsiSliceTests(unittest.TestCase):
    def test_clip_keeps_styles_and_cuts_text(self) -> None:
        self.assertEqual(clip_ansi_line("\033[31mabcdef", 3), "\033[31mabc")

    def test_slice_reinjects_active_style_after_offset(self) -> None:
        self.assertEqual(slice_ansi_line("\033[32mabcdef\033[0m", 2, 2), "\033[32mcd")

    def test_wide_character_that_does_not_fit_is_dropped(self) -> None:
        self.assertEqual(clip_ansi_line("a日", 2), "a")

    def test_zero_width_or_empty_input(self) -> None:
        self.assertEqual(clip_ansi_line("abc", 0), "")
        self.assertEqual(slice_ansi_line("", 0, 5), "")


if __name__ == "__main__":
    unittest.main()
