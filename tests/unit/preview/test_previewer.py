"""Tests for preview loading and initial viewport placement."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from lazyfind.preview import Previewer, initial_scroll_row, max_scroll_row, normalize_line


class ScrollPlacementTests(unittest.TestCase):
    def test_matched_line_opens_with_six_lines_of_context(self) -> None:
        self.assertEqual(initial_scroll_row(50, 100), 44)

    def test_early_match_opens_at_first_line(self) -> None:
        self.assertEqual(initial_scroll_row(3, 100), 1)

    def test_short_file_clamps_to_last_scrollable_row(self) -> None:
        self.assertEqual(initial_scroll_row(10, 10), 4)
        self.assertEqual(initial_scroll_row(10, 3), 2)

    def test_max_scroll_row_never_below_one(self) -> None:
        self.assertEqual(max_scroll_row(0), 1)
        self.assertEqual(max_scroll_row(1), 1)
        self.assertEqual(max_scroll_row(20), 19)


class PreviewerTests(unittest.TestCase):
    def test_load_returns_lines_without_terminators(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "a.txt"
            path.write_bytes(b"one\r\n\ttwo\nthree")

            previewer = Previewer()
            lines = previewer.load(path)

        self.assertEqual(lines, ["one", "    two", "three"])
        self.assertIsNone(previewer.last_error)

    def test_load_of_missing_file_is_empty_with_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "gone.txt"
            previewer = Previewer()

            self.assertEqual(previewer.load(missing), [])
            self.assertIsNotNone(previewer.last_error)
            assert previewer.last_error is not None
            self.assertIn("gone.txt", previewer.last_error)

    def test_invalid_utf8_is_replaced(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "latin.txt"
            path.write_bytes(b"caf\xe9\n")

            self.assertEqual(Previewer().load(path), ["caf�"])

    def test_normalize_line_uses_tab_width(self) -> None:
        self.assertEqual(normalize_line("\tx\n", tab_width=2), "  x")


if __name__ == "__main__":
    unittest.main()
