"""Regression tests for raw-key decoding.

Covers ESC timing, arrow sequences, control-key tokens, and UTF-8 text.
"""

import os
import time
import unittest

from lazyfind import input as input_mod
from lazyfind import keys


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        input_mod._PENDING_BYTES.clear()
        self.read_fd, self.write_fd = os.pipe()

    def tearDown(self) -> None:
        input_mod._PENDING_BYTES.clear()
        os.close(self.read_fd)
        os.close(self.write_fd)

    def feed(self, data: bytes) -> None:
        os.write(self.write_fd, data)

    def read(self) -> str:
        return input_mod.read_key(self.read_fd, timeout_ms=20)

    def test_timeout_without_input_returns_empty_token(self) -> None:
        started = time.monotonic()
        key = self.read()

        self.assertEqual(key, "")
        self.assertLess(time.monotonic() - started, 0.5)

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        self.feed(b"\x1b")
        started = time.monotonic()
        key = self.read()

        self.assertEqual(key, keys.ESC)
        self.assertLess(time.monotonic() - started, 0.2)

    def test_arrow_sequences_are_recognized(self) -> None:
        self.feed(b"\x1b[A\x1b[B\x1bOC\x1b[D")

        self.assertEqual([self.read() for _ in range(4)], [keys.UP, keys.DOWN, keys.RIGHT, keys.LEFT])

    def test_escape_does_not_swallow_following_printable_key(self) -> None:
        self.feed(b"\x1ba")

        self.assertEqual(self.read(), keys.ESC)
        self.assertEqual(self.read(), "a")

    def test_unsupported_csi_sequence_is_dropped_whole(self) -> None:
        self.feed(b"\x1b[3~x")

        self.assertEqual(self.read(), "")
        self.assertEqual(self.read(), "x")

    def test_control_bytes_map_to_tokens(self) -> None:
        self.feed(b"\x03\x15\t\x7f\x08\r\n")

        self.assertEqual(
            [self.read() for _ in range(7)],
            [keys.CTRL_C, keys.CTRL_U, keys.TAB, keys.BACKSPACE, keys.BACKSPACE, keys.ENTER, keys.ENTER],
        )

    def test_multibyte_utf8_is_one_key(self) -> None:
        self.feed("é€".encode("utf-8"))

        self.assertEqual(self.read(), "é")
        self.assertEqual(self.read(), "€")


if __name__ == "__main__":
    unittest.main()
