"""Tests for key-combo registration and text key detection."""

from __future__ import annotations

import unittest

from lazyfind import keys
from lazyfind.keys import KeyComboBinding, KeyComboRegistry, is_text_key


class KeyComboRegistryTests(unittest.TestCase):
    def test_every_combo_of_a_binding_dispatches_to_its_handler(self) -> None:
        calls: list[str] = []
        registry = KeyComboRegistry().register_bindings(
            KeyComboBinding(("q", keys.ESC), lambda: calls.append("quit")),
            KeyComboBinding((keys.ENTER,), lambda: calls.append("open")),
        )

        registry.dispatch("q")
        registry.dispatch(keys.ESC)
        registry.dispatch(keys.ENTER)

        self.assertEqual(calls, ["quit", "quit", "open"])
        self.assertIn("q", registry)
        self.assertNotIn("x", registry)

    def test_unbound_key_returns_none(self) -> None:
        self.assertIsNone(KeyComboRegistry().dispatch("x"))

    def test_later_binding_wins(self) -> None:
        registry = KeyComboRegistry()
        registry.register_binding(KeyComboBinding(("a",), lambda: 1))
        registry.register_binding(KeyComboBinding(("a",), lambda: 2))

        self.assertEqual(registry.dispatch("a"), 2)


class TextKeyTests(unittest.TestCase):
    def test_printable_single_characters_are_text(self) -> None:
        for key in ("a", " ", "é", "日"):
            self.assertTrue(is_text_key(key), key)

    def test_tokens_and_controls_are_not_text(self) -> None:
        for key in (keys.UP, keys.CTRL_C, "", "\x07"):
            self.assertFalse(is_text_key(key), key)


if __name__ == "__main__":
    unittest.main()
