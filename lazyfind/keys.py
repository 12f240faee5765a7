"""Key tokens and a small key-combo dispatch table."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

UP = "UP"
DOWN = "DOWN"
LEFT = "LEFT"
RIGHT = "RIGHT"
ESC = "ESC"
ENTER = "ENTER"
BACKSPACE = "BACKSPACE"
TAB = "TAB"
CTRL_C = "CTRL_C"
CTRL_U = "CTRL_U"


def is_text_key(key: str) -> bool:
    """Return whether ``key`` is a single printable character to insert."""
    return len(key) == 1 and key.isprintable()


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action callback."""

    combos: tuple[str, ...]
    handler: Callable[[], bool | None]


class KeyComboRegistry:
    """Exact-match key dispatch table."""

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[], bool | None]] = {}

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        for combo in binding.combos:
            self._handlers[combo] = binding.handler
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def __contains__(self, key: str) -> bool:
        return key in self._handlers

    def dispatch(self, key: str) -> bool | None:
        """Invoke the handler bound to ``key``; ``None`` when nothing is bound."""
        handler = self._handlers.get(key)
        if handler is None:
            return None
        return handler()
