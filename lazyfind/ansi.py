"""Width-aware helpers for lines that may carry SGR color codes.

Frames are composed from already-sanitized text in which tabs have been
expanded, so every printable character is measured on its own.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def char_display_width(ch: str) -> int:
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def _tokens(text: str) -> Iterator[tuple[str, int]]:
    """Yield ``(piece, width)`` pairs; escape sequences have width -1."""
    pos = 0
    for match in ANSI_ESCAPE_RE.finditer(text):
        for ch in text[pos:match.start()]:
            yield ch, char_display_width(ch)
        yield match.group(0), -1
        pos = match.end()
    for ch in text[pos:]:
        yield ch, char_display_width(ch)


def display_width(text: str) -> int:
    return sum(width for _piece, width in _tokens(text) if width > 0)


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Keep at most ``max_cols`` columns of ``text``; escapes pass through."""
    return slice_ansi_line(text, 0, max_cols)


def slice_ansi_line(text: str, start_cols: int, max_cols: int) -> str:
    """Cut the column window ``[start_cols, start_cols + max_cols)`` from ``text``.

    Escapes inside the window are copied as-is. When the window opens after a
    color was set, the last color set before it is replayed first so the
    visible part keeps its styling. A wide character straddling either edge
    is dropped.
    """
    if max_cols <= 0 or not text:
        return ""
    start_cols = max(0, start_cols)
    end_cols = start_cols + max_cols

    out: list[str] = []
    carried_sgr = ""
    col = 0
    for piece, width in _tokens(text):
        if width < 0:
            if col < start_cols:
                if piece.endswith("m"):
                    carried_sgr = piece
            else:
                out.append(piece)
            continue
        if col >= end_cols:
            break
        if col >= start_cols and col + width <= end_cols:
            if carried_sgr:
                out.append(carried_sgr)
                carried_sgr = ""
            out.append(piece)
        col += width
    return "".join(out)
