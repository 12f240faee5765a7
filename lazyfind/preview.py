"""Full-file loading for the preview pane.

Reads one file line by line with tabs expanded to a fixed run of spaces so
column scrolling stays aligned. Failures produce an empty preview rather
than an exception; the reason is kept on the previewer for the status line.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TAB_WIDTH = 4
LEADING_CONTEXT_LINES = 6


def normalize_line(raw: str, tab_width: int = DEFAULT_TAB_WIDTH) -> str:
    return raw.rstrip("\r\n").replace("\t", " " * tab_width)


def read_lines(path: Path, tab_width: int = DEFAULT_TAB_WIDTH) -> list[str]:
    """Return the normalized lines of ``path``; raises ``OSError`` on failure."""
    with path.open("r", encoding="utf-8", errors="replace", newline="") as handle:
        return [normalize_line(raw, tab_width) for raw in handle]


def max_scroll_row(line_count: int) -> int:
    return max(1, line_count - 1)


def initial_scroll_row(
    matched_line: int,
    line_count: int,
    context: int = LEADING_CONTEXT_LINES,
) -> int:
    """Top visible line when opening a preview at ``matched_line``."""
    row = max(1, matched_line - context)
    return min(row, max_scroll_row(line_count))


class Previewer:
    def __init__(self, tab_width: int = DEFAULT_TAB_WIDTH) -> None:
        self.tab_width = tab_width
        self.last_error: str | None = None

    def load(self, path: Path) -> list[str]:
        try:
            lines = read_lines(path, self.tab_width)
        except OSError as exc:
            logger.debug("preview failed for %s: %s", path, exc)
            self.last_error = f"Cannot open {path}: {exc.strerror or exc}"
            return []
        self.last_error = None
        return lines
