"""Frame composition and rendering backends.

The core hands a frozen ``RenderSnapshot`` to any object implementing the
``Renderer`` protocol. ``compose_frame`` lays out the help line, query
prompt, summary, result list, and preview pane as text rows; the backends
only differ in where the rows go and whether they carry ANSI styling.
"""

from __future__ import annotations

import os
import shutil
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, TextIO

from .ansi import clip_ansi_line, display_width, slice_ansi_line
from .highlight import DEFAULT_STYLE, colorize_lines, sanitize_terminal_text
from .search import SearchResult, highlight_positions
from .state import AppState, Mode

QUERY_PROMPT = "Query> "
MATCH_SGR = "\033[1;30;42m"
MATCH_SGR_END = "\033[0m"
HEADER_ROWS = 3

HELP_TEXT: dict[Mode, tuple[tuple[str, str], ...]] = {
    Mode.BROWSING: (
        ("q", "exit"),
        ("i", "search"),
        ("j/k", "move"),
        ("Enter", "preview"),
    ),
    Mode.SEARCHING: (
        ("Esc", "stop searching"),
        ("Up/Down", "move"),
        ("Enter", "preview"),
        ("Ctrl+U", "clear"),
        ("Ctrl+C", "exit"),
    ),
    Mode.PREVIEWING: (
        ("q/Esc", "close preview"),
        ("Up/Down", "scroll"),
        ("Left/Right", "pan"),
    ),
}


@dataclass(frozen=True)
class RenderSnapshot:
    """Read-only view of ``AppState`` for one frame."""

    mode: Mode
    query: str
    cursor_col: int
    results: tuple[SearchResult, ...]
    selected_index: int
    total_files: int
    traversal_complete: bool
    search_pending: bool
    status_message: str
    preview_path: Path | None
    preview_line: int
    preview_lines: tuple[str, ...]
    scroll_row: int
    scroll_col: int

    @classmethod
    def from_state(cls, state: AppState) -> RenderSnapshot:
        return cls(
            mode=state.mode,
            query=state.query,
            cursor_col=len(state.query),
            results=tuple(state.results),
            selected_index=state.selected_index,
            total_files=state.total_files,
            traversal_complete=state.traversal_complete,
            search_pending=state.search_pending,
            status_message=state.status_message,
            preview_path=state.preview_path,
            preview_line=state.preview_line,
            preview_lines=tuple(state.preview_lines),
            scroll_row=state.scroll.row,
            scroll_col=state.scroll.col,
        )


class Renderer(Protocol):
    def render(self, snapshot: RenderSnapshot) -> None: ...


def selected_with_ansi(text: str) -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text:
        return text
    # Keep reverse video active even when the text contains internal resets.
    return "\033[7m" + text.replace("\033[0m", "\033[0;7m") + "\033[0m"


def help_line(mode: Mode, color: bool) -> str:
    parts: list[str] = []
    for key, action in HELP_TEXT[mode]:
        key_text = f"\033[1m{key}\033[22m" if color else key
        parts.append(f"{key_text} {action}")
    line = " Press " + ", ".join(parts) + "."
    return f"\033[2m{line}\033[0m" if color else line


def summary_line(snapshot: RenderSnapshot) -> str:
    files = f"{snapshot.total_files} files"
    if not snapshot.traversal_complete:
        files += " (scanning)"
    text = f"{len(snapshot.results)} results / {files}"
    if snapshot.search_pending:
        text += " ..."
    if snapshot.status_message:
        text += f"  {snapshot.status_message}"
    return text


def highlight_text(text: str, positions: tuple[int, ...], color: bool) -> str:
    """Sanitize ``text`` for display and wrap matched positions in match styling."""
    marked = set(positions) if color else set()
    out: list[str] = []
    inside = False
    for idx, ch in enumerate(text):
        shown = "    " if ch == "\t" else sanitize_terminal_text(ch)
        hit = idx in marked
        if hit and not inside:
            out.append(MATCH_SGR)
            inside = True
        elif not hit and inside:
            out.append(MATCH_SGR_END)
            inside = False
        out.append(shown)
    if inside:
        out.append(MATCH_SGR_END)
    return "".join(out)


def result_row(result: SearchResult, query: str, color: bool) -> str:
    prefix = f"{sanitize_terminal_text(result.display_name)}:{result.line}: "
    if color:
        prefix = f"\033[2m{sanitize_terminal_text(result.display_name)}\033[22m:{result.line}: "
    body = highlight_text(result.text, highlight_positions(query, result.text), color)
    return prefix + body


def results_window_start(selected: int, count: int, rows: int) -> int:
    """First visible result index keeping ``selected`` on screen."""
    if rows <= 0 or count <= rows:
        return 0
    start = max(0, selected - rows + 1)
    return min(start, count - rows)


def _compose_results(snapshot: RenderSnapshot, width: int, rows: int, color: bool) -> list[str]:
    out: list[str] = []
    count = len(snapshot.results)
    start = results_window_start(snapshot.selected_index, count, rows)
    for idx in range(start, min(count, start + rows)):
        row = result_row(snapshot.results[idx], snapshot.query, color)
        selected = idx == snapshot.selected_index
        if color:
            row = clip_ansi_line(row, width)
            if selected:
                row = selected_with_ansi(row)
            elif "\033" in row:
                row += "\033[0m"
            out.append(row)
        else:
            marker = "> " if selected else "  "
            out.append(marker + clip_ansi_line(row, width - 2))
    return out


def _compose_preview(
    snapshot: RenderSnapshot,
    width: int,
    rows: int,
    color: bool,
    colored_lines: list[str] | None,
) -> list[str]:
    lines = snapshot.preview_lines
    source = colored_lines if colored_lines is not None else [
        sanitize_terminal_text(line) for line in lines
    ]
    number_width = len(str(max(1, len(lines))))
    text_width = max(1, width - number_width - 3)
    out: list[str] = []
    first = max(1, snapshot.scroll_row)
    for line_number in range(first, min(len(lines), first + rows - 1) + 1):
        text = slice_ansi_line(source[line_number - 1], snapshot.scroll_col - 1, text_width)
        gutter = f"{line_number:>{number_width}} │ "
        if line_number == snapshot.preview_line:
            if color:
                row = selected_with_ansi(gutter + text)
            else:
                row = f"{line_number:>{number_width}} ▶ {text}"
        elif color:
            row = f"\033[2m{gutter}\033[22m{text}\033[0m"
        else:
            row = gutter + text
        out.append(row)
    return out


def compose_frame(
    snapshot: RenderSnapshot,
    width: int,
    height: int,
    *,
    color: bool = False,
    colorize: Callable[[list[str], Path], list[str]] | None = None,
) -> list[str]:
    """Lay out one full frame as at most ``height`` rows of ``width`` columns."""
    width = max(1, width)
    height = max(1, height)
    rows: list[str] = [clip_ansi_line(help_line(snapshot.mode, color), width)]

    if snapshot.mode is Mode.PREVIEWING:
        location = f"{snapshot.preview_path}:{snapshot.preview_line}"
        if snapshot.status_message:
            location += f"  {snapshot.status_message}"
        rows.append(clip_ansi_line(location, width))
        colored: list[str] | None = None
        if color and colorize is not None and snapshot.preview_path is not None:
            colored = colorize(list(snapshot.preview_lines), snapshot.preview_path)
        rows.extend(_compose_preview(snapshot, width, height - len(rows), color, colored))
        return rows[:height]

    rows.append(clip_ansi_line(QUERY_PROMPT + sanitize_terminal_text(snapshot.query), width))
    rows.append(clip_ansi_line(summary_line(snapshot), width))
    rows.extend(_compose_results(snapshot, width, height - HEADER_ROWS, color))
    return rows[:height]


def query_cursor_position(snapshot: RenderSnapshot) -> tuple[int, int]:
    """1-based screen (row, col) of the text cursor in the query prompt."""
    before = sanitize_terminal_text(snapshot.query[: snapshot.cursor_col])
    return 2, display_width(QUERY_PROMPT + before) + 1


class TerminalRenderer:
    """Write full ANSI frames to a terminal file descriptor."""

    def __init__(
        self,
        stdout_fd: int | None = None,
        *,
        color: bool = True,
        style: str = DEFAULT_STYLE,
    ) -> None:
        self.stdout_fd = sys.stdout.fileno() if stdout_fd is None else stdout_fd
        self.color = color
        self.style = style
        self._colorized_key: tuple[Path, int] | None = None
        self._colorized: list[str] = []

    def _colorize(self, lines: list[str], path: Path) -> list[str]:
        key = (path, len(lines))
        if key != self._colorized_key:
            self._colorized = colorize_lines(lines, path, self.style)
            self._colorized_key = key
        return self._colorized

    def render(self, snapshot: RenderSnapshot) -> None:
        term = shutil.get_terminal_size((80, 24))
        rows = compose_frame(
            snapshot,
            term.columns,
            term.lines,
            color=self.color,
            colorize=self._colorize,
        )
        out: list[str] = ["\033[H\033[J"]
        out.append("\r\n".join(rows))
        if self.color:
            out.append("\033[0m")
        if snapshot.mode is Mode.SEARCHING:
            row, col = query_cursor_position(snapshot)
            out.append(f"\033[{row};{min(col, term.columns)}H\033[?25h")
        else:
            out.append("\033[?25l")
        os.write(self.stdout_fd, "".join(out).encode("utf-8", errors="replace"))


class PlainTextRenderer:
    """Headless backend writing uncolored frames to a text stream."""

    def __init__(self, stream: TextIO, width: int = 80, height: int = 24) -> None:
        self.stream = stream
        self.width = width
        self.height = height
        self.frames = 0

    def render(self, snapshot: RenderSnapshot) -> None:
        rows = compose_frame(snapshot, self.width, self.height, color=False)
        self.stream.write("\n".join(rows) + "\n\f\n")
        self.frames += 1
