"""Display sanitization and Pygments highlighting for preview lines.

Neutralizes terminal control bytes so file content cannot move the cursor or
ring the bell, then colors whole files line-aligned for the preview pane.
"""

from __future__ import annotations

import re
from pathlib import Path

from pygments import highlight as pygments_highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
DEFAULT_STYLE = "monokai"

_FORMATTERS: dict[str, Terminal256Formatter] = {}


def _escape_control(match: re.Match[str]) -> str:
    return f"\\x{ord(match.group(0)):02x}"


def sanitize_terminal_text(source: str) -> str:
    """Show control characters as ``\\xNN`` so file content cannot drive the terminal.

    Tabs and line breaks are left alone.
    """
    return _CONTROL_RE.sub(_escape_control, source)


def normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


def _formatter_for_style(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = Terminal256Formatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def colorize_lines(lines: list[str], path: Path, style: str = DEFAULT_STYLE) -> list[str]:
    """Return ``lines`` sanitized and syntax highlighted, one output per input.

    Falls back to the sanitized plain lines whenever highlighting would not
    keep a one-to-one line mapping.
    """
    plain = [sanitize_terminal_text(line) for line in lines]
    if not plain:
        return plain
    source = "\n".join(plain) + "\n"
    try:
        lexer = get_lexer_for_filename(path.name, source, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return plain
    if isinstance(lexer, TextLexer):
        return plain

    rendered = pygments_highlight(source, lexer, _formatter_for_style(normalize_style(style)))
    colored = rendered.split("\n")
    if colored and colored[-1] == "":
        colored.pop()
    if len(colored) != len(plain):
        return plain
    return colored
