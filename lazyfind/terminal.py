"""Terminal session control: TTY detection and the raw alternate screen."""

from __future__ import annotations

import contextlib
import os
import sys
import termios
import tty

ALT_SCREEN_ON = b"\x1b[?1049h"
ALT_SCREEN_OFF = b"\x1b[?1049l"
CURSOR_HIDE = b"\x1b[?25l"
CURSOR_SHOW = b"\x1b[?25h"


def is_interactive(stdin_fd: int | None = None, stdout_fd: int | None = None) -> bool:
    """Return whether both stdin and stdout are attached to a terminal."""
    in_fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
    out_fd = sys.stdout.fileno() if stdout_fd is None else stdout_fd
    return os.isatty(in_fd) and os.isatty(out_fd)


class TerminalController:
    """Switches one stdin/stdout pair into full-screen raw mode and back.

    The cooked tty attributes are captured at construction so they can be
    restored no matter how the session ends.
    """

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._cooked_attrs = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ALT_SCREEN_ON + CURSOR_HIDE)

    def disable_tui_mode(self) -> None:
        os.write(self.stdout_fd, CURSOR_SHOW + ALT_SCREEN_OFF)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._cooked_attrs)

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enable_tui_mode()
            yield self
        finally:
            self.disable_tui_mode()
