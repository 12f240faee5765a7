"""Command-line front door for lazyfind.

Parses CLI options over persisted settings, checks for an interactive
terminal, starts the path collector, and runs the event loop until quit.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .collector import start_collector
from .config import START_MODES, Settings, load_settings
from .loop import RuntimeLoopTiming, run_main_loop
from .machine import SearchApp
from .preview import Previewer
from .render import TerminalRenderer
from .search import SearchIndex, SearchLimits, create_search_index
from .search.fulltext import FullTextUnavailable
from .state import AppState
from .terminal import TerminalController, is_interactive

logger = logging.getLogger(__name__)

NOT_A_TERMINAL_MESSAGE = "lazyfind: an interactive terminal is required"
LOG_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _nonnegative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyfind",
        description="Interactively fuzzy-search file contents under a directory.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to search. Defaults to current directory.")
    parser.add_argument("--max-files", type=_positive_int, default=None, help="Files scanned per search.")
    parser.add_argument("--max-lines", type=_positive_int, default=None, help="Matching lines kept per file.")
    parser.add_argument(
        "--debounce-ms",
        type=_nonnegative_int,
        default=None,
        help="Minimum milliseconds between two searches.",
    )
    parser.add_argument(
        "--start-mode",
        choices=sorted(START_MODES),
        default=None,
        help="Mode the UI starts in.",
    )
    parser.add_argument("--hidden", action="store_true", help="Include dotfiles and dot-directories.")
    parser.add_argument("--no-ignore", action="store_true", help="Do not skip gitignored entries.")
    parser.add_argument("--threads", type=_positive_int, default=None, help="Directory walker threads.")
    parser.add_argument(
        "--backend",
        choices=("scan", "index"),
        default="scan",
        help="Search backend: rescan files, or a temporary full-text index (needs tantivy).",
    )
    parser.add_argument("--style", default=None, help="Pygments style name for the preview pane.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--log-file", metavar="PATH", default=None, help="Write debug logs to PATH.")
    return parser


def resolve_settings(args: argparse.Namespace, base: Settings) -> Settings:
    """Apply CLI overrides on top of persisted settings."""
    return base.with_overrides(
        max_files_scanned=args.max_files,
        max_lines_per_file=args.max_lines,
        debounce_ms=args.debounce_ms,
        start_mode=args.start_mode,
        show_hidden=True if args.hidden else None,
        respect_gitignore=False if args.no_ignore else None,
        walker_threads=args.threads,
        style=args.style,
    )


def configure_logging(log_file: str | None) -> None:
    """Log to ``log_file`` when given; otherwise keep the package silent.

    Nothing may reach the terminal while it is in raw mode.
    """
    package_logger = logging.getLogger("lazyfind")
    if log_file is None:
        package_logger.addHandler(logging.NullHandler())
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


def build_search_index(backend: str, root: Path, settings: Settings) -> SearchIndex:
    limits = SearchLimits(
        max_files_scanned=settings.max_files_scanned,
        max_lines_per_file=settings.max_lines_per_file,
        debounce_seconds=settings.debounce_ms / 1000.0,
    )
    try:
        return create_search_index(backend, root=root, limits=limits)
    except FullTextUnavailable as exc:
        raise SystemExit(str(exc)) from exc


def main(default_path: Path | None = None, argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run the interactive search UI.

    ``default_path`` and ``argv`` are primarily for tests; when omitted the
    current working directory and ``sys.argv`` are used.
    """
    args = build_parser().parse_args(argv)

    if default_path is None:
        default_path = Path.cwd()
    path = Path(args.path or default_path)
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")
    if not path.is_dir():
        raise SystemExit(f"Not a directory: {path}")

    if not is_interactive():
        print(NOT_A_TERMINAL_MESSAGE, file=sys.stderr)
        raise SystemExit(1)

    configure_logging(args.log_file)
    settings = resolve_settings(args, load_settings())
    root = path.resolve()
    logger.info("starting in %s with %s", root, settings)

    index = build_search_index(args.backend, root, settings)
    collector = start_collector(
        root,
        capacity=settings.channel_capacity,
        workers=settings.walker_threads,
        show_hidden=settings.show_hidden,
        respect_gitignore=settings.respect_gitignore,
    )
    try:
        stdin_fd = sys.stdin.fileno()
        stdout_fd = sys.stdout.fileno()
        app = SearchApp(AppState(mode=settings.initial_mode), index, Previewer())
        renderer = TerminalRenderer(stdout_fd, color=not args.no_color, style=settings.style)
        terminal = TerminalController(stdin_fd=stdin_fd, stdout_fd=stdout_fd)
        run_main_loop(
            app,
            terminal,
            stdin_fd,
            renderer,
            RuntimeLoopTiming(),
            channel=collector.channel,
        )
    finally:
        collector.stop()
        index.close()


if __name__ == "__main__":
    main()
