"""Live-rescan content search over the discovered file set.

``SearchIndex`` keeps no inverted index: every effective search reopens the
files and fuzzy-matches their lines. File and per-file line caps bound the
cost of one scan, and the debounce gate bounds how often a scan may start.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from .fuzzy import fuzzy_match

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILES_SCANNED = 120
DEFAULT_MAX_LINES_PER_FILE = 20
DEFAULT_DEBOUNCE_SECONDS = 0.5
BINARY_PROBE_BYTES = 4096


@dataclass(frozen=True)
class SearchLimits:
    max_files_scanned: int = DEFAULT_MAX_FILES_SCANNED
    max_lines_per_file: int = DEFAULT_MAX_LINES_PER_FILE
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS

    @property
    def max_results(self) -> int:
        return self.max_files_scanned * self.max_lines_per_file


@dataclass(frozen=True)
class SearchResult:
    path: Path
    display_name: str
    line: int  # 1-based
    text: str
    score: int

    def label(self) -> str:
        return f"{self.display_name}:{self.line}: {self.text}"


def should_run(now: float, last: float | None, interval: float) -> bool:
    """Debounce decision: a search may start once ``interval`` has elapsed."""
    if last is None:
        return True
    return now - last >= interval


def display_name_for(path: Path, root: Path | None) -> str:
    """Root-relative POSIX label, or the plain path when outside ``root``."""
    if root is None:
        return path.as_posix()
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def is_probably_binary(path: Path) -> bool:
    """Return whether the first bytes of ``path`` contain a NUL byte."""
    with path.open("rb") as handle:
        return b"\x00" in handle.read(BINARY_PROBE_BYTES)


def scan_file(
    path: Path,
    query: str,
    max_matches: int,
    display_name: str,
) -> list[SearchResult]:
    """Fuzzy-match the lines of one file, stopping after ``max_matches`` hits.

    Raises ``OSError`` when the file cannot be opened or read; callers decide
    whether that skips the file.
    """
    if max_matches <= 0:
        return []
    if is_probably_binary(path):
        return []

    out: list[SearchResult] = []
    with path.open("r", encoding="utf-8", errors="replace", newline="") as handle:
        for line_number, raw in enumerate(handle, start=1):
            text = raw.rstrip("\r\n")
            match = fuzzy_match(query, text)
            if match is None:
                continue
            out.append(
                SearchResult(
                    path=path,
                    display_name=display_name,
                    line=line_number,
                    text=text,
                    score=match.score,
                )
            )
            if len(out) >= max_matches:
                break
    return out


class SearchIndex:
    """Owns the discovered path set and runs debounced content searches.

    Paths keep discovery order, which is also the scan order. ``clock`` is
    injectable so the debounce gate can be driven deterministically.
    """

    def __init__(
        self,
        root: Path | None = None,
        limits: SearchLimits | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.root = root
        self.limits = limits if limits is not None else SearchLimits()
        self.clock = clock
        self._paths: list[Path] = []
        self._known: set[Path] = set()
        self.results: list[SearchResult] = []
        self.last_search_time: float | None = None
        self.last_search_skipped = False
        self.last_query: str | None = None

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    @property
    def file_count(self) -> int:
        return len(self._paths)

    def add_paths(self, paths: Iterable[Path]) -> int:
        """Merge newly discovered paths; returns how many were new."""
        added = 0
        for path in paths:
            if path in self._known:
                continue
            self._known.add(path)
            self._paths.append(path)
            added += 1
        return added

    def ready(self, now: float | None = None) -> bool:
        """Whether a search started now would pass the debounce gate."""
        current = self.clock() if now is None else now
        return should_run(current, self.last_search_time, self.limits.debounce_seconds)

    def search(self, query: str) -> list[SearchResult]:
        """Rescan files for ``query`` unless the debounce gate is closed.

        A gated call returns the previous results untouched and sets
        ``last_search_skipped``.
        """
        now = self.clock()
        if not should_run(now, self.last_search_time, self.limits.debounce_seconds):
            self.last_search_skipped = True
            return self.results
        self.last_search_skipped = False
        self.results = self.search_now(query)
        self.last_query = query
        self.last_search_time = self.clock()
        return self.results

    def search_now(self, query: str) -> list[SearchResult]:
        """Run one full scan for ``query`` without touching the debounce state."""
        limits = self.limits
        results: list[SearchResult] = []
        files_scanned = 0
        for path in self._paths:
            if files_scanned >= limits.max_files_scanned or len(results) >= limits.max_results:
                break
            files_scanned += 1
            budget = min(limits.max_lines_per_file, limits.max_results - len(results))
            try:
                results.extend(
                    scan_file(path, query, budget, display_name_for(path, self.root))
                )
            except OSError as exc:
                logger.debug("skipping unreadable file %s: %s", path, exc)
                continue
        logger.debug(
            "search %r: %d results from %d files", query, len(results), files_scanned
        )
        return results

    def close(self) -> None:
        """Release backend resources. The rescan backend holds none."""
