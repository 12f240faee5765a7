from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .search import SearchResult


class Mode(Enum):
    BROWSING = "browsing"
    SEARCHING = "searching"
    PREVIEWING = "previewing"


@dataclass
class Scroll:
    row: int = 1
    col: int = 1


@dataclass
class AppState:
    mode: Mode = Mode.SEARCHING
    query: str = ""
    results: list[SearchResult] = field(default_factory=list)
    selected_index: int = 0
    preview_path: Path | None = None
    preview_line: int = 0
    preview_lines: list[str] = field(default_factory=list)
    scroll: Scroll = field(default_factory=Scroll)
    last_search_time: float | None = None
    search_pending: bool = False
    total_files: int = 0
    traversal_complete: bool = False
    status_message: str = ""
    running: bool = True
    dirty: bool = True

    @property
    def selected_result(self) -> SearchResult | None:
        if not self.results:
            return None
        idx = max(0, min(self.selected_index, len(self.results) - 1))
        return self.results[idx]
