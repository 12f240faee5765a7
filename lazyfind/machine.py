"""Navigation state machine for browsing, searching, and previewing.

``SearchApp`` holds the operations that mutate ``AppState``; ``dispatch_key``
is the single entry point that maps a key token to a transition for the
current mode. Rendering never goes through here: it only reads a snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from . import keys
from .keys import KeyComboBinding, KeyComboRegistry, is_text_key
from .preview import Previewer, initial_scroll_row, max_scroll_row
from .search import SearchIndex
from .state import AppState, Mode, Scroll

logger = logging.getLogger(__name__)


class SearchApp:
    """Owns the UI-thread state and the collaborators transitions need."""

    def __init__(
        self,
        state: AppState,
        index: SearchIndex,
        previewer: Previewer | None = None,
    ) -> None:
        self.state = state
        self.index = index
        self.previewer = previewer if previewer is not None else Previewer()
        self._registries = {
            Mode.BROWSING: KeyComboRegistry().register_bindings(
                KeyComboBinding(("i", "/", keys.TAB), self.enter_search),
                KeyComboBinding(("q", keys.ESC, keys.CTRL_C), self.quit),
                KeyComboBinding((keys.ENTER,), self.open_preview),
                KeyComboBinding(("k", keys.UP), lambda: self.move_selection(-1)),
                KeyComboBinding(("j", keys.DOWN), lambda: self.move_selection(1)),
            ),
            Mode.SEARCHING: KeyComboRegistry().register_bindings(
                KeyComboBinding((keys.ESC, keys.TAB), self.leave_search),
                KeyComboBinding((keys.CTRL_C,), self.quit),
                KeyComboBinding((keys.ENTER,), self.open_preview),
                KeyComboBinding((keys.UP,), lambda: self.move_selection(-1)),
                KeyComboBinding((keys.DOWN,), lambda: self.move_selection(1)),
                KeyComboBinding((keys.BACKSPACE,), self.delete_char),
                KeyComboBinding((keys.CTRL_U,), self.clear_query),
            ),
            Mode.PREVIEWING: KeyComboRegistry().register_bindings(
                KeyComboBinding(("q", keys.ESC), self.close_preview),
                KeyComboBinding(("k", keys.UP), lambda: self.scroll_preview(-1, 0)),
                KeyComboBinding(("j", keys.DOWN), lambda: self.scroll_preview(1, 0)),
                KeyComboBinding(("h", keys.LEFT), lambda: self.scroll_preview(0, -1)),
                KeyComboBinding(("l", keys.RIGHT), lambda: self.scroll_preview(0, 1)),
            ),
        }

    def registry_for(self, mode: Mode) -> KeyComboRegistry:
        return self._registries[mode]

    def merge_paths(self, paths: Iterable[Path]) -> int:
        """Add discovered paths to the index; never starts a search."""
        added = self.index.add_paths(paths)
        if added:
            self.state.total_files = self.index.file_count
            self.state.dirty = True
        return added

    def run_search(self) -> bool:
        """Search for the current query; returns whether a scan actually ran."""
        state = self.state
        results = self.index.search(state.query)
        skipped = self.index.last_search_skipped
        state.search_pending = skipped
        if skipped:
            return False
        state.results = results
        state.last_search_time = self.index.last_search_time
        state.selected_index = 0
        state.dirty = True
        return True

    def flush_pending_search(self) -> bool:
        """Re-run a debounced search once the interval has elapsed.

        Held back while a preview is open so the results behind it stay put.
        """
        if self.state.mode is Mode.PREVIEWING:
            return False
        if not self.state.search_pending or not self.index.ready():
            return False
        logger.debug("running deferred search for %r", self.state.query)
        return self.run_search()

    def _query_changed(self) -> None:
        self.run_search()
        self.state.selected_index = 0
        self.state.dirty = True

    def insert_char(self, ch: str) -> None:
        self.state.query += ch
        self._query_changed()

    def delete_char(self) -> None:
        self.state.query = self.state.query[:-1]
        self._query_changed()

    def clear_query(self) -> None:
        self.state.query = ""
        self._query_changed()

    def move_selection(self, delta: int) -> None:
        state = self.state
        if not state.results:
            state.selected_index = 0
            return
        target = max(0, min(len(state.results) - 1, state.selected_index + delta))
        if target != state.selected_index:
            state.selected_index = target
            state.dirty = True

    def enter_search(self) -> None:
        self.state.mode = Mode.SEARCHING
        self.state.dirty = True

    def leave_search(self) -> None:
        self.state.mode = Mode.BROWSING
        self.state.dirty = True

    def quit(self) -> None:
        self.state.running = False

    def open_preview(self) -> None:
        state = self.state
        result = state.selected_result
        if result is None:
            return
        lines = self.previewer.load(result.path)
        state.mode = Mode.PREVIEWING
        state.preview_path = result.path
        state.preview_line = result.line
        state.preview_lines = lines
        state.scroll = Scroll(row=initial_scroll_row(result.line, len(lines)), col=1)
        state.status_message = self.previewer.last_error or ""
        state.dirty = True

    def close_preview(self) -> None:
        state = self.state
        state.mode = Mode.SEARCHING
        state.preview_path = None
        state.preview_line = 0
        state.preview_lines = []
        state.scroll = Scroll()
        state.status_message = ""
        state.dirty = True

    def current_row_width(self) -> int:
        state = self.state
        idx = state.scroll.row - 1
        if 0 <= idx < len(state.preview_lines):
            return len(state.preview_lines[idx])
        return 0

    def scroll_preview(self, d_row: int, d_col: int) -> None:
        """Shift the viewport; moves that would leave the content are ignored."""
        scroll = self.state.scroll
        if d_row:
            row = scroll.row + d_row
            if 1 <= row <= max_scroll_row(len(self.state.preview_lines)):
                scroll.row = row
                scroll.col = min(scroll.col, max(1, self.current_row_width() - 1))
                self.state.dirty = True
        if d_col:
            col = scroll.col + d_col
            if 1 <= col <= max(1, self.current_row_width() - 1):
                scroll.col = col
                self.state.dirty = True


def dispatch_key(app: SearchApp, key: str) -> bool:
    """Apply one key to the state machine; returns ``False`` once the run ends."""
    state = app.state
    if not key:
        return state.running
    registry = app.registry_for(state.mode)
    if key in registry:
        registry.dispatch(key)
    elif state.mode is Mode.SEARCHING and is_text_key(key):
        app.insert_char(key)
    return state.running
