"""Main interactive event loop for the terminal UI.

Each tick merges newly discovered paths, flushes a debounced search, renders
when state is dirty, and dispatches at most one key. All state mutation stays
on this thread; the collector only talks to it through the path channel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from .collector import PathChannel
from .input import read_key
from .machine import SearchApp, dispatch_key
from .render import Renderer, RenderSnapshot

logger = logging.getLogger(__name__)


class _RawModeTerminal(Protocol):
    def raw_mode(self): ...


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    poll_timeout_ms: int = 20
    merge_batch: int = 512


def merge_discovered_paths(app: SearchApp, channel: PathChannel, limit: int) -> int:
    """Move up to ``limit`` ready paths from the channel into the index.

    The collector only emits regular files, so paths are merged unchecked.
    Marks traversal complete once the channel can never yield another path. Returns the number of new files added.
    """
    state = app.state
    batch = channel.drain(limit)
    added = app.merge_paths(batch) if batch else 0
    if not state.traversal_complete and channel.exhausted:
        state.traversal_complete = True
        state.dirty = True
        logger.info("traversal complete: %d files", state.total_files)
    return added


def run_main_loop(
    app: SearchApp,
    terminal: _RawModeTerminal,
    stdin_fd: int,
    renderer: Renderer,
    timing: RuntimeLoopTiming | None = None,
    channel: PathChannel | None = None,
) -> None:
    timing = timing if timing is not None else RuntimeLoopTiming()
    state = app.state

    try:
        with terminal.raw_mode():
            while state.running:
                if channel is not None:
                    merge_discovered_paths(app, channel, timing.merge_batch)
                app.flush_pending_search()

                if state.dirty:
                    renderer.render(RenderSnapshot.from_state(state))
                    state.dirty = False

                try:
                    key = read_key(stdin_fd, timeout_ms=timing.poll_timeout_ms)
                except KeyboardInterrupt:
                    # Raw mode delivers Ctrl+C as a byte; a stray signal is not a quit.
                    continue
                if not dispatch_key(app, key):
                    break
    finally:
        if channel is not None:
            channel.close()
