"""Background file discovery streaming paths over a bounded channel.

A small pool of walker threads lists directories in parallel and pushes every
regular file it finds into a ``PathChannel``. The UI thread is the single
consumer; nothing else is shared between the two sides.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .gitignore import GitIgnoreMatcher, get_gitignore_matcher, is_skipped_name

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_CAPACITY = 100
DEFAULT_WALKER_THREADS = 2


class ChannelClosed(Exception):
    """Raised by ``PathChannel.send`` once the channel can no longer accept paths."""


class PathChannel:
    """Ordered, capacity-bounded channel from walker threads to the UI thread.

    ``send`` blocks while the buffer is full. Closing from the receiving end
    wakes blocked senders with ``ChannelClosed``; closing from the sending end
    lets the receiver drain what is buffered and then observe exhaustion.
    """

    def __init__(self, capacity: int = DEFAULT_CHANNEL_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("channel capacity must be >= 1")
        self.capacity = capacity
        self._items: deque[Path] = deque()
        self._lock = threading.Lock()
        self._not_full = threading.Condition(self._lock)
        self._not_empty = threading.Condition(self._lock)
        self._closed = False
        self._sender_closed = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def closed(self) -> bool:
        """Whether the receiving end has gone away."""
        return self._closed

    @property
    def sender_closed(self) -> bool:
        return self._sender_closed

    @property
    def exhausted(self) -> bool:
        """True once no path will ever be received again."""
        with self._lock:
            if self._closed:
                return True
            return self._sender_closed and not self._items

    def send(self, path: Path) -> None:
        with self._not_full:
            while not self._closed and len(self._items) >= self.capacity:
                self._not_full.wait()
            if self._closed:
                raise ChannelClosed("receiver closed the path channel")
            if self._sender_closed:
                raise ChannelClosed("sender side of the path channel is closed")
            self._items.append(path)
            self._not_empty.notify()

    def recv(self, timeout: float | None = None) -> Path | None:
        """Receive one path, blocking up to ``timeout`` seconds.

        Returns ``None`` on timeout, or when the sender side is closed and the
        buffer is drained.
        """
        deadline = None if timeout is None else time.monotonic() + max(0.0, timeout)
        with self._not_empty:
            while not self._items:
                if self._closed or self._sender_closed:
                    return None
                if deadline is None:
                    self._not_empty.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
                self._not_empty.wait(remaining)
            item = self._items.popleft()
            self._not_full.notify()
            return item

    def try_recv(self) -> Path | None:
        with self._lock:
            if not self._items:
                return None
            item = self._items.popleft()
            self._not_full.notify()
            return item

    def drain(self, limit: int) -> list[Path]:
        """Pop up to ``limit`` buffered paths without blocking."""
        out: list[Path] = []
        with self._lock:
            while self._items and len(out) < limit:
                out.append(self._items.popleft())
            if out:
                self._not_full.notify_all()
        return out

    def close_sender(self) -> None:
        with self._lock:
            self._sender_closed = True
            self._not_empty.notify_all()

    def close(self) -> None:
        """Close from the receiving end; buffered paths are discarded."""
        with self._lock:
            self._closed = True
            self._items.clear()
            self._not_full.notify_all()
            self._not_empty.notify_all()


class PathCollector:
    """Parallel directory walker that feeds a ``PathChannel``.

    Workers share one list of directories still to be listed. A directory
    counts as outstanding from the moment it is queued until a worker has
    finished listing it; the walk is over when nothing is outstanding.
    """

    def __init__(
        self,
        root: Path,
        channel: PathChannel,
        *,
        workers: int = DEFAULT_WALKER_THREADS,
        show_hidden: bool = False,
        respect_gitignore: bool = True,
    ) -> None:
        self.root = Path(root)
        self.channel = channel
        self.workers = max(1, workers)
        self.show_hidden = show_hidden
        self.respect_gitignore = respect_gitignore
        self._work = threading.Condition()
        self._pending_dirs: deque[Path] = deque()
        self._outstanding = 0
        self._aborted = False
        self._supervisor: threading.Thread | None = None
        self.sent_count = 0
        self._sent_lock = threading.Lock()

    @property
    def done(self) -> bool:
        return self._supervisor is not None and not self._supervisor.is_alive()

    def start(self) -> PathChannel:
        """Launch the walk in background threads and return the channel."""
        if self._supervisor is not None:
            raise RuntimeError("collector already started")
        self._supervisor = threading.Thread(
            target=self._run,
            name="lazyfind-collector",
            daemon=True,
        )
        self._supervisor.start()
        return self.channel

    def stop(self) -> None:
        """Close the channel from the consumer side so walkers wind down."""
        self.channel.close()
        with self._work:
            self._aborted = True
            self._pending_dirs.clear()
            self._work.notify_all()

    def join(self, timeout: float | None = None) -> bool:
        if self._supervisor is None:
            return True
        self._supervisor.join(timeout)
        return not self._supervisor.is_alive()

    def _run(self) -> None:
        started = time.monotonic()
        matcher = get_gitignore_matcher(self.root) if self.respect_gitignore else None
        logger.info("collecting files under %s with %d workers", self.root, self.workers)
        self._push_dir(self.root)
        try:
            with ThreadPoolExecutor(
                max_workers=self.workers,
                thread_name_prefix="lazyfind-walk",
            ) as executor:
                futures = [executor.submit(self._worker, matcher) for _ in range(self.workers)]
                for future in futures:
                    try:
                        future.result()
                    except Exception:
                        logger.exception("walker thread failed under %s", self.root)
        finally:
            self.channel.close_sender()
        logger.info(
            "collector finished: %d files in %.2fs%s",
            self.sent_count,
            time.monotonic() - started,
            " (stopped early)" if self._aborted else "",
        )

    def _push_dir(self, directory: Path) -> None:
        with self._work:
            self._pending_dirs.append(directory)
            self._outstanding += 1
            self._work.notify()

    def _next_dir(self) -> Path | None:
        with self._work:
            while not self._pending_dirs and self._outstanding > 0 and not self._aborted:
                self._work.wait()
            if self._aborted or not self._pending_dirs:
                return None
            return self._pending_dirs.popleft()

    def _finish_dir(self) -> None:
        with self._work:
            self._outstanding -= 1
            if self._outstanding <= 0:
                self._work.notify_all()

    def _abort(self) -> None:
        with self._work:
            self._aborted = True
            self._pending_dirs.clear()
            self._work.notify_all()

    def _worker(self, matcher: GitIgnoreMatcher | None) -> None:
        while True:
            directory = self._next_dir()
            if directory is None:
                return
            try:
                self._scan_dir(directory, matcher)
            except ChannelClosed:
                logger.debug("path channel closed; stopping walk")
                self._abort()
                return
            finally:
                self._finish_dir()

    def _scan_dir(self, directory: Path, matcher: GitIgnoreMatcher | None) -> None:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as exc:
            logger.debug("skipping directory %s: %s", directory, exc)
            return

        entries.sort(key=lambda entry: entry.name.casefold())
        for entry in entries:
            if self.channel.closed:
                raise ChannelClosed("receiver closed the path channel")
            if is_skipped_name(entry.name, self.show_hidden):
                continue
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                # Symlinks to files count; symlinks to directories are not walked.
                is_file = not is_dir and entry.is_file()
            except OSError as exc:
                logger.debug("skipping entry %s: %s", path, exc)
                continue
            if matcher is not None and matcher.is_ignored_entry(path, is_dir):
                continue
            if is_dir:
                self._push_dir(path)
            elif is_file:
                self.channel.send(path)
                with self._sent_lock:
                    self.sent_count += 1


def start_collector(
    root: Path,
    *,
    capacity: int = DEFAULT_CHANNEL_CAPACITY,
    workers: int = DEFAULT_WALKER_THREADS,
    show_hidden: bool = False,
    respect_gitignore: bool = True,
) -> PathCollector:
    """Create a channel and a collector for ``root`` and start walking."""
    collector = PathCollector(
        root,
        PathChannel(capacity),
        workers=workers,
        show_hidden=show_hidden,
        respect_gitignore=respect_gitignore,
    )
    collector.start()
    return collector
