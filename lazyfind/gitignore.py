"""Gitignore-aware pruning for the file collector.

git itself decides what is ignored: one ``git ls-files`` call lists ignored
entries under the search root, and the answer is frozen into a matcher that
walker threads share read-only. Matchers are cached per root for a couple of
seconds, or until the root directory changes.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

GITIGNORE_MATCHER_CACHE_MAX = 16
GITIGNORE_MATCHER_CACHE_TTL_SECONDS = 2.0
ALWAYS_SKIPPED_DIR_NAMES = frozenset({".git"})

_LS_IGNORED = ("ls-files", "-z", "--others", "-i", "--exclude-standard", "--directory")


def is_skipped_name(name: str, show_hidden: bool) -> bool:
    """Return whether a directory entry is dropped by name alone."""
    if name in ALWAYS_SKIPPED_DIR_NAMES:
        return True
    return not show_hidden and name.startswith(".")


@dataclass(frozen=True)
class GitIgnoreMatcher:
    """Snapshot of the ignored files and directories below ``root``.

    All paths are resolved, so membership tests compare like with like.
    """

    root: Path
    ignored_files: frozenset[Path]
    ignored_dirs: frozenset[Path]

    def is_ignored_entry(self, path: Path, is_dir: bool) -> bool:
        """Check a freshly listed entry whose parent directory was not ignored."""
        resolved = path.resolve()
        if resolved in self.ignored_dirs:
            return True
        return not is_dir and resolved in self.ignored_files

    def is_ignored(self, path: Path) -> bool:
        """Check an arbitrary path, including through ignored ancestors."""
        resolved = path.resolve()
        if resolved in self.ignored_files:
            return True
        for candidate in (resolved, *resolved.parents):
            if candidate in self.ignored_dirs:
                return True
            if candidate == self.root:
                break
        return False


def _git_output(args: list[str]) -> bytes | None:
    try:
        proc = subprocess.run(
            ["git", *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.debug("git %s failed: %s", " ".join(args[:3]), exc)
        return None
    return proc.stdout


def _repo_toplevel(root: Path) -> Path | None:
    out = _git_output(["-C", str(root), "rev-parse", "--show-toplevel"])
    if out is None:
        return None
    text = out.decode("utf-8", errors="replace").strip()
    return Path(text).resolve() if text else None


def parse_ignored_listing(
    listing: bytes,
    repo_root: Path,
    root: Path,
) -> tuple[frozenset[Path], frozenset[Path]]:
    """Split NUL-separated ``git ls-files`` output into (files, dirs) under ``root``.

    git marks collapsed directories with a trailing slash.
    """
    files: set[Path] = set()
    dirs: set[Path] = set()
    for raw in listing.split(b"\x00"):
        rel = raw.decode("utf-8", errors="replace")
        if not rel.rstrip("/"):
            continue
        target = (repo_root / rel.rstrip("/")).resolve()
        if target != root and root not in target.parents:
            continue
        if rel.endswith("/") or target.is_dir():
            dirs.add(target)
        else:
            files.add(target)
    return frozenset(files), frozenset(dirs)


def _load_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Ask git for ignored entries below ``root``.

    ``None`` means no filtering: git is missing, ``root`` is outside a work
    tree, or a git command failed.
    """
    if shutil.which("git") is None:
        logger.debug("git not found; gitignore rules disabled")
        return None

    root = root.resolve()
    repo_root = _repo_toplevel(root)
    if repo_root is None or (repo_root != root and repo_root not in root.parents):
        logger.debug("%s is not inside a git work tree", root)
        return None

    listing = _git_output(["-C", str(repo_root), *_LS_IGNORED])
    if listing is None:
        return None

    files, dirs = parse_ignored_listing(listing, repo_root, root)
    logger.debug("gitignore snapshot for %s: %d files, %d dirs", root, len(files), len(dirs))
    return GitIgnoreMatcher(root=root, ignored_files=files, ignored_dirs=dirs)


@dataclass(frozen=True)
class _CachedMatcher:
    matcher: GitIgnoreMatcher | None
    root_mtime_ns: int | None
    loaded_at: float

    def fresh(self, root_mtime_ns: int | None, now: float) -> bool:
        return (
            self.root_mtime_ns == root_mtime_ns
            and now - self.loaded_at <= GITIGNORE_MATCHER_CACHE_TTL_SECONDS
        )


_MATCHER_CACHE: OrderedDict[Path, _CachedMatcher] = OrderedDict()


def clear_gitignore_cache() -> None:
    _MATCHER_CACHE.clear()


def get_gitignore_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Return a matcher for ``root``, reusing a recent one while ``root`` is unchanged."""
    root = root.resolve()
    try:
        root_mtime_ns: int | None = root.stat().st_mtime_ns
    except OSError:
        root_mtime_ns = None
    now = time.monotonic()

    cached = _MATCHER_CACHE.get(root)
    if cached is not None and cached.fresh(root_mtime_ns, now):
        _MATCHER_CACHE.move_to_end(root)
        return cached.matcher

    matcher = _load_matcher(root)
    _MATCHER_CACHE[root] = _CachedMatcher(matcher, root_mtime_ns, now)
    _MATCHER_CACHE.move_to_end(root)
    while len(_MATCHER_CACHE) > GITIGNORE_MATCHER_CACHE_MAX:
        _MATCHER_CACHE.popitem(last=False)
    return matcher
