"""Tests for gitignore matcher caching and entry checks."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazyfind.gitignore import (
    GITIGNORE_MATCHER_CACHE_MAX,
    GitIgnoreMatcher,
    clear_gitignore_cache,
    get_gitignore_matcher,
    is_skipped_name,
    parse_ignored_listing,
)


class GitignoreMatcherCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        clear_gitignore_cache()

    def tearDown(self) -> None:
        clear_gitignore_cache()

    def test_get_gitignore_matcher_reuses_cached_result_within_ttl(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            sentinel = mock.sentinel.matcher
            with mock.patch("lazyfind.gitignore._load_matcher", return_value=sentinel) as load_matcher:
                first = get_gitignore_matcher(root)
                second = get_gitignore_matcher(root)

            self.assertIs(first, sentinel)
            self.assertIs(second, sentinel)
            self.assertEqual(load_matcher.call_count, 1)

    def test_get_gitignore_matcher_reloads_after_root_mtime_change(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            with mock.patch(
                "lazyfind.gitignore._load_matcher",
                side_effect=[mock.sentinel.first, mock.sentinel.second],
            ) as load_matcher:
                first = get_gitignore_matcher(root)
                (root / "new.txt").write_text("x\n", encoding="utf-8")
                second = get_gitignore_matcher(root)

            self.assertIs(first, mock.sentinel.first)
            self.assertIs(second, mock.sentinel.second)
            self.assertEqual(load_matcher.call_count, 2)

    def test_get_gitignore_matcher_reloads_after_ttl_expiry(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            with mock.patch(
                "lazyfind.gitignore._load_matcher",
                side_effect=[mock.sentinel.first, mock.sentinel.second],
            ) as load_matcher, mock.patch(
                "lazyfind.gitignore.time.monotonic",
                side_effect=[100.0, 103.0],
            ):
                first = get_gitignore_matcher(root)
                second = get_gitignore_matcher(root)

            self.assertIs(first, mock.sentinel.first)
            self.assertIs(second, mock.sentinel.second)
            self.assertEqual(load_matcher.call_count, 2)

    def test_cache_is_bounded(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp).resolve()
            roots = []
            for n in range(GITIGNORE_MATCHER_CACHE_MAX + 1):
                root = base / f"r{n}"
                root.mkdir()
                roots.append(root)
            with mock.patch("lazyfind.gitignore._load_matcher", return_value=None) as load_matcher:
                for root in roots:
                    get_gitignore_matcher(root)
                get_gitignore_matcher(roots[0])

            self.assertEqual(load_matcher.call_count, len(roots) + 1)

    def test_missing_git_disables_matching(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("lazyfind.gitignore.shutil.which", return_value=None):
                self.assertIsNone(get_gitignore_matcher(Path(tmp)))


class GitIgnoreMatcherTests(unittest.TestCase):
    def test_ignored_directory_covers_descendants(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "build" / "deep").mkdir(parents=True)
            matcher = GitIgnoreMatcher(
                root=root,
                ignored_files=frozenset({root / "notes.log"}),
                ignored_dirs=frozenset({root / "build"}),
            )

            self.assertTrue(matcher.is_ignored(root / "build" / "deep" / "x.txt"))
            self.assertTrue(matcher.is_ignored(root / "notes.log"))
            self.assertFalse(matcher.is_ignored(root / "src" / "main.py"))
            self.assertTrue(matcher.is_ignored_entry(root / "build", is_dir=True))
            self.assertFalse(matcher.is_ignored_entry(root / "notes.log", is_dir=True))
            self.assertTrue(matcher.is_ignored_entry(root / "notes.log", is_dir=False))

    def test_listing_is_split_and_limited_to_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            repo = Path(tmp).resolve()
            root = repo / "pkg"
            (root / "cache").mkdir(parents=True)
            listing = b"pkg/cache/\x00pkg/out.log\x00other/x.log\x00\x00"

            files, dirs = parse_ignored_listing(listing, repo, root)

        self.assertEqual(files, frozenset({root / "out.log"}))
        self.assertEqual(dirs, frozenset({root / "cache"}))

    def test_skipped_names(self) -> None:
        self.assertTrue(is_skipped_name(".git", show_hidden=True))
        self.assertTrue(is_skipped_name(".env", show_hidden=False))
        self.assertFalse(is_skipped_name(".env", show_hidden=True))
        self.assertFalse(is_skipped_name("src", show_hidden=False))


if __name__ == "__main__":
    unittest.main()
