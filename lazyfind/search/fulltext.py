"""Alternate search backend backed by a temporary tantivy full-text index.

Implements the same ``search(query) -> list[SearchResult]`` contract as
``SearchIndex`` but answers queries from an on-disk index instead of
rescanning files. The index holds one document per line for the first
``max_files_scanned`` discovered files and is rebuilt wholesale while that
prefix is still growing.
"""

from __future__ import annotations

import logging
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

from .engine import SearchIndex, SearchLimits, SearchResult, display_name_for, is_probably_binary

logger = logging.getLogger(__name__)

WRITER_HEAP_BYTES = 50_000_000
QUERY_FIELDS = ("file_name", "body")


class FullTextUnavailable(RuntimeError):
    """Raised when the full-text backend is requested without tantivy installed."""


def _load_tantivy():
    try:
        import tantivy
    except ImportError as exc:
        raise FullTextUnavailable(
            "The index backend requires tantivy. Install it with: pip install 'lazyfind[index]'"
        ) from exc
    return tantivy


class FullTextIndex(SearchIndex):
    """Debounced search over a tantivy index built in a temporary directory."""

    def __init__(
        self,
        root: Path | None = None,
        limits: SearchLimits | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(root=root, limits=limits, clock=clock)
        self._tantivy = _load_tantivy()
        self._tempdir: tempfile.TemporaryDirectory[str] | None = None
        self._index = None
        self._indexed_count = -1
        self.last_error: str | None = None

    @property
    def index_path(self) -> Path | None:
        if self._tempdir is None:
            return None
        return Path(self._tempdir.name)

    def close(self) -> None:
        self._index = None
        if self._tempdir is not None:
            self._tempdir.cleanup()
            self._tempdir = None
        self._indexed_count = -1

    def _build_schema(self):
        builder = self._tantivy.SchemaBuilder()
        builder.add_text_field("file_name", stored=True)
        builder.add_text_field("body", stored=True)
        builder.add_text_field("path", stored=True, tokenizer_name="raw")
        builder.add_text_field("line", stored=True, tokenizer_name="raw")
        return builder.build()

    def _indexable_paths(self) -> list[Path]:
        return self._paths[: self.limits.max_files_scanned]

    def needs_rebuild(self) -> bool:
        return self._index is None or self._indexed_count != len(self._indexable_paths())

    def rebuild(self) -> None:
        """Index the first ``max_files_scanned`` known files, one doc per line."""
        self.close()
        self._tempdir = tempfile.TemporaryDirectory(prefix="lazyfind-index-")
        index = self._tantivy.Index(self._build_schema(), path=self._tempdir.name)
        writer = index.writer(WRITER_HEAP_BYTES)
        documents = 0
        paths = self._indexable_paths()
        for path in paths:
            try:
                if is_probably_binary(path):
                    continue
                with path.open("r", encoding="utf-8", errors="replace", newline="") as handle:
                    for line_number, raw in enumerate(handle, start=1):
                        text = raw.rstrip("\r\n")
                        writer.add_document(
                            self._tantivy.Document(
                                file_name=path.name,
                                body=f"{line_number}: {text}",
                                path=str(path),
                                line=str(line_number),
                            )
                        )
                        documents += 1
            except OSError as exc:
                logger.debug("skipping unreadable file %s: %s", path, exc)
                continue
        writer.commit()
        writer.wait_merging_threads()
        index.reload()
        self._index = index
        self._indexed_count = len(paths)
        logger.info(
            "built full-text index with %d lines from %d files at %s",
            documents,
            self._indexed_count,
            self._tempdir.name,
        )

    def _parse_query(self, query: str):
        if not query.strip():
            return self._tantivy.Query.all_query()
        return self._index.parse_query(query, list(QUERY_FIELDS))

    def search_now(self, query: str) -> list[SearchResult]:
        if self.needs_rebuild():
            self.rebuild()

        try:
            parsed = self._parse_query(query)
        except ValueError as exc:
            self.last_error = f"invalid query: {exc}"
            logger.debug("could not parse %r: %s", query, exc)
            return []
        self.last_error = None

        limits = self.limits
        searcher = self._index.searcher()
        hits = searcher.search(parsed, limits.max_results).hits
        per_file: dict[str, int] = {}
        results: list[SearchResult] = []
        for score, address in hits:
            doc = searcher.doc(address)
            path_text = doc.get_first("path")
            line_text = doc.get_first("line")
            body = doc.get_first("body") or ""
            if not path_text or not line_text:
                continue
            if path_text not in per_file and len(per_file) >= limits.max_files_scanned:
                continue
            count = per_file.get(path_text, 0)
            if count >= limits.max_lines_per_file:
                continue
            per_file[path_text] = count + 1
            path = Path(path_text)
            _prefix, _sep, text = body.partition(": ")
            results.append(
                SearchResult(
                    path=path,
                    display_name=display_name_for(path, self.root),
                    line=int(line_text),
                    text=text,
                    score=0 if not query.strip() else max(1, int(score * 100)),
                )
            )
        return results
