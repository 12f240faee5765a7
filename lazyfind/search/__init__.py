"""Search package exports.

Combines the live-rescan engine, fuzzy scoring, and the optional full-text
backend in one import surface. The full-text module is imported lazily so the
core never needs tantivy.
"""

from __future__ import annotations

from .engine import (
    DEFAULT_DEBOUNCE_SECONDS,
    DEFAULT_MAX_FILES_SCANNED,
    DEFAULT_MAX_LINES_PER_FILE,
    SearchIndex,
    SearchLimits,
    SearchResult,
    should_run,
)
from .fuzzy import FuzzyMatch, fuzzy_match, fuzzy_score, highlight_positions


def create_search_index(backend: str, **kwargs) -> SearchIndex:
    """Build the search backend named ``backend`` (``"scan"`` or ``"index"``)."""
    if backend == "scan":
        return SearchIndex(**kwargs)
    if backend == "index":
        from .fulltext import FullTextIndex

        return FullTextIndex(**kwargs)
    raise ValueError(f"unknown search backend: {backend!r}")


__all__ = [
    "DEFAULT_DEBOUNCE_SECONDS",
    "DEFAULT_MAX_FILES_SCANNED",
    "DEFAULT_MAX_LINES_PER_FILE",
    "FuzzyMatch",
    "SearchIndex",
    "SearchLimits",
    "SearchResult",
    "create_search_index",
    "fuzzy_match",
    "fuzzy_score",
    "highlight_positions",
    "should_run",
]
