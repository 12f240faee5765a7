from __future__ import annotations

from dataclasses import dataclass

WORD_BOUNDARY_CHARS = frozenset(" \t/_-.:,;()[]{}<>\"'=")


@dataclass(frozen=True)
class FuzzyMatch:
    score: int
    positions: tuple[int, ...]


def _fold(text: str) -> list[str] | str:
    folded = text.casefold()
    if len(folded) == len(text):
        return folded
    # Some characters fold to several ("ß" -> "ss"); keep one slot per char.
    return [ch.casefold() for ch in text]


def _find(folded: list[str] | str, needle: str, start: int) -> int:
    if isinstance(folded, str):
        return folded.find(needle, start)
    for idx in range(start, len(folded)):
        if folded[idx] == needle:
            return idx
    return -1


def _rfind(folded: list[str] | str, needle: str, end: int) -> int:
    """Last index of ``needle`` at or before ``end``."""
    if isinstance(folded, str):
        return folded.rfind(needle, 0, end + 1)
    for idx in range(end, -1, -1):
        if folded[idx] == needle:
            return idx
    return -1


def _match_positions(needles: list[str], folded: list[str] | str) -> tuple[int, ...] | None:
    # Forward pass finds the earliest end, backward pass from there the latest
    # start, so the chosen span is as tight as a two-pass scan allows.
    idx = -1
    for needle in needles:
        idx = _find(folded, needle, idx + 1)
        if idx < 0:
            return None
    end = idx
    for needle in reversed(needles):
        idx = _rfind(folded, needle, idx)
        idx -= 1
    start = idx + 1

    positions: list[int] = []
    idx = start - 1
    for needle in needles:
        idx = _find(folded, needle, idx + 1)
        positions.append(idx)
    if positions[-1] > end:
        return None
    return tuple(positions)


def _score_positions(positions: tuple[int, ...], folded: list[str] | str, length: int) -> int:
    score = 0
    prev_idx = -1
    run = 0
    for idx in positions:
        score += 16
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or folded[idx - 1] in WORD_BOUNDARY_CHARS:
            score += 35
        prev_idx = idx

    score -= length // 20
    return max(1, score)


def fuzzy_match(query: str, text: str) -> FuzzyMatch | None:
    """Match ``query`` as a case-insensitive subsequence of ``text``.

    Returns ``None`` when some query character cannot be placed in order.
    Any successful match of a non-empty query scores at least 1; tighter,
    more contiguous matches and matches on word boundaries score higher. An
    empty query matches everything with score 0.
    """
    if not query:
        return FuzzyMatch(score=0, positions=())
    if len(query) > len(text):
        return None

    needles = [ch.casefold() for ch in query]
    folded = _fold(text)
    positions = _match_positions(needles, folded)
    if positions is None:
        return None
    return FuzzyMatch(score=_score_positions(positions, folded, len(text)), positions=positions)


def fuzzy_score(query: str, text: str) -> int | None:
    match = fuzzy_match(query, text)
    if match is None:
        return None
    return match.score


def literal_positions(query: str, text: str) -> tuple[int, ...]:
    """Character positions covered by case-insensitive occurrences of ``query``."""
    if not query:
        return ()
    folded_query = query.casefold()
    folded_text = text.casefold()
    if len(folded_query) != len(query) or len(folded_text) != len(text):
        folded_query = query.lower()
        folded_text = text.lower()
        if len(folded_text) != len(text):
            return ()

    out: list[int] = []
    cursor = 0
    while True:
        idx = folded_text.find(folded_query, cursor)
        if idx < 0:
            break
        out.extend(range(idx, idx + len(query)))
        cursor = idx + len(query)
    return tuple(out)


def highlight_positions(query: str, text: str) -> tuple[int, ...]:
    """Positions to emphasise when displaying a result line.

    Literal occurrences win; a pure subsequence match falls back to the fuzzy
    positions so something is always highlighted for a matching line.
    """
    positions = literal_positions(query, text)
    if positions:
        return positions
    match = fuzzy_match(query, text)
    if match is None:
        return ()
    return match.positions
