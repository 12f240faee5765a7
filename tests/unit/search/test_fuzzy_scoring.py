"""Tests for fuzzy subsequence matching and highlight positions."""

from __future__ import annotations

import unittest

from lazyfind.search.fuzzy import fuzzy_match, fuzzy_score, highlight_positions, literal_positions


class FuzzyMatchTests(unittest.TestCase):
    def test_subsequence_match_reports_positions_and_positive_score(self) -> None:
        match = fuzzy_match("fo", "foo bar")

        self.assertIsNotNone(match)
        assert match is not None
        self.assertEqual(match.positions, (0, 1))
        self.assertGreater(match.score, 0)

    def test_missing_character_does_not_match(self) -> None:
        self.assertIsNone(fuzzy_match("fo", "baz"))
        self.assertIsNone(fuzzy_match("ab", "ba"))

    def test_query_longer_than_text_does_not_match(self) -> None:
        self.assertIsNone(fuzzy_match("abcdef", "abc"))

    def test_matching_ignores_case(self) -> None:
        match = fuzzy_match("FOO", "say foo")

        self.assertIsNotNone(match)
        assert match is not None
        self.assertEqual(match.positions, (4, 5, 6))

    def test_empty_query_matches_with_zero_score(self) -> None:
        match = fuzzy_match("", "anything")

        self.assertIsNotNone(match)
        assert match is not None
        self.assertEqual(match.score, 0)
        self.assertEqual(match.positions, ())
        self.assertEqual(fuzzy_score("", ""), 0)

    def test_contiguous_match_outscores_scattered_match(self) -> None:
        tight = fuzzy_score("abc", "xabcx")
        loose = fuzzy_score("abc", "xaxbxcx")

        assert tight is not None and loose is not None
        self.assertGreater(tight, loose)

    def test_word_boundary_match_outscores_mid_word_match(self) -> None:
        boundary = fuzzy_score("b", "a_b")
        inner = fuzzy_score("b", "aab")

        assert boundary is not None and inner is not None
        self.assertGreater(boundary, inner)

    def test_match_prefers_tightest_span(self) -> None:
        match = fuzzy_match("ab", "a xx ab")

        assert match is not None
        self.assertEqual(match.positions, (5, 6))

    def test_heavily_penalised_match_still_scores_at_least_one(self) -> None:
        text = "xa" + "y" * 50 + "b" + "y" * 50 + "c" + "y" * 300

        self.assertEqual(fuzzy_score("abc", text), 1)

    def test_characters_that_fold_to_several_keep_their_position(self) -> None:
        match = fuzzy_match("ß", "Straße")

        assert match is not None
        self.assertEqual(match.positions, (4,))


class HighlightPositionTests(unittest.TestCase):
    def test_literal_occurrences_are_all_marked(self) -> None:
        self.assertEqual(highlight_positions("ba", "foo bar baz"), (4, 5, 8, 9))

    def test_literal_positions_ignore_case(self) -> None:
        self.assertEqual(literal_positions("BAR", "foo bar"), (4, 5, 6))

    def test_falls_back_to_fuzzy_positions_without_literal_hit(self) -> None:
        self.assertEqual(highlight_positions("fbr", "foo bar"), (0, 4, 6))

    def test_non_matching_query_highlights_nothing(self) -> None:
        self.assertEqual(highlight_positions("zz", "foo bar"), ())
        self.assertEqual(highlight_positions("", "foo bar"), ())


if __name__ == "__main__":
    unittest.main()
