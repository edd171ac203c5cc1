"""Unit tests for core/utils/similarity.py"""

import pytest

from mdcite.core.utils.similarity import levenshtein, rank_similar, similarity


@pytest.mark.parametrize("a,b,expected", [
    ("", "", 0),
    ("abc", "", 3),
    ("kitten", "sitting", 3),
    ("flaw", "lawn", 2),
    ("same", "same", 0),
])
def test_levenshtein(a, b, expected):
    """levenshtein counts single-character edits in either argument order."""
    assert levenshtein(a, b) == expected
    assert levenshtein(b, a) == expected


def test_similarity_bounds():
    """Identical strings score 1.0; an empty side scores 0.0."""
    assert similarity("Intro", "Intro") == 1.0
    assert similarity("", "Intro") == 0.0


def test_similarity_case_insensitive():
    """Case differences do not lower the score."""
    assert similarity("Introduction", "introduction") == 1.0


def test_rank_similar_orders_and_limits():
    """Results are sorted by descending score, filtered by threshold, and capped."""
    candidates = ["alpha", "alphb", "alpxx", "zzzzz", "alphabet"]
    ranked = rank_similar("alpha", candidates, threshold=0.3, limit=3)
    assert [c for c, _ in ranked] == ["alpha", "alphb", "alphabet"]
    scores = [s for _, s in ranked]
    assert scores == sorted(scores, reverse=True)


def test_rank_similar_ties_keep_input_order():
    """Equal scores keep the candidates' original order."""
    ranked = rank_similar("Intro-z", ["Intro-y", "Intro-x", "Outro-z"], 0.3, 5)
    assert [c for c, _ in ranked] == ["Intro-y", "Intro-x", "Outro-z"]
    assert ranked[0][1] == ranked[1][1]
