"""Tests for Levenshtein-based string similarity."""

import pytest

from supersuper.services.similarity import (
    calculate_similarity,
    find_best_match,
    is_similar,
    levenshtein_distance,
)


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        ("", "", 0),
        ("", "milk", 4),
        ("milk", "", 4),
        ("milk", "milk", 0),
        ("mlik", "milk", 2),
        ("kitten", "sitting", 3),
        ("flaw", "lawn", 2),
    ],
)
def test_levenshtein_distance(a, b, expected):
    """Test classic edit distance values."""
    assert levenshtein_distance(a, b) == expected


def test_similarity_identity():
    """Test that a string is fully similar to itself."""
    for word in ["milk", "Almond", "a", "oat milk 2%"]:
        assert calculate_similarity(word, word) == 1.0


def test_similarity_of_empty_strings():
    """Test that two empty strings are identical."""
    assert calculate_similarity("", "") == 1.0


def test_similarity_is_case_insensitive():
    """Test that case does not affect similarity."""
    assert calculate_similarity("MILK", "milk") == 1.0


def test_similarity_symmetry():
    """Test that similarity does not depend on argument order."""
    pairs = [("mlik", "milk"), ("bread", "breadcrumbs"), ("apple", "pie"), ("", "oat")]
    for a, b in pairs:
        assert calculate_similarity(a, b) == calculate_similarity(b, a)


def test_similarity_value():
    """Test normalization by the longest string."""
    assert calculate_similarity("mlik", "milk") == pytest.approx(0.5)
    assert calculate_similarity("apple", "pie") == pytest.approx(0.4)
    assert calculate_similarity("abc", "xyz") == 0.0


def test_is_similar_substring_fast_path():
    """Test that containment in either direction scores 1.0 regardless of threshold."""
    assert is_similar("mil", "milk", threshold=1.0) == 1.0
    assert is_similar("almond milk", "milk", threshold=1.0) == 1.0
    assert is_similar("MIL", "milk", threshold=0.99) == 1.0


def test_is_similar_threshold():
    """Test that scores below the threshold mean no match."""
    assert is_similar("mlik", "milk", threshold=0.3) == pytest.approx(0.5)
    assert is_similar("mlik", "milk", threshold=0.6) is None


def test_is_similar_zero_score_is_distinct_from_no_match():
    """Test that a zero similarity is returned when the threshold allows it."""
    assert is_similar("abc", "xyz", threshold=0.0) == 0.0
    assert is_similar("abc", "xyz", threshold=0.1) is None


def test_find_best_match():
    """Test picking the highest scoring candidate."""
    word, score = find_best_match("chese", ["bread", "cheese", "chess"], threshold=0.6)
    assert word == "cheese"
    assert score == pytest.approx(5 / 6)

    word, score = find_best_match("brad", ["beard", "bread"], threshold=0.6)
    assert word == "bread"
    assert score == pytest.approx(0.8)


def test_find_best_match_none():
    """Test no match when nothing reaches the threshold."""
    assert find_best_match("xylophone", ["milk", "eggs"], threshold=0.6) is None
    assert find_best_match("milk", [], threshold=0.6) is None
