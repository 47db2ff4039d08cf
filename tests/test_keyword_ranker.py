"""
Tests for frequency-based keyword ranking.
"""

import pytest

from docstruct.keyword_ranker import MAX_KEYWORDS, STOP_WORDS, extract_keywords, normalize_words


def test_normalize_words():
    assert normalize_words("Revenue, GROWTH; (margin)!") == ["revenue", "growth", "margin"]


def test_ranked_by_frequency():
    text = "market growth market revenue market growth"
    assert extract_keywords(text) == ["market", "growth", "revenue"]


def test_ties_keep_first_occurrence_order():
    text = "zebra apple mango apple zebra mango"
    assert extract_keywords(text) == ["zebra", "apple", "mango"]


def test_short_words_and_stop_words_removed():
    text = "The cat sat with about those other tables between tables"
    keywords = extract_keywords(text)

    assert keywords == ["tables", "those"]
    assert all(len(word) > 3 for word in keywords)
    assert not set(keywords) & STOP_WORDS


def test_case_and_punctuation_insensitive():
    assert extract_keywords("Data, data. DATA!") == ["data"]


def test_at_most_twenty_keywords():
    words = [f"word{chr(ord('a') + i)}{chr(ord('a') + j)}" for i in range(6) for j in range(6)]
    keywords = extract_keywords(" ".join(words))

    assert MAX_KEYWORDS == 20
    assert len(keywords) == 20
    assert len(set(keywords)) == 20


def test_custom_limit():
    assert extract_keywords("alpha beta gamma delta", limit=2) == ["alpha", "beta"]


@pytest.mark.parametrize("spacing", ["  ", "\n", "\t \n ", "\n\n"])
def test_whitespace_invariance(spacing):
    words = "quarterly revenue grew while quarterly costs fell".split()
    assert extract_keywords(spacing.join(words)) == extract_keywords(" ".join(words))


def test_empty_text():
    assert extract_keywords("") == []
