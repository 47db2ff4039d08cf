"""
Frequency-based keyword extraction.
"""

import re
from collections import Counter
from typing import List

PUNCTUATION = re.compile(r'[.,/#!$%^&*;:{}=\-_`~()]')

STOP_WORDS = frozenset({
    'a', 'an', 'the', 'and', 'or', 'but', 'is', 'are', 'was', 'were',
    'be', 'been', 'being', 'to', 'of', 'for', 'with', 'by', 'about', 'against', 'between',
    'into', 'through', 'during', 'before', 'after', 'above', 'below', 'from', 'up', 'down',
    'in', 'out', 'on', 'off', 'over', 'under', 'again', 'further', 'then', 'once', 'here',
    'there', 'when', 'where', 'why', 'how', 'all', 'any', 'both', 'each', 'few', 'more',
    'most', 'other', 'some', 'such', 'no', 'nor', 'not', 'only', 'own', 'same', 'so',
    'than', 'too', 'very', 's', 't', 'can', 'will', 'just', 'don', 'should', 'now',
})

MIN_KEYWORD_LENGTH = 4
MAX_KEYWORDS = 20


def normalize_words(text: str) -> List[str]:
    """Lowercase, strip punctuation and split on whitespace."""
    return PUNCTUATION.sub('', text.lower()).split()


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> List[str]:
    """
    Rank the most frequent content words of a text.

    Args:
        text: Full document text
        limit: Maximum number of keywords

    Returns:
        Keywords by descending frequency, ties in order of first occurrence
    """
    counts = Counter(
        word for word in normalize_words(text)
        if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS
    )
    # Counter keeps first-occurrence order and sorted() is stable.
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [word for word, _ in ranked[:limit]]
