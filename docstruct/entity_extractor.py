"""
Pattern-based entity extraction over the concatenated document text.
"""

import re
from typing import List, Pattern, Tuple

from .data_models import Entity

# Order matters: entities are reported pattern by pattern, in this order.
ENTITY_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ('date', re.compile(r'\b\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}\b')),
    ('percentage', re.compile(r'\b\d+(?:\.\d+)?%')),
    ('money', re.compile(r'\$\d+(?:,\d{3})*(?:\.\d+)?(?: ?(?:million|billion|thousand))?', re.IGNORECASE)),
    ('email', re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')),
    ('url', re.compile(r'https?://\S+')),
    ('phone', re.compile(r'\b(?:\+\d{1,2}\s?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\b')),
)

ENTITY_TYPES = tuple(entity_type for entity_type, _ in ENTITY_PATTERNS)


def extract_entities(text: str) -> List[Entity]:
    """
    Scan text with every entity pattern.

    Overlapping matches of different types are all kept.

    Args:
        text: Full concatenated document text

    Returns:
        Entities grouped by pattern order, each group in match order
    """
    if not text:
        return []

    return [
        Entity(type=entity_type, value=match.group(0), source_offset=match.start())
        for entity_type, pattern in ENTITY_PATTERNS
        for match in pattern.finditer(text)
    ]
