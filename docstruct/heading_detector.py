"""
Heading detection and section folding.

Two interchangeable strategies turn a page into an ordered list of layout units
(heading or body text). The geometric strategy works per token with precise font
sizes; the coarse strategy works per line when only glyph heights, or no size at
all, are available. ``HeadingDetector`` picks a strategy per page and folds the
units of all pages, in page order, into headings and sections.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .data_models import Heading, PageInput, PositionedToken, Section
from .logging_config import setup_logging

logger = setup_logging()


@dataclass(frozen=True)
class LayoutUnit:
    """A piece of page text classified as heading (with level) or body (level None)."""
    text: str
    page: int
    level: Optional[int] = None
    position: Optional[Tuple[float, float]] = None

    @property
    def is_heading(self) -> bool:
        return self.level is not None


class HeadingStrategy(ABC):
    """Common interface of the heading strategies."""

    name = "base"

    def __init__(self, min_size: float, level_one_size: float, level_two_size: float):
        self.size_thresholds = {
            'heading': min_size,
            'level_1': level_one_size,
            'level_2': level_two_size,
        }

    def level_for(self, size: Optional[float]) -> Optional[int]:
        """
        Map a font size to a heading level.

        Returns:
            1, 2 or 3 for heading sizes, None for body text or unknown size
        """
        if size is None or size <= self.size_thresholds['heading']:
            return None
        if size > self.size_thresholds['level_1']:
            return 1
        if size > self.size_thresholds['level_2']:
            return 2
        return 3

    @abstractmethod
    def classify(self, page: PageInput) -> List[LayoutUnit]:
        """Split a page into heading and body units in reading order."""


class GeometricHeadingStrategy(HeadingStrategy):
    """
    Per-token classification for pages with precise font sizes.

    Tokens larger than 14 are headings: level 1 above 18, level 2 above 16,
    level 3 otherwise.
    """

    name = "geometric"

    def __init__(self, min_size: float = 14.0, level_one_size: float = 18.0,
                 level_two_size: float = 16.0):
        super().__init__(min_size, level_one_size, level_two_size)

    def classify(self, page: PageInput) -> List[LayoutUnit]:
        units = []
        for token in page.positioned_tokens:
            if token.is_empty():
                continue
            text = token.text.strip()
            size = token.font_size if token.font_size is not None else token.height
            units.append(LayoutUnit(
                text=text,
                page=page.page_num,
                level=self.level_for(size),
                position=(token.x, token.y),
            ))
        return units


class CoarseHeadingStrategy(HeadingStrategy):
    """
    Per-line classification for pages with low-fidelity or missing size metadata.

    A line is a heading when it is 2 to 100 characters long, starts with an
    uppercase letter or a digit and its size exceeds 12. Levels use the 16/14
    thresholds.
    """

    name = "coarse"

    def __init__(self, min_size: float = 12.0, level_one_size: float = 16.0,
                 level_two_size: float = 14.0, min_length: int = 2, max_length: int = 100):
        super().__init__(min_size, level_one_size, level_two_size)
        self.length_range = (min_length, max_length)

    def _lines(self, page: PageInput) -> List[Tuple[str, Optional[float], Optional[Tuple[float, float]]]]:
        if page.is_text_only:
            return [
                (" ".join(line.split()), None, None)
                for line in (page.text or "").split("\n")
                if line.strip()
            ]

        grouped: Dict[int, List[PositionedToken]] = {}
        for token in page.positioned_tokens:
            if token.is_empty():
                continue
            grouped.setdefault(round(token.y), []).append(token)

        lines = []
        for y in sorted(grouped):
            tokens = sorted(grouped[y], key=lambda t: t.x)
            text = " ".join(" ".join(t.text.split()) for t in tokens)
            first = tokens[0]
            size = first.font_size if first.font_size is not None else first.height
            lines.append((text, size, (first.x, first.y)))
        return lines

    def is_heading_text(self, text: str) -> bool:
        min_length, max_length = self.length_range
        if not min_length <= len(text) <= max_length:
            return False
        return text[0].isupper() or text[0].isdigit()

    def classify(self, page: PageInput) -> List[LayoutUnit]:
        units = []
        for text, size, position in self._lines(page):
            level = self.level_for(size) if self.is_heading_text(text) else None
            units.append(LayoutUnit(text=text, page=page.page_num, level=level, position=position))
        return units


class HeadingDetector:
    """
    Detects headings page by page and folds body text into sections.
    """

    def __init__(self, geometric: Optional[HeadingStrategy] = None,
                 coarse: Optional[HeadingStrategy] = None):
        self.geometric = geometric or GeometricHeadingStrategy()
        self.coarse = coarse or CoarseHeadingStrategy()

    def select_strategy(self, page: PageInput) -> HeadingStrategy:
        """
        Pick the strategy matching the metadata the decoder populated.

        Geometric when every positioned token carries a font size, coarse otherwise
        (including plain-text pages).
        """
        tokens = page.positioned_tokens
        if tokens and all(t.font_size is not None for t in tokens):
            return self.geometric
        return self.coarse

    def detect(self, pages: Sequence[PageInput]) -> Tuple[List[Heading], List[Section]]:
        """
        Detect headings and sections over a whole document.

        Args:
            pages: Pages in page-number order

        Returns:
            Tuple of (headings, sections)
        """
        headings: List[Heading] = []
        titles: List[Tuple[str, int]] = []
        contents: List[List[str]] = []
        index: Dict[Tuple[int, str], int] = {}
        current: Optional[int] = None

        for page in pages:
            strategy = self.select_strategy(page)
            units = strategy.classify(page)
            logger.debug(f"Page {page.page_num}: {strategy.name} strategy produced {len(units)} units")

            for unit in units:
                if unit.is_heading:
                    headings.append(Heading(
                        text=unit.text,
                        level=unit.level,
                        page=unit.page,
                        position=unit.position,
                    ))
                    # A repeated title on the same page opens nothing; body text
                    # keeps flowing into the most recently opened section.
                    key = (unit.page, unit.text)
                    if key not in index:
                        index[key] = len(titles)
                        titles.append((unit.text, unit.page))
                        contents.append([])
                        current = index[key]
                elif current is not None:
                    contents[current].append(unit.text)

        sections = [
            Section(title=title, page=page_num, content=" ".join(parts))
            for (title, page_num), parts in zip(titles, contents)
        ]

        logger.debug(f"Detected {len(headings)} headings and {len(sections)} sections")
        return headings, sections
