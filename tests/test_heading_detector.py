"""
Tests for heading detection and section folding.

Tests cover both strategies, per-page strategy selection and how body text is
attached to sections across pages.
"""

import pytest

from docstruct.data_models import PageInput, PositionedToken, TextOnlyToken
from docstruct.heading_detector import (
    CoarseHeadingStrategy,
    GeometricHeadingStrategy,
    HeadingDetector,
    HeadingStrategy,
    LayoutUnit,
)


def sized(text, y, font_size, x=72.0, page=1):
    """Token with a precise font size."""
    return PositionedToken(text=text, page=page, x=x, y=y, width=10.0 * len(text),
                           height=font_size, font_size=font_size)


def coarse(text, y, height, x=72.0, page=1):
    """Token with only a glyph height."""
    return PositionedToken(text=text, page=page, x=x, y=y, width=10.0 * len(text), height=height)


class TestGeometricStrategy:
    """Test cases for GeometricHeadingStrategy."""

    def setup_method(self):
        self.strategy = GeometricHeadingStrategy()

    @pytest.mark.parametrize("size,level", [
        (20.0, 1), (18.5, 1), (18.0, 2), (17.0, 2), (16.0, 3), (15.0, 3), (14.0, None), (10.0, None),
    ])
    def test_levels(self, size, level):
        assert self.strategy.level_for(size) == level

    def test_classify_per_token(self):
        page = PageInput(page_num=1, tokens=(sized("Title", 50, 20), sized("body text", 80, 11)))
        units = self.strategy.classify(page)

        assert units == [
            LayoutUnit(text="Title", page=1, level=1, position=(72.0, 50)),
            LayoutUnit(text="body text", page=1, level=None, position=(72.0, 80)),
        ]

    def test_blank_tokens_skipped(self):
        page = PageInput(page_num=1, tokens=(sized("  ", 50, 20), sized("Real", 60, 20)))
        assert [u.text for u in self.strategy.classify(page)] == ["Real"]


class TestCoarseStrategy:
    """Test cases for CoarseHeadingStrategy."""

    def setup_method(self):
        self.strategy = CoarseHeadingStrategy()

    @pytest.mark.parametrize("size,level", [(17.0, 1), (16.0, 2), (15.0, 2), (13.0, 3), (12.0, None)])
    def test_levels(self, size, level):
        assert self.strategy.level_for(size) == level

    def test_uppercase_line_is_heading(self):
        page = PageInput(page_num=1, tokens=(coarse("REVENUE", 100, 17),))
        units = self.strategy.classify(page)
        assert units[0].level == 1
        assert units[0].text == "REVENUE"

    @pytest.mark.parametrize("text,expected", [
        ("Overview", True),
        ("2024 Results", True),
        ("lowercase start", False),
        ("X", False),
        ("A" * 101, False),
        ("A" * 100, True),
    ])
    def test_heading_text_rules(self, text, expected):
        assert self.strategy.is_heading_text(text) is expected

    def test_tokens_joined_into_lines(self):
        page = PageInput(page_num=1, tokens=(
            coarse("Results", 100.3, 15, x=150),
            coarse("Quarterly", 99.8, 15, x=50),
            coarse("some body text", 130, 10),
        ))
        units = self.strategy.classify(page)

        assert [u.text for u in units] == ["Quarterly Results", "some body text"]
        assert units[0].level == 2
        assert units[0].position == (50, 99.8)
        assert units[1].level is None

    def test_joining_space_counts_toward_length(self):
        page = PageInput(page_num=1, tokens=(
            coarse("A" * 50, 100, 17, x=10),
            coarse("B" * 50, 100, 17, x=600),
        ))
        units = self.strategy.classify(page)

        assert units[0].text == "A" * 50 + " " + "B" * 50
        assert units[0].level is None

    def test_plain_text_lines_are_body(self):
        page = PageInput(page_num=1, text="INTRODUCTION\n\nPlain   body  line\n")
        units = self.strategy.classify(page)

        assert [u.text for u in units] == ["INTRODUCTION", "Plain body line"]
        assert all(not u.is_heading for u in units)


class TestHeadingDetector:
    """Test cases for HeadingDetector."""

    def setup_method(self):
        self.detector = HeadingDetector()

    def test_strategies_share_interface(self):
        assert isinstance(self.detector.geometric, HeadingStrategy)
        assert isinstance(self.detector.coarse, HeadingStrategy)

    def test_select_geometric_when_all_sizes_present(self):
        page = PageInput(page_num=1, tokens=(sized("a", 10, 12), sized("b", 20, 12)))
        assert self.detector.select_strategy(page) is self.detector.geometric

    def test_select_coarse_when_any_size_missing(self):
        page = PageInput(page_num=1, tokens=(sized("a", 10, 12), coarse("b", 20, 12)))
        assert self.detector.select_strategy(page) is self.detector.coarse

    def test_select_coarse_for_text_pages(self):
        page = PageInput(page_num=1, tokens=(TextOnlyToken(text="x", page=1),), text="x")
        assert self.detector.select_strategy(page) is self.detector.coarse

    def test_large_font_is_level_one_heading(self):
        page = PageInput(page_num=1, tokens=(sized("Annual Report", 50, 20),))
        headings, sections = self.detector.detect([page])

        assert len(headings) == 1
        assert headings[0].text == "Annual Report"
        assert headings[0].level == 1
        assert headings[0].page == 1
        assert headings[0].position == (72.0, 50)
        assert sections[0].title == "Annual Report"
        assert sections[0].content == ""

    def test_body_text_attached_to_current_section(self):
        page = PageInput(page_num=1, tokens=(
            sized("Preamble", 10, 11),
            sized("Intro", 50, 20),
            sized("first", 70, 11),
            sized("second", 90, 11),
            sized("Method", 110, 17),
            sized("third", 130, 11),
        ))
        headings, sections = self.detector.detect([page])

        assert [(h.text, h.level) for h in headings] == [("Intro", 1), ("Method", 2)]
        assert [(s.title, s.content) for s in sections] == [("Intro", "first second"), ("Method", "third")]

    def test_body_continues_across_pages(self):
        pages = [
            PageInput(page_num=1, tokens=(sized("Intro", 50, 20, page=1), sized("one", 70, 11, page=1))),
            PageInput(page_num=2, tokens=(sized("two", 30, 11, page=2),)),
        ]
        _, sections = self.detector.detect(pages)

        assert len(sections) == 1
        assert sections[0].content == "one two"
        assert sections[0].page == 1

    def test_repeated_heading_on_same_page_keeps_latest_section(self):
        page = PageInput(page_num=1, tokens=(
            sized("Notes", 10, 15),
            sized("alpha", 20, 11),
            sized("Other", 30, 15),
            sized("beta", 40, 11),
            sized("Notes", 50, 15),
            sized("gamma", 60, 11),
        ))
        headings, sections = self.detector.detect([page])

        assert len(headings) == 3
        assert [(s.title, s.content) for s in sections] == [("Notes", "alpha"), ("Other", "beta gamma")]

    def test_repeated_first_heading_before_any_other(self):
        page = PageInput(page_num=1, tokens=(
            sized("Notes", 10, 15),
            sized("alpha", 20, 11),
            sized("Notes", 30, 15),
            sized("beta", 40, 11),
        ))
        _, sections = self.detector.detect([page])
        assert [(s.title, s.content) for s in sections] == [("Notes", "alpha beta")]

    def test_same_title_on_another_page_is_new_section(self):
        pages = [
            PageInput(page_num=1, tokens=(sized("Notes", 10, 15, page=1), sized("a", 20, 11, page=1))),
            PageInput(page_num=2, tokens=(sized("Notes", 10, 15, page=2), sized("b", 20, 11, page=2))),
        ]
        _, sections = self.detector.detect(pages)
        assert [(s.title, s.page, s.content) for s in sections] == [("Notes", 1, "a"), ("Notes", 2, "b")]

    def test_mixed_strategies_across_pages(self):
        pages = [
            PageInput(page_num=1, tokens=(sized("Summary", 10, 20, page=1),)),
            PageInput(page_num=2, tokens=(coarse("REVENUE", 10, 17, page=2), coarse("grew fast", 30, 10, page=2))),
        ]
        headings, sections = self.detector.detect(pages)

        assert [(h.text, h.level, h.page) for h in headings] == [("Summary", 1, 1), ("REVENUE", 1, 2)]
        assert sections[1].content == "grew fast"

    def test_no_pages(self):
        assert self.detector.detect([]) == ([], [])
