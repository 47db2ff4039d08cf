"""
Tests for token normalization and row grouping.
"""

import pytest

from docstruct.data_models import PositionedToken, TextOnlyToken
from docstruct.token_normalizer import ROW_Y_TOLERANCE, group_rows, normalize_tokens


def make_token(text, x, y, width=20.0, height=10.0, page=1):
    return PositionedToken(text=text, page=page, x=x, y=y, width=width, height=height)


class TestNormalizeTokens:
    """Test cases for blank-token filtering."""

    def test_blank_tokens_are_dropped(self):
        tokens = [make_token("Name", 10, 100), make_token("   ", 50, 100), make_token("", 80, 100)]
        assert [t.text for t in normalize_tokens(tokens)] == ["Name"]

    def test_text_only_tokens_are_dropped(self):
        tokens = [TextOnlyToken(text="floating", page=1), make_token("Age", 10, 100)]
        result = normalize_tokens(tokens)
        assert len(result) == 1
        assert result[0].text == "Age"


class TestGroupRows:
    """Test cases for vertical grouping."""

    def test_default_tolerance(self):
        assert ROW_Y_TOLERANCE == 3.0

    def test_tokens_within_tolerance_share_a_row(self):
        tokens = [make_token("a", 10, 100), make_token("b", 60, 102), make_token("c", 110, 103.5)]
        rows = group_rows(tokens)

        assert len(rows) == 2
        assert [t.text for t in rows[0].tokens] == ["a", "b"]
        assert rows[0].y == 100
        assert rows[1].y == 103.5

    def test_rows_sorted_by_y_and_tokens_by_x(self):
        tokens = [
            make_token("bottom-right", 200, 300),
            make_token("top-right", 200, 50),
            make_token("bottom-left", 10, 301),
            make_token("top-left", 10, 51),
        ]
        rows = group_rows(tokens)

        assert [r.y for r in rows] == [50, 300]
        assert [t.text for t in rows[0].tokens] == ["top-left", "top-right"]
        assert [t.text for t in rows[1].tokens] == ["bottom-left", "bottom-right"]

    def test_token_joins_first_created_matching_row(self):
        # y=12 is within tolerance of both keys; the row created first wins.
        tokens = [make_token("first", 10, 10), make_token("second", 10, 14), make_token("third", 50, 12)]
        rows = group_rows(tokens)

        assert len(rows) == 2
        assert [t.text for t in rows[0].tokens] == ["first", "third"]
        assert [t.text for t in rows[1].tokens] == ["second"]

    def test_custom_tolerance(self):
        tokens = [make_token("a", 10, 100), make_token("b", 60, 102)]
        assert len(group_rows(tokens, tolerance=1.0)) == 2

    def test_empty_input(self):
        assert group_rows([]) == []

    @pytest.mark.parametrize("shift", [0.0, 37.5, -120.0])
    def test_vertical_shift_preserves_grouping(self, shift):
        ys = [100, 101.5, 130, 131, 200]
        tokens = [make_token(str(i), 10 * i, y + shift) for i, y in enumerate(ys)]
        rows = group_rows(tokens)
        assert [[t.text for t in r.tokens] for r in rows] == [["0", "1"], ["2", "3"], ["4"]]
