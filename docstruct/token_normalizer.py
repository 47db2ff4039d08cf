"""
Token normalization: blank-token filtering and row grouping by vertical proximity.
"""

from typing import Iterable, List

from .data_models import PositionedToken, Row, Token
from .logging_config import setup_logging

logger = setup_logging()

ROW_Y_TOLERANCE = 3.0


def normalize_tokens(tokens: Iterable[Token]) -> List[PositionedToken]:
    """
    Keep the positioned tokens that carry visible text.

    Args:
        tokens: Raw tokens of one page

    Returns:
        Positioned, non-blank tokens in input order
    """
    return [
        token for token in tokens
        if isinstance(token, PositionedToken) and not token.is_empty()
    ]


def group_rows(tokens: Iterable[Token], tolerance: float = ROW_Y_TOLERANCE) -> List[Row]:
    """
    Group tokens into rows.

    A token joins the first row, in creation order, whose key y lies within
    ``tolerance`` of the token's y; otherwise it opens a new row keyed by its own y.
    Rows come back sorted top to bottom, tokens inside a row left to right.

    Args:
        tokens: Raw tokens of one page
        tolerance: Maximum vertical distance to an existing row key

    Returns:
        List of rows sorted by y
    """
    keys: List[float] = []
    members: List[List[PositionedToken]] = []

    for token in normalize_tokens(tokens):
        for index, key in enumerate(keys):
            if abs(key - token.y) <= tolerance:
                members[index].append(token)
                break
        else:
            keys.append(token.y)
            members.append([token])

    rows = [
        Row(y=key, tokens=tuple(sorted(row_tokens, key=lambda t: t.x)))
        for key, row_tokens in zip(keys, members)
    ]
    rows.sort(key=lambda r: r.y)

    logger.debug(f"Grouped tokens into {len(rows)} rows")
    return rows
