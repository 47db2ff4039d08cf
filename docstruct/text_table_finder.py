"""
Text-only table detection for pages without positional metadata.
"""

import re
from typing import List, Optional

from .data_models import TableBlock
from .logging_config import setup_logging

logger = setup_logging()

MULTI_SPACE = re.compile(r'\s{2,}')


def is_tabular_line(line: str) -> bool:
    """A line is tabular when it is pipe-delimited or has more than two wide-gap fields."""
    stripped = line.strip()
    if not stripped:
        return False
    if '|' in stripped and stripped.startswith('|') and stripped.endswith('|'):
        return True
    return '  ' in line and len(MULTI_SPACE.split(line)) > 2


def split_cells(line: str) -> List[str]:
    """Split a tabular line into cells."""
    if '|' in line:
        return [cell.strip() for cell in line.split('|') if cell.strip()]
    return [cell.strip() for cell in MULTI_SPACE.split(line.strip())]


def _to_block(rows: List[List[str]], page: int, start: int, end: int) -> Optional[TableBlock]:
    if len(rows) < 2:
        return None
    frozen = tuple(tuple(row) for row in rows)
    return TableBlock(
        page=page,
        start_y=float(start),
        end_y=float(end),
        columns=(),
        rows=frozen,
        header_row=frozen[0],
        source="text",
    )


def find_text_tables(text: str, page: int) -> List[TableBlock]:
    """
    Find delimiter-based tables in plain text.

    Consecutive tabular lines form one table; any other line closes it. Tables
    with fewer than two rows are discarded.

    Args:
        text: Plain page text
        page: Page number for the emitted blocks

    Returns:
        List of text tables
    """
    tables: List[TableBlock] = []
    rows: List[List[str]] = []
    start = end = 0
    in_table = False

    for number, line in enumerate(text.split('\n')):
        if is_tabular_line(line):
            if not in_table:
                in_table = True
                rows = []
                start = number
            cells = split_cells(line)
            if len(cells) > 1:
                rows.append(cells)
                end = number
        elif in_table:
            block = _to_block(rows, page, start, end)
            if block is not None:
                tables.append(block)
            in_table = False
            rows = []

    if in_table:
        block = _to_block(rows, page, start, end)
        if block is not None:
            tables.append(block)

    if tables:
        logger.debug(f"Page {page}: found {len(tables)} text tables")
    return tables
