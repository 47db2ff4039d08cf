"""
Table assembly from classified rows.

Rows of a page are folded top to bottom through a small state machine. The state
is an immutable value, either ``Idle`` or ``Building``; each step returns the
next state and, when a run closes, the emitted table.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from .column_model import BAND_MARGIN, Bands, column_bands, is_compatible, merge_bands
from .data_models import ColumnBand, Row, TableBlock
from .logging_config import setup_logging
from .row_classifier import RowClassifier

logger = setup_logging()


@dataclass(frozen=True)
class Idle:
    """No table is being accumulated."""
    pass


@dataclass(frozen=True)
class Building:
    """A candidate table run."""
    start_y: float
    bands: Bands
    rows: Tuple[Row, ...]
    structured_count: int


IDLE = Idle()

AssemblerState = Union[Idle, Building]


def _nearest_cell(row: Row, band: ColumnBand) -> str:
    best_text = ''
    best_distance = float('inf')
    for token in row.tokens:
        distance = abs(token.center - band.center)
        if distance < best_distance:
            best_distance = distance
            best_text = token.text.strip()
    return best_text


def process_table_data(state: Building, page: int, end_y: float) -> TableBlock:
    """
    Turn an accumulated run into a TableBlock.

    Each band claims the token of each row whose center is closest to the band
    center. Bands pick independently, so one token may fill several cells.

    Args:
        state: The run to emit
        page: Page number
        end_y: y of the row that closed the run, or of its last row

    Returns:
        The table block, first row designated as header
    """
    rows = tuple(
        tuple(_nearest_cell(row, band) for band in state.bands)
        for row in state.rows
    )
    return TableBlock(
        page=page,
        start_y=state.start_y,
        end_y=end_y,
        columns=state.bands,
        rows=rows,
        header_row=rows[0] if rows else (),
    )


class TableAssembler:
    """
    Opens, extends and closes table runs, gated by a minimum number of structured rows.
    """

    def __init__(self, min_structured_rows: int = 3, band_margin: float = BAND_MARGIN,
                 classifier: Optional[RowClassifier] = None):
        """
        Initialize the assembler.

        Args:
            min_structured_rows: Structured rows a run needs before it is emitted
            band_margin: Slack used when matching unstructured rows to bands
            classifier: Row classifier used when no verdicts are supplied
        """
        self.min_structured_rows = min_structured_rows
        self.band_margin = band_margin
        self.classifier = classifier or RowClassifier()

    def _close(self, state: AssemblerState, page: int, end_y: float) -> Optional[TableBlock]:
        if (isinstance(state, Building)
                and state.structured_count >= self.min_structured_rows
                and len(state.rows) >= 2):
            return process_table_data(state, page, end_y)
        return None

    def step(self, state: AssemblerState, row: Row, structured: bool,
             page: int) -> Tuple[AssemblerState, Optional[TableBlock]]:
        """
        Advance the state machine by one row.

        Args:
            state: Current state
            row: Next row, top to bottom
            structured: Classifier verdict for the row
            page: Page number used for emitted blocks

        Returns:
            Tuple of (next state, emitted table or None)
        """
        if len(row.tokens) < 2:
            return IDLE, self._close(state, page, row.y)

        if structured:
            if isinstance(state, Idle):
                return Building(
                    start_y=row.y,
                    bands=column_bands(row),
                    rows=(row,),
                    structured_count=1,
                ), None
            return Building(
                start_y=state.start_y,
                bands=merge_bands(state.bands, column_bands(row)),
                rows=state.rows + (row,),
                structured_count=state.structured_count + 1,
            ), None

        if isinstance(state, Idle):
            return state, None

        if is_compatible(row, state.bands, self.band_margin):
            return Building(
                start_y=state.start_y,
                bands=state.bands,
                rows=state.rows + (row,),
                structured_count=state.structured_count,
            ), None

        return IDLE, self._close(state, page, row.y)

    def finish(self, state: AssemblerState, page: int) -> Optional[TableBlock]:
        """Close whatever run is still open at the end of the page."""
        if isinstance(state, Building):
            return self._close(state, page, state.rows[-1].y)
        return None

    def assemble(self, rows: Sequence[Row], page: int,
                 verdicts: Optional[Sequence[bool]] = None) -> List[TableBlock]:
        """
        Run the state machine over one page.

        Args:
            rows: Rows sorted by y
            page: Page number
            verdicts: Precomputed structured verdicts, one per row

        Returns:
            Tables emitted for the page, top to bottom
        """
        if verdicts is None:
            verdicts = [self.classifier.is_structured(row) for row in rows]

        state: AssemblerState = IDLE
        tables: List[TableBlock] = []
        for row, structured in zip(rows, verdicts):
            state, table = self.step(state, row, structured, page)
            if table is not None:
                tables.append(table)

        table = self.finish(state, page)
        if table is not None:
            tables.append(table)

        if tables:
            logger.debug(f"Page {page}: assembled {len(tables)} tables from {len(rows)} rows")
        return tables


def assemble_tables(rows: Sequence[Row], page: int,
                    verdicts: Optional[Sequence[bool]] = None) -> List[TableBlock]:
    """Convenience function assembling tables with default settings."""
    return TableAssembler().assemble(rows, page, verdicts)
