"""
Column band estimation and merging across table rows.
"""

from typing import Sequence, Tuple

from .data_models import ColumnBand, Row

Bands = Tuple[ColumnBand, ...]

BAND_MARGIN = 10.0
COMPATIBLE_FRACTION = 0.5


def column_bands(row: Row) -> Bands:
    """One band per token: its horizontal extent and center."""
    return tuple(
        ColumnBand(start=t.x, end=t.x + t.width, center=t.x + t.width / 2)
        for t in row.tokens
    )


def merge_bands(existing: Sequence[ColumnBand], new: Sequence[ColumnBand]) -> Bands:
    """
    Merge the bands of a newly accepted row into the running estimate.

    Equal band counts are averaged field by field. When the counts differ the
    longer sequence is kept as is and the other discarded. That can drop real
    columns in a noisy table; it is kept for compatibility until the intended
    behavior is confirmed.

    Args:
        existing: Current band estimate
        new: Bands of the incoming row

    Returns:
        Merged band estimate
    """
    if not existing:
        return tuple(new)

    if len(existing) != len(new):
        return tuple(existing) if len(existing) > len(new) else tuple(new)

    return tuple(
        ColumnBand(
            start=(old.start + cur.start) / 2,
            end=(old.end + cur.end) / 2,
            center=(old.center + cur.center) / 2,
        )
        for old, cur in zip(existing, new)
    )


def is_compatible(row: Row, bands: Sequence[ColumnBand], margin: float = BAND_MARGIN) -> bool:
    """
    Check whether an unstructured row still lines up with a table's columns.

    Args:
        row: Candidate row
        bands: Current column bands of the table
        margin: Slack added on both sides of each band

    Returns:
        True if more than half of the row's token centers fall inside some band
    """
    if not bands or not row.tokens:
        return False

    matched = 0
    for token in row.tokens:
        center = token.center
        if any(band.start - margin <= center <= band.end + margin for band in bands):
            matched += 1

    return matched / len(row.tokens) > COMPATIBLE_FRACTION
