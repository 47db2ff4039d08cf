"""
Row classification: decides whether a row's horizontal token spacing looks tabular.
"""

from typing import List

import numpy as np

from .data_models import Row


class RowClassifier:
    """
    Classifies rows as structured (table-like) from the regularity of their gaps.

    A row is structured when the population standard deviation of its inter-token
    gaps is small in absolute terms, or small relative to the mean gap.
    """

    def __init__(self, max_relative_deviation: float = 0.5, max_absolute_deviation: float = 10.0):
        self.thresholds = {
            'relative_deviation': max_relative_deviation,
            'absolute_deviation': max_absolute_deviation,
        }

    @staticmethod
    def gaps(row: Row) -> List[float]:
        """Horizontal gaps between consecutive tokens of a row."""
        tokens = row.tokens
        return [tokens[i].x - tokens[i - 1].right for i in range(1, len(tokens))]

    def is_structured(self, row: Row) -> bool:
        """
        Decide whether a row exhibits table-like column spacing.

        Args:
            row: Row with tokens sorted by x

        Returns:
            True if the row is structured
        """
        if len(row.tokens) < 2:
            return False

        gaps = np.asarray(self.gaps(row), dtype=float)
        mean = float(gaps.mean())
        stddev = float(gaps.std())

        # Absolute clause first; a zero mean never reaches the ratio.
        if stddev < self.thresholds['absolute_deviation']:
            return True
        if mean == 0.0:
            return False
        return stddev / mean < self.thresholds['relative_deviation']


_default_classifier = RowClassifier()


def is_structured_row(row: Row) -> bool:
    """Classify a row with the default thresholds."""
    return _default_classifier.is_structured(row)
