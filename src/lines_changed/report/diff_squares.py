"""
Five-square indicator of the added/removed line ratio.
"""

from __future__ import annotations

import math


SQUARE_COUNT = 5
ADDED_SQUARE = "🟩"
REMOVED_SQUARE = "🟥"
EMPTY_SQUARE = "▫"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def generate_diff_squares(additions: int, deletions: int) -> str:
    """Return five squares proportioned between additions and deletions.

    ``generate_diff_squares(342, 128)`` gives four green squares and one red.
    With no changed lines at all five neutral squares are returned.
    """
    total = additions + deletions
    if total == 0:
        return EMPTY_SQUARE * SQUARE_COUNT

    added_squares = round_half_up(additions / total * SQUARE_COUNT)
    return ADDED_SQUARE * added_squares + REMOVED_SQUARE * (SQUARE_COUNT - added_squares)
