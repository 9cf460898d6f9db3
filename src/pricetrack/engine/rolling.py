"""Trailing-window form average."""

from __future__ import annotations

from typing import Sequence

from pricetrack.models import PerformanceRecord


def window_bounds(position: int, window_size: int) -> tuple[int, int]:
    if position < 0:
        raise IndexError(f"position must be non-negative, got {position}")
    return max(0, position - window_size + 1), position + 1


def rolling_average(
    sequence: Sequence[PerformanceRecord],
    position: int,
    window_size: int = 3,
) -> float:
    """Mean score of the trailing window ending at ``position`` inclusive."""

    start, stop = window_bounds(position, window_size)
    window = [record.score for record in sequence[start:stop]]
    if len(window) != stop - start:
        raise IndexError(f"position {position} is outside a sequence of {len(sequence)}")
    return sum(window) / len(window)
