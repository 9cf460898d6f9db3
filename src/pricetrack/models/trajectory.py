"""Derived, per-position valuation outputs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple

from .performance import PerformanceRecord

Phase = Literal["awaiting-data", "smoothing"]


@dataclass(frozen=True)
class TimelinePosition:
    index: int
    record: PerformanceRecord
    window_size: int
    rolling_average: float
    market_value: float
    price_before: int
    price_after: int
    phase: Phase = "awaiting-data"

    @property
    def price_change(self) -> int:
        return self.price_after - self.price_before


@dataclass(frozen=True)
class PriceState:
    """Incremental pricing state after folding ``positions`` records.

    ``recent_scores`` holds at most ``window_size`` trailing scores so a new
    record can be folded in without replaying the history.
    """

    positions: int
    price: int
    recent_scores: Tuple[float, ...] = ()
