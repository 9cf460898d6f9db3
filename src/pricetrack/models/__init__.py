"""Canonical models shared by ingestion, engine and service layers."""

from .performance import PerformanceRecord, PlayerKey, PricedPlayer, RecordScope
from .trajectory import PriceState, TimelinePosition

__all__ = [
    "PerformanceRecord",
    "PlayerKey",
    "PricedPlayer",
    "PriceState",
    "RecordScope",
    "TimelinePosition",
]
