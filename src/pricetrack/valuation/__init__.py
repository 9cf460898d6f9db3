"""Batch valuation built on top of the trajectory engine."""

from .service import (
    PlayerExclusion,
    PlayerValuation,
    ValuationBatch,
    rate_price_change,
    value_player,
    value_players,
)

__all__ = [
    "PlayerExclusion",
    "PlayerValuation",
    "ValuationBatch",
    "rate_price_change",
    "value_player",
    "value_players",
]
