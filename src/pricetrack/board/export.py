"""CSV export helpers for valuations and trajectories."""

from __future__ import annotations

import csv
from io import StringIO
from typing import Sequence

from pricetrack.engine import round_currency
from pricetrack.models import TimelinePosition
from pricetrack.valuation import PlayerValuation

VALUATION_HEADERS = (
    "player",
    "team",
    "position",
    "games_played",
    "rolling_average",
    "market_value",
    "price",
    "new_price",
    "price_change",
    "value_rating",
)

TRAJECTORY_HEADERS = (
    "index",
    "season",
    "round",
    "score",
    "window_size",
    "rolling_average",
    "market_value",
    "price_before",
    "price_after",
    "price_change",
)


def export_valuations_to_csv(valuations: Sequence[PlayerValuation]) -> str:
    """Render valuations as CSV, one row per player."""

    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(VALUATION_HEADERS)
    for valuation in valuations:
        player = valuation.player
        writer.writerow([
            player.identity,
            player.team,
            player.position,
            valuation.games_played,
            f"{valuation.rolling_average:.1f}",
            round_currency(valuation.market_value),
            valuation.price_before,
            valuation.new_price,
            valuation.price_change,
            valuation.value_rating,
        ])
    return buffer.getvalue()


def export_trajectory_to_csv(trajectory: Sequence[TimelinePosition]) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(TRAJECTORY_HEADERS)
    for position in trajectory:
        writer.writerow([
            position.index,
            position.record.season,
            position.record.round,
            f"{position.record.score:g}",
            position.window_size,
            f"{position.rolling_average:.1f}",
            round_currency(position.market_value),
            position.price_before,
            position.price_after,
            position.price_change,
        ])
    return buffer.getvalue()


__all__ = [
    "export_trajectory_to_csv",
    "export_valuations_to_csv",
]
