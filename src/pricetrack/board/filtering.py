"""Helpers for slicing a valuation board by common columns."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from statistics import fmean, median
from typing import Iterable, Literal, Sequence

from pricetrack.valuation import PlayerValuation

SortKey = Literal[
    "price_change",
    "new_price",
    "price",
    "rolling_average",
    "market_value",
    "games_played",
    "name",
    "team",
]


@dataclass(frozen=True)
class BoardCriteria:
    """Filtering configuration for a valuation board."""

    search: str | None = None
    team: str | None = None
    position: str | None = None
    value_rating: Literal["good", "fair", "poor"] | None = None
    min_games: int | None = None
    sort_by: SortKey = "price_change"
    sort_direction: Literal["asc", "desc"] = "desc"
    limit: int | None = None


@dataclass(frozen=True)
class BoardSummary:
    available_players: int
    selected_players: int
    price_change_mean: float | None
    price_change_median: float | None
    new_price_mean: float | None
    rating_counts: dict[str, int]


@dataclass(frozen=True)
class BoardRow:
    valuation: PlayerValuation
    rank: int


@dataclass(frozen=True)
class BoardResult:
    rows: list[BoardRow]
    summary: BoardSummary


def _passes_criteria(valuation: PlayerValuation, criteria: BoardCriteria) -> bool:
    player = valuation.player
    if criteria.search:
        needle = criteria.search.casefold()
        haystacks = (player.identity, player.team, *player.aliases)
        if not any(needle in text.casefold() for text in haystacks):
            return False
    if criteria.team and player.team.casefold() != criteria.team.casefold():
        return False
    if criteria.position and player.position.casefold() != criteria.position.casefold():
        return False
    if criteria.value_rating and valuation.value_rating != criteria.value_rating:
        return False
    if criteria.min_games is not None and valuation.games_played < criteria.min_games:
        return False
    return True


def _sort_key(valuation: PlayerValuation, criteria: BoardCriteria) -> float | str:
    if criteria.sort_by == "name":
        return valuation.player.identity.casefold()
    if criteria.sort_by == "team":
        return valuation.player.team.casefold()
    if criteria.sort_by == "new_price":
        return float(valuation.new_price)
    if criteria.sort_by == "price":
        return float(valuation.price_before)
    if criteria.sort_by == "rolling_average":
        return valuation.rolling_average
    if criteria.sort_by == "market_value":
        return valuation.market_value
    if criteria.sort_by == "games_played":
        return float(valuation.games_played)
    return float(valuation.price_change)


def _build_summary(
    *,
    available: Sequence[PlayerValuation],
    selected: Sequence[PlayerValuation],
) -> BoardSummary:
    def _safe_stats(values: Iterable[float]) -> tuple[float | None, float | None]:
        values = list(values)
        if not values:
            return None, None
        return fmean(values), median(values)

    change_mean, change_median = _safe_stats(v.price_change for v in selected)
    price_mean, _ = _safe_stats(v.new_price for v in selected)
    counts = Counter(v.value_rating for v in selected)
    return BoardSummary(
        available_players=len(available),
        selected_players=len(selected),
        price_change_mean=change_mean,
        price_change_median=change_median,
        new_price_mean=price_mean,
        rating_counts={rating: counts.get(rating, 0) for rating in ("good", "fair", "poor")},
    )


def filter_board(
    valuations: Sequence[PlayerValuation],
    criteria: BoardCriteria,
) -> BoardResult:
    """Filter valuations and return ranked rows with summary statistics."""

    candidates = [v for v in valuations if _passes_criteria(v, criteria)]
    reverse = criteria.sort_direction != "asc"
    candidates.sort(
        key=lambda v: (_sort_key(v, criteria), v.player.identity.casefold()),
        reverse=reverse,
    )

    limit = criteria.limit if criteria.limit is not None and criteria.limit > 0 else None
    selected = candidates[:limit] if limit is not None else candidates

    rows = [BoardRow(valuation=v, rank=index) for index, v in enumerate(selected, start=1)]
    return BoardResult(rows=rows, summary=_build_summary(available=candidates, selected=selected))


__all__ = [
    "BoardCriteria",
    "BoardResult",
    "BoardRow",
    "BoardSummary",
    "filter_board",
]
