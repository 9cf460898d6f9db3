"""Drive the pricing chain across a player's timeline."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from pricetrack.config import DEFAULT_POLICY, PricingPolicy
from pricetrack.models import PerformanceRecord, PriceState, PricedPlayer, TimelinePosition

from .errors import IneligiblePlayer
from .filtering import is_eligible
from .pricing import market_value, next_price
from .rolling import rolling_average, window_bounds


logger = logging.getLogger(__name__)


def _phase(position: int, policy: PricingPolicy) -> str:
    return "smoothing" if position >= policy.smoothing_start else "awaiting-data"


def ensure_eligible(
    player: PricedPlayer,
    sequence: Sequence[PerformanceRecord],
    policy: PricingPolicy = DEFAULT_POLICY,
) -> None:
    if not is_eligible(sequence, policy.min_qualifying_games):
        raise IneligiblePlayer(
            player.identity,
            player.team,
            games=len(sequence),
            required=policy.min_qualifying_games,
        )


def assemble(
    player: PricedPlayer,
    sequence: Sequence[PerformanceRecord],
    policy: PricingPolicy = DEFAULT_POLICY,
) -> List[TimelinePosition]:
    """Recompute the full trajectory from ``player.base_price``.

    ``sequence`` must already be filtered and ordered. Raises
    :class:`IneligiblePlayer` before any computation when there are too few
    qualifying games.
    """

    ensure_eligible(player, sequence, policy)

    positions: List[TimelinePosition] = []
    price = player.base_price
    for index, record in enumerate(sequence):
        start, stop = window_bounds(index, policy.window_size)
        average = rolling_average(sequence, index, policy.window_size)
        value = market_value(average, policy)
        price_after = next_price(price, value, index, policy)
        positions.append(
            TimelinePosition(
                index=index,
                record=record,
                window_size=stop - start,
                rolling_average=average,
                market_value=value,
                price_before=price,
                price_after=price_after,
                phase=_phase(index, policy),
            )
        )
        price = price_after
    return positions


def current_price(
    player: PricedPlayer,
    sequence: Sequence[PerformanceRecord],
    policy: PricingPolicy = DEFAULT_POLICY,
) -> int:
    """Latest price after replaying every position from the base price."""

    return assemble(player, sequence, policy)[-1].price_after


def initial_state(base_price: int) -> PriceState:
    return PriceState(positions=0, price=base_price)


def fold_record(
    state: PriceState,
    record: PerformanceRecord,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> Tuple[PriceState, TimelinePosition]:
    """Fold one new record into ``state`` without replaying history."""

    index = state.positions
    scores = (state.recent_scores + (record.score,))[-policy.window_size:]
    average = sum(scores) / len(scores)
    value = market_value(average, policy)
    price_after = next_price(state.price, value, index, policy)
    position = TimelinePosition(
        index=index,
        record=record,
        window_size=len(scores),
        rolling_average=average,
        market_value=value,
        price_before=state.price,
        price_after=price_after,
        phase=_phase(index, policy),
    )
    return PriceState(positions=index + 1, price=price_after, recent_scores=scores), position


def build_state(
    base_price: int,
    sequence: Iterable[PerformanceRecord],
    policy: PricingPolicy = DEFAULT_POLICY,
) -> PriceState:
    """Fold a whole ordered sequence; the result can be stored and extended."""

    state = initial_state(base_price)
    for record in sequence:
        state, _ = fold_record(state, record, policy)
    return state


def apply_latest(
    state: PriceState,
    record: PerformanceRecord,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> Tuple[PriceState, TimelinePosition]:
    """Apply the newest qualifying game to a stored state.

    The record must be chronologically after every record already folded in.
    """

    expected = min(state.positions, policy.window_size)
    if len(state.recent_scores) != expected:
        raise ValueError(
            f"state at position {state.positions} carries {len(state.recent_scores)} scores; "
            f"expected {expected}"
        )
    next_state, position = fold_record(state, record, policy)
    logger.debug(
        "Applied %s round %s: %s -> %s",
        record.player_identity,
        record.round,
        position.price_before,
        position.price_after,
    )
    return next_state, position
