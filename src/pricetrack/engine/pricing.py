"""Market value estimation and price smoothing."""

from __future__ import annotations

import math

from pricetrack.config import DEFAULT_POLICY, PricingPolicy


def round_currency(value: float) -> int:
    """Round half away from zero to a whole currency unit."""

    if value < 0:
        return -round_currency(-value)
    whole = math.floor(value)
    return whole + 1 if value - whole >= 0.5 else whole


def market_value(rolling_average: float, policy: PricingPolicy = DEFAULT_POLICY) -> float:
    # Unrounded unless the policy asks for it; the price is rounded once.
    value = policy.magic_number * rolling_average
    if policy.round_market_value:
        return float(round_currency(value))
    return value


def next_price(
    price_before: int,
    value: float,
    position: int,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> int:
    """Blend the previous price with the market value.

    Must be called in position order for a player: each call's
    ``price_before`` is the previous call's result.
    """

    if position < policy.smoothing_start:
        return price_before
    blended = policy.smoothing_weight_old * price_before + policy.smoothing_weight_new * value
    return round_currency(blended)
