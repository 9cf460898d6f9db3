"""Pricing policy constants and named policy lookup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Mapping


logger = logging.getLogger(__name__)

_ENV_PREFIX = "PRICETRACK_"


@dataclass(frozen=True)
class PricingPolicy:
    name: str = "DEFAULT"
    magic_number: float = 5000.0
    smoothing_weight_old: float = 0.75
    smoothing_weight_new: float = 0.25
    min_qualifying_games: int = 3
    window_size: int = 3
    round_market_value: bool = False
    value_rating_threshold: int = 50_000
    default_base_price: int = 300_000

    def __post_init__(self) -> None:
        if self.window_size < 1:
            raise ValueError(f"window_size must be at least 1, got {self.window_size}")
        if self.min_qualifying_games < 1:
            raise ValueError(
                f"min_qualifying_games must be at least 1, got {self.min_qualifying_games}"
            )
        if self.magic_number < 0:
            raise ValueError(f"magic_number must be non-negative, got {self.magic_number}")
        if self.smoothing_weight_old < 0 or self.smoothing_weight_new < 0:
            raise ValueError("smoothing weights must be non-negative")
        if self.value_rating_threshold < 0:
            raise ValueError("value_rating_threshold must be non-negative")

    @property
    def smoothing_start(self) -> int:
        """First timeline position at which the price is allowed to move."""

        return self.window_size - 1

    def with_overrides(self, **changes: object) -> "PricingPolicy":
        """Return a copy with ``changes`` applied; ``None`` values are ignored."""

        applied = {key: value for key, value in changes.items() if value is not None}
        if not applied:
            return self
        return replace(self, **applied)


DEFAULT_POLICY = PricingPolicy()

_POLICIES: Dict[str, PricingPolicy] = {
    "DEFAULT": DEFAULT_POLICY,
    # Same constants, but the market value is rounded before smoothing.
    "ROUND_TWICE": replace(DEFAULT_POLICY, name="ROUND_TWICE", round_market_value=True),
}


def iter_policies() -> Iterable[PricingPolicy]:
    """Return an iterator of all named policies."""

    return _POLICIES.values()


def get_policy(name: str) -> PricingPolicy:
    """Fetch a named policy, raising KeyError if missing."""

    key = name.upper()
    if key not in _POLICIES:
        raise KeyError(f"No pricing policy configured for name={name!r}")
    return _POLICIES[key]


def _env_float(environ: Mapping[str, str], name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = environ.get(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _env_int(environ: Mapping[str, str], name: str, default: int, *, min_value: int | None = None) -> int:
    raw = environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def policy_from_env(
    base: PricingPolicy = DEFAULT_POLICY,
    environ: Mapping[str, str] | None = None,
) -> PricingPolicy:
    """Apply ``PRICETRACK_*`` environment overrides on top of ``base``."""

    env = os.environ if environ is None else environ
    return replace(
        base,
        magic_number=_env_float(env, f"{_ENV_PREFIX}MAGIC_NUMBER", base.magic_number, clamp_min=0.0),
        smoothing_weight_old=_env_float(
            env, f"{_ENV_PREFIX}WEIGHT_OLD", base.smoothing_weight_old, clamp_min=0.0
        ),
        smoothing_weight_new=_env_float(
            env, f"{_ENV_PREFIX}WEIGHT_NEW", base.smoothing_weight_new, clamp_min=0.0
        ),
        min_qualifying_games=_env_int(
            env, f"{_ENV_PREFIX}MIN_GAMES", base.min_qualifying_games, min_value=1
        ),
        window_size=_env_int(env, f"{_ENV_PREFIX}WINDOW_SIZE", base.window_size, min_value=1),
    )
