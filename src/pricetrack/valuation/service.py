"""Batch valuation of registry players against their stat history."""

from __future__ import annotations

import logging
import multiprocessing as mp
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Literal, Optional, Sequence, Tuple

from pricetrack.config import DEFAULT_POLICY, PricingPolicy
from pricetrack.engine import (
    AmbiguousOrdering,
    IneligiblePlayer,
    ValuationError,
    assemble,
    filter_records,
    sequence_records,
)
from pricetrack.models import PerformanceRecord, PricedPlayer, TimelinePosition


logger = logging.getLogger(__name__)

ValueRating = Literal["good", "fair", "poor"]


@dataclass(frozen=True)
class PlayerValuation:
    player: PricedPlayer
    games_played: int
    rolling_average: float
    market_value: float
    price_before: int
    new_price: int
    value_rating: ValueRating
    trajectory: Tuple[TimelinePosition, ...] = ()

    @property
    def price_change(self) -> int:
        return self.new_price - self.price_before


@dataclass(frozen=True)
class PlayerExclusion:
    identity: str
    team: str
    reason: str
    games_played: int = 0


@dataclass
class ValuationBatch:
    valuations: List[PlayerValuation] = field(default_factory=list)
    exclusions: List[PlayerExclusion] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class _PlayerJob:
    player: PricedPlayer
    records: Tuple[PerformanceRecord, ...]
    policy: PricingPolicy
    include_trajectory: bool


@dataclass(frozen=True)
class _PlayerOutcome:
    valuation: Optional[PlayerValuation] = None
    exclusion: Optional[PlayerExclusion] = None
    diagnostics: Tuple[str, ...] = ()


def rate_price_change(change: int, policy: PricingPolicy = DEFAULT_POLICY) -> ValueRating:
    if change > policy.value_rating_threshold:
        return "good"
    if change < -policy.value_rating_threshold:
        return "poor"
    return "fair"


def value_player(
    player: PricedPlayer,
    records: Iterable[PerformanceRecord],
    *,
    policy: PricingPolicy = DEFAULT_POLICY,
    include_trajectory: bool = True,
    diagnostics: List[AmbiguousOrdering] | None = None,
) -> PlayerValuation:
    """Filter, order and price one player's history.

    Raises :class:`IneligiblePlayer` when the player has too few qualifying
    games.
    """

    qualifying = filter_records(records, player.key)
    sequence = sequence_records(qualifying, diagnostics=diagnostics)
    trajectory = assemble(player, sequence, policy)
    latest = trajectory[-1]
    return PlayerValuation(
        player=player.model_copy(update={"eligible": True}),
        games_played=len(sequence),
        rolling_average=latest.rolling_average,
        market_value=latest.market_value,
        price_before=latest.price_before,
        new_price=latest.price_after,
        value_rating=rate_price_change(latest.price_change, policy),
        trajectory=tuple(trajectory) if include_trajectory else (),
    )


def _run_player_job(job: _PlayerJob) -> _PlayerOutcome:
    player = job.player
    issues: List[AmbiguousOrdering] = []

    def notes() -> Tuple[str, ...]:
        return tuple(f"{player.identity}: {issue.message}" for issue in issues)

    try:
        valuation = value_player(
            player,
            job.records,
            policy=job.policy,
            include_trajectory=job.include_trajectory,
            diagnostics=issues,
        )
    except IneligiblePlayer as exc:
        return _PlayerOutcome(
            exclusion=PlayerExclusion(
                identity=player.identity,
                team=player.team,
                reason="ineligible",
                games_played=exc.games,
            ),
            diagnostics=notes(),
        )
    except ValuationError as exc:
        return _PlayerOutcome(
            exclusion=PlayerExclusion(identity=player.identity, team=player.team, reason=str(exc)),
            diagnostics=notes(),
        )
    return _PlayerOutcome(
        valuation=valuation,
        diagnostics=notes(),
    )


def _records_for(player: PricedPlayer, records: Sequence[PerformanceRecord]) -> Tuple[PerformanceRecord, ...]:
    key = player.key
    return tuple(record for record in records if key.matches_team(record.team))


def value_players(
    players: Sequence[PricedPlayer],
    records: Sequence[PerformanceRecord],
    *,
    policy: PricingPolicy = DEFAULT_POLICY,
    parallel_jobs: int | None = None,
    include_trajectory: bool = False,
) -> ValuationBatch:
    """Value every active player; failures are isolated per player."""

    batch = ValuationBatch()
    jobs: List[_PlayerJob] = []
    for player in players:
        if not player.active:
            batch.exclusions.append(
                PlayerExclusion(identity=player.identity, team=player.team, reason="inactive")
            )
            continue
        jobs.append(
            _PlayerJob(
                player=player,
                records=_records_for(player, records),
                policy=policy,
                include_trajectory=include_trajectory,
            )
        )

    start = time.perf_counter()
    workers = max(1, parallel_jobs or 1)
    if workers > 1 and len(jobs) > 1:
        ctx = mp.get_context("spawn")
        with ctx.Pool(processes=min(workers, len(jobs))) as pool:
            outcomes = pool.map(_run_player_job, jobs)
    else:
        outcomes = [_run_player_job(job) for job in jobs]

    for outcome in outcomes:
        batch.diagnostics.extend(outcome.diagnostics)
        if outcome.valuation is not None:
            batch.valuations.append(outcome.valuation)
        elif outcome.exclusion is not None:
            logger.info(
                "Excluded %s (%s): %s",
                outcome.exclusion.identity,
                outcome.exclusion.team,
                outcome.exclusion.reason,
            )
            batch.exclusions.append(outcome.exclusion)

    logger.info(
        "Valued %s/%s players in %.2fs (%s worker%s)",
        len(batch.valuations),
        len(players),
        time.perf_counter() - start,
        workers,
        "" if workers == 1 else "s",
    )
    return batch
