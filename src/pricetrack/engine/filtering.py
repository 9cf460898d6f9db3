"""Select the records that qualify for valuation."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from pricetrack.models import PerformanceRecord, PlayerKey, RecordScope


def filter_records(records: Iterable[PerformanceRecord], key: PlayerKey) -> List[PerformanceRecord]:
    """Return whole-game records for ``key``.

    Duplicates are kept: a re-submitted total counts as another game, so any
    double entry stays visible to whoever audits the source data.
    """

    return [
        record
        for record in records
        if record.scope is RecordScope.WHOLE_GAME and key.matches(record)
    ]


def is_eligible(records: Sequence[PerformanceRecord], min_games: int) -> bool:
    return len(records) >= min_games
