"""Chronological ordering of qualifying records."""

from __future__ import annotations

import logging
from typing import Iterable, List, MutableSequence, Tuple, Union

from pricetrack.models import PerformanceRecord

from .errors import AmbiguousOrdering


logger = logging.getLogger(__name__)


def parse_round(value: Union[int, str]) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if number.is_integer():
        return int(number)
    return None


def _round_key(value: Union[int, str]) -> Tuple[int, int, str]:
    number = parse_round(value)
    if number is not None:
        return (0, number, "")
    # Text rounds (finals etc.) sort after every numbered round of the season.
    return (1, 0, str(value).strip().casefold())


def sequence_records(
    records: Iterable[PerformanceRecord],
    *,
    diagnostics: MutableSequence[AmbiguousOrdering] | None = None,
) -> List[PerformanceRecord]:
    """Order records by season, then round.

    ``sorted`` is stable, so records sharing a key keep their input order.
    Non-numeric rounds fall back to text order and are reported through
    ``diagnostics`` and the module logger.
    """

    ordered = sorted(records, key=lambda record: (record.season, _round_key(record.round)))
    seen: set[Tuple[int, str]] = set()
    for record in ordered:
        if parse_round(record.round) is not None:
            continue
        marker = (record.season, str(record.round))
        if marker in seen:
            continue
        seen.add(marker)
        issue = AmbiguousOrdering(record.season, record.round)
        logger.warning("Ambiguous ordering for %s: %s", record.player_identity, issue.message)
        if diagnostics is not None:
            diagnostics.append(issue)
    return ordered
