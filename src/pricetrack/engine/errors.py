"""Error taxonomy for the valuation engine."""

from __future__ import annotations

from typing import Any, Mapping


class ValuationError(Exception):
    """Base class for per-player valuation problems."""


class IneligiblePlayer(ValuationError):
    def __init__(self, identity: str, team: str, games: int, required: int):
        message = f"{identity} ({team}) has {games} qualifying games; {required} required"
        super().__init__(message)
        self.identity = identity
        self.team = team
        self.games = games
        self.required = required
        self.message = message


class AmbiguousOrdering(ValuationError):
    """A round value could not be ordered numerically."""

    def __init__(self, season: int, round_value: Any):
        message = f"season {season} round {round_value!r} is not numeric; using text order"
        super().__init__(message)
        self.season = season
        self.round_value = round_value
        self.message = message


class MalformedRecord(ValuationError):
    """A raw stat row that cannot become a performance record."""

    def __init__(self, row: Mapping[str, Any], reason: str, line: int | None = None):
        location = f"row {line}: " if line is not None else ""
        message = f"{location}{reason}"
        super().__init__(message)
        self.row = dict(row)
        self.reason = reason
        self.line = line
        self.message = message
