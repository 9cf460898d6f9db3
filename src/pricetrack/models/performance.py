"""Performance records and the players they are matched against."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class RecordScope(str, Enum):
    WHOLE_GAME = "whole-game"
    PARTIAL_PERIOD = "partial-period"


class PerformanceRecord(BaseModel):
    """One player's statistics for one game, as supplied by the stats feed."""

    season: int
    round: Union[int, str]
    player_identity: str = Field(..., min_length=1)
    team: str
    scope: RecordScope = RecordScope.WHOLE_GAME
    score: float = Field(..., ge=0.0, allow_inf_nan=False)

    model_config = ConfigDict(frozen=True)


def _fold(value: str) -> str:
    return " ".join(value.split()).casefold()


@dataclass(frozen=True)
class PlayerKey:
    """Case-insensitive identity used to match loosely keyed stat rows."""

    identity: str
    team: str
    aliases: Tuple[str, ...] = ()

    @classmethod
    def create(cls, identity: str, team: str, aliases: Tuple[str, ...] | list[str] = ()) -> "PlayerKey":
        names = tuple(dict.fromkeys(_fold(alias) for alias in aliases if alias and alias.strip()))
        folded = _fold(identity)
        return cls(
            identity=folded,
            team=_fold(team),
            aliases=tuple(name for name in names if name != folded),
        )

    def matches_identity(self, value: str) -> bool:
        folded = _fold(value)
        return folded == self.identity or folded in self.aliases

    def matches_team(self, value: str) -> bool:
        return _fold(value) == self.team

    def matches(self, record: PerformanceRecord) -> bool:
        return self.matches_identity(record.player_identity) and self.matches_team(record.team)


class PricedPlayer(BaseModel):
    """Registry entry for a player being valued."""

    identity: str = Field(..., min_length=1)
    team: str
    base_price: int = Field(..., ge=0)
    aliases: Tuple[str, ...] = ()
    position: str = ""
    active: bool = True
    eligible: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> PlayerKey:
        return PlayerKey.create(self.identity, self.team, self.aliases)
