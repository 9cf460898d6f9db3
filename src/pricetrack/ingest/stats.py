"""Helpers to load stat and registry CSVs and emit canonical records."""

from __future__ import annotations

import csv
import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ValidationError

from pricetrack.config import DEFAULT_POLICY, PricingPolicy
from pricetrack.engine.errors import MalformedRecord
from pricetrack.models import PerformanceRecord, PricedPlayer, RecordScope


logger = logging.getLogger(__name__)

WHOLE_GAME_MARKERS = frozenset({"total", "all"})

DEFAULT_STATS_MAPPING = {
    "player_name": "playerName",
    "team": "team",
    "season": "season",
    "round": "round",
    "quarter": "quarter",
    "score": "fantasyPoints",
}

DEFAULT_REGISTRY_MAPPING = {
    "player_name": "playerName",
    "full_name": "fullName",
    "team": "currentTeam",
    "position": "position",
    "price": "price",
    "active": "active",
}


def _extract(row: Mapping[str, Any], spec: Optional[str]) -> Optional[str]:
    if spec is None:
        return None
    if "|" in spec:
        parts = [str(row.get(col.strip()) or "").strip() for col in spec.split("|")]
        parts = [part for part in parts if part]
        return " ".join(parts) if parts else None
    value = row.get(spec)
    if value is None:
        return None
    return str(value).strip()


class StatRow(BaseModel):
    raw_name: str
    raw_team: str
    raw_season: Optional[str] = None
    raw_round: Optional[str] = None
    raw_quarter: Optional[str] = None
    raw_score: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any], mapping: Mapping[str, str]) -> "StatRow":
        return cls(
            raw_name=_extract(row, mapping.get("player_name", "player_name")) or "",
            raw_team=_extract(row, mapping.get("team", "team")) or "",
            raw_season=_extract(row, mapping.get("season", "season")),
            raw_round=_extract(row, mapping.get("round", "round")),
            raw_quarter=_extract(row, mapping.get("quarter")),
            raw_score=_extract(row, mapping.get("score", "score")),
        )


class RegistryRow(BaseModel):
    raw_name: str
    raw_full_name: Optional[str] = None
    raw_team: str
    raw_position: Optional[str] = None
    raw_price: Optional[str] = None
    raw_active: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any], mapping: Mapping[str, str]) -> "RegistryRow":
        return cls(
            raw_name=_extract(row, mapping.get("player_name", "player_name")) or "",
            raw_full_name=_extract(row, mapping.get("full_name")),
            raw_team=_extract(row, mapping.get("team", "team")) or "",
            raw_position=_extract(row, mapping.get("position")),
            raw_price=_extract(row, mapping.get("price", "price")),
            raw_active=_extract(row, mapping.get("active")),
        )


@dataclass(frozen=True)
class IngestReport:
    total_rows: int
    accepted_rows: int
    partial_period_rows: int
    malformed: List[MalformedRecord] = field(default_factory=list)

    @property
    def malformed_rows(self) -> int:
        return len(self.malformed)


def parse_scope(quarter: Optional[str]) -> RecordScope:
    if quarter is None:
        return RecordScope.WHOLE_GAME
    if quarter.strip().casefold() in WHOLE_GAME_MARKERS:
        return RecordScope.WHOLE_GAME
    return RecordScope.PARTIAL_PERIOD


def _parse_score(raw_score: Optional[str]) -> float:
    text = (raw_score or "").strip()
    if not text:
        raise ValueError("score is missing")
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"score '{raw_score}' is not numeric") from None
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"score '{raw_score}' is not a finite number")
    if value < 0:
        raise ValueError(f"score {value:g} is negative")
    return value


def _parse_season(raw_season: Optional[str]) -> int:
    text = (raw_season or "").strip()
    match = re.match(r"^-?\d+", text)
    if not match:
        # Unparseable seasons sort first, the same as season zero.
        return 0
    return int(match.group(0))


def _parse_round(raw_round: Optional[str]) -> int | str:
    text = (raw_round or "").strip()
    if re.fullmatch(r"-?\d+", text):
        return int(text)
    return text


def _parse_price(raw_price: Optional[str], default: int) -> int:
    digits = re.sub(r"[^0-9.]", "", raw_price or "")
    if not digits:
        return default
    try:
        value = float(digits)
    except ValueError:
        return default
    if value <= 0:
        return default
    return int(round(value))


def _parse_flag(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    text = value.strip().lower()
    if not text:
        return None
    if text in {"1", "true", "t", "yes", "y"}:
        return True
    if text in {"0", "false", "f", "no", "n"}:
        return False
    return None


def rows_to_records(rows: Sequence[StatRow]) -> Tuple[List[PerformanceRecord], IngestReport]:
    records: List[PerformanceRecord] = []
    malformed: List[MalformedRecord] = []
    partial = 0
    for line, row in enumerate(rows, start=1):
        try:
            record = PerformanceRecord(
                season=_parse_season(row.raw_season),
                round=_parse_round(row.raw_round),
                player_identity=row.raw_name,
                team=row.raw_team,
                scope=parse_scope(row.raw_quarter),
                score=_parse_score(row.raw_score),
            )
        except (ValueError, ValidationError) as exc:
            issue = MalformedRecord(row.model_dump(), _reason(exc), line=line)
            logger.warning("Skipping malformed stat %s", issue.message)
            malformed.append(issue)
            continue
        if record.scope is RecordScope.PARTIAL_PERIOD:
            partial += 1
        records.append(record)

    report = IngestReport(
        total_rows=len(rows),
        accepted_rows=len(records),
        partial_period_rows=partial,
        malformed=malformed,
    )
    return records, report


def _reason(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            return f"{location}: {first.get('msg', 'invalid value')}"
    return str(exc)


def records_from_rows(
    rows: Iterable[Mapping[str, Any]],
    *,
    mapping: Mapping[str, str] | None = None,
) -> Tuple[List[PerformanceRecord], IngestReport]:
    mapping = mapping or DEFAULT_STATS_MAPPING
    return rows_to_records([StatRow.from_mapping(row, mapping) for row in rows])


def load_stats_csv(
    path: Path,
    *,
    mapping: Mapping[str, str] | None = None,
) -> Tuple[List[PerformanceRecord], IngestReport]:
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        return records_from_rows(list(reader), mapping=mapping)


def registry_rows_to_players(
    rows: Sequence[RegistryRow],
    *,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> List[PricedPlayer]:
    players: List[PricedPlayer] = []
    for row in rows:
        name = row.raw_name or row.raw_full_name or ""
        if not name:
            logger.warning("Skipping registry row without a player name (team=%r)", row.raw_team)
            continue
        aliases: Tuple[str, ...] = ()
        if row.raw_full_name and row.raw_full_name != name:
            aliases = (row.raw_full_name,)
        active = _parse_flag(row.raw_active)
        players.append(
            PricedPlayer(
                identity=name,
                team=row.raw_team,
                base_price=_parse_price(row.raw_price, policy.default_base_price),
                aliases=aliases,
                position=row.raw_position or "",
                active=active is not False,
            )
        )
    return players


def players_from_rows(
    rows: Iterable[Mapping[str, Any]],
    *,
    mapping: Mapping[str, str] | None = None,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> List[PricedPlayer]:
    mapping = mapping or DEFAULT_REGISTRY_MAPPING
    return registry_rows_to_players(
        [RegistryRow.from_mapping(row, mapping) for row in rows],
        policy=policy,
    )


def load_registry_csv(
    path: Path,
    *,
    mapping: Mapping[str, str] | None = None,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> List[PricedPlayer]:
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        return players_from_rows(list(reader), mapping=mapping, policy=policy)
