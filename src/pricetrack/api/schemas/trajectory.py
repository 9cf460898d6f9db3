from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from .valuation import IngestReportResponse, PolicyOverrides, TimelinePositionResponse


class RecordPayload(BaseModel):
    player_identity: str | None = None
    team: str | None = None
    season: int | str | None = None
    round: int | str | None = None
    quarter: str | None = None
    score: float | str | None = None


class PlayerPayload(BaseModel):
    identity: str = Field(..., min_length=1)
    team: str
    base_price: int = Field(..., ge=0)
    aliases: List[str] = Field(default_factory=list)
    position: str = ""


class TrajectoryRequest(BaseModel):
    player: PlayerPayload
    records: List[RecordPayload]
    policy: str = Field(default="DEFAULT")
    overrides: PolicyOverrides = Field(default_factory=PolicyOverrides)


class TrajectoryResponse(BaseModel):
    player: str
    team: str
    eligible: bool
    reason: str | None = None
    games_played: int
    base_price: int
    current_price: int | None = None
    positions: List[TimelinePositionResponse] = Field(default_factory=list)
    diagnostics: List[str] = Field(default_factory=list)
    report: IngestReportResponse


class PriceStatePayload(BaseModel):
    positions: int = Field(..., ge=0)
    price: int = Field(..., ge=0)
    recent_scores: List[float] = Field(default_factory=list)


class ApplyLatestRequest(BaseModel):
    state: PriceStatePayload
    record: RecordPayload
    policy: str = Field(default="DEFAULT")
    overrides: PolicyOverrides = Field(default_factory=PolicyOverrides)


class ApplyLatestResponse(BaseModel):
    state: PriceStatePayload
    position: TimelinePositionResponse
