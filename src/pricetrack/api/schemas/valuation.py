from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field


class PolicyOverrides(BaseModel):
    magic_number: float | None = Field(default=None, ge=0.0)
    smoothing_weight_old: float | None = Field(default=None, ge=0.0, le=1.0)
    smoothing_weight_new: float | None = Field(default=None, ge=0.0, le=1.0)
    min_qualifying_games: int | None = Field(default=None, ge=1)
    window_size: int | None = Field(default=None, ge=1, le=20)
    round_market_value: bool | None = None
    value_rating_threshold: int | None = Field(default=None, ge=0)
    default_base_price: int | None = Field(default=None, ge=0)


class ValuationRequest(BaseModel):
    policy: str = Field(default="DEFAULT")
    overrides: PolicyOverrides = Field(default_factory=PolicyOverrides)
    parallel_jobs: int | None = Field(default=None, ge=1, le=32)
    include_trajectory: bool = False
    search: str | None = None
    team: str | None = None
    position: str | None = None
    value_rating: Literal["good", "fair", "poor"] | None = None
    min_games: int | None = Field(default=None, ge=0)
    sort_by: Literal[
        "price_change",
        "new_price",
        "price",
        "rolling_average",
        "market_value",
        "games_played",
        "name",
        "team",
    ] = "price_change"
    sort_direction: Literal["asc", "desc"] = "desc"
    limit: int | None = Field(default=None, ge=1, le=5000)


class TimelinePositionResponse(BaseModel):
    index: int
    season: int
    round: int | str
    score: float
    window_size: int
    rolling_average: float
    market_value: float
    price_before: int
    price_after: int
    price_change: int
    phase: Literal["awaiting-data", "smoothing"]


class PlayerValuationResponse(BaseModel):
    rank: int
    player: str
    team: str
    position: str
    games_played: int
    rolling_average: float
    market_value: int
    price: int
    new_price: int
    price_change: int
    value_rating: Literal["good", "fair", "poor"]
    trajectory: List[TimelinePositionResponse] = Field(default_factory=list)


class ExclusionResponse(BaseModel):
    player: str
    team: str
    reason: str
    games_played: int = 0


class IngestReportResponse(BaseModel):
    total_rows: int
    accepted_rows: int
    partial_period_rows: int
    malformed_rows: List[str] = Field(default_factory=list)


class BoardSummaryResponse(BaseModel):
    available_players: int
    selected_players: int
    price_change_mean: float | None
    price_change_median: float | None
    new_price_mean: float | None
    rating_counts: dict[str, int]


class ValuationBatchResponse(BaseModel):
    report: IngestReportResponse
    summary: BoardSummaryResponse
    valuations: List[PlayerValuationResponse]
    exclusions: List[ExclusionResponse]
    diagnostics: List[str] = Field(default_factory=list)
