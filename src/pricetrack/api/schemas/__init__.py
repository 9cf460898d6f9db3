"""Pydantic models for API I/O."""

from .valuation import (
    BoardSummaryResponse,
    ExclusionResponse,
    IngestReportResponse,
    PlayerValuationResponse,
    PolicyOverrides,
    TimelinePositionResponse,
    ValuationBatchResponse,
    ValuationRequest,
)
from .trajectory import (
    ApplyLatestRequest,
    ApplyLatestResponse,
    PlayerPayload,
    PriceStatePayload,
    RecordPayload,
    TrajectoryRequest,
    TrajectoryResponse,
)

__all__ = [
    "ApplyLatestRequest",
    "ApplyLatestResponse",
    "BoardSummaryResponse",
    "ExclusionResponse",
    "IngestReportResponse",
    "PlayerPayload",
    "PlayerValuationResponse",
    "PolicyOverrides",
    "PriceStatePayload",
    "RecordPayload",
    "TimelinePositionResponse",
    "TrajectoryRequest",
    "TrajectoryResponse",
    "ValuationBatchResponse",
    "ValuationRequest",
]
