"""REST API for the price trajectory engine."""

from __future__ import annotations

import csv
import json
from io import StringIO
from typing import Any, Mapping

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError

from pricetrack.api.schemas import (
    ApplyLatestRequest,
    ApplyLatestResponse,
    BoardSummaryResponse,
    ExclusionResponse,
    IngestReportResponse,
    PlayerValuationResponse,
    PolicyOverrides,
    PriceStatePayload,
    RecordPayload,
    TimelinePositionResponse,
    TrajectoryRequest,
    TrajectoryResponse,
    ValuationBatchResponse,
    ValuationRequest,
)
from pricetrack.board import BoardCriteria, filter_board, export_valuations_to_csv
from pricetrack.board.filtering import BoardResult
from pricetrack.config import PricingPolicy, get_policy, policy_from_env
from pricetrack.engine import (
    AmbiguousOrdering,
    IneligiblePlayer,
    apply_latest,
    assemble,
    filter_records,
    round_currency,
    sequence_records,
)
from pricetrack.ingest import (
    DEFAULT_REGISTRY_MAPPING,
    DEFAULT_STATS_MAPPING,
    IngestReport,
    players_from_rows,
    records_from_rows,
)
from pricetrack.models import PriceState, PricedPlayer, RecordScope, TimelinePosition
from pricetrack.valuation import ValuationBatch, value_players


RECORD_PAYLOAD_MAPPING = {
    "player_name": "player_identity",
    "team": "team",
    "season": "season",
    "round": "round",
    "quarter": "quarter",
    "score": "score",
}


def _parse_mapping(mapping_str: str | None) -> dict[str, str]:
    if not mapping_str:
        return {}
    try:
        return json.loads(mapping_str)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid mapping JSON: {exc}") from exc


async def _read_csv(upload: UploadFile, label: str) -> list[dict[str, str]]:
    contents = await upload.read()
    if not contents:
        raise HTTPException(status_code=400, detail=f"{label} file is empty")
    try:
        text = contents.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"{label} file is not UTF-8: {exc}") from exc
    return list(csv.DictReader(StringIO(text)))


def _resolve_policy(name: str, overrides: PolicyOverrides) -> PricingPolicy:
    try:
        base = policy_from_env(get_policy(name))
        return base.with_overrides(**overrides.model_dump())
    except (KeyError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc).strip("'\"")) from exc


def _report_to_response(report: IngestReport) -> IngestReportResponse:
    return IngestReportResponse(
        total_rows=report.total_rows,
        accepted_rows=report.accepted_rows,
        partial_period_rows=report.partial_period_rows,
        malformed_rows=[issue.message for issue in report.malformed],
    )


def _position_to_response(position: TimelinePosition) -> TimelinePositionResponse:
    return TimelinePositionResponse(
        index=position.index,
        season=position.record.season,
        round=position.record.round,
        score=position.record.score,
        window_size=position.window_size,
        rolling_average=position.rolling_average,
        market_value=position.market_value,
        price_before=position.price_before,
        price_after=position.price_after,
        price_change=position.price_change,
        phase=position.phase,
    )


def _batch_to_response(
    batch: ValuationBatch,
    board: BoardResult,
    report: IngestReport,
) -> ValuationBatchResponse:
    valuations = [
        PlayerValuationResponse(
            rank=row.rank,
            player=row.valuation.player.identity,
            team=row.valuation.player.team,
            position=row.valuation.player.position,
            games_played=row.valuation.games_played,
            rolling_average=round(row.valuation.rolling_average, 1),
            market_value=round_currency(row.valuation.market_value),
            price=row.valuation.price_before,
            new_price=row.valuation.new_price,
            price_change=row.valuation.price_change,
            value_rating=row.valuation.value_rating,
            trajectory=[_position_to_response(p) for p in row.valuation.trajectory],
        )
        for row in board.rows
    ]
    summary = board.summary
    return ValuationBatchResponse(
        report=_report_to_response(report),
        summary=BoardSummaryResponse(
            available_players=summary.available_players,
            selected_players=summary.selected_players,
            price_change_mean=summary.price_change_mean,
            price_change_median=summary.price_change_median,
            new_price_mean=summary.new_price_mean,
            rating_counts=summary.rating_counts,
        ),
        valuations=valuations,
        exclusions=[
            ExclusionResponse(
                player=exclusion.identity,
                team=exclusion.team,
                reason=exclusion.reason,
                games_played=exclusion.games_played,
            )
            for exclusion in batch.exclusions
        ],
        diagnostics=batch.diagnostics,
    )


def _records_from_payloads(payloads: list[RecordPayload]):
    rows: list[Mapping[str, Any]] = [payload.model_dump() for payload in payloads]
    return records_from_rows(rows, mapping=RECORD_PAYLOAD_MAPPING)


def create_app() -> FastAPI:
    app = FastAPI(title="pricetrack")
    default_stats_mapping = DEFAULT_STATS_MAPPING.copy()
    default_registry_mapping = DEFAULT_REGISTRY_MAPPING.copy()

    async def _run_valuations(
        stats: UploadFile,
        registry: UploadFile,
        stats_mapping: str | None,
        registry_mapping: str | None,
        valuation_request: str,
    ) -> tuple[ValuationBatch, BoardResult, IngestReport]:
        try:
            request_model = ValuationRequest.model_validate_json(valuation_request or "{}")
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid valuation_request JSON: {exc}") from exc

        policy = _resolve_policy(request_model.policy, request_model.overrides)
        stats_rows = await _read_csv(stats, "stats")
        registry_rows = await _read_csv(registry, "registry")
        records, report = records_from_rows(
            stats_rows,
            mapping=default_stats_mapping | _parse_mapping(stats_mapping),
        )
        players = players_from_rows(
            registry_rows,
            mapping=default_registry_mapping | _parse_mapping(registry_mapping),
            policy=policy,
        )
        batch = value_players(
            players,
            records,
            policy=policy,
            parallel_jobs=request_model.parallel_jobs,
            include_trajectory=request_model.include_trajectory,
        )
        criteria = BoardCriteria(
            search=request_model.search,
            team=request_model.team,
            position=request_model.position,
            value_rating=request_model.value_rating,
            min_games=request_model.min_games,
            sort_by=request_model.sort_by,
            sort_direction=request_model.sort_direction,
            limit=request_model.limit,
        )
        return batch, filter_board(batch.valuations, criteria), report

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/valuations", response_model=ValuationBatchResponse)
    async def valuations(
        stats: UploadFile = File(...),
        registry: UploadFile = File(...),
        stats_mapping: str | None = Form(None),
        registry_mapping: str | None = Form(None),
        valuation_request: str = Form("{}"),
    ) -> ValuationBatchResponse:
        batch, board, report = await _run_valuations(
            stats, registry, stats_mapping, registry_mapping, valuation_request
        )
        return _batch_to_response(batch, board, report)

    @app.post("/valuations/export.csv")
    async def valuations_csv(
        stats: UploadFile = File(...),
        registry: UploadFile = File(...),
        stats_mapping: str | None = Form(None),
        registry_mapping: str | None = Form(None),
        valuation_request: str = Form("{}"),
    ) -> Response:
        _, board, _ = await _run_valuations(
            stats, registry, stats_mapping, registry_mapping, valuation_request
        )
        content = export_valuations_to_csv([row.valuation for row in board.rows])
        headers = {"Content-Disposition": 'attachment; filename="valuations.csv"'}
        return Response(content=content, media_type="text/csv", headers=headers)

    @app.post("/trajectory", response_model=TrajectoryResponse)
    async def trajectory(request: TrajectoryRequest) -> TrajectoryResponse:
        policy = _resolve_policy(request.policy, request.overrides)
        player = PricedPlayer(
            identity=request.player.identity,
            team=request.player.team,
            base_price=request.player.base_price,
            aliases=tuple(request.player.aliases),
            position=request.player.position,
        )
        records, report = _records_from_payloads(request.records)
        issues: list[AmbiguousOrdering] = []
        sequence = sequence_records(filter_records(records, player.key), diagnostics=issues)
        diagnostics = [issue.message for issue in issues]
        try:
            positions = assemble(player, sequence, policy)
        except IneligiblePlayer as exc:
            return TrajectoryResponse(
                player=player.identity,
                team=player.team,
                eligible=False,
                reason=exc.message,
                games_played=exc.games,
                base_price=player.base_price,
                diagnostics=diagnostics,
                report=_report_to_response(report),
            )
        return TrajectoryResponse(
            player=player.identity,
            team=player.team,
            eligible=True,
            games_played=len(sequence),
            base_price=player.base_price,
            current_price=positions[-1].price_after,
            positions=[_position_to_response(position) for position in positions],
            diagnostics=diagnostics,
            report=_report_to_response(report),
        )

    @app.post("/trajectory/apply", response_model=ApplyLatestResponse)
    async def trajectory_apply(request: ApplyLatestRequest) -> ApplyLatestResponse:
        policy = _resolve_policy(request.policy, request.overrides)
        records, report = _records_from_payloads([request.record])
        if not records:
            detail = report.malformed[0].reason if report.malformed else "record is invalid"
            raise HTTPException(status_code=400, detail=detail)
        if records[0].scope is not RecordScope.WHOLE_GAME:
            raise HTTPException(status_code=400, detail="only whole-game records move the price")
        state = PriceState(
            positions=request.state.positions,
            price=request.state.price,
            recent_scores=tuple(request.state.recent_scores),
        )
        try:
            next_state, position = apply_latest(state, records[0], policy)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return ApplyLatestResponse(
            state=PriceStatePayload(
                positions=next_state.positions,
                price=next_state.price,
                recent_scores=list(next_state.recent_scores),
            ),
            position=_position_to_response(position),
        )

    return app
