import json

import pytest
from httpx import ASGITransport, AsyncClient

from pricetrack.api import create_app


@pytest.fixture
async def client():
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


def _sample_stats() -> str:
    return """playerName,team,season,round,quarter,fantasyPoints
Tom Wilson,Greenvale,2024,1,Total,40
Tom Wilson,Greenvale,2024,1,Q1,9
Tom Wilson,Greenvale,2024,2,Total,60
Tom Wilson,Greenvale,2024,3,Total,80
Tom Wilson,Greenvale,2024,4,Total,20
Mike Johnson,East Keilor,2024,1,Total,80
Mike Johnson,East Keilor,2024,2,Total,80
Mike Johnson,East Keilor,2024,3,Total,80
Chris Brown,Strathmore,2024,1,Total,20
Chris Brown,Strathmore,2024,2,Total,20
Chris Brown,Strathmore,2024,3,Total,20
Rookie Ray,Keilor,2024,1,Total,90
Rookie Ray,Keilor,2024,2,Total,-4
"""


def _sample_registry() -> str:
    return """playerName,fullName,currentTeam,position,price,active
Tom Wilson,,Greenvale,Defender,100000,true
Mike Johnson,,East Keilor,Midfielder,100000,true
Chris Brown,,Strathmore,Ruck,500000,true
Rookie Ray,,Keilor,Forward,200000,true
Old Timer,,Keilor,Forward,200000,false
"""


def _files() -> dict[str, tuple[str, str, str]]:
    return {
        "stats": ("stats.csv", _sample_stats(), "text/csv"),
        "registry": ("registry.csv", _sample_registry(), "text/csv"),
    }


@pytest.mark.anyio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.anyio
async def test_valuations_endpoint(client: AsyncClient):
    resp = await client.post("/valuations", files=_files())
    assert resp.status_code == 200
    payload = resp.json()

    assert payload["report"]["partial_period_rows"] == 1
    assert len(payload["report"]["malformed_rows"]) == 1
    players = [v["player"] for v in payload["valuations"]]
    assert players == ["Mike Johnson", "Tom Wilson", "Chris Brown"]
    tom = payload["valuations"][1]
    assert tom["price"] == 150_000
    assert tom["new_price"] == 179_167
    assert tom["market_value"] == 266_667
    assert tom["rolling_average"] == pytest.approx(53.3)
    assert tom["value_rating"] == "fair"
    assert tom["trajectory"] == []

    reasons = {e["player"]: e["reason"] for e in payload["exclusions"]}
    assert reasons == {"Rookie Ray": "ineligible", "Old Timer": "inactive"}
    assert payload["summary"]["rating_counts"] == {"good": 1, "fair": 1, "poor": 1}


@pytest.mark.anyio
async def test_valuations_with_filters_and_trajectory(client: AsyncClient):
    data = {
        "valuation_request": json.dumps(
            {"team": "greenvale", "include_trajectory": True, "sort_by": "name", "sort_direction": "asc"}
        ),
    }
    resp = await client.post("/valuations", files=_files(), data=data)
    assert resp.status_code == 200
    valuations = resp.json()["valuations"]

    assert [v["player"] for v in valuations] == ["Tom Wilson"]
    trajectory = valuations[0]["trajectory"]
    assert [p["price_after"] for p in trajectory] == [100_000, 100_000, 150_000, 179_167]
    assert [p["phase"] for p in trajectory] == ["awaiting-data", "awaiting-data", "smoothing", "smoothing"]


@pytest.mark.anyio
async def test_valuations_policy_overrides(client: AsyncClient):
    data = {"valuation_request": json.dumps({"overrides": {"magic_number": 10000}})}
    resp = await client.post("/valuations", files=_files(), data=data)
    assert resp.status_code == 200
    mike = next(v for v in resp.json()["valuations"] if v["player"] == "Mike Johnson")
    # 0.75 * 100000 + 0.25 * (10000 * 80)
    assert mike["new_price"] == 275_000


@pytest.mark.anyio
async def test_valuations_rejects_bad_requests(client: AsyncClient):
    resp = await client.post(
        "/valuations", files=_files(), data={"valuation_request": json.dumps({"policy": "AUCTION"})}
    )
    assert resp.status_code == 400

    resp = await client.post("/valuations", files=_files(), data={"valuation_request": "{not json"})
    assert resp.status_code == 400

    resp = await client.post("/valuations", files=_files(), data={"stats_mapping": "{oops"})
    assert resp.status_code == 400

    files = _files()
    files["stats"] = ("stats.csv", "", "text/csv")
    resp = await client.post("/valuations", files=files)
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_valuations_export_csv(client: AsyncClient):
    resp = await client.post("/valuations/export.csv", files=_files())
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.strip().splitlines()
    assert lines[0].startswith("player,team,position")
    assert len(lines) == 4


def _trajectory_body(scores, **extra):
    body = {
        "player": {"identity": "Tom Wilson", "team": "Greenvale", "base_price": 100_000},
        "records": [
            {"player_identity": "tom wilson", "team": "GREENVALE", "season": 2024, "round": rnd, "quarter": "Total", "score": score}
            for rnd, score in enumerate(scores, start=1)
        ],
    }
    body.update(extra)
    return body


@pytest.mark.anyio
async def test_trajectory_endpoint(client: AsyncClient):
    resp = await client.post("/trajectory", json=_trajectory_body([40, 60, 80, 20]))
    assert resp.status_code == 200
    payload = resp.json()

    assert payload["eligible"] is True
    assert payload["current_price"] == 179_167
    assert [p["rolling_average"] for p in payload["positions"][:3]] == [40, 50, 60]
    assert payload["positions"][2]["market_value"] == pytest.approx(300_000)


@pytest.mark.anyio
async def test_trajectory_ineligible(client: AsyncClient):
    resp = await client.post("/trajectory", json=_trajectory_body([40, 60]))
    assert resp.status_code == 200
    payload = resp.json()

    assert payload["eligible"] is False
    assert payload["games_played"] == 2
    assert payload["positions"] == []
    assert payload["current_price"] is None
    assert "3 required" in payload["reason"]


@pytest.mark.anyio
async def test_trajectory_reports_malformed_and_text_rounds(client: AsyncClient):
    body = _trajectory_body([40, 60, 80])
    body["records"].append(
        {"player_identity": "Tom Wilson", "team": "Greenvale", "season": 2024, "round": "Grand Final", "score": 20}
    )
    body["records"].append({"player_identity": "Tom Wilson", "team": "Greenvale", "season": 2024, "round": 9})
    resp = await client.post("/trajectory", json=body)
    assert resp.status_code == 200
    payload = resp.json()

    assert payload["current_price"] == 179_167
    assert payload["positions"][-1]["round"] == "Grand Final"
    assert len(payload["report"]["malformed_rows"]) == 1
    assert len(payload["diagnostics"]) == 1


@pytest.mark.anyio
async def test_trajectory_apply(client: AsyncClient):
    body = {
        "state": {"positions": 3, "price": 150_000, "recent_scores": [40, 60, 80]},
        "record": {"player_identity": "Tom Wilson", "team": "Greenvale", "season": 2024, "round": 4, "score": 20},
    }
    resp = await client.post("/trajectory/apply", json=body)
    assert resp.status_code == 200
    payload = resp.json()

    assert payload["state"]["price"] == 179_167
    assert payload["state"]["positions"] == 4
    assert payload["state"]["recent_scores"] == [60, 80, 20]
    assert payload["position"]["price_change"] == 29_167


@pytest.mark.anyio
async def test_trajectory_apply_rejects_partial_and_malformed(client: AsyncClient):
    base_state = {"positions": 3, "price": 150_000, "recent_scores": [40, 60, 80]}
    partial = {"player_identity": "Tom Wilson", "team": "Greenvale", "season": 2024, "round": 4, "quarter": "Q3", "score": 5}
    resp = await client.post("/trajectory/apply", json={"state": base_state, "record": partial})
    assert resp.status_code == 400

    missing = {"player_identity": "Tom Wilson", "team": "Greenvale", "season": 2024, "round": 4}
    resp = await client.post("/trajectory/apply", json={"state": base_state, "record": missing})
    assert resp.status_code == 400
    assert "missing" in resp.json()["detail"]


@pytest.mark.anyio
async def test_trajectory_apply_rejects_inconsistent_state(client: AsyncClient):
    record = {"player_identity": "Tom Wilson", "team": "Greenvale", "season": 2024, "round": 11, "score": 80}
    state = {"positions": 10, "price": 100_000, "recent_scores": []}
    resp = await client.post("/trajectory/apply", json={"state": state, "record": record})
    assert resp.status_code == 400
    assert "expected 3" in resp.json()["detail"]
