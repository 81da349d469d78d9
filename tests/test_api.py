import csv
from io import StringIO

import pytest
from httpx import ASGITransport, AsyncClient

from puckvalue.api import create_app


@pytest.fixture(scope="module")
async def client():
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        async_client.app = app
        yield async_client


def _sample_stats() -> str:
    players = [
        ("s1", "Alpha Centre", "t1", "C/LW", {"Goals": 30, "Assists": 28, "Points": 58, "Shots": 210, "Hits": 40, "Blocks": 20}),
        ("s2", "Bravo Defence", "t1", "D", {"Goals": 6, "Assists": 20, "Points": 26, "Shots": 120, "Hits": 90, "Blocks": 110}),
        ("s3", "Charlie Wing", "t2", "RW", {"Goals": 18, "Assists": 14, "Points": 32, "Shots": 160, "Hits": 120, "Blocks": 30}),
        ("s4", "Delta Wing", "t2", "LW", {"Goals": 9, "Assists": 10, "Points": 19, "Shots": 90, "Hits": 60, "Blocks": 25}),
        ("s5", "Echo Grinder", "t3", "C", {"Goals": 4, "Assists": 6, "Points": 10, "Shots": 70, "Hits": 180, "Blocks": 60}),
        ("g1", "Foxtrot Goalie", "t1", "G", {"Wins": 20, "GAA": 2.4, "Saves": 900, "Save %": 0.918, "Shutouts": 3, "Games Started": 32}),
        ("g2", "Golf Goalie", "t2", "G", {"Wins": 14, "GAA": 3.1, "Saves": 800, "Save %": 0.901, "Shutouts": 1, "Games Started": 30}),
    ]
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["player_id", "name", "team_id", "positions", "stat", "value"])
    for player_id, name, team_id, positions, stats in players:
        for stat, value in stats.items():
            writer.writerow([player_id, name, team_id, positions, stat, value])
    return buffer.getvalue()


def _sample_keepers() -> str:
    return """player_id,team_id,original_draft_round,keeper_year_index,years_remaining,keeper_round
s1,t1,14,2,1,12
"""


async def _create_run(client: AsyncClient) -> dict:
    files = {
        "stats": ("stats.csv", _sample_stats(), "text/csv"),
        "keepers": ("keepers.csv", _sample_keepers(), "text/csv"),
    }
    resp = await client.post("/valuations", files=files, data={"league_id": "api-league", "season": "2025"})
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.mark.anyio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.anyio
async def test_valuation_endpoint(client: AsyncClient):
    payload = await _create_run(client)
    assert payload["run_id"]
    assert payload["league_id"] == "api-league"
    assert len(payload["players"]) == 7
    assert len(payload["picks"]) == 16
    assert set(payload["teams"]) == {"t1", "t2", "t3"}
    keeper_rows = [player for player in payload["players"] if player["keeper"]]
    assert [row["player_id"] for row in keeper_rows] == ["s1"]
    assert keeper_rows[0]["trade_value"] >= keeper_rows[0]["base_value"]
    trade_values = [player["trade_value"] for player in payload["players"]]
    assert trade_values == sorted(trade_values, reverse=True)

    run_id = payload["run_id"]
    resp = await client.get("/valuations", params={"league_id": "api-league"})
    assert resp.status_code == 200
    assert any(run["run_id"] == run_id and run["players"] == 7 for run in resp.json())

    resp = await client.get(f"/valuations/{run_id}")
    assert resp.status_code == 200
    assert resp.json()["picks"] == payload["picks"]

    store = client.app.state.valuation_store
    record = store.get_run(run_id)
    assert record is not None
    assert record.request["stats_filename"] == "stats.csv"
    assert record.request["keepers_filename"] == "keepers.csv"


@pytest.mark.anyio
async def test_team_dashboard(client: AsyncClient):
    run_id = (await _create_run(client))["run_id"]
    resp = await client.get(f"/valuations/{run_id}/teams/t1")
    assert resp.status_code == 200
    dashboard = resp.json()
    assert dashboard["team_id"] == "t1"
    assert len(dashboard["summary"]) == 15
    assert set(dashboard["grades"]) == {"offense", "goalies", "physical", "depth", "keeper"}
    assert dashboard["grades"]["keeper"]["reason"].startswith("1 keepers with")
    assert dashboard["narrative"]["summary"]
    assert len(dashboard["recommendations"]) <= 3
    for rec in dashboard["recommendations"]:
        assert rec["team_id"] != "t1"

    resp = await client.get(f"/valuations/{run_id}/teams/nope")
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_export_csv(client: AsyncClient):
    run_id = (await _create_run(client))["run_id"]
    resp = await client.get(f"/valuations/{run_id}/export.csv")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(StringIO(resp.text)))
    assert len(rows) == 7
    assert {row["run_id"] for row in rows} == {run_id}
    alpha = next(row for row in rows if row["player_id"] == "s1")
    assert alpha["keeper_tier"]


@pytest.mark.anyio
async def test_trade_evaluate(client: AsyncClient):
    payload = await _create_run(client)
    values = {player["player_id"]: player["trade_value"] for player in payload["players"]}
    picks = {pick["round"]: pick["score"] for pick in payload["picks"]}
    body = {
        "run_id": payload["run_id"],
        "team_id": "t1",
        "give": [{"asset_id": "s2"}],
        "get": [{"asset_id": "s3"}, {"kind": "pick", "asset_id": "round-3"}],
    }
    resp = await client.post("/trades/evaluate", json=body)
    assert resp.status_code == 200, resp.text
    result = resp.json()
    assert result["give_value"] == pytest.approx(values["s2"])
    assert result["get_value"] == pytest.approx(values["s3"] + picks[3])
    assert result["value_gain"] == pytest.approx(result["get_value"] - result["give_value"])
    assert result["confidence"] in {"High", "Medium", "Speculative"}
    assert result["category_swings"]["HIT"] == pytest.approx(30.0)


@pytest.mark.anyio
async def test_trade_evaluate_without_run(client: AsyncClient):
    body = {
        "give": [{"asset_id": "x", "value": 120.0, "stats": {"G": 10}}],
        "get": [{"asset_id": "y", "value": 124.0, "stats": {"G": 14}}],
        "weak_categories": ["G"],
    }
    resp = await client.post("/trades/evaluate", json=body)
    assert resp.status_code == 200
    result = resp.json()
    assert result["category_gain"] == pytest.approx(8.0)
    assert result["score"] == pytest.approx(5.0)


@pytest.mark.anyio
async def test_trade_evaluate_rejects_bad_requests(client: AsyncClient):
    resp = await client.post("/trades/evaluate", json={"give": [], "get": []})
    assert resp.status_code == 400

    payload = await _create_run(client)
    resp = await client.post(
        "/trades/evaluate",
        json={"run_id": payload["run_id"], "give": [{"asset_id": "ghost"}]},
    )
    assert resp.status_code == 400

    resp = await client.post("/trades/evaluate", json={"run_id": "missing", "give": [{"asset_id": "s1"}]})
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_valuation_rejects_bad_input(client: AsyncClient):
    bad_value = "player_id,name,team_id,positions,stat,value\ns1,Alpha,t1,C,Goals,lots\n"
    resp = await client.post(
        "/valuations",
        files={"stats": ("stats.csv", bad_value, "text/csv")},
        data={"league_id": "bad"},
    )
    assert resp.status_code == 400

    for raw in ("nan", "inf", "1e400"):
        non_finite = f"player_id,name,team_id,positions,stat,value\ns1,Alpha,t1,C,Goals,{raw}\n"
        resp = await client.post(
            "/valuations",
            files={"stats": ("stats.csv", non_finite, "text/csv")},
            data={"league_id": "bad"},
        )
        assert resp.status_code == 400
        assert "not finite" in resp.json()["detail"]

    unknown_stat = "player_id,name,team_id,positions,stat,value\ns1,Alpha,t1,C,Takeaways,4\n"
    resp = await client.post(
        "/valuations",
        files={"stats": ("stats.csv", unknown_stat, "text/csv")},
        data={"league_id": "bad"},
    )
    assert resp.status_code == 400
    assert "TAKEAWAYS" in resp.json()["detail"]

    bad_keeper = "player_id,team_id,original_draft_round,keeper_year_index,years_remaining,keeper_round\ns1,t1,12,0,3,9\n"
    resp = await client.post(
        "/valuations",
        files={
            "stats": ("stats.csv", _sample_stats(), "text/csv"),
            "keepers": ("keepers.csv", bad_keeper, "text/csv"),
        },
        data={"league_id": "bad"},
    )
    assert resp.status_code == 400

    resp = await client.post(
        "/valuations",
        files={"stats": ("stats.csv", "", "text/csv")},
        data={"league_id": "bad"},
    )
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_missing_run_returns_404(client: AsyncClient):
    resp = await client.get("/valuations/does-not-exist")
    assert resp.status_code == 404
    resp = await client.get("/valuations/does-not-exist/export.csv")
    assert resp.status_code == 404
