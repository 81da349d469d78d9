from puckvalue.engine import valuate_league
from puckvalue.models import KeeperAssignment, LeagueSnapshot, PlayerSnapshot
from puckvalue.persistence import ValuationStore


def _valuation(league_id: str = "L1"):
    players = [
        PlayerSnapshot(player_id="s1", name="Alpha", team_id="t1", positions=["C"], stats={"G": 30, "A": 20, "HIT": 40}),
        PlayerSnapshot(player_id="s2", name="Bravo", team_id="t2", positions=["D"], stats={"G": 5, "A": 25, "HIT": 90}),
        PlayerSnapshot(player_id="g1", name="Goalie", team_id="t1", positions=["G"], stats={"W": 20, "GAA": 2.5, "GS": 30}),
    ]
    keepers = [KeeperAssignment(player_id="s1", team_id="t1", league_id=league_id, original_draft_round=9, years_remaining=2)]
    snapshot = LeagueSnapshot(league_id=league_id, season="2025", players=players, keepers=keepers)
    return valuate_league(snapshot)


def test_store_round_trip(tmp_path, monkeypatch):
    monkeypatch.setenv("PUCKVALUE_DB_PATH", str(tmp_path / "runs.sqlite"))
    store = ValuationStore(tmp_path / "ignored.sqlite")
    valuation = _valuation()

    record = store.save_valuation(valuation, request={"league_id": "L1"})
    assert record.league_id == "L1"
    assert record.season == "2025"
    assert record.request == {"league_id": "L1"}
    assert len(record.picks) == 16
    assert set(record.teams) == {"t1", "t2"}
    assert record.teams["t1"]["grades"]["keeper"]["letter"]
    assert record.snapshot["keepers"][0]["player_id"] == "s1"

    players = {row["player_id"]: row for row in record.players}
    assert players["s1"]["keeper"]["tier"]
    assert players["s1"]["trade_value"] == valuation.trade_value("s1")
    assert players["g1"]["role"] == "goalie"

    fetched = store.get_run(record.run_id)
    assert fetched is not None
    assert fetched.players == record.players


def test_list_and_delete_runs(tmp_path, monkeypatch):
    monkeypatch.setenv("PUCKVALUE_DB_PATH", str(tmp_path / "runs.sqlite"))
    store = ValuationStore(tmp_path / "ignored.sqlite")
    first = store.save_valuation(_valuation("L1"), run_id="first")
    store.save_valuation(_valuation("L2"), run_id="second")

    assert {run.run_id for run in store.list_runs()} == {"first", "second"}
    assert [run.run_id for run in store.list_runs(league_id="L1")] == ["first"]
    assert len(store.list_runs(limit=1)) == 1

    assert store.delete_run(first.run_id) is True
    assert store.delete_run(first.run_id) is False
    assert store.get_run("first") is None
