from pathlib import Path

import pytest

from puckvalue.ingest import load_league_snapshot, read_historical_stats, read_keepers, read_stat_rows, rows_to_snapshots

STATS_CSV = """player_id,name,team_id,positions,stat,value
s1,Alpha,t1,C/LW,Goals,30
s1,Alpha,t1,C/LW,Assists,25
s1,Alpha,t1,C/LW,Power Play Points,"1,2"
s1,Alpha,t1,C/LW,Goals,31
g1,Goalie,t2,G,Wins,20
g1,Goalie,t2,G,Save %,0.915
g1,Goalie,t2,G,Games Started,-
s2,Free,,RW,Hits,80
"""


def test_read_stat_rows_from_text():
    rows = read_stat_rows(STATS_CSV)
    assert len(rows) == 8
    assert rows[0].raw_id == "s1"
    assert rows[0].raw_stat == "Goals"
    assert rows[-1].raw_team is None


def test_rows_to_snapshots_resolves_aliases():
    players = {player.player_id: player for player in rows_to_snapshots(read_stat_rows(STATS_CSV))}
    alpha = players["s1"]
    assert alpha.positions == ["C", "LW"]
    assert alpha.stats == {"G": 31.0, "A": 25.0, "PPP": 12.0}
    goalie = players["g1"]
    assert goalie.role == "goalie"
    assert goalie.stats["SVPCT"] == pytest.approx(0.915)
    assert goalie.stats["GS"] == 0.0
    assert players["s2"].team_id is None


def test_custom_column_mapping():
    text = "Key,Who,Club,Pos,Category,Amount\nx1,Xavier,t9,D,Blocks,55\n"
    mapping = {
        "player_id": "Key",
        "name": "Who",
        "team_id": "Club",
        "positions": "Pos",
        "stat": "Category",
        "value": "Amount",
    }
    players = rows_to_snapshots(read_stat_rows(text, mapping=mapping))
    assert players[0].player_id == "x1"
    assert players[0].stats == {"BLK": 55.0}


def test_non_numeric_value_raises():
    text = "player_id,name,team_id,positions,stat,value\ns1,Alpha,t1,C,Goals,lots\n"
    with pytest.raises(ValueError):
        rows_to_snapshots(read_stat_rows(text))


@pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity", "1e400"])
def test_non_finite_value_raises(raw):
    text = f"player_id,name,team_id,positions,stat,value\ns1,Alpha,t1,C,Goals,{raw}\n"
    with pytest.raises(ValueError, match="not finite"):
        rows_to_snapshots(read_stat_rows(text))


def test_missing_player_id_raises():
    text = "player_id,name,team_id,positions,stat,value\n,Alpha,t1,C,Goals,3\n"
    with pytest.raises(ValueError):
        rows_to_snapshots(read_stat_rows(text))


def test_historical_weights_last_two_seasons():
    text = """player_id,season,stat,value
s1,2022,Goals,100
s1,2023,Goals,20
s1,2024,Goals,30
s2,2024,Hits,50
"""
    history = read_historical_stats(text)
    assert history["s1"]["G"] == pytest.approx(26.0)
    assert history["s2"]["HIT"] == pytest.approx(50.0)


def test_read_keepers_defaults_years_remaining():
    text = """player_id,team_id,original_draft_round,keeper_year_index,years_remaining,keeper_round
s1,t1,14,1,,12
s2,t1,5,0,3,
"""
    keepers = read_keepers(text, league_id="L1")
    assert keepers[0].years_remaining == 2
    assert keepers[0].keeper_round == 12
    assert keepers[1].keeper_round is None
    assert all(keeper.league_id == "L1" for keeper in keepers)


def test_load_league_snapshot_from_paths(tmp_path: Path):
    stats_path = tmp_path / "stats.csv"
    stats_path.write_text(STATS_CSV, encoding="utf-8")
    history_path = tmp_path / "history.csv"
    history_path.write_text("player_id,season,stat,value\ns1,2024,Goals,40\n", encoding="utf-8")
    keepers_path = tmp_path / "keepers.csv"
    keepers_path.write_text("player_id,team_id,original_draft_round,keeper_year_index\ns1,t1,14,0\n", encoding="utf-8")

    snapshot = load_league_snapshot(
        stats_path,
        league_id="L1",
        season="2025",
        keepers=keepers_path,
        historical=history_path,
    )
    assert snapshot.league_id == "L1"
    assert len(snapshot.players) == 3
    alpha = next(player for player in snapshot.players if player.player_id == "s1")
    assert alpha.historical == {"G": 40.0}
    assert snapshot.keepers[0].years_remaining == 3
    assert set(snapshot.rosters()) == {"t1", "t2"}
