import pickle

import pytest

from puckvalue.engine import DistributionCache, valuate_league, valuate_leagues
from puckvalue.engine.service import score_player
from puckvalue.errors import ConfigurationError, InvalidKeeperStateError
from puckvalue.models import KeeperAssignment, LeagueSnapshot, PlayerSnapshot


def _skater(player_id, team_id, positions, **stats):
    return PlayerSnapshot(player_id=player_id, name=player_id.upper(), team_id=team_id, positions=positions, stats=stats)


def _goalie(player_id, team_id, **stats):
    return PlayerSnapshot(player_id=player_id, name=player_id.upper(), team_id=team_id, positions=["G"], stats=stats)


def _snapshot(keepers=None, extra=None, league_id="L1") -> LeagueSnapshot:
    players = [
        _skater("s1", "t1", ["C", "LW"], G=30, A=28, P=58, PPP=15, SOG=210, PM=12, HIT=40, BLK=20, PIM=12, FW=350),
        _skater("s2", "t1", ["D"], G=6, A=20, P=26, PPP=8, SOG=120, PM=4, HIT=90, BLK=110, PIM=30),
        _skater("s3", "t2", ["RW"], G=18, A=14, P=32, PPP=6, SOG=160, PM=-3, HIT=120, BLK=30, PIM=45),
        _skater("s4", "t2", ["LW"], G=9, A=10, P=19, PPP=2, SOG=90, PM=-8, HIT=60, BLK=25, PIM=20),
        _skater("s5", None, ["C"], G=3, A=4, P=7, SOG=40, HIT=15),
        _goalie("g1", "t1", W=20, GAA=2.4, SV=900, SVPCT=0.918, SHO=3, GS=32, L=9, OTL=3),
        _goalie("g2", "t2", W=14, GAA=3.1, SV=800, SVPCT=0.901, SHO=1, GS=30, L=13, OTL=3),
    ]
    if extra:
        players.extend(extra)
    if keepers is None:
        keepers = [
            KeeperAssignment(
                player_id="s1",
                team_id="t1",
                league_id=league_id,
                original_draft_round=14,
                keeper_year_index=2,
                years_remaining=1,
                keeper_round=12,
            )
        ]
    return LeagueSnapshot(league_id=league_id, season="2025", players=players, keepers=keepers)


def test_valuate_league_values_everything():
    valuation = valuate_league(_snapshot())
    assert set(valuation.player_values) == {"s1", "s2", "s3", "s4", "s5", "g1", "g2"}
    for value in valuation.player_values.values():
        low, high = (50.0, 160.0) if value.role == "goalie" else (45.0, 175.0)
        assert low <= value.base_value <= high
    assert valuation.player_values["g1"].role == "goalie"
    assert sorted(valuation.pick_values) == list(range(1, 17))
    assert len(valuation.pick_records()) == 16
    assert set(valuation.team_summaries) == {"t1", "t2"}
    assert set(valuation.narratives) == {"t1", "t2"}


def test_keeper_trade_value():
    valuation = valuate_league(_snapshot())
    keeper = valuation.keeper_valuations["s1"]
    assert valuation.trade_value("s1") == pytest.approx(keeper.trade_value)
    assert keeper.trade_value >= keeper.base_value
    assert valuation.trade_value("s2") == pytest.approx(valuation.player_values["s2"].base_value)
    assert valuation.team_grades["t1"]["keeper"].reason.startswith("1 keepers with")
    assert valuation.team_grades["t2"]["keeper"].reason == "0 keepers with +0 total surplus"


def test_final_year_keeper_not_counted_in_grade():
    keepers = [
        KeeperAssignment(player_id="s3", team_id="t2", league_id="L1", original_draft_round=6, years_remaining=0)
    ]
    valuation = valuate_league(_snapshot(keepers=keepers))
    assert "s3" in valuation.keeper_valuations
    assert valuation.team_grades["t2"]["keeper"].reason == "0 keepers with +0 total surplus"


def test_recommendations_come_from_other_teams():
    valuation = valuate_league(_snapshot())
    for team_id in ("t1", "t2"):
        for rec in valuation.recommendations_for(team_id, limit=10):
            assert rec.team_id not in (team_id, None)
    with pytest.raises(KeyError):
        valuation.recommendations_for("nope")


def test_unknown_stat_fails_fast():
    extra = [_skater("s9", "t2", ["C"], TAKEAWAYS=12)]
    with pytest.raises(ConfigurationError) as excinfo:
        valuate_league(_snapshot(extra=extra))
    assert excinfo.value.category == "TAKEAWAYS"


def test_invalid_keeper_fails_fast():
    keepers = [
        KeeperAssignment(
            player_id="s2", team_id="t1", league_id="L1", original_draft_round=12, keeper_round=9
        )
    ]
    with pytest.raises(InvalidKeeperStateError):
        valuate_league(_snapshot(keepers=keepers))


def test_distribution_cache_reused_per_league_season():
    cache = DistributionCache()
    first = valuate_league(_snapshot(), cache=cache)
    second = valuate_league(_snapshot(), cache=cache)
    assert len(cache) == 1
    assert ("L1", "2025") in cache
    assert second.distributions is first.distributions
    cache.invalidate("L1", "2025")
    assert len(cache) == 0


def test_goalie_games_started_falls_back_to_games_played():
    valuation = valuate_league(_snapshot())
    goalie = PlayerSnapshot(player_id="g9", team_id="t1", positions=["G"], stats={"GP": 0, "W": 30})
    assert score_player(goalie, valuation.distributions) == pytest.approx(50.0)


def test_valuate_leagues_sequential():
    results = valuate_leagues([_snapshot(league_id="L1"), _snapshot(league_id="L2")], processes=1)
    assert [result.league_id for result in results] == ["L1", "L2"]


def test_errors_survive_pickling():
    error = pickle.loads(pickle.dumps(ConfigurationError("XYZ", "no category definition")))
    assert error.category == "XYZ"
    assert str(error) == "Category XYZ: no category definition"


def test_valuate_leagues_in_processes():
    snapshots = [_snapshot(league_id="L1"), _snapshot(league_id="L2")]
    results = valuate_leagues(snapshots, processes=2)
    assert [result.league_id for result in results] == ["L1", "L2"]
    sequential = valuate_leagues(snapshots, processes=1)
    assert results[0].player_values["s1"].base_value == pytest.approx(sequential[0].player_values["s1"].base_value)


def test_valuate_leagues_in_processes_reraises_structured_error():
    extra = [_skater("s9", "t2", ["C"], TAKEAWAYS=12)]
    snapshots = [_snapshot(league_id="L1"), _snapshot(league_id="L2", extra=extra)]
    with pytest.raises(ConfigurationError) as excinfo:
        valuate_leagues(snapshots, processes=2)
    assert excinfo.value.category == "TAKEAWAYS"
