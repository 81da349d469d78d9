"""Valuation and analytics engine."""

from .distribution import aggregate, role_stats, z_score
from .goalie import goalie_decisions, goalie_reliability, goalie_workload, score_goalie
from .keeper import (
    can_move_to_round,
    keeper_round_for,
    keeper_value,
    round_tier,
    validate_keeper_assignment,
    value_tier,
)
from .picks import pick_records, valuate_picks
from .recommend import recommend, weak_categories
from .service import DistributionCache, LeagueValuation, valuate_league, valuate_leagues
from .skater import SkaterScore, score_skater, score_skater_breakdown
from .team import (
    TradePartner,
    find_trade_partners,
    team_category_summary,
    team_category_totals,
    team_grades,
    team_narrative,
)
from .trade import TradeAsset, TradeEvaluation, evaluate_trade, trade_confidence, trade_score

__all__ = [
    "DistributionCache",
    "LeagueValuation",
    "SkaterScore",
    "TradeAsset",
    "TradeEvaluation",
    "TradePartner",
    "aggregate",
    "can_move_to_round",
    "evaluate_trade",
    "find_trade_partners",
    "goalie_decisions",
    "goalie_reliability",
    "goalie_workload",
    "keeper_round_for",
    "keeper_value",
    "pick_records",
    "recommend",
    "role_stats",
    "round_tier",
    "score_goalie",
    "score_skater",
    "score_skater_breakdown",
    "team_category_summary",
    "team_category_totals",
    "team_grades",
    "team_narrative",
    "trade_confidence",
    "trade_score",
    "valuate_league",
    "valuate_leagues",
    "valuate_picks",
    "validate_keeper_assignment",
    "value_tier",
    "weak_categories",
    "z_score",
]
