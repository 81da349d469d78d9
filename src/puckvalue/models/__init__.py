"""Canonical records shared across ingestion, engine and API layers."""

from .keeper import DraftPickValue, KeeperAssignment, KeeperValuation
from .player import (
    VALUE_BOUNDS,
    CategoryStat,
    LeagueCategoryDistribution,
    LeagueSnapshot,
    PlayerRole,
    PlayerSnapshot,
    PlayerValue,
)
from .team import Recommendation, TeamCategorySummary, TeamGrade, TeamNarrative

__all__ = [
    "CategoryStat",
    "DraftPickValue",
    "KeeperAssignment",
    "KeeperValuation",
    "LeagueCategoryDistribution",
    "LeagueSnapshot",
    "PlayerRole",
    "PlayerSnapshot",
    "PlayerValue",
    "Recommendation",
    "TeamCategorySummary",
    "TeamGrade",
    "TeamNarrative",
    "VALUE_BOUNDS",
]
