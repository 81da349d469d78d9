"""Configuration helpers for stat categories and tuned constants."""

from .categories import (
    AUXILIARY_STATS,
    GOALIE_CATEGORIES,
    SKATER_CATEGORIES,
    TEAM_CATEGORIES,
    TEAM_SKATER_CATEGORIES,
    CategoryDefinition,
    default_definitions,
    get_category,
    iter_categories,
    resolve_stat_code,
)
from .tuning import DEFAULT_CONFIG, ValuationConfig, load_config

__all__ = [
    "AUXILIARY_STATS",
    "CategoryDefinition",
    "DEFAULT_CONFIG",
    "GOALIE_CATEGORIES",
    "SKATER_CATEGORIES",
    "TEAM_CATEGORIES",
    "TEAM_SKATER_CATEGORIES",
    "ValuationConfig",
    "default_definitions",
    "get_category",
    "iter_categories",
    "load_config",
    "resolve_stat_code",
]
