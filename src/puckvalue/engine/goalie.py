"""Goalie valuation with sample-size and workload adjustments."""

from __future__ import annotations

import math
from typing import Mapping, Optional

from puckvalue.config.categories import CategoryDefinition, default_definitions
from puckvalue.config.tuning import DEFAULT_CONFIG, ValuationConfig
from puckvalue.engine.skater import Distributions, blend_values, weighted_terms


def goalie_reliability(games_started: float, config: ValuationConfig = DEFAULT_CONFIG) -> float:
    """``sqrt(min(1, gs / 5))``; 1.0 at or above the baseline start count."""

    if games_started <= 0:
        return 0.0
    return math.sqrt(min(1.0, games_started / config.goalie_baseline_starts))


def goalie_workload(decisions: float, config: ValuationConfig = DEFAULT_CONFIG) -> float:
    decisions = max(0.0, decisions)
    return min(
        config.goalie_workload_cap,
        1.0 + decisions / config.goalie_team_games * config.goalie_workload_slope,
    )


def goalie_decisions(stats: Mapping[str, float]) -> float:
    return float(stats.get("W", 0.0)) + float(stats.get("L", 0.0)) + float(stats.get("OTL", 0.0))


def score_goalie(
    stats: Mapping[str, float],
    distribution: Distributions,
    games_started: float,
    decisions: float,
    historical: Optional[Mapping[str, float]] = None,
    *,
    config: ValuationConfig = DEFAULT_CONFIG,
    definitions: Optional[Mapping[str, CategoryDefinition]] = None,
) -> float:
    """Score a goalie into ``[50, 160]``.

    The z-score value is clamped to 155 before the reliability and workload
    multipliers, so only usage can push a goalie above it.
    """

    definitions = definitions if definitions is not None else default_definitions()
    codes = tuple(code for code, definition in definitions.items() if definition.role == "goalie")
    if config.blend_stage == "weighted" and historical:
        current = weighted_terms(blend_values(stats, None, codes, config), distribution, definitions, "goalie")
        history_line = {code: historical.get(code, stats.get(code, 0.0)) for code in codes}
        past = weighted_terms(history_line, distribution, definitions, "goalie")
        weighted_sum = config.current_weight * sum(term for _, term in current.values()) + (
            config.historical_weight * sum(term for _, term in past.values())
        )
    else:
        values = blend_values(stats, historical, codes, config)
        weighted_sum = sum(term for _, term in weighted_terms(values, distribution, definitions, "goalie").values())

    raw = weighted_sum * config.z_scale + config.z_offset
    raw = max(config.goalie_min, min(config.goalie_pre_multiplier_max, raw))
    value = raw * goalie_reliability(games_started, config) * goalie_workload(decisions, config)
    return max(config.goalie_min, min(config.goalie_max, value))
