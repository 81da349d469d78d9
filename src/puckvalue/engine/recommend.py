"""Rank trade targets against a team's weak categories."""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from typing import Dict, List, Mapping, Optional, Sequence

from puckvalue.config.categories import TEAM_SKATER_CATEGORIES, get_category
from puckvalue.config.tuning import DEFAULT_CONFIG, ValuationConfig
from puckvalue.models import PlayerSnapshot, Recommendation, TeamCategorySummary

logger = logging.getLogger(__name__)


def weak_categories(
    summary: Sequence[TeamCategorySummary],
    *,
    config: ValuationConfig = DEFAULT_CONFIG,
) -> Dict[str, float]:
    """Return ``code -> weight`` for the team's weak skater categories.

    A category is weak when its z-score is below the threshold or the team
    sits in the bottom 30% of the league. Weights are the normalized absolute
    z-scores; when every z-score is 0 the weights are equal.
    """

    weak = [
        item
        for item in summary
        if item.category in TEAM_SKATER_CATEGORIES
        and (item.z_score < config.weak_z_threshold or item.rank > (1.0 - config.weak_rank_fraction) * item.teams)
    ]
    if not weak:
        return {}
    total = sum(abs(item.z_score) for item in weak)
    if total == 0:
        return {item.category: 1.0 / len(weak) for item in weak}
    return {item.category: abs(item.z_score) / total for item in weak}


def _percentile(value: float, sorted_values: List[float], *, higher_is_better: bool = True) -> float:
    if not sorted_values:
        return 0.0
    n = len(sorted_values)
    if higher_is_better:
        return bisect_right(sorted_values, value) / n
    return (n - bisect_left(sorted_values, value)) / n


def _multiplier(percentiles: Mapping[str, float], config: ValuationConfig) -> float:
    values = list(percentiles.values())
    multiplier = 1.0
    if any(pct < config.gate_percentile for pct in values):
        multiplier *= config.gate_penalty
    above_60 = sum(1 for pct in values if pct >= 0.6)
    above_50 = sum(1 for pct in values if pct >= 0.5)
    if above_60 == len(values):
        multiplier *= config.all_above_60_bonus
    elif above_50 == len(values):
        multiplier *= config.all_above_50_bonus
    elif above_60 >= 2:
        multiplier *= config.two_above_60_bonus
    elif above_50 >= 2:
        multiplier *= config.two_above_50_bonus
    return multiplier


def recommend(
    weak: Mapping[str, float],
    candidates: Sequence[PlayerSnapshot],
    *,
    exclude_team_id: Optional[str] = None,
    limit: Optional[int] = None,
    config: ValuationConfig = DEFAULT_CONFIG,
) -> List[Recommendation]:
    """Score skaters on other teams by percentile fit to ``weak``.

    Percentiles rank each candidate against every skater in ``candidates``,
    the excluded team included.

    With two or more weak categories, candidates under the gate percentile in
    any of them are dropped whenever the pool holds at least three skaters.
    """

    limit = config.recommendation_limit if limit is None else limit
    if not weak:
        return []
    league = [player for player in candidates if player.role == "skater"]
    pool = [player for player in league if exclude_team_id is None or player.team_id != exclude_team_id]
    if not pool:
        return []

    sorted_values = {
        code: sorted(float(player.stats.get(code, 0.0)) for player in league) for code in weak
    }
    multi = len(weak) >= 2
    scored: List[Recommendation] = []
    for player in pool:
        percentiles: Dict[str, float] = {}
        stats: Dict[str, float] = {}
        fit = 0.0
        for code, weight in weak.items():
            value = float(player.stats.get(code, 0.0))
            pct = _percentile(value, sorted_values[code], higher_is_better=not get_category(code).invert)
            stats[code] = value
            percentiles[code] = pct
            fit += pct * weight
        if multi:
            if len(pool) >= 3 and any(pct < config.gate_percentile for pct in percentiles.values()):
                continue
            fit *= _multiplier(percentiles, config)
        scored.append(
            Recommendation(
                candidate_player_id=player.player_id,
                team_id=player.team_id,
                fit_score=fit,
                per_category_stat=stats,
                percentiles=percentiles,
            )
        )

    scored.sort(key=lambda rec: (-rec.fit_score, rec.candidate_player_id))
    logger.debug("Ranked %d of %d candidates for %d weak categories", len(scored), len(pool), len(weak))
    return scored[:limit]
