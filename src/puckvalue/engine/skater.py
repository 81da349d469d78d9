"""Skater valuation: weighted z-scores plus market adjustments."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Tuple

from puckvalue.config.categories import CategoryDefinition, default_definitions
from puckvalue.config.tuning import DEFAULT_CONFIG, ValuationConfig
from puckvalue.engine.distribution import z_score
from puckvalue.errors import ConfigurationError
from puckvalue.models import LeagueCategoryDistribution


Distributions = Mapping[str, LeagueCategoryDistribution]
FloorRule = Tuple[str, Callable[[float, float], bool], float]


@dataclass(frozen=True)
class SkaterScore:
    weighted_sum: float
    grind_scale: float
    base: float
    points: float
    position_multiplier: float
    star_multiplier: float
    pre_floor: float
    floor_name: Optional[str]
    bonus: float
    value: float


def blend_values(
    current: Mapping[str, float],
    historical: Optional[Mapping[str, float]],
    codes: Tuple[str, ...],
    config: ValuationConfig,
) -> Dict[str, float]:
    """Blend current and historical raw values per category.

    Categories without a historical value keep their current value.
    """

    blended: Dict[str, float] = {}
    for code in codes:
        value = float(current.get(code, 0.0))
        if historical and code in historical:
            value = config.current_weight * value + config.historical_weight * float(historical[code])
        blended[code] = value
    return blended


def weighted_terms(
    values: Mapping[str, float],
    distribution: Distributions,
    definitions: Mapping[str, CategoryDefinition],
    role: str,
) -> Dict[str, Tuple[str, float]]:
    """Return ``code -> (bucket, weight * z)`` for every category of ``role``."""

    terms: Dict[str, Tuple[str, float]] = {}
    for code, definition in definitions.items():
        if definition.role != role:
            continue
        if definition.weight is None:
            raise ConfigurationError(code, "missing weight")
        dist = distribution.get(code)
        if dist is None:
            z = 0.0
        else:
            z = z_score(values.get(code, 0.0), dist, definition.invert)
        terms[code] = (definition.bucket, z * definition.weight)
    return terms


def capped_sum(terms: Mapping[str, Tuple[str, float]], cap: float) -> Tuple[float, float]:
    """Sum weighted terms with the grind bucket limited to ``cap`` of the absolute total.

    Returns ``(weighted_sum, grind_scale)``.
    """

    grind = [term for bucket, term in terms.values() if bucket == "grind"]
    other = [term for bucket, term in terms.values() if bucket != "grind"]
    grind_abs = sum(abs(term) for term in grind)
    other_abs = sum(abs(term) for term in other)
    scale = 1.0
    if grind_abs > 0 and grind_abs / (grind_abs + other_abs) > cap:
        scale = 0.0 if other_abs == 0 else cap * other_abs / ((1.0 - cap) * grind_abs)
    return sum(other) + scale * sum(grind), scale


def raw_points(stats: Mapping[str, float]) -> float:
    if "P" in stats:
        return float(stats["P"])
    return float(stats.get("G", 0.0)) + float(stats.get("A", 0.0))


def _primary_position(position: Optional[str]) -> Optional[str]:
    if not position:
        return None
    token = re.split(r"[/,\s]+", position.strip())[0]
    return token.upper() or None


def position_multiplier(position: Optional[str], points: float, config: ValuationConfig = DEFAULT_CONFIG) -> float:
    primary = _primary_position(position)
    if primary is None:
        return 1.0
    if primary == "D":
        if points >= config.elite_defense_points:
            return config.elite_defense_multiplier
        return config.defense_multiplier
    return config.position_multipliers.get(primary, 1.0)


def star_multiplier(points: float, config: ValuationConfig = DEFAULT_CONFIG) -> float:
    for threshold, multiplier in config.star_multipliers:
        if points >= threshold:
            return multiplier
    return 1.0


def floor_rules(config: ValuationConfig = DEFAULT_CONFIG) -> Tuple[FloorRule, ...]:
    """Ordered ``(name, predicate(points, assists), floor)`` rules; first match wins."""

    return (
        (
            "franchise",
            lambda points, assists: points >= config.franchise_points or assists >= config.franchise_assists,
            config.franchise_floor,
        ),
        ("superstar", lambda points, assists: points >= config.superstar_points, config.superstar_floor),
        ("scorer", lambda points, assists: points >= config.scorer_points, config.scorer_floor),
    )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _weighted_sum(
    stats: Mapping[str, float],
    distribution: Distributions,
    historical: Optional[Mapping[str, float]],
    definitions: Mapping[str, CategoryDefinition],
    config: ValuationConfig,
) -> Tuple[float, float]:
    codes = tuple(code for code, definition in definitions.items() if definition.role == "skater")
    if config.blend_stage == "weighted" and historical:
        current_sum, current_scale = capped_sum(
            weighted_terms(blend_values(stats, None, codes, config), distribution, definitions, "skater"),
            config.grind_cap,
        )
        history_line = {code: historical.get(code, stats.get(code, 0.0)) for code in codes}
        history_sum, _ = capped_sum(
            weighted_terms(history_line, distribution, definitions, "skater"),
            config.grind_cap,
        )
        blended = config.current_weight * current_sum + config.historical_weight * history_sum
        return blended, current_scale
    values = blend_values(stats, historical, codes, config)
    return capped_sum(weighted_terms(values, distribution, definitions, "skater"), config.grind_cap)


def score_skater_breakdown(
    stats: Mapping[str, float],
    distribution: Distributions,
    historical: Optional[Mapping[str, float]] = None,
    *,
    position: Optional[str] = None,
    config: ValuationConfig = DEFAULT_CONFIG,
    definitions: Optional[Mapping[str, CategoryDefinition]] = None,
) -> SkaterScore:
    definitions = definitions if definitions is not None else default_definitions()
    weighted_sum, grind_scale = _weighted_sum(stats, distribution, historical, definitions, config)
    base = weighted_sum * config.z_scale + config.z_offset

    points = raw_points(stats)
    assists = float(stats.get("A", 0.0))
    pos_mult = position_multiplier(position, points, config)
    star_mult = star_multiplier(points, config)
    value = _clamp(base * pos_mult * star_mult, config.skater_min, config.skater_pre_floor_max)
    pre_floor = value

    floor_name: Optional[str] = None
    for name, predicate, floor in floor_rules(config):
        if predicate(points, assists):
            floor_name = name
            value = max(value, floor)
            break

    bonus = config.reputation_bonus if points >= config.reputation_points else 0.0
    value = _clamp(value + bonus, config.skater_min, config.skater_max)

    return SkaterScore(
        weighted_sum=weighted_sum,
        grind_scale=grind_scale,
        base=base,
        points=points,
        position_multiplier=pos_mult,
        star_multiplier=star_mult,
        pre_floor=pre_floor,
        floor_name=floor_name,
        bonus=bonus,
        value=value,
    )


def score_skater(
    stats: Mapping[str, float],
    distribution: Distributions,
    historical: Optional[Mapping[str, float]] = None,
    *,
    position: Optional[str] = None,
    config: ValuationConfig = DEFAULT_CONFIG,
    definitions: Optional[Mapping[str, CategoryDefinition]] = None,
) -> float:
    """Score a skater into ``[45, 175]``."""

    return score_skater_breakdown(
        stats,
        distribution,
        historical,
        position=position,
        config=config,
        definitions=definitions,
    ).value
