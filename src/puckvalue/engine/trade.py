"""Trade package comparison: value delta, category swing and confidence."""

from __future__ import annotations

from typing import Dict, Iterable, List, Literal, Mapping, Sequence

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from puckvalue.config.categories import GOALIE_CATEGORIES, SKATER_CATEGORIES
from puckvalue.config.tuning import DEFAULT_CONFIG, ValuationConfig

Confidence = Literal["High", "Medium", "Speculative"]

# Week-to-week noise per category; steadier categories count for more.
CATEGORY_VOLATILITY: Mapping[str, float] = {
    "SHO": 1.4,
    "SVPCT": 1.3,
    "W": 1.1,
    "GAA": 1.2,
    "SV": 1.0,
    "G": 1.0,
    "A": 0.95,
    "P": 0.95,
    "PM": 1.2,
    "PIM": 0.9,
    "PPP": 1.05,
    "SHP": 1.3,
    "GWG": 1.35,
    "SOG": 0.85,
    "FW": 0.7,
    "HIT": 0.8,
    "BLK": 0.8,
}


class TradeAsset(BaseModel):
    kind: Literal["player", "pick"] = "player"
    asset_id: str = Field(..., min_length=1)
    value: float = 0.0
    stats: Dict[str, float] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class TradeEvaluation(BaseModel):
    give: List[TradeAsset]
    get: List[TradeAsset]
    give_value: float
    get_value: float
    value_gain: float
    category_swings: Dict[str, float]
    category_gain: float
    score: float
    confidence: Confidence

    model_config = ConfigDict(frozen=True)


def package_value(assets: Iterable[TradeAsset]) -> float:
    return sum(asset.value for asset in assets)


def category_swings(outgoing: Sequence[TradeAsset], incoming: Sequence[TradeAsset]) -> Dict[str, float]:
    swings: Dict[str, float] = {}
    for code in SKATER_CATEGORIES + GOALIE_CATEGORIES:
        lost = sum(asset.stats.get(code, 0.0) for asset in outgoing)
        gained = sum(asset.stats.get(code, 0.0) for asset in incoming)
        swings[code] = gained - lost
    return swings


def _clamp_gain(gain: float, config: ValuationConfig) -> float:
    return max(-config.category_gain_limit, min(config.category_gain_limit, gain))


def category_gain(
    weak: Iterable[str],
    strong: Iterable[str],
    outgoing: Sequence[TradeAsset],
    incoming: Sequence[TradeAsset],
    *,
    config: ValuationConfig = DEFAULT_CONFIG,
) -> float:
    """Net stat swing weighted toward weak categories.

    Gains in weak categories count double, scaled by category stability;
    losses in strong categories cost half. Clamped to the configured limit.
    """

    swings = category_swings(outgoing, incoming)
    gain = 0.0
    for code in weak:
        change = swings.get(code, 0.0)
        if change > 0:
            gain += change / CATEGORY_VOLATILITY.get(code, 1.0) * 2.0
    for code in strong:
        change = swings.get(code, 0.0)
        if change < 0:
            gain += change * 0.5
    return _clamp_gain(gain, config)


def trade_score(value_gain: float, gain: float, *, config: ValuationConfig = DEFAULT_CONFIG) -> float:
    gain = _clamp_gain(gain, config)
    score = value_gain + gain * config.category_gain_weight
    if abs(value_gain) < config.sidegrade_value_band and gain < config.sidegrade_category_band:
        score -= config.sidegrade_penalty
    return score


def trade_confidence(net_value: float, category_score: float = 0.0) -> Confidence:
    """Label how likely the other side is to accept.

    ``category_score`` is the normalized category gain in ``[0, 1]``.
    """

    spread = abs(net_value)
    if spread <= 5:
        confidence = 0.9
    elif spread <= 15:
        confidence = 0.8
    elif spread <= 30:
        confidence = 0.7
    elif spread <= 50:
        confidence = 0.5
    else:
        confidence = 0.25
    confidence = min(confidence + 0.15 * min(max(category_score, 0.0), 1.0), 0.98)

    if net_value < -5:
        confidence = min(confidence, 0.6)
    if net_value < -12:
        confidence = min(confidence, 0.4)
    if net_value < -20:
        confidence = min(confidence, 0.25)
    if net_value > 50:
        confidence = min(confidence, 0.35)
    if net_value > 80:
        confidence = min(confidence, 0.2)

    if confidence >= 0.8:
        return "High"
    if confidence >= 0.55:
        return "Medium"
    return "Speculative"


def evaluate_trade(
    give: Sequence[TradeAsset],
    get: Sequence[TradeAsset],
    weak: Iterable[str] = (),
    strong: Iterable[str] = (),
    *,
    config: ValuationConfig = DEFAULT_CONFIG,
) -> TradeEvaluation:
    give_value = package_value(give)
    get_value = package_value(get)
    value_gain = get_value - give_value
    gain = category_gain(weak, strong, give, get, config=config)
    return TradeEvaluation(
        give=list(give),
        get=list(get),
        give_value=give_value,
        get_value=get_value,
        value_gain=value_gain,
        category_swings=category_swings(give, get),
        category_gain=gain,
        score=trade_score(value_gain, gain, config=config),
        confidence=trade_confidence(value_gain, max(gain, 0.0) / config.category_gain_limit),
    )
