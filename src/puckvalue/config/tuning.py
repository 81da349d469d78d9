"""Tuned constants for the valuation engine."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Literal, Mapping, Tuple

logger = logging.getLogger(__name__)

BlendStage = Literal["raw", "weighted"]
ValueTier = Literal["Generational", "Franchise", "Star", "Core", "Normal"]

_TRADE_BONUS_SHARE_ENV = "PUCKVALUE_TRADE_BONUS_SHARE"
_HISTORICAL_WEIGHT_ENV = "PUCKVALUE_HISTORICAL_WEIGHT"
_BLEND_STAGE_ENV = "PUCKVALUE_BLEND_STAGE"

_MAPPING_FIELDS = (
    "position_multipliers",
    "surplus_caps",
    "control_premiums",
    "tier_bonus_caps",
    "tier_value_ceilings",
)


@dataclass(frozen=True)
class ValuationConfig:
    # Historical blend
    historical_weight: float = 0.30
    blend_stage: BlendStage = "raw"

    # Skater scoring
    z_scale: float = 8.0
    z_offset: float = 100.0
    grind_cap: float = 0.40
    position_multipliers: Mapping[str, float] = field(
        default_factory=lambda: {"LW": 1.08, "RW": 1.04, "C": 0.96}
    )
    elite_defense_multiplier: float = 1.10
    defense_multiplier: float = 0.92
    elite_defense_points: float = 30.0
    star_multipliers: Tuple[Tuple[float, float], ...] = ((40.0, 1.12), (30.0, 1.08), (22.0, 1.04))
    franchise_floor: float = 160.0
    franchise_points: float = 38.0
    franchise_assists: float = 25.0
    superstar_floor: float = 145.0
    superstar_points: float = 30.0
    scorer_floor: float = 115.0
    scorer_points: float = 20.0
    reputation_points: float = 40.0
    reputation_bonus: float = 4.0
    skater_min: float = 45.0
    skater_pre_floor_max: float = 165.0
    skater_max: float = 175.0

    # Goalie scoring
    goalie_baseline_starts: float = 5.0
    goalie_team_games: float = 33.0
    goalie_workload_slope: float = 0.25
    goalie_workload_cap: float = 1.15
    goalie_min: float = 50.0
    goalie_pre_multiplier_max: float = 155.0
    goalie_max: float = 160.0

    # Keeper economics
    tier_thresholds: Tuple[Tuple[ValueTier, float], ...] = (
        ("Generational", 172.0),
        ("Franchise", 160.0),
        ("Star", 150.0),
        ("Core", 135.0),
    )
    surplus_caps: Mapping[str, float] = field(default_factory=lambda: {"A": 25.0, "B": 35.0, "C": 40.0})
    surplus_weights: Tuple[float, ...] = (0.0, 0.45, 0.75, 1.00)
    control_premiums: Mapping[str, Tuple[float, ...]] = field(
        default_factory=lambda: {
            "Generational": (0.0, 20.0, 45.0, 70.0),
            "Franchise": (0.0, 14.0, 32.0, 50.0),
            "Star": (0.0, 10.0, 22.0, 34.0),
            "Core": (0.0, 5.0, 12.0, 18.0),
            "Normal": (0.0, 0.0, 0.0, 0.0),
        }
    )
    tier_bonus_caps: Mapping[str, float] = field(
        default_factory=lambda: {"Generational": 70.0, "Franchise": 50.0, "Star": 34.0, "Core": 22.0, "Normal": 15.0}
    )
    trade_bonus_share: float = 0.40
    tier_value_ceilings: Mapping[str, float] = field(
        default_factory=lambda: {"Generational": 250.0, "Franchise": 230.0, "Star": 190.0, "Core": 175.0, "Normal": 165.0}
    )

    # Draft picks
    draft_rounds: int = 16
    pick_floors: Tuple[float, ...] = (140, 135, 130, 125, 120, 110, 100, 90, 80, 70, 60, 55, 50, 45, 42, 40)
    pick_ceilings: Tuple[float, ...] = (175, 170, 165, 160, 145, 135, 125, 120, 115, 105, 100, 90, 80, 70, 60, 55)
    default_round_value: float = 100.0

    # Team analytics
    weak_z_threshold: float = -0.4
    weak_rank_fraction: float = 0.30
    depth_scale: float = 2.0
    keeper_grade_divisor: float = 20.0

    # Recommendations
    gate_percentile: float = 0.40
    gate_penalty: float = 0.30
    all_above_60_bonus: float = 2.5
    all_above_50_bonus: float = 2.0
    two_above_60_bonus: float = 1.5
    two_above_50_bonus: float = 1.3
    recommendation_limit: int = 3

    # Trade comparison
    category_gain_limit: float = 12.0
    category_gain_weight: float = 2.0
    sidegrade_value_band: float = 6.0
    sidegrade_category_band: float = 10.0
    sidegrade_penalty: float = 15.0

    def __post_init__(self) -> None:
        # Shared instances such as DEFAULT_CONFIG must not be mutated in place.
        for name in _MAPPING_FIELDS:
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def __getstate__(self) -> dict:
        state = dict(self.__dict__)
        for name in _MAPPING_FIELDS:
            state[name] = dict(state[name])
        return state

    def __setstate__(self, state: dict) -> None:
        for key, value in state.items():
            object.__setattr__(self, key, value)
        self.__post_init__()

    @property
    def current_weight(self) -> float:
        return 1.0 - self.historical_weight

    def with_overrides(self, **overrides: object) -> "ValuationConfig":
        unknown = set(overrides) - set(self.__dataclass_fields__)
        if unknown:
            raise KeyError(f"Unknown valuation settings: {', '.join(sorted(unknown))}")
        return replace(self, **overrides)


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_blend_stage(default: BlendStage) -> BlendStage:
    raw = os.getenv(_BLEND_STAGE_ENV)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value not in {"raw", "weighted"}:
        logger.warning("Invalid blend stage for %s: %s; using default %s", _BLEND_STAGE_ENV, raw, default)
        return default
    return value  # type: ignore[return-value]


def load_config(base: ValuationConfig | None = None) -> ValuationConfig:
    """Apply ``PUCKVALUE_*`` environment overrides on top of ``base``."""

    base = base or ValuationConfig()
    return replace(
        base,
        trade_bonus_share=_env_float(
            _TRADE_BONUS_SHARE_ENV, base.trade_bonus_share, clamp_min=0.0, clamp_max=1.0
        ),
        historical_weight=_env_float(
            _HISTORICAL_WEIGHT_ENV, base.historical_weight, clamp_min=0.0, clamp_max=1.0
        ),
        blend_stage=_env_blend_stage(base.blend_stage),
    )


DEFAULT_CONFIG = ValuationConfig()
