"""Keeper economics: value tiers, surplus and control premiums, tier rules."""

from __future__ import annotations

import logging
from typing import Iterable, Literal, Optional

from puckvalue.config.tuning import DEFAULT_CONFIG, ValuationConfig, ValueTier
from puckvalue.errors import InvalidKeeperStateError
from puckvalue.models import KeeperAssignment, KeeperValuation

logger = logging.getLogger(__name__)

RoundTier = Literal["A", "B", "C"]

MIN_ROUND = 1
MAX_ROUND = 16


def round_tier(round_number: int) -> RoundTier:
    if not MIN_ROUND <= round_number <= MAX_ROUND:
        raise ValueError(f"Round {round_number} outside 1-{MAX_ROUND}")
    if round_number <= 4:
        return "A"
    if round_number <= 10:
        return "B"
    return "C"


def value_tier(base_value: float, config: ValuationConfig = DEFAULT_CONFIG) -> ValueTier:
    for tier, threshold in config.tier_thresholds:
        if base_value >= threshold:
            return tier
    return "Normal"


def can_move_to_round(original_round: int, target_round: int) -> bool:
    """A keeper may never occupy round 1 and never leave its draft-round tier."""

    if target_round == 1:
        return False
    return round_tier(original_round) == round_tier(target_round)


def keeper_round_for(original_round: int, owned_picks: Iterable[int]) -> Optional[int]:
    """Return the round a keeper occupies given the picks a team owns.

    The original round when owned, else the nearest earlier round in the same
    tier. ``None`` means the player cannot be kept.
    """

    owned = set(owned_picks)
    if original_round in owned and can_move_to_round(original_round, original_round):
        return original_round
    earlier = sorted(
        (pick for pick in owned if MIN_ROUND < pick < original_round and can_move_to_round(original_round, pick)),
        reverse=True,
    )
    return earlier[0] if earlier else None


def validate_keeper_assignment(assignment: KeeperAssignment) -> None:
    """Check the round rules the model fields cannot express on their own.

    Field ranges are enforced when the assignment is constructed.
    """

    keeper_round = assignment.keeper_round
    if keeper_round is None:
        return
    if keeper_round == 1:
        raise InvalidKeeperStateError(assignment, "round 1 cannot hold a keeper")
    if not can_move_to_round(assignment.original_draft_round, keeper_round):
        raise InvalidKeeperStateError(
            assignment,
            f"tier {round_tier(assignment.original_draft_round)} player kept in "
            f"round {keeper_round} (tier {round_tier(keeper_round)})",
        )


def keeper_value(
    base_value: float,
    draft_round: int,
    years_remaining: int,
    draft_round_avg: float,
    *,
    player_id: str = "",
    config: ValuationConfig = DEFAULT_CONFIG,
) -> KeeperValuation:
    """Keeper-adjusted trade value for a retained player.

    Only ``trade_bonus_share`` of the displayed keeper bonus counts toward
    trade value, and the result never exceeds the tier ceiling.
    """

    if not 0 <= years_remaining < len(config.surplus_weights):
        raise ValueError(f"years_remaining must be 0-{len(config.surplus_weights) - 1}, got {years_remaining}")
    tier = value_tier(base_value, config)

    surplus = max(0.0, base_value - draft_round_avg)
    surplus = min(surplus, config.surplus_caps[round_tier(draft_round)])
    surplus_bonus = surplus * config.surplus_weights[years_remaining]

    control_bonus = config.control_premiums[tier][years_remaining]
    keeper_bonus = min(surplus_bonus + control_bonus, config.tier_bonus_caps[tier])
    trade_bonus = keeper_bonus * config.trade_bonus_share
    trade_value = min(base_value + trade_bonus, config.tier_value_ceilings[tier])

    logger.debug(
        "Keeper %s: tier=%s round=%s years=%s bonus=%.2f trade=%.2f",
        player_id or "?",
        tier,
        draft_round,
        years_remaining,
        keeper_bonus,
        trade_value,
    )
    return KeeperValuation(
        player_id=player_id,
        base_value=base_value,
        tier=tier,
        surplus_bonus=surplus_bonus,
        control_bonus=control_bonus,
        keeper_bonus=keeper_bonus,
        trade_bonus=trade_bonus,
        trade_value=trade_value,
    )
