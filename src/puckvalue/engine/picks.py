"""Draft pick values derived from the current player value distribution."""

from __future__ import annotations

import statistics
from typing import Dict, Iterable, List

from puckvalue.config.tuning import DEFAULT_CONFIG, ValuationConfig
from puckvalue.models import DraftPickValue


def _tiers(values: List[float], rounds: int) -> List[List[float]]:
    size, extra = divmod(len(values), rounds)
    tiers: List[List[float]] = []
    start = 0
    for index in range(rounds):
        end = start + size + (1 if index < extra else 0)
        tiers.append(values[start:end])
        start = end
    return tiers


def valuate_picks(player_values: Iterable[float], *, config: ValuationConfig = DEFAULT_CONFIG) -> Dict[int, float]:
    """Value every draft round from tiers of the sorted player values.

    Values are split into consecutive, near-equal tiers (round 1 holds the
    best players), each round scores its tier mean, and the mean is clamped to
    that round's floor and ceiling. Rounds with an empty tier take the floor.
    """

    values = sorted((float(value) for value in player_values), reverse=True)
    scores: Dict[int, float] = {}
    for index, tier in enumerate(_tiers(values, config.draft_rounds)):
        floor = float(config.pick_floors[index])
        ceiling = float(config.pick_ceilings[index])
        if not tier:
            scores[index + 1] = floor
            continue
        scores[index + 1] = max(floor, min(ceiling, statistics.fmean(tier)))
    return scores


def pick_records(league_id: str, scores: Dict[int, float]) -> List[DraftPickValue]:
    return [DraftPickValue(league_id=league_id, round=round_number, score=score) for round_number, score in sorted(scores.items())]


def draft_round_average(scores: Dict[int, float], round_number: int, config: ValuationConfig = DEFAULT_CONFIG) -> float:
    return scores.get(round_number, config.default_round_value)
