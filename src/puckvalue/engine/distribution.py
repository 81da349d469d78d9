"""League-wide per-category distributions used to z-score players."""

from __future__ import annotations

import logging
import math
import statistics
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional

from puckvalue.config.categories import CategoryDefinition, default_definitions
from puckvalue.errors import InsufficientDataError
from puckvalue.models import CategoryStat, LeagueCategoryDistribution, PlayerSnapshot

logger = logging.getLogger(__name__)


def _distribution(category: str, values: List[float]) -> LeagueCategoryDistribution:
    finite = [value for value in values if math.isfinite(value)]
    if len(finite) < len(values):
        logger.warning("Dropped %d non-finite %s observations", len(values) - len(finite), category)
        values = finite
    if not values:
        raise InsufficientDataError(category)
    try:
        mean = statistics.fmean(values)
        std_dev = statistics.pstdev(values) if len(values) > 1 else 0.0
    except OverflowError:
        logger.warning("%s observations overflow the float range; using neutral distribution", category)
        return LeagueCategoryDistribution(category=category, mean=0.0, std_dev=0.0, count=len(values))
    if not math.isfinite(std_dev):
        std_dev = 0.0
    return LeagueCategoryDistribution(category=category, mean=mean, std_dev=std_dev, count=len(values))


def aggregate(
    stats: Iterable[CategoryStat],
    role: str,
    definitions: Optional[Mapping[str, CategoryDefinition]] = None,
) -> Dict[str, LeagueCategoryDistribution]:
    """Compute population mean and standard deviation for every category of ``role``.

    Observations for categories outside ``role`` are ignored. A category with
    no observations degrades to a neutral distribution (mean 0, std 0) so every
    z-score in it is 0.
    """

    definitions = definitions if definitions is not None else default_definitions()
    codes = [code for code, definition in definitions.items() if definition.role == role]
    grouped: Dict[str, List[float]] = defaultdict(list)
    for stat in stats:
        if stat.category in definitions and definitions[stat.category].role == role:
            grouped[stat.category].append(float(stat.value))

    distributions: Dict[str, LeagueCategoryDistribution] = {}
    for code in codes:
        try:
            distributions[code] = _distribution(code, grouped.get(code, []))
        except InsufficientDataError as exc:
            logger.debug("%s; using neutral distribution", exc)
            distributions[code] = LeagueCategoryDistribution(category=code, mean=0.0, std_dev=0.0, count=0)
    return distributions


def role_stats(
    players: Iterable[PlayerSnapshot],
    role: str,
    definitions: Optional[Mapping[str, CategoryDefinition]] = None,
) -> List[CategoryStat]:
    """Flatten snapshots of ``role`` into observations, zero-filling missing categories."""

    definitions = definitions if definitions is not None else default_definitions()
    codes = [code for code, definition in definitions.items() if definition.role == role]
    rows: List[CategoryStat] = []
    for player in players:
        if player.role != role:
            continue
        for code in codes:
            rows.append(
                CategoryStat(player_id=player.player_id, category=code, value=player.stats.get(code, 0.0))
            )
    return rows


def z_score(value: float, distribution: LeagueCategoryDistribution, invert: bool = False) -> float:
    if distribution.std_dev <= 0:
        return 0.0
    z = (value - distribution.mean) / distribution.std_dev
    if not math.isfinite(z):
        return 0.0
    return -z if invert else z
