"""Team category totals, z-scores, ranks, grades and narrative."""

from __future__ import annotations

import logging
import math
import statistics
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from puckvalue.config.categories import (
    GOALIE_CATEGORIES,
    TEAM_CATEGORIES,
    TEAM_SKATER_CATEGORIES,
    get_category,
)
from puckvalue.config.tuning import DEFAULT_CONFIG, ValuationConfig
from puckvalue.models import PlayerSnapshot, TeamCategorySummary, TeamGrade, TeamNarrative
from puckvalue.models.team import GradeLetter, Strength

logger = logging.getLogger(__name__)

OFFENSE_CATEGORIES: Tuple[str, ...] = ("G", "A", "P", "PPP", "SOG")
PHYSICAL_CATEGORIES: Tuple[str, ...] = ("HIT", "BLK", "PIM")

Rosters = Mapping[str, Sequence[PlayerSnapshot]]


@dataclass(frozen=True)
class TradePartner:
    team_id: str
    can_offer: Tuple[str, ...]
    needs: Tuple[str, ...]


def strength_label(z: float) -> Strength:
    if z >= 1.0:
        return "elite"
    if z >= 0.5:
        return "strong"
    if z >= -0.5:
        return "neutral"
    if z >= -1.0:
        return "weak"
    return "critical"


def letter_grade(score: float) -> GradeLetter:
    if score >= 1.0:
        return "A"
    if score >= 0.5:
        return "B"
    if score >= -0.5:
        return "C"
    if score >= -1.0:
        return "D"
    return "F"


def team_category_totals(rosters: Rosters) -> Dict[str, Dict[str, float]]:
    """Sum each roster over the fixed team categories.

    Skaters feed the skater categories and goalies the goalie ones.
    """

    totals: Dict[str, Dict[str, float]] = {}
    for team_id, players in rosters.items():
        team_totals = {code: 0.0 for code in TEAM_CATEGORIES}
        for player in players:
            codes = GOALIE_CATEGORIES if player.role == "goalie" else TEAM_SKATER_CATEGORIES
            for code in codes:
                value = float(player.stats.get(code, 0.0))
                if not math.isfinite(value):
                    logger.warning("Skipping non-finite %s for player %s", code, player.player_id)
                    continue
                total = team_totals[code] + value
                if not math.isfinite(total):
                    logger.warning("Skipping %s for player %s; team total overflows", code, player.player_id)
                    continue
                team_totals[code] = total
        totals[team_id] = team_totals
    return totals


def summarize_totals(totals: Mapping[str, Mapping[str, float]]) -> Dict[str, List[TeamCategorySummary]]:
    team_ids = list(totals)
    teams = len(team_ids)
    summary: Dict[str, List[TeamCategorySummary]] = {team_id: [] for team_id in team_ids}
    if not team_ids:
        return summary

    for code in TEAM_CATEGORIES:
        definition = get_category(code)
        values = [float(totals[team_id].get(code, 0.0)) for team_id in team_ids]
        try:
            mean = statistics.fmean(values)
            std_dev = statistics.pstdev(values) if teams > 1 else 0.0
        except OverflowError:
            logger.warning("%s team totals overflow the float range; z-scores set to 0", code)
            mean, std_dev = 0.0, 0.0
        if not math.isfinite(std_dev):
            std_dev = 0.0
        for team_id, value in zip(team_ids, values):
            z = (value - mean) / std_dev if std_dev > 0 else 0.0
            if not math.isfinite(z):
                z = 0.0
            elif definition.invert:
                z = -z
            if definition.invert:
                better = sum(1 for other in values if other < value)
            else:
                better = sum(1 for other in values if other > value)
            summary[team_id].append(
                TeamCategorySummary(
                    team_id=team_id,
                    category=code,
                    label=definition.label,
                    total=value,
                    z_score=z,
                    rank=better + 1,
                    teams=teams,
                    strength=strength_label(z),
                )
            )
    return summary


def team_category_summary(rosters: Rosters) -> Dict[str, List[TeamCategorySummary]]:
    """Per-team category summaries z-scored against the rest of the league."""

    return summarize_totals(team_category_totals(rosters))


def _by_code(summary: Iterable[TeamCategorySummary]) -> Dict[str, TeamCategorySummary]:
    return {item.category: item for item in summary}


def _mean_z(summary: Mapping[str, TeamCategorySummary], codes: Sequence[str]) -> float:
    return sum(summary[code].z_score if code in summary else 0.0 for code in codes) / len(codes)


def grade_reason(summary: Mapping[str, TeamCategorySummary], codes: Sequence[str]) -> str:
    strong = [code for code in codes if code in summary and summary[code].z_score > 0.5]
    weak = [code for code in codes if code in summary and summary[code].z_score < -0.5]
    if len(strong) >= 2:
        return f"Strong in {', '.join(strong)}"
    if len(weak) >= 2:
        return f"Weak in {', '.join(weak)}"
    if strong:
        return f"Good {', '.join(strong)}"
    if weak:
        return f"Needs help in {', '.join(weak)}"
    return "Balanced across categories"


def team_grades(
    team_id: str,
    summary: Sequence[TeamCategorySummary],
    roster: Sequence[PlayerSnapshot],
    keeper_bonuses: Iterable[float] = (),
    *,
    config: ValuationConfig = DEFAULT_CONFIG,
) -> Dict[str, TeamGrade]:
    by_code = _by_code(summary)
    skaters = [player for player in roster if player.role == "skater"]
    dual_eligible = sum(1 for player in skaters if len(player.positions) > 1)
    bonuses = list(keeper_bonuses)
    keeper_total = sum(bonuses)

    scored: List[Tuple[str, float, str]] = [
        ("offense", _mean_z(by_code, OFFENSE_CATEGORIES), grade_reason(by_code, OFFENSE_CATEGORIES)),
        ("goalies", _mean_z(by_code, GOALIE_CATEGORIES), grade_reason(by_code, GOALIE_CATEGORIES)),
        ("physical", _mean_z(by_code, PHYSICAL_CATEGORIES), grade_reason(by_code, PHYSICAL_CATEGORIES)),
        (
            "depth",
            dual_eligible / max(len(skaters), 1) * config.depth_scale,
            f"{dual_eligible} dual-eligible players provide roster flexibility",
        ),
        (
            "keeper",
            keeper_total / config.keeper_grade_divisor,
            f"{len(bonuses)} keepers with +{keeper_total:.0f} total surplus",
        ),
    ]
    return {
        area: TeamGrade(team_id=team_id, area=area, score=score, letter=letter_grade(score), reason=reason)
        for area, score, reason in scored
    }


def team_narrative(
    team_id: str,
    summary: Sequence[TeamCategorySummary],
    grades: Mapping[str, TeamGrade],
) -> TeamNarrative:
    strengths: List[str] = []
    weaknesses: List[str] = []
    for item in summary:
        if item.z_score >= 1.0:
            strengths.append(f"Elite in {item.label} (Rank {item.rank})")
        elif item.z_score >= 0.5:
            strengths.append(f"Strong in {item.label}")
        elif item.z_score <= -1.0:
            weaknesses.append(f"Critical weakness in {item.label} (Rank {item.rank})")
        elif item.z_score <= -0.5:
            weaknesses.append(f"Below average in {item.label}")

    parts: List[str] = []
    offense = grades["offense"].letter
    if offense in ("A", "B"):
        parts.append("strong offensive core")
    elif offense in ("D", "F"):
        parts.append("struggling offense")
    physical = grades["physical"].letter
    if physical in ("A", "B"):
        parts.append("dominant physical game")
    elif physical in ("D", "F"):
        parts.append("weak physical categories")
    if grades["keeper"].letter in ("A", "B"):
        parts.append("excellent keeper value")

    text = f"This team has {', '.join(parts)}." if parts else "This team shows balanced strengths across categories."
    return TeamNarrative(
        team_id=team_id,
        strengths=strengths or ["Balanced roster"],
        weaknesses=weaknesses or ["No critical weaknesses"],
        summary=text,
    )


def find_trade_partners(
    team_id: str,
    summaries: Mapping[str, Sequence[TeamCategorySummary]],
    *,
    top: int = 3,
    bottom: int = 4,
) -> List[TradePartner]:
    """Teams that lead our weak categories and trail in our strong ones.

    A partner must rank in the top ``top`` of at least one of our weak
    categories; when we have strong categories it must also sit in the bottom
    ``bottom`` of at least one of them.
    """

    ours = summaries.get(team_id)
    if ours is None:
        raise KeyError(f"No summary for team {team_id}")
    weak = [item.category for item in ours if item.strength in ("weak", "critical")]
    strong = [item.category for item in ours if item.strength in ("elite", "strong")]

    partners: List[TradePartner] = []
    for other_id, other in summaries.items():
        if other_id == team_id:
            continue
        by_code = _by_code(other)
        can_offer = tuple(code for code in weak if code in by_code and by_code[code].rank <= top)
        needs = tuple(
            code for code in strong if code in by_code and by_code[code].rank > by_code[code].teams - bottom
        )
        if not can_offer or (strong and not needs):
            continue
        partners.append(TradePartner(team_id=other_id, can_offer=can_offer, needs=needs))
    partners.sort(key=lambda partner: (-(len(partner.can_offer) + len(partner.needs)), partner.team_id))
    logger.debug("Found %d trade partners for team %s", len(partners), team_id)
    return partners
