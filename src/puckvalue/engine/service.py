"""Run a full valuation pass over one league snapshot."""

from __future__ import annotations

import logging
import multiprocessing as mp
import os
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from puckvalue.config.categories import AUXILIARY_STATS, CategoryDefinition, default_definitions
from puckvalue.config.tuning import DEFAULT_CONFIG, ValuationConfig
from puckvalue.engine.distribution import aggregate, role_stats
from puckvalue.engine.goalie import goalie_decisions, score_goalie
from puckvalue.engine.keeper import keeper_value, validate_keeper_assignment
from puckvalue.engine.picks import draft_round_average, pick_records, valuate_picks
from puckvalue.engine.recommend import recommend, weak_categories
from puckvalue.engine.skater import score_skater
from puckvalue.engine.team import TradePartner, find_trade_partners, team_category_summary, team_grades, team_narrative
from puckvalue.errors import ConfigurationError
from puckvalue.models import (
    DraftPickValue,
    KeeperValuation,
    LeagueCategoryDistribution,
    LeagueSnapshot,
    PlayerSnapshot,
    PlayerValue,
    Recommendation,
    TeamCategorySummary,
    TeamGrade,
    TeamNarrative,
)

logger = logging.getLogger(__name__)

_PROCESSES_ENV = "PUCKVALUE_PROCESSES"

Distributions = Dict[str, Dict[str, LeagueCategoryDistribution]]


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


class DistributionCache:
    """Caller-owned memo of league distributions keyed by ``(league_id, season)``."""

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, str], Distributions] = {}

    def get_or_compute(self, league_id: str, season: str, compute: Callable[[], Distributions]) -> Distributions:
        key = (league_id, season)
        if key not in self._entries:
            self._entries[key] = compute()
        else:
            logger.debug("Reusing distributions for league %s season %s", league_id, season)
        return self._entries[key]

    def invalidate(self, league_id: str, season: str) -> None:
        self._entries.pop((league_id, season), None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


@dataclass
class LeagueValuation:
    snapshot: LeagueSnapshot
    distributions: Distributions
    player_values: Dict[str, PlayerValue]
    pick_values: Dict[int, float]
    keeper_valuations: Dict[str, KeeperValuation]
    team_summaries: Dict[str, List[TeamCategorySummary]]
    team_grades: Dict[str, Dict[str, TeamGrade]]
    narratives: Dict[str, TeamNarrative]
    computed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def league_id(self) -> str:
        return self.snapshot.league_id

    @property
    def season(self) -> str:
        return self.snapshot.season

    def pick_records(self) -> List[DraftPickValue]:
        return pick_records(self.league_id, self.pick_values)

    def trade_value(self, player_id: str) -> float:
        """Keeper-adjusted value when the player is kept, else the base value."""

        keeper = self.keeper_valuations.get(player_id)
        if keeper is not None:
            return keeper.trade_value
        return self.player_values[player_id].base_value

    def recommendations_for(
        self,
        team_id: str,
        *,
        limit: Optional[int] = None,
        config: ValuationConfig = DEFAULT_CONFIG,
    ) -> List[Recommendation]:
        if team_id not in self.team_summaries:
            raise KeyError(f"Unknown team {team_id}")
        weak = weak_categories(self.team_summaries[team_id], config=config)
        candidates = [player for player in self.snapshot.players if player.team_id]
        return recommend(weak, candidates, exclude_team_id=team_id, limit=limit, config=config)

    def trade_partners(self, team_id: str) -> List[TradePartner]:
        return find_trade_partners(team_id, self.team_summaries)


def validate_definitions(
    players: Iterable[PlayerSnapshot],
    definitions: Mapping[str, CategoryDefinition],
) -> None:
    """Every stat code in the raw stats must be weighted, or be auxiliary."""

    seen: set[str] = set()
    for player in players:
        seen.update(player.stats)
        seen.update(player.historical)
    for code in sorted(seen):
        if code in AUXILIARY_STATS:
            continue
        definition = definitions.get(code)
        if definition is None:
            raise ConfigurationError(code, "no category definition")
        if definition.role is None:
            raise ConfigurationError(code, "missing role")
        if definition.weight is None:
            raise ConfigurationError(code, "missing weight")


def compute_distributions(
    players: Sequence[PlayerSnapshot],
    definitions: Mapping[str, CategoryDefinition],
) -> Distributions:
    return {
        role: aggregate(role_stats(players, role, definitions), role, definitions)
        for role in ("skater", "goalie")
    }


def score_player(
    player: PlayerSnapshot,
    distributions: Distributions,
    *,
    config: ValuationConfig = DEFAULT_CONFIG,
    definitions: Optional[Mapping[str, CategoryDefinition]] = None,
) -> float:
    historical = player.historical or None
    if player.role == "goalie":
        games_started = player.stats.get("GS", player.stats.get("GP", 0.0))
        return score_goalie(
            player.stats,
            distributions["goalie"],
            games_started,
            goalie_decisions(player.stats),
            historical,
            config=config,
            definitions=definitions,
        )
    return score_skater(
        player.stats,
        distributions["skater"],
        historical,
        position=player.primary_position,
        config=config,
        definitions=definitions,
    )


def valuate_league(
    snapshot: LeagueSnapshot,
    *,
    config: ValuationConfig = DEFAULT_CONFIG,
    definitions: Optional[Mapping[str, CategoryDefinition]] = None,
    cache: Optional[DistributionCache] = None,
) -> LeagueValuation:
    """Value every player, pick, keeper and team in one league.

    Raises ``ConfigurationError`` or ``InvalidKeeperStateError`` before any
    scoring when the snapshot cannot be valued as a whole.
    """

    started = time.perf_counter()
    definitions = definitions if definitions is not None else default_definitions()
    validate_definitions(snapshot.players, definitions)
    for assignment in snapshot.keepers:
        validate_keeper_assignment(assignment)

    if cache is not None:
        distributions = cache.get_or_compute(
            snapshot.league_id,
            snapshot.season,
            lambda: compute_distributions(snapshot.players, definitions),
        )
    else:
        distributions = compute_distributions(snapshot.players, definitions)

    computed_at = datetime.now(timezone.utc)
    player_values: Dict[str, PlayerValue] = {}
    for player in snapshot.players:
        player_values[player.player_id] = PlayerValue(
            player_id=player.player_id,
            league_id=snapshot.league_id,
            base_value=score_player(player, distributions, config=config, definitions=definitions),
            role=player.role,
            computed_at=computed_at,
        )

    pick_values = valuate_picks((value.base_value for value in player_values.values()), config=config)

    keeper_valuations: Dict[str, KeeperValuation] = {}
    keeper_bonuses: Dict[str, List[float]] = {}
    for assignment in snapshot.keepers:
        value = player_values.get(assignment.player_id)
        if value is None:
            logger.debug("Keeper %s has no rostered stats; skipping", assignment.player_id)
            continue
        valuation = keeper_value(
            value.base_value,
            assignment.original_draft_round,
            assignment.years_remaining,
            draft_round_average(pick_values, assignment.original_draft_round, config),
            player_id=assignment.player_id,
            config=config,
        )
        keeper_valuations[assignment.player_id] = valuation
        if assignment.years_remaining > 0:
            keeper_bonuses.setdefault(assignment.team_id, []).append(valuation.keeper_bonus)

    rosters = snapshot.rosters()
    summaries = team_category_summary(rosters)
    grades: Dict[str, Dict[str, TeamGrade]] = {}
    narratives: Dict[str, TeamNarrative] = {}
    for team_id, summary in summaries.items():
        grades[team_id] = team_grades(
            team_id,
            summary,
            rosters[team_id],
            keeper_bonuses.get(team_id, ()),
            config=config,
        )
        narratives[team_id] = team_narrative(team_id, summary, grades[team_id])

    logger.info(
        "Valued league %s: %d players, %d keepers, %d teams in %.2fs",
        snapshot.league_id,
        len(player_values),
        len(keeper_valuations),
        len(summaries),
        time.perf_counter() - started,
    )
    return LeagueValuation(
        snapshot=snapshot,
        distributions=distributions,
        player_values=player_values,
        pick_values=pick_values,
        keeper_valuations=keeper_valuations,
        team_summaries=summaries,
        team_grades=grades,
        narratives=narratives,
        computed_at=computed_at,
    )


def _valuate_worker(
    args: Tuple[LeagueSnapshot, ValuationConfig, Optional[Mapping[str, CategoryDefinition]]],
) -> LeagueValuation:
    snapshot, config, definitions = args
    return valuate_league(snapshot, config=config, definitions=definitions)


def valuate_leagues(
    snapshots: Sequence[LeagueSnapshot],
    processes: Optional[int] = None,
    *,
    config: ValuationConfig = DEFAULT_CONFIG,
    definitions: Optional[Mapping[str, CategoryDefinition]] = None,
) -> List[LeagueValuation]:
    """Value independent leagues, in parallel when ``processes`` > 1."""

    if processes is None:
        processes = _env_int(_PROCESSES_ENV, 1, min_value=1)
    processes = max(1, min(processes, len(snapshots) or 1))
    if processes == 1:
        return [valuate_league(snapshot, config=config, definitions=definitions) for snapshot in snapshots]

    logger.info("Valuing %d leagues across %d processes", len(snapshots), processes)
    ctx = mp.get_context("spawn")
    with ctx.Pool(processes=processes) as pool:
        return pool.map(_valuate_worker, [(snapshot, config, definitions) for snapshot in snapshots])
