"""Helpers to load stat, keeper and historical CSVs into league snapshots."""

from __future__ import annotations

import csv
import io
import logging
import math
import re
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from puckvalue.config.categories import resolve_stat_code
from puckvalue.models import KeeperAssignment, LeagueSnapshot, PlayerSnapshot

logger = logging.getLogger(__name__)

DEFAULT_STATS_MAPPING = {
    "player_id": "player_id",
    "name": "name",
    "team_id": "team_id",
    "positions": "positions",
    "stat": "stat",
    "value": "value",
}

DEFAULT_HISTORICAL_MAPPING = {
    "player_id": "player_id",
    "season": "season",
    "stat": "stat",
    "value": "value",
}

# Most recent season first.
HISTORICAL_SEASON_WEIGHTS = (0.6, 0.4)


class StatRow(BaseModel):
    raw_id: str
    raw_name: str = ""
    raw_team: Optional[str] = None
    raw_positions: Optional[str] = None
    raw_stat: str
    raw_value: str
    raw_season: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, str]) -> "StatRow":
        def extract(key: str, *, default: Optional[str] = None) -> Optional[str]:
            column = mapping.get(key)
            if column is None:
                return default
            value = row.get(column)
            return value.strip() if value is not None else default

        return cls(
            raw_id=extract("player_id", default="") or "",
            raw_name=extract("name", default="") or "",
            raw_team=extract("team_id") or None,
            raw_positions=extract("positions"),
            raw_stat=extract("stat", default="") or "",
            raw_value=extract("value", default="") or "",
            raw_season=extract("season"),
        )


def _as_lines(source: Path | str | Iterable[str]) -> Iterable[str]:
    if isinstance(source, Path):
        return source.read_text(encoding="utf-8").splitlines()
    if isinstance(source, str):
        return io.StringIO(source)
    return source


def read_stat_rows(
    source: Path | str | Iterable[str],
    *,
    mapping: Mapping[str, str] | None = None,
) -> List[StatRow]:
    """Parse long-format stat rows from a path, CSV text or an iterable of lines."""

    mapping = mapping or DEFAULT_STATS_MAPPING
    reader = csv.DictReader(_as_lines(source))
    return [StatRow.from_mapping(row, mapping) for row in reader]


def _parse_value(raw_value: str, *, context: str) -> float:
    text = raw_value.strip().replace(",", "")
    if not text or text == "-":
        return 0.0
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"{context}: value '{raw_value}' is not numeric") from None
    if not math.isfinite(value):
        raise ValueError(f"{context}: value '{raw_value}' is not finite")
    return value


def _parse_positions(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [token.upper() for token in re.split(r"[/,\s]+", raw.strip()) if token]


def _stat_code(raw_stat: str) -> str:
    code = resolve_stat_code(raw_stat)
    if code is None:
        # Unknown stats surface later as configuration errors.
        return raw_stat.strip().upper()
    return code


def rows_to_snapshots(
    rows: Sequence[StatRow],
    *,
    historical: Mapping[str, Mapping[str, float]] | None = None,
) -> List[PlayerSnapshot]:
    historical = historical or {}
    order: List[str] = []
    names: Dict[str, str] = {}
    teams: Dict[str, Optional[str]] = {}
    positions: Dict[str, List[str]] = {}
    stats: Dict[str, Dict[str, float]] = defaultdict(dict)

    for row in rows:
        if not row.raw_id:
            raise ValueError(f"stat row for '{row.raw_name or row.raw_stat}' has no player_id")
        player_id = row.raw_id
        if player_id not in names:
            order.append(player_id)
            names[player_id] = row.raw_name
            teams[player_id] = row.raw_team
            positions[player_id] = _parse_positions(row.raw_positions)
        elif not positions[player_id] and row.raw_positions:
            positions[player_id] = _parse_positions(row.raw_positions)
        if not row.raw_stat:
            continue
        code = _stat_code(row.raw_stat)
        value = _parse_value(row.raw_value, context=f"player {player_id} stat {row.raw_stat}")
        if code in stats[player_id]:
            logger.debug("Duplicate %s for player %s; keeping latest value", code, player_id)
        stats[player_id][code] = value

    return [
        PlayerSnapshot(
            player_id=player_id,
            name=names[player_id],
            team_id=teams[player_id],
            positions=positions[player_id],
            stats=dict(stats[player_id]),
            historical=dict(historical.get(player_id, {})),
        )
        for player_id in order
    ]


def read_historical_stats(
    source: Path | str | Iterable[str],
    *,
    mapping: Mapping[str, str] | None = None,
) -> Dict[str, Dict[str, float]]:
    """Average each player's last two seasons per category, 60/40 toward the latest."""

    rows = read_stat_rows(source, mapping=mapping or DEFAULT_HISTORICAL_MAPPING)
    seasons: Dict[str, Dict[str, Dict[str, float]]] = defaultdict(lambda: defaultdict(dict))
    for row in rows:
        if not row.raw_id or not row.raw_stat:
            continue
        code = _stat_code(row.raw_stat)
        season = row.raw_season or ""
        seasons[row.raw_id][code][season] = _parse_value(
            row.raw_value, context=f"player {row.raw_id} season {season} stat {row.raw_stat}"
        )

    averages: Dict[str, Dict[str, float]] = {}
    for player_id, by_code in seasons.items():
        player_avg: Dict[str, float] = {}
        for code, by_season in by_code.items():
            recent = [by_season[key] for key in sorted(by_season, reverse=True)][: len(HISTORICAL_SEASON_WEIGHTS)]
            weights = HISTORICAL_SEASON_WEIGHTS[: len(recent)]
            player_avg[code] = sum(value * weight for value, weight in zip(recent, weights)) / sum(weights)
        averages[player_id] = player_avg
    return averages


def _parse_int(raw: Optional[str], *, field: str, default: Optional[int] = None) -> Optional[int]:
    text = (raw or "").strip()
    if not text:
        return default
    try:
        return int(float(text))
    except ValueError:
        raise ValueError(f"{field} '{raw}' is not an integer") from None


def read_keepers(source: Path | str | Iterable[str], *, league_id: str) -> List[KeeperAssignment]:
    """Parse keeper rows: player_id, team_id, original_draft_round, keeper_year_index,
    optional years_remaining and keeper_round."""

    keepers: List[KeeperAssignment] = []
    for row in csv.DictReader(_as_lines(source)):
        player_id = (row.get("player_id") or "").strip()
        if not player_id:
            raise ValueError("keeper row has no player_id")
        year_index = _parse_int(row.get("keeper_year_index"), field="keeper_year_index", default=0)
        years_remaining = _parse_int(row.get("years_remaining"), field="years_remaining")
        if years_remaining is None:
            years_remaining = 3 - year_index
        keepers.append(
            KeeperAssignment(
                player_id=player_id,
                team_id=(row.get("team_id") or "").strip(),
                league_id=league_id,
                original_draft_round=_parse_int(row.get("original_draft_round"), field="original_draft_round"),
                keeper_year_index=year_index,
                years_remaining=years_remaining,
                keeper_round=_parse_int(row.get("keeper_round"), field="keeper_round"),
            )
        )
    return keepers


def load_league_snapshot(
    stats: Path | str | Iterable[str],
    *,
    league_id: str,
    season: str = "",
    keepers: Path | str | Iterable[str] | None = None,
    historical: Path | str | Iterable[str] | None = None,
    mapping: Mapping[str, str] | None = None,
) -> LeagueSnapshot:
    history = read_historical_stats(historical) if historical is not None else None
    players = rows_to_snapshots(read_stat_rows(stats, mapping=mapping), historical=history)
    keeper_rows = read_keepers(keepers, league_id=league_id) if keepers is not None else []
    logger.info(
        "Loaded league %s: %d players, %d keepers, %d with history",
        league_id,
        len(players),
        len(keeper_rows),
        len(history or {}),
    )
    return LeagueSnapshot(league_id=league_id, season=season, players=players, keepers=keeper_rows)
