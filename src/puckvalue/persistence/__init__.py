"""Persistence layer for storing valuation runs."""

from __future__ import annotations

import json
import os
import sqlite3
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from puckvalue.engine.service import LeagueValuation


@dataclass
class RunRecord:
    run_id: str
    created_at: datetime
    league_id: str
    season: str
    request: dict
    players: List[dict]
    picks: List[dict]
    teams: Dict[str, dict]
    snapshot: dict


def valuation_players(valuation: LeagueValuation) -> List[dict]:
    rows: List[dict] = []
    for player in valuation.snapshot.players:
        value = valuation.player_values[player.player_id]
        keeper = valuation.keeper_valuations.get(player.player_id)
        rows.append(
            {
                "player_id": player.player_id,
                "name": player.name,
                "team_id": player.team_id,
                "positions": list(player.positions),
                "role": value.role,
                "base_value": value.base_value,
                "trade_value": valuation.trade_value(player.player_id),
                "keeper": keeper.model_dump() if keeper else None,
            }
        )
    rows.sort(key=lambda row: (-row["trade_value"], row["player_id"]))
    return rows


def valuation_teams(valuation: LeagueValuation) -> Dict[str, dict]:
    return {
        team_id: {
            "summary": [item.model_dump() for item in summary],
            "grades": {area: grade.model_dump() for area, grade in valuation.team_grades[team_id].items()},
            "narrative": valuation.narratives[team_id].model_dump(),
        }
        for team_id, summary in valuation.team_summaries.items()
    }


class ValuationStore:
    """Simple SQLite-backed store for valuation runs."""

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        env_db = os.getenv('PUCKVALUE_DB_PATH')
        if env_db:
            if env_db.startswith('file:'):
                self.db_path = env_db
                self._use_uri = True
            else:
                self.db_path = Path(env_db)
        elif os.getenv('PYTEST_CURRENT_TEST'):
            test_dir = Path(tempfile.gettempdir()) / 'puckvalue-test'
            test_dir.mkdir(parents=True, exist_ok=True)
            self.db_path = test_dir / 'puckvalue.sqlite'
        else:
            self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        except sqlite3.OperationalError:
            fallback_dir = Path(tempfile.gettempdir()) / 'puckvalue-runtime'
            fallback_dir.mkdir(parents=True, exist_ok=True)
            fallback = fallback_dir / 'puckvalue.sqlite'
            conn = sqlite3.connect(fallback)
            self.db_path = fallback
            self._use_uri = False
            self._create_schema(conn)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS runs (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                league_id TEXT NOT NULL,
                season TEXT NOT NULL,
                request_json TEXT NOT NULL,
                players_json TEXT NOT NULL,
                picks_json TEXT NOT NULL,
                teams_json TEXT NOT NULL,
                snapshot_json TEXT NOT NULL
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS runs_league_idx ON runs (league_id, season)")
        conn.commit()

    def save_valuation(
        self,
        valuation: LeagueValuation,
        *,
        request: Optional[dict] = None,
        run_id: Optional[str] = None,
    ) -> RunRecord:
        run_id = run_id or uuid4().hex
        created_at = valuation.computed_at or datetime.now(timezone.utc)
        picks = [pick.model_dump() for pick in valuation.pick_records()]
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO runs (
                    id, created_at, league_id, season, request_json,
                    players_json, picks_json, teams_json, snapshot_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    run_id,
                    created_at.isoformat(),
                    valuation.league_id,
                    valuation.season,
                    json.dumps(request or {}),
                    json.dumps(valuation_players(valuation)),
                    json.dumps(picks),
                    json.dumps(valuation_teams(valuation)),
                    valuation.snapshot.model_dump_json(),
                ),
            )
            conn.commit()
        record = self.get_run(run_id)
        if record is None:  # pragma: no cover
            raise KeyError(f"Run {run_id} not found after insert")
        return record

    def get_run(self, run_id: str) -> Optional[RunRecord]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM runs WHERE id = ?", (run_id,)).fetchone()
            if row is None:
                return None
            return self._row_to_record(row)

    def list_runs(self, limit: int = 50, *, league_id: Optional[str] = None) -> List[RunRecord]:
        query = "SELECT * FROM runs"
        params: List[Any] = []
        if league_id:
            query += " WHERE league_id = ?"
            params.append(league_id)
        query += " ORDER BY datetime(created_at) DESC LIMIT ?"
        params.append(limit)
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_record(row) for row in rows]

    def delete_run(self, run_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM runs WHERE id = ?", (run_id,))
            conn.commit()
            return cursor.rowcount > 0

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> RunRecord:
        return RunRecord(
            run_id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            league_id=row["league_id"],
            season=row["season"],
            request=json.loads(row["request_json"]),
            players=json.loads(row["players_json"]),
            picks=json.loads(row["picks_json"]),
            teams=json.loads(row["teams_json"]),
            snapshot=json.loads(row["snapshot_json"]),
        )
