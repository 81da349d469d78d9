from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel

from puckvalue.models import KeeperValuation, TeamCategorySummary


class PlayerValueResponse(BaseModel):
    player_id: str
    name: str
    team_id: str | None
    positions: List[str]
    role: str
    base_value: float
    trade_value: float
    keeper: KeeperValuation | None = None


class PickValueResponse(BaseModel):
    round: int
    score: float


class ValuationRunResponse(BaseModel):
    run_id: str
    league_id: str
    season: str
    created_at: datetime
    players: list[PlayerValueResponse]
    picks: list[PickValueResponse]
    teams: dict[str, list[TeamCategorySummary]]


class RunSummaryResponse(BaseModel):
    run_id: str
    league_id: str
    season: str
    created_at: datetime
    players: int
    teams: int
