"""Player level records shared by ingestion, the engine and the API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from .keeper import KeeperAssignment

PlayerRole = Literal["skater", "goalie"]

VALUE_BOUNDS: Dict[str, tuple[float, float]] = {
    "skater": (45.0, 175.0),
    "goalie": (50.0, 160.0),
}


class CategoryStat(BaseModel):
    """One raw numeric observation for a player in one category."""

    player_id: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    value: float

    model_config = ConfigDict(frozen=True)


class LeagueCategoryDistribution(BaseModel):
    category: str
    mean: float
    std_dev: float = Field(..., ge=0.0)
    count: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class PlayerSnapshot(BaseModel):
    """A rostered player with current and historical per-category stats.

    ``historical`` holds the two-season average the ingestion layer derives;
    categories missing from it are simply not blended.
    """

    player_id: str = Field(..., min_length=1)
    name: str = ""
    team_id: Optional[str] = None
    positions: List[str] = Field(default_factory=list)
    stats: Dict[str, float] = Field(default_factory=dict)
    historical: Dict[str, float] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def role(self) -> PlayerRole:
        return "goalie" if any(pos.upper() == "G" for pos in self.positions) else "skater"

    @property
    def primary_position(self) -> Optional[str]:
        return self.positions[0].upper() if self.positions else None


class LeagueSnapshot(BaseModel):
    league_id: str = Field(..., min_length=1)
    season: str = ""
    players: List[PlayerSnapshot] = Field(default_factory=list)
    keepers: List[KeeperAssignment] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def rosters(self) -> Dict[str, List[PlayerSnapshot]]:
        grouped: Dict[str, List[PlayerSnapshot]] = {}
        for player in self.players:
            if player.team_id:
                grouped.setdefault(player.team_id, []).append(player)
        return grouped


class PlayerValue(BaseModel):
    player_id: str = Field(..., min_length=1)
    league_id: str
    base_value: float
    role: PlayerRole
    computed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_bounds(self) -> "PlayerValue":
        low, high = VALUE_BOUNDS[self.role]
        if not low <= self.base_value <= high:
            raise ValueError(
                f"{self.role} value {self.base_value:.2f} outside [{low:.0f}, {high:.0f}]"
            )
        return self
