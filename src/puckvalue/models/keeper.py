"""Keeper contract and draft pick records."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

ValueTierName = Literal["Generational", "Franchise", "Star", "Core", "Normal"]


class KeeperAssignment(BaseModel):
    player_id: str = Field(..., min_length=1)
    team_id: str
    league_id: str
    original_draft_round: int = Field(..., ge=1, le=16)
    keeper_year_index: int = Field(default=0, ge=0, le=2)
    years_remaining: int = Field(default=3, ge=0, le=3)
    keeper_round: Optional[int] = Field(default=None, ge=1, le=16)

    model_config = ConfigDict(frozen=True)


class KeeperValuation(BaseModel):
    player_id: str
    base_value: float
    tier: ValueTierName
    surplus_bonus: float
    control_bonus: float
    keeper_bonus: float
    trade_bonus: float
    trade_value: float

    model_config = ConfigDict(frozen=True)


class DraftPickValue(BaseModel):
    league_id: str
    round: int = Field(..., ge=1, le=16)
    score: float

    model_config = ConfigDict(frozen=True)
