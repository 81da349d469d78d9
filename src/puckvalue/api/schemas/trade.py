from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class TradeAssetPayload(BaseModel):
    kind: Literal["player", "pick"] = "player"
    asset_id: str = Field(..., min_length=1)
    value: float | None = None
    stats: dict[str, float] | None = None


class TradeRequest(BaseModel):
    run_id: str | None = None
    team_id: str | None = None
    give: list[TradeAssetPayload] = Field(default_factory=list)
    get: list[TradeAssetPayload] = Field(default_factory=list)
    weak_categories: list[str] | None = None
    strong_categories: list[str] | None = None
