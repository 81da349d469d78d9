"""Team dashboard and recommendation records."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

Strength = Literal["elite", "strong", "neutral", "weak", "critical"]
GradeArea = Literal["offense", "goalies", "physical", "depth", "keeper"]
GradeLetter = Literal["A", "B", "C", "D", "F"]


class TeamCategorySummary(BaseModel):
    team_id: str
    category: str
    label: str
    total: float
    z_score: float
    rank: int = Field(..., ge=1)
    teams: int = Field(..., ge=1)
    strength: Strength

    model_config = ConfigDict(frozen=True)


class TeamGrade(BaseModel):
    team_id: str
    area: GradeArea
    score: float
    letter: GradeLetter
    reason: str

    model_config = ConfigDict(frozen=True)


class TeamNarrative(BaseModel):
    team_id: str
    strengths: List[str]
    weaknesses: List[str]
    summary: str

    model_config = ConfigDict(frozen=True)


class Recommendation(BaseModel):
    """A ranked trade target for a team's weak categories."""

    candidate_player_id: str
    team_id: Optional[str] = None
    fit_score: float
    per_category_stat: Dict[str, float] = Field(default_factory=dict)
    percentiles: Dict[str, float] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)
