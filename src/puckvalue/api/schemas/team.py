from __future__ import annotations

from pydantic import BaseModel

from puckvalue.models import Recommendation, TeamCategorySummary, TeamGrade, TeamNarrative


class TradePartnerResponse(BaseModel):
    team_id: str
    can_offer: list[str]
    needs: list[str]


class TeamDashboardResponse(BaseModel):
    run_id: str
    team_id: str
    summary: list[TeamCategorySummary]
    grades: dict[str, TeamGrade]
    narrative: TeamNarrative
    weak_categories: dict[str, float]
    recommendations: list[Recommendation]
    trade_partners: list[TradePartnerResponse]
