"""Pydantic models for API I/O."""

from .team import TeamDashboardResponse, TradePartnerResponse
from .trade import TradeAssetPayload, TradeRequest
from .valuation import (
    PickValueResponse,
    PlayerValueResponse,
    RunSummaryResponse,
    ValuationRunResponse,
)

__all__ = [
    "PickValueResponse",
    "PlayerValueResponse",
    "RunSummaryResponse",
    "TeamDashboardResponse",
    "TradeAssetPayload",
    "TradePartnerResponse",
    "TradeRequest",
    "ValuationRunResponse",
]
