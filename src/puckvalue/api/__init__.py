"""REST API for the puckvalue engine."""

from __future__ import annotations

import csv
import logging
import re
from io import StringIO
from pathlib import Path
from typing import Any

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from puckvalue.api.schemas import (
    PickValueResponse,
    PlayerValueResponse,
    RunSummaryResponse,
    TeamDashboardResponse,
    TradeAssetPayload,
    TradePartnerResponse,
    TradeRequest,
    ValuationRunResponse,
)
from puckvalue.config import load_config
from puckvalue.engine import (
    TradeAsset,
    TradeEvaluation,
    evaluate_trade,
    find_trade_partners,
    recommend,
    valuate_league,
    weak_categories,
)
from puckvalue.errors import ValuationError
from puckvalue.ingest import load_league_snapshot
from puckvalue.models import LeagueSnapshot, TeamCategorySummary
from puckvalue.persistence import RunRecord, ValuationStore

logger = logging.getLogger(__name__)


def _team_summaries(run: RunRecord) -> dict[str, list[TeamCategorySummary]]:
    return {
        team_id: [TeamCategorySummary.model_validate(item) for item in data["summary"]]
        for team_id, data in run.teams.items()
    }


def run_record_to_response(run: RunRecord) -> ValuationRunResponse:
    return ValuationRunResponse(
        run_id=run.run_id,
        league_id=run.league_id,
        season=run.season,
        created_at=run.created_at,
        players=[PlayerValueResponse.model_validate(player) for player in run.players],
        picks=[PickValueResponse(round=pick["round"], score=pick["score"]) for pick in run.picks],
        teams=_team_summaries(run),
    )


def _run_to_csv(run: RunRecord) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow([
        "run_id", "player_id", "name", "team_id", "positions", "role",
        "base_value", "trade_value", "keeper_tier", "keeper_bonus",
    ])
    for player in run.players:
        keeper = player.get("keeper") or {}
        writer.writerow([
            run.run_id,
            player["player_id"],
            player["name"],
            player.get("team_id") or "",
            "/".join(player.get("positions") or []),
            player["role"],
            f"{player['base_value']:.2f}",
            f"{player['trade_value']:.2f}",
            keeper.get("tier", ""),
            "" if not keeper else f"{keeper['keeper_bonus']:.2f}",
        ])
    return buffer.getvalue()


async def _read_upload(upload: UploadFile | None) -> str | None:
    if upload is None:
        return None
    contents = await upload.read()
    if not contents:
        return None
    try:
        return contents.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"{upload.filename or 'upload'} is not UTF-8: {exc}") from exc


def _resolve_asset(payload: TradeAssetPayload, run: RunRecord | None, snapshot: LeagueSnapshot | None) -> TradeAsset:
    value = payload.value
    stats = payload.stats
    if run is not None and (value is None or stats is None):
        if payload.kind == "pick":
            round_token = re.sub(r"^(?:round|rd|r)[-_ ]?", "", payload.asset_id.strip().lower())
            match = next((pick for pick in run.picks if str(pick["round"]) == round_token), None)
            if match is None:
                raise HTTPException(status_code=400, detail=f"Unknown pick {payload.asset_id}")
            value = match["score"] if value is None else value
            stats = stats or {}
        else:
            player = next((row for row in run.players if row["player_id"] == payload.asset_id), None)
            if player is None:
                raise HTTPException(status_code=400, detail=f"Unknown player {payload.asset_id}")
            value = player["trade_value"] if value is None else value
            if stats is None and snapshot is not None:
                stats = next(
                    (dict(item.stats) for item in snapshot.players if item.player_id == payload.asset_id),
                    {},
                )
    if value is None:
        raise HTTPException(status_code=400, detail=f"No value for asset {payload.asset_id}")
    return TradeAsset(kind=payload.kind, asset_id=payload.asset_id, value=value, stats=stats or {})


def create_app() -> FastAPI:
    app = FastAPI(title="puckvalue engine")
    store = ValuationStore(Path(__file__).resolve().parent.parent / "puckvalue.sqlite")
    config = load_config()
    app.state.valuation_store = store
    app.state.valuation_config = config

    def _fetch_run_or_404(run_id: str) -> RunRecord:
        run = store.get_run(run_id)
        if run is None:
            raise HTTPException(status_code=404, detail="Run not found")
        return run

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/valuations", response_model=ValuationRunResponse)
    async def create_valuation(
        stats: UploadFile = File(...),
        keepers: UploadFile | None = File(None),
        historical: UploadFile | None = File(None),
        league_id: str = Form(...),
        season: str = Form(""),
    ):
        stats_text = await _read_upload(stats)
        if not stats_text:
            raise HTTPException(status_code=400, detail="stats file is empty")
        keepers_text = await _read_upload(keepers)
        historical_text = await _read_upload(historical)

        try:
            snapshot = load_league_snapshot(
                stats_text,
                league_id=league_id,
                season=season,
                keepers=keepers_text,
                historical=historical_text,
            )
            valuation = valuate_league(snapshot, config=config)
        except (ValuationError, ValueError) as exc:
            logger.info("Valuation for league %s rejected: %s", league_id, exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        request: dict[str, Any] = {
            "league_id": league_id,
            "season": season,
            "stats_filename": stats.filename,
            "keepers_filename": keepers.filename if keepers else None,
            "historical_filename": historical.filename if historical else None,
        }
        run = store.save_valuation(valuation, request=request)
        return run_record_to_response(run)

    @app.get("/valuations", response_model=list[RunSummaryResponse])
    async def list_valuations(limit: int = 50, league_id: str | None = None):
        return [
            RunSummaryResponse(
                run_id=run.run_id,
                league_id=run.league_id,
                season=run.season,
                created_at=run.created_at,
                players=len(run.players),
                teams=len(run.teams),
            )
            for run in store.list_runs(limit=limit, league_id=league_id)
        ]

    @app.get("/valuations/{run_id}", response_model=ValuationRunResponse)
    async def get_valuation(run_id: str):
        return run_record_to_response(_fetch_run_or_404(run_id))

    @app.get("/valuations/{run_id}/teams/{team_id}", response_model=TeamDashboardResponse)
    async def team_dashboard(run_id: str, team_id: str):
        run = _fetch_run_or_404(run_id)
        team = run.teams.get(team_id)
        if team is None:
            raise HTTPException(status_code=404, detail="Team not found")
        summaries = _team_summaries(run)
        snapshot = LeagueSnapshot.model_validate(run.snapshot)
        weak = weak_categories(summaries[team_id], config=config)
        candidates = [player for player in snapshot.players if player.team_id]
        return TeamDashboardResponse(
            run_id=run.run_id,
            team_id=team_id,
            summary=summaries[team_id],
            grades=team["grades"],
            narrative=team["narrative"],
            weak_categories=weak,
            recommendations=recommend(weak, candidates, exclude_team_id=team_id, config=config),
            trade_partners=[
                TradePartnerResponse(team_id=partner.team_id, can_offer=list(partner.can_offer), needs=list(partner.needs))
                for partner in find_trade_partners(team_id, summaries)
            ],
        )

    @app.get("/valuations/{run_id}/export.csv")
    async def export_csv(run_id: str):
        run = _fetch_run_or_404(run_id)
        return Response(
            content=_run_to_csv(run),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={run_id}.csv"},
        )

    @app.post("/trades/evaluate", response_model=TradeEvaluation)
    async def trade_evaluate(payload: TradeRequest):
        run = _fetch_run_or_404(payload.run_id) if payload.run_id else None
        snapshot = LeagueSnapshot.model_validate(run.snapshot) if run else None

        weak = payload.weak_categories
        strong = payload.strong_categories
        if run is not None and payload.team_id:
            summaries = _team_summaries(run)
            if payload.team_id not in summaries:
                raise HTTPException(status_code=404, detail="Team not found")
            if weak is None:
                weak = list(weak_categories(summaries[payload.team_id], config=config))
            if strong is None:
                strong = [
                    item.category for item in summaries[payload.team_id] if item.strength in ("elite", "strong")
                ]

        give = [_resolve_asset(asset, run, snapshot) for asset in payload.give]
        get = [_resolve_asset(asset, run, snapshot) for asset in payload.get]
        if not give and not get:
            raise HTTPException(status_code=400, detail="trade has no assets")
        return evaluate_trade(give, get, weak or [], strong or [], config=config)

    return app
