"""Command-line interface for valuing a league from stat exports."""

from __future__ import annotations

import argparse
import csv
import json
import logging
from pathlib import Path

from puckvalue.config import load_config
from puckvalue.config_loader import ConfigProfile
from puckvalue.engine import valuate_league
from puckvalue.errors import ValuationError
from puckvalue.ingest import load_league_snapshot
from puckvalue.ingest.stats import DEFAULT_STATS_MAPPING


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Value players, picks and teams from league stats")
    parser.add_argument("stats", type=Path, help="Path to long-format stats CSV")
    parser.add_argument("--league-id", default="league", help="League identifier")
    parser.add_argument("--season", default="", help="Season label (e.g., 2025)")
    parser.add_argument("--keepers", type=Path, default=None, help="Optional keeper assignments CSV")
    parser.add_argument("--historical", type=Path, default=None, help="Optional historical stats CSV")
    parser.add_argument("--output", type=Path, default=Path("player_values.csv"), help="Output CSV path")
    parser.add_argument("--team", default=None, help="Print the dashboard for this team as JSON")
    parser.add_argument(
        "--stats-column",
        action="append",
        default=[],
        help="Mapping for stats CSV columns (e.g., player_id=PlayerKey)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Load valuation profile JSON")
    parser.add_argument("--save-profile", type=Path, default=None, help="Save column mapping and overrides JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    stats_mapping = _parse_mapping(args.stats_column)
    config = load_config()
    profile = ConfigProfile()
    if args.config:
        profile = ConfigProfile.load(args.config)
        stats_mapping = profile.stats_mapping | stats_mapping
        config = profile.apply(config)
    if args.save_profile:
        ConfigProfile(stats_mapping=stats_mapping, valuation=profile.valuation).save(args.save_profile)
        print(f"Saved valuation profile to {args.save_profile}")

    try:
        snapshot = load_league_snapshot(
            args.stats,
            league_id=args.league_id,
            season=args.season,
            keepers=args.keepers,
            historical=args.historical,
            mapping={**DEFAULT_STATS_MAPPING, **stats_mapping} if stats_mapping else None,
        )
        valuation = valuate_league(snapshot, config=config)
    except (ValuationError, ValueError) as exc:
        print(f"Valuation failed: {exc}")
        return 1

    with args.output.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["player_id", "name", "team_id", "positions", "role", "base_value", "trade_value", "keeper_tier"])
        for player in sorted(
            snapshot.players,
            key=lambda item: (-valuation.trade_value(item.player_id), item.player_id),
        ):
            value = valuation.player_values[player.player_id]
            keeper = valuation.keeper_valuations.get(player.player_id)
            writer.writerow([
                player.player_id,
                player.name,
                player.team_id or "",
                "/".join(player.positions),
                value.role,
                f"{value.base_value:.2f}",
                f"{valuation.trade_value(player.player_id):.2f}",
                keeper.tier if keeper else "",
            ])
    print(f"Wrote {len(valuation.player_values)} player values to {args.output}")

    print("Draft pick values:")
    for round_number, score in sorted(valuation.pick_values.items()):
        print(f"  Round {round_number:>2}: {score:6.1f}")

    if args.team:
        if args.team not in valuation.team_summaries:
            print(f"Unknown team {args.team}")
            return 1
        dashboard = {
            "team_id": args.team,
            "summary": [item.model_dump() for item in valuation.team_summaries[args.team]],
            "grades": {area: grade.model_dump() for area, grade in valuation.team_grades[args.team].items()},
            "narrative": valuation.narratives[args.team].model_dump(),
            "recommendations": [rec.model_dump() for rec in valuation.recommendations_for(args.team, config=config)],
            "trade_partners": [
                {"team_id": partner.team_id, "can_offer": list(partner.can_offer), "needs": list(partner.needs)}
                for partner in valuation.trade_partners(args.team)
            ],
        }
        print(json.dumps(dashboard, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
