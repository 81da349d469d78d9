"""Lightweight REST client for the puckvalue API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def load_trade(path: Path | None) -> dict:
    if path is None:
        return {}
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid trade JSON: {exc}") from exc


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the puckvalue REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("stats", type=Path, nargs="?", help="Stats CSV")
    parser.add_argument("--league-id", default="league", help="League identifier for a new valuation")
    parser.add_argument("--season", default="", help="Season label for a new valuation")
    parser.add_argument("--keepers", type=Path, help="Keeper assignments CSV")
    parser.add_argument("--historical", type=Path, help="Historical stats CSV")
    parser.add_argument("--list-runs", action="store_true", help="List recent valuation runs and exit")
    parser.add_argument("--get-run", metavar="RUN_ID", help="Fetch a specific run and exit")
    parser.add_argument("--team", metavar="TEAM_ID", help="Fetch the team dashboard for --get-run")
    parser.add_argument("--export-run", metavar="RUN_ID", help="Download player values CSV for a run")
    parser.add_argument("--export-path", type=Path, help="Destination path for exported CSV")
    parser.add_argument("--trade", type=Path, help="Trade request JSON to evaluate")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        if args.list_runs:
            resp = client.get("/valuations")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return
        if args.get_run:
            path = f"/valuations/{args.get_run}"
            if args.team:
                path += f"/teams/{args.team}"
            resp = client.get(path)
            if resp.status_code == 404:
                raise SystemExit(f"{path} not found")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return
        if args.export_run:
            resp = client.get(f"/valuations/{args.export_run}/export.csv")
            if resp.status_code == 404:
                raise SystemExit(f"run {args.export_run} not found")
            resp.raise_for_status()
            if args.export_path:
                args.export_path.write_text(resp.text)
                print(f"CSV export saved to {args.export_path}")
            else:
                print(resp.text)
            return
        if args.trade:
            resp = client.post("/trades/evaluate", json=load_trade(args.trade))
            if resp.status_code >= 400:
                raise SystemExit(f"trade rejected: {resp.text}")
            print(json.dumps(resp.json(), indent=2))
            return

        if args.stats is None:
            raise SystemExit("stats file is required unless using --list-runs/--get-run/--export-run/--trade")

        files = {"stats": (args.stats.name, args.stats.read_bytes(), "text/csv")}
        if args.keepers:
            files["keepers"] = (args.keepers.name, args.keepers.read_bytes(), "text/csv")
        if args.historical:
            files["historical"] = (args.historical.name, args.historical.read_bytes(), "text/csv")
        data = {"league_id": args.league_id, "season": args.season}

        resp = client.post("/valuations", files=files, data=data)
        if resp.status_code == 400:
            raise SystemExit(f"valuation rejected: {resp.json().get('detail')}")
        resp.raise_for_status()
        payload = resp.json()
        print(f"Run {payload['run_id']}: {len(payload['players'])} players, {len(payload['teams'])} teams")
        for pick in payload["picks"]:
            print(f"  Round {pick['round']:>2}: {pick['score']:6.1f}")


if __name__ == "__main__":
    main()
