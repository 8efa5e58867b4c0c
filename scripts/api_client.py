"""Lightweight REST client for the aflboard API."""

from __future__ import annotations

import argparse
import json
import os

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the aflboard REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--file", help="Fetch one dataset through /api/data")
    parser.add_argument("--key", default=os.environ.get("DATA_CLIENT_KEY", ""), help="Value for the x-data-key header")
    parser.add_argument("--team", help="Fetch the team view for this team id")
    parser.add_argument("--player", help="Fetch the career view for this player id")
    parser.add_argument("--season", type=int, default=None)
    parser.add_argument("--compare", default="", help="Team or player to compare against")
    parser.add_argument("--outlook", default="neutral")
    args = parser.parse_args()

    if not (args.file or args.team or args.player):
        raise SystemExit("one of --file, --team or --player is required")

    with httpx.Client(base_url=args.base_url) as client:
        resp = client.get("/health")
        resp.raise_for_status()

        if args.file:
            resp = client.get("/api/data", params={"file": args.file}, headers={"x-data-key": args.key})
            if resp.status_code == 401:
                raise SystemExit("unauthorized: check --key or DATA_CLIENT_KEY")
            if resp.status_code >= 400:
                raise SystemExit(f"{resp.status_code}: {resp.text}")
            rows = resp.json()
            print(f"Received {len(rows)} rows from {args.file}")
            if rows:
                print(json.dumps(rows[0], indent=2))

        params = {"season": args.season, "compare": args.compare or None}
        if args.team:
            resp = client.get(f"/team/{args.team}", params={k: v for k, v in params.items() if v is not None})
            if resp.status_code == 404:
                raise SystemExit(f"team {args.team} not found")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))

        if args.player:
            params["outlook"] = args.outlook
            resp = client.get(f"/player/{args.player}", params={k: v for k, v in params.items() if v is not None})
            if resp.status_code == 404:
                raise SystemExit(f"player {args.player} not found")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    main()
