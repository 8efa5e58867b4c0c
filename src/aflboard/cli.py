"""Command-line interface for loading datasets and printing dashboard views."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import asdict, replace
from urllib.parse import quote, urlencode

from aflboard.derive import DashboardViews
from aflboard.errors import DataLoadError
from aflboard.loader import ApiDataSource, BlobDataSource, LoadResult, load_all
from aflboard.routing import OUTLOOKS, SelectComparePlayer, SelectCompareTeam, SelectionStore, SetOutlook
from aflboard.settings import Settings
from aflboard.storage import blob_store_from_settings


logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print AFL dashboard views as JSON")
    parser.add_argument(
        "--api-url",
        default=None,
        help="Load through a running /api/data endpoint (defaults to DATA_API_URL)",
    )
    parser.add_argument(
        "--storage-root",
        default=None,
        help="Read CSV exports directly from this storage root instead of the API",
    )
    parser.add_argument("--container", default=None, help="Blob container under the storage root")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (e.g. INFO, DEBUG)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    team = subparsers.add_parser("team", help="Team overview for one club")
    team.add_argument("team", help="Team id, legacy code or club name")
    team.add_argument("--season", type=int, default=None)
    team.add_argument("--compare", default="", help="Team to compare against")

    player = subparsers.add_parser("player", help="Career view for one player")
    player.add_argument("player_id", help="Champion Data player id")
    player.add_argument("--team", default="", help="Pin the player's team")
    player.add_argument("--season", type=int, default=None)
    player.add_argument("--outlook", choices=OUTLOOKS, default="neutral")
    player.add_argument("--compare", default="", help="Player to compare against")

    return parser.parse_args(argv)


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides = {}
    if args.api_url:
        overrides["api_url"] = args.api_url
    if args.storage_root:
        overrides["storage_root"] = args.storage_root
    if args.container:
        overrides["container"] = args.container
    return replace(settings, **overrides) if overrides else settings


async def _load(settings: Settings, use_storage: bool) -> LoadResult:
    if use_storage:
        return await load_all(BlobDataSource(blob_store_from_settings(settings)))
    async with ApiDataSource(settings.api_url, client_key=settings.client_key) as source:
        return await load_all(source)


def _location(path: str, params: dict) -> str:
    query = urlencode({key: value for key, value in params.items() if value not in ("", None)})
    return f"{path}?{query}" if query else path


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    settings = _settings(args)

    try:
        result = asyncio.run(_load(settings, use_storage=bool(args.storage_root)))
    except DataLoadError as exc:
        raise SystemExit(str(exc)) from exc
    if not result.ok or result.bundle is None:
        raise SystemExit(result.error or "Dataset load failed")
    logger.info("Dataset rows dropped during normalization: %s", dict(result.bundle.dropped_rows))

    if args.command == "team":
        store = SelectionStore(_location(f"/team/{quote(args.team)}", {"season": args.season}))
        if args.compare:
            store.dispatch(SelectCompareTeam(args.compare))
        view = DashboardViews(result.bundle, store.selection).team_view()
    else:
        location = _location(f"/player/{quote(args.player_id)}", {"team": args.team, "season": args.season})
        store = SelectionStore(location)
        if store.selection.page != "career":
            raise SystemExit(f"Invalid player id: {args.player_id!r}")
        store.infer_team(result.bundle.roster_players)
        store.dispatch(SetOutlook(args.outlook))
        if args.compare:
            store.dispatch(SelectComparePlayer(args.compare))
        view = DashboardViews(result.bundle, store.selection).player_view()

    payload = {"url": store.url, "selection": asdict(store.selection), "view": asdict(view)}
    print(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":
    main()
