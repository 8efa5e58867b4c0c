"""REST API: the authenticated data endpoint plus team and player views."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from typing import Literal
from urllib.parse import quote, urlencode

from fastapi import FastAPI, Header, HTTPException, Query
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from aflboard.api.schemas import CsvParseErrorResponse, PlayerViewResponse, SelectionResponse, TeamViewResponse
from aflboard.derive import DashboardViews, Memo
from aflboard.errors import StorageNotConfigured
from aflboard.ingest import parse_csv_rows
from aflboard.loader import BlobDataSource, ViewStore
from aflboard.models import DatasetBundle
from aflboard.reference import team_by_id
from aflboard.routing import SelectComparePlayer, SelectCompareTeam, Selection, SelectionStore, SetOutlook
from aflboard.settings import Settings
from aflboard.storage import BlobStore, blob_store_from_settings


logger = logging.getLogger(__name__)

ALLOWED_FILES = frozenset(
    {
        "roster_players.csv",
        "team_kpis.csv",
        "team_rank_timeseries.csv",
        "team_skill_radar.csv",
        "player_acquisition_breakdown.csv",
        "player_projections.csv",
        "form_player_afl.csv",
        "form_player_vfl.csv",
        "career_projections.csv",
        "CD_player_stats_agg.csv",
    }
)


def _selection_response(selection: Selection) -> SelectionResponse:
    return SelectionResponse.model_validate(asdict(selection))


def create_app(
    settings: Settings | None = None,
    *,
    store: ViewStore | None = None,
    blob_store: BlobStore | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    view_store = store or ViewStore()
    memo = Memo()
    load_lock = asyncio.Lock()

    app = FastAPI(title="aflboard")
    app.state.settings = settings
    app.state.view_store = view_store

    def resolve_blob_store() -> BlobStore:
        return blob_store if blob_store is not None else blob_store_from_settings(settings)

    async def current_bundle() -> DatasetBundle:
        async with load_lock:
            if view_store.bundle.version == 0:
                try:
                    source = BlobDataSource(resolve_blob_store())
                except StorageNotConfigured as exc:
                    raise HTTPException(status_code=500, detail=str(exc)) from exc
                result = await view_store.refresh(source)
                if not result.ok:
                    raise HTTPException(status_code=503, detail=result.error or "Dataset load failed")
        return view_store.bundle

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/data")
    async def data(
        file: str = Query(""),
        x_data_key: str | None = Header(default=None),
    ) -> Response:
        expected = settings.data_api_key
        if not expected:
            return PlainTextResponse("Server misconfigured: missing DATA_API_KEY", status_code=500)
        if not x_data_key or x_data_key != expected:
            return PlainTextResponse("Unauthorized", status_code=401)

        name = file.strip()
        if name not in ALLOWED_FILES:
            return PlainTextResponse("Invalid file", status_code=400)

        try:
            blobs = resolve_blob_store()
        except StorageNotConfigured as exc:
            return PlainTextResponse(str(exc), status_code=500)

        try:
            rows, issues = parse_csv_rows(blobs.read_text(name))
        except Exception as exc:
            logger.exception("Serving %s failed", name)
            return PlainTextResponse(str(exc), status_code=500)

        if issues:
            logger.warning("CSV parse error in %s: %d issue(s)", name, len(issues))
            body = CsvParseErrorResponse(errors=[issue.to_dict() for issue in issues])
            return JSONResponse(body.model_dump(), status_code=500)
        return JSONResponse(rows, headers={"cache-control": "no-store"})

    @app.get("/team/{team_id}", response_model=TeamViewResponse)
    async def team_view(team_id: str, season: int | None = None, compare: str = "") -> TeamViewResponse:
        bundle = await current_bundle()
        query = urlencode({"season": season}) if season is not None else ""
        selection_store = SelectionStore(f"/team/{quote(team_id)}?{query}")
        if team_by_id(selection_store.selection.team_id) is None:
            raise HTTPException(status_code=404, detail="Unknown team")
        if compare:
            selection_store.dispatch(SelectCompareTeam(compare))

        view = DashboardViews(bundle, selection_store.selection, memo).team_view()
        return TeamViewResponse(
            url=selection_store.url,
            selection=_selection_response(selection_store.selection),
            view=asdict(view),
        )

    @app.get("/player/{player_id}", response_model=PlayerViewResponse)
    async def player_view(
        player_id: str,
        team: str = "",
        season: int | None = None,
        outlook: Literal["neutral", "optimistic", "pessimistic"] = "neutral",
        compare: str = "",
    ) -> PlayerViewResponse:
        bundle = await current_bundle()
        params = {key: value for key, value in (("team", team), ("season", season)) if value not in ("", None)}
        selection_store = SelectionStore(f"/player/{quote(player_id)}?{urlencode(params)}")
        if selection_store.selection.page != "career":
            raise HTTPException(status_code=404, detail="Player not found")
        selection_store.infer_team(bundle.roster_players)
        selection_store.dispatch(SetOutlook(outlook))
        if compare:
            selection_store.dispatch(SelectComparePlayer(compare))

        view = DashboardViews(bundle, selection_store.selection, memo).player_view()
        if view.player is None or view.player.id != selection_store.selection.player_id:
            raise HTTPException(status_code=404, detail="Player not found")
        return PlayerViewResponse(
            url=selection_store.url,
            selection=_selection_response(selection_store.selection),
            view=asdict(view),
        )

    return app
