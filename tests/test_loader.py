import re

import httpx
import pytest

from aflboard.errors import BlobNotFound, CsvParseError, DatasetLoadError, UnauthorizedError
from aflboard.loader import ApiDataSource, BlobDataSource, ViewStore, load_all, load_dataset
from aflboard.models import EMPTY_BUNDLE
from aflboard.storage import LocalBlobStore


ROSTER_ROW = {
    "season": 2025,
    "team": "Collingwood",
    "providerId": "CD_I1",
    "player_name": "Alpha",
    "age": 22.0,
    "games": 30,
    "ratings": 9.5,
    "age_cat": "Prime",
}


def _api_source(handler, **kwargs) -> ApiDataSource:
    return ApiDataSource("http://testserver", transport=httpx.MockTransport(handler), **kwargs)


def _serving(rows_by_file: dict, *, missing=(), failing=(), seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        name = request.url.params["file"]
        if seen is not None:
            seen.append(name)
        if name in failing:
            return httpx.Response(500, text="boom")
        if name in missing:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, json=rows_by_file.get(name, []))

    return handler


class FakeSource:
    def __init__(self, rows_by_file: dict, on_fetch=None):
        self.rows_by_file = rows_by_file
        self.on_fetch = on_fetch

    async def fetch(self, filename: str):
        if self.on_fetch is not None:
            self.on_fetch(filename)
        if filename not in self.rows_by_file:
            raise DatasetLoadError(f"Failed to load {filename} via API (404)", filename=filename, status_code=404)
        return self.rows_by_file[filename]


def _all_files(**overrides) -> dict:
    files = {
        name: []
        for name in (
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
        )
    }
    files.update(overrides)
    return files


@pytest.mark.anyio
async def test_projection_filename_falls_back_to_plural():
    seen: list[str] = []
    async with _api_source(_serving({}, missing={"player_projection.csv"}, seen=seen)) as source:
        report = await load_dataset(source, "player_projection")

    assert seen == ["player_projection.csv", "player_projections.csv"]
    assert report.rows == ()


@pytest.mark.anyio
async def test_last_candidate_error_is_raised():
    handler = _serving({}, missing={"player_projection.csv", "player_projections.csv"})
    async with _api_source(handler) as source:
        with pytest.raises(DatasetLoadError, match=re.escape("Failed to load player_projections.csv via API (404)")):
            await load_dataset(source, "player_projection")


@pytest.mark.anyio
async def test_load_all_builds_bundle_and_counts_dropped_rows():
    bad_row = dict(ROSTER_ROW, age="abc")
    files = _all_files(**{"roster_players.csv": [ROSTER_ROW, bad_row]})
    async with _api_source(_serving(files)) as source:
        result = await load_all(source)

    assert result.ok
    assert result.error is None
    bundle = result.bundle
    assert [row.provider_id for row in bundle.roster_players] == ["1"]
    assert bundle.dropped_rows["roster_players"] == 1
    assert bundle.team_kpis == ()


@pytest.mark.anyio
async def test_unauthorized_message_depends_on_client_key():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="Unauthorized")

    async with _api_source(handler, client_key="wrong") as source:
        with pytest.raises(UnauthorizedError, match="check DATA_CLIENT_KEY matches DATA_API_KEY"):
            await source.fetch("team_kpis.csv")

    async with _api_source(handler) as source:
        with pytest.raises(UnauthorizedError) as excinfo:
            await source.fetch("team_kpis.csv")
    assert str(excinfo.value) == (
        "Unauthorized calling /api/data?file=team_kpis.csv (no DATA_CLIENT_KEY set for this client)"
    )


@pytest.mark.anyio
async def test_client_key_is_sent_as_header():
    headers: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        headers.append(request.headers.get("x-data-key"))
        return httpx.Response(200, json={"not": "a list"})

    async with _api_source(handler, client_key="secret") as source:
        rows = await source.fetch("team_kpis.csv")

    assert headers == ["secret"]
    assert rows == []


@pytest.mark.anyio
async def test_failed_refresh_keeps_previous_bundle():
    store = ViewStore()
    published = []
    store.subscribe(published.append)

    first = await store.refresh(FakeSource(_all_files(**{"roster_players.csv": [ROSTER_ROW]})))
    assert first.ok
    assert store.bundle.version == 1
    assert len(published) == 1

    async with _api_source(_serving(_all_files(), failing={"team_kpis.csv"})) as source:
        second = await store.refresh(source)

    assert not second.ok
    assert store.error == "Failed to load team_kpis.csv via API (500)"
    assert store.loading is False
    assert store.bundle.version == 1
    assert len(store.bundle.roster_players) == 1
    assert len(published) == 1


@pytest.mark.anyio
async def test_first_failure_in_dataset_order_is_reported():
    files = _all_files()
    del files["team_kpis.csv"]
    del files["career_projections.csv"]

    result = await load_all(FakeSource(files))

    assert not result.ok
    assert result.bundle is None
    assert result.error == "Failed to load team_kpis.csv via API (404)"


@pytest.mark.anyio
async def test_disposed_store_ignores_late_results():
    store = ViewStore()
    published = []
    store.subscribe(published.append)

    result = await store.refresh(FakeSource(_all_files(), on_fetch=lambda name: store.dispose()))

    assert result.ok
    assert store.disposed
    assert store.bundle is EMPTY_BUNDLE
    assert published == []


def test_unsubscribe_stops_notifications():
    store = ViewStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)

    store.publish(EMPTY_BUNDLE)
    unsubscribe()
    store.publish(EMPTY_BUNDLE)

    assert [bundle.version for bundle in seen] == [1]
    assert store.bundle.version == 2


@pytest.mark.anyio
async def test_blob_source_reads_csv_and_reports_issues(tmp_path):
    container = tmp_path / "data"
    container.mkdir()
    (container / "player_projections.csv").write_text(
        "team,season,player_id,name,rating,salary,AA,Games\nCollingwood,2025,CD_I1,Alpha,14.5,650000,0.1,55\n",
        encoding="utf-8",
    )
    (container / "team_kpis.csv").write_text("club,season\nCollingwood,2025,extra\n", encoding="utf-8")
    source = BlobDataSource(LocalBlobStore(tmp_path, "data"))

    report = await load_dataset(source, "player_projection")
    assert [row.player_id for row in report.rows] == ["1"]
    assert report.rows[0].aa == 0.1

    with pytest.raises(CsvParseError) as excinfo:
        await source.fetch("team_kpis.csv")
    assert excinfo.value.errors[0]["code"] == "TooManyFields"

    with pytest.raises(BlobNotFound):
        await source.fetch("roster_players.csv")


@pytest.mark.anyio
async def test_invalid_json_falls_back_to_next_filename():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        name = request.url.params["file"]
        seen.append(name)
        if name == "player_projection.csv":
            return httpx.Response(200, text="<html>maintenance</html>")
        row = {"team": "Collingwood", "season": 2025, "player_id": "CD_I1", "name": "Alpha"}
        row.update({"rating": 14.5, "salary": 650000, "AA": 0.1, "Games": 55})
        return httpx.Response(200, json=[row])

    async with _api_source(handler) as source:
        report = await load_dataset(source, "player_projection")

    assert seen == ["player_projection.csv", "player_projections.csv"]
    assert [row.player_id for row in report.rows] == ["1"]


@pytest.mark.anyio
async def test_invalid_json_error_names_the_file():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["file"] == "team_kpis.csv":
            return httpx.Response(200, text="not json")
        return httpx.Response(200, json=[])

    async with _api_source(handler) as source:
        result = await load_all(source)

    assert not result.ok
    assert result.error == "Failed to load team_kpis.csv via API (invalid JSON)"


@pytest.mark.anyio
async def test_non_list_payload_loads_as_empty_dataset():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.params["file"])
        return httpx.Response(200, json={"rows": [ROSTER_ROW]})

    async with _api_source(handler) as source:
        report = await load_dataset(source, "player_projection")

    assert seen == ["player_projection.csv"]
    assert report.rows == ()
    assert report.total == 0


@pytest.mark.anyio
async def test_blob_source_fallback_on_parse_error(tmp_path):
    container = tmp_path / "data"
    container.mkdir()
    (container / "player_projection.csv").write_text("team,season\nCollingwood,2025,extra\n", encoding="utf-8")
    (container / "player_projections.csv").write_text(
        "team,season,playerId,player_name,rating,salary,AA,Games\nCollingwood,2025,CD_I2,Bravo,11.0,500000,0.02,40\n",
        encoding="utf-8",
    )

    report = await load_dataset(BlobDataSource(LocalBlobStore(tmp_path, "data")), "player_projection")

    assert [row.player_id for row in report.rows] == ["2"]
