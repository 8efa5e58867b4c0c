"""Concurrent all-or-nothing loading of every dashboard dataset."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

from aflboard.errors import DataLoadError, DatasetLoadError
from aflboard.ingest import DATASET_KINDS, NormalizeReport, get_schema, normalize_rows
from aflboard.models import EMPTY_BUNDLE, DatasetBundle

from .sources import DataSource


logger = logging.getLogger(__name__)

# Dataset kind -> DatasetBundle attribute.
BUNDLE_FIELDS: Dict[str, str] = {
    "roster_players": "roster_players",
    "team_kpis": "team_kpis",
    "team_rank_timeseries": "rank_series",
    "team_skill_radar": "skill_radar",
    "player_acquisition_breakdown": "acquisitions",
    "player_projection": "player_projections",
    "form_player_afl": "afl_form",
    "form_player_vfl": "vfl_form",
    "career_projections": "career_projections",
    "player_stats_agg": "player_stats",
}


@dataclass(frozen=True)
class LoadResult:
    ok: bool
    bundle: Optional[DatasetBundle] = None
    error: Optional[str] = None


async def load_dataset(source: DataSource, kind: str) -> NormalizeReport:
    """Fetch and normalize one dataset, trying each filename candidate in order."""

    schema = get_schema(kind)
    last_error: Exception | None = None
    for filename in schema.filenames:
        try:
            raw_rows = await source.fetch(filename)
        except DataLoadError as exc:
            logger.debug("Loading %s from %s failed: %s", kind, filename, exc)
            last_error = exc
            continue
        return normalize_rows(kind, raw_rows)
    if last_error is not None:
        raise last_error
    names = ", ".join(schema.filenames)
    raise DatasetLoadError(f"Failed to load any of: {names}", filename=names)


async def load_all(source: DataSource) -> LoadResult:
    """Load all datasets concurrently; any failure fails the whole load.

    This is not fail-fast: every request is allowed to settle before the result
    is decided, so a failed load returns only once the slowest dataset has
    answered. The reported error is the first failure in dataset order so the
    message does not depend on response timing.
    """

    results = await asyncio.gather(
        *(load_dataset(source, kind) for kind in DATASET_KINDS),
        return_exceptions=True,
    )
    reports: Dict[str, NormalizeReport] = {}
    for kind, result in zip(DATASET_KINDS, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.warning("Dataset load failed for %s: %s", kind, result)
            return LoadResult(ok=False, error=str(result) or type(result).__name__)
        reports[kind] = result

    bundle = DatasetBundle(
        **{BUNDLE_FIELDS[kind]: report.rows for kind, report in reports.items()},
        dropped_rows={kind: report.dropped for kind, report in reports.items()},
    )
    logger.info(
        "Loaded %d datasets (%d rows, %d dropped)",
        len(reports),
        sum(len(report.rows) for report in reports.values()),
        sum(report.dropped for report in reports.values()),
    )
    return LoadResult(ok=True, bundle=bundle)


Subscriber = Callable[[DatasetBundle], None]


class ViewStore:
    """Holds the published dataset snapshot plus load status."""

    def __init__(self, bundle: DatasetBundle = EMPTY_BUNDLE):
        self.bundle = bundle
        self.loading = False
        self.error: Optional[str] = None
        self.disposed = False
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, bundle: DatasetBundle) -> DatasetBundle:
        published = replace(bundle, version=self.bundle.version + 1)
        self.bundle = published
        for callback in list(self._subscribers):
            callback(published)
        return published

    async def refresh(self, source: DataSource) -> LoadResult:
        self.loading = True
        self.error = None
        try:
            result = await load_all(source)
        finally:
            if not self.disposed:
                self.loading = False
        if self.disposed:
            logger.debug("Discarding load result for a disposed store")
            return result
        if result.ok and result.bundle is not None:
            self.publish(result.bundle)
        else:
            self.error = result.error
        return result

    def dispose(self) -> None:
        self.disposed = True
        self._subscribers.clear()
