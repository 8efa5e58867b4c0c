"""Head-to-head comparison tables for two teams or two players."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Sequence

from aflboard.models import PlayerStatsAgg, TeamKpi
from aflboard.reference import AGE_CATEGORY_ORDER, PLAYER_STAT_CATEGORY_ORDER, category_sort_key

from .stats import finite_or_none, percentile_from_sorted
from .team import AgeCategoryShare, RadarPoint, ShareSlice


MIN_PERCENTILE_SAMPLE = 8


@dataclass(frozen=True)
class ComparisonRow:
    metric: str
    a: float | None
    b: float | None
    diff: float | None


@dataclass(frozen=True)
class TeamProfile:
    """The derived team values a comparison reads from one side."""

    kpi: TeamKpi | None
    age_share: Sequence[AgeCategoryShare] = ()
    acquisition: Sequence[ShareSlice] = ()
    radar: Sequence[RadarPoint] = ()


@dataclass(frozen=True)
class TeamComparison:
    scalars: list[ComparisonRow]
    age_drivers: list[ComparisonRow]
    acquisition: list[ComparisonRow]
    radar: list[ComparisonRow]


@dataclass(frozen=True)
class ComparisonGroup:
    category: str
    rows: list[ComparisonRow]


def _row(metric: str, a: float | None, b: float | None) -> ComparisonRow:
    return ComparisonRow(metric=metric, a=a, b=b, diff=None if a is None or b is None else a - b)


def _scalar(kpi: TeamKpi | None, attr: str) -> float | None:
    return finite_or_none(getattr(kpi, attr)) if kpi is not None else None


def _zero_filled(metrics: Sequence[str], a: Dict[str, float], b: Dict[str, float]) -> list[ComparisonRow]:
    return [_row(metric, a.get(metric, 0.0), b.get(metric, 0.0)) for metric in metrics]


def team_comparison(primary: TeamProfile, compare: TeamProfile) -> TeamComparison:
    scalars = [
        _row(label, _scalar(primary.kpi, attr), _scalar(compare.kpi, attr))
        for label, attr in (
            ("Age", "squad_age_avg"),
            ("Experience", "squad_experience_avg_games"),
            ("Turnover", "squad_turnover_players"),
        )
    ]

    age_a = {share.age_category: share.pct for share in primary.age_share}
    age_b = {share.age_category: share.pct for share in compare.age_share}
    categories = [c for c in {*age_a, *age_b, *AGE_CATEGORY_ORDER} if c]
    categories.sort(key=lambda c: (*category_sort_key(c, AGE_CATEGORY_ORDER), c.casefold()))

    acq_a = {share.metric: share.value for share in primary.acquisition}
    acq_b = {share.metric: share.value for share in compare.acquisition}
    pathways = sorted({*acq_a, *acq_b}, key=lambda m: (m.casefold(), m))

    radar_a = {point.metric: point.value for point in primary.radar}
    radar_b = {point.metric: point.value for point in compare.radar}
    radar_metrics = list(dict.fromkeys([*radar_a, *radar_b]))

    return TeamComparison(
        scalars=scalars,
        age_drivers=_zero_filled(categories, age_a, age_b),
        acquisition=_zero_filled(pathways, acq_a, acq_b),
        radar=_zero_filled(radar_metrics, radar_a, radar_b),
    )


def player_comparison(
    stats_rows: Sequence[PlayerStatsAgg],
    player_a: str,
    player_b: str,
    season: int | None,
) -> list[ComparisonGroup]:
    """Percentile rows per stat category for two players in one season.

    Metrics with fewer than eight league samples are left out.
    """

    if not player_a or not player_b or season is None:
        return []

    metrics: Dict[str, dict] = {}
    for row in stats_rows:
        if row.season != season:
            continue
        metric = row.metric_name.strip()
        if not metric:
            continue
        record = metrics.setdefault(metric, {"category": row.category.strip() or "Other", "values": []})
        if math.isfinite(row.metric_value):
            record["values"].append(row.metric_value)
        if row.player_id == player_a:
            record["a"] = row.metric_value
        if row.player_id == player_b:
            record["b"] = row.metric_value

    groups: Dict[str, list[ComparisonRow]] = {}
    for metric, record in metrics.items():
        a, b = record.get("a"), record.get("b")
        values = sorted(record["values"])
        if a is None or b is None or len(values) < MIN_PERCENTILE_SAMPLE:
            continue
        a_pct = percentile_from_sorted(a, values)
        b_pct = percentile_from_sorted(b, values)
        if a_pct is None or b_pct is None:
            continue
        groups.setdefault(record["category"], []).append(_row(metric, a_pct, b_pct))

    ordered = sorted(
        groups.items(),
        key=lambda item: (*category_sort_key(item[0], PLAYER_STAT_CATEGORY_ORDER), item[0].casefold()),
    )
    return [
        ComparisonGroup(category=category, rows=sorted(rows, key=lambda row: (row.metric.casefold(), row.metric)))
        for category, rows in ordered
    ]
