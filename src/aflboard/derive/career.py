"""Player career view models: trajectories, ranks, vitals and skill percentiles."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Sequence

from aflboard.ingest import canonical_club, coerce_team_id
from aflboard.models import CareerProjection, PlayerProjection
from aflboard.reference import team_name

from .formatting import BULLET, EM_DASH, fmt_aud, fmt_salary_k, ordinal
from .stats import clamp01_probability, finite_or_none, percentile_from_sorted
from .team import KpiCard


COMPARE_PREFIX = "compare_"

ADVANCED_METRICS: tuple[tuple[str, str], ...] = (
    ("Ball Use", "ball_use"),
    ("Kicking", "kicking"),
    ("Handballing", "handballing"),
    ("Transition", "transition_ball_use"),
    ("Post clearance", "post_clearance_ball_use"),
    ("Clearance", "clearance_ball_use"),
    ("Ball Winning", "ball_winning"),
    ("Intercepts", "intercepts"),
    ("Aerial", "aerial"),
    ("Ground", "ground"),
    ("Run/Carry", "run_carry"),
    ("TO-Transition", "turnover_transition_ball_winning"),
    ("Stopp-Transition", "stoppage_transition_ball_winning"),
    ("Pre clearance", "pre_clearance_ball_winning"),
    ("Spoiling", "spoiling"),
)

# Seasons -> metric key -> ascending values.
Distributions = Dict[int, Dict[str, list]]


@dataclass(frozen=True)
class PlayerOption:
    id: str
    name: str
    team: str | None = None
    position: str = ""


@dataclass(frozen=True)
class TrajectoryPoint:
    """One season of a player's career line.

    ``actual`` is set on historical seasons and ``estimate`` on projected ones;
    a point never carries both.
    """

    season: int
    actual: float | None
    estimate: float | None
    lower0: float | None
    band: float | None
    salary: float | None
    aa: float | None
    games: float | None
    seasons_to_project: float | None
    season_90: float | None
    position: str
    team: str
    rank_all: float | None
    rank_pos: float | None
    horizon: int
    source_season: int
    advanced: Mapping[str, float | None] = field(default_factory=dict)

    @property
    def value(self) -> float | None:
        return self.actual if self.actual is not None else self.estimate


@dataclass(frozen=True)
class OutcomeProbabilities:
    aa: float | None
    games: float | None


@dataclass(frozen=True)
class RankInfo:
    all: float | None = None
    pos: float | None = None
    total_all: int | None = None
    total_pos: int | None = None


@dataclass(frozen=True)
class PlayerVitals:
    height: str | None = None
    age: str | None = None
    drafted: str | None = None


@dataclass(frozen=True)
class SkillPercentile:
    label: str
    key: str
    percentile: float | None


def _option_for(row: CareerProjection) -> PlayerOption | None:
    if not row.source_provider_id or not row.source_player:
        return None
    return PlayerOption(
        id=row.source_provider_id,
        name=row.source_player,
        team=row.team,
        position=row.source_position,
    )


def _unique_options(rows: Sequence[CareerProjection]) -> list[PlayerOption]:
    seen: Dict[tuple[str, str], PlayerOption] = {}
    for row in rows:
        option = _option_for(row)
        if option is not None:
            seen.setdefault((option.id, option.name), option)
    return sorted(seen.values(), key=lambda option: (option.name.casefold(), option.name))


def _row_club(row: CareerProjection) -> str:
    team = (row.team or "").strip()
    return canonical_club(team_name(coerce_team_id(team)))


def club_players(career_rows: Sequence[CareerProjection], club: str) -> list[PlayerOption]:
    """Players listed at a club; rows without a team column are kept."""

    rows = [row for row in career_rows if not (row.team or "").strip() or _row_club(row) == club]
    return _unique_options(rows)


def all_players(career_rows: Sequence[CareerProjection]) -> list[PlayerOption]:
    return _unique_options(career_rows)


def resolve_player_id(options: Sequence[PlayerOption], requested: str, current: str = "") -> str:
    """Keep a deep-linked or current player when listed, else the first option."""

    ids = {option.id for option in options}
    if requested and requested in ids:
        return requested
    if current and current in ids:
        return current
    return options[0].id if options else ""


def _first_positive(values: Sequence[float | None]) -> float | None:
    for value in values:
        if value is not None and math.isfinite(value) and value > 0:
            return value
    return None


def _scenario(neutral: float | None, optimistic: float | None, pessimistic: float | None, outlook: str) -> float | None:
    if outlook == "optimistic" and optimistic is not None:
        return optimistic
    if outlook == "pessimistic" and pessimistic is not None:
        return pessimistic
    return neutral


def build_trajectory(
    career_rows: Sequence[CareerProjection],
    player_id: str,
    outlook: str = "neutral",
) -> list[TrajectoryPoint]:
    """Career line for one player under the chosen outlook.

    The projection horizon is cut at the first positive ``Season_90`` value on
    the optimistic outlook (falling back to ``Seasons``), otherwise at the first
    positive ``Seasons`` value. Historical rows are always kept.
    """

    if not player_id:
        return []
    rows = sorted(
        (row for row in career_rows if row.source_provider_id == player_id),
        key=lambda row: row.season,
    )
    if not rows:
        return []

    cutoff = _first_positive([row.seasons_to_project for row in rows])
    if outlook == "optimistic":
        cutoff = _first_positive([row.season_90 for row in rows]) or cutoff
    if cutoff:
        rows = [row for row in rows if row.is_actual or row.horizon <= cutoff]

    points = []
    for row in rows:
        actual = row.is_actual
        lower, upper = row.lower, row.upper
        points.append(
            TrajectoryPoint(
                season=row.season,
                actual=row.estimate if actual else None,
                estimate=None if actual else _scenario(row.estimate, row.optimistic, row.pessimistic, outlook),
                lower0=lower,
                band=max(0.0, upper - lower) if lower is not None and upper is not None else None,
                salary=row.salary if actual else _scenario(row.salary, row.salary_opt, row.salary_pes, outlook),
                aa=row.aa,
                games=row.games,
                seasons_to_project=row.seasons_to_project,
                season_90=row.season_90,
                position=row.source_position,
                team=(row.team or "").strip(),
                rank_all=row.rank_all,
                rank_pos=row.rank_pos,
                horizon=row.horizon,
                source_season=row.source_season,
                advanced=dict(row.advanced),
            )
        )
    return points


_PRIMARY_FIELDS = (
    "actual",
    "estimate",
    "lower0",
    "band",
    "salary",
    "aa",
    "games",
    "seasons_to_project",
    "position",
    "team",
    "rank_all",
    "rank_pos",
    "horizon",
    "source_season",
)
_COMPARE_FIELDS = ("actual", "estimate", "lower0", "band", "salary")


def merge_trajectories(
    primary: Sequence[TrajectoryPoint],
    compare: Sequence[TrajectoryPoint] = (),
) -> list[Dict[str, Any]]:
    """One chart row per season across both players.

    Compare fields carry the ``compare_`` prefix. A ``bridge`` value links the
    primary player's last actual season to the first projected one.
    """

    seasons = sorted({point.season for point in primary} | {point.season for point in compare})
    by_season: Dict[int, Dict[str, Any]] = {season: {"season": season} for season in seasons}

    for point in primary:
        by_season[point.season].update({name: getattr(point, name) for name in _PRIMARY_FIELDS})
    for point in compare:
        by_season[point.season].update(
            {f"{COMPARE_PREFIX}{name}": getattr(point, name) for name in _COMPARE_FIELDS}
        )

    last_actual = next((point for point in reversed(primary) if point.actual is not None), None)
    first_projected = next((point for point in primary if point.estimate is not None), None)
    if last_actual and first_projected and last_actual.season != first_projected.season:
        by_season[last_actual.season]["bridge"] = last_actual.actual
        by_season[first_projected.season]["bridge"] = first_projected.estimate

    return [by_season[season] for season in seasons]


def _finite(value: Any) -> float | None:
    return finite_or_none(value) if value is not None else None


def trajectory_domain(chart_rows: Sequence[Mapping[str, Any]]) -> tuple[int, int]:
    """Vertical axis range covering every band and plotted value, padded by 3."""

    lows: list[float] = []
    highs: list[float] = []
    for row in chart_rows:
        for prefix in ("", COMPARE_PREFIX):
            low = _finite(row.get(f"{prefix}lower0"))
            band = _finite(row.get(f"{prefix}band"))
            if low is not None:
                lows.append(low)
                if band is not None:
                    highs.append(low + band)
            value = row.get(f"{prefix}actual")
            if value is None:
                value = row.get(f"{prefix}estimate")
            value = _finite(value)
            if value is not None:
                lows.append(value)
                highs.append(value)

    if not lows or not highs:
        return (4, 20)
    lo, hi = min(lows) - 3, max(highs) + 3
    if lo == hi:
        lo, hi = lo - 1, hi + 1
    if lo > hi:
        lo, hi = hi, lo
    min_final = max(1, math.floor(lo))
    max_final = max(min_final + 1, math.ceil(hi))
    return (min_final, max_final)


def last_actual_point(trajectory: Sequence[TrajectoryPoint]) -> TrajectoryPoint | None:
    """Latest historical season; the snapshot season for KPIs and percentiles."""

    actual = [point for point in trajectory if point.actual is not None]
    if actual:
        return actual[-1]
    unbanded = [point for point in trajectory if point.estimate is not None and point.band is None]
    if unbanded:
        return unbanded[-1]
    return trajectory[0] if trajectory else None


def next_projection_point(trajectory: Sequence[TrajectoryPoint]) -> TrajectoryPoint | None:
    return next((point for point in trajectory if point.estimate is not None), None)


def _probability_from_trajectory(trajectory: Sequence[TrajectoryPoint], attr: str) -> float | None:
    horizon_one = next(
        (point for point in trajectory if point.horizon == 1 and getattr(point, attr) is not None),
        None,
    )
    if horizon_one is not None:
        value = clamp01_probability(getattr(horizon_one, attr))
        if value is not None:
            return value
    for point in trajectory:
        value = clamp01_probability(getattr(point, attr))
        if value is not None:
            return value
    return None


def outcome_probabilities(
    projections: Sequence[PlayerProjection],
    player_id: str,
    trajectory: Sequence[TrajectoryPoint],
) -> OutcomeProbabilities:
    """All-Australian and games-milestone probabilities for a player.

    The player projection export wins; the career trajectory fills the gaps.
    """

    projection = next((row for row in projections if player_id and row.player_id == player_id), None)
    aa = clamp01_probability(projection.aa) if projection else None
    games = clamp01_probability(projection.games) if projection else None
    return OutcomeProbabilities(
        aa=aa if aa is not None else _probability_from_trajectory(trajectory, "aa"),
        games=games if games is not None else _probability_from_trajectory(trajectory, "games"),
    )


def rank_info(
    career_rows: Sequence[CareerProjection],
    player_id: str,
    snapshot_season: int | None,
) -> RankInfo:
    """League and position rank for the snapshot season.

    Ranks exported on the row are used as-is; otherwise each player's best
    estimate for the season is ranked. Totals always count unique players.
    """

    if not player_id or snapshot_season is None:
        return RankInfo()

    season_rows = [row for row in career_rows if row.season == snapshot_season]
    actual_rows = [row for row in season_rows if row.is_actual]
    usable = actual_rows or season_rows

    player_row = next((row for row in usable if row.source_provider_id == player_id), None) or next(
        (row for row in season_rows if row.source_provider_id == player_id), None
    )
    player_pos = player_row.source_position.strip() if player_row else ""

    best: Dict[str, tuple[str, float]] = {}
    for row in usable:
        if not row.source_provider_id or row.estimate is None:
            continue
        previous = best.get(row.source_provider_id)
        if previous is None or row.estimate > previous[1]:
            best[row.source_provider_id] = (row.source_position.strip(), row.estimate)

    ranked = sorted(best.items(), key=lambda item: item[1][1], reverse=True)
    same_position = [item for item in ranked if item[1][0] == player_pos] if player_pos else []
    total_all = len(ranked) or None
    total_pos = len(same_position) or None

    if player_row is not None and (player_row.rank_all is not None or player_row.rank_pos is not None):
        return RankInfo(all=player_row.rank_all, pos=player_row.rank_pos, total_all=total_all, total_pos=total_pos)

    ids = [item[0] for item in ranked]
    pos_ids = [item[0] for item in same_position]
    return RankInfo(
        all=ids.index(player_id) + 1 if player_id in ids else None,
        pos=pos_ids.index(player_id) + 1 if player_id in pos_ids else None,
        total_all=total_all,
        total_pos=total_pos,
    )


def player_vitals(career_rows: Sequence[CareerProjection], player_id: str) -> PlayerVitals:
    if not player_id:
        return PlayerVitals()
    rows = [row for row in career_rows if row.source_provider_id == player_id]
    if not rows:
        return PlayerVitals()
    pick = next((row for row in rows if row.height or row.age or row.drafted), rows[0])
    return PlayerVitals(height=pick.height, age=pick.age, drafted=pick.drafted)


def career_kpi_cards(
    trajectory: Sequence[TrajectoryPoint],
    rank: RankInfo,
    vitals: PlayerVitals,
) -> list[KpiCard]:
    last_actual = last_actual_point(trajectory)
    next_projection = next_projection_point(trajectory)

    market_value = next_projection.salary if next_projection and next_projection.salary is not None else None
    if market_value is None and last_actual is not None:
        market_value = last_actual.salary

    career_value_sub = ""
    if last_actual is not None:
        career_value = sum(
            point.salary for point in trajectory if point.season > last_actual.season and point.salary is not None
        )
        if math.isfinite(career_value):
            career_value_sub = f"Career value: {fmt_aud(career_value)}"

    age = f"Age {vitals.age}" if vitals.age else f"Age {EM_DASH}"
    drafted = vitals.drafted or f"Draft {EM_DASH}"
    return [
        KpiCard(label="Market Value", value=fmt_salary_k(market_value), sub=career_value_sub),
        KpiCard(
            label="Rank (AFL)",
            value=ordinal(rank.all) if rank.all is not None else EM_DASH,
            sub=f"out of {rank.total_all} players" if rank.total_all is not None else "",
        ),
        KpiCard(
            label="Rank (Position)",
            value=ordinal(rank.pos) if rank.pos is not None else EM_DASH,
            sub=f"out of {rank.total_pos} position players" if rank.total_pos is not None else "",
        ),
        KpiCard(label="Vitals", value=vitals.height or EM_DASH, sub=f"{age} {BULLET} {drafted}"),
    ]


def advanced_distributions(career_rows: Sequence[CareerProjection]) -> Distributions:
    """Sorted per-season value distributions for each advanced metric.

    Each player contributes one row per season, preferring a historical row
    over a projected one.
    """

    per_season: Dict[int, Dict[str, CareerProjection]] = {}
    for row in career_rows:
        if not row.source_provider_id:
            continue
        by_player = per_season.setdefault(row.season, {})
        previous = by_player.get(row.source_provider_id)
        if previous is None or (not previous.is_actual and row.is_actual):
            by_player[row.source_provider_id] = row

    distributions: Distributions = {}
    for season, by_player in per_season.items():
        buckets: Dict[str, list] = {key: [] for _, key in ADVANCED_METRICS}
        for row in by_player.values():
            for _, key in ADVANCED_METRICS:
                value = row.stat(key)
                if value is not None and math.isfinite(value):
                    buckets[key].append(value)
        for values in buckets.values():
            values.sort()
        distributions[season] = buckets
    return distributions


def skill_percentiles(snapshot: TrajectoryPoint | None, distributions: Distributions) -> list[SkillPercentile]:
    buckets = distributions.get(snapshot.season, {}) if snapshot is not None else {}
    rows = []
    for label, key in ADVANCED_METRICS:
        value = snapshot.advanced.get(key) if snapshot is not None else None
        if value is None or not math.isfinite(value):
            rows.append(SkillPercentile(label=label, key=key, percentile=None))
            continue
        rows.append(SkillPercentile(label=label, key=key, percentile=percentile_from_sorted(value, buckets.get(key, []))))
    return rows
