"""Team dashboard view models derived from the normalized datasets."""

from __future__ import annotations

import math
from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable, Sequence

from aflboard.ingest import canonical_club
from aflboard.models import (
    AcquisitionBreakdown,
    AflFormRow,
    PlayerProjection,
    RankSeries,
    RosterPlayer,
    SkillRadar,
    TeamKpi,
    VflFormRow,
)
from aflboard.reference import (
    AGE_CATEGORY_COLOR,
    AGE_CATEGORY_ORDER,
    category_sort_key,
    stable_color_for_key,
    team_name,
)

from .formatting import BULLET, EM_DASH, fmt_fixed, fmt_signed, fmt_thousands, round_half_up, safe_yoy
from .stats import RankDirection, clamp, closest_season, dense_rank, finite_or_none, mean


AGE_BINS: tuple[int, ...] = tuple(range(18, 36))
DEFAULT_SEASON_PILLS: tuple[int, ...] = (2023, 2024, 2025, 2026)
PLAYER_TABLE_LIMIT = 12

RADAR_METRICS: tuple[tuple[str, str], ...] = (
    ("K-H Ratio", "kh_ratio"),
    ("GB/MK Ratio", "gb_mk_ratio"),
    ("Fwd Half", "fwd_half"),
    ("Scores", "scores"),
    ("PP Chain", "pp_chain"),
    ("Pts / i50", "points_per_i50"),
    ("Repeat i50s", "repeat_i50s"),
    ("Ball Use", "rating_ball_use"),
    ("Ball Win", "rating_ball_win"),
    ("Chain Metres", "chain_metres"),
    ("Time in Poss", "time_in_poss_pct"),
)


@dataclass(frozen=True)
class RosterSlice:
    players: tuple[RosterPlayer, ...]
    used_season: int


@dataclass(frozen=True)
class AgeBin:
    age: int
    count: int
    label: str


@dataclass(frozen=True)
class AgeCategoryShare:
    age_category: str
    points: float
    pct: float
    color: str | None = None


@dataclass(frozen=True)
class KpiSnapshot:
    """Club KPI values for the season shown, with league ranks."""

    club: str
    season: int
    kpi: TeamKpi | None
    age_rank: int | None
    experience_rank: int | None
    turnover_rank: int | None
    n_teams: int

    @property
    def age_yoy(self) -> str:
        return safe_yoy(self.kpi.squad_age_yoy if self.kpi else None, 1)

    @property
    def experience_yoy(self) -> str:
        return safe_yoy(self.kpi.squad_experience_yoy if self.kpi else None, 1)

    @property
    def turnover_yoy(self) -> str:
        return safe_yoy(self.kpi.squad_turnover_yoy if self.kpi else None, 1)


@dataclass(frozen=True)
class RankTrendPoint:
    year: int
    actual: float | None = None
    fcst_a: float | None = None
    fcst_b: float | None = None
    p25: float | None = None
    p75: float | None = None
    band_low: float | None = None
    band_range: float | None = None


@dataclass(frozen=True)
class ShareSlice:
    metric: str
    value: float
    color: str


@dataclass(frozen=True)
class RadarPoint:
    metric: str
    value: float
    compare: float | None = None


@dataclass(frozen=True)
class PlayerTableRow:
    player_id: str
    name: str
    rating: float
    salary: float
    aa: float
    games: float


@dataclass(frozen=True)
class KpiCard:
    label: str
    value: str
    sub: str
    player_id: str | None = None


def club_key_for_team(team_id: str) -> str:
    """Canonical club key for a team id (unknown ids are treated as names)."""

    return canonical_club(team_name(team_id))


def _for_club(rows: Iterable, club: str, attr: str) -> list:
    return [row for row in rows if canonical_club(getattr(row, attr)) == club]


def season_pills(kpis: Sequence[TeamKpi], club: str) -> list[int]:
    seasons = sorted({row.season for row in _for_club(kpis, club, "club")})
    return seasons[-4:] if seasons else list(DEFAULT_SEASON_PILLS)


def roster_for_season(roster: Sequence[RosterPlayer], club: str, season: int) -> RosterSlice:
    club_rows = _for_club(roster, club, "team")
    used = closest_season({row.season for row in club_rows}, season)
    if used is None:
        return RosterSlice(players=(), used_season=season)
    return RosterSlice(players=tuple(row for row in club_rows if row.season == used), used_season=used)


def age_histogram(players: Sequence[RosterPlayer]) -> list[AgeBin]:
    counts = dict.fromkeys(AGE_BINS, 0)
    for player in players:
        if not math.isfinite(player.age):
            continue
        age = math.floor(player.age + 0.5)
        if age in counts:
            counts[age] += 1
    return [AgeBin(age=age, count=count, label=str(age)) for age, count in counts.items()]


def age_category_share(players: Sequence[RosterPlayer]) -> list[AgeCategoryShare]:
    """Ratings-weighted share of the list held by each age category."""

    if not players:
        return []
    totals: "OrderedDict[str, float]" = OrderedDict()
    grand_total = 0.0
    for player in players:
        category = player.age_category.strip()
        if not category or not math.isfinite(player.ratings):
            continue
        totals[category] = totals.get(category, 0.0) + player.ratings
        grand_total += player.ratings
    grand_total = grand_total or 1.0

    shares = [
        AgeCategoryShare(
            age_category=category,
            points=points,
            pct=points / grand_total * 100,
            color=AGE_CATEGORY_COLOR.get(category),
        )
        for category, points in totals.items()
    ]
    shares.sort(key=lambda share: (*category_sort_key(share.age_category, AGE_CATEGORY_ORDER), -share.pct))
    return shares


def average_age(players: Sequence[RosterPlayer]) -> float | None:
    return mean([player.age for player in players if math.isfinite(player.age)])


def league_average_age(roster: Sequence[RosterPlayer], season: int) -> float | None:
    return average_age([player for player in roster if player.season == season])


def club_kpi(kpis: Sequence[TeamKpi], club: str, season: int) -> TeamKpi | None:
    rows = _for_club(kpis, club, "club")
    used = closest_season([row.season for row in rows], season)
    if used is None:
        return None
    return next(row for row in rows if row.season == used)


def kpi_snapshot(kpis: Sequence[TeamKpi], club: str, season: int) -> KpiSnapshot:
    kpi = club_kpi(kpis, club, season)
    rank_season = kpi.season if kpi else season
    league = [row for row in kpis if row.season == rank_season]
    n_teams = max(1, len({canonical_club(row.club) for row in league}))

    def rank(attr: str, direction: RankDirection) -> int | None:
        if kpi is None:
            return None
        return dense_rank([getattr(row, attr) for row in league], getattr(kpi, attr), direction)

    return KpiSnapshot(
        club=club,
        season=rank_season,
        kpi=kpi,
        age_rank=rank("squad_age_avg", "asc"),
        experience_rank=rank("squad_experience_avg_games", "desc"),
        turnover_rank=rank("squad_turnover_players", "desc"),
        n_teams=n_teams,
    )


def afl_form_pick(rows: Sequence[AflFormRow], club: str, season: int) -> AflFormRow | None:
    """Best improver for the club and season, by form change."""

    best: AflFormRow | None = None
    for row in rows:
        if row.season != season or canonical_club(row.team) != club:
            continue
        if best is None or row.form_change > best.form_change:
            best = row
    return best


def vfl_form_pick(rows: Sequence[VflFormRow], club: str, season: int) -> VflFormRow | None:
    best: VflFormRow | None = None
    for row in rows:
        if row.season != season or canonical_club(row.team) != club:
            continue
        if row.team.strip().lower() == "multiple":
            continue
        if best is None or row.weighted_avg > best.weighted_avg:
            best = row
    return best


def rank_trend(rows: Sequence[RankSeries], club: str) -> list[RankTrendPoint]:
    """Actual ladder history plus a two-season forecast bridged from the last actual."""

    club_rows = sorted(_for_club(rows, club, "club"), key=lambda row: row.year)
    if not club_rows:
        return []

    latest_year = max(row.year for row in club_rows)
    latest = next(row for row in club_rows if row.year == latest_year)
    last_actual_year = next(
        (row.year for row in reversed(club_rows) if row.actual_rank is not None),
        latest_year,
    )
    last_actual = next(row for row in club_rows if row.year == last_actual_year)

    points: dict[int, dict] = {}
    for row in club_rows:
        points[row.year] = {"year": row.year, "actual": row.actual_rank}

    forecast = (
        {
            "year": last_actual_year,
            "actual": last_actual.actual_rank,
            "fcst_a": last_actual.actual_rank,
            "fcst_b": None,
            "p25": None,
            "p75": None,
        },
        {
            "year": latest_year + 1,
            "actual": None,
            "fcst_a": latest.forecast_a_rank,
            "fcst_b": latest.forecast_a_rank,
            "p25": latest.finish_1_p25,
            "p75": latest.finish_1_p75,
        },
        {
            "year": latest_year + 2,
            "actual": None,
            "fcst_a": None,
            "fcst_b": latest.forecast_b_rank,
            "p25": latest.finish_2_p25,
            "p75": latest.finish_2_p75,
        },
    )
    for point in forecast:
        points[point["year"]] = {**points.get(point["year"], {}), **point}

    trend = []
    for year in sorted(points):
        point = points[year]
        p25 = finite_or_none(point.get("p25"))
        p75 = finite_or_none(point.get("p75"))
        has_band = p25 is not None and p75 is not None
        trend.append(
            RankTrendPoint(
                year=year,
                actual=point.get("actual"),
                fcst_a=point.get("fcst_a"),
                fcst_b=point.get("fcst_b"),
                p25=point.get("p25"),
                p75=point.get("p75"),
                band_low=p25 if has_band else None,
                band_range=max(0.0, p75 - p25) if p25 is not None and p75 is not None else None,
            )
        )
    return trend


def acquisition_share(rows: Sequence[AcquisitionBreakdown], club: str, season: int) -> list[ShareSlice]:
    """Percent of the list acquired through each pathway in a season."""

    selected = sorted(
        (row for row in rows if row.year == season and canonical_club(row.club) == club),
        key=lambda row: (row.draft_category.casefold(), row.draft_category),
    )
    total = sum(row.value for row in selected) or 1.0
    return [
        ShareSlice(
            metric=row.draft_category,
            value=row.value / total * 100,
            color=stable_color_for_key(row.draft_category),
        )
        for row in selected
    ]


def skill_radar(rows: Sequence[SkillRadar], club: str, season: int) -> list[RadarPoint]:
    club_rows = _for_club(rows, club, "squad_name")
    if not club_rows:
        return []
    wanted = str(season).strip()
    chosen = (
        next((row for row in club_rows if row.season.strip() == wanted), None)
        or next((row for row in club_rows if finite_or_none(row.season) == season), None)
        or club_rows[0]
    )
    return [
        RadarPoint(metric=label, value=clamp(getattr(chosen, attr) * 100, 0.0, 100.0))
        for label, attr in RADAR_METRICS
    ]


def merge_radar(primary: Sequence[RadarPoint], compare: Sequence[RadarPoint]) -> list[RadarPoint]:
    if not compare:
        return list(primary)
    compare_values = {point.metric: point.value for point in compare}
    return [
        RadarPoint(metric=point.metric, value=point.value, compare=compare_values.get(point.metric))
        for point in primary
    ]


def player_table(
    projections: Sequence[PlayerProjection],
    club: str,
    season: int,
    limit: int = PLAYER_TABLE_LIMIT,
) -> list[PlayerTableRow]:
    rows = [row for row in projections if row.season == season and canonical_club(row.team) == club]
    rows.sort(key=lambda row: row.rating, reverse=True)
    return [
        PlayerTableRow(
            player_id=row.player_id,
            name=row.name,
            rating=row.rating,
            salary=row.salary,
            aa=row.aa,
            games=row.games,
        )
        for row in rows[:limit]
    ]


def _rank_sub(yoy: str, rank: int | None, n_teams: int) -> str:
    return f"{yoy} {BULLET} Rank: {rank if rank is not None else EM_DASH}/{n_teams}"


def kpi_cards(
    snapshot: KpiSnapshot,
    afl_pick: AflFormRow | None,
    vfl_pick: VflFormRow | None,
) -> list[KpiCard]:
    """The five headline cards on the team dashboard."""

    kpi = snapshot.kpi
    turnover = EM_DASH
    if kpi is not None and math.isfinite(kpi.squad_turnover_players):
        turnover = f"{round_half_up(kpi.squad_turnover_players)} players"

    return [
        KpiCard(
            label="Squad Age",
            value=fmt_fixed(kpi.squad_age_avg if kpi else None, 1),
            sub=_rank_sub(snapshot.age_yoy, snapshot.age_rank, snapshot.n_teams),
        ),
        KpiCard(
            label="Squad Experience",
            value=fmt_thousands(kpi.squad_experience_avg_games if kpi else None),
            sub=_rank_sub(snapshot.experience_yoy, snapshot.experience_rank, snapshot.n_teams),
        ),
        KpiCard(
            label="Squad Turnover",
            value=turnover,
            sub=_rank_sub(snapshot.turnover_yoy, snapshot.turnover_rank, snapshot.n_teams),
        ),
        KpiCard(
            label="AFL Form",
            value=fmt_signed(afl_pick.form_change, 2) if afl_pick else EM_DASH,
            sub=f"Player: {afl_pick.name if afl_pick else EM_DASH}",
            player_id=afl_pick.player_id if afl_pick else None,
        ),
        KpiCard(
            label="VFL Form",
            value=fmt_fixed(vfl_pick.weighted_avg, 1) if vfl_pick else EM_DASH,
            sub=f"Player: {vfl_pick.name if vfl_pick else EM_DASH}",
            player_id=vfl_pick.player_id if vfl_pick else None,
        ),
    ]
