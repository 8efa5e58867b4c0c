"""Memoized team and player views for one dataset snapshot and selection."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Mapping, TypeVar

from aflboard.ingest import canonical_club, coerce_team_id
from aflboard.models import DatasetBundle
from aflboard.reference import team_color, team_name
from aflboard.routing import Selection

from . import career, compare, team


logger = logging.getLogger(__name__)

T = TypeVar("T")


class Memo:
    """Bounded cache of derived values keyed on their exact inputs."""

    def __init__(self, maxsize: int = 1024):
        self.maxsize = maxsize
        self.hits = 0
        self.misses = 0
        self._entries: "OrderedDict[Hashable, Any]" = OrderedDict()

    def get(self, key: Hashable, compute: Callable[[], T]) -> T:
        if key in self._entries:
            self.hits += 1
            self._entries.move_to_end(key)
            return self._entries[key]
        self.misses += 1
        value = compute()
        self._entries[key] = value
        if len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class TeamView:
    team_id: str
    team_name: str
    club: str
    color: str
    season: int
    used_season: int
    years: list[int]
    kpi_cards: list[team.KpiCard]
    age_histogram: list[team.AgeBin]
    age_category_share: list[team.AgeCategoryShare]
    team_average_age: float | None
    league_average_age: float | None
    rank_trend: list[team.RankTrendPoint]
    acquisition: list[team.ShareSlice]
    radar: list[team.RadarPoint]
    player_table: list[team.PlayerTableRow]
    compare_team_id: str = ""
    compare_team_name: str = ""
    compare_color: str | None = None
    comparison: compare.TeamComparison | None = None
    dropped_rows: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class PlayerView:
    team_id: str
    team_name: str
    club: str
    color: str
    season: int
    outlook: str
    players: list[career.PlayerOption]
    player: career.PlayerOption | None
    compare_player: career.PlayerOption | None
    compare_color: str | None
    trajectory: list[Dict[str, Any]]
    y_domain: tuple[int, int]
    snapshot_season: int | None
    kpi_cards: list[team.KpiCard]
    outcome: career.OutcomeProbabilities
    compare_outcome: career.OutcomeProbabilities | None
    rank: career.RankInfo
    vitals: career.PlayerVitals
    skills: list[career.SkillPercentile]
    comparison: list[compare.ComparisonGroup]


class DashboardViews:
    """Derives view models from a bundle snapshot and the current selection.

    Pass the same :class:`Memo` across selections to reuse values whose inputs
    did not change. Keys include the bundle version, so publishing a new
    snapshot invalidates everything derived from the previous one.
    """

    def __init__(self, bundle: DatasetBundle, selection: Selection, memo: Memo | None = None):
        self.bundle = bundle
        self.selection = selection
        self.memo = memo if memo is not None else Memo()

    def _cached(self, name: str, inputs: tuple, compute: Callable[[], T]) -> T:
        return self.memo.get((name, self.bundle.version, *inputs), compute)

    # Team page

    def _team_profile(self, club: str, season: int) -> compare.TeamProfile:
        bundle = self.bundle
        roster = self._roster(club, season)
        return compare.TeamProfile(
            kpi=self._cached("club_kpi", (club, season), lambda: team.club_kpi(bundle.team_kpis, club, season)),
            age_share=self._cached(
                "age_share", (club, season), lambda: team.age_category_share(roster.players)
            ),
            acquisition=self._cached(
                "acquisition", (club, season), lambda: team.acquisition_share(bundle.acquisitions, club, season)
            ),
            radar=self._cached("radar", (club, season), lambda: team.skill_radar(bundle.skill_radar, club, season)),
        )

    def _roster(self, club: str, season: int) -> team.RosterSlice:
        return self._cached(
            "roster", (club, season), lambda: team.roster_for_season(self.bundle.roster_players, club, season)
        )

    def team_view(self) -> TeamView:
        bundle = self.bundle
        team_id = self.selection.team_id
        season = self.selection.season
        club = team.club_key_for_team(team_id)

        roster = self._roster(club, season)
        profile = self._team_profile(club, season)
        snapshot = self._cached("kpi_snapshot", (club, season), lambda: team.kpi_snapshot(bundle.team_kpis, club, season))
        afl_pick = self._cached("afl_pick", (club, season), lambda: team.afl_form_pick(bundle.afl_form, club, season))
        vfl_pick = self._cached("vfl_pick", (club, season), lambda: team.vfl_form_pick(bundle.vfl_form, club, season))

        compare_team_id = self.selection.compare_team_id
        comparison = None
        compare_radar: list[team.RadarPoint] = []
        compare_club = team.club_key_for_team(compare_team_id) if compare_team_id else ""
        if compare_club:
            compare_profile = self._team_profile(compare_club, season)
            compare_radar = list(compare_profile.radar)
            comparison = self._cached(
                "team_comparison",
                (club, compare_club, season),
                lambda: compare.team_comparison(profile, compare_profile),
            )

        return TeamView(
            team_id=team_id,
            team_name=team_name(team_id),
            club=club,
            color=team_color(club),
            season=season,
            used_season=roster.used_season,
            years=self._cached("season_pills", (club,), lambda: team.season_pills(bundle.team_kpis, club)),
            kpi_cards=team.kpi_cards(snapshot, afl_pick, vfl_pick),
            age_histogram=self._cached("age_histogram", (club, season), lambda: team.age_histogram(roster.players)),
            age_category_share=list(profile.age_share),
            team_average_age=team.average_age(roster.players),
            league_average_age=self._cached(
                "league_average_age",
                (roster.used_season,),
                lambda: team.league_average_age(bundle.roster_players, roster.used_season),
            ),
            rank_trend=self._cached("rank_trend", (club,), lambda: team.rank_trend(bundle.rank_series, club)),
            acquisition=list(profile.acquisition),
            radar=team.merge_radar(profile.radar, compare_radar),
            player_table=self._cached(
                "player_table", (club, season), lambda: team.player_table(bundle.player_projections, club, season)
            ),
            compare_team_id=compare_team_id,
            compare_team_name=team_name(compare_team_id) if compare_team_id else "",
            compare_color=team_color(compare_club) if compare_club else None,
            comparison=comparison,
            dropped_rows=dict(bundle.dropped_rows),
        )

    # Career page

    def _trajectory(self, player_id: str) -> list[career.TrajectoryPoint]:
        outlook = self.selection.outlook
        return self._cached(
            "trajectory",
            (player_id, outlook),
            lambda: career.build_trajectory(self.bundle.career_projections, player_id, outlook),
        )

    def _outcome(self, player_id: str, trajectory: list[career.TrajectoryPoint]) -> career.OutcomeProbabilities:
        return self._cached(
            "outcome",
            (player_id, self.selection.outlook),
            lambda: career.outcome_probabilities(self.bundle.player_projections, player_id, trajectory),
        )

    def _find_player(self, player_id: str) -> career.PlayerOption | None:
        everyone = self._cached("all_players", (), lambda: career.all_players(self.bundle.career_projections))
        return next((option for option in everyone if option.id == player_id), None) if player_id else None

    def player_view(self) -> PlayerView:
        bundle = self.bundle
        team_id = self.selection.team_id
        club = team.club_key_for_team(team_id)
        options = self._cached("club_players", (club,), lambda: career.club_players(bundle.career_projections, club))

        # A deep-linked player stays selected even before their club is known.
        player = self._find_player(self.selection.player_id)
        if player is None:
            fallback = career.resolve_player_id(options, self.selection.player_id)
            player = next((option for option in options if option.id == fallback), None)
            if self.selection.player_id:
                logger.debug("Player %s not found; showing %s", self.selection.player_id, fallback or "nobody")
        player_id = player.id if player else ""

        trajectory = self._trajectory(player_id)
        last_actual = career.last_actual_point(trajectory)
        next_projection = career.next_projection_point(trajectory)
        snapshot_season = last_actual.season if last_actual else None

        compare_player = None
        compare_trajectory: list[career.TrajectoryPoint] = []
        compare_outcome = None
        compare_color = None
        compare_id = self.selection.compare_player_id
        if compare_id and compare_id != player_id:
            compare_player = self._find_player(compare_id)
        if compare_player is not None:
            compare_trajectory = self._trajectory(compare_player.id)
            compare_outcome = self._outcome(compare_player.id, compare_trajectory)
            compare_team = next((point.team for point in compare_trajectory if point.team), "")
            compare_color = team_color(canonical_club(team_name(coerce_team_id(compare_team)))) if compare_team else None

        chart_rows = self._cached(
            "chart_rows",
            (player_id, compare_player.id if compare_player else "", self.selection.outlook),
            lambda: career.merge_trajectories(trajectory, compare_trajectory),
        )
        rank = self._cached(
            "rank_info",
            (player_id, snapshot_season),
            lambda: career.rank_info(bundle.career_projections, player_id, snapshot_season),
        )
        vitals = self._cached("vitals", (player_id,), lambda: career.player_vitals(bundle.career_projections, player_id))
        distributions = self._cached(
            "advanced_distributions", (), lambda: career.advanced_distributions(bundle.career_projections)
        )
        comparison = []
        if compare_player is not None:
            comparison = self._cached(
                "player_comparison",
                (player_id, compare_player.id, snapshot_season),
                lambda: compare.player_comparison(bundle.player_stats, player_id, compare_player.id, snapshot_season),
            )

        return PlayerView(
            team_id=team_id,
            team_name=team_name(team_id),
            club=club,
            color=team_color(club),
            season=self.selection.season,
            outlook=self.selection.outlook,
            players=options,
            player=player,
            compare_player=compare_player,
            compare_color=compare_color,
            trajectory=chart_rows,
            y_domain=career.trajectory_domain(chart_rows),
            snapshot_season=snapshot_season,
            kpi_cards=career.career_kpi_cards(trajectory, rank, vitals),
            outcome=self._outcome(player_id, trajectory),
            compare_outcome=compare_outcome,
            rank=rank,
            vitals=vitals,
            skills=career.skill_percentiles(last_actual or next_projection, distributions),
            comparison=comparison,
        )
