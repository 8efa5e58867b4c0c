from dataclasses import replace

import pytest

from aflboard.derive import (
    COMPARE_PREFIX,
    DashboardViews,
    Memo,
    TeamProfile,
    acquisition_share,
    age_category_share,
    age_histogram,
    build_trajectory,
    clamp01_probability,
    closest_season,
    dense_rank,
    fmt_aud,
    fmt_prob_pct,
    kpi_cards,
    kpi_snapshot,
    merge_trajectories,
    ordinal,
    percentile_from_sorted,
    player_comparison,
    rank_info,
    rank_trend,
    roster_for_season,
    safe_yoy,
    skill_radar,
    team_comparison,
    trajectory_domain,
)
from aflboard.models import (
    AcquisitionBreakdown,
    CareerProjection,
    DatasetBundle,
    PlayerProjection,
    PlayerStatsAgg,
    RankSeries,
    RosterPlayer,
    SkillRadar,
    TeamKpi,
)
from aflboard.routing import Selection


def _player(provider_id: str, age: float, *, team="Collingwood", season=2025, ratings=1.0, category="Prime"):
    return RosterPlayer(
        season=season,
        team=team,
        provider_id=provider_id,
        name=f"Player {provider_id}",
        age=age,
        games=10,
        ratings=ratings,
        age_category=category,
    )


def _kpi(club: str, age: float, *, season=2025, experience=50.0, turnover=8.0, age_yoy=None):
    return TeamKpi(
        club=club,
        season=season,
        squad_age_avg=age,
        squad_age_yoy=age_yoy,
        squad_experience_avg_games=experience,
        squad_turnover_players=turnover,
    )


def _career(season: int, horizon: int, *, player="1", kind="proj", **fields):
    values = dict(
        source_provider_id=player,
        source_player=f"Player {player}",
        source_season=2024,
        source_position="MID",
        horizon=horizon,
        season=season,
        type=kind,
        team="Collingwood",
    )
    values.update(fields)
    return CareerProjection(**values)


def _with(row: CareerProjection, **changes) -> CareerProjection:
    return row.model_copy(update=changes)


def _trajectory_rows():
    return [
        _career(2024, 0, kind="actual", estimate=10.0, salary=500_000, optimistic=99.0, salary_opt=1.0),
        _career(2025, 1, estimate=12.0, optimistic=15.0, pessimistic=9.0, salary=600_000, salary_opt=700_000),
        _career(2026, 2, estimate=13.0, salary=650_000),
    ]


def test_age_histogram_counts_rounded_ages_within_bins():
    bins = age_histogram([_player("1", 18), _player("2", 18), _player("3", 35), _player("4", 40)])

    assert [bin_.age for bin_ in bins] == list(range(18, 36))
    counts = {bin_.age: bin_.count for bin_ in bins}
    assert counts[18] == 2
    assert counts[35] == 1
    assert sum(counts.values()) == 3


def test_age_histogram_rounds_half_up():
    counts = {bin_.age: bin_.count for bin_ in age_histogram([_player("1", 20.5), _player("2", 20.49)])}
    assert counts[21] == 1
    assert counts[20] == 1


def test_age_category_share_sums_to_100_in_preferred_order():
    players = [
        _player("1", 19, ratings=10, category="Prime"),
        _player("2", 20, ratings=30, category="Rising Stars"),
        _player("3", 31, ratings=20, category="Mystery"),
        _player("4", 33, ratings=40, category="Veterans"),
    ]

    shares = age_category_share(players)

    assert [share.age_category for share in shares] == ["Rising Stars", "Prime", "Veterans", "Mystery"]
    assert sum(share.pct for share in shares) == pytest.approx(100.0)
    assert shares[0].pct == pytest.approx(30.0)
    assert shares[-1].color is None


def test_age_category_share_handles_empty_and_zero_weights():
    assert age_category_share([]) == []
    shares = age_category_share([_player("1", 20, ratings=0, category="Prime")])
    assert shares[0].pct == 0.0


def test_percentile_uses_mid_rank():
    assert percentile_from_sorted(20, [10, 20, 20, 30]) == 50.0
    assert percentile_from_sorted(5, [10, 20]) == 0.0
    assert percentile_from_sorted(5, []) is None


def test_dense_rank_collapses_ties():
    values = [23.1, 24.0, 24.0, 25.5]
    assert dense_rank(values, 24.0, "asc") == 2
    assert dense_rank(values, 25.5, "asc") == 3
    assert dense_rank(values, 25.5, "desc") == 1
    assert dense_rank(values, 99.0, "asc") is None
    assert dense_rank(values, None, "asc") is None


def test_closest_season_prefers_exact_then_later_on_tie():
    assert closest_season([2023, 2024, 2025], 2024) == 2024
    assert closest_season([2023, 2025], 2024) == 2025
    assert closest_season([2025, 2023], 2024) == 2025
    assert closest_season([], 2024) is None


def test_clamp01_probability_accepts_both_scales():
    assert clamp01_probability(0.3) == 0.3
    assert clamp01_probability(45) == pytest.approx(0.45)
    assert clamp01_probability(150) is None
    assert clamp01_probability("NA") is None


def test_display_formatting():
    assert safe_yoy(None) == "YoY: —"
    assert safe_yoy(0.3) == "YoY: +0.3"
    assert safe_yoy(-1.0) == "YoY: -1.0"
    assert fmt_prob_pct(0.0005) == "<0.1%"
    assert fmt_prob_pct(0.005) == "<1%"
    assert fmt_prob_pct(0.055) == "5.5%"
    assert fmt_prob_pct(0.125) == "13%"
    assert fmt_aud(1234567.4) == "$1,234,567"
    assert [ordinal(n) for n in (1, 2, 3, 4, 11, 12, 13, 21, 112)] == [
        "1st",
        "2nd",
        "3rd",
        "4th",
        "11th",
        "12th",
        "13th",
        "21st",
        "112th",
    ]


def test_roster_for_season_falls_back_to_closest_season():
    roster = [_player("1", 20, season=2023), _player("2", 21, season=2025), _player("3", 22, team="Carlton")]

    chosen = roster_for_season(roster, "Collingwood", 2024)

    assert chosen.used_season == 2025
    assert [player.provider_id for player in chosen.players] == ["2"]
    assert roster_for_season(roster, "Essendon", 2024).players == ()


def test_kpi_snapshot_ranks_against_league():
    kpis = [
        _kpi("Carlton", 23.1, experience=40, turnover=5),
        _kpi("Collingwood", 24.0, experience=80, turnover=9, age_yoy=0.3),
        _kpi("Essendon", 24.0, experience=60, turnover=7),
        _kpi("Geelong Cats", 25.5, experience=90, turnover=3),
    ]

    snapshot = kpi_snapshot(kpis, "Collingwood", 2025)

    assert snapshot.age_rank == 2
    assert snapshot.experience_rank == 2
    assert snapshot.turnover_rank == 1
    assert snapshot.n_teams == 4

    cards = kpi_cards(snapshot, None, None)
    assert [card.label for card in cards] == [
        "Squad Age",
        "Squad Experience",
        "Squad Turnover",
        "AFL Form",
        "VFL Form",
    ]
    assert cards[0].value == "24.0"
    assert cards[0].sub == "YoY: +0.3 • Rank: 2/4"
    assert cards[2].value == "9 players"
    assert cards[3].value == "—"


def test_kpi_snapshot_without_rows_renders_placeholders():
    snapshot = kpi_snapshot([], "Collingwood", 2025)

    assert snapshot.kpi is None
    cards = kpi_cards(snapshot, None, None)
    assert cards[0].value == "—"
    assert cards[0].sub == "YoY: — • Rank: —/1"


def test_rank_trend_bridges_actual_into_forecast():
    rows = [
        RankSeries(
            club="Collingwood",
            year=2024,
            actual_rank=4,
            forecast_a_rank=3,
            forecast_b_rank=2,
            finish_1_p25=2,
            finish_1_p75=6,
            finish_2_p25=1,
            finish_2_p75=7,
        )
    ]

    trend = rank_trend(rows, "Collingwood")

    assert [point.year for point in trend] == [2024, 2025, 2026]
    bridge, first, second = trend
    assert bridge.actual == 4
    assert bridge.fcst_a == 4
    assert bridge.band_low is None
    assert first.actual is None
    assert (first.fcst_a, first.fcst_b) == (3, 3)
    assert (first.band_low, first.band_range) == (2, 4)
    assert second.fcst_a is None
    assert second.fcst_b == 2
    assert (second.band_low, second.band_range) == (1, 6)


def test_rank_trend_skips_band_when_percentile_missing():
    rows = [
        RankSeries(club="Carlton", year=2023, actual_rank=10),
        RankSeries(club="Carlton", year=2024, actual_rank=8, forecast_a_rank=7, finish_1_p25=5),
    ]

    trend = rank_trend(rows, "Carlton")

    assert [point.year for point in trend] == [2023, 2024, 2025, 2026]
    assert trend[0].fcst_a is None
    assert trend[2].band_low is None
    assert trend[2].band_range is None
    assert rank_trend(rows, "Essendon") == []


def test_acquisition_share_and_radar():
    rows = [
        AcquisitionBreakdown(club="Collingwood", year=2025, draft_category="Trade", value=10),
        AcquisitionBreakdown(club="Collingwood", year=2025, draft_category="National Draft", value=30),
        AcquisitionBreakdown(club="Collingwood", year=2024, draft_category="Trade", value=99),
    ]

    shares = acquisition_share(rows, "Collingwood", 2025)

    assert [share.metric for share in shares] == ["National Draft", "Trade"]
    assert [share.value for share in shares] == [75.0, 25.0]
    assert shares[0].color == "#7C3AED"

    radar = skill_radar(
        [SkillRadar(season="2025", squad_name="Collingwood", kh_ratio=0.42, scores=1.7)],
        "Collingwood",
        2025,
    )
    values = {point.metric: point.value for point in radar}
    assert values["K-H Ratio"] == pytest.approx(42.0)
    assert values["Scores"] == 100.0
    assert len(radar) == 11


def test_outlook_switch_only_changes_projected_rows():
    rows = _trajectory_rows()

    neutral = build_trajectory(rows, "1", "neutral")
    optimistic = build_trajectory(rows, "1", "optimistic")

    assert neutral[0] == optimistic[0]
    assert neutral[0].actual == 10.0
    assert neutral[0].salary == 500_000
    assert (neutral[1].estimate, neutral[1].salary) == (12.0, 600_000)
    assert (optimistic[1].estimate, optimistic[1].salary) == (15.0, 700_000)
    assert optimistic[2].estimate == 13.0
    assert build_trajectory(rows, "1", "pessimistic")[1].estimate == 9.0


def test_trajectory_horizon_cutoff_depends_on_outlook():
    rows = [_with(row, seasons_to_project=1, season_90=2) for row in _trajectory_rows()]

    assert [point.season for point in build_trajectory(rows, "1", "neutral")] == [2024, 2025]
    assert [point.season for point in build_trajectory(rows, "1", "optimistic")] == [2024, 2025, 2026]
    assert build_trajectory(rows, "", "neutral") == []


def test_merge_trajectories_bridges_and_prefixes_compare_fields():
    primary = build_trajectory(_trajectory_rows(), "1")
    compare_rows = [_career(2027, 1, player="2", estimate=11.0)]
    compare = build_trajectory(compare_rows, "2")

    chart = merge_trajectories(primary, compare)

    assert [row["season"] for row in chart] == [2024, 2025, 2026, 2027]
    assert chart[0]["bridge"] == 10.0
    assert chart[1]["bridge"] == 12.0
    assert "bridge" not in chart[2]
    assert chart[3][f"{COMPARE_PREFIX}estimate"] == 11.0
    assert "actual" not in chart[3]


def test_trajectory_domain_pads_and_defaults():
    assert trajectory_domain([]) == (4, 20)
    chart = merge_trajectories(build_trajectory(_trajectory_rows(), "1"))
    assert trajectory_domain(chart) == (7, 16)
    assert trajectory_domain([{"season": 2025, "lower0": 1.0, "band": 2.0, "estimate": 2.0}]) == (1, 6)


def test_rank_info_ranks_best_estimates_when_not_exported():
    rows = [
        _career(2024, 0, player="1", kind="actual", estimate=10.0),
        _career(2024, 0, player="2", kind="actual", estimate=14.0),
        _career(2024, 0, player="3", kind="actual", estimate=12.0, source_position="KEY_DEF"),
        _career(2024, 1, player="1", estimate=40.0),
    ]

    info = rank_info(rows, "1", 2024)

    assert (info.all, info.total_all) == (3, 3)
    assert (info.pos, info.total_pos) == (2, 2)


def test_team_comparison_zero_fills_missing_categories():
    primary = TeamProfile(
        kpi=_kpi("Collingwood", 24.0),
        age_share=age_category_share([_player("1", 20, category="Prime")]),
    )
    other = TeamProfile(kpi=_kpi("Carlton", 25.5), age_share=[])

    result = team_comparison(primary, other)

    assert result.scalars[0].metric == "Age"
    assert result.scalars[0].diff == pytest.approx(-1.5)
    prime = next(row for row in result.age_drivers if row.metric == "Prime")
    assert (prime.a, prime.b, prime.diff) == (100.0, 0.0, 100.0)
    assert [row.metric for row in result.age_drivers][0] == "Rising Stars"


def test_player_comparison_skips_small_samples():
    stats = [
        PlayerStatsAgg(season=2024, player_id=str(i), metric_name="Disposals", category="Ball Winning", metric_value=i)
        for i in range(1, 9)
    ] + [
        PlayerStatsAgg(season=2024, player_id=str(i), metric_name="Hitouts", category="Ruck", metric_value=i)
        for i in range(1, 4)
    ]

    groups = player_comparison(stats, "8", "1", 2024)

    assert [group.category for group in groups] == ["Ball Winning"]
    row = groups[0].rows[0]
    assert row.metric == "Disposals"
    assert row.a == pytest.approx(93.75)
    assert row.b == pytest.approx(6.25)
    assert row.diff == pytest.approx(87.5)
    assert player_comparison(stats, "8", "1", None) == []


def _bundle() -> DatasetBundle:
    return DatasetBundle(
        roster_players=(_player("1", 22, ratings=5, category="Prime"), _player("2", 19, team="Carlton")),
        team_kpis=(_kpi("Collingwood", 24.0), _kpi("Carlton", 25.0)),
        rank_series=(RankSeries(club="Collingwood", year=2024, actual_rank=4, forecast_a_rank=3),),
        player_projections=(
            PlayerProjection(
                team="Collingwood", season=2025, player_id="1", name="Player 1", rating=15, salary=1, aa=12, games=80
            ),
        ),
        career_projections=tuple(_trajectory_rows())
        + (_career(2024, 0, player="2", kind="actual", estimate=8.0, team="Carlton"),),
        version=1,
    )


def test_team_view_is_memoized_per_bundle_version():
    memo = Memo()
    bundle = _bundle()
    selection = Selection(team_id="40", season=2025, compare_team_id="30")

    view = DashboardViews(bundle, selection, memo).team_view()
    misses = memo.misses

    assert view.team_name == "Collingwood"
    assert view.compare_team_name == "Carlton"
    assert view.comparison is not None
    assert view.player_table[0].player_id == "1"
    assert view.league_average_age == pytest.approx(20.5)

    again = DashboardViews(bundle, selection, memo).team_view()
    assert again == view
    assert memo.misses == misses
    assert memo.hits > 0

    DashboardViews(replace(bundle, version=2), selection, memo).team_view()
    assert memo.misses > misses


def test_player_view_keeps_deep_linked_player_from_another_club():
    bundle = _bundle()
    selection = Selection(team_id="40", page="career", player_id="2", compare_player_id="1")

    view = DashboardViews(bundle, selection).player_view()

    assert view.player is not None
    assert view.player.id == "2"
    assert view.compare_player is not None
    assert view.compare_player.id == "1"
    assert view.snapshot_season == 2024
    assert [card.label for card in view.kpi_cards] == ["Market Value", "Rank (AFL)", "Rank (Position)", "Vitals"]


def test_player_view_outcome_prefers_projection_export():
    bundle = _bundle()
    selection = Selection(team_id="40", page="career", player_id="1")

    view = DashboardViews(bundle, selection).player_view()

    assert view.outcome.aa == pytest.approx(0.12)
    assert view.outcome.games == pytest.approx(0.8)
    assert view.trajectory[0]["bridge"] == 10.0
    assert len(view.skills) == 15


def test_player_view_falls_back_to_first_club_player():
    view = DashboardViews(_bundle(), Selection(team_id="40", page="career", player_id="999")).player_view()

    assert view.player is not None
    assert view.player.id == "1"
