"""Pure derivations from dataset snapshots to dashboard view models."""

from .career import (
    ADVANCED_METRICS,
    COMPARE_PREFIX,
    OutcomeProbabilities,
    PlayerOption,
    PlayerVitals,
    RankInfo,
    SkillPercentile,
    TrajectoryPoint,
    advanced_distributions,
    all_players,
    build_trajectory,
    career_kpi_cards,
    club_players,
    last_actual_point,
    merge_trajectories,
    next_projection_point,
    outcome_probabilities,
    player_vitals,
    rank_info,
    resolve_player_id,
    skill_percentiles,
    trajectory_domain,
)
from .compare import ComparisonGroup, ComparisonRow, TeamComparison, TeamProfile, player_comparison, team_comparison
from .formatting import EM_DASH, fmt_aud, fmt_prob_pct, fmt_signed, fmt_thousands, ordinal, safe_yoy
from .stats import clamp, clamp01_probability, closest_season, dense_rank, percentile_from_sorted
from .team import (
    AgeBin,
    AgeCategoryShare,
    KpiCard,
    KpiSnapshot,
    PlayerTableRow,
    RadarPoint,
    RankTrendPoint,
    RosterSlice,
    ShareSlice,
    acquisition_share,
    afl_form_pick,
    age_category_share,
    age_histogram,
    average_age,
    club_key_for_team,
    club_kpi,
    kpi_cards,
    kpi_snapshot,
    league_average_age,
    merge_radar,
    player_table,
    rank_trend,
    roster_for_season,
    season_pills,
    skill_radar,
    vfl_form_pick,
)
from .views import DashboardViews, Memo, PlayerView, TeamView

__all__ = [
    "ADVANCED_METRICS",
    "AgeBin",
    "AgeCategoryShare",
    "COMPARE_PREFIX",
    "ComparisonGroup",
    "ComparisonRow",
    "DashboardViews",
    "EM_DASH",
    "KpiCard",
    "KpiSnapshot",
    "Memo",
    "OutcomeProbabilities",
    "PlayerOption",
    "PlayerTableRow",
    "PlayerView",
    "PlayerVitals",
    "RadarPoint",
    "RankInfo",
    "RankTrendPoint",
    "RosterSlice",
    "ShareSlice",
    "SkillPercentile",
    "TeamComparison",
    "TeamProfile",
    "TeamView",
    "TrajectoryPoint",
    "acquisition_share",
    "advanced_distributions",
    "afl_form_pick",
    "age_category_share",
    "age_histogram",
    "all_players",
    "average_age",
    "build_trajectory",
    "career_kpi_cards",
    "clamp",
    "clamp01_probability",
    "closest_season",
    "club_key_for_team",
    "club_kpi",
    "club_players",
    "dense_rank",
    "fmt_aud",
    "fmt_prob_pct",
    "fmt_signed",
    "fmt_thousands",
    "kpi_cards",
    "kpi_snapshot",
    "last_actual_point",
    "league_average_age",
    "merge_radar",
    "merge_trajectories",
    "next_projection_point",
    "ordinal",
    "outcome_probabilities",
    "percentile_from_sorted",
    "player_comparison",
    "player_table",
    "player_vitals",
    "rank_info",
    "rank_trend",
    "resolve_player_id",
    "roster_for_season",
    "safe_yoy",
    "season_pills",
    "skill_percentiles",
    "skill_radar",
    "team_comparison",
    "trajectory_domain",
    "vfl_form_pick",
]
