"""Canonical row models shared across ingestion and derivation layers."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class _Row(BaseModel):
    model_config = ConfigDict(frozen=True)


class RosterPlayer(_Row):
    """One player on one club's list for one season."""

    season: int
    team: str = Field(..., min_length=1)
    provider_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    age: float
    position_group: str = ""
    games: float
    ratings: float = 0.0
    age_category: str = ""


class TeamKpi(_Row):
    club: str = Field(..., min_length=1)
    season: int
    squad_age_avg: float
    squad_age_yoy: Optional[float] = None
    squad_experience_avg_games: float
    squad_experience_yoy: Optional[float] = None
    squad_turnover_players: float
    squad_turnover_yoy: Optional[float] = None


class RankSeries(_Row):
    """Ladder position per club per year; forecasts only on the latest year."""

    club: str = Field(..., min_length=1)
    year: int
    actual_rank: Optional[float] = None
    forecast_a_rank: Optional[float] = None
    forecast_b_rank: Optional[float] = None
    finish_1_p10: Optional[float] = None
    finish_1_p25: Optional[float] = None
    finish_1_p75: Optional[float] = None
    finish_1_p90: Optional[float] = None
    finish_2_p10: Optional[float] = None
    finish_2_p25: Optional[float] = None
    finish_2_p75: Optional[float] = None
    finish_2_p90: Optional[float] = None


class SkillRadar(_Row):
    season: str = Field(..., min_length=1)
    squad_name: str = Field(..., min_length=1)
    kh_ratio: float = 0.0
    gb_mk_ratio: float = 0.0
    fwd_half: float = 0.0
    scores: float = 0.0
    pp_chain: float = 0.0
    points_per_i50: float = 0.0
    repeat_i50s: float = 0.0
    rating_ball_use: float = 0.0
    rating_ball_win: float = 0.0
    chain_metres: float = 0.0
    time_in_poss_pct: float = 0.0


class AcquisitionBreakdown(_Row):
    club: str = Field(..., min_length=1)
    year: int
    draft_category: str = Field(..., min_length=1)
    value: float


class PlayerProjection(_Row):
    team: str = Field(..., min_length=1)
    season: int
    player_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    rating: float
    salary: float
    aa: float
    games: float


class AflFormRow(_Row):
    season: int
    player_id: str = Field(..., min_length=1)
    team: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    weighted_avg: float
    recent_form: Optional[float] = None
    form_change: float


class VflFormRow(_Row):
    season: int
    player_id: str = Field(..., min_length=1)
    team: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    weighted_avg: float


# Performance components and advanced-stat columns carried on career rows.
ADVANCED_STAT_FIELDS: Tuple[str, ...] = (
    "kicks",
    "hitouts",
    "intercepts",
    "spoils",
    "transition",
    "shots",
    "stoppage",
    "ball_use",
    "ball_winning",
    "pressure",
    "kicking",
    "handballing",
    "transition_ball_use",
    "post_clearance_ball_use",
    "clearance_ball_use",
    "aerial",
    "ground",
    "run_carry",
    "turnover_transition_ball_winning",
    "stoppage_transition_ball_winning",
    "pre_clearance_ball_winning",
    "spoiling",
)


class CareerProjection(_Row):
    """One projected (or historical) season for one player at one horizon."""

    source_provider_id: str = ""
    source_player: str = ""
    source_season: int
    source_rating: float = 0.0
    source_position: str = ""
    horizon: int = Field(..., ge=0)
    season: int
    estimate: Optional[float] = None
    lower: Optional[float] = None
    upper: Optional[float] = None
    salary: Optional[float] = None
    optimistic: Optional[float] = None
    pessimistic: Optional[float] = None
    salary_opt: Optional[float] = None
    salary_pes: Optional[float] = None
    aa: Optional[float] = None
    seasons_to_project: Optional[float] = None
    season_90: Optional[float] = None
    games: Optional[float] = None
    type: Optional[str] = None
    team: Optional[str] = None
    rank_all: Optional[float] = None
    rank_pos: Optional[float] = None
    height: Optional[str] = None
    age: Optional[str] = None
    drafted: Optional[str] = None
    advanced: Dict[str, Optional[float]] = Field(default_factory=dict)

    @property
    def is_actual(self) -> bool:
        return (self.type or "").lower() in {"actual", "hist", "history"}

    def stat(self, key: str) -> Optional[float]:
        return self.advanced.get(key)


class PlayerStatsAgg(_Row):
    season: int
    player_id: str = Field(..., min_length=1)
    player_name: str = ""
    metric_name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    metric_value: float
