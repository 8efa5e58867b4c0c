"""Coerce raw CSV-derived rows into canonical typed records."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Literal, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from aflboard.models import (
    ADVANCED_STAT_FIELDS,
    AcquisitionBreakdown,
    AflFormRow,
    CareerProjection,
    PlayerProjection,
    PlayerStatsAgg,
    RankSeries,
    RosterPlayer,
    SkillRadar,
    TeamKpi,
    VflFormRow,
)
from aflboard.reference import CLUB_ALIASES, LEGACY_TEAM_CODES, TEAMS


logger = logging.getLogger(__name__)

_ABSENT_TOKENS = {"", "na", "null"}
_PLAYER_ID_PREFIX = re.compile(r"^CD[_-]?I", re.IGNORECASE)


def to_trimmed_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def to_number_or_none(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    text = to_trimmed_string(value)
    if text.lower() in _ABSENT_TOKENS or "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def canonical_club(name: Any) -> str:
    text = to_trimmed_string(name)
    return CLUB_ALIASES.get(text, text)


def canonical_player_id(raw: Any) -> str:
    return _PLAYER_ID_PREFIX.sub("", to_trimmed_string(raw), count=1)


def coerce_team_id(raw: Any) -> str:
    """Resolve a numeric id, legacy code or club name to a team id.

    Unresolvable input is returned trimmed so callers can decide whether it is
    usable.
    """

    text = to_trimmed_string(raw)
    if not text:
        return ""
    if any(team.id == text for team in TEAMS):
        return text
    legacy = LEGACY_TEAM_CODES.get(text.upper())
    if legacy:
        return legacy
    wanted = canonical_club(text).lower()
    for team in TEAMS:
        if canonical_club(team.name).lower() == wanted:
            return team.id
    return text


FieldKind = Literal["number", "int", "string", "club", "player_id", "text"]


@dataclass(frozen=True)
class FieldSpec:
    """How one model field is read from a raw row.

    ``keys`` are tried in order; the first key present with a non-null value
    wins. Required fields must coerce to a finite number or a non-empty string.
    """

    name: str
    keys: Tuple[str, ...]
    kind: FieldKind = "number"
    required: bool = False
    default: Any = None

    def pick(self, row: Mapping[str, Any]) -> Any:
        for key in self.keys:
            value = row.get(key)
            if value is not None:
                return value
        return None

    def coerce(self, raw: Any) -> Any:
        if self.kind == "number":
            return to_number_or_none(raw)
        if self.kind == "int":
            number = to_number_or_none(raw)
            if number is None or not number.is_integer():
                return None
            return int(number)
        if self.kind == "club":
            return canonical_club(raw)
        if self.kind == "player_id":
            return canonical_player_id(raw)
        if self.kind == "text":
            return to_trimmed_string(raw) or None
        return to_trimmed_string(raw)


def _field(name: str, *keys: str, kind: FieldKind = "number", required: bool = False, default: Any = None) -> FieldSpec:
    # Listed source columns keep their priority; the field name is always accepted.
    accepted = tuple(dict.fromkeys((*keys, name)))
    return FieldSpec(name=name, keys=accepted, kind=kind, required=required, default=default)


@dataclass(frozen=True)
class DatasetSchema:
    kind: str
    filenames: Tuple[str, ...]
    model: Type[BaseModel]
    fields: Tuple[FieldSpec, ...]
    finalize: Optional[Callable[[Dict[str, Any], Mapping[str, Any]], Dict[str, Any]]] = None

    def map_row(self, row: Mapping[str, Any]) -> Optional[BaseModel]:
        values: Dict[str, Any] = {}
        for spec in self.fields:
            value = spec.coerce(spec.pick(row))
            if value is None or value == "":
                if spec.required:
                    return None
                if spec.default is not None:
                    value = spec.default
                elif spec.kind in ("string", "club", "player_id"):
                    value = ""
                else:
                    value = None
            values[spec.name] = value
        if self.finalize is not None:
            values = self.finalize(values, row)
        try:
            return self.model(**values)
        except ValidationError as exc:
            logger.debug("Dropping %s row: %s", self.kind, exc.errors()[0].get("msg"))
            return None


def _career_finalize(values: Dict[str, Any], row: Mapping[str, Any]) -> Dict[str, Any]:
    if values.get("source_season") is None:
        values["source_season"] = values["season"]
    advanced: Dict[str, Optional[float]] = {}
    for spec in _ADVANCED_FIELDS:
        advanced[spec.name] = spec.coerce(spec.pick(row))
    values["advanced"] = advanced
    return values


_ADVANCED_KEYS: Mapping[str, Tuple[str, ...]] = {
    "transition_ball_use": ("Transition_Ball_Use", "Transition_BallUse", "Transition Ball Use"),
    "post_clearance_ball_use": ("Post_Clearance_Ball_Use", "Post Clearance Ball Use"),
    "clearance_ball_use": ("Clearance_Ball_Use", "Clearance Ball Use"),
    "run_carry": ("Run_Carry", "Run Carry"),
    "turnover_transition_ball_winning": (
        "Turnover_Transition_Ball_Winning",
        "Turnover Transition Ball Winning",
    ),
    "stoppage_transition_ball_winning": (
        "Stoppage_Transition_Ball_Winning",
        "Stoppage Transition Ball Winning",
    ),
    "pre_clearance_ball_winning": ("Pre_Clearance_Ball_Winning", "Pre Clearance Ball Winning"),
    "spoiling": ("Spoiling", "Spoil", "Spoils"),
}

_ADVANCED_FIELDS: Tuple[FieldSpec, ...] = tuple(
    _field(name, *_ADVANCED_KEYS.get(name, ("_".join(part.capitalize() for part in name.split("_")),)))
    for name in ADVANCED_STAT_FIELDS
)


SCHEMAS: Dict[str, DatasetSchema] = {
    schema.kind: schema
    for schema in (
        DatasetSchema(
            kind="roster_players",
            filenames=("roster_players.csv",),
            model=RosterPlayer,
            fields=(
                _field("season", kind="int", required=True),
                _field("team", kind="club", required=True),
                _field("provider_id", "providerId", kind="player_id", required=True),
                _field("name", "player_name", kind="string", required=True),
                _field("age", required=True),
                _field("position_group", kind="string"),
                _field("games", required=True),
                _field("ratings", default=0.0),
                _field("age_category", "age_cat", kind="string"),
            ),
        ),
        DatasetSchema(
            kind="team_kpis",
            filenames=("team_kpis.csv",),
            model=TeamKpi,
            fields=(
                _field("club", "Club", kind="club", required=True),
                _field("season", kind="int", required=True),
                _field("squad_age_avg", required=True),
                _field("squad_age_yoy"),
                _field("squad_experience_avg_games", required=True),
                _field("squad_experience_yoy"),
                _field("squad_turnover_players", required=True),
                _field("squad_turnover_yoy"),
            ),
        ),
        DatasetSchema(
            kind="team_rank_timeseries",
            filenames=("team_rank_timeseries.csv",),
            model=RankSeries,
            fields=(
                _field("club", "Club", kind="club", required=True),
                _field("year", kind="int", required=True),
                _field("actual_rank"),
                _field("forecast_a_rank"),
                _field("forecast_b_rank"),
                _field("finish_1_p10"),
                _field("finish_1_p25"),
                _field("finish_1_p75"),
                _field("finish_1_p90"),
                _field("finish_2_p10"),
                _field("finish_2_p25"),
                _field("finish_2_p75"),
                _field("finish_2_p90"),
            ),
        ),
        DatasetSchema(
            kind="team_skill_radar",
            filenames=("team_skill_radar.csv",),
            model=SkillRadar,
            fields=(
                _field("season", "season", "season.id", kind="string", required=True),
                _field("squad_name", "squad.name", "squad_name", kind="club", required=True),
                _field("kh_ratio", "KH_Ratio", default=0.0),
                _field("gb_mk_ratio", "GB_MK_Ratio", default=0.0),
                _field("fwd_half", "Fwd_Half", default=0.0),
                _field("scores", "Scores", default=0.0),
                _field("pp_chain", "PPchain", default=0.0),
                _field("points_per_i50", "Points_per_I50", default=0.0),
                _field("repeat_i50s", "Repeat_I50s", default=0.0),
                _field("rating_ball_use", "Rating_Ball_Use", default=0.0),
                _field("rating_ball_win", "Rating_Ball_Win", default=0.0),
                _field("chain_metres", "Chain_Metres", default=0.0),
                _field("time_in_poss_pct", "Time_in_Poss_Pct", default=0.0),
            ),
        ),
        DatasetSchema(
            kind="player_acquisition_breakdown",
            filenames=("player_acquisition_breakdown.csv",),
            model=AcquisitionBreakdown,
            fields=(
                _field("club", "Club", kind="club", required=True),
                _field("year", "Year", kind="int", required=True),
                _field("draft_category", "Draft", kind="string", required=True),
                _field("value", required=True),
            ),
        ),
        DatasetSchema(
            kind="player_projection",
            filenames=("player_projection.csv", "player_projections.csv"),
            model=PlayerProjection,
            fields=(
                _field("team", kind="club", required=True),
                _field("season", kind="int", required=True),
                _field("player_id", "playerId", kind="player_id", required=True),
                _field("name", "player_name", kind="string", required=True),
                _field("rating", required=True),
                _field("salary", required=True),
                _field("aa", "AA", required=True),
                _field("games", "Games", "games", required=True),
            ),
        ),
        DatasetSchema(
            kind="form_player_afl",
            filenames=("form_player_afl.csv",),
            model=AflFormRow,
            fields=(
                _field("season", kind="int", required=True),
                _field("player_id", "playerId", kind="player_id", required=True),
                _field("team", kind="club", required=True),
                _field("name", "player_name", kind="string", required=True),
                _field("weighted_avg", required=True),
                _field("recent_form"),
                _field("form_change", required=True),
            ),
        ),
        DatasetSchema(
            kind="form_player_vfl",
            filenames=("form_player_vfl.csv",),
            model=VflFormRow,
            fields=(
                _field("season", kind="int", required=True),
                _field("player_id", "playerId", kind="player_id", required=True),
                _field("team", kind="club", required=True),
                _field("name", "player_name", kind="string", required=True),
                _field("weighted_avg", required=True),
            ),
        ),
        DatasetSchema(
            kind="career_projections",
            filenames=("career_projections.csv",),
            model=CareerProjection,
            fields=(
                _field("source_provider_id", "SourceproviderId", kind="player_id"),
                _field("source_player", "SourcePlayer", kind="string"),
                _field("source_season", "SourceSeason", kind="int"),
                _field("source_rating", "SourceRating", default=0.0),
                _field("source_position", "SourcePosition", kind="string"),
                _field("horizon", "Horizon", kind="int", required=True),
                _field("season", "Season", kind="int", required=True),
                _field("estimate"),
                _field("lower"),
                _field("upper"),
                _field("salary"),
                _field("optimistic", "Optimistic", "optimistic"),
                _field("pessimistic", "Pessimistic", "pessimistic"),
                _field("salary_opt", "salary_opt", "salaryOpt", "Salary_Opt", "SalaryOpt"),
                _field("salary_pes", "salary_pes", "salaryPes", "Salary_Pes", "SalaryPes"),
                _field(
                    "aa",
                    "AA",
                    "AA ",
                    "All Australian",
                    "AllAustralian",
                    "AA_prob",
                    "AAProb",
                    "AA Probability",
                    "AA_Prob",
                ),
                _field("seasons_to_project", "Seasons"),
                _field("season_90", "Season_90", "season_90", "Season90", "season90", "Season_90 ", "Season 90"),
                _field(
                    "games",
                    "Games",
                    "Games100",
                    "Games_100",
                    "Games100+",
                    "Games100Plus",
                    "Games Probability",
                    "Games_prob",
                    "GamesProb",
                ),
                _field("type", "Type", kind="text"),
                _field("team", kind="text"),
                _field("rank_all", "rank_all", "Rank_all", "rankAll", "rank_all "),
                _field("rank_pos", "rank_pos", "Rank_pos", "rankPos", "rank_pos "),
                _field("height", "Height", "height", kind="text"),
                _field("age", "Age", "age", kind="text"),
                _field("drafted", "Drafted", "drafted", kind="text"),
            ),
            finalize=_career_finalize,
        ),
        DatasetSchema(
            kind="player_stats_agg",
            filenames=("CD_player_stats_agg.csv",),
            model=PlayerStatsAgg,
            fields=(
                _field("season", "season", "Season", kind="int", required=True),
                _field("player_id", "player.id", "player_id", "playerId", kind="player_id", required=True),
                _field("player_name", "player.name", "player_name", "playerName", kind="string"),
                _field(
                    "metric_name",
                    "metric_name",
                    "metric_name ",
                    "Metric Name",
                    "Metric_Name",
                    kind="string",
                    required=True,
                ),
                _field("category", "category", "Metric_Category", "Metric Category", kind="string", required=True),
                _field("metric_value", "metric_value", "metricValue", "value", required=True),
            ),
        ),
    )
}

DATASET_KINDS: Tuple[str, ...] = tuple(SCHEMAS)


def get_schema(kind: str) -> DatasetSchema:
    try:
        return SCHEMAS[kind]
    except KeyError:
        raise KeyError(f"No dataset schema configured for kind={kind!r}") from None


def normalize(kind: str, raw_row: Any) -> Optional[BaseModel]:
    """Map one raw row to its typed record, or ``None`` when it must be dropped."""

    schema = get_schema(kind)
    if not isinstance(raw_row, Mapping):
        return None
    return schema.map_row(raw_row)


@dataclass(frozen=True)
class NormalizeReport:
    kind: str
    rows: Tuple[BaseModel, ...]
    total: int
    dropped: int


def normalize_rows(kind: str, rows: Iterable[Any]) -> NormalizeReport:
    """Normalize a dataset, keeping source order and counting rejected rows."""

    schema = get_schema(kind)
    kept: List[BaseModel] = []
    total = 0
    for raw in rows:
        total += 1
        record = schema.map_row(raw) if isinstance(raw, Mapping) else None
        if record is not None:
            kept.append(record)
    dropped = total - len(kept)
    if dropped:
        logger.debug("Dropped %d of %d %s rows during normalization", dropped, total, kind)
    return NormalizeReport(kind=kind, rows=tuple(kept), total=total, dropped=dropped)
