"""Reference tables for clubs, colours and categories."""

from .clubs import (
    ACQUISITION_COLOR,
    AGE_CATEGORY_COLOR,
    AGE_CATEGORY_ORDER,
    CLUB_ALIASES,
    DEFAULT_SEASON,
    DEFAULT_TEAM_ID,
    LEGACY_TEAM_CODES,
    PLAYER_STAT_CATEGORY_ORDER,
    TEAM_PRIMARY_COLOR,
    TEAMS,
    TeamOption,
    category_sort_key,
    stable_color_for_key,
    team_by_id,
    team_color,
    team_name,
)

__all__ = [
    "ACQUISITION_COLOR",
    "AGE_CATEGORY_COLOR",
    "AGE_CATEGORY_ORDER",
    "CLUB_ALIASES",
    "DEFAULT_SEASON",
    "DEFAULT_TEAM_ID",
    "LEGACY_TEAM_CODES",
    "PLAYER_STAT_CATEGORY_ORDER",
    "TEAM_PRIMARY_COLOR",
    "TEAMS",
    "TeamOption",
    "category_sort_key",
    "stable_color_for_key",
    "team_by_id",
    "team_color",
    "team_name",
]
