"""Selection state machine and URL mapping."""

from .state import (
    DEFAULT_LOCATION,
    OUTLOOKS,
    Action,
    InferPlayerTeam,
    Navigate,
    Redirect,
    ResetSelection,
    Route,
    SelectComparePlayer,
    SelectCompareTeam,
    SelectPlayer,
    SelectTeam,
    Selection,
    SelectionStore,
    SetOutlook,
    SetPage,
    SetSeason,
    canonical_url,
    infer_player_team,
    parse_location,
    reduce,
)

__all__ = [
    "Action",
    "DEFAULT_LOCATION",
    "InferPlayerTeam",
    "Navigate",
    "OUTLOOKS",
    "Redirect",
    "ResetSelection",
    "Route",
    "SelectComparePlayer",
    "SelectCompareTeam",
    "SelectPlayer",
    "SelectTeam",
    "Selection",
    "SelectionStore",
    "SetOutlook",
    "SetPage",
    "SetSeason",
    "canonical_url",
    "infer_player_team",
    "parse_location",
    "reduce",
]
