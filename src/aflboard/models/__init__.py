"""Typed rows for every dashboard dataset."""

from .bundle import EMPTY_BUNDLE, DatasetBundle
from .rows import (
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

__all__ = [
    "ADVANCED_STAT_FIELDS",
    "AcquisitionBreakdown",
    "AflFormRow",
    "CareerProjection",
    "DatasetBundle",
    "EMPTY_BUNDLE",
    "PlayerProjection",
    "PlayerStatsAgg",
    "RankSeries",
    "RosterPlayer",
    "SkillRadar",
    "TeamKpi",
    "VflFormRow",
]
