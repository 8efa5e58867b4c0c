"""Immutable snapshot of every normalized dataset."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Tuple

from .rows import (
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


@dataclass(frozen=True)
class DatasetBundle:
    roster_players: Tuple[RosterPlayer, ...] = ()
    team_kpis: Tuple[TeamKpi, ...] = ()
    rank_series: Tuple[RankSeries, ...] = ()
    skill_radar: Tuple[SkillRadar, ...] = ()
    acquisitions: Tuple[AcquisitionBreakdown, ...] = ()
    player_projections: Tuple[PlayerProjection, ...] = ()
    afl_form: Tuple[AflFormRow, ...] = ()
    vfl_form: Tuple[VflFormRow, ...] = ()
    career_projections: Tuple[CareerProjection, ...] = ()
    player_stats: Tuple[PlayerStatsAgg, ...] = ()
    version: int = 0
    dropped_rows: Mapping[str, int] = field(default_factory=dict)


EMPTY_BUNDLE = DatasetBundle()
