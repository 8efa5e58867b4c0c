"""Small numeric helpers shared by the team and career views."""

from __future__ import annotations

import math
from bisect import bisect_left, bisect_right
from typing import Any, Iterable, Literal, Sequence

from aflboard.ingest import to_number_or_none


RankDirection = Literal["asc", "desc"]


def finite_or_none(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    return to_number_or_none(value)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def percentile_from_sorted(value: float, sorted_values: Sequence[float]) -> float | None:
    """Mid-rank percentile of ``value`` against an ascending distribution."""

    if not sorted_values:
        return None
    n = len(sorted_values)
    less = bisect_left(sorted_values, value)
    equal = max(0, bisect_right(sorted_values, value) - less)
    return (less + 0.5 * equal) / n * 100.0


def dense_rank(values: Iterable[float | None], target: float | None, direction: RankDirection) -> int | None:
    """Rank of ``target`` among the distinct finite values, 1 being best."""

    if target is None or not math.isfinite(target):
        return None
    distinct = {v for v in values if v is not None and math.isfinite(v)}
    if not distinct or target not in distinct:
        return None
    ordered = sorted(distinct, reverse=(direction == "desc"))
    return ordered.index(target) + 1


def closest_season(seasons: Iterable[int], target: int) -> int | None:
    """Exact match, else the nearest season; ties go to the later season."""

    best: int | None = None
    for season in seasons:
        if season == target:
            return season
        if best is None:
            best = season
            continue
        distance, best_distance = abs(season - target), abs(best - target)
        if distance < best_distance or (distance == best_distance and season > best):
            best = season
    return best


def clamp01_probability(value: Any) -> float | None:
    """Read a probability stored either as 0-1 or 0-100.

    Values above 100 are counts rather than probabilities and give ``None``.
    """

    number = finite_or_none(value)
    if number is None or number > 100:
        return None
    if number > 1:
        number = number / 100
    return clamp(number, 0.0, 1.0)


def mean(values: Sequence[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)
