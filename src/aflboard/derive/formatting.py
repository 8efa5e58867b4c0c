"""Display strings for KPI cards and tables."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal


EM_DASH = "—"
BULLET = "•"


def _missing(value: float | None) -> bool:
    return value is None or not math.isfinite(value)


def round_half_up(value: float) -> int:
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def fmt_fixed(value: float | None, decimals: int = 1) -> str:
    if _missing(value):
        return EM_DASH
    return f"{value:.{decimals}f}"


def fmt_signed(value: float, decimals: int = 2) -> str:
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{decimals}f}"


def safe_yoy(value: float | None, decimals: int = 1) -> str:
    if _missing(value):
        return f"YoY: {EM_DASH}"
    return f"YoY: {fmt_signed(value, decimals)}"


def fmt_prob_pct(probability: float | None) -> str:
    if probability is None:
        return EM_DASH
    pct = max(0.0, min(1.0, probability)) * 100
    if 0 < pct < 0.1:
        return "<0.1%"
    if 0 < pct < 1:
        return "<1%"
    if pct < 10:
        return f"{pct:.1f}%"
    return f"{round_half_up(pct)}%"


def fmt_thousands(value: float | None) -> str:
    if _missing(value):
        return EM_DASH
    return f"{round_half_up(value):,}"


def fmt_aud(value: float) -> str:
    amount = round_half_up(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,}"


def fmt_salary_k(value: float | None) -> str:
    if _missing(value):
        return EM_DASH
    return f"${round_half_up(value / 1000)}k"


def ordinal(value: float) -> str:
    n = round_half_up(value)
    if 11 <= n % 100 <= 13:
        return f"{n}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"
