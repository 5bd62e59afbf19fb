from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Percentiles:
    p10: list[float]
    p25: list[float]
    p50: list[float]
    p75: list[float]
    p90: list[float]


def format_currency(value: float) -> str:
    """Format an amount in man-yen, switching to oku (100M yen) when large."""
    if abs(value) >= 10_000:
        return f"{value / 10_000:,.2f}億円"
    return f"{value:,.0f}万円"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def safe_num(value: float, fallback: float = 0.0) -> float:
    """Replace NaN and infinities with `fallback`."""
    if value is None or not math.isfinite(value):
        return fallback
    return value


def weighted_sum(values: Iterable[float], weights: Iterable[float]) -> float:
    return sum(v * w for v, w in zip(values, weights))
