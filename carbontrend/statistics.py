# -*- coding: utf-8 -*-
"""
Series Statistics - shape characterisation of a yearly emissions series.

All functions are total: empty or single-point series return neutral
values (zeros, ``INSUFFICIENT_DATA``) instead of raising.

Metrics:
    - Basic statistics: mean, population variance/std-dev, min, max, span
    - Missing years: absent years plus years reported as exactly zero
    - Recent stability: coefficient of variation of the trailing window
    - R² of the linear and exponential fits (exponential needs values > 0)
    - Trend slope and direction
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from carbontrend.models import BasicStatistics, EmissionPoint, TrendDirection
from carbontrend.regression import fit_exponential, fit_linear, trend_slope

logger = logging.getLogger(__name__)


def basic_statistics(points: Sequence[EmissionPoint]) -> BasicStatistics:
    """Population statistics of the values (all zeros for an empty series)."""
    if not points:
        return BasicStatistics()
    values = [p.value for p in points]
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    low, high = min(values), max(values)
    return BasicStatistics(
        mean=mean,
        std_dev=math.sqrt(variance),
        variance=variance,
        min=low,
        max=high,
        span=high - low,
    )


def coefficient_of_variation(points: Sequence[EmissionPoint]) -> float:
    """std-dev / mean, with a zero mean treated as 1."""
    stats = basic_statistics(points)
    return stats.std_dev / (stats.mean or 1)


def count_missing_years(
    points: Sequence[EmissionPoint],
    base_year: Optional[int] = None,
) -> int:
    """Count gaps in the reporting record.

    A year counts as missing when it lies in ``[start, last]`` and is either
    absent or reported as exactly 0 (a zero total means no real report).
    ``start`` is the base year when given, otherwise the first reported
    year. Fewer than two points since the base year gives 0.
    """
    valid = [p for p in points if base_year is None or p.year >= base_year]
    if len(valid) < 2:
        return 0
    start = base_year if base_year is not None else valid[0].year
    expected = valid[-1].year - start + 1
    zero_years = sum(1 for p in valid if p.value == 0)
    return max(0, expected - len(valid)) + zero_years


def recent_stability(points: Sequence[EmissionPoint], window: int = 4) -> float:
    """Coefficient of variation of the last ``window`` points (or fewer)."""
    recent = list(points)[-window:]
    if len(recent) < 2:
        return 0.0
    return coefficient_of_variation(recent)


def _r_squared(actual: Sequence[float], predicted: Sequence[float]) -> float:
    mean = sum(actual) / len(actual)
    ss_tot = sum((y - mean) ** 2 for y in actual)
    if ss_tot == 0:
        return 0.0
    ss_res = sum((y - f) ** 2 for y, f in zip(actual, predicted))
    return 1.0 - ss_res / ss_tot


def r2_linear(points: Sequence[EmissionPoint]) -> float:
    """Coefficient of determination of the OLS line (0.0 when unfittable)."""
    coefficients = fit_linear(points)
    if coefficients is None:
        return 0.0
    return _r_squared(
        [p.value for p in points],
        [coefficients.evaluate(p.year) for p in points],
    )


def r2_exponential(points: Sequence[EmissionPoint]) -> float:
    """R² of the exponential fit measured on the original scale.

    Any non-positive value makes the log fit impossible; the result is then
    0.0 so the exponential candidate can never win a comparison.
    """
    if len(points) < 2 or any(p.value <= 0 for p in points):
        return 0.0
    coefficients = fit_exponential(points)
    if coefficients is None:
        return 0.0
    try:
        predicted = [coefficients.evaluate(p.year) for p in points]
    except OverflowError:
        logger.debug("Exponential fit overflowed while scoring %d points", len(points))
        return 0.0
    return _r_squared([p.value for p in points], predicted)


def trend_direction(
    points: Sequence[EmissionPoint],
    threshold: float = 0.01,
) -> TrendDirection:
    """Classify the OLS slope relative to the mean level."""
    if len(points) < 2:
        return TrendDirection.INSUFFICIENT_DATA
    slope = trend_slope(points)
    mean = basic_statistics(points).mean
    if abs(slope) < threshold * abs(mean):
        return TrendDirection.STABLE
    return TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING


__all__ = [
    "basic_statistics",
    "coefficient_of_variation",
    "count_missing_years",
    "recent_stability",
    "r2_linear",
    "r2_exponential",
    "trend_slope",
    "trend_direction",
]
