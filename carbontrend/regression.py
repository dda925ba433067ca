# -*- coding: utf-8 -*-
"""
Regression Fits - least-squares models for yearly emissions series.

Every fit returns tagged coefficients (``LinearCoefficients`` or
``ExponentialCoefficients``) or ``None`` when the series cannot support the
model. Nothing in this module raises on sparse or degenerate input.

Models:
    - Linear OLS: value = slope * year + intercept
    - Weighted linear: decay weights ``decay ** (n - 1 - i)``, line passed
      through the most recent point
    - Exponential: OLS on ln(value), value = a * exp(b * (year - anchor))
    - Weighted exponential: decay-weighted OLS on ln(value)
    - Recent exponential: exponential fit of the last N points

Exponential fits only use strictly positive values; fewer than two
positive points means the exponential candidate is skipped (``None``).
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from carbontrend.models import (
    EmissionPoint,
    ExponentialCoefficients,
    LinearCoefficients,
)

logger = logging.getLogger(__name__)

DEFAULT_DECAY = 0.7
DEFAULT_RECENT_WINDOW = 4


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _weighted_ols(
    xs: Sequence[float],
    ys: Sequence[float],
    weights: Sequence[float],
) -> Optional[tuple]:
    """Solve weighted least squares for (slope, intercept).

    Returns None when the design is singular (all x equal).
    """
    sum_w = sum(weights)
    if sum_w <= 0:
        return None
    sum_wx = sum(w * x for w, x in zip(weights, xs))
    sum_wy = sum(w * y for w, y in zip(weights, ys))
    sum_wxy = sum(w * x * y for w, x, y in zip(weights, xs, ys))
    sum_wxx = sum(w * x * x for w, x in zip(weights, xs))
    denominator = sum_w * sum_wxx - sum_wx * sum_wx
    if denominator == 0 or not math.isfinite(denominator):
        return None
    slope = (sum_w * sum_wxy - sum_wx * sum_wy) / denominator
    intercept = (sum_wy - slope * sum_wx) / sum_w
    return slope, intercept


def decay_weights(n: int, decay: float = DEFAULT_DECAY) -> List[float]:
    """Recency weights: the most recent point gets 1, the one before ``decay``..."""
    return [decay ** (n - 1 - i) for i in range(n)]


def _positive(points: Sequence[EmissionPoint]) -> List[EmissionPoint]:
    return [p for p in points if p.value > 0]


# ---------------------------------------------------------------------------
# Linear family
# ---------------------------------------------------------------------------


def trend_slope(points: Sequence[EmissionPoint]) -> float:
    """Ordinary least-squares slope in tCO2e per year (0.0 below two points)."""
    if len(points) < 2:
        return 0.0
    anchor = points[0].year
    fit = _weighted_ols(
        [p.year - anchor for p in points],
        [p.value for p in points],
        [1.0] * len(points),
    )
    return fit[0] if fit else 0.0


def fit_linear(points: Sequence[EmissionPoint]) -> Optional[LinearCoefficients]:
    """Ordinary least-squares line over absolute years."""
    if len(points) < 2:
        return None
    anchor = points[0].year
    fit = _weighted_ols(
        [p.year - anchor for p in points],
        [p.value for p in points],
        [1.0] * len(points),
    )
    if fit is None:
        return None
    slope, intercept_at_anchor = fit
    return LinearCoefficients(slope=slope, intercept=intercept_at_anchor - slope * anchor)


def fit_weighted_linear(
    points: Sequence[EmissionPoint],
    decay: float = DEFAULT_DECAY,
    min_points: int = DEFAULT_RECENT_WINDOW,
) -> Optional[LinearCoefficients]:
    """Recency-weighted line passed through the most recent point.

    Below ``min_points`` the plain OLS slope is used instead of the
    weighted one; the line is still anchored at the last point.
    """
    n = len(points)
    if n < 2:
        return None
    last = points[-1]
    if n < min_points:
        slope = trend_slope(points)
    else:
        anchor = points[0].year
        fit = _weighted_ols(
            [p.year - anchor for p in points],
            [p.value for p in points],
            decay_weights(n, decay),
        )
        if fit is None:
            return None
        slope = fit[0]
    return LinearCoefficients(slope=slope, intercept=last.value - slope * last.year)


# ---------------------------------------------------------------------------
# Exponential family
# ---------------------------------------------------------------------------


def fit_exponential(points: Sequence[EmissionPoint]) -> Optional[ExponentialCoefficients]:
    """Log-linear OLS fit anchored at the first positive year."""
    positive = _positive(points)
    if len(positive) < 2:
        return None
    anchor = positive[0].year
    fit = _weighted_ols(
        [p.year - anchor for p in positive],
        [math.log(p.value) for p in positive],
        [1.0] * len(positive),
    )
    if fit is None:
        return None
    b, ln_a = fit
    return ExponentialCoefficients(a=math.exp(ln_a), b=b, anchor_year=anchor)


def fit_weighted_exponential(
    points: Sequence[EmissionPoint],
    decay: float = DEFAULT_DECAY,
) -> Optional[ExponentialCoefficients]:
    """Log-linear fit with recency decay weights."""
    positive = _positive(points)
    n = len(positive)
    if n < 2:
        return None
    anchor = positive[0].year
    fit = _weighted_ols(
        [p.year - anchor for p in positive],
        [math.log(p.value) for p in positive],
        decay_weights(n, decay),
    )
    if fit is None:
        return None
    b, ln_a = fit
    return ExponentialCoefficients(a=math.exp(ln_a), b=b, anchor_year=anchor)


def fit_recent_exponential(
    points: Sequence[EmissionPoint],
    window: int = DEFAULT_RECENT_WINDOW,
) -> Optional[ExponentialCoefficients]:
    """Unweighted exponential fit of the last ``window`` points."""
    return fit_exponential(list(points)[-window:])


__all__ = [
    "DEFAULT_DECAY",
    "DEFAULT_RECENT_WINDOW",
    "decay_weights",
    "trend_slope",
    "fit_linear",
    "fit_weighted_linear",
    "fit_exponential",
    "fit_weighted_exponential",
    "fit_recent_exponential",
]
