# -*- coding: utf-8 -*-
"""
Carbon Budget - Paris-alignment evaluation against the Carbon Law.

The Carbon Law pathway halves emissions roughly every six years by cutting
them a fixed fraction (11.7%) every year. An entity meets Paris when its
projected cumulative emissions over the evaluation window (2025-2050 by
default) stay within the cumulative Carbon-Law budget that starts from the
same reference-year emissions.

Outcomes are tagged with ``BudgetStatus``. A missing trend model or a
reference estimate at or below zero is ``UNKNOWN`` with ``None`` values and
is never reported as met or missed. The legacy numeric helpers at the end of
the module keep the sentinels downstream rankings branch on.

Example:
    >>> from carbontrend.analysis import analyze_trend
    >>> from carbontrend.carbon_budget import evaluate_paris_alignment
    >>> series = [(2019, 100), (2020, 98), (2021, 96), (2022, 94)]
    >>> result = evaluate_paris_alignment(series, analyze_trend(series))
    >>> result.status.value, result.meets_paris
    ('over_budget', False)
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional

from carbontrend.cleaning import PointLike, normalize_points
from carbontrend.config import TrendEngineConfig, get_config
from carbontrend.models import (
    BudgetStatus,
    ParisAlignment,
    TrendAnalysisResult,
    TrendCoefficients,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CARBON_LAW_RATE = 0.117

# Legacy sentinels meaning "far under budget, leave out of further math".
LEGACY_UNDER_BUDGET_PERCENT = -1000.0
LEGACY_UNDER_BUDGET_TONNES = -1_000_000.0


# ---------------------------------------------------------------------------
# Carbon Law pathway
# ---------------------------------------------------------------------------


def carbon_law_path(
    baseline: float,
    start_year: int,
    end_year: int,
    rate: float = CARBON_LAW_RATE,
) -> List[float]:
    """Yearly Carbon-Law values from ``start_year`` to ``end_year`` inclusive.

    Each value is the previous one multiplied by ``1 - rate``.
    """
    path: List[float] = []
    value = baseline
    for _ in range(start_year, end_year + 1):
        path.append(value)
        value *= 1 - rate
    return path


def carbon_law_cumulative(
    baseline: float,
    start_year: int,
    end_year: int,
    rate: float = CARBON_LAW_RATE,
) -> float:
    """Cumulative Carbon-Law budget over the window."""
    return sum(carbon_law_path(baseline, start_year, end_year, rate))


def cumulative_emissions(
    model: TrendCoefficients,
    start_year: int,
    end_year: int,
) -> float:
    """Sum the model's yearly values, each clamped at zero.

    Returns ``math.inf`` when an exponential model overflows.
    """
    total = 0.0
    for year in range(start_year, end_year + 1):
        try:
            total += max(0.0, model.evaluate(year))
        except OverflowError:
            logger.warning(
                "Trend model overflowed at %d, cumulative emissions unbounded", year,
            )
            return math.inf
    return total


# ---------------------------------------------------------------------------
# Reference-year estimate
# ---------------------------------------------------------------------------


def estimate_reference_emissions(
    points: Iterable[PointLike],
    trend_analysis: Optional[TrendAnalysisResult],
    reference_year: int = 2025,
) -> Optional[float]:
    """Reported emissions for the reference year, else the trend estimate.

    A reported value of exactly 0 is not a real report and falls back to
    the trend. The trend model is anchored at the last fitted point, the
    same curve the projection draws.

    Returns:
        The estimate, or None when there is no trend model.
    """
    if trend_analysis is None or not trend_analysis.has_projection:
        return None

    for point in normalize_points(points):
        if point.year == reference_year and point.value != 0:
            return point.value

    model = trend_analysis.coefficients
    if trend_analysis.clean_data:
        last = trend_analysis.clean_data[-1]
        model = model.anchored_at(last.year, last.value)
    try:
        return model.evaluate(reference_year)
    except OverflowError:
        logger.warning("Trend model overflowed estimating %d emissions", reference_year)
        return None


# ---------------------------------------------------------------------------
# Paris alignment
# ---------------------------------------------------------------------------


def evaluate_paris_alignment(
    points: Iterable[PointLike],
    trend_analysis: Optional[TrendAnalysisResult],
    reference_year: Optional[int] = None,
    horizon: Optional[int] = None,
    config: Optional[TrendEngineConfig] = None,
) -> ParisAlignment:
    """Compare projected cumulative emissions with the Carbon-Law budget.

    Without a reported reference-year value the estimate comes from the
    fitted model shifted through the last fitted point, not from the raw
    regression line. Evaluation and projection therefore share one curve,
    which for a noisy plain-OLS series can differ from the unshifted fit.

    Args:
        points: Reported emission points (any order).
        trend_analysis: Result of ``analyze_trend`` for the same points.
        reference_year: First year of the window (default from config, 2025).
        horizon: Last year of the window (default from config, 2050).
        config: Engine configuration; the global singleton when omitted.

    Returns:
        ParisAlignment. ``UNKNOWN`` with ``meets_paris=None`` whenever the
        reference estimate is missing or at or below zero.
    """
    cfg = config or get_config()
    start = cfg.reference_year if reference_year is None else reference_year
    end = cfg.horizon_year if horizon is None else horizon

    estimate = estimate_reference_emissions(points, trend_analysis, start)
    if estimate is None or not math.isfinite(estimate) or estimate <= 0:
        logger.debug("Paris alignment unknown: reference estimate %s", estimate)
        return ParisAlignment(
            status=BudgetStatus.UNKNOWN,
            reference_year=start,
            horizon_year=end,
            reference_emissions=estimate if estimate is not None and math.isfinite(estimate) else None,
        )

    model = trend_analysis.coefficients.anchored_at(start, estimate)
    projected = cumulative_emissions(model, start, end)
    budget = carbon_law_cumulative(estimate, start, end, cfg.carbon_law_rate)

    meets = projected <= budget
    return ParisAlignment(
        meets_paris=meets,
        budget_percent=(projected - budget) / budget * 100,
        budget_tonnes=projected - budget,
        status=BudgetStatus.UNDER_BUDGET if meets else BudgetStatus.OVER_BUDGET,
        reference_year=start,
        horizon_year=end,
        reference_emissions=estimate,
        cumulative_projected=projected,
        cumulative_budget=budget,
    )


# ---------------------------------------------------------------------------
# Legacy numeric helpers
# ---------------------------------------------------------------------------


def carbon_budget_percent(
    points: Iterable[PointLike],
    trend_analysis: Optional[TrendAnalysisResult],
    config: Optional[TrendEngineConfig] = None,
) -> Optional[float]:
    """Percentage over (positive) or under (negative) the carbon budget.

    Returns ``LEGACY_UNDER_BUDGET_PERCENT`` when the reference estimate is at
    or below zero and None when no trend model exists.
    """
    cfg = config or get_config()
    points = list(points)
    estimate = estimate_reference_emissions(points, trend_analysis, cfg.reference_year)
    if estimate is None:
        return None
    if estimate <= 0:
        return LEGACY_UNDER_BUDGET_PERCENT
    return evaluate_paris_alignment(points, trend_analysis, config=cfg).budget_percent


def carbon_budget_tonnes(
    points: Iterable[PointLike],
    trend_analysis: Optional[TrendAnalysisResult],
    config: Optional[TrendEngineConfig] = None,
) -> Optional[float]:
    """Tonnes over (positive) or under (negative) the carbon budget.

    Returns ``LEGACY_UNDER_BUDGET_TONNES`` when the reference estimate is at
    or below zero and None when no trend model exists.
    """
    cfg = config or get_config()
    points = list(points)
    estimate = estimate_reference_emissions(points, trend_analysis, cfg.reference_year)
    if estimate is None:
        return None
    if estimate <= 0:
        return LEGACY_UNDER_BUDGET_TONNES
    return evaluate_paris_alignment(points, trend_analysis, config=cfg).budget_tonnes


__all__ = [
    "CARBON_LAW_RATE",
    "LEGACY_UNDER_BUDGET_PERCENT",
    "LEGACY_UNDER_BUDGET_TONNES",
    "carbon_law_path",
    "carbon_law_cumulative",
    "cumulative_emissions",
    "estimate_reference_emissions",
    "evaluate_paris_alignment",
    "carbon_budget_percent",
    "carbon_budget_tonnes",
]
