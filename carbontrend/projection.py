# -*- coding: utf-8 -*-
"""
Projection Generator - approximated, trend and Carbon-Law values per year.

Rows run from the last reported year to the target year. The fitted model is
shifted to pass through the last reported point so the projection continues
from the real data rather than from the regression line:

    - ``approximated``: model values up to and including the current year
      (fills the reporting gap until today)
    - ``trend``: model values from the current year onwards
    - ``carbon_law``: the 11.7%/yr Carbon-Law path from the current year,
      starting at the reported current-year value, else the model value

The current year carries both ``approximated`` and ``trend`` with equal
values. The current year is always passed in by the caller.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from carbontrend.analysis import analyze_trend
from carbontrend.carbon_budget import carbon_law_path
from carbontrend.cleaning import PointLike, filter_since_base_year, normalize_points
from carbontrend.config import TrendEngineConfig, get_config
from carbontrend.models import ApproximatedPoint, EmissionPoint, TrendCoefficients

logger = logging.getLogger(__name__)

MAX_PROJECTION_YEAR = 2050


def _model_value(model: TrendCoefficients, year: int) -> float:
    return max(0.0, model.evaluate(year))


def generate_projection(
    points: Iterable[PointLike],
    coefficients: Optional[TrendCoefficients] = None,
    target_year: Optional[int] = None,
    base_year: Optional[int] = None,
    clean_data: Optional[Sequence[EmissionPoint]] = None,
    *,
    current_year: int,
    config: Optional[TrendEngineConfig] = None,
) -> Optional[List[ApproximatedPoint]]:
    """Project an emissions series to ``target_year``.

    Args:
        points: Reported points in any order.
        coefficients: Model to project with. When omitted the series is
            analysed and the selected method's model is used.
        target_year: Last projected year, capped at 2050 (default from
            config).
        base_year: Points before this year are not used for fitting.
        clean_data: Already cleaned series (e.g. ``TrendAnalysisResult.clean_data``);
            skips cleaning of ``points``.
        current_year: The calendar year treated as "now".
        config: Engine configuration; the global singleton when omitted.

    Returns:
        One ApproximatedPoint per year from the last reported year to the
        target year, or None when no model is available (method ``none``
        or ``simple``) or the model diverges.
    """
    cfg = config or get_config()
    reported = normalize_points(points)
    clean = list(clean_data) if clean_data is not None else filter_since_base_year(reported, base_year)
    if not clean:
        return None

    if coefficients is None:
        analysis = analyze_trend(clean, base_year, cfg)
        if not analysis.has_projection:
            logger.debug("No projection: method %s", analysis.method.value)
            return None
        coefficients = analysis.coefficients

    end_year = cfg.projection_end_year if target_year is None else target_year
    if end_year > MAX_PROJECTION_YEAR:
        logger.debug("Target year %d capped at %d", end_year, MAX_PROJECTION_YEAR)
        end_year = MAX_PROJECTION_YEAR

    last = clean[-1]
    model = coefficients.anchored_at(last.year, last.value)
    years = range(last.year, end_year + 1)

    try:
        values = {year: _model_value(model, year) for year in years}
        reported_now = next((p.value for p in reported if p.year == current_year), None)
        baseline = reported_now if reported_now is not None else _model_value(model, current_year)
    except OverflowError:
        logger.warning("Projection diverges before %d, no projection generated", end_year)
        return None

    law = dict(zip(
        range(current_year, end_year + 1),
        carbon_law_path(baseline, current_year, end_year, cfg.carbon_law_rate),
    ))

    projection = [
        ApproximatedPoint(
            year=year,
            approximated=values[year] if year <= current_year else None,
            trend=values[year] if year >= current_year else None,
            carbon_law=law[year] if law.get(year, 0) > 0 else None,
        )
        for year in years
    ]
    logger.debug(
        "Projected %d years (%d-%d) from %s model",
        len(projection), last.year, end_year, coefficients.kind,
    )
    return projection


__all__ = [
    "MAX_PROJECTION_YEAR",
    "generate_projection",
]
