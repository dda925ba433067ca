# -*- coding: utf-8 -*-
"""
Trend Analysis - the single entry point that characterises a series.

``analyze_trend`` cleans the input, keeps the points since the base year,
builds the series profile, walks the method-selection rules and fits the
selected model. ``process_entity`` does the same starting from the upstream
entity shape (reporting periods plus base year) and ``summarize_analyses``
aggregates many results.

The functions are pure: identical input always yields an identical result
and nothing is cached between calls.

Example:
    >>> from carbontrend.analysis import analyze_trend
    >>> result = analyze_trend(
    ...     [(2018, 100), (2019, 90), (2020, 80), (2021, 70), (2022, 60)],
    ...     base_year=2018,
    ... )
    >>> result.method.value, round(result.trend_slope, 6)
    ('linear', -10.0)
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from carbontrend.cleaning import (
    PointLike,
    filter_since_base_year,
    normalize_points,
    points_from_periods,
)
from carbontrend.config import TrendEngineConfig, get_config
from carbontrend.method_selector import build_profile, fit_method, select_method
from carbontrend.models import (
    AnalysisSummary,
    EntityInput,
    TrendAnalysisResult,
)
from carbontrend.statistics import trend_direction

logger = logging.getLogger(__name__)


def analyze_trend(
    points: Iterable[PointLike],
    base_year: Optional[int] = None,
    config: Optional[TrendEngineConfig] = None,
) -> TrendAnalysisResult:
    """Characterise a series and select its trend method.

    Never raises on sparse data: fewer than two points since the base year
    yields method ``none`` (no points) or ``simple`` (one point) without
    coefficients, and ``insufficient_data`` as direction.

    Args:
        points: Emission points in any order (EmissionPoint, mappings with
            ``year``/``value`` or ``(year, value)`` tuples).
        base_year: Points before this year are excluded from fitting.
        config: Engine configuration; the global singleton when omitted.

    Returns:
        TrendAnalysisResult for the base-year-filtered series.
    """
    cfg = config or get_config()
    clean = filter_since_base_year(normalize_points(points), base_year)

    profile = build_profile(clean, base_year, cfg)
    selection = select_method(profile, cfg)
    coefficients = fit_method(selection.method, clean, cfg)

    logger.debug(
        "Trend analysis: %d points (base year %s) -> %s via rule %s",
        len(clean), base_year, selection.method.value, selection.rule,
    )

    return TrendAnalysisResult(
        method=selection.method,
        explanation=selection.explanation,
        explanation_params=selection.params,
        coefficients=coefficients,
        clean_data=clean,
        base_year=base_year,
        data_points=profile.data_points,
        missing_years=profile.missing_years,
        statistics=profile.statistics,
        trend_direction=trend_direction(clean, cfg.direction_threshold),
        trend_slope=profile.trend_slope,
        yearly_percentage_change=profile.yearly_percentage_change,
        r2_linear=profile.r2_linear,
        r2_exponential=profile.r2_exponential,
        recent_stability=profile.recent_stability,
        has_unusual_points=profile.has_unusual_points,
        unusual_points_details=list(profile.unusual_points),
    )


def process_entity(
    entity: Union[EntityInput, Mapping[str, Any]],
    config: Optional[TrendEngineConfig] = None,
) -> TrendAnalysisResult:
    """Analyse a company or municipality in the upstream API shape.

    Args:
        entity: EntityInput or a raw dict with ``reportingPeriods`` and an
            optional ``baseYear: {year}``.
        config: Engine configuration; the global singleton when omitted.

    Returns:
        TrendAnalysisResult tagged with the entity id and name.
    """
    if not isinstance(entity, EntityInput):
        entity = EntityInput.model_validate(entity)

    result = analyze_trend(
        points_from_periods(entity.reporting_periods),
        base_year=entity.base_year_value,
        config=config,
    )
    return result.model_copy(
        update={"entity_id": entity.entity_id, "entity_name": entity.name},
    )


def summarize_analyses(analyses: Sequence[TrendAnalysisResult]) -> AnalysisSummary:
    """Aggregate method usage and data quality over many analyses."""
    count = len(analyses)
    if count == 0:
        return AnalysisSummary()

    method_counts = {}
    for analysis in analyses:
        key = analysis.method.value
        method_counts[key] = method_counts.get(key, 0) + 1

    with_unusual = sum(1 for a in analyses if a.has_unusual_points)
    return AnalysisSummary(
        entity_count=count,
        method_counts=method_counts,
        avg_data_points=sum(a.data_points for a in analyses) / count,
        avg_missing_years=sum(a.missing_years for a in analyses) / count,
        unusual_points_percentage=with_unusual / count * 100,
    )


__all__ = [
    "analyze_trend",
    "process_entity",
    "summarize_analyses",
]
