# -*- coding: utf-8 -*-
"""
Trend Method Selector - ordered rule table choosing the projection method.

The selector characterises a clean series once (``SeriesProfile``) and walks
``SELECTION_RULES`` in order; the first rule whose predicate matches decides
the method and the user-facing explanation. Every rule is a plain
``SelectionRule`` so the order is visible and each rule can be tested on
its own.

Rule order:
    1. insufficient_data        fewer than 2 points -> none / simple
    2. missing_years            gaps or zero years  -> linear
    3. recent_stability         last 4 points CV < 10% -> weightedLinear
    4. unusual_points           abnormal transitions   -> weightedLinear
    5. weighted_exponential     R²exp gain > 0.05, CV > 15% -> weightedExponential
    6. exponential              R²exp gain > 0.05            -> exponential
    7. high_variance            CV > 20%                     -> weightedLinear
    8. recent_exponential       strong exponential in last 4 -> recentExponential
    9. default                                               -> linear
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from carbontrend.config import TrendEngineConfig
from carbontrend.detection import detect_unusual_points
from carbontrend.models import (
    BasicStatistics,
    EmissionPoint,
    TrendCoefficients,
    TrendMethod,
    UnusualPoint,
)
from carbontrend.regression import (
    fit_exponential,
    fit_linear,
    fit_recent_exponential,
    fit_weighted_exponential,
    fit_weighted_linear,
    trend_slope,
)
from carbontrend.statistics import (
    basic_statistics,
    count_missing_years,
    r2_exponential,
    r2_linear,
    recent_stability,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Series profile
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SeriesProfile:
    """Everything the selection rules look at, computed once per series."""

    points: Tuple[EmissionPoint, ...]
    base_year: Optional[int] = None
    missing_years: int = 0
    statistics: BasicStatistics = field(default_factory=BasicStatistics)
    recent_stability: float = 0.0
    has_unusual_points: bool = False
    unusual_points: Tuple[UnusualPoint, ...] = ()
    r2_linear: float = 0.0
    r2_exponential: float = 0.0
    recent_r2_linear: float = 0.0
    recent_r2_exponential: float = 0.0
    trend_slope: float = 0.0

    @property
    def data_points(self) -> int:
        return len(self.points)

    @property
    def coefficient_of_variation(self) -> float:
        return self.statistics.std_dev / (self.statistics.mean or 1)

    @property
    def r2_gain(self) -> float:
        return self.r2_exponential - self.r2_linear

    @property
    def recent_r2_gain(self) -> float:
        return self.recent_r2_exponential - self.recent_r2_linear

    @property
    def yearly_percentage_change(self) -> float:
        if self.statistics.mean <= 0:
            return 0.0
        return self.trend_slope / self.statistics.mean * 100


def build_profile(
    points: Sequence[EmissionPoint],
    base_year: Optional[int] = None,
    config: Optional[TrendEngineConfig] = None,
) -> SeriesProfile:
    """Characterise a clean, base-year-filtered series.

    Args:
        points: Clean series (ascending, no duplicates) since the base year.
        base_year: Base year used for the missing-year window.
        config: Thresholds; defaults apply when omitted.

    Returns:
        Frozen SeriesProfile.
    """
    cfg = config or TrendEngineConfig()
    series = tuple(points)
    if len(series) < 2:
        return SeriesProfile(points=series, base_year=base_year)

    has_unusual, unusual = detect_unusual_points(
        series, cfg.unusual_multiplier, cfg.min_points_for_unusual,
    )
    recent = series[-cfg.recent_window:]
    long_enough = len(series) >= cfg.recent_window
    return SeriesProfile(
        points=series,
        base_year=base_year,
        missing_years=count_missing_years(series, base_year),
        statistics=basic_statistics(series),
        recent_stability=recent_stability(series, cfg.recent_window),
        has_unusual_points=has_unusual,
        unusual_points=tuple(unusual),
        r2_linear=r2_linear(series),
        r2_exponential=r2_exponential(series),
        recent_r2_linear=r2_linear(recent) if long_enough else 0.0,
        recent_r2_exponential=r2_exponential(recent) if long_enough else 0.0,
        trend_slope=trend_slope(series),
    )


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

Predicate = Callable[[SeriesProfile, TrendEngineConfig], bool]
ParamsBuilder = Callable[[SeriesProfile, TrendEngineConfig], Dict[str, Any]]


@dataclass(frozen=True)
class SelectionRule:
    """One entry of the selection table.

    Attributes:
        name: Stable rule identifier (also the explanation key).
        predicate: Returns True when the rule applies.
        method: Method selected when the rule applies.
        template: Explanation text, formatted with the rule's params.
        params: Builds the values interpolated into ``template``.
    """

    name: str
    predicate: Predicate
    method: TrendMethod
    template: str
    params: ParamsBuilder = lambda profile, config: {}

    def explain(self, profile: SeriesProfile, config: TrendEngineConfig) -> Tuple[str, Dict[str, Any]]:
        params = self.params(profile, config)
        return self.template.format(**params), params


@dataclass(frozen=True)
class MethodSelection:
    """Outcome of walking the rule table."""

    rule: str
    method: TrendMethod
    explanation: str
    params: Dict[str, Any]


def _percent(value: float) -> float:
    return round(value * 100, 1)


def _r2_params(profile: SeriesProfile, config: TrendEngineConfig) -> Dict[str, Any]:
    return {
        "r2Exponential": round(profile.r2_exponential, 2),
        "r2Linear": round(profile.r2_linear, 2),
        "variation": _percent(profile.coefficient_of_variation),
    }


SELECTION_RULES: List[SelectionRule] = [
    SelectionRule(
        name="missing_years",
        predicate=lambda p, c: p.missing_years > c.missing_years_threshold,
        method=TrendMethod.LINEAR,
        template=(
            "Linear regression is used because {missingYears} years are missing "
            "or reported as zero. A straight line is robust to missing data."
        ),
        params=lambda p, c: {"missingYears": p.missing_years},
    ),
    SelectionRule(
        name="recent_stability",
        predicate=lambda p, c: (
            p.data_points >= c.recent_window
            and p.recent_stability < c.stability_threshold
        ),
        method=TrendMethod.WEIGHTED_LINEAR,
        template=(
            "Weighted linear regression is used because the last {recentYears} "
            "years are very stable (std dev {recentStability}% of mean). Recent "
            "stable data gets more weight than older data."
        ),
        params=lambda p, c: {
            "recentYears": c.recent_window,
            "recentStability": _percent(p.recent_stability),
        },
    ),
    SelectionRule(
        name="unusual_points",
        predicate=lambda p, c: p.has_unusual_points,
        method=TrendMethod.WEIGHTED_LINEAR,
        template=(
            "Weighted linear regression is used because {unusualCount} unusual "
            "year-over-year changes were detected (exceeding {multiplier:g}x the "
            "median change). Recent data points get more weight, which reduces "
            "the impact of older unusual points."
        ),
        params=lambda p, c: {
            "unusualCount": len(p.unusual_points),
            "multiplier": c.unusual_multiplier,
        },
    ),
    SelectionRule(
        name="weighted_exponential",
        predicate=lambda p, c: (
            p.r2_gain > c.r2_improvement_threshold
            and p.coefficient_of_variation > c.weighted_exponential_cv_threshold
        ),
        method=TrendMethod.WEIGHTED_EXPONENTIAL,
        template=(
            "Weighted exponential regression is used because the exponential fit "
            "(R²={r2Exponential:.2f}) is significantly better than linear "
            "(R²={r2Linear:.2f}) and the data varies strongly (std dev "
            "{variation}% of mean). Recent data points get more weight."
        ),
        params=_r2_params,
    ),
    SelectionRule(
        name="exponential",
        predicate=lambda p, c: p.r2_gain > c.r2_improvement_threshold,
        method=TrendMethod.EXPONENTIAL,
        template=(
            "Exponential regression is used because the exponential fit "
            "(R²={r2Exponential:.2f}) is significantly better than linear "
            "(R²={r2Linear:.2f}). This suggests a non-linear trend."
        ),
        params=_r2_params,
    ),
    SelectionRule(
        name="high_variance",
        predicate=lambda p, c: p.coefficient_of_variation > c.high_variance_threshold,
        method=TrendMethod.WEIGHTED_LINEAR,
        template=(
            "Weighted linear regression is used because the data has high "
            "variance (std dev {variation}% of mean). Recent data points get "
            "more weight, which gives a more stable trend."
        ),
        params=lambda p, c: {"variation": _percent(p.coefficient_of_variation)},
    ),
    SelectionRule(
        name="recent_exponential",
        predicate=lambda p, c: (
            p.data_points >= c.recent_window
            and p.recent_r2_exponential > c.recent_exponential_r2
            and p.recent_r2_gain > c.recent_exponential_margin
        ),
        method=TrendMethod.RECENT_EXPONENTIAL,
        template=(
            "Recent exponential regression is used because the last {recentYears} "
            "years show a strong exponential pattern (R²={recentR2Exponential:.2f}) "
            "that is significantly better than linear (R²={recentR2Linear:.2f})."
        ),
        params=lambda p, c: {
            "recentYears": c.recent_window,
            "recentR2Exponential": round(p.recent_r2_exponential, 2),
            "recentR2Linear": round(p.recent_r2_linear, 2),
        },
    ),
]

DEFAULT_RULE = SelectionRule(
    name="default",
    predicate=lambda p, c: True,
    method=TrendMethod.LINEAR,
    template=(
        "Linear regression is used as the default because the data is complete "
        "and shows no strong non-linear or outlier behaviour "
        "({percentageChange:+.1f}% per year)."
    ),
    params=lambda p, c: {"percentageChange": round(p.yearly_percentage_change, 1)},
)


def _insufficient_data(profile: SeriesProfile) -> MethodSelection:
    params: Dict[str, Any] = {"dataPoints": profile.data_points}
    if profile.base_year is not None:
        params["baseYear"] = profile.base_year
        text = (
            "No trend can be calculated because there are only {dataPoints} "
            "data points since base year {baseYear}."
        )
    else:
        text = "No trend can be calculated because there are only {dataPoints} data points."
    method = TrendMethod.SIMPLE if profile.data_points == 1 else TrendMethod.NONE
    return MethodSelection(
        rule="insufficient_data",
        method=method,
        explanation=text.format(**params),
        params=params,
    )


def select_method(
    profile: SeriesProfile,
    config: Optional[TrendEngineConfig] = None,
    rules: Optional[Sequence[SelectionRule]] = None,
) -> MethodSelection:
    """Walk the rule table and return the first matching method.

    Args:
        profile: Characterised series.
        config: Thresholds; defaults apply when omitted.
        rules: Alternative rule table (defaults to ``SELECTION_RULES``).

    Returns:
        MethodSelection with the rule name, method, explanation and params.
    """
    cfg = config or TrendEngineConfig()
    if profile.data_points < 2:
        return _insufficient_data(profile)

    table = SELECTION_RULES if rules is None else rules
    chosen = next((r for r in table if r.predicate(profile, cfg)), DEFAULT_RULE)
    explanation, params = chosen.explain(profile, cfg)
    logger.debug(
        "Rule %s selected method %s for %d points",
        chosen.name, chosen.method.value, profile.data_points,
    )
    return MethodSelection(
        rule=chosen.name,
        method=chosen.method,
        explanation=explanation,
        params=params,
    )


# ---------------------------------------------------------------------------
# Coefficient fitting per method
# ---------------------------------------------------------------------------


def fit_method(
    method: TrendMethod,
    points: Sequence[EmissionPoint],
    config: Optional[TrendEngineConfig] = None,
) -> Optional[TrendCoefficients]:
    """Fit the model family of ``method`` to the series.

    Exponential methods fall back to a linear fit when no positive log fit
    is possible; ``simple`` and ``none`` have no coefficients.
    """
    cfg = config or TrendEngineConfig()
    if method in (TrendMethod.NONE, TrendMethod.SIMPLE) or len(points) < 2:
        return None

    coefficients: Optional[TrendCoefficients]
    if method == TrendMethod.LINEAR:
        coefficients = fit_linear(points)
    elif method == TrendMethod.WEIGHTED_LINEAR:
        coefficients = fit_weighted_linear(points, cfg.weight_decay, cfg.recent_window)
    elif method == TrendMethod.EXPONENTIAL:
        coefficients = fit_exponential(points)
    elif method == TrendMethod.WEIGHTED_EXPONENTIAL:
        coefficients = fit_weighted_exponential(points, cfg.weight_decay)
    elif method == TrendMethod.RECENT_EXPONENTIAL:
        coefficients = fit_recent_exponential(points, cfg.recent_window)
    else:
        raise ValueError(f"Unsupported trend method: {method}")

    if coefficients is None and method not in (TrendMethod.LINEAR, TrendMethod.WEIGHTED_LINEAR):
        logger.debug("No exponential fit possible for %s, using linear", method.value)
        coefficients = fit_linear(points)
    return coefficients


__all__ = [
    "SeriesProfile",
    "SelectionRule",
    "MethodSelection",
    "SELECTION_RULES",
    "DEFAULT_RULE",
    "build_profile",
    "select_method",
    "fit_method",
]
