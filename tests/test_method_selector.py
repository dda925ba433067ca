# -*- coding: utf-8 -*-
"""Tests for the ordered method-selection rule table.

Each rule is exercised on a hand-built SeriesProfile so the rule order can
be checked independently of the statistics that feed it.
"""

import pytest

from carbontrend.method_selector import (
    DEFAULT_RULE,
    SELECTION_RULES,
    SeriesProfile,
    build_profile,
    fit_method,
    select_method,
)
from carbontrend.models import (
    BasicStatistics,
    ExponentialCoefficients,
    LinearCoefficients,
    TrendMethod,
)

from conftest import series


def profile(n_points=6, mean=100.0, std_dev=5.0, recent_stability=0.5, **kwargs):
    """Profile that falls through to the default rule unless overridden."""
    return SeriesProfile(
        points=tuple(series(2015, [mean] * n_points)),
        statistics=BasicStatistics(mean=mean, std_dev=std_dev),
        recent_stability=recent_stability,
        **kwargs,
    )


# ==============================================================================
# Rule table
# ==============================================================================

class TestRuleOrder:
    """First matching rule wins."""

    def test_rule_names_in_order(self):
        assert [r.name for r in SELECTION_RULES] == [
            "missing_years",
            "recent_stability",
            "unusual_points",
            "weighted_exponential",
            "exponential",
            "high_variance",
            "recent_exponential",
        ]

    def test_default_is_linear(self):
        selection = select_method(profile())
        assert selection.rule == "default"
        assert selection.method == TrendMethod.LINEAR
        assert DEFAULT_RULE.method == TrendMethod.LINEAR

    def test_missing_years_wins_over_everything(self):
        selection = select_method(profile(
            missing_years=2, recent_stability=0.01, has_unusual_points=True,
        ))
        assert selection.method == TrendMethod.LINEAR
        assert selection.rule == "missing_years"
        assert selection.params == {"missingYears": 2}
        assert "2 years are missing" in selection.explanation

    def test_empty_rule_table_uses_default(self):
        assert select_method(profile(missing_years=3), rules=[]).rule == "default"


class TestInsufficientData:
    """Fewer than two points never reach the rule table."""

    def test_no_points_is_none(self):
        selection = select_method(SeriesProfile(points=()))
        assert selection.method == TrendMethod.NONE
        assert selection.params == {"dataPoints": 0}

    def test_one_point_is_simple(self):
        selection = select_method(SeriesProfile(points=tuple(series(2020, [5]))))
        assert selection.method == TrendMethod.SIMPLE

    def test_explanation_cites_base_year(self):
        selection = select_method(SeriesProfile(points=tuple(series(2022, [5])), base_year=2022))
        assert selection.params == {"dataPoints": 1, "baseYear": 2022}
        assert "since base year 2022" in selection.explanation


class TestIndividualRules:
    """Each rule fires on its own condition."""

    def test_recent_stability(self):
        selection = select_method(profile(recent_stability=0.05))
        assert selection.method == TrendMethod.WEIGHTED_LINEAR
        assert selection.rule == "recent_stability"
        assert selection.params["recentStability"] == 5.0

    def test_recent_stability_needs_full_window(self):
        selection = select_method(profile(n_points=3, recent_stability=0.05))
        assert selection.rule == "default"

    def test_unusual_points(self):
        selection = select_method(profile(has_unusual_points=True))
        assert selection.method == TrendMethod.WEIGHTED_LINEAR
        assert selection.rule == "unusual_points"
        assert "4x the median change" in selection.explanation

    def test_weighted_exponential_when_variable(self):
        selection = select_method(profile(std_dev=20.0, r2_linear=0.80, r2_exponential=0.90))
        assert selection.method == TrendMethod.WEIGHTED_EXPONENTIAL
        assert "R²=0.90" in selection.explanation

    def test_exponential_when_steady(self):
        selection = select_method(profile(std_dev=10.0, r2_linear=0.80, r2_exponential=0.90))
        assert selection.method == TrendMethod.EXPONENTIAL

    def test_small_r2_gain_is_not_enough(self):
        selection = select_method(profile(std_dev=10.0, r2_linear=0.80, r2_exponential=0.84))
        assert selection.rule == "default"

    def test_high_variance(self):
        selection = select_method(profile(std_dev=25.0))
        assert selection.method == TrendMethod.WEIGHTED_LINEAR
        assert selection.rule == "high_variance"
        assert selection.params == {"variation": 25.0}

    def test_recent_exponential(self):
        selection = select_method(profile(recent_r2_linear=0.80, recent_r2_exponential=0.95))
        assert selection.method == TrendMethod.RECENT_EXPONENTIAL

    def test_recent_exponential_needs_strong_fit(self):
        selection = select_method(profile(recent_r2_linear=0.60, recent_r2_exponential=0.75))
        assert selection.rule == "default"


# ==============================================================================
# Profile and fitting
# ==============================================================================

class TestBuildProfile:
    """Characterisation feeding the rules."""

    def test_declining_series(self, declining_series):
        p = build_profile(declining_series, base_year=2018)
        assert p.data_points == 5
        assert p.missing_years == 0
        assert p.has_unusual_points is False
        assert p.r2_linear == pytest.approx(1.0)
        assert p.trend_slope == pytest.approx(-10.0)
        assert p.yearly_percentage_change == pytest.approx(-12.5)

    def test_recent_r2_skipped_for_short_series(self):
        p = build_profile(series(2020, [1, 2, 4]))
        assert p.recent_r2_exponential == 0.0

    def test_sparse_series_has_empty_profile(self):
        p = build_profile(series(2020, [7]))
        assert p.data_points == 1
        assert p.statistics.mean == 0.0


class TestFitMethod:
    """Coefficients for the selected method."""

    def test_no_coefficients_without_trend(self, declining_series):
        assert fit_method(TrendMethod.NONE, declining_series) is None
        assert fit_method(TrendMethod.SIMPLE, declining_series) is None

    def test_linear(self, declining_series):
        fit = fit_method(TrendMethod.LINEAR, declining_series)
        assert isinstance(fit, LinearCoefficients)
        assert fit.slope == pytest.approx(-10.0)

    def test_recent_exponential(self, growth_series):
        fit = fit_method(TrendMethod.RECENT_EXPONENTIAL, growth_series)
        assert isinstance(fit, ExponentialCoefficients)

    def test_exponential_falls_back_to_linear(self):
        fit = fit_method(TrendMethod.EXPONENTIAL, series(2018, [0, -2, 4]))
        assert isinstance(fit, LinearCoefficients)
