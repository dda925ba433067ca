# -*- coding: utf-8 -*-
"""Tests for the regression fits."""

import math

import pytest

from carbontrend.models import ExponentialCoefficients, LinearCoefficients
from carbontrend.regression import (
    decay_weights,
    fit_exponential,
    fit_linear,
    fit_recent_exponential,
    fit_weighted_exponential,
    fit_weighted_linear,
    trend_slope,
)

from conftest import make_points, series


# ==============================================================================
# Linear family
# ==============================================================================

class TestLinearFits:
    """OLS and recency-weighted lines."""

    def test_ols_recovers_line(self):
        points = make_points([(y, 2 * y - 3000) for y in range(2015, 2021)])
        fit = fit_linear(points)
        assert isinstance(fit, LinearCoefficients)
        assert fit.slope == pytest.approx(2.0)
        assert fit.intercept == pytest.approx(-3000.0)
        assert fit.evaluate(2030) == pytest.approx(1060.0)

    def test_trend_slope(self, declining_series):
        assert trend_slope(declining_series) == pytest.approx(-10.0)
        assert trend_slope(series(2020, [5])) == 0.0

    def test_needs_two_distinct_years(self):
        assert fit_linear(series(2020, [5])) is None
        assert fit_linear(make_points([(2020, 1), (2020, 2)])) is None

    def test_decay_weights(self):
        assert decay_weights(4, 0.7) == pytest.approx([0.343, 0.49, 0.7, 1.0])

    def test_weighted_linear_passes_through_last_point(self, jump_series):
        fit = fit_weighted_linear(jump_series)
        last = jump_series[-1]
        assert fit.evaluate(last.year) == pytest.approx(last.value)

    def test_weighted_linear_follows_recent_years(self):
        points = series(2015, [100, 100, 100, 100, 110, 120])
        assert fit_weighted_linear(points).slope > fit_linear(points).slope

    def test_weighted_linear_short_series_uses_ols_slope(self):
        points = series(2020, [10, 20, 40])
        fit = fit_weighted_linear(points)
        assert fit.slope == pytest.approx(15.0)
        assert fit.evaluate(2022) == pytest.approx(40.0)


# ==============================================================================
# Exponential family
# ==============================================================================

class TestExponentialFits:
    """Log-linear fits on strictly positive values."""

    def test_recovers_growth_rate(self, growth_series):
        fit = fit_exponential(growth_series)
        assert isinstance(fit, ExponentialCoefficients)
        assert fit.b == pytest.approx(math.log(1.6))
        assert fit.evaluate(2017) == pytest.approx(100.0)
        assert fit.evaluate(2019) == pytest.approx(256.0)

    def test_ignores_non_positive_values(self):
        points = series(2018, [100, 0, 25, -3, 6.25])
        fit = fit_exponential(points)
        assert fit.b == pytest.approx(math.log(0.5))

    def test_needs_two_positive_points(self):
        assert fit_exponential(series(2018, [0, -1, 5])) is None
        assert fit_weighted_exponential(series(2018, [0, 5])) is None

    def test_weighted_fit_of_exact_exponential(self, growth_series):
        fit = fit_weighted_exponential(growth_series)
        assert fit.b == pytest.approx(math.log(1.6))

    def test_recent_exponential_uses_last_window(self):
        points = series(2014, [7, 900, 3, 100, 200, 400, 800])
        fit = fit_recent_exponential(points, window=4)
        assert fit.b == pytest.approx(math.log(2))
        assert fit.anchor_year == 2017

    def test_anchored_at_moves_curve_through_point(self, growth_series):
        moved = fit_exponential(growth_series).anchored_at(2022, 50.0)
        assert moved.evaluate(2022) == pytest.approx(50.0)
        assert moved.evaluate(2023) == pytest.approx(80.0)
