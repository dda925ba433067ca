# -*- coding: utf-8 -*-
"""Tests for projection generation."""

import pytest

from carbontrend.analysis import analyze_trend
from carbontrend.config import TrendEngineConfig
from carbontrend.models import ExponentialCoefficients, LinearCoefficients
from carbontrend.projection import MAX_PROJECTION_YEAR, generate_projection

from conftest import make_points, series


def by_year(projection):
    return {row.year: row for row in projection}


class TestGenerateProjection:
    """Approximated, trend and Carbon-Law columns."""

    def test_rows_run_from_last_report_to_2050(self, declining_series):
        projection = generate_projection(declining_series, current_year=2024)
        assert [row.year for row in projection] == list(range(2022, 2051))

    def test_gap_years_are_approximated(self, declining_series):
        rows = by_year(generate_projection(declining_series, current_year=2024))

        assert rows[2022].approximated == pytest.approx(60.0)
        assert rows[2022].trend is None
        assert rows[2023].approximated == pytest.approx(50.0)
        assert rows[2024].approximated == pytest.approx(40.0)
        assert rows[2024].trend == pytest.approx(40.0)
        assert rows[2025].approximated is None
        assert rows[2025].trend == pytest.approx(30.0)

    def test_trend_is_clamped_at_zero(self, declining_series):
        rows = by_year(generate_projection(declining_series, current_year=2024))
        assert rows[2028].trend == 0.0
        assert rows[2050].trend == 0.0

    def test_carbon_law_starts_at_current_year(self, declining_series):
        rows = by_year(generate_projection(declining_series, current_year=2024))
        assert rows[2023].carbon_law is None
        assert rows[2024].carbon_law == pytest.approx(40.0)
        assert rows[2025].carbon_law == pytest.approx(40.0 * 0.883)
        assert rows[2026].carbon_law == pytest.approx(40.0 * 0.883 ** 2)

    def test_carbon_law_ratio_is_exact(self, declining_series):
        projection = generate_projection(declining_series, current_year=2024)
        path = [row.carbon_law for row in projection if row.carbon_law is not None]
        assert len(path) == 27
        for previous, current in zip(path, path[1:]):
            assert current == previous * (1 - 0.117)

    def test_carbon_law_uses_reported_current_year(self, declining_series):
        rows = by_year(generate_projection(declining_series, current_year=2022))
        assert rows[2022].approximated == pytest.approx(60.0)
        assert rows[2022].trend == pytest.approx(60.0)
        assert rows[2022].carbon_law == pytest.approx(60.0)

    def test_no_carbon_law_from_zero_baseline(self, declining_series):
        rows = by_year(generate_projection(declining_series, current_year=2030))
        assert rows[2030].approximated == 0.0
        assert all(row.carbon_law is None for row in rows.values())

    def test_target_year_is_capped(self, declining_series):
        projection = generate_projection(declining_series, target_year=2070, current_year=2024)
        assert projection[-1].year == MAX_PROJECTION_YEAR

    def test_explicit_target_year(self, declining_series):
        projection = generate_projection(declining_series, target_year=2030, current_year=2024)
        assert projection[-1].year == 2030
        assert len(projection) == 9

    def test_configured_end_year(self, declining_series):
        config = TrendEngineConfig(projection_end_year=2035)
        projection = generate_projection(declining_series, current_year=2024, config=config)
        assert projection[-1].year == 2035

    def test_explicit_coefficients_are_anchored(self, declining_series):
        model = LinearCoefficients(slope=5.0, intercept=0.0)
        rows = by_year(generate_projection(declining_series, model, current_year=2024))
        assert rows[2023].approximated == pytest.approx(65.0)

    def test_reuses_clean_data(self, declining_series):
        analysis = analyze_trend(declining_series)
        projection = generate_projection(
            [], analysis.coefficients, clean_data=analysis.clean_data, current_year=2024,
        )
        assert projection[0].year == 2022

    def test_base_year_limits_fitted_points(self):
        points = make_points([(2010, 5000), (2019, 100), (2020, 90), (2021, 80)])
        rows = by_year(generate_projection(points, base_year=2019, current_year=2023))
        assert rows[2022].approximated == pytest.approx(70.0)

    def test_no_projection_without_trend(self):
        assert generate_projection([(2022, 100)], current_year=2024) is None
        assert generate_projection([], current_year=2024) is None

    def test_diverging_model_gives_no_projection(self, declining_series):
        model = ExponentialCoefficients(a=1.0, b=1000.0, anchor_year=2022)
        assert generate_projection(declining_series, model, current_year=2024) is None

    def test_exponential_projection(self, growth_series):
        rows = by_year(generate_projection(growth_series, current_year=2023))
        last = growth_series[-1].value
        assert rows[2022].approximated == pytest.approx(last)
        assert rows[2023].trend == pytest.approx(last * 1.6, rel=1e-6)
