# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

from typing import Iterable, List, Sequence, Tuple

import pytest

from carbontrend.config import TrendEngineConfig, reset_config
from carbontrend.models import EmissionPoint


def make_points(pairs: Iterable[Tuple[int, float]]) -> List[EmissionPoint]:
    """Build EmissionPoints from (year, value) pairs."""
    return [EmissionPoint(year=year, value=float(value)) for year, value in pairs]


def series(start_year: int, values: Sequence[float]) -> List[EmissionPoint]:
    """Consecutive yearly points starting at ``start_year``."""
    return make_points(zip(range(start_year, start_year + len(values)), values))


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Every test starts from default configuration without CT_TREND_ overrides."""
    import os

    for key in list(os.environ):
        if key.startswith("CT_TREND_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    """Default engine configuration."""
    return TrendEngineConfig()


@pytest.fixture
def declining_series():
    """Steady 10 t/yr decline, 2018-2022."""
    return series(2018, [100, 90, 80, 70, 60])


@pytest.fixture
def jump_series():
    """One year-over-year jump from 50 to 500 and back to 55."""
    return series(2015, [50, 51, 52, 50, 500, 55, 54, 53])


@pytest.fixture
def growth_series():
    """60% yearly exponential growth, 2017-2022."""
    return series(2017, [100 * 1.6 ** k for k in range(6)])


@pytest.fixture
def entity_payload():
    """Company in the upstream API shape."""
    return {
        "wikidataId": "Q42",
        "name": "Example AB",
        "baseYear": {"year": 2019},
        "reportingPeriods": [
            {"startDate": "2022-01-01", "endDate": "2022-12-31",
             "emissions": {"calculatedTotalEmissions": 700}},
            {"startDate": "2021-01-01", "endDate": "2021-12-31",
             "emissions": {"calculatedTotalEmissions": 800}},
            {"startDate": "2020-01-01", "endDate": "2020-12-31",
             "emissions": {"calculatedTotalEmissions": 900}},
            {"startDate": "2019-01-01", "endDate": "2019-12-31",
             "emissions": {"calculatedTotalEmissions": 1000}},
            {"startDate": "2018-01-01", "endDate": "2018-12-31",
             "emissions": {"calculatedTotalEmissions": 5000}},
            {"startDate": "2017-01-01", "endDate": "2017-12-31",
             "emissions": None},
        ],
    }
