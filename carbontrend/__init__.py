# -*- coding: utf-8 -*-
"""
CarbonTrend: Emissions Trend Engine
===================================

Trend analysis and Paris-alignment projections for the yearly reported
emissions of companies and municipalities. It supports:

- Cleaning of upstream reporting periods (sorting, de-duplication,
  base-year filtering)
- Series characterisation (statistics, missing years, recent stability,
  R² of linear and exponential fits, trend direction)
- Unusual year-over-year transition detection
- Ordered rule table selecting linear, weighted-linear, exponential,
  weighted-exponential or recent-exponential regression
- Projection to 2050 with the Carbon-Law (11.7%/yr) reference path
- Carbon-budget evaluation over 2025-2050
- SHA-256 provenance chain tracking
- Prometheus metrics for observability
- Thread-safe configuration with CT_TREND_ env prefix

Key Components:
    - config: TrendEngineConfig with CT_TREND_ env prefix
    - analysis: analyze_trend, process_entity, summarize_analyses
    - projection: generate_projection
    - carbon_budget: evaluate_paris_alignment and legacy budget helpers
    - provenance: SHA-256 chain-hashed audit trails
    - metrics: Prometheus metrics
    - service: TrendEngineService facade
    - cli: ``carbontrend`` command line

Example:
    >>> from carbontrend import analyze_trend
    >>> result = analyze_trend([(2018, 100), (2019, 90), (2020, 80), (2021, 70), (2022, 60)])
    >>> result.method.value, result.trend_direction.value
    ('linear', 'decreasing')
"""

from carbontrend._version import __version__

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
from carbontrend.config import (
    TrendEngineConfig,
    get_config,
    set_config,
    reset_config,
)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------
from carbontrend.exceptions import (
    CarbonTrendException,
    ConfigurationError,
    InvalidInputError,
)

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
from carbontrend.models import (
    AnalysisSummary,
    ApproximatedPoint,
    BasicStatistics,
    BudgetStatus,
    EmissionPoint,
    EntityInput,
    ExponentialCoefficients,
    LinearCoefficients,
    ParisAlignment,
    ReportingPeriod,
    TrendAnalysisResult,
    TrendDirection,
    TrendMethod,
    UnusualPoint,
)

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
from carbontrend.analysis import analyze_trend, process_entity, summarize_analyses
from carbontrend.carbon_budget import (
    carbon_budget_percent,
    carbon_budget_tonnes,
    evaluate_paris_alignment,
)
from carbontrend.cleaning import normalize_points, points_from_periods
from carbontrend.projection import generate_projection

# ---------------------------------------------------------------------------
# Provenance and service facade
# ---------------------------------------------------------------------------
from carbontrend.provenance import ProvenanceTracker
from carbontrend.service import EntityReport, TrendEngineService, TrendEngineStatistics

__all__ = [
    # Version
    "__version__",
    # Configuration
    "TrendEngineConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Exceptions
    "CarbonTrendException",
    "ConfigurationError",
    "InvalidInputError",
    # Models
    "AnalysisSummary",
    "ApproximatedPoint",
    "BasicStatistics",
    "BudgetStatus",
    "EmissionPoint",
    "EntityInput",
    "ExponentialCoefficients",
    "LinearCoefficients",
    "ParisAlignment",
    "ReportingPeriod",
    "TrendAnalysisResult",
    "TrendDirection",
    "TrendMethod",
    "UnusualPoint",
    # Engine
    "analyze_trend",
    "process_entity",
    "summarize_analyses",
    "generate_projection",
    "evaluate_paris_alignment",
    "carbon_budget_percent",
    "carbon_budget_tonnes",
    "normalize_points",
    "points_from_periods",
    # Provenance and service
    "ProvenanceTracker",
    "EntityReport",
    "TrendEngineService",
    "TrendEngineStatistics",
]
