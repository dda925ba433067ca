# -*- coding: utf-8 -*-
"""
Prometheus Metrics - CarbonTrend engine

Prometheus metrics for monitoring trend analyses, projections and Paris
evaluations run through the service facade.

Metrics:
    1. ct_trend_analyses_total (Counter, labels: method)
    2. ct_trend_projections_total (Counter, labels: outcome)
    3. ct_trend_paris_evaluations_total (Counter, labels: status)
    4. ct_trend_unusual_points_total (Counter)
    5. ct_trend_processing_duration_seconds (Histogram, labels: operation)
    6. ct_trend_processing_errors_total (Counter, labels: error_type)
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# 1. Analyses by selected method
ct_analyses_total = Counter(
    "ct_trend_analyses_total",
    "Total trend analyses completed",
    labelnames=["method"],
)

# 2. Projections by outcome (generated / unavailable)
ct_projections_total = Counter(
    "ct_trend_projections_total",
    "Total projections requested",
    labelnames=["outcome"],
)

# 3. Paris evaluations by budget status
ct_paris_evaluations_total = Counter(
    "ct_trend_paris_evaluations_total",
    "Total Paris-alignment evaluations",
    labelnames=["status"],
)

# 4. Unusual year-over-year transitions detected
ct_unusual_points_total = Counter(
    "ct_trend_unusual_points_total",
    "Total unusual year-over-year transitions detected",
)

# 5. Processing duration by operation
ct_processing_duration_seconds = Histogram(
    "ct_trend_processing_duration_seconds",
    "Trend engine processing duration in seconds",
    labelnames=["operation"],
    buckets=(
        0.0005, 0.001, 0.0025, 0.005, 0.01,
        0.025, 0.05, 0.1, 0.25, 0.5, 1.0,
    ),
)

# 6. Processing errors by error type
ct_processing_errors_total = Counter(
    "ct_trend_processing_errors_total",
    "Total processing errors encountered",
    labelnames=["error_type"],
)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def record_analysis(method: str, unusual_points: int = 0) -> None:
    """Record a completed analysis.

    Args:
        method: Selected trend method.
        unusual_points: Number of unusual transitions found.
    """
    ct_analyses_total.labels(method=method).inc()
    if unusual_points:
        ct_unusual_points_total.inc(unusual_points)


def record_projection(outcome: str) -> None:
    """Record a projection request.

    Args:
        outcome: ``generated`` or ``unavailable``.
    """
    ct_projections_total.labels(outcome=outcome).inc()


def record_paris_evaluation(status: str) -> None:
    """Record a Paris-alignment evaluation.

    Args:
        status: Budget status value.
    """
    ct_paris_evaluations_total.labels(status=status).inc()


def record_processing_duration(operation: str, duration: float) -> None:
    """Record processing duration for an operation.

    Args:
        operation: Operation name (analyze, project, paris, batch).
        duration: Duration in seconds.
    """
    ct_processing_duration_seconds.labels(operation=operation).observe(duration)


def record_processing_error(error_type: str) -> None:
    """Record a processing error.

    Args:
        error_type: Exception class name or error category.
    """
    ct_processing_errors_total.labels(error_type=error_type).inc()


__all__ = [
    "ct_analyses_total",
    "ct_projections_total",
    "ct_paris_evaluations_total",
    "ct_unusual_points_total",
    "ct_processing_duration_seconds",
    "ct_processing_errors_total",
    "record_analysis",
    "record_projection",
    "record_paris_evaluation",
    "record_processing_duration",
    "record_processing_error",
]
