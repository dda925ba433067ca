# -*- coding: utf-8 -*-
"""
Trend Engine Service - facade over analysis, projection and Paris evaluation.

``TrendEngineService`` is the one object callers outside the pure core talk
to. It reads the wall clock once per request to fix the current year, runs
the pure functions, and records provenance, Prometheus metrics and running
statistics for every operation.

Usage:
    >>> from carbontrend.service import TrendEngineService
    >>> service = TrendEngineService(current_year=2024)
    >>> report = service.report_entity({
    ...     "wikidataId": "Q1",
    ...     "reportingPeriods": [
    ...         {"endDate": "2021-12-31", "emissions": {"calculatedTotalEmissions": 120}},
    ...         {"endDate": "2022-12-31", "emissions": {"calculatedTotalEmissions": 110}},
    ...         {"endDate": "2023-12-31", "emissions": {"calculatedTotalEmissions": 100}},
    ...     ],
    ... })
    >>> report.analysis.method.value
    'linear'
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field

from carbontrend._version import __version__
from carbontrend.analysis import analyze_trend, process_entity, summarize_analyses
from carbontrend.carbon_budget import evaluate_paris_alignment
from carbontrend.cleaning import PointLike, normalize_points, points_from_periods
from carbontrend.config import TrendEngineConfig, get_config
from carbontrend.metrics import (
    record_analysis,
    record_paris_evaluation,
    record_processing_duration,
    record_processing_error,
    record_projection,
)
from carbontrend.models import (
    AnalysisSummary,
    ApproximatedPoint,
    EntityInput,
    ParisAlignment,
    TrendAnalysisResult,
)
from carbontrend.projection import generate_projection
from carbontrend.provenance import ProvenanceTracker

logger = logging.getLogger(__name__)

EntityLike = Union[EntityInput, Mapping[str, Any]]


# ===================================================================
# Facade response models
# ===================================================================


class EntityReport(BaseModel):
    """Analysis, projection and Paris evaluation of one entity.

    Attributes:
        entity_id: Upstream entity identifier.
        entity_name: Display name.
        current_year: Year treated as "now" for the projection.
        analysis: Trend analysis result.
        projection: Projected years, None when no trend is available.
        paris: Carbon-budget evaluation.
        provenance_hash: Chain hash of the recorded report.
    """

    entity_id: Optional[str] = None
    entity_name: Optional[str] = None
    current_year: int
    analysis: TrendAnalysisResult
    projection: Optional[List[ApproximatedPoint]] = None
    paris: ParisAlignment = Field(default_factory=ParisAlignment)
    provenance_hash: str = ""


class TrendEngineStatistics(BaseModel):
    """Running totals of the service."""

    total_analyses: int = Field(default=0)
    total_projections: int = Field(default=0)
    total_paris_evaluations: int = Field(default=0)
    total_batches: int = Field(default=0)
    total_unusual_points: int = Field(default=0)
    total_errors: int = Field(default=0)


# ===================================================================
# Service facade
# ===================================================================


class TrendEngineService:
    """Unified entry point for trend analysis with audit trail and metrics.

    Attributes:
        config: TrendEngineConfig in use.
        provenance: ProvenanceTracker for SHA-256 audit trails.

    Example:
        >>> service = TrendEngineService(current_year=2024)
        >>> result = service.analyze([(2020, 100), (2021, 90), (2022, 80)])
        >>> result.trend_direction.value
        'decreasing'
    """

    def __init__(
        self,
        config: Optional[TrendEngineConfig] = None,
        current_year: Optional[int] = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Optional configuration. Uses global config if None.
            current_year: Fixed "now" year; the wall clock is read per
                request when None.
        """
        self.config = config or get_config()
        self.provenance = ProvenanceTracker()
        self._current_year = current_year
        self._stats = TrendEngineStatistics()
        self._lock = threading.Lock()
        logger.info("TrendEngineService created (version %s)", __version__)

    def current_year(self) -> int:
        """Year treated as "now" for the next request."""
        if self._current_year is not None:
            return self._current_year
        return date.today().year

    def _bump(self, **deltas: int) -> None:
        with self._lock:
            for name, delta in deltas.items():
                setattr(self._stats, name, getattr(self._stats, name) + delta)

    # ------------------------------------------------------------------
    # Single-series operations
    # ------------------------------------------------------------------

    def analyze(
        self,
        points: Iterable[PointLike],
        base_year: Optional[int] = None,
        entity_id: str = "series",
    ) -> TrendAnalysisResult:
        """Analyse a series and record provenance and metrics.

        Args:
            points: Emission points in any order.
            base_year: Optional base year.
            entity_id: Identifier used for the provenance chain.

        Returns:
            TrendAnalysisResult.
        """
        start_time = time.time()
        result = analyze_trend(points, base_year, self.config)
        self._record_analysis(result, entity_id)
        record_processing_duration("analyze", time.time() - start_time)
        return result

    def analyze_entity(self, entity: EntityLike) -> TrendAnalysisResult:
        """Analyse an entity in the upstream API shape.

        Raises:
            pydantic.ValidationError: If the entity does not match the
                upstream shape.
        """
        start_time = time.time()
        result = process_entity(entity, self.config)
        self._record_analysis(result, result.entity_id or result.entity_name or "entity")
        record_processing_duration("analyze", time.time() - start_time)
        return result

    def project(
        self,
        points: Iterable[PointLike],
        analysis: Optional[TrendAnalysisResult] = None,
        base_year: Optional[int] = None,
        target_year: Optional[int] = None,
        current_year: Optional[int] = None,
    ) -> Optional[List[ApproximatedPoint]]:
        """Project a series, reusing ``analysis`` when given.

        Returns:
            Projected years, or None when the series has no trend.
        """
        start_time = time.time()
        year = current_year if current_year is not None else self.current_year()
        if analysis is not None and not analysis.has_projection:
            projection = None
        elif analysis is not None:
            projection = generate_projection(
                points,
                coefficients=analysis.coefficients,
                target_year=target_year,
                base_year=analysis.base_year,
                clean_data=analysis.clean_data,
                current_year=year,
                config=self.config,
            )
        else:
            projection = generate_projection(
                points,
                target_year=target_year,
                base_year=base_year,
                current_year=year,
                config=self.config,
            )

        record_projection("generated" if projection is not None else "unavailable")
        record_processing_duration("project", time.time() - start_time)
        self._bump(total_projections=1)
        return projection

    def evaluate_paris(
        self,
        points: Iterable[PointLike],
        analysis: Optional[TrendAnalysisResult],
    ) -> ParisAlignment:
        """Evaluate the carbon budget for an analysed series."""
        start_time = time.time()
        result = evaluate_paris_alignment(points, analysis, config=self.config)
        record_paris_evaluation(result.status.value)
        record_processing_duration("paris", time.time() - start_time)
        self._bump(total_paris_evaluations=1)
        return result

    def report_entity(self, entity: EntityLike) -> EntityReport:
        """Run analysis, projection and Paris evaluation for one entity.

        Raises:
            pydantic.ValidationError: If the entity does not match the
                upstream shape.
        """
        if not isinstance(entity, EntityInput):
            entity = EntityInput.model_validate(entity)
        year = self.current_year()
        points = points_from_periods(entity.reporting_periods)

        analysis = self.analyze_entity(entity)
        projection = self.project(points, analysis, current_year=year)
        paris = self.evaluate_paris(points, analysis)

        report = EntityReport(
            entity_id=entity.entity_id,
            entity_name=entity.name,
            current_year=year,
            analysis=analysis,
            projection=projection,
            paris=paris,
        )
        report.provenance_hash = self.provenance.record(
            entity_type="entity",
            entity_id=entity.entity_id or entity.name or "entity",
            action="report",
            data_hash=self.provenance.build_hash(report.model_dump(mode="json")),
        )
        return report

    def report_series(
        self,
        points: Iterable[PointLike],
        base_year: Optional[int] = None,
        entity_id: str = "series",
    ) -> EntityReport:
        """Same as ``report_entity`` for a bare list of points."""
        series = normalize_points(points)
        year = self.current_year()
        analysis = self.analyze(series, base_year, entity_id)
        report = EntityReport(
            entity_id=entity_id,
            current_year=year,
            analysis=analysis,
            projection=self.project(series, analysis, current_year=year),
            paris=self.evaluate_paris(series, analysis),
        )
        report.provenance_hash = self.provenance.record(
            entity_type="series",
            entity_id=entity_id,
            action="report",
            data_hash=self.provenance.build_hash(report.model_dump(mode="json")),
        )
        return report

    # ------------------------------------------------------------------
    # Batch operations
    # ------------------------------------------------------------------

    def analyze_batch(self, entities: Sequence[EntityLike]) -> List[EntityReport]:
        """Report on many entities; invalid entities are skipped and counted.

        Args:
            entities: EntityInput models or raw upstream dicts.

        Returns:
            One EntityReport per valid entity, in input order.
        """
        start_time = time.time()
        reports: List[EntityReport] = []
        for index, entity in enumerate(entities):
            try:
                reports.append(self.report_entity(entity))
            except ValueError as exc:
                logger.warning("Batch skipped entity #%d: %s", index, exc)
                record_processing_error(type(exc).__name__)
                self._bump(total_errors=1)
        self._bump(total_batches=1)
        record_processing_duration("batch", time.time() - start_time)
        logger.info(
            "Batch analysed %d/%d entities in %.3fs",
            len(reports), len(entities), time.time() - start_time,
        )
        return reports

    def summarize(
        self,
        items: Sequence[Union[EntityReport, TrendAnalysisResult]],
    ) -> AnalysisSummary:
        """Method usage and data-quality summary over reports or analyses."""
        analyses = [
            item.analysis if isinstance(item, EntityReport) else item
            for item in items
        ]
        return summarize_analyses(analyses)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_statistics(self) -> TrendEngineStatistics:
        """Snapshot of the running totals."""
        with self._lock:
            return self._stats.model_copy()

    def health_check(self) -> Dict[str, Any]:
        """Service health summary."""
        stats = self.get_statistics()
        return {
            "status": "healthy",
            "service": "carbontrend",
            "version": __version__,
            "analyses": stats.total_analyses,
            "errors": stats.total_errors,
            "provenance_entries": self.provenance.entry_count,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _record_analysis(self, result: TrendAnalysisResult, entity_id: str) -> None:
        self.provenance.record(
            entity_type="analysis",
            entity_id=entity_id,
            action="analyze",
            data_hash=self.provenance.build_hash(result.model_dump(mode="json")),
        )
        unusual = len(result.unusual_points_details)
        record_analysis(result.method.value, unusual)
        self._bump(total_analyses=1, total_unusual_points=unusual)
        logger.info(
            "Analysed %s: method=%s points=%d missing=%d direction=%s",
            entity_id, result.method.value, result.data_points,
            result.missing_years, result.trend_direction.value,
        )


__all__ = [
    "EntityReport",
    "TrendEngineStatistics",
    "TrendEngineService",
]
