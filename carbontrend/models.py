# -*- coding: utf-8 -*-
"""
CarbonTrend Data Models

Pydantic v2 data models for the trend engine: the cleaned series
(EmissionPoint), the tagged trend coefficients, the analysis, projection
and Paris-alignment results, and the upstream reporting-period shape the
engine accepts from the emissions data API.

Enumerations (3):
    - TrendMethod, TrendDirection, BudgetStatus

Series and model types (4):
    - EmissionPoint, LinearCoefficients, ExponentialCoefficients,
      TrendCoefficients (discriminated on ``kind``)

Result models (6):
    - BasicStatistics, UnusualPoint, TrendAnalysisResult,
      ApproximatedPoint, ParisAlignment, AnalysisSummary

Upstream input models (4):
    - PeriodEmissions, ReportingPeriod, BaseYearInfo, EntityInput
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Enumerations
# =============================================================================


class TrendMethod(str, Enum):
    """Regression family chosen to project an entity's emissions."""

    SIMPLE = "simple"
    LINEAR = "linear"
    WEIGHTED_LINEAR = "weightedLinear"
    EXPONENTIAL = "exponential"
    WEIGHTED_EXPONENTIAL = "weightedExponential"
    RECENT_EXPONENTIAL = "recentExponential"
    NONE = "none"


class TrendDirection(str, Enum):
    """Direction of the fitted emissions trend."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class BudgetStatus(str, Enum):
    """Outcome of the 2025-2050 carbon budget comparison.

    ``UNKNOWN`` covers every case where no honest answer exists (no trend
    model, or a 2025 baseline at or below zero). It is never folded into
    under or over budget.
    """

    UNDER_BUDGET = "under_budget"
    OVER_BUDGET = "over_budget"
    UNKNOWN = "unknown"


# =============================================================================
# Series and coefficients
# =============================================================================


class EmissionPoint(BaseModel):
    """One reported yearly emissions total in tCO2e."""

    year: int = Field(..., description="Reporting year")
    value: float = Field(..., description="Total emissions in tCO2e")

    model_config = {"frozen": True, "extra": "forbid"}


class LinearCoefficients(BaseModel):
    """Straight-line model ``value = slope * year + intercept``."""

    kind: Literal["linear"] = "linear"
    slope: float
    intercept: float

    model_config = {"frozen": True, "extra": "forbid"}

    def evaluate(self, year: float) -> float:
        return self.slope * year + self.intercept

    def anchored_at(self, year: int, value: float) -> LinearCoefficients:
        """Return the same slope passing through ``(year, value)``."""
        return LinearCoefficients(slope=self.slope, intercept=value - self.slope * year)


class ExponentialCoefficients(BaseModel):
    """Exponential model ``value = a * exp(b * (year - anchor_year))``."""

    kind: Literal["exponential"] = "exponential"
    a: float
    b: float
    anchor_year: int = 0

    model_config = {"frozen": True, "extra": "forbid"}

    def evaluate(self, year: float) -> float:
        return self.a * math.exp(self.b * (year - self.anchor_year))

    def anchored_at(self, year: int, value: float) -> ExponentialCoefficients:
        """Return the same growth rate passing through ``(year, value)``."""
        return ExponentialCoefficients(a=value, b=self.b, anchor_year=year)


TrendCoefficients = Annotated[
    Union[LinearCoefficients, ExponentialCoefficients],
    Field(discriminator="kind"),
]


# =============================================================================
# Results
# =============================================================================


class BasicStatistics(BaseModel):
    """Population statistics of the fitted (post-base-year) series."""

    mean: float = 0.0
    std_dev: float = 0.0
    variance: float = 0.0
    min: float = 0.0
    max: float = 0.0
    span: float = 0.0

    model_config = {"extra": "forbid"}


class UnusualPoint(BaseModel):
    """A year-over-year transition much larger than the typical change.

    Attributes:
        year: Year the unusual value was reported (same as ``to_year``).
        from_year: Year before the transition.
        to_year: Year after the transition.
        from_value: Emissions before the transition.
        to_value: Emissions after the transition.
        change: Absolute size of the change in tCO2e.
        threshold: Threshold the change exceeded.
        direction: ``increase`` or ``decrease``.
        reason: Human-readable summary.
    """

    year: int
    from_year: int
    to_year: int
    from_value: float
    to_value: float
    change: float
    threshold: float
    direction: Literal["increase", "decrease"]
    reason: str

    model_config = {"extra": "forbid"}


class TrendAnalysisResult(BaseModel):
    """Complete characterisation of one entity's emissions series.

    Recomputed from scratch on every call; nothing is cached between
    analyses.
    """

    entity_id: Optional[str] = Field(None, description="Upstream entity identifier")
    entity_name: Optional[str] = None
    method: TrendMethod = Field(..., description="Selected trend method")
    explanation: str = Field(..., description="Why the method was selected")
    explanation_params: Dict[str, Any] = Field(
        default_factory=dict,
        description="Values interpolated into the explanation",
    )
    coefficients: Optional[TrendCoefficients] = Field(
        None, description="Fitted model, absent when no fit was possible",
    )
    clean_data: List[EmissionPoint] = Field(
        default_factory=list,
        description="Sorted, de-duplicated points used for fitting",
    )
    base_year: Optional[int] = None
    data_points: int = Field(default=0, ge=0)
    missing_years: int = Field(default=0, ge=0)
    statistics: BasicStatistics = Field(default_factory=BasicStatistics)
    trend_direction: TrendDirection = TrendDirection.INSUFFICIENT_DATA
    trend_slope: float = 0.0
    yearly_percentage_change: float = 0.0
    r2_linear: float = 0.0
    r2_exponential: float = 0.0
    recent_stability: float = 0.0
    has_unusual_points: bool = False
    unusual_points_details: List[UnusualPoint] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @field_validator("clean_data")
    @classmethod
    def validate_clean_data(cls, v: List[EmissionPoint]) -> List[EmissionPoint]:
        """Clean data must be strictly ascending by year."""
        for previous, current in zip(v, v[1:]):
            if current.year <= previous.year:
                raise ValueError("clean_data must be strictly ascending by year")
        return v

    @property
    def has_projection(self) -> bool:
        return self.method != TrendMethod.NONE and self.coefficients is not None


class ApproximatedPoint(BaseModel):
    """One projected year.

    ``approximated`` covers the gap between the last report and the
    current year, ``trend`` covers the current year onwards, and
    ``carbon_law`` is the Paris-aligned reference path from the current year.
    """

    year: int
    approximated: Optional[float] = None
    carbon_law: Optional[float] = None
    trend: Optional[float] = None

    model_config = {"frozen": True, "extra": "forbid"}


class ParisAlignment(BaseModel):
    """Carbon-budget evaluation over the Paris window (2025-2050 by default).

    ``budget_percent`` and ``budget_tonnes`` are negative when under budget
    and positive when over. All three headline values are ``None`` when the
    status is ``UNKNOWN``.
    """

    meets_paris: Optional[bool] = None
    budget_percent: Optional[float] = None
    budget_tonnes: Optional[float] = None
    status: BudgetStatus = BudgetStatus.UNKNOWN
    reference_year: int = 2025
    horizon_year: int = 2050
    reference_emissions: Optional[float] = None
    cumulative_projected: Optional[float] = None
    cumulative_budget: Optional[float] = None

    model_config = {"extra": "forbid"}


class AnalysisSummary(BaseModel):
    """Aggregate view over many entity analyses."""

    entity_count: int = 0
    method_counts: Dict[str, int] = Field(default_factory=dict)
    avg_data_points: float = 0.0
    avg_missing_years: float = 0.0
    unusual_points_percentage: float = 0.0

    model_config = {"extra": "forbid"}


# =============================================================================
# Upstream input shape
# =============================================================================


class PeriodEmissions(BaseModel):
    """Emissions block of a reporting period.

    The total is kept as delivered; cleaning decides whether it is usable.
    """

    calculated_total_emissions: Optional[Any] = Field(
        None, alias="calculatedTotalEmissions",
    )

    model_config = {"extra": "ignore", "populate_by_name": True}


class ReportingPeriod(BaseModel):
    """Reporting period as delivered by the emissions data API."""

    end_date: Optional[Any] = Field(None, alias="endDate")
    start_date: Optional[Any] = Field(None, alias="startDate")
    emissions: Optional[PeriodEmissions] = None

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("emissions", mode="before")
    @classmethod
    def drop_malformed_emissions(cls, v: Any) -> Any:
        """An emissions block that is not an object carries no total."""
        if v is None or isinstance(v, (dict, PeriodEmissions)):
            return v
        return None


class BaseYearInfo(BaseModel):
    """Base year block of an entity."""

    year: Optional[int] = None

    model_config = {"extra": "ignore"}


class EntityInput(BaseModel):
    """A company or municipality with its reporting periods."""

    entity_id: Optional[str] = Field(None, alias="wikidataId")
    name: Optional[str] = None
    reporting_periods: List[ReportingPeriod] = Field(
        default_factory=list, alias="reportingPeriods",
    )
    base_year: Optional[BaseYearInfo] = Field(None, alias="baseYear")

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("reporting_periods", mode="before")
    @classmethod
    def drop_malformed_periods(cls, v: Any) -> Any:
        """A null list means no periods; non-object entries are dropped."""
        if v is None:
            return []
        if isinstance(v, list):
            return [p for p in v if isinstance(p, (dict, ReportingPeriod))]
        return v

    @property
    def base_year_value(self) -> Optional[int]:
        return self.base_year.year if self.base_year else None


__all__ = [
    "TrendMethod",
    "TrendDirection",
    "BudgetStatus",
    "EmissionPoint",
    "LinearCoefficients",
    "ExponentialCoefficients",
    "TrendCoefficients",
    "BasicStatistics",
    "UnusualPoint",
    "TrendAnalysisResult",
    "ApproximatedPoint",
    "ParisAlignment",
    "AnalysisSummary",
    "PeriodEmissions",
    "ReportingPeriod",
    "BaseYearInfo",
    "EntityInput",
]
