# -*- coding: utf-8 -*-
"""
Series Cleaning - turns upstream reporting periods into a clean yearly series.

Normalises rather than rejects: periods without a total, with a non-finite
total or with an unparsable end date are dropped, the remainder is sorted
by year and de-duplicated (the last period reported for a year wins).

Example:
    >>> from carbontrend.cleaning import points_from_periods
    >>> points_from_periods([
    ...     {"endDate": "2021-12-31", "emissions": {"calculatedTotalEmissions": 90}},
    ...     {"endDate": "2020-12-31", "emissions": {"calculatedTotalEmissions": 100}},
    ... ])
    [EmissionPoint(year=2020, value=100.0), EmissionPoint(year=2021, value=90.0)]
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from carbontrend.models import EmissionPoint, ReportingPeriod

logger = logging.getLogger(__name__)

PointLike = Union[EmissionPoint, Mapping[str, Any], Tuple[int, float]]


def _parse_year(end_date: Any) -> Optional[int]:
    """Extract the calendar year from an ISO date string or date object."""
    if isinstance(end_date, (date, datetime)):
        return end_date.year
    if not isinstance(end_date, str) or not end_date.strip():
        return None
    text = end_date.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).year
    except ValueError:
        pass
    head = text[:4]
    if head.isdigit():
        return int(head)
    return None


def _finite(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    return f


def _coerce_point(item: PointLike) -> Optional[EmissionPoint]:
    if isinstance(item, EmissionPoint):
        return item
    if isinstance(item, Mapping):
        year = item.get("year")
        raw = item.get("value", item.get("total"))
    else:
        try:
            year, raw = item
        except (TypeError, ValueError):
            return None
    value = _finite(raw)
    if value is None or year is None or isinstance(year, bool):
        return None
    try:
        return EmissionPoint(year=int(year), value=value)
    except (TypeError, ValueError):
        return None


def normalize_points(points: Iterable[PointLike]) -> List[EmissionPoint]:
    """Sort by year and de-duplicate, dropping null or non-finite values.

    Accepts EmissionPoint instances, ``{"year", "value"}`` (or legacy
    ``{"year", "total"}``) mappings and ``(year, value)`` tuples.

    Args:
        points: Points in any order.

    Returns:
        Strictly ascending list of EmissionPoint; for duplicate years the
        last occurrence in input order is kept.
    """
    by_year: Dict[int, EmissionPoint] = {}
    dropped = 0
    for item in points or []:
        point = _coerce_point(item)
        if point is None:
            dropped += 1
            continue
        by_year[point.year] = point
    if dropped:
        logger.debug("Dropped %d points without a usable year/value", dropped)
    return [by_year[year] for year in sorted(by_year)]


def points_from_periods(
    periods: Iterable[Union[ReportingPeriod, Mapping[str, Any]]],
) -> List[EmissionPoint]:
    """Flatten reporting periods into a clean yearly series.

    Args:
        periods: ReportingPeriod models or raw API dicts with ``endDate``
            and ``emissions.calculatedTotalEmissions``.

    Returns:
        Sorted, de-duplicated EmissionPoint list.
    """
    flattened: List[Tuple[int, float]] = []
    for period in periods or []:
        if isinstance(period, ReportingPeriod):
            end_date = period.end_date
            total = period.emissions.calculated_total_emissions if period.emissions else None
        elif isinstance(period, Mapping):
            end_date = period.get("endDate", period.get("end_date"))
            emissions = period.get("emissions") or {}
            total = (
                emissions.get("calculatedTotalEmissions")
                if isinstance(emissions, Mapping) else None
            )
        else:
            logger.debug("Skipping reporting period of type %s", type(period).__name__)
            continue

        year = _parse_year(end_date)
        if year is None:
            logger.warning("Skipping reporting period with unparsable endDate %r", end_date)
            continue
        value = _finite(total)
        if value is None:
            continue
        flattened.append((year, value))

    return normalize_points(flattened)


def filter_since_base_year(
    points: List[EmissionPoint],
    base_year: Optional[int],
) -> List[EmissionPoint]:
    """Keep points at or after the base year (all points when unset)."""
    if base_year is None:
        return list(points)
    return [p for p in points if p.year >= base_year]


__all__ = [
    "normalize_points",
    "points_from_periods",
    "filter_since_base_year",
]
