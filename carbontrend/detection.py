# -*- coding: utf-8 -*-
"""
Unusual Point Detection - flags abnormal year-over-year transitions.

A transition between two consecutive reported years is unusual when its
absolute change exceeds ``multiplier`` times the median absolute change
over the full history (not a rolling window). The median is robust to the
very jumps being searched for, so a single restatement or acquisition does
not hide itself by inflating the threshold.

Example:
    >>> from carbontrend.models import EmissionPoint
    >>> series = [EmissionPoint(year=y, value=v) for y, v in
    ...           zip(range(2015, 2023), [50, 51, 52, 50, 500, 55, 54, 53])]
    >>> found, details = detect_unusual_points(series)
    >>> found, details[0].year, details[0].change
    (True, 2019, 450.0)
"""

from __future__ import annotations

import logging
import statistics
from typing import List, Sequence, Tuple

from carbontrend.models import EmissionPoint, UnusualPoint

logger = logging.getLogger(__name__)

DEFAULT_MULTIPLIER = 4.0
DEFAULT_MIN_POINTS = 4


def _safe_median(values: List[float]) -> float:
    """Compute median, 0.0 for empty lists."""
    if not values:
        return 0.0
    return statistics.median(values)


def year_over_year_changes(points: Sequence[EmissionPoint]) -> List[float]:
    """Absolute change between each pair of consecutive points."""
    return [abs(b.value - a.value) for a, b in zip(points, points[1:])]


def detect_unusual_points(
    points: Sequence[EmissionPoint],
    multiplier: float = DEFAULT_MULTIPLIER,
    min_points: int = DEFAULT_MIN_POINTS,
) -> Tuple[bool, List[UnusualPoint]]:
    """Find transitions whose change exceeds ``multiplier`` x the median change.

    Args:
        points: Clean series, ascending by year.
        multiplier: Multiple of the median absolute change that a transition
            must exceed to be flagged.
        min_points: Shorter series are never flagged.

    Returns:
        Tuple of (has_unusual_points, details), details in chronological
        order. A series whose changes are all zero has no unusual points.
    """
    if len(points) < min_points:
        return False, []

    ordered = sorted(points, key=lambda p: p.year)
    changes = year_over_year_changes(ordered)
    if not any(changes):
        return False, []

    threshold = multiplier * _safe_median(changes)
    details: List[UnusualPoint] = []
    for (before, after), change in zip(zip(ordered, ordered[1:]), changes):
        if change <= threshold:
            continue
        direction = "increase" if after.value > before.value else "decrease"
        details.append(
            UnusualPoint(
                year=after.year,
                from_year=before.year,
                to_year=after.year,
                from_value=before.value,
                to_value=after.value,
                change=change,
                threshold=threshold,
                direction=direction,
                reason=(
                    f"{before.year}->{after.year}: {direction} of {change:,.1f} tCO2e "
                    f"({before.value:,.1f} -> {after.value:,.1f}) exceeds the "
                    f"{threshold:,.1f} tCO2e threshold "
                    f"({multiplier:g}x median change)"
                ),
            )
        )

    if details:
        logger.debug(
            "Detected %d unusual transitions (threshold=%.2f) in %d points",
            len(details), threshold, len(ordered),
        )
    return bool(details), details


__all__ = [
    "DEFAULT_MULTIPLIER",
    "DEFAULT_MIN_POINTS",
    "year_over_year_changes",
    "detect_unusual_points",
]
