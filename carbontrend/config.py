# -*- coding: utf-8 -*-
"""
Trend Engine Configuration

Centralized configuration for the CarbonTrend engine covering:
- Characterisation windows (recent-window size, weighting decay)
- Unusual-point detection (median multiplier, minimum points)
- Method selection thresholds (stability, R² improvement, variance)
- Carbon-Law pathway and Paris evaluation window
- Logging

All settings can be overridden via environment variables with the
``CT_TREND_`` prefix (e.g. ``CT_TREND_CARBON_LAW_RATE``).

Example:
    >>> from carbontrend.config import get_config
    >>> cfg = get_config()
    >>> print(cfg.recent_window, cfg.carbon_law_rate)
    4 0.117
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Optional

from carbontrend.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variable prefix
# ---------------------------------------------------------------------------

_ENV_PREFIX = "CT_TREND_"


# ---------------------------------------------------------------------------
# TrendEngineConfig
# ---------------------------------------------------------------------------


@dataclass
class TrendEngineConfig:
    """Complete configuration for the CarbonTrend engine.

    Attributes:
        recent_window: Number of trailing points used for recent stability
            and the recent-exponential check.
        weight_decay: Per-year decay of regression weights in the weighted
            fits; the most recent point has weight 1.
        unusual_multiplier: A transition is unusual when its absolute change
            exceeds this multiple of the median absolute change.
        min_points_for_unusual: Minimum series length for unusual-point
            detection.
        missing_years_threshold: Missing-year count above which the
            missing-data rule selects plain linear regression.
        stability_threshold: Recent coefficient of variation below which the
            series counts as stable.
        r2_improvement_threshold: Required gain of R²_exp over R²_lin before
            an exponential method is chosen.
        weighted_exponential_cv_threshold: Coefficient of variation above
            which the exponential family is fitted with recency weights.
        high_variance_threshold: Coefficient of variation above which the
            series counts as highly variable.
        recent_exponential_r2: Minimum recent R²_exp for recentExponential.
        recent_exponential_margin: Required gain of recent R²_exp over
            recent R²_lin for recentExponential.
        direction_threshold: Relative slope (of the mean) below which the
            trend counts as stable.
        carbon_law_rate: Annual reduction rate of the Carbon-Law pathway.
        reference_year: First year of the Paris carbon-budget window.
        horizon_year: Last year of the Paris carbon-budget window.
        projection_end_year: Default last year of generated projections.
        log_level: Logging level for the engine.
    """

    # -- Characterisation ----------------------------------------------------
    recent_window: int = 4
    weight_decay: float = 0.7

    # -- Unusual points ------------------------------------------------------
    unusual_multiplier: float = 4.0
    min_points_for_unusual: int = 4

    # -- Method selection ----------------------------------------------------
    missing_years_threshold: int = 0
    stability_threshold: float = 0.10
    r2_improvement_threshold: float = 0.05
    weighted_exponential_cv_threshold: float = 0.15
    high_variance_threshold: float = 0.20
    recent_exponential_r2: float = 0.8
    recent_exponential_margin: float = 0.1
    direction_threshold: float = 0.01

    # -- Carbon budget -------------------------------------------------------
    carbon_law_rate: float = 0.117
    reference_year: int = 2025
    horizon_year: int = 2050
    projection_end_year: int = 2050

    # -- Logging -------------------------------------------------------------
    log_level: str = "INFO"

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigurationError: If any setting is outside its valid range.
        """
        problems = {}
        if self.recent_window < 2:
            problems["recent_window"] = "must be >= 2"
        if not 0.0 < self.weight_decay <= 1.0:
            problems["weight_decay"] = "must be in (0, 1]"
        if self.unusual_multiplier <= 0:
            problems["unusual_multiplier"] = "must be > 0"
        if self.min_points_for_unusual < 3:
            problems["min_points_for_unusual"] = "must be >= 3"
        if self.missing_years_threshold < 0:
            problems["missing_years_threshold"] = "must be >= 0"
        if not 0.0 < self.carbon_law_rate < 1.0:
            problems["carbon_law_rate"] = "must be in (0, 1)"
        if self.horizon_year < self.reference_year:
            problems["horizon_year"] = "must be >= reference_year"
        if self.projection_end_year > 2050:
            problems["projection_end_year"] = "must be <= 2050"
        if problems:
            raise ConfigurationError(
                message="Invalid trend engine configuration",
                context={"invalid_fields": problems},
            )

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> TrendEngineConfig:
        """Build a TrendEngineConfig from environment variables.

        Every field can be overridden via ``CT_TREND_<FIELD_UPPER>``.
        Integer values are parsed via ``int()`` and float values via
        ``float()``; unparsable values fall back to the default.

        Returns:
            Populated TrendEngineConfig instance.
        """
        prefix = _ENV_PREFIX

        def _env(name: str, default: Any = None) -> Optional[str]:
            return os.environ.get(f"{prefix}{name}", default)

        def _int(name: str, default: int) -> int:
            val = _env(name)
            if val is None:
                return default
            try:
                return int(val)
            except ValueError:
                logger.warning(
                    "Invalid integer for %s%s=%s, using default %d",
                    prefix, name, val, default,
                )
                return default

        def _float(name: str, default: float) -> float:
            val = _env(name)
            if val is None:
                return default
            try:
                return float(val)
            except ValueError:
                logger.warning(
                    "Invalid float for %s%s=%s, using default %f",
                    prefix, name, val, default,
                )
                return default

        def _str(name: str, default: str) -> str:
            val = _env(name)
            if val is None:
                return default
            return val

        config = cls(
            recent_window=_int("RECENT_WINDOW", cls.recent_window),
            weight_decay=_float("WEIGHT_DECAY", cls.weight_decay),
            unusual_multiplier=_float(
                "UNUSUAL_MULTIPLIER", cls.unusual_multiplier,
            ),
            min_points_for_unusual=_int(
                "MIN_POINTS_FOR_UNUSUAL", cls.min_points_for_unusual,
            ),
            missing_years_threshold=_int(
                "MISSING_YEARS_THRESHOLD", cls.missing_years_threshold,
            ),
            stability_threshold=_float(
                "STABILITY_THRESHOLD", cls.stability_threshold,
            ),
            r2_improvement_threshold=_float(
                "R2_IMPROVEMENT_THRESHOLD", cls.r2_improvement_threshold,
            ),
            weighted_exponential_cv_threshold=_float(
                "WEIGHTED_EXPONENTIAL_CV_THRESHOLD",
                cls.weighted_exponential_cv_threshold,
            ),
            high_variance_threshold=_float(
                "HIGH_VARIANCE_THRESHOLD", cls.high_variance_threshold,
            ),
            recent_exponential_r2=_float(
                "RECENT_EXPONENTIAL_R2", cls.recent_exponential_r2,
            ),
            recent_exponential_margin=_float(
                "RECENT_EXPONENTIAL_MARGIN", cls.recent_exponential_margin,
            ),
            direction_threshold=_float(
                "DIRECTION_THRESHOLD", cls.direction_threshold,
            ),
            carbon_law_rate=_float("CARBON_LAW_RATE", cls.carbon_law_rate),
            reference_year=_int("REFERENCE_YEAR", cls.reference_year),
            horizon_year=_int("HORIZON_YEAR", cls.horizon_year),
            projection_end_year=_int(
                "PROJECTION_END_YEAR", cls.projection_end_year,
            ),
            log_level=_str("LOG_LEVEL", cls.log_level),
        )

        logger.info(
            "TrendEngineConfig loaded: window=%d, decay=%.2f, "
            "unusual=%.1fx (min %d pts), stability=%.2f, r2_gain=%.2f, "
            "variance=%.2f, carbon_law=%.4f, paris=%d-%d",
            config.recent_window,
            config.weight_decay,
            config.unusual_multiplier,
            config.min_points_for_unusual,
            config.stability_threshold,
            config.r2_improvement_threshold,
            config.high_variance_threshold,
            config.carbon_law_rate,
            config.reference_year,
            config.horizon_year,
        )
        return config


# ---------------------------------------------------------------------------
# Thread-safe singleton accessor
# ---------------------------------------------------------------------------

_config_instance: Optional[TrendEngineConfig] = None
_config_lock = threading.Lock()


def get_config() -> TrendEngineConfig:
    """Return the singleton TrendEngineConfig, creating from env if needed.

    Returns:
        TrendEngineConfig singleton instance.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = TrendEngineConfig.from_env()
    return _config_instance


def set_config(config: TrendEngineConfig) -> None:
    """Replace the singleton TrendEngineConfig (useful for testing).

    Args:
        config: New configuration to install.

    Raises:
        ConfigurationError: If the configuration does not validate.
    """
    global _config_instance
    config.validate()
    with _config_lock:
        _config_instance = config
    logger.info("TrendEngineConfig replaced programmatically")


def reset_config() -> None:
    """Reset the singleton (primarily for test teardown)."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = [
    "TrendEngineConfig",
    "get_config",
    "set_config",
    "reset_config",
]
