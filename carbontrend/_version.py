"""Version information for CarbonTrend."""

__version__ = "1.0.0"
