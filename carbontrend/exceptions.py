"""CarbonTrend Exception Hierarchy.

The statistical core never raises: sparse or degenerate series are expressed
as sentinel results (method ``none``, ``BudgetStatus.UNKNOWN``, ``None``
projections). Exceptions exist only at the outer surfaces of the package,
where a caller hands over something that is not a series at all.

Exception Hierarchy:
    CarbonTrendException (base)
    ├── InvalidInputError
    └── ConfigurationError

All exceptions include rich context:
- error_code: Unique error identifier
- context: Dictionary with error-specific details
- timestamp: When the error occurred

Example:
    >>> from carbontrend.exceptions import InvalidInputError
    >>> raise InvalidInputError(
    ...     message="Input file not found",
    ...     context={"path": "periods.json"}
    ... )
"""

import json
import re
from datetime import datetime
from typing import Any, Dict, Optional


# ==============================================================================
# Base Exception
# ==============================================================================

class CarbonTrendException(Exception):
    """Base exception for all CarbonTrend errors.

    Attributes:
        message: Human-readable error message
        error_code: Unique error identifier (e.g., "CT_INVALID_INPUT_ERROR")
        context: Dictionary with error-specific details
        timestamp: When the error occurred
    """

    ERROR_PREFIX = "CT"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception with rich context.

        Args:
            message: Human-readable error message
            error_code: Unique error identifier (auto-generated if not provided)
            context: Dictionary with error-specific details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.context = context or {}
        self.timestamp = datetime.now()

    def _generate_error_code(self) -> str:
        """Generate error code from the class name.

        Returns:
            Error code like "CT_CONFIGURATION_ERROR"
        """
        error_type = re.sub(r'(?<!^)(?=[A-Z])', '_', self.__class__.__name__).upper()
        return f"{self.ERROR_PREFIX}_{error_type}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def __str__(self) -> str:
        return f"[{self.error_code}] - {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}')"
        )


# ==============================================================================
# Surface Exceptions
# ==============================================================================

class InvalidInputError(CarbonTrendException):
    """Input handed to an outer surface could not be read as emissions data.

    Raised by the CLI and the entity loader when a file is missing, cannot be
    parsed, or does not hold reporting periods at all. Individual malformed
    periods are dropped during cleaning instead.

    Example:
        >>> raise InvalidInputError(
        ...     message="Unsupported input format: .csv",
        ...     context={"path": "periods.csv"},
        ...     source="periods.csv",
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
    ):
        """Initialize invalid input error.

        Args:
            message: Error message
            context: Error context
            source: Path or identifier of the offending input
        """
        context = context or {}
        if source:
            context["source"] = source
        super().__init__(message, context=context)


class ConfigurationError(CarbonTrendException):
    """Engine configuration is invalid.

    Example:
        >>> raise ConfigurationError(
        ...     message="carbon_law_rate must be in (0, 1)",
        ...     context={"field": "carbon_law_rate", "value": 1.5}
        ... )
    """
    pass


__all__ = [
    "CarbonTrendException",
    "InvalidInputError",
    "ConfigurationError",
]
