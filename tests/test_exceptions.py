"""Tests for the CarbonTrend exception hierarchy.

Covers error-code generation, rich context, serialization and the
surface exceptions raised by the loader and the configuration layer.
"""

import json
from datetime import datetime

import pytest

from carbontrend.exceptions import (
    CarbonTrendException,
    ConfigurationError,
    InvalidInputError,
)


# ==============================================================================
# Base Exception Tests
# ==============================================================================

class TestCarbonTrendException:
    """Tests for base CarbonTrendException."""

    def test_create_basic_exception(self):
        """Can create basic exception with message."""
        exc = CarbonTrendException("Something went wrong")

        assert exc.message == "Something went wrong"
        assert exc.error_code == "CT_CARBON_TREND_EXCEPTION"
        assert exc.context == {}
        assert isinstance(exc.timestamp, datetime)

    def test_explicit_error_code(self):
        exc = CarbonTrendException("Test error", error_code="CT_TEST_001", context={"k": 1})
        assert exc.error_code == "CT_TEST_001"
        assert exc.context == {"k": 1}

    def test_str_representation(self):
        exc = CarbonTrendException("Boom", error_code="CT_X")
        assert str(exc) == "[CT_X] - Boom"
        assert repr(exc) == "CarbonTrendException(message='Boom', error_code='CT_X')"

    def test_to_dict_and_json(self):
        exc = CarbonTrendException("Boom", context={"path": "a.json"})
        data = exc.to_dict()

        assert data["error_type"] == "CarbonTrendException"
        assert data["message"] == "Boom"
        assert data["context"] == {"path": "a.json"}
        assert json.loads(exc.to_json())["error_code"] == exc.error_code


# ==============================================================================
# Surface Exceptions
# ==============================================================================

class TestSurfaceExceptions:
    """InvalidInputError and ConfigurationError."""

    def test_invalid_input_error(self):
        exc = InvalidInputError("Unsupported input format: .csv", source="periods.csv")

        assert isinstance(exc, CarbonTrendException)
        assert exc.error_code == "CT_INVALID_INPUT_ERROR"
        assert exc.context == {"source": "periods.csv"}

    def test_invalid_input_error_keeps_context(self):
        exc = InvalidInputError("bad", context={"line": 3}, source="x.yaml")
        assert exc.context == {"line": 3, "source": "x.yaml"}

    def test_configuration_error(self):
        exc = ConfigurationError("bad rate", context={"field": "carbon_law_rate"})
        assert exc.error_code == "CT_CONFIGURATION_ERROR"

    def test_can_be_caught_as_base(self):
        with pytest.raises(CarbonTrendException):
            raise ConfigurationError("bad")
