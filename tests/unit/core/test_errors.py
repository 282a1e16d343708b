"""Tests for calculation error records."""

from dataclasses import FrozenInstanceError

import pytest

from qanalytics.core.errors import CalculationError, ErrorKind, is_error


def test_error_is_immutable():
    """Test CalculationError cannot be modified."""
    error = CalculationError(ErrorKind.INSUFFICIENT_DATA, "At least 2 returns required, got 1")

    with pytest.raises(FrozenInstanceError):
        error.message = "changed"  # type: ignore[misc]


def test_error_kind_values_are_symbolic():
    """Test kinds compare equal to their symbolic names."""
    assert ErrorKind.ZERO_MARKET_VARIANCE == "zero_market_variance"
    assert ErrorKind("window_too_large") is ErrorKind.WINDOW_TOO_LARGE


def test_error_string():
    """Test string form includes kind and message."""
    error = CalculationError(ErrorKind.NO_ASSETS, "No return series provided")
    assert str(error) == "no_assets: No return series provided"


def test_is_error():
    """Test is_error distinguishes errors from results."""
    assert is_error(CalculationError(ErrorKind.ZERO_VARIANCE, "flat"))
    assert not is_error(object())
