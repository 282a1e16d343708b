"""Typed calculation errors.

Calculators never raise for bad input. They return a ``CalculationError``
record instead, so callers branch on ``error.kind`` rather than catching
exceptions:

    >>> result = calculate_sharpe_ratio([Decimal("0.01")])
    >>> if isinstance(result, CalculationError):
    ...     print(result.kind)
    ErrorKind.INSUFFICIENT_DATA
"""

from dataclasses import dataclass
from enum import Enum
from typing import TypeVar, Union


class ErrorKind(str, Enum):
    """Symbolic error kinds shared by all calculators."""

    # Series validation
    INSUFFICIENT_DATA = "insufficient_data"
    INVALID_RETURN_FORMAT = "invalid_return_format"
    INVALID_VALUE_FORMAT = "invalid_value_format"
    NON_POSITIVE_VALUES = "non_positive_values"
    MISMATCHED_RETURN_PERIODS = "mismatched_return_periods"
    MISMATCHED_DATA_LENGTHS = "mismatched_data_lengths"
    MISMATCHED_LENGTHS = "mismatched_lengths"

    # Parameter validation
    INVALID_RISK_FREE_RATE = "invalid_risk_free_rate"
    INVALID_CONFIDENCE_LEVEL = "invalid_confidence_level"
    INVALID_PORTFOLIO_VALUE = "invalid_portfolio_value"
    INVALID_THRESHOLD = "invalid_threshold"
    INVALID_WINDOW_SIZE = "invalid_window_size"
    WINDOW_TOO_LARGE = "window_too_large"

    # Degenerate statistics
    ZERO_MARKET_VARIANCE = "zero_market_variance"
    ZERO_VARIANCE = "zero_variance"

    # Matrix shape
    NO_ASSETS = "no_assets"
    INSUFFICIENT_ASSETS = "insufficient_assets"

    # Corporate actions
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_PRICE = "invalid_price"
    INVALID_RATIO = "invalid_ratio"
    INVALID_BASIS = "invalid_basis"
    INVALID_CASH = "invalid_cash"
    INVALID_ALLOCATION = "invalid_allocation"
    INVALID_SHARES = "invalid_shares"
    INVALID_DIVIDEND = "invalid_dividend"
    MISSING_PARAMETER = "missing_parameter"
    BATCH_FAILED = "batch_failed"
    ACTION_NOT_PENDING = "action_not_pending"


@dataclass(frozen=True)
class CalculationError:
    """Details about a rejected calculation.

    Attributes:
        kind: Symbolic error kind for programmatic branching
        message: Human-readable description of the failure
    """

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


T = TypeVar("T")

CalculationResult = Union[T, CalculationError]


def is_error(result: object) -> bool:
    """Return True when a calculator returned a ``CalculationError``."""
    return isinstance(result, CalculationError)
