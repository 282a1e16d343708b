"""Core decimal arithmetic and error types."""

from qanalytics.core.decimal_math import clamp, nth_root, power, round_decimal, safe_divide, sqrt
from qanalytics.core.errors import CalculationError, CalculationResult, ErrorKind, is_error

__all__ = [
    # Arithmetic
    "round_decimal",
    "safe_divide",
    "clamp",
    "sqrt",
    "nth_root",
    "power",
    # Errors
    "CalculationError",
    "CalculationResult",
    "ErrorKind",
    "is_error",
]
