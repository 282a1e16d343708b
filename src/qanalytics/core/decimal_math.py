"""Decimal arithmetic helpers.

Exact decimal operations used by every calculator in the package. Nothing in
here touches binary floating point: roots are found with Newton's method on
``Decimal`` values and rounding is always half-up.

Usage:
    >>> from decimal import Decimal
    >>> from qanalytics.core import decimal_math
    >>>
    >>> decimal_math.round_decimal(Decimal("0.3333333"), 4)
    Decimal('0.3333')
    >>> decimal_math.sqrt(Decimal("0.0004"))
    Decimal('0.02')
"""

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
ONE = Decimal("1")

DEFAULT_SQRT_ITERATIONS = 10
DEFAULT_SQRT_TOLERANCE = Decimal("0.0000001")


def round_decimal(value: Decimal, places: int) -> Decimal:
    """
    Round to a fixed number of decimal places using half-up rounding.

    Args:
        value: Value to round
        places: Number of digits after the decimal point

    Returns:
        Quantized value

    Example:
        >>> round_decimal(Decimal("2.345"), 2)
        Decimal('2.35')
    """
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def safe_divide(dividend: Decimal, divisor: Decimal, default: Decimal = ZERO) -> Decimal:
    """Divide, returning ``default`` instead of raising when divisor is zero."""
    if divisor == ZERO:
        return default
    return dividend / divisor


def clamp(value: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    """Constrain value to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))


def _initial_guess(value: Decimal, degree: int) -> Decimal:
    # Power of ten with roughly the right magnitude keeps Newton inside a few steps.
    return Decimal(10) ** (value.adjusted() // degree)


def sqrt(
    value: Decimal,
    max_iterations: int = DEFAULT_SQRT_ITERATIONS,
    tolerance: Decimal = DEFAULT_SQRT_TOLERANCE,
) -> Decimal:
    """
    Square root via Newton's method.

    Iterates x' = (x + value / x) / 2 until successive estimates differ by
    less than ``tolerance`` or ``max_iterations`` is reached.

    Args:
        value: Non-negative value
        max_iterations: Upper bound on Newton steps
        tolerance: Convergence threshold between successive estimates

    Returns:
        Square root of value (exactly zero for zero input)

    Raises:
        ValueError: If value is negative

    Example:
        >>> sqrt(Decimal("16"))
        Decimal('4')
    """
    if value < ZERO:
        raise ValueError(f"Cannot take square root of negative value: {value}")
    if value == ZERO:
        return ZERO

    estimate = _initial_guess(value, 2)
    for _ in range(max_iterations):
        next_estimate = (estimate + value / estimate) / 2
        converged = abs(next_estimate - estimate) < tolerance
        estimate = next_estimate
        if converged:
            break

    # Polish to full context precision; the tolerance is absolute and loose for tiny variances.
    for _ in range(2):
        estimate = (estimate + value / estimate) / 2
    return estimate.normalize()


def nth_root(value: Decimal, n: int, max_iterations: int = 10, tolerance: Decimal = Decimal("1e-20")) -> Decimal:
    """
    Positive real n-th root via Newton's method.

    The starting estimate comes from the decimal logarithm so that high
    degrees (e.g. 252 daily periods) converge in a handful of steps.

    Args:
        value: Non-negative value
        n: Root degree (>= 1)
        max_iterations: Upper bound on Newton steps
        tolerance: Convergence threshold between successive estimates

    Returns:
        The n-th root of value

    Raises:
        ValueError: If value is negative or n < 1
    """
    if n < 1:
        raise ValueError(f"Root degree must be >= 1, got {n}")
    if value < ZERO:
        raise ValueError(f"Cannot take root of negative value: {value}")
    if value == ZERO or n == 1:
        return value

    degree = Decimal(n)
    estimate = (value.ln() / degree).exp()
    for _ in range(max_iterations):
        next_estimate = ((degree - 1) * estimate + value / (estimate ** (n - 1))) / degree
        if abs(next_estimate - estimate) < tolerance:
            return next_estimate
        estimate = next_estimate

    return estimate


def power(base: Decimal, exponent: int) -> Decimal:
    """Raise base to an integer exponent exactly."""
    return base**exponent
