"""Statistics primitives over Decimal series.

Pure functions shared by the risk, beta, drawdown and correlation
calculators. Results are unrounded; callers round for presentation.

Philosophy:
- Exact Decimal arithmetic throughout (no float conversion)
- Sample statistics use the n-1 (Bessel) denominator
- Validation helpers return a CalculationError instead of raising
"""

from decimal import Decimal
from typing import Sequence

from qanalytics.core.decimal_math import ONE, ZERO, nth_root, sqrt
from qanalytics.core.errors import CalculationError, ErrorKind


def _is_decimal(value: object) -> bool:
    return isinstance(value, Decimal) and value.is_finite()


def validate_returns(returns: Sequence[object]) -> CalculationError | None:
    """
    Check a return series for length and element type.

    Args:
        returns: Candidate return series

    Returns:
        None when valid, otherwise the first failing CalculationError
    """
    if len(returns) < 2:
        return CalculationError(
            ErrorKind.INSUFFICIENT_DATA,
            f"At least 2 returns required, got {len(returns)}",
        )
    for index, value in enumerate(returns):
        if not _is_decimal(value):
            return CalculationError(
                ErrorKind.INVALID_RETURN_FORMAT,
                f"Return at index {index} is not a finite Decimal: {value!r}",
            )
    return None


def validate_values(values: Sequence[object]) -> CalculationError | None:
    """
    Check a value series for length, element type and strict positivity.

    Args:
        values: Candidate portfolio value series

    Returns:
        None when valid, otherwise the first failing CalculationError
    """
    if len(values) < 2:
        return CalculationError(
            ErrorKind.INSUFFICIENT_DATA,
            f"At least 2 values required, got {len(values)}",
        )
    for index, value in enumerate(values):
        if not _is_decimal(value):
            return CalculationError(
                ErrorKind.INVALID_VALUE_FORMAT,
                f"Value at index {index} is not a finite Decimal: {value!r}",
            )
    for index, value in enumerate(values):
        if value <= ZERO:  # type: ignore[operator]
            return CalculationError(
                ErrorKind.NON_POSITIVE_VALUES,
                f"Value at index {index} must be positive, got {value}",
            )
    return None


def mean(values: Sequence[Decimal]) -> Decimal:
    """Arithmetic mean (zero for an empty series)."""
    if not values:
        return ZERO
    return sum(values, ZERO) / Decimal(len(values))


def sample_variance(values: Sequence[Decimal], mean_value: Decimal | None = None) -> Decimal:
    """
    Sample variance with n-1 denominator.

    Args:
        values: Series with at least 2 elements (zero returned otherwise)
        mean_value: Precomputed mean, computed when omitted

    Returns:
        Sample variance
    """
    if len(values) < 2:
        return ZERO
    if mean_value is None:
        mean_value = mean(values)
    squared = sum(((v - mean_value) ** 2 for v in values), ZERO)
    return squared / Decimal(len(values) - 1)


def sample_std_dev(values: Sequence[Decimal], mean_value: Decimal | None = None) -> Decimal:
    """Sample standard deviation (square root of the sample variance)."""
    return sqrt(sample_variance(values, mean_value))


def downside_deviation(returns: Sequence[Decimal], target_return: Decimal = ZERO) -> Decimal:
    """
    Downside deviation below a target return.

    Only returns strictly below target contribute squared shortfalls, but the
    sum is divided by the total number of returns.

    Example:
        >>> downside_deviation([Decimal("-0.04"), Decimal("0.04"), Decimal("0.02"), Decimal("0.06")])
        Decimal('0.02')
    """
    if not returns:
        return ZERO
    shortfalls = [(r - target_return) ** 2 for r in returns if r < target_return]
    if not shortfalls:
        return ZERO
    return sqrt(sum(shortfalls, ZERO) / Decimal(len(returns)))


def sample_covariance(
    x: Sequence[Decimal],
    y: Sequence[Decimal],
    x_mean: Decimal | None = None,
    y_mean: Decimal | None = None,
) -> Decimal:
    """Sample covariance of two equal-length series with n-1 denominator."""
    if len(x) < 2:
        return ZERO
    if x_mean is None:
        x_mean = mean(x)
    if y_mean is None:
        y_mean = mean(y)
    products = sum(((a - x_mean) * (b - y_mean) for a, b in zip(x, y)), ZERO)
    return products / Decimal(len(x) - 1)


def geometric_mean_return(returns: Sequence[Decimal]) -> Decimal:
    """
    Per-period geometric mean return: (prod(1 + r)) ** (1 / n) - 1.

    A non-positive growth product (total loss) yields -1.
    """
    if not returns:
        return ZERO
    growth = ONE
    for r in returns:
        growth *= ONE + r
    if growth <= ZERO:
        return -ONE
    return nth_root(growth, len(returns)) - ONE


def annualize_return(period_return: Decimal, periods_per_year: int) -> Decimal:
    """Compound a per-period return to a year: (1 + r) ** periods_per_year - 1."""
    return (ONE + period_return) ** periods_per_year - ONE


def infer_periods_per_year(count: int) -> int:
    """
    Infer the period grain from series length.

    >= 250 observations are daily (252), >= 50 weekly (52),
    >= 10 monthly (12), anything shorter is treated as quarterly (4).
    """
    if count >= 250:
        return 252
    if count >= 50:
        return 52
    if count >= 10:
        return 12
    return 4


def excess_returns(returns: Sequence[Decimal], benchmark: Sequence[Decimal]) -> list[Decimal]:
    """Pairwise differences between a return series and its benchmark."""
    return [r - b for r, b in zip(returns, benchmark)]
