"""Correlation and covariance between return series.

Pairwise, matrix and rolling-window calculations. Matrices compute only the
upper triangle and mirror it, so results are symmetric by construction.

Usage:
    >>> from decimal import Decimal
    >>> from qanalytics.libraries.performance import correlation
    >>>
    >>> a = [Decimal("0.01"), Decimal("0.02"), Decimal("0.03")]
    >>> b = [Decimal("0.02"), Decimal("0.04"), Decimal("0.06")]
    >>> round(correlation.calculate_correlation(a, b), 4)
    Decimal('1.0000')
"""

from decimal import Decimal
from typing import Sequence

from qanalytics.core.decimal_math import ZERO, clamp, sqrt
from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.performance.statistics import mean, sample_covariance, sample_variance, validate_returns
from qanalytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

ONE = Decimal("1.0")
MINUS_ONE = Decimal("-1.0")

Matrix = list[list[Decimal]]


def _validate_pair(returns_a: Sequence[Decimal], returns_b: Sequence[Decimal]) -> CalculationError | None:
    if len(returns_a) != len(returns_b):
        return CalculationError(
            ErrorKind.MISMATCHED_LENGTHS,
            f"Series lengths differ: {len(returns_a)} vs {len(returns_b)}",
        )
    return validate_returns(returns_a) or validate_returns(returns_b)


def _validate_series_set(series: Sequence[Sequence[Decimal]]) -> CalculationError | None:
    if len(series) == 0:
        return CalculationError(ErrorKind.NO_ASSETS, "No return series provided")
    if len(series) == 1:
        return CalculationError(ErrorKind.INSUFFICIENT_ASSETS, "At least 2 return series required")
    length = len(series[0])
    for index, returns in enumerate(series):
        if len(returns) != length:
            return CalculationError(
                ErrorKind.MISMATCHED_LENGTHS,
                f"Series {index} has {len(returns)} returns, expected {length}",
            )
    for returns in series:
        error = validate_returns(returns)
        if error is not None:
            return error
    return None


def _pearson(returns_a: Sequence[Decimal], returns_b: Sequence[Decimal]) -> Decimal | None:
    """Pearson correlation, or None when either series has zero variance."""
    if all(a == b for a, b in zip(returns_a, returns_b)):
        return ONE

    mean_a = mean(returns_a)
    mean_b = mean(returns_b)
    sum_products = ZERO
    sum_squares_a = ZERO
    sum_squares_b = ZERO
    for a, b in zip(returns_a, returns_b):
        diff_a = a - mean_a
        diff_b = b - mean_b
        sum_products += diff_a * diff_b
        sum_squares_a += diff_a * diff_a
        sum_squares_b += diff_b * diff_b

    denominator = sqrt(sum_squares_a * sum_squares_b)
    if denominator == ZERO:
        return None

    # Clamp absorbs rounding drift from the iterative square root.
    return clamp(sum_products / denominator, MINUS_ONE, ONE)


def calculate_correlation(
    returns_a: Sequence[Decimal],
    returns_b: Sequence[Decimal],
) -> Decimal | CalculationError:
    """
    Pearson correlation coefficient between two return series.

    Identical series return exactly 1.0 without computing.

    Args:
        returns_a: First return series
        returns_b: Second return series, same length (at least 2)

    Returns:
        Correlation in [-1, 1], or CalculationError with kind
        mismatched_lengths, insufficient_data, invalid_return_format or
        zero_variance
    """
    error = _validate_pair(returns_a, returns_b)
    if error is not None:
        logger.debug("correlation.rejected", error_kind=error.kind.value)
        return error

    correlation = _pearson(returns_a, returns_b)
    if correlation is None:
        logger.debug("correlation.rejected", error_kind=ErrorKind.ZERO_VARIANCE.value)
        return CalculationError(ErrorKind.ZERO_VARIANCE, "Correlation undefined for a zero-variance series")

    logger.debug("correlation.calculated", correlation=str(correlation))
    return correlation


def calculate_correlation_matrix(series: Sequence[Sequence[Decimal]]) -> Matrix | CalculationError:
    """
    Symmetric correlation matrix for several assets.

    Args:
        series: One return series per asset, all the same length

    Returns:
        N x N matrix with 1.0 on the diagonal, or CalculationError with kind
        no_assets, insufficient_assets, mismatched_lengths,
        insufficient_data, invalid_return_format or zero_variance (any flat
        asset)
    """
    error = _validate_series_set(series)
    if error is None:
        for index, returns in enumerate(series):
            if sample_variance(returns) == ZERO:
                error = CalculationError(ErrorKind.ZERO_VARIANCE, f"Series {index} has zero variance")
                break
    if error is not None:
        logger.debug("correlation.matrix_rejected", error_kind=error.kind.value)
        return error

    size = len(series)
    matrix: Matrix = [[ZERO] * size for _ in range(size)]
    for i in range(size):
        matrix[i][i] = ONE
        for j in range(i + 1, size):
            value = _pearson(series[i], series[j])
            if value is None:
                return CalculationError(ErrorKind.ZERO_VARIANCE, f"Series {i} and {j} have zero joint variance")
            matrix[i][j] = value
            matrix[j][i] = value

    logger.debug("correlation.matrix_calculated", assets=size)
    return matrix


def calculate_rolling_correlation(
    returns_a: Sequence[Decimal],
    returns_b: Sequence[Decimal],
    window_size: int,
) -> list[Decimal] | CalculationError:
    """
    Correlation over each sliding window of ``window_size`` periods.

    A window in which either series is flat yields 0.

    Args:
        returns_a: First return series
        returns_b: Second return series, same length
        window_size: Periods per window (>= 2, <= series length)

    Returns:
        len - window_size + 1 correlations in chronological order, or
        CalculationError with kind invalid_window_size, mismatched_lengths,
        window_too_large or invalid_return_format
    """
    error: CalculationError | None = None
    if window_size < 2:
        error = CalculationError(ErrorKind.INVALID_WINDOW_SIZE, f"Window size must be at least 2, got {window_size}")
    elif len(returns_a) != len(returns_b):
        error = CalculationError(
            ErrorKind.MISMATCHED_LENGTHS,
            f"Series lengths differ: {len(returns_a)} vs {len(returns_b)}",
        )
    elif window_size > len(returns_a):
        error = CalculationError(
            ErrorKind.WINDOW_TOO_LARGE,
            f"Window size {window_size} exceeds series length {len(returns_a)}",
        )
    else:
        error = validate_returns(returns_a) or validate_returns(returns_b)
    if error is not None:
        logger.debug("correlation.rolling_rejected", error_kind=error.kind.value)
        return error

    rolling = []
    for start in range(len(returns_a) - window_size + 1):
        end = start + window_size
        value = _pearson(returns_a[start:end], returns_b[start:end])
        rolling.append(ZERO if value is None else value)

    logger.debug("correlation.rolling_calculated", windows=len(rolling), window_size=window_size)
    return rolling


def calculate_covariance(
    returns_a: Sequence[Decimal],
    returns_b: Sequence[Decimal],
) -> Decimal | CalculationError:
    """
    Sample covariance between two return series.

    A flat series is valid here and simply produces a covariance of 0.

    Returns:
        Covariance, or CalculationError with kind mismatched_lengths,
        insufficient_data or invalid_return_format
    """
    error = _validate_pair(returns_a, returns_b)
    if error is not None:
        logger.debug("covariance.rejected", error_kind=error.kind.value)
        return error

    covariance = sample_covariance(returns_a, returns_b)
    logger.debug("covariance.calculated", covariance=str(covariance))
    return covariance


def calculate_covariance_matrix(series: Sequence[Sequence[Decimal]]) -> Matrix | CalculationError:
    """
    Symmetric covariance matrix with each asset's variance on the diagonal.

    Returns:
        N x N matrix, or CalculationError with kind no_assets,
        insufficient_assets, mismatched_lengths, insufficient_data or
        invalid_return_format
    """
    error = _validate_series_set(series)
    if error is not None:
        logger.debug("covariance.matrix_rejected", error_kind=error.kind.value)
        return error

    size = len(series)
    means = [mean(returns) for returns in series]
    matrix: Matrix = [[ZERO] * size for _ in range(size)]
    for i in range(size):
        matrix[i][i] = sample_variance(series[i], means[i])
        for j in range(i + 1, size):
            value = sample_covariance(series[i], series[j], means[i], means[j])
            matrix[i][j] = value
            matrix[j][i] = value

    logger.debug("covariance.matrix_calculated", assets=size)
    return matrix
