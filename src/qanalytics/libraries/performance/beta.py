"""Portfolio beta against a market return series."""

from decimal import Decimal
from typing import Sequence

from qanalytics.core.decimal_math import ZERO, round_decimal
from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.performance.models import BetaResult
from qanalytics.libraries.performance.statistics import mean, sample_covariance, sample_variance, validate_returns
from qanalytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


def calculate_beta(
    portfolio_returns: Sequence[Decimal],
    market_returns: Sequence[Decimal],
) -> BetaResult | CalculationError:
    """
    Calculate beta = cov(portfolio, market) / var(market).

    Covariance and both variances are sample statistics (n-1) computed from
    shared means, so identical series give a beta of exactly 1.

    Args:
        portfolio_returns: Portfolio period returns (at least 2)
        market_returns: Market period returns, same length

    Returns:
        BetaResult, or CalculationError with kind insufficient_data,
        invalid_return_format, mismatched_return_periods or
        zero_market_variance (beta undefined)

    Example:
        >>> r = [Decimal("0.01"), Decimal("0.02"), Decimal("-0.01")]
        >>> calculate_beta(r, r).beta
        Decimal('1.000000')
    """
    error = validate_returns(portfolio_returns) or validate_returns(market_returns)
    if error is None and len(portfolio_returns) != len(market_returns):
        error = CalculationError(
            ErrorKind.MISMATCHED_RETURN_PERIODS,
            f"Portfolio has {len(portfolio_returns)} returns, market has {len(market_returns)}",
        )
    if error is not None:
        logger.debug("beta.rejected", error_kind=error.kind.value)
        return error

    portfolio_mean = mean(portfolio_returns)
    market_mean = mean(market_returns)
    market_variance = sample_variance(market_returns, market_mean)

    if market_variance == ZERO:
        logger.debug("beta.rejected", error_kind=ErrorKind.ZERO_MARKET_VARIANCE.value)
        return CalculationError(
            ErrorKind.ZERO_MARKET_VARIANCE,
            "Market returns have zero variance; beta is undefined",
        )

    covariance = sample_covariance(portfolio_returns, market_returns, portfolio_mean, market_mean)
    portfolio_variance = sample_variance(portfolio_returns, portfolio_mean)

    result = BetaResult(
        beta=round_decimal(covariance / market_variance, 6),
        covariance=round_decimal(covariance, 8),
        portfolio_variance=round_decimal(portfolio_variance, 8),
        market_variance=round_decimal(market_variance, 8),
        portfolio_mean=round_decimal(portfolio_mean, 6),
        market_mean=round_decimal(market_mean, 6),
    )
    logger.debug("beta.calculated", beta=str(result.beta))
    return result
