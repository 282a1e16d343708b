"""Risk-adjusted performance metrics.

Pure functions computing risk metrics from Decimal return and value series.
Each function returns a frozen result model, or a CalculationError when the
input cannot produce a meaningful answer.

Philosophy:
- Pure functions: same inputs always produce same outputs
- Exact Decimal arithmetic, rounded half-up only on the way out
- Degenerate inputs (zero volatility, zero drawdown) are valid results,
  not errors: ratios fall back to 0 or the 999.99 sentinel
- Defaults are explicit keyword parameters, never module state

Usage:
    >>> from decimal import Decimal
    >>> from qanalytics.libraries.performance import metrics
    >>>
    >>> returns = [Decimal("0.05"), Decimal("0.03"), Decimal("0.07"), Decimal("0.02"), Decimal("0.06")]
    >>> result = metrics.calculate_sharpe_ratio(returns, risk_free_rate=Decimal("0.02"))
    >>> result.mean_return
    Decimal('0.046000')
"""

from decimal import Decimal
from typing import Sequence

from qanalytics.core.decimal_math import ZERO, round_decimal, safe_divide
from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.performance.drawdown import calculate_drawdown
from qanalytics.libraries.performance.models import (
    CalmarRatioResult,
    DrawdownResult,
    InformationRatioResult,
    SharpeRatioResult,
    SortinoRatioResult,
    SterlingRatioResult,
    ValueAtRiskResult,
)
from qanalytics.libraries.performance.statistics import (
    annualize_return,
    downside_deviation,
    excess_returns,
    geometric_mean_return,
    infer_periods_per_year,
    mean,
    sample_std_dev,
    validate_returns,
    validate_values,
)
from qanalytics.system.config import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_RISK_FREE_RATE,
    DEFAULT_STERLING_THRESHOLD,
    DEFAULT_Z_SCORE,
    DEFAULT_Z_SCORE_BANDS,
    RATIO_SENTINEL,
    STERLING_EPSILON,
    ZScoreBand,
)
from qanalytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

ONE = Decimal("1")
HUNDRED = Decimal("100")


def _rejected(metric: str, error: CalculationError) -> CalculationError:
    logger.debug(f"risk_metrics.{metric}.rejected", error_kind=error.kind.value)
    return error


def calculate_sharpe_ratio(
    returns: Sequence[Decimal],
    risk_free_rate: Decimal = DEFAULT_RISK_FREE_RATE,
) -> SharpeRatioResult | CalculationError:
    """
    Calculate the Sharpe ratio.

    The annual risk-free rate is converted to a per-period rate using the
    period grain inferred from the series length (252/52/12/4).

    Args:
        returns: Period returns (at least 2)
        risk_free_rate: Annual risk-free rate in [0, 1]

    Returns:
        SharpeRatioResult (ratio 0 when volatility is 0), or CalculationError
        with kind insufficient_data, invalid_return_format or
        invalid_risk_free_rate
    """
    error = validate_returns(returns)
    if error is None and not (ZERO <= risk_free_rate <= ONE):
        error = CalculationError(
            ErrorKind.INVALID_RISK_FREE_RATE,
            f"Risk-free rate must be between 0 and 1, got {risk_free_rate}",
        )
    if error is not None:
        return _rejected("sharpe_ratio", error)

    mean_return = mean(returns)
    volatility = sample_std_dev(returns, mean_return)
    period_risk_free = risk_free_rate / Decimal(infer_periods_per_year(len(returns)))
    excess = mean_return - period_risk_free
    ratio = safe_divide(excess, volatility)

    result = SharpeRatioResult(
        sharpe_ratio=round_decimal(ratio, 4),
        excess_return=round_decimal(excess, 6),
        volatility=round_decimal(volatility, 6),
        risk_free_rate=period_risk_free,
        mean_return=round_decimal(mean_return, 6),
    )
    logger.debug("risk_metrics.sharpe_ratio.calculated", sharpe_ratio=str(result.sharpe_ratio))
    return result


def calculate_sortino_ratio(
    returns: Sequence[Decimal],
    target_return: Decimal = ZERO,
) -> SortinoRatioResult | CalculationError:
    """
    Calculate the Sortino ratio.

    Like Sharpe, but penalizes only returns below ``target_return``. Squared
    shortfalls are averaged over the full series length.

    Args:
        returns: Period returns (at least 2)
        target_return: Minimum acceptable per-period return

    Returns:
        SortinoRatioResult (ratio 0 when nothing falls below target), or
        CalculationError
    """
    error = validate_returns(returns)
    if error is not None:
        return _rejected("sortino_ratio", error)

    mean_return = mean(returns)
    downside = downside_deviation(returns, target_return)
    excess = mean_return - target_return
    ratio = safe_divide(excess, downside)

    result = SortinoRatioResult(
        sortino_ratio=round_decimal(ratio, 4),
        excess_return=round_decimal(excess, 6),
        downside_deviation=round_decimal(downside, 6),
        target_return=target_return,
        mean_return=round_decimal(mean_return, 6),
    )
    logger.debug("risk_metrics.sortino_ratio.calculated", sortino_ratio=str(result.sortino_ratio))
    return result


def _validate_returns_and_values(returns: Sequence[Decimal], values: Sequence[Decimal]) -> CalculationError | None:
    error = validate_returns(returns) or validate_values(values)
    if error is None and len(values) != len(returns) + 1:
        error = CalculationError(
            ErrorKind.MISMATCHED_DATA_LENGTHS,
            f"Expected {len(returns) + 1} values for {len(returns)} returns, got {len(values)}",
        )
    return error


def _annualized_return_and_drawdown(
    returns: Sequence[Decimal], values: Sequence[Decimal]
) -> tuple[Decimal, Decimal] | CalculationError:
    drawdown = calculate_drawdown(values)
    if isinstance(drawdown, CalculationError):
        return drawdown
    periods_per_year = infer_periods_per_year(len(returns))
    annualized = annualize_return(geometric_mean_return(returns), periods_per_year)
    return annualized, drawdown.max_drawdown


def calculate_calmar_ratio(
    returns: Sequence[Decimal],
    values: Sequence[Decimal],
    sentinel: Decimal = RATIO_SENTINEL,
) -> CalmarRatioResult | CalculationError:
    """
    Calculate the Calmar ratio: annualized return over maximum drawdown.

    Annualized return compounds the geometric mean period return over the
    inferred number of periods per year. Maximum drawdown comes from
    ``calculate_drawdown`` on ``values``.

    Args:
        returns: Period returns (at least 2)
        values: Portfolio values, exactly one more than returns
        sentinel: Ratio reported when there is no drawdown

    Returns:
        CalmarRatioResult, or CalculationError (mismatched_data_lengths when
        the series do not line up)

    Example:
        >>> returns = [Decimal("0.10"), Decimal("0.10")]
        >>> values = [Decimal("100"), Decimal("110"), Decimal("121")]
        >>> calculate_calmar_ratio(returns, values).calmar_ratio
        Decimal('999.9900')
    """
    error = _validate_returns_and_values(returns, values)
    if error is not None:
        return _rejected("calmar_ratio", error)

    components = _annualized_return_and_drawdown(returns, values)
    if isinstance(components, CalculationError):
        return _rejected("calmar_ratio", components)
    annualized, max_drawdown = components

    ratio = sentinel if max_drawdown == ZERO else annualized / max_drawdown

    result = CalmarRatioResult(
        calmar_ratio=round_decimal(ratio, 4),
        annualized_return=round_decimal(annualized, 6),
        max_drawdown=round_decimal(max_drawdown, 6),
    )
    logger.debug("risk_metrics.calmar_ratio.calculated", calmar_ratio=str(result.calmar_ratio))
    return result


def calculate_sterling_ratio(
    returns: Sequence[Decimal],
    values: Sequence[Decimal],
    threshold: Decimal = DEFAULT_STERLING_THRESHOLD,
    sentinel: Decimal = RATIO_SENTINEL,
    epsilon: Decimal = STERLING_EPSILON,
) -> SterlingRatioResult | CalculationError:
    """
    Calculate the Sterling ratio: annualized return over (max drawdown - threshold).

    When the adjusted drawdown is below ``epsilon`` (including negative
    values, i.e. drawdown shallower than the threshold) the ratio is the
    sentinel.

    Args:
        returns: Period returns (at least 2)
        values: Portfolio values, exactly one more than returns
        threshold: Drawdown allowance in [0, 1]
        sentinel: Ratio reported when the adjusted drawdown is negligible
        epsilon: Smallest adjusted drawdown used as a divisor

    Returns:
        SterlingRatioResult, or CalculationError (invalid_threshold when the
        threshold is out of range)
    """
    error = _validate_returns_and_values(returns, values)
    if error is None and not (ZERO <= threshold <= ONE):
        error = CalculationError(
            ErrorKind.INVALID_THRESHOLD,
            f"Sterling threshold must be between 0 and 1, got {threshold}",
        )
    if error is not None:
        return _rejected("sterling_ratio", error)

    components = _annualized_return_and_drawdown(returns, values)
    if isinstance(components, CalculationError):
        return _rejected("sterling_ratio", components)
    annualized, max_drawdown = components

    adjusted = max_drawdown - threshold
    ratio = sentinel if adjusted < epsilon else annualized / adjusted

    result = SterlingRatioResult(
        sterling_ratio=round_decimal(ratio, 4),
        annualized_return=round_decimal(annualized, 6),
        max_drawdown=round_decimal(max_drawdown, 6),
        adjusted_drawdown=round_decimal(adjusted, 6),
        threshold=threshold,
    )
    logger.debug("risk_metrics.sterling_ratio.calculated", sterling_ratio=str(result.sterling_ratio))
    return result


def z_score_for_confidence(
    confidence_level: Decimal,
    bands: Sequence[ZScoreBand] = DEFAULT_Z_SCORE_BANDS,
    default: Decimal = DEFAULT_Z_SCORE,
) -> Decimal:
    """
    Look up the one-tailed normal z-score for a confidence level.

    Bands are matched from the highest minimum confidence down; levels below
    every band use ``default``.

    Example:
        >>> z_score_for_confidence(Decimal("0.99"))
        Decimal('2.326')
    """
    for band in sorted(bands, key=lambda b: b.min_confidence, reverse=True):
        if confidence_level >= band.min_confidence:
            return band.z_score
    return default


def calculate_value_at_risk(
    returns: Sequence[Decimal],
    portfolio_value: Decimal,
    confidence_level: Decimal = DEFAULT_CONFIDENCE_LEVEL,
    z_score_bands: Sequence[ZScoreBand] = DEFAULT_Z_SCORE_BANDS,
    default_z_score: Decimal = DEFAULT_Z_SCORE,
) -> ValueAtRiskResult | CalculationError:
    """
    Calculate parametric (normal) Value at Risk.

    VaR return = mean - z * std_dev; the currency amount is the portfolio
    value times its magnitude.

    Args:
        returns: Period returns (at least 2)
        portfolio_value: Current portfolio value (> 0)
        confidence_level: Confidence strictly between 0 and 1
        z_score_bands: Confidence bands for the z-score lookup
        default_z_score: z-score below the lowest band

    Returns:
        ValueAtRiskResult, or CalculationError with kind insufficient_data,
        invalid_return_format, invalid_portfolio_value or
        invalid_confidence_level
    """
    error = validate_returns(returns)
    if error is None and not portfolio_value > ZERO:
        error = CalculationError(
            ErrorKind.INVALID_PORTFOLIO_VALUE,
            f"Portfolio value must be positive, got {portfolio_value}",
        )
    if error is None and not (ZERO < confidence_level < ONE):
        error = CalculationError(
            ErrorKind.INVALID_CONFIDENCE_LEVEL,
            f"Confidence level must be strictly between 0 and 1, got {confidence_level}",
        )
    if error is not None:
        return _rejected("value_at_risk", error)

    z_score = z_score_for_confidence(confidence_level, z_score_bands, default_z_score)
    expected_return = mean(returns)
    volatility = sample_std_dev(returns, expected_return)
    var_return = abs(expected_return - z_score * volatility)

    result = ValueAtRiskResult(
        var_amount=round_decimal(portfolio_value * var_return, 2),
        var_percentage=round_decimal(var_return * HUNDRED, 4),
        z_score=z_score,
        confidence_level=confidence_level,
        expected_return=round_decimal(expected_return, 6),
        volatility=round_decimal(volatility, 6),
    )
    logger.debug("risk_metrics.value_at_risk.calculated", var_amount=str(result.var_amount))
    return result


def calculate_information_ratio(
    portfolio_returns: Sequence[Decimal],
    benchmark_returns: Sequence[Decimal],
) -> InformationRatioResult | CalculationError:
    """
    Calculate the information ratio against a benchmark.

    Active return is the mean of per-period excess returns; tracking error
    is their sample standard deviation.

    Args:
        portfolio_returns: Portfolio period returns
        benchmark_returns: Benchmark period returns, same length

    Returns:
        InformationRatioResult (ratio 0 when tracking error is 0), or
        CalculationError with kind mismatched_return_periods,
        insufficient_data or invalid_return_format
    """
    error: CalculationError | None = None
    if len(portfolio_returns) != len(benchmark_returns):
        error = CalculationError(
            ErrorKind.MISMATCHED_RETURN_PERIODS,
            f"Portfolio has {len(portfolio_returns)} returns, benchmark has {len(benchmark_returns)}",
        )
    else:
        error = validate_returns(portfolio_returns) or validate_returns(benchmark_returns)
    if error is not None:
        return _rejected("information_ratio", error)

    active = excess_returns(portfolio_returns, benchmark_returns)
    active_return = mean(active)
    tracking_error = sample_std_dev(active, active_return)
    ratio = safe_divide(active_return, tracking_error)

    result = InformationRatioResult(
        information_ratio=round_decimal(ratio, 4),
        active_return=round_decimal(active_return, 6),
        tracking_error=round_decimal(tracking_error, 6),
    )
    logger.debug("risk_metrics.information_ratio.calculated", information_ratio=str(result.information_ratio))
    return result


def calculate_maximum_drawdown(values: Sequence[Decimal]) -> DrawdownResult | CalculationError:
    """Maximum drawdown of a value series (see ``drawdown.calculate_drawdown``)."""
    return calculate_drawdown(values)
