"""Risk analytics result models.

Immutable pydantic records returned by the risk, beta, drawdown and
correlation calculators. Every Decimal field is already rounded half-up by
the producing calculator (ratios 4 places, statistics 6, variances 8,
currency 2).
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class _Result(BaseModel):
    model_config = ConfigDict(frozen=True)


class SharpeRatioResult(_Result):
    """Sharpe ratio and its components."""

    sharpe_ratio: Decimal
    excess_return: Decimal
    volatility: Decimal
    risk_free_rate: Decimal  # Per-period rate (annual rate / periods per year)
    mean_return: Decimal


class SortinoRatioResult(_Result):
    """Sortino ratio and its components."""

    sortino_ratio: Decimal
    excess_return: Decimal
    downside_deviation: Decimal
    target_return: Decimal
    mean_return: Decimal


class CalmarRatioResult(_Result):
    """Calmar ratio (annualized return over maximum drawdown)."""

    calmar_ratio: Decimal
    annualized_return: Decimal
    max_drawdown: Decimal


class SterlingRatioResult(_Result):
    """Sterling ratio (annualized return over threshold-adjusted drawdown)."""

    sterling_ratio: Decimal
    annualized_return: Decimal
    max_drawdown: Decimal
    adjusted_drawdown: Decimal  # May be negative when drawdown < threshold
    threshold: Decimal


class ValueAtRiskResult(_Result):
    """Parametric Value at Risk."""

    var_amount: Decimal  # Currency loss at the confidence level
    var_percentage: Decimal  # Loss as percentage of portfolio value
    z_score: Decimal
    confidence_level: Decimal
    expected_return: Decimal
    volatility: Decimal


class InformationRatioResult(_Result):
    """Information ratio against a benchmark."""

    information_ratio: Decimal
    active_return: Decimal
    tracking_error: Decimal


class BetaResult(_Result):
    """Portfolio beta against a market series."""

    beta: Decimal
    covariance: Decimal
    portfolio_variance: Decimal
    market_variance: Decimal
    portfolio_mean: Decimal
    market_mean: Decimal


class DrawdownResult(_Result):
    """
    Maximum and current drawdown of a value series.

    Peak and trough describe the largest decline. When the series never
    declines both equal the overall peak and ``max_drawdown`` is zero.
    """

    max_drawdown: Decimal
    max_drawdown_percentage: Decimal
    current_drawdown: Decimal
    peak_value: Decimal
    trough_value: Decimal
    peak_index: int
    trough_index: int
    recovery_periods: int | None  # None while the max drawdown is unrecovered
    underwater_periods: int


class DrawdownPeriod(_Result):
    """
    Record of a drawdown episode (peak to trough to recovery).

    Indices refer to positions in the input value series.
    """

    drawdown_id: int
    drawdown: Decimal  # Fractional depth
    drawdown_percentage: Decimal
    peak_index: int
    trough_index: int
    recovery_index: int | None  # None if not recovered
    duration_periods: int  # Periods from peak to trough
    recovery_periods: int | None  # Periods from trough to recovery
    peak_value: Decimal
    trough_value: Decimal
    recovered: bool

    @property
    def total_periods_underwater(self) -> int | None:
        """Total periods from peak to recovery."""
        if self.recovery_index is None:
            return None
        return self.recovery_index - self.peak_index
