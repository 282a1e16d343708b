"""Risk analytics library for return and value series.

This library provides decimal-exact portfolio risk analysis:

1. **Models** (`models.py`): Frozen pydantic result records
   - SharpeRatioResult, SortinoRatioResult, CalmarRatioResult,
     SterlingRatioResult, ValueAtRiskResult, InformationRatioResult
   - BetaResult, DrawdownResult, DrawdownPeriod

2. **Statistics** (`statistics.py`): Mean, sample variance/std-dev,
   downside deviation, covariance, geometric mean, annualization

3. **Metrics** (`metrics.py`): Sharpe, Sortino, Calmar, Sterling,
   Value at Risk, Information ratio

4. **Beta** (`beta.py`), **Drawdown** (`drawdown.py`),
   **Correlation** (`correlation.py`): correlation/covariance pairs,
   matrices and rolling windows

Usage:
    >>> from qanalytics.libraries.performance import calculate_sharpe_ratio
    >>> result = calculate_sharpe_ratio(returns, risk_free_rate=Decimal("0.02"))
    >>> if isinstance(result, CalculationError):
    ...     print(result.kind)

Design Principles:
    - Decimal precision for financial calculations
    - Expected failures come back as CalculationError values
    - Explicit edge case handling (zero variance, zero drawdown)
"""

from qanalytics.libraries.performance.beta import calculate_beta
from qanalytics.libraries.performance.correlation import (
    calculate_correlation,
    calculate_correlation_matrix,
    calculate_covariance,
    calculate_covariance_matrix,
    calculate_rolling_correlation,
)
from qanalytics.libraries.performance.drawdown import calculate_drawdown, calculate_drawdown_history

# Pure calculation functions
from qanalytics.libraries.performance.metrics import (
    calculate_calmar_ratio,
    calculate_information_ratio,
    calculate_maximum_drawdown,
    calculate_sharpe_ratio,
    calculate_sortino_ratio,
    calculate_sterling_ratio,
    calculate_value_at_risk,
    z_score_for_confidence,
)

# Models
from qanalytics.libraries.performance.models import (
    BetaResult,
    CalmarRatioResult,
    DrawdownPeriod,
    DrawdownResult,
    InformationRatioResult,
    SharpeRatioResult,
    SortinoRatioResult,
    SterlingRatioResult,
    ValueAtRiskResult,
)

__all__ = [
    # Risk metrics
    "calculate_sharpe_ratio",
    "calculate_sortino_ratio",
    "calculate_calmar_ratio",
    "calculate_sterling_ratio",
    "calculate_value_at_risk",
    "calculate_information_ratio",
    "calculate_maximum_drawdown",
    "z_score_for_confidence",
    # Beta
    "calculate_beta",
    # Drawdown
    "calculate_drawdown",
    "calculate_drawdown_history",
    # Correlation / covariance
    "calculate_correlation",
    "calculate_correlation_matrix",
    "calculate_rolling_correlation",
    "calculate_covariance",
    "calculate_covariance_matrix",
    # Models
    "SharpeRatioResult",
    "SortinoRatioResult",
    "CalmarRatioResult",
    "SterlingRatioResult",
    "ValueAtRiskResult",
    "InformationRatioResult",
    "BetaResult",
    "DrawdownResult",
    "DrawdownPeriod",
]
