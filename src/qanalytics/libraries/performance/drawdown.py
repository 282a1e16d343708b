"""Drawdown analysis over portfolio value series.

Usage:
    >>> from decimal import Decimal
    >>> from qanalytics.libraries.performance import drawdown
    >>>
    >>> values = [Decimal("100000"), Decimal("120000"), Decimal("80000"), Decimal("110000")]
    >>> result = drawdown.calculate_drawdown(values)
    >>> result.max_drawdown
    Decimal('0.333333')
    >>> result.recovery_periods is None
    True
"""

from decimal import Decimal
from typing import Sequence

from qanalytics.core.decimal_math import ONE, ZERO, round_decimal, safe_divide
from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.performance.models import DrawdownPeriod, DrawdownResult
from qanalytics.libraries.performance.statistics import validate_values
from qanalytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

HUNDRED = Decimal("100")


def _decline(peak: Decimal, value: Decimal) -> Decimal:
    return safe_divide(peak - value, peak)


def _find_recovery_index(values: Sequence[Decimal], trough_index: int, peak_value: Decimal) -> int | None:
    for index in range(trough_index + 1, len(values)):
        if values[index] >= peak_value:
            return index
    return None


def calculate_drawdown(values: Sequence[Decimal]) -> DrawdownResult | CalculationError:
    """
    Calculate maximum drawdown, current drawdown and recovery characteristics.

    Single pass over the series tracking the running peak. Each value's
    decline from the running peak is compared against the largest seen so
    far; values below the running peak count as underwater periods.

    Args:
        values: Portfolio values (at least 2, all strictly positive)

    Returns:
        DrawdownResult, or CalculationError with kind insufficient_data,
        invalid_value_format or non_positive_values

    Example:
        >>> calculate_drawdown([Decimal("100"), Decimal("110"), Decimal("120")]).max_drawdown
        Decimal('0.000000')
    """
    error = validate_values(values)
    if error is not None:
        logger.debug("drawdown.rejected", error_kind=error.kind.value)
        return error

    running_peak = values[0]
    running_peak_index = 0
    max_drawdown = ZERO
    max_peak = values[0]
    max_trough = values[0]
    max_peak_index = 0
    max_trough_index = 0
    underwater_periods = 0

    for index, value in enumerate(values):
        if value > running_peak:
            running_peak = value
            running_peak_index = index

        decline = _decline(running_peak, value)
        if decline > max_drawdown:
            max_drawdown = decline
            max_peak = running_peak
            max_trough = value
            max_peak_index = running_peak_index
            max_trough_index = index

        if value < running_peak:
            underwater_periods += 1

    current_drawdown = _decline(running_peak, values[-1])

    recovery_periods: int | None
    if max_drawdown == ZERO:
        recovery_periods = 0
        # No decline: report the overall high as both ends.
        max_peak = max_trough = running_peak
        max_peak_index = max_trough_index = running_peak_index
    else:
        recovery_index = _find_recovery_index(values, max_trough_index, max_peak)
        recovery_periods = None if recovery_index is None else recovery_index - max_trough_index

    result = DrawdownResult(
        max_drawdown=round_decimal(max_drawdown, 6),
        max_drawdown_percentage=round_decimal(max_drawdown * HUNDRED, 2),
        current_drawdown=round_decimal(current_drawdown, 6),
        peak_value=max_peak,
        trough_value=max_trough,
        peak_index=max_peak_index,
        trough_index=max_trough_index,
        recovery_periods=recovery_periods,
        underwater_periods=underwater_periods,
    )

    logger.debug(
        "drawdown.calculated",
        max_drawdown_pct=str(result.max_drawdown_percentage),
        underwater_periods=underwater_periods,
    )
    return result


def calculate_drawdown_history(values: Sequence[Decimal], threshold: Decimal) -> list[DrawdownPeriod] | CalculationError:
    """
    Identify discrete drawdown episodes deeper than a threshold.

    An episode opens when a value falls below the current peak, follows the
    lowest trough while underwater, and closes at the first value that gets
    back to the episode's peak. The next episode starts from that recovery
    point. An episode still open at the end of the series is reported with
    ``recovery_index=None``.

    Args:
        values: Portfolio values (at least 2, all strictly positive)
        threshold: Minimum fractional depth to report, strictly between 0 and 1

    Returns:
        Episodes in chronological order (numbered from 1), or CalculationError

    Example:
        >>> values = [Decimal("100"), Decimal("120"), Decimal("90"), Decimal("130"), Decimal("100")]
        >>> [p.drawdown_percentage for p in calculate_drawdown_history(values, Decimal("0.15"))]
        [Decimal('25.00'), Decimal('23.08')]
    """
    error = validate_values(values)
    if error is None and not (ZERO < threshold < ONE):
        error = CalculationError(
            ErrorKind.INVALID_THRESHOLD,
            f"Drawdown threshold must be strictly between 0 and 1, got {threshold}",
        )
    if error is not None:
        logger.debug("drawdown.history_rejected", error_kind=error.kind.value)
        return error

    # (peak_index, trough_index, recovery_index)
    episodes: list[tuple[int, int, int | None]] = []
    peak_index = 0
    trough_index: int | None = None

    for index in range(1, len(values)):
        value = values[index]
        if trough_index is None:
            if value >= values[peak_index]:
                peak_index = index
            else:
                trough_index = index
        elif value >= values[peak_index]:
            episodes.append((peak_index, trough_index, index))
            peak_index = index
            trough_index = None
        elif value < values[trough_index]:
            trough_index = index

    if trough_index is not None:
        episodes.append((peak_index, trough_index, None))

    periods: list[DrawdownPeriod] = []
    for peak_idx, trough_idx, recovery_idx in episodes:
        depth = _decline(values[peak_idx], values[trough_idx])
        if depth < threshold:
            continue
        periods.append(
            DrawdownPeriod(
                drawdown_id=len(periods) + 1,
                drawdown=round_decimal(depth, 6),
                drawdown_percentage=round_decimal(depth * HUNDRED, 2),
                peak_index=peak_idx,
                trough_index=trough_idx,
                recovery_index=recovery_idx,
                duration_periods=trough_idx - peak_idx,
                recovery_periods=None if recovery_idx is None else recovery_idx - trough_idx,
                peak_value=values[peak_idx],
                trough_value=values[trough_idx],
                recovered=recovery_idx is not None,
            )
        )

    logger.debug("drawdown.history_calculated", episodes=len(episodes), reported=len(periods))
    return periods
