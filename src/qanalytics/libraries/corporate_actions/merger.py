"""Merger and spinoff basis calculations.

Pure functions covering the three merger forms plus spinoffs:

- Stock-for-stock: basis carries forward, no gain recognized
- Cash-for-stock: position closed, gain = cash - basis
- Mixed consideration: cash is recognized first, up to total basis, and the
  remaining basis carries to the new shares (conservative simplification,
  not a fair-market-value allocation)
- Spinoff: a percentage of the original basis moves to the new security

All validation failures come back as CalculationError values.
"""

from decimal import Decimal
from typing import Sequence

from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.corporate_actions.fifo import apply_fifo_batch
from qanalytics.libraries.corporate_actions.models import (
    AdjustmentType,
    CashMerger,
    MergerResult,
    MixedMerger,
    Spinoff,
    SpinoffResult,
    StockMerger,
    TransactionAdjustment,
    TransactionRecord,
)
from qanalytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

CREATED_BY = "merger_calculator"

ZERO = Decimal("0")
HUNDRED = Decimal("100")

MergerAction = StockMerger | CashMerger | MixedMerger


def _validate_position(quantity: Decimal, basis_per_share: Decimal | None) -> CalculationError | None:
    if quantity <= 0:
        return CalculationError(ErrorKind.INVALID_QUANTITY, "Quantity must be positive")
    if basis_per_share is None or basis_per_share <= 0:
        return CalculationError(ErrorKind.INVALID_BASIS, "Basis per share must be positive")
    return None


def _validate_exchange_ratio(exchange_ratio: Decimal) -> CalculationError | None:
    if exchange_ratio <= 0:
        return CalculationError(ErrorKind.INVALID_RATIO, "Exchange ratio must be positive")
    return None


def _validate_cash(cash_per_share: Decimal) -> CalculationError | None:
    if cash_per_share < 0:
        return CalculationError(ErrorKind.INVALID_CASH, "Cash per share cannot be negative")
    return None


def calculate_stock_merger(
    quantity: Decimal,
    basis_per_share: Decimal,
    exchange_ratio: Decimal,
) -> MergerResult | CalculationError:
    """
    Stock-for-stock merger: tax-deferred, total basis carries forward.

    Example:
        >>> result = calculate_stock_merger(Decimal("100"), Decimal("50"), Decimal("2"))
        >>> result.quantity, result.basis_per_share, result.gain_loss
        (Decimal('200'), Decimal('25'), Decimal('0'))
    """
    error = _validate_position(quantity, basis_per_share) or _validate_exchange_ratio(exchange_ratio)
    if error is not None:
        return error

    new_quantity = quantity * exchange_ratio
    total_basis = quantity * basis_per_share
    return MergerResult(
        quantity=new_quantity,
        basis_per_share=total_basis / new_quantity,
        total_basis=total_basis,
        original_basis=total_basis,
        cash_received=ZERO,
        gain_loss=ZERO,
        tax_event=False,
    )


def calculate_cash_merger(
    quantity: Decimal,
    basis_per_share: Decimal,
    cash_per_share: Decimal,
) -> MergerResult | CalculationError:
    """
    Cash-for-stock merger: the position closes and the full gain is recognized.

    Example:
        >>> result = calculate_cash_merger(Decimal("100"), Decimal("50"), Decimal("65"))
        >>> result.cash_received, result.gain_loss, result.quantity
        (Decimal('6500'), Decimal('1500'), Decimal('0'))
    """
    error = _validate_position(quantity, basis_per_share) or _validate_cash(cash_per_share)
    if error is not None:
        return error

    total_basis = quantity * basis_per_share
    cash_received = quantity * cash_per_share
    return MergerResult(
        quantity=ZERO,
        basis_per_share=None,
        total_basis=ZERO,
        original_basis=total_basis,
        cash_received=cash_received,
        gain_loss=cash_received - total_basis,
        tax_event=True,
    )


def calculate_mixed_merger(
    quantity: Decimal,
    basis_per_share: Decimal,
    exchange_ratio: Decimal,
    cash_per_share: Decimal,
) -> MergerResult | CalculationError:
    """
    Mixed stock and cash merger.

    Recognized gain = cash - min(cash, total basis); the basis not offset by
    cash is spread over the new shares.

    Args:
        quantity: Shares held (> 0)
        basis_per_share: Original basis per share (> 0)
        exchange_ratio: New shares per old share (> 0)
        cash_per_share: Cash paid per old share (>= 0)

    Returns:
        MergerResult, or CalculationError
    """
    error = (
        _validate_position(quantity, basis_per_share)
        or _validate_exchange_ratio(exchange_ratio)
        or _validate_cash(cash_per_share)
    )
    if error is not None:
        return error

    total_basis = quantity * basis_per_share
    new_quantity = quantity * exchange_ratio
    cash_received = quantity * cash_per_share
    basis_recovered = min(cash_received, total_basis)
    remaining_basis = total_basis - basis_recovered

    return MergerResult(
        quantity=new_quantity,
        basis_per_share=remaining_basis / new_quantity,
        total_basis=remaining_basis,
        original_basis=total_basis,
        cash_received=cash_received,
        gain_loss=cash_received - basis_recovered,
        tax_event=True,
    )


def calculate_spinoff(
    quantity: Decimal,
    basis_per_share: Decimal,
    spinoff_ratio: Decimal,
    allocation_percentage: Decimal,
) -> SpinoffResult | CalculationError:
    """
    Split original basis between retained shares and spun-off shares.

    Args:
        quantity: Shares held (> 0)
        basis_per_share: Original basis per share (> 0)
        spinoff_ratio: New shares received per share held (> 0)
        allocation_percentage: Percent of basis moved to the spinoff, in (0, 100]

    Returns:
        SpinoffResult, or CalculationError

    Example:
        >>> result = calculate_spinoff(Decimal("100"), Decimal("50"), Decimal("1"), Decimal("20"))
        >>> result.spinoff_quantity, result.spinoff_basis_per_share, result.original_basis_per_share
        (Decimal('100'), Decimal('10'), Decimal('40'))
    """
    error = _validate_position(quantity, basis_per_share)
    if error is None and spinoff_ratio <= 0:
        error = CalculationError(ErrorKind.INVALID_RATIO, "Spinoff ratio must be positive")
    if error is None and allocation_percentage <= 0:
        error = CalculationError(ErrorKind.INVALID_ALLOCATION, "Allocation percentage must be positive")
    if error is None and allocation_percentage > HUNDRED:
        error = CalculationError(ErrorKind.INVALID_ALLOCATION, "Allocation percentage cannot exceed 100%")
    if error is not None:
        return error

    total_basis = quantity * basis_per_share
    spinoff_quantity = quantity * spinoff_ratio
    spinoff_basis = total_basis * allocation_percentage / HUNDRED
    retained_basis = total_basis - spinoff_basis

    return SpinoffResult(
        original_basis_per_share=retained_basis / quantity,
        original_total_basis=retained_basis,
        spinoff_quantity=spinoff_quantity,
        spinoff_basis_per_share=spinoff_basis / spinoff_quantity,
        spinoff_total_basis=spinoff_basis,
        tax_event=False,
    )


def apply_merger(transaction: TransactionRecord, action: MergerAction) -> TransactionAdjustment | CalculationError:
    """Build the merger adjustment for one transaction, by merger kind."""
    quantity = transaction.quantity
    basis = transaction.price

    result: MergerResult | CalculationError
    if isinstance(action, StockMerger):
        result = calculate_stock_merger(quantity, basis, action.exchange_ratio)  # type: ignore[arg-type]
        adjustment_type = AdjustmentType.MERGER_STOCK_FOR_STOCK
        reason = f"Stock-for-stock merger: {action.exchange_ratio} exchange ratio"
    elif isinstance(action, CashMerger):
        result = calculate_cash_merger(quantity, basis, action.cash_per_share)  # type: ignore[arg-type]
        adjustment_type = AdjustmentType.MERGER_CASH_FOR_STOCK
        reason = f"Cash merger: ${action.cash_per_share} per share"
    else:
        result = calculate_mixed_merger(
            quantity,
            basis,  # type: ignore[arg-type]
            action.exchange_ratio,
            action.cash_per_share,
        )
        adjustment_type = AdjustmentType.MERGER_MIXED_CONSIDERATION
        reason = f"Mixed merger: {action.exchange_ratio} ratio + ${action.cash_per_share} cash"

    if isinstance(result, CalculationError):
        return result

    return TransactionAdjustment(
        transaction_id=transaction.transaction_id,
        corporate_action_id=action.action_id,
        adjustment_type=adjustment_type,
        reason=reason,
        created_by=CREATED_BY,
        original_quantity=quantity,
        adjusted_quantity=result.quantity,
        original_price=basis,
        adjusted_price=ZERO if result.basis_per_share is None else result.basis_per_share,
        gain_loss=result.gain_loss,
        cash_received=result.cash_received,
        tax_event=result.tax_event,
    )


def batch_apply_merger(
    transactions: Sequence[TransactionRecord],
    action: MergerAction,
) -> list[TransactionAdjustment] | CalculationError:
    """Apply a merger to every transaction, oldest purchase first."""
    adjustments = apply_fifo_batch(
        transactions,
        lambda txn: apply_merger(txn, action),
        "Failed to apply merger to some transactions",
    )
    if not isinstance(adjustments, CalculationError):
        logger.info(
            "merger.batch_applied",
            action_id=action.action_id,
            symbol=action.symbol,
            merger_kind=action.kind,
            adjustments=len(adjustments),
        )
    return adjustments


def apply_spinoff(
    transaction: TransactionRecord, action: Spinoff
) -> list[TransactionAdjustment] | CalculationError:
    """
    Build the adjustment pair for one transaction.

    The first record lowers the original position's basis; the second
    creates the new position (no transaction id, references the new security).
    """
    if not action.new_security_id:
        return CalculationError(ErrorKind.MISSING_PARAMETER, "New symbol is required for spinoff")

    result = calculate_spinoff(
        transaction.quantity,
        transaction.price,  # type: ignore[arg-type]
        action.spinoff_ratio,
        action.allocation_percentage,
    )
    if isinstance(result, CalculationError):
        return result

    original = TransactionAdjustment(
        transaction_id=transaction.transaction_id,
        corporate_action_id=action.action_id,
        adjustment_type=AdjustmentType.SPINOFF_ORIGINAL,
        reason="Spinoff basis allocation - original shares",
        created_by=CREATED_BY,
        original_quantity=transaction.quantity,
        adjusted_quantity=transaction.quantity,
        original_price=transaction.price,
        adjusted_price=result.original_basis_per_share,
    )
    new_shares = TransactionAdjustment(
        transaction_id=None,
        corporate_action_id=action.action_id,
        adjustment_type=AdjustmentType.SPINOFF_NEW_SHARES,
        reason=f"Spinoff new shares - {action.spinoff_ratio} ratio",
        created_by=CREATED_BY,
        original_quantity=ZERO,
        adjusted_quantity=result.spinoff_quantity,
        original_price=ZERO,
        adjusted_price=result.spinoff_basis_per_share,
        new_security_id=action.new_security_id,
    )
    return [original, new_shares]


def batch_apply_spinoff(
    transactions: Sequence[TransactionRecord],
    action: Spinoff,
) -> list[TransactionAdjustment] | CalculationError:
    """
    Apply a spinoff to every transaction, oldest purchase first.

    Both records of a transaction's pair share its FIFO lot order.
    """
    if not action.new_security_id:
        return CalculationError(ErrorKind.MISSING_PARAMETER, "New symbol is required for spinoff")

    adjustments = apply_fifo_batch(
        transactions,
        lambda txn: apply_spinoff(txn, action),
        "Failed to apply spinoff to some transactions",
    )
    if not isinstance(adjustments, CalculationError):
        logger.info(
            "merger.spinoff_applied",
            action_id=action.action_id,
            symbol=action.symbol,
            new_security_id=action.new_security_id,
            adjustments=len(adjustments),
        )
    return adjustments
