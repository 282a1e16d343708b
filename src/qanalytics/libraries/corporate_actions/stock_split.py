"""Stock split adjustments.

A split with ratio ``to:from`` multiplies quantity by to/from and divides
price by the same factor, so quantity * price is conserved exactly.

Usage:
    >>> from decimal import Decimal
    >>> from qanalytics.libraries.corporate_actions import stock_split
    >>>
    >>> result = stock_split.calculate_split(Decimal("100"), Decimal("150"), Decimal("1"), Decimal("2"))
    >>> result.quantity, result.price
    (Decimal('200'), Decimal('75'))
"""

from decimal import Decimal
from typing import Sequence

from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.corporate_actions.fifo import apply_fifo_batch
from qanalytics.libraries.corporate_actions.models import (
    AdjustmentType,
    SplitResult,
    StockSplit,
    TransactionAdjustment,
    TransactionRecord,
)
from qanalytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

CREATED_BY = "stock_split_calculator"


def calculate_split(
    quantity: Decimal,
    price: Decimal | None,
    ratio_from: Decimal,
    ratio_to: Decimal,
) -> SplitResult | CalculationError:
    """
    Apply a split ratio to one position.

    Args:
        quantity: Shares held (> 0)
        price: Price per share (> 0)
        ratio_from: Old shares in the ratio (> 0)
        ratio_to: New shares in the ratio (> 0)

    Returns:
        SplitResult, or CalculationError with kind invalid_quantity,
        invalid_price or invalid_ratio
    """
    if quantity <= 0:
        return CalculationError(ErrorKind.INVALID_QUANTITY, "Quantity must be positive")
    if price is None or price <= 0:
        return CalculationError(ErrorKind.INVALID_PRICE, "Price must be positive")
    if ratio_from <= 0 or ratio_to <= 0:
        return CalculationError(ErrorKind.INVALID_RATIO, "Invalid split ratio - both values must be positive")

    split_factor = ratio_to / ratio_from
    return SplitResult(
        quantity=quantity * split_factor,
        price=price / split_factor,
        split_factor=split_factor,
    )


def apply_split(transaction: TransactionRecord, action: StockSplit) -> TransactionAdjustment | CalculationError:
    """Build the quantity/price adjustment for one transaction."""
    result = calculate_split(transaction.quantity, transaction.price, action.ratio_from, action.ratio_to)
    if isinstance(result, CalculationError):
        return result

    return TransactionAdjustment(
        transaction_id=transaction.transaction_id,
        corporate_action_id=action.action_id,
        adjustment_type=AdjustmentType.QUANTITY_PRICE,
        reason=f"{action.ratio_to}:{action.ratio_from} stock split - {action.description}",
        created_by=CREATED_BY,
        original_quantity=transaction.quantity,
        adjusted_quantity=result.quantity,
        original_price=transaction.price,
        adjusted_price=result.price,
    )


def batch_apply_split(
    transactions: Sequence[TransactionRecord],
    action: StockSplit,
) -> list[TransactionAdjustment] | CalculationError:
    """
    Apply a split to every transaction, oldest purchase first.

    Returns:
        Adjustments stamped with 1-based FIFO lot order, or
        CalculationError(kind=batch_failed) if any transaction is invalid
    """
    adjustments = apply_fifo_batch(
        transactions,
        lambda txn: apply_split(txn, action),
        "Failed to apply split to some transactions",
    )
    if not isinstance(adjustments, CalculationError):
        logger.info(
            "stock_split.batch_applied",
            action_id=action.action_id,
            symbol=action.symbol,
            ratio=f"{action.ratio_to}:{action.ratio_from}",
            adjustments=len(adjustments),
        )
    return adjustments
