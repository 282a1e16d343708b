"""FIFO ordering for batch corporate action application.

Batches process transactions oldest first and stamp each resulting
adjustment with its 1-based lot position, so the caller's ledger keeps
first-in-first-out cost basis ordering through the action.
"""

from typing import Callable, Iterable, Sequence

from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.corporate_actions.models import TransactionAdjustment, TransactionRecord
from qanalytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

AdjustmentOutcome = TransactionAdjustment | list[TransactionAdjustment] | CalculationError


def fifo_order(transactions: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    """Sort transactions by purchase date, oldest first (stable for same-day lots)."""
    return sorted(transactions, key=lambda txn: txn.purchase_date)


def apply_fifo_batch(
    transactions: Sequence[TransactionRecord],
    apply_one: Callable[[TransactionRecord], AdjustmentOutcome],
    failure_message: str,
) -> list[TransactionAdjustment] | CalculationError:
    """
    Apply ``apply_one`` to each transaction in FIFO order.

    Every adjustment produced for the n-th oldest transaction is stamped with
    ``fifo_lot_order=n``. The batch stops at the first failing transaction.

    Args:
        transactions: Affected transactions in any order
        apply_one: Per-transaction calculator returning one adjustment, a
            list of adjustments, or a CalculationError
        failure_message: Message prefix for the batch_failed error

    Returns:
        Adjustments in FIFO order, or CalculationError(kind=batch_failed)
        naming the failing transaction and the underlying reason
    """
    adjustments: list[TransactionAdjustment] = []
    for lot_order, txn in enumerate(fifo_order(transactions), start=1):
        outcome = apply_one(txn)
        if isinstance(outcome, CalculationError):
            logger.warning(
                "corporate_action.batch_failed",
                transaction_id=txn.transaction_id,
                error_kind=outcome.kind.value,
            )
            return CalculationError(
                ErrorKind.BATCH_FAILED,
                f"{failure_message} (transaction {txn.transaction_id}: {outcome.message})",
            )
        produced = outcome if isinstance(outcome, list) else [outcome]
        adjustments.extend(adj.model_copy(update={"fifo_lot_order": lot_order}) for adj in produced)
    return adjustments
