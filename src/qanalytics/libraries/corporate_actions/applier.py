"""Dispatch corporate actions to their calculators.

Selects the transactions an action affects (the action's symbol, purchased
before the effective date) and routes them to the batch calculator for the action's
kind. Nothing is persisted; callers receive the adjustments to store.

Usage:
    >>> from qanalytics.libraries.corporate_actions import applier
    >>>
    >>> preview = applier.preview_corporate_action(split, transactions)
    >>> print(preview.affected_transactions)
    >>> adjustments = applier.apply_corporate_action(split, transactions)
"""

from typing import Iterable, Sequence

from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.corporate_actions.dividend import batch_apply_dividends
from qanalytics.libraries.corporate_actions.fifo import fifo_order
from qanalytics.libraries.corporate_actions.merger import batch_apply_merger, batch_apply_spinoff
from qanalytics.libraries.corporate_actions.models import (
    ActionStatus,
    AdjustmentPreview,
    CashDividend,
    CashMerger,
    CorporateAction,
    MixedMerger,
    Spinoff,
    StockMerger,
    StockSplit,
    TransactionAdjustment,
    TransactionRecord,
)
from qanalytics.libraries.corporate_actions.stock_split import batch_apply_split
from qanalytics.system.config import DividendConfig
from qanalytics.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


def select_affected_transactions(
    transactions: Iterable[TransactionRecord],
    action: CorporateAction,
) -> list[TransactionRecord]:
    """
    Transactions the action applies to, oldest first.

    A transaction is affected when it was purchased strictly before the
    effective date and holds the action's symbol. Transactions without a
    symbol are assumed to belong to the action's security.
    """
    return fifo_order(
        txn
        for txn in transactions
        if txn.purchase_date < action.effective_date and txn.symbol in (None, action.symbol)
    )


def calculate_adjustments(
    action: CorporateAction,
    transactions: Sequence[TransactionRecord],
    dividend_config: DividendConfig | None = None,
) -> list[TransactionAdjustment] | CalculationError:
    """
    Run the batch calculator matching the action's kind.

    Transactions are used as given; see ``apply_corporate_action`` for
    effective-date filtering.

    Args:
        action: Corporate action variant
        transactions: Transactions to adjust
        dividend_config: Rounding, holding-period and withholding settings for dividends

    Returns:
        Adjustments in FIFO order, or CalculationError
    """
    if isinstance(action, StockSplit):
        return batch_apply_split(transactions, action)
    if isinstance(action, (StockMerger, CashMerger, MixedMerger)):
        return batch_apply_merger(transactions, action)
    if isinstance(action, Spinoff):
        return batch_apply_spinoff(transactions, action)
    if isinstance(action, CashDividend):
        config = dividend_config or DividendConfig()
        return batch_apply_dividends(
            transactions,
            action,
            round_to_penny=config.round_to_penny,
            min_holding_period_days=config.min_holding_period_days,
            rates=config.withholding,
        )
    raise ValueError(f"Unsupported corporate action: {type(action).__name__}")


def apply_corporate_action(
    action: CorporateAction,
    transactions: Iterable[TransactionRecord],
    dividend_config: DividendConfig | None = None,
) -> list[TransactionAdjustment] | CalculationError:
    """
    Compute adjustments for every transaction the action affects.

    Returns:
        Adjustments (empty when nothing predates the effective date), or
        CalculationError with kind action_not_pending when the action was
        already applied, reversed or cancelled
    """
    if action.status != ActionStatus.PENDING:
        logger.debug("corporate_action.rejected", action_id=action.action_id, status=action.status.value)
        return CalculationError(
            ErrorKind.ACTION_NOT_PENDING,
            f"Corporate action is already {action.status.value}",
        )

    affected = select_affected_transactions(transactions, action)
    logger.debug(
        "corporate_action.applying",
        action_id=action.action_id,
        kind=action.kind,
        affected_transactions=len(affected),
    )
    return calculate_adjustments(action, affected, dividend_config)


def preview_corporate_action(
    action: CorporateAction,
    transactions: Iterable[TransactionRecord],
) -> AdjustmentPreview:
    """Summarize which transactions an action would touch, without calculating."""
    affected = select_affected_transactions(transactions, action)
    per_transaction = 2 if isinstance(action, Spinoff) else 1
    return AdjustmentPreview(
        action_id=action.action_id,
        kind=action.kind,
        effective_date=action.effective_date,
        affected_transactions=len(affected),
        estimated_adjustments=len(affected) * per_transaction,
        transaction_ids=[txn.transaction_id for txn in affected],
    )
