"""
Corporate Action Library.

Pure calculators turning corporate actions into transaction adjustments.

Architecture:
- models.py: Transaction, action (discriminated union) and adjustment records
- stock_split.py: Split quantity/price adjustments
- merger.py: Stock, cash and mixed mergers plus spinoffs
- dividend.py: Cash dividends, tax classification, withholding
- fifo.py: Oldest-first batch ordering and lot order stamping
- applier.py: Dispatch by action kind, effective-date filtering, preview

Usage:
    >>> from qanalytics.libraries.corporate_actions import StockSplit, apply_corporate_action
    >>> split = StockSplit(action_id="ca-1", symbol="AAPL", effective_date=date(2024, 6, 10),
    ...                    ratio_from=Decimal("1"), ratio_to=Decimal("4"))
    >>> adjustments = apply_corporate_action(split, transactions)
"""

from qanalytics.libraries.corporate_actions.applier import (
    apply_corporate_action,
    calculate_adjustments,
    preview_corporate_action,
    select_affected_transactions,
)
from qanalytics.libraries.corporate_actions.dividend import (
    apply_dividend,
    batch_apply_dividends,
    calculate_dividend_payment,
    calculate_tax_withholding,
    classify_dividend_tax_status,
)
from qanalytics.libraries.corporate_actions.merger import (
    apply_merger,
    apply_spinoff,
    batch_apply_merger,
    batch_apply_spinoff,
    calculate_cash_merger,
    calculate_mixed_merger,
    calculate_spinoff,
    calculate_stock_merger,
)
from qanalytics.libraries.corporate_actions.models import (
    ActionStatus,
    AdjustmentPreview,
    AdjustmentType,
    CashDividend,
    CashMerger,
    CorporateAction,
    DividendPayment,
    MergerResult,
    MixedMerger,
    Spinoff,
    SpinoffResult,
    SplitResult,
    StockMerger,
    StockSplit,
    TaxStatus,
    TransactionAdjustment,
    TransactionRecord,
    parse_corporate_action,
)
from qanalytics.libraries.corporate_actions.stock_split import apply_split, batch_apply_split, calculate_split

__all__ = [
    # Dispatch
    "apply_corporate_action",
    "calculate_adjustments",
    "preview_corporate_action",
    "select_affected_transactions",
    # Stock split
    "calculate_split",
    "apply_split",
    "batch_apply_split",
    # Merger / spinoff
    "calculate_stock_merger",
    "calculate_cash_merger",
    "calculate_mixed_merger",
    "calculate_spinoff",
    "apply_merger",
    "apply_spinoff",
    "batch_apply_merger",
    "batch_apply_spinoff",
    # Dividend
    "calculate_dividend_payment",
    "classify_dividend_tax_status",
    "calculate_tax_withholding",
    "apply_dividend",
    "batch_apply_dividends",
    # Models
    "ActionStatus",
    "AdjustmentPreview",
    "AdjustmentType",
    "CashDividend",
    "CashMerger",
    "CorporateAction",
    "DividendPayment",
    "MergerResult",
    "MixedMerger",
    "Spinoff",
    "SpinoffResult",
    "SplitResult",
    "StockMerger",
    "StockSplit",
    "TaxStatus",
    "TransactionAdjustment",
    "TransactionRecord",
    "parse_corporate_action",
]
