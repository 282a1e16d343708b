"""Tests for corporate action dispatch and preview."""

from datetime import date
from decimal import Decimal

import pytest

from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.corporate_actions.applier import (
    apply_corporate_action,
    calculate_adjustments,
    preview_corporate_action,
    select_affected_transactions,
)
from qanalytics.libraries.corporate_actions.models import (
    ActionStatus,
    AdjustmentType,
    CashDividend,
    CashMerger,
    MixedMerger,
    Spinoff,
    StockMerger,
    StockSplit,
    TransactionRecord,
)
from qanalytics.system.config import DividendConfig, WithholdingRates

# Between txn-2 (2024-03-15) and txn-3 (2024-05-20)
EFFECTIVE = date(2024, 4, 1)


@pytest.fixture
def split() -> StockSplit:
    return StockSplit(
        action_id="split-1",
        symbol="AAPL",
        effective_date=EFFECTIVE,
        ratio_from=Decimal("1"),
        ratio_to=Decimal("4"),
    )


class TestSelection:
    """Test effective-date filtering."""

    def test_only_earlier_purchases(self, split, transactions):
        """Test lots bought on or after the effective date are skipped."""
        affected = select_affected_transactions(transactions, split)
        assert [txn.transaction_id for txn in affected] == ["txn-1", "txn-2"]

    def test_same_day_purchase_excluded(self, transactions):
        """Test a purchase on the ex-date is not affected."""
        action = StockSplit(
            action_id="split-2",
            symbol="AAPL",
            effective_date=date(2024, 3, 15),
            ratio_from=Decimal("1"),
            ratio_to=Decimal("2"),
        )
        affected = select_affected_transactions(transactions, action)
        assert [txn.transaction_id for txn in affected] == ["txn-1"]

    def test_other_symbols_skipped(self, split, transactions):
        """Test lots for another symbol are not affected."""
        other = [
            TransactionRecord(
                transaction_id="msft-1",
                quantity=Decimal("10"),
                price=Decimal("300"),
                purchase_date=date(2024, 1, 5),
                symbol="MSFT",
            ),
            TransactionRecord(
                transaction_id="untagged-1",
                quantity=Decimal("5"),
                price=Decimal("140"),
                purchase_date=date(2024, 1, 2),
            ),
        ]

        affected = select_affected_transactions(transactions + other, split)

        assert [txn.transaction_id for txn in affected] == ["untagged-1", "txn-1", "txn-2"]


class TestPreview:
    """Test dry-run previews."""

    def test_split_preview(self, split, transactions):
        """Test one adjustment per affected lot."""
        preview = preview_corporate_action(split, transactions)

        assert preview.action_id == "split-1"
        assert preview.kind == "stock_split"
        assert preview.affected_transactions == 2
        assert preview.estimated_adjustments == 2
        assert preview.transaction_ids == ["txn-1", "txn-2"]

    def test_spinoff_preview(self, transactions):
        """Test spinoffs estimate two adjustments per lot."""
        action = Spinoff(action_id="s-1", symbol="AAPL", effective_date=EFFECTIVE, new_security_id="NEWCO")
        preview = preview_corporate_action(action, transactions)
        assert preview.estimated_adjustments == 4

    def test_empty_preview(self, split):
        """Test preview with no transactions."""
        preview = preview_corporate_action(split, [])
        assert preview.affected_transactions == 0
        assert preview.transaction_ids == []


class TestApply:
    """Test dispatch to calculators."""

    def test_apply_split(self, split, transactions):
        """Test only affected lots are adjusted."""
        adjustments = apply_corporate_action(split, transactions)

        assert [a.transaction_id for a in adjustments] == ["txn-1", "txn-2"]
        assert adjustments[0].adjusted_quantity == Decimal("400")
        assert adjustments[0].adjusted_price == Decimal("37.5")

    def test_nothing_affected(self, transactions):
        """Test an action before every purchase adjusts nothing."""
        action = StockSplit(
            action_id="split-0",
            symbol="AAPL",
            effective_date=date(2023, 1, 1),
            ratio_from=Decimal("1"),
            ratio_to=Decimal("2"),
        )
        assert apply_corporate_action(action, transactions) == []

    @pytest.mark.parametrize(
        "action,adjustment_type",
        [
            (
                StockMerger(action_id="m", symbol="AAPL", effective_date=EFFECTIVE, exchange_ratio=Decimal("2")),
                AdjustmentType.MERGER_STOCK_FOR_STOCK,
            ),
            (
                CashMerger(action_id="m", symbol="AAPL", effective_date=EFFECTIVE, cash_per_share=Decimal("200")),
                AdjustmentType.MERGER_CASH_FOR_STOCK,
            ),
            (
                MixedMerger(
                    action_id="m",
                    symbol="AAPL",
                    effective_date=EFFECTIVE,
                    exchange_ratio=Decimal("1"),
                    cash_per_share=Decimal("10"),
                ),
                AdjustmentType.MERGER_MIXED_CONSIDERATION,
            ),
            (
                CashDividend(action_id="d", symbol="AAPL", effective_date=EFFECTIVE, dividend_per_share=Decimal("1")),
                AdjustmentType.CASH_RECEIPT,
            ),
        ],
    )
    def test_dispatch_by_kind(self, action, adjustment_type, transactions):
        """Test each kind is routed to its calculator."""
        adjustments = calculate_adjustments(action, transactions)
        assert len(adjustments) == 3
        assert all(a.adjustment_type == adjustment_type for a in adjustments)

    def test_spinoff_dispatch(self, transactions):
        """Test spinoff produces pairs."""
        action = Spinoff(action_id="s-1", symbol="AAPL", effective_date=EFFECTIVE, new_security_id="NEWCO")
        adjustments = apply_corporate_action(action, transactions)
        assert len(adjustments) == 4

    def test_dividend_config(self, transactions):
        """Test dividend rounding and holding period come from config."""
        action = CashDividend(
            action_id="d-1",
            symbol="AAPL",
            effective_date=EFFECTIVE,
            dividend_per_share=Decimal("0.3333"),
            qualified=True,
        )
        config = DividendConfig(round_to_penny=True, min_holding_period_days=10)
        adjustments = apply_corporate_action(action, transactions, dividend_config=config)

        assert [a.total_dividend for a in adjustments] == [Decimal("33.33"), Decimal("16.67")]
        assert all(a.dividend_tax_status == "qualified" for a in adjustments)

    def test_errors_propagate(self, transactions):
        """Test calculator errors are returned, not raised."""
        action = StockMerger(action_id="m", symbol="AAPL", effective_date=EFFECTIVE, exchange_ratio=Decimal("0"))
        result = apply_corporate_action(action, transactions)
        assert isinstance(result, CalculationError)
        assert result.kind == ErrorKind.BATCH_FAILED

    def test_mixed_symbol_list(self, transactions):
        """Test a split only adjusts lots of its own symbol."""
        split = StockSplit(
            action_id="split-1",
            symbol="AAPL",
            effective_date=EFFECTIVE,
            ratio_from=Decimal("1"),
            ratio_to=Decimal("2"),
        )
        msft = TransactionRecord(
            transaction_id="msft-1",
            quantity=Decimal("10"),
            price=Decimal("300"),
            purchase_date=date(2024, 1, 5),
            symbol="MSFT",
        )

        adjustments = apply_corporate_action(split, transactions + [msft])

        assert [a.transaction_id for a in adjustments] == ["txn-1", "txn-2"]

    def test_dividend_withholding_from_config(self, transactions):
        """Test withholding rates come from config."""
        action = CashDividend(
            action_id="d-2",
            symbol="AAPL",
            effective_date=EFFECTIVE,
            dividend_per_share=Decimal("1.00"),
        )
        config = DividendConfig(withholding=WithholdingRates(ordinary=Decimal("0.30")))

        adjustments = apply_corporate_action(action, transactions, dividend_config=config)

        assert [a.dividend_tax_status for a in adjustments] == ["ordinary", "ordinary"]
        assert [a.tax_withheld for a in adjustments] == [Decimal("30"), Decimal("15")]

    @pytest.mark.parametrize("status", [ActionStatus.APPLIED, ActionStatus.REVERSED, ActionStatus.CANCELLED])
    def test_only_pending_actions_apply(self, status, transactions):
        """Test actions past the pending state are rejected."""
        action = StockSplit(
            action_id="split-1",
            symbol="AAPL",
            effective_date=EFFECTIVE,
            ratio_from=Decimal("1"),
            ratio_to=Decimal("2"),
            status=status,
        )

        result = apply_corporate_action(action, transactions)

        assert isinstance(result, CalculationError)
        assert result.kind == ErrorKind.ACTION_NOT_PENDING
        assert status.value in result.message
