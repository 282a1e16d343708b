"""Unit tests for CLI UI formatters.

Tests the Rich table formatters and row builders.
"""

from datetime import date
from decimal import Decimal

from rich.table import Table

from qanalytics.cli.ui.formatters import (
    add_adjustment_row,
    add_metric_row,
    create_adjustments_table,
    create_matrix_table,
    create_preview_table,
    create_risk_metrics_table,
    format_decimal,
)
from qanalytics.core.errors import CalculationError, ErrorKind
from qanalytics.libraries.corporate_actions.models import AdjustmentPreview, AdjustmentType, TransactionAdjustment
from qanalytics.libraries.performance.models import SharpeRatioResult


class TestFormatDecimal:
    """Test Decimal rendering."""

    def test_no_exponent(self):
        """Test exponent notation is expanded."""
        assert format_decimal(Decimal("1E+2")) == "100"
        assert format_decimal(Decimal("0.046000")) == "0.046000"

    def test_none(self):
        """Test missing values render as a dash."""
        assert format_decimal(None) == "-"


class TestRiskMetricsTable:
    """Test metric table creation and population."""

    def test_create_table(self):
        """Test table has Metric, Value and Details columns."""
        table = create_risk_metrics_table("Risk Metrics (5 periods)")

        assert isinstance(table, Table)
        assert table.title == "Risk Metrics (5 periods)"
        assert [column.header for column in table.columns] == ["Metric", "Value", "Details"]

    def test_add_result_row(self):
        """Test adding a successful metric."""
        table = create_risk_metrics_table()
        result = SharpeRatioResult(
            sharpe_ratio=Decimal("1.9772"),
            excess_return=Decimal("0.041000"),
            volatility=Decimal("0.020736"),
            risk_free_rate=Decimal("0.005"),
            mean_return=Decimal("0.046000"),
        )

        add_metric_row(table, "Sharpe Ratio", result, "sharpe_ratio", ("volatility",))

        assert table.row_count == 1
        assert table.columns[1]._cells == ["1.9772"]
        assert table.columns[2]._cells == ["volatility=0.020736"]

    def test_add_error_row(self):
        """Test errors are shown in place of the value."""
        table = create_risk_metrics_table()
        error = CalculationError(ErrorKind.ZERO_MARKET_VARIANCE, "Market returns have zero variance")

        add_metric_row(table, "Beta", error, "beta")

        assert table.row_count == 1
        assert "zero_market_variance" in table.columns[1]._cells[0]
        assert table.columns[2]._cells == ["Market returns have zero variance"]


class TestMatrixTable:
    """Test labelled matrix tables."""

    def test_matrix_table(self):
        """Test one row and one column per asset."""
        matrix = [[Decimal("1.0"), Decimal("0.25")], [Decimal("0.25"), Decimal("1.0")]]
        table = create_matrix_table("Correlation Matrix", ["SPY", "QQQ"], matrix)

        assert len(table.columns) == 3
        assert table.row_count == 2
        assert table.columns[1]._cells == ["1.0000", "0.2500"]


class TestCorporateActionTables:
    """Test preview and adjustment tables."""

    def test_preview_table(self):
        """Test preview summary rows."""
        preview = AdjustmentPreview(
            action_id="split-1",
            kind="stock_split",
            effective_date=date(2024, 6, 10),
            affected_transactions=2,
            estimated_adjustments=2,
        )
        table = create_preview_table(preview)

        assert table.title == "Corporate Action split-1"
        assert table.row_count == 4
        assert table.columns[1]._cells[0] == "stock_split"

    def test_adjustments_table(self):
        """Test adjustments table columns."""
        table = create_adjustments_table()

        assert table.title == "Transaction Adjustments"
        assert len(table.columns) == 8

    def test_add_new_shares_row(self):
        """Test spinoff new shares show the new security."""
        table = create_adjustments_table()
        adjustment = TransactionAdjustment(
            transaction_id=None,
            corporate_action_id="s-1",
            adjustment_type=AdjustmentType.SPINOFF_NEW_SHARES,
            reason="Spinoff new shares - 1 ratio",
            created_by="merger_calculator",
            adjusted_quantity=Decimal("100"),
            original_price=Decimal("0"),
            adjusted_price=Decimal("10"),
            new_security_id="NEWCO",
            fifo_lot_order=1,
        )

        add_adjustment_row(table, adjustment)

        assert table.row_count == 1
        assert table.columns[0]._cells == ["1"]
        assert table.columns[1]._cells == ["new: NEWCO"]
        assert table.columns[2]._cells == ["spinoff_new_shares"]

    def test_add_dividend_row_shows_withholding(self):
        """Test dividend receipts show the withholding estimate next to the cash."""
        table = create_adjustments_table()
        adjustment = TransactionAdjustment(
            transaction_id="txn-1",
            corporate_action_id="div-1",
            adjustment_type=AdjustmentType.CASH_RECEIPT,
            reason="USD 0.50 dividend - Q2 dividend",
            created_by="dividend_calculator",
            original_quantity=Decimal("100"),
            adjusted_quantity=Decimal("100"),
            cash_received=Decimal("50.00"),
            total_dividend=Decimal("50.00"),
            tax_withheld=Decimal("12.00"),
        )

        add_adjustment_row(table, adjustment)

        assert table.columns[5]._cells == ["50.00 (withheld 12.00)"]
