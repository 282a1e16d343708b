"""Rich table formatters for CLI output."""

from decimal import Decimal
from typing import Sequence

from rich.table import Table

from qanalytics.core.errors import CalculationError
from qanalytics.libraries.corporate_actions.models import AdjustmentPreview, TransactionAdjustment


def format_decimal(value: Decimal | None) -> str:
    """Render a Decimal without exponent notation ("-" for None)."""
    if value is None:
        return "-"
    return f"{value:f}"


def create_risk_metrics_table(title: str = "Risk Metrics") -> Table:
    """
    Create a Rich table for metric results.

    Returns:
        Configured Rich Table with Metric / Value / Details columns
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="yellow", justify="right")
    table.add_column("Details", style="dim")
    return table


def add_metric_row(
    table: Table,
    name: str,
    result: object,
    value_field: str,
    detail_fields: Sequence[str] = (),
) -> None:
    """
    Add one metric to the table.

    Args:
        table: Rich Table instance
        name: Display name of the metric
        result: Result model or CalculationError
        value_field: Attribute holding the headline value
        detail_fields: Extra attributes shown as key=value
    """
    if isinstance(result, CalculationError):
        table.add_row(name, f"[red]{result.kind.value}[/red]", result.message)
        return

    details = []
    for field in detail_fields:
        value = getattr(result, field)
        details.append(f"{field}={format_decimal(value) if isinstance(value, Decimal) or value is None else value}")
    table.add_row(name, format_decimal(getattr(result, value_field)), " ".join(details))


def create_matrix_table(title: str, labels: Sequence[str], matrix: Sequence[Sequence[Decimal]], places: int = 4) -> Table:
    """
    Create a Rich table showing a labelled square matrix.

    Args:
        title: Table title
        labels: Asset labels for rows and columns
        matrix: Square matrix of Decimals
        places: Decimal places to display

    Returns:
        Populated Rich Table
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("", style="cyan", no_wrap=True)
    for label in labels:
        table.add_column(label, justify="right")

    for label, row in zip(labels, matrix):
        table.add_row(label, *(f"{value:.{places}f}" for value in row))
    return table


def create_preview_table(preview: AdjustmentPreview) -> Table:
    """Create a small table summarizing an adjustment preview."""
    table = Table(title=f"Corporate Action {preview.action_id}", show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Kind", preview.kind)
    table.add_row("Effective Date", preview.effective_date.isoformat())
    table.add_row("Affected Transactions", str(preview.affected_transactions))
    table.add_row("Estimated Adjustments", str(preview.estimated_adjustments))
    return table


def create_adjustments_table() -> Table:
    """
    Create a Rich table for transaction adjustments.

    Returns:
        Configured Rich Table with columns
    """
    table = Table(title="Transaction Adjustments")
    table.add_column("Lot", style="magenta", justify="right")
    table.add_column("Transaction", style="cyan", no_wrap=True)
    table.add_column("Type", style="white")
    table.add_column("Quantity", style="yellow", justify="right")
    table.add_column("Price", style="yellow", justify="right")
    table.add_column("Cash", style="green", justify="right")
    table.add_column("Gain/Loss", justify="right")
    table.add_column("Reason", style="dim")
    return table


def add_adjustment_row(table: Table, adjustment: TransactionAdjustment) -> None:
    """
    Add an adjustment row to the adjustments table.

    Args:
        table: Rich Table instance
        adjustment: Adjustment to display
    """
    gain_style = "red" if adjustment.gain_loss < 0 else "green"
    transaction = adjustment.transaction_id or f"new: {adjustment.new_security_id}"
    cash = format_decimal(adjustment.cash_received)
    if adjustment.tax_withheld is not None:
        cash = f"{cash} (withheld {format_decimal(adjustment.tax_withheld)})"
    table.add_row(
        str(adjustment.fifo_lot_order or "-"),
        transaction,
        adjustment.adjustment_type.value,
        f"{format_decimal(adjustment.original_quantity)} → {format_decimal(adjustment.adjusted_quantity)}",
        f"{format_decimal(adjustment.original_price)} → {format_decimal(adjustment.adjusted_price)}",
        cash,
        f"[{gain_style}]{format_decimal(adjustment.gain_loss)}[/{gain_style}]",
        adjustment.reason,
    )
