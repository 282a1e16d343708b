"""UI components for CLI display."""

from qanalytics.cli.ui.formatters import (
    add_adjustment_row,
    add_metric_row,
    create_adjustments_table,
    create_matrix_table,
    create_preview_table,
    create_risk_metrics_table,
    format_decimal,
)

__all__ = [
    "add_adjustment_row",
    "add_metric_row",
    "create_adjustments_table",
    "create_matrix_table",
    "create_preview_table",
    "create_risk_metrics_table",
    "format_decimal",
]
