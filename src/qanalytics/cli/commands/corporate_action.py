"""Corporate action command - preview and calculate transaction adjustments."""

import sys

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from qanalytics.cli.commands.inputs import load_document, setup_command
from qanalytics.cli.ui import add_adjustment_row, create_adjustments_table, create_preview_table
from qanalytics.core.errors import CalculationError
from qanalytics.libraries.corporate_actions import (
    TransactionRecord,
    apply_corporate_action,
    parse_corporate_action,
    preview_corporate_action,
)


@click.command("corporate-action")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--preview", is_flag=True, help="Only show which transactions would be adjusted")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Analytics configuration YAML (dividend rounding, holding period, withholding, logging)",
)
def corporate_action_command(input_file: str, preview: bool, config_path: str | None):
    """
    Calculate adjustments for one corporate action.

    INPUT_FILE is a YAML mapping with an ``action`` (including its ``kind``:
    stock_split, stock_merger, cash_merger, mixed_merger, spinoff or
    cash_dividend) and a list of ``transactions``.

    Example:
        qanalytics corporate-action split.yaml
        qanalytics corporate-action split.yaml --preview
    """
    console = Console()

    try:
        config = setup_command(config_path)
        data = load_document(input_file)

        action = parse_corporate_action(data.get("action") or {})
        transactions = [TransactionRecord.model_validate(txn) for txn in data.get("transactions") or []]

        console.print(create_preview_table(preview_corporate_action(action, transactions)))
        if preview:
            return

        adjustments = apply_corporate_action(action, transactions, dividend_config=config.dividend)
        if isinstance(adjustments, CalculationError):
            console.print(f"[red]Error: {adjustments.message}[/red]")
            sys.exit(1)

        if not adjustments:
            console.print("[yellow]No transactions predate the effective date[/yellow]")
            return

        table = create_adjustments_table()
        for adjustment in adjustments:
            add_adjustment_row(table, adjustment)
        console.print(table)

    except (FileNotFoundError, ValueError, yaml.YAMLError, ValidationError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
