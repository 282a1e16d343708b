"""Risk analysis commands - thin CLI orchestration layer."""

import sys

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from qanalytics.cli.commands.inputs import load_document, optional_series, setup_command, to_decimal, to_decimal_series
from qanalytics.cli.ui import add_metric_row, create_matrix_table, create_risk_metrics_table
from qanalytics.core.errors import CalculationError
from qanalytics.libraries.performance import (
    calculate_beta,
    calculate_calmar_ratio,
    calculate_correlation_matrix,
    calculate_covariance_matrix,
    calculate_drawdown,
    calculate_information_ratio,
    calculate_rolling_correlation,
    calculate_sharpe_ratio,
    calculate_sortino_ratio,
    calculate_sterling_ratio,
    calculate_value_at_risk,
)
from qanalytics.system import LoggerFactory

CONFIG_OPTION = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Analytics configuration YAML (risk-free rate, logging, ...)",
)


@click.command("risk")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@CONFIG_OPTION
def risk_command(input_file: str, config_path: str | None):
    """
    Calculate risk metrics for a return series.

    INPUT_FILE is a YAML mapping with ``returns`` and optionally ``values``
    (one more than returns), ``benchmark``, ``market`` and
    ``portfolio_value``.

    Example:
        qanalytics risk portfolio.yaml
        qanalytics risk portfolio.yaml --config analytics.yaml
    """
    console = Console()

    try:
        config = setup_command(config_path)
        logger = LoggerFactory.get_logger()
        data = load_document(input_file)

        returns = to_decimal_series(data.get("returns"), "returns")
        values = optional_series(data, "values")
        benchmark = optional_series(data, "benchmark")
        market = optional_series(data, "market")
        risk = config.risk

        table = create_risk_metrics_table(f"Risk Metrics ({len(returns)} periods)")
        add_metric_row(
            table,
            "Sharpe Ratio",
            calculate_sharpe_ratio(returns, risk_free_rate=risk.risk_free_rate),
            "sharpe_ratio",
            ("mean_return", "volatility"),
        )
        add_metric_row(
            table,
            "Sortino Ratio",
            calculate_sortino_ratio(returns, target_return=risk.sortino_target),
            "sortino_ratio",
            ("downside_deviation", "target_return"),
        )

        if data.get("portfolio_value") is not None:
            add_metric_row(
                table,
                f"VaR ({risk.confidence_level})",
                calculate_value_at_risk(
                    returns,
                    to_decimal(data["portfolio_value"], "portfolio_value"),
                    confidence_level=risk.confidence_level,
                    z_score_bands=risk.z_score_bands,
                    default_z_score=risk.default_z_score,
                ),
                "var_amount",
                ("var_percentage", "z_score"),
            )

        if values is not None:
            add_metric_row(table, "Max Drawdown", calculate_drawdown(values), "max_drawdown", ("recovery_periods",))
            add_metric_row(
                table,
                "Calmar Ratio",
                calculate_calmar_ratio(returns, values, sentinel=risk.ratio_sentinel),
                "calmar_ratio",
                ("annualized_return",),
            )
            add_metric_row(
                table,
                "Sterling Ratio",
                calculate_sterling_ratio(
                    returns,
                    values,
                    threshold=risk.sterling_threshold,
                    sentinel=risk.ratio_sentinel,
                    epsilon=risk.sterling_epsilon,
                ),
                "sterling_ratio",
                ("adjusted_drawdown",),
            )

        if benchmark is not None:
            add_metric_row(
                table,
                "Information Ratio",
                calculate_information_ratio(returns, benchmark),
                "information_ratio",
                ("tracking_error",),
            )

        if market is not None:
            add_metric_row(table, "Beta", calculate_beta(returns, market), "beta", ("covariance",))

        console.print(table)
        logger.info("cli.risk_report", input_file=input_file, periods=len(returns))

    except (FileNotFoundError, ValueError, yaml.YAMLError, ValidationError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@click.command("correlation")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--window", type=int, default=None, help="Also show rolling correlation of the first two series")
@CONFIG_OPTION
def correlation_command(input_file: str, window: int | None, config_path: str | None):
    """
    Calculate correlation and covariance matrices.

    INPUT_FILE is a YAML mapping with a ``series`` mapping of asset name to
    return list.

    Example:
        qanalytics correlation assets.yaml
        qanalytics correlation assets.yaml --window 20
    """
    console = Console()

    try:
        setup_command(config_path)
        raw_series = load_document(input_file).get("series")
        if not isinstance(raw_series, dict):
            raise ValueError("series: expected a mapping of asset name to returns")

        labels = [str(name) for name in raw_series]
        series = [to_decimal_series(raw_series[name], f"series.{name}") for name in raw_series]

        failed = False
        for title, result, places in (
            ("Correlation Matrix", calculate_correlation_matrix(series), 4),
            ("Covariance Matrix", calculate_covariance_matrix(series), 8),
        ):
            if isinstance(result, CalculationError):
                console.print(f"[red]{title}: {result.kind.value}[/red] - {result.message}")
                failed = True
            else:
                console.print(create_matrix_table(title, labels, result, places))

        if window is not None and len(series) >= 2:
            rolling = calculate_rolling_correlation(series[0], series[1], window)
            if isinstance(rolling, CalculationError):
                console.print(f"[red]Rolling correlation: {rolling.kind.value}[/red] - {rolling.message}")
                failed = True
            else:
                formatted = ", ".join(f"{value:.4f}" for value in rolling)
                console.print(f"\n[cyan]Rolling correlation {labels[0]}/{labels[1]} (window {window}):[/cyan]")
                console.print(f"[dim]{formatted}[/dim]")

        if failed:
            sys.exit(1)

    except (FileNotFoundError, ValueError, yaml.YAMLError, ValidationError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
