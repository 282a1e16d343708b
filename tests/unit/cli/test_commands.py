"""
Unit tests for qanalytics CLI commands.

Tests cover:
- risk: metrics table from a YAML return series
- correlation: matrices and rolling correlation
- corporate-action: preview and adjustments
- Error handling for malformed input files
"""

import pytest
from click.testing import CliRunner

from qanalytics.cli.main import main
from qanalytics.system import LoggerFactory


@pytest.fixture(autouse=True)
def reset_logging():
    """Commands configure logging against the runner's streams."""
    LoggerFactory.reset()
    yield
    LoggerFactory.reset()


@pytest.fixture
def cli_runner():
    """Fixture providing Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def portfolio_file(tmp_path):
    """Fixture providing a portfolio input file."""
    path = tmp_path / "portfolio.yaml"
    path.write_text(
        """
returns: ["0.10", "-0.20", "0.15"]
values: ["100", "110", "88", "101.2"]
benchmark: ["0.08", "-0.15", "0.10"]
market: ["0.09", "-0.18", "0.12"]
portfolio_value: "100000"
"""
    )
    return path


@pytest.fixture
def split_file(tmp_path):
    """Fixture providing a stock split input file."""
    path = tmp_path / "split.yaml"
    path.write_text(
        """
action:
  kind: stock_split
  action_id: split-1
  symbol: AAPL
  effective_date: 2024-06-10
  ratio_from: "1"
  ratio_to: "2"
  description: 2-for-1 split
transactions:
  - transaction_id: txn-1
    quantity: "100"
    price: "150"
    purchase_date: 2024-01-10
  - transaction_id: txn-2
    quantity: "50"
    price: "160"
    purchase_date: 2024-07-01
"""
    )
    return path


class TestRiskCommand:
    """Test the risk command."""

    def test_full_report(self, cli_runner, portfolio_file):
        """Test every metric with optional inputs present."""
        result = cli_runner.invoke(main, ["risk", str(portfolio_file)])

        assert result.exit_code == 0, result.output
        for metric in ("Sharpe Ratio", "Sortino Ratio", "Max Drawdown", "Calmar Ratio", "Information Ratio", "Beta"):
            assert metric in result.output

    def test_returns_only(self, cli_runner, tmp_path):
        """Test optional metrics are skipped when inputs are missing."""
        path = tmp_path / "returns.yaml"
        path.write_text("returns: [0.05, 0.03, 0.07, 0.02, 0.06]\n")

        result = cli_runner.invoke(main, ["risk", str(path)])

        assert result.exit_code == 0, result.output
        assert "Sharpe Ratio" in result.output
        assert "Beta" not in result.output

    def test_config_overrides(self, cli_runner, portfolio_file, tmp_path):
        """Test configuration file is accepted."""
        config = tmp_path / "analytics.yaml"
        config.write_text('risk:\n  confidence_level: "0.99"\n')

        result = cli_runner.invoke(main, ["risk", str(portfolio_file), "--config", str(config)])

        assert result.exit_code == 0, result.output
        assert "0.99" in result.output

    def test_sortino_target_from_config(self, cli_runner, tmp_path):
        """Test the Sortino target return is read from configuration."""
        path = tmp_path / "returns.yaml"
        path.write_text('returns: ["0.05", "0.03", "0.07", "0.02", "0.06"]\n')
        config = tmp_path / "analytics.yaml"
        config.write_text('risk:\n  sortino_target: "0.04"\n')

        result = cli_runner.invoke(main, ["risk", str(path), "--config", str(config)])

        assert result.exit_code == 0, result.output
        assert "target_return=0.04" in result.output

    def test_missing_returns(self, cli_runner, tmp_path):
        """Test a document without returns fails cleanly."""
        path = tmp_path / "empty.yaml"
        path.write_text("values: [100, 110]\n")

        result = cli_runner.invoke(main, ["risk", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_non_numeric_return(self, cli_runner, tmp_path):
        """Test invalid numbers are reported."""
        path = tmp_path / "bad.yaml"
        path.write_text('returns: ["0.01", "abc"]\n')

        result = cli_runner.invoke(main, ["risk", str(path)])

        assert result.exit_code == 1
        assert "not a decimal number" in result.output

    def test_missing_file(self, cli_runner, tmp_path):
        """Test click rejects a missing input file."""
        result = cli_runner.invoke(main, ["risk", str(tmp_path / "missing.yaml")])
        assert result.exit_code != 0


class TestCorrelationCommand:
    """Test the correlation command."""

    @pytest.fixture
    def assets_file(self, tmp_path):
        path = tmp_path / "assets.yaml"
        path.write_text(
            """
series:
  SPY: ["0.01", "-0.02", "0.03", "0.005"]
  QQQ: ["0.02", "0.01", "-0.01", "0.00"]
  IWM: ["0.015", "-0.01", "0.02", "0.01"]
"""
        )
        return path

    def test_matrices(self, cli_runner, assets_file):
        """Test both matrices are printed."""
        result = cli_runner.invoke(main, ["correlation", str(assets_file)])

        assert result.exit_code == 0, result.output
        assert "Correlation Matrix" in result.output
        assert "Covariance Matrix" in result.output
        assert "SPY" in result.output

    def test_rolling_window(self, cli_runner, assets_file):
        """Test rolling correlation of the first two series."""
        result = cli_runner.invoke(main, ["correlation", str(assets_file), "--window", "3"])

        assert result.exit_code == 0, result.output
        assert "Rolling correlation SPY/QQQ" in result.output

    def test_window_too_large(self, cli_runner, assets_file):
        """Test an oversized window fails."""
        result = cli_runner.invoke(main, ["correlation", str(assets_file), "--window", "10"])

        assert result.exit_code == 1
        assert "window_too_large" in result.output

    def test_flat_series(self, cli_runner, tmp_path):
        """Test a zero-variance asset fails the correlation matrix."""
        path = tmp_path / "flat.yaml"
        path.write_text('series:\n  A: ["0.01", "0.01", "0.01"]\n  B: ["0.01", "0.02", "0.03"]\n')

        result = cli_runner.invoke(main, ["correlation", str(path)])

        assert result.exit_code == 1
        assert "zero_variance" in result.output
        assert "Covariance Matrix" in result.output

    def test_missing_series(self, cli_runner, tmp_path):
        """Test the series mapping is required."""
        path = tmp_path / "none.yaml"
        path.write_text("returns: [0.01, 0.02]\n")

        result = cli_runner.invoke(main, ["correlation", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.output


class TestCorporateActionCommand:
    """Test the corporate-action command."""

    def test_preview_only(self, cli_runner, split_file):
        """Test --preview stops before calculating."""
        result = cli_runner.invoke(main, ["corporate-action", str(split_file), "--preview"])

        assert result.exit_code == 0, result.output
        assert "Corporate Action split-1" in result.output
        assert "Affected Transactions" in result.output
        assert "Transaction Adjustments" not in result.output

    def test_apply(self, cli_runner, split_file):
        """Test adjustments are printed for affected lots."""
        result = cli_runner.invoke(main, ["corporate-action", str(split_file)])

        assert result.exit_code == 0, result.output
        assert "Transaction Adjustments" in result.output
        assert "txn-1" in result.output

    def test_nothing_affected(self, cli_runner, tmp_path):
        """Test an action before every purchase."""
        path = tmp_path / "early.yaml"
        path.write_text(
            """
action:
  kind: cash_dividend
  action_id: div-1
  symbol: AAPL
  effective_date: 2020-01-01
  dividend_per_share: "0.50"
transactions:
  - transaction_id: txn-1
    quantity: "100"
    purchase_date: 2024-01-10
"""
        )

        result = cli_runner.invoke(main, ["corporate-action", str(path)])

        assert result.exit_code == 0, result.output
        assert "No transactions predate the effective date" in result.output

    def test_calculation_error(self, cli_runner, tmp_path):
        """Test a failed batch exits non-zero."""
        path = tmp_path / "spinoff.yaml"
        path.write_text(
            """
action:
  kind: spinoff
  action_id: s-1
  symbol: AAPL
  effective_date: 2024-06-10
transactions:
  - transaction_id: txn-1
    quantity: "100"
    price: "150"
    purchase_date: 2024-01-10
"""
        )

        result = cli_runner.invoke(main, ["corporate-action", str(path)])

        assert result.exit_code == 1
        assert "New symbol is required for spinoff" in result.output

    def test_applied_action_rejected(self, cli_runner, tmp_path):
        """Test an already applied action is not applied again."""
        path = tmp_path / "applied.yaml"
        path.write_text(
            """
action:
  kind: stock_split
  action_id: split-1
  symbol: AAPL
  effective_date: 2024-06-10
  ratio_from: "1"
  ratio_to: "2"
  status: applied
transactions:
  - transaction_id: txn-1
    quantity: "100"
    price: "150"
    purchase_date: 2024-01-10
"""
        )

        result = cli_runner.invoke(main, ["corporate-action", str(path)])

        assert result.exit_code == 1
        assert "already applied" in result.output

    def test_unknown_kind(self, cli_runner, tmp_path):
        """Test invalid action documents fail validation."""
        path = tmp_path / "unknown.yaml"
        path.write_text("action:\n  kind: rights_issue\n  action_id: r\n  symbol: X\n  effective_date: 2024-01-01\n")

        result = cli_runner.invoke(main, ["corporate-action", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.output
