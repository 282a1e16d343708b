"""CLI commands."""

from qanalytics.cli.commands.analyze import correlation_command, risk_command
from qanalytics.cli.commands.corporate_action import corporate_action_command

__all__ = ["risk_command", "correlation_command", "corporate_action_command"]
