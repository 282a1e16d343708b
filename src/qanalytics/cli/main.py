"""QAnalytics CLI main entry point."""

import click

from qanalytics import __version__
from qanalytics.cli.commands import corporate_action_command, correlation_command, risk_command


@click.group()
@click.version_option(version=__version__)
def main():
    """QAnalytics - Portfolio Risk and Corporate Action Analytics"""
    pass


# Register commands
main.add_command(risk_command)
main.add_command(correlation_command)
main.add_command(corporate_action_command)


if __name__ == "__main__":
    main()
