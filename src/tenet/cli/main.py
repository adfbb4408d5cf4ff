"""Tenet CLI main entry point and shared utilities."""

from __future__ import annotations

import click
from rich.console import Console

console = Console()


@click.group()
def main():
    """Tenet: declarative constraint validation."""
    pass


def cli():
    """Entrypoint that loads .env before running the CLI."""
    from dotenv import load_dotenv

    load_dotenv()
    main()


# Import subcommand modules to register commands
from tenet.cli.check_commands import check  # noqa: E402, F401
from tenet.cli.rules_commands import rules  # noqa: E402, F401

main.add_command(check)
main.add_command(rules)
