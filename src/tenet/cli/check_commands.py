"""Check command: validate a data file against a rules file."""

from __future__ import annotations

import json
import sys

import click
from rich import box
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tenet.cli.main import console


@click.command()
@click.argument("data_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--rules", "rules_file", required=True, type=click.Path(exists=True, dir_okay=False), help="YAML or JSON rules file")
@click.option("--group", "-g", "groups", multiple=True, help="Validation group (repeatable)")
@click.option("--sequence", is_flag=True, help="Treat the groups as an ordered sequence that stops at the first failing group")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", count=True, help="Verbosity level: -v decisions, -vv every node")
def check(data_file: str, rules_file: str, groups: tuple[str, ...], sequence: bool, output_json: bool, verbose: int):
    """Validate DATA_FILE against the rules in RULES_FILE.

    Exits with status 1 when any violation is found.
    """
    from tenet.config import get_settings
    from tenet.core.errors import TenetError
    from tenet.core.logging import ValidationLogger, Verbosity
    from tenet.groups import GroupSequence
    from tenet.loader import load_data_file, load_rules_file
    from tenet.validator import Validator

    settings = get_settings()

    try:
        constraints = load_rules_file(rules_file)
    except (TenetError, OSError) as e:
        console.print(f"[red]Error loading rules:[/red] {escape(str(e))}")
        sys.exit(2)

    try:
        data = load_data_file(data_file)
    except (ValueError, OSError) as e:
        console.print(f"[red]Error loading data:[/red] {escape(str(e))}")
        sys.exit(2)

    group_spec = None
    if groups:
        group_spec = GroupSequence.of(groups) if sequence else list(groups)

    verbosity = Verbosity(min(max(verbose, settings.verbosity), Verbosity.DEBUG))
    run_logger = ValidationLogger(verbosity=verbosity, log_dir=settings.log_dir)
    validator = Validator(settings=settings, run_logger=run_logger)

    try:
        violations = validator.validate(data, constraints, group_spec)
    except TenetError as e:
        console.print(f"[red]Validation aborted:[/red] {escape(str(e))}")
        sys.exit(2)

    if output_json:
        out = {
            "passed": not violations,
            "violations": violations.to_list(),
            "run": run_logger.run_log.to_dict(),
        }
        console.print_json(json.dumps(out, default=str))
        sys.exit(0 if not violations else 1)

    if not violations:
        console.print(f"[green]No violations.[/green] {data_file} passed {len(constraints)} rule(s).")
        return

    table = Table(title="Violations", box=box.ROUNDED)
    table.add_column("Path", style="bold")
    table.add_column("Message")
    table.add_column("Code", style="dim")

    for violation in violations:
        table.add_row(escape(violation.property_path or "<root>"), escape(violation.message), violation.code or "")

    console.print(table)
    console.print(
        Panel(
            f"[red]{len(violations)} violation(s)[/red] in {data_file}",
            border_style="red",
        )
    )
    sys.exit(1)
