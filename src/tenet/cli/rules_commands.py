"""Rules command: list the available rule variants."""

from __future__ import annotations

import click
from rich import box
from rich.table import Table

from tenet.cli.main import console


@click.command()
def rules():
    """List the rule variants usable in rules files."""
    from tenet.constraints import Traverse, Valid, constraint_types, default_registry
    from tenet.constraints.base import Composite
    from tenet.constraints.collection import Optional, Required

    registry = default_registry()
    table = Table(title="Rules", box=box.ROUNDED)
    table.add_column("Rule", style="bold", no_wrap=True)
    table.add_column("Kind", no_wrap=True)
    table.add_column("Default option")
    table.add_column("Options", style="dim")

    for name, cls in sorted(constraint_types().items()):
        if cls in (Valid, Traverse):
            kind = "cascade"
        elif cls in (Required, Optional):
            kind = "field"
        elif cls in registry:
            kind = "composite" if issubclass(cls, Composite) else "rule"
        else:
            continue
        options = [o for o in cls.option_names() if not o.endswith("message")]
        table.add_row(name, kind, cls.default_option or "", ", ".join(options))

    console.print(table)
