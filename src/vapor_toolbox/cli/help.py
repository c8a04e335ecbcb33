"""Rich rendering of :class:`~vapor_toolbox.core.router.HelpText`."""

from __future__ import annotations

from vapor_toolbox.cli.console import console, escape, import_rich_table
from vapor_toolbox.core.router import HelpText


def render_help(help_text: HelpText) -> None:
    """Print usage, description and, for branches, one line per child."""
    console.print(f"[bold]Usage:[/bold] {escape(help_text.usage)}")
    console.print()
    for line in help_text.description:
        console.print(escape(line))

    if not help_text.commands:
        return

    table_class = import_rich_table()
    table = table_class.grid(padding=(0, 3))
    table.add_column(style="bold cyan", no_wrap=True)
    table.add_column()
    for name, summary in help_text.commands:
        table.add_row(name, escape(summary))

    prefix = help_text.usage.rsplit(" ", 1)[0]
    console.print()
    console.print("[bold]Commands:[/bold]")
    console.print(table)
    console.print()
    console.print(f"Run '{escape(prefix)} <command> --help' for more information on a command.")
