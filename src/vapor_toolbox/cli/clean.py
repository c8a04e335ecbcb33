"""``vapor clean``: remove build artifacts and render a report table.

The command exits with :data:`exit_codes.SUCCESS` whenever the report
was rendered.  Individual failures are visible as red rows, not through
the process exit status.
"""

from __future__ import annotations

from collections.abc import Sequence

from vapor_toolbox.cli import exit_codes
from vapor_toolbox.cli.arguments import LeafParser
from vapor_toolbox.cli.console import console, escape, import_rich_table
from vapor_toolbox.cli.context import CommandContext
from vapor_toolbox.core.cleaner import CleanOptions, Cleaner
from vapor_toolbox.core.models import CleanResult, CleanStatus

STATUS_STYLES: dict[CleanStatus, str] = {
    CleanStatus.FAILURE: "red",
    CleanStatus.SUCCESS: "green",
    CleanStatus.NOT_NECESSARY: "cyan",
    CleanStatus.IGNORED: "yellow",
}

HELP: tuple[str, ...] = (
    "Cleans temporary files created by Xcode and SwiftPM.",
    "",
    "Options:",
    "  -u, --update           Cleans Package.resolved file if it exists.",
    "  -k, --keep-checkouts   Keep git checkouts of dependencies.",
)


def _build_parser() -> LeafParser:
    parser = LeafParser(prog="vapor clean")
    parser.add_argument("-u", "--update", action="store_true")
    parser.add_argument("-k", "--keep-checkouts", action="store_true")
    return parser


def render_clean_report(results: Sequence[tuple[str, CleanResult]]) -> None:
    """Render one row per cleanup target."""
    table_class = import_rich_table()
    table = table_class(show_header=False, border_style="dim")
    table.add_column("Target", no_wrap=True)
    table.add_column("Result")
    for name, result in results:
        style = STATUS_STYLES[result.status]
        table.add_row(f"[{style}]{escape(name)}[/{style}]", escape(result.report))
    console.print(table)


def run_clean(ctx: CommandContext, args: Sequence[str]) -> int:
    """Entry point of the ``clean`` leaf."""
    options = _build_parser().parse(args)
    cleaner = Cleaner(
        ctx.shell,
        CleanOptions(update=options.update, keep_checkouts=options.keep_checkouts),
    )
    render_clean_report(cleaner.run())
    return exit_codes.SUCCESS
