"""``vapor doctor``: environment diagnostics command.

Reports whether this machine has what the other commands shell out to.
Each collector returns one :class:`Check` row; only a row at
:attr:`CheckLevel.FAIL` changes the exit status.  A missing program is
a warning, since ``clean`` works without docker and ``docker`` works
without a local Swift toolchain.
"""

from __future__ import annotations

import enum
import platform
import sys
from collections.abc import Sequence
from typing import NamedTuple

from vapor_toolbox.cli import exit_codes
from vapor_toolbox.cli.arguments import LeafParser
from vapor_toolbox.cli.console import console, escape, import_rich_table
from vapor_toolbox.cli.context import CommandContext
from vapor_toolbox.version import __version__

REQUIRED_PROGRAMS: tuple[str, ...] = ("docker", "swift", "git")

MINIMUM_PYTHON: tuple[int, int] = (3, 10)

PLATFORM_NAMES: dict[str, str] = {"Darwin": "macOS"}
"""``platform.system()`` values shown under a friendlier name."""


class CheckLevel(enum.Enum):
    OK = "green"
    WARN = "yellow"
    FAIL = "red"


class Check(NamedTuple):
    label: str
    value: str
    level: CheckLevel
    note: str = ""

    @property
    def status(self) -> str:
        """Rich markup for the status column."""
        text = self.level.name if not self.note else f"{self.level.name} ({self.note})"
        return f"[{self.level.value}]{escape(text)}[/{self.level.value}]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _toolbox_version_check() -> Check:
    return Check("vapor-toolbox", __version__, CheckLevel.OK)


def _python_version_check() -> Check:
    if sys.version_info[:2] >= MINIMUM_PYTHON:
        return Check("Python", platform.python_version(), CheckLevel.OK)
    required = ".".join(str(part) for part in MINIMUM_PYTHON)
    return Check("Python", platform.python_version(), CheckLevel.FAIL, f">={required} required")


def _os_check() -> Check:
    system = platform.system()
    name = PLATFORM_NAMES.get(system, system)
    return Check("OS", f"{name} {platform.release()} ({platform.machine()})", CheckLevel.OK)


def _program_check(ctx: CommandContext, program: str) -> Check:
    """Look *program* up through the runner's resolver."""
    if not ctx.shell.program_exists(program):
        return Check(program, "not found", CheckLevel.WARN)
    return Check(program, ctx.runner.resolve(program), CheckLevel.OK)


def collect_checks(ctx: CommandContext) -> list[Check]:
    return [
        _toolbox_version_check(),
        _python_version_check(),
        _os_check(),
        *(_program_check(ctx, program) for program in REQUIRED_PROGRAMS),
    ]


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(ctx: CommandContext, args: Sequence[str] = ()) -> int:
    """Run every check and render them as one table.

    Returns
    -------
    int
        :data:`exit_codes.GENERAL_ERROR` if any check failed, otherwise
        :data:`exit_codes.SUCCESS`.
    """
    LeafParser(prog="vapor doctor").parse(args)
    checks = collect_checks(ctx)

    table_class = import_rich_table()
    table = table_class(title="vapor doctor", header_style="bold cyan", border_style="dim")
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for check in checks:
        table.add_row(escape(check.label), escape(check.value), check.status)

    console.print()
    console.print(table)
    console.print()

    if any(check.level is CheckLevel.FAIL for check in checks):
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
