"""CLI application entry point and command routing for vapor-toolbox.

This module is the **sole error boundary** for the entire application.
It catches :class:`~vapor_toolbox.exceptions.ToolboxError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages via Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here; routing is delegated to
  :class:`~vapor_toolbox.core.router.Router` and the work to the leaf
  bodies declared in :mod:`vapor_toolbox.cli.commands`.
* ``print()`` is forbidden outside the CLI layer; Rich console is used
  exclusively.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from vapor_toolbox.cli import exit_codes
from vapor_toolbox.cli.commands import build_command_tree
from vapor_toolbox.cli.console import configure_logging, console, err_console, escape
from vapor_toolbox.cli.context import CommandContext, build_context
from vapor_toolbox.cli.help import render_help
from vapor_toolbox.core.router import Router
from vapor_toolbox.exceptions import (
    ExecutionError,
    LaunchError,
    ResolutionError,
    ToolboxError,
    UnknownCommandError,
    UsageError,
)
from vapor_toolbox.infra.signals import forward_signals
from vapor_toolbox.version import __version__

VERSION_FLAGS: frozenset[str] = frozenset({"-V", "--version"})
DEBUG_FLAG: str = "--debug"


# ---------------------------------------------------------------------------
# Exit-code translation
# ---------------------------------------------------------------------------

def exit_code_for(exc: ToolboxError) -> int:
    """Map a domain error onto the process exit status."""
    if isinstance(exc, (UnknownCommandError, UsageError)):
        return exit_codes.USAGE_ERROR
    if isinstance(exc, ResolutionError):
        return exit_codes.COMMAND_NOT_FOUND
    if isinstance(exc, LaunchError):
        return exit_codes.CANNOT_EXECUTE
    if isinstance(exc, ExecutionError) and exc.exit_code and exc.exit_code > 0:
        return exc.exit_code
    return exit_codes.GENERAL_ERROR


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: Sequence[str] | None = None,
    *,
    context: CommandContext | None = None,
) -> int:
    """Run the vapor CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    context:
        Pre-built wiring.  Tests pass one with fake runners.

    Returns
    -------
    int
        OS process exit code.
    """
    args = tuple(sys.argv[1:] if argv is None else argv)

    if args[:1] and args[0] in VERSION_FLAGS:
        console.print(f"vapor-toolbox {__version__}")
        return exit_codes.SUCCESS

    debug = False
    while args[:1] == (DEBUG_FLAG,):
        debug = True
        args = args[1:]

    ctx = context if context is not None else build_context()
    configure_logging("DEBUG" if debug else ctx.settings.log_level)

    router = Router(build_command_tree(), render_help)
    return router.dispatch(args, ctx)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.  While it runs,
    SIGINT and SIGTERM are forwarded to the interactive child, if any.
    """
    try:
        context = build_context()
        with forward_signals(context.processes):
            code = main(context=context)
        sys.exit(code)
    except ToolboxError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            err_console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_code_for(exc))
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        err_console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
