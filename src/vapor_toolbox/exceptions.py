"""Custom exception hierarchy for vapor-toolbox.

All exceptions that cross layer boundaries must inherit from
:class:`ToolboxError`.  Raw ``OSError`` / ``subprocess`` failures must
NEVER propagate beyond the infrastructure layer; they must be caught
and re-raised as a typed subclass defined here.

Hierarchy
---------
ToolboxError
├── ResolutionError
├── LaunchError
├── ExecutionError
├── UnknownCommandError
├── UsageError
├── PreconditionError
├── WorkflowError
├── CommandTreeError
└── DependencyError
"""

from __future__ import annotations

from collections.abc import Sequence


class ToolboxError(Exception):
    """Base exception for all vapor-toolbox errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Process execution -----------------------------------------------------

class ResolutionError(ToolboxError):
    """Raised when a program name cannot be found on the search path."""

    def __init__(self, program: str, *, hint: str | None = None) -> None:
        super().__init__(
            f"Unable to find executable for {program!r}.",
            hint=hint or f"Make sure `{program}` is installed and on your PATH.",
        )
        self.program: str = program


class LaunchError(ToolboxError):
    """Raised when the operating system refuses to spawn a process."""

    def __init__(self, program: str, reason: str) -> None:
        super().__init__(f"Could not launch {program}: {reason}")
        self.program: str = program


class ExecutionError(ToolboxError):
    """Raised when a captured process wrote to stderr.

    The exit status is recorded but plays no part in deciding failure:
    a clean exit with diagnostics on stderr is still an error.
    """

    def __init__(
        self,
        stderr: str,
        *,
        exit_code: int | None = None,
        command_line: str | None = None,
    ) -> None:
        message = stderr.strip() or "process reported an error"
        super().__init__(message)
        self.stderr: str = stderr
        self.exit_code: int | None = exit_code
        self.command_line: str | None = command_line


# --- Routing ---------------------------------------------------------------

class UnknownCommandError(ToolboxError):
    """Raised when no child of a branch node matches the requested name."""

    def __init__(
        self,
        attempted: str,
        valid: Sequence[str],
        *,
        path: Sequence[str] = (),
        hint: str | None = None,
    ) -> None:
        self.attempted: str = attempted
        self.valid: tuple[str, ...] = tuple(valid)
        self.path: tuple[str, ...] = tuple(path)
        where = " ".join(self.path)
        scope = f" for '{where}'" if where else ""
        super().__init__(
            f"Unknown command '{attempted}'{scope}. "
            f"Valid commands: {'|'.join(self.valid)}",
            hint=hint,
        )


class UsageError(ToolboxError):
    """Raised when a leaf command receives flags it does not understand."""


class CommandTreeError(ToolboxError):
    """Raised when a command tree declaration is malformed."""


# --- Workflows -------------------------------------------------------------

class PreconditionError(ToolboxError):
    """Raised when a workflow's required input is missing or unreadable."""


class WorkflowError(ToolboxError):
    """Raised when a composite workflow could not complete."""

    def __init__(
        self,
        message: str,
        *,
        command_line: str | None = None,
        hint: str | None = None,
    ) -> None:
        if command_line:
            message = f"{message}, command was\n{command_line}"
        super().__init__(message, hint=hint)
        self.command_line: str | None = command_line


# --- Environment / tooling -------------------------------------------------

class DependencyError(ToolboxError):
    """Raised when a required Python dependency is not available."""
