"""Domain models for vapor-toolbox.

Value objects only: process descriptors and outcomes, the command-tree
node record, and per-target cleanup results.  They carry zero I/O and
zero dependencies on external packages.
"""

from __future__ import annotations

import enum
import os
import shlex
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from vapor_toolbox.exceptions import CommandTreeError


# ---------------------------------------------------------------------------
# Process descriptor
# ---------------------------------------------------------------------------

class StreamMode(enum.Enum):
    """How a child's standard streams are wired."""

    CAPTURE = "capture"
    """Collected into a buffer and returned after exit."""

    INHERIT = "inherit"
    """Shared with the parent's terminal."""

    STREAM = "stream"
    """Piped and forwarded chunk by chunk while the child runs."""


@dataclass(frozen=True, slots=True)
class ProcessSpec:
    """Everything needed to launch one external program."""

    program: str
    """Program path or bare name (resolved against ``PATH`` on launch)."""

    args: tuple[str, ...] = ()

    env: Mapping[str, str] | None = None
    """Environment snapshot.  ``None`` inherits ``os.environ``."""

    stdin: StreamMode = StreamMode.CAPTURE
    stdout: StreamMode = StreamMode.CAPTURE
    stderr: StreamMode = StreamMode.CAPTURE

    @property
    def command_line(self) -> str:
        """Shell-quoted rendering used in echo lines and error reports."""
        return shlex.join([self.program, *self.args])


# ---------------------------------------------------------------------------
# Process outcomes
# ---------------------------------------------------------------------------

class StreamOrigin(enum.Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


@dataclass(frozen=True, slots=True)
class CapturedText:
    """Both output streams of a finished, captured process."""

    stdout: str
    stderr: str
    returncode: int = 0

    @property
    def succeeded(self) -> bool:
        """``True`` iff nothing was written to stderr.

        The exit status is deliberately ignored; callers such as
        ``program_exists`` rely on this.
        """
        return self.stderr == ""


@dataclass(frozen=True, slots=True)
class OutputChunk:
    """A piece of output read from a streaming child."""

    origin: StreamOrigin
    data: bytes


@dataclass(frozen=True, slots=True)
class ExitStatus:
    """Termination of a process, kept as the raw wait status."""

    wait_status: int

    @classmethod
    def from_returncode(cls, returncode: int, platform_name: str | None = None) -> ExitStatus:
        """Re-encode a :class:`subprocess.Popen` return code.

        POSIX: a normal exit *n* becomes ``n << 8`` and a child killed by
        signal *s* (``returncode == -s``) becomes ``s``, exactly as
        ``waitpid(2)`` reports it.  Windows return codes are already raw.
        """
        name = os.name if platform_name is None else platform_name
        if name == "nt":
            return cls(returncode & 0xFFFFFFFF)
        if returncode < 0:
            return cls(-returncode)
        return cls((returncode & 0xFF) << 8)

    @property
    def exited(self) -> bool:
        return (self.wait_status & 0x7F) == 0

    @property
    def exit_code(self) -> int | None:
        """Exit code for a normal POSIX exit, else ``None``."""
        if not self.exited:
            return None
        return (self.wait_status >> 8) & 0xFF


# ---------------------------------------------------------------------------
# Recognised termination statuses
# ---------------------------------------------------------------------------

class WaitStatus(enum.IntEnum):
    """Raw wait statuses the docker workflows branch on."""

    DAEMON_UNAVAILABLE = 1 << 8
    """``docker`` exited 1; on POSIX usually the daemon is not reachable."""

    COMMAND_NOT_FOUND = 127 << 8
    """The shell could not find the program (exit 127)."""

    INTERRUPTED = 130 << 8
    """Child exited 130 after the operator pressed Ctrl-C (POSIX)."""

    SIGNALLED_SIGINT = 2
    """Child was killed by SIGINT itself (POSIX)."""

    STATUS_CONTROL_C_EXIT = 0xC000013A
    """Console process terminated by Ctrl-C (Windows)."""


BENIGN_TERMINATIONS: dict[str, frozenset[int]] = {
    "posix": frozenset({WaitStatus.INTERRUPTED, WaitStatus.SIGNALLED_SIGINT}),
    "nt": frozenset({WaitStatus.STATUS_CONTROL_C_EXIT}),
}
"""Per-platform wait statuses meaning "the user cancelled", keyed by ``os.name``."""


def is_benign_termination(wait_status: int, platform_name: str | None = None) -> bool:
    name = os.name if platform_name is None else platform_name
    return wait_status in BENIGN_TERMINATIONS.get(name, frozenset())


# ---------------------------------------------------------------------------
# Command tree
# ---------------------------------------------------------------------------

CommandBody = Callable[[Any, tuple[str, ...]], int]
"""Leaf body: ``(context, remaining_args) -> exit code``."""


@dataclass(frozen=True, slots=True)
class CommandNode:
    """A named entry in the command tree.

    A node is either a *branch* (children, no body) or a *leaf* (body,
    no children).  The tree is declared once at startup and never
    modified afterwards.
    """

    name: str
    summary: str
    help: tuple[str, ...] = ()
    """Multi-line help text shown by ``--help``."""

    children: tuple[CommandNode, ...] = ()
    body: CommandBody | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.name or any(ch.isspace() for ch in self.name):
            raise CommandTreeError(f"Invalid command name {self.name!r}.")
        if self.children and self.body is not None:
            raise CommandTreeError(
                f"Command '{self.name}' cannot have both children and a body."
            )
        if not self.children and self.body is None:
            raise CommandTreeError(
                f"Command '{self.name}' needs either children or a body."
            )
        names = [child.name for child in self.children]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise CommandTreeError(
                f"Command '{self.name}' declares duplicate children: "
                + ", ".join(duplicates)
            )

    @property
    def is_leaf(self) -> bool:
        return self.body is not None

    @property
    def child_names(self) -> tuple[str, ...]:
        return tuple(child.name for child in self.children)

    def child(self, name: str) -> CommandNode | None:
        """Return the child named exactly *name*, or ``None``."""
        for candidate in self.children:
            if candidate.name == name:
                return candidate
        return None


# ---------------------------------------------------------------------------
# Cleanup results
# ---------------------------------------------------------------------------

class CleanStatus(enum.Enum):
    NOT_NECESSARY = "not-necessary"
    SUCCESS = "success"
    FAILURE = "failure"
    IGNORED = "ignored"


@dataclass(frozen=True, slots=True)
class CleanResult:
    """Outcome of one cleanup target."""

    status: CleanStatus
    message: str | None = None

    @classmethod
    def skipped(cls) -> CleanResult:
        return cls(CleanStatus.NOT_NECESSARY)

    @classmethod
    def succeeded(cls) -> CleanResult:
        return cls(CleanStatus.SUCCESS)

    @classmethod
    def failed(cls, message: str) -> CleanResult:
        return cls(CleanStatus.FAILURE, message)

    @classmethod
    def declined(cls, reason: str) -> CleanResult:
        return cls(CleanStatus.IGNORED, reason)

    @property
    def report(self) -> str:
        """One-line description shown in the report table."""
        if self.message:
            return self.message
        return {
            CleanStatus.NOT_NECESSARY: "nothing to clean",
            CleanStatus.SUCCESS: "cleaned file",
            CleanStatus.FAILURE: "something went wrong",
            CleanStatus.IGNORED: "skipped",
        }[self.status]
