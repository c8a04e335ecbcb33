"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations, so workflows can be exercised with in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

from vapor_toolbox.core.models import OutputChunk


class ProcessRunner(Protocol):
    """Contract for launching external programs."""

    def resolve(self, program: str) -> str:
        """Return an absolute path for *program* or raise ``ResolutionError``."""
        ...  # pragma: no cover

    def run_captured(self, program: str, args: Sequence[str] = ()) -> str:
        """Run *program* to completion and return its trimmed stdout.

        Raises
        ------
        ResolutionError
            When *program* cannot be found on ``PATH``.
        LaunchError
            When the OS refuses to spawn the process.
        ExecutionError
            When the process wrote anything to stderr.
        """
        ...  # pragma: no cover

    def run_interactive(
        self,
        program: str,
        args: Sequence[str] = (),
        on_output: Callable[[OutputChunk], None] | None = None,
    ) -> int:
        """Run *program* attached to the terminal and return its raw wait status."""
        ...  # pragma: no cover


class Shell(Protocol):
    """Filesystem and environment probes used by composite operations.

    Paths passed in may be absolute or relative to the process working
    directory; implementations must not reinterpret them.
    """

    def cwd(self) -> Path:
        ...  # pragma: no cover

    def all_files(self, directory: Path | None = None) -> list[str]:
        """List every entry (including dot-files, ``.`` and ``..``) of *directory*."""
        ...  # pragma: no cover

    def delete(self, path: Path) -> None:
        ...  # pragma: no cover

    def remove_tree(self, path: Path) -> None:
        """Remove *path* directly through the filesystem API."""
        ...  # pragma: no cover

    def exists(self, path: Path) -> bool:
        ...  # pragma: no cover

    def home_directory(self) -> Path:
        ...  # pragma: no cover

    def derived_data_location(self, project_dir: Path) -> Path | None:
        """Ask ``xcodebuild`` where it keeps derived data for *project_dir*."""
        ...  # pragma: no cover


class ContentProvider(Protocol):
    """Read-only access to a small text file such as a version pin."""

    def contents(self) -> str | None:
        """Return the file contents, or ``None`` when missing or unreadable."""
        ...  # pragma: no cover


EchoFunction = Callable[[str], None]
"""Sink for lines the interactive runner echoes before launching."""
