"""Shared pytest fixtures and configuration for the vapor-toolbox test suite.

Guidelines
----------
* No internet access and no docker daemon in any test.
* ``docker`` and ``xcodebuild`` are mocked at the runner boundary.
* Runner tests spawn ``/bin/sh`` for real; they are skipped elsewhere.
* Filesystem tests work inside ``tmp_path`` via the ``TEST_DIRECTORY``
  style override, never in the real working directory.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from vapor_toolbox.cli.context import CommandContext
from vapor_toolbox.config import Settings
from vapor_toolbox.core.protocols import ProcessRunner
from vapor_toolbox.infra.process_runner import ProcessRegistry, SubprocessRunner
from vapor_toolbox.infra.shell import SystemShell

ContextFactory = Callable[..., CommandContext]


def _silent_echo(_line: str) -> None:
    return None


@pytest.fixture
def make_context() -> ContextFactory:
    """Build a :class:`CommandContext` rooted at a given directory.

    Pass ``runner=`` to substitute a mock; otherwise a real
    :class:`SubprocessRunner` with a silent echo is used.
    """

    def _make(working_directory: Path, runner: ProcessRunner | None = None) -> CommandContext:
        settings = Settings(working_directory=working_directory)
        processes = ProcessRegistry()
        if runner is None:
            runner = SubprocessRunner(processes, echo=_silent_echo)
        return CommandContext(
            settings=settings,
            processes=processes,
            runner=runner,
            shell=SystemShell(runner, settings),
        )

    return _make
