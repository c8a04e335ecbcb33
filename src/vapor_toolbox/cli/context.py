"""Per-invocation wiring handed to every leaf body."""

from __future__ import annotations

from dataclasses import dataclass

from vapor_toolbox.cli.console import echo_command
from vapor_toolbox.config import Settings
from vapor_toolbox.core.protocols import ProcessRunner
from vapor_toolbox.infra.process_runner import ProcessRegistry, SubprocessRunner
from vapor_toolbox.infra.shell import SystemShell


@dataclass(frozen=True, slots=True)
class CommandContext:
    """Everything a leaf needs; built once per invocation."""

    settings: Settings
    processes: ProcessRegistry
    """Holds the interactive child so signal handlers can reach it."""

    runner: ProcessRunner
    shell: SystemShell


def build_context(settings: Settings | None = None) -> CommandContext:
    settings = settings if settings is not None else Settings.from_env()
    processes = ProcessRegistry()
    runner = SubprocessRunner(processes, echo=echo_command)
    return CommandContext(
        settings=settings,
        processes=processes,
        runner=runner,
        shell=SystemShell(runner, settings),
    )
