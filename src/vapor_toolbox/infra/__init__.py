"""Infrastructure layer: external system integration.

This layer wraps all interaction with child processes, the shell and
operating-system signals.  Every raw ``OSError`` from spawning must be
caught here and re-raised as a
:class:`~vapor_toolbox.exceptions.ToolboxError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output beyond the injected interactive echo.
* Must expose clean, typed interfaces consumed by the core layer.
"""

from vapor_toolbox.infra.process_runner import ProcessRegistry, SubprocessRunner
from vapor_toolbox.infra.shell import FileContentProvider, SystemShell
from vapor_toolbox.infra.signals import forward_signals

__all__: list[str] = [
    "FileContentProvider",
    "ProcessRegistry",
    "SubprocessRunner",
    "SystemShell",
    "forward_signals",
]
