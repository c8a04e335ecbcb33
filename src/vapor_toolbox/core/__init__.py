"""Core / service layer: routing, workflows and value objects.

Rules
-----
* No ``print()`` calls.
* No direct process or filesystem access; everything goes through the
  protocols in :mod:`vapor_toolbox.core.protocols`.
* No imports from ``cli`` or ``infra``.
"""

from vapor_toolbox.core.cleaner import CleanOptions, Cleaner
from vapor_toolbox.core.docker import DockerWorkflow
from vapor_toolbox.core.models import (
    CapturedText,
    CleanResult,
    CleanStatus,
    CommandNode,
    ExitStatus,
    OutputChunk,
    ProcessSpec,
    StreamMode,
    StreamOrigin,
    WaitStatus,
)
from vapor_toolbox.core.protocols import ContentProvider, ProcessRunner, Shell
from vapor_toolbox.core.router import HelpText, Route, Router, resolve

__all__: list[str] = [
    "CapturedText",
    "CleanOptions",
    "CleanResult",
    "CleanStatus",
    "Cleaner",
    "CommandNode",
    "ContentProvider",
    "DockerWorkflow",
    "ExitStatus",
    "HelpText",
    "OutputChunk",
    "ProcessRunner",
    "ProcessSpec",
    "Route",
    "Router",
    "Shell",
    "StreamMode",
    "StreamOrigin",
    "WaitStatus",
    "resolve",
]
