"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit: command completed, help was shown, or a report rendered."""

GENERAL_ERROR: int = 1
"""A known ToolboxError was caught. User-facing message was displayed."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""

USAGE_ERROR: int = 64
"""Unknown command or bad flags.  Follows ``sysexits.h`` (EX_USAGE)."""

CANNOT_EXECUTE: int = 126
"""A program was found but the OS refused to launch it."""

COMMAND_NOT_FOUND: int = 127
"""A program could not be found on ``PATH``."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
