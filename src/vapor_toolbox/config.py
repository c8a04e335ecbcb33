"""Runtime settings read from the process environment.

Settings are resolved once, when the CLI builds its command context,
and passed down explicitly.  No other module reads ``os.environ`` for
configuration.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

WORKING_DIRECTORY_ENV: str = "TEST_DIRECTORY"
"""Overrides the working-directory probe (skips the ``pwd`` subprocess)."""

LOG_LEVEL_ENV: str = "VAPOR_LOG_LEVEL"
"""Logging level name for the toolbox loggers."""

DEFAULT_LOG_LEVEL: str = "WARNING"


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable snapshot of environment-driven configuration."""

    working_directory: Path | None = None
    """Directory used instead of probing ``pwd``, or ``None``."""

    log_level: str = DEFAULT_LOG_LEVEL
    """Upper-cased :mod:`logging` level name."""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        directory = env.get(WORKING_DIRECTORY_ENV) or None
        level = (env.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
        if not isinstance(logging.getLevelName(level), int):
            level = DEFAULT_LOG_LEVEL
        return cls(
            working_directory=Path(directory) if directory else None,
            log_level=level,
        )
