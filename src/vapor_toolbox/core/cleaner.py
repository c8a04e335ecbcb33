"""Core project cleaner: removes build artifacts left by SwiftPM and Xcode.

Every target is an independent step that decides for itself whether it
applies, by looking at a directory listing taken when the cleaner is
created.  Steps never abort each other: an exception in one step
becomes a ``failed`` row and the remaining steps still run.

Guarantees
----------
* No ``print()``; the CLI renders the returned rows.
* All filesystem access goes through the injected
  :class:`~vapor_toolbox.core.protocols.Shell`.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from vapor_toolbox.core.models import CleanResult
from vapor_toolbox.core.protocols import Shell

logger = logging.getLogger(__name__)

BUILD_FOLDER: str = ".build"
CHECKOUTS_FOLDER: str = "checkouts"
LOCKFILE: str = "Package.resolved"
RELATIVE_DERIVED_DATA: str = "DerivedData"
XCODE_PROJECT_SUFFIX: str = ".xcodeproj"

DEFAULT_DERIVED_DATA: Path = Path("Library/Developer/Xcode/DerivedData")
"""Xcode's derived data location, relative to the home directory."""

UPDATE_HINT: str = "use [--update,-u] flag to remove this file during clean"

MACOS_PLATFORM: str = "darwin"

CleanStep = Callable[[], CleanResult]


@dataclass(frozen=True, slots=True)
class CleanOptions:
    update: bool = False
    """Also delete ``Package.resolved``."""

    keep_checkouts: bool = False
    """Keep ``.build/checkouts`` when cleaning ``.build``."""


class Cleaner:
    """Runs every cleanup step for one working directory.

    Parameters
    ----------
    shell:
        Filesystem probes and deletions.
    options:
        Flags from the command line.
    platform:
        ``sys.platform``-style name; Xcode steps only run on ``darwin``.
    """

    def __init__(
        self,
        shell: Shell,
        options: CleanOptions | None = None,
        *,
        platform: str | None = None,
    ) -> None:
        self._shell: Shell = shell
        self.options: CleanOptions = options or CleanOptions()
        self.platform: str = sys.platform if platform is None else platform
        self.cwd: Path = shell.cwd()
        self.files: frozenset[str] = frozenset(shell.all_files(self.cwd))

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def steps(self) -> list[tuple[str, CleanStep]]:
        """Return ``(name, step)`` pairs in execution order."""
        steps: list[tuple[str, CleanStep]] = []
        if self.platform == MACOS_PLATFORM:
            steps.append(("DerivedData", self.clean_derived_data))
            steps.append(("xcodeproj", self.clean_xcode_projects))
        steps.append((BUILD_FOLDER, self.clean_build_folder))
        steps.append((LOCKFILE, self.clean_package_resolved))
        return steps

    def run(self) -> list[tuple[str, CleanResult]]:
        """Run every step and collect one result per step."""
        results: list[tuple[str, CleanResult]] = []
        for name, step in self.steps():
            try:
                result = step()
            except Exception as exc:  # noqa: BLE001
                logger.warning("cleaning %s failed: %s", name, exc)
                result = CleanResult.failed(str(exc) or type(exc).__name__)
            results.append((name, result))
        return results

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def clean_package_resolved(self) -> CleanResult:
        if LOCKFILE not in self.files:
            return CleanResult.skipped()
        if not self.options.update:
            return CleanResult.declined(UPDATE_HINT)
        self._shell.delete(self.cwd / LOCKFILE)
        return CleanResult.succeeded()

    def clean_build_folder(self) -> CleanResult:
        if BUILD_FOLDER not in self.files:
            return CleanResult.skipped()
        build = self.cwd / BUILD_FOLDER
        if self.options.keep_checkouts:
            keep = {CHECKOUTS_FOLDER, ".", ".."}
            for entry in self._shell.all_files(build):
                if entry not in keep:
                    self._shell.delete(build / entry)
        else:
            self._shell.delete(build)
        return CleanResult.succeeded()

    def clean_xcode_projects(self) -> CleanResult:
        projects = self._xcode_projects()
        if not projects:
            return CleanResult.skipped()
        for project in projects:
            self._shell.delete(self.cwd / project)
        return CleanResult.succeeded()

    def clean_derived_data(self) -> CleanResult:
        default_location = self._shell.home_directory() / DEFAULT_DERIVED_DATA
        if self._remove_if_present(default_location):
            return CleanResult.succeeded()
        if self._remove_if_present(self.cwd / RELATIVE_DERIVED_DATA):
            return CleanResult.succeeded()
        if not self._xcode_projects():
            return CleanResult.skipped()

        location = self._shell.derived_data_location(self.cwd)
        if location is None or not self._remove_if_present(location):
            return CleanResult.skipped()
        return CleanResult.succeeded()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _xcode_projects(self) -> list[str]:
        return sorted(name for name in self.files if name.endswith(XCODE_PROJECT_SUFFIX))

    def _remove_if_present(self, path: Path) -> bool:
        if not self._shell.exists(path):
            return False
        self._shell.remove_tree(path)
        return True
