"""Infrastructure: shell helpers built on the process runner.

Most helpers shell out through ``/bin/sh -c`` and therefore inherit the
runner's stderr failure policy.  Paths are always quoted before being
interpolated into a command line.
"""

from __future__ import annotations

import logging
import shlex
import shutil
from pathlib import Path

from vapor_toolbox.config import Settings
from vapor_toolbox.core.protocols import ProcessRunner
from vapor_toolbox.exceptions import ResolutionError

logger = logging.getLogger(__name__)

SHELL: str = "/bin/sh"

_BUILD_DIR_KEY: str = "BUILD_DIR"


class SystemShell:
    """Concrete :class:`~vapor_toolbox.core.protocols.Shell`.

    Parameters
    ----------
    runner:
        Executes every shell command.
    settings:
        Supplies the working-directory override, if any.
    """

    def __init__(self, runner: ProcessRunner, settings: Settings | None = None) -> None:
        self._runner: ProcessRunner = runner
        self._settings: Settings = settings or Settings()

    def bash(self, command: str) -> str:
        return self._runner.run_captured(SHELL, ["-c", command])

    def delete(self, path: Path) -> None:
        logger.debug("deleting %s", path)
        self.bash(f"rm -rf {shlex.quote(str(path))}")

    def move(self, source: Path, destination: Path) -> None:
        self.bash(f"mv {shlex.quote(str(source))} {shlex.quote(str(destination))}")

    def make_directory(self, path: Path) -> None:
        self.bash(f"mkdir -p {shlex.quote(str(path))}")

    def cwd(self) -> Path:
        if self._settings.working_directory is not None:
            return self._settings.working_directory
        return Path(self.bash("pwd"))

    def all_files(self, directory: Path | None = None) -> list[str]:
        command = "ls -a"
        if directory is not None:
            command += f" {shlex.quote(str(directory))}"
        return [line for line in self.bash(command).splitlines() if line]

    def read_file(self, path: Path) -> str:
        return self.bash(f"cat {shlex.quote(str(path))}").strip()

    def home_directory(self) -> Path:
        return Path(self.bash("echo $HOME").strip())

    def program_exists(self, program: str) -> bool:
        try:
            self._runner.resolve(program)
        except ResolutionError:
            return False
        return True

    def exists(self, path: Path) -> bool:
        return path.exists()

    def remove_tree(self, path: Path) -> None:
        logger.debug("removing tree %s", path)
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()

    def derived_data_location(self, project_dir: Path) -> Path | None:
        """Parse ``BUILD_DIR`` from ``xcodebuild -showBuildSettings``.

        ``BUILD_DIR`` looks like ``<derived data>/<Project-hash>/Build/Products``;
        the directory above ``Build`` is returned.
        """
        settings = self.bash(
            f"cd {shlex.quote(str(project_dir))} && xcodebuild -showBuildSettings"
        )
        for line in settings.splitlines():
            key, sep, value = line.strip().partition(" = ")
            if sep and key == _BUILD_DIR_KEY:
                build_dir = Path(value.strip())
                for parent in (build_dir, *build_dir.parents):
                    if parent.name == "Build":
                        return parent.parent
                return build_dir
        return None


class FileContentProvider:
    """Concrete :class:`~vapor_toolbox.core.protocols.ContentProvider` for one file."""

    def __init__(self, path: Path) -> None:
        self.path: Path = path

    def contents(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None
