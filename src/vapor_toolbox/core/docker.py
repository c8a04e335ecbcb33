"""Core docker workflows: image naming, command lines and exit handling.

The image tag is derived from the ``.swift-version`` pin in the project
directory.  Every workflow checks that pin *before* spawning anything,
so a missing pin never leaves a half-started container behind.
"""

from __future__ import annotations

import logging
import shlex
import string
from collections.abc import Mapping
from pathlib import Path

from vapor_toolbox.core.models import WaitStatus, is_benign_termination
from vapor_toolbox.core.protocols import ContentProvider, ProcessRunner
from vapor_toolbox.exceptions import PreconditionError, WorkflowError

logger = logging.getLogger(__name__)

DOCKER: str = "docker"
DOCKERFILE: str = "Dockerfile"
VERSION_FILE: str = ".swift-version"
IMAGE_REPOSITORY: str = "qutheory/swift"
CONTAINER_WORKDIR: str = "/vapor"
APP_PORT: int = 8080
DEFAULT_SWIFT_VERSION: str = "5.2"

DOCKERFILE_TEMPLATE: string.Template = string.Template(
    """\
# Generated by vapor-toolbox. Build it with `vapor docker build`.
ARG SWIFT_VERSION=$swift_version
FROM swift:$${SWIFT_VERSION}

WORKDIR $workdir
COPY . $workdir

RUN swift build --configuration release

EXPOSE $port
CMD ["swift", "run", "--configuration", "release", "Run", "serve", \
"--hostname", "0.0.0.0", "--port", "$port"]
"""
)

BUILD_HINTS: Mapping[int, str] = {
    WaitStatus.COMMAND_NOT_FOUND: (
        "Make sure you have Docker installed: https://docs.docker.com/get-docker/"
    ),
    WaitStatus.DAEMON_UNAVAILABLE: (
        "Make sure you have the Docker daemon running, or try running\n"
        '`eval "$(docker-machine env default)"`'
    ),
}

VERSION_HINT: str = f"Create a {VERSION_FILE} file containing the Swift version, e.g. 5.2"


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def swift_version(version_file: ContentProvider) -> str:
    """Return the pinned Swift version.

    Raises
    ------
    PreconditionError
        When the pin file is missing, unreadable or empty.
    """
    contents = version_file.contents()
    version = contents.strip() if contents else ""
    if not version:
        raise PreconditionError(
            f"Could not determine Swift version (check your {VERSION_FILE} file)",
            hint=VERSION_HINT,
        )
    return version


def image_name(version: str) -> str:
    return f"{IMAGE_REPOSITORY}:{version}"


def build_args(image: str, version: str) -> tuple[str, ...]:
    return ("build", "--rm", "-t", image, "--build-arg", f"SWIFT_VERSION={version}", ".")


def run_args(image: str, project_dir: Path) -> tuple[str, ...]:
    return (
        "run", "--rm", "-it",
        "-v", f"{project_dir}:{CONTAINER_WORKDIR}",
        "-p", f"{APP_PORT}:{APP_PORT}",
        image,
    )


def enter_args(image: str, project_dir: Path) -> tuple[str, ...]:
    return (
        "run", "--rm", "-it",
        "-v", f"{project_dir}:{CONTAINER_WORKDIR}",
        "--entrypoint", "bash",
        image,
    )


def render_dockerfile(version: str | None = None) -> str:
    return DOCKERFILE_TEMPLATE.substitute(
        swift_version=version or DEFAULT_SWIFT_VERSION,
        workdir=CONTAINER_WORKDIR,
        port=APP_PORT,
    )


def check_termination(
    wait_status: int,
    *,
    failure: str,
    command_line: str,
    hints: Mapping[int, str] | None = None,
) -> bool:
    """Interpret an interactive docker run.

    Returns ``True`` for a clean exit and ``False`` for a recognised
    user cancellation.

    Raises
    ------
    WorkflowError
        For every other status, with *command_line* attached.
    """
    if wait_status == 0:
        return True
    if is_benign_termination(wait_status):
        logger.debug("treating wait status %d as user cancellation", wait_status)
        return False
    raise WorkflowError(
        failure,
        command_line=command_line,
        hint=(hints or {}).get(wait_status),
    )


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------

class DockerWorkflow:
    """Builds, runs and enters the project image.

    Parameters
    ----------
    runner:
        Launches ``docker`` interactively.
    project_dir:
        Directory mounted into the container.
    version_file:
        Source of the Swift version pin.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        project_dir: Path,
        version_file: ContentProvider,
    ) -> None:
        self._runner: ProcessRunner = runner
        self.project_dir: Path = project_dir
        self._version_file: ContentProvider = version_file

    def version(self) -> str:
        return swift_version(self._version_file)

    def image(self) -> str:
        return image_name(self.version())

    def build(self) -> bool:
        version = self.version()
        args = build_args(image_name(version), version)
        return self._launch(args, failure="Could not build the Docker image", hints=BUILD_HINTS)

    def run(self) -> bool:
        args = run_args(self.image(), self.project_dir)
        return self._launch(args, failure="docker run command failed")

    def enter(self) -> bool:
        args = enter_args(self.image(), self.project_dir)
        return self._launch(args, failure="Could not enter Docker container")

    def _launch(
        self,
        args: tuple[str, ...],
        *,
        failure: str,
        hints: Mapping[int, str] | None = None,
    ) -> bool:
        status = self._runner.run_interactive(DOCKER, args)
        return check_termination(
            status,
            failure=failure,
            command_line=shlex.join((DOCKER, *args)),
            hints=hints,
        )
