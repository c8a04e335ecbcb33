"""``vapor docker`` leaves: Dockerfile templating and image workflows.

``build``, ``run`` and ``enter`` hand the terminal to ``docker``.  When
the operator interrupts the container the command still exits with
:data:`exit_codes.SUCCESS`; see
:func:`vapor_toolbox.core.docker.check_termination`.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from vapor_toolbox.cli import exit_codes
from vapor_toolbox.cli.arguments import LeafParser
from vapor_toolbox.cli.console import console, escape
from vapor_toolbox.cli.context import CommandContext
from vapor_toolbox.core.docker import (
    DOCKERFILE,
    VERSION_FILE,
    DockerWorkflow,
    render_dockerfile,
    swift_version,
)
from vapor_toolbox.exceptions import WorkflowError
from vapor_toolbox.infra.shell import FileContentProvider


def _workflow(ctx: CommandContext) -> DockerWorkflow:
    """Check the Swift pin, then bind the workflow to the project directory.

    A missing pin raises before any child is spawned, including the
    ``pwd`` lookup behind :meth:`Shell.cwd`.
    """
    base = ctx.settings.working_directory or Path()
    version_file = FileContentProvider(base / VERSION_FILE)
    swift_version(version_file)
    project_dir = ctx.shell.cwd()
    return DockerWorkflow(
        ctx.runner,
        project_dir,
        FileContentProvider(project_dir / VERSION_FILE),
    )


def _finish(completed: bool) -> int:
    if not completed:
        console.print("\n[yellow]Stopped by user.[/yellow]")
    return exit_codes.SUCCESS


def run_init(ctx: CommandContext, args: Sequence[str]) -> int:
    """Write a Dockerfile for the current project."""
    parser = LeafParser(prog="vapor docker init")
    parser.add_argument("--verbose", action="store_true")
    options = parser.parse(args)

    project_dir = ctx.shell.cwd()
    dockerfile = project_dir / DOCKERFILE
    if dockerfile.exists():
        raise WorkflowError(
            "A Dockerfile already exists in the current directory.",
            hint="Please move it and try again or run `vapor docker build`.",
        )

    pinned = FileContentProvider(project_dir / VERSION_FILE).contents()
    content = render_dockerfile(pinned.strip() if pinned else None)
    try:
        dockerfile.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise WorkflowError(f"Could not write {DOCKERFILE}: {exc.strerror or exc}") from exc

    if options.verbose:
        console.print(escape(content))
    console.print("[green]Dockerfile created.[/green]")
    console.print("You may now adjust the file or")
    console.print("run `vapor docker build`.")
    return exit_codes.SUCCESS


def run_build(ctx: CommandContext, args: Sequence[str]) -> int:
    """Build the project image with the pinned Swift version."""
    LeafParser(prog="vapor docker build").parse(args)
    workflow = _workflow(ctx)
    version = workflow.version()

    console.print(f"Building docker image with Swift version: {escape(version)}")
    console.print("This may take a few minutes if no layers are cached...")
    return _finish(workflow.build())


def run_run(ctx: CommandContext, args: Sequence[str]) -> int:
    """Run the app inside the project image."""
    LeafParser(prog="vapor docker run").parse(args)
    workflow = _workflow(ctx)
    image = workflow.image()

    console.print(f"Launching app with image {escape(image)}")
    return _finish(workflow.run())


def run_enter(ctx: CommandContext, args: Sequence[str]) -> int:
    """Open a bash shell inside the project image."""
    LeafParser(prog="vapor docker enter").parse(args)
    workflow = _workflow(ctx)
    image = workflow.image()

    console.print(f"Starting bash in image {escape(image)}")
    return _finish(workflow.enter())
