"""Declaration of the ``vapor`` command tree.

The tree is plain data: :class:`CommandNode` records built once per
invocation and walked by :class:`~vapor_toolbox.core.router.Router`.
"""

from __future__ import annotations

from vapor_toolbox.cli.clean import HELP as CLEAN_HELP
from vapor_toolbox.cli.clean import run_clean
from vapor_toolbox.cli.docker import run_build, run_enter, run_init, run_run
from vapor_toolbox.cli.doctor import run_doctor
from vapor_toolbox.core.models import CommandNode

ROOT_NAME: str = "vapor"


def _docker_tree() -> CommandNode:
    leaves = (
        CommandNode(
            name="init",
            summary="Creates a Dockerfile",
            help=(
                "Creates a Dockerfile in the current directory.",
                "",
                "Options:",
                "  --verbose   Print the generated Dockerfile.",
            ),
            body=run_init,
        ),
        CommandNode(
            name="build",
            summary="Build the docker image",
            help=(
                "Build the docker image, using the swift",
                "version specified in .swift-version.",
            ),
            body=run_build,
        ),
        CommandNode(
            name="run",
            summary="Run the app in a docker container",
            help=(
                "Run the app in a docker container with the",
                "image created by running 'vapor docker build'.",
            ),
            body=run_run,
        ),
        CommandNode(
            name="enter",
            summary="Enter the docker container",
            help=(
                "Enter the docker container (useful for",
                "debugging purposes).",
            ),
            body=run_enter,
        ),
    )
    return CommandNode(
        name="docker",
        summary="Setup and run vapor app via docker",
        help=(
            "Setup and run vapor app via docker",
            "sub commands: " + "|".join(leaf.name for leaf in leaves),
        ),
        children=leaves,
    )


def build_command_tree() -> CommandNode:
    """Return the root of the ``vapor`` command tree."""
    return CommandNode(
        name=ROOT_NAME,
        summary="Vapor Toolbox",
        help=("Vapor Toolbox: manage Vapor projects from the command line.",),
        children=(
            CommandNode(
                name="clean",
                summary="Cleans temporary files.",
                help=CLEAN_HELP,
                body=run_clean,
            ),
            _docker_tree(),
            CommandNode(
                name="doctor",
                summary="Check the environment for required programs.",
                body=run_doctor,
            ),
        ),
    )
