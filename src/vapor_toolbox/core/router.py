"""Command routing over a :class:`~vapor_toolbox.core.models.CommandNode` tree.

Routing rules
-------------
1. ``--help`` / ``-h`` as the next token shows help for the current node.
2. A branch with no tokens left shows its help.
3. At a leaf, ``--help`` / ``-h`` anywhere before a ``--`` separator
   shows the leaf's help.  Otherwise the leaf receives every remaining
   token, flags included.
4. A branch consumes one token and descends into the child whose name
   matches it exactly.  No prefixes, no case folding.

The argument vector is a tuple and is only ever sliced, so the original
input stays available for error reports.
"""

from __future__ import annotations

import difflib
import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from vapor_toolbox.core.models import CommandNode
from vapor_toolbox.exceptions import CommandTreeError, UnknownCommandError

logger = logging.getLogger(__name__)

HELP_FLAGS: frozenset[str] = frozenset({"--help", "-h"})

END_OF_OPTIONS: str = "--"

HELP_SHOWN: int = 0
"""Result of a dispatch that displayed help.  Help is never an error."""


class RouteKind(enum.Enum):
    LEAF = "leaf"
    HELP = "help"


@dataclass(frozen=True, slots=True)
class Route:
    """Where an argument vector led."""

    kind: RouteKind
    node: CommandNode
    path: tuple[str, ...]
    """Names walked from the root, root included."""

    remaining: tuple[str, ...]
    """Tokens not consumed by routing."""

    argv: tuple[str, ...]
    """The untouched input."""


@dataclass(frozen=True, slots=True)
class HelpText:
    """Renderer-neutral help for one node."""

    usage: str
    description: tuple[str, ...]
    commands: tuple[tuple[str, str], ...]
    """``(name, summary)`` for every child of a branch."""


def resolve(root: CommandNode, argv: Sequence[str]) -> Route:
    """Walk *root* with *argv* until a leaf or a help request.

    Raises
    ------
    UnknownCommandError
        When a branch has no child named like the next token.
    """
    original = tuple(argv)
    node = root
    path: tuple[str, ...] = (root.name,)
    remaining = original

    while True:
        if remaining and remaining[0] in HELP_FLAGS:
            return Route(RouteKind.HELP, node, path, remaining[1:], original)
        if node.is_leaf:
            kind = RouteKind.HELP if _asks_for_help(remaining) else RouteKind.LEAF
            return Route(kind, node, path, remaining, original)
        if not remaining:
            return Route(RouteKind.HELP, node, path, remaining, original)

        name, remaining = remaining[0], remaining[1:]
        child = node.child(name)
        if child is None:
            raise UnknownCommandError(
                name,
                node.child_names,
                path=path,
                hint=_suggestion(name, node.child_names),
            )
        node = child
        path = (*path, name)


def _asks_for_help(tokens: Sequence[str]) -> bool:
    for token in tokens:
        if token == END_OF_OPTIONS:
            return False
        if token in HELP_FLAGS:
            return True
    return False


def _suggestion(name: str, candidates: Sequence[str]) -> str | None:
    matches = difflib.get_close_matches(name, candidates, n=1)
    if not matches:
        return None
    return f"Did you mean '{matches[0]}'?"


def describe(node: CommandNode, path: Sequence[str]) -> HelpText:
    """Build the help text for *node* reached through *path*."""
    invocation = " ".join(path)
    usage = f"{invocation} <command>" if not node.is_leaf else f"{invocation} [options]"
    description = node.help or (node.summary,)
    commands = tuple((child.name, child.summary) for child in node.children)
    return HelpText(usage=usage, description=description, commands=commands)


class Router:
    """Resolve argument vectors and run the selected leaf.

    Parameters
    ----------
    root:
        Root of the command tree.
    render_help:
        Called with :class:`HelpText` whenever help is requested.
    """

    def __init__(self, root: CommandNode, render_help: Callable[[HelpText], None]) -> None:
        self.root: CommandNode = root
        self._render_help: Callable[[HelpText], None] = render_help

    def dispatch(self, argv: Sequence[str], context: Any) -> int:
        """Route *argv* and return the leaf's exit code.

        Errors raised by the leaf body propagate unchanged.
        """
        route = resolve(self.root, argv)
        if route.kind is RouteKind.HELP:
            self._render_help(describe(route.node, route.path))
            return HELP_SHOWN

        logger.debug("dispatching %s with %r", " ".join(route.path), route.remaining)
        body = route.node.body
        if body is None:
            raise CommandTreeError(f"Command '{route.node.name}' has no body.")
        return body(context, route.remaining)
