"""Flag parsing for leaf commands.

Leaves receive the raw remainder of the argument vector from the router
and parse their own flags.  ``--help`` never reaches a leaf parser: the
router answers it first.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from typing import NoReturn

from vapor_toolbox.exceptions import UsageError


class LeafParser(argparse.ArgumentParser):
    """``ArgumentParser`` that raises :class:`UsageError` instead of exiting."""

    def __init__(self, prog: str, **kwargs: object) -> None:
        super().__init__(prog=prog, add_help=False, allow_abbrev=False, **kwargs)  # type: ignore[arg-type]

    def error(self, message: str) -> NoReturn:
        raise UsageError(f"{self.prog}: {message}", hint=f"Run `{self.prog} --help` for usage.")

    def parse(self, args: Sequence[str]) -> argparse.Namespace:
        return self.parse_args(list(args))
