"""CLI console helpers built on Rich.

Rich is imported lazily so that importing the package never fails on a
broken install; the first rendering call raises
:class:`~vapor_toolbox.exceptions.DependencyError` instead.
"""

from __future__ import annotations

import logging
from typing import Any

from vapor_toolbox.exceptions import DependencyError

_RICH_MISSING: str = "rich is not installed. Install with: pip install rich"

_LOGGER_NAME: str = "vapor_toolbox"


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``DependencyError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise DependencyError(_RICH_MISSING) from exc
	return Console


def import_rich_table() -> type[Any]:
	"""Import ``rich.table.Table`` lazily for tabular reports."""
	try:
		from rich.table import Table
	except ModuleNotFoundError as exc:
		raise DependencyError(_RICH_MISSING) from exc
	return Table


def get_rich_console(*, stderr: bool = False) -> Any:
	"""Create a Rich console targeting stdout, or stderr when asked."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr)


def escape(text: str) -> str:
	"""Escape Rich markup in user-supplied text."""
	try:
		from rich.markup import escape as rich_escape
	except ModuleNotFoundError as exc:
		raise DependencyError(_RICH_MISSING) from exc
	return rich_escape(text)


class _ConsoleProxy:
	"""``print``-compatible proxy resolving the Rich console per call.

	Resolving per call keeps output pointed at whatever ``sys.stdout`` /
	``sys.stderr`` currently are, which is what test capture relies on.
	"""

	def __init__(self, *, stderr: bool) -> None:
		self._stderr = stderr

	def print(self, *objects: object, **kwargs: Any) -> None:
		get_rich_console(stderr=self._stderr).print(*objects, **kwargs)


console = _ConsoleProxy(stderr=False)
err_console = _ConsoleProxy(stderr=True)


def echo_command(line: str) -> None:
	"""Show the command line of an interactive child before it starts."""
	console.print(line, markup=False, highlight=False, soft_wrap=True)


def configure_logging(level: str) -> None:
	"""Send ``vapor_toolbox`` log records to stderr through Rich."""
	try:
		from rich.logging import RichHandler
	except ModuleNotFoundError as exc:
		raise DependencyError(_RICH_MISSING) from exc

	logger = logging.getLogger(_LOGGER_NAME)
	for handler in list(logger.handlers):
		if isinstance(handler, RichHandler):
			logger.removeHandler(handler)
	handler = RichHandler(
		console=get_rich_console(stderr=True),
		show_time=False,
		show_path=False,
	)
	logger.addHandler(handler)
	logger.setLevel(level)
