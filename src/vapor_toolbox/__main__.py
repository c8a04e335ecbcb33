"""Allow ``python -m vapor_toolbox`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m vapor_toolbox`` behaves identically to the ``vapor``
console script.
"""

from __future__ import annotations

from vapor_toolbox.cli.app import cli

if __name__ == "__main__":
    cli()
