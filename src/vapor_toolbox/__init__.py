"""vapor-toolbox: command router and process runner for Vapor projects.

Routes command lines through a declarative command tree and wraps
external programs (``docker``, ``xcodebuild``, ``/bin/sh``) behind a
typed process runner.
"""

from vapor_toolbox.version import __version__

__all__: list[str] = ["__version__"]
