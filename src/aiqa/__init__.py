"""aiqa — AI-assisted QA command-line toolkit.

A tree of subcommands sharing global options, dispatched through a
single error boundary that separates user-facing failures from crashes.
"""

from aiqa.version import __version__

__all__: list[str] = ["__version__"]
