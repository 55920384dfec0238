"""Allow ``python -m aiqa`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m aiqa`` behaves identically to the ``aiqa`` console
script.
"""

from __future__ import annotations

from aiqa.cli.app import cli

if __name__ == "__main__":
    cli()
