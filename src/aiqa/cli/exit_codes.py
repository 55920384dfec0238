"""Process exit statuses of the ``aiqa`` command.

:func:`aiqa.cli.exit_policy.apply_outcome` and the ``KeyboardInterrupt``
handler in :func:`aiqa.cli.app.cli` are the only places that exit with
these values.
"""

from __future__ import annotations

SUCCESS: int = 0
"""The selected action finished (or a group printed its help)."""

GENERAL_ERROR: int = 1
"""A classified failure; ``<name> <message>`` was written to stderr."""

USAGE_ERROR: int = 2
"""argparse rejected the command line (unknown option, bad value)."""

UNEXPECTED_ERROR: int = 2
"""An unclassified failure was reported under the ``report`` policy."""

KEYBOARD_INTERRUPT: int = 130
"""Ctrl+C (128 + SIGINT)."""
