"""Process exit policy — the last step of every aiqa run.

:func:`apply_outcome` turns a terminal
:data:`~aiqa.core.models.ProcessOutcome` into its visible effect and
never returns:

=====================  ================================  ===========
Outcome                stderr                            exit status
=====================  ================================  ===========
Success                nothing                           0
ClassifiedFailure      ``<name> <message>`` (+ hint)     1
UnclassifiedFailure    re-raised, or Rich traceback      runtime / 2
=====================  ================================  ===========

The unclassified row depends on :class:`~aiqa.config.UnclassifiedPolicy`.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from aiqa.cli import exit_codes
from aiqa.cli.console import console
from aiqa.config import UnclassifiedPolicy
from aiqa.core.models import ClassifiedFailure, ProcessOutcome, Success, UnclassifiedFailure


def report_classified(outcome: ClassifiedFailure) -> None:
    """Write the one-line report for a classified failure to stderr."""
    failure = outcome.failure
    console.error_line(failure.discriminator, failure.message)
    if failure.hint:
        console.plain(f"Hint: {failure.hint}")


def _report_unclassified(outcome: UnclassifiedFailure) -> None:
    exc = outcome.failure.payload
    try:
        from rich.traceback import Traceback
    except ModuleNotFoundError:
        import traceback

        traceback.print_exception(exc, file=sys.stderr)
        return
    console.print(Traceback.from_exception(type(exc), exc, exc.__traceback__))
    console.print(
        "[bold red]Unexpected error.[/bold red] Please report this issue.",
        highlight=False,
    )


def apply_outcome(
    outcome: ProcessOutcome,
    *,
    policy: UnclassifiedPolicy = UnclassifiedPolicy.RAISE,
) -> NoReturn:
    """Terminate the process according to *outcome*.

    Raises
    ------
    SystemExit
        For successes, classified failures, and unclassified failures
        under the ``report`` policy.
    BaseException
        The original failure, for unclassified failures under the
        ``raise`` policy.
    """
    if isinstance(outcome, Success):
        sys.exit(exit_codes.SUCCESS)
    if isinstance(outcome, ClassifiedFailure):
        report_classified(outcome)
        sys.exit(exit_codes.GENERAL_ERROR)
    if policy is UnclassifiedPolicy.REPORT:
        _report_unclassified(outcome)
        sys.exit(exit_codes.UNEXPECTED_ERROR)
    raise outcome.failure.payload
