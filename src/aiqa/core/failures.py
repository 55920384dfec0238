"""Failure classification for the top-level error boundary.

:func:`classify` is the only place that decides whether a failure is a
user-facing :class:`~aiqa.exceptions.AiqaError`; both the dispatch
guard and the process guard go through
:func:`handle_top_level_failure`, which differ only in the ``phase``
recorded in the diagnostic breadcrumb.
"""

from __future__ import annotations

from aiqa.core.models import (
    Classified,
    ClassifiedFailure,
    Failure,
    Phase,
    ProcessOutcome,
    Unclassified,
    UnclassifiedFailure,
)
from aiqa.exceptions import AiqaError
from aiqa.log import get_logger


def classify(failure: BaseException) -> Failure:
    """Map an exception onto the closed :data:`Failure` sum type."""
    if isinstance(failure, AiqaError):
        return Classified(
            discriminator=failure.name,
            message=failure.message,
            hint=failure.hint,
        )
    return Unclassified(payload=failure)


def handle_top_level_failure(failure: BaseException, phase: Phase) -> ProcessOutcome:
    """Turn an escaped failure into a terminal process outcome."""
    get_logger(__name__).debug(
        "handling top-level failure",
        phase=phase.value,
        failure_type=type(failure).__name__,
    )
    classified = classify(failure)
    if isinstance(classified, Classified):
        return ClassifiedFailure(classified, phase)
    return UnclassifiedFailure(classified, phase)
