"""Core layer — the command harness and pure project scanning.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
"""

from aiqa.core.command import Action, Command, attach, propagate
from aiqa.core.failures import classify, handle_top_level_failure
from aiqa.core.models import (
    Classified,
    ClassifiedFailure,
    CommandContext,
    Failure,
    InheritedSettings,
    OptionSpec,
    OutputMode,
    Phase,
    ProcessOutcome,
    Success,
    Unclassified,
    UnclassifiedFailure,
)
from aiqa.core.tree import CommandTree, Resolution

__all__: list[str] = [
    "Action",
    "Classified",
    "ClassifiedFailure",
    "Command",
    "CommandContext",
    "CommandTree",
    "Failure",
    "InheritedSettings",
    "OptionSpec",
    "OutputMode",
    "Phase",
    "ProcessOutcome",
    "Resolution",
    "Success",
    "Unclassified",
    "UnclassifiedFailure",
    "attach",
    "classify",
    "handle_top_level_failure",
    "propagate",
]
