"""The dispatch loop: one command line, one action, one outcome.

:func:`run` resolves *argv* against a frozen
:class:`~aiqa.core.tree.CommandTree` and awaits exactly one action.
Its guard is the inner of the two top-level guards; the outer one lives
in :func:`aiqa.cli.app.cli`.  Both hand failures to
:func:`~aiqa.core.failures.handle_top_level_failure`, so the
classification logic exists once.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from aiqa.core.failures import handle_top_level_failure
from aiqa.core.models import Phase, ProcessOutcome, Success
from aiqa.core.tree import CommandTree, Resolution

ResolvedHook = Callable[[Resolution], None]


async def dispatch(resolution: Resolution) -> ProcessOutcome:
    """Await the resolved action and convert its result to an outcome.

    A command without an action (the root, or a group such as
    ``cache``) prints its own help and succeeds.
    """
    command = resolution.command
    if command.action is None:
        resolution.parser.print_help()
        return Success()
    try:
        await command.invoke(resolution.context())
    except Exception as exc:
        return handle_top_level_failure(exc, Phase.DISPATCH)
    return Success()


async def run(
    tree: CommandTree,
    argv: Sequence[str] | None = None,
    *,
    on_resolved: ResolvedHook | None = None,
) -> ProcessOutcome:
    """Parse *argv*, dispatch the selected command, return the outcome.

    Parameters
    ----------
    tree:
        The frozen command tree.
    argv:
        Arguments without the program name; ``None`` means ``sys.argv[1:]``.
    on_resolved:
        Called with the resolution before the action runs, e.g. to apply
        ``--log-level``.  Failures raised here are not caught by the
        dispatch guard.
    """
    resolution = tree.resolve(argv)
    if on_resolved is not None:
        on_resolved(resolution)
    return await dispatch(resolution)
