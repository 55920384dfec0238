"""CLI application entry point and command-tree assembly for aiqa.

This module is the **outer error boundary** for the entire application.
The dispatch loop (:mod:`aiqa.cli.dispatch`) guards the selected action;
:func:`cli` guards everything else: settings, tree assembly, argument
resolution.  Both guards classify failures the same way and the result
is applied exactly once by :func:`~aiqa.cli.exit_policy.apply_outcome`.

Architecture notes
------------------
* No business logic lives here — subcommand actions are defined in
  :mod:`aiqa.cli.commands` and delegate to the core/infra layers.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence

from aiqa.cli import exit_codes
from aiqa.cli.commands import (
    analyze_command,
    cache_command,
    clear_command,
    detect_framework_command,
    generate_command,
    github_code_command,
    init_command,
    plan_command,
    root_command,
)
from aiqa.cli.console import console
from aiqa.cli.dispatch import run
from aiqa.cli.exit_policy import apply_outcome
from aiqa.config import AppSettings, UnclassifiedPolicy, load_settings
from aiqa.core.failures import handle_top_level_failure
from aiqa.core.models import Phase, ProcessOutcome
from aiqa.core.tree import CommandTree, Resolution
from aiqa.log import configure_logging
from aiqa.utils.warnings_filter import install_warning_filter


# ---------------------------------------------------------------------------
# Command tree
# ---------------------------------------------------------------------------

def build_command_tree(settings: AppSettings) -> CommandTree:
    """Assemble and freeze the ``aiqa`` command tree.

    The attachment order below is the order of the help listing.
    """
    root = root_command(settings)
    root.add_command(init_command(settings))
    root.add_command(github_code_command(settings))
    cache = root.add_command(cache_command())
    cache.add_command(clear_command(settings))
    root.add_command(detect_framework_command(settings))
    root.add_command(analyze_command(settings))
    root.add_command(plan_command(settings))
    root.add_command(generate_command(settings))
    return CommandTree.freeze(root)


def _apply_global_options(resolution: Resolution) -> None:
    level = resolution.options.get("log_level")
    if level:
        configure_logging(level)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: Sequence[str] | None = None, *, settings: AppSettings | None = None) -> ProcessOutcome:
    """Run the aiqa CLI and return its outcome without exiting.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    settings:
        Pre-loaded settings; read from the environment when omitted.
    """
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)
    tree = build_command_tree(settings)
    return asyncio.run(run(tree, argv, on_resolved=_apply_global_options))


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli(argv: Sequence[str] | None = None) -> None:
    """Top-level error boundary invoked by the console-script entry point.

    Classified failures end with a one-line report and status 1.
    Unclassified failures are re-raised for the interpreter to report,
    unless ``AIQA_UNCLASSIFIED_POLICY=report`` is set.
    """
    install_warning_filter()
    policy = UnclassifiedPolicy.RAISE
    try:
        settings = load_settings()
        policy = settings.unclassified_policy
        outcome = main(argv, settings=settings)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:
        outcome = handle_top_level_failure(exc, Phase.PROCESS)
    apply_outcome(outcome, policy=policy)
