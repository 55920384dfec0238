"""Tests for the dispatch loop (cli/dispatch.py).

Coverage:
* Exactly one action, the selected leaf's, runs per invocation.
* Clean completion, classified and unclassified failures become the
  matching ProcessOutcome without writing anything themselves.
* Group commands without an action print help and succeed.
* The resolution hook runs before the action.
"""

from __future__ import annotations

from typing import Any

import pytest

from aiqa.cli.dispatch import dispatch, run
from aiqa.core.command import Command
from aiqa.core.models import (
    ClassifiedFailure,
    CommandContext,
    InheritedSettings,
    OptionSpec,
    Phase,
    Success,
    UnclassifiedFailure,
)
from aiqa.core.tree import CommandTree, Resolution
from aiqa.exceptions import ConfigError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _tree(actions: dict[str, Any]) -> CommandTree:
    root = Command(
        "tool",
        settings=InheritedSettings(
            global_options=(OptionSpec(("--log-level",), default="WARNING"),),
        ),
        action=actions.get("root"),
    )
    root.add_command(Command("init", action=actions.get("init")))
    cache = root.add_command(Command("cache", action=actions.get("cache")))
    cache.add_command(Command("clear", action=actions.get("clear")))
    root.add_command(
        Command(
            "analyze",
            options=(OptionSpec(("--path",), default="."),),
            action=actions.get("analyze"),
        )
    )
    return CommandTree.freeze(root)


def _recording_actions(names: list[str]) -> tuple[dict[str, Any], list[tuple[str, CommandContext]]]:
    calls: list[tuple[str, CommandContext]] = []

    def make(name: str) -> Any:
        async def action(context: CommandContext) -> None:
            calls.append((name, context))

        return action

    return {name: make(name) for name in names}, calls


def _failing(exc: BaseException) -> Any:
    async def action(context: CommandContext) -> None:
        raise exc

    return action


# ---------------------------------------------------------------------------
# Single invocation
# ---------------------------------------------------------------------------

class TestSingleInvocation:
    @pytest.mark.asyncio
    async def test_leaf_runs_alone(self) -> None:
        actions, calls = _recording_actions(["root", "init", "cache", "clear", "analyze"])
        outcome = await run(_tree(actions), ["cache", "clear"])
        assert outcome == Success()
        assert [name for name, _ in calls] == ["clear"]

    @pytest.mark.asyncio
    async def test_leaf_receives_parsed_options(self) -> None:
        actions, calls = _recording_actions(["analyze"])
        await run(_tree(actions), ["analyze", "--path", "src", "--log-level", "DEBUG"])
        (_, context), = calls
        assert context.command_path == ("tool", "analyze")
        assert context.options["path"] == "src"
        assert context.options["log_level"] == "DEBUG"

    @pytest.mark.asyncio
    async def test_root_action_when_no_subcommand(self) -> None:
        actions, calls = _recording_actions(["root", "init"])
        await run(_tree(actions), [])
        assert [name for name, _ in calls] == ["root"]

    @pytest.mark.asyncio
    async def test_group_without_action_prints_help(
        self, capsys: pytest.CaptureFixture[str],
    ) -> None:
        actions, calls = _recording_actions(["clear"])
        outcome = await run(_tree(actions), ["cache"])
        assert outcome == Success()
        assert calls == []
        assert "usage: tool cache" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_on_resolved_hook_runs_first(self) -> None:
        order: list[str] = []

        async def action(context: CommandContext) -> None:
            order.append("action")

        def hook(resolution: Resolution) -> None:
            order.append(f"hook:{resolution.command.name}")

        await run(_tree({"init": action}), ["init"], on_resolved=hook)
        assert order == ["hook:init", "action"]


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

class TestOutcomes:
    @pytest.mark.asyncio
    async def test_success_writes_nothing(self, capsys: pytest.CaptureFixture[str]) -> None:
        actions, _ = _recording_actions(["init"])
        outcome = await run(_tree(actions), ["init"])
        assert isinstance(outcome, Success)
        assert capsys.readouterr().err == ""

    @pytest.mark.asyncio
    async def test_classified_failure(self, capsys: pytest.CaptureFixture[str]) -> None:
        tree = _tree({"init": _failing(ConfigError("missing token"))})
        outcome = await run(tree, ["init"])
        assert isinstance(outcome, ClassifiedFailure)
        assert outcome.failure.discriminator == "ConfigError"
        assert outcome.failure.message == "missing token"
        assert outcome.phase is Phase.DISPATCH
        assert capsys.readouterr().err == ""

    @pytest.mark.asyncio
    async def test_unclassified_failure_keeps_exception(self) -> None:
        exc = ZeroDivisionError("division by zero")
        outcome = await run(_tree({"init": _failing(exc)}), ["init"])
        assert isinstance(outcome, UnclassifiedFailure)
        assert outcome.failure.payload is exc

    @pytest.mark.asyncio
    async def test_keyboard_interrupt_is_not_caught(self) -> None:
        tree = _tree({"init": _failing(KeyboardInterrupt())})
        with pytest.raises(KeyboardInterrupt):
            await run(tree, ["init"])

    @pytest.mark.asyncio
    async def test_dispatch_on_resolution(self) -> None:
        actions, calls = _recording_actions(["clear"])
        tree = _tree(actions)
        outcome = await dispatch(tree.resolve(["cache", "clear"]))
        assert outcome == Success()
        assert len(calls) == 1
