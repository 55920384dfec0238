"""Smoke tests — verify package wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
"""

from __future__ import annotations

import pytest

from aiqa import __version__
from aiqa.cli import exit_codes
from aiqa.cli.app import cli, main
from aiqa.core.models import Success
from aiqa.exceptions import (
    AiqaError,
    CacheError,
    CommandTreeError,
    ConfigError,
    EnvironmentError,
    InvalidInputError,
    ResourceUnreachableError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            ConfigError,
            InvalidInputError,
            ResourceUnreachableError,
            CacheError,
            CommandTreeError,
            EnvironmentError,
        ],
    )
    def test_all_exceptions_inherit_from_base(
        self, exc_class: type[AiqaError]
    ) -> None:
        assert issubclass(exc_class, AiqaError)

    def test_base_inherits_from_exception(self) -> None:
        assert issubclass(AiqaError, Exception)

    def test_name_is_class_name(self) -> None:
        assert ConfigError("x").name == "ConfigError"
        assert AiqaError("x").name == "AiqaError"

    def test_message_and_hint_are_stored(self) -> None:
        err = AiqaError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.message == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        err = AiqaError("boom")
        assert err.hint is None


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130

    def test_unexpected_error_is_two(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 2


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

class TestEntryPoints:
    def test_no_args_prints_help_and_succeeds(self, capsys: pytest.CaptureFixture[str]) -> None:
        outcome = main([])
        assert outcome == Success()
        assert "usage: aiqa" in capsys.readouterr().out

    def test_version_flag(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_cli_without_args_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli([])
        assert exc_info.value.code == exit_codes.SUCCESS

    def test_module_entry_point_is_importable(self) -> None:
        import aiqa.__main__  # noqa: F401
