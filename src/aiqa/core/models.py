"""Domain models for aiqa.

Frozen dataclasses and enums shared by the command harness and the
project scanners.  Besides plain records this module holds the small
amount of logic that belongs to the values themselves:
:meth:`OptionSpec.add_to` registers an option on an argparse parser, and
:meth:`InheritedSettings.merged_onto` / :meth:`InheritedSettings.covers`
implement settings inheritance.  Nothing here performs file or network
I/O.
"""

from __future__ import annotations

import argparse
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Option declarations
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class OptionSpec:
    """Declarative description of one command-line option or positional.

    Flags that do not start with ``-`` declare a positional argument.
    The remaining fields map one-to-one onto
    :meth:`argparse.ArgumentParser.add_argument` keywords; ``None``
    means "let argparse decide".
    """

    flags: tuple[str, ...]
    help: str = ""
    action: str | None = None
    default: Any = None
    type: Any = None
    choices: tuple[str, ...] | None = None
    metavar: str | None = None
    nargs: str | None = None
    version: str | None = None

    @property
    def is_positional(self) -> bool:
        return not self.flags[0].startswith("-")

    @property
    def dest(self) -> str:
        """Namespace attribute name argparse will assign."""
        if self.is_positional:
            return self.flags[0]
        primary = next((f for f in self.flags if f.startswith("--")), self.flags[0])
        return primary.lstrip("-").replace("-", "_")

    def add_to(self, parser: argparse.ArgumentParser, *, suppress_default: bool = False) -> None:
        """Register this option on *parser*.

        With *suppress_default* the option only lands in the namespace
        when given on the command line, so a value parsed by an
        ancestor parser is not overwritten by this parser's default.
        """
        kwargs: dict[str, Any] = {"help": self.help}
        if self.action is not None:
            kwargs["action"] = self.action
        if self.type is not None:
            kwargs["type"] = self.type
        if self.choices is not None:
            kwargs["choices"] = self.choices
        if self.metavar is not None:
            kwargs["metavar"] = self.metavar
        if self.nargs is not None:
            kwargs["nargs"] = self.nargs
        if self.version is not None:
            kwargs["version"] = self.version
        if suppress_default and not self.is_positional:
            kwargs["default"] = argparse.SUPPRESS
        elif self.default is not None:
            kwargs["default"] = self.default
        parser.add_argument(*self.flags, **kwargs)


# ---------------------------------------------------------------------------
# Inherited settings
# ---------------------------------------------------------------------------

class OutputMode(str, Enum):
    """How commands render their results on stdout."""

    TEXT = "text"
    JSON = "json"


@dataclass(frozen=True, slots=True)
class InheritedSettings:
    """Parent-level configuration copied onto every descendant command."""

    global_options: tuple[OptionSpec, ...] = ()
    output_mode: OutputMode = OutputMode.TEXT
    allow_unknown_options: bool = False

    def merged_onto(self, child: InheritedSettings) -> InheritedSettings:
        """Return *child* settings with this (parent) snapshot applied.

        Global options merge by destination, parent first; options the
        child already carries are not duplicated.
        """
        seen = {opt.dest for opt in self.global_options}
        merged = self.global_options + tuple(
            opt for opt in child.global_options if opt.dest not in seen
        )
        return InheritedSettings(
            global_options=merged,
            output_mode=self.output_mode,
            allow_unknown_options=self.allow_unknown_options,
        )

    def covers(self, other: InheritedSettings) -> bool:
        """Whether every global option of *other* is present here."""
        own = {opt.dest for opt in self.global_options}
        return all(opt.dest in own for opt in other.global_options)


# ---------------------------------------------------------------------------
# Action invocation context
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CommandContext:
    """Everything a resolved action receives from the dispatch loop."""

    command_path: tuple[str, ...]
    """Names from the root to the resolved command."""

    options: Mapping[str, Any]
    """Parsed option values keyed by destination name."""

    settings: InheritedSettings
    """The resolved command's inherited settings."""

    extra_args: tuple[str, ...] = ()
    """Unrecognised arguments; only non-empty for lenient commands."""

    @property
    def output_mode(self) -> OutputMode:
        value = self.options.get("output")
        if value is None:
            return self.settings.output_mode
        return OutputMode(value)


# ---------------------------------------------------------------------------
# Failure classification
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Classified:
    """A known, user-facing failure eligible for a one-line report."""

    discriminator: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class Unclassified:
    """Any other failure; carries the original exception untouched."""

    payload: BaseException


Failure = Classified | Unclassified


# ---------------------------------------------------------------------------
# Process outcomes
# ---------------------------------------------------------------------------

class Phase(str, Enum):
    """Which guard produced a failure outcome (diagnostics only)."""

    DISPATCH = "dispatch"
    PROCESS = "process"


@dataclass(frozen=True, slots=True)
class Success:
    """The resolved action completed normally."""


@dataclass(frozen=True, slots=True)
class ClassifiedFailure:
    failure: Classified
    phase: Phase = field(default=Phase.DISPATCH, compare=False)


@dataclass(frozen=True, slots=True)
class UnclassifiedFailure:
    failure: Unclassified
    phase: Phase = field(default=Phase.DISPATCH, compare=False)


ProcessOutcome = Success | ClassifiedFailure | UnclassifiedFailure


# ---------------------------------------------------------------------------
# Project scanning
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ProjectManifests:
    """Dependency names declared by the project's package manifests."""

    npm_dependencies: frozenset[str] = frozenset()
    python_dependencies: frozenset[str] = frozenset()
    sources: tuple[str, ...] = ()
    """Manifest file names that were found (e.g. ``package.json``)."""


@dataclass(frozen=True, slots=True)
class FrameworkReport:
    frameworks: tuple[str, ...]
    test_runners: tuple[str, ...]
    languages: tuple[str, ...]
    manifests: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ProjectAnalysis:
    """Source/test split of a project tree (POSIX-style relative paths)."""

    source_files: tuple[str, ...]
    test_files: tuple[str, ...]
    untested_files: tuple[str, ...]

    @property
    def coverage_ratio(self) -> float:
        if not self.source_files:
            return 1.0
        tested = len(self.source_files) - len(self.untested_files)
        return tested / len(self.source_files)


@dataclass(frozen=True, slots=True)
class PlannedTest:
    source: str
    target: str
    language: str
