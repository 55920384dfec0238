"""Subcommand definitions for the ``aiqa`` command tree.

Each ``*_command`` factory returns a fresh, unattached
:class:`~aiqa.core.command.Command`; :func:`aiqa.cli.app.build_command_tree`
attaches them in a fixed order.  Actions are thin: they read options
from the :class:`~aiqa.core.models.CommandContext`, delegate to the
``core``/``infra`` layers, and render results with :func:`emit`.
Anything user-fixable is raised as an :class:`~aiqa.exceptions.AiqaError`
subclass and reported by the dispatch loop.
"""

from __future__ import annotations

import argparse
import json
from collections.abc import Iterable
from dataclasses import asdict
from functools import partial
from pathlib import Path
from typing import Any

from aiqa.cli.console import out
from aiqa.config import AppSettings, root_settings
from aiqa.core.command import Command
from aiqa.core.models import CommandContext, OptionSpec, OutputMode, PlannedTest, ProjectAnalysis
from aiqa.core.project_scan import analyze_files, detect_frameworks, plan_tests, render_skeleton
from aiqa.exceptions import ConfigError, InvalidInputError
from aiqa.infra.github_client import GitHubClient, build_async_client, parse_repo_slug
from aiqa.infra.project_files import list_project_files, read_manifests, require_directory
from aiqa.infra.workspace import Workspace
from aiqa.version import __version__

FRAMEWORK_ARTIFACT = "framework.json"
ANALYSIS_ARTIFACT = "analysis.json"
PLAN_ARTIFACT = "plan.json"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def emit(context: CommandContext, payload: dict[str, Any], lines: Iterable[str]) -> None:
    """Write a command result to stdout in the requested output mode.

    Both modes go through :data:`~aiqa.cli.console.out` as verbatim text,
    so a JSON document is never restyled.
    """
    if context.output_mode is OutputMode.JSON:
        out.plain(json.dumps(payload, indent=2))
        return
    for line in lines:
        out.plain(line)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _project_dir(context: CommandContext) -> Path:
    return require_directory(Path(context.options.get("path") or "."))


_PATH_OPTION = OptionSpec(
    ("-p", "--path"),
    help="Project directory to inspect (default: current directory).",
    default=".",
    metavar="DIR",
)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

def root_command(settings: AppSettings) -> Command:
    return Command(
        "aiqa",
        help="AI-assisted QA toolkit: detect, analyse, plan and generate tests.",
        options=(
            OptionSpec(
                ("-V", "--version"),
                action="version",
                version=f"%(prog)s {__version__}",
                help="Show the version and exit.",
            ),
        ),
        settings=root_settings(settings),
    )


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

async def _init(settings: AppSettings, context: CommandContext) -> None:
    path = Workspace(settings.workspace_dir).init(force=bool(context.options.get("force")))
    emit(context, {"config": str(path)}, [f"Initialised {path}"])


def init_command(settings: AppSettings) -> Command:
    return Command(
        "init",
        help="Create the aiqa workspace in the current directory.",
        options=(
            OptionSpec(("--force",), action="store_true", help="Overwrite an existing configuration."),
        ),
        action=partial(_init, settings),
    )


# ---------------------------------------------------------------------------
# github-code
# ---------------------------------------------------------------------------

async def _github_code(settings: AppSettings, context: CommandContext) -> None:
    owner, repo = parse_repo_slug(context.options["repo"])
    ref = context.options.get("ref")
    async with build_async_client(settings) as http:
        files = await GitHubClient(http).list_files(
            owner, repo, ref=ref, prefix=context.options.get("path") or "",
        )
    cached = Workspace(settings.workspace_dir).write_cache(
        f"github/{owner}__{repo}.json",
        {"repository": f"{owner}/{repo}", "ref": ref, "files": list(files)},
    )
    emit(
        context,
        {"repository": f"{owner}/{repo}", "files": list(files), "cache": str(cached)},
        [*files, f"{len(files)} files from {owner}/{repo}, cached at {cached}"],
    )


def github_code_command(settings: AppSettings) -> Command:
    return Command(
        "github-code",
        help="List the files of a GitHub repository and cache the listing.",
        options=(
            OptionSpec(("repo",), help="Repository as owner/repo.", metavar="OWNER/REPO"),
            OptionSpec(("--ref",), help="Branch, tag or commit (default: default branch)."),
            OptionSpec(("--path",), help="Only list files below this path.", metavar="PREFIX"),
        ),
        action=partial(_github_code, settings),
    )


# ---------------------------------------------------------------------------
# cache / cache clear
# ---------------------------------------------------------------------------

async def _cache_clear(settings: AppSettings, context: CommandContext) -> None:
    workspace = Workspace(settings.workspace_dir)
    removed = workspace.clear_cache()
    emit(
        context,
        {"removed": removed, "cache": str(workspace.cache_dir)},
        [f"Removed {removed} cache entr{'y' if removed == 1 else 'ies'} from {workspace.cache_dir}"],
    )


def cache_command() -> Command:
    return Command("cache", help="Manage the local cache.")


def clear_command(settings: AppSettings) -> Command:
    return Command(
        "clear",
        help="Delete every cached entry.",
        action=partial(_cache_clear, settings),
    )


# ---------------------------------------------------------------------------
# detect-framework
# ---------------------------------------------------------------------------

async def _detect_framework(settings: AppSettings, context: CommandContext) -> None:
    project = _project_dir(context)
    report = detect_frameworks(read_manifests(project))
    artifact = Workspace(settings.workspace_dir).write_artifact(
        FRAMEWORK_ARTIFACT, {"project": str(project), **asdict(report)},
    )
    emit(
        context,
        asdict(report),
        [
            f"Frameworks:   {', '.join(report.frameworks) or 'none detected'}",
            f"Test runners: {', '.join(report.test_runners) or 'none detected'}",
            f"Languages:    {', '.join(report.languages) or 'unknown'}",
            f"Saved to {artifact}",
        ],
    )


def detect_framework_command(settings: AppSettings) -> Command:
    return Command(
        "detect-framework",
        help="Detect frameworks and test runners from the project manifests.",
        options=(_PATH_OPTION,),
        action=partial(_detect_framework, settings),
    )


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------

async def _analyze(settings: AppSettings, context: CommandContext) -> None:
    project = _project_dir(context)
    analysis = analyze_files(list_project_files(project))
    artifact = Workspace(settings.workspace_dir).write_artifact(
        ANALYSIS_ARTIFACT, {"project": str(project), **asdict(analysis)},
    )
    emit(
        context,
        {"project": str(project), **asdict(analysis), "coverage_ratio": analysis.coverage_ratio},
        [
            f"{len(analysis.source_files)} source files, {len(analysis.test_files)} test files",
            f"{len(analysis.untested_files)} without tests "
            f"({analysis.coverage_ratio:.0%} have a matching test)",
            f"Saved to {artifact}",
        ],
    )


def analyze_command(settings: AppSettings) -> Command:
    return Command(
        "analyze",
        help="Find source files that have no matching test file.",
        options=(_PATH_OPTION,),
        action=partial(_analyze, settings),
    )


# ---------------------------------------------------------------------------
# plan
# ---------------------------------------------------------------------------

def _analysis_from(data: Any) -> tuple[str, ProjectAnalysis]:
    try:
        return data["project"], ProjectAnalysis(
            source_files=tuple(data["source_files"]),
            test_files=tuple(data["test_files"]),
            untested_files=tuple(data["untested_files"]),
        )
    except (KeyError, TypeError) as exc:
        raise ConfigError(
            f"{ANALYSIS_ARTIFACT} is malformed.",
            hint="Re-run 'aiqa analyze' to regenerate it.",
        ) from exc


async def _plan(settings: AppSettings, context: CommandContext) -> None:
    workspace = Workspace(settings.workspace_dir)
    project, analysis = _analysis_from(
        workspace.read_artifact(ANALYSIS_ARTIFACT, produced_by="analyze")
    )
    planned = plan_tests(analysis, limit=context.options.get("limit"))
    artifact = workspace.write_artifact(
        PLAN_ARTIFACT, {"project": project, "tests": [asdict(entry) for entry in planned]},
    )
    emit(
        context,
        {"project": project, "tests": [asdict(entry) for entry in planned]},
        [
            *(f"{entry.target}  <- {entry.source}" for entry in planned),
            f"{len(planned)} test files planned. Saved to {artifact}",
        ],
    )


def plan_command(settings: AppSettings) -> Command:
    return Command(
        "plan",
        help="Plan which test files to create from the last analysis.",
        options=(
            OptionSpec(
                ("-n", "--limit"),
                type=_positive_int,
                metavar="N",
                help="Plan at most N test files.",
            ),
        ),
        action=partial(_plan, settings),
    )


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------

def _plan_from(data: Any) -> tuple[Path, tuple[PlannedTest, ...]]:
    try:
        return Path(data["project"]), tuple(PlannedTest(**entry) for entry in data["tests"])
    except (KeyError, TypeError) as exc:
        raise ConfigError(
            f"{PLAN_ARTIFACT} is malformed.",
            hint="Re-run 'aiqa plan' to regenerate it.",
        ) from exc


async def _generate(settings: AppSettings, context: CommandContext) -> None:
    project, planned = _plan_from(
        Workspace(settings.workspace_dir).read_artifact(PLAN_ARTIFACT, produced_by="plan")
    )
    out_dir = Path(context.options["out"]) if context.options.get("out") else project
    dry_run = bool(context.options.get("dry_run"))

    written: list[str] = []
    skipped: list[str] = []
    for entry in planned:
        target = out_dir / entry.target
        if target.exists():
            skipped.append(str(target))
            continue
        if not dry_run:
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(render_skeleton(entry), encoding="utf-8")
            except OSError as exc:
                raise InvalidInputError(f"Cannot write {target}: {exc}") from exc
        written.append(str(target))

    verb = "Would create" if dry_run else "Created"
    emit(
        context,
        {"dry_run": dry_run, "written": written, "skipped": skipped},
        [
            *(f"{verb} {path}" for path in written),
            *(f"Skipped {path} (already exists)" for path in skipped),
        ],
    )


def generate_command(settings: AppSettings) -> Command:
    return Command(
        "generate",
        help="Write test skeletons for the planned test files.",
        options=(
            OptionSpec(("--out",), metavar="DIR", help="Write below DIR instead of the project."),
            OptionSpec(("--dry-run",), action="store_true", help="Only list what would be written."),
        ),
        action=partial(_generate, settings),
    )
