"""Project scanning — framework detection, test-gap analysis, planning.

Pure functions over manifest data and relative file paths; the
infrastructure layer does the reading.  These back the ``detect-framework``,
``analyze``, ``plan`` and ``generate`` commands.

Guarantees
----------
* No I/O, no ``print()``.
* Deterministic: every returned tuple is sorted.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable
from pathlib import PurePosixPath

from aiqa.core.models import FrameworkReport, PlannedTest, ProjectAnalysis, ProjectManifests

FRAMEWORK_MARKERS: dict[str, str] = {
    "next": "Next.js",
    "react": "React",
    "vue": "Vue",
    "nuxt": "Nuxt",
    "@angular/core": "Angular",
    "svelte": "Svelte",
    "@sveltejs/kit": "SvelteKit",
    "express": "Express",
    "django": "Django",
    "flask": "Flask",
    "fastapi": "FastAPI",
}

TEST_RUNNER_MARKERS: dict[str, str] = {
    "jest": "Jest",
    "vitest": "Vitest",
    "@playwright/test": "Playwright",
    "cypress": "Cypress",
    "mocha": "Mocha",
    "pytest": "pytest",
}

LANGUAGE_BY_SUFFIX: dict[str, str] = {
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

TEST_DIRECTORIES: frozenset[str] = frozenset({"test", "tests", "__tests__", "e2e"})

_NON_MODULE_FILES: frozenset[str] = frozenset({"__init__.py", "__main__.py", "setup.py", "conftest.py"})

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")
_TEST_AFFIXES = re.compile(r"^test_|_test$|\.(test|spec)$")


# ---------------------------------------------------------------------------
# Framework detection
# ---------------------------------------------------------------------------

def normalize_requirement(line: str) -> str | None:
    """Return the lower-cased distribution name from a requirement line.

    Comments, blank lines and pip options (``-r``, ``--index-url``)
    yield ``None``.
    """
    stripped = line.split("#", 1)[0].strip()
    if not stripped or stripped.startswith("-"):
        return None
    match = _REQUIREMENT_NAME.match(stripped)
    if match is None:
        return None
    return match.group(1).lower().replace("_", "-")


def detect_frameworks(manifests: ProjectManifests) -> FrameworkReport:
    """Name the frameworks and test runners the manifests depend on."""
    dependencies = manifests.npm_dependencies | manifests.python_dependencies
    frameworks = sorted({label for dep, label in FRAMEWORK_MARKERS.items() if dep in dependencies})
    runners = sorted({label for dep, label in TEST_RUNNER_MARKERS.items() if dep in dependencies})

    languages: set[str] = set()
    if manifests.npm_dependencies or "package.json" in manifests.sources:
        languages.add("typescript" if "typescript" in manifests.npm_dependencies else "javascript")
    if manifests.python_dependencies or any(src != "package.json" for src in manifests.sources):
        languages.add("python")

    return FrameworkReport(
        frameworks=tuple(frameworks),
        test_runners=tuple(runners),
        languages=tuple(sorted(languages)),
        manifests=tuple(sorted(manifests.sources)),
    )


# ---------------------------------------------------------------------------
# Test-gap analysis
# ---------------------------------------------------------------------------

def is_test_file(path: PurePosixPath) -> bool:
    if path.suffix not in LANGUAGE_BY_SUFFIX:
        return False
    if any(part in TEST_DIRECTORIES for part in path.parts[:-1]):
        return True
    return _TEST_AFFIXES.search(path.stem) is not None


def is_source_file(path: PurePosixPath) -> bool:
    if path.suffix not in LANGUAGE_BY_SUFFIX or is_test_file(path):
        return False
    if path.name in _NON_MODULE_FILES or path.name.endswith(".d.ts"):
        return False
    return ".config" not in path.stem


def _module_key(path: PurePosixPath) -> str:
    return _TEST_AFFIXES.sub("", path.stem).lower()


def _shared_trailing_dirs(left: tuple[str, ...], right: tuple[str, ...]) -> int:
    count = 0
    for a, b in zip(reversed(left), reversed(right)):
        if a != b:
            break
        count += 1
    return count


def _matching_source(test: PurePosixPath, candidates: list[str]) -> str | None:
    """Pick the one source among same-named *candidates* that *test* covers.

    Candidates are ranked by how many trailing directories they share
    with the test's directory (test directories such as ``tests/``
    ignored), so ``tests/pkg_a/test_utils.py`` covers ``pkg_a/utils.py``
    and not ``pkg_b/utils.py``.  A tie for the best rank matches nothing.
    """
    test_dirs = tuple(part for part in test.parts[:-1] if part not in TEST_DIRECTORIES)
    ranked = sorted(
        ((_shared_trailing_dirs(PurePosixPath(src).parts[:-1], test_dirs), src) for src in candidates),
        reverse=True,
    )
    if not ranked:
        return None
    if len(ranked) > 1 and ranked[0][0] == ranked[1][0]:
        return None
    return ranked[0][1]


def analyze_files(paths: Iterable[str]) -> ProjectAnalysis:
    """Split *paths* into sources and tests and find untested sources.

    A test file's name, with its ``test_``/``_test``/``.test``/``.spec``
    affixes removed, must equal a source file's stem (case-insensitive).
    When several sources share that stem, the test covers only the one
    whose directory best matches its own (see :func:`_matching_source`).
    """
    sources: list[str] = []
    tests: list[str] = []
    for raw in paths:
        path = PurePosixPath(raw)
        if is_test_file(path):
            tests.append(raw)
        elif is_source_file(path):
            sources.append(raw)

    by_key: dict[str, list[str]] = {}
    for src in sources:
        by_key.setdefault(_module_key(PurePosixPath(src)), []).append(src)
    tested: set[str] = set()
    for test in tests:
        path = PurePosixPath(test)
        match = _matching_source(path, by_key.get(_module_key(path), []))
        if match is not None:
            tested.add(match)

    untested = [src for src in sources if src not in tested]
    return ProjectAnalysis(
        source_files=tuple(sorted(sources)),
        test_files=tuple(sorted(tests)),
        untested_files=tuple(sorted(untested)),
    )


# ---------------------------------------------------------------------------
# Planning and skeletons
# ---------------------------------------------------------------------------

def _candidate_targets(path: PurePosixPath, language: str, shared_stem: bool) -> list[PurePosixPath]:
    if language != "python":
        return [path.with_name(f"{path.stem}.test{path.suffix}")]
    name = f"test_{path.stem}.py"
    if not shared_stem:
        return [PurePosixPath("tests", name)]
    # Mirror the package directory; the unstripped form is always unique.
    dirs = path.parts[:-1]
    stripped = dirs[1:] if dirs[:1] == ("src",) else dirs
    return [PurePosixPath("tests", *stripped, name), PurePosixPath("tests", *dirs, name)]


def plan_tests(analysis: ProjectAnalysis, *, limit: int | None = None) -> tuple[PlannedTest, ...]:
    """Propose one new test file per untested source, in path order.

    Python tests go to ``tests/test_<stem>.py``.  When several Python
    sources share a stem, their tests mirror the source directory
    (``tests/pkg_a/test_utils.py``) so no two entries share a target.
    JS/TS tests sit next to the source as ``<stem>.test<ext>``.
    """
    python_stems = Counter(
        _module_key(PurePosixPath(src))
        for src in analysis.source_files
        if LANGUAGE_BY_SUFFIX[PurePosixPath(src).suffix] == "python"
    )
    planned: list[PlannedTest] = []
    taken: set[PurePosixPath] = set()
    for source in analysis.untested_files:
        path = PurePosixPath(source)
        language = LANGUAGE_BY_SUFFIX[path.suffix]
        shared = python_stems[_module_key(path)] > 1
        target = next(
            (t for t in _candidate_targets(path, language, shared) if t not in taken), None,
        )
        if target is None:
            continue
        taken.add(target)
        planned.append(PlannedTest(source=source, target=str(target), language=language))
        if limit is not None and len(planned) >= limit:
            break
    return tuple(planned)


def render_skeleton(planned: PlannedTest) -> str:
    """Return the initial contents of *planned*'s test file."""
    stem = PurePosixPath(planned.source).stem
    if planned.language == "python":
        identifier = re.sub(r"\W", "_", stem)
        return (
            f'"""Tests for ``{planned.source}``."""\n'
            "\n"
            "import pytest\n"
            "\n"
            "\n"
            '@pytest.mark.skip(reason="generated skeleton")\n'
            f"def test_{identifier}() -> None:\n"
            "    ...\n"
        )
    return (
        f'describe("{stem}", () => {{\n'
        f'  it.todo("covers {planned.source}");\n'
        "});\n"
    )
