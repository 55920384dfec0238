"""Infrastructure: reading a local project tree.

Reads package manifests and enumerates candidate files for the pure
scanners in :mod:`aiqa.core.project_scan`.

Rules
-----
* Read-only — never writes into the scanned project.
* ``OSError`` and malformed manifests surface as
  :class:`~aiqa.exceptions.InvalidInputError`.
"""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any

from aiqa.core.models import ProjectManifests
from aiqa.core.project_scan import LANGUAGE_BY_SUFFIX, normalize_requirement
from aiqa.exceptions import InvalidInputError

SKIPPED_DIRECTORIES: frozenset[str] = frozenset({
    ".git",
    ".aiqa",
    ".hg",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    "dist",
    "build",
    ".next",
    ".tox",
})


def require_directory(path: Path) -> Path:
    """Resolve *path* or raise :class:`InvalidInputError` if it is not a directory."""
    resolved = path.expanduser().resolve()
    if not resolved.is_dir():
        raise InvalidInputError(f"Not a directory: {path}")
    return resolved


# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------

def _npm_dependencies(package_json: Path) -> set[str]:
    try:
        data: Any = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidInputError(f"Cannot read {package_json}: {exc}") from exc
    names: set[str] = set()
    for section in ("dependencies", "devDependencies", "peerDependencies"):
        block = data.get(section) if isinstance(data, dict) else None
        if isinstance(block, dict):
            names.update(name.lower() for name in block)
    return names


def _pyproject_dependencies(pyproject: Path) -> set[str]:
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise InvalidInputError(f"Cannot read {pyproject}: {exc}") from exc
    project = data.get("project", {})
    lines: list[str] = list(project.get("dependencies", []))
    for extra in project.get("optional-dependencies", {}).values():
        lines.extend(extra)
    poetry = data.get("tool", {}).get("poetry", {})
    lines.extend(poetry.get("dependencies", {}).keys())
    lines.extend(poetry.get("dev-dependencies", {}).keys())
    names = (normalize_requirement(line) for line in lines)
    return {name for name in names if name} - {"python"}


def _requirements_dependencies(requirements: Path) -> set[str]:
    try:
        text = requirements.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidInputError(f"Cannot read {requirements}: {exc}") from exc
    names = (normalize_requirement(line) for line in text.splitlines())
    return {name for name in names if name}


def read_manifests(project: Path) -> ProjectManifests:
    """Collect dependency names from the manifests found in *project*.

    Raises
    ------
    InvalidInputError
        If no supported manifest exists or one cannot be parsed.
    """
    npm: set[str] = set()
    python: set[str] = set()
    found: list[str] = []

    package_json = project / "package.json"
    if package_json.is_file():
        npm |= _npm_dependencies(package_json)
        found.append(package_json.name)
    pyproject = project / "pyproject.toml"
    if pyproject.is_file():
        python |= _pyproject_dependencies(pyproject)
        found.append(pyproject.name)
    requirements = project / "requirements.txt"
    if requirements.is_file():
        python |= _requirements_dependencies(requirements)
        found.append(requirements.name)

    if not found:
        raise InvalidInputError(
            f"No package.json, pyproject.toml or requirements.txt in {project}.",
            hint="Run the command from the project root or pass --path.",
        )
    return ProjectManifests(
        npm_dependencies=frozenset(npm),
        python_dependencies=frozenset(python),
        sources=tuple(found),
    )


# ---------------------------------------------------------------------------
# File enumeration
# ---------------------------------------------------------------------------

def list_project_files(project: Path) -> list[str]:
    """Return POSIX-style relative paths of code files under *project*."""
    results: list[str] = []
    for dirpath, dirnames, filenames in os.walk(project):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRECTORIES)
        base = Path(dirpath)
        for filename in sorted(filenames):
            if Path(filename).suffix in LANGUAGE_BY_SUFFIX:
                results.append((base / filename).relative_to(project).as_posix())
    return results
