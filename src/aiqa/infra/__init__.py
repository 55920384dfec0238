"""Infrastructure layer — external system integration.

This layer wraps all interaction with the filesystem and the GitHub
API.  Every raw third-party exception describing a user-fixable
condition is caught here and re-raised as an
:class:`~aiqa.exceptions.AiqaError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from aiqa.infra.github_client import GitHubClient, build_async_client, parse_repo_slug
from aiqa.infra.project_files import list_project_files, read_manifests, require_directory
from aiqa.infra.workspace import Workspace

__all__: list[str] = [
    "GitHubClient",
    "Workspace",
    "build_async_client",
    "list_project_files",
    "parse_repo_slug",
    "read_manifests",
    "require_directory",
]
