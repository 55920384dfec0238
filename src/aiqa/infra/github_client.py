"""Infrastructure: GitHub REST client for remote-code retrieval.

Wraps :class:`httpx.AsyncClient`.  Every ``httpx`` exception is caught
here and re-raised as :class:`~aiqa.exceptions.ResourceUnreachableError`
so that only classified errors escape this module.
"""

from __future__ import annotations

import re
from typing import Any

import httpx

from aiqa.config import AppSettings
from aiqa.exceptions import ConfigError, InvalidInputError, ResourceUnreachableError
from aiqa.log import get_logger
from aiqa.version import __version__

_REPO_SLUG = re.compile(r"^([A-Za-z0-9](?:[A-Za-z0-9-]{0,38}))/([A-Za-z0-9._-]{1,100})$")


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Split ``owner/repo`` (a trailing ``.git`` is dropped).

    Raises
    ------
    InvalidInputError
        If *slug* is not of the form ``owner/repo``.
    """
    cleaned = slug.strip().removesuffix(".git")
    match = _REPO_SLUG.match(cleaned)
    if match is None:
        raise InvalidInputError(
            f"Invalid repository '{slug}'.",
            hint="Use the form owner/repo, e.g. octocat/Hello-World.",
        )
    return match.group(1), match.group(2)


def build_async_client(
    settings: AppSettings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an authenticated ``httpx.AsyncClient`` for the GitHub API.

    Raises
    ------
    ConfigError
        If no GitHub token is configured.
    """
    if not settings.github_token:
        raise ConfigError(
            "missing token",
            hint="Set AIQA_GITHUB_TOKEN (or GITHUB_TOKEN) to a GitHub access token.",
        )
    headers = {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {settings.github_token}",
        "User-Agent": f"aiqa/{__version__}",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    return httpx.AsyncClient(
        base_url=settings.github_api_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


class GitHubClient:
    """Minimal read-only client for repository file listings.

    Parameters
    ----------
    client:
        A configured async client, usually from :func:`build_async_client`.
        The caller owns its lifetime.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def _get_json(self, url: str, **params: Any) -> Any:
        try:
            response = await self._client.get(url, params=params or None)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == 404:
                raise ResourceUnreachableError(
                    f"GitHub returned 404 for {url}.",
                    hint="Check the repository name and that your token can read it.",
                ) from exc
            if status in (401, 403):
                raise ResourceUnreachableError(
                    f"GitHub refused the request ({status}).",
                    hint="Check that the token is valid and not rate limited.",
                ) from exc
            raise ResourceUnreachableError(f"GitHub request failed with status {status}.") from exc
        except httpx.RequestError as exc:
            raise ResourceUnreachableError(f"Cannot reach GitHub: {exc}") from exc
        return response.json()

    async def default_branch(self, owner: str, repo: str) -> str:
        data = await self._get_json(f"/repos/{owner}/{repo}")
        return str(data.get("default_branch") or "main")

    async def list_files(
        self,
        owner: str,
        repo: str,
        *,
        ref: str | None = None,
        prefix: str = "",
    ) -> tuple[str, ...]:
        """Return blob paths of *owner*/*repo* at *ref*, sorted.

        When *ref* is ``None`` the repository's default branch is used.
        Only paths starting with *prefix* are kept.
        """
        if ref is None:
            ref = await self.default_branch(owner, repo)
        data = await self._get_json(f"/repos/{owner}/{repo}/git/trees/{ref}", recursive="1")
        if data.get("truncated"):
            get_logger(__name__).warning("tree listing truncated by GitHub", repo=f"{owner}/{repo}", ref=ref)
        prefix = prefix.strip("/")
        paths = [
            entry["path"]
            for entry in data.get("tree", [])
            if entry.get("type") == "blob"
            and (not prefix or entry["path"] == prefix or entry["path"].startswith(prefix + "/"))
        ]
        return tuple(sorted(paths))
