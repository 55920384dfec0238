"""Shared pytest fixtures and configuration for the aiqa test suite.

Guidelines
----------
* No internet access in any test — GitHub is mocked with
  ``httpx.MockTransport``.
* Every test runs in its own temporary working directory with a clean
  ``AIQA_*`` environment.
* Process-wide state (warning hook, logging) is restored after each test.
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path

import pytest

from aiqa.config import AppSettings
from aiqa.log import configure_logging
from aiqa.utils import warnings_filter


@pytest.fixture(autouse=True)
def _isolated_process_state(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path,
) -> None:
    for key in list(os.environ):
        if key.startswith("AIQA_"):
            monkeypatch.delenv(key)
    for key in ("GITHUB_TOKEN", "FORCE_COLOR", "TTY_COMPATIBLE"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(warnings, "showwarning", warnings.showwarning)
    monkeypatch.setattr(warnings_filter, "_installed", None)
    configure_logging("WARNING")


@pytest.fixture()
def settings(tmp_path: Path) -> AppSettings:
    """Settings with an isolated workspace and no GitHub token."""
    return AppSettings(_env_file=None, workspace_dir=tmp_path / ".aiqa")
