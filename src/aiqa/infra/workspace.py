"""Infrastructure: the ``.aiqa`` workspace directory.

The workspace holds ``config.json`` (written by ``init``), the JSON
artifacts passed between ``detect-framework``/``analyze``/``plan``/
``generate``, and a ``cache/`` directory managed by ``cache clear``.
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from aiqa.exceptions import CacheError, ConfigError
from aiqa.version import __version__

CONFIG_FILE = "config.json"
CACHE_DIR = "cache"


@dataclass(frozen=True, slots=True)
class Workspace:
    root: Path

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILE

    @property
    def cache_dir(self) -> Path:
        return self.root / CACHE_DIR

    def is_initialised(self) -> bool:
        return self.config_path.is_file()

    def init(self, *, force: bool = False) -> Path:
        """Create the workspace and its ``config.json``.

        Raises
        ------
        ConfigError
            If a workspace already exists and *force* is not set, or the
            directory cannot be created.
        """
        if self.is_initialised() and not force:
            raise ConfigError(
                f"aiqa is already initialised in {self.root}.",
                hint="Use 'aiqa init --force' to overwrite the configuration.",
            )
        config = {"version": __version__, "cache_dir": CACHE_DIR}
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot initialise workspace {self.root}: {exc}") from exc
        return self.config_path

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    def write_artifact(self, name: str, data: Any) -> Path:
        path = self.root / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot write {path}: {exc}") from exc
        return path

    def read_artifact(self, name: str, *, produced_by: str) -> Any:
        """Load a JSON artifact written by an earlier command.

        Raises
        ------
        ConfigError
            If the artifact is missing or unreadable; the hint names the
            command that produces it.
        """
        path = self.root / name
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigError(
                f"{path} does not exist.",
                hint=f"Run 'aiqa {produced_by}' first.",
            ) from exc
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ConfigError(
                f"Cannot read {path}: {exc}",
                hint=f"Re-run 'aiqa {produced_by}' to regenerate it.",
            ) from exc

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def write_cache(self, relative: str, data: Any) -> Path:
        try:
            return self.write_artifact(f"{CACHE_DIR}/{relative}", data)
        except ConfigError as exc:
            raise CacheError(str(exc)) from exc

    def clear_cache(self) -> int:
        """Delete every entry of the cache directory and return how many."""
        if not self.cache_dir.is_dir():
            return 0
        removed = 0
        try:
            for entry in sorted(self.cache_dir.iterdir()):
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
                removed += 1
        except OSError as exc:
            raise CacheError(
                f"Cannot clear cache {self.cache_dir}: {exc}",
                hint="Check file permissions or delete the directory manually.",
            ) from exc
        return removed
