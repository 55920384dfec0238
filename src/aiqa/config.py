"""Application configuration.

Settings come from ``AIQA_*`` environment variables (and an optional
``.env`` file in the working directory) through pydantic-settings.
Command-line global options override the matching fields at dispatch
time; see :func:`root_settings`.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from aiqa.core.models import InheritedSettings, OptionSpec, OutputMode
from aiqa.exceptions import ConfigError

LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class UnclassifiedPolicy(str, Enum):
    """What the exit policy does with a failure it cannot summarise."""

    RAISE = "raise"
    REPORT = "report"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AIQA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"
    output_mode: OutputMode = OutputMode.TEXT
    strict_options: bool = True
    unclassified_policy: UnclassifiedPolicy = UnclassifiedPolicy.RAISE
    workspace_dir: Path = Path(".aiqa")

    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AIQA_GITHUB_TOKEN", "GITHUB_TOKEN"),
    )
    github_api_url: str = "https://api.github.com"
    http_timeout_seconds: float = Field(default=15.0, gt=0)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return upper


def load_settings() -> AppSettings:
    """Read settings from the environment.

    Raises
    ------
    ConfigError
        If any ``AIQA_*`` variable holds an invalid value.
    """
    try:
        return AppSettings()
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(
            f"Invalid configuration: {problems}",
            hint="Check the AIQA_* environment variables and your .env file.",
        ) from exc


def root_settings(settings: AppSettings) -> InheritedSettings:
    """Inherited settings declared on the root command."""
    return InheritedSettings(
        global_options=(
            OptionSpec(
                ("--log-level",),
                help=f"Diagnostic log level (default: {settings.log_level}).",
                default=settings.log_level,
                type=str.upper,
                choices=LOG_LEVELS,
            ),
            OptionSpec(
                ("-o", "--output"),
                help=f"Result format on stdout (default: {settings.output_mode.value}).",
                default=settings.output_mode.value,
                choices=tuple(mode.value for mode in OutputMode),
            ),
        ),
        output_mode=settings.output_mode,
        allow_unknown_options=not settings.strict_options,
    )
