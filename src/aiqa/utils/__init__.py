"""Shared utilities — process-wide helpers and cross-cutting concerns.

Rules
-----
* No business logic.
* No I/O beyond the standard diagnostic stream.
* Importable by any layer.
"""

from aiqa.utils.warnings_filter import (
    DEFAULT_WARNING_FILTER,
    WarningFilter,
    install_warning_filter,
)

__all__: list[str] = [
    "DEFAULT_WARNING_FILTER",
    "WarningFilter",
    "install_warning_filter",
]
