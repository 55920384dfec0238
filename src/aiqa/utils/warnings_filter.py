"""Process-wide filter for known-benign warnings.

A :class:`WarningFilter` is a fixed predicate over a warning's category
name and message text.  :func:`install_warning_filter` registers it once
at startup by wrapping :func:`warnings.showwarning`: matching warnings
are dropped and every other warning reaches the previous handler
unchanged.
"""

from __future__ import annotations

import warnings
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TextIO

ShowWarning = Callable[..., None]


@dataclass(frozen=True, slots=True)
class WarningFilter:
    """Drop warnings of *category_name* whose text contains *message_fragment*."""

    category_name: str
    message_fragment: str

    def suppresses(self, category: type[Warning], message: Warning | str) -> bool:
        return category.__name__ == self.category_name and self.message_fragment in str(message)

    def wrap(self, passthrough: ShowWarning) -> ShowWarning:
        """Return a ``showwarning`` replacement delegating misses to *passthrough*."""

        def showwarning(
            message: Warning | str,
            category: type[Warning],
            filename: str,
            lineno: int,
            file: TextIO | None = None,
            line: str | None = None,
        ) -> None:
            if self.suppresses(category, message):
                return
            passthrough(message, category, filename, lineno, file, line)

        showwarning.__aiqa_filter__ = self  # type: ignore[attr-defined]
        return showwarning


DEFAULT_WARNING_FILTER = WarningFilter("DeprecationWarning", "punycode")

_installed: WarningFilter | None = None


def install_warning_filter(flt: WarningFilter = DEFAULT_WARNING_FILTER) -> bool:
    """Register *flt* for the rest of the process.

    Returns ``True`` when the filter was installed and ``False`` when a
    filter is already in place (installation happens at most once).
    """
    global _installed
    current: Any = warnings.showwarning
    if _installed is not None or getattr(current, "__aiqa_filter__", None) is not None:
        return False
    warnings.showwarning = flt.wrap(current)
    _installed = flt
    return True
