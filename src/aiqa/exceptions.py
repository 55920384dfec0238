"""Custom exception hierarchy for aiqa.

Every *classified* failure (an anticipated, user-actionable problem)
inherits from :class:`AiqaError`.  The top-level dispatch loop reports
these as a single ``<name> <message>`` line and exits with status 1.
Anything else is an *unclassified* failure and is allowed to crash
loudly with its full traceback.

Raw third-party exceptions (httpx, pydantic, OSError) must be caught at
the infrastructure boundary and re-raised as a typed subclass defined
here when they describe a user-fixable condition.

Hierarchy
---------
AiqaError
├── ConfigError
├── InvalidInputError
├── ResourceUnreachableError
├── CacheError
├── CommandTreeError
└── EnvironmentError
"""

from __future__ import annotations


class AiqaError(Exception):
    """Base exception for all classified aiqa errors.

    The :attr:`name` property is the discriminator printed in front of
    the message by the CLI error boundary.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""

    @property
    def name(self) -> str:
        """Discriminator used in user-facing reports (the class name)."""
        return type(self).__name__


# --- Configuration ---------------------------------------------------------

class ConfigError(AiqaError):
    """Raised when configuration is missing, invalid, or not initialised."""


# --- User input ------------------------------------------------------------

class InvalidInputError(AiqaError):
    """Raised when command arguments or project contents are unusable."""


# --- Remote resources ------------------------------------------------------

class ResourceUnreachableError(AiqaError):
    """Raised when a remote service cannot be reached or refuses a request."""


# --- Local cache -----------------------------------------------------------

class CacheError(AiqaError):
    """Raised when the local cache cannot be read or cleared."""


# --- Command tree construction ---------------------------------------------

class CommandTreeError(AiqaError):
    """Raised when the command tree is assembled inconsistently.

    Duplicate sibling names, re-parenting, cycles and attaching to a
    frozen tree are all construction-time defects detected before any
    dispatch happens.
    """


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(AiqaError):
    """Raised when a required runtime dependency is not available."""
