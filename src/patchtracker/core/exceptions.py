"""
Exceptions - Centralized exception hierarchy for patchtracker.

Every error raised by the core, the adapters and the orchestrator derives
from PatchTrackerToolError, so callers can catch the whole family at once.
"""

from typing import Optional


class PatchTrackerToolError(Exception):
    """Base exception for all patchtracker errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class FatalUsageError(PatchTrackerToolError):
    """
    Invalid user input (malformed commit hash, bad filter combination, ...).

    Raised before any local or remote mutation is attempted.
    """


class ConfigError(PatchTrackerToolError):
    """Configuration file could not be read or is malformed."""


class TransportError(PatchTrackerToolError):
    """
    A request to the tracker server failed.

    Carries the HTTP status code and (truncated) response body when the
    server answered, or only the cause for connection level failures.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause=cause)
        self.status_code = status_code
        self.body = body


class AuthenticationError(TransportError):
    """The server rejected the configured credentials."""


class PermissionDeniedError(TransportError):
    """The authenticated user may not perform this operation."""


class NotFoundError(TransportError):
    """The requested set or patch does not exist on the server."""


class ProvenanceMissing(PatchTrackerToolError):
    """A local commit carries no TrackedAt marker."""

    def __init__(self, commit: str):
        super().__init__(
            f"Patch {commit[-8:]} has not been recorded by tracker (no TrackedAt header)"
        )
        self.commit = commit


class BackendCommandError(PatchTrackerToolError):
    """A git command failed or produced output that cannot be trusted."""

    def __init__(
        self,
        message: str,
        command: Optional[list[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause=cause)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


__all__ = [
    "PatchTrackerToolError",
    "FatalUsageError",
    "ConfigError",
    "TransportError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ProvenanceMissing",
    "BackendCommandError",
]
