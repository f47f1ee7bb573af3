"""
Value Objects - Immutable objects defined by their values.
"""

import re
from dataclasses import dataclass
from enum import Enum

from ..exceptions import FatalUsageError


COMMIT_HASH_PATTERN = re.compile(r"^[0-9a-fA-F]{40}$")


def is_commit_hash(value: str) -> bool:
    """Check whether value is a full 40 character hexadecimal commit hash."""
    return bool(value) and COMMIT_HASH_PATTERN.match(value) is not None


def short_hash(value: str) -> str:
    """Last 8 characters of a hash, the form used in console output."""
    return value[-8:]


@dataclass(frozen=True)
class CommitHash:
    """A full git commit hash, validated on construction."""

    value: str

    def __post_init__(self):
        if not is_commit_hash(self.value):
            raise FatalUsageError(
                "You must provide GIT commit hash (40 characters)."
            )

    def __str__(self) -> str:
        return self.value


class PatchStatus(Enum):
    """Review state of a patch or patch-set on the tracker server."""

    NEW = "new"
    ACK = "ack"
    NACK = "nack"
    PUSH = "push"
    OBSOLETE = "obsolete"

    @classmethod
    def from_string(cls, s: str) -> "PatchStatus":
        s = (s or "").strip().lower()
        for status in cls:
            if status.value == s:
                return status
        raise ValueError(f"Unknown patch status: {s!r}")

    @classmethod
    def filterable(cls) -> tuple[str, ...]:
        """Status values accepted as list filters."""
        return (cls.NEW.value, cls.ACK.value, cls.NACK.value, cls.PUSH.value)


class TrackerAction(Enum):
    """State transitions a client may request."""

    ACK = "ack"
    NACK = "nack"
    PUSH = "push"

    @classmethod
    def from_string(cls, s: str) -> "TrackerAction":
        s = (s or "").strip().lower()
        for action in cls:
            if action.value == s:
                return action
        raise FatalUsageError(
            f"Unknown action {s!r} (expected one of: ack, nack, push)"
        )
