"""
Domain Entities - Commits on the local side, records on the tracker side.

Commits are produced fresh by the commit log reader on every invocation and
never mutated. Remote records are read-only snapshots of server state.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .value_objects import CommitHash


@dataclass(frozen=True)
class Person:
    """Author or committer identity with the date of the action."""

    date: str = ""
    name: str = ""
    email: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"date": self.date, "name": self.name, "email": self.email}


@dataclass(frozen=True)
class Commit:
    """
    A single local commit.

    The hash is the key joining local and remote state, so it is validated
    to be exactly 40 hex characters.
    """

    hash: str
    tree_hash: str = ""
    parent_hashes: str = ""
    author: Person = field(default_factory=Person)
    committer: Person = field(default_factory=Person)

    def __post_init__(self):
        CommitHash(self.hash)

    def to_metadata(self) -> dict[str, Any]:
        """Wire representation (CommitMetadata) sent to the tracker."""
        return {
            "hashes": {
                "commit": self.hash,
                "tree": self.tree_hash,
                "parents": self.parent_hashes,
            },
            "author": self.author.to_dict(),
            "committer": self.committer.to_dict(),
        }


@dataclass(frozen=True)
class CommitMessage:
    """Subject line and full message body of a commit."""

    short_message: str
    full_message: str


@dataclass
class CommitLog:
    """
    Commits of a revision range, oldest first, plus their messages.

    The order matches `git format-patch` output for the same range.
    """

    commits: list[Commit] = field(default_factory=list)
    messages: dict[str, CommitMessage] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.commits)

    @property
    def hashes(self) -> list[str]:
        return [c.hash for c in self.commits]


@dataclass(frozen=True)
class RecordedSet:
    """Identity of a patch-set returned by the server after recording."""

    id: str
    revision: str = ""


@dataclass
class RemotePatchSet:
    """A patch-set as reported by the tracker server."""

    id: str
    status: str = ""
    revision: str = ""
    first_patch_message: str = ""
    num_of_patches: int = 0
    author: str = ""
    patches: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RemotePatchSet":
        patches = list(data.get("patches") or [])
        num = data.get("num_of_patches")
        return cls(
            id=str(data.get("id", "")),
            status=str(data.get("status") or ""),
            revision=str(data.get("revision") or ""),
            first_patch_message=str(data.get("first_patch_message") or ""),
            num_of_patches=int(num) if num is not None else len(patches),
            author=str(data.get("author") or ""),
            patches=patches,
        )


@dataclass(frozen=True)
class PatchStatusRecord:
    """Review state of one patch."""

    commit: str
    status: str
    revision: str = ""
    message: str = ""

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], commit: Optional[str] = None
    ) -> "PatchStatusRecord":
        return cls(
            commit=str(data.get("commit") or commit or ""),
            status=str(data.get("status") or ""),
            revision=str(data.get("revision") or ""),
            message=str(data.get("message") or ""),
        )
