"""
Version Control Port - What the orchestrator needs from git.

Every operation takes the working directory explicitly; implementations must
not change the process working directory.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from ..domain.entities import CommitLog


PathLike = Union[str, Path]


class VersionControlPort(ABC):
    """Abstract interface for the version control backend."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name."""
        ...

    @abstractmethod
    def read_commits(self, revision_range: str, directory: PathLike) -> CommitLog:
        """
        Enumerate commits of a range, oldest first, with their messages.

        Raises:
            BackendCommandError: If the backend fails; there is no partial result
        """
        ...

    @abstractmethod
    def format_patches(self, revision_range: str, directory: PathLike) -> str:
        """Return the mbox-style patch stream for a range, oldest first."""
        ...

    @abstractmethod
    def create_branch(self, branch: str, directory: PathLike) -> str:
        """Create and switch to a new branch. Returns backend output."""
        ...

    @abstractmethod
    def apply_patch(self, patch_file: PathLike, directory: PathLike) -> str:
        """Apply a mailbox patch file on the current branch. Returns backend output."""
        ...
