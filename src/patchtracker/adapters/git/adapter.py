"""
Git Adapter - Implements VersionControlPort with the git command line.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ...core.domain.entities import CommitLog
from ...core.ports.version_control import VersionControlPort
from .log_reader import GitCommitLogReader
from .runner import GitCommandRunner


class GitAdapter(VersionControlPort):
    """Git implementation of the VersionControlPort."""

    def __init__(self, runner: Optional[GitCommandRunner] = None):
        self.runner = runner or GitCommandRunner()
        self.log_reader = GitCommitLogReader(self.runner)
        self.logger = logging.getLogger("GitAdapter")

    @property
    def name(self) -> str:
        return "Git"

    def read_commits(
        self, revision_range: str, directory: Union[str, Path]
    ) -> CommitLog:
        return self.log_reader.read(revision_range, directory)

    def format_patches(
        self, revision_range: str, directory: Union[str, Path]
    ) -> str:
        return self.runner.run(
            ["format-patch", "--stdout", revision_range, "--"], directory
        )

    def create_branch(self, branch: str, directory: Union[str, Path]) -> str:
        self.logger.info(f"Creating branch {branch}")
        return self.runner.run(["checkout", "-b", branch], directory)

    def apply_patch(
        self, patch_file: Union[str, Path], directory: Union[str, Path]
    ) -> str:
        self.logger.info(f"Applying {patch_file}")
        return self.runner.run(["am", str(patch_file)], directory)
