"""
Git Adapter - Implementation of VersionControlPort on top of the git CLI.
"""

from .adapter import GitAdapter
from .log_reader import GitCommitLogReader
from .runner import GitCommandRunner

__all__ = [
    "GitAdapter",
    "GitCommitLogReader",
    "GitCommandRunner",
]
