"""
Commit Log Reader - Enumerates the commits of a revision range.

Two `git log` queries are made over the same range, in the same directory and
with the same traversal (`--reverse`, oldest first): one for structural
metadata and one for messages. Their hash sequences must agree.
"""

import logging
from pathlib import Path
from typing import Union

from ...core.domain.entities import Commit, CommitLog, CommitMessage, Person
from ...core.exceptions import BackendCommandError
from .runner import GitCommandRunner


FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"

METADATA_FORMAT = "%x1f".join(
    ["%H", "%T", "%P", "%ai", "%an", "%ae", "%ci", "%cn", "%ce"]
) + "%x1e"

MESSAGE_FORMAT = "%H%x1f%s%x1f%B%x1e"


def _records(output: str) -> list[str]:
    # git separates entries with a newline after the record terminator
    return [
        record.lstrip("\n")
        for record in output.split(RECORD_SEP)
        if record.strip()
    ]


class GitCommitLogReader:
    """Reads commits and messages for a revision range."""

    def __init__(self, runner: GitCommandRunner):
        self.runner = runner
        self.logger = logging.getLogger("GitCommitLogReader")

    def _log(self, fmt: str, revision_range: str, directory) -> str:
        return self.runner.run(
            ["--no-pager", "log", "--reverse", f"--format={fmt}", revision_range, "--"],
            directory,
        )

    def read_commits(
        self, revision_range: str, directory: Union[str, Path]
    ) -> list[Commit]:
        commits = []
        for record in _records(self._log(METADATA_FORMAT, revision_range, directory)):
            fields = record.rstrip("\n").split(FIELD_SEP)
            if len(fields) != 9:
                raise BackendCommandError(
                    f"Unexpected git log output for {revision_range}: {record[:80]!r}"
                )
            commits.append(Commit(
                hash=fields[0],
                tree_hash=fields[1],
                parent_hashes=fields[2],
                author=Person(date=fields[3], name=fields[4], email=fields[5]),
                committer=Person(date=fields[6], name=fields[7], email=fields[8]),
            ))
        return commits

    def read_messages(
        self, revision_range: str, directory: Union[str, Path]
    ) -> list[tuple[str, CommitMessage]]:
        messages = []
        for record in _records(self._log(MESSAGE_FORMAT, revision_range, directory)):
            parts = record.split(FIELD_SEP, 2)
            if len(parts) != 3:
                raise BackendCommandError(
                    f"Unexpected git log output for {revision_range}: {record[:80]!r}"
                )
            commit_hash, subject, body = parts
            messages.append((
                commit_hash,
                CommitMessage(short_message=subject.strip(), full_message=body),
            ))
        return messages

    def read(self, revision_range: str, directory: Union[str, Path]) -> CommitLog:
        """
        Read the full commit log of a range.

        Raises:
            BackendCommandError: If git fails or the two queries disagree
        """
        commits = self.read_commits(revision_range, directory)
        messages = self.read_messages(revision_range, directory)

        commit_hashes = [c.hash for c in commits]
        message_hashes = [h for h, _ in messages]
        if commit_hashes != message_hashes:
            raise BackendCommandError(
                f"Commit metadata and messages for {revision_range} disagree "
                f"({len(commit_hashes)} vs {len(message_hashes)} commits)"
            )

        self.logger.debug(f"Read {len(commits)} commits from {revision_range}")
        return CommitLog(commits=commits, messages=dict(messages))
