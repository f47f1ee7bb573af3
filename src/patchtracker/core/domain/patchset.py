"""
Patch-set payload and diff stream handling.

Wire format of a recorded patch-set is a JSON array: one CommitMetadata
object per commit, oldest first, followed by a single trailing object that
maps each commit hash to its messages:

    [
        {"hashes": {...}, "author": {...}, "committer": {...}},
        ...,
        {"<hash>": {"msg": "<subject>", "full_message": "<body>"}, ...}
    ]

Consumers take the last element as the message index and the rest as the
ordered patch list.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional

from .entities import Commit, CommitMessage


PATCH_BOUNDARY_PATTERN = re.compile(r"^From ([0-9a-f]{40}) ")

LINE_PATTERN = re.compile(r"[^\n]*\n|[^\n]+")

# Diff bodies are arbitrary bytes; undecodable ones survive the round trip
PATCH_ENCODING = "utf-8"
PATCH_ERRORS = "surrogateescape"


def decode_patch(data: bytes) -> str:
    return data.decode(PATCH_ENCODING, PATCH_ERRORS)


def encode_patch(text: str) -> bytes:
    return text.encode(PATCH_ENCODING, PATCH_ERRORS)


def iter_lines(text: str) -> Iterator[str]:
    """
    Yield the lines of text with their endings.

    Only "\\n" ends a line. Form feeds and other characters that
    str.splitlines treats as breaks stay inside the line.
    """
    for match in LINE_PATTERN.finditer(text):
        yield match.group()


class PatchSetEncoder:
    """Builds the patch-set payload from a commit log. Performs no I/O."""

    def encode(
        self,
        commits: Iterable[Commit],
        messages: dict[str, CommitMessage],
    ) -> list[dict[str, Any]]:
        """
        Encode commits and their messages into the wire payload.

        Raises:
            KeyError: If a commit has no entry in messages
        """
        rows = []
        index = {}
        for commit in commits:
            message = messages[commit.hash]
            rows.append(commit.to_metadata())
            index[commit.hash] = {
                "msg": message.short_message,
                "full_message": message.full_message,
            }
        return rows + [index]

    def decode(
        self, payload: list[dict[str, Any]]
    ) -> tuple[list[dict[str, Any]], dict[str, dict[str, str]]]:
        """Split a payload into (ordered metadata rows, message index)."""
        if not payload:
            raise ValueError("Patch-set payload must end with a message index")
        rows = list(payload)
        index = rows.pop()
        return rows, index


@dataclass(frozen=True)
class PatchSegment:
    """
    One patch cut out of a `git format-patch --stdout` stream.

    commit is None only for text preceding the first patch boundary.
    """

    commit: Optional[str]
    body: str


def split_patch_stream(stream: str) -> Iterator[PatchSegment]:
    """
    Lazily split a concatenated patch stream at `From <hash> ` lines.

    Every line belongs to exactly one segment, so joining the bodies of all
    segments in order gives back the original stream.
    """
    commit: Optional[str] = None
    buffer: list[str] = []

    for line in iter_lines(stream):
        match = PATCH_BOUNDARY_PATTERN.match(line)
        if match:
            if buffer:
                yield PatchSegment(commit=commit, body="".join(buffer))
            commit = match.group(1)
            buffer = [line]
        else:
            buffer.append(line)

    if buffer:
        yield PatchSegment(commit=commit, body="".join(buffer))
