"""
Provenance - The TrackedAt marker binding a commit to its tracker record.

A diff body uploaded to the tracker carries one line

    TrackedAt: <tracker-url>/patch/<commit>

placed in the commit message, right before the `---` line that separates the
message from the diffstat. When somebody applies the patch with `git am`, the
line becomes part of the new commit message; reading it back is how local
commits are matched to remote records.
"""

import logging
from typing import Optional

from .patchset import iter_lines


MARKER_PREFIX = "TrackedAt: "
BOUNDARY = "---"


def tracking_url(base_url: str, commit: str) -> str:
    """Tracker URL of the patch record for a commit."""
    return f"{base_url.rstrip('/')}/patch/{commit}"


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


class ProvenanceCodec:
    """
    Embeds and extracts the TrackedAt marker.

    Grammar of a marker line: "TrackedAt: " URL EOL. The URL runs to the end
    of the line; surrounding whitespace is not part of it.
    """

    def __init__(self, prefix: str = MARKER_PREFIX):
        self.prefix = prefix
        self.logger = logging.getLogger("ProvenanceCodec")

    def marker(self, url: str) -> str:
        return f"{self.prefix}{url}"

    def embed(self, body: str, url: str) -> str:
        """
        Insert the marker for url into a format-patch body.

        Markers already present in the message part are replaced, so a
        re-uploaded patch never carries two of them.
        """
        lines = list(iter_lines(body))
        newline = "\r\n" if lines and lines[0].endswith("\r\n") else "\n"
        insert = [self.marker(url) + newline, newline]

        boundary = next(
            (i for i, line in enumerate(lines) if _strip_eol(line) == BOUNDARY),
            None,
        )

        if boundary is None:
            self.logger.warning(
                f"No '{BOUNDARY}' boundary in patch body, marker for {url} "
                "placed after the mail headers"
            )
            lines = [line for line in lines if not line.startswith(self.prefix)]
            head_end = next(
                (i + 1 for i, line in enumerate(lines) if not _strip_eol(line)),
                0,
            )
            return "".join(lines[:head_end] + insert + lines[head_end:])

        message_part = [
            line for line in lines[:boundary] if not line.startswith(self.prefix)
        ]
        return "".join(message_part + insert + lines[boundary:])

    def extract(self, message: str) -> Optional[str]:
        """
        Return the tracking URL recorded in a commit message, or None.

        None is the normal answer for commits that were never recorded.
        """
        if not message:
            return None
        for line in iter_lines(message):
            if not line.startswith(self.prefix):
                continue
            url = line[len(self.prefix):].strip()
            if url:
                return url
        return None
