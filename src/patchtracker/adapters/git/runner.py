"""
Git Command Runner - Runs git as a subprocess in a given directory.

The directory is passed to the child process as its cwd; the working
directory of this process is left alone.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Union

from ...core.domain.patchset import decode_patch
from ...core.exceptions import BackendCommandError


class GitCommandRunner:
    """Thin wrapper around `git` invocations."""

    def __init__(self, git_binary: str = "git"):
        self.git_binary = git_binary
        self.logger = logging.getLogger("GitCommandRunner")

    def run(
        self,
        args: list[str],
        directory: Optional[Union[str, Path]] = None,
    ) -> str:
        """
        Run `git <args>` in directory and return its stdout.

        Output is read as bytes: line endings are kept as git wrote them and
        bytes that are not UTF-8 decode to surrogates, which encode_patch
        turns back into the original bytes.

        Raises:
            BackendCommandError: On a non-zero exit status or if git cannot be started
        """
        cmd = [self.git_binary] + list(args)
        cwd = str(directory) if directory is not None else None
        self.logger.debug(f"Running {' '.join(cmd)} in {cwd or '.'}")

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
            raise BackendCommandError(
                f"Cannot run {cmd[0]} in {cwd or '.'}: {e}",
                command=cmd,
                cause=e,
            )

        if result.returncode != 0:
            stderr = (result.stderr or b"").decode("utf-8", "replace").strip()
            raise BackendCommandError(
                f"{' '.join(cmd)} failed with exit code {result.returncode}: {stderr}",
                command=cmd,
                returncode=result.returncode,
                stderr=stderr,
            )

        return decode_patch(result.stdout)
