"""
Output - Console output formatting.

Provides pretty-printed output with colors and formatting.
"""

import sys
from typing import Optional

from ..application.sync import WorkflowResult
from ..core.domain.entities import RemotePatchSet


class Colors:
    """ANSI color codes."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


class Symbols:
    """Unicode symbols for output."""

    CROSS = "✗"
    WARN = "⚠"


STATUS_COLORS = {
    "NEW": Colors.CYAN,
    "ACK": Colors.GREEN,
    "NACK": Colors.RED,
    "PUSH": Colors.BLUE,
    "OBSOLETE": Colors.DIM,
}


class Console:
    """Console output helper with colors and formatting."""

    def __init__(self, color: bool = True, verbose: bool = False, stream=None):
        self.stream = stream or sys.stdout
        self.color = color and hasattr(self.stream, "isatty") and self.stream.isatty()
        self.verbose = verbose

    def _c(self, text: str, *codes: str) -> str:
        """Apply color codes to text."""
        if not self.color:
            return text
        return "".join(codes) + text + Colors.RESET

    def print(self, text: str = "") -> None:
        """Print text."""
        print(text, file=self.stream)

    def error(self, text: str) -> None:
        self.print(self._c(f"  {Symbols.CROSS} {text}", Colors.RED))

    def footer(self, url: str) -> None:
        """Print the tracker URL the workflow talked to."""
        self.print(f"  |\n  |--------> [{url}]")
        self.print()

    def patch_sets(self, sets: list[RemotePatchSet]) -> None:
        """Print the set listing, titles in bold."""
        self.print()
        for patch_set in sets:
            status = patch_set.status.upper()
            self.print(
                f"[{patch_set.id}]"
                f"[{self._c(status, STATUS_COLORS.get(status, ''))}] "
                f"{self._c(patch_set.first_patch_message, Colors.BOLD)}"
                f" ({patch_set.num_of_patches} patches by {patch_set.author})"
            )

    def workflow_result(
        self, result: WorkflowResult, url: Optional[str] = None
    ) -> None:
        """Print the messages and errors of a workflow."""
        self.print()
        for message in result.messages:
            if message:
                self.print(message)
        for error in result.errors:
            self.error(f"[ERR] {error}")
        if url and result.workflow in ("ack", "nack", "push", "status") and result.succeeded:
            self.footer(url)

    def confirm(self, message: str, default: bool = True) -> bool:
        """Ask for confirmation."""
        hint = "[Y/n]" if default else "[y/N]"
        prompt = self._c(f"\n{Symbols.WARN} {message} {hint}: ", Colors.YELLOW)
        try:
            response = input(prompt).strip().lower()
        except (EOFError, KeyboardInterrupt):
            self.print()
            return False
        if not response:
            return default
        return response in ("y", "yes")
