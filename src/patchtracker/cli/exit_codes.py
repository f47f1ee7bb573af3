"""
Exit codes returned by the patchtracker command.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1          # usage, config or git failure
    PARTIAL = 2        # workflow ran, some units failed
    INTERRUPTED = 130
