"""
Exit codes returned by the adotasks command line.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    CONNECTION_ERROR = 3
    NOT_FOUND = 4
    CANCELLED = 130  # 128 + SIGINT
