"""
ipneigh: Error types

Three ways a neighbor query can fail, all fatal to the query:
  ExecutionError  `ip` could not be launched (or never finished)
  CommandError    `ip` ran and exited non-zero
  FormatError     a line of output didn't have the expected shape
"""

from __future__ import annotations
from typing import Sequence


class NeighborQueryError(Exception):
    """Base class for every neighbor query failure."""


class ExecutionError(NeighborQueryError):
    def __init__(self, command: Sequence[str], reason: str):
        self.command = list(command)
        self.reason = reason
        super().__init__(
            f"Failed to execute '{' '.join(self.command)}': {reason}"
        )


class CommandError(NeighborQueryError):
    def __init__(self, command: Sequence[str], returncode: int, stderr: str):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Command '{' '.join(self.command)}' failed "
            f"(exit {returncode}): {stderr.strip()}"
        )


class FormatError(NeighborQueryError):
    def __init__(self, line: str, reason: str, detail: str = ""):
        self.line = line
        self.reason = reason
        self.detail = detail
        message = f"{reason} -> {line!r}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)
