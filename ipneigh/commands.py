"""
ipneigh: Command Runner

One command, one child process, no retries:

  ip neigh

Per invocation:
  - launch, wait, capture stdout/stderr as bytes
  - non-zero exit → CommandError (stderr, lowercased)
  - stdout must be UTF-8; anything else is a crash, not an error
  - split into trimmed, non-empty lines
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence
import subprocess
import time

from .errors import CommandError, ExecutionError

IP_BINARY = "ip"
NEIGH_SUBCOMMAND = "neigh"
NEIGHBOR_COMMAND = (IP_BINARY, NEIGH_SUBCOMMAND)


@dataclass
class CommandOutput:
    """What came back from one invocation."""
    argv: list[str]
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""
    duration_ms: Optional[float] = None

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


def build_command(ip_binary: str = IP_BINARY) -> list[str]:
    """The fixed neighbor table query. Only the binary path is configurable."""
    return [ip_binary, NEIGH_SUBCOMMAND]


def run_command(argv: Sequence[str], timeout: Optional[float] = None) -> CommandOutput:
    """
    Launch argv and block until it exits.

    timeout=None waits forever. With a timeout, subprocess.run kills the
    child on expiry and we report it as an ExecutionError.
    """
    argv = list(argv)
    start = time.monotonic()
    try:
        proc = subprocess.run(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise ExecutionError(argv, f"timed out after {e.timeout}s") from e
    except OSError as e:
        raise ExecutionError(argv, e.strerror or str(e)) from e

    return CommandOutput(
        argv=argv,
        returncode=proc.returncode,
        stdout=proc.stdout or b"",
        stderr=proc.stderr or b"",
        duration_ms=(time.monotonic() - start) * 1000,
    )


def check_output(output: CommandOutput) -> str:
    """
    Exit status → text or CommandError.

    stdout is decoded strictly; a UnicodeDecodeError propagates as-is.
    """
    if not output.succeeded:
        stderr = output.stderr.decode("utf-8", errors="replace").lower()
        raise CommandError(output.argv, output.returncode, stderr)
    return output.stdout.decode("utf-8")


def split_lines(text: str) -> list[str]:
    """Split on newlines, trim, drop empties. Order preserved."""
    lines = (line.strip() for line in text.split("\n"))
    return [line for line in lines if line]
