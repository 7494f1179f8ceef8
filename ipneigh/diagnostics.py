"""
ipneigh: Diagnostic Framework

Every query traceable: what we ran, what came back, what the parser
thought of it. If the snapshot fails we need to know WHY:
  - Did `ip` even launch?
  - Did it exit non-zero, and what did it say on stderr?
  - Which line broke the parser, and at which field?

The QueryRecord is a structured object, not a log line. It can be
dumped to JSON with --log and inspected after the fact.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
import json
import logging
import os


# ============================================================
# Structured Diagnostic Records
# ============================================================

class QueryStatus(Enum):
    PENDING = "pending"                 # not finished (or aborted)
    SUCCESS = "success"                 # command executed, output parsed
    EMPTY = "empty"                     # command executed, no neighbors
    EXEC_FAILURE = "exec-failure"       # couldn't launch / timed out
    ERROR = "error"                     # command exited non-zero
    DECODE_ERROR = "decode-error"       # stdout was not UTF-8
    PARSE_ERROR = "parse-error"         # got output, parser choked


class ParseResult(Enum):
    OK = "ok"
    NOT_RUN = "not-run"                 # never got text to parse
    FORMAT_ERROR = "format-error"


@dataclass
class QueryRecord:
    """Complete record of a single neighbor table query."""
    command: list[str]
    timestamp: datetime = field(default_factory=datetime.now)

    # What happened
    status: QueryStatus = QueryStatus.PENDING
    returncode: Optional[int] = None
    raw_output: str = ""                # FULL stdout, unmodified
    stderr: str = ""
    error_message: str = ""
    duration_ms: Optional[float] = None

    # Parsing
    parse_result: ParseResult = ParseResult.NOT_RUN
    parse_detail: str = ""              # offending line / reason
    line_count: int = 0                 # non-empty lines fed to the parser
    parsed_count: int = 0

    def to_dict(self) -> dict:
        return {
            "command": " ".join(self.command),
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "returncode": self.returncode,
            "raw_output_lines": len(self.raw_output.splitlines()),
            "raw_output": self.raw_output,
            "stderr": self.stderr,
            "error_message": self.error_message,
            "duration_ms": self.duration_ms,
            "parse_result": self.parse_result.value,
            "parse_detail": self.parse_detail,
            "line_count": self.line_count,
            "parsed_count": self.parsed_count,
        }

    def dump_json(self, path: str):
        """Write full diagnostic to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)


# ============================================================
# Logger Setup
# ============================================================
#
# One knob: IPNEIGH_LOG=debug|info|warning|error|critical (default info).
# The entry point builds the logger once and hands it down; nothing
# below the entry point reaches for a global.
#

LOG_ENV_VAR = "IPNEIGH_LOG"
DEFAULT_LOG_LEVEL = logging.INFO

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def resolve_log_level(value: Optional[str] = None) -> int:
    """Map a level name to a logging level. Unset or unknown → INFO."""
    if value is None:
        value = os.environ.get(LOG_ENV_VAR)
    if not value:
        return DEFAULT_LOG_LEVEL
    return _LEVELS.get(value.strip().lower(), DEFAULT_LOG_LEVEL)


def setup_logging(
    level: Optional[int] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the `ipneigh` logger.

    - level: stderr level; defaults to whatever IPNEIGH_LOG says
    - log_file: additionally write debug-level to file
    """
    if level is None:
        level = resolve_log_level()

    logger = logging.getLogger("ipneigh")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    if log_file:
        fh = logging.FileHandler(log_file, mode="w")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger


def _indent(text: str, prefix: str = "    ") -> str:
    return "\n".join(prefix + line for line in text.splitlines())


def dump_query_summary(record: QueryRecord) -> str:
    """One-line summary for verbose output or the TUI status bar."""
    took = f" ({record.duration_ms:.0f}ms)" if record.duration_ms else ""
    summary = (
        f"{' '.join(record.command)}{took} | {record.status.value} | "
        f"{record.parsed_count}/{record.line_count} parsed"
    )
    if record.error_message:
        summary += f" | {record.error_message}"
    return summary


def dump_query_detail(record: QueryRecord) -> str:
    """Multi-line detail with the raw output."""
    lines = [f"═══ {' '.join(record.command)} ═══"]
    lines.append(f"  status: {record.status.value} (exit {record.returncode})")
    lines.append(f"  parse:  {record.parse_result.value}")
    if record.parse_detail:
        lines.append(f"      detail: {record.parse_detail}")
    if record.error_message:
        lines.append(f"      error: {record.error_message}")
    if record.raw_output:
        lines.append("  output:")
        lines.append(_indent(record.raw_output))
    return "\n".join(lines)
