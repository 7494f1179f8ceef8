"""
Neighbor Query: one `ip neigh`, parsed whole or not at all.

Sequence per query:
    1. Build the fixed command (`ip neigh`)
    2. Launch and wait, ExecutionError if it never ran
    3. Non-zero exit → CommandError with stderr
    4. Decode stdout, split into trimmed non-empty lines
    5. Parse every line in order; the first FormatError fails the query

No partial snapshots: either every line became a NeighborRecord or the
caller gets an exception. The QueryRecord is filled in either way.

Lines without a link-layer address (`192.168.0.2 dev br-lan  used 0/0/0
probes 6 FAILED`) are rejected like any other malformed line.
"""

from __future__ import annotations
from dataclasses import dataclass
from pprint import pformat
from typing import Optional
import logging
import sys

from .commands import IP_BINARY, build_command, check_output, run_command, split_lines
from .diagnostics import (
    QueryRecord, QueryStatus, ParseResult,
    setup_logging, dump_query_summary, dump_query_detail,
)
from .errors import CommandError, ExecutionError, FormatError, NeighborQueryError
from .models import NeighborRecord
from .parsers import parse_line


# ============================================================
# Query Configuration
# ============================================================

@dataclass
class QueryConfig:
    ip_binary: str = IP_BINARY

    # None = wait as long as `ip` takes
    timeout: Optional[float] = None

    # QueryRecord JSON, written on success and failure
    log_file: Optional[str] = None


# ============================================================
# Neighbor Query
# ============================================================

class NeighborQuery:
    """
    Usage:
        query = NeighborQuery(QueryConfig(timeout=5.0), logger=logger)
        records = query.run()

        # query.diagnostics.status → SUCCESS, EMPTY, ERROR, ...
        # query.diagnostics.dump_json("/tmp/ipneigh.json")
    """

    def __init__(self, config: Optional[QueryConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or QueryConfig()
        self.logger = logger
        self._diagnostics: Optional[QueryRecord] = None

    @property
    def diagnostics(self) -> Optional[QueryRecord]:
        return self._diagnostics

    def _log(self, level: int, msg: str) -> None:
        if self.logger:
            self.logger.log(level, msg)

    def run(self) -> list[NeighborRecord]:
        argv = build_command(self.config.ip_binary)
        record = QueryRecord(command=argv)
        self._diagnostics = record

        try:
            return self._run(argv, record)
        finally:
            self._log(logging.DEBUG, dump_query_summary(record))
            if self.config.log_file:
                self._write_diagnostics(record, self.config.log_file)

    def _write_diagnostics(self, record: QueryRecord, path: str) -> None:
        """Dump failures are logged, not raised."""
        try:
            record.dump_json(path)
        except OSError as e:
            self._log(logging.WARNING, f"Could not write diagnostics to {path}: {e}")
            return
        self._log(logging.DEBUG, f"Diagnostics written to {path}")

    def _run(self, argv: list[str], record: QueryRecord) -> list[NeighborRecord]:
        self._log(logging.DEBUG, f"Running: {' '.join(argv)}")

        try:
            output = run_command(argv, timeout=self.config.timeout)
        except ExecutionError as e:
            record.status = QueryStatus.EXEC_FAILURE
            record.error_message = str(e)
            raise

        record.returncode = output.returncode
        record.duration_ms = output.duration_ms
        record.stderr = output.stderr.decode("utf-8", errors="replace")

        try:
            text = check_output(output)
        except CommandError as e:
            record.status = QueryStatus.ERROR
            record.error_message = str(e)
            raise
        except UnicodeDecodeError as e:
            record.status = QueryStatus.DECODE_ERROR
            record.error_message = str(e)
            raise

        record.raw_output = text
        lines = split_lines(text)
        record.line_count = len(lines)

        records = []
        for line in lines:
            try:
                records.append(parse_line(line, logger=self.logger))
            except FormatError as e:
                record.status = QueryStatus.PARSE_ERROR
                record.parse_result = ParseResult.FORMAT_ERROR
                record.parse_detail = str(e)
                record.error_message = e.reason
                raise

        record.parsed_count = len(records)
        record.parse_result = ParseResult.OK
        record.status = QueryStatus.SUCCESS if records else QueryStatus.EMPTY
        return records


def fetch_neighbors(config: Optional[QueryConfig] = None,
                    logger: Optional[logging.Logger] = None) -> list[NeighborRecord]:
    """Query the host neighbor table once. Raises NeighborQueryError on any failure."""
    return NeighborQuery(config, logger=logger).run()


# ============================================================
# CLI
# ============================================================

def main(argv: Optional[list[str]] = None):
    """
    ipneigh
    ipneigh --table
    IPNEIGH_LOG=debug ipneigh --json --log /tmp/ipneigh.json
    """
    import argparse

    parser = argparse.ArgumentParser(
        description="Dump the host neighbor table (ip neigh) as structured records.",
        epilog=(
            "Examples:\n"
            "  ipneigh\n"
            "  ipneigh --table\n"
            "  IPNEIGH_LOG=debug ipneigh --json --log /tmp/ipneigh.json\n"
            "\n"
            "Log level is read from IPNEIGH_LOG (default: info)."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--ip-binary", default=IP_BINARY,
                        help="Path to the iproute2 'ip' binary (default: ip)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Kill 'ip' after this many seconds (default: wait forever)")
    parser.add_argument("--log", default=None,
                        help="Write query diagnostic JSON to file")
    parser.add_argument("--debug-log", default=None,
                        help="Also write the debug-level log to file")

    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true",
                        help="Print records as JSON on stdout")
    output.add_argument("--table", action="store_true",
                        help="Print records as a table on stdout")

    args = parser.parse_args(argv)

    if args.timeout is not None and args.timeout <= 0:
        parser.error(f"Invalid timeout '{args.timeout}': must be positive")

    logger = setup_logging(log_file=args.debug_log)

    config = QueryConfig(
        ip_binary=args.ip_binary,
        timeout=args.timeout,
        log_file=args.log,
    )
    query = NeighborQuery(config, logger=logger)

    try:
        records = query.run()
    except NeighborQueryError as e:
        logger.error(f"Neighbor query failed: {e}")
        if query.diagnostics:
            logger.debug(dump_query_detail(query.diagnostics))
        sys.exit(1)

    logger.info(f"Neighbors -> {pformat(records)}")

    if args.json:
        from .render import records_to_json
        print(records_to_json(records))
    elif args.table:
        from rich.console import Console
        from .render import neighbor_table
        Console().print(neighbor_table(records, title=" ".join(query.diagnostics.command)))


if __name__ == "__main__":
    main()
