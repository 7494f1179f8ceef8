"""
Textual TUI for ipneigh: the neighbor table, live.

Two modes:
  Live:  NeighborApp(config=QueryConfig(...))
         Query runs on an executor thread; `r` re-runs it.
  Demo:  NeighborApp(records=[...])
         Shows a fixed snapshot (sample OpenWrt output with --demo).
"""

from __future__ import annotations

import asyncio
from collections import Counter
from datetime import datetime
from pathlib import Path

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import DataTable, Static

from .diagnostics import QueryRecord
from .errors import NeighborQueryError
from .models import NeighborRecord
from .neighbors import NeighborQuery, QueryConfig
from .render import COLUMNS, STATE_STYLE, record_cells

CSS_PATH = Path(__file__).parent / "theme.tcss"


class TitleBar(Static):
    pass

class StatusBar(Static):
    pass


class NeighborApp(App):
    """ipneigh TUI: neighbor table snapshot."""

    CSS_PATH = CSS_PATH
    TITLE = "ipneigh"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "requery", "Refresh"),
    ]

    def __init__(
        self,
        config: QueryConfig | None = None,
        records: list[NeighborRecord] | None = None,
        source: str = "ip neigh",
    ):
        super().__init__()
        self._config = config
        self._records: list[NeighborRecord] = list(records or [])
        self.source = source

        self._querying = False
        self._queried_at: datetime | None = None
        self._diagnostics: QueryRecord | None = None
        self.query_error: str | None = None

    def compose(self) -> ComposeResult:
        yield TitleBar(f"  ipneigh: {self.source}", id="title-bar")
        yield DataTable(id="neighbor-table", cursor_type="row", zebra_stripes=True)
        yield StatusBar(id="status-bar")

    def on_mount(self) -> None:
        table = self.query_one("#neighbor-table", DataTable)
        table.add_columns(*COLUMNS)
        if self._config:
            self._start_query()
        else:
            self._queried_at = datetime.now()
            self._show_records(self._records)
        self._update_status()

    # ── Live query ──────────────────────────────────────────────────────

    def _start_query(self) -> None:
        self._querying = True
        self._update_status()
        self.run_worker(self._run_live_query(), exclusive=True, group="query")

    async def _run_live_query(self) -> None:
        """
        `ip neigh` blocks, so it runs on the default executor.
        Failures land in the status bar; the last good table stays up.
        """
        query = NeighborQuery(self._config)
        loop = asyncio.get_running_loop()
        try:
            records = await loop.run_in_executor(None, query.run)
        except NeighborQueryError as e:
            self.query_error = str(e)
        else:
            self.query_error = None
            self._records = records
            self._show_records(records)
        finally:
            self._querying = False
            self._diagnostics = query.diagnostics
            self._queried_at = datetime.now()
            self._update_status()

    # ── Table ───────────────────────────────────────────────────────────

    def _show_records(self, records: list[NeighborRecord]) -> None:
        table = self.query_one("#neighbor-table", DataTable)
        table.clear()
        for record in records:
            table.add_row(*record_cells(record))

    # ── Status bar ──────────────────────────────────────────────────────

    def _update_status(self) -> None:
        bar = self.query_one("#status-bar", StatusBar)
        hints = "r:refresh  q:quit" if self._config else "q:quit"
        status = Text("  ")

        if self._querying:
            status.append("⟳ querying…", style="#00d4ff")
        elif self.query_error:
            status.append(f"✗ {self.query_error}", style="#ff4444")
        else:
            status.append(f"✓ {len(self._records)} neighbors", style="#00ff88")
            counts = Counter(r.state for r in self._records)
            for state, count in sorted(counts.items(), key=lambda kv: kv[0].value):
                color, icon = STATE_STYLE[state]
                status.append(" │ ")
                status.append(f"{icon} {state.value} {count}", style=color)

        if self._queried_at and not self._querying:
            status.append(f" │ {self._queried_at.strftime('%H:%M:%S')}")
        if self._diagnostics and self._diagnostics.duration_ms:
            status.append(f" ({self._diagnostics.duration_ms:.0f}ms)")
        status.append(f" │ {hints}")
        bar.update(status)

    # ── Key bindings ────────────────────────────────────────────────────

    def action_requery(self) -> None:
        if self._config and not self._querying:
            self._start_query()

    def action_quit(self) -> None:
        self.exit()


# ── Demo snapshot ───────────────────────────────────────────────────────

_DEMO_OUTPUT = """\
192.168.0.33 dev br-lan lladdr dc:a6:32:57:46:d6 ref 1 used 0/0/0 probes 1 REACHABLE
192.168.0.5 dev br-lan lladdr dc:a6:32:a3:48:b1 ref 1 used 0/0/0 probes 1 REACHABLE
192.168.0.147 dev br-lan lladdr 24:4b:fe:06:f8:3c ref 1 used 0/0/0 probes 1 REACHABLE
192.168.0.200 dev br-lan lladdr 0a:99:ad:f6:ce:e6 used 0/0/0 probes 1 STALE
172.119.56.1 dev eth1 lladdr 00:01:5c:68:3c:46 ref 1 used 0/0/0 probes 1 REACHABLE
192.168.0.100 dev br-lan lladdr 1a:42:85:a2:22:fb ref 1 used 0/0/0 probes 1 REACHABLE
192.168.0.11 dev br-lan lladdr 54:af:97:06:5d:7c ref 1 used 0/0/0 probes 1 REACHABLE
192.168.0.8 dev br-lan lladdr 88:66:5a:49:16:b3 used 0/0/0 probes 1 STALE
fd35:e227:2f15::169 dev br-lan lladdr 24:4b:fe:06:f8:3c used 0/0/0 probes 1 STALE
fe80::e132:56de:1eac:d560 dev br-lan lladdr 24:4b:fe:06:f8:3c used 0/0/0 probes 1 STALE
fe80::1866:4ccf:140e:95b0 dev br-lan lladdr 1a:42:85:a2:22:fb used 0/0/0 probes 4 STALE
"""


def build_demo_records() -> list[NeighborRecord]:
    from .parsers import parse_output
    return parse_output(_DEMO_OUTPUT)


def main():
    import argparse

    from .commands import IP_BINARY

    parser = argparse.ArgumentParser(description="ipneigh TUI")
    parser.add_argument("--demo", action="store_true", help="Show sample snapshot")
    parser.add_argument("--ip-binary", default=IP_BINARY)
    parser.add_argument("--timeout", type=float, default=None)
    parser.add_argument("--log", default=None,
                        help="Write query diagnostic JSON to file")
    args = parser.parse_args()

    if args.demo:
        app = NeighborApp(records=build_demo_records(), source="demo")
        app.run()
        return

    if args.timeout is not None and args.timeout <= 0:
        parser.error(f"Invalid timeout '{args.timeout}': must be positive")

    config = QueryConfig(
        ip_binary=args.ip_binary,
        timeout=args.timeout,
        log_file=args.log,
    )
    app = NeighborApp(config=config, source=f"{args.ip_binary} neigh")
    app.run()


if __name__ == "__main__":
    main()
