"""
Shared presentation for the CLI table, JSON output, and the TUI.

Neither the CLI nor the TUI styles states on its own; both pull from
STATE_STYLE so a STALE entry looks the same everywhere.
"""

from __future__ import annotations

import json
from typing import Iterable, Optional

from rich.table import Table
from rich.text import Text

from .models import NeighborRecord, NeighborState


# State → (color, icon)
STATE_STYLE: dict[NeighborState, tuple[str, str]] = {
    NeighborState.PERMANENT:  ("#00ff88", "■"),
    NeighborState.NOARP:      ("#00ff88", "□"),
    NeighborState.REACHABLE:  ("#00ff88", "✓"),
    NeighborState.STALE:      ("#ffcc00", "~"),
    NeighborState.NONE:       ("#888888", "·"),
    NeighborState.INCOMPLETE: ("#ff8800", "⟳"),
    NeighborState.DELAY:      ("#00d4ff", "⏱"),
    NeighborState.PROBE:      ("#00d4ff", "⟳"),
    NeighborState.FAILED:     ("#ff4444", "✗"),
    NeighborState.UNKNOWN:    ("#888888", "?"),
}

COLUMNS = ("IP", "Interface", "MAC", "State")


def state_text(state: NeighborState) -> Text:
    color, icon = STATE_STYLE.get(state, ("#888888", "?"))
    label = Text()
    label.append(f"{icon} ", style=color)
    label.append(state.value.upper(), style="bold " + color)
    return label


def record_cells(record: NeighborRecord) -> tuple[Text, str, str, Text]:
    return (
        Text(str(record.ip), style="#00d4ff"),
        record.interface,
        record.mac_address,
        state_text(record.state),
    )


def neighbor_table(records: Iterable[NeighborRecord],
                   title: Optional[str] = None) -> Table:
    """Rich table, one row per record, in query order."""
    table = Table(title=title, header_style="bold")
    for name in COLUMNS:
        table.add_column(name)
    for record in records:
        table.add_row(*record_cells(record))
    return table


def records_to_json(records: Iterable[NeighborRecord]) -> str:
    return json.dumps([r.to_dict() for r in records], indent=2)
