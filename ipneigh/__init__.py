"""
ipneigh: the host neighbor table (`ip neigh`) as structured records.

Not a scanner. A snapshot of what the kernel already knows.
"""

__version__ = "0.1.0"

from .models import AddressFamily, NeighborRecord, NeighborState
from .errors import NeighborQueryError, ExecutionError, CommandError, FormatError
from .parsers import parse_line, parse_output
from .neighbors import NeighborQuery, QueryConfig, fetch_neighbors
from .diagnostics import QueryRecord, QueryStatus, setup_logging
