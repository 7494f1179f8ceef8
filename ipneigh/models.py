"""
ipneigh: Core Data Models

One record per line of `ip neigh` output. Point-in-time snapshot only:
the kernel owns the real NUD state machine, we just record what it said.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from ipaddress import IPv4Address, IPv6Address


# ============================================================
# Address family
# ============================================================

class AddressFamily(Enum):
    IPV4 = "ipv4"
    IPV6 = "ipv6"


# ============================================================
# NUD state, see ip-neighbour(8)
# ============================================================

class NeighborState(Enum):
    """Neighbor Unreachability Detection state as reported by `ip neigh`."""
    PERMANENT = "permanent"             # valid forever, removed administratively
    NOARP = "noarp"                     # valid, never validated
    REACHABLE = "reachable"             # valid until reachability timeout
    STALE = "stale"                     # valid but suspicious
    NONE = "none"                       # pseudo state, entry being created/removed
    INCOMPLETE = "incomplete"           # not (yet) resolved
    DELAY = "delay"                     # validation delayed
    PROBE = "probe"                     # being probed
    FAILED = "failed"                   # max probes exceeded
    UNKNOWN = "unknown"                 # anything we don't recognize

    @classmethod
    def from_keyword(cls, keyword: str) -> NeighborState:
        """Case-insensitive keyword lookup. Unrecognized → UNKNOWN."""
        return _KEYWORD_MAP.get(keyword.upper(), cls.UNKNOWN)


_KEYWORD_MAP: dict[str, NeighborState] = {
    "PERMANENT": NeighborState.PERMANENT,
    "NOARP": NeighborState.NOARP,
    "REACHABLE": NeighborState.REACHABLE,
    "STALE": NeighborState.STALE,
    "NONE": NeighborState.NONE,
    "INCOMPLETE": NeighborState.INCOMPLETE,
    "DELAY": NeighborState.DELAY,
    "PROBE": NeighborState.PROBE,
    "FAILED": NeighborState.FAILED,
}


# ============================================================
# Neighbor record
# ============================================================

@dataclass(frozen=True)
class NeighborRecord:
    """A single neighbor table entry: L3 address → L2 address on an interface."""
    ip: IPv4Address | IPv6Address
    interface: str
    mac_address: str                    # lowercased, not validated
    state: NeighborState = NeighborState.UNKNOWN

    @property
    def family(self) -> AddressFamily:
        return (
            AddressFamily.IPV4 if isinstance(self.ip, IPv4Address)
            else AddressFamily.IPV6
        )

    def to_dict(self) -> dict:
        return {
            "ip": str(self.ip),
            "family": self.family.value,
            "interface": self.interface,
            "mac_address": self.mac_address,
            "state": self.state.value,
        }
