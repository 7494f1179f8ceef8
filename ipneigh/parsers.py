"""
ipneigh: `ip neigh` Line Parser

Raw command output → NeighborRecord.

Sample (OpenWrt, iproute2 full):
  192.168.0.33 dev br-lan lladdr dc:a6:32:57:46:d6 ref 1 used 0/0/0 probes 1 REACHABLE
  192.168.0.200 dev br-lan lladdr 0a:99:ad:f6:ce:e6 used 0/0/0 probes 1 STALE
  fe80::1866:4ccf:140e:95b0 dev br-lan lladdr 1a:42:85:a2:22:fb used 0/0/0 probes 4 STALE

Shape:
  <ipv4|ipv6> dev <iface> lladdr <mac> [ignored...] <NUD state>

Positional, not key/value. Tokens 1 and 3 must be the literal keywords
`dev` and `lladdr`. Any bad line raises FormatError.
"""

from __future__ import annotations
import logging
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Optional

from .errors import FormatError
from .models import NeighborRecord, NeighborState
from .commands import split_lines

# Field positions
_IP = 0
_DEV_KEYWORD = 1
_DEV_NAME = 2
_LLADDR_KEYWORD = 3
_LLADDR = 4
_MIN_TOKENS = 6

DEV_KEYWORD = "dev"
LLADDR_KEYWORD = "lladdr"

# FormatError reasons
REASON_UNEXPECTED = "unexpected string"
REASON_BAD_ADDRESS = "failed to parse address"
REASON_NO_DEVICE = "no device name found"
REASON_NO_LLADDR = "no link layer address found"


def _parse_ip(line: str, addr_str: str) -> IPv4Address | IPv6Address:
    """Parse an IPv4 or IPv6 address. Raises FormatError on failure."""
    # zone ids (`fe80::1%br-lan`) are rejected
    if "%" in addr_str:
        raise FormatError(line, REASON_BAD_ADDRESS, "scoped addresses not accepted")
    try:
        return ip_address(addr_str)
    except ValueError as e:
        raise FormatError(line, REASON_BAD_ADDRESS, str(e)) from e


def _expect_keyword(line: str, token: str, keyword: str, reason: str) -> None:
    if token.lower() != keyword:
        raise FormatError(
            line, reason, f"expected '{keyword}' but got '{token.lower()}'"
        )


def parse_line(line: str, logger: Optional[logging.Logger] = None) -> NeighborRecord:
    """
    Parse one `ip neigh` row.

    Splits on single spaces; consecutive spaces yield empty tokens and
    shift nothing, so `192.168.0.2 dev br-lan  used ...` lands an empty
    string at the lladdr position and is rejected.
    """
    tokens = line.split(" ")
    if logger:
        logger.debug(f"Sliced string -> {tokens}")

    if len(tokens) < _MIN_TOKENS:
        raise FormatError(
            line, REASON_UNEXPECTED,
            f"expected at least {_MIN_TOKENS} fields, got {len(tokens)}",
        )

    ip = _parse_ip(line, tokens[_IP])
    if logger:
        logger.debug(f"Parsed ip address -> {ip}")

    _expect_keyword(line, tokens[_DEV_KEYWORD], DEV_KEYWORD, REASON_NO_DEVICE)
    interface = tokens[_DEV_NAME]
    if logger:
        logger.debug(f"Extracted device name -> {interface!r}")

    _expect_keyword(line, tokens[_LLADDR_KEYWORD], LLADDR_KEYWORD, REASON_NO_LLADDR)
    mac_address = tokens[_LLADDR].lower()
    if logger:
        logger.debug(f"Extracted device mac address -> {mac_address!r}")

    # Everything between the MAC and the last token is counters (ref, used,
    # probes) are not modeled.
    state = NeighborState.from_keyword(tokens[-1])
    if logger:
        logger.debug(f"Parsed NUD state -> {state}")

    return NeighborRecord(
        ip=ip,
        interface=interface,
        mac_address=mac_address,
        state=state,
    )


def parse_output(text: str, logger: Optional[logging.Logger] = None) -> list[NeighborRecord]:
    """
    Parse a whole `ip neigh` dump. Blank lines are skipped; any bad line
    fails the lot.
    """
    return [parse_line(line, logger=logger) for line in split_lines(text)]
