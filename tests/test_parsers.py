"""Tests for the ip neigh line parser."""

from ipaddress import IPv4Address, IPv6Address, ip_address

import pytest

from ipneigh.errors import FormatError
from ipneigh.models import AddressFamily, NeighborRecord, NeighborState
from ipneigh.parsers import (
    parse_line, parse_output,
    REASON_UNEXPECTED, REASON_BAD_ADDRESS, REASON_NO_DEVICE, REASON_NO_LLADDR,
)

REACHABLE_V4 = "192.168.0.33 dev br-lan lladdr dc:a6:32:57:46:d6 ref 1 used 0/0/0 probes 1 REACHABLE"
STALE_V6 = "fe80::1866:4ccf:140e:95b0 dev br-lan lladdr 1a:42:85:a2:22:fb used 0/0/0 probes 4 STALE"
NO_LLADDR = "192.168.0.2 dev br-lan used 0/0/0 probes 6 FAILED"


class TestParseLine:

    def test_ipv4_reachable(self):
        record = parse_line(REACHABLE_V4)
        assert record == NeighborRecord(
            ip=IPv4Address("192.168.0.33"),
            interface="br-lan",
            mac_address="dc:a6:32:57:46:d6",
            state=NeighborState.REACHABLE,
        )
        assert record.family == AddressFamily.IPV4

    def test_ipv6_stale(self):
        record = parse_line(STALE_V6)
        assert str(record.ip) == "fe80::1866:4ccf:140e:95b0"
        assert isinstance(record.ip, IPv6Address)
        assert record.interface == "br-lan"
        assert record.mac_address == "1a:42:85:a2:22:fb"
        assert record.state == NeighborState.STALE
        assert record.family == AddressFamily.IPV6

    @pytest.mark.parametrize("addr", [
        "10.0.0.1",
        "172.119.56.1",
        "fd35:e227:2f15::169",
        "fe80::e132:56de:1eac:d560",
        "::1",
    ])
    def test_canonical_address_round_trips(self, addr):
        record = parse_line(f"{addr} dev eth0 lladdr 00:11:22:33:44:55 REACHABLE")
        assert str(record.ip) == addr

    def test_mac_lowercased_interface_verbatim(self):
        record = parse_line("10.0.0.1 dev WAN.100 lladdr AA:BB:CC:DD:EE:FF STALE")
        assert record.interface == "WAN.100"
        assert record.mac_address == "aa:bb:cc:dd:ee:ff"

    def test_mac_not_validated(self):
        record = parse_line("10.0.0.1 dev eth0 lladdr not-a-mac x DELAY")
        assert record.mac_address == "not-a-mac"
        assert record.state == NeighborState.DELAY

    def test_keywords_case_insensitive(self):
        record = parse_line("10.0.0.1 DEV eth0 LLADDR 00:11:22:33:44:55 x probe")
        assert record.state == NeighborState.PROBE

    @pytest.mark.parametrize("keyword,state", [
        ("PERMANENT", NeighborState.PERMANENT),
        ("noarp", NeighborState.NOARP),
        ("Reachable", NeighborState.REACHABLE),
        ("stale", NeighborState.STALE),
        ("NONE", NeighborState.NONE),
        ("incomplete", NeighborState.INCOMPLETE),
        ("DeLaY", NeighborState.DELAY),
        ("PROBE", NeighborState.PROBE),
        ("failed", NeighborState.FAILED),
        ("0/0/0", NeighborState.UNKNOWN),
        ("router", NeighborState.UNKNOWN),
    ])
    def test_trailing_state(self, keyword, state):
        record = parse_line(f"10.0.0.1 dev eth0 lladdr 00:11:22:33:44:55 {keyword}")
        assert record.state == state

    def test_counters_between_mac_and_state_ignored(self):
        short = parse_line("10.0.0.1 dev eth0 lladdr 00:11:22:33:44:55 REACHABLE")
        long = parse_line(
            "10.0.0.1 dev eth0 lladdr 00:11:22:33:44:55 ref 3 used 12/4/1 probes 1 REACHABLE"
        )
        assert short == long

    def test_idempotent(self):
        assert parse_line(STALE_V6) == parse_line(STALE_V6)
        assert hash(parse_line(STALE_V6)) == hash(parse_line(STALE_V6))

    @pytest.mark.parametrize("line", [
        "10.0.0.1 dev eth0 lladdr 00:11:22:33:44:55",
        "10.0.0.1 dev eth0",
        "10.0.0.1",
        "",
    ])
    def test_too_few_tokens(self, line):
        with pytest.raises(FormatError) as exc:
            parse_line(line)
        assert exc.value.reason == REASON_UNEXPECTED
        assert exc.value.line == line

    @pytest.mark.parametrize("addr", ["192.168.0.256", "router", "fe80:::1", "0/0/0"])
    def test_bad_address(self, addr):
        with pytest.raises(FormatError) as exc:
            parse_line(f"{addr} dev eth0 lladdr 00:11:22:33:44:55 REACHABLE")
        assert exc.value.reason == REASON_BAD_ADDRESS

    @pytest.mark.parametrize("token", ["via", "devs", "", "lladdr"])
    def test_missing_dev_keyword(self, token):
        with pytest.raises(FormatError) as exc:
            parse_line(f"10.0.0.1 {token} eth0 lladdr 00:11:22:33:44:55 REACHABLE")
        assert exc.value.reason == REASON_NO_DEVICE

    @pytest.mark.parametrize("token", ["used", "ref", "dev", "ll"])
    def test_missing_lladdr_keyword(self, token):
        with pytest.raises(FormatError) as exc:
            parse_line(f"10.0.0.1 dev eth0 {token} 00:11:22:33:44:55 REACHABLE")
        assert exc.value.reason == REASON_NO_LLADDR

    def test_entry_without_link_layer_address_rejected(self):
        with pytest.raises(FormatError) as exc:
            parse_line(NO_LLADDR)
        assert exc.value.reason == REASON_NO_LLADDR
        assert "used" in str(exc.value)

    @pytest.mark.parametrize("addr", ["fe80::1%br-lan", "fe80::1866:4ccf:140e:95b0%2"])
    def test_scoped_address_rejected(self, addr):
        with pytest.raises(FormatError) as exc:
            parse_line(f"{addr} dev br-lan lladdr aa:bb:cc:dd:ee:ff STALE")
        assert exc.value.reason == REASON_BAD_ADDRESS
        assert "scoped" in str(exc.value)

    def test_double_space_is_positional(self):
        # iproute2 prints two spaces where lladdr would be
        with pytest.raises(FormatError) as exc:
            parse_line("192.168.0.2 dev br-lan  used 0/0/0 probes 6 FAILED")
        assert exc.value.reason == REASON_NO_LLADDR

    def test_debug_logging(self, caplog):
        import logging
        logger = logging.getLogger("test.parsers")
        with caplog.at_level(logging.DEBUG, logger="test.parsers"):
            parse_line(REACHABLE_V4, logger=logger)
        assert "Parsed ip address -> 192.168.0.33" in caplog.text
        assert "Parsed NUD state" in caplog.text


class TestParseOutput:

    def test_order_preserved_blank_lines_dropped(self):
        text = f"\n  {REACHABLE_V4}  \n\n   \n{STALE_V6}\n"
        records = parse_output(text)
        assert [str(r.ip) for r in records] == [
            "192.168.0.33", "fe80::1866:4ccf:140e:95b0",
        ]

    def test_one_record_per_line(self):
        lines = [
            f"10.0.0.{i} dev eth0 lladdr 00:11:22:33:44:{i:02x} REACHABLE"
            for i in range(1, 21)
        ]
        records = parse_output("\n".join(lines))
        assert len(records) == 20
        assert [r.ip for r in records] == [ip_address(f"10.0.0.{i}") for i in range(1, 21)]

    def test_empty_output(self):
        assert parse_output("") == []
        assert parse_output("\n \n") == []

    @pytest.mark.parametrize("position", [0, 1, 2])
    def test_one_bad_line_fails_everything(self, position):
        lines = [REACHABLE_V4, STALE_V6]
        lines.insert(position, NO_LLADDR)
        with pytest.raises(FormatError) as exc:
            parse_output("\n".join(lines))
        assert exc.value.line == NO_LLADDR
