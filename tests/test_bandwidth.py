"""Tests for the update.cgi netdev collector."""

import random

import pytest

from tomato_exporter.collectors.bandwidth import (
    BandwidthCounters,
    normalise_netdev,
    parse_bandwidth,
    project_bandwidth,
)
from tomato_exporter.core import ParseError

NETDEV = (
    "netdev={ "
    "'eth0':{rx:0xab7666a1,tx:0x6a2c1014},"
    "'vlan1':{rx:0x4c4d97a5,tx:0x839c8539},"
    "'vlan2':{rx:0x2339061e,tx:0xe693c2e1},"
    "'eth1':{rx:0x41122421,tx:0xd273ff5},"
    "'eth2':{rx:0x5ed3a58a,tx:0xe03baf1e},"
    "'br0':{rx:0xd6dd237d,tx:0x4265a458}"
    "};"
)


def render_netdev(counters):
    """Render counters the way the router's update.cgi does."""

    entries = ",".join(
        f"'{name}':{{rx:{hex(value.rx)},tx:{hex(value.tx)}}}"
        for name, value in counters.items()
    )
    return f"\nnetdev={{{entries}}};\n"


def test_parse_bandwidth():
    assert parse_bandwidth(NETDEV) == {
        "br0": BandwidthCounters(rx=3604816765, tx=1113957464),
        "eth0": BandwidthCounters(rx=2876663457, tx=1781272596),
        "eth1": BandwidthCounters(rx=1091707937, tx=220676085),
        "eth2": BandwidthCounters(rx=1590928778, tx=3762007838),
        "vlan1": BandwidthCounters(rx=1280153509, tx=2208073017),
        "vlan2": BandwidthCounters(rx=590939678, tx=3868443361),
    }


def test_normalise_netdev_produces_json():
    assert normalise_netdev("netdev={'eth0':{rx:0x1,tx:0xA}};") == (
        '{"eth0":{"rx":"0x1","tx":"0xA"}}'
    )


def test_interface_names_containing_rx_and_tx_survive():
    body = "netdev={'rx':{rx:0x1,tx:0x2},'tx0':{rx:0x3,tx:0x4},'wlrxtx':{rx:0x5,tx:0x6}};"

    assert parse_bandwidth(body) == {
        "rx": BandwidthCounters(1, 2),
        "tx0": BandwidthCounters(3, 4),
        "wlrxtx": BandwidthCounters(5, 6),
    }


def test_round_trip_of_random_counters():
    rng = random.Random(1234)
    for _ in range(25):
        counters = {
            f"{rng.choice(['eth', 'vlan', 'br', 'wl', 'rx', 'tx'])}{index}": BandwidthCounters(
                rng.randrange(2**64), rng.randrange(2**64)
            )
            for index in range(rng.randrange(1, 8))
        }

        assert parse_bandwidth(render_netdev(counters)) == counters


def test_empty_object_yields_no_interfaces():
    assert parse_bandwidth("netdev={};") == {}


@pytest.mark.parametrize(
    "body",
    [
        "",
        "<html><body>401 Unauthorized</body></html>",
        "netdev={'eth0':{rx:0xZZ,tx:0x1}};",
        "netdev={'eth0':{rx:0x1}};",
        "netdev={'eth0':{rx:0x1,tx:0x2}",
        "netdev=['eth0'];",
        "netdev={'eth0':{rx:0x10000000000000000,tx:0x1}};",
    ],
)
def test_malformed_payloads_fail_loudly(body):
    with pytest.raises(ParseError):
        parse_bandwidth(body)


def test_project_bandwidth_suppresses_zero_direction_only():
    receive, transmit = project_bandwidth(
        {
            "eth1": BandwidthCounters(rx=5, tx=0),
            "br0": BandwidthCounters(rx=7, tx=9),
        }
    )

    assert [(dict(s.labels)["device"], s.value) for s in receive.samples] == [
        ("br0", 7.0),
        ("eth1", 5.0),
    ]
    assert [dict(s.labels)["device"] for s in transmit.samples] == ["br0"]
