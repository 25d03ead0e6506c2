"""Network interface collector backed by ``/proc/net/dev``."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Callable, Mapping

from ..core import ParseError
from ..exposition import MetricSeries, MetricType, Sample
from .base import ShellCommandCollector

U64_MAX = 2**64 - 1

_DEVICE_LINE_RE = re.compile(
    r"^[ \t]*(?P<name>[^\s:|]+):[ \t]*(?P<counters>[0-9]+(?:[ \t]+[0-9]+){15})[ \t\r]*$",
    re.M,
)


@dataclass(frozen=True, slots=True)
class NetworkInterfaceStats:
    name: str
    rx_bytes: int
    rx_packets: int
    rx_errs: int
    rx_drop: int
    rx_fifo: int
    rx_frame: int
    rx_compressed: int
    rx_multicast: int
    tx_bytes: int
    tx_packets: int
    tx_errs: int
    tx_drop: int
    tx_fifo: int
    tx_colls: int
    tx_carrier: int
    tx_compressed: int


_COUNTER_FIELDS = tuple(f.name for f in fields(NetworkInterfaceStats))[1:]


def parse_u64(raw: str, *, family: str, base: int = 10) -> int:
    """Decode an unsigned 64-bit device counter."""

    try:
        value = int(raw, base)
    except ValueError:
        raise ParseError(family, f"invalid counter {raw!r}") from None
    if not 0 <= value <= U64_MAX:
        raise ParseError(family, f"counter {raw!r} out of unsigned 64-bit range")
    return value


def parse_network(body: str) -> dict[str, NetworkInterfaceStats]:
    """Parse every device line, including idle ones, keyed by device name."""

    interfaces: dict[str, NetworkInterfaceStats] = {}
    for match in _DEVICE_LINE_RE.finditer(body):
        name = match.group("name")
        counters = [
            parse_u64(raw, family="network") for raw in match.group("counters").split()
        ]
        interfaces[name] = NetworkInterfaceStats(
            name, **dict(zip(_COUNTER_FIELDS, counters))
        )

    if not interfaces:
        raise ParseError("network", "no devices in /proc/net/dev output", body=body)
    return dict(sorted(interfaces.items()))


def byte_counter_series(
    name: str,
    help: str,
    interfaces: Mapping[str, object],
    value: Callable[[object], int],
) -> MetricSeries:
    """Build a per-device byte counter, skipping devices whose value is zero.

    Zero byte counts come from inactive pseudo-interfaces; listing them would
    keep idle devices around forever.
    """

    samples = []
    for device in sorted(interfaces):
        counter = value(interfaces[device])
        if counter == 0:
            continue
        samples.append(Sample((("device", device),), float(counter)))
    return MetricSeries(name, help, MetricType.COUNTER, tuple(samples))


def project_network(
    interfaces: Mapping[str, NetworkInterfaceStats],
) -> list[MetricSeries]:
    return [
        byte_counter_series(
            "node_network_receive_bytes_total",
            "Network device statistic receive_bytes",
            interfaces,
            lambda iface: iface.rx_bytes,
        ),
        byte_counter_series(
            "node_network_transmit_bytes_total",
            "Network device statistic transmit_bytes",
            interfaces,
            lambda iface: iface.tx_bytes,
        ),
    ]


class NetworkCollector(ShellCommandCollector):
    name = "network"
    command = "cat /proc/net/dev"

    def parse(self, body: str) -> dict[str, NetworkInterfaceStats]:
        return parse_network(body)

    def project(
        self, record: Mapping[str, NetworkInterfaceStats]
    ) -> list[MetricSeries]:
        return project_network(record)
