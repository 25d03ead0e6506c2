"""Bandwidth collector backed by the router's ``update.cgi?exec=netdev`` action.

The router answers with a JavaScript statement rather than JSON::

    netdev={'eth0':{rx:0xab7666a1,tx:0x6a2c1014},'br0':{rx:0x0,tx:0x4265a458}};

Strings are single-quoted, the ``rx``/``tx`` keys are bare identifiers and
counters are hexadecimal literals. The body is tokenized and re-emitted as
JSON with every scalar quoted, so interface names containing ``rx`` or ``tx``
survive intact, then decoded with :mod:`json`.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Iterator, Mapping

from .. import constants
from ..core import ParseError
from ..exposition import MetricSeries
from .base import BaseCollector
from .network import byte_counter_series, parse_u64

_ASSIGNMENT_RE = re.compile(r"^\s*[A-Za-z_$][\w$]*\s*=\s*")

_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
    |(?P<punct>[{}:,\[\]])
    |'(?P<single>(?:[^'\\]|\\.)*)'
    |"(?P<double>(?:[^"\\]|\\.)*)"
    |(?P<hex>0[xX][0-9a-fA-F]+)
    |(?P<number>[0-9]+)
    |(?P<ident>[A-Za-z_$][\w$]*)
    """,
    re.X,
)


@dataclass(frozen=True, slots=True)
class BandwidthCounters:
    rx: int
    tx: int


BandwidthStats = dict[str, BandwidthCounters]


def _tokens(text: str) -> Iterator[str]:
    """Yield JSON fragments for each token of the JavaScript literal."""

    position = 0
    while position < len(text):
        match = _TOKEN_RE.match(text, position)
        if match is None:
            raise ParseError(
                "bandwidth",
                f"unexpected character {text[position]!r} at offset {position}",
                body=text,
            )
        position = match.end()
        kind = match.lastgroup
        if kind == "space":
            continue
        if kind == "punct":
            yield match.group("punct")
        elif kind in ("single", "double"):
            raw = match.group(kind)
            yield json.dumps(re.sub(r"\\(.)", r"\1", raw))
        else:
            yield json.dumps(match.group(kind))


def normalise_netdev(body: str) -> str:
    """Convert the ``netdev=...;`` statement into a JSON document."""

    text = _ASSIGNMENT_RE.sub("", body.strip(), count=1).rstrip().rstrip(";")
    return "".join(_tokens(text))


def _decode_counter(raw: object, *, interface: str, key: str) -> int:
    if not isinstance(raw, str):
        raise ParseError("bandwidth", f"{interface}.{key} is not a counter literal")
    if raw[:2].lower() == "0x":
        return parse_u64(raw[2:], family="bandwidth", base=16)
    return parse_u64(raw, family="bandwidth")


def parse_bandwidth(body: str) -> BandwidthStats:
    """Parse the router's netdev counters, keyed by interface name."""

    normalised = normalise_netdev(body)
    try:
        document = json.loads(normalised)
    except json.JSONDecodeError as exc:
        raise ParseError(
            "bandwidth", f"netdev payload is not an object literal: {exc}", body=body
        ) from None

    if not isinstance(document, dict):
        raise ParseError("bandwidth", "netdev payload is not an object", body=body)

    stats: BandwidthStats = {}
    for interface, counters in document.items():
        if not isinstance(counters, dict) or not {"rx", "tx"} <= counters.keys():
            raise ParseError(
                "bandwidth", f"interface {interface!r} lacks rx/tx counters", body=body
            )
        stats[interface] = BandwidthCounters(
            rx=_decode_counter(counters["rx"], interface=interface, key="rx"),
            tx=_decode_counter(counters["tx"], interface=interface, key="tx"),
        )
    return dict(sorted(stats.items()))


def project_bandwidth(stats: Mapping[str, BandwidthCounters]) -> list[MetricSeries]:
    return [
        byte_counter_series(
            "node_network_receive_bytes_total",
            "Network device statistic receive_bytes",
            stats,
            lambda counters: counters.rx,
        ),
        byte_counter_series(
            "node_network_transmit_bytes_total",
            "Network device statistic transmit_bytes",
            stats,
            lambda counters: counters.tx,
        ),
    ]


class BandwidthCollector(BaseCollector):
    """Interface byte counters from the router's bandwidth monitor."""

    name = "bandwidth"

    async def fetch(self) -> str:
        return await self._transport.request(
            constants.UPDATE_ENDPOINT, {"exec": "netdev"}
        )

    def parse(self, body: str) -> BandwidthStats:
        return parse_bandwidth(body)

    def project(self, record: Mapping[str, BandwidthCounters]) -> list[MetricSeries]:
        return project_bandwidth(record)
