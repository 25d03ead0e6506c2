"""Clock and boot time collector backed by ``date`` and ``/proc/uptime``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..core import ParseError
from ..exposition import MetricSeries, gauge
from .base import ShellCommandCollector

_TIME_RE = re.compile(
    r"^(?P<timestamp>[0-9]+)[ \t\r]*\n[ \t]*"
    r"(?P<up_seconds>[0-9]+)(?:\.[0-9]+)? (?P<idle_seconds>[0-9]+)(?:\.[0-9]+)?"
)


@dataclass(frozen=True, slots=True)
class UptimeStats:
    current_unix_time: int
    boot_unix_time: int


def parse_time(body: str) -> UptimeStats:
    """Derive boot time from the router's clock and uptime.

    Fractional uptime seconds are dropped before subtracting.
    """

    match = _TIME_RE.search(body.strip())
    if match is None:
        raise ParseError("time", "unrecognised date/uptime output", body=body)

    current = int(match.group("timestamp"))
    boot = current - int(match.group("up_seconds"))
    if boot < 0:
        raise ParseError("time", "uptime exceeds the router's clock", body=body)
    return UptimeStats(current_unix_time=current, boot_unix_time=boot)


def project_time(stats: UptimeStats) -> list[MetricSeries]:
    return [
        gauge(
            "node_time_seconds",
            "System time in seconds since epoch (1970)",
            stats.current_unix_time,
        ),
        gauge(
            "node_boot_time_seconds",
            "Node boot time, in unixtime",
            stats.boot_unix_time,
        ),
    ]


class TimeCollector(ShellCommandCollector):
    name = "time"
    command = "date +%s && cat /proc/uptime"

    def parse(self, body: str) -> UptimeStats:
        return parse_time(body)

    def project(self, record: UptimeStats) -> list[MetricSeries]:
        return project_time(record)
