"""Load average collector backed by ``/proc/loadavg``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..core import ParseError
from ..exposition import MetricSeries, gauge
from .base import ShellCommandCollector

_LOADAVG_RE = re.compile(
    r"(?P<load1>[0-9]+\.[0-9]+) (?P<load5>[0-9]+\.[0-9]+) "
    r"(?P<load15>[0-9]+\.[0-9]+) (?P<running>[0-9]+)/(?P<total>[0-9]+) "
    r"(?P<last_pid>[0-9]+)"
)


@dataclass(frozen=True, slots=True)
class LoadStats:
    load1: float
    load5: float
    load15: float
    total_processes: int


def parse_load(body: str) -> LoadStats:
    match = _LOADAVG_RE.search(body.strip())
    if match is None:
        raise ParseError("load", "unrecognised /proc/loadavg output", body=body)

    return LoadStats(
        load1=float(match.group("load1")),
        load5=float(match.group("load5")),
        load15=float(match.group("load15")),
        total_processes=int(match.group("total")),
    )


def project_load(stats: LoadStats) -> list[MetricSeries]:
    return [
        gauge("node_load1", "1m load average", stats.load1),
        gauge("node_load5", "5m load average", stats.load5),
        gauge("node_load15", "15m load average", stats.load15),
        gauge("node_processes_pids", "Number of PIDs", stats.total_processes),
    ]


class LoadCollector(ShellCommandCollector):
    name = "load"
    command = "cat /proc/loadavg"

    def parse(self, body: str) -> LoadStats:
        return parse_load(body)

    def project(self, record: LoadStats) -> list[MetricSeries]:
        return project_load(record)
