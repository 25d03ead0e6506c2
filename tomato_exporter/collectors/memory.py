"""Memory collector backed by ``/proc/meminfo``."""

from __future__ import annotations

import logging
import re
from typing import Mapping

from ..core import ParseError
from ..exposition import MetricSeries, gauge
from .base import ShellCommandCollector

LOGGER = logging.getLogger(__name__)

_MEMINFO_LINE_RE = re.compile(
    r"^[ \t]*(?P<name>[^:\n]+?):[ \t]+(?P<kb>[0-9]+) kB[ \t\r]*$", re.M
)
_INVALID_NAME_CHARS_RE = re.compile(r"[^a-zA-Z0-9_]")

MemoryStats = dict[str, int]


def parse_memory(body: str) -> MemoryStats:
    """Return every ``<Name>: <N> kB`` field as bytes, sorted by name.

    Fields are not known in advance; whatever the kernel reports is kept.
    """

    fields = {
        match.group("name"): int(match.group("kb")) * 1024
        for match in _MEMINFO_LINE_RE.finditer(body)
    }
    if not fields:
        raise ParseError("memory", "no kB fields in /proc/meminfo output", body=body)
    return dict(sorted(fields.items()))


def metric_field_name(field: str) -> str:
    """Turn a meminfo field into a metric-safe name, e.g. ``Active(anon)``."""

    return _INVALID_NAME_CHARS_RE.sub("_", field.replace(")", ""))


def project_memory(stats: Mapping[str, int]) -> list[MetricSeries]:
    """Emit one gauge per field; the first field to claim a sanitised name wins."""

    series = []
    claimed: dict[str, str] = {}
    for field in sorted(stats):
        name = metric_field_name(field)
        if name in claimed:
            LOGGER.warning(
                "Skipping meminfo field %s; %s already maps to node_memory_%s_bytes",
                field,
                claimed[name],
                name,
            )
            continue
        claimed[name] = field
        series.append(
            gauge(
                f"node_memory_{name}_bytes",
                f"Memory information field {name}_bytes",
                stats[field],
            )
        )
    return series


class MemoryCollector(ShellCommandCollector):
    name = "memory"
    command = "cat /proc/meminfo"

    def parse(self, body: str) -> MemoryStats:
        return parse_memory(body)

    def project(self, record: Mapping[str, int]) -> list[MetricSeries]:
        return project_memory(record)
