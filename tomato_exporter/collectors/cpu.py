"""CPU time collector backed by ``/proc/stat``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional

from .. import constants
from ..core import ParseError
from ..exposition import MetricSeries, MetricType, Sample
from .base import ShellCommandCollector

_CPU_LINE_RE = re.compile(
    r"^cpu(?P<cpu>[0-9]+)[ \t]+(?P<jiffies>[0-9 \t]+?)[ \t\r]*$", re.M
)

REQUIRED_MODES = ("user", "nice", "system", "idle")
# Older kernels report fewer trailing columns.
OPTIONAL_MODES = ("iowait", "irq", "softirq", "steal")


@dataclass(frozen=True, slots=True)
class CpuStats:
    """Seconds one CPU spent in each mode; ``None`` means not reported."""

    user: float
    nice: float
    system: float
    idle: float
    iowait: Optional[float] = None
    irq: Optional[float] = None
    softirq: Optional[float] = None
    steal: Optional[float] = None


def _to_seconds(jiffies: int) -> float:
    return jiffies / constants.JIFFIES_PER_SECOND


def parse_cpu(body: str) -> dict[int, CpuStats]:
    """Parse every ``cpuN`` line of ``/proc/stat``, keyed by CPU index."""

    cpus: dict[int, CpuStats] = {}
    for match in _CPU_LINE_RE.finditer(body):
        cpu_id = int(match.group("cpu"))
        jiffies = [int(value) for value in match.group("jiffies").split()]
        if len(jiffies) < len(REQUIRED_MODES):
            raise ParseError(
                "cpu",
                f"cpu{cpu_id} reports {len(jiffies)} columns, expected at least "
                f"{len(REQUIRED_MODES)}",
                body=body,
            )

        seconds = [_to_seconds(value) for value in jiffies]
        optional = {
            mode: seconds[index]
            for index, mode in enumerate(OPTIONAL_MODES, start=len(REQUIRED_MODES))
            if index < len(seconds)
        }
        cpus[cpu_id] = CpuStats(*seconds[: len(REQUIRED_MODES)], **optional)

    if not cpus:
        raise ParseError("cpu", "no per-cpu lines in /proc/stat output", body=body)
    return dict(sorted(cpus.items()))


def project_cpu(cpus: Mapping[int, CpuStats]) -> list[MetricSeries]:
    samples: list[Sample] = []
    for cpu_id in sorted(cpus):
        stats = cpus[cpu_id]
        for mode in REQUIRED_MODES + OPTIONAL_MODES:
            value = getattr(stats, mode)
            if value is None:
                continue
            samples.append(Sample((("cpu", str(cpu_id)), ("mode", mode)), value))

    return [
        MetricSeries(
            "node_cpu_seconds_total",
            "Seconds the cpus spent in each mode",
            MetricType.COUNTER,
            tuple(samples),
        )
    ]


class CpuCollector(ShellCommandCollector):
    name = "cpu"
    command = "cat /proc/stat"

    def parse(self, body: str) -> dict[int, CpuStats]:
        return parse_cpu(body)

    def project(self, record: Mapping[int, CpuStats]) -> list[MetricSeries]:
        return project_cpu(record)
