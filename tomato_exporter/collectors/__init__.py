"""Metric-family collectors for the Tomato router.

Each module pairs a pure parser and projector with a collector class that
fetches the raw text through a :class:`~tomato_exporter.core.DeviceTransport`.
"""

from __future__ import annotations

from typing import Iterable

from ..config import ConfigError
from ..core import DeviceTransport
from .bandwidth import BandwidthCollector
from .base import BaseCollector, ShellCommandCollector
from .cpu import CpuCollector
from .load import LoadCollector
from .memory import MemoryCollector
from .network import NetworkCollector
from .uname import UnameCollector
from .uptime import TimeCollector

COLLECTOR_TYPES: dict[str, type[BaseCollector]] = {
    collector.name: collector
    for collector in (
        BandwidthCollector,
        CpuCollector,
        LoadCollector,
        MemoryCollector,
        NetworkCollector,
        TimeCollector,
        UnameCollector,
    )
}

# Pairs of collectors that publish the same series names.
CONFLICTING_COLLECTORS = (frozenset({"bandwidth", "network"}),)


def build_collectors(
    names: Iterable[str], transport: DeviceTransport
) -> list[BaseCollector]:
    """Instantiate collectors in the given order, sharing one transport."""

    ordered = list(dict.fromkeys(name.strip().lower() for name in names))

    unknown = [name for name in ordered if name not in COLLECTOR_TYPES]
    if unknown:
        raise ConfigError(
            f"Unknown collector(s): {', '.join(unknown)} "
            f"(available: {', '.join(sorted(COLLECTOR_TYPES))})"
        )

    for conflict in CONFLICTING_COLLECTORS:
        if conflict <= set(ordered):
            raise ConfigError(
                f"Collectors {' and '.join(sorted(conflict))} cannot be enabled "
                "together; both publish the same series"
            )

    return [COLLECTOR_TYPES[name](transport) for name in ordered]


__all__ = [
    "BandwidthCollector",
    "BaseCollector",
    "COLLECTOR_TYPES",
    "CpuCollector",
    "LoadCollector",
    "MemoryCollector",
    "NetworkCollector",
    "ShellCommandCollector",
    "TimeCollector",
    "UnameCollector",
    "build_collectors",
]
