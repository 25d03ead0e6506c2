"""Prometheus text exposition model and renderer.

Series are rendered exactly in the order they are given: label order inside a
sample and sample order inside a series are the projector's responsibility.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


class MetricType(str, Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"
    SUMMARY = "summary"
    UNTYPED = "untyped"


Labels = tuple[tuple[str, str], ...]


@dataclass(frozen=True, slots=True)
class Sample:
    labels: Labels = ()
    value: float = 0.0
    timestamp: Optional[int] = None

    def __post_init__(self) -> None:
        names = [name for name, _ in self.labels]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate label names in sample: {names}")


@dataclass(frozen=True, slots=True)
class MetricSeries:
    name: str
    help: str
    type: MetricType
    samples: tuple[Sample, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        seen: set[Labels] = set()
        for sample in self.samples:
            if sample.labels in seen:
                raise ValueError(
                    f"Duplicate sample {dict(sample.labels)!r} in series {self.name}"
                )
            seen.add(sample.labels)


def gauge(name: str, help: str, value: float) -> MetricSeries:
    """Build a single unlabelled gauge series."""

    return MetricSeries(name, help, MetricType.GAUGE, (Sample((), float(value)),))


def format_value(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def render_sample(name: str, sample: Sample) -> str:
    labels = ",".join(
        f'{label}="{_escape_label_value(value)}"' for label, value in sample.labels
    )
    line = f"{name}{{{labels}}} {format_value(sample.value)}"
    if sample.timestamp is not None:
        line = f"{line} {sample.timestamp}"
    return line


def render_series(series: MetricSeries) -> str:
    """Render one series: HELP and TYPE header followed by its samples."""

    header = (
        f"# HELP {series.name} {_escape_help(series.help)}\n"
        f"# TYPE {series.name} {series.type.value}\n"
    )
    return header + "\n".join(
        render_sample(series.name, sample) for sample in series.samples
    )


def render_document(series: Iterable[MetricSeries]) -> str:
    """Render a full exposition document without a trailing newline."""

    return "\n".join(render_series(item) for item in series)
