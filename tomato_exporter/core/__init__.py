"""Core primitives for tomato-exporter."""

from .errors import CollectorFailure, ParseError
from .protocols import Collector, DeviceTransport

__all__ = [
    "Collector",
    "CollectorFailure",
    "DeviceTransport",
    "ParseError",
]
