"""Adapter modules for external integrations."""

from .tomato import TomatoClient, TransportError

__all__ = [
    "TomatoClient",
    "TransportError",
]
