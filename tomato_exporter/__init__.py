"""Prometheus exporter for routers running the Tomato firmware."""

from .version import __version__

__all__ = ["__version__"]
