"""Logging configuration helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

PACKAGE_LOGGER = "tomato_exporter"
# Per-scrape and per-router-request chatter from aiohttp.
NETWORK_LOGGERS = ("aiohttp.access", "aiohttp.client", "aiohttp.server")


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_network: bool = False
) -> None:
    """Route log records to the console and, optionally, a file.

    ``level`` applies to the exporter's own loggers. aiohttp's loggers stay at
    WARNING unless ``log_network`` is set, in which case they follow ``level``
    so every scrape and router request shows up. An unknown level name falls
    back to INFO with a warning.
    """

    resolved = logging.getLevelName(level.strip().upper())
    unknown_level = not isinstance(resolved, int)
    if unknown_level:
        resolved = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(level=resolved, format=LOG_FORMAT, handlers=handlers, force=True)
    logging.captureWarnings(True)

    logging.getLogger(PACKAGE_LOGGER).setLevel(resolved)
    network_level = resolved if log_network else max(resolved, logging.WARNING)
    for name in NETWORK_LOGGERS:
        logging.getLogger(name).setLevel(network_level)

    if unknown_level:
        logging.getLogger(__name__).warning(
            "Unknown log level %r; using INFO", level
        )
