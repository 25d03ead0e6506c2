"""Main application entry-point for tomato-exporter."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .adapters import TomatoClient
from .collectors import build_collectors
from .config import ExporterConfig, load_config, validate_config
from .health import HealthReporter
from .logging import configure_logging
from .scrape import ScrapeCoordinator
from .server import ExporterServer
from .version import __version__

LOGGER = logging.getLogger(__name__)


class TomatoExporterApp:
    """Coordinates application startup and shutdown.

    Wires the router client, the enabled collectors, the scrape coordinator
    and the HTTP server together. The client can be injected for testing.
    """

    def __init__(
        self,
        config: Optional[ExporterConfig] = None,
        *,
        client: Optional[TomatoClient] = None,
    ) -> None:
        self._config = config or load_config()
        validate_config(self._config)

        self._client = client or TomatoClient(self._config.device)
        self._health = HealthReporter()
        self._coordinator = ScrapeCoordinator(
            build_collectors(self._config.collectors.enabled, self._client),
            timeout=self._config.collectors.timeout_seconds,
            reporter=self._health,
        )
        self._server: Optional[ExporterServer] = None
        self._shutdown_event: Optional[asyncio.Event] = None

    @property
    def coordinator(self) -> ScrapeCoordinator:
        return self._coordinator

    async def run(self) -> None:
        """Serve metrics until cancelled or :meth:`request_shutdown` is called."""

        self._shutdown_event = asyncio.Event()
        LOGGER.info(
            "tomato-exporter %s starting for router %s (collectors: %s)",
            __version__,
            self._client.base_url,
            ", ".join(self._coordinator.collector_names),
        )

        server = ExporterServer(
            self._coordinator,
            self._health,
            self._config.server.host,
            self._config.server.port,
            path=self._config.server.path,
        )
        self._server = server
        try:
            await server.start()
            await self._shutdown_event.wait()
        except asyncio.CancelledError:
            LOGGER.info("tomato-exporter received shutdown signal")
            raise
        finally:
            await server.stop()
            await self._client.aclose()
            self._server = None

    def request_shutdown(self) -> None:
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    @classmethod
    def start(cls, config: Optional[ExporterConfig] = None) -> None:
        instance = cls(config=config)
        configure_logging(
            instance._config.logging.level,
            log_path=instance._config.logging.path,
            log_network=instance._config.logging.log_network,
        )
        try:
            asyncio.run(instance.run())
        except KeyboardInterrupt:
            LOGGER.info("tomato-exporter received shutdown signal")
