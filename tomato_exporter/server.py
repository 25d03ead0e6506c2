"""HTTP server exposing the exposition document and a health endpoint."""

from __future__ import annotations

import contextlib
import logging
from typing import Optional

from aiohttp import web

from .exposition import CONTENT_TYPE
from .health import HealthReporter
from .scrape import ScrapeCoordinator

LOGGER = logging.getLogger(__name__)


class ExporterServer:
    """Minimal aiohttp server serving metrics on ``path`` and `/healthz`."""

    def __init__(
        self,
        coordinator: ScrapeCoordinator,
        reporter: HealthReporter,
        host: str,
        port: int,
        *,
        path: str = "/metrics",
    ) -> None:
        self._coordinator = coordinator
        self._reporter = reporter
        self._host = host
        self._port = port
        self._path = path
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get(self._path, self._handle_metrics)
        app.router.add_get("/healthz", self._handle_health)
        return app

    async def start(self) -> None:
        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()
        LOGGER.info(
            "Serving metrics on http://%s:%s%s", self._host, self._port, self._path
        )

    async def stop(self) -> None:
        with contextlib.suppress(Exception):
            if self._site is not None:
                await self._site.stop()
        if self._runner is not None:
            await self._runner.cleanup()
        self._site = None
        self._runner = None

    async def _handle_metrics(self, request: web.Request) -> web.Response:
        document = await self._coordinator.render()
        return web.Response(
            body=document.encode("utf-8"),
            headers={"Content-Type": CONTENT_TYPE},
        )

    async def _handle_health(self, request: web.Request) -> web.Response:
        snapshot = await self._reporter.snapshot()
        status = 503 if snapshot["status"] == "degraded" else 200
        return web.json_response(snapshot, status=status)
