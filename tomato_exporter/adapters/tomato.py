"""Tomato adapter issuing authenticated CGI requests against the router."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional

import aiohttp

from .. import constants
from ..config import DeviceConfig

LOGGER = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """Raised when the router cannot be reached or rejects a request."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class TomatoClient:
    """Non-blocking client for the Tomato web interface.

    Every request carries the admin ``_http_id`` token as its first form field
    and HTTP Basic credentials. The client holds no per-request state, so a
    single instance is shared by all collectors.
    """

    def __init__(
        self,
        config: DeviceConfig,
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.config = config

        self._base_url = _build_base_url(config.address)
        self._auth = aiohttp.BasicAuth(config.username, config.password or "")
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def request(
        self, endpoint: str, fields: Optional[Mapping[str, str]] = None
    ) -> str:
        """POST a form-encoded request to ``endpoint`` and return the body text.

        Args:
            endpoint: Path relative to the router root, e.g. ``shell.cgi``.
            fields: Form fields sent after the authentication token.

        Raises:
            TransportError: On connection failure, timeout, rejected
                credentials or a non-2xx status.
        """

        session = await self._ensure_session()
        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        form: list[tuple[str, str]] = [
            (constants.AUTH_TOKEN_FIELD, self.config.http_id)
        ]
        form.extend((fields or {}).items())

        try:
            async with asyncio.timeout(self.config.request_timeout_seconds):
                async with session.post(url, data=form, auth=self._auth) as response:
                    if response.status in (401, 403):
                        raise TransportError(
                            f"Router rejected credentials for {endpoint} "
                            f"(status {response.status})",
                            status=response.status,
                        )
                    if not 200 <= response.status < 300:
                        detail = await response.text()
                        raise TransportError(
                            f"Router request {endpoint} failed with status "
                            f"{response.status}: {detail.strip()[:200]}",
                            status=response.status,
                        )
                    # Router output is not guaranteed to be UTF-8 (hostnames, SSIDs).
                    return await response.text(errors="replace")
        except asyncio.TimeoutError as exc:
            LOGGER.warning(
                "Router request timed out after %ss (url=%s)",
                self.config.request_timeout_seconds,
                url,
            )
            raise TransportError(f"Router request {endpoint} timed out") from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"Router request {endpoint} failed: {exc}") from exc

    async def run_command(self, command: str) -> str:
        """Run a shell command through ``shell.cgi`` and return its output."""

        LOGGER.debug("Running router command: %s", command)
        return await self.request(
            constants.SHELL_ENDPOINT,
            {
                "action": "execute",
                "nojs": "1",
                "working_dir": constants.SHELL_WORKING_DIR,
                "command": command,
            },
        )

    async def aclose(self) -> None:
        """Close the underlying session if this client created it."""

        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=None)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session


def _build_base_url(address: str) -> str:
    address = address.strip().rstrip("/")
    if "://" not in address:
        address = f"http://{address}"
    return address
