"""Protocol definitions for device transports and collectors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Optional, Protocol

if TYPE_CHECKING:
    from ..exposition import MetricSeries


class DeviceTransport(Protocol):
    """Minimal contract for components that talk to the router."""

    async def request(
        self, endpoint: str, fields: Optional[Mapping[str, str]] = None
    ) -> str:
        """POST ``fields`` to ``endpoint`` and return the response body.

        Raises:
            TransportError: On network failure, rejected credentials or a
                non-2xx status.
        """
        ...

    async def run_command(self, command: str) -> str:
        """Execute a shell command through the device's shell CGI."""
        ...


class Collector(Protocol):
    """One metric family scraped from the device."""

    @property
    def name(self) -> str:
        """Stable family name used for the collector label."""
        ...

    async def collect(self) -> list["MetricSeries"]:
        """Fetch, parse and project the family's series.

        Raises:
            TransportError: If the device could not be reached.
            ParseError: If the device reply was malformed.
        """
        ...
