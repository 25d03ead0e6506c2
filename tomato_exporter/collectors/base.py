"""Base classes for metric-family collectors.

Each collector is responsible for one metric family. Collectors are isolated
from each other: one collector's failure must not affect the others, and the
scrape coordinator is the only place their errors are caught.

A collector is a thin binding of three pieces that live side by side in each
family module:

- a pure ``parse_*`` function turning the router's text into a frozen record,
- a pure ``project_*`` function turning that record into metric series,
- the collector class, which fetches the text through the transport.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from ..core import DeviceTransport
from ..exposition import MetricSeries


class BaseCollector(ABC):
    """Base class for collectors with the fetch, parse, project pipeline."""

    name: ClassVar[str]

    def __init__(self, transport: DeviceTransport) -> None:
        self._transport = transport

    async def collect(self) -> list[MetricSeries]:
        body = await self.fetch()
        record = self.parse(body)
        return self.project(record)

    @abstractmethod
    async def fetch(self) -> str:
        """Retrieve the raw response text for this family."""
        ...

    @abstractmethod
    def parse(self, body: str) -> Any:
        ...

    @abstractmethod
    def project(self, record: Any) -> list[MetricSeries]:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


class ShellCommandCollector(BaseCollector):
    """Collector whose data comes from a shell command run on the router."""

    command: ClassVar[str]

    async def fetch(self) -> str:
        return await self._transport.run_command(self.command)
