"""Concurrent scrape coordination across all enabled collectors.

Every call to :meth:`ScrapeCoordinator.collect` is an independent cycle: all
collectors are dispatched together, the coordinator waits for every one of
them, then merges the successful series and appends two meta-series
describing each collector's duration and success. A failing collector only
loses its own series; the coordinator itself never fails.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .adapters.tomato import TransportError
from .core import Collector, CollectorFailure, ParseError
from .exposition import MetricSeries, MetricType, Sample, render_document
from .health import HealthReporter

LOGGER = logging.getLogger(__name__)

DURATION_METRIC = "node_scrape_collector_duration_seconds"
SUCCESS_METRIC = "node_scrape_collector_success"


@dataclass(frozen=True, slots=True)
class ScrapeOutcome:
    name: str
    duration: float
    series: tuple[MetricSeries, ...] = ()
    error: Optional[CollectorFailure] = None

    @property
    def success(self) -> bool:
        return self.error is None


class ScrapeCoordinator:
    """Runs collectors concurrently and merges their series.

    Args:
        collectors: Collectors in registration order; meta-series follow it.
        timeout: Optional per-collector bound in seconds. ``None`` waits for
            each collector indefinitely.
        reporter: Optional health reporter updated after every cycle.
        clock: Monotonic clock used to time collectors.
    """

    def __init__(
        self,
        collectors: Sequence[Collector],
        *,
        timeout: Optional[float] = None,
        reporter: Optional[HealthReporter] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        names = [collector.name for collector in collectors]
        if len(names) != len(set(names)):
            raise ValueError(f"Collector names must be unique: {names}")

        self._collectors = tuple(collectors)
        self._timeout = timeout
        self._reporter = reporter
        self._clock = clock

    @property
    def collector_names(self) -> list[str]:
        return [collector.name for collector in self._collectors]

    async def render(self) -> str:
        """Produce the current exposition document."""

        return render_document(await self.collect())

    async def collect(self) -> list[MetricSeries]:
        outcomes = await self.scrape()
        if self._reporter is not None:
            for outcome in outcomes:
                detail = None if outcome.error is None else outcome.error.reason
                await self._reporter.update(outcome.name, outcome.success, detail)
        return merge_outcomes(outcomes)

    async def scrape(self) -> list[ScrapeOutcome]:
        """Run every collector once and return outcomes in registration order."""

        return list(
            await asyncio.gather(
                *(self._run_collector(collector) for collector in self._collectors)
            )
        )

    async def _run_collector(self, collector: Collector) -> ScrapeOutcome:
        name = collector.name
        started = self._clock()
        error: Optional[CollectorFailure] = None
        series: list[MetricSeries] = []

        deadline = asyncio.timeout(self._timeout)
        try:
            async with deadline:
                series = await collector.collect()
        except asyncio.CancelledError:
            raise
        except (TransportError, ParseError) as exc:
            error = _failure(name, str(exc), exc)
            LOGGER.warning("Collector '%s' failed: %s", name, exc)
        except asyncio.TimeoutError as exc:
            # Only the coordinator's own deadline counts as a collector timeout.
            if deadline.expired():
                reason = f"timed out after {self._timeout}s"
            else:
                reason = f"{type(exc).__name__}: {exc}"
            error = _failure(name, reason, exc)
            LOGGER.warning("Collector '%s' failed: %s", name, reason)
        except Exception as exc:
            error = _failure(name, f"{type(exc).__name__}: {exc}", exc)
            LOGGER.exception("Collector '%s' raised unexpectedly", name)

        duration = self._clock() - started
        LOGGER.debug(
            "Collector '%s' finished in %.3fs (success=%s)",
            name,
            duration,
            error is None,
        )
        return ScrapeOutcome(
            name=name,
            duration=duration,
            series=tuple(series) if error is None else (),
            error=error,
        )


def _failure(name: str, reason: str, cause: BaseException) -> CollectorFailure:
    failure = CollectorFailure(name, reason)
    failure.__cause__ = cause
    return failure


def merge_outcomes(outcomes: Sequence[ScrapeOutcome]) -> list[MetricSeries]:
    """Merge collector series and append the scrape meta-series.

    Series names must be unique within a document; when two collectors publish
    the same name the earlier registered one wins.
    """

    merged: list[MetricSeries] = []
    owners: dict[str, str] = {}
    for outcome in outcomes:
        for series in outcome.series:
            owner = owners.get(series.name)
            if owner is not None:
                LOGGER.warning(
                    "Dropping series %s from collector '%s'; already published by '%s'",
                    series.name,
                    outcome.name,
                    owner,
                )
                continue
            owners[series.name] = outcome.name
            merged.append(series)

    merged.append(
        MetricSeries(
            DURATION_METRIC,
            "tomato_exporter: Duration of a collector scrape.",
            MetricType.GAUGE,
            tuple(
                Sample((("collector", outcome.name),), outcome.duration)
                for outcome in outcomes
            ),
        )
    )
    merged.append(
        MetricSeries(
            SUCCESS_METRIC,
            "tomato_exporter: Whether a collector succeeded.",
            MetricType.GAUGE,
            tuple(
                Sample((("collector", outcome.name),), 1.0 if outcome.success else 0.0)
                for outcome in outcomes
            ),
        )
    )
    return merged
