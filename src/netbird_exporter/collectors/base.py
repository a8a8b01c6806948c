# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Shared machinery for the per-resource collectors.

A domain collector is described by three things:

* an instrument schema (``GAUGES``): private, unregistered gauges that
  persist between scrapes and are cleared at the start of each one
* one or more ``Source`` entries: the API call, the fold that turns its
  payload into gauge values, and the gauges that fold populates
* a ``name`` used for metric names, logs and error attribution

``scrape()`` runs one reset -> fetch -> fold -> snapshot cycle while holding
the collector's lock, so concurrent scrapes of the same collector are
serialised and never observe each other's half-written state.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Tuple

import aiohttp
from prometheus_client import Counter, Gauge, Histogram
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from ..constants import NAMESPACE, UNKNOWN_LABEL
from ..exceptions import NetBirdAPIError

logger = logging.getLogger(__name__)


def label(value: Any) -> str:
    """Label value for a categorical field; empty values become ``"unknown"``."""
    if value is None:
        return UNKNOWN_LABEL
    text = str(value)
    return text if text else UNKNOWN_LABEL


def flag(value: bool) -> str:
    return "true" if value else "false"


@dataclass(frozen=True)
class GaugeSpec:
    """Static description of one gauge owned by a collector."""

    attr: str
    name: str
    documentation: str
    labelnames: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Source:
    """One upstream call and the fold that consumes its payload."""

    error_type: str
    fetch: Callable[[aiohttp.ClientSession], Awaitable[Any]]
    fold: Callable[[Any], None]
    gauges: Tuple[str, ...]


@dataclass
class CollectResult:
    """Outcome of a single collector scrape."""

    name: str
    metrics: List[Metric] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging"""
        return {
            "collector": self.name,
            "metric_families": len(self.metrics),
            "success": self.success,
            "errors": list(self.errors),
            "duration": round(self.duration, 4),
        }


class DomainCollector(Collector):
    """Base class for the peers, groups, users, DNS and networks collectors.

    Subclasses set ``name`` and ``GAUGES`` and implement ``sources()``.
    """

    name: str = ""
    GAUGES: Tuple[GaugeSpec, ...] = ()

    def __init__(self, client):
        """Initialize the collector.

        Args:
            client: ``NetBirdClient`` (or anything with the same coroutine methods)
        """
        self.client = client
        self._lock = threading.Lock()
        self._gauges: Dict[str, Gauge] = {}

        for spec in self.GAUGES:
            gauge = Gauge(spec.name, spec.documentation, spec.labelnames, registry=None)
            self._gauges[spec.attr] = gauge
            setattr(self, spec.attr, gauge)

        # Cumulative across scrapes, never reset
        self.scrape_errors = Counter(
            f"{NAMESPACE}_{self.name}_scrape_errors",
            f"Total number of errors encountered while scraping {self.name}",
            ["error_type"],
            registry=None,
        )
        self.scrape_duration = Histogram(
            f"{NAMESPACE}_{self.name}_scrape_duration_seconds",
            f"Time spent scraping {self.name} from the NetBird API",
            registry=None,
        )

    def sources(self) -> List[Source]:
        raise NotImplementedError

    def describe(self) -> Iterable[Metric]:
        metrics: List[Metric] = []
        for gauge in self._gauges.values():
            metrics.extend(gauge.describe())
        metrics.extend(self.scrape_errors.describe())
        metrics.extend(self.scrape_duration.describe())
        return metrics

    def collect(self) -> Iterable[Metric]:
        return self.scrape().metrics

    def reset(self) -> None:
        """Drop every gauge value left over from the previous scrape."""
        for spec in self.GAUGES:
            gauge = self._gauges[spec.attr]
            if spec.labelnames:
                gauge.clear()
            else:
                gauge.set(0)

    def scrape(self) -> CollectResult:
        """Run one full collection cycle and snapshot the resulting metrics.

        Fetch failures are logged and counted here. Anything else raised while
        fetching or folding propagates to the caller.
        """
        with self._lock:
            start = time.perf_counter()
            result = CollectResult(self.name)
            self.reset()

            sources = self.sources()
            outcomes = asyncio.run(self._fetch_all(sources))

            populated = set()
            for source, outcome in zip(sources, outcomes):
                if isinstance(outcome, NetBirdAPIError):
                    logger.error(f"Failed to {source.error_type.replace('_', ' ')}: {outcome}")
                    self.scrape_errors.labels(error_type=source.error_type).inc()
                    result.errors.append(source.error_type)
                    continue
                if isinstance(outcome, BaseException):
                    raise outcome
                source.fold(outcome)
                populated.update(source.gauges)

            result.duration = time.perf_counter() - start
            self.scrape_duration.observe(result.duration)

            # Gauges of a failed source stay out of the exposition entirely
            for spec in self.GAUGES:
                if spec.attr in populated:
                    result.metrics.extend(self._gauges[spec.attr].collect())
            result.metrics.extend(self.scrape_errors.collect())
            result.metrics.extend(self.scrape_duration.collect())
            return result

    async def _fetch_all(self, sources: List[Source]) -> List[Any]:
        async with self.client.session() as session:
            return await asyncio.gather(
                *(source.fetch(session) for source in sources),
                return_exceptions=True,
            )
