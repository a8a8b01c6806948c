# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Aggregate Prometheus collector for every NetBird resource type.

Registered once with a ``CollectorRegistry``; each scrape fans out to the
domain collectors in parallel, isolates their failures, and adds the
exporter-wide duration histogram and error counter.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

from prometheus_client import Counter, Histogram
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from .client import NetBirdClient
from .collectors import (
    CollectResult,
    DNSCollector,
    DomainCollector,
    GroupsCollector,
    NetworksCollector,
    PeersCollector,
    UsersCollector,
)
from .config import Settings
from .constants import NAMESPACE

logger = logging.getLogger(__name__)


class NetBirdExporter(Collector):
    """Prometheus collector combining the peers, groups, users, DNS and networks collectors.

    Example:
        >>> exporter = NetBirdExporter(NetBirdClient(url, token))
        >>> registry.register(exporter)
    """

    def __init__(self, client: NetBirdClient, collectors: Optional[Sequence[DomainCollector]] = None):
        """Initialize the exporter.

        Args:
            client: Shared API client handed to the default collectors
            collectors: Override the default collectors; they run in the given order
        """
        self.client = client
        if collectors is None:
            collectors = (
                PeersCollector(client),
                GroupsCollector(client),
                UsersCollector(client),
                DNSCollector(client),
                NetworksCollector(client),
            )
        self.collectors: List[DomainCollector] = list(collectors)

        self.scrape_duration = Histogram(
            f"{NAMESPACE}_exporter_scrape_duration_seconds",
            "Time spent scraping NetBird API",
            registry=None,
        )
        self.scrape_errors = Counter(
            f"{NAMESPACE}_exporter_scrape_errors",
            "Total number of scrape errors",
            ["error_type"],
            registry=None,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "NetBirdExporter":
        client = NetBirdClient(
            settings.netbird_api_url,
            settings.require_token(),
            timeout=settings.netbird_api_timeout,
        )
        return cls(client)

    def describe(self) -> Iterable[Metric]:
        metrics: List[Metric] = []
        for collector in self.collectors:
            metrics.extend(collector.describe())
        metrics.extend(self.scrape_duration.describe())
        metrics.extend(self.scrape_errors.describe())
        return metrics

    def collect(self) -> Iterable[Metric]:
        start = time.perf_counter()
        metrics: List[Metric] = []
        for result in self.scrape_all():
            metrics.extend(result.metrics)

        self.scrape_duration.observe(time.perf_counter() - start)
        metrics.extend(self.scrape_duration.collect())
        metrics.extend(self.scrape_errors.collect())
        return metrics

    def scrape_all(self) -> List[CollectResult]:
        """Scrape every collector and return their results in the fixed collector order.

        Collectors run concurrently; a collector that raises is logged and
        counted and contributes an empty result instead of aborting the scrape.
        """
        results: List[CollectResult] = []
        with ThreadPoolExecutor(
            max_workers=max(len(self.collectors), 1),
            thread_name_prefix="netbird-collect",
        ) as pool:
            futures = [(collector, pool.submit(collector.scrape)) for collector in self.collectors]

            for collector, future in futures:
                try:
                    result = future.result()
                except Exception as exc:
                    logger.exception(f"Unexpected error during {collector.name} collection: {exc}")
                    error_type = f"collect_{collector.name}"
                    self.scrape_errors.labels(error_type=error_type).inc()
                    results.append(CollectResult(collector.name, errors=[error_type]))
                    continue

                for error_type in result.errors:
                    self.scrape_errors.labels(error_type=error_type).inc()
                logger.debug(f"Collector finished: {result.to_dict()}")
                results.append(result)
        return results
