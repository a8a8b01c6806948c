# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Network metrics: routers, resources, policies and routing peers per network."""

from __future__ import annotations

import logging
from typing import List

from ..models import Network
from .base import DomainCollector, GaugeSpec, Source

logger = logging.getLogger(__name__)

NETWORK_LABELS = ("network_id", "network_name")


class NetworksCollector(DomainCollector):
    """Collects metrics from ``GET /api/networks``."""

    name = "networks"
    GAUGES = (
        GaugeSpec("networks_total", "netbird_networks", "Total number of NetBird networks"),
        GaugeSpec(
            "network_routers_count",
            "netbird_network_routers_count",
            "Number of routers in each NetBird network",
            NETWORK_LABELS,
        ),
        GaugeSpec(
            "network_resources_count",
            "netbird_network_resources_count",
            "Number of resources in each NetBird network",
            NETWORK_LABELS,
        ),
        GaugeSpec(
            "network_policies_count",
            "netbird_network_policies_count",
            "Number of policies in each NetBird network",
            NETWORK_LABELS,
        ),
        GaugeSpec(
            "network_routing_peers_count",
            "netbird_network_routing_peers_count",
            "Number of routing peers in each NetBird network",
            NETWORK_LABELS,
        ),
        GaugeSpec(
            "network_info",
            "netbird_network_info",
            "Information about NetBird networks (always 1)",
            ("network_id", "network_name", "description"),
        ),
    )

    def sources(self) -> List[Source]:
        return [
            Source(
                error_type="fetch_networks",
                fetch=self.client.list_networks,
                fold=self.update_metrics,
                gauges=tuple(spec.attr for spec in self.GAUGES),
            )
        ]

    def update_metrics(self, networks: List[Network]) -> None:
        totals = {"routers": 0, "resources": 0, "policies": 0, "routing_peers": 0}

        for network in networks:
            network_labels = (network.id, network.name)

            self.network_routers_count.labels(*network_labels).set(len(network.routers))
            self.network_resources_count.labels(*network_labels).set(len(network.resources))
            self.network_policies_count.labels(*network_labels).set(len(network.policies))
            self.network_routing_peers_count.labels(*network_labels).set(network.routing_peers_count)
            self.network_info.labels(network.id, network.name, network.description).set(1)

            totals["routers"] += len(network.routers)
            totals["resources"] += len(network.resources)
            totals["policies"] += len(network.policies)
            totals["routing_peers"] += network.routing_peers_count

        self.networks_total.set(len(networks))

        logger.debug(f"Updated network metrics: total={len(networks)} {totals}")
