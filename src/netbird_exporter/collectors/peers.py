# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Peer metrics: connectivity, OS and location spread, group membership."""

from __future__ import annotations

import logging
from collections import Counter
from typing import List

from ..models import Peer, unix_timestamp
from .base import DomainCollector, GaugeSpec, Source, flag, label

logger = logging.getLogger(__name__)


class PeersCollector(DomainCollector):
    """Collects metrics from ``GET /api/peers``."""

    name = "peers"
    GAUGES = (
        GaugeSpec("peers_total", "netbird_peers", "Total number of NetBird peers"),
        GaugeSpec(
            "peers_connected",
            "netbird_peers_connected",
            "Number of connected NetBird peers",
            ("connected",),
        ),
        GaugeSpec(
            "peers_last_seen",
            "netbird_peer_last_seen_timestamp",
            "Last seen timestamp of NetBird peers",
            ("peer_id", "peer_name", "hostname"),
        ),
        GaugeSpec("peers_by_os", "netbird_peers_by_os", "Number of NetBird peers by operating system", ("os",)),
        GaugeSpec(
            "peers_by_country",
            "netbird_peers_by_country",
            "Number of NetBird peers by country",
            ("country_code", "city_name"),
        ),
        GaugeSpec(
            "peers_by_group",
            "netbird_peers_by_group",
            "Number of NetBird peers by group",
            ("group_id", "group_name"),
        ),
        GaugeSpec(
            "peers_ssh_enabled",
            "netbird_peers_ssh_enabled",
            "Number of NetBird peers with SSH enabled",
            ("ssh_enabled",),
        ),
        GaugeSpec(
            "peers_login_expired",
            "netbird_peers_login_expired",
            "Number of NetBird peers with expired login",
            ("login_expired",),
        ),
        GaugeSpec(
            "peers_approval_required",
            "netbird_peers_approval_required",
            "Number of NetBird peers requiring approval",
            ("approval_required",),
        ),
        GaugeSpec(
            "accessible_peers_count",
            "netbird_peer_accessible_peers_count",
            "Number of accessible peers for each peer",
            ("peer_id", "peer_name"),
        ),
        GaugeSpec(
            "peer_connection_status",
            "netbird_peer_connection_status_by_name",
            "Connection status of each peer by name (1 for connected, 0 for disconnected)",
            ("peer_name", "peer_id", "connected"),
        ),
    )

    def sources(self) -> List[Source]:
        return [
            Source(
                error_type="fetch_peers",
                fetch=self.client.list_peers,
                fold=self.update_metrics,
                gauges=tuple(spec.attr for spec in self.GAUGES),
            )
        ]

    def update_metrics(self, peers: List[Peer]) -> None:
        """Fold one peers snapshot into the gauges."""
        connected: Counter = Counter()
        os_counts: Counter = Counter()
        country_counts: Counter = Counter()
        group_counts: Counter = Counter()
        ssh_counts: Counter = Counter()
        login_counts: Counter = Counter()
        approval_counts: Counter = Counter()

        for peer in peers:
            connected[flag(peer.connected)] += 1
            os_counts[label(peer.os)] += 1
            country_counts[(label(peer.country_code), label(peer.city_name))] += 1
            for group in peer.groups:
                group_counts[(group.id, group.name)] += 1
            ssh_counts[flag(peer.ssh_enabled)] += 1
            login_counts[flag(peer.login_expired)] += 1
            approval_counts[flag(peer.approval_required)] += 1

            last_seen = unix_timestamp(peer.last_seen)
            if last_seen is not None:
                self.peers_last_seen.labels(peer.id, peer.name, peer.hostname).set(last_seen)

            self.accessible_peers_count.labels(peer.id, peer.name).set(peer.accessible_peers_count)
            self.peer_connection_status.labels(peer.name, peer.id, flag(peer.connected)).set(
                1.0 if peer.connected else 0.0
            )

        self.peers_total.set(len(peers))
        for value, count in connected.items():
            self.peers_connected.labels(value).set(count)
        for os_name, count in os_counts.items():
            self.peers_by_os.labels(os_name).set(count)
        for (country, city), count in country_counts.items():
            self.peers_by_country.labels(country, city).set(count)
        for (group_id, group_name), count in group_counts.items():
            self.peers_by_group.labels(group_id, group_name).set(count)
        for value, count in ssh_counts.items():
            self.peers_ssh_enabled.labels(value).set(count)
        for value, count in login_counts.items():
            self.peers_login_expired.labels(value).set(count)
        for value, count in approval_counts.items():
            self.peers_approval_required.labels(value).set(count)

        logger.debug(
            f"Updated peer metrics: total={len(peers)} connected={connected['true']} "
            f"disconnected={connected['false']} os_distributions={len(os_counts)} "
            f"country_distributions={len(country_counts)} group_memberships={len(group_counts)}"
        )
