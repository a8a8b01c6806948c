# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""DNS metrics from nameserver groups and the account DNS settings.

The two endpoints are independent sources: if one of them fails the gauges
fed by the other are still published.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import List

from ..models import DNSSettings, NameserverGroup
from .base import DomainCollector, GaugeSpec, Source, flag, label

logger = logging.getLogger(__name__)


class DNSCollector(DomainCollector):
    """Collects metrics from ``GET /api/dns/nameservers`` and ``GET /api/dns/settings``."""

    name = "dns"
    GAUGES = (
        GaugeSpec(
            "nameserver_groups_total",
            "netbird_dns_nameserver_groups",
            "Total number of NetBird nameserver groups",
        ),
        GaugeSpec(
            "nameserver_groups_enabled",
            "netbird_dns_nameserver_groups_enabled",
            "Number of enabled NetBird nameserver groups",
            ("enabled",),
        ),
        GaugeSpec(
            "nameserver_groups_primary",
            "netbird_dns_nameserver_groups_primary",
            "Number of primary NetBird nameserver groups",
            ("primary",),
        ),
        GaugeSpec(
            "nameserver_group_domains",
            "netbird_dns_nameserver_group_domains_count",
            "Number of domains configured in each nameserver group",
            ("group_id", "group_name"),
        ),
        GaugeSpec(
            "nameservers_total",
            "netbird_dns_nameservers",
            "Total number of nameservers in each nameserver group",
            ("group_id", "group_name"),
        ),
        GaugeSpec(
            "nameservers_by_type",
            "netbird_dns_nameservers_by_type",
            "Number of nameservers by type (UDP/TCP) across all groups",
            ("ns_type",),
        ),
        GaugeSpec(
            "nameservers_by_port",
            "netbird_dns_nameservers_by_port",
            "Number of nameservers by port across all groups",
            ("port",),
        ),
        GaugeSpec(
            "management_disabled_groups",
            "netbird_dns_management_disabled_groups_count",
            "Number of groups with DNS management disabled",
        ),
    )

    def sources(self) -> List[Source]:
        return [
            Source(
                error_type="fetch_nameserver_groups",
                fetch=self.client.list_nameserver_groups,
                fold=self.update_nameserver_metrics,
                gauges=(
                    "nameserver_groups_total",
                    "nameserver_groups_enabled",
                    "nameserver_groups_primary",
                    "nameserver_group_domains",
                    "nameservers_total",
                    "nameservers_by_type",
                    "nameservers_by_port",
                ),
            ),
            Source(
                error_type="fetch_dns_settings",
                fetch=self.client.get_dns_settings,
                fold=self.update_settings_metrics,
                gauges=("management_disabled_groups",),
            ),
        ]

    def update_nameserver_metrics(self, groups: List[NameserverGroup]) -> None:
        enabled: Counter = Counter()
        primary: Counter = Counter()
        # Type and port are tallied over every nameserver, not per group
        types: Counter = Counter()
        ports: Counter = Counter()

        for group in groups:
            enabled[flag(group.enabled)] += 1
            primary[flag(group.primary)] += 1

            self.nameserver_group_domains.labels(group.id, group.name).set(len(group.domains))
            self.nameservers_total.labels(group.id, group.name).set(len(group.nameservers))

            for nameserver in group.nameservers:
                types[label(nameserver.ns_type)] += 1
                ports[str(nameserver.port)] += 1

        self.nameserver_groups_total.set(len(groups))
        for value, count in enabled.items():
            self.nameserver_groups_enabled.labels(value).set(count)
        for value, count in primary.items():
            self.nameserver_groups_primary.labels(value).set(count)
        for ns_type, count in types.items():
            self.nameservers_by_type.labels(ns_type).set(count)
        for port, count in ports.items():
            self.nameservers_by_port.labels(port).set(count)

        logger.debug(
            f"Updated nameserver metrics: total_groups={len(groups)} "
            f"enabled_groups={enabled['true']} disabled_groups={enabled['false']} "
            f"primary_groups={primary['true']}"
        )

    def update_settings_metrics(self, settings: DNSSettings) -> None:
        disabled = len(settings.items.disabled_management_groups)
        self.management_disabled_groups.set(disabled)
        logger.debug(f"Updated DNS settings metrics: disabled_management_groups={disabled}")
