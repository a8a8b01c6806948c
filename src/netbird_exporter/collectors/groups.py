# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Group metrics: size of each group and the resource types it holds."""

from __future__ import annotations

import logging
from collections import Counter
from typing import List

from ..models import Group
from .base import DomainCollector, GaugeSpec, Source, label

logger = logging.getLogger(__name__)

GROUP_LABELS = ("group_id", "group_name", "issued")


class GroupsCollector(DomainCollector):
    """Collects metrics from ``GET /api/groups``."""

    name = "groups"
    GAUGES = (
        GaugeSpec("groups_total", "netbird_groups", "Total number of NetBird groups"),
        GaugeSpec(
            "group_peers_count",
            "netbird_group_peers_count",
            "Number of peers in each NetBird group",
            GROUP_LABELS,
        ),
        GaugeSpec(
            "group_resources_count",
            "netbird_group_resources_count",
            "Number of resources in each NetBird group",
            GROUP_LABELS,
        ),
        GaugeSpec(
            "group_info",
            "netbird_group_info",
            "Information about NetBird groups (always 1)",
            GROUP_LABELS,
        ),
        GaugeSpec(
            "group_resources_by_type",
            "netbird_group_resources_by_type",
            "Number of resources in each NetBird group by resource type",
            ("group_id", "group_name", "resource_type"),
        ),
    )

    def sources(self) -> List[Source]:
        return [
            Source(
                error_type="fetch_groups",
                fetch=self.client.list_groups,
                fold=self.update_metrics,
                gauges=tuple(spec.attr for spec in self.GAUGES),
            )
        ]

    def update_metrics(self, groups: List[Group]) -> None:
        total_peers = 0
        total_resources = 0
        type_totals: Counter = Counter()

        for group in groups:
            group_labels = (group.id, group.name, label(group.issued))

            self.group_peers_count.labels(*group_labels).set(group.peers_count)
            self.group_resources_count.labels(*group_labels).set(group.resources_count)
            self.group_info.labels(*group_labels).set(1)

            total_peers += group.peers_count
            total_resources += group.resources_count

            by_type = Counter(label(resource.type) for resource in group.resources)
            for resource_type, count in by_type.items():
                self.group_resources_by_type.labels(group.id, group.name, resource_type).set(count)
            type_totals.update(by_type)

        self.groups_total.set(len(groups))

        logger.debug(
            f"Updated group metrics: total={len(groups)} peers_in_groups={total_peers} "
            f"resources={total_resources} resource_types={dict(type_totals)}"
        )
