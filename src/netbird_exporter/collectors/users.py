# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""User metrics: role/status spread, account flags, per-user permissions."""

from __future__ import annotations

import logging
from collections import Counter
from typing import List

from ..models import User, unix_timestamp
from .base import DomainCollector, GaugeSpec, Source, flag, label

logger = logging.getLogger(__name__)

USER_LABELS = ("user_id", "user_email", "user_name")


class UsersCollector(DomainCollector):
    """Collects metrics from ``GET /api/users``."""

    name = "users"
    GAUGES = (
        GaugeSpec("users_total", "netbird_users_total", "Total number of NetBird users"),
        GaugeSpec("users_by_role", "netbird_users_by_role", "Number of NetBird users by role", ("role",)),
        GaugeSpec("users_by_status", "netbird_users_by_status", "Number of NetBird users by status", ("status",)),
        GaugeSpec(
            "users_service_users",
            "netbird_users_service_users",
            "Number of NetBird service users vs regular users",
            ("is_service_user",),
        ),
        GaugeSpec("users_blocked", "netbird_users_blocked", "Number of blocked NetBird users", ("is_blocked",)),
        GaugeSpec(
            "users_by_issued",
            "netbird_users_by_issued",
            "Number of NetBird users by issuance type",
            ("issued",),
        ),
        GaugeSpec(
            "users_restricted",
            "netbird_users_restricted",
            "Number of NetBird users with restricted permissions",
            ("is_restricted",),
        ),
        GaugeSpec(
            "user_last_login",
            "netbird_user_last_login_timestamp",
            "Last login timestamp of NetBird users",
            USER_LABELS,
        ),
        GaugeSpec(
            "user_auto_groups_count",
            "netbird_user_auto_groups_count",
            "Number of auto groups assigned to each NetBird user",
            USER_LABELS,
        ),
        GaugeSpec(
            "user_permissions",
            "netbird_user_permissions",
            "User permissions by module and action (1 for granted, 0 for denied)",
            ("user_id", "user_email", "module", "permission"),
        ),
    )

    def sources(self) -> List[Source]:
        return [
            Source(
                error_type="fetch_users",
                fetch=self.client.list_users,
                fold=self.update_metrics,
                gauges=tuple(spec.attr for spec in self.GAUGES),
            )
        ]

    def update_metrics(self, users: List[User]) -> None:
        roles: Counter = Counter()
        statuses: Counter = Counter()
        service_users: Counter = Counter()
        blocked: Counter = Counter()
        issued: Counter = Counter()
        restricted: Counter = Counter()

        for user in users:
            roles[label(user.role)] += 1
            statuses[label(user.status)] += 1
            service_users[flag(user.is_service_user)] += 1
            blocked[flag(user.is_blocked)] += 1
            issued[label(user.issued)] += 1
            restricted[flag(user.permissions.is_restricted)] += 1

            user_labels = (user.id, user.email, user.name)
            last_login = unix_timestamp(user.last_login)
            if last_login is not None:
                self.user_last_login.labels(*user_labels).set(last_login)
            self.user_auto_groups_count.labels(*user_labels).set(len(user.auto_groups))

            for module, actions in user.permissions.modules.items():
                for action, granted in actions.items():
                    self.user_permissions.labels(user.id, user.email, module, action).set(
                        1.0 if granted else 0.0
                    )

        self.users_total.set(len(users))
        for gauge, counts in (
            (self.users_by_role, roles),
            (self.users_by_status, statuses),
            (self.users_service_users, service_users),
            (self.users_blocked, blocked),
            (self.users_by_issued, issued),
            (self.users_restricted, restricted),
        ):
            for value, count in counts.items():
                gauge.labels(value).set(count)

        logger.debug(
            f"Updated user metrics: total={len(users)} roles={dict(roles)} "
            f"statuses={dict(statuses)} blocked={blocked['true']}"
        )
