# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Records returned by the NetBird management API.

Only the attributes the collectors fold into metrics are modelled; any other
keys in the JSON payload are ignored. The API serialises empty lists and
unset strings as ``null``, so a ``null`` value always falls back to the
field default.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .constants import ZERO_TIME_YEAR


class APIModel(BaseModel):
    """Base class for all NetBird API records."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name is not None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


def unix_timestamp(moment: Optional[datetime]) -> Optional[float]:
    """Seconds since the epoch, or ``None`` for unset and zero-valued times."""
    if moment is None or moment.year <= ZERO_TIME_YEAR:
        return None
    return moment.timestamp()


class PeerGroup(APIModel):
    """Minimal group reference embedded in a peer."""

    id: str = ""
    name: str = ""


class Peer(APIModel):
    id: str = ""
    name: str = ""
    hostname: str = ""
    ip: str = ""
    connected: bool = False
    last_seen: Optional[datetime] = None
    os: str = ""
    version: str = ""
    groups: List[PeerGroup] = Field(default_factory=list)
    ssh_enabled: bool = False
    login_expired: bool = False
    approval_required: bool = False
    country_code: str = ""
    city_name: str = ""
    accessible_peers_count: int = 0


class GroupPeer(APIModel):
    id: str = ""
    name: str = ""


class GroupResource(APIModel):
    id: str = ""
    type: str = ""


class Group(APIModel):
    id: str = ""
    name: str = ""
    peers_count: int = 0
    resources_count: int = 0
    issued: str = ""
    peers: List[GroupPeer] = Field(default_factory=list)
    resources: List[GroupResource] = Field(default_factory=list)


class UserPermissions(APIModel):
    is_restricted: bool = False
    modules: Dict[str, Dict[str, bool]] = Field(default_factory=dict)

    @field_validator("modules", mode="before")
    @classmethod
    def _drop_null_actions(cls, value: Any) -> Any:
        # A module or action reported as null carries no grant
        if not isinstance(value, dict):
            return value
        modules = {}
        for module, actions in value.items():
            if actions is None:
                actions = {}
            elif isinstance(actions, dict):
                actions = {action: granted for action, granted in actions.items() if granted is not None}
            modules[module] = actions
        return modules


class User(APIModel):
    id: str = ""
    email: str = ""
    name: str = ""
    role: str = ""
    status: str = ""
    last_login: Optional[datetime] = None
    auto_groups: List[str] = Field(default_factory=list)
    is_current: bool = False
    is_service_user: bool = False
    is_blocked: bool = False
    issued: str = ""
    permissions: UserPermissions = Field(default_factory=UserPermissions)


class Nameserver(APIModel):
    ip: str = ""
    ns_type: str = ""
    port: int = 0


class NameserverGroup(APIModel):
    id: str = ""
    name: str = ""
    description: str = ""
    nameservers: List[Nameserver] = Field(default_factory=list)
    enabled: bool = False
    groups: List[str] = Field(default_factory=list)
    primary: bool = False
    domains: List[str] = Field(default_factory=list)
    search_domains_enabled: bool = False


class DNSSettingsItems(APIModel):
    disabled_management_groups: List[str] = Field(default_factory=list)


class DNSSettings(APIModel):
    """Account-wide DNS settings, wrapped in an ``items`` object by the API."""

    items: DNSSettingsItems = Field(default_factory=DNSSettingsItems)


class Network(APIModel):
    id: str = ""
    name: str = ""
    description: str = ""
    routers: List[str] = Field(default_factory=list)
    resources: List[str] = Field(default_factory=list)
    policies: List[str] = Field(default_factory=list)
    routing_peers_count: int = 0
