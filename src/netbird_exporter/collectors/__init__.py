"""Per-resource Prometheus collectors for the NetBird API."""

from .base import CollectResult, DomainCollector, GaugeSpec, Source
from .dns import DNSCollector
from .groups import GroupsCollector
from .networks import NetworksCollector
from .peers import PeersCollector
from .users import UsersCollector

__all__ = [
    "CollectResult",
    "DNSCollector",
    "DomainCollector",
    "GaugeSpec",
    "GroupsCollector",
    "NetworksCollector",
    "PeersCollector",
    "Source",
    "UsersCollector",
]
