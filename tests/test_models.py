from datetime import datetime, timezone

from netbird_exporter.models import (
    DNSSettings,
    Group,
    NameserverGroup,
    Network,
    Peer,
    User,
    unix_timestamp,
)


def test_peer_null_fields_fall_back_to_defaults():
    peer = Peer.model_validate(
        {
            "id": "p1",
            "name": None,
            "groups": None,
            "connected": None,
            "accessible_peers_count": None,
            "country_code": None,
        }
    )
    assert peer.id == "p1"
    assert peer.name == ""
    assert peer.groups == []
    assert peer.connected is False
    assert peer.accessible_peers_count == 0
    assert peer.country_code == ""


def test_unknown_keys_are_ignored():
    network = Network.model_validate(
        {"id": "n1", "name": "office", "routers": ["r1"], "some_future_field": {"a": 1}}
    )
    assert network.routers == ["r1"]
    assert not hasattr(network, "some_future_field")


def test_peer_groups_are_parsed():
    peer = Peer.model_validate(
        {"id": "p1", "groups": [{"id": "g1", "name": "All", "peers_count": 3}]}
    )
    assert peer.groups[0].id == "g1"
    assert peer.groups[0].name == "All"


def test_group_resources_parsed():
    group = Group.model_validate(
        {
            "id": "g1",
            "name": "devs",
            "peers_count": 2,
            "resources_count": 1,
            "issued": "api",
            "resources": [{"id": "r1", "type": "host"}],
        }
    )
    assert group.resources[0].type == "host"
    assert group.peers_count == 2


def test_user_permissions_modules():
    user = User.model_validate(
        {
            "id": "u1",
            "email": "alice@example.com",
            "permissions": {
                "is_restricted": True,
                "modules": {"peers": {"read": True, "delete": False}},
            },
        }
    )
    assert user.permissions.is_restricted is True
    assert user.permissions.modules["peers"] == {"read": True, "delete": False}


def test_user_null_permissions():
    user = User.model_validate({"id": "u1", "permissions": None})
    assert user.permissions.is_restricted is False
    assert user.permissions.modules == {}


def test_nameserver_group_nested():
    group = NameserverGroup.model_validate(
        {
            "id": "ns1",
            "nameservers": [{"ip": "8.8.8.8", "ns_type": "udp", "port": 53}],
            "domains": None,
        }
    )
    assert group.nameservers[0].port == 53
    assert group.domains == []


def test_dns_settings_defaults():
    assert DNSSettings().items.disabled_management_groups == []
    assert DNSSettings.model_validate({"items": None}).items.disabled_management_groups == []


def test_unix_timestamp():
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert unix_timestamp(moment) == moment.timestamp()
    assert unix_timestamp(None) is None


def test_unix_timestamp_zero_time_is_unset():
    peer = Peer.model_validate({"id": "p1", "last_seen": "0001-01-01T00:00:00Z"})
    assert unix_timestamp(peer.last_seen) is None


def test_last_seen_parses_rfc3339():
    peer = Peer.model_validate({"id": "p1", "last_seen": "2024-05-01T12:00:00Z"})
    assert unix_timestamp(peer.last_seen) == datetime(2024, 5, 1, 12, tzinfo=timezone.utc).timestamp()


def test_user_null_permission_module_is_empty():
    user = User.model_validate(
        {
            "id": "u1",
            "permissions": {"modules": {"peers": None, "users": {"read": True, "delete": None}}},
        }
    )
    assert user.permissions.modules == {"peers": {}, "users": {"read": True}}
