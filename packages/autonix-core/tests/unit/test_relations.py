"""Unit tests for relational parent/child collections."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from autonix_core.errors import (
    ChildNotFoundError,
    DuplicateIdError,
    ImmutableFieldError,
    ParentNotFoundError,
)
from autonix_core.ids import IdFactory
from autonix_core.relations import (
    DnsRecord,
    DnsZones,
    FirewallGroups,
    VpcNetworks,
    VpcRoute,
)
from autonix_core.selection import RouteSpec


@pytest.fixture
def zones(ids: IdFactory) -> DnsZones:
    return DnsZones(ids=ids)


class TestDnsZones:
    def test_add_domain_with_target_creates_a_record(self, zones: DnsZones) -> None:
        domain = zones.add_domain("example.com", target_ip="203.0.113.7")

        records = zones.list_children(domain.id)
        assert len(records) == 1
        assert (records[0].type, records[0].name, records[0].value) == ("A", "@", "203.0.113.7")
        assert records[0].parent_id == domain.id
        assert domain.target == "203.0.113.7"

    def test_add_domain_without_target(self, zones: DnsZones) -> None:
        domain = zones.add_domain("example.org")
        assert zones.list_children(domain.id) == []
        assert domain.target is None

    def test_delete_domain_cascades(self, zones: DnsZones) -> None:
        """Deleting a domain removes every record it owns and nothing else."""
        domain = zones.add_domain("example.com", target_ip="203.0.113.7")
        zones.add_record(domain.id, type="CNAME", name="www", value="example.com")
        zones.add_record(domain.id, type="MX", value="mail.example.com", priority=10)
        other = zones.add_domain("example.org", target_ip="198.51.100.1")

        removed = zones.remove_parent(domain.id)

        assert len(removed) == 3
        assert [r for r in zones.children() if r.parent_id == domain.id] == []
        assert [r.parent_id for r in zones.children()] == [other.id]
        assert zones.list_children(domain.id) == []
        zones.assert_integrity()

    def test_records_keep_insertion_order(self, zones: DnsZones) -> None:
        domain = zones.add_domain("example.com")
        for name in ("a", "b", "c"):
            zones.add_record(domain.id, type="TXT", name=name, value="v")
        assert [r.name for r in zones.list_children(domain.id)] == ["a", "b", "c"]

    def test_record_for_missing_domain(self, zones: DnsZones) -> None:
        zones.add_domain("example.com")
        with pytest.raises(ParentNotFoundError) as exc_info:
            zones.add_record("d-missing", type="A", value="1.2.3.4")
        assert "Domain 'd-missing' not found" in str(exc_info.value)
        assert len(exc_info.value.available) == 1

    def test_update_record(self, zones: DnsZones) -> None:
        domain = zones.add_domain("example.com", target_ip="203.0.113.7")
        record = zones.list_children(domain.id)[0]

        updated = zones.update_child(record.id, {"value": "203.0.113.8", "ttl": "300"})

        assert updated.value == "203.0.113.8"
        assert zones.get_child(record.id).ttl == "300"

    def test_record_cannot_move_domains(self, zones: DnsZones) -> None:
        domain = zones.add_domain("example.com", target_ip="203.0.113.7")
        other = zones.add_domain("example.org")
        record = zones.list_children(domain.id)[0]

        with pytest.raises(ImmutableFieldError):
            zones.update_child(record.id, {"parent_id": other.id})
        assert zones.get_child(record.id).parent_id == domain.id

    def test_invalid_record_type(self, zones: DnsZones) -> None:
        domain = zones.add_domain("example.com", target_ip="203.0.113.7")
        record = zones.list_children(domain.id)[0]
        with pytest.raises(ValidationError):
            zones.update_child(record.id, {"type": "PTRX"})

    def test_update_domain(self, zones: DnsZones) -> None:
        domain = zones.add_domain("example.com")
        assert zones.update_parent(domain.id, {"auto_renew": False}).auto_renew is False
        with pytest.raises(ImmutableFieldError):
            zones.update_parent(domain.id, {"id": "d-other"})


class TestCollectionInvariants:
    def test_duplicate_child_id(self, zones: DnsZones) -> None:
        domain = zones.add_domain("example.com")
        zones.add_child(domain.id, DnsRecord(id="r-1", value="1.1.1.1"))
        with pytest.raises(DuplicateIdError):
            zones.add_child(domain.id, DnsRecord(id="r-1", value="2.2.2.2"))

    def test_add_child_binds_parent(self, zones: DnsZones) -> None:
        domain = zones.add_domain("example.com")
        child = zones.add_child(domain.id, DnsRecord(id="r-1", parent_id="elsewhere"))
        assert child.parent_id == domain.id

    def test_remove_child(self, zones: DnsZones) -> None:
        domain = zones.add_domain("example.com", target_ip="203.0.113.7")
        record = zones.list_children(domain.id)[0]
        zones.remove_child(record.id)
        with pytest.raises(ChildNotFoundError):
            zones.get_child(record.id)

    def test_remove_missing_parent(self, zones: DnsZones) -> None:
        with pytest.raises(ParentNotFoundError, match="Available: none"):
            zones.remove_parent("d-1")


class TestFirewallGroups:
    def test_rules_and_counts(self, ids: IdFactory) -> None:
        groups = FirewallGroups(ids=ids)
        group = groups.add_group("web", description="Web servers")
        groups.add_rule(group.id, port="80")
        groups.add_rule(group.id, port="443")
        groups.add_rule(group.id, direction="outbound", protocol="UDP", port="53")

        assert groups.rule_counts(group.id) == {"inbound": 2, "outbound": 1}

    def test_direction_is_immutable(self, ids: IdFactory) -> None:
        groups = FirewallGroups(ids=ids)
        group = groups.add_group("web")
        rule = groups.add_rule(group.id, port="22")

        with pytest.raises(ImmutableFieldError, match="direction"):
            groups.update_child(rule.id, {"direction": "outbound", "port": "2222"})
        assert groups.get_child(rule.id).port == "22"

        assert groups.update_child(rule.id, {"port": "2222"}).port == "2222"

    def test_delete_group_removes_rules(self, ids: IdFactory) -> None:
        groups = FirewallGroups(ids=ids)
        group = groups.add_group("web")
        groups.add_rule(group.id, port="80")
        groups.add_rule(group.id, direction="outbound", port="53")
        kept = groups.add_group("db")
        groups.add_rule(kept.id, port="5432")

        removed = groups.remove_parent(group.id)

        assert len(removed) == 2
        assert groups.list_children(group.id) == []
        assert [r.port for r in groups.list_children(kept.id)] == ["5432"]
        groups.assert_integrity()


class TestVpcNetworks:
    def test_replace_routes(self, ids: IdFactory) -> None:
        networks = VpcNetworks(ids=ids)
        network = networks.add_network("prod-vpc", location="us-e", ip_range="10.0.0.0/20")
        networks.add_route(network.id, destination="10.1.0.0", next_hop="10.0.0.1")

        new_routes = networks.replace_routes(
            network.id,
            [
                RouteSpec(destination="10.2.0.0", next_hop="10.0.0.2"),
                RouteSpec(destination="10.3.0.0", prefix="16", next_hop="10.0.0.3"),
            ],
        )

        assert [r.destination for r in networks.list_children(network.id)] == [
            "10.2.0.0",
            "10.3.0.0",
        ]
        assert all(isinstance(r, VpcRoute) for r in new_routes)
        networks.assert_integrity()

    def test_replace_routes_missing_network(self, ids: IdFactory) -> None:
        networks = VpcNetworks(ids=ids)
        with pytest.raises(ParentNotFoundError, match="VPC network"):
            networks.replace_routes("vpc-1", [])

    def test_delete_network_removes_routes(self, ids: IdFactory) -> None:
        networks = VpcNetworks(ids=ids)
        network = networks.add_network("prod-vpc")
        networks.add_route(network.id, destination="10.1.0.0", next_hop="10.0.0.1")

        networks.remove_parent(network.id)
        assert networks.list_children(network.id) == []
        assert networks.children() == []
        assert networks.parents() == []

    def test_no_children_for_unknown_network(self, ids: IdFactory) -> None:
        assert VpcNetworks(ids=ids).list_children("vpc-1") == []
