"""Relational parent/child collections for autonix-core.

Three one-to-many relations share one container type:
- DnsZones: domains own DNS records
- FirewallGroups: firewall groups own inbound/outbound rules
- VpcNetworks: VPC networks own static routes

Invariants held by RelationalCollection:
- parent ids are unique; child ids are unique across the whole collection
- every child references an existing parent (no orphans, ever)
- removing a parent removes all of its children in one swap
- children list in insertion order
- only a child type's MUTABLE_FIELDS may be patched
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, ClassVar, Generic, Literal, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field

from autonix_core.errors import (
    ChildNotFoundError,
    DuplicateIdError,
    ImmutableFieldError,
    ParentNotFoundError,
)
from autonix_core.ids import IdFactory, default_ids
from autonix_core.selection.models import RouteSpec

logger = structlog.get_logger(__name__)


class ParentEntity(BaseModel):
    """Entity owning children in a relational collection."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class ChildEntity(BaseModel):
    """Entity owned by exactly one parent.

    Class attributes:
        MUTABLE_FIELDS: Fields ``update_child`` may patch.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    MUTABLE_FIELDS: ClassVar[frozenset[str]] = frozenset()

    id: str = Field(..., min_length=1)
    parent_id: str = ""


class Domain(ParentEntity):
    """A DNS domain."""

    registrar: str = "Autonix"
    target: str | None = None
    ssl: str = "pending"
    auto_renew: bool = True
    dns_status: str = "healthy"


class DnsRecord(ChildEntity):
    """A DNS record within a domain."""

    MUTABLE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"type", "name", "value", "ttl", "priority"}
    )

    type: Literal["A", "AAAA", "CNAME", "MX", "TXT", "NS", "SRV"] = "A"
    name: str = "@"
    value: str = ""
    ttl: str = "3600"
    priority: int = Field(default=0, ge=0)


class FirewallGroup(ParentEntity):
    """A named set of firewall rules."""

    description: str = ""


class FirewallRule(ChildEntity):
    """A firewall rule. The direction is fixed at creation."""

    MUTABLE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"protocol", "port", "source", "description"}
    )

    direction: Literal["inbound", "outbound"] = "inbound"
    protocol: Literal["TCP", "UDP", "ICMP"] = "TCP"
    port: str = ""
    source: str = "0.0.0.0/0"
    description: str = ""


class VpcNetwork(ParentEntity):
    """A private network."""

    location: str = ""
    ip_range: str = ""


class VpcRoute(ChildEntity):
    """A static route of a VPC network."""

    MUTABLE_FIELDS: ClassVar[frozenset[str]] = frozenset({"destination", "prefix", "next_hop"})

    destination: str = ""
    prefix: str = "24"
    next_hop: str = ""


P = TypeVar("P", bound=ParentEntity)
C = TypeVar("C", bound=ChildEntity)


class RelationalCollection(Generic[P, C]):
    """Parents keyed by id plus children that each reference one parent.

    Example:
        >>> zones = DnsZones()
        >>> domain = zones.add_domain("example.com", target_ip="203.0.113.7")
        >>> [r.type for r in zones.list_children(domain.id)]
        ['A']
        >>> removed = zones.remove_parent(domain.id)
        >>> zones.children()
        []
    """

    parent_label: ClassVar[str] = "parent"
    child_label: ClassVar[str] = "child"

    def __init__(self, ids: IdFactory | None = None) -> None:
        self._ids = ids or default_ids
        self._parents: dict[str, P] = {}
        self._children: dict[str, C] = {}
        self._log = logger.bind(collection=type(self).__name__)

    # Parents

    def parents(self) -> list[P]:
        return list(self._parents.values())

    def get_parent(self, parent_id: str) -> P:
        try:
            return self._parents[parent_id]
        except KeyError:
            raise ParentNotFoundError(
                self.parent_label, parent_id, list(self._parents)
            ) from None

    def add_parent(self, parent: P) -> P:
        if parent.id in self._parents:
            raise DuplicateIdError(self.parent_label, parent.id)
        self._parents = {**self._parents, parent.id: parent}
        return parent

    def update_parent(self, parent_id: str, patch: Mapping[str, Any]) -> P:
        """Patch a parent's fields. The id cannot change."""
        current = self.get_parent(parent_id)
        if "id" in patch:
            raise ImmutableFieldError(self.parent_label, ["id"])
        updated = current.model_validate({**current.model_dump(), **patch})
        self._parents = {**self._parents, parent_id: updated}
        return updated

    def remove_parent(self, parent_id: str) -> list[C]:
        """Remove a parent and every child referencing it.

        The new parent and child maps are built first and swapped in
        together, so no caller can observe an orphaned child.

        Returns:
            The removed children, in insertion order.
        """
        self.get_parent(parent_id)
        removed = [c for c in self._children.values() if c.parent_id == parent_id]
        parents = {pid: p for pid, p in self._parents.items() if pid != parent_id}
        children = {cid: c for cid, c in self._children.items() if c.parent_id != parent_id}
        self._parents, self._children = parents, children
        self._log.info("parent_removed", parent_id=parent_id, children_removed=len(removed))
        return removed

    # Children

    def children(self) -> list[C]:
        return list(self._children.values())

    def get_child(self, child_id: str) -> C:
        try:
            return self._children[child_id]
        except KeyError:
            raise ChildNotFoundError(self.child_label, child_id) from None

    def list_children(self, parent_id: str) -> list[C]:
        """Children of one parent, in insertion order.

        A parent that does not exist, including one just removed, has no
        children.
        """
        return [c for c in self._children.values() if c.parent_id == parent_id]

    def add_child(self, parent_id: str, child: C) -> C:
        """Attach a child to an existing parent.

        Raises:
            ParentNotFoundError: If the parent does not exist.
            DuplicateIdError: If the child id is already used in this collection.
        """
        self.get_parent(parent_id)
        if child.id in self._children:
            raise DuplicateIdError(self.child_label, child.id)
        if child.parent_id != parent_id:
            child = child.model_copy(update={"parent_id": parent_id})
        self._children = {**self._children, child.id: child}
        return child

    def update_child(self, child_id: str, patch: Mapping[str, Any]) -> C:
        """Patch mutable fields of a child.

        Raises:
            ChildNotFoundError: If the child does not exist.
            ImmutableFieldError: If the patch touches any other field.
            pydantic.ValidationError: If a patched value is invalid.
        """
        current = self.get_child(child_id)
        rejected = sorted(set(patch) - current.MUTABLE_FIELDS)
        if rejected:
            raise ImmutableFieldError(self.child_label, rejected)
        updated = current.model_validate({**current.model_dump(), **patch})
        self._children = {**self._children, child_id: updated}
        return updated

    def remove_child(self, child_id: str) -> C:
        removed = self.get_child(child_id)
        self._children = {cid: c for cid, c in self._children.items() if cid != child_id}
        return removed

    def replace_children(self, parent_id: str, children: Iterable[C]) -> list[C]:
        """Swap all children of one parent for a new list in one assignment."""
        self.get_parent(parent_id)
        incoming = [
            c if c.parent_id == parent_id else c.model_copy(update={"parent_id": parent_id})
            for c in children
        ]
        kept = {cid: c for cid, c in self._children.items() if c.parent_id != parent_id}
        for child in incoming:
            if child.id in kept:
                raise DuplicateIdError(self.child_label, child.id)
            kept[child.id] = child
        self._children = kept
        return incoming

    def assert_integrity(self) -> None:
        """Raise AssertionError if any child references a missing parent."""
        orphans = [c.id for c in self._children.values() if c.parent_id not in self._parents]
        if orphans:
            raise AssertionError(f"Orphaned {self.child_label} ids: {', '.join(orphans)}")

    def _new_id(self, prefix: str) -> str:
        return self._ids.new_id(prefix)


class DnsZones(RelationalCollection[Domain, DnsRecord]):
    """Domains and their DNS records."""

    parent_label: ClassVar[str] = "domain"
    child_label: ClassVar[str] = "DNS record"

    def add_domain(self, name: str, target_ip: str | None = None) -> Domain:
        """Add a domain. With a target IP, an ``A @`` record is created too."""
        domain = self.add_parent(Domain(id=self._new_id("d"), name=name, target=target_ip or None))
        if target_ip:
            self.add_record(domain.id, type="A", name="@", value=target_ip)
        return domain

    def add_record(self, domain_id: str, **fields: Any) -> DnsRecord:
        record = DnsRecord(id=self._new_id("r"), parent_id=domain_id, **fields)
        return self.add_child(domain_id, record)


class FirewallGroups(RelationalCollection[FirewallGroup, FirewallRule]):
    """Firewall groups and their rules."""

    parent_label: ClassVar[str] = "firewall group"
    child_label: ClassVar[str] = "firewall rule"

    def add_group(self, name: str, description: str = "") -> FirewallGroup:
        return self.add_parent(
            FirewallGroup(id=self._new_id("fw"), name=name, description=description)
        )

    def add_rule(self, group_id: str, **fields: Any) -> FirewallRule:
        rule = FirewallRule(id=self._new_id("fr"), parent_id=group_id, **fields)
        return self.add_child(group_id, rule)

    def rule_counts(self, group_id: str) -> dict[str, int]:
        """Number of inbound and outbound rules in a group."""
        rules = self.list_children(group_id)
        return {
            "inbound": sum(1 for r in rules if r.direction == "inbound"),
            "outbound": sum(1 for r in rules if r.direction == "outbound"),
        }


class VpcNetworks(RelationalCollection[VpcNetwork, VpcRoute]):
    """VPC networks and their static routes."""

    parent_label: ClassVar[str] = "VPC network"
    child_label: ClassVar[str] = "route"

    def add_network(self, name: str, location: str = "", ip_range: str = "") -> VpcNetwork:
        return self.add_parent(
            VpcNetwork(id=self._new_id("vpc"), name=name, location=location, ip_range=ip_range)
        )

    def add_route(self, network_id: str, **fields: Any) -> VpcRoute:
        route = VpcRoute(id=self._new_id("rt"), parent_id=network_id, **fields)
        return self.add_child(network_id, route)

    def replace_routes(self, network_id: str, routes: Iterable[RouteSpec]) -> list[VpcRoute]:
        """Replace every route of a network with new ones built from route specs."""
        new_routes = [
            VpcRoute(id=self._new_id("rt"), parent_id=network_id, **spec.model_dump())
            for spec in routes
        ]
        return self.replace_children(network_id, new_routes)
