"""Descriptor assembler for autonix-core.

Turns a creation selection into a ResourceDescriptor. The assembler is
tolerant: unresolved references become placeholder labels ("Unknown",
"Custom OS", the default flag) rather than errors. Callers that need a valid
selection check the readiness gate first.

Assembly has no side effects apart from drawing an id from the id factory.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from autonix_core.catalog.models import DEFAULT_FLAG, Catalog, CatalogLocation
from autonix_core.credentials import cluster_endpoint
from autonix_core.descriptor import ResourceDescriptor, ResourceKind, ResourceStatus
from autonix_core.ids import IdFactory, default_ids
from autonix_core.lookup import UNKNOWN_LABEL, Resolved
from autonix_core.pricing import compute_total
from autonix_core.resolver import resolve_image, resolve_locations, resolve_plan
from autonix_core.selection.models import (
    BucketSelection,
    ClusterSelection,
    FileSystemSelection,
    LoadBalancerSelection,
    ReservedIpSelection,
    SelectionBase,
    ServerSelection,
    VolumeSelection,
    VpcSelection,
)

CUSTOM_OS_LABEL = "Custom OS"
UNTITLED_CLUSTER = "Untitled Cluster"
AUTO_VPC_RANGE = "10.25.96.0/20"
PENDING_ADDRESS = "Pending Allocation..."

ID_PREFIXES: dict[ResourceKind, str] = {
    ResourceKind.SERVER: "vps",
    ResourceKind.CLUSTER: "k8s",
    ResourceKind.LOAD_BALANCER: "lb",
    ResourceKind.VPC: "vpc",
    ResourceKind.VOLUME: "vol",
    ResourceKind.BUCKET: "b",
    ResourceKind.FILE_SYSTEM: "fs",
    ResourceKind.RESERVED_IP: "ip",
}


def _flag(location: Resolved[CatalogLocation]) -> str:
    return location.value.flag if location.value is not None else DEFAULT_FLAG


def _single_location(selection: SelectionBase, catalog: Catalog) -> Resolved[CatalogLocation]:
    resolved = resolve_locations(selection, catalog)
    return resolved[0] if resolved else Resolved.missing(None)


def _optional_option(catalog: Catalog, group: str, option_id: str | None, unset: str) -> str:
    if option_id is None:
        return unset
    return catalog.option(group, option_id).label()


def _server(selection: ServerSelection, catalog: Catalog) -> tuple[str, dict[str, Any]]:
    plan = resolve_plan(selection, catalog)
    image = resolve_image(selection, catalog)
    name = selection.hostname.strip() or selection.label.strip() or selection.plan_id or UNKNOWN_LABEL
    attributes = {
        "plan": plan.label(selection.plan_id or UNKNOWN_LABEL),
        "os": image.label(CUSTOM_OS_LABEL),
        "version": selection.image_version,
        "server_type": catalog.compute_type(selection.compute_type).label(),
        "quantity": selection.quantity,
        "ip": "Allocating...",
        "backup": "Enabled" if selection.feature("backups") else "Disabled",
        "firewall": _optional_option(
            catalog, "firewall_groups", selection.firewall_group_id, "Default"
        ),
        "features": sorted(feature for feature, on in selection.features.items() if on),
        "ssh_key": _optional_option(catalog, "ssh_keys", selection.ssh_key_id, "None"),
        "startup_script": _optional_option(
            catalog, "startup_scripts", selection.startup_script_id, "None"
        ),
        "label": selection.label,
    }
    return name, attributes


def _cluster(selection: ClusterSelection, catalog: Catalog) -> tuple[str, dict[str, Any]]:
    name = selection.name.strip() or UNTITLED_CLUSTER
    attributes = {
        "version": catalog.kubernetes_version(selection.version).label(),
        "node_count": selection.node_count,
        "plan": resolve_plan(selection, catalog).label(selection.pool_plan_id or UNKNOWN_LABEL),
        "ha": selection.ha,
        "firewall": selection.firewall,
        "vpc": selection.vpc,
        "endpoint": cluster_endpoint(name),
    }
    return name, attributes


def _load_balancer(
    selection: LoadBalancerSelection, catalog: Catalog
) -> tuple[str, dict[str, Any]]:
    attributes = {
        "locations": [loc.label() for loc in resolve_locations(selection, catalog)],
        "algorithm": selection.algorithm,
        "node_count": selection.node_count,
        "ssl": selection.ssl,
        "forwarding_rules": [rule.model_dump() for rule in selection.forwarding_rules],
        "firewall_rules": [rule.model_dump() for rule in selection.firewall_rules],
        "vpc_by_location": dict(selection.vpc_by_location),
        "ip": "Provisioning...",
        "targets": 0,
    }
    return selection.name.strip() or UNKNOWN_LABEL, attributes


def _vpc(selection: VpcSelection, catalog: Catalog) -> tuple[str, dict[str, Any]]:
    if selection.ip_mode == "auto":
        ip_range = AUTO_VPC_RANGE
    else:
        ip_range = f"{selection.manual_address}/{selection.manual_prefix}"
    routes = (
        [route.model_dump() for route in selection.routes]
        if selection.route_mode == "custom"
        else []
    )
    attributes = {"ip_range": ip_range, "routes": routes, "instances": 0}
    return selection.name.strip() or UNKNOWN_LABEL, attributes


def _volume(selection: VolumeSelection, catalog: Catalog) -> tuple[str, dict[str, Any]]:
    attributes = {
        "size_gb": selection.size_gb,
        "type": "HDD" if selection.volume_type == "hdd" else "NVMe",
        "bootable": selection.bootable,
        "os": resolve_image(selection, catalog).label(CUSTOM_OS_LABEL)
        if selection.bootable
        else None,
        "attached_to": None,
    }
    return selection.label.strip() or UNKNOWN_LABEL, attributes


def _bucket(selection: BucketSelection, catalog: Catalog) -> tuple[str, dict[str, Any]]:
    attributes = {"tier": catalog.storage_tier(selection.tier_id).label(), "objects": 0}
    return selection.label.strip() or UNKNOWN_LABEL, attributes


def _file_system(selection: FileSystemSelection, catalog: Catalog) -> tuple[str, dict[str, Any]]:
    attributes = {"size_gb": selection.size_gb, "attached_to": None}
    return selection.label.strip() or UNKNOWN_LABEL, attributes


def _reserved_ip(selection: ReservedIpSelection, catalog: Catalog) -> tuple[str, dict[str, Any]]:
    attributes = {
        "address": PENDING_ADDRESS,
        "ip_type": selection.ip_type,
        "attached_to": None,
    }
    return selection.label.strip() or PENDING_ADDRESS, attributes


_BUILDERS: dict[type[SelectionBase], tuple[ResourceKind, Callable[..., tuple[str, dict[str, Any]]]]] = {
    ServerSelection: (ResourceKind.SERVER, _server),
    ClusterSelection: (ResourceKind.CLUSTER, _cluster),
    LoadBalancerSelection: (ResourceKind.LOAD_BALANCER, _load_balancer),
    VpcSelection: (ResourceKind.VPC, _vpc),
    VolumeSelection: (ResourceKind.VOLUME, _volume),
    BucketSelection: (ResourceKind.BUCKET, _bucket),
    FileSystemSelection: (ResourceKind.FILE_SYSTEM, _file_system),
    ReservedIpSelection: (ResourceKind.RESERVED_IP, _reserved_ip),
}


def assemble(
    selection: SelectionBase,
    catalog: Catalog,
    *,
    ids: IdFactory | None = None,
    now: datetime | None = None,
) -> ResourceDescriptor:
    """Build the descriptor for a creation selection.

    Args:
        selection: A creation wizard selection.
        catalog: Catalog references resolve against.
        ids: Id factory. Defaults to the process-wide factory.
        now: Creation time. Defaults to the current UTC time.

    Returns:
        New descriptor with status Provisioning.

    Raises:
        TypeError: If the selection does not create a resource (resize,
            delete confirmation).
    """
    entry = _BUILDERS.get(type(selection))
    if entry is None:
        raise TypeError(f"{type(selection).__name__} does not produce a resource descriptor")
    kind, build = entry

    name, attributes = build(selection, catalog)

    total = compute_total(selection, catalog)
    if isinstance(selection, ServerSelection):
        cost = total / selection.quantity
    else:
        cost = total

    if isinstance(selection, LoadBalancerSelection):
        resolved = resolve_locations(selection, catalog)
        location = ", ".join(loc.label() for loc in resolved) or UNKNOWN_LABEL
        flag = _flag(resolved[0]) if resolved else DEFAULT_FLAG
    else:
        single = _single_location(selection, catalog)
        location = single.label()
        flag = _flag(single)

    factory = ids or default_ids
    return ResourceDescriptor(
        id=factory.new_id(ID_PREFIXES[kind]),
        kind=kind,
        name=name,
        status=ResourceStatus.PROVISIONING,
        cost=cost,
        created_at=now or datetime.now(UTC),
        location=location,
        flag=flag,
        attributes=attributes,
    )
