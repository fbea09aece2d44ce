"""Wizard selection state for autonix-core."""

from __future__ import annotations

from autonix_core.selection.factories import (
    new_bucket_selection,
    new_cluster_selection,
    new_delete_confirmation,
    new_file_system_selection,
    new_load_balancer_selection,
    new_reserved_ip_selection,
    new_resize_selection,
    new_server_selection,
    new_volume_selection,
    new_vpc_selection,
)
from autonix_core.selection.models import (
    DEFAULT_SERVER_FEATURES,
    REGION_TABS,
    BucketSelection,
    ClusterSelection,
    DeleteConfirmation,
    FileSystemSelection,
    ForwardingRule,
    LoadBalancerFirewallRule,
    LoadBalancerSelection,
    ReservedIpSelection,
    ResizeSelection,
    RouteSpec,
    Selection,
    SelectionBase,
    ServerSelection,
    VolumeSelection,
    VpcSelection,
    parse_selection,
)

__all__ = [
    "DEFAULT_SERVER_FEATURES",
    "REGION_TABS",
    "BucketSelection",
    "ClusterSelection",
    "DeleteConfirmation",
    "FileSystemSelection",
    "ForwardingRule",
    "LoadBalancerFirewallRule",
    "LoadBalancerSelection",
    "ReservedIpSelection",
    "ResizeSelection",
    "RouteSpec",
    "Selection",
    "SelectionBase",
    "ServerSelection",
    "VolumeSelection",
    "VpcSelection",
    "new_bucket_selection",
    "new_cluster_selection",
    "new_delete_confirmation",
    "new_file_system_selection",
    "new_load_balancer_selection",
    "new_reserved_ip_selection",
    "new_resize_selection",
    "new_server_selection",
    "new_volume_selection",
    "new_vpc_selection",
    "parse_selection",
]
