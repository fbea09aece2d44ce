"""Unit tests for descriptor assembly."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from autonix_core.assembler import (
    AUTO_VPC_RANGE,
    CUSTOM_OS_LABEL,
    PENDING_ADDRESS,
    UNTITLED_CLUSTER,
    assemble,
)
from autonix_core.catalog import DEFAULT_FLAG, Catalog, ImageType
from autonix_core.descriptor import ResourceKind, ResourceStatus
from autonix_core.ids import IdFactory
from autonix_core.selection import (
    BucketSelection,
    LoadBalancerSelection,
    ReservedIpSelection,
    RouteSpec,
    ServerSelection,
    VolumeSelection,
    VpcSelection,
    new_cluster_selection,
    new_delete_confirmation,
)

CREATED_AT = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


class TestServer:
    def test_descriptor_fields(
        self, server_selection: ServerSelection, catalog: Catalog, ids: IdFactory
    ) -> None:
        server_selection.hostname = "web-1"
        descriptor = assemble(server_selection, catalog, ids=ids, now=CREATED_AT)

        assert descriptor.id == "vps-1700000000000"
        assert descriptor.kind == ResourceKind.SERVER
        assert descriptor.name == "web-1"
        assert descriptor.status == ResourceStatus.PROVISIONING
        assert descriptor.cost == pytest.approx(12.0)
        assert descriptor.created_at == CREATED_AT
        assert descriptor.location == "Atlanta"
        assert descriptor.flag == catalog.location("us-a").value.flag  # type: ignore[union-attr]
        assert descriptor.attributes["plan"] == "voc-c-1c-2gb-50s"
        assert descriptor.attributes["os"] == "AlmaLinux"
        assert descriptor.attributes["server_type"] == "Dedicated CPU"
        assert descriptor.attributes["backup"] == "Enabled"
        assert descriptor.attributes["firewall"] == "Default"
        assert descriptor.attributes["features"] == ["backups", "ipv4"]

    def test_name_fallbacks(self, server_selection: ServerSelection, catalog: Catalog) -> None:
        assert assemble(server_selection, catalog).name == "voc-c-1c-2gb-50s"
        server_selection.label = "primary"
        assert assemble(server_selection, catalog).name == "primary"

    def test_cost_is_per_instance(
        self, server_selection: ServerSelection, catalog: Catalog
    ) -> None:
        server_selection.set_quantity(3)
        descriptor = assemble(server_selection, catalog)
        assert descriptor.cost == pytest.approx(12.0)
        assert descriptor.attributes["quantity"] == 3

    def test_unresolved_references_get_placeholders(
        self, server_selection: ServerSelection, catalog: Catalog
    ) -> None:
        server_selection.location_id = "atlantis"
        server_selection.set_image_type(ImageType.SNAPSHOT, catalog)
        server_selection.compute_type = "no-such-type"
        server_selection.ssh_key_id = "deleted-key"
        server_selection.startup_script_id = "gone"
        server_selection.firewall_group_id = "old-group"

        descriptor = assemble(server_selection, catalog)
        assert descriptor.location == "Unknown"
        assert descriptor.flag == DEFAULT_FLAG
        assert descriptor.attributes["os"] == CUSTOM_OS_LABEL
        assert descriptor.attributes["server_type"] == "Unknown"
        assert descriptor.attributes["ssh_key"] == "Unknown"
        assert descriptor.attributes["startup_script"] == "Unknown"
        assert descriptor.attributes["firewall"] == "Unknown"

    def test_chosen_options_use_catalog_names(
        self, server_selection: ServerSelection, catalog: Catalog
    ) -> None:
        assert assemble(server_selection, catalog).attributes["ssh_key"] == "None"

        server_selection.ssh_key_id = "ssh-2"
        server_selection.startup_script_id = "docker"
        server_selection.firewall_group_id = "web"
        attributes = assemble(server_selection, catalog).attributes

        assert attributes["ssh_key"] == "Dev Team Key"
        assert attributes["startup_script"] == "Install Docker"
        assert attributes["firewall"] == "Web Server (80/443)"


class TestOtherKinds:
    def test_cluster(self, catalog: Catalog) -> None:
        selection = new_cluster_selection(catalog)
        descriptor = assemble(selection, catalog)
        assert descriptor.id.startswith("k8s-")
        assert descriptor.name == UNTITLED_CLUSTER

        selection.name = "Prod Cluster"
        descriptor = assemble(selection, catalog)
        assert descriptor.attributes["endpoint"] == "https://prod-cluster.k8s.autonix.io"
        assert descriptor.attributes["version"] == "v1.34.1+2"
        assert descriptor.attributes["node_count"] == 3
        assert descriptor.location == "New York"

    def test_load_balancer_spans_locations(self, catalog: Catalog) -> None:
        selection = LoadBalancerSelection(name="edge", location_ids=["de", "sg"], node_count=2)
        descriptor = assemble(selection, catalog)
        assert descriptor.location == "Frankfurt, Singapore"
        assert descriptor.flag == catalog.location("de").value.flag  # type: ignore[union-attr]
        assert descriptor.cost == pytest.approx(40.0)
        assert descriptor.attributes["locations"] == ["Frankfurt", "Singapore"]

    def test_vpc_ranges(self, catalog: Catalog) -> None:
        auto = assemble(VpcSelection(name="a", location_id="us-e"), catalog)
        assert auto.attributes["ip_range"] == AUTO_VPC_RANGE

        manual = VpcSelection(
            name="m",
            location_id="us-e",
            ip_mode="manual",
            manual_address="10.8.0.0",
            manual_prefix="16",
            routes=[RouteSpec(destination="10.9.0.0", next_hop="10.8.0.1")],
        )
        descriptor = assemble(manual, catalog)
        assert descriptor.attributes["ip_range"] == "10.8.0.0/16"
        assert descriptor.attributes["routes"] == []

    def test_volume(self, catalog: Catalog) -> None:
        selection = VolumeSelection(
            label="data", location_id="de", volume_type="hdd", bootable=True, os_image_id="debian"
        )
        descriptor = assemble(selection, catalog)
        assert descriptor.id.startswith("vol-")
        assert descriptor.attributes["type"] == "HDD"
        assert descriptor.attributes["os"] == "Debian"

    def test_bucket(self, catalog: Catalog) -> None:
        descriptor = assemble(BucketSelection(label="logs", tier_id="standard"), catalog)
        assert descriptor.attributes["tier"] == "Standard"
        assert descriptor.cost == pytest.approx(18.0)

    def test_reserved_ip(self, catalog: Catalog) -> None:
        descriptor = assemble(ReservedIpSelection(location_id="us-e"), catalog)
        assert descriptor.name == PENDING_ADDRESS
        assert descriptor.attributes["address"] == PENDING_ADDRESS

    def test_ids_never_collide(self, catalog: Catalog, ids: IdFactory) -> None:
        first = assemble(BucketSelection(label="a"), catalog, ids=ids)
        second = assemble(BucketSelection(label="b"), catalog, ids=ids)
        assert first.id != second.id

    def test_delete_confirmation_is_not_assembled(self, catalog: Catalog) -> None:
        with pytest.raises(TypeError):
            assemble(new_delete_confirmation("prod"), catalog)
