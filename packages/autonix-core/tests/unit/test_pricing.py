"""Unit tests for the pricing pipeline."""

from __future__ import annotations

import pytest

from autonix_core.catalog import Catalog, ImageType, PricingRates
from autonix_core.pricing import compute_total, quote, terms_for
from autonix_core.selection import (
    BucketSelection,
    DeleteConfirmation,
    LoadBalancerSelection,
    ReservedIpSelection,
    ResizeSelection,
    ServerSelection,
    VolumeSelection,
    VpcSelection,
    new_cluster_selection,
    new_file_system_selection,
)


class TestServerPricing:
    """Plan, image license, backups, DDoS and quantity."""

    def test_default_server(self, server_selection: ServerSelection, catalog: Catalog) -> None:
        result = quote(server_selection, catalog)

        assert result.total == pytest.approx(12.0)
        assert result.monthly_display() == "12.00"
        assert result.hourly_display() == "0.0164"
        assert [item.label for item in result.items] == [
            "Plan (voc-c-1c-2gb-50s)",
            "Automatic backups",
        ]

    def test_image_license(self, server_selection: ServerSelection, catalog: Catalog) -> None:
        server_selection.set_image("windows", catalog)
        assert compute_total(server_selection, catalog) == pytest.approx(26.0)

    def test_image_from_other_tab_adds_nothing(
        self, server_selection: ServerSelection, catalog: Catalog
    ) -> None:
        server_selection.set_image("windows", catalog)
        server_selection.image_type = ImageType.APPS
        assert compute_total(server_selection, catalog) == pytest.approx(12.0)

    def test_ddos_is_flat(self, server_selection: ServerSelection, catalog: Catalog) -> None:
        server_selection.set_feature("ddos", True)
        server_selection.set_feature("backups", False)
        assert compute_total(server_selection, catalog) == pytest.approx(20.0)

    def test_quantity_multiplies_everything(
        self, server_selection: ServerSelection, catalog: Catalog
    ) -> None:
        server_selection.set_quantity(3)
        result = quote(server_selection, catalog)

        assert result.total == pytest.approx(36.0)
        assert result.items[-1].label == "Quantity (× 3)"
        assert result.items[-1].amount == pytest.approx(24.0)
        assert sum(item.amount for item in result.items) == pytest.approx(result.total)

    def test_unresolved_plan_costs_nothing(
        self, server_selection: ServerSelection, catalog: Catalog
    ) -> None:
        server_selection.plan_category = "high_frequency"
        assert compute_total(server_selection, catalog) == 0.0


class TestOtherWizards:
    def test_load_balancer(self, catalog: Catalog) -> None:
        selection = LoadBalancerSelection(name="edge", location_ids=["us-e", "de"], node_count=2)
        assert compute_total(selection, catalog) == pytest.approx(40.0)

    def test_load_balancer_ssl(self, catalog: Catalog) -> None:
        selection = LoadBalancerSelection(name="edge", location_ids=["us-e"], ssl=True)
        assert compute_total(selection, catalog) == pytest.approx(20.0)

    def test_load_balancer_without_locations(self, catalog: Catalog) -> None:
        assert compute_total(LoadBalancerSelection(), catalog) == pytest.approx(10.0)

    def test_cluster(self, catalog: Catalog) -> None:
        selection = new_cluster_selection(catalog)
        assert compute_total(selection, catalog) == pytest.approx(60.0)
        selection.ha = True
        assert compute_total(selection, catalog) == pytest.approx(100.0)

    @pytest.mark.parametrize(
        ("volume_type", "expected"),
        [("nvme", 4.0), ("hdd", 1.0)],
    )
    def test_volume(self, catalog: Catalog, volume_type: str, expected: float) -> None:
        selection = VolumeSelection(label="data", size_gb=40, volume_type=volume_type)
        assert compute_total(selection, catalog) == pytest.approx(expected)

    def test_bucket_tier(self, catalog: Catalog) -> None:
        assert compute_total(BucketSelection(tier_id="premium"), catalog) == pytest.approx(36.0)
        assert compute_total(BucketSelection(tier_id="glacier"), catalog) == 0.0

    def test_file_system(self, catalog: Catalog) -> None:
        selection = new_file_system_selection(catalog)
        selection.size_gb = 100
        assert compute_total(selection, catalog) == pytest.approx(10.0)

    def test_reserved_ip(self, catalog: Catalog) -> None:
        assert compute_total(ReservedIpSelection(), catalog) == pytest.approx(3.0)
        ipv6 = quote(ReservedIpSelection(ip_type="IPv6"), catalog)
        assert ipv6.total == 0.0
        assert ipv6.items == ()

    def test_free_wizards(self, catalog: Catalog) -> None:
        assert terms_for(VpcSelection()) == ()
        assert compute_total(VpcSelection(name="v"), catalog) == 0.0
        assert compute_total(DeleteConfirmation(target_name="v"), catalog) == 0.0


class TestResizePricing:
    def test_file_system_resize(self, catalog: Catalog) -> None:
        selection = ResizeSelection(
            target_name="shared",
            resource_kind="file_system",
            current_size=100,
            new_size=250,
            unit_rate=catalog.pricing.file_system_per_gb,
        )
        result = quote(selection, catalog)
        assert result.monthly_display() == "25.00"


class TestHourlyRate:
    def test_zero_hours_gives_zero_hourly(
        self, server_selection: ServerSelection, catalog: Catalog
    ) -> None:
        no_hours = catalog.model_copy(update={"pricing": PricingRates(hours_per_month=0)})
        result = quote(server_selection, no_hours)
        assert result.total == pytest.approx(12.0)
        assert result.hourly == 0.0

    def test_quote_is_pure(self, server_selection: ServerSelection, catalog: Catalog) -> None:
        assert quote(server_selection, catalog) == quote(server_selection, catalog)


class TestMonotonicity:
    """More instances or more add-ons never lower the total."""

    def test_quantity_never_decreases_total(
        self, server_selection: ServerSelection, catalog: Catalog
    ) -> None:
        totals = []
        for quantity in range(1, 6):
            server_selection.set_quantity(quantity)
            totals.append(compute_total(server_selection, catalog))
        assert totals == sorted(totals)

    @pytest.mark.parametrize("feature", ["backups", "ddos"])
    def test_add_on_never_decreases_total(
        self, server_selection: ServerSelection, catalog: Catalog, feature: str
    ) -> None:
        server_selection.set_feature(feature, False)
        without = compute_total(server_selection, catalog)
        server_selection.set_feature(feature, True)
        assert compute_total(server_selection, catalog) >= without

    def test_ssl_never_decreases_total(self, catalog: Catalog) -> None:
        plain = LoadBalancerSelection(name="edge", location_ids=["de"], node_count=3)
        secured = plain.model_copy(update={"ssl": True})
        assert compute_total(secured, catalog) >= compute_total(plain, catalog)
