"""Pricing pipeline for autonix-core.

A quote is an ordered fold over pricing terms. Each term sees the selection,
the catalog and the running subtotal and returns a non-negative contribution.
Multipliers contribute ``subtotal × (n - 1)`` so the itemized breakdown
always sums to the total.

Pricing is pure: identical inputs give identical quotes. Amounts are floats
and are rounded only by the display helpers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from autonix_core.catalog.models import Catalog
from autonix_core.resolver import resolve_image, resolve_plan
from autonix_core.selection.models import (
    BucketSelection,
    ClusterSelection,
    DeleteConfirmation,
    FileSystemSelection,
    LoadBalancerSelection,
    ReservedIpSelection,
    ResizeSelection,
    SelectionBase,
    ServerSelection,
    VolumeSelection,
    VpcSelection,
)


@dataclass(frozen=True)
class LineItem:
    """One row of a quote breakdown."""

    label: str
    amount: float


@dataclass(frozen=True)
class Quote:
    """Monthly cost of a selection with its breakdown.

    Attributes:
        items: Non-zero contributions in pipeline order.
        total: Sum of the item amounts (monthly).
        hourly: Total divided by the catalog's hours per month.
    """

    items: tuple[LineItem, ...]
    total: float
    hourly: float

    def monthly_display(self) -> str:
        """Monthly total with two decimals."""
        return f"{self.total:.2f}"

    def hourly_display(self) -> str:
        """Hourly rate with four decimals."""
        return f"{self.hourly:.4f}"


class PricingTerm(ABC):
    """Abstract pricing term.

    Subclasses implement ``contribution``. Negative results are clamped to 0
    by the pipeline.
    """

    def __init__(self, label: str) -> None:
        self.label = label

    @abstractmethod
    def contribution(self, selection: SelectionBase, catalog: Catalog, subtotal: float) -> float:
        """Amount this term adds given the running subtotal."""
        ...

    def describe(self, selection: SelectionBase, catalog: Catalog) -> str:
        """Label shown in the breakdown."""
        return self.label


class PlanPriceTerm(PricingTerm):
    """Price of the resolved plan, 0 when the plan is unresolved."""

    def contribution(self, selection: SelectionBase, catalog: Catalog, subtotal: float) -> float:
        plan = resolve_plan(selection, catalog)
        return plan.value.price if plan.found else 0.0

    def describe(self, selection: SelectionBase, catalog: Catalog) -> str:
        return f"{self.label} ({resolve_plan(selection, catalog).label()})"


class ImageExtraTerm(PricingTerm):
    """License surcharge of the image, looked up in the active tab only."""

    def contribution(self, selection: SelectionBase, catalog: Catalog, subtotal: float) -> float:
        image = resolve_image(selection, catalog)
        return image.value.extra_cost if image.found else 0.0

    def describe(self, selection: SelectionBase, catalog: Catalog) -> str:
        return f"{self.label} ({resolve_image(selection, catalog).label()})"


class PercentageAddOnTerm(PricingTerm):
    """Fraction of the base plan price while a server feature is on."""

    def __init__(self, label: str, feature: str, rate: Callable[[Catalog], float]) -> None:
        super().__init__(label)
        self.feature = feature
        self.rate = rate

    def contribution(self, selection: SelectionBase, catalog: Catalog, subtotal: float) -> float:
        if not isinstance(selection, ServerSelection) or not selection.feature(self.feature):
            return 0.0
        plan = resolve_plan(selection, catalog)
        return plan.value.price * self.rate(catalog) if plan.found else 0.0


class FlatAddOnTerm(PricingTerm):
    """Flat amount while a flag on the selection is set."""

    def __init__(
        self,
        label: str,
        enabled: Callable[[SelectionBase], bool],
        amount: Callable[[Catalog], float],
    ) -> None:
        super().__init__(label)
        self.enabled = enabled
        self.amount = amount

    def contribution(self, selection: SelectionBase, catalog: Catalog, subtotal: float) -> float:
        return self.amount(catalog) if self.enabled(selection) else 0.0


class PerUnitTerm(PricingTerm):
    """Unit count times a unit price (GB, nodes)."""

    def __init__(
        self,
        label: str,
        units: Callable[[SelectionBase], float],
        unit_price: Callable[[SelectionBase, Catalog], float],
    ) -> None:
        super().__init__(label)
        self.units = units
        self.unit_price = unit_price

    def contribution(self, selection: SelectionBase, catalog: Catalog, subtotal: float) -> float:
        return self.units(selection) * self.unit_price(selection, catalog)

    def describe(self, selection: SelectionBase, catalog: Catalog) -> str:
        return f"{self.label} ({self.units(selection):g} × {self.unit_price(selection, catalog):g})"


class MultiplierTerm(PricingTerm):
    """Scales the running subtotal by a factor clamped to at least 1."""

    def __init__(self, label: str, factor: Callable[[SelectionBase], int]) -> None:
        super().__init__(label)
        self.factor = factor

    def contribution(self, selection: SelectionBase, catalog: Catalog, subtotal: float) -> float:
        return subtotal * (max(1, self.factor(selection)) - 1)

    def describe(self, selection: SelectionBase, catalog: Catalog) -> str:
        return f"{self.label} (× {max(1, self.factor(selection))})"


def _volume_rate(selection: SelectionBase, catalog: Catalog) -> float:
    if getattr(selection, "volume_type", "nvme") == "hdd":
        return catalog.pricing.hdd_per_gb
    return catalog.pricing.nvme_per_gb


def _bucket_price(selection: SelectionBase, catalog: Catalog) -> float:
    tier = catalog.storage_tier(getattr(selection, "tier_id", None))
    return tier.value.price if tier.found else 0.0


def _reserved_ip_price(selection: SelectionBase, catalog: Catalog) -> float:
    if getattr(selection, "ip_type", "IPv4") == "IPv6":
        return catalog.pricing.reserved_ipv6
    return catalog.pricing.reserved_ipv4


def _cluster_pool_price(selection: SelectionBase, catalog: Catalog) -> float:
    plan = resolve_plan(selection, catalog)
    return plan.value.price if plan.found else 0.0


# Ordered terms per wizard
PRICING_TERMS: dict[type[SelectionBase], tuple[PricingTerm, ...]] = {
    ServerSelection: (
        PlanPriceTerm("Plan"),
        ImageExtraTerm("Image license"),
        PercentageAddOnTerm("Automatic backups", "backups", lambda c: c.pricing.backup_rate),
        FlatAddOnTerm(
            "DDoS protection",
            lambda s: isinstance(s, ServerSelection) and s.feature("ddos"),
            lambda c: c.pricing.ddos_flat,
        ),
        MultiplierTerm("Quantity", lambda s: getattr(s, "quantity", 1)),
    ),
    ClusterSelection: (
        PerUnitTerm(
            "Node pool",
            lambda s: getattr(s, "node_count", 1),
            _cluster_pool_price,
        ),
        FlatAddOnTerm(
            "HA control plane",
            lambda s: getattr(s, "ha", False),
            lambda c: c.pricing.kubernetes_ha_flat,
        ),
    ),
    LoadBalancerSelection: (
        PerUnitTerm(
            "Load balancer nodes",
            lambda s: getattr(s, "node_count", 1),
            lambda s, c: c.pricing.load_balancer_node,
        ),
        FlatAddOnTerm(
            "SSL",
            lambda s: getattr(s, "ssl", False),
            lambda c: c.pricing.ssl_flat,
        ),
        MultiplierTerm("Locations", lambda s: len(s.selected_location_ids())),
    ),
    VolumeSelection: (
        PerUnitTerm("Block storage", lambda s: getattr(s, "size_gb", 0), _volume_rate),
    ),
    FileSystemSelection: (
        PerUnitTerm(
            "File system",
            lambda s: getattr(s, "size_gb", 0),
            lambda s, c: c.pricing.file_system_per_gb,
        ),
    ),
    BucketSelection: (
        PerUnitTerm("Object storage", lambda s: 1, _bucket_price),
    ),
    ReservedIpSelection: (
        PerUnitTerm("Reserved IP", lambda s: 1, _reserved_ip_price),
    ),
    ResizeSelection: (
        PerUnitTerm(
            "Resized capacity",
            lambda s: getattr(s, "new_size", 0),
            lambda s, c: getattr(s, "unit_rate", 0.0),
        ),
    ),
    VpcSelection: (),
    DeleteConfirmation: (),
}


def terms_for(selection: SelectionBase) -> tuple[PricingTerm, ...]:
    """Pricing terms that apply to the selection's wizard."""
    return PRICING_TERMS.get(type(selection), ())


def quote(selection: SelectionBase, catalog: Catalog) -> Quote:
    """Compute the itemized monthly quote for a selection.

    Example:
        >>> selection = new_server_selection(catalog)  # $10 plan, backups on
        >>> q = quote(selection, catalog)
        >>> q.monthly_display(), q.hourly_display()
        ('12.00', '0.0164')
    """
    items: list[LineItem] = []
    subtotal = 0.0
    for term in terms_for(selection):
        amount = max(0.0, term.contribution(selection, catalog, subtotal))
        if amount:
            items.append(LineItem(label=term.describe(selection, catalog), amount=amount))
            subtotal += amount

    hours = catalog.pricing.hours_per_month
    hourly = subtotal / hours if hours > 0 else 0.0
    return Quote(items=tuple(items), total=subtotal, hourly=hourly)


def compute_total(selection: SelectionBase, catalog: Catalog) -> float:
    """Monthly total of a selection (always >= 0)."""
    return quote(selection, catalog).total
