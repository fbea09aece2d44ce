"""Catalog models for autonix-core.

This module defines the read-only reference data the engine works from:
- CatalogLocation, Region: datacenter locations grouped by region
- CatalogPlan, PlanCategory: compute plans with monthly prices
- CatalogImage, ImageType: installable images partitioned by tab
- StorageTier, ComputeType, CatalogOption: smaller option lists
- PricingRates: every constant used by the pricing pipeline
- Catalog: root model with tagged lookups

All models are frozen. The engine never mutates a Catalog.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from autonix_core.lookup import Resolved, resolve_by_id

# Pseudo-tabs accepted by the resolver in addition to enum members
ALL_LOCATIONS_TAB = "All Locations"
ALL_CATEGORIES = "all"

DEFAULT_FLAG = "🏳️"


class Region(str, Enum):
    """Fixed set of regions used to group locations."""

    AMERICAS = "Americas"
    EUROPE = "Europe"
    ASIA = "Asia"
    OCEANIA = "Oceania"


class PlanCategory(str, Enum):
    """Compute plan families."""

    CLOUD_COMPUTE = "cloud_compute"
    HIGH_FREQUENCY = "high_frequency"
    HIGH_PERFORMANCE = "high_performance"


class ImageType(str, Enum):
    """Image tabs of the deploy wizard.

    Values:
        OS: Operating system images.
        APPS: One-click application images.
        ISO_IPXE: Custom ISO or iPXE boot.
        ISO_LIBRARY: Public ISO library.
        BACKUP: Restore from a backup.
        SNAPSHOT: Restore from a snapshot.
    """

    OS = "os"
    APPS = "apps"
    ISO_IPXE = "iso_ipxe"
    ISO_LIBRARY = "iso_library"
    BACKUP = "backup"
    SNAPSHOT = "snapshot"


class CatalogLocation(BaseModel):
    """A datacenter location.

    Attributes:
        id: Unique location id (e.g., "us-a").
        name: Display name (e.g., "Atlanta").
        region: Region the location belongs to.
        flag: Display flag.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Unique location id")
    name: str = Field(..., min_length=1, description="Display name")
    region: Region = Field(..., description="Region group")
    flag: str = Field(default=DEFAULT_FLAG, description="Display flag")


class CatalogPlan(BaseModel):
    """A compute plan.

    The id uniquely determines every other field.

    Example:
        >>> plan = CatalogPlan(
        ...     id="voc-c-1c-2gb-50s",
        ...     name="voc-c-1c-2gb-50s",
        ...     category=PlanCategory.CLOUD_COMPUTE,
        ...     vcpu=1,
        ...     ram="2 GB",
        ...     disk="50 GB NVMe",
        ...     bandwidth="2 TB",
        ...     price=10,
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Unique plan id")
    name: str = Field(..., min_length=1, description="Display name")
    category: PlanCategory = Field(..., description="Plan family")
    vcpu: int = Field(..., ge=1, description="vCPU count")
    ram: str = Field(..., description="RAM label")
    disk: str = Field(..., description="Disk label")
    bandwidth: str = Field(..., description="Bandwidth label")
    price: float = Field(..., ge=0, description="Monthly price")


class CatalogImage(BaseModel):
    """An installable image.

    Attributes:
        id: Image id, unique within the catalog.
        name: Display name.
        type: Image tab the image belongs to.
        versions: Available versions (non-empty).
        extra_cost: Monthly license surcharge (default 0).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: ImageType
    versions: list[str] = Field(..., min_length=1)
    extra_cost: float = Field(default=0.0, ge=0)


class ComputeType(BaseModel):
    """Server type offered by the deploy wizard (shared, dedicated, ...)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""


class StorageTier(BaseModel):
    """Object storage tier with a flat monthly price."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., ge=0)


class CatalogOption(BaseModel):
    """Generic id/name option (SSH keys, startup scripts, firewall groups)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class PricingRates(BaseModel):
    """Constants consumed by the pricing pipeline.

    Attributes:
        hours_per_month: Divisor for hourly display prices.
        backup_rate: Fraction of the plan price charged for automatic backups.
        ddos_flat: Flat monthly DDoS protection price.
        kubernetes_ha_flat: Flat monthly price of a highly-available control plane.
        load_balancer_node: Monthly price per load balancer node.
        ssl_flat: Flat monthly SSL price for load balancers.
        hdd_per_gb: Block storage HDD price per GB.
        nvme_per_gb: Block storage NVMe price per GB.
        file_system_per_gb: File system price per GB.
        reserved_ipv4: Monthly price of a reserved IPv4 address.
        reserved_ipv6: Monthly price of a reserved IPv6 address.
        cluster_node_scale: Monthly price per node when scaling a node pool.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    hours_per_month: float = Field(default=730.0, ge=0)
    backup_rate: float = Field(default=0.20, ge=0)
    ddos_flat: float = Field(default=10.0, ge=0)
    kubernetes_ha_flat: float = Field(default=40.0, ge=0)
    load_balancer_node: float = Field(default=10.0, ge=0)
    ssl_flat: float = Field(default=10.0, ge=0)
    hdd_per_gb: float = Field(default=0.025, ge=0)
    nvme_per_gb: float = Field(default=0.10, ge=0)
    file_system_per_gb: float = Field(default=0.10, ge=0)
    reserved_ipv4: float = Field(default=3.0, ge=0)
    reserved_ipv6: float = Field(default=0.0, ge=0)
    cluster_node_scale: float = Field(default=20.0, ge=0)


class Catalog(BaseModel):
    """Root catalog model.

    Loaded from catalog.yaml. Lookups return ``Resolved`` results so
    unresolved references are an explicit, testable branch.

    Example:
        >>> catalog = Catalog.from_yaml(Path("catalog.yaml"))
        >>> catalog.plan("voc-c-1c-2gb-50s").value.price
        10.0
        >>> catalog.location("atlantis").label()
        'Unknown'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    locations: list[CatalogLocation] = Field(default_factory=list)
    plans: list[CatalogPlan] = Field(default_factory=list)
    images: list[CatalogImage] = Field(default_factory=list)
    compute_types: list[ComputeType] = Field(default_factory=list)
    storage_tiers: list[StorageTier] = Field(default_factory=list)
    ssh_keys: list[CatalogOption] = Field(default_factory=list)
    startup_scripts: list[CatalogOption] = Field(default_factory=list)
    firewall_groups: list[CatalogOption] = Field(default_factory=list)
    kubernetes_versions: list[str] = Field(default_factory=list)
    file_system_sizes: list[int] = Field(default_factory=list)
    pricing: PricingRates = Field(default_factory=PricingRates)

    @model_validator(mode="after")
    def ids_are_unique(self) -> Catalog:
        """Reject duplicate ids within each entry list."""
        groups: dict[str, list[Any]] = {
            "locations": self.locations,
            "plans": self.plans,
            "images": self.images,
            "compute_types": self.compute_types,
            "storage_tiers": self.storage_tiers,
        }
        for group, entries in groups.items():
            seen: set[str] = set()
            for entry in entries:
                if entry.id in seen:
                    raise ValueError(f"Duplicate id '{entry.id}' in {group}")
                seen.add(entry.id)
        return self

    @classmethod
    def from_yaml(cls, path: Path) -> Catalog:
        """Load a Catalog from a YAML file.

        Args:
            path: Path to the catalog file.

        Returns:
            Parsed and validated Catalog.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            yaml.YAMLError: If the YAML is malformed.
            pydantic.ValidationError: If validation fails.
        """
        if not path.exists():
            raise FileNotFoundError(f"Catalog not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}

        return cls.model_validate(data)

    def location(self, location_id: str | None) -> Resolved[CatalogLocation]:
        """Resolve a location id."""
        return resolve_by_id(self.locations, location_id)

    def plan(self, plan_id: str | None) -> Resolved[CatalogPlan]:
        """Resolve a plan id."""
        return resolve_by_id(self.plans, plan_id)

    def image(
        self,
        image_id: str | None,
        image_type: ImageType | None = None,
    ) -> Resolved[CatalogImage]:
        """Resolve an image id, optionally only within one image tab.

        Args:
            image_id: Image id to resolve.
            image_type: When given, an image of another type is unresolved.
        """
        candidates = self.images if image_type is None else self.images_of(image_type)
        return resolve_by_id(candidates, image_id)

    def images_of(self, image_type: ImageType) -> list[CatalogImage]:
        """Return the partition of images belonging to one tab, in catalog order."""
        return [image for image in self.images if image.type == image_type]

    def compute_type(self, type_id: str | None) -> Resolved[ComputeType]:
        """Resolve a compute type id."""
        return resolve_by_id(self.compute_types, type_id)

    def storage_tier(self, tier_id: str | None) -> Resolved[StorageTier]:
        """Resolve an object storage tier id."""
        return resolve_by_id(self.storage_tiers, tier_id)

    def option(self, group: str, option_id: str | None) -> Resolved[CatalogOption]:
        """Resolve an id in one of the option groups.

        Args:
            group: "ssh_keys", "startup_scripts" or "firewall_groups".
            option_id: Option id to resolve.
        """
        return resolve_by_id(getattr(self, group), option_id)

    def kubernetes_version(self, version: str | None) -> Resolved[str]:
        """Resolve a Kubernetes version string."""
        if version and version in self.kubernetes_versions:
            return Resolved(ref=version, value=version)
        return Resolved.missing(version)
