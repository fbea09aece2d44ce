"""Catalog reference data for autonix-core."""

from __future__ import annotations

from autonix_core.catalog.models import (
    ALL_CATEGORIES,
    ALL_LOCATIONS_TAB,
    DEFAULT_FLAG,
    Catalog,
    CatalogImage,
    CatalogLocation,
    CatalogOption,
    CatalogPlan,
    ComputeType,
    ImageType,
    PlanCategory,
    PricingRates,
    Region,
    StorageTier,
)

__all__ = [
    "ALL_CATEGORIES",
    "ALL_LOCATIONS_TAB",
    "DEFAULT_FLAG",
    "Catalog",
    "CatalogImage",
    "CatalogLocation",
    "CatalogOption",
    "CatalogPlan",
    "ComputeType",
    "ImageType",
    "PlanCategory",
    "PricingRates",
    "Region",
    "StorageTier",
]
