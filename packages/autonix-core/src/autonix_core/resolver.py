"""Constraint resolver for autonix-core.

Derives the option lists a wizard shows from its selection:
- plans filtered by category and a case-insensitive name search
- images of the active image tab only
- locations filtered by region tab and a case-insensitive name search

A filter that matches nothing yields an empty tuple, never an error.

Plan and image references resolve against these filtered subsets, so a
filter change can leave a chosen id transiently unresolved. Location
references resolve against the whole catalog, since multi-location wizards
keep earlier picks while the region tab moves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from autonix_core.catalog.models import (
    ALL_CATEGORIES,
    ALL_LOCATIONS_TAB,
    Catalog,
    CatalogImage,
    CatalogLocation,
    CatalogPlan,
    ImageType,
    PlanCategory,
)
from autonix_core.lookup import Resolved
from autonix_core.selection.models import (
    BucketSelection,
    ClusterSelection,
    LocationFilteredSelection,
    SelectionBase,
    ServerSelection,
    VolumeSelection,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedOptions:
    """Options currently offered by a wizard.

    Attributes:
        plans: Plans matching the category filter and search.
        images: Images of the active tab.
        locations: Locations matching the region tab and search.
    """

    plans: tuple[CatalogPlan, ...] = ()
    images: tuple[CatalogImage, ...] = ()
    locations: tuple[CatalogLocation, ...] = ()


def filter_plans(
    catalog: Catalog,
    category: str = ALL_CATEGORIES,
    search: str = "",
) -> tuple[CatalogPlan, ...]:
    """Plans whose category matches and whose name contains ``search``.

    Args:
        catalog: Source catalog.
        category: A PlanCategory value or "all".
        search: Case-insensitive substring matched against the plan name.
    """
    needle = search.lower()
    return tuple(
        plan
        for plan in catalog.plans
        if (category == ALL_CATEGORIES or plan.category == category)
        and needle in plan.name.lower()
    )


def filter_locations(
    catalog: Catalog,
    region_tab: str = ALL_LOCATIONS_TAB,
    search: str = "",
) -> tuple[CatalogLocation, ...]:
    """Locations in the region tab whose name contains ``search``."""
    needle = search.lower()
    return tuple(
        location
        for location in catalog.locations
        if (region_tab == ALL_LOCATIONS_TAB or location.region == region_tab)
        and needle in location.name.lower()
    )


def resolve(selection: SelectionBase, catalog: Catalog) -> ResolvedOptions:
    """Compute the filtered option lists for a selection.

    Example:
        >>> selection = new_server_selection(catalog)
        >>> selection.plan_category = "high_frequency"
        >>> [p.id for p in resolve(selection, catalog).plans][:2]
        ['vhf-1c-1gb-32s', 'vhf-1c-2gb-64s']
    """
    plans: tuple[CatalogPlan, ...] = ()
    images: tuple[CatalogImage, ...] = ()
    locations: tuple[CatalogLocation, ...] = ()

    if isinstance(selection, ServerSelection):
        plans = filter_plans(catalog, selection.plan_category, selection.plan_search)
        images = tuple(catalog.images_of(selection.image_type))
    elif isinstance(selection, ClusterSelection):
        plans = filter_plans(catalog, PlanCategory.CLOUD_COMPUTE.value, selection.plan_search)
    elif isinstance(selection, VolumeSelection):
        images = tuple(catalog.images_of(ImageType.OS))

    if isinstance(selection, LocationFilteredSelection):
        locations = filter_locations(catalog, selection.region_tab, selection.location_search)

    return ResolvedOptions(plans=plans, images=images, locations=locations)


def resolve_plan(selection: SelectionBase, catalog: Catalog) -> Resolved[CatalogPlan]:
    """Resolve the selection's plan within the currently offered plans.

    Wizards without a plan always return a not-found result.
    """
    if isinstance(selection, ServerSelection):
        plan_id = selection.plan_id
    elif isinstance(selection, ClusterSelection):
        plan_id = selection.pool_plan_id
    else:
        return Resolved.missing(None)

    offered = resolve(selection, catalog).plans
    for plan in offered:
        if plan.id == plan_id:
            return Resolved(ref=plan_id, value=plan)
    return Resolved.missing(plan_id)


def resolve_image(selection: SelectionBase, catalog: Catalog) -> Resolved[CatalogImage]:
    """Resolve the selection's image within its active tab.

    A server image outside the active tab, or a volume OS image while the
    volume is not bootable, is unresolved.
    """
    if isinstance(selection, ServerSelection):
        return catalog.image(selection.image_id, selection.image_type)
    if isinstance(selection, VolumeSelection) and selection.bootable:
        return catalog.image(selection.os_image_id, ImageType.OS)
    return Resolved.missing(None)


def resolve_locations(selection: SelectionBase, catalog: Catalog) -> list[Resolved[CatalogLocation]]:
    """Resolve every chosen location id, in selection order."""
    return [catalog.location(loc) for loc in selection.selected_location_ids()]


def image_required(selection: SelectionBase, catalog: Catalog) -> bool:
    """Whether the wizard must point at a catalog image.

    Custom ISO, backup and snapshot tabs draw from sources outside the
    catalog; when their partition is empty no catalog image is required.
    """
    if isinstance(selection, ServerSelection):
        return bool(catalog.images_of(selection.image_type))
    if isinstance(selection, VolumeSelection):
        return selection.bootable
    return False


# Optional server references: (catalog option group, selection field, label)
SERVER_OPTIONS = (
    ("ssh_keys", "ssh_key_id", "SSH key"),
    ("startup_scripts", "startup_script_id", "Startup script"),
    ("firewall_groups", "firewall_group_id", "Firewall group"),
)


def _server_option_errors(selection: ServerSelection, catalog: Catalog) -> list[str]:
    """Server type must resolve; optional picks only when one is set."""
    errors: list[str] = []
    if not catalog.compute_type(selection.compute_type).found:
        errors.append(f"Server type '{selection.compute_type}' is not available")
    for group, field, label in SERVER_OPTIONS:
        option_id = getattr(selection, field)
        if option_id is not None and not catalog.option(group, option_id).found:
            errors.append(f"{label} '{option_id}' not found")
    return errors


def validate_references(selection: SelectionBase, catalog: Catalog) -> list[str]:
    """Return a message for every catalog reference that does not resolve.

    Args:
        selection: Selection to inspect.
        catalog: Catalog the ids refer to.

    Returns:
        Human-readable messages, empty when every reference resolves.
    """
    errors: list[str] = []

    if isinstance(selection, (ServerSelection, ClusterSelection)):
        plan = resolve_plan(selection, catalog)
        if not plan.found:
            errors.append(f"Plan '{plan.ref or ''}' is not available")

    if image_required(selection, catalog):
        image = resolve_image(selection, catalog)
        if not image.found:
            errors.append(f"Image '{image.ref or ''}' is not available")
        elif (
            isinstance(selection, ServerSelection)
            and selection.image_version is not None
            and selection.image_version not in image.value.versions
        ):
            errors.append(
                f"Version '{selection.image_version}' is not offered for {image.value.name}"
            )

    if isinstance(selection, ServerSelection):
        errors.extend(_server_option_errors(selection, catalog))

    for location in resolve_locations(selection, catalog):
        if not location.found:
            errors.append(f"Location '{location.ref}' not found")

    if isinstance(selection, ClusterSelection):
        version = catalog.kubernetes_version(selection.version)
        if not version.found:
            errors.append(f"Kubernetes version '{version.ref or ''}' is not available")

    if isinstance(selection, BucketSelection):
        tier = catalog.storage_tier(selection.tier_id)
        if not tier.found:
            errors.append(f"Storage tier '{tier.ref or ''}' not found")

    if errors:
        logger.debug(
            "Unresolved references in %s selection: %s",
            getattr(selection, "kind", type(selection).__name__),
            "; ".join(errors),
        )

    return errors
