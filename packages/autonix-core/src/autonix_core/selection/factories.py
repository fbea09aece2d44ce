"""Factories seeding fresh selections from the catalog.

Each factory prefers the console's default choice and falls back to the first
matching catalog entry when the default is not in the catalog.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from autonix_core.catalog.models import Catalog, ImageType, PlanCategory
from autonix_core.selection.models import (
    BucketSelection,
    ClusterSelection,
    DeleteConfirmation,
    FileSystemSelection,
    LoadBalancerSelection,
    ReservedIpSelection,
    ResizeSelection,
    ServerSelection,
    VolumeSelection,
    VpcSelection,
)

DEFAULT_SERVER_PLAN = "voc-c-1c-2gb-50s"
DEFAULT_SERVER_LOCATION = "us-a"
DEFAULT_SERVER_IMAGE = "alma"
DEFAULT_COMPUTE_TYPE = "dedicated"
DEFAULT_POOL_PLAN = "voc-c-2c-4gb-80s"
DEFAULT_LOCATION = "us-e"
DEFAULT_BUCKET_TIER = "performance"


def _pick(ids: Sequence[str], preferred: str) -> str | None:
    if preferred in ids:
        return preferred
    return ids[0] if ids else None


def _default_location(catalog: Catalog, preferred: str = DEFAULT_LOCATION) -> str | None:
    return _pick([loc.id for loc in catalog.locations], preferred)


def new_server_selection(catalog: Catalog) -> ServerSelection:
    """Seed a deploy-server selection (plan, location, OS image, backups on)."""
    image_id = _pick([i.id for i in catalog.images_of(ImageType.OS)], DEFAULT_SERVER_IMAGE)
    image = catalog.image(image_id).value
    return ServerSelection(
        compute_type=_pick([c.id for c in catalog.compute_types], DEFAULT_COMPUTE_TYPE)
        or DEFAULT_COMPUTE_TYPE,
        location_id=_default_location(catalog, DEFAULT_SERVER_LOCATION),
        plan_id=_pick([p.id for p in catalog.plans], DEFAULT_SERVER_PLAN),
        image_type=ImageType.OS,
        image_id=image_id,
        image_version=image.versions[0] if image is not None else None,
    )


def new_cluster_selection(catalog: Catalog) -> ClusterSelection:
    """Seed a create-cluster selection with the newest Kubernetes version."""
    pool_plans = [p.id for p in catalog.plans if p.category == PlanCategory.CLOUD_COMPUTE]
    return ClusterSelection(
        version=catalog.kubernetes_versions[0] if catalog.kubernetes_versions else None,
        pool_plan_id=_pick(pool_plans, DEFAULT_POOL_PLAN),
        location_id=_default_location(catalog),
    )


def new_load_balancer_selection(catalog: Catalog) -> LoadBalancerSelection:
    """Seed a create-load-balancer selection with no locations chosen."""
    return LoadBalancerSelection()


def new_vpc_selection(catalog: Catalog) -> VpcSelection:
    return VpcSelection()


def new_volume_selection(catalog: Catalog) -> VolumeSelection:
    os_images = [i.id for i in catalog.images_of(ImageType.OS)]
    return VolumeSelection(
        location_id=_default_location(catalog),
        os_image_id=os_images[0] if os_images else None,
    )


def new_bucket_selection(catalog: Catalog) -> BucketSelection:
    return BucketSelection(
        location_id=_default_location(catalog),
        tier_id=_pick([t.id for t in catalog.storage_tiers], DEFAULT_BUCKET_TIER),
    )


def new_file_system_selection(catalog: Catalog) -> FileSystemSelection:
    sizes = catalog.file_system_sizes
    return FileSystemSelection(
        location_id=_default_location(catalog),
        size_gb=sizes[0] if sizes else 10,
    )


def new_reserved_ip_selection(catalog: Catalog) -> ReservedIpSelection:
    return ReservedIpSelection(location_id=_default_location(catalog))


def new_resize_selection(
    catalog: Catalog,
    *,
    target_name: str,
    resource_kind: Literal["volume", "file_system", "cluster"],
    current_size: int,
    volume_type: Literal["hdd", "nvme"] = "nvme",
) -> ResizeSelection:
    """Seed a resize selection with the per-unit rate of the resource kind.

    The new size starts equal to the current size, so the gate fails until
    the user picks a different value.
    """
    rates = catalog.pricing
    if resource_kind == "volume":
        unit_rate = rates.hdd_per_gb if volume_type == "hdd" else rates.nvme_per_gb
    elif resource_kind == "file_system":
        unit_rate = rates.file_system_per_gb
    else:
        unit_rate = rates.cluster_node_scale
    return ResizeSelection(
        target_name=target_name,
        resource_kind=resource_kind,
        current_size=current_size,
        new_size=current_size,
        unit_rate=unit_rate,
    )


def new_delete_confirmation(target_name: str) -> DeleteConfirmation:
    return DeleteConfirmation(target_name=target_name)
