"""Selection models for autonix-core.

One mutable model per wizard instance. Every model validates on assignment,
so an edit that breaks a field constraint raises ``pydantic.ValidationError``
and leaves the selection unchanged.

Selections hold catalog ids, never catalog objects. Ids may go stale; they are
resolved at read time by the resolver, pricing, gate and assembler.
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from autonix_core.catalog.models import (
    ALL_CATEGORIES,
    ALL_LOCATIONS_TAB,
    Catalog,
    ImageType,
    PlanCategory,
    Region,
)

REGION_TABS: tuple[str, ...] = (ALL_LOCATIONS_TAB, *(r.value for r in Region))
PLAN_CATEGORY_FILTERS: tuple[str, ...] = (ALL_CATEGORIES, *(c.value for c in PlanCategory))

DEFAULT_SERVER_FEATURES: dict[str, bool] = {
    "ipv4": True,
    "ipv6": False,
    "vpc": False,
    "backups": True,
    "ddos": False,
    "limited_user": False,
    "cloud_init": False,
}

LOAD_BALANCER_ALGORITHMS = ("Round Robin", "Least Connections")


class SelectionBase(BaseModel):
    """Common behavior of every wizard selection.

    Class attributes:
        LABEL_FIELD: Name of the field that must be non-blank, or None.
        LOCATION_REQUIRED: Whether at least one location must be chosen.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    LABEL_FIELD: ClassVar[str | None] = None
    LOCATION_REQUIRED: ClassVar[bool] = False

    def label_value(self) -> str | None:
        """Current value of the label field (None when the wizard has none)."""
        if self.LABEL_FIELD is None:
            return None
        return getattr(self, self.LABEL_FIELD)

    def selected_location_ids(self) -> list[str]:
        """Location ids currently chosen, in order."""
        return []


class LocationFilteredSelection(SelectionBase):
    """Selection with a region tab and a location search box."""

    region_tab: str = Field(default=ALL_LOCATIONS_TAB, description="Active region tab")
    location_search: str = Field(default="", description="Location name search")

    @field_validator("region_tab")
    @classmethod
    def validate_region_tab(cls, v: str) -> str:
        """Accept the fixed regions plus the All Locations pseudo-tab."""
        if v not in REGION_TABS:
            raise ValueError(f"region_tab must be one of: {', '.join(REGION_TABS)}")
        return v


class SingleLocationSelection(LocationFilteredSelection):
    """Selection deploying to exactly one location."""

    location_id: str | None = Field(default=None, description="Chosen location id")

    def selected_location_ids(self) -> list[str]:
        return [self.location_id] if self.location_id else []


class ServerSelection(SingleLocationSelection):
    """Deploy-server wizard state.

    Example:
        >>> selection = ServerSelection(plan_id="voc-c-1c-2gb-50s", location_id="us-a")
        >>> selection.set_feature("ddos", True)
        >>> selection.set_quantity(0)
        >>> selection.quantity
        1
    """

    LOCATION_REQUIRED: ClassVar[bool] = True

    kind: Literal["server"] = "server"
    compute_type: str = "dedicated"
    plan_category: str = Field(default=ALL_CATEGORIES, description="Plan category filter")
    plan_search: str = ""
    plan_id: str | None = None
    image_type: ImageType = ImageType.OS
    image_id: str | None = None
    image_version: str | None = None
    quantity: int = Field(default=1, ge=1)
    features: dict[str, bool] = Field(default_factory=lambda: dict(DEFAULT_SERVER_FEATURES))
    ssh_key_id: str | None = None
    startup_script_id: str | None = None
    firewall_group_id: str | None = None
    hostname: str = ""
    label: str = ""

    @field_validator("plan_category")
    @classmethod
    def validate_plan_category(cls, v: str) -> str:
        """Accept the plan categories plus the 'all' pseudo-category."""
        if v not in PLAN_CATEGORY_FILTERS:
            raise ValueError(f"plan_category must be one of: {', '.join(PLAN_CATEGORY_FILTERS)}")
        return v

    @field_validator("features")
    @classmethod
    def validate_features(cls, v: dict[str, bool]) -> dict[str, bool]:
        """Reject unknown feature names and fill in missing ones."""
        unknown = sorted(set(v) - set(DEFAULT_SERVER_FEATURES))
        if unknown:
            raise ValueError(f"Unknown server features: {', '.join(unknown)}")
        return {**DEFAULT_SERVER_FEATURES, **v}

    def feature(self, name: str) -> bool:
        """Whether a feature toggle is on."""
        return self.features.get(name, False)

    def set_feature(self, name: str, enabled: bool) -> None:
        """Turn a feature toggle on or off."""
        self.features = {**self.features, name: enabled}

    def set_quantity(self, quantity: int) -> None:
        """Set the instance count, clamped at 1."""
        self.quantity = max(1, quantity)

    def set_image(self, image_id: str | None, catalog: Catalog) -> None:
        """Choose an image and reset the version to its first one."""
        self.image_id = image_id
        image = catalog.image(image_id).value
        self.image_version = image.versions[0] if image is not None else None

    def set_image_type(self, image_type: ImageType | str, catalog: Catalog) -> None:
        """Switch the image tab and re-validate the chosen image.

        An image outside the new tab's partition is replaced by the first
        image of that partition, or cleared when the partition is empty.
        """
        tab = ImageType(image_type)
        partition = catalog.images_of(tab)
        self.image_type = tab
        if not any(image.id == self.image_id for image in partition):
            self.image_id = partition[0].id if partition else None
        image = catalog.image(self.image_id, tab).value
        self.image_version = image.versions[0] if image is not None else None


class ClusterSelection(SingleLocationSelection):
    """Create-Kubernetes-cluster wizard state."""

    LABEL_FIELD: ClassVar[str | None] = "name"
    LOCATION_REQUIRED: ClassVar[bool] = True

    kind: Literal["cluster"] = "cluster"
    name: str = ""
    version: str | None = None
    ha: bool = False
    firewall: bool = False
    pool_plan_id: str | None = None
    plan_search: str = ""
    node_count: int = Field(default=3, ge=1)
    vpc: str = "default"

    def set_node_count(self, node_count: int) -> None:
        """Set the node pool size, clamped at 1."""
        self.node_count = max(1, node_count)


class ForwardingRule(BaseModel):
    """Load balancer forwarding rule (frontend to backend)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    protocol: Literal["HTTP", "HTTPS", "TCP"] = "HTTP"
    port: int = Field(default=80, ge=1, le=65535)
    target_protocol: Literal["HTTP", "HTTPS", "TCP"] = "HTTP"
    target_port: int = Field(default=80, ge=1, le=65535)


class LoadBalancerFirewallRule(BaseModel):
    """Inbound rule applied in front of a load balancer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    port: str = Field(..., min_length=1)
    source: str = "0.0.0.0/0"
    ip_type: Literal["IPv4", "IPv6"] = "IPv4"


class LoadBalancerSelection(LocationFilteredSelection):
    """Create-load-balancer wizard state.

    A load balancer may span several locations. ``location_ids`` keeps the
    toggle order and never holds duplicates.
    """

    LABEL_FIELD: ClassVar[str | None] = "name"
    LOCATION_REQUIRED: ClassVar[bool] = True

    kind: Literal["load_balancer"] = "load_balancer"
    name: str = ""
    location_ids: list[str] = Field(default_factory=list)
    algorithm: str = "Round Robin"
    node_count: int = Field(default=1, ge=1)
    ssl: bool = False
    forwarding_rules: list[ForwardingRule] = Field(default_factory=lambda: [ForwardingRule()])
    firewall_rules: list[LoadBalancerFirewallRule] = Field(default_factory=list)
    vpc_by_location: dict[str, str] = Field(default_factory=dict)

    @field_validator("location_ids")
    @classmethod
    def validate_location_ids(cls, v: list[str]) -> list[str]:
        """Reject duplicate location ids."""
        if len(set(v)) != len(v):
            raise ValueError("location_ids must not contain duplicates")
        return v

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        if v not in LOAD_BALANCER_ALGORITHMS:
            raise ValueError(f"algorithm must be one of: {', '.join(LOAD_BALANCER_ALGORITHMS)}")
        return v

    def selected_location_ids(self) -> list[str]:
        return list(self.location_ids)

    def toggle_location(self, location_id: str) -> None:
        """Remove the location if selected, append it otherwise.

        Removing a location also drops its VPC choice.
        """
        if location_id in self.location_ids:
            self.location_ids = [loc for loc in self.location_ids if loc != location_id]
            self.vpc_by_location = {
                loc: vpc for loc, vpc in self.vpc_by_location.items() if loc != location_id
            }
        else:
            self.location_ids = [*self.location_ids, location_id]

    def set_vpc(self, location_id: str, vpc: str) -> None:
        """Attach a VPC choice to one of the selected locations."""
        if location_id not in self.location_ids:
            raise ValueError(f"Location '{location_id}' is not selected")
        self.vpc_by_location = {**self.vpc_by_location, location_id: vpc}

    def set_node_count(self, node_count: int) -> None:
        """Set the node count, clamped at 1."""
        self.node_count = max(1, node_count)

    def add_forwarding_rule(self, rule: ForwardingRule | None = None) -> None:
        self.forwarding_rules = [*self.forwarding_rules, rule or ForwardingRule()]

    def remove_forwarding_rule(self, index: int) -> None:
        self.forwarding_rules = _without_index(self.forwarding_rules, index)

    def add_firewall_rule(self, rule: LoadBalancerFirewallRule) -> None:
        self.firewall_rules = [*self.firewall_rules, rule]

    def remove_firewall_rule(self, index: int) -> None:
        self.firewall_rules = _without_index(self.firewall_rules, index)


class RouteSpec(BaseModel):
    """Static route entered in the create-VPC wizard."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    destination: str = ""
    prefix: str = "24"
    next_hop: str = ""


class VpcSelection(SingleLocationSelection):
    """Create-VPC wizard state."""

    LABEL_FIELD: ClassVar[str | None] = "name"
    LOCATION_REQUIRED: ClassVar[bool] = True

    kind: Literal["vpc"] = "vpc"
    name: str = ""
    ip_mode: Literal["auto", "manual"] = "auto"
    manual_address: str = ""
    manual_prefix: str = "24"
    route_mode: Literal["none", "custom"] = "none"
    routes: list[RouteSpec] = Field(default_factory=list)

    def add_route(self, route: RouteSpec | None = None) -> None:
        self.routes = [*self.routes, route or RouteSpec()]

    def remove_route(self, index: int) -> None:
        self.routes = _without_index(self.routes, index)


class VolumeSelection(SingleLocationSelection):
    """Create-block-storage-volume wizard state."""

    LABEL_FIELD: ClassVar[str | None] = "label"
    LOCATION_REQUIRED: ClassVar[bool] = True

    kind: Literal["volume"] = "volume"
    label: str = ""
    volume_type: Literal["hdd", "nvme"] = "nvme"
    bootable: bool = False
    os_image_id: str | None = None
    size_gb: int = Field(default=10, ge=10, le=10000)


class BucketSelection(SingleLocationSelection):
    """Create-object-storage-bucket wizard state."""

    LABEL_FIELD: ClassVar[str | None] = "label"
    LOCATION_REQUIRED: ClassVar[bool] = True

    kind: Literal["bucket"] = "bucket"
    label: str = ""
    tier_id: str | None = None


class FileSystemSelection(SingleLocationSelection):
    """Create-file-system wizard state. ``size_gb`` moves along the catalog size steps."""

    LABEL_FIELD: ClassVar[str | None] = "label"
    LOCATION_REQUIRED: ClassVar[bool] = True

    kind: Literal["file_system"] = "file_system"
    label: str = ""
    size_gb: int = Field(default=10, ge=1)

    def step_size(self, catalog: Catalog, steps: int) -> None:
        """Move ``steps`` positions along the size steps, clamped at both ends."""
        sizes = catalog.file_system_sizes
        if not sizes:
            return
        index = sizes.index(self.size_gb) if self.size_gb in sizes else 0
        self.size_gb = sizes[min(max(index + steps, 0), len(sizes) - 1)]


class ReservedIpSelection(SingleLocationSelection):
    """Reserve-new-IP wizard state."""

    LOCATION_REQUIRED: ClassVar[bool] = True

    kind: Literal["reserved_ip"] = "reserved_ip"
    label: str = ""
    ip_type: Literal["IPv4", "IPv6"] = "IPv4"


class ResizeSelection(SelectionBase):
    """Resize of an existing volume, file system or cluster node pool.

    Sizes are GB for storage and node counts for clusters.
    """

    kind: Literal["resize"] = "resize"
    target_name: str
    resource_kind: Literal["volume", "file_system", "cluster"]
    current_size: int = Field(..., ge=0)
    new_size: int = Field(..., ge=0)
    unit_rate: float = Field(..., ge=0)

    def set_new_size(self, new_size: int) -> None:
        """Set the requested size; node pools never drop below one node."""
        floor = 1 if self.resource_kind == "cluster" else 0
        self.new_size = max(floor, new_size)


class DeleteConfirmation(SelectionBase):
    """Typed confirmation guarding a destructive action."""

    kind: Literal["delete"] = "delete"
    target_name: str
    confirm_text: str = ""

    @property
    def matches(self) -> bool:
        """Exact, case-sensitive comparison without trimming."""
        return self.confirm_text == self.target_name


Selection = Annotated[
    Union[
        ServerSelection,
        ClusterSelection,
        LoadBalancerSelection,
        VpcSelection,
        VolumeSelection,
        BucketSelection,
        FileSystemSelection,
        ReservedIpSelection,
        ResizeSelection,
        DeleteConfirmation,
    ],
    Field(discriminator="kind"),
]

_selection_adapter: TypeAdapter[Any] = TypeAdapter(Selection)


def parse_selection(data: dict[str, Any]) -> SelectionBase:
    """Validate a raw mapping (e.g. loaded from YAML) into a selection.

    Raises:
        pydantic.ValidationError: If ``kind`` is missing or a field is invalid.
    """
    return _selection_adapter.validate_python(data)


def _without_index(items: list[Any], index: int) -> list[Any]:
    if not 0 <= index < len(items):
        raise IndexError(f"No item at index {index}")
    return [item for i, item in enumerate(items) if i != index]
