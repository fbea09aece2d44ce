"""Resource descriptor models for autonix-core.

A ResourceDescriptor is the finished record produced on submit and appended
to a ResourceStore. Descriptors are frozen; status and attribute changes
produce new copies.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ResourceKind(str, Enum):
    """Kinds of resource the console can create."""

    SERVER = "server"
    CLUSTER = "cluster"
    LOAD_BALANCER = "load_balancer"
    VPC = "vpc"
    VOLUME = "volume"
    BUCKET = "bucket"
    FILE_SYSTEM = "file_system"
    RESERVED_IP = "reserved_ip"


class ResourceStatus(str, Enum):
    """Lifecycle status of a resource."""

    PROVISIONING = "Provisioning"
    RUNNING = "Running"
    UPGRADING = "Upgrading"
    DELETED = "Deleted"


class ResourceDescriptor(BaseModel):
    """Finished, immutable description of a created resource.

    Attributes:
        id: Prefix plus millisecond timestamp (e.g., "vps-1718000000000").
        kind: Resource kind.
        name: Display name.
        status: Lifecycle status, Provisioning on creation.
        cost: Monthly cost snapshot (per instance for servers).
        created_at: Creation time (UTC).
        location: Resolved location label, "Unknown" when unresolved.
        flag: Location flag.
        attributes: Resolved human-readable fields (plan, image, size, ...).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    kind: ResourceKind
    name: str
    status: ResourceStatus = ResourceStatus.PROVISIONING
    cost: float = Field(default=0.0, ge=0)
    created_at: datetime
    location: str
    flag: str
    attributes: dict[str, Any] = Field(default_factory=dict)

    def with_status(self, status: ResourceStatus) -> ResourceDescriptor:
        """Copy of this descriptor with a new status."""
        return self.model_copy(update={"status": status})

    def with_attributes(self, **attributes: Any) -> ResourceDescriptor:
        """Copy of this descriptor with attributes merged in."""
        return self.model_copy(update={"attributes": {**self.attributes, **attributes}})
