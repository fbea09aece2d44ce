"""Resource lifecycle for autonix-core.

Allowed status edges:

    Provisioning -> Running
    Running      -> Upgrading
    Upgrading    -> Running
    Running      -> Deleted

Anything else raises InvalidTransitionError. A transition to Deleted removes
the descriptor from its store.
"""

from __future__ import annotations

from typing import Any

import structlog

from autonix_core.descriptor import ResourceDescriptor, ResourceKind, ResourceStatus
from autonix_core.errors import DuplicateIdError, InvalidTransitionError, ResourceNotFoundError

logger = structlog.get_logger(__name__)

ALLOWED_TRANSITIONS: frozenset[tuple[ResourceStatus, ResourceStatus]] = frozenset(
    {
        (ResourceStatus.PROVISIONING, ResourceStatus.RUNNING),
        (ResourceStatus.RUNNING, ResourceStatus.UPGRADING),
        (ResourceStatus.UPGRADING, ResourceStatus.RUNNING),
        (ResourceStatus.RUNNING, ResourceStatus.DELETED),
    }
)


def can_transition(current: ResourceStatus, target: ResourceStatus) -> bool:
    """Whether ``current -> target`` is an allowed lifecycle edge."""
    return (current, target) in ALLOWED_TRANSITIONS


class ResourceStore:
    """Ordered collection of resource descriptors.

    Example:
        >>> store = ResourceStore()
        >>> store.add(descriptor)
        >>> store.transition(descriptor.id, ResourceStatus.RUNNING).status
        <ResourceStatus.RUNNING: 'Running'>
    """

    def __init__(self) -> None:
        self._items: dict[str, ResourceDescriptor] = {}

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def add(self, descriptor: ResourceDescriptor) -> ResourceDescriptor:
        if descriptor.id in self._items:
            raise DuplicateIdError("resource", descriptor.id)
        self._items[descriptor.id] = descriptor
        logger.info(
            "resource_added",
            resource_id=descriptor.id,
            kind=descriptor.kind.value,
            status=descriptor.status.value,
        )
        return descriptor

    def get(self, resource_id: str) -> ResourceDescriptor:
        try:
            return self._items[resource_id]
        except KeyError:
            raise ResourceNotFoundError(resource_id) from None

    def list(self, kind: ResourceKind | None = None) -> list[ResourceDescriptor]:
        """Descriptors in insertion order, optionally of one kind."""
        return [d for d in self._items.values() if kind is None or d.kind == kind]

    def transition(self, resource_id: str, target: ResourceStatus) -> ResourceDescriptor:
        """Move a resource along an allowed lifecycle edge.

        Returns:
            The updated descriptor. For Deleted this is the final copy,
            which is no longer in the store.

        Raises:
            ResourceNotFoundError: If the id is unknown.
            InvalidTransitionError: If the edge is not allowed.
        """
        current = self.get(resource_id)
        if not can_transition(current.status, target):
            raise InvalidTransitionError(resource_id, current.status.value, target.value)

        updated = current.with_status(target)
        if target == ResourceStatus.DELETED:
            del self._items[resource_id]
        else:
            self._items[resource_id] = updated

        logger.info(
            "resource_transitioned",
            resource_id=resource_id,
            from_status=current.status.value,
            to_status=target.value,
        )
        return updated

    def update(self, resource_id: str, **attributes: Any) -> ResourceDescriptor:
        """Merge attributes into a descriptor without touching its status."""
        updated = self.get(resource_id).with_attributes(**attributes)
        self._items[resource_id] = updated
        return updated

    def restore(self, descriptor: ResourceDescriptor) -> None:
        """Put back a previously captured descriptor, bypassing the lifecycle table.

        Used to roll back an interrupted operation.
        """
        if descriptor.id not in self._items:
            raise ResourceNotFoundError(descriptor.id)
        self._items[descriptor.id] = descriptor
