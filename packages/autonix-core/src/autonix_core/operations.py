"""Simulated asynchronous operations for autonix-core.

OperationRunner drives every long-running console action as one awaited
delay on the running event loop:

- deploy: hand a descriptor to a submission sink, then store it
- check_upgrade: report the next Kubernetes minor version
- upgrade: Running -> Upgrading (version bumped) -> Running
- regenerate_credentials: issue a new cluster token
- install_dashboard: mark the Kubernetes dashboard as installed

At most one operation runs per resource id. Cancellation or failure rolls
the resource back to its pre-operation descriptor and frees the slot.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol

import structlog

from autonix_core.config import EngineSettings
from autonix_core.descriptor import ResourceDescriptor, ResourceStatus
from autonix_core.errors import (
    InvalidTransitionError,
    OperationInFlightError,
    SimulatedOperationFailure,
)
from autonix_core.ids import IdFactory, default_ids
from autonix_core.lifecycle import ResourceStore

logger = structlog.get_logger(__name__)

_VERSION_PATTERN = re.compile(r"^v?(\d+)\.(\d+)")


class SubmissionSink(Protocol):
    """Backend receiving finished descriptors."""

    async def submit(self, descriptor: ResourceDescriptor) -> bool:
        """Accept the descriptor. Returns False when the backend refuses it."""
        ...


class SimulatedSink:
    """Sink that accepts (or refuses) every descriptor after a fixed delay.

    Args:
        delay: Seconds to wait before answering.
        succeed: Answer returned by ``submit``.
    """

    def __init__(self, delay: float = 1.5, succeed: bool = True) -> None:
        self.delay = delay
        self.succeed = succeed
        self.submitted: list[ResourceDescriptor] = []

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> SimulatedSink:
        return cls(delay=settings.deploy_delay)

    async def submit(self, descriptor: ResourceDescriptor) -> bool:
        await asyncio.sleep(self.delay)
        if self.succeed:
            self.submitted.append(descriptor)
        return self.succeed


def next_minor_version(version: str) -> str:
    """Version string of the next Kubernetes minor release.

    Example:
        >>> next_minor_version("v1.34.1+2")
        'v1.35.0'
    """
    match = _VERSION_PATTERN.match(version)
    if match is None:
        raise ValueError(f"Unrecognized version: {version}")
    major, minor = int(match.group(1)), int(match.group(2))
    return f"v{major}.{minor + 1}.0"


class OperationRunner:
    """Runs simulated operations against a ResourceStore.

    Args:
        store: Store holding the resources operated on.
        settings: Delays for each operation. Defaults to EngineSettings().
        ids: Id factory used for credential tokens.

    Example:
        >>> runner = OperationRunner(store, EngineSettings.instant())
        >>> asyncio.run(runner.deploy(descriptor, SimulatedSink(delay=0)))
        >>> runner.is_busy(descriptor.id)
        False
    """

    def __init__(
        self,
        store: ResourceStore,
        settings: EngineSettings | None = None,
        ids: IdFactory | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or EngineSettings()
        self._ids = ids or default_ids
        self._in_flight: dict[str, str] = {}

    def is_busy(self, resource_id: str) -> bool:
        """Whether an operation is pending for the resource."""
        return resource_id in self._in_flight

    def running_operation(self, resource_id: str) -> str | None:
        return self._in_flight.get(resource_id)

    @contextmanager
    def _slot(self, resource_id: str, operation: str) -> Iterator[Any]:
        """Claim the resource's single operation slot.

        On cancellation or error the resource is restored to the descriptor
        captured when the slot was claimed.
        """
        if resource_id in self._in_flight:
            raise OperationInFlightError(resource_id, self._in_flight[resource_id])

        self._in_flight[resource_id] = operation
        snapshot = self.store.get(resource_id) if resource_id in self.store else None
        log = logger.bind(resource_id=resource_id, operation=operation)
        log.info("operation_started")
        try:
            yield log
        except (asyncio.CancelledError, Exception) as e:
            if snapshot is not None and resource_id in self.store:
                self.store.restore(snapshot)
            log.warning("operation_aborted", error_type=type(e).__name__)
            raise
        else:
            log.info("operation_completed")
        finally:
            del self._in_flight[resource_id]

    async def deploy(
        self, descriptor: ResourceDescriptor, sink: SubmissionSink
    ) -> ResourceDescriptor:
        """Submit a descriptor and add it to the store once accepted.

        The sink is called exactly once; there are no retries.

        Raises:
            OperationInFlightError: If the descriptor id is already busy.
            SimulatedOperationFailure: If the sink refuses the descriptor.
        """
        with self._slot(descriptor.id, "deploy"):
            accepted = await sink.submit(descriptor)
            if not accepted:
                raise SimulatedOperationFailure(
                    f"Deployment of {descriptor.name} failed",
                    internal_details=f"sink refused descriptor {descriptor.id}",
                )
            return self.store.add(descriptor)

    async def check_upgrade(self, resource_id: str) -> str:
        """Look up the next available version of a cluster."""
        with self._slot(resource_id, "check_upgrade"):
            current = self.store.get(resource_id)
            await asyncio.sleep(self.settings.check_upgrade_delay)
            available = next_minor_version(str(current.attributes.get("version", "")))
            self.store.update(resource_id, available_upgrade=available)
            return available

    async def upgrade(self, resource_id: str, target_version: str) -> ResourceDescriptor:
        """Upgrade a running cluster to ``target_version``.

        The cluster enters Upgrading after the upgrade delay and returns to
        Running after the auto-revert delay.
        """
        with self._slot(resource_id, "upgrade"):
            current = self.store.get(resource_id)
            if current.status != ResourceStatus.RUNNING:
                raise InvalidTransitionError(
                    resource_id, current.status.value, ResourceStatus.UPGRADING.value
                )
            await asyncio.sleep(self.settings.upgrade_delay)
            self.store.transition(resource_id, ResourceStatus.UPGRADING)
            self.store.update(resource_id, version=target_version, available_upgrade=None)
            await asyncio.sleep(self.settings.upgrade_revert_delay)
            return self.store.transition(resource_id, ResourceStatus.RUNNING)

    async def regenerate_credentials(self, resource_id: str) -> str:
        """Issue a fresh cluster token and store it on the descriptor."""
        with self._slot(resource_id, "regenerate_credentials"):
            self.store.get(resource_id)
            await asyncio.sleep(self.settings.regenerate_delay)
            token = f"new-token-{self._ids.next_stamp()}"
            self.store.update(resource_id, token=token)
            logger.info("credentials_regenerated", resource_id=resource_id, token=token)
            return token

    async def install_dashboard(self, resource_id: str) -> ResourceDescriptor:
        with self._slot(resource_id, "install_dashboard"):
            self.store.get(resource_id)
            await asyncio.sleep(self.settings.dashboard_delay)
            return self.store.update(resource_id, dashboard_installed=True)
