"""Builder facade for autonix-core.

ResourceBuilder binds one selection to a catalog and recomputes options,
quote and readiness from the current selection on every read. A builder is
created per wizard instance and discarded after submit.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from autonix_core.assembler import assemble
from autonix_core.catalog.models import Catalog
from autonix_core.descriptor import ResourceDescriptor
from autonix_core.errors import NotReadyError, OperationInFlightError, SimulatedOperationFailure
from autonix_core.gate import GateReport, check_readiness
from autonix_core.ids import IdFactory
from autonix_core.operations import OperationRunner, SubmissionSink
from autonix_core.pricing import Quote, quote
from autonix_core.resolver import ResolvedOptions, resolve
from autonix_core.selection.factories import (
    new_bucket_selection,
    new_cluster_selection,
    new_file_system_selection,
    new_load_balancer_selection,
    new_reserved_ip_selection,
    new_server_selection,
    new_volume_selection,
    new_vpc_selection,
)
from autonix_core.selection.models import SelectionBase

logger = structlog.get_logger(__name__)

SELECTION_FACTORIES: dict[str, Callable[[Catalog], SelectionBase]] = {
    "server": new_server_selection,
    "cluster": new_cluster_selection,
    "load_balancer": new_load_balancer_selection,
    "vpc": new_vpc_selection,
    "volume": new_volume_selection,
    "bucket": new_bucket_selection,
    "file_system": new_file_system_selection,
    "reserved_ip": new_reserved_ip_selection,
}


class ResourceBuilder:
    """One wizard instance: a selection plus the catalog it refers to.

    Example:
        >>> builder = ResourceBuilder.new("server", catalog)
        >>> builder.update("hostname", "web-1")
        >>> builder.quote.monthly_display()
        '12.00'
        >>> descriptor = asyncio.run(builder.submit(SimulatedSink(delay=0)))
    """

    def __init__(
        self,
        selection: SelectionBase,
        catalog: Catalog,
        *,
        ids: IdFactory | None = None,
    ) -> None:
        self.selection = selection
        self.catalog = catalog
        self._ids = ids
        self._submitting = False

    @classmethod
    def new(cls, kind: str, catalog: Catalog, *, ids: IdFactory | None = None) -> ResourceBuilder:
        """Start a builder with a freshly seeded selection of ``kind``.

        Raises:
            KeyError: If ``kind`` is not a creation wizard.
        """
        try:
            factory = SELECTION_FACTORIES[kind]
        except KeyError:
            raise KeyError(
                f"Unknown resource kind '{kind}'. Available: {', '.join(SELECTION_FACTORIES)}"
            ) from None
        return cls(factory(catalog), catalog, ids=ids)

    def update(self, field: str, value: Any) -> None:
        """Apply one raw edit.

        Raises:
            pydantic.ValidationError: If the value violates the field's
                constraints. The selection is left unchanged.
        """
        setattr(self.selection, field, value)

    @property
    def options(self) -> ResolvedOptions:
        return resolve(self.selection, self.catalog)

    @property
    def quote(self) -> Quote:
        return quote(self.selection, self.catalog)

    def readiness(self) -> GateReport:
        return check_readiness(self.selection, self.catalog)

    @property
    def ready(self) -> bool:
        return self.readiness().ready

    @property
    def submitting(self) -> bool:
        """Whether a submit from this builder is pending."""
        return self._submitting

    async def submit(
        self,
        sink: SubmissionSink,
        *,
        runner: OperationRunner | None = None,
    ) -> ResourceDescriptor:
        """Assemble the descriptor and hand it to the sink once.

        With a runner, the deploy goes through the runner so the descriptor
        lands in its store and the single-operation rule applies.

        A second submit while one is pending is refused before anything is
        assembled, so one wizard deploys at most one descriptor at a time.

        Raises:
            OperationInFlightError: If a submit from this builder is pending.
            NotReadyError: If the readiness gate fails.
            SimulatedOperationFailure: If the sink refuses the descriptor.
        """
        if self._submitting:
            raise OperationInFlightError(type(self.selection).__name__, "submit")
        report = self.readiness()
        if not report.ready:
            raise NotReadyError(report.failures)

        self._submitting = True
        try:
            return await self._deploy(sink, runner)
        finally:
            self._submitting = False

    async def _deploy(
        self, sink: SubmissionSink, runner: OperationRunner | None
    ) -> ResourceDescriptor:
        descriptor = assemble(self.selection, self.catalog, ids=self._ids)
        logger.info("submitting", resource_id=descriptor.id, kind=descriptor.kind.value)

        if runner is not None:
            return await runner.deploy(descriptor, sink)

        if not await sink.submit(descriptor):
            raise SimulatedOperationFailure(
                f"Deployment of {descriptor.name} failed",
                internal_details=f"sink refused descriptor {descriptor.id}",
            )
        return descriptor
