"""Readiness gate for autonix-core.

The gate decides whether a selection may be submitted. Rules are chosen by
the selection's class attributes and type, so every wizard shares one rule
set:

- label: the wizard's label/name field is not blank
- location: at least one location is chosen
- references: every catalog reference resolves
- confirmation: typed text equals the target name exactly
- resize: the new size differs (volumes must strictly grow)
- size_step: file system size is one of the catalog steps
- network: manual VPC ranges and custom routes are filled in

The gate is pure and never raises. A rule that raises is reported as an
error result and logged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Generic, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field

from autonix_core.catalog.models import Catalog
from autonix_core.resolver import validate_references
from autonix_core.selection.models import (
    DeleteConfirmation,
    FileSystemSelection,
    ResizeSelection,
    SelectionBase,
    VpcSelection,
)

logger = structlog.get_logger(__name__)

S = TypeVar("S", bound=SelectionBase)


class GateStatus(str, Enum):
    """Outcome of one gate rule.

    Attributes:
        PASSED: Rule satisfied
        FAILED: Rule not satisfied
        ERROR: Rule raised while evaluating (counts as failed)
    """

    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


class GateResult(BaseModel):
    """Result of a single gate rule."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Rule name")
    status: GateStatus = Field(..., description="Rule status")
    message: str = Field(default="", description="Why the rule failed")

    @property
    def passed(self) -> bool:
        return self.status == GateStatus.PASSED


class GateReport(BaseModel):
    """All rule results for one selection.

    Example:
        >>> report = check_readiness(selection, catalog)
        >>> report.ready
        False
        >>> report.failures
        ['Name is required']
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    results: list[GateResult] = Field(default_factory=list)

    @property
    def ready(self) -> bool:
        """True when every applicable rule passed."""
        return all(result.passed for result in self.results)

    @property
    def failures(self) -> list[str]:
        """Messages of the failing rules, in rule order."""
        return [result.message for result in self.results if not result.passed]

    def to_text(self) -> str:
        """Plain-text report for CLI output."""
        lines = [f"Ready: {'yes' if self.ready else 'no'}"]
        for result in self.results:
            icon = "✅" if result.passed else "❌"
            line = f"  {icon} {result.name}: {result.status.value}"
            if result.message:
                line += f" ({result.message})"
            lines.append(line)
        return "\n".join(lines)


class GateRule(ABC):
    """Base class for gate rules.

    Subclasses implement ``applies_to`` and ``_evaluate``; ``run`` converts
    exceptions into ERROR results.
    """

    name: str = "rule"

    def __init__(self) -> None:
        self._log = logger.bind(rule=self.name)

    @abstractmethod
    def applies_to(self, selection: SelectionBase) -> bool:
        """Whether the rule is relevant for this selection."""
        ...

    @abstractmethod
    def _evaluate(self, selection: SelectionBase, catalog: Catalog) -> GateResult:
        """Evaluate the rule. Exceptions are caught by ``run``."""
        ...

    def run(self, selection: SelectionBase, catalog: Catalog) -> GateResult:
        try:
            return self._evaluate(selection, catalog)
        except Exception as e:
            self._log.error("gate_rule_error", error=str(e), error_type=type(e).__name__)
            return GateResult(
                name=self.name,
                status=GateStatus.ERROR,
                message=f"Rule failed with error: {type(e).__name__}",
            )

    def _make_result(self, ok: bool, message: str) -> GateResult:
        if ok:
            return GateResult(name=self.name, status=GateStatus.PASSED)
        return GateResult(name=self.name, status=GateStatus.FAILED, message=message)


class LabelRule(GateRule):
    name = "label"

    def applies_to(self, selection: SelectionBase) -> bool:
        return selection.LABEL_FIELD is not None

    def _evaluate(self, selection: SelectionBase, catalog: Catalog) -> GateResult:
        value = selection.label_value() or ""
        field = (selection.LABEL_FIELD or "label").capitalize()
        return self._make_result(bool(value.strip()), f"{field} is required")


class LocationRule(GateRule):
    name = "location"

    def applies_to(self, selection: SelectionBase) -> bool:
        return selection.LOCATION_REQUIRED

    def _evaluate(self, selection: SelectionBase, catalog: Catalog) -> GateResult:
        return self._make_result(
            bool(selection.selected_location_ids()), "Select at least one location"
        )


class ReferencesRule(GateRule):
    name = "references"

    def applies_to(self, selection: SelectionBase) -> bool:
        return True

    def _evaluate(self, selection: SelectionBase, catalog: Catalog) -> GateResult:
        errors = validate_references(selection, catalog)
        return self._make_result(not errors, "; ".join(errors))


class SelectionTypeRule(GateRule, Generic[S]):
    """Rule that only checks one selection type.

    Subclasses set ``selection_type`` and implement ``_check`` against the
    narrowed selection.
    """

    selection_type: type[S]

    def applies_to(self, selection: SelectionBase) -> bool:
        return isinstance(selection, self.selection_type)

    def _evaluate(self, selection: SelectionBase, catalog: Catalog) -> GateResult:
        if not isinstance(selection, self.selection_type):
            raise TypeError(
                f"{self.name} rule expects {self.selection_type.__name__}, "
                f"got {type(selection).__name__}"
            )
        return self._check(selection, catalog)

    @abstractmethod
    def _check(self, selection: S, catalog: Catalog) -> GateResult: ...


class ConfirmationRule(SelectionTypeRule[DeleteConfirmation]):
    name = "confirmation"
    selection_type = DeleteConfirmation

    def _check(self, selection: DeleteConfirmation, catalog: Catalog) -> GateResult:
        return self._make_result(
            selection.matches, f"Type '{selection.target_name}' to confirm"
        )


class ResizeRule(SelectionTypeRule[ResizeSelection]):
    name = "resize"
    selection_type = ResizeSelection

    def _check(self, selection: ResizeSelection, catalog: Catalog) -> GateResult:
        if selection.new_size == selection.current_size:
            return self._make_result(False, "New size must differ from the current size")
        if selection.resource_kind == "volume" and selection.new_size < selection.current_size:
            return self._make_result(False, "Volumes can only grow")
        return self._make_result(True, "")


class SizeStepRule(SelectionTypeRule[FileSystemSelection]):
    name = "size_step"
    selection_type = FileSystemSelection

    def _check(self, selection: FileSystemSelection, catalog: Catalog) -> GateResult:
        sizes = catalog.file_system_sizes
        return self._make_result(
            not sizes or selection.size_gb in sizes,
            f"Size {selection.size_gb} GB is not an offered size",
        )


class NetworkRule(SelectionTypeRule[VpcSelection]):
    name = "network"
    selection_type = VpcSelection

    def _check(self, selection: VpcSelection, catalog: Catalog) -> GateResult:
        if selection.ip_mode == "manual" and not selection.manual_address.strip():
            return self._make_result(False, "Manual IP range needs an address")
        if selection.route_mode == "custom":
            for index, route in enumerate(selection.routes):
                if not route.destination.strip() or not route.next_hop.strip():
                    return self._make_result(False, f"Route {index + 1} is incomplete")
        return self._make_result(True, "")


DEFAULT_RULES: tuple[GateRule, ...] = (
    LabelRule(),
    LocationRule(),
    ReferencesRule(),
    ConfirmationRule(),
    ResizeRule(),
    SizeStepRule(),
    NetworkRule(),
)


def check_readiness(
    selection: SelectionBase,
    catalog: Catalog,
    rules: tuple[GateRule, ...] | None = None,
) -> GateReport:
    """Run every applicable rule against a selection.

    Args:
        selection: Selection to check. Never mutated.
        catalog: Catalog references resolve against.
        rules: Rule set override. Defaults to DEFAULT_RULES.
    """
    active = rules if rules is not None else DEFAULT_RULES
    results = [rule.run(selection, catalog) for rule in active if rule.applies_to(selection)]
    report = GateReport(results=results)
    logger.debug(
        "readiness_checked",
        kind=getattr(selection, "kind", type(selection).__name__),
        ready=report.ready,
        failed=[r.name for r in results if not r.passed],
    )
    return report


def is_ready(selection: SelectionBase, catalog: Catalog) -> bool:
    """Whether the selection may be submitted."""
    return check_readiness(selection, catalog).ready
