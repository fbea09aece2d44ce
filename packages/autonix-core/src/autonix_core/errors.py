"""Custom exception hierarchy for autonix-core.

This module defines the exception classes used throughout the console engine:
- AutonixError: Base exception for all autonix-related errors
- ConfigurationError: Catalog or settings file cannot be loaded
- Relational collection errors (missing parent/child, duplicate ids)
- Lifecycle and operation errors (invalid transition, busy resource)

Unresolved catalog references and failed readiness checks are NOT exceptions:
they surface as ``Resolved.found is False`` and ``is_ready() is False``.

User-facing messages are safe to display; technical details are logged
internally via structlog and never exposed.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


def _title(entity_type: str) -> str:
    """Uppercase the first letter only ("VPC network" stays as is)."""
    return entity_type[:1].upper() + entity_type[1:]


class AutonixError(Exception):
    """Base exception for autonix-core.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but NEVER exposed to the user.

    Example:
        >>> raise AutonixError(
        ...     "Catalog invalid",
        ...     internal_details="plans[3].price: input should be >= 0",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize AutonixError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "autonix_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationError(AutonixError):
    """Raised when a catalog or settings file cannot be parsed or validated.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (e.g., "plans.0.price").

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid catalog",
        ...     file_path="catalog.yaml",
        ...     field_path="plans.0.price",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Safe message to display to the user.
            file_path: Path to the configuration file (optional).
            field_path: Dot-separated path to the field (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path


class CatalogNotFoundError(AutonixError):
    """Raised when no catalog file exists in any search location."""

    pass


class ParentNotFoundError(AutonixError):
    """Raised when a parent entity does not exist in a relational collection.

    Always includes the list of available parents for actionable feedback.

    Attributes:
        entity_type: Type of parent (domain, firewall group, VPC network).
        parent_id: The requested parent id.
        available: Ids of the parents that do exist.

    Example:
        >>> raise ParentNotFoundError("domain", "d-9", ["d-1", "d-2"])
        # User sees: "Domain 'd-9' not found. Available: d-1, d-2"
    """

    def __init__(
        self,
        entity_type: str,
        parent_id: str,
        available: list[str],
        *,
        internal_details: str | None = None,
    ) -> None:
        available_str = ", ".join(available) if available else "none"
        user_message = (
            f"{_title(entity_type)} '{parent_id}' not found. Available: {available_str}"
        )
        super().__init__(user_message, internal_details=internal_details)

        self.entity_type = entity_type
        self.parent_id = parent_id
        self.available = available


class ChildNotFoundError(AutonixError):
    """Raised when a child entity id is not present in a collection."""

    def __init__(self, entity_type: str, child_id: str) -> None:
        super().__init__(f"{_title(entity_type)} '{child_id}' not found")
        self.entity_type = entity_type
        self.child_id = child_id


class DuplicateIdError(AutonixError):
    """Raised when an entity id is already taken within a collection."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(f"{_title(entity_type)} id '{entity_id}' already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ImmutableFieldError(AutonixError):
    """Raised when a patch touches fields that may not be edited.

    Attributes:
        fields: Sorted names of the rejected fields.
    """

    def __init__(self, entity_type: str, fields: list[str]) -> None:
        super().__init__(
            f"Cannot modify {', '.join(fields)} on {entity_type}",
        )
        self.entity_type = entity_type
        self.fields = fields


class InvalidTransitionError(AutonixError):
    """Raised when a resource status change is not an allowed lifecycle edge.

    Example:
        >>> raise InvalidTransitionError("k8s-1", "Provisioning", "Upgrading")
        # User sees: "Cannot move k8s-1 from Provisioning to Upgrading"
    """

    def __init__(self, resource_id: str, current: str, target: str) -> None:
        super().__init__(f"Cannot move {resource_id} from {current} to {target}")
        self.resource_id = resource_id
        self.current = current
        self.target = target


class ResourceNotFoundError(AutonixError):
    """Raised when a descriptor id is not present in a resource store."""

    def __init__(self, resource_id: str) -> None:
        super().__init__(f"Resource '{resource_id}' not found")
        self.resource_id = resource_id


class OperationInFlightError(AutonixError):
    """Raised when an operation is requested for a resource that is already busy.

    Attributes:
        resource_id: The busy resource.
        operation: Name of the operation currently running.
    """

    def __init__(self, resource_id: str, operation: str) -> None:
        super().__init__(f"'{operation}' is already running for {resource_id}")
        self.resource_id = resource_id
        self.operation = operation


class SimulatedOperationFailure(AutonixError):
    """Raised when a submission sink or simulated operation reports failure.

    The resource status is reverted to its pre-operation value before this
    propagates to the caller.
    """

    pass


class NotReadyError(AutonixError):
    """Raised when submit is attempted while the readiness gate fails.

    Attributes:
        failures: Messages of the failing gate rules.
    """

    def __init__(self, failures: list[str]) -> None:
        super().__init__("Selection is not ready: " + "; ".join(failures))
        self.failures = failures
