"""Tagged lookup results for catalog references.

A selection stores catalog ids. Any id may become stale (a filter narrowed,
the catalog changed), so every lookup returns a ``Resolved`` value that is
either found or not-found. Callers branch on ``found`` explicitly instead of
letting a missing value flow into labels or arithmetic.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

UNKNOWN_LABEL = "Unknown"


@dataclass(frozen=True)
class Resolved(Generic[T]):
    """Outcome of resolving one catalog reference.

    Attributes:
        ref: The id that was looked up (may be None or empty).
        value: The catalog entry, or None when unresolved.

    Example:
        >>> plan = catalog.plan("voc-c-1c-2gb-50s")
        >>> plan.found
        True
        >>> catalog.plan("gone").label()
        'Unknown'
    """

    ref: str | None
    value: T | None = None

    @property
    def found(self) -> bool:
        """True when the reference points at an existing catalog entry."""
        return self.value is not None

    def label(self, placeholder: str = UNKNOWN_LABEL) -> str:
        """Display name of the entry, or ``placeholder`` when unresolved."""
        if self.value is None:
            return placeholder
        name = getattr(self.value, "name", None)
        return name if isinstance(name, str) else str(self.value)

    @classmethod
    def missing(cls, ref: str | None) -> Resolved[T]:
        """Build a not-found result for ``ref``."""
        return cls(ref=ref, value=None)


def resolve_by_id(items: Iterable[T], ref: str | None) -> Resolved[T]:
    """Find the item whose ``id`` equals ``ref``.

    Args:
        items: Catalog entries carrying an ``id`` attribute.
        ref: Id to look up. Empty and None never resolve.

    Returns:
        Resolved result, found or not-found.
    """
    if not ref:
        return Resolved.missing(ref)
    for item in items:
        if getattr(item, "id", None) == ref:
            return Resolved(ref=ref, value=item)
    return Resolved.missing(ref)
