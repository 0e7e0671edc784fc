"""Value objects for the access bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared_kernel.authorization.types import RelationshipFact


@dataclass(frozen=True)
class CascadeResult:
    """Outcome of a cascade cleanup.

    Cleanup is best-effort: facts that could not be removed are reported in
    ``failed`` so the caller can alert, retry, or queue reconciliation.

    Attributes:
        resource: The deleted resource (e.g., "partner:p1")
        deleted: Facts removed from the store
        failed: Facts that remain because the delete failed
    """

    resource: str
    deleted: tuple[RelationshipFact, ...] = ()
    failed: tuple[RelationshipFact, ...] = ()

    @property
    def succeeded(self) -> bool:
        return not self.failed
