"""Protocol for relationship service observability.

Defines the interface for domain probes that capture grant and revoke events
issued by business operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RelationshipServiceProbe(Protocol):
    """Domain probe for relationship service operations."""

    def relationship_granted(self, subject: str, relation: str, object: str) -> None:
        """Record that a relationship was granted."""
        ...

    def relationship_revoked(self, subject: str, relation: str, object: str) -> None:
        """Record that a relationship was revoked."""
        ...

    def role_changed(
        self,
        subject: str,
        object: str,
        old_relation: str,
        new_relation: str,
    ) -> None:
        """Record that a subject's role on an object changed."""
        ...

    def parent_linked(self, child: str, parent: str) -> None:
        """Record that a resource was attached to its parent."""
        ...

    def relationship_rejected(
        self, subject: str, relation: str, object: str, reason: str
    ) -> None:
        """Record that a write was refused before reaching the store."""
        ...

    def relationship_operation_failed(
        self,
        operation: str,
        subject: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that a write or delete against the store failed."""
        ...

    def with_context(self, context: ObservationContext) -> RelationshipServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRelationshipServiceProbe:
    """Default implementation of RelationshipServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultRelationshipServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultRelationshipServiceProbe(logger=self._logger, context=context)

    def relationship_granted(self, subject: str, relation: str, object: str) -> None:
        """Record that a relationship was granted."""
        self._logger.info(
            "relationship_granted",
            subject=subject,
            relation=relation,
            object=object,
            **self._get_context_kwargs(),
        )

    def relationship_revoked(self, subject: str, relation: str, object: str) -> None:
        """Record that a relationship was revoked."""
        self._logger.info(
            "relationship_revoked",
            subject=subject,
            relation=relation,
            object=object,
            **self._get_context_kwargs(),
        )

    def role_changed(
        self,
        subject: str,
        object: str,
        old_relation: str,
        new_relation: str,
    ) -> None:
        """Record that a subject's role on an object changed."""
        self._logger.info(
            "relationship_role_changed",
            subject=subject,
            object=object,
            old_relation=old_relation,
            new_relation=new_relation,
            **self._get_context_kwargs(),
        )

    def parent_linked(self, child: str, parent: str) -> None:
        """Record that a resource was attached to its parent."""
        self._logger.info(
            "relationship_parent_linked",
            child=child,
            parent=parent,
            **self._get_context_kwargs(),
        )

    def relationship_rejected(
        self, subject: str, relation: str, object: str, reason: str
    ) -> None:
        """Record that a write was refused before reaching the store."""
        self._logger.warning(
            "relationship_rejected",
            subject=subject,
            relation=relation,
            object=object,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def relationship_operation_failed(
        self,
        operation: str,
        subject: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that a write or delete against the store failed."""
        self._logger.error(
            "relationship_operation_failed",
            operation=operation,
            subject=subject,
            relation=relation,
            object=object,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
