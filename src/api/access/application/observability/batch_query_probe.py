"""Protocol for batch query observability.

Defines the interface for domain probes that capture fan-out lookups and bulk
checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class BatchQueryProbe(Protocol):
    """Domain probe for batch query operations."""

    def relation_lookup_failed(
        self,
        subject: str,
        relation: str,
        resource_type: str,
        error: Exception,
    ) -> None:
        """Record that one relation's lookup failed and was replaced by an empty result."""
        ...

    def batch_lookup_completed(
        self,
        subject: str,
        resource_type: str,
        relation_count: int,
        failed_relations: list[str],
    ) -> None:
        """Record that a fan-out lookup settled."""
        ...

    def bulk_check_completed(
        self,
        total_requests: int,
        permitted_count: int,
    ) -> None:
        """Record that a bulk permission check completed."""
        ...

    def with_context(self, context: ObservationContext) -> BatchQueryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultBatchQueryProbe:
    """Default implementation of BatchQueryProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultBatchQueryProbe:
        """Create a new probe with observation context bound."""
        return DefaultBatchQueryProbe(logger=self._logger, context=context)

    def relation_lookup_failed(
        self,
        subject: str,
        relation: str,
        resource_type: str,
        error: Exception,
    ) -> None:
        """Record that one relation's lookup failed and was replaced by an empty result."""
        self._logger.warning(
            "batch_relation_lookup_failed",
            subject=subject,
            relation=relation,
            resource_type=resource_type,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def batch_lookup_completed(
        self,
        subject: str,
        resource_type: str,
        relation_count: int,
        failed_relations: list[str],
    ) -> None:
        """Record that a fan-out lookup settled."""
        self._logger.info(
            "batch_lookup_completed",
            subject=subject,
            resource_type=resource_type,
            relation_count=relation_count,
            failed_relations=failed_relations,
            **self._get_context_kwargs(),
        )

    def bulk_check_completed(
        self,
        total_requests: int,
        permitted_count: int,
    ) -> None:
        """Record that a bulk permission check completed."""
        self._logger.info(
            "batch_bulk_check_completed",
            total_requests=total_requests,
            permitted_count=permitted_count,
            **self._get_context_kwargs(),
        )
