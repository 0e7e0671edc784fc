"""Protocol for cascade cleanup observability.

Defines the interface for domain probes that capture planning and submission
of cascade deletes when a resource is removed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CascadePlannerProbe(Protocol):
    """Domain probe for cascade cleanup."""

    def cascade_planned(self, resource: str, fact_count: int, child_count: int) -> None:
        """Record that the set of facts to remove was computed."""
        ...

    def cascade_read_failed(
        self, resource: str, relation: str, error: Exception
    ) -> None:
        """Record that stored facts for one relation could not be enumerated."""
        ...

    def cascade_planning_failed(self, resource: str, error: Exception) -> None:
        """Record that no plan could be produced."""
        ...

    def cascade_deleted(self, resource: str, count: int) -> None:
        """Record that the cascade delete batch succeeded."""
        ...

    def cascade_delete_failed(
        self, resource: str, count: int, error: Exception
    ) -> None:
        """Record that the cascade delete batch failed."""
        ...

    def with_context(self, context: ObservationContext) -> CascadePlannerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCascadePlannerProbe:
    """Default implementation of CascadePlannerProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultCascadePlannerProbe:
        """Create a new probe with observation context bound."""
        return DefaultCascadePlannerProbe(logger=self._logger, context=context)

    def cascade_planned(self, resource: str, fact_count: int, child_count: int) -> None:
        """Record that the set of facts to remove was computed."""
        self._logger.info(
            "cascade_planned",
            resource=resource,
            fact_count=fact_count,
            child_count=child_count,
            **self._get_context_kwargs(),
        )

    def cascade_read_failed(
        self, resource: str, relation: str, error: Exception
    ) -> None:
        """Record that stored facts for one relation could not be enumerated."""
        self._logger.warning(
            "cascade_read_failed",
            resource=resource,
            relation=relation,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def cascade_planning_failed(self, resource: str, error: Exception) -> None:
        """Record that no plan could be produced."""
        self._logger.error(
            "cascade_planning_failed",
            resource=resource,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def cascade_deleted(self, resource: str, count: int) -> None:
        """Record that the cascade delete batch succeeded."""
        self._logger.info(
            "cascade_deleted",
            resource=resource,
            count=count,
            **self._get_context_kwargs(),
        )

    def cascade_delete_failed(
        self, resource: str, count: int, error: Exception
    ) -> None:
        """Record that the cascade delete batch failed."""
        self._logger.error(
            "cascade_delete_failed",
            resource=resource,
            count=count,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
