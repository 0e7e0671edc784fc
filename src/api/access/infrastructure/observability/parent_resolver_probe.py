"""Domain probe for parent resolution against stored relationship facts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ParentResolverProbe(Protocol):
    """Domain probe for parent lookups."""

    def parent_resolved(self, resource: str, parent: str | None) -> None:
        """Record the parent found for a resource (None when it has none)."""
        ...

    def multiple_parents_found(self, resource: str, parents: list[str]) -> None:
        """Record that a resource has more than one stored parent fact."""
        ...

    def with_context(self, context: ObservationContext) -> ParentResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultParentResolverProbe:
    """Default implementation of ParentResolverProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultParentResolverProbe:
        """Create a new probe with observation context bound."""
        return DefaultParentResolverProbe(logger=self._logger, context=context)

    def parent_resolved(self, resource: str, parent: str | None) -> None:
        self._logger.debug(
            "parent_resolved",
            resource=resource,
            parent=parent,
            **self._get_context_kwargs(),
        )

    def multiple_parents_found(self, resource: str, parents: list[str]) -> None:
        self._logger.warning(
            "multiple_parents_found",
            resource=resource,
            parents=parents,
            chosen=parents[0],
            **self._get_context_kwargs(),
        )
