"""Protocol for request-scoped permission cache observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PermissionCacheProbe(Protocol):
    """Domain probe for the request-scoped permission cache."""

    def cached_evaluation_failed(
        self,
        subject: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that a memoized evaluation failed and resolved to deny."""
        ...

    def cache_reset(self, size: int) -> None:
        """Record that the cache was cleared."""
        ...

    def with_context(self, context: ObservationContext) -> PermissionCacheProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPermissionCacheProbe:
    """Default implementation of PermissionCacheProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultPermissionCacheProbe:
        """Create a new probe with observation context bound."""
        return DefaultPermissionCacheProbe(logger=self._logger, context=context)

    def cached_evaluation_failed(
        self,
        subject: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        self._logger.warning(
            "permission_cache_evaluation_failed",
            subject=subject,
            relation=relation,
            object=object,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def cache_reset(self, size: int) -> None:
        self._logger.debug(
            "permission_cache_reset",
            size=size,
            **self._get_context_kwargs(),
        )
