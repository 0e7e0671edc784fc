"""Protocol for model registry observability.

Defines the interface for domain probes that capture model version
resolution events.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ModelRegistryProbe(Protocol):
    """Domain probe for model registry operations."""

    def model_refreshed(self, model_id: str, previous_model_id: str | None) -> None:
        """Record that the active model was fetched from the store."""
        ...

    def model_refresh_failed(self, error: Exception) -> None:
        """Record that fetching the active model failed."""
        ...

    def fallback_model_used(self, model_id: str) -> None:
        """Record that the pinned fallback model was returned."""
        ...

    def model_unavailable(self) -> None:
        """Record that no model could be resolved at all."""
        ...

    def with_context(self, context: ObservationContext) -> ModelRegistryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultModelRegistryProbe:
    """Default implementation of ModelRegistryProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultModelRegistryProbe:
        """Create a new probe with observation context bound."""
        return DefaultModelRegistryProbe(logger=self._logger, context=context)

    def model_refreshed(self, model_id: str, previous_model_id: str | None) -> None:
        """Record that the active model was fetched from the store."""
        self._logger.info(
            "authorization_model_refreshed",
            model_id=model_id,
            previous_model_id=previous_model_id,
            changed=model_id != previous_model_id,
            **self._get_context_kwargs(),
        )

    def model_refresh_failed(self, error: Exception) -> None:
        """Record that fetching the active model failed."""
        self._logger.warning(
            "authorization_model_refresh_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def fallback_model_used(self, model_id: str) -> None:
        """Record that the pinned fallback model was returned."""
        self._logger.warning(
            "authorization_model_fallback_used",
            model_id=model_id,
            **self._get_context_kwargs(),
        )

    def model_unavailable(self) -> None:
        """Record that no model could be resolved at all."""
        self._logger.error(
            "authorization_model_unavailable",
            **self._get_context_kwargs(),
        )
