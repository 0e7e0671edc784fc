"""Protocol for permission evaluator observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PermissionEvaluatorProbe(Protocol):
    """Domain probe for permission evaluation."""

    def permission_evaluated(
        self,
        subject: str,
        relation: str,
        object: str,
        allowed: bool,
    ) -> None:
        """Record the final decision of a top-level evaluation."""
        ...

    def undefined_relation(self, relation: str, object: str, model_id: str) -> None:
        """Record that a relation is not defined for the object's type."""
        ...

    def invalid_reference(self, reference: str) -> None:
        """Record that an object reference could not be parsed."""
        ...

    def direct_check_failed(
        self,
        subject: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that a direct check failed and was treated as deny."""
        ...

    def parent_resolution_failed(self, object: str, error: Exception) -> None:
        """Record that a parent lookup failed and was treated as deny."""
        ...

    def with_context(self, context: ObservationContext) -> PermissionEvaluatorProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPermissionEvaluatorProbe:
    """Default implementation of PermissionEvaluatorProbe using structlog."""

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
    ) -> DefaultPermissionEvaluatorProbe:
        """Create a new probe with observation context bound."""
        return DefaultPermissionEvaluatorProbe(logger=self._logger, context=context)

    def permission_evaluated(
        self,
        subject: str,
        relation: str,
        object: str,
        allowed: bool,
    ) -> None:
        self._logger.debug(
            "permission_evaluated",
            subject=subject,
            relation=relation,
            object=object,
            allowed=allowed,
            **self._get_context_kwargs(),
        )

    def undefined_relation(self, relation: str, object: str, model_id: str) -> None:
        self._logger.warning(
            "permission_undefined_relation",
            relation=relation,
            object=object,
            model_id=model_id,
            **self._get_context_kwargs(),
        )

    def invalid_reference(self, reference: str) -> None:
        self._logger.warning(
            "permission_invalid_reference",
            reference=reference,
            **self._get_context_kwargs(),
        )

    def direct_check_failed(
        self,
        subject: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        self._logger.warning(
            "permission_direct_check_failed",
            subject=subject,
            relation=relation,
            object=object,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def parent_resolution_failed(self, object: str, error: Exception) -> None:
        self._logger.warning(
            "permission_parent_resolution_failed",
            object=object,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
