"""Domain probe for relationship store operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to permission checks and relationship
writes, deletes, and reads against the store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthorizationProbe(Protocol):
    """Domain probe for relationship store operations."""

    def relationships_written(self, count: int, model_id: str) -> None:
        """Record that a batch of relationships was written."""
        ...

    def relationships_write_failed(
        self, count: int, model_id: str, error: Exception
    ) -> None:
        """Record that writing a batch of relationships failed."""
        ...

    def relationships_deleted(self, count: int, model_id: str) -> None:
        """Record that a batch of relationships was deleted."""
        ...

    def relationships_delete_failed(
        self, count: int, model_id: str, error: Exception
    ) -> None:
        """Record that deleting a batch of relationships failed."""
        ...

    def permission_checked(
        self,
        subject: str,
        relation: str,
        object: str,
        allowed: bool,
    ) -> None:
        """Record that a permission was checked."""
        ...

    def permission_check_failed(
        self,
        subject: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that checking a permission failed."""
        ...

    def objects_listed(
        self,
        subject: str,
        relation: str,
        resource_type: str,
        count: int,
    ) -> None:
        """Record that objects were listed for a subject."""
        ...

    def objects_list_failed(
        self,
        subject: str,
        relation: str,
        resource_type: str,
        error: Exception,
    ) -> None:
        """Record that listing objects failed."""
        ...

    def relationships_read(self, object: str, relation: str | None, count: int) -> None:
        """Record that stored relationships on an object were read."""
        ...

    def relationships_read_failed(
        self, object: str, relation: str | None, error: Exception
    ) -> None:
        """Record that reading relationships failed."""
        ...

    def models_read(self, count: int) -> None:
        """Record that authorization model versions were listed."""
        ...

    def models_read_failed(self, error: Exception) -> None:
        """Record that listing authorization model versions failed."""
        ...

    def model_skipped(self, model_id: str, error: Exception) -> None:
        """Record that an older model version could not be decoded."""
        ...

    def with_context(self, context: ObservationContext) -> AuthorizationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthorizationProbe:
    """Default implementation of AuthorizationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAuthorizationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthorizationProbe(logger=self._logger, context=context)

    def relationships_written(self, count: int, model_id: str) -> None:
        """Record that a batch of relationships was written."""
        self._logger.info(
            "authorization_relationships_written",
            count=count,
            model_id=model_id,
            **self._get_context_kwargs(),
        )

    def relationships_write_failed(
        self, count: int, model_id: str, error: Exception
    ) -> None:
        """Record that writing a batch of relationships failed."""
        self._logger.error(
            "authorization_relationships_write_failed",
            count=count,
            model_id=model_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def relationships_deleted(self, count: int, model_id: str) -> None:
        """Record that a batch of relationships was deleted."""
        self._logger.info(
            "authorization_relationships_deleted",
            count=count,
            model_id=model_id,
            **self._get_context_kwargs(),
        )

    def relationships_delete_failed(
        self, count: int, model_id: str, error: Exception
    ) -> None:
        """Record that deleting a batch of relationships failed."""
        self._logger.error(
            "authorization_relationships_delete_failed",
            count=count,
            model_id=model_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def permission_checked(
        self,
        subject: str,
        relation: str,
        object: str,
        allowed: bool,
    ) -> None:
        """Record that a permission was checked."""
        self._logger.debug(
            "authorization_permission_checked",
            subject=subject,
            relation=relation,
            object=object,
            allowed=allowed,
            **self._get_context_kwargs(),
        )

    def permission_check_failed(
        self,
        subject: str,
        relation: str,
        object: str,
        error: Exception,
    ) -> None:
        """Record that checking a permission failed."""
        self._logger.error(
            "authorization_permission_check_failed",
            subject=subject,
            relation=relation,
            object=object,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def objects_listed(
        self,
        subject: str,
        relation: str,
        resource_type: str,
        count: int,
    ) -> None:
        """Record that objects were listed for a subject."""
        self._logger.debug(
            "authorization_objects_listed",
            subject=subject,
            relation=relation,
            resource_type=resource_type,
            count=count,
            **self._get_context_kwargs(),
        )

    def objects_list_failed(
        self,
        subject: str,
        relation: str,
        resource_type: str,
        error: Exception,
    ) -> None:
        """Record that listing objects failed."""
        self._logger.error(
            "authorization_objects_list_failed",
            subject=subject,
            relation=relation,
            resource_type=resource_type,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def relationships_read(self, object: str, relation: str | None, count: int) -> None:
        """Record that stored relationships on an object were read."""
        self._logger.debug(
            "authorization_relationships_read",
            object=object,
            relation=relation,
            count=count,
            **self._get_context_kwargs(),
        )

    def relationships_read_failed(
        self, object: str, relation: str | None, error: Exception
    ) -> None:
        """Record that reading relationships failed."""
        self._logger.error(
            "authorization_relationships_read_failed",
            object=object,
            relation=relation,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def models_read(self, count: int) -> None:
        """Record that authorization model versions were listed."""
        self._logger.debug(
            "authorization_models_read",
            count=count,
            **self._get_context_kwargs(),
        )

    def models_read_failed(self, error: Exception) -> None:
        """Record that listing authorization model versions failed."""
        self._logger.error(
            "authorization_models_read_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def model_skipped(self, model_id: str, error: Exception) -> None:
        """Record that an older model version could not be decoded."""
        self._logger.warning(
            "authorization_model_skipped",
            model_id=model_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
