"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures request-scoped metadata that should be included with all
    instrumentation events, so authorization decisions can be correlated
    with the request that triggered them.

    Attributes:
        request_id: Unique identifier for the current request/operation.
        subject: Subject the operation is performed for (e.g., "user:42").
        resource: Resource the operation targets (e.g., "partner:abc").
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(
            request_id="req-123",
            subject="user:42",
        )
        probe = DefaultPermissionEvaluatorProbe().with_context(context)
    """

    request_id: str | None = None
    subject: str | None = None
    resource: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean. The subject is
        logged as ``context_subject`` so it never collides with the subject
        field of individual events.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.subject is not None:
            result["context_subject"] = self.subject
        if self.resource is not None:
            result["context_resource"] = self.resource
        result.update(self.extra)
        return result

    def with_resource(self, resource: str) -> ObservationContext:
        """Create a new context with the resource set."""
        return ObservationContext(
            request_id=self.request_id,
            subject=self.subject,
            resource=resource,
            extra=self.extra,
        )

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        new_extra = {**self.extra, **kwargs}
        return ObservationContext(
            request_id=self.request_id,
            subject=self.subject,
            resource=self.resource,
            extra=new_extra,
        )
