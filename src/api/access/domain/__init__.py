"""Domain layer for the access bounded context."""

from access.domain.value_objects import CascadeResult

__all__ = ["CascadeResult"]
