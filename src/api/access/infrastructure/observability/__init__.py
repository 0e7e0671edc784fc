"""Domain-Oriented Observability for access infrastructure adapters."""

from access.infrastructure.observability.parent_resolver_probe import (
    DefaultParentResolverProbe,
    ParentResolverProbe,
)

__all__ = [
    "ParentResolverProbe",
    "DefaultParentResolverProbe",
]
