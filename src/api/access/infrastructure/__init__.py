"""Infrastructure adapters for the access bounded context."""

from access.infrastructure.static_inventory import StaticResourceInventory
from access.infrastructure.stored_parent_resolver import StoredParentResolver

__all__ = [
    "StaticResourceInventory",
    "StoredParentResolver",
]
