"""Ports (interfaces) for the access bounded context.

Ports define the capabilities the host application supplies without
specifying how they are implemented.
"""

from access.ports.inventory import ParentResolver, ResourceInventoryProvider

__all__ = [
    "ParentResolver",
    "ResourceInventoryProvider",
]
