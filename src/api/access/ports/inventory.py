"""Capability protocols (ports) supplied by the host application.

The access context knows nothing about how business resources are persisted.
The host tells it which resource a resource hangs under and, when a resource
is deleted, which direct children it has.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol, runtime_checkable

from shared_kernel.authorization.model import ParentLink


@runtime_checkable
class ParentResolver(Protocol):
    """Resolves the parent of a resource for inherited relations."""

    async def parent_of(self, resource: str, link: ParentLink) -> str | None:
        """Return the parent of a resource.

        Args:
            resource: Resource identifier (e.g., "client:c1")
            link: The parent link declared by the resource's type

        Returns:
            The parent's "type:id" identifier, or None if the resource has no
            live parent

        Raises:
            StoreUnavailableError: If the parent cannot be looked up
        """
        ...


@runtime_checkable
class ResourceInventoryProvider(Protocol):
    """Lists the live direct children of a resource."""

    async def children_of(
        self,
        resource_type: str,
        resource_id: str,
    ) -> Mapping[str, Sequence[str]]:
        """Return the direct children of a resource grouped by child type.

        Args:
            resource_type: Type of the parent resource (e.g., "partner")
            resource_id: Bare id of the parent resource

        Returns:
            Mapping of child type to bare child ids, e.g.
            ``{"client": ["c1"], "document": ["d1"]}``
        """
        ...
