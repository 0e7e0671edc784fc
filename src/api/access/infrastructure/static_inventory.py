"""In-memory resource inventory for hosts without a resource database.

Used by tests and by small deployments that register resources as they are
created. Implements both ParentResolver and ResourceInventoryProvider.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping, Sequence

from shared_kernel.authorization.model import ParentLink
from shared_kernel.authorization.types import parse_reference


class StaticResourceInventory:
    """Parent/child registry of live resources keyed by "type:id"."""

    def __init__(self) -> None:
        self._parents: dict[str, str] = {}

    def add(self, resource: str, parent: str | None = None) -> None:
        """Register a live resource under an optional parent."""
        parse_reference(resource)
        if parent is None:
            self._parents.pop(resource, None)
            return
        parse_reference(parent)
        self._parents[resource] = parent

    def remove(self, resource: str) -> None:
        """Forget a resource; its children keep pointing at it until removed."""
        self._parents.pop(resource, None)

    async def parent_of(self, resource: str, link: ParentLink) -> str | None:
        parent = self._parents.get(resource)
        if parent is None or parse_reference(parent)[0] != link.parent_type:
            return None
        return parent

    async def children_of(
        self,
        resource_type: str,
        resource_id: str,
    ) -> Mapping[str, Sequence[str]]:
        target = f"{resource_type}:{resource_id}"
        children: dict[str, list[str]] = defaultdict(list)
        for child, parent in self._parents.items():
            if parent == target:
                child_type, child_id = parse_reference(child)
                children[child_type].append(child_id)
        return {child_type: sorted(ids) for child_type, ids in children.items()}
