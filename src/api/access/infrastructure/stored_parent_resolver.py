"""Parent resolution backed by the relationship store.

Resources are linked to their parent by a stored fact such as
``partner:p1 parent client:c1``. Reading that fact back answers which
resource a client inherits from without asking the host application.
"""

from __future__ import annotations

from access.infrastructure.observability import (
    DefaultParentResolverProbe,
    ParentResolverProbe,
)
from shared_kernel.authorization.model import ParentLink
from shared_kernel.authorization.protocols import RelationshipStore


class StoredParentResolver:
    """ParentResolver that reads parent-link facts from the store."""

    def __init__(
        self,
        store: RelationshipStore,
        probe: ParentResolverProbe | None = None,
    ):
        self._store = store
        self._probe = probe or DefaultParentResolverProbe()

    async def parent_of(self, resource: str, link: ParentLink) -> str | None:
        """Return the subject of the resource's parent-link fact.

        Only facts whose subject has the link's parent type count. If several
        exist (a half-finished move between parents), the first in store
        order wins and the ambiguity is logged.

        Raises:
            StoreUnavailableError: If the store cannot be read
        """
        facts = await self._store.read(resource, link.relation)
        prefix = f"{link.parent_type}:"
        parents = [f.subject for f in facts if f.subject.startswith(prefix)]

        if len(parents) > 1:
            self._probe.multiple_parents_found(resource=resource, parents=parents)

        parent = parents[0] if parents else None
        self._probe.parent_resolved(resource=resource, parent=parent)
        return parent
