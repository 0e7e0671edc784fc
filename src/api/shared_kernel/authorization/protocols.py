"""Relationship store protocol.

Defines the interface for relationship fact stores, allowing for swappable
implementations (OpenFGA over HTTP, in-memory, mocks in tests).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from shared_kernel.authorization.model import AuthorizationModel
from shared_kernel.authorization.types import RelationshipFact


class RelationshipStore(Protocol):
    """Protocol for relationship fact stores.

    Every call is a single remote round trip. Implementations do not retry;
    retry and backoff policy belongs to the caller. All failures are raised
    as StoreUnavailableError.
    """

    async def check(
        self,
        subject: str,
        relation: str,
        object: str,
        model_id: str,
    ) -> bool:
        """Check whether a subject holds a relation on an object.

        Args:
            subject: Subject identifier (e.g., "user:42")
            relation: Relation name (e.g., "can_view")
            object: Object identifier (e.g., "partner:abc")
            model_id: Authorization model version to evaluate against

        Returns:
            True if the relation holds, False otherwise

        Raises:
            StoreUnavailableError: If the check fails
        """
        ...

    async def write(
        self,
        facts: Sequence[RelationshipFact],
        model_id: str,
    ) -> None:
        """Write relationship facts in one batch.

        Raises:
            StoreUnavailableError: If the write fails
        """
        ...

    async def delete(
        self,
        facts: Sequence[RelationshipFact],
        model_id: str,
    ) -> None:
        """Delete relationship facts in one batch.

        An empty batch is a successful no-op.

        Raises:
            StoreUnavailableError: If the delete fails
        """
        ...

    async def list_objects(
        self,
        subject: str,
        relation: str,
        resource_type: str,
        model_id: str,
    ) -> list[str]:
        """List objects of a type on which the subject holds the relation.

        Returns:
            Bare object ids, with the "type:" prefix stripped

        Raises:
            StoreUnavailableError: If the lookup fails
        """
        ...

    async def read(
        self,
        object: str,
        relation: str | None = None,
    ) -> list[RelationshipFact]:
        """Read the stored facts on an object, optionally for one relation.

        Raises:
            StoreUnavailableError: If the read fails
        """
        ...

    async def read_authorization_models(self) -> list[AuthorizationModel]:
        """List authorization model versions, newest first.

        Raises:
            StoreUnavailableError: If the store cannot be reached
            InvalidModelError: If a returned model is malformed
        """
        ...
