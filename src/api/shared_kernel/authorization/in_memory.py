"""In-memory relationship store.

A schema-agnostic RelationshipStore over a set of facts, used for tests and
local development. ``check`` and ``list_objects`` only see directly stored
facts; relation rewrites are resolved by the PermissionEvaluator, not here.
"""

from __future__ import annotations

from collections.abc import Sequence

from shared_kernel.authorization.model import AuthorizationModel
from shared_kernel.authorization.types import (
    RelationshipFact,
    parse_reference,
    strip_type_prefix,
)


class InMemoryRelationshipStore:
    """RelationshipStore implementation backed by process memory."""

    def __init__(
        self,
        models: Sequence[AuthorizationModel] = (),
        facts: Sequence[RelationshipFact] = (),
    ):
        """Initialize the store.

        Args:
            models: Model versions, oldest first
            facts: Facts to seed the store with
        """
        self._models: list[AuthorizationModel] = list(models)
        self._facts: set[RelationshipFact] = set(facts)

    @property
    def facts(self) -> frozenset[RelationshipFact]:
        return frozenset(self._facts)

    def register_model(self, model: AuthorizationModel) -> None:
        """Append a new model version; it becomes the newest."""
        self._models.append(model)

    async def check(
        self,
        subject: str,
        relation: str,
        object: str,
        model_id: str,
    ) -> bool:
        return RelationshipFact(subject, relation, object) in self._facts

    async def write(
        self,
        facts: Sequence[RelationshipFact],
        model_id: str,
    ) -> None:
        self._facts.update(facts)

    async def delete(
        self,
        facts: Sequence[RelationshipFact],
        model_id: str,
    ) -> None:
        self._facts.difference_update(facts)

    async def list_objects(
        self,
        subject: str,
        relation: str,
        resource_type: str,
        model_id: str,
    ) -> list[str]:
        return sorted(
            strip_type_prefix(f.object)
            for f in self._facts
            if f.subject == subject
            and f.relation == relation
            and parse_reference(f.object)[0] == resource_type
        )

    async def read(
        self,
        object: str,
        relation: str | None = None,
    ) -> list[RelationshipFact]:
        return sorted(
            (
                f
                for f in self._facts
                if f.object == object and (relation is None or f.relation == relation)
            ),
            key=str,
        )

    async def read_authorization_models(self) -> list[AuthorizationModel]:
        return list(reversed(self._models))
