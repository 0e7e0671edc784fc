"""Relationship application service for the access bounded context.

Grants and revokes relationship facts on behalf of business operations (user
invited, role changed, resource created). Unlike cascade cleanup, losing a
grant or a revoke is a correctness issue, so store failures are raised.
"""

from __future__ import annotations

from access.application.observability import (
    DefaultRelationshipServiceProbe,
    RelationshipServiceProbe,
)
from access.application.services.model_registry import ModelRegistry
from shared_kernel.authorization.exceptions import (
    StoreUnavailableError,
    UndefinedRelationError,
)
from shared_kernel.authorization.model import AuthorizationModel
from shared_kernel.authorization.protocols import RelationshipStore
from shared_kernel.authorization.types import (
    DEFAULT_PLATFORM_ID,
    Relation,
    RelationshipFact,
    format_platform,
    parse_reference,
)


class RelationshipService:
    """Application service for the relationship fact lifecycle.

    Facts are validated against the active model before they are written:
    the relation must be defined on the object's type, accept direct grants,
    and accept the subject's type.
    """

    def __init__(
        self,
        store: RelationshipStore,
        registry: ModelRegistry,
        platform_id: str = DEFAULT_PLATFORM_ID,
        probe: RelationshipServiceProbe | None = None,
    ):
        """Initialize RelationshipService.

        Args:
            store: Store to write facts to
            registry: Registry resolving the active model
            platform_id: Id of the platform object holding super admins
            probe: Optional domain probe for observability
        """
        self._store = store
        self._registry = registry
        self._platform = format_platform(platform_id)
        self._probe = probe or DefaultRelationshipServiceProbe()

    async def grant(self, subject: str, relation: str, object: str) -> RelationshipFact:
        """Grant ``relation`` on ``object`` to ``subject``.

        Returns:
            The written fact

        Raises:
            UndefinedRelationError: If the model does not allow the fact
            ModelUnavailableError: If no model version can be resolved
            StoreUnavailableError: If the write fails
        """
        model = await self._registry.get_active_model()
        fact = self._validated_fact(model, subject, relation, object)
        await self._write(model, "write", fact)
        self._probe.relationship_granted(
            subject=subject, relation=fact.relation, object=object
        )
        return fact

    async def revoke(self, subject: str, relation: str, object: str) -> RelationshipFact:
        """Revoke a directly granted relation.

        Raises:
            UndefinedRelationError: If the model does not define the relation
            ModelUnavailableError: If no model version can be resolved
            StoreUnavailableError: If the delete fails
        """
        model = await self._registry.get_active_model()
        fact = self._validated_fact(model, subject, relation, object)
        await self._write(model, "delete", fact)
        self._probe.relationship_revoked(
            subject=subject, relation=fact.relation, object=object
        )
        return fact

    async def change_role(
        self,
        subject: str,
        object: str,
        old_relation: str,
        new_relation: str,
    ) -> RelationshipFact:
        """Replace a subject's role on an object.

        The new fact is written before the old one is removed, so a failure
        between the two calls leaves the subject with both roles rather than
        none.

        Raises:
            UndefinedRelationError: If either relation is not allowed
            ModelUnavailableError: If no model version can be resolved
            StoreUnavailableError: If the write or the delete fails
        """
        model = await self._registry.get_active_model()
        new_fact = self._validated_fact(model, subject, new_relation, object)
        old_fact = self._validated_fact(model, subject, old_relation, object)
        if new_fact == old_fact:
            return new_fact

        await self._write(model, "write", new_fact)
        await self._write(model, "delete", old_fact)
        self._probe.role_changed(
            subject=subject,
            object=object,
            old_relation=old_fact.relation,
            new_relation=new_fact.relation,
        )
        return new_fact

    async def link_parent(self, child: str, parent: str) -> RelationshipFact:
        """Attach a resource to its parent so inherited relations apply.

        Args:
            child: The child resource (e.g., "client:c1")
            parent: The parent resource (e.g., "partner:p1")

        Raises:
            UndefinedRelationError: If the child's type has no parent link
                accepting the parent's type
            ModelUnavailableError: If no model version can be resolved
            StoreUnavailableError: If the write fails
        """
        model = await self._registry.get_active_model()
        child_type, _ = parse_reference(child)
        type_def = model.type_definition(child_type)
        if type_def is None or type_def.parent is None:
            self._probe.relationship_rejected(
                subject=parent, relation="parent", object=child, reason="no_parent_link"
            )
            raise UndefinedRelationError(f"{child_type} declares no parent link")

        fact = self._validated_fact(model, parent, type_def.parent.relation, child)
        await self._write(model, "write", fact)
        self._probe.parent_linked(child=child, parent=parent)
        return fact

    async def grant_super_admin(self, subject: str) -> RelationshipFact:
        """Make ``subject`` a super admin of the platform."""
        return await self.grant(subject, Relation.SUPER_ADMIN, self._platform)

    def _validated_fact(
        self,
        model: AuthorizationModel,
        subject: str,
        relation: str,
        object: str,
    ) -> RelationshipFact:
        subject_type, _ = parse_reference(subject, "subject")
        object_type, _ = parse_reference(object, "object")
        relation = str(relation)

        definition = model.relation(object_type, relation)
        if definition is None:
            reason = "undefined_relation"
        elif not definition.accepts_direct:
            reason = "not_directly_assignable"
        elif subject_type not in definition.directly_related_types:
            reason = "subject_type_not_allowed"
        else:
            return RelationshipFact(subject=subject, relation=relation, object=object)

        self._probe.relationship_rejected(
            subject=subject, relation=relation, object=object, reason=reason
        )
        raise UndefinedRelationError(
            f"Model {model.id} does not allow {subject} {relation} {object} ({reason})"
        )

    async def _write(
        self,
        model: AuthorizationModel,
        operation: str,
        fact: RelationshipFact,
    ) -> None:
        try:
            if operation == "write":
                await self._store.write([fact], model_id=model.id)
            else:
                await self._store.delete([fact], model_id=model.id)
        except StoreUnavailableError as e:
            self._probe.relationship_operation_failed(
                operation=operation,
                subject=fact.subject,
                relation=fact.relation,
                object=fact.object,
                error=e,
            )
            raise
