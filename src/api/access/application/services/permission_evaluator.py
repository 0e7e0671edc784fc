"""Permission evaluator for the access bounded context.

Resolves a single (subject, relation, object) query by walking the active
model's relation definitions: direct grants, same-object unions, and the
relation inherited from the object's parent.
"""

from __future__ import annotations

from access.application.observability import (
    DefaultPermissionEvaluatorProbe,
    PermissionEvaluatorProbe,
)
from access.application.services.model_registry import ModelRegistry
from access.ports.inventory import ParentResolver
from shared_kernel.authorization.exceptions import StoreUnavailableError
from shared_kernel.authorization.model import AuthorizationModel
from shared_kernel.authorization.protocols import RelationshipStore
from shared_kernel.authorization.types import parse_reference


class PermissionEvaluator:
    """Evaluates relations depth-first with a short-circuiting OR.

    Each branch may cost a remote round trip and a single truthy branch is
    enough, so branches are tried in order: direct fact, same-object unions,
    then the parent. Any uncertainty resolves to deny:

    - a relation the model does not define for the object's type is False;
    - a failed store check or parent lookup denies that branch only;
    - ModelUnavailableError propagates, and callers must treat it as deny.

    Recursion depth is bounded because models are validated acyclic when
    they are constructed.
    """

    def __init__(
        self,
        store: RelationshipStore,
        registry: ModelRegistry,
        parent_resolver: ParentResolver,
        probe: PermissionEvaluatorProbe | None = None,
    ):
        """Initialize PermissionEvaluator.

        Args:
            store: Store used for direct fact checks
            registry: Registry resolving the active model
            parent_resolver: Resolves an object's parent for inherited relations
            probe: Optional domain probe for observability
        """
        self._store = store
        self._registry = registry
        self._parent_resolver = parent_resolver
        self._probe = probe or DefaultPermissionEvaluatorProbe()

    async def evaluate(self, subject: str, relation: str, object: str) -> bool:
        """Decide whether ``subject`` holds ``relation`` on ``object``.

        Args:
            subject: Subject identifier (e.g., "user:42")
            relation: Relation name (e.g., "can_view")
            object: Object identifier (e.g., "partner:abc")

        Returns:
            True if any branch of the relation's definition grants it

        Raises:
            ModelUnavailableError: If no model version can be resolved
        """
        model = await self._registry.get_active_model()
        allowed = await self._evaluate(model, subject, relation, object)
        self._probe.permission_evaluated(
            subject=subject, relation=relation, object=object, allowed=allowed
        )
        return allowed

    async def _evaluate(
        self,
        model: AuthorizationModel,
        subject: str,
        relation: str,
        object: str,
    ) -> bool:
        try:
            object_type, _ = parse_reference(object)
        except ValueError:
            self._probe.invalid_reference(reference=object)
            return False

        definition = model.relation(object_type, relation)
        if definition is None:
            self._probe.undefined_relation(
                relation=relation, object=object, model_id=model.id
            )
            return False

        if definition.accepts_direct and await self._check_direct(
            model, subject, relation, object
        ):
            return True

        for computed in definition.computed_from:
            if await self._evaluate(model, subject, computed, object):
                return True

        if definition.from_parent:
            parent = await self._resolve_parent(model, object_type, object)
            if parent is not None:
                for parent_relation in definition.from_parent:
                    if await self._evaluate(model, subject, parent_relation, parent):
                        return True

        return False

    async def _check_direct(
        self,
        model: AuthorizationModel,
        subject: str,
        relation: str,
        object: str,
    ) -> bool:
        try:
            return await self._store.check(
                subject=subject, relation=relation, object=object, model_id=model.id
            )
        except StoreUnavailableError as e:
            self._probe.direct_check_failed(
                subject=subject, relation=relation, object=object, error=e
            )
            return False

    async def _resolve_parent(
        self,
        model: AuthorizationModel,
        object_type: str,
        object: str,
    ) -> str | None:
        type_def = model.type_definition(object_type)
        if type_def is None or type_def.parent is None:
            return None
        try:
            return await self._parent_resolver.parent_of(object, type_def.parent)
        except StoreUnavailableError as e:
            self._probe.parent_resolution_failed(object=object, error=e)
            return None
