"""Cascade planner for the access bounded context.

Computes and submits the relationship facts to remove when a resource is
permanently deleted.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from access.application.observability import (
    CascadePlannerProbe,
    DefaultCascadePlannerProbe,
)
from access.application.services.model_registry import ModelRegistry
from access.domain.value_objects import CascadeResult
from access.ports.inventory import ResourceInventoryProvider
from shared_kernel.authorization.exceptions import StoreUnavailableError
from shared_kernel.authorization.model import AuthorizationModel
from shared_kernel.authorization.protocols import RelationshipStore
from shared_kernel.authorization.types import (
    RelationshipFact,
    format_resource,
    parse_reference,
)


class CascadePlanner:
    """Plans and submits the cleanup of facts around a deleted resource.

    The blast radius of deleting a resource is:

    1. every stored fact whose object is the resource itself, for each
       relation its type accepts facts for (parent link included);
    2. for each live direct child reported by the host inventory, the facts
       through which the resource grants rights on that child: one per
       inherited relation of the child type, plus the parent link.

    Cleanup is best-effort. Nothing here raises: failures are logged and
    reported in the CascadeResult, and the caller's deletion proceeds.
    """

    def __init__(
        self,
        store: RelationshipStore,
        registry: ModelRegistry,
        inventory: ResourceInventoryProvider,
        probe: CascadePlannerProbe | None = None,
    ):
        """Initialize CascadePlanner.

        Args:
            store: Store to enumerate and delete facts in
            registry: Registry resolving the active model
            inventory: Host capability listing a resource's direct children
            probe: Optional domain probe for observability
        """
        self._store = store
        self._registry = registry
        self._inventory = inventory
        self._probe = probe or DefaultCascadePlannerProbe()

    async def plan(self, resource: str) -> list[RelationshipFact]:
        """Compute the facts to remove when ``resource`` is deleted.

        Args:
            resource: The resource being deleted (e.g., "partner:p1")

        Returns:
            De-duplicated facts, own facts first, then child grants

        Raises:
            ModelUnavailableError: If no model version can be resolved
            ValueError: If ``resource`` is not a "type:id" reference
        """
        resource_type, resource_id = parse_reference(resource)
        model = await self._registry.get_active_model()

        facts = await self._own_facts(model, resource_type, resource)
        children = await self._inventory.children_of(resource_type, resource_id)
        child_facts, child_count = self._child_facts(
            model, resource_type, resource, children
        )
        facts.extend(child_facts)

        planned = list(dict.fromkeys(facts))
        self._probe.cascade_planned(
            resource=resource, fact_count=len(planned), child_count=child_count
        )
        return planned

    async def plan_and_delete_cascade(self, resource: str) -> CascadeResult:
        """Plan the cascade and submit it as one delete batch.

        Planned facts the model's type restrictions rule out can never be
        stored, so they are reported as deleted without being sent.

        Returns:
            The facts deleted, or the facts that failed to delete. If no plan
            could be produced both are empty.
        """
        try:
            model = await self._registry.get_active_model()
            facts = await self.plan(resource)
        except Exception as e:
            self._probe.cascade_planning_failed(resource=resource, error=e)
            return CascadeResult(resource=resource)

        storable: list[RelationshipFact] = []
        unstorable: list[RelationshipFact] = []
        for fact in facts:
            if model.allows_fact(fact.subject, fact.relation, fact.object):
                storable.append(fact)
            else:
                unstorable.append(fact)

        try:
            await self._store.delete(storable, model_id=model.id)
        except StoreUnavailableError as e:
            self._probe.cascade_delete_failed(
                resource=resource, count=len(storable), error=e
            )
            return CascadeResult(
                resource=resource, deleted=tuple(unstorable), failed=tuple(storable)
            )

        self._probe.cascade_deleted(resource=resource, count=len(facts))
        return CascadeResult(resource=resource, deleted=tuple(facts))

    async def _own_facts(
        self,
        model: AuthorizationModel,
        resource_type: str,
        resource: str,
    ) -> list[RelationshipFact]:
        type_def = model.type_definition(resource_type)
        if type_def is None:
            return []

        facts: list[RelationshipFact] = []
        for relation in type_def.assignable_relations:
            try:
                facts.extend(await self._store.read(resource, relation.name))
            except StoreUnavailableError as e:
                self._probe.cascade_read_failed(
                    resource=resource, relation=relation.name, error=e
                )
        return facts

    def _child_facts(
        self,
        model: AuthorizationModel,
        resource_type: str,
        resource: str,
        children: Mapping[str, Sequence[str]],
    ) -> tuple[list[RelationshipFact], int]:
        facts: list[RelationshipFact] = []
        child_count = 0
        for child_type, child_ids in children.items():
            child_def = model.type_definition(child_type)
            if (
                child_def is None
                or child_def.parent is None
                or child_def.parent.parent_type != resource_type
            ):
                continue
            for child_id in child_ids:
                child = format_resource(child_type, child_id)
                child_count += 1
                for relation in child_def.inherited_relations:
                    facts.append(RelationshipFact(resource, relation.name, child))
                facts.append(
                    RelationshipFact(resource, child_def.parent.relation, child)
                )
        return facts, child_count
