"""Batch query engine for the access bounded context.

Fans a subject's membership lookups out across several relations in parallel
and merges the results.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from access.application.observability import BatchQueryProbe, DefaultBatchQueryProbe
from access.application.services.model_registry import ModelRegistry
from access.application.services.permission_evaluator import PermissionEvaluator
from shared_kernel.authorization.exceptions import AuthorizationError, StoreUnavailableError
from shared_kernel.authorization.protocols import RelationshipStore
from shared_kernel.authorization.types import CheckRequest


class BatchQueryEngine:
    """Runs many lookups concurrently with a partial-success policy.

    The store has no multi-relation primitive, so one ``list_objects`` call
    is issued per relation. All calls are awaited before merging; a failing
    relation contributes an empty result and never cancels the others.
    """

    def __init__(
        self,
        store: RelationshipStore,
        registry: ModelRegistry,
        evaluator: PermissionEvaluator,
        probe: BatchQueryProbe | None = None,
    ):
        """Initialize BatchQueryEngine.

        Args:
            store: Store used for object listing
            registry: Registry resolving the active model
            evaluator: Evaluator used for bulk checks
            probe: Optional domain probe for observability
        """
        self._store = store
        self._registry = registry
        self._evaluator = evaluator
        self._probe = probe or DefaultBatchQueryProbe()

    async def list_objects_for_relations(
        self,
        subject: str,
        relations: Sequence[str],
        resource_type: str,
    ) -> dict[str, list[str]]:
        """List the objects reachable under each relation.

        Args:
            subject: Subject identifier (e.g., "user:42")
            relations: Relations to look up (duplicates are queried once)
            resource_type: Type of objects to list (e.g., "partner")

        Returns:
            Mapping of relation to bare object ids. A relation whose lookup
            failed maps to an empty list.

        Raises:
            ModelUnavailableError: If no model version can be resolved
        """
        unique = list(dict.fromkeys(relations))
        if not unique:
            return {}

        model_id = await self._registry.get_active_model_id()
        failed: list[str] = []

        async def lookup(relation: str) -> list[str]:
            try:
                return await self._store.list_objects(
                    subject=subject,
                    relation=relation,
                    resource_type=resource_type,
                    model_id=model_id,
                )
            except StoreUnavailableError as e:
                self._probe.relation_lookup_failed(
                    subject=subject,
                    relation=relation,
                    resource_type=resource_type,
                    error=e,
                )
                failed.append(relation)
                return []

        results = await asyncio.gather(*(lookup(r) for r in unique))

        self._probe.batch_lookup_completed(
            subject=subject,
            resource_type=resource_type,
            relation_count=len(unique),
            failed_relations=failed,
        )
        return dict(zip(unique, results))

    async def union_across_relations(
        self,
        subject: str,
        relations: Sequence[str],
        resource_type: str,
    ) -> set[str]:
        """Return every object reachable under any of the relations, once each.

        Example:
            Every partner a user can reach as admin, member manager or viewer::

                await engine.union_across_relations(
                    "user:42", ["can_admin", "can_manage_members", "can_view"], "partner"
                )
        """
        by_relation = await self.list_objects_for_relations(
            subject, relations, resource_type
        )
        merged: set[str] = set()
        for objects in by_relation.values():
            merged.update(objects)
        return merged

    async def bulk_check(self, requests: Sequence[CheckRequest]) -> set[str]:
        """Evaluate many checks concurrently.

        Args:
            requests: Permission check requests

        Returns:
            Set of resource identifiers whose check was granted. A request
            that fails to evaluate is treated as denied.
        """

        async def evaluate(request: CheckRequest) -> bool:
            try:
                return await self._evaluator.evaluate(
                    subject=request.subject,
                    relation=request.permission,
                    object=request.resource,
                )
            except AuthorizationError:
                return False

        outcomes = await asyncio.gather(*(evaluate(r) for r in requests))
        permitted = {r.resource for r, allowed in zip(requests, outcomes) if allowed}

        self._probe.bulk_check_completed(
            total_requests=len(requests),
            permitted_count=len(permitted),
        )
        return permitted
