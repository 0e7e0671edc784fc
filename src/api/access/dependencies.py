"""FastAPI dependencies for the access bounded context.

Process-wide objects (store client, model registry) come from
``infrastructure.authorization_dependencies``. Everything built here is
per request: FastAPI caches a dependency's value for the duration of one
request, so every endpoint parameter asking for the permission cache gets
the same instance, and the next request gets a fresh one.

Hosts authenticate the caller themselves and put the subject identifier
(e.g., "user:42") on ``request.state.subject``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from access.application.services import (
    BatchQueryEngine,
    CascadePlanner,
    ModelRegistry,
    PermissionEvaluator,
    RelationshipService,
    RequestScopedPermissionCache,
)
from access.infrastructure import StaticResourceInventory, StoredParentResolver
from access.ports.inventory import ParentResolver, ResourceInventoryProvider
from infrastructure.authorization_dependencies import (
    get_model_registry,
    get_openfga_client,
)
from infrastructure.settings import get_authorization_settings
from shared_kernel.authorization.exceptions import AuthorizationError
from shared_kernel.authorization.protocols import RelationshipStore
from shared_kernel.authorization.types import ResourceType, format_resource


def get_relationship_store() -> RelationshipStore:
    """Get the process-wide relationship store client."""
    return get_openfga_client()


def get_parent_resolver(
    store: Annotated[RelationshipStore, Depends(get_relationship_store)],
) -> ParentResolver:
    """Resolve parents from the stored parent-link facts."""
    return StoredParentResolver(store)


@lru_cache
def get_resource_inventory() -> ResourceInventoryProvider:
    """Get the resource inventory used for cascade planning.

    Defaults to a process-wide in-memory registry. Hosts with a resource
    database override this via ``app.dependency_overrides``.
    """
    return StaticResourceInventory()


def get_permission_evaluator(
    store: Annotated[RelationshipStore, Depends(get_relationship_store)],
    registry: Annotated[ModelRegistry, Depends(get_model_registry)],
    parent_resolver: Annotated[ParentResolver, Depends(get_parent_resolver)],
) -> PermissionEvaluator:
    """Get a PermissionEvaluator instance."""
    return PermissionEvaluator(
        store=store,
        registry=registry,
        parent_resolver=parent_resolver,
    )


def get_permission_cache(
    evaluator: Annotated[PermissionEvaluator, Depends(get_permission_evaluator)],
) -> RequestScopedPermissionCache:
    """Get the permission cache for the current request.

    Never cache this with lru_cache: answers are only valid for the request
    that produced them.
    """
    return RequestScopedPermissionCache(
        evaluator=evaluator,
        platform_id=get_authorization_settings().platform_id,
    )


def get_batch_query_engine(
    store: Annotated[RelationshipStore, Depends(get_relationship_store)],
    registry: Annotated[ModelRegistry, Depends(get_model_registry)],
    evaluator: Annotated[PermissionEvaluator, Depends(get_permission_evaluator)],
) -> BatchQueryEngine:
    """Get a BatchQueryEngine instance."""
    return BatchQueryEngine(store=store, registry=registry, evaluator=evaluator)


def get_cascade_planner(
    store: Annotated[RelationshipStore, Depends(get_relationship_store)],
    registry: Annotated[ModelRegistry, Depends(get_model_registry)],
    inventory: Annotated[ResourceInventoryProvider, Depends(get_resource_inventory)],
) -> CascadePlanner:
    """Get a CascadePlanner instance."""
    return CascadePlanner(store=store, registry=registry, inventory=inventory)


def get_relationship_service(
    store: Annotated[RelationshipStore, Depends(get_relationship_store)],
    registry: Annotated[ModelRegistry, Depends(get_model_registry)],
) -> RelationshipService:
    """Get a RelationshipService instance."""
    return RelationshipService(
        store=store,
        registry=registry,
        platform_id=get_authorization_settings().platform_id,
    )


def get_current_subject(request: Request) -> str:
    """Return the authenticated subject placed on the request by the host.

    Raises:
        HTTPException 401: If the host did not authenticate the request
    """
    subject = getattr(request.state, "subject", None)
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return subject


def require_permission(
    relation: str,
    resource_type: ResourceType | str,
    param: str = "id",
) -> Callable[..., Awaitable[str]]:
    """Build a dependency that guards an endpoint with a permission check.

    The resource id is read from the path parameter ``param``. Denials and
    evaluation failures both answer 403 with a generic detail.

    Example:
        @router.get("/partners/{id}")
        async def get_partner(
            subject: Annotated[str, Depends(require_permission("can_view", "partner"))],
        ): ...

    Returns:
        Dependency returning the permitted subject
    """

    async def dependency(
        request: Request,
        subject: Annotated[str, Depends(get_current_subject)],
        cache: Annotated[RequestScopedPermissionCache, Depends(get_permission_cache)],
    ) -> str:
        resource_id = request.path_params.get(param)
        allowed = False
        if resource_id:
            try:
                allowed = await cache.check(
                    subject, relation, format_resource(resource_type, resource_id)
                )
            except AuthorizationError:
                allowed = False
        if not allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden",
            )
        return subject

    return dependency
