"""Unit test fixtures for the authorization core.

Everything runs against the in-memory relationship store and the bundled
partner portal model; nothing here needs a running OpenFGA server.
"""

from datetime import UTC, datetime, timedelta

import pytest

from access.application.services import (
    BatchQueryEngine,
    CascadePlanner,
    ModelRegistry,
    PermissionEvaluator,
    RelationshipService,
    RequestScopedPermissionCache,
)
from access.infrastructure import StaticResourceInventory, StoredParentResolver
from shared_kernel.authorization.dsl import load_bundled_model
from shared_kernel.authorization.in_memory import InMemoryRelationshipStore
from shared_kernel.authorization.model import AuthorizationModel


class ManualClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 1, 1, tzinfo=UTC)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def model() -> AuthorizationModel:
    """The bundled partner portal model."""
    return load_bundled_model("01HVMMBCMGZNT3SED4Z17ECXCA")


@pytest.fixture
def store(model: AuthorizationModel) -> InMemoryRelationshipStore:
    return InMemoryRelationshipStore(models=[model])


@pytest.fixture
def inventory() -> StaticResourceInventory:
    return StaticResourceInventory()


@pytest.fixture
def registry(store, clock) -> ModelRegistry:
    return ModelRegistry(store=store, clock=clock)


@pytest.fixture
def evaluator(store, registry) -> PermissionEvaluator:
    """Evaluator resolving parents from stored parent-link facts."""
    return PermissionEvaluator(
        store=store,
        registry=registry,
        parent_resolver=StoredParentResolver(store),
    )


@pytest.fixture
def permission_cache(evaluator) -> RequestScopedPermissionCache:
    return RequestScopedPermissionCache(evaluator=evaluator)


@pytest.fixture
def batch_engine(store, registry, evaluator) -> BatchQueryEngine:
    return BatchQueryEngine(store=store, registry=registry, evaluator=evaluator)


@pytest.fixture
def cascade_planner(store, registry, inventory) -> CascadePlanner:
    return CascadePlanner(store=store, registry=registry, inventory=inventory)


@pytest.fixture
def relationship_service(store, registry) -> RelationshipService:
    return RelationshipService(store=store, registry=registry)
