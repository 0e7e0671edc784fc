"""Integration test fixtures for the OpenFGA relationship store.

These fixtures require a running OpenFGA server with a store holding the
bundled partner portal model, e.g.:

    fga store create --name portal-authz-test
    fga model write --store-id $STORE --file shared_kernel/authorization/openfga/schema.fga

Point the tests at it with PORTAL_AUTHZ_FGA_API_URL and
PORTAL_AUTHZ_FGA_STORE_ID. Without a store id every test here is skipped.
"""

from collections.abc import AsyncGenerator
import os
import uuid

import pytest
import pytest_asyncio

from access.application.services import ModelRegistry, PermissionEvaluator
from access.infrastructure import StoredParentResolver
from infrastructure.settings import OpenFGASettings
from shared_kernel.authorization.openfga import OpenFGAClient
from shared_kernel.authorization.types import RelationshipFact


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires OpenFGA)",
    )


def pytest_collection_modifyitems(config, items):
    if os.getenv("PORTAL_AUTHZ_FGA_STORE_ID"):
        return
    skip = pytest.mark.skip(reason="PORTAL_AUTHZ_FGA_STORE_ID is not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def integration_fga_settings() -> OpenFGASettings:
    """OpenFGA settings for integration tests, read from the environment."""
    return OpenFGASettings()


@pytest_asyncio.fixture
async def openfga_client(
    integration_fga_settings: OpenFGASettings,
) -> AsyncGenerator[OpenFGAClient, None]:
    """Provide an OpenFGA client, closed after each test."""
    api_token = integration_fga_settings.api_token
    client = OpenFGAClient(
        api_url=integration_fga_settings.api_url,
        store_id=integration_fga_settings.store_id,
        api_token=api_token.get_secret_value() if api_token else None,
        timeout_seconds=integration_fga_settings.timeout_seconds,
    )
    yield client
    await client.close()


@pytest.fixture
def model_registry(openfga_client: OpenFGAClient) -> ModelRegistry:
    return ModelRegistry(store=openfga_client)


@pytest.fixture
def live_evaluator(
    openfga_client: OpenFGAClient, model_registry: ModelRegistry
) -> PermissionEvaluator:
    return PermissionEvaluator(
        store=openfga_client,
        registry=model_registry,
        parent_resolver=StoredParentResolver(openfga_client),
    )


@pytest.fixture
def unique_id() -> str:
    """Ids are unique per test so runs never see each other's facts."""
    return uuid.uuid4().hex[:12]


@pytest_asyncio.fixture
async def written_facts(
    openfga_client: OpenFGAClient, model_registry: ModelRegistry
) -> AsyncGenerator[list[RelationshipFact], None]:
    """Facts appended here are deleted from the store after the test."""
    facts: list[RelationshipFact] = []
    yield facts
    if facts:
        model_id = await model_registry.get_active_model_id()
        await openfga_client.delete(facts, model_id=model_id)
