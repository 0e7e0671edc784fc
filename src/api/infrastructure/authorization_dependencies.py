"""OpenFGA client and model registry factories.

Provides the process-wide relationship store client and model registry for
dependency injection in FastAPI endpoints and application services.

Both are cached with lru_cache: the httpx connection pool lives inside the
client, and the registry's model cache only helps if it outlives a request.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from access.application.services.model_registry import ModelRegistry
from infrastructure.settings import get_authorization_settings, get_openfga_settings
from infrastructure.version import get_user_agent
from shared_kernel.authorization.dsl import load_bundled_model
from shared_kernel.authorization.model import AuthorizationModel
from shared_kernel.authorization.openfga.client import OpenFGAClient


@lru_cache
def get_openfga_client() -> OpenFGAClient:
    """Get the cached OpenFGA client configured from settings.

    The underlying httpx connection is created lazily on first use.

    Returns:
        OpenFGA client implementing the RelationshipStore protocol
    """
    settings = get_openfga_settings()
    api_token = (
        settings.api_token.get_secret_value() if settings.api_token is not None else None
    )
    return OpenFGAClient(
        api_url=settings.api_url,
        store_id=settings.store_id,
        api_token=api_token,
        timeout_seconds=settings.timeout_seconds,
        user_agent=get_user_agent(),
    )


def get_fallback_model() -> AuthorizationModel | None:
    """Bundled model under the pinned id, if a model id is pinned in settings.

    The pinned id is what the store knows the deployed model as; the bundled
    schema is what the evaluator walks when the store cannot be asked.
    """
    pinned_id = get_openfga_settings().authorization_model_id
    if not pinned_id:
        return None
    return load_bundled_model(pinned_id)


@lru_cache
def get_model_registry() -> ModelRegistry:
    """Get the cached, process-wide model registry."""
    settings = get_authorization_settings()
    return ModelRegistry(
        store=get_openfga_client(),
        ttl=timedelta(seconds=settings.model_cache_ttl_seconds),
        fallback_model=get_fallback_model(),
    )
