"""Model registry for the access bounded context.

Resolves and caches the currently active authorization model version.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from access.application.observability import (
    DefaultModelRegistryProbe,
    ModelRegistryProbe,
)
from shared_kernel.authorization.exceptions import (
    AuthorizationError,
    ModelUnavailableError,
)
from shared_kernel.authorization.model import AuthorizationModel
from shared_kernel.authorization.protocols import RelationshipStore
from shared_kernel.clock import Clock, SystemClock

DEFAULT_MODEL_TTL = timedelta(minutes=5)


class ModelRegistry:
    """Resolves the active (newest) authorization model.

    Holds a single cached (model, expires_at) pair. Refreshing is idempotent
    and only ever overwrites the cache with an equivalent or newer model, so
    concurrent callers racing to refresh need no lock.

    One registry is constructed per process and injected wherever a model id
    is needed.
    """

    def __init__(
        self,
        store: RelationshipStore,
        clock: Clock | None = None,
        ttl: timedelta = DEFAULT_MODEL_TTL,
        fallback_model: AuthorizationModel | None = None,
        probe: ModelRegistryProbe | None = None,
    ):
        """Initialize ModelRegistry.

        Args:
            store: Store to list model versions from
            clock: Time source for cache expiry
            ttl: How long a resolved model stays cached
            fallback_model: Pinned model returned when the store cannot
                provide one
            probe: Optional domain probe for observability
        """
        self._store = store
        self._clock = clock or SystemClock()
        self._ttl = ttl
        self._fallback_model = fallback_model
        self._probe = probe or DefaultModelRegistryProbe()
        self._cached: tuple[AuthorizationModel, datetime] | None = None

    async def get_active_model_id(self) -> str:
        """Return the id of the active model version.

        Raises:
            ModelUnavailableError: If no model can be resolved
        """
        model = await self.get_active_model()
        return model.id

    async def get_active_model(self) -> AuthorizationModel:
        """Return the active model snapshot, refreshing it once the TTL expires.

        Returns:
            The newest model known to the store, or the pinned fallback when
            the store cannot be reached

        Raises:
            ModelUnavailableError: If no model can be resolved and no fallback
                is configured
        """
        now = self._clock.now()
        cached = self._cached
        if cached is not None:
            model, expires_at = cached
            if now < expires_at:
                return model

        try:
            models = await self._store.read_authorization_models()
            if not models:
                raise ModelUnavailableError("No authorization models found")
        except AuthorizationError as e:
            self._probe.model_refresh_failed(error=e)
            if self._fallback_model is not None:
                self._probe.fallback_model_used(model_id=self._fallback_model.id)
                return self._fallback_model
            self._probe.model_unavailable()
            raise ModelUnavailableError("No authorization model available") from e

        latest = models[0]
        previous_id = cached[0].id if cached is not None else None
        self._cached = (latest, now + self._ttl)
        self._probe.model_refreshed(model_id=latest.id, previous_model_id=previous_id)
        return latest

    def invalidate(self) -> None:
        """Drop the cached model so the next call refreshes it."""
        self._cached = None
