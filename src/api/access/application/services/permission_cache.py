"""Request-scoped permission cache for the access bounded context."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from access.application.observability import (
    DefaultPermissionCacheProbe,
    PermissionCacheProbe,
)
from access.application.services.permission_evaluator import PermissionEvaluator
from shared_kernel.authorization.exceptions import AuthorizationError
from shared_kernel.authorization.types import (
    DEFAULT_PLATFORM_ID,
    Relation,
    format_platform,
)


@dataclass(frozen=True)
class CacheStats:
    """Counters for one cache instance."""

    hits: int
    misses: int
    size: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class RequestScopedPermissionCache:
    """Memoizes repeated checks within one logical operation.

    Construct one instance per incoming request and pass it down the call
    chain; discard it when the request ends. Answers depend on the subject
    and on time, so an instance must never be shared between unrelated
    requests or held at module level.

    Concurrent callers asking the same question share one in-flight
    evaluation. Failed evaluations resolve to deny and are not memoized.
    """

    def __init__(
        self,
        evaluator: PermissionEvaluator,
        platform_id: str = DEFAULT_PLATFORM_ID,
        probe: PermissionCacheProbe | None = None,
    ):
        """Initialize the cache.

        Args:
            evaluator: Evaluator answering cache misses
            platform_id: Id of the platform object holding super admins
            probe: Optional domain probe for observability
        """
        self._evaluator = evaluator
        self._platform = format_platform(platform_id)
        self._probe = probe or DefaultPermissionCacheProbe()
        self._entries: dict[tuple[str, str, str], asyncio.Task[bool]] = {}
        self._hits = 0
        self._misses = 0

    async def is_super_admin(self, subject: str) -> bool:
        """Whether the subject is a super admin of the platform."""
        return await self.check(subject, Relation.SUPER_ADMIN, self._platform)

    async def check(self, subject: str, relation: str, object: str) -> bool:
        """Evaluate a relation once per instance and reuse the answer.

        Args:
            subject: Subject identifier (e.g., "user:42")
            relation: Relation name (e.g., "can_view")
            object: Object identifier (e.g., "partner:abc")

        Returns:
            The memoized decision; False if evaluation failed
        """
        key = (subject, str(relation), object)
        task = self._entries.get(key)
        if task is not None:
            self._hits += 1
        else:
            self._misses += 1
            task = asyncio.ensure_future(
                self._evaluator.evaluate(subject=subject, relation=key[1], object=object)
            )
            self._entries[key] = task

        try:
            return await asyncio.shield(task)
        except AuthorizationError as e:
            self._evict(key, task)
            self._probe.cached_evaluation_failed(
                subject=subject, relation=key[1], object=object, error=e
            )
            return False
        except Exception:
            self._evict(key, task)
            raise

    def _evict(self, key: tuple[str, str, str], task: asyncio.Task[bool]) -> None:
        """Drop a failed evaluation so the next caller evaluates afresh."""
        if self._entries.get(key) is task:
            del self._entries[key]

    def reset(self) -> None:
        """Forget every memoized answer, e.g. after the subject's role changed."""
        size = len(self._entries)
        self._entries.clear()
        self._probe.cache_reset(size=size)

    @property
    def stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))
