"""Unit tests for RequestScopedPermissionCache."""

import asyncio

import pytest
from unittest.mock import AsyncMock, create_autospec

from access.application.observability import PermissionCacheProbe
from access.application.services.permission_cache import (
    CacheStats,
    RequestScopedPermissionCache,
)
from access.application.services.permission_evaluator import PermissionEvaluator
from shared_kernel.authorization.exceptions import ModelUnavailableError
from shared_kernel.authorization.types import RelationshipFact


@pytest.fixture
def mock_evaluator():
    evaluator = create_autospec(PermissionEvaluator, instance=True)
    evaluator.evaluate = AsyncMock(return_value=True)
    return evaluator


@pytest.fixture
def mock_probe():
    return create_autospec(PermissionCacheProbe, instance=True)


class TestMemoization:
    """Tests for memoized checks."""

    @pytest.mark.asyncio
    async def test_repeated_check_evaluates_once(self, mock_evaluator):
        cache = RequestScopedPermissionCache(mock_evaluator)

        assert await cache.check("user:u1", "can_view", "partner:p1") is True
        assert await cache.check("user:u1", "can_view", "partner:p1") is True

        assert mock_evaluator.evaluate.await_count == 1
        assert cache.stats == CacheStats(hits=1, misses=1, size=1)

    @pytest.mark.asyncio
    async def test_distinct_questions_are_cached_separately(self, mock_evaluator):
        cache = RequestScopedPermissionCache(mock_evaluator)

        await cache.check("user:u1", "can_view", "partner:p1")
        await cache.check("user:u1", "can_admin", "partner:p1")
        await cache.check("user:u2", "can_view", "partner:p1")

        assert mock_evaluator.evaluate.await_count == 3

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_evaluation(self, mock_evaluator):
        release = asyncio.Event()

        async def slow_evaluate(subject, relation, object):
            await release.wait()
            return True

        mock_evaluator.evaluate = AsyncMock(side_effect=slow_evaluate)
        cache = RequestScopedPermissionCache(mock_evaluator)

        pending = [
            asyncio.ensure_future(cache.check("user:u1", "can_view", "partner:p1"))
            for _ in range(5)
        ]
        await asyncio.sleep(0)
        release.set()

        assert await asyncio.gather(*pending) == [True] * 5
        assert mock_evaluator.evaluate.await_count == 1

    @pytest.mark.asyncio
    async def test_hit_rate(self, mock_evaluator):
        cache = RequestScopedPermissionCache(mock_evaluator)
        assert cache.stats.hit_rate == 0.0

        for _ in range(4):
            await cache.check("user:u1", "can_view", "partner:p1")

        assert cache.stats.hit_rate == 0.75


class TestSuperAdmin:
    """Tests for is_super_admin."""

    @pytest.mark.asyncio
    async def test_checks_platform_super_admin_once(self, mock_evaluator):
        cache = RequestScopedPermissionCache(mock_evaluator)

        assert await cache.is_super_admin("user:root") is True
        assert await cache.is_super_admin("user:root") is True

        mock_evaluator.evaluate.assert_awaited_once_with(
            subject="user:root", relation="super_admin", object="platform:default"
        )

    @pytest.mark.asyncio
    async def test_uses_configured_platform(self, mock_evaluator):
        cache = RequestScopedPermissionCache(mock_evaluator, platform_id="main")

        await cache.is_super_admin("user:root")

        assert mock_evaluator.evaluate.call_args[1]["object"] == "platform:main"

    @pytest.mark.asyncio
    async def test_against_real_evaluator(self, store, permission_cache):
        await store.write(
            [RelationshipFact("user:root", "super_admin", "platform:default")],
            model_id="test",
        )

        assert await permission_cache.is_super_admin("user:root") is True
        assert await permission_cache.is_super_admin("user:u1") is False


class TestFailures:
    """Tests for evaluation failures."""

    @pytest.mark.asyncio
    async def test_failure_denies_and_is_not_memoized(self, mock_evaluator, mock_probe):
        mock_evaluator.evaluate = AsyncMock(
            side_effect=[ModelUnavailableError("none"), True]
        )
        cache = RequestScopedPermissionCache(mock_evaluator, probe=mock_probe)

        assert await cache.check("user:u1", "can_view", "partner:p1") is False
        assert await cache.check("user:u1", "can_view", "partner:p1") is True

        assert mock_evaluator.evaluate.await_count == 2
        mock_probe.cached_evaluation_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_unexpected_failure_is_raised_and_not_memoized(self, mock_evaluator):
        mock_evaluator.evaluate = AsyncMock(side_effect=[RuntimeError("boom"), True])
        cache = RequestScopedPermissionCache(mock_evaluator)

        with pytest.raises(RuntimeError):
            await cache.check("user:u1", "can_view", "partner:p1")

        assert cache.stats.size == 0
        assert await cache.check("user:u1", "can_view", "partner:p1") is True
        assert mock_evaluator.evaluate.await_count == 2


class TestReset:
    """Tests for reset and instance isolation."""

    @pytest.mark.asyncio
    async def test_reset_forgets_answers(self, mock_evaluator, mock_probe):
        """After a role change the next check asks the evaluator again."""
        cache = RequestScopedPermissionCache(mock_evaluator, probe=mock_probe)
        await cache.check("user:u1", "can_view", "partner:p1")

        cache.reset()
        await cache.check("user:u1", "can_view", "partner:p1")

        assert mock_evaluator.evaluate.await_count == 2
        mock_probe.cache_reset.assert_called_once_with(size=1)

    @pytest.mark.asyncio
    async def test_instances_do_not_share_answers(self, mock_evaluator):
        """Each request gets its own cache; nothing leaks between them."""
        first = RequestScopedPermissionCache(mock_evaluator)
        second = RequestScopedPermissionCache(mock_evaluator)

        await first.check("user:u1", "can_view", "partner:p1")
        mock_evaluator.evaluate = AsyncMock(return_value=False)

        assert await second.check("user:u1", "can_view", "partner:p1") is False
        assert await first.check("user:u1", "can_view", "partner:p1") is True

    @pytest.mark.asyncio
    async def test_revoked_access_seen_after_reset(self, store, permission_cache):
        grant = RelationshipFact("user:u1", "can_view", "partner:p1")
        await store.write([grant], model_id="test")
        assert await permission_cache.check("user:u1", "can_view", "partner:p1") is True

        await store.delete([grant], model_id="test")
        assert await permission_cache.check("user:u1", "can_view", "partner:p1") is True

        permission_cache.reset()
        assert await permission_cache.check("user:u1", "can_view", "partner:p1") is False
