"""Application services for the access bounded context."""

from access.application.services.batch_query import BatchQueryEngine
from access.application.services.cascade_planner import CascadePlanner
from access.application.services.model_registry import ModelRegistry
from access.application.services.permission_cache import (
    CacheStats,
    RequestScopedPermissionCache,
)
from access.application.services.permission_evaluator import PermissionEvaluator
from access.application.services.relationship_service import RelationshipService

__all__ = [
    "BatchQueryEngine",
    "CacheStats",
    "CascadePlanner",
    "ModelRegistry",
    "PermissionEvaluator",
    "RelationshipService",
    "RequestScopedPermissionCache",
]
