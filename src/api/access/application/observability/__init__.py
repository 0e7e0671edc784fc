"""Domain-Oriented Observability for the access application layer.

Probes for application service operations following Domain-Oriented Observability patterns.
"""

from access.application.observability.batch_query_probe import (
    BatchQueryProbe,
    DefaultBatchQueryProbe,
)
from access.application.observability.cascade_planner_probe import (
    CascadePlannerProbe,
    DefaultCascadePlannerProbe,
)
from access.application.observability.model_registry_probe import (
    DefaultModelRegistryProbe,
    ModelRegistryProbe,
)
from access.application.observability.permission_cache_probe import (
    DefaultPermissionCacheProbe,
    PermissionCacheProbe,
)
from access.application.observability.permission_evaluator_probe import (
    DefaultPermissionEvaluatorProbe,
    PermissionEvaluatorProbe,
)
from access.application.observability.relationship_service_probe import (
    DefaultRelationshipServiceProbe,
    RelationshipServiceProbe,
)

__all__ = [
    "BatchQueryProbe",
    "DefaultBatchQueryProbe",
    "CascadePlannerProbe",
    "DefaultCascadePlannerProbe",
    "ModelRegistryProbe",
    "DefaultModelRegistryProbe",
    "PermissionCacheProbe",
    "DefaultPermissionCacheProbe",
    "PermissionEvaluatorProbe",
    "DefaultPermissionEvaluatorProbe",
    "RelationshipServiceProbe",
    "DefaultRelationshipServiceProbe",
]
