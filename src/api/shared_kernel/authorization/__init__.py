"""Authorization primitives for relationship-based access control.

This module provides shared authorization types and abstractions used across
bounded contexts for the OpenFGA integration.
"""

from shared_kernel.authorization.exceptions import (
    AuthorizationError,
    InvalidModelError,
    ModelUnavailableError,
    StoreUnavailableError,
    UndefinedRelationError,
)
from shared_kernel.authorization.model import (
    AuthorizationModel,
    ParentLink,
    RelationDefinition,
    TypeDefinition,
)
from shared_kernel.authorization.types import (
    CheckRequest,
    Relation,
    RelationshipFact,
    ResourceType,
    format_platform,
    format_resource,
)

__all__ = [
    "AuthorizationError",
    "AuthorizationModel",
    "CheckRequest",
    "InvalidModelError",
    "ModelUnavailableError",
    "ParentLink",
    "Relation",
    "RelationDefinition",
    "RelationshipFact",
    "ResourceType",
    "StoreUnavailableError",
    "TypeDefinition",
    "UndefinedRelationError",
    "format_platform",
    "format_resource",
]
