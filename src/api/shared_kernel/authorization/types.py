"""Authorization type definitions for the partner portal model.

Defines resource types, relations, and relationship facts that map to the
OpenFGA model. These enums ensure type safety and prevent hardcoded strings
across the codebase.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ResourceType(StrEnum):
    """Resource types matching the model's type definitions.

    Each value corresponds to a `type` in the authorization model (.fga file).
    """

    USER = "user"
    PARTNER = "partner"
    CLIENT = "client"
    DOCUMENT = "document"
    METRO_AREA = "metro_area"
    PLATFORM = "platform"


class Relation(StrEnum):
    """Relations matching the model's relation definitions.

    Each value corresponds to a `define` in the authorization model.
    """

    CAN_ADMIN = "can_admin"
    CAN_MANAGE_MEMBERS = "can_manage_members"
    CAN_VIEW = "can_view"
    PARENT = "parent"
    SUPER_ADMIN = "super_admin"
    CAN_MANAGE_ALL = "can_manage_all"
    CAN_VIEW_ALL = "can_view_all"
    MANAGE_SME_ADMINS = "manage_sme_admins"


DEFAULT_PLATFORM_ID = "default"


@dataclass(frozen=True)
class RelationshipFact:
    """A stored (subject, relation, object) relationship.

    Attributes:
        subject: Subject identifier (e.g., "user:42" or "partner:abc")
        relation: Relation name (e.g., "can_admin")
        object: Object identifier (e.g., "client:c1")
    """

    subject: str
    relation: str
    object: str

    def __str__(self) -> str:
        return f"{self.subject} {self.relation} {self.object}"

    def as_tuple_key(self) -> dict[str, str]:
        """Serialize to the store's tuple key shape."""
        return {"user": self.subject, "relation": self.relation, "object": self.object}


@dataclass(frozen=True)
class CheckRequest:
    """A single permission check request for bulk operations.

    Attributes:
        resource: Resource identifier (e.g., "partner:abc123")
        permission: Relation to check (e.g., "can_view")
        subject: Subject identifier (e.g., "user:alice")
    """

    resource: str
    permission: str
    subject: str


def format_resource(resource_type: ResourceType | str, resource_id: str) -> str:
    """Format a resource identifier for the store.

    Args:
        resource_type: The type of resource
        resource_id: The unique identifier for the resource

    Returns:
        Formatted resource string (e.g., "partner:abc123")

    Example:
        >>> format_resource(ResourceType.PARTNER, "abc123")
        'partner:abc123'
    """
    return f"{resource_type}:{resource_id}"


def format_platform(platform_id: str = DEFAULT_PLATFORM_ID) -> str:
    """Format the platform object that every resource hierarchy terminates in."""
    return format_resource(ResourceType.PLATFORM, platform_id)


def parse_reference(reference: str, kind: str = "resource") -> tuple[str, str]:
    """Split a "type:id" reference into its type and id.

    Args:
        reference: The reference to split (e.g., "partner:abc")
        kind: What the reference is, used in the error message

    Returns:
        Tuple of (type, id)

    Raises:
        ValueError: If the reference has no type prefix or no id
    """
    object_type, sep, object_id = reference.partition(":")
    if not sep or not object_type or not object_id:
        raise ValueError(
            f"Invalid {kind} format: {reference!r}. Expected 'type:id'"
        )
    return object_type, object_id


def strip_type_prefix(reference: str) -> str:
    """Return the bare id of a "type:id" reference.

    References without a prefix are returned unchanged.
    """
    _, sep, object_id = reference.partition(":")
    return object_id if sep else reference
