"""Authorization model snapshot.

An AuthorizationModel is an immutable, versioned mapping of resource type to
relation definitions. Each relation is a union of:

- direct grants from the listed subject types,
- other relations on the same object (computed usersets),
- a relation on the object's parent (``X from parent``).

Every type declares at most one parent link, so resources form a tree. Models
are validated on construction: dangling references, multiple parent links, and
cycles through unions or parent hops raise InvalidModelError.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType

from shared_kernel.authorization.exceptions import InvalidModelError


@dataclass(frozen=True)
class RelationDefinition:
    """Definition of a single relation on a type.

    Attributes:
        name: Relation name (e.g., "can_view")
        directly_related_types: Subject types that may be granted the relation
            directly. Empty when the relation is purely computed.
        computed_from: Relations on the same object that imply this one.
        from_parent: Relations on the parent object that imply this one.
    """

    name: str
    directly_related_types: tuple[str, ...] = ()
    computed_from: tuple[str, ...] = ()
    from_parent: tuple[str, ...] = ()

    @property
    def accepts_direct(self) -> bool:
        """Whether facts naming this relation may be written."""
        return bool(self.directly_related_types)

    @property
    def inherits_from_parent(self) -> bool:
        return bool(self.from_parent)


@dataclass(frozen=True)
class ParentLink:
    """The relation that points a resource at its parent.

    Attributes:
        relation: Name of the linking relation (e.g., "parent")
        parent_type: Type of the parent resource (e.g., "partner")
    """

    relation: str
    parent_type: str


@dataclass(frozen=True)
class TypeDefinition:
    """Relations declared by one resource type."""

    name: str
    relations: Mapping[str, RelationDefinition] = field(default_factory=dict)
    parent: ParentLink | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "relations", MappingProxyType(dict(self.relations)))

    def relation(self, name: str) -> RelationDefinition | None:
        return self.relations.get(name)

    @property
    def inherited_relations(self) -> tuple[RelationDefinition, ...]:
        """Relations that include a grant on the parent object."""
        return tuple(r for r in self.relations.values() if r.inherits_from_parent)

    @property
    def assignable_relations(self) -> tuple[RelationDefinition, ...]:
        """Relations that facts may be written for, parent link included."""
        return tuple(r for r in self.relations.values() if r.accepts_direct)


@dataclass(frozen=True)
class AuthorizationModel:
    """Immutable snapshot of one authorization model version.

    Attributes:
        id: Model version id assigned by the store
        types: Type definitions keyed by type name
        created_at: Creation time, when the store reports it
    """

    id: str
    types: Mapping[str, TypeDefinition]
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", MappingProxyType(dict(self.types)))
        _validate(self)

    def type_definition(self, type_name: str) -> TypeDefinition | None:
        return self.types.get(type_name)

    def relation(self, type_name: str, relation: str) -> RelationDefinition | None:
        """Look up a relation definition, or None if the type or relation is unknown."""
        type_def = self.types.get(type_name)
        if type_def is None:
            return None
        return type_def.relation(relation)

    def allows_fact(self, subject: str, relation: str, object: str) -> bool:
        """Whether the store would accept this fact under the type restrictions."""
        subject_type = subject.partition(":")[0]
        definition = self.relation(object.partition(":")[0], relation)
        return (
            definition is not None
            and subject_type in definition.directly_related_types
        )

    def with_id(self, model_id: str) -> AuthorizationModel:
        """Return the same definitions pinned to another version id."""
        return replace(self, id=model_id)


def _validate(model: AuthorizationModel) -> None:
    for type_def in model.types.values():
        _validate_type(model, type_def)
    _assert_acyclic(model)


def _validate_type(model: AuthorizationModel, type_def: TypeDefinition) -> None:
    parent = type_def.parent
    if parent is not None:
        link = type_def.relation(parent.relation)
        if link is None:
            raise InvalidModelError(
                f"{type_def.name}: parent link relation {parent.relation!r} is not defined"
            )
        if parent.parent_type not in model.types:
            raise InvalidModelError(
                f"{type_def.name}: parent type {parent.parent_type!r} is not defined"
            )
        if link.directly_related_types != (parent.parent_type,):
            raise InvalidModelError(
                f"{type_def.name}: parent link {parent.relation!r} must relate "
                f"exactly one type, got {list(link.directly_related_types)}"
            )

    for relation in type_def.relations.values():
        for name in relation.computed_from:
            if type_def.relation(name) is None:
                raise InvalidModelError(
                    f"{type_def.name}#{relation.name} references undefined "
                    f"relation {name!r}"
                )
        if not relation.from_parent:
            continue
        if parent is None:
            raise InvalidModelError(
                f"{type_def.name}#{relation.name} inherits from a parent but "
                f"{type_def.name} declares no parent link"
            )
        parent_def = model.types[parent.parent_type]
        for name in relation.from_parent:
            if parent_def.relation(name) is None:
                raise InvalidModelError(
                    f"{type_def.name}#{relation.name} references undefined "
                    f"relation {parent.parent_type}#{name}"
                )


def _assert_acyclic(model: AuthorizationModel) -> None:
    """Walk every (type, relation) node depth-first and reject back edges."""
    done: set[tuple[str, str]] = set()

    def edges(node: tuple[str, str]) -> list[tuple[str, str]]:
        type_name, relation_name = node
        type_def = model.types[type_name]
        relation = type_def.relations[relation_name]
        result = [(type_name, name) for name in relation.computed_from]
        if type_def.parent is not None:
            result.extend(
                (type_def.parent.parent_type, name) for name in relation.from_parent
            )
        return result

    def visit(node: tuple[str, str], path: list[tuple[str, str]]) -> None:
        if node in done:
            return
        if node in path:
            cycle = " -> ".join(f"{t}#{r}" for t, r in [*path[path.index(node) :], node])
            raise InvalidModelError(f"Cyclic relation definition: {cycle}")
        path.append(node)
        for nxt in edges(node):
            visit(nxt, path)
        path.pop()
        done.add(node)

    for type_def in model.types.values():
        for relation_name in type_def.relations:
            visit((type_def.name, relation_name), [])
