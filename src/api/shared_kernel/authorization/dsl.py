"""Parser for the OpenFGA modeling language (schema 1.1 subset).

Supports the constructs the portal model uses::

    model
      schema 1.1

    type partner
      relations
        define can_admin: [user] or super_admin from parent
        define parent: [platform]

Relation expressions are unions (``or``) of direct type restrictions
(``[user, group]``), computed relations (``can_admin``), and tuple-to-userset
rewrites (``super_admin from parent``). Intersections, exclusions, wildcards
and userset type restrictions are rejected.
"""

from __future__ import annotations

import re
from pathlib import Path

from shared_kernel.authorization.exceptions import InvalidModelError
from shared_kernel.authorization.model import (
    AuthorizationModel,
    ParentLink,
    RelationDefinition,
    TypeDefinition,
)

BUNDLED_SCHEMA_PATH = Path(__file__).parent / "openfga" / "schema.fga"
SUPPORTED_SCHEMA_VERSION = "1.1"

_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_-]*"
_TYPE_LINE = re.compile(rf"^type\s+({_IDENTIFIER})$")
_DEFINE_LINE = re.compile(rf"^define\s+({_IDENTIFIER})\s*:\s*(.+)$")
_DIRECT_TERM = re.compile(r"^\[(.*)\]$")
_FROM_TERM = re.compile(rf"^({_IDENTIFIER})\s+from\s+({_IDENTIFIER})$")
_COMPUTED_TERM = re.compile(rf"^{_IDENTIFIER}$")
_UNSUPPORTED_OPERATORS = re.compile(r"\s(and|but\s+not)\s")


class _TypeBuilder:
    """Accumulates one type block while parsing."""

    def __init__(self, name: str):
        self.name = name
        self.relations: dict[str, RelationDefinition] = {}
        self.tuplesets: list[str] = []

    def add(self, relation: RelationDefinition, tupleset: str | None) -> None:
        if relation.name in self.relations:
            raise InvalidModelError(
                f"{self.name}: relation {relation.name!r} defined twice"
            )
        self.relations[relation.name] = relation
        if tupleset is not None and tupleset not in self.tuplesets:
            self.tuplesets.append(tupleset)

    def build(self) -> TypeDefinition:
        if len(self.tuplesets) > 1:
            raise InvalidModelError(
                f"{self.name}: only one parent link is supported, "
                f"found {self.tuplesets}"
            )
        parent = None
        if self.tuplesets:
            link_name = self.tuplesets[0]
            link = self.relations.get(link_name)
            if link is None or len(link.directly_related_types) != 1:
                raise InvalidModelError(
                    f"{self.name}: parent link {link_name!r} must be defined "
                    "with exactly one related type"
                )
            parent = ParentLink(
                relation=link_name, parent_type=link.directly_related_types[0]
            )
        return TypeDefinition(name=self.name, relations=self.relations, parent=parent)


def parse_model(source: str, model_id: str) -> AuthorizationModel:
    """Parse DSL source into a validated AuthorizationModel.

    Args:
        source: Model text in the OpenFGA DSL
        model_id: Version id to assign to the parsed model

    Returns:
        The parsed model

    Raises:
        InvalidModelError: If the text cannot be parsed or the model is invalid
    """
    types: dict[str, TypeDefinition] = {}
    current: _TypeBuilder | None = None
    in_relations = False

    def finish() -> None:
        if current is not None:
            if current.name in types:
                raise InvalidModelError(f"type {current.name!r} defined twice")
            types[current.name] = current.build()

    for lineno, raw in enumerate(source.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#") or line == "model":
            continue
        if line.startswith("schema"):
            version = line.removeprefix("schema").strip()
            if version != SUPPORTED_SCHEMA_VERSION:
                raise InvalidModelError(
                    f"line {lineno}: unsupported schema version {version!r}"
                )
            continue

        type_match = _TYPE_LINE.match(line)
        if type_match:
            finish()
            current = _TypeBuilder(type_match.group(1))
            in_relations = False
            continue

        if line == "relations":
            if current is None:
                raise InvalidModelError(f"line {lineno}: 'relations' outside a type")
            in_relations = True
            continue

        define_match = _DEFINE_LINE.match(line)
        if define_match and current is not None and in_relations:
            relation, tupleset = _parse_relation(
                define_match.group(1), define_match.group(2), lineno
            )
            current.add(relation, tupleset)
            continue

        raise InvalidModelError(f"line {lineno}: cannot parse {line!r}")

    finish()
    return AuthorizationModel(id=model_id, types=types)


def _parse_relation(
    name: str, expression: str, lineno: int
) -> tuple[RelationDefinition, str | None]:
    if _UNSUPPORTED_OPERATORS.search(f" {expression} "):
        raise InvalidModelError(
            f"line {lineno}: only unions are supported in {name!r}"
        )

    direct: list[str] = []
    computed: list[str] = []
    from_parent: list[str] = []
    tupleset: str | None = None

    for term in (t.strip() for t in re.split(r"\s+or\s+", expression)):
        direct_match = _DIRECT_TERM.match(term)
        from_match = _FROM_TERM.match(term)
        if direct_match:
            for subject_type in direct_match.group(1).split(","):
                subject_type = subject_type.strip()
                if not _COMPUTED_TERM.match(subject_type):
                    raise InvalidModelError(
                        f"line {lineno}: unsupported type restriction {subject_type!r}"
                    )
                direct.append(subject_type)
        elif from_match:
            if tupleset is not None and tupleset != from_match.group(2):
                raise InvalidModelError(
                    f"line {lineno}: {name!r} inherits through more than one parent link"
                )
            from_parent.append(from_match.group(1))
            tupleset = from_match.group(2)
        elif _COMPUTED_TERM.match(term):
            computed.append(term)
        else:
            raise InvalidModelError(f"line {lineno}: cannot parse term {term!r}")

    relation = RelationDefinition(
        name=name,
        directly_related_types=tuple(direct),
        computed_from=tuple(computed),
        from_parent=tuple(from_parent),
    )
    return relation, tupleset


def load_bundled_model(model_id: str = "bundled") -> AuthorizationModel:
    """Load the partner portal model shipped with this package.

    Used as the fallback when the store cannot list models and a pinned model
    id is configured.
    """
    return parse_model(BUNDLED_SCHEMA_PATH.read_text(encoding="utf-8"), model_id)
