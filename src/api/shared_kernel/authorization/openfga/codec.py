"""Decoding of OpenFGA authorization model payloads.

Translates the JSON returned by ``GET /stores/{store_id}/authorization-models``
into AuthorizationModel snapshots. Only union rewrites are understood; any
other rewrite makes the model invalid for this core.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ulid import ULID

from shared_kernel.authorization.exceptions import InvalidModelError
from shared_kernel.authorization.model import (
    AuthorizationModel,
    ParentLink,
    RelationDefinition,
    TypeDefinition,
)


def decode_model(payload: dict[str, Any]) -> AuthorizationModel:
    """Decode one authorization model payload.

    Args:
        payload: A single entry of the ``authorization_models`` list

    Returns:
        The validated model

    Raises:
        InvalidModelError: If the payload is malformed or uses unsupported rewrites
    """
    model_id = payload.get("id")
    if not model_id:
        raise InvalidModelError("Authorization model payload has no id")

    types: dict[str, TypeDefinition] = {}
    try:
        for type_payload in payload.get("type_definitions") or []:
            type_def = _decode_type(type_payload)
            types[type_def.name] = type_def
        created_at = _created_at(payload)
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise InvalidModelError(
            f"Malformed authorization model {model_id}: {e!r}"
        ) from e

    return AuthorizationModel(id=model_id, types=types, created_at=created_at)


def _decode_type(payload: dict[str, Any]) -> TypeDefinition:
    name = payload.get("type")
    if not name:
        raise InvalidModelError("Type definition has no name")

    metadata = (payload.get("metadata") or {}).get("relations") or {}
    relations: dict[str, RelationDefinition] = {}
    tuplesets: set[str] = set()

    for relation_name, rewrite in (payload.get("relations") or {}).items():
        terms = _flatten_union(rewrite, f"{name}#{relation_name}")

        direct: tuple[str, ...] = ()
        computed: list[str] = []
        from_parent: list[str] = []
        for kind, value in terms:
            if kind == "this":
                direct = _directly_related_types(
                    metadata.get(relation_name) or {}, f"{name}#{relation_name}"
                )
            elif kind == "computed":
                computed.append(value)
            else:
                tupleset, parent_relation = value.split("#", 1)
                tuplesets.add(tupleset)
                from_parent.append(parent_relation)

        relations[relation_name] = RelationDefinition(
            name=relation_name,
            directly_related_types=direct,
            computed_from=tuple(computed),
            from_parent=tuple(from_parent),
        )

    if len(tuplesets) > 1:
        raise InvalidModelError(
            f"{name}: only one parent link is supported, found {sorted(tuplesets)}"
        )
    parent = None
    if tuplesets:
        link_name = tuplesets.pop()
        link = relations.get(link_name)
        if link is None or len(link.directly_related_types) != 1:
            raise InvalidModelError(
                f"{name}: parent link {link_name!r} must relate exactly one type"
            )
        parent = ParentLink(relation=link_name, parent_type=link.directly_related_types[0])

    return TypeDefinition(name=name, relations=relations, parent=parent)


def _flatten_union(rewrite: dict[str, Any], where: str) -> list[tuple[str, str]]:
    """Flatten a (possibly nested) union into (kind, value) terms."""
    if "union" in rewrite:
        terms: list[tuple[str, str]] = []
        for child in rewrite["union"].get("child") or []:
            terms.extend(_flatten_union(child, where))
        return terms
    if "this" in rewrite:
        return [("this", "")]
    if "computedUserset" in rewrite:
        return [("computed", rewrite["computedUserset"]["relation"])]
    if "tupleToUserset" in rewrite:
        ttu = rewrite["tupleToUserset"]
        tupleset = ttu["tupleset"]["relation"]
        return [("parent", f"{tupleset}#{ttu['computedUserset']['relation']}")]
    raise InvalidModelError(
        f"{where}: unsupported rewrite {sorted(rewrite)}; only unions are supported"
    )


def _directly_related_types(metadata: dict[str, Any], where: str) -> tuple[str, ...]:
    related = []
    for entry in metadata.get("directly_related_user_types") or []:
        if entry.get("relation") or entry.get("wildcard") is not None:
            raise InvalidModelError(
                f"{where}: userset and wildcard type restrictions are not supported"
            )
        related.append(entry["type"])
    if not related:
        raise InvalidModelError(f"{where}: direct relation without related types")
    return tuple(related)


def _created_at(payload: dict[str, Any]) -> datetime | None:
    """Creation time from the payload, or from the ULID model id."""
    raw = payload.get("created_at")
    if raw:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    return ulid_timestamp(payload["id"])


def ulid_timestamp(value: str) -> datetime | None:
    """Decode the millisecond timestamp prefix of a ULID, if ``value`` is one."""
    try:
        return ULID.from_str(value).datetime
    except ValueError:
        return None
