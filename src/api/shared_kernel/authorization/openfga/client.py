"""OpenFGA client implementation of the RelationshipStore protocol.

Provides an async client for the OpenFGA HTTP API built on httpx, with proper
error handling and type safety.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from shared_kernel.authorization.exceptions import (
    InvalidModelError,
    StoreUnavailableError,
)
from shared_kernel.authorization.model import AuthorizationModel
from shared_kernel.authorization.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from shared_kernel.authorization.openfga.codec import decode_model
from shared_kernel.authorization.types import RelationshipFact, strip_type_prefix

READ_PAGE_SIZE = 100


class OpenFGAClient:
    """OpenFGA client implementation of RelationshipStore protocol.

    Each method issues exactly one HTTP request (``read`` follows continuation
    tokens). Errors are never retried here.
    """

    def __init__(
        self,
        api_url: str,
        store_id: str,
        api_token: str | None = None,
        timeout_seconds: float = 5.0,
        user_agent: str | None = None,
        probe: AuthorizationProbe | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize OpenFGA client.

        Args:
            api_url: Base URL of the OpenFGA API (e.g., "http://localhost:8080")
            store_id: Id of the store holding the portal's relationships
            api_token: Optional pre-shared key sent as a bearer token
            timeout_seconds: Per-request timeout
            user_agent: Optional User-Agent header value
            probe: Optional domain probe for observability
            transport: Optional httpx transport (used by tests)
        """
        self._api_url = api_url.rstrip("/")
        self._store_id = store_id
        self._api_token = api_token
        self._timeout = timeout_seconds
        self._user_agent = user_agent
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._probe = probe or DefaultAuthorizationProbe()

    def _ensure_client(self) -> httpx.AsyncClient:
        """Lazily initialize the HTTP client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._api_token:
                headers["Authorization"] = f"Bearer {self._api_token}"
            if self._user_agent:
                headers["User-Agent"] = self._user_agent
            self._client = httpx.AsyncClient(
                base_url=f"{self._api_url}/stores/{self._store_id}",
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        client = self._ensure_client()
        response = await client.request(method, path, json=body, params=params)
        response.raise_for_status()
        return response.json()

    async def check(
        self,
        subject: str,
        relation: str,
        object: str,
        model_id: str,
    ) -> bool:
        """Check if a subject holds a relation on an object.

        Args:
            subject: Subject identifier (e.g., "user:42")
            relation: Relation to check (e.g., "can_view")
            object: Object identifier (e.g., "partner:abc")
            model_id: Authorization model version

        Returns:
            True if the relation holds, False otherwise

        Raises:
            StoreUnavailableError: If the check fails
        """
        fact = RelationshipFact(subject=subject, relation=relation, object=object)
        try:
            data = await self._request(
                "POST",
                "/check",
                {
                    "authorization_model_id": model_id,
                    "tuple_key": fact.as_tuple_key(),
                },
            )
            allowed = bool(data.get("allowed", False))
        except (httpx.HTTPError, ValueError) as e:
            self._probe.permission_check_failed(
                subject=subject, relation=relation, object=object, error=e
            )
            raise StoreUnavailableError(f"Failed to check permission: {fact}") from e

        self._probe.permission_checked(
            subject=subject, relation=relation, object=object, allowed=allowed
        )
        return allowed

    async def write(
        self,
        facts: Sequence[RelationshipFact],
        model_id: str,
    ) -> None:
        """Write relationship facts in a single request.

        Raises:
            StoreUnavailableError: If the write fails
        """
        if not facts:
            return
        try:
            await self._request(
                "POST",
                "/write",
                {
                    "authorization_model_id": model_id,
                    "writes": {"tuple_keys": [f.as_tuple_key() for f in facts]},
                },
            )
        except (httpx.HTTPError, ValueError) as e:
            self._probe.relationships_write_failed(
                count=len(facts), model_id=model_id, error=e
            )
            raise StoreUnavailableError(
                f"Failed to write {len(facts)} relationship(s)"
            ) from e

        self._probe.relationships_written(count=len(facts), model_id=model_id)

    async def delete(
        self,
        facts: Sequence[RelationshipFact],
        model_id: str,
    ) -> None:
        """Delete relationship facts in a single request.

        An empty batch succeeds without contacting the store. Facts that are
        not stored are ignored by the store rather than failing the batch.

        Raises:
            StoreUnavailableError: If the delete fails
        """
        if not facts:
            return
        try:
            await self._request(
                "POST",
                "/write",
                {
                    "authorization_model_id": model_id,
                    "deletes": {
                        "tuple_keys": [f.as_tuple_key() for f in facts],
                        "on_missing": "ignore",
                    },
                },
            )
        except (httpx.HTTPError, ValueError) as e:
            self._probe.relationships_delete_failed(
                count=len(facts), model_id=model_id, error=e
            )
            raise StoreUnavailableError(
                f"Failed to delete {len(facts)} relationship(s)"
            ) from e

        self._probe.relationships_deleted(count=len(facts), model_id=model_id)

    async def list_objects(
        self,
        subject: str,
        relation: str,
        resource_type: str,
        model_id: str,
    ) -> list[str]:
        """List ids of objects of a type on which the subject holds the relation.

        The store answers with "type:id" references; the "type:" prefix is
        stripped before returning.

        Raises:
            StoreUnavailableError: If the lookup fails
        """
        try:
            data = await self._request(
                "POST",
                "/list-objects",
                {
                    "authorization_model_id": model_id,
                    "user": subject,
                    "relation": relation,
                    "type": resource_type,
                },
            )
            objects = [strip_type_prefix(o) for o in data.get("objects") or []]
        except (httpx.HTTPError, ValueError) as e:
            self._probe.objects_list_failed(
                subject=subject,
                relation=relation,
                resource_type=resource_type,
                error=e,
            )
            raise StoreUnavailableError(
                f"Failed to list {resource_type} objects: {subject} {relation}"
            ) from e

        self._probe.objects_listed(
            subject=subject,
            relation=relation,
            resource_type=resource_type,
            count=len(objects),
        )
        return objects

    async def read(
        self,
        object: str,
        relation: str | None = None,
    ) -> list[RelationshipFact]:
        """Read stored facts on an object, following continuation tokens.

        Raises:
            StoreUnavailableError: If any page fails to load
        """
        tuple_key = {"object": object}
        if relation is not None:
            tuple_key["relation"] = relation

        facts: list[RelationshipFact] = []
        token = ""
        try:
            while True:
                body: dict[str, Any] = {
                    "tuple_key": tuple_key,
                    "page_size": READ_PAGE_SIZE,
                }
                if token:
                    body["continuation_token"] = token
                data = await self._request("POST", "/read", body)
                for entry in data.get("tuples") or []:
                    key = entry["key"]
                    facts.append(
                        RelationshipFact(
                            subject=key["user"],
                            relation=key["relation"],
                            object=key["object"],
                        )
                    )
                token = data.get("continuation_token") or ""
                if not token:
                    break
        except (httpx.HTTPError, ValueError, KeyError) as e:
            self._probe.relationships_read_failed(
                object=object, relation=relation, error=e
            )
            raise StoreUnavailableError(
                f"Failed to read relationships on {object}"
            ) from e

        self._probe.relationships_read(object=object, relation=relation, count=len(facts))
        return facts

    async def read_authorization_models(self) -> list[AuthorizationModel]:
        """List authorization model versions, newest first.

        Only the first page is fetched; callers need the newest version. The
        newest entry must decode. Older entries that use rewrites this core
        does not understand are skipped and reported to the probe.

        Raises:
            StoreUnavailableError: If the store cannot be reached
            InvalidModelError: If the newest model is malformed
        """
        try:
            data = await self._request("GET", "/authorization-models")
        except (httpx.HTTPError, ValueError) as e:
            self._probe.models_read_failed(error=e)
            raise StoreUnavailableError("Failed to read authorization models") from e

        payloads = data.get("authorization_models") or []
        models: list[AuthorizationModel] = []
        for index, payload in enumerate(payloads):
            try:
                models.append(decode_model(payload))
            except InvalidModelError as e:
                if index == 0:
                    raise
                self._probe.model_skipped(model_id=str(payload.get("id")), error=e)
        self._probe.models_read(count=len(models))
        return models
