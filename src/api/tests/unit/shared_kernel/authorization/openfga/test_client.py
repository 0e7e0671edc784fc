"""Unit tests for the OpenFGA HTTP client.

Requests are served by httpx.MockTransport, so the wire format the client
produces can be asserted without a running OpenFGA server.
"""

import json

import httpx
import pytest
from unittest.mock import create_autospec

from shared_kernel.authorization.exceptions import (
    InvalidModelError,
    StoreUnavailableError,
)
from shared_kernel.authorization.observability import AuthorizationProbe
from shared_kernel.authorization.openfga.client import OpenFGAClient
from shared_kernel.authorization.types import RelationshipFact

STORE_ID = "01HSTORE0000000000000000000"


class RecordingHandler:
    """Serves canned responses and records every request."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)

    def body(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def mock_probe():
    return create_autospec(AuthorizationProbe, instance=True)


def _client(handler, probe, **kwargs) -> OpenFGAClient:
    return OpenFGAClient(
        api_url="http://openfga.test/",
        store_id=STORE_ID,
        probe=probe,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestCheck:
    """Tests for check."""

    @pytest.mark.asyncio
    async def test_posts_tuple_key_with_model_id(self, mock_probe):
        handler = RecordingHandler(httpx.Response(200, json={"allowed": True}))
        client = _client(handler, mock_probe)

        allowed = await client.check("user:42", "can_view", "partner:p1", model_id="m1")

        assert allowed is True
        request = handler.requests[0]
        assert request.url.path == f"/stores/{STORE_ID}/check"
        assert handler.body() == {
            "authorization_model_id": "m1",
            "tuple_key": {
                "user": "user:42",
                "relation": "can_view",
                "object": "partner:p1",
            },
        }
        mock_probe.permission_checked.assert_called_once_with(
            subject="user:42", relation="can_view", object="partner:p1", allowed=True
        )

    @pytest.mark.asyncio
    async def test_missing_allowed_is_deny(self, mock_probe):
        handler = RecordingHandler(httpx.Response(200, json={}))
        client = _client(handler, mock_probe)

        assert await client.check("user:42", "can_view", "partner:p1", "m1") is False

    @pytest.mark.asyncio
    async def test_error_response_raises_store_unavailable(self, mock_probe):
        handler = RecordingHandler(httpx.Response(503, json={"code": "unavailable"}))
        client = _client(handler, mock_probe)

        with pytest.raises(StoreUnavailableError):
            await client.check("user:42", "can_view", "partner:p1", "m1")

        mock_probe.permission_check_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_transport_error_raises_store_unavailable(self, mock_probe):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler, mock_probe)

        with pytest.raises(StoreUnavailableError) as exc_info:
            await client.check("user:42", "can_view", "partner:p1", "m1")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class TestHeaders:
    """Tests for request headers."""

    @pytest.mark.asyncio
    async def test_sends_bearer_token_and_user_agent(self, mock_probe):
        handler = RecordingHandler(httpx.Response(200, json={"allowed": False}))
        client = _client(
            handler, mock_probe, api_token="secret", user_agent="portal-authz/0.1.0"
        )

        await client.check("user:42", "can_view", "partner:p1", "m1")

        headers = handler.requests[0].headers
        assert headers["Authorization"] == "Bearer secret"
        assert headers["User-Agent"] == "portal-authz/0.1.0"

    @pytest.mark.asyncio
    async def test_omits_authorization_without_token(self, mock_probe):
        handler = RecordingHandler(httpx.Response(200, json={"allowed": False}))
        client = _client(handler, mock_probe)

        await client.check("user:42", "can_view", "partner:p1", "m1")

        assert "Authorization" not in handler.requests[0].headers

    @pytest.mark.asyncio
    async def test_close_resets_client(self, mock_probe):
        handler = RecordingHandler(httpx.Response(200, json={"allowed": False}))
        client = _client(handler, mock_probe)
        await client.check("user:42", "can_view", "partner:p1", "m1")

        await client.close()

        assert client._client is None


class TestWriteAndDelete:
    """Tests for write and delete."""

    @pytest.mark.asyncio
    async def test_write_sends_one_batch(self, mock_probe):
        handler = RecordingHandler(httpx.Response(200, json={}))
        client = _client(handler, mock_probe)
        facts = [
            RelationshipFact("user:42", "can_admin", "partner:p1"),
            RelationshipFact("platform:default", "parent", "partner:p1"),
        ]

        await client.write(facts, model_id="m1")

        assert len(handler.requests) == 1
        assert handler.body()["writes"]["tuple_keys"] == [f.as_tuple_key() for f in facts]
        assert "deletes" not in handler.body()
        mock_probe.relationships_written.assert_called_once_with(count=2, model_id="m1")

    @pytest.mark.asyncio
    async def test_delete_sends_deletes(self, mock_probe):
        handler = RecordingHandler(httpx.Response(200, json={}))
        client = _client(handler, mock_probe)
        fact = RelationshipFact("user:42", "can_admin", "partner:p1")

        await client.delete([fact], model_id="m1")

        assert handler.requests[0].url.path.endswith("/write")
        assert handler.body()["deletes"]["tuple_keys"] == [fact.as_tuple_key()]
        assert handler.body()["deletes"]["on_missing"] == "ignore"

    @pytest.mark.asyncio
    async def test_empty_batches_do_not_contact_store(self, mock_probe):
        handler = RecordingHandler()
        client = _client(handler, mock_probe)

        await client.write([], model_id="m1")
        await client.delete([], model_id="m1")

        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_failed_delete_raises(self, mock_probe):
        handler = RecordingHandler(httpx.Response(400, json={"code": "validation_error"}))
        client = _client(handler, mock_probe)

        with pytest.raises(StoreUnavailableError, match="delete 1"):
            await client.delete(
                [RelationshipFact("user:42", "can_admin", "partner:p1")], model_id="m1"
            )

        mock_probe.relationships_delete_failed.assert_called_once()


class TestListObjects:
    """Tests for list_objects."""

    @pytest.mark.asyncio
    async def test_strips_type_prefix(self, mock_probe):
        handler = RecordingHandler(
            httpx.Response(200, json={"objects": ["partner:p1", "partner:p2"]})
        )
        client = _client(handler, mock_probe)

        objects = await client.list_objects("user:42", "can_view", "partner", "m1")

        assert objects == ["p1", "p2"]
        assert handler.body() == {
            "authorization_model_id": "m1",
            "user": "user:42",
            "relation": "can_view",
            "type": "partner",
        }


class TestRead:
    """Tests for read."""

    @pytest.mark.asyncio
    async def test_follows_continuation_tokens(self, mock_probe):
        handler = RecordingHandler(
            httpx.Response(
                200,
                json={
                    "tuples": [
                        {
                            "key": {
                                "user": "user:1",
                                "relation": "can_view",
                                "object": "client:c1",
                            }
                        }
                    ],
                    "continuation_token": "next",
                },
            ),
            httpx.Response(
                200,
                json={
                    "tuples": [
                        {
                            "key": {
                                "user": "user:2",
                                "relation": "can_view",
                                "object": "client:c1",
                            }
                        }
                    ],
                    "continuation_token": "",
                },
            ),
        )
        client = _client(handler, mock_probe)

        facts = await client.read("client:c1", "can_view")

        assert [f.subject for f in facts] == ["user:1", "user:2"]
        assert handler.body(0)["tuple_key"] == {"object": "client:c1", "relation": "can_view"}
        assert "continuation_token" not in handler.body(0)
        assert handler.body(1)["continuation_token"] == "next"

    @pytest.mark.asyncio
    async def test_malformed_tuple_raises_store_unavailable(self, mock_probe):
        handler = RecordingHandler(
            httpx.Response(200, json={"tuples": [{"key": {"user": "user:1"}}]})
        )
        client = _client(handler, mock_probe)

        with pytest.raises(StoreUnavailableError):
            await client.read("client:c1")


class TestReadAuthorizationModels:
    """Tests for read_authorization_models."""

    @pytest.mark.asyncio
    async def test_decodes_models_newest_first(self, mock_probe):
        handler = RecordingHandler(
            httpx.Response(
                200,
                json={
                    "authorization_models": [
                        {"id": "m2", "type_definitions": [{"type": "user"}]},
                        {"id": "m1", "type_definitions": [{"type": "user"}]},
                    ]
                },
            )
        )
        client = _client(handler, mock_probe)

        models = await client.read_authorization_models()

        assert [m.id for m in models] == ["m2", "m1"]
        assert handler.requests[0].method == "GET"
        mock_probe.models_read.assert_called_once_with(count=2)

    @pytest.mark.asyncio
    async def test_invalid_newest_model_propagates(self, mock_probe):
        handler = RecordingHandler(
            httpx.Response(
                200,
                json={
                    "authorization_models": [
                        {
                            "id": "m1",
                            "type_definitions": [
                                {
                                    "type": "doc",
                                    "relations": {"v": {"difference": {}}},
                                }
                            ],
                        }
                    ]
                },
            )
        )
        client = _client(handler, mock_probe)

        with pytest.raises(InvalidModelError):
            await client.read_authorization_models()

    @pytest.mark.asyncio
    async def test_skips_older_models_it_cannot_decode(self, mock_probe):
        """An old version using intersections does not hide the newest one."""
        handler = RecordingHandler(
            httpx.Response(
                200,
                json={
                    "authorization_models": [
                        {"id": "m2", "type_definitions": [{"type": "user"}]},
                        {
                            "id": "m1",
                            "type_definitions": [
                                {
                                    "type": "doc",
                                    "relations": {"v": {"intersection": {"child": []}}},
                                }
                            ],
                        },
                    ]
                },
            )
        )
        client = _client(handler, mock_probe)

        models = await client.read_authorization_models()

        assert [m.id for m in models] == ["m2"]
        assert mock_probe.model_skipped.call_args[1]["model_id"] == "m1"
        mock_probe.models_read.assert_called_once_with(count=1)

    @pytest.mark.asyncio
    async def test_unreachable_store_raises(self, mock_probe):
        handler = RecordingHandler(httpx.Response(500))
        client = _client(handler, mock_probe)

        with pytest.raises(StoreUnavailableError):
            await client.read_authorization_models()

        mock_probe.models_read_failed.assert_called_once()
