"""Tests for the structured completion clients.

All tests are deterministic and do not make real network calls.
"""

import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from pydantic import SecretStr

from backend.app.config import Settings
from backend.app.errors import GenerationError
from backend.app.llm.client import (
    OpenAIStructuredClient,
    UnavailableClient,
    get_llm_client,
    wrap_array_schema,
)
from backend.app.llm.schemas import CATEGORY_TREE_SCHEMA, QUESTION_LIST_SCHEMA

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _response(content: str | None, finish_reason: str = "stop", refusal: str | None = None) -> Any:
    message = SimpleNamespace(content=content, refusal=refusal)
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason=finish_reason)])


def _client_returning(response: Any = None, side_effect: Any = None) -> OpenAIStructuredClient:
    sdk = MagicMock()
    sdk.chat.completions.create = AsyncMock(return_value=response, side_effect=side_effect)
    return OpenAIStructuredClient(api_key="test-key", client=sdk)


async def _complete(
    client: OpenAIStructuredClient, schema: dict[str, Any] = QUESTION_LIST_SCHEMA
) -> Any:
    return await client.complete(
        system_instruction="system", output_schema=schema, user_payload="{}"
    )


class TestUnavailableClient:
    @pytest.mark.asyncio
    async def test_always_unavailable(self) -> None:
        with pytest.raises(GenerationError) as exc_info:
            await UnavailableClient().complete(
                system_instruction="s", output_schema={}, user_payload="p"
            )

        assert exc_info.value.reason == "unavailable"


class TestOpenAIStructuredClient:
    @pytest.mark.asyncio
    async def test_array_schema_sent_in_envelope_and_unwrapped(self) -> None:
        items = [{"questionText": "Q?"}]
        client = _client_returning(_response(json.dumps({"items": items})))

        result = await _complete(client)

        assert result == items
        kwargs = client.client.chat.completions.create.call_args.kwargs
        sent_schema = kwargs["response_format"]["json_schema"]["schema"]
        assert sent_schema["type"] == "object"
        assert sent_schema["properties"]["items"]["type"] == "array"
        assert kwargs["messages"][0] == {"role": "system", "content": "system"}
        assert kwargs["model"] == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_object_schema_returned_as_is(self) -> None:
        client = _client_returning(_response(json.dumps({"answer": 42})))

        result = await _complete(client, schema={"type": "object"})

        assert result == {"answer": 42}

    @pytest.mark.asyncio
    async def test_invalid_json_is_malformed(self) -> None:
        client = _client_returning(_response("not json"))

        with pytest.raises(GenerationError) as exc_info:
            await _complete(client)

        assert exc_info.value.reason == "malformed_output"

    @pytest.mark.asyncio
    async def test_empty_content_is_malformed(self) -> None:
        client = _client_returning(_response(""))

        with pytest.raises(GenerationError) as exc_info:
            await _complete(client)

        assert exc_info.value.reason == "malformed_output"

    @pytest.mark.asyncio
    async def test_missing_envelope_is_malformed(self) -> None:
        client = _client_returning(_response(json.dumps({"questions": []})))

        with pytest.raises(GenerationError) as exc_info:
            await _complete(client)

        assert exc_info.value.reason == "malformed_output"

    @pytest.mark.asyncio
    async def test_content_filter_is_rejected(self) -> None:
        client = _client_returning(_response(None, finish_reason="content_filter"))

        with pytest.raises(GenerationError) as exc_info:
            await _complete(client)

        assert exc_info.value.reason == "rejected"

    @pytest.mark.asyncio
    async def test_refusal_is_rejected(self) -> None:
        client = _client_returning(_response(None, refusal="I can't help with that"))

        with pytest.raises(GenerationError) as exc_info:
            await _complete(client)

        assert exc_info.value.reason == "rejected"

    @pytest.mark.asyncio
    async def test_timeout_maps_to_timeout(self) -> None:
        client = _client_returning(side_effect=openai.APITimeoutError(request=_REQUEST))

        with pytest.raises(GenerationError) as exc_info:
            await _complete(client)

        assert exc_info.value.reason == "timeout"

    @pytest.mark.asyncio
    async def test_connection_error_maps_to_unavailable(self) -> None:
        client = _client_returning(side_effect=openai.APIConnectionError(request=_REQUEST))

        with pytest.raises(GenerationError) as exc_info:
            await _complete(client)

        assert exc_info.value.reason == "unavailable"

    @pytest.mark.asyncio
    async def test_bad_request_maps_to_rejected(self) -> None:
        error = openai.BadRequestError(
            "bad request",
            response=httpx.Response(400, request=_REQUEST),
            body=None,
        )
        client = _client_returning(side_effect=error)

        with pytest.raises(GenerationError) as exc_info:
            await _complete(client)

        assert exc_info.value.reason == "rejected"


def test_wrap_array_schema_hoists_defs() -> None:
    wrapped = wrap_array_schema(CATEGORY_TREE_SCHEMA)

    assert "$defs" in wrapped
    assert "$defs" not in wrapped["properties"]["items"]
    assert wrapped["required"] == ["items"]
    assert "$defs" in CATEGORY_TREE_SCHEMA


def test_factory_without_key_returns_unavailable_client() -> None:
    client = get_llm_client(Settings(openai_api_key=None))

    assert isinstance(client, UnavailableClient)


def test_factory_with_key_returns_openai_client() -> None:
    client = get_llm_client(
        Settings(openai_api_key=SecretStr("sk-test"), openai_model="gpt-4o")
    )

    assert isinstance(client, OpenAIStructuredClient)
    assert client.model == "gpt-4o"
