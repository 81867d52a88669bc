"""Unit tests for provider adapters."""

import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from itinerary_ai.adapters.factory import build_provider_adapters
from itinerary_ai.adapters.gemini import GeminiAdapter, flatten_conversation
from itinerary_ai.adapters.openrouter import OpenRouterAdapter
from itinerary_ai.config import Settings
from itinerary_ai.models.envelope import ChatMessage, ProviderEnvelope
from itinerary_ai.orchestration.errors import ProviderConfigurationError, TransportError
from itinerary_ai.orchestration.prompts import OPENROUTER_SYSTEM_PROMPT, build_conversation


def _completion(content: str | None) -> dict[str, Any]:
    return {
        "id": "gen-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "mistralai/mixtral-8x7b",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


def _openrouter(handler) -> OpenRouterAdapter:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenRouterAdapter(api_key="test-key", http_client=http_client)


class TestEnvelope:
    """Test envelope helpers."""

    def test_first_content_prefers_message(self) -> None:
        assert ProviderEnvelope.from_text("hello").first_content() == "hello"

    def test_blank_content_is_none(self) -> None:
        assert ProviderEnvelope.from_text("   ").first_content() is None
        assert ProviderEnvelope(choices=[]).first_content() is None


class TestOpenRouterAdapter:
    """Test OpenRouter adapter over a mocked HTTP transport."""

    @pytest.mark.asyncio
    async def test_sends_chat_array_with_attribution_headers(self) -> None:
        captured: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion('{"days": []}'))

        adapter = _openrouter(handler)
        envelope = await adapter.submit(build_conversation("Plan Hue", OPENROUTER_SYSTEM_PROMPT))

        assert envelope.first_content() == '{"days": []}'
        assert captured["url"] == "https://openrouter.ai/api/v1/chat/completions"
        assert captured["headers"]["HTTP-Referer"] == "http://localhost:3000"
        assert captured["headers"]["X-Title"] == "TripMaster"
        assert captured["headers"]["Authorization"] == "Bearer test-key"
        body = captured["body"]
        assert body["model"] == "mistralai/mixtral-8x7b"
        assert body["temperature"] == 0.3
        assert body["max_tokens"] == 1500
        assert body["messages"] == [
            {"role": "system", "content": OPENROUTER_SYSTEM_PROMPT},
            {"role": "user", "content": "Plan Hue"},
        ]

    @pytest.mark.asyncio
    async def test_empty_content_is_returned_not_raised(self) -> None:
        adapter = _openrouter(lambda request: httpx.Response(200, json=_completion(None)))
        envelope = await adapter.submit(build_conversation("Plan Hue"))
        assert envelope.first_content() is None

    @pytest.mark.asyncio
    async def test_http_error_becomes_transport_error(self) -> None:
        adapter = _openrouter(
            lambda request: httpx.Response(401, json={"error": {"message": "bad key"}})
        )
        with pytest.raises(TransportError) as exc_info:
            await adapter.submit(build_conversation("Plan Hue"))
        assert exc_info.value.provider == "openrouter"
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_network_error_becomes_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError):
            await _openrouter(handler).submit(build_conversation("Plan Hue"))

    def test_missing_key_fails_fast(self) -> None:
        with pytest.raises(ProviderConfigurationError):
            OpenRouterAdapter(api_key=None)


class TestGeminiAdapter:
    """Test Gemini adapter with an injected SDK client."""

    def _client(self, **kwargs: Any) -> MagicMock:
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(**kwargs)
        return client

    @pytest.mark.asyncio
    async def test_sends_last_user_turn(self) -> None:
        client = self._client(return_value=SimpleNamespace(text='{"days": []}'))
        adapter = GeminiAdapter(api_key=None, model="gemini-2.5-flash", client=client)

        conversation = [
            ChatMessage(role="system", content="be terse"),
            ChatMessage(role="user", content="first"),
            ChatMessage(role="assistant", content="ok"),
            ChatMessage(role="user", content="Plan Hoi An"),
        ]
        envelope = await adapter.submit(conversation)

        assert envelope.first_content() == '{"days": []}'
        call = client.aio.models.generate_content.await_args
        assert call.kwargs["model"] == "gemini-2.5-flash"
        assert call.kwargs["contents"] == "Plan Hoi An"

    @pytest.mark.asyncio
    async def test_empty_text_is_returned_not_raised(self) -> None:
        client = self._client(return_value=SimpleNamespace(text=None))
        envelope = await GeminiAdapter(api_key=None, client=client).submit(
            build_conversation("x")
        )
        assert envelope.first_content() is None

    @pytest.mark.asyncio
    async def test_sdk_error_becomes_transport_error(self) -> None:
        client = self._client(side_effect=RuntimeError("503 UNAVAILABLE"))
        with pytest.raises(TransportError) as exc_info:
            await GeminiAdapter(api_key=None, client=client).submit(build_conversation("x"))
        assert exc_info.value.provider == "gemini"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_flatten_without_user_turn(self) -> None:
        conversation = [
            ChatMessage(role="system", content="sys"),
            ChatMessage(role="assistant", content="a"),
            ChatMessage(role="assistant", content="b"),
        ]
        assert flatten_conversation(conversation) == "a\nb"

    def test_missing_key_fails_fast(self) -> None:
        with pytest.raises(ProviderConfigurationError):
            GeminiAdapter(api_key=None)


class TestBuildProviderAdapters:
    """Test adapter wiring from settings."""

    def test_builds_primary_and_secondary(self, settings: Settings) -> None:
        primary, secondary = build_provider_adapters(settings)
        assert primary.name == "gemini"
        assert secondary.name == "openrouter"

    def test_missing_key_raises(self) -> None:
        settings = Settings(_env_file=None, gemini_api_key=None, openrouter_api_key="k")
        with pytest.raises(ProviderConfigurationError):
            build_provider_adapters(settings)
