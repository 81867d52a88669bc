"""Secondary provider adapter: OpenRouter through the OpenAI-compatible SDK."""

import logging

import httpx
from openai import AsyncOpenAI, OpenAIError

from itinerary_ai.config import Settings
from itinerary_ai.models.envelope import (
    ChatMessage,
    EnvelopeChoice,
    EnvelopeMessage,
    ProviderEnvelope,
)
from itinerary_ai.orchestration.errors import ProviderConfigurationError, TransportError

logger = logging.getLogger(__name__)


class OpenRouterAdapter:
    """OpenRouter-backed provider adapter."""

    name = "openrouter"

    def __init__(
        self,
        api_key: str | None,
        model: str = "mistralai/mixtral-8x7b",
        *,
        base_url: str = "https://openrouter.ai/api/v1",
        referer: str = "http://localhost:3000",
        title: str = "TripMaster",
        temperature: float = 0.3,
        max_tokens: int = 1500,
        timeout_seconds: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize OpenRouter adapter.

        Args:
            api_key: OpenRouter API key (required unless a client is injected)
            model: Model slug
            base_url: OpenAI-compatible endpoint
            referer: HTTP-Referer attribution header
            title: X-Title attribution header
            temperature: Sampling temperature
            max_tokens: Completion token cap
            timeout_seconds: Per-request timeout
            http_client: Optional httpx client (for testing with mocks)
            client: Pre-built AsyncOpenAI client

        Raises:
            ProviderConfigurationError: If no API key and no client is given
        """
        if client is None:
            if not api_key:
                raise ProviderConfigurationError("OPENROUTER_API_KEY is not set.")
            client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout_seconds,
                max_retries=0,
                default_headers={"HTTP-Referer": referer, "X-Title": title},
                http_client=http_client,
            )
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenRouterAdapter":
        api_key = (
            settings.openrouter_api_key.get_secret_value() if settings.openrouter_api_key else None
        )
        return cls(
            api_key=api_key,
            model=settings.openrouter_model,
            base_url=settings.openrouter_base_url,
            referer=settings.openrouter_referer,
            title=settings.openrouter_title,
            temperature=settings.ai_temperature,
            max_tokens=settings.ai_max_tokens,
            timeout_seconds=settings.provider_timeout_seconds,
        )

    async def submit(self, conversation: list[ChatMessage]) -> ProviderEnvelope:
        """Send the full chat array and decode choices into an envelope."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": m.role, "content": m.content} for m in conversation],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            logger.warning(f"OpenRouter request failed: {type(e).__name__}: {e}")
            raise TransportError(self.name, f"{type(e).__name__}: {e}") from e

        choices = [
            EnvelopeChoice(
                message=EnvelopeMessage(
                    role=choice.message.role or "assistant",
                    content=choice.message.content,
                )
            )
            for choice in (response.choices or [])
        ]
        return ProviderEnvelope(choices=choices)
