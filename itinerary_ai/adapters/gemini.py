"""Primary provider adapter backed by the google-genai SDK."""

import logging
from typing import Any

from google import genai
from google.genai import types

from itinerary_ai.config import Settings
from itinerary_ai.models.envelope import ChatMessage, ProviderEnvelope
from itinerary_ai.orchestration.errors import ProviderConfigurationError, TransportError

logger = logging.getLogger(__name__)


def flatten_conversation(conversation: list[ChatMessage]) -> str:
    """Collapse a conversation into the single prompt string Gemini receives.

    The last user turn wins; without one, every non-system turn is joined.
    """
    for message in reversed(conversation):
        if message.role == "user":
            return message.content
    return "\n".join(m.content for m in conversation if m.role != "system")


class GeminiAdapter:
    """Gemini-backed provider adapter."""

    name = "gemini"

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-2.5-flash",
        *,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize Gemini adapter.

        Args:
            api_key: Gemini API key (required unless a client is injected)
            model: Model name
            temperature: Sampling temperature (provider default when None)
            max_output_tokens: Output cap (provider default when None)
            client: Pre-built genai.Client (for testing)

        Raises:
            ProviderConfigurationError: If no API key and no client is given
        """
        if client is None:
            if not api_key:
                raise ProviderConfigurationError("GEMINI_API_KEY is not set.")
            client = genai.Client(api_key=api_key)
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiAdapter":
        api_key = settings.gemini_api_key.get_secret_value() if settings.gemini_api_key else None
        return cls(
            api_key=api_key,
            model=settings.gemini_model,
            temperature=settings.ai_temperature,
            max_output_tokens=settings.ai_max_tokens,
        )

    async def submit(self, conversation: list[ChatMessage]) -> ProviderEnvelope:
        """Send the flattened prompt and wrap response.text in an envelope."""
        prompt = flatten_conversation(conversation)
        config = types.GenerateContentConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except Exception as e:
            logger.warning(f"Gemini generate_content failed: {type(e).__name__}: {e}")
            raise TransportError(self.name, f"{type(e).__name__}: {e}") from e

        text = getattr(response, "text", None)
        return ProviderEnvelope.from_text(text)
