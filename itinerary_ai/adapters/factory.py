"""Provider adapter construction from settings."""

from itinerary_ai.adapters.gemini import GeminiAdapter
from itinerary_ai.adapters.openrouter import OpenRouterAdapter
from itinerary_ai.config import Settings


def build_provider_adapters(settings: Settings) -> tuple[GeminiAdapter, OpenRouterAdapter]:
    """Construct (primary, secondary) adapters.

    Raises:
        ProviderConfigurationError: If either provider's API key is missing
    """
    return GeminiAdapter.from_settings(settings), OpenRouterAdapter.from_settings(settings)
