"""
AI Provider Factory.

Manages provider selection and initialization based on configuration.
Uses the Factory pattern to provide plug-and-play AI provider support.
"""
from typing import Optional

from ...core.config import AI_PROVIDER, ANTHROPIC_API_KEY, GEMINI_API_KEY, OPENROUTER_API_KEY
from ...core.logging_config import get_logger
from .anthropic_provider import AnthropicProvider
from .base import AIProvider
from .gemini_provider import GeminiProvider
from .mock_provider import MockProvider
from .openrouter_provider import OpenRouterProvider

logger = get_logger(__name__)

_PROVIDERS = {
    "gemini": (GeminiProvider, lambda: GEMINI_API_KEY),
    "openrouter": (OpenRouterProvider, lambda: OPENROUTER_API_KEY),
    "anthropic": (AnthropicProvider, lambda: ANTHROPIC_API_KEY),
}


class AIProviderFactory:
    """
    Factory for creating AI provider instances.

    Selection order:
    1. AI_PROVIDER, when its API key is set
    2. The first other provider with an API key
    3. MockProvider
    """

    @staticmethod
    def get_provider(provider_type: Optional[str] = None) -> AIProvider:
        provider_type = (provider_type or AI_PROVIDER).lower()

        if provider_type == "mock":
            logger.info("Using MockProvider (configured)")
            return MockProvider()

        if provider_type in _PROVIDERS:
            provider_cls, key = _PROVIDERS[provider_type]
            if key():
                logger.info(f"Using {provider_type} provider")
                return provider_cls()
            logger.warning(f"{provider_type} API key not configured, checking other providers...")
        else:
            logger.warning(f"Unknown provider '{provider_type}', checking available API keys...")

        for name, (provider_cls, key) in _PROVIDERS.items():
            if name != provider_type and key():
                logger.info(f"Using {name} provider as fallback")
                return provider_cls()

        logger.warning("No API keys configured, using MockProvider")
        return MockProvider()
