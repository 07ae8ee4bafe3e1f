"""
AI Providers Package.

Plug-and-play generative-model providers (Gemini, OpenRouter, Anthropic, Mock).
"""
from .base import AIProvider
from .factory import AIProviderFactory
from .mock_provider import MockProvider

__all__ = ["AIProvider", "AIProviderFactory", "MockProvider"]
