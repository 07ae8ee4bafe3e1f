"""
OpenRouter AI Provider.

Provides AI capabilities using OpenRouter API (OpenAI-compatible, multiple models).
"""
from typing import Optional

from openai import OpenAI, OpenAIError

from ...core.config import AI_TIMEOUT_SECONDS, OPENROUTER_API_KEY, OPENROUTER_BASE_URL
from ...core.exceptions import AIProviderError
from ...core.logging_config import get_logger
from .base import AIProvider
from .prompts import quiz_prompt, summary_prompt

logger = get_logger(__name__)


class OpenRouterProvider(AIProvider):
    """AI Provider using OpenRouter API."""

    name = "openrouter"

    def __init__(
        self,
        api_key: Optional[str] = OPENROUTER_API_KEY,
        model: str = "anthropic/claude-3-haiku",
        timeout: float = AI_TIMEOUT_SECONDS,
    ):
        if not api_key:
            raise ValueError("OpenRouter API key not configured")
        self.model = model
        self.client = OpenAI(base_url=OPENROUTER_BASE_URL, api_key=api_key, timeout=timeout)

    def _complete(self, prompt: str, max_tokens: int) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"OpenRouter API Error: {e}")
            raise AIProviderError(f"OpenRouter request failed: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            raise AIProviderError("OpenRouter returned an empty completion")
        return response.choices[0].message.content

    def generate_summary(self, text: str) -> str:
        return self._complete(summary_prompt(text), max_tokens=2000)

    def generate_quiz(self, text: str, num_questions: int, difficulty: str) -> str:
        return self._complete(quiz_prompt(text, num_questions, difficulty), max_tokens=4000)
