"""
Anthropic AI Provider.

Provides AI capabilities using Anthropic's Claude API directly.
"""
from typing import Optional

import anthropic

from ...core.config import AI_TIMEOUT_SECONDS, ANTHROPIC_API_KEY
from ...core.exceptions import AIProviderError
from ...core.logging_config import get_logger
from .base import AIProvider
from .prompts import quiz_prompt, summary_prompt

logger = get_logger(__name__)


class AnthropicProvider(AIProvider):
    """AI Provider using Anthropic Claude API directly."""

    name = "anthropic"

    def __init__(
        self,
        api_key: Optional[str] = ANTHROPIC_API_KEY,
        model: str = "claude-3-haiku-20240307",
        timeout: float = AI_TIMEOUT_SECONDS,
    ):
        if not api_key:
            raise ValueError("Anthropic API key not configured")
        self.model = model
        self.client = anthropic.Anthropic(api_key=api_key, timeout=timeout)

    def _complete(self, prompt: str, max_tokens: int) -> str:
        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic API Error: {e}")
            raise AIProviderError(f"Anthropic request failed: {e}") from e

        text = "".join(block.text for block in message.content if getattr(block, "type", "") == "text")
        if not text:
            raise AIProviderError("Anthropic returned an empty message")
        return text

    def generate_summary(self, text: str) -> str:
        return self._complete(summary_prompt(text), max_tokens=2000)

    def generate_quiz(self, text: str, num_questions: int, difficulty: str) -> str:
        return self._complete(quiz_prompt(text, num_questions, difficulty), max_tokens=4000)
