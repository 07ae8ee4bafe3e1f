"""
Gemini AI Provider.

Calls the Google Generative Language REST API (``generateContent``) with httpx.
"""
from typing import Any, Dict, Optional

import httpx

from ...core.config import AI_TIMEOUT_SECONDS, GEMINI_API_KEY, GEMINI_MODEL
from ...core.exceptions import AIProviderError
from ...core.logging_config import get_logger
from .base import AIProvider
from .prompts import quiz_prompt, summary_prompt

logger = get_logger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiProvider(AIProvider):
    """AI Provider using the Gemini API."""

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = GEMINI_API_KEY,
        model: str = GEMINI_MODEL,
        timeout: float = AI_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("Gemini API key not configured")
        self.model = model
        self.client = httpx.Client(
            base_url=GEMINI_BASE_URL,
            headers={"x-goog-api-key": api_key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def _generate(self, prompt: str, temperature: float, json_output: bool = False) -> str:
        generation_config: Dict[str, Any] = {"temperature": temperature, "candidateCount": 1}
        if json_output:
            generation_config["responseMimeType"] = "application/json"

        try:
            response = self.client.post(
                f"/models/{self.model}:generateContent",
                json={"contents": [{"parts": [{"text": prompt}]}], "generationConfig": generation_config},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Gemini API Error: HTTP {e.response.status_code}")
            raise AIProviderError(f"Gemini returned HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Gemini API Error: {e}")
            raise AIProviderError(f"Gemini request failed: {e}") from e

        candidates = data.get("candidates") or []
        if not candidates:
            raise AIProviderError("No candidate returned from Gemini API")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

    def generate_summary(self, text: str) -> str:
        return self._generate(summary_prompt(text), temperature=0.5)

    def generate_quiz(self, text: str, num_questions: int, difficulty: str) -> str:
        return self._generate(quiz_prompt(text, num_questions, difficulty), temperature=0.4, json_output=True)
