"""
Base AI Provider Interface.

All AI providers must inherit from this base class and implement
all abstract methods. Calls are synchronous; AIService runs them in an
executor with a time bound.
"""
from abc import ABC, abstractmethod


class AIProvider(ABC):
    """
    Abstract base class for generative-model providers.

    Providers return the raw model text. Cleaning and scoring happen in AIService.
    Failures are raised as AIProviderError.
    """

    name = "base"

    @abstractmethod
    def generate_summary(self, text: str) -> str:
        """
        Summarize document text as an HTML fragment.

        Args:
            text: Extracted document text

        Returns:
            Raw model output
        """
        pass

    @abstractmethod
    def generate_quiz(self, text: str, num_questions: int, difficulty: str) -> str:
        """
        Generate multiple-choice questions as JSON text:
        ``{"questions": [{"question", "options": {"A".."D"}, "answer"}]}``.
        """
        pass
