"""
Mock AI Provider.

Deterministic responses for development and tests. Makes no API calls.
"""
import json
import re

from ...core.logging_config import get_logger
from .base import AIProvider

logger = get_logger(__name__)


class MockProvider(AIProvider):
    """
    Mock AI Provider.

    The summary echoes the first sentences of the text, so the same input
    always gives the same summary.
    """

    name = "mock"

    def generate_summary(self, text: str) -> str:
        sentences = [s.strip() for s in re.split(r"(?<=[.!?])\s+", text.strip()) if s.strip()]
        items = "".join(f'<li class="mb-1">{s}</li>' for s in sentences[:5])
        return (
            '<p class="text-sm text-gray-500">Language: unknown</p>'
            '<h1 class="text-2xl font-bold mb-4">Summary 📘</h1>'
            f'<ul class="list-disc pl-6">{items}</ul>'
        )

    def generate_quiz(self, text: str, num_questions: int, difficulty: str) -> str:
        words = [w for w in re.findall(r"\w+", text) if len(w) > 3] or ["study", "notes", "topic", "review"]
        questions = []
        for i in range(num_questions):
            word = words[i % len(words)]
            questions.append({
                "question": f"Which word appears in the document ({i + 1})?",
                "options": {"A": word, "B": f"not-{word}", "C": f"{word}-x", "D": f"x-{word}"},
                "answer": "A",
            })
        return json.dumps({"questions": questions})
