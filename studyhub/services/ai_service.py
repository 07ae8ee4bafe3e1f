"""
AI Service - summarization and quiz generation on top of an AIProvider.

Provider calls are blocking, so they run in the default executor under a hard
time limit. There is no fallback provider here: a failed call raises, and the
queued job that asked for it is dead-lettered.
"""
import asyncio
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..core.config import AI_MAX_INPUT_CHARS, AI_TIMEOUT_SECONDS
from ..core.exceptions import AIProviderError, RetryableJobError
from ..core.logging_config import get_logger
from .providers import AIProvider, AIProviderFactory

logger = get_logger(__name__)

OPTION_KEYS = ("A", "B", "C", "D")

_HTML_TAG = re.compile(r"<[^>]*>")
_HTML_ENTITY = re.compile(r"&nbsp;|&amp;|&lt;|&gt;|&quot;|&#39;")
_NON_WORD = re.compile(r"[^\w\s]+|_+")


@dataclass
class SummaryResult:
    summary: str
    ai_match_score: float


@dataclass
class GeneratedQuestion:
    question: str
    options: Dict[str, str]
    answer: str


def clean_html_output(raw: str) -> str:
    """Strip code fences, wrapping quotes and escaped/real newlines from model HTML."""
    if not raw:
        return ""
    s = re.sub(r"```html|```", "", raw).strip()
    if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
        s = s[1:-1]
    s = (
        s.replace('\\"', '"')
        .replace("\\n", "")
        .replace("\\r", "")
        .replace("\\t", " ")
        .replace("\\", "")
    )
    s = re.sub(r"\r?\n|\r", "", s)
    return re.sub(r"\s{2,}", " ", s).strip()


def _word_set(text: str) -> set:
    normalized = _HTML_ENTITY.sub(" ", text.lower())
    normalized = _NON_WORD.sub(" ", normalized)
    return set(normalized.split())


def match_score(original: str, summary_html: str) -> float:
    """
    Jaccard similarity of the word sets of the original text and the summary
    (HTML tags removed). Returns a value in [0, 1]; 0 when both are empty.
    """
    original_words = _word_set(original or "")
    summary_words = _word_set(_HTML_TAG.sub(" ", summary_html or ""))
    union = original_words | summary_words
    if not union:
        return 0.0
    return len(original_words & summary_words) / len(union)


def parse_quiz_json(raw: str) -> Dict[str, Any]:
    """
    Parse model output as quiz JSON, tolerating markdown fences and text
    around the outermost ``{...}`` block.

    Raises:
        AIProviderError: If no JSON object with a ``questions`` list is found
    """
    s = re.sub(r"```json|```", "", raw or "").strip()
    data = None
    try:
        data = json.loads(s)
    except ValueError:
        start, end = s.find("{"), s.rfind("}")
        if start != -1 and end > start:
            try:
                data = json.loads(s[start:end + 1])
            except ValueError:
                logger.debug("Fallback quiz JSON parse failed")

    if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
        raise AIProviderError("Model did not return valid quiz JSON")
    return data


def normalize_question(item: Any) -> Optional[GeneratedQuestion]:
    """Return a cleaned question, or None if any part is missing."""
    if not isinstance(item, dict):
        return None
    question = str(item.get("question") or "").strip()
    raw_options = item.get("options") if isinstance(item.get("options"), dict) else {}
    options = {key: str(raw_options.get(key) or "").strip() for key in OPTION_KEYS}
    answer = str(item.get("answer") or "").strip().upper()

    if not question or not all(options.values()) or answer not in OPTION_KEYS:
        return None
    return GeneratedQuestion(question=question, options=options, answer=answer)


class AIService:
    """
    AI service implementation.
    Handles summary generation (with match score) and quiz generation.
    """

    def __init__(
        self,
        provider: Optional[AIProvider] = None,
        timeout: float = AI_TIMEOUT_SECONDS,
        max_input_chars: int = AI_MAX_INPUT_CHARS,
    ):
        self.provider = provider or AIProviderFactory.get_provider()
        self.timeout = timeout
        self.max_input_chars = max_input_chars
        logger.info(f"Initialized AIService with provider: {type(self.provider).__name__}")

    async def _call(self, operation: str, fn, *args):
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(loop.run_in_executor(None, fn, *args), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"AI {operation} timed out after {self.timeout}s")
            raise RetryableJobError(f"AI {operation} timed out after {self.timeout}s") from e

    def _truncate(self, text: str) -> str:
        if len(text) > self.max_input_chars:
            logger.debug(f"Truncating AI input from {len(text)} to {self.max_input_chars} chars")
            return text[:self.max_input_chars]
        return text

    async def summarize(self, text: str) -> SummaryResult:
        """
        Summarize extracted text.

        Raises:
            AIProviderError: The provider failed or returned nothing usable
            RetryableJobError: The call exceeded the time limit
        """
        logger.debug(f"Generating summary for text (length: {len(text)} chars)")
        raw = await self._call("summary", self.provider.generate_summary, self._truncate(text))
        summary = clean_html_output(raw)
        if not summary:
            raise AIProviderError("Model returned an empty summary")

        score = match_score(text, summary)
        logger.debug(f"Summary generated (length: {len(summary)} chars, match score: {score:.3f})")
        return SummaryResult(summary=summary, ai_match_score=score)

    async def generate_quiz(self, text: str, num_questions: int, difficulty: str) -> List[GeneratedQuestion]:
        """
        Generate up to ``num_questions`` validated multiple-choice questions.

        Raises:
            AIProviderError: No valid question could be parsed
            RetryableJobError: The call exceeded the time limit
        """
        raw = await self._call(
            "quiz", self.provider.generate_quiz, self._truncate(text), num_questions, difficulty
        )
        data = parse_quiz_json(raw)
        questions = [q for q in (normalize_question(item) for item in data["questions"]) if q]
        if not questions:
            raise AIProviderError("Model returned no valid quiz questions")
        if len(questions) < num_questions:
            logger.warning(f"Model returned {len(questions)} valid questions, {num_questions} requested")
        return questions[:num_questions]
