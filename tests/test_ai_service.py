import pytest

from studyhub.core.exceptions import AIProviderError
from studyhub.services.ai_service import (
    AIService,
    clean_html_output,
    match_score,
    normalize_question,
    parse_quiz_json,
)
from studyhub.services.providers import AIProviderFactory, MockProvider


def test_clean_html_output_strips_fences_and_escapes():
    raw = '```html\n"<h1>Title</h1>\\n<p>Body  text</p>"\n```'
    assert clean_html_output(raw) == "<h1>Title</h1><p>Body text</p>"


def test_clean_html_output_of_nothing():
    assert clean_html_output("") == ""


def test_match_score_is_jaccard_of_word_sets():
    # {the, cell, divides} vs {cell, divides, quickly}: 2 shared of 4
    assert match_score("The cell divides.", "<p>Cell divides quickly</p>") == pytest.approx(0.5)


def test_match_score_bounds():
    assert match_score("", "") == 0.0
    assert match_score("same words here", "<b>same words here</b>") == 1.0
    assert match_score("alpha", "<p>beta</p>") == 0.0


def test_parse_quiz_json_tolerates_surrounding_text():
    raw = 'Here you go:\n{"questions": [{"question": "Q", "options": {}, "answer": "A"}]}\nGood luck!'
    assert len(parse_quiz_json(raw)["questions"]) == 1


def test_parse_quiz_json_rejects_non_quiz_output():
    with pytest.raises(AIProviderError):
        parse_quiz_json('{"answer": 42}')


def test_normalize_question_requires_all_options_and_a_valid_key():
    good = {"question": "Q", "options": {"A": "1", "B": "2", "C": "3", "D": "4"}, "answer": "c"}
    missing_option = {"question": "Q", "options": {"A": "1", "B": "2", "C": "3"}, "answer": "A"}
    bad_key = {"question": "Q", "options": {"A": "1", "B": "2", "C": "3", "D": "4"}, "answer": "E"}

    assert normalize_question(good).answer == "C"
    assert normalize_question(missing_option) is None
    assert normalize_question(bad_key) is None
    assert normalize_question("not a dict") is None


@pytest.mark.asyncio
async def test_summarize_returns_summary_and_score():
    service = AIService(provider=MockProvider())
    result = await service.summarize("Enzymes speed up reactions. They are proteins.")

    assert "Enzymes speed up reactions." in result.summary
    assert 0 < result.ai_match_score <= 1


@pytest.mark.asyncio
async def test_empty_summary_is_a_provider_error():
    class SilentProvider(MockProvider):
        def generate_summary(self, text):
            return "```html\n```"

    with pytest.raises(AIProviderError):
        await AIService(provider=SilentProvider()).summarize("text")


@pytest.mark.asyncio
async def test_long_input_is_truncated_before_the_provider():
    seen = []

    class RecordingProvider(MockProvider):
        def generate_summary(self, text):
            seen.append(text)
            return super().generate_summary(text)

    await AIService(provider=RecordingProvider(), max_input_chars=10).summarize("x" * 50)
    assert seen == ["x" * 10]


def test_factory_falls_back_to_mock_without_keys(monkeypatch):
    import studyhub.services.providers.factory as factory

    for key in ("GEMINI_API_KEY", "OPENROUTER_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.setattr(factory, key, None, raising=False)

    assert isinstance(AIProviderFactory.get_provider("gemini"), MockProvider)


def test_factory_explicit_mock():
    assert isinstance(AIProviderFactory.get_provider("mock"), MockProvider)
