import pytest

from studyhub.core.exceptions import AIProviderError
from studyhub.messaging.envelope import create_envelope
from studyhub.messaging.queues import MessageType
from studyhub.services.ai_service import AIService, GeneratedQuestion
from studyhub.services.providers import MockProvider
from studyhub.services.quiz_generation_consumer import QuizGenerationConsumer, build_questions
from tests.conftest import read_as_text, seed_file, text_source


class GarbageProvider(MockProvider):
    def generate_quiz(self, text, num_questions, difficulty):
        return "I could not write a quiz."


def quiz_job(file, num_questions=3, difficulty="easy"):
    return create_envelope(
        MessageType.QUIZ_GENERATE,
        {
            "fileId": file.id,
            "sourceUrl": file.storage_url,
            "mimeType": file.mime_type,
            "numQuestions": num_questions,
            "difficulty": difficulty,
        },
    )


def test_build_questions_marks_the_keyed_option_correct():
    generated = [
        GeneratedQuestion(question="2 + 2?", options={"A": "3", "B": "4", "C": "5", "D": "6"}, answer="B"),
    ]
    [question] = build_questions("quiz-1", generated)

    assert question.quiz_id == "quiz-1"
    assert question.name == "Question 1"
    assert [a.content for a in question.answers] == ["3", "4", "5", "6"]
    assert question.correct_index() == 1


@pytest.mark.asyncio
async def test_quiz_and_questions_are_stored(db, ai_service):
    file = await seed_file(db)
    downloader, _ = text_source()
    consumer = QuizGenerationConsumer(db, ai_service, downloader, extractor=read_as_text)

    await consumer.handle(quiz_job(file, num_questions=3, difficulty="easy"))

    [quiz] = await db.list_quizzes(file.id)
    questions = await db.list_questions(quiz["id"])
    assert quiz["level"] == "ez"
    assert quiz["highest_score"] == -1
    assert len(questions) == 3
    assert all(sum(a["is_correct"] for a in q["answers"]) == 1 for q in questions)
    assert (await db.get_file(file.id))["quiz_count"] == 1


@pytest.mark.asyncio
async def test_unparseable_model_output_stores_nothing(db):
    file = await seed_file(db)
    downloader, _ = text_source()
    consumer = QuizGenerationConsumer(db, AIService(provider=GarbageProvider()), downloader, extractor=read_as_text)

    with pytest.raises(AIProviderError):
        await consumer.handle(quiz_job(file))

    assert await db.list_quizzes(file.id) == []
    assert (await db.get_file(file.id))["quiz_count"] == 0


@pytest.mark.asyncio
async def test_extra_questions_are_trimmed(db):
    class ChattyProvider(MockProvider):
        def generate_quiz(self, text, num_questions, difficulty):
            return "```json\n" + super().generate_quiz(text, num_questions + 4, difficulty) + "\n```"

    file = await seed_file(db)
    downloader, _ = text_source()
    consumer = QuizGenerationConsumer(db, AIService(provider=ChattyProvider()), downloader, extractor=read_as_text)

    await consumer.handle(quiz_job(file, num_questions=2))

    [quiz] = await db.list_quizzes(file.id)
    assert len(await db.list_questions(quiz["id"])) == 2
