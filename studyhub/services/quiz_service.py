"""
Quiz Service - quizzes attached to files, their questions, and scoring.
"""
import uuid
from typing import Dict, List, Tuple

from ..api.exceptions import NotFoundError, ValidationFailedError
from ..core.logging_config import get_logger
from ..domain.entities import Answer, Question, Quiz, QuizLevel
from .database import DatabaseInterface
from .file_service import FileService

logger = get_logger(__name__)


class QuizService:
    """Ownership of a quiz follows its file's subject."""

    def __init__(self, db_service: DatabaseInterface, file_service: FileService):
        self.db_service = db_service
        self.file_service = file_service

    async def create_quiz(self, user_id: str, file_id: str, name: str, level: str, questions: List[Dict]) -> Quiz:
        """
        Create a quiz with its questions.

        Args:
            questions: Dicts with name, question, answers [{content, is_correct, explanation}], explanation

        Raises:
            InvalidQuestionError: A question does not have exactly one correct answer
        """
        file = await self.file_service.get_owned_file(user_id, file_id)
        if level not in QuizLevel.ALL:
            raise ValidationFailedError(f"level must be one of {', '.join(QuizLevel.ALL)}")

        quiz = Quiz(id=str(uuid.uuid4()), name=name, file_id=file.id, level=level)
        built = [
            Question(
                id=str(uuid.uuid4()),
                quiz_id=quiz.id,
                name=q["name"],
                question=q["question"],
                answers=[Answer(**a) for a in q["answers"]],
                explanation=q.get("explanation", ""),
            )
            for q in questions
        ]

        await self.db_service.create_quiz(quiz.to_dict(), [q.to_dict() for q in built])
        await self.db_service.update_file(file.id, increments={"quiz_count": 1})
        logger.info(f"Created quiz {quiz.id} with {len(built)} questions for file {file.id}")
        return quiz

    async def list_quizzes(self, user_id: str, file_id: str) -> List[Quiz]:
        await self.file_service.get_owned_file(user_id, file_id)
        return [Quiz.from_dict(r) for r in await self.db_service.list_quizzes(file_id)]

    async def get_quiz(self, user_id: str, quiz_id: str) -> Quiz:
        record = await self.db_service.get_quiz(quiz_id)
        if record is None:
            raise NotFoundError("Quiz not found")
        await self.file_service.get_owned_file(user_id, record["file_id"])
        return Quiz.from_dict(record)

    async def get_questions(self, user_id: str, quiz_id: str) -> List[Question]:
        quiz = await self.get_quiz(user_id, quiz_id)
        return [Question.from_dict(r) for r in await self.db_service.list_questions(quiz.id)]

    async def submit(self, user_id: str, quiz_id: str, answers: Dict[str, int]) -> Tuple[Quiz, int, int, int]:
        """
        Score one attempt. Unanswered questions count as wrong.

        Args:
            answers: Chosen answer index per question id

        Returns:
            (updated quiz, score 0..100, correct count, question count)
        """
        quiz = await self.get_quiz(user_id, quiz_id)
        questions = [Question.from_dict(r) for r in await self.db_service.list_questions(quiz.id)]
        if not questions:
            raise ValidationFailedError("Quiz has no questions")

        correct = sum(1 for q in questions if answers.get(q.id) == q.correct_index())
        score = round(100 * correct / len(questions))

        quiz.record_attempt(score)
        await self.db_service.update_quiz(
            quiz.id, {"highest_score": quiz.highest_score, "attempt_count": quiz.attempt_count}
        )
        return quiz, score, correct, len(questions)
