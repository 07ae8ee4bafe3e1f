"""
Quiz Generation Consumer - builds a multiple-choice quiz from a stored file.

Same download/extract steps as file processing; the model output is parsed
into questions, and the quiz with all of its questions is stored in one call
before the file's quiz counter is incremented.
"""
import asyncio
import mimetypes
import uuid
from typing import Callable, List

from ..core.exceptions import UnsupportedFileTypeError
from ..core.logging_config import get_logger
from ..domain.entities import Answer, File, FileStatus, Question, Quiz, QuizLevel
from ..messaging.envelope import QuizGenerateEnvelope
from .ai_service import AIService, GeneratedQuestion, OPTION_KEYS
from .database import DatabaseInterface
from .downloader import Downloader
from .text_extractors import TextExtractorFactory, extract_text

logger = get_logger(__name__)


def build_questions(quiz_id: str, generated: List[GeneratedQuestion]) -> List[Question]:
    """One Question per generated item; the answer key marks the single correct option."""
    return [
        Question(
            id=str(uuid.uuid4()),
            quiz_id=quiz_id,
            name=f"Question {index}",
            question=item.question,
            answers=[
                Answer(content=item.options[key], is_correct=(key == item.answer))
                for key in OPTION_KEYS
            ],
        )
        for index, item in enumerate(generated, start=1)
    ]


class QuizGenerationConsumer:
    """Handler for the ``quiz_generate`` queue."""

    def __init__(
        self,
        db_service: DatabaseInterface,
        ai_service: AIService,
        downloader: Downloader,
        extractor: Callable = extract_text,
    ):
        self.db_service = db_service
        self.ai_service = ai_service
        self.downloader = downloader
        self.extractor = extractor

    async def handle(self, envelope: QuizGenerateEnvelope) -> None:
        job = envelope.payload
        logger.info(
            f"Generating {job.num_questions} {job.difficulty} questions for file {job.file_id} "
            f"(correlation_id={envelope.correlation_id})"
        )

        if not job.source_url:
            logger.warning(f"No source URL for file {job.file_id}, nothing to process")
            return

        record = await self.db_service.get_file(job.file_id)
        if record is None or record.get("status") == FileStatus.DELETED:
            logger.warning(f"File {job.file_id} no longer exists, skipping")
            return
        file = File.from_dict(record)

        if job.mime_type and not TextExtractorFactory.is_supported(job.mime_type):
            raise UnsupportedFileTypeError(job.mime_type)

        suffix = mimetypes.guess_extension(job.mime_type or "") or ""
        async with self.downloader.download_to_temp(job.source_url, suffix=suffix) as downloaded:
            mime_type = job.mime_type or downloaded.content_type
            loop = asyncio.get_running_loop()
            text = await loop.run_in_executor(None, self.extractor, downloaded.path, mime_type)

        generated = await self.ai_service.generate_quiz(text, job.num_questions, job.difficulty)

        quiz = Quiz(
            id=str(uuid.uuid4()),
            name=f"{file.name} - {job.difficulty} quiz",
            file_id=file.id,
            level=QuizLevel.from_difficulty(job.difficulty),
        )
        questions = build_questions(quiz.id, generated)

        await self.db_service.create_quiz(quiz.to_dict(), [q.to_dict() for q in questions])
        await self.db_service.update_file(file.id, increments={"quiz_count": 1})
        logger.info(f"Quiz {quiz.id} with {len(questions)} questions saved for file {file.id}")
