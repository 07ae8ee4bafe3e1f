"""
Job Producer - publishes background jobs from the API process.

Publishing runs in the default executor so the request's event loop never
blocks on the broker. A failed publish is reported to the caller, never raised.
"""
import asyncio
from dataclasses import dataclass
from typing import Optional

from kombu.exceptions import OperationalError

from ..core.exceptions import BrokerUnavailableError
from ..core.logging_config import get_logger
from ..domain.entities import File
from ..messaging.broker import BrokerClient
from ..messaging.envelope import (
    EnvelopeBase,
    FileProcessingJob,
    QuizGenerationJob,
    create_envelope,
)
from ..messaging.queues import MessageType, QueueName

logger = get_logger(__name__)


@dataclass
class PublishResult:
    queued: bool
    error: Optional[str] = None
    correlation_id: Optional[str] = None


class JobProducer:
    """Builds job envelopes and hands them to the broker client."""

    def __init__(self, broker: Optional[BrokerClient]):
        self.broker = broker

    async def _publish(self, queue: str, envelope: EnvelopeBase) -> PublishResult:
        if self.broker is None:
            logger.error(f"No broker configured, cannot queue {envelope.type}")
            return PublishResult(queued=False, error="Message broker is not configured")

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.broker.publish, queue, envelope)
        except (BrokerUnavailableError, OperationalError, OSError) as e:
            logger.error(f"Failed to queue {envelope.type} (correlation_id={envelope.correlation_id}): {e}")
            return PublishResult(queued=False, error=f"Could not queue job: {e}", correlation_id=envelope.correlation_id)

        return PublishResult(queued=True, correlation_id=envelope.correlation_id)

    async def enqueue_file_processing(self, file: File, source_url: str) -> PublishResult:
        """Queue one summarization job for a stored file."""
        job = FileProcessingJob(
            file_id=file.id,
            source_url=source_url,
            user_id=file.user_id,
            mime_type=file.mime_type,
        )
        return await self._publish(QueueName.FILE_PROCESS, create_envelope(MessageType.FILE_PROCESS, job))

    async def enqueue_quiz_generation(
        self,
        file: File,
        source_url: str,
        num_questions: int = 10,
        difficulty: str = "medium",
    ) -> PublishResult:
        """Queue one quiz-generation job for a stored file."""
        job = QuizGenerationJob(
            file_id=file.id,
            source_url=source_url,
            user_id=file.user_id,
            mime_type=file.mime_type,
            num_questions=num_questions,
            difficulty=difficulty,
        )
        return await self._publish(QueueName.QUIZ_GENERATE, create_envelope(MessageType.QUIZ_GENERATE, job))
