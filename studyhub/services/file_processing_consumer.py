"""
File Processing Consumer - turns a queued ``file-process`` job into a summary.

Pipeline per delivery:
    download (temp file) -> extract text by MIME -> summarize -> one store write

The store is written exactly once, after summarization succeeded. Every error
propagates to the broker client, which dead-letters the message (or retries it
for RetryableJobError).
"""
import asyncio
import mimetypes
from typing import Callable, Optional

from ..core.exceptions import BrokerUnavailableError, EnvelopeError, UnsupportedFileTypeError
from ..core.logging_config import get_logger
from ..domain.entities import File, FileStatus
from ..messaging.broker import BrokerClient
from ..messaging.envelope import FileProcessEnvelope
from ..messaging.queues import RoutingKey
from .ai_service import AIService
from .database import DatabaseInterface
from .downloader import Downloader
from .notification_service import publish_notification
from .text_extractors import TextExtractorFactory, extract_text

logger = get_logger(__name__)


class FileProcessingConsumer:
    """
    Handler for the ``file_process`` queue.

    Args:
        db_service: Document store
        ai_service: Summarizer
        downloader: Source downloader
        broker: Used to publish the summary-ready notification (optional)
        extractor: ``(path, mime_type) -> text``
    """

    def __init__(
        self,
        db_service: DatabaseInterface,
        ai_service: AIService,
        downloader: Downloader,
        broker: Optional[BrokerClient] = None,
        extractor: Callable = extract_text,
    ):
        self.db_service = db_service
        self.ai_service = ai_service
        self.downloader = downloader
        self.broker = broker
        self.extractor = extractor

    async def handle(self, envelope: FileProcessEnvelope) -> None:
        job = envelope.payload
        logger.info(f"Processing file {job.file_id} (correlation_id={envelope.correlation_id})")

        if not job.source_url:
            logger.warning(f"No source URL for file {job.file_id}, nothing to process")
            return

        record = await self.db_service.get_file(job.file_id)
        if record is None or record.get("status") == FileStatus.DELETED:
            logger.warning(f"File {job.file_id} no longer exists, skipping")
            return

        # Known-unsupported types are rejected before any download
        if job.mime_type and not TextExtractorFactory.is_supported(job.mime_type):
            raise UnsupportedFileTypeError(job.mime_type)

        suffix = mimetypes.guess_extension(job.mime_type or "") or ""
        async with self.downloader.download_to_temp(job.source_url, suffix=suffix) as downloaded:
            mime_type = job.mime_type or downloaded.content_type
            loop = asyncio.get_running_loop()
            text = await loop.run_in_executor(None, self.extractor, downloaded.path, mime_type)

        result = await self.ai_service.summarize(text)

        updated = await self.db_service.update_file(
            job.file_id,
            updates={"summary_content": result.summary, "ai_match_score": result.ai_match_score},
            increments={"summary_count": 1},
        )
        if updated is None:
            logger.warning(f"File {job.file_id} disappeared before its summary was saved")
            return

        logger.info(
            f"Summary saved for file {job.file_id} "
            f"(summary_count={updated['summary_count']}, match={result.ai_match_score:.3f})"
        )
        await self._notify_owner(envelope, File.from_dict(updated))

    async def _notify_owner(self, envelope: FileProcessEnvelope, file: File) -> None:
        if self.broker is None:
            return

        user_id = envelope.payload.user_id or file.user_id
        user = await self.db_service.get_user(user_id) if user_id else None
        if not user or not user.get("email"):
            return

        try:
            publish_notification(
                self.broker,
                RoutingKey.SUMMARY_READY,
                template="summary-ready",
                email=user["email"],
                subject=f"Summary ready: {file.name}",
                data={
                    "name": user.get("name"),
                    "file_name": file.name,
                    "file_id": file.id,
                    "ai_match_score": file.ai_match_score,
                },
                parent=envelope,
            )
        except (BrokerUnavailableError, EnvelopeError) as e:
            logger.error(f"Could not publish summary-ready notification for file {file.id}: {e}")
