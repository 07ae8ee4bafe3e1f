"""
Worker process entry point.

    python -m studyhub.worker

Consumes the job queues one delivery at a time:
- file_process               -> FileProcessingConsumer (summaries)
- quiz_generate              -> QuizGenerationConsumer (quizzes)
- notification.service.queue -> NotificationService (emails)

Scale out by starting more worker processes against the same queues.
"""
import signal
import sys
from typing import Optional

from .core.config import BROKER_URL, SERVICE_NAME
from .core.exceptions import BrokerConnectionError
from .core.logging_config import get_logger, setup_logging
from .messaging.broker import BrokerClient
from .messaging.queues import ExchangeName, MessageType, QueueName, RoutingKey
from .services.ai_service import AIService
from .services.database import DatabaseFactory, DatabaseInterface
from .services.downloader import Downloader
from .services.file_processing_consumer import FileProcessingConsumer
from .services.mail import JinjaTemplateRenderer, create_email_provider
from .services.notification_service import NotificationService
from .services.quiz_generation_consumer import QuizGenerationConsumer

logger = get_logger(__name__)


def declare_topology(broker: BrokerClient) -> None:
    """Job queues with dead-lettering, plus the notification queue on app_events."""
    broker.declare_queue(QueueName.FILE_PROCESS)
    broker.declare_queue(QueueName.QUIZ_GENERATE)
    broker.bind_queue(QueueName.NOTIFICATION_SERVICE, ExchangeName.APP_EVENTS, [RoutingKey.NOTIFICATION_ALL])


def register_consumers(
    broker: BrokerClient,
    db_service: DatabaseInterface,
    ai_service: Optional[AIService] = None,
    downloader: Optional[Downloader] = None,
    notification_service: Optional[NotificationService] = None,
) -> None:
    ai_service = ai_service or AIService()
    downloader = downloader or Downloader()
    notification_service = notification_service or NotificationService(
        JinjaTemplateRenderer(), create_email_provider()
    )

    file_consumer = FileProcessingConsumer(db_service, ai_service, downloader, broker=broker)
    quiz_consumer = QuizGenerationConsumer(db_service, ai_service, downloader)

    # Older producers sent bare payloads on file_process
    broker.register_consumer(
        QueueName.FILE_PROCESS,
        file_consumer.handle,
        legacy_type=MessageType.FILE_PROCESS,
        accept=[MessageType.FILE_PROCESS],
    )
    broker.register_consumer(QueueName.QUIZ_GENERATE, quiz_consumer.handle, accept=[MessageType.QUIZ_GENERATE])
    broker.register_consumer(
        QueueName.NOTIFICATION_SERVICE,
        notification_service.handle,
        accept=[MessageType.NOTIFICATION_SEND],
    )


def main() -> int:
    setup_logging("worker")
    logger.info(f"Starting {SERVICE_NAME} worker")

    broker = BrokerClient(BROKER_URL)
    try:
        broker.connect()
    except BrokerConnectionError as e:
        logger.error(f"Worker cannot start: {e}")
        return 1

    db_service = broker.run_coroutine(DatabaseFactory.create_and_initialize())
    declare_topology(broker)
    register_consumers(broker, db_service)

    def _shutdown(signum, frame):
        logger.info(f"Received signal {signum}, finishing current message")
        broker.stop()

    signal.signal(signal.SIGTERM, _shutdown)
    signal.signal(signal.SIGINT, _shutdown)

    try:
        broker.run_forever()
    finally:
        broker.run_coroutine(db_service.close())
        broker.close()
        logger.info("Worker stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
