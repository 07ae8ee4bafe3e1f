"""
Shared dependencies for routers.
Provides service initialization for the API process and dependency injection.
"""
from typing import Optional

from fastapi import Header, HTTPException, status

from ..core.config import BROKER_URL, DATABASE_TYPE, STORAGE_TYPE
from ..core.exceptions import BrokerConnectionError
from ..core.logging_config import get_logger
from ..messaging.broker import BrokerClient
from ..messaging.queues import QueueName
from ..services.database import DatabaseFactory, DatabaseInterface
from ..services.file_service import FileService
from ..services.job_producer import JobProducer
from ..services.quiz_service import QuizService
from ..services.storage import FileStorageFactory, FileStorageInterface
from ..services.subject_service import SubjectService
from ..services.user_service import UserService

logger = get_logger(__name__)

# Global services (initialized on startup, shared across request handlers)
db_service: Optional[DatabaseInterface] = None
storage: Optional[FileStorageInterface] = None
broker: Optional[BrokerClient] = None
producer: Optional[JobProducer] = None
file_service: Optional[FileService] = None
subject_service: Optional[SubjectService] = None
user_service: Optional[UserService] = None
quiz_service: Optional[QuizService] = None


async def initialize_database(db: Optional[DatabaseInterface] = None):
    """Initialize the document store, or adopt one that is already built."""
    global db_service
    if db is not None:
        db_service = db
        return
    logger.info(f"Initializing database: {DATABASE_TYPE}")
    db_service = await DatabaseFactory.create_and_initialize()


async def initialize_storage(file_storage: Optional[FileStorageInterface] = None):
    global storage
    if file_storage is not None:
        storage = file_storage
        return
    logger.info(f"Initializing file storage: {STORAGE_TYPE}")
    storage = await FileStorageFactory.create_and_initialize()


def initialize_broker(client: Optional[BrokerClient] = None):
    """
    Connect the shared broker client and declare the job queues.

    A failed connection is logged and the API keeps serving. Each later
    publish tries to reconnect; until one succeeds, uploads report
    ``queued: false``.
    """
    global broker
    broker = client if client is not None else BrokerClient(BROKER_URL)
    try:
        broker.connect()
    except BrokerConnectionError as e:
        logger.error(f"Broker unavailable at startup, jobs will be queued once it is reachable: {e}")
    broker.declare_queue(QueueName.FILE_PROCESS)
    broker.declare_queue(QueueName.QUIZ_GENERATE)


def initialize_services():
    """Build the business services once the database, storage and broker are set."""
    global producer, file_service, subject_service, user_service, quiz_service

    if db_service is None or storage is None:
        raise RuntimeError("Database and storage must be initialized before services")

    producer = JobProducer(broker)
    file_service = FileService(db_service, storage, producer)
    subject_service = SubjectService(db_service)
    user_service = UserService(db_service)
    quiz_service = QuizService(db_service, file_service)
    logger.info("All services initialized")


async def shutdown_services():
    if broker is not None:
        broker.close()
    if storage is not None:
        await storage.close()
    if db_service is not None:
        await db_service.close()


def get_db_service() -> DatabaseInterface:
    """Get database service (dependency injection)."""
    if db_service is None:
        raise RuntimeError("Database service not initialized")
    return db_service


def get_file_service() -> FileService:
    """Get file service (dependency injection)."""
    if file_service is None:
        raise RuntimeError("File service not initialized")
    return file_service


def get_subject_service() -> SubjectService:
    if subject_service is None:
        raise RuntimeError("Subject service not initialized")
    return subject_service


def get_user_service() -> UserService:
    if user_service is None:
        raise RuntimeError("User service not initialized")
    return user_service


def get_quiz_service() -> QuizService:
    if quiz_service is None:
        raise RuntimeError("Quiz service not initialized")
    return quiz_service


def get_current_user_id(x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> str:
    """
    Caller identity, set by the authenticating proxy in front of the API.

    Raises:
        HTTPException: 401 when the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id header")
    return x_user_id.strip()
