"""
File Service - upload path and file CRUD.

Upload workflow:
1. Validate subject ownership and the file itself
2. Store bytes through the storage adapter
3. Create the File record and append it to the subject's children
4. Optionally queue summarization / quiz generation (never waits for them)
"""
import math
import mimetypes
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..api.exceptions import ForbiddenError, NotFoundError, ValidationFailedError
from ..core.config import MAX_UPLOAD_BYTES
from ..core.logging_config import get_logger
from ..domain.entities import File, FileStatus, Subject
from .database import DatabaseInterface
from .job_producer import JobProducer
from .storage import FileStorageInterface
from .text_extractors import DOCX_MIME_TYPE

logger = get_logger(__name__)

ALLOWED_EXTENSIONS = {".pdf", ".docx", ".doc", ".md"}

_EXTENSION_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".docx": DOCX_MIME_TYPE,
    ".doc": "application/msword",
    ".md": "text/markdown",
}


def resolve_mime_type(filename: str, content_type: Optional[str]) -> str:
    """Prefer the client's Content-Type unless it is missing or generic."""
    if content_type and content_type != "application/octet-stream":
        return content_type
    ext = Path(filename).suffix.lower()
    return _EXTENSION_MIME_TYPES.get(ext) or mimetypes.guess_type(filename)[0] or "application/octet-stream"


class FileService:
    """
    Service for file uploads and file records.

    Attributes:
        db_service: Document store
        storage: File storage adapter
        producer: Job producer for background processing
    """

    def __init__(
        self,
        db_service: DatabaseInterface,
        storage: FileStorageInterface,
        producer: JobProducer,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
    ):
        self.db_service = db_service
        self.storage = storage
        self.producer = producer
        self.max_upload_bytes = max_upload_bytes

    async def get_owned_subject(self, user_id: str, subject_id: str) -> Subject:
        """
        Raises:
            NotFoundError: Subject does not exist or belongs to someone else
        """
        record = await self.db_service.get_subject(subject_id) if subject_id else None
        if record is None or record.get("user_id") != user_id:
            raise NotFoundError("Subject not found or not owned by you")
        return Subject.from_dict(record)

    async def get_owned_file(self, user_id: str, file_id: str) -> File:
        """
        Raises:
            NotFoundError: File does not exist or was deleted
            ForbiddenError: File belongs to another user's subject
        """
        record = await self.db_service.get_file(file_id)
        if record is None or record.get("status") != FileStatus.ACTIVE:
            raise NotFoundError("File not found")

        subject = await self.db_service.get_subject(record["subject_id"])
        if subject is None or subject.get("user_id") != user_id:
            raise ForbiddenError("You do not have access to this file")
        return File.from_dict(record)

    def _validate_upload(self, filename: str, content: bytes, quiz_questions: int) -> str:
        if not filename:
            raise ValidationFailedError("File name is required")
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationFailedError(
                f"Unsupported file type '{ext or filename}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )
        if not content:
            raise ValidationFailedError("File is empty")
        if len(content) > self.max_upload_bytes:
            raise ValidationFailedError(f"File exceeds the {self.max_upload_bytes} byte upload limit")
        if not 1 <= quiz_questions <= 50:
            raise ValidationFailedError("quizQuestions must be between 1 and 50")
        return ext

    async def upload_file(
        self,
        user_id: str,
        filename: str,
        content: bytes,
        content_type: Optional[str],
        subject_id: str,
        create_summary: bool = False,
        generate_quiz: bool = False,
        quiz_questions: int = 10,
        quiz_difficulty: str = "medium",
    ) -> Dict[str, Any]:
        """
        Store a new file and optionally queue its background jobs.

        Returns:
            {"file": File, "processing": {"queued": bool, "error"?: str,
             "quizQueued"?: bool, "quizError"?: str}}

        Raises:
            NotFoundError: Subject missing or not owned
            ValidationFailedError: Bad file name, extension, size or quiz options
        """
        subject = await self.get_owned_subject(user_id, subject_id)
        ext = self._validate_upload(filename, content, quiz_questions)
        difficulty = (quiz_difficulty or "medium").lower()
        if generate_quiz and difficulty not in ("easy", "medium", "hard"):
            raise ValidationFailedError("quizDifficulty must be easy, medium or hard")

        file_id = str(uuid.uuid4())
        mime_type = resolve_mime_type(filename, content_type)
        storage_key = f"{user_id}/{file_id}{ext}"

        await self.storage.save_bytes(content, storage_key, content_type=mime_type)
        storage_url = await self.storage.get_file_url(storage_key)

        file = File(
            id=file_id,
            name=filename,
            size_bytes=len(content),
            mime_type=mime_type,
            storage_url=storage_url,
            storage_key=storage_key,
            subject_id=subject.id,
            user_id=user_id,
        )
        await self.db_service.create_file(file.to_dict())
        await self.db_service.add_subject_child(subject.id, file.id)
        logger.info(f"Stored file {file.id} ({file.size_bytes} bytes) in subject {subject.id}")

        processing: Dict[str, Any] = {"queued": False}
        if create_summary:
            result = await self.producer.enqueue_file_processing(file, storage_url)
            processing["queued"] = result.queued
            if result.error:
                processing["error"] = result.error

        if generate_quiz:
            result = await self.producer.enqueue_quiz_generation(file, storage_url, quiz_questions, difficulty)
            processing["quizQueued"] = result.queued
            if result.error:
                processing["quizError"] = result.error

        return {"file": file, "processing": processing}

    async def get_files_by_subject(
        self,
        user_id: str,
        subject_id: str,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[File], Dict[str, int]]:
        """Active files of a subject, newest first, with pagination info."""
        await self.get_owned_subject(user_id, subject_id)
        total = await self.db_service.count_files(subject_id, status=FileStatus.ACTIVE)
        records = await self.db_service.list_files(
            subject_id, status=FileStatus.ACTIVE, skip=(page - 1) * limit, limit=limit
        )
        pagination = {
            "current_page": page,
            "total_pages": math.ceil(total / limit) if limit else 0,
            "total_items": total,
            "items_per_page": limit,
        }
        return [File.from_dict(r) for r in records], pagination

    async def get_file(self, user_id: str, file_id: str) -> File:
        return await self.get_owned_file(user_id, file_id)

    async def delete_file(self, user_id: str, file_id: str) -> None:
        """
        Soft delete: mark DELETED, detach from the subject and drop its quizzes.
        Stored bytes are kept.
        """
        file = await self.get_owned_file(user_id, file_id)
        await self.db_service.update_file(file.id, updates={"status": FileStatus.DELETED})
        await self.db_service.remove_subject_child(file.subject_id, file.id)
        removed = await self.db_service.delete_quizzes_for_file(file.id)
        logger.info(f"Deleted file {file.id} ({removed} quizzes removed)")

    async def read_raw(self, storage_key: str) -> bytes:
        """Bytes of a stored object. Raises NotFoundError when missing."""
        try:
            return await self.storage.get_file(storage_key)
        except FileNotFoundError as e:
            raise NotFoundError("File not found") from e
