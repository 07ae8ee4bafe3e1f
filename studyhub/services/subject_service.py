"""
Subject Service - a user's folders of study files.
"""
import uuid
from typing import List, Optional, Tuple

from ..api.exceptions import NotFoundError, ValidationFailedError
from ..core.logging_config import get_logger
from ..domain.entities import FileStatus, Subject
from .database import DatabaseInterface

logger = get_logger(__name__)

DEFAULT_COLOR = "#4F46E5"


class SubjectService:

    def __init__(self, db_service: DatabaseInterface):
        self.db_service = db_service

    async def create_subject(self, user_id: str, name: str, color: Optional[str] = None) -> Subject:
        name = (name or "").strip()
        if not name:
            raise ValidationFailedError("Subject name is required")
        if await self.db_service.get_user(user_id) is None:
            raise NotFoundError("User not found")

        subject = Subject(id=str(uuid.uuid4()), user_id=user_id, name=name, color=color or DEFAULT_COLOR)
        await self.db_service.create_subject(subject.to_dict())
        logger.info(f"Created subject {subject.id} for user {user_id}")
        return subject

    async def list_subjects(self, user_id: str) -> List[Tuple[Subject, int]]:
        """Subjects of a user with their count of active files."""
        subjects = []
        for record in await self.db_service.list_subjects(user_id):
            count = await self.db_service.count_files(record["id"], status=FileStatus.ACTIVE)
            subjects.append((Subject.from_dict(record), count))
        return subjects

    async def get_subject(self, user_id: str, subject_id: str) -> Tuple[Subject, int]:
        record = await self.db_service.get_subject(subject_id)
        if record is None or record.get("user_id") != user_id:
            raise NotFoundError("Subject not found or not owned by you")
        count = await self.db_service.count_files(subject_id, status=FileStatus.ACTIVE)
        return Subject.from_dict(record), count
