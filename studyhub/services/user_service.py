"""
User Service - user records. Authentication is handled outside this service.
"""
import uuid
from typing import Optional

from ..api.exceptions import ConflictError, NotFoundError
from ..core.logging_config import get_logger
from ..domain.entities import User
from .database import DatabaseInterface

logger = get_logger(__name__)


class UserService:

    def __init__(self, db_service: DatabaseInterface):
        self.db_service = db_service

    async def create_user(self, username: str, email: str, name: str, image: Optional[str] = None) -> User:
        """
        Raises:
            ConflictError: Username or email already registered
        """
        email = email.strip().lower()
        if await self.db_service.find_user(username=username, email=email):
            raise ConflictError("Username or email already registered")

        user = User(id=str(uuid.uuid4()), username=username, email=email, name=name, image=image)
        await self.db_service.create_user(user.to_dict())
        logger.info(f"Created user {user.id}")
        return user

    async def get_user(self, user_id: str) -> User:
        record = await self.db_service.get_user(user_id)
        if record is None:
            raise NotFoundError("User not found")
        return User.from_dict(record)
