"""
Abstract base class for database adapters.
All database implementations must inherit from this class.

Records are plain dicts keyed by a string ``id`` (see ``domain.entities``).
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ...core.logging_config import get_logger

logger = get_logger(__name__)


class DatabaseInterface(ABC):
    """
    Abstract interface for database operations.
    All database adapters must implement these methods.
    This allows plug-and-play database support without changing business logic.
    """

    # User operations
    @abstractmethod
    async def create_user(self, user_data: Dict) -> Dict:
        """Create a user record."""
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[Dict]:
        """Get a user by ID."""
        pass

    @abstractmethod
    async def find_user(self, username: Optional[str] = None, email: Optional[str] = None) -> Optional[Dict]:
        """Find a user whose username or email matches."""
        pass

    # Subject operations
    @abstractmethod
    async def create_subject(self, subject_data: Dict) -> Dict:
        pass

    @abstractmethod
    async def get_subject(self, subject_id: str) -> Optional[Dict]:
        pass

    @abstractmethod
    async def list_subjects(self, user_id: str) -> List[Dict]:
        """Subjects owned by a user, oldest first."""
        pass

    @abstractmethod
    async def add_subject_child(self, subject_id: str, file_id: str) -> bool:
        """Append a file id to the subject's children (no duplicates)."""
        pass

    @abstractmethod
    async def remove_subject_child(self, subject_id: str, file_id: str) -> bool:
        pass

    # File operations
    @abstractmethod
    async def create_file(self, file_data: Dict) -> Dict:
        pass

    @abstractmethod
    async def get_file(self, file_id: str) -> Optional[Dict]:
        pass

    @abstractmethod
    async def list_files(
        self,
        subject_id: str,
        status: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict]:
        """Files of a subject, newest first."""
        pass

    @abstractmethod
    async def count_files(self, subject_id: str, status: Optional[str] = None) -> int:
        pass

    @abstractmethod
    async def update_file(
        self,
        file_id: str,
        updates: Optional[Dict] = None,
        increments: Optional[Dict[str, int]] = None,
    ) -> Optional[Dict]:
        """
        Set fields and increment counters of one file in a single write.

        Returns:
            The updated record, or None if the file does not exist
        """
        pass

    # Quiz operations
    @abstractmethod
    async def create_quiz(self, quiz_data: Dict, questions: List[Dict]) -> Dict:
        """Create a quiz together with its questions."""
        pass

    @abstractmethod
    async def get_quiz(self, quiz_id: str) -> Optional[Dict]:
        pass

    @abstractmethod
    async def list_quizzes(self, file_id: str) -> List[Dict]:
        pass

    @abstractmethod
    async def update_quiz(self, quiz_id: str, updates: Dict) -> Optional[Dict]:
        pass

    @abstractmethod
    async def list_questions(self, quiz_id: str) -> List[Dict]:
        pass

    @abstractmethod
    async def delete_quizzes_for_file(self, file_id: str) -> int:
        """Delete every quiz (and its questions) of a file. Returns the quiz count."""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the store answers."""
        pass

    @abstractmethod
    async def initialize(self):
        """Initialize database (create collections, indexes, etc.)."""
        pass

    @abstractmethod
    async def close(self):
        """Close database connection."""
        pass
