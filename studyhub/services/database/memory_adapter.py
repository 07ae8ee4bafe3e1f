"""
In-memory adapter implementing DatabaseInterface.
Perfect for demos and testing - stores all data in memory using Python dicts.
Data is lost on restart.
"""
import copy
from typing import Dict, List, Optional

from .base import DatabaseInterface
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class MemoryAdapter(DatabaseInterface):
    """
    In-memory database adapter using Python dictionaries.
    Every read and write goes through deepcopy so callers never share state
    with the store.
    """

    def __init__(self):
        self._users: Dict[str, Dict] = {}
        self._subjects: Dict[str, Dict] = {}
        self._files: Dict[str, Dict] = {}
        self._quizzes: Dict[str, Dict] = {}
        self._questions: Dict[str, Dict] = {}

    async def initialize(self):
        """Initialize database (clears any existing data)."""
        self._users.clear()
        self._subjects.clear()
        self._files.clear()
        self._quizzes.clear()
        self._questions.clear()

    async def close(self):
        """Close database connection (no-op for in-memory)."""
        pass

    async def ping(self) -> bool:
        return True

    @staticmethod
    def _insert(table: Dict[str, Dict], data: Dict) -> Dict:
        record_id = data.get("id")
        if not record_id:
            raise ValueError("Record must have an 'id' field")
        table[record_id] = copy.deepcopy(data)
        return copy.deepcopy(table[record_id])

    @staticmethod
    def _get(table: Dict[str, Dict], record_id: str) -> Optional[Dict]:
        record = table.get(record_id)
        return copy.deepcopy(record) if record else None

    # User operations
    async def create_user(self, user_data: Dict) -> Dict:
        return self._insert(self._users, user_data)

    async def get_user(self, user_id: str) -> Optional[Dict]:
        return self._get(self._users, user_id)

    async def find_user(self, username: Optional[str] = None, email: Optional[str] = None) -> Optional[Dict]:
        for user in self._users.values():
            if (username and user.get("username") == username) or (email and user.get("email") == email):
                return copy.deepcopy(user)
        return None

    # Subject operations
    async def create_subject(self, subject_data: Dict) -> Dict:
        return self._insert(self._subjects, subject_data)

    async def get_subject(self, subject_id: str) -> Optional[Dict]:
        return self._get(self._subjects, subject_id)

    async def list_subjects(self, user_id: str) -> List[Dict]:
        subjects = [s for s in self._subjects.values() if s.get("user_id") == user_id]
        subjects.sort(key=lambda s: s.get("created_at", ""))
        return copy.deepcopy(subjects)

    async def add_subject_child(self, subject_id: str, file_id: str) -> bool:
        subject = self._subjects.get(subject_id)
        if subject is None:
            return False
        if file_id not in subject["children"]:
            subject["children"].append(file_id)
        return True

    async def remove_subject_child(self, subject_id: str, file_id: str) -> bool:
        subject = self._subjects.get(subject_id)
        if subject is None or file_id not in subject["children"]:
            return False
        subject["children"].remove(file_id)
        return True

    # File operations
    async def create_file(self, file_data: Dict) -> Dict:
        return self._insert(self._files, file_data)

    async def get_file(self, file_id: str) -> Optional[Dict]:
        return self._get(self._files, file_id)

    def _matching_files(self, subject_id: str, status: Optional[str]) -> List[Dict]:
        return [
            f for f in self._files.values()
            if f.get("subject_id") == subject_id and (status is None or f.get("status") == status)
        ]

    async def list_files(
        self,
        subject_id: str,
        status: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict]:
        files = self._matching_files(subject_id, status)
        files.sort(key=lambda f: f.get("uploaded_at", ""), reverse=True)
        end = skip + limit if limit is not None else None
        return copy.deepcopy(files[skip:end])

    async def count_files(self, subject_id: str, status: Optional[str] = None) -> int:
        return len(self._matching_files(subject_id, status))

    async def update_file(
        self,
        file_id: str,
        updates: Optional[Dict] = None,
        increments: Optional[Dict[str, int]] = None,
    ) -> Optional[Dict]:
        record = self._files.get(file_id)
        if record is None:
            return None
        for key, value in (updates or {}).items():
            record[key] = copy.deepcopy(value)
        for key, amount in (increments or {}).items():
            record[key] = record.get(key, 0) + amount
        return copy.deepcopy(record)

    # Quiz operations
    async def create_quiz(self, quiz_data: Dict, questions: List[Dict]) -> Dict:
        quiz = self._insert(self._quizzes, quiz_data)
        for question in questions:
            self._insert(self._questions, question)
        return quiz

    async def get_quiz(self, quiz_id: str) -> Optional[Dict]:
        return self._get(self._quizzes, quiz_id)

    async def list_quizzes(self, file_id: str) -> List[Dict]:
        quizzes = [q for q in self._quizzes.values() if q.get("file_id") == file_id]
        quizzes.sort(key=lambda q: q.get("created_at", ""))
        return copy.deepcopy(quizzes)

    async def update_quiz(self, quiz_id: str, updates: Dict) -> Optional[Dict]:
        record = self._quizzes.get(quiz_id)
        if record is None:
            return None
        record.update(copy.deepcopy(updates))
        return copy.deepcopy(record)

    async def list_questions(self, quiz_id: str) -> List[Dict]:
        return copy.deepcopy([q for q in self._questions.values() if q.get("quiz_id") == quiz_id])

    async def delete_quizzes_for_file(self, file_id: str) -> int:
        quiz_ids = [qid for qid, q in self._quizzes.items() if q.get("file_id") == file_id]
        for quiz_id in quiz_ids:
            del self._quizzes[quiz_id]
        for question_id in [k for k, q in self._questions.items() if q.get("quiz_id") in quiz_ids]:
            del self._questions[question_id]
        return len(quiz_ids)
