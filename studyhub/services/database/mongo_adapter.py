"""
MongoDB adapter implementing DatabaseInterface (motor, asyncio driver).

Records keep their own string ``id``; Mongo's ``_id`` is never returned.
"""
from typing import Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from .base import DatabaseInterface
from ...core.logging_config import get_logger

logger = get_logger(__name__)

NO_ID = {"_id": 0}


class MongoAdapter(DatabaseInterface):
    """One collection per entity: users, subjects, files, quizzes, questions."""

    def __init__(self, url: str, db_name: str):
        self._url = url
        self._db_name = db_name
        self._client: Optional[AsyncIOMotorClient] = None
        self._db = None

    @property
    def db(self):
        if self._db is None:
            raise RuntimeError("MongoAdapter is not initialized")
        return self._db

    async def initialize(self):
        """Connect and create indexes (idempotent)."""
        self._client = AsyncIOMotorClient(self._url)
        self._db = self._client[self._db_name]

        await self.db.users.create_index("id", unique=True)
        await self.db.users.create_index("username", unique=True)
        await self.db.users.create_index("email", unique=True)
        await self.db.subjects.create_index("id", unique=True)
        await self.db.subjects.create_index("user_id")
        await self.db.files.create_index("id", unique=True)
        await self.db.files.create_index([("subject_id", ASCENDING), ("uploaded_at", DESCENDING)])
        await self.db.quizzes.create_index("id", unique=True)
        await self.db.quizzes.create_index("file_id")
        await self.db.questions.create_index("id", unique=True)
        await self.db.questions.create_index("quiz_id")
        logger.info(f"MongoDB ready: {self._db_name}")

    async def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None
            self._db = None

    async def ping(self) -> bool:
        await self.db.command("ping")
        return True

    async def _insert(self, collection, data: Dict) -> Dict:
        if not data.get("id"):
            raise ValueError("Record must have an 'id' field")
        await collection.insert_one(dict(data))
        return await collection.find_one({"id": data["id"]}, NO_ID)

    # User operations
    async def create_user(self, user_data: Dict) -> Dict:
        return await self._insert(self.db.users, user_data)

    async def get_user(self, user_id: str) -> Optional[Dict]:
        return await self.db.users.find_one({"id": user_id}, NO_ID)

    async def find_user(self, username: Optional[str] = None, email: Optional[str] = None) -> Optional[Dict]:
        clauses = []
        if username:
            clauses.append({"username": username})
        if email:
            clauses.append({"email": email})
        if not clauses:
            return None
        return await self.db.users.find_one({"$or": clauses}, NO_ID)

    # Subject operations
    async def create_subject(self, subject_data: Dict) -> Dict:
        return await self._insert(self.db.subjects, subject_data)

    async def get_subject(self, subject_id: str) -> Optional[Dict]:
        return await self.db.subjects.find_one({"id": subject_id}, NO_ID)

    async def list_subjects(self, user_id: str) -> List[Dict]:
        cursor = self.db.subjects.find({"user_id": user_id}, NO_ID).sort("created_at", ASCENDING)
        return await cursor.to_list(length=None)

    async def add_subject_child(self, subject_id: str, file_id: str) -> bool:
        result = await self.db.subjects.update_one({"id": subject_id}, {"$addToSet": {"children": file_id}})
        return result.matched_count > 0

    async def remove_subject_child(self, subject_id: str, file_id: str) -> bool:
        result = await self.db.subjects.update_one({"id": subject_id}, {"$pull": {"children": file_id}})
        return result.modified_count > 0

    # File operations
    async def create_file(self, file_data: Dict) -> Dict:
        return await self._insert(self.db.files, file_data)

    async def get_file(self, file_id: str) -> Optional[Dict]:
        return await self.db.files.find_one({"id": file_id}, NO_ID)

    @staticmethod
    def _file_filter(subject_id: str, status: Optional[str]) -> Dict:
        query = {"subject_id": subject_id}
        if status is not None:
            query["status"] = status
        return query

    async def list_files(
        self,
        subject_id: str,
        status: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict]:
        cursor = self.db.files.find(self._file_filter(subject_id, status), NO_ID)
        cursor = cursor.sort("uploaded_at", DESCENDING).skip(skip)
        if limit is not None:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=None)

    async def count_files(self, subject_id: str, status: Optional[str] = None) -> int:
        return await self.db.files.count_documents(self._file_filter(subject_id, status))

    async def update_file(
        self,
        file_id: str,
        updates: Optional[Dict] = None,
        increments: Optional[Dict[str, int]] = None,
    ) -> Optional[Dict]:
        operation = {}
        if updates:
            operation["$set"] = updates
        if increments:
            operation["$inc"] = increments
        if not operation:
            return await self.get_file(file_id)
        return await self.db.files.find_one_and_update(
            {"id": file_id},
            operation,
            projection=NO_ID,
            return_document=ReturnDocument.AFTER,
        )

    # Quiz operations
    async def create_quiz(self, quiz_data: Dict, questions: List[Dict]) -> Dict:
        quiz = await self._insert(self.db.quizzes, quiz_data)
        if questions:
            await self.db.questions.insert_many([dict(q) for q in questions])
        return quiz

    async def get_quiz(self, quiz_id: str) -> Optional[Dict]:
        return await self.db.quizzes.find_one({"id": quiz_id}, NO_ID)

    async def list_quizzes(self, file_id: str) -> List[Dict]:
        cursor = self.db.quizzes.find({"file_id": file_id}, NO_ID).sort("created_at", ASCENDING)
        return await cursor.to_list(length=None)

    async def update_quiz(self, quiz_id: str, updates: Dict) -> Optional[Dict]:
        return await self.db.quizzes.find_one_and_update(
            {"id": quiz_id},
            {"$set": updates},
            projection=NO_ID,
            return_document=ReturnDocument.AFTER,
        )

    async def list_questions(self, quiz_id: str) -> List[Dict]:
        return await self.db.questions.find({"quiz_id": quiz_id}, NO_ID).to_list(length=None)

    async def delete_quizzes_for_file(self, file_id: str) -> int:
        quiz_ids = [q["id"] async for q in self.db.quizzes.find({"file_id": file_id}, {"_id": 0, "id": 1})]
        if not quiz_ids:
            return 0
        await self.db.questions.delete_many({"quiz_id": {"$in": quiz_ids}})
        result = await self.db.quizzes.delete_many({"id": {"$in": quiz_ids}})
        return result.deleted_count
