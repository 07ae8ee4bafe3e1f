"""
Database Factory for creating database adapters.
Implements Factory Pattern for plug-and-play database support.
"""
from typing import Optional

from .base import DatabaseInterface
from .memory_adapter import MemoryAdapter
from .mongo_adapter import MongoAdapter
from ...core.config import DATABASE_TYPE, MONGO_DB_NAME, MONGO_URL
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class DatabaseFactory:
    """
    Factory for creating database adapters.
    Supports MongoDB (motor) and Memory (in-memory) backends.
    """

    @staticmethod
    def create(database_type: Optional[str] = None, **kwargs) -> DatabaseInterface:
        """
        Create a database adapter instance.

        Args:
            database_type: 'mongo', 'memory', or None to use DATABASE_TYPE
            **kwargs: url / db_name overrides for MongoDB

        Examples:
            db = DatabaseFactory.create('memory')
            db = DatabaseFactory.create('mongo', url='mongodb://db:27017', db_name='studyhub')
        """
        database_type = (database_type or DATABASE_TYPE).lower()

        if database_type == "memory":
            return MemoryAdapter()
        elif database_type == "mongo":
            return MongoAdapter(
                url=kwargs.get("url") or MONGO_URL,
                db_name=kwargs.get("db_name") or MONGO_DB_NAME,
            )
        else:
            raise ValueError(
                f"Unsupported database type: {database_type}. "
                f"Supported types: 'mongo', 'memory'"
            )

    @staticmethod
    async def create_and_initialize(database_type: Optional[str] = None, **kwargs) -> DatabaseInterface:
        """Create database adapter and initialize it."""
        db = DatabaseFactory.create(database_type, **kwargs)
        await db.initialize()
        logger.info(f"Database initialized: {type(db).__name__}")
        return db
