"""
Abstract base class for file storage adapters.
All storage implementations must inherit from this class.
"""
from abc import ABC, abstractmethod
from typing import Optional

from ...core.logging_config import get_logger

logger = get_logger(__name__)


class FileStorageInterface(ABC):
    """
    Abstract interface for file storage operations.
    This allows plug-and-play storage support (local, S3) without changing business logic.
    """

    @abstractmethod
    async def save_bytes(self, data: bytes, key: str, content_type: Optional[str] = None) -> str:
        """
        Store an uploaded file.

        Args:
            data: File contents
            key: Storage key (relative path or S3 key)
            content_type: MIME type recorded with the object where supported

        Returns:
            Storage key where the file was saved
        """
        pass

    @abstractmethod
    async def get_file(self, key: str) -> bytes:
        """Retrieve a file. Raises FileNotFoundError if missing."""
        pass

    @abstractmethod
    async def delete_file(self, key: str) -> bool:
        """Delete a file. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def file_exists(self, key: str) -> bool:
        pass

    @abstractmethod
    async def get_file_url(self, key: str, expires_in: Optional[int] = None) -> str:
        """
        Absolute URL the worker can download the file from.

        Args:
            key: Storage key of the file
            expires_in: Optional expiration time in seconds (for signed URLs)
        """
        pass

    @abstractmethod
    async def initialize(self):
        pass

    @abstractmethod
    async def close(self):
        pass
