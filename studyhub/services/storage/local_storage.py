"""
Local filesystem storage adapter implementing FileStorageInterface.
Stores files on the local filesystem - perfect for development and demos.

Files are served back by the API at ``/files/raw/{key}``, which is also the
source URL handed to the worker.
"""
import asyncio
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from .base import FileStorageInterface
from ...core.config import PUBLIC_BASE_URL


class LocalFileStorage(FileStorageInterface):
    """Local filesystem storage adapter."""

    def __init__(self, base_dir: Path, public_base_url: str = PUBLIC_BASE_URL):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    async def initialize(self):
        """Initialize storage - ensure base directory exists."""
        self.base_dir.mkdir(parents=True, exist_ok=True)

    async def close(self):
        pass

    def resolve_path(self, key: str) -> Path:
        """
        Full filesystem path for a storage key.

        Raises:
            FileNotFoundError: If the key escapes the storage directory
        """
        normalized = Path(key).as_posix().lstrip("/")
        full_path = (self.base_dir / normalized).resolve()
        if not full_path.is_relative_to(self.base_dir.resolve()):
            raise FileNotFoundError(f"File not found: {key}")
        return full_path

    async def save_bytes(self, data: bytes, key: str, content_type: Optional[str] = None) -> str:
        full_path = self.resolve_path(key)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, full_path.write_bytes, data)
        return key

    async def get_file(self, key: str) -> bytes:
        full_path = self.resolve_path(key)
        if not full_path.exists():
            raise FileNotFoundError(f"File not found: {key}")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, full_path.read_bytes)

    async def delete_file(self, key: str) -> bool:
        full_path = self.resolve_path(key)
        if not full_path.exists():
            return False

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, full_path.unlink)
        return True

    async def file_exists(self, key: str) -> bool:
        return self.resolve_path(key).exists()

    async def get_file_url(self, key: str, expires_in: Optional[int] = None) -> str:
        return f"{self.public_base_url}/files/raw/{quote(key)}"
