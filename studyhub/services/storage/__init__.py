"""
File storage abstraction layer for plug-and-play storage support.
Supports local filesystem and S3 storage backends.
"""
from .base import FileStorageInterface
from .local_storage import LocalFileStorage
from .factory import FileStorageFactory

__all__ = [
    "FileStorageInterface",
    "LocalFileStorage",
    "FileStorageFactory",
]
