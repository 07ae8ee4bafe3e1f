"""
Database abstraction layer for plug-and-play database support.
Supports MongoDB and Memory (in-memory) backends.
"""
from .base import DatabaseInterface
from .memory_adapter import MemoryAdapter
from .factory import DatabaseFactory

__all__ = [
    "DatabaseInterface",
    "MemoryAdapter",
    "DatabaseFactory"
]
