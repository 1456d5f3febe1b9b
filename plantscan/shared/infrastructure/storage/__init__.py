"""
Key-value persistence adapters.

All backends share the KeyValueStore contract: JSON values under string keys,
soft reads, StorageError on failed writes.
"""

from .base import KeyValueStore
from .file_store import FileKeyValueStore
from .memory_store import MemoryKeyValueStore
from .redis_store import RedisKeyValueStore

__all__ = [
    "KeyValueStore",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
]
