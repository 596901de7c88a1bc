"""
Storage Services Package

Provides the abstract key-value interface and its concrete backends.
"""

from finance_tracker.services.storage.interface import (
    ConnectionError,
    KeyValueStoreInterface,
    StorageError,
)
from finance_tracker.services.storage.file_store import (
    FileKeyValueStore,
    key_to_filename,
)
from finance_tracker.services.storage.memory import InMemoryKeyValueStore

__all__ = [
    # Interfaces
    "KeyValueStoreInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "FileKeyValueStore",
    "key_to_filename",
]
