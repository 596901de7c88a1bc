"""
Abstract Storage Interface

DESIGN DECISION: Everything the tracker persists goes through a plain
string-keyed key-value store. Values are opaque strings (usually JSON
blobs). This allows us to:
1. Use in-memory storage for testing
2. Keep the data layout compatible with the mobile app's local storage
3. Swap the file backend for something else without touching the core

The interface is intentionally tiny: get, set, remove.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for asynchronous key-value storage.

    Any storage implementation must implement these methods and report
    I/O failures as StorageError.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key, e.g. "@transactions"

        Returns:
            The stored string, or None if nothing is stored

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Remove a key. Removing a missing key is not an error.

        Raises:
            StorageError: If the removal fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
