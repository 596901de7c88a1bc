"""Shared fixtures for the Finance Tracker tests."""

from datetime import datetime
from typing import Optional

import pytest

from finance_tracker.config import Settings, StorageSettings, TrackerSettings
from finance_tracker.services.storage import (
    InMemoryKeyValueStore,
    KeyValueStoreInterface,
    StorageError,
)
from finance_tracker.store import IdAllocator


NOW = datetime(2024, 1, 1, 0, 0, 0)


class FailingKeyValueStore(KeyValueStoreInterface):
    """Storage double whose reads and/or writes always fail."""

    def __init__(
        self,
        initial: Optional[dict[str, str]] = None,
        fail_reads: bool = False,
        fail_writes: bool = True,
    ):
        self._data = dict(initial or {})
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.write_attempts = 0

    async def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageError(f"read failed for {key}")
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.write_attempts += 1
        if self.fail_writes:
            raise StorageError(f"write failed for {key}")
        self._data[key] = value

    async def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StorageError(f"remove failed for {key}")
        self._data.pop(key, None)


class MemorySettings(Settings):
    """Settings pinned to the in-memory backend with fast password hashing."""

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings(backend="memory")

    @property
    def tracker(self) -> TrackerSettings:
        return TrackerSettings(password_hash_rounds=4)


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def failing_storage() -> FailingKeyValueStore:
    return FailingKeyValueStore()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def ids() -> IdAllocator:
    return IdAllocator(clock=lambda: 1_700_000_000.0)


@pytest.fixture
def settings() -> Settings:
    return MemorySettings()
