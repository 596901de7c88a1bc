"""
File-backed Key-Value Storage

Each key is stored in its own file inside a data directory, so the
transaction list, the catalogs and the preferences can be inspected and
backed up independently.

TRADEOFFS:
- Every write rewrites the whole value (fine for personal data volumes)
- No cross-key transactions (the tracker never needs them)

Writes go to a temporary file first and are moved into place with
os.replace, so a crash mid-write leaves the previous value intact.
File I/O runs in a worker thread to keep the event loop responsive.
"""

import asyncio
import os
import re
from pathlib import Path
from typing import Optional

import structlog

from finance_tracker.services.storage.interface import (
    ConnectionError,
    KeyValueStoreInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def key_to_filename(key: str) -> str:
    """Map a storage key such as "@transactions" to a safe file name."""
    if not key:
        raise StorageError("Storage key must not be empty")
    return _UNSAFE_CHARS.sub("_", key) + ".value"


class FileKeyValueStore(KeyValueStoreInterface):
    """
    Key-value store persisting each key as a UTF-8 file.

    The directory is created on first write.
    """

    def __init__(self, data_dir: str | Path):
        self._data_dir = Path(data_dir).expanduser()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        return self._data_dir / key_to_filename(key)

    def _read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {key}: {e}")

    def _write(self, key: str, value: str) -> None:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConnectionError(f"Cannot create data directory {self._data_dir}: {e}")

        path = self.path_for(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, path)
        except OSError as e:
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                logger.warning("temp_file_cleanup_failed", path=str(tmp))
            raise StorageError(f"Failed to write {key}: {e}")

    def _remove(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {key}: {e}")

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)
