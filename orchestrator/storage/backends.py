"""
Module 03 - Keyed Blob Stores
File: backends.py

Purpose: Minimal keyed durable-store interface (get/set/delete by key) and
the backends the distribution store runs on.

Any backing store that can hold a string per key satisfies the contract.
Writes replace the whole value atomically; there is no partial update.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from core.config.runtime import StorageConfig


logger = logging.getLogger(__name__)

# Keys end up as file names, so keep them to a safe alphabet
_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")


class StorageError(Exception):
    """Error during store IO operations."""
    pass


class InvalidKeyError(StorageError):
    """Key contains characters the store cannot represent."""
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Invalid storage key: {key!r}")


def validate_key(key: str) -> str:
    """Return key unchanged if it is usable by every backend."""
    if not key or not _KEY_PATTERN.match(key) or key in (".", ".."):
        raise InvalidKeyError(key)
    return key


class KeyValueStore(ABC):
    """
    Abstract keyed blob store.

    Implementations must make set() atomic: a concurrent or interrupted
    write leaves either the old value or the new value, never a mix.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value for key, or None when absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key. Returns True if something was removed."""
        ...

    def contains(self, key: str) -> bool:
        return self.get(key) is not None


class MemoryStore(KeyValueStore):
    """In-process store. Contents are lost when the process exits."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(validate_key(key))

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[validate_key(key)] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(validate_key(key), None) is not None

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


class FileStore(KeyValueStore):
    """
    One JSON file per key under a directory.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace(), which is atomic on POSIX and Windows.
    """

    SUFFIX = ".json"

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{validate_key(key)}{self.SUFFIX}"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path: Path | None = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.directory,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(value)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None:
                try:
                    tmp_path.unlink(missing_ok=True)
                except OSError:
                    logger.warning("Could not remove temporary file %s", tmp_path)
            raise StorageError(f"Failed to write {path}: {e}") from e
        logger.debug("Wrote %d bytes to %s", len(value), path)

    def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e

    def keys(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            p.name[: -len(self.SUFFIX)]
            for p in self.directory.glob(f"*{self.SUFFIX}")
            if not p.name.startswith(".")
        )


def create_store(config: StorageConfig) -> KeyValueStore:
    """Instantiate the backend named by config.backend."""
    backend = config.backend.lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "file":
        return FileStore(config.directory)
    raise ValueError(f"Unknown storage backend: {config.backend!r}")
