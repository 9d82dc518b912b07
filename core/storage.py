"""
Key-value persistence for the trade ledger.

The ledger only needs two operations from its storage: read a string value
by key and write one back. Anything that provides them can be plugged into
the LedgerStore, which keeps tests free of disk access.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional
import logging

from diskcache import Cache

from config import paths, storage_config

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a value could not be written to storage."""
    pass


class KeyValueStore(ABC):
    """
    Minimal string key-value store.

    Reads fail soft and return None. Writes raise StorageError so callers
    can warn the user that the change was not saved.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the stored value, or None if absent or unreadable."""
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        pass


class MemoryStore(KeyValueStore):
    """In-process store. Nothing survives a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        self.data[key] = value


class DiskStore(KeyValueStore):
    """
    Durable store on top of diskcache.

    Why diskcache?
    - No server to run
    - Persistent across restarts
    - Writes are atomic per key
    """

    def __init__(self, directory: Optional[Path] = None):
        self.directory = directory or paths.store_dir
        self.cache = Cache(directory=str(self.directory))
        logger.info(f"Ledger storage at: {self.directory}")

    def read(self, key: str) -> Optional[str]:
        try:
            value = self.cache.get(key)
        except Exception as e:
            logger.error(f"Storage read error for '{key}': {e}")
            return None

        if value is None:
            logger.debug(f"Storage miss: {key}")
            return None

        if not isinstance(value, str):
            logger.warning(f"Ignoring non-text value stored under '{key}'")
            return None

        return value

    def write(self, key: str, value: str) -> None:
        try:
            self.cache.set(key, value)
        except Exception as e:
            logger.error(f"Storage write error for '{key}': {e}")
            raise StorageError(f"Could not save '{key}': {e}") from e

        logger.debug(f"Stored {len(value)} chars under '{key}'")

    def close(self) -> None:
        self.cache.close()


def create_store(backend: Optional[str] = None) -> KeyValueStore:
    """Build the store selected in configuration."""
    backend = (backend or storage_config.backend).lower()

    if backend == "memory":
        return MemoryStore()
    if backend == "disk":
        return DiskStore()

    raise ValueError(f"Unknown storage backend: {backend}")
