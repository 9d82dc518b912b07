"""Test doubles and time helpers."""

from datetime import datetime

from core.storage import MemoryStore, StorageError


# 2024-01-15T10:00:00Z
BASE_TS = 1705312800000


def local_ms(*args) -> int:
    """Epoch milliseconds for a local wall-clock time."""
    return int(datetime(*args).timestamp() * 1000)


class FakeClock:
    """Settable millisecond clock."""

    def __init__(self, now: int = BASE_TS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 60_000):
        self.now += ms


class FailingStore(MemoryStore):
    """Reads work, every write fails."""

    def write(self, key: str, value: str) -> None:
        raise StorageError("quota exceeded")
