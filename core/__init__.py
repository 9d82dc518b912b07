"""
Core storage layer for the trade tracker.

The ledger talks to storage through a two-method key-value interface,
so the backend can be swapped without touching the journal.
"""

from .storage import KeyValueStore, DiskStore, MemoryStore, StorageError, create_store

__all__ = [
    "KeyValueStore",
    "DiskStore",
    "MemoryStore",
    "StorageError",
    "create_store",
]
