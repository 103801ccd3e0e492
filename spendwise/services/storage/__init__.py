"""
Storage Services Package

Provides the key/value storage port, its backends, and the typed
PersistentStore adapter the repository uses.
"""

from spendwise.services.storage.interface import (
    KeyValueStore,
    NotFoundError,
    StorageError,
    StorageUnavailableError,
)
from spendwise.services.storage.json_file import JsonFileKeyValueStore
from spendwise.services.storage.memory import InMemoryKeyValueStore
from spendwise.services.storage.persistent_store import PersistentStore

__all__ = [
    # Interfaces
    "KeyValueStore",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StorageUnavailableError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "PersistentStore",
]
