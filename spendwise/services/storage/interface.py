"""
Abstract Storage Interface

DESIGN DECISION: The repository never talks to a storage backend
directly. It goes through a minimal key/value port modelled on the
browser's localStorage. This allows us to:
1. Keep expenses in a local JSON file for the desktop app
2. Use in-memory storage for testing
3. Swap in another backend without touching business logic

Values are opaque strings; (de)serialization lives in PersistentStore.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract key/value storage port.

    Implementations raise StorageError (or a subclass) when the
    backend itself fails. A missing key is not an error.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the raw value stored under a key.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageUnavailableError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a raw value under a key, replacing any previous value.

        Raises:
            StorageUnavailableError: If the backend cannot be written
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageUnavailableError(StorageError):
    """Storage backend could not be read or written."""
    pass
