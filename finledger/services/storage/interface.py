"""
Abstract Storage Interface

DESIGN DECISION: The ledger only ever needs a flat string-to-string
key-value store, the same shape as browser local storage. Keeping the
interface this small means:
1. Local JSON files, Google Sheets or a database can back it
2. Tests use a dict-backed store with no I/O
3. Serialization lives in one place (the LedgerStore), not per backend

Implementations never interpret values. They store and return the JSON
text they are given.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for key-value persistence.

    Any storage implementation (memory, files, Google Sheets, ...)
    must implement these methods. All operations are synchronous and
    complete before returning.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the raw value stored under a key.

        Returns:
            The stored text, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List every stored key."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
