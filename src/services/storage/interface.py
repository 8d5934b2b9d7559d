"""
Abstract Storage Interface

DESIGN DECISION: Persistence is a tiny key-value capability, nothing more.
This allows us to:
1. Run with no backend at all (pure in-memory session)
2. Use in-memory storage for testing
3. Back it with Google Sheets (or anything else with get/set)

The interface is intentionally minimal - the dashboard only ever stores
two keys: the expense list and the budget limit.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for the key-value backend.

    Values are opaque strings; serialization lives in the
    PersistenceAdapter.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: The storage key

        Returns:
            The stored string, or None if the key was never written

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Args:
            key: The storage key
            value: The string to store

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceError(StorageError):
    """Stored state could not be read, decoded or written."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
