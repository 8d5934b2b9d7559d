"""
Storage Services Package

Provides the key-value storage interface, its backends, and the
PersistenceAdapter that saves and restores the expense store.

The Google Sheets backend is imported lazily by the orchestrator so that
sessions without Google credentials never need gspread at import time.
"""

from src.services.storage.interface import (
    ConnectionError,
    KeyValueStore,
    PersistenceError,
    StorageError,
)
from src.services.storage.memory import InMemoryKeyValueStore
from src.services.storage.persistence import (
    BUDGET_KEY,
    EXPENSES_KEY,
    PersistenceAdapter,
    deserialize_expenses,
    serialize_expenses,
)

__all__ = [
    # Interfaces
    "KeyValueStore",
    # Exceptions
    "ConnectionError",
    "PersistenceError",
    "StorageError",
    # Backends
    "InMemoryKeyValueStore",
    # Adapter
    "BUDGET_KEY",
    "EXPENSES_KEY",
    "PersistenceAdapter",
    "deserialize_expenses",
    "serialize_expenses",
]
