"""
Storage Services Package

Provides the abstract key-value interface, its implementations
(in-memory, local JSON files, Google Sheets) and the typed
LedgerStore that serializes models into it.
"""

from finledger.services.storage.interface import (
    ConnectionError,
    KeyValueStorageInterface,
    NotFoundError,
    StorageError,
)
from finledger.services.storage.ledger_store import (
    ACCOUNTS,
    AUDIT_LOG_KEY,
    CURRENT_USER_KEY,
    EXPENSES,
    FAMILY_GOALS_KEY,
    FAMILY_MEMBERS_KEY,
    FAMILY_TASKS_KEY,
    GOALS,
    INCOMES,
    NOTIFICATIONS,
    USERS_KEY,
    LedgerStore,
    scoped_key,
)
from finledger.services.storage.memory import InMemoryStorage
from finledger.services.storage.local_file import JsonFileStorage
from finledger.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsStorage,
)

__all__ = [
    # Interface
    "KeyValueStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    # Typed store
    "LedgerStore",
    "scoped_key",
    "ACCOUNTS",
    "AUDIT_LOG_KEY",
    "CURRENT_USER_KEY",
    "EXPENSES",
    "FAMILY_GOALS_KEY",
    "FAMILY_MEMBERS_KEY",
    "FAMILY_TASKS_KEY",
    "GOALS",
    "INCOMES",
    "NOTIFICATIONS",
    "USERS_KEY",
]
