"""
Storage Services Package

Provides the abstract storage interface and its concrete implementations.
SQLite is the durable backend; the in-memory backend keeps nothing
across restarts and is meant for tests.
"""

from spendlog.services.storage.interface import (
    SCHEMA_VERSION,
    DuplicateKeyError,
    InvalidRecordError,
    ExpenseStorageInterface,
    InitializationError,
    NotInitializedError,
    ReadError,
    StorageError,
    WriteError,
)
from spendlog.services.storage.memory import InMemoryExpenseStorage
from spendlog.services.storage.sqlite import SQLiteExpenseStorage

__all__ = [
    # Interface
    "SCHEMA_VERSION",
    "ExpenseStorageInterface",
    # Exceptions
    "DuplicateKeyError",
    "InvalidRecordError",
    "InitializationError",
    "NotInitializedError",
    "ReadError",
    "StorageError",
    "WriteError",
    # Implementations
    "InMemoryExpenseStorage",
    "SQLiteExpenseStorage",
]
