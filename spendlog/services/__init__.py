"""Services package."""

from spendlog.services.storage import (
    DuplicateKeyError,
    InvalidRecordError,
    ExpenseStorageInterface,
    InitializationError,
    InMemoryExpenseStorage,
    NotInitializedError,
    ReadError,
    SQLiteExpenseStorage,
    StorageError,
    WriteError,
)

__all__ = [
    "DuplicateKeyError",
    "InvalidRecordError",
    "ExpenseStorageInterface",
    "InitializationError",
    "InMemoryExpenseStorage",
    "NotInitializedError",
    "ReadError",
    "SQLiteExpenseStorage",
    "StorageError",
    "WriteError",
]
