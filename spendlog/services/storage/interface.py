"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the engine independent of the storage technology
2. Use in-memory storage for testing
3. Swap SQLite for another embedded store later

The interface is intentionally small - three collections (expenses,
categories, settings) and exactly the operations the engine needs.
Every operation is async and either returns its result or raises one
of the StorageError subclasses below. Nothing is retried here.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError

from spendlog.models.expense import FALLBACK_CATEGORY, Category, Expense, coerce_amount


SCHEMA_VERSION = 1

Clock = Callable[[], datetime]


def normalize_expense_input(
    amount: Any,
    note: Optional[str],
    category: Optional[str],
) -> tuple[float, str, str]:
    """Apply the add_expense defaults shared by every backend."""
    return (
        coerce_amount(amount),
        note or "",
        category or FALLBACK_CATEGORY,
    )


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation (SQLite, in-memory, etc.)
    must implement these methods.
    """

    backend_name = "abstract"

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or datetime.now
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise NotInitializedError(
                f"{type(self).__name__} used before initialize()"
            )

    def _new_category(self, name: str) -> Category:
        """Validate a user category name for an initialized store."""
        self._require_initialized()
        try:
            return Category(name=name)
        except ValidationError as e:
            raise InvalidRecordError(f"Invalid category name: {name!r}") from e

    def _current_time(self) -> tuple[datetime, int]:
        """
        Read the clock once and return (UTC datetime, epoch milliseconds).

        Naive clock values are interpreted as local time. The datetime is
        truncated to millisecond precision so both fields agree.
        """
        moment = self._clock().astimezone(timezone.utc)
        moment = moment.replace(microsecond=(moment.microsecond // 1000) * 1000)
        return moment, round(moment.timestamp() * 1000)

    @abstractmethod
    async def initialize(self) -> None:
        """
        Open (creating if absent) the underlying storage.

        Seeds default categories and settings on first creation only.
        Calling it on an already-initialized instance does nothing.

        Raises:
            InitializationError: If the storage cannot be opened or upgraded
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release underlying resources and return to the uninitialized state."""
        pass

    @abstractmethod
    async def add_expense(
        self,
        amount: Any,
        note: Optional[str] = "",
        category: Optional[str] = None,
    ) -> int:
        """
        Store a new expense.

        Args:
            amount: Raw amount; coerced to float (NaN if unparseable)
            note: Free text, None becomes ""
            category: Category name, None/empty becomes "Other"

        Returns:
            The store-assigned expense id

        Raises:
            WriteError: If the write fails
        """
        pass

    @abstractmethod
    async def get_all_expenses(self) -> list[Expense]:
        """
        Return every expense, unfiltered, in no particular order.

        Raises:
            ReadError: If the read fails
        """
        pass

    @abstractmethod
    async def delete_expense(self, expense_id: int) -> None:
        """
        Delete an expense by id. Unknown ids are a silent no-op.

        Raises:
            WriteError: If the delete fails
        """
        pass

    @abstractmethod
    async def get_all_categories(self) -> list[str]:
        """
        Return every category name.

        Raises:
            ReadError: If the read fails
        """
        pass

    @abstractmethod
    async def add_category(self, name: str) -> str:
        """
        Add a user category (is_default=False).

        Returns:
            The stored category name

        Raises:
            DuplicateKeyError: If a category with this name exists
            WriteError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_category(self, name: str) -> None:
        """
        Delete a category by name. Unknown names are a silent no-op.

        Expenses referencing the category are left as they are.
        """
        pass

    @abstractmethod
    async def get_setting(self, key: str) -> Optional[str]:
        """Return the stored value for key, or None."""
        pass

    @abstractmethod
    async def set_setting(self, key: str, value: str) -> None:
        """Create or replace the setting for key."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class InitializationError(StorageError):
    """The store could not be opened, created or upgraded."""
    pass


class NotInitializedError(StorageError):
    """An operation was attempted before initialize()."""
    pass


class ReadError(StorageError):
    """The backend failed while reading."""
    pass


class WriteError(StorageError):
    """The backend failed while writing."""
    pass


class DuplicateKeyError(WriteError):
    """Attempted to insert a record whose key already exists."""
    pass


class InvalidRecordError(WriteError):
    """A record was rejected before reaching the backend."""
    pass
