"""
In-Memory Storage Implementation

Keeps all three collections in plain dicts. Nothing survives the
process, so this backend is meant for tests and throwaway sessions.

The id counter only ever grows, so ids are never reused after a
delete, matching the SQLite backend.
"""

from typing import Any, Optional

from spendlog.models.expense import DEFAULT_CATEGORIES, DEFAULT_SETTINGS, Category, Expense
from spendlog.services.storage.interface import (
    Clock,
    DuplicateKeyError,
    ExpenseStorageInterface,
    normalize_expense_input,
)


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """Dict-backed implementation of expense storage."""

    backend_name = "memory"

    def __init__(self, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._expenses: dict[int, Expense] = {}
        self._categories: dict[str, Category] = {}
        self._settings: dict[str, str] = {}
        self._last_id = 0
        self._seeded = False

    async def initialize(self) -> None:
        if self._initialized:
            return
        # Seed once per instance; re-opening after close() keeps the data.
        if not self._seeded:
            for name in DEFAULT_CATEGORIES:
                self._categories[name] = Category(name=name, is_default=True)
            self._settings.update(DEFAULT_SETTINGS)
            self._seeded = True
        self._initialized = True

    async def close(self) -> None:
        self._initialized = False

    async def add_expense(
        self,
        amount: Any,
        note: Optional[str] = "",
        category: Optional[str] = None,
    ) -> int:
        self._require_initialized()
        amount, note, category = normalize_expense_input(amount, note, category)
        moment, timestamp = self._current_time()

        self._last_id += 1
        self._expenses[self._last_id] = Expense(
            id=self._last_id,
            amount=amount,
            note=note,
            category=category,
            date=moment,
            timestamp=timestamp,
        )
        return self._last_id

    async def get_all_expenses(self) -> list[Expense]:
        self._require_initialized()
        return list(self._expenses.values())

    async def delete_expense(self, expense_id: int) -> None:
        self._require_initialized()
        self._expenses.pop(int(expense_id), None)

    async def get_all_categories(self) -> list[str]:
        self._require_initialized()
        return list(self._categories)

    async def add_category(self, name: str) -> str:
        category = self._new_category(name)
        if category.name in self._categories:
            raise DuplicateKeyError(f"Category already exists: {category.name}")
        self._categories[category.name] = category
        return category.name

    async def delete_category(self, name: str) -> None:
        self._require_initialized()
        self._categories.pop(name, None)

    async def get_setting(self, key: str) -> Optional[str]:
        self._require_initialized()
        return self._settings.get(key)

    async def set_setting(self, key: str, value: str) -> None:
        self._require_initialized()
        self._settings[key] = str(value)
