"""
Expense Engine for Spendlog

This module ties together storage, window filtering, aggregation and
export, and is the only read/write path collaborators use:
1. Display components call query_expenses / stats_for / the series methods
2. Export collaborators call export_as_csv / export_as_json
3. Nobody outside this module touches storage directly

DESIGN DECISION: The engine holds no cached records. Every query re-reads
the store, so results are never stale. Failures are audited and re-raised
unchanged; the engine never retries and never compensates.

The engine is constructed explicitly (see create_expense_engine) and
passed to whoever needs it. There is no module-level instance.
"""

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Optional
from uuid import UUID

from spendlog.audit import AuditLogger, configure_logging, create_correlation_id
from spendlog.config import AppSettings, get_settings
from spendlog.models.expense import (
    Expense,
    ExpenseStats,
    MonthlySeries,
    TimeWindow,
    WeeklySeries,
)
from spendlog.queries import (
    calculate_stats,
    daily_trend,
    expenses_to_csv,
    expenses_to_json,
    in_window,
    weekday_totals,
)
from spendlog.services.storage import (
    ExpenseStorageInterface,
    InMemoryExpenseStorage,
    SQLiteExpenseStorage,
    StorageError,
)
from spendlog.services.storage.interface import Clock


THEME_SETTING_KEY = "theme"


class ExpenseEngine:
    """
    Facade over the expense store.

    Usage:
        async with create_expense_engine() as engine:
            await engine.record_expense(12.5, "Lunch", "Food")
            stats = await engine.stats_for("day")
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        app_settings: Optional[AppSettings] = None,
        clock: Optional[Clock] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._app_settings = app_settings or AppSettings()
        self._clock = clock or datetime.now

    @property
    def storage(self) -> ExpenseStorageInterface:
        return self._storage

    @contextmanager
    def _audited(
        self,
        operation: str,
        correlation_id: Optional[UUID] = None,
        **details: Any,
    ) -> Iterator[None]:
        """Audit a storage failure, then let it propagate unchanged."""
        try:
            yield
        except StorageError as e:
            self._audit.log_operation_failed(
                operation, e, details=details, correlation_id=correlation_id
            )
            raise

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> None:
        """Open the store. Must be called once before anything else."""
        with self._audited("initialize", backend=self._storage.backend_name):
            await self._storage.initialize()
        location = getattr(self._storage, "database_path", None)
        self._audit.log_store_initialized(
            backend=self._storage.backend_name,
            location=str(location) if location else None,
        )

    async def close(self) -> None:
        await self._storage.close()
        self._audit.log_store_closed(self._storage.backend_name)

    async def __aenter__(self) -> "ExpenseEngine":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    async def record_expense(
        self,
        amount: Any,
        note: Optional[str] = "",
        category: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Store a new expense and return its id.

        The success or failure event carries correlation_id; a fresh one
        is created when the caller does not pass one.
        """
        correlation_id = correlation_id or create_correlation_id()
        category = category or self._app_settings.default_category
        with self._audited("record_expense", correlation_id, category=category):
            expense_id = await self._storage.add_expense(amount, note, category)
        self._audit.log_expense_recorded(
            expense_id, amount, category, correlation_id=correlation_id
        )
        return expense_id

    async def query_expenses(
        self,
        window: "Optional[str | TimeWindow]" = TimeWindow.ALL,
    ) -> list[Expense]:
        """
        Expenses in the current window, most recent first.

        Ties on date are broken by timestamp, then by id.
        """
        window = TimeWindow.parse(window)
        with self._audited("query_expenses", window=window.value):
            expenses = await self._storage.get_all_expenses()

        now = self._clock()
        selected = [e for e in expenses if in_window(e.date, window, now=now)]
        selected.sort(key=lambda e: (e.date, e.timestamp, e.id), reverse=True)
        return selected

    async def remove_expense(
        self,
        expense_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Delete an expense. Removing an unknown id is not an error."""
        correlation_id = correlation_id or create_correlation_id()
        with self._audited("remove_expense", correlation_id, expense_id=expense_id):
            await self._storage.delete_expense(expense_id)
        self._audit.log_expense_removed(expense_id, correlation_id=correlation_id)

    async def stats_for(
        self,
        window: "Optional[str | TimeWindow]" = TimeWindow.ALL,
    ) -> ExpenseStats:
        return calculate_stats(await self.query_expenses(window))

    async def weekly_series(self) -> WeeklySeries:
        """Per-weekday totals for the current week."""
        expenses = await self.query_expenses(TimeWindow.WEEK)
        return weekday_totals(expenses, now=self._clock())

    async def monthly_series(self) -> MonthlySeries:
        """Per-day totals and category shares for the current month."""
        expenses = await self.query_expenses(TimeWindow.MONTH)
        return daily_trend(expenses, now=self._clock())

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    async def export_as_csv(self) -> str:
        expenses = await self.query_expenses(TimeWindow.ALL)
        content = expenses_to_csv(expenses, date_format=self._app_settings.csv_date_format)
        self._audit.log_export_generated("csv", len(expenses))
        return content

    async def export_as_json(self) -> str:
        expenses = await self.query_expenses(TimeWindow.ALL)
        content = expenses_to_json(expenses)
        self._audit.log_export_generated("json", len(expenses))
        return content

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[str]:
        with self._audited("list_categories"):
            return await self._storage.get_all_categories()

    async def add_category(self, name: str) -> str:
        """Add a user category. Raises DuplicateKeyError if it exists."""
        with self._audited("add_category", name=name):
            stored = await self._storage.add_category(name)
        self._audit.log_category_added(stored)
        return stored

    async def delete_category(self, name: str) -> None:
        """
        Delete a category.

        Expenses that reference it keep their category string.
        """
        with self._audited("delete_category", name=name):
            await self._storage.delete_category(name)
        self._audit.log_category_removed(name)

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    async def get_setting(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._audited("get_setting", key=key):
            value = await self._storage.get_setting(key)
        return default if value is None else value

    async def set_setting(self, key: str, value: str) -> None:
        with self._audited("set_setting", key=key):
            await self._storage.set_setting(key, value)
        self._audit.log_setting_changed(key, value)

    async def get_theme(self) -> str:
        return await self.get_setting(THEME_SETTING_KEY, self._app_settings.default_theme)

    async def set_theme(self, theme: str) -> None:
        await self.set_setting(THEME_SETTING_KEY, theme)


def create_expense_engine(
    database_path: "Optional[str | Path]" = None,
    in_memory: Optional[bool] = None,
    clock: Optional[Clock] = None,
) -> ExpenseEngine:
    """
    Factory function to build an engine from configuration.

    Args:
        database_path: SQLite file; defaults to the configured path
        in_memory: Use the in-memory store; defaults to configuration
        clock: Source of "now" for timestamps and windows

    Returns:
        An engine that still needs initialize() (or `async with`)
    """
    settings = get_settings()
    storage_settings = settings.storage
    app_settings = settings.app

    configure_logging(app_settings.log_level, json_output=app_settings.log_json)

    if in_memory is None:
        in_memory = storage_settings.in_memory

    if in_memory:
        storage: ExpenseStorageInterface = InMemoryExpenseStorage(clock=clock)
    else:
        storage = SQLiteExpenseStorage(
            database_path or storage_settings.database_file,
            clock=clock,
            echo=storage_settings.echo_sql,
        )

    return ExpenseEngine(
        storage=storage,
        audit_logger=AuditLogger(),
        app_settings=app_settings,
        clock=clock,
    )
