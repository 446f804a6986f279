"""
SQLite Storage Implementation

DESIGN DECISION: SQLite is the durable backend because:
1. It is a single file next to the user's data, no server to run
2. Each statement runs in its own transaction, which is all the
   atomicity the engine relies on
3. AUTOINCREMENT guarantees expense ids are never reused

TRADEOFFS:
- The sqlite3 driver is blocking, so every operation is pushed to a
  worker thread; the coroutine suspends the caller meanwhile
- SQLite has no NaN. A NaN amount is stored as NULL and read back as NaN

The schema version lives in PRAGMA user_version. Upgrading only creates
what is missing and seeds only tables it just created; existing rows are
never overwritten.
"""

import asyncio
import math
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import structlog
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from spendlog.models.expense import DEFAULT_CATEGORIES, DEFAULT_SETTINGS, Expense
from spendlog.services.storage.interface import (
    SCHEMA_VERSION,
    Clock,
    DuplicateKeyError,
    ExpenseStorageInterface,
    InitializationError,
    ReadError,
    StorageError,
    WriteError,
    normalize_expense_input,
)


T = TypeVar("T")

logger = structlog.get_logger(__name__)


# Table definitions, keyed by table name. Indexes follow their table.
TABLE_DDL: dict[str, list[str]] = {
    "expenses": [
        """
        CREATE TABLE IF NOT EXISTS expenses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            amount REAL,
            note TEXT NOT NULL DEFAULT '',
            category TEXT NOT NULL,
            date TEXT NOT NULL,
            timestamp INTEGER NOT NULL
        );
        """,
        "CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date);",
        "CREATE INDEX IF NOT EXISTS idx_expenses_category ON expenses(category);",
    ],
    "categories": [
        """
        CREATE TABLE IF NOT EXISTS categories (
            name TEXT PRIMARY KEY,
            is_default INTEGER NOT NULL DEFAULT 0
        );
        """,
    ],
    "settings": [
        """
        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );
        """,
    ],
}


class SQLiteExpenseStorage(ExpenseStorageInterface):
    """
    SQLite implementation of expense storage.

    One row per record in three tables: expenses, categories, settings.
    """

    backend_name = "sqlite"

    def __init__(
        self,
        database_path: "str | Path",
        clock: Optional[Clock] = None,
        echo: bool = False,
    ):
        super().__init__(clock)
        self._database_path = Path(database_path).expanduser()
        self._echo = echo
        self._engine: Optional[Engine] = None

    @property
    def database_path(self) -> Path:
        return self._database_path

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> None:
        if self._initialized:
            return
        self._engine = await asyncio.to_thread(self._open)
        self._initialized = True

    async def close(self) -> None:
        engine, self._engine = self._engine, None
        self._initialized = False
        if engine is not None:
            await asyncio.to_thread(engine.dispose)

    def _open(self) -> Engine:
        engine = create_engine(
            f"sqlite:///{self._database_path}",
            future=True,
            echo=self._echo,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.execute("PRAGMA busy_timeout=5000;")
            cursor.close()

        try:
            with engine.begin() as conn:
                version = int(conn.execute(text("PRAGMA user_version;")).scalar_one())
                if version < SCHEMA_VERSION:
                    self._upgrade(conn, version)
                else:
                    logger.debug(
                        "expense_store_opened",
                        path=str(self._database_path),
                        schema_version=version,
                    )
        except (SQLAlchemyError, sqlite3.Error) as e:
            engine.dispose()
            raise InitializationError(
                f"Failed to open expense store at {self._database_path}: {e}"
            ) from e

        return engine

    def _upgrade(self, conn: Connection, from_version: int) -> None:
        """Create missing tables, seeding only the ones created here."""
        existing = {
            row[0]
            for row in conn.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'table';")
            )
        }
        created = [name for name in TABLE_DDL if name not in existing]

        for name in created:
            for statement in TABLE_DDL[name]:
                conn.execute(text(statement))

        if "categories" in created:
            for name in DEFAULT_CATEGORIES:
                conn.execute(
                    text(
                        "INSERT OR IGNORE INTO categories (name, is_default) "
                        "VALUES (:name, 1);"
                    ),
                    {"name": name},
                )

        if "settings" in created:
            for key, value in DEFAULT_SETTINGS.items():
                conn.execute(
                    text("INSERT OR IGNORE INTO settings (key, value) VALUES (:key, :value);"),
                    {"key": key, "value": value},
                )

        # PRAGMA does not take bound parameters.
        conn.execute(text(f"PRAGMA user_version = {int(SCHEMA_VERSION)};"))

        logger.info(
            "expense_store_upgraded",
            path=str(self._database_path),
            from_version=from_version,
            to_version=SCHEMA_VERSION,
            created_tables=created,
        )

    async def _run(
        self,
        operation: Callable[[Connection], T],
        error_cls: type[StorageError],
        description: str,
    ) -> T:
        """Run one operation in its own transaction on a worker thread."""
        self._require_initialized()
        engine = self._engine

        def _in_transaction() -> T:
            with engine.begin() as conn:
                return operation(conn)

        try:
            return await asyncio.to_thread(_in_transaction)
        except SQLAlchemyError as e:
            raise error_cls(f"Failed to {description}: {e}") from e

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    @staticmethod
    def _row_to_expense(row: Any) -> Expense:
        amount = row["amount"]
        return Expense(
            id=row["id"],
            amount=float("nan") if amount is None else amount,
            note=row["note"] or "",
            category=row["category"],
            date=datetime.fromisoformat(row["date"]),
            timestamp=row["timestamp"],
        )

    async def add_expense(
        self,
        amount: Any,
        note: Optional[str] = "",
        category: Optional[str] = None,
    ) -> int:
        amount, note, category = normalize_expense_input(amount, note, category)
        moment, timestamp = self._current_time()
        params = {
            "amount": None if math.isnan(amount) else amount,
            "note": note,
            "category": category,
            "date": moment.isoformat(timespec="milliseconds"),
            "timestamp": timestamp,
        }

        def _op(conn: Connection) -> int:
            result = conn.execute(
                text(
                    """
                    INSERT INTO expenses (amount, note, category, date, timestamp)
                    VALUES (:amount, :note, :category, :date, :timestamp);
                    """
                ),
                params,
            )
            return int(result.lastrowid)

        return await self._run(_op, WriteError, "add expense")

    async def get_all_expenses(self) -> list[Expense]:
        def _op(conn: Connection) -> list[Expense]:
            rows = conn.execute(
                text(
                    """
                    SELECT id, amount, note, category, date, timestamp
                    FROM expenses;
                    """
                )
            ).mappings().all()
            return [self._row_to_expense(row) for row in rows]

        return await self._run(_op, ReadError, "read expenses")

    async def delete_expense(self, expense_id: int) -> None:
        def _op(conn: Connection) -> None:
            conn.execute(
                text("DELETE FROM expenses WHERE id = :id;"),
                {"id": int(expense_id)},
            )

        await self._run(_op, WriteError, "delete expense")

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def get_all_categories(self) -> list[str]:
        def _op(conn: Connection) -> list[str]:
            rows = conn.execute(
                text("SELECT name FROM categories ORDER BY is_default DESC, rowid ASC;")
            ).all()
            return [row[0] for row in rows]

        return await self._run(_op, ReadError, "read categories")

    async def add_category(self, name: str) -> str:
        category = self._new_category(name)

        def _op(conn: Connection) -> str:
            try:
                conn.execute(
                    text("INSERT INTO categories (name, is_default) VALUES (:name, 0);"),
                    {"name": category.name},
                )
            except IntegrityError as e:
                raise DuplicateKeyError(f"Category already exists: {category.name}") from e
            return category.name

        return await self._run(_op, WriteError, "add category")

    async def delete_category(self, name: str) -> None:
        def _op(conn: Connection) -> None:
            conn.execute(text("DELETE FROM categories WHERE name = :name;"), {"name": name})

        await self._run(_op, WriteError, "delete category")

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    async def get_setting(self, key: str) -> Optional[str]:
        def _op(conn: Connection) -> Optional[str]:
            return conn.execute(
                text("SELECT value FROM settings WHERE key = :key;"),
                {"key": key},
            ).scalar_one_or_none()

        return await self._run(_op, ReadError, "read setting")

    async def set_setting(self, key: str, value: str) -> None:
        def _op(conn: Connection) -> None:
            conn.execute(
                text(
                    """
                    INSERT INTO settings (key, value) VALUES (:key, :value)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                    """
                ),
                {"key": key, "value": str(value)},
            )

        await self._run(_op, WriteError, "write setting")
