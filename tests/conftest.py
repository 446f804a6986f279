"""
Shared fixtures for Spendlog tests.

Times are naive local datetimes throughout, so the tests behave the
same in every timezone. Dates are chosen away from DST changes.
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio

from spendlog.audit import AuditLogger
from spendlog.config import AppSettings
from spendlog.engine import ExpenseEngine
from spendlog.services.storage import InMemoryExpenseStorage, SQLiteExpenseStorage


class FakeClock:
    """A settable clock; call it to read the current time."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingAuditLogger(AuditLogger):
    """Keeps every event it is given."""

    def __init__(self):
        super().__init__()
        self.events = []

    def log(self, event):
        self.events.append(event)
        return True


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 8, 31, 12, 0, 0))


@pytest.fixture
def audit_logger():
    return RecordingAuditLogger()


@pytest.fixture
def database_path(tmp_path):
    return tmp_path / "expenses.db"


def _make_storage(kind, database_path, clock):
    if kind == "sqlite":
        return SQLiteExpenseStorage(database_path, clock=clock)
    return InMemoryExpenseStorage(clock=clock)


@pytest_asyncio.fixture(params=["sqlite", "memory"])
async def storage(request, database_path, clock):
    """An initialized store, once per backend."""
    store = _make_storage(request.param, database_path, clock)
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture(params=["sqlite", "memory"])
async def engine(request, database_path, clock, audit_logger):
    """An initialized engine, once per backend."""
    engine = ExpenseEngine(
        storage=_make_storage(request.param, database_path, clock),
        audit_logger=audit_logger,
        app_settings=AppSettings(),
        clock=clock,
    )
    await engine.initialize()
    yield engine
    await engine.close()
