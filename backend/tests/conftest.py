"""Shared test fixtures."""

from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cashflow.core.clock import get_clock
from cashflow.core.database import get_db
from cashflow.main import app
from cashflow.models import Base
from cashflow.services.ledger import ExpenseEntry
from cashflow.services.threshold_store import ThresholdRecord

NOW = datetime(2026, 3, 15, 10, 30, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, now: datetime = NOW):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()


class FakeLedger:
    """In-memory ledger keyed by user id."""

    def __init__(self):
        self.rows: list[tuple[int, ExpenseEntry]] = []

    def add(self, user_id, amount, on, category_id=None, category_name=None):
        entry = ExpenseEntry(
            amount=Decimal(str(amount)),
            date=on,
            category_id=category_id,
            category_name=category_name,
        )
        self.rows.append((user_id, entry))
        return entry

    def _select(self, user_id, category_id=None, start=None, end=None):
        return [
            e for uid, e in self.rows
            if uid == user_id
            and (category_id is None or e.category_id == category_id)
            and (start is None or e.date >= start)
            and (end is None or e.date <= end)
        ]

    async def total_for_user(self, user_id):
        return sum((e.amount for e in self._select(user_id)), Decimal(0))

    async def total_for_user_and_category(self, user_id, category_id):
        return sum((e.amount for e in self._select(user_id, category_id)), Decimal(0))

    async def total_for_user_in_range(self, user_id, start, end):
        return sum((e.amount for e in self._select(user_id, start=start, end=end)), Decimal(0))

    async def total_for_user_and_category_in_range(self, user_id, category_id, start, end):
        return sum((e.amount for e in self._select(user_id, category_id, start, end)), Decimal(0))

    async def expenses_for_user_in_range(self, user_id, start, end):
        return sorted(self._select(user_id, start=start, end=end), key=lambda e: e.date)

    async def count_for_user_in_range(self, user_id, start, end, category_id=None):
        return len(self._select(user_id, category_id, start, end))


class FakeThresholdStore:
    """Keeps its own copies so engine mutations only land through save()."""

    def __init__(self):
        self.records: dict[int, ThresholdRecord] = {}
        self.saves: list[ThresholdRecord] = []

    def add(self, **fields) -> ThresholdRecord:
        fields.setdefault("id", len(self.records) + 1)
        fields.setdefault("user_id", 1)
        fields["limit_amount"] = Decimal(str(fields.get("limit_amount", "1000")))
        record = ThresholdRecord(**fields)
        self.records[record.id] = record
        return replace(record)

    def get(self, threshold_id: int) -> ThresholdRecord:
        return self.records[threshold_id]

    async def active_for_user(self, user_id):
        return [
            replace(r) for r in sorted(self.records.values(), key=lambda r: r.id)
            if r.user_id == user_id and r.is_active
        ]

    async def save(self, threshold):
        self.saves.append(replace(threshold))
        stored = self.records[threshold.id]
        if stored.is_breached == threshold.is_breached:
            return False
        self.records[threshold.id] = replace(threshold)
        return True


class FakeDirectory:
    def __init__(self, users=(1,), categories=()):
        self.users = set(users)
        self.categories = set(categories)

    async def user_exists(self, user_id):
        return user_id in self.users

    async def category_exists(self, category_id):
        return category_id in self.categories


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def store():
    return FakeThresholdStore()


@pytest.fixture
def directory():
    return FakeDirectory(users=(1, 2), categories=(10, 11, 12))


# ── Database-backed fixtures ──────────────────────


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory, clock):
    """Async test client for the FastAPI app on an in-memory database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
