"""
Shared fixtures for integration tests.

Each test gets a fresh SQLite database file so that separate sessions
behave like separate connections to one store.
"""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ledger.models import Base
from ledger.repositories.purchased_product_repository import (
    PurchasedProductRepository,
)
from ledger.repositories.user_repository import UserRepository


T0 = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Async engine over a throwaway SQLite file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_maker):
    """One session per test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def t0():
    """Fixed reference time."""
    return T0


@pytest.fixture
def make_user(session):
    """Factory inserting a committed user and returning its ID."""
    counter = {"n": 0}

    async def _make_user(
        balance: Decimal | int = 0,
        referred_by: int | None = None,
        has_deposited: bool = False,
        email: str | None = None,
    ) -> int:
        counter["n"] += 1
        user = await UserRepository(session).create(
            email=email or f"user{counter['n']}@example.com",
            balance=Decimal(balance),
            referred_by=referred_by,
            has_deposited=has_deposited,
            referral_code=f"CODE{counter['n']:02d}",
        )
        user_id = user.id
        await session.commit()
        return user_id

    return _make_user


@pytest.fixture
def make_product(session):
    """Factory inserting a committed Active product and returning its ID."""

    async def _make_product(
        user_id: int,
        plan_type: str = "Basic",
        price: Decimal | int = 2500,
        daily_earning: Decimal | int = 0,
        total_earning: Decimal | int = 0,
        cycle_days: int = 30,
        start: datetime = T0,
    ) -> int:
        product = await PurchasedProductRepository(session).create(
            user_id=user_id,
            plan_id=f"{plan_type.lower()}-1",
            name=f"{plan_type} 1",
            plan_type=plan_type,
            price=Decimal(price),
            daily_roi=Decimal("1"),
            daily_earning=Decimal(daily_earning),
            total_earning=Decimal(total_earning),
            cycle_days=cycle_days,
            start_date=start,
            end_date=start + timedelta(days=cycle_days),
        )
        product_id = product.id
        await session.commit()
        return product_id

    return _make_product


@pytest.fixture
def balance_of(session):
    """Read a balance straight from the store."""

    async def _balance_of(user_id: int) -> Decimal:
        return await UserRepository(session).get_balance(user_id)

    return _balance_of
