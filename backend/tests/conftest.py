"""Test fixtures for the hotel booking backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("CACHE_BACKEND", "memory")

from hotel_api.cache import MemoryCache, SearchCache
from hotel_api.core.config import get_settings
from hotel_api.core.security import get_password_hash
from hotel_api.db.base import Base
from hotel_api.db.session import dispose_engine, get_sessionmaker
from hotel_api.main import app
from hotel_api.models import AppConfig, User
from hotel_api.services.notification_service import NotificationQueue
from supplier_fakes import FakeClock, FakeSupplier, RecordingSmsSender


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture()
async def app_context(
    reset_database: AsyncIterator[None], db_url: str, clock: FakeClock
) -> AsyncIterator[dict[str, Any]]:
    """Yield an async client wired to fake supplier, SMS and cache."""
    sessionmaker = get_sessionmaker(db_url)
    password = "Passw0rd!"

    async with sessionmaker() as session:
        session.add(
            AppConfig(
                markup={"type": "percentage", "value": 10},
                fees={},
                cancellation_charge={"type": "fixed", "value": 100},
            )
        )
        customer = User(
            name="Meera",
            last_name="Iyer",
            mobile="9000000001",
            email="meera@example.com",
            hashed_password=get_password_hash(password),
            verified=True,
        )
        session.add(customer)
        await session.commit()
        customer_id = customer.id

    supplier = FakeSupplier()
    supplier_client = supplier.client()
    sms = RecordingSmsSender()
    notifications = NotificationQueue(
        sms, max_attempts=3, retry_backoff=0, country_code="91"
    )
    notifications.start()
    cache = SearchCache(MemoryCache(timer=clock))

    app.state.search_cache = cache
    app.state.supplier = supplier_client
    app.state.notifications = notifications

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield {
            "client": client,
            "sessionmaker": sessionmaker,
            "supplier": supplier,
            "sms": sms,
            "notifications": notifications,
            "cache": cache,
            "clock": clock,
            "customer_id": customer_id,
            "customer_mobile": "9000000001",
            "customer_password": password,
        }

    await notifications.stop()
    await supplier_client.close()
