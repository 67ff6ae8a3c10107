"""Pytest configuration and fixtures."""

import os

# Settings are read at import time, so the test environment is set up first
os.environ.setdefault("DATABASE_URL", "sqlite:///./chatserver_test.db")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "100000")
os.environ.setdefault("OTEL_EXPORT_CONSOLE", "false")

from datetime import datetime, timedelta, UTC
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlmodel import SQLModel

from chatserver.main import app
from chatserver.api.deps import get_db
from chatserver.core.security import get_password_hash
from chatserver.core.tokens import TokenConfig, TokenService
from chatserver.models import User


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def token_config() -> TokenConfig:
    """Token configuration with distinct test secrets."""
    return TokenConfig(
        access_secret="test-access-secret",
        refresh_secret="test-refresh-secret",
        access_expires_in=timedelta(hours=1),
        refresh_expires_in=timedelta(days=7),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_service(token_config: TokenConfig, clock: FakeClock) -> TokenService:
    """Token service driven by the fake clock."""
    return TokenService(token_config, clock=clock)


@pytest.fixture
def identity() -> dict:
    return {"id": "u1", "name": "Alice", "email": "a@x.com"}


@pytest_asyncio.fixture(scope="function")
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    database_url = os.environ.get(
        "TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    )
    engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with a test database session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def https_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Test client over https, so the secure refresh cookie is sent back."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="https://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_user(db_session: AsyncSession) -> User:
    """Create a registered user."""
    user = User(
        name="Test User",
        email="test@example.com",
        hashed_password=get_password_hash("password123"),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user
