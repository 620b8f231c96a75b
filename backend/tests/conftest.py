"""
NoteKeep Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for row-count and failure paths
    ├── db_engine / db_session: real in-memory SQLite (aiosqlite, StaticPool)
    ├── hasher / make_user / alice / bob: stored users with real hashes
    ├── token_service: TokenService wired to the test hasher
    └── test_client: HTTPX AsyncClient against the app, sessions from db_engine
"""

import os

# Override settings for testing BEFORE any notekeep imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_KEY"] = "test-signing-key-0123456789abcdef0123456789abcdef"
os.environ["JWT_ISSUER"] = "notekeep-tests"
os.environ["JWT_AUDIENCE"] = "notekeep-test-clients"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import notekeep.models  # noqa: F401
from notekeep.auth import AuthenticatedUser
from notekeep.database import Base, get_db_session
from notekeep.models.user import User
from notekeep.services.passwords import PasswordHasher
from notekeep.services.token_service import TokenService

DEFAULT_PASSWORD = "correct horse battery staple"


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_x(mock_db_session):
            mock_db_session.execute.return_value.all.return_value = []
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory database with all tables, one per test."""
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
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def hasher():
    return PasswordHasher(schemes=["pbkdf2_sha256", "sha256_crypt"])


@pytest.fixture
def token_service(hasher):
    return TokenService(hasher=hasher)


@pytest.fixture
def make_user(db_session, hasher):
    """Factory: store a user with a hashed password and return it."""

    async def _make_user(
        username: str,
        password: str = DEFAULT_PASSWORD,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        password_hash: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        user = User(
            username=username,
            email=email or f"{username.lower()}@example.com",
            password_hash=password_hash or hasher.hash(password),
            first_name=first_name,
            last_name=last_name,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def alice(make_user) -> User:
    return await make_user("Alice", first_name="Alice", last_name="Liddell")


@pytest_asyncio.fixture
async def bob(make_user) -> User:
    return await make_user("bob")


@pytest.fixture
def alice_identity(alice) -> AuthenticatedUser:
    return AuthenticatedUser(user_id=alice.id, username=alice.username)


@pytest.fixture
def bob_identity(bob) -> AuthenticatedUser:
    return AuthenticatedUser(user_id=bob.id, username=bob.username)


@pytest_asyncio.fixture
async def test_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    get_db_session is overridden to hand out sessions bound to the test
    database, with the same commit/rollback behaviour as production.
    """
    from notekeep.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def default_password() -> str:
    return DEFAULT_PASSWORD
