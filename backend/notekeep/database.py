"""
NoteKeep Backend — Database Engine and Sessions
===============================================

What:  The async engine, the session factory, the declarative Base and the
       per-request session dependency.
How:   One engine per process, built from settings.database_url. Each request
       gets its own AsyncSession; the request's writes commit together when the
       handler returns and roll back together when it raises.

Pooling (PostgreSQL only):
    DB_POOL_SIZE / DB_MAX_OVERFLOW / DB_POOL_PRE_PING from settings,
    connections recycled hourly. SQLite URLs (local runs, tests) take the
    dialect's default pool and none of these arguments.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notekeep.config import settings


def _engine_options() -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


engine = create_async_engine(settings.database_url, **_engine_options())

# Services return pydantic models built from loaded rows; keep them readable
# after the commit in get_db_session
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Shared metadata for User and Note (Alembic and test create_all)."""


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: one session per request, committed on success.

    Any exception from the handler, including NoteKeepErrors raised after a
    write, rolls the whole request back before it propagates.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    """Close pooled connections; called from the app lifespan on shutdown."""
    await engine.dispose()
