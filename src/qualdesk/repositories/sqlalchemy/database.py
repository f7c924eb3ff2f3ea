"""Async database engine and session management."""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from qualdesk.config.settings import get_settings

Base = declarative_base()

# Module-level database state (can be reconfigured at runtime)
_engine: Optional[AsyncEngine] = None
_SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


def _create_engine(database_url: str) -> AsyncEngine:
    kwargs = {"echo": False}
    if ":memory:" in database_url or database_url.endswith("sqlite+aiosqlite://"):
        # One shared connection, otherwise each session sees an empty database
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_async_engine(database_url, **kwargs)


def get_engine() -> AsyncEngine:
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        _engine = _create_engine(get_settings().get_database_url())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _SessionLocal


async def init_db(database_url: Optional[str] = None) -> None:
    """
    Create tables, optionally after pointing the module at database_url.

    Tests pass "sqlite+aiosqlite:///:memory:".
    """
    global _engine, _SessionLocal
    from qualdesk.repositories.sqlalchemy import orm_models  # noqa: F401

    if database_url is not None:
        await reset_database()
        _engine = _create_engine(database_url)

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def reset_database() -> None:
    """Reset database state (for reconfiguration)."""
    global _engine, _SessionLocal

    if _engine is not None:
        await _engine.dispose()

    _engine = None
    _SessionLocal = None
