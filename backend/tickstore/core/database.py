"""
Database engine and session management.

Engines are built per run so the caller owns the connection lifecycle
(create before the run, dispose once every job has settled).
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from tickstore.core.config import settings

Base = declarative_base()


def is_sqlite_url(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def build_engine(url: str | None = None) -> AsyncEngine:
    """Create an async engine for the configured (or given) database URL."""
    database_url = url or settings.DATABASE_URL
    if is_sqlite_url(database_url):
        # SQLite pools do not take sizing arguments
        return create_async_engine(database_url, echo=settings.DB_ECHO)
    return create_async_engine(
        database_url,
        echo=settings.DB_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory bound to an engine; one session per unit of work."""
    return async_sessionmaker(engine, expire_on_commit=False)
