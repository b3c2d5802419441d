"""
Vibe Backend — Database Session Management
===========================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine at import time and provides a per-request
       session that commits on success and rolls back on error; SQLAlchemy
       failures surface as DatabaseError.
Who:   Route handlers and auth dependencies via FastAPI's Depends().

Engine selection:
    SQLite (default, in-memory): a single shared connection through
    StaticPool so every session sees the same in-process data.
    Anything else (PostgreSQL via asyncpg): a regular connection pool sized
    from settings.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, AsyncIterator, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from vibe.config import settings
from vibe.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine with pool options suited to the backend."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if database_url.startswith("sqlite"):
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow
        options["pool_pre_ping"] = settings.db_pool_pre_ping
        options["pool_recycle"] = 3600
    return create_async_engine(database_url, **options)


engine = build_engine(settings.database_url)

# expire_on_commit=False keeps loaded attributes usable after commit; in
# async code an expired attribute would trigger an implicit (forbidden) load.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, used by create_all() at startup and by
    Alembic for migrations.
    """
    pass


@asynccontextmanager
async def session_scope(
    factory: Optional[async_sessionmaker] = None,
) -> AsyncIterator[AsyncSession]:
    """
    Open a session that commits on success and rolls back on error.

    SQLAlchemy failures are logged with their details and re-raised as
    DatabaseError, so clients get the generic 500 `server_error` envelope.
    Other exceptions (VibeError subclasses included) pass through untouched.
    """
    async with (factory or async_session_factory)() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Database operation failed: %s", e, exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__}) from e
        except Exception:
            await session.rollback()
            raise


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session_scope() from the module factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back; SQLAlchemy errors become DatabaseError
        5. Always: closes the session
    """
    async with session_scope() as session:
        yield session


async def create_tables(bind: AsyncEngine = engine) -> None:
    """
    Create any missing tables.

    Needed for the in-memory default, where the schema vanishes with the
    process. For managed databases, Alembic migrations are the source of
    truth and this is a no-op once they ran.
    """
    # Registers every model on Base.metadata
    import vibe.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close all pooled connections. Called on application shutdown."""
    await engine.dispose()
