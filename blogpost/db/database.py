"""Database engine and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import getLogger
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from blogpost.configs import file_logger, settings
from blogpost.errors.base import BaseAppError

logger = file_logger(getLogger(__name__))

STATEMENT_TIMEOUT_MS = 30000

SessionMaker = async_sessionmaker[SQLModelAsyncSession]


def _configure_engine_events(engine: AsyncEngine) -> None:
    """Configure connection pool events for monitoring."""

    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_connection: object, connection_record: object) -> None:
        logger.debug("New database connection established")

    @event.listens_for(engine.sync_engine, "checkout")
    def on_checkout(
        dbapi_connection: object,
        connection_record: object,
        connection_proxy: object,
    ) -> None:
        logger.debug("Connection checked out from pool")

    @event.listens_for(engine.sync_engine, "checkin")
    def on_checkin(dbapi_connection: object, connection_record: object) -> None:
        logger.debug("Connection returned to pool")


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on foreign key enforcement for every SQLite connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_connection: Any, connection_record: object) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given database URL.

    PostgreSQL engines get the configured connection pool and statement
    timeouts. SQLite engines (used for local runs and tests) share a single
    connection through ``StaticPool`` so in-memory databases survive across
    sessions. Checkin never rolls that connection back, concurrent sessions may
    still have pending statements on it; ``transaction`` rolls back explicitly.

    Args:
        url: SQLAlchemy database URL.
        echo: Log every emitted SQL statement.

    Returns:
        AsyncEngine: Configured engine.
    """
    if url.startswith("sqlite"):
        sqlite_engine = create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            pool_reset_on_return=None,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_foreign_keys(sqlite_engine)
        return sqlite_engine

    return create_async_engine(
        url,
        echo=echo,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_timeout=settings.POOL_TIMEOUT,
        pool_recycle=settings.POOL_RECYCLE,
        pool_pre_ping=True,
        connect_args={
            "command_timeout": STATEMENT_TIMEOUT_MS / 1000,
            "server_settings": {
                "statement_timeout": str(STATEMENT_TIMEOUT_MS),
                "lock_timeout": str(STATEMENT_TIMEOUT_MS),
            },
        },
    )


def build_session_maker(bind: AsyncEngine) -> SessionMaker:
    """Create a session factory bound to the engine."""
    return async_sessionmaker(
        bind,
        class_=SQLModelAsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine: AsyncEngine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

if settings.DEBUG:
    _configure_engine_events(engine)

async_session_maker: SessionMaker = build_session_maker(engine)


@asynccontextmanager
async def transaction(
    session_maker: SessionMaker | None = None,
) -> AsyncGenerator[AsyncSession]:
    """
    Context manager for explicit transaction management.

    Every service operation runs inside exactly one of these blocks.

    Args:
        session_maker: Session factory to use, defaults to the application one.

    Yields:
        AsyncSession: Database session within a transaction

    Example:
        ```python
        async with transaction() as session:
            post = PostDB(title="Hello world", ...)
            session.add(post)
            # Commits on successful exit, rolls back on exception
        ```
    """
    maker = session_maker or async_session_maker
    async with maker() as session:
        try:
            yield session
            await session.commit()
        except BaseAppError:
            await session.rollback()
            raise
        except Exception:
            await session.rollback()
            logger.exception("Transaction error")
            raise
        finally:
            await session.close()


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Initialize database tables.

    This function creates all tables defined in SQLModel models.
    It should be called on application startup.

    Note:
        This is a simple initialization for development.
        For production, use the Alembic migrations.
    """
    async with (bind or engine).begin() as conn:
        # Import all models to ensure they are registered
        from blogpost.models import CommentDB, PostDB, PostTagDB  # noqa: F401, PLC0415

        await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database initialized successfully!")


async def drop_db(bind: AsyncEngine | None = None) -> None:
    """Drop every table known to the SQLModel metadata."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


async def close_db() -> None:
    """
    Close database connections.

    This function should be called on application shutdown
    to properly close all database connections.
    """
    await engine.dispose()
    logger.info("Database connections closed")
