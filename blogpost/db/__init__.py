"""Database engine, sessions and transactions."""

from blogpost.db.database import (
    SessionMaker,
    async_session_maker,
    build_engine,
    build_session_maker,
    close_db,
    drop_db,
    engine,
    init_db,
    transaction,
)

__all__ = [
    "SessionMaker",
    "engine",
    "async_session_maker",
    "build_engine",
    "build_session_maker",
    "init_db",
    "drop_db",
    "close_db",
    "transaction",
]
