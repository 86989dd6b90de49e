"""
Database session configuration.

This module handles database engine creation and session management
using SQLAlchemy with async support (PostgreSQL via asyncpg, SQLite via
aiosqlite for development and tests).
"""

from typing import Any, Dict
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from ledger_backend.app.core.config import settings

# Create declarative base for models
Base = declarative_base()

# Execution option marking a transaction that never writes
READ_ONLY = "ledger_read_only"


def configure_sqlite(engine: AsyncEngine) -> None:
    """
    Give SQLite the transactional behaviour the ledger relies on.

    SQLite has no row-level locks, so every write transaction starts with
    BEGIN IMMEDIATE: writers serialize on the database write lock and
    wait (busy timeout) instead of interleaving read-modify-write cycles.
    Connections carrying the READ_ONLY execution option begin deferred and
    keep reading while a writer holds the lock.
    Foreign keys are also switched on per connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        # Let the "begin" hook below emit BEGIN itself
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        if conn.get_execution_options().get(READ_ONLY):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine for a database URL."""
    engine_kwargs: Dict[str, Any] = {
        "echo": settings.db_echo,
        "future": True,
    }
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        engine_kwargs["connect_args"] = {"timeout": settings.sqlite_busy_timeout}
    else:
        engine_kwargs["pool_size"] = settings.db_pool_size
        engine_kwargs["max_overflow"] = settings.db_max_overflow

    engine = create_async_engine(database_url, **engine_kwargs)
    if is_sqlite:
        configure_sqlite(engine)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Create async engine
engine = build_engine(settings.database_url)

# Create async session factory
AsyncSessionLocal = build_session_factory(engine)


async def create_tables(target: AsyncEngine = None) -> None:
    """Create all ledger tables (migrations are out of scope)."""
    # Models must be imported so they register with Base
    from ledger_backend.app.models import contract, job, profile  # noqa: F401

    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
