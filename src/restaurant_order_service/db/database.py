"""SQLAlchemy engine and session factory configuration."""

import logging
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 20,
) -> Engine:
    """Create a SQLAlchemy engine for the given database URL.

    SQLite engines are shared across threads; in-memory SQLite uses a single
    static connection so every session sees the same database.

    Args:
        database_url: SQLAlchemy database URL
        echo: Whether to log every SQL statement
        pool_size: Connection pool size for server databases
        max_overflow: Extra connections allowed above pool_size

    Returns:
        Configured Engine instance
    """
    engine_kwargs: dict = {"echo": echo, "pool_pre_ping": True}

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in {"sqlite://", "sqlite:///:memory:"}:
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_size"] = pool_size
        engine_kwargs["max_overflow"] = max_overflow

    engine = create_engine(database_url, **engine_kwargs)

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    logger.info(f"Database engine created for dialect {engine.dialect.name}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the engine.

    Sessions keep loaded attributes after commit so services can build
    response models once the transaction has ended.

    Args:
        engine: Engine to bind sessions to

    Returns:
        Session factory
    """
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet.

    Args:
        engine: Engine to create tables on
    """
    # Import registers the table classes on Base.metadata
    from restaurant_order_service.db import tables  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")
