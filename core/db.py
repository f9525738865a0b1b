"""
core/db.py -- Shared database handle for every store.

One Database is built in the API lifespan, passed explicitly to each store,
and closed on shutdown. Stores own their own Table definitions and call
create_all() on the engine they are handed.

SQLAlchemy Core keeps the store layer database-agnostic: swapping SQLite for
PostgreSQL is a DATABASE_URL change, not a rewrite.

Usage:
    db = Database("sqlite:///carrental.db")
    users = PrincipalStore(db, "user")
    ...
    db.close()
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.errors import StorageError

logger = logging.getLogger("carrental.db")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. In-memory databases ignore the pragma.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


class Database:
    """Owns the SQLAlchemy engine for the lifetime of the process."""

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        is_sqlite = db_url.startswith("sqlite")
        if is_sqlite:
            connect_args["check_same_thread"] = False
        self.url = db_url
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if is_sqlite:
            event.listen(self.engine, "connect", _set_wal_mode)

    def ping(self) -> bool:
        """Return True if a trivial query succeeds. Used by the health endpoint."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Translate driver failures into StorageError.

    Domain errors raised inside the block (DuplicateError, NotFoundError)
    pass through untouched; only SQLAlchemy exceptions are wrapped.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Storage failure during %s: %s", action, exc)
        raise StorageError("Server error", detail=f"{action}: {exc}") from exc
