# Overview: Row-locking and constraint-violation helpers shared by the services.

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; engines set up with
    serialize_sqlite_transactions take the database write lock at BEGIN instead.
    """
    return query.with_for_update()


def serialize_sqlite_transactions(engine: Engine) -> None:
    """
    Start every SQLite transaction with BEGIN IMMEDIATE.

    pysqlite defers BEGIN until the first INSERT/UPDATE, so a status read
    would otherwise run outside the write lock. With the driver's own
    transaction handling disabled, the lock is held from the first read of a
    unit of work until its commit or rollback.
    """
    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def is_unique_violation(exc: IntegrityError, *markers: str) -> bool:
    """
    True when an IntegrityError was raised by one of the named unique indexes.

    PostgreSQL reports the index name; SQLite reports the constrained
    columns ("UNIQUE constraint failed: table.col"), so callers pass both.
    """
    text = str(getattr(exc, "orig", None) or exc)
    if "unique" not in text.lower() and "duplicate" not in text.lower():
        return False
    return any(marker in text for marker in markers)
