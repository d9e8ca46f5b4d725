from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, Iterator, List, Optional

from ..core.constants import PAIR_LOCK_TIMEOUT_SECONDS
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (connection, cursor).

    Inside `DatabaseConnection.transaction()` the pinned connection is reused
    and the transaction owner commits. Otherwise a fresh connection is opened
    and committed when the block exits cleanly.
    """

    pinned = conn_factory.bound
    conn = pinned if pinned is not None else conn_factory.connect()
    cur = conn.cursor(dictionary=dictionary)
    try:
        yield conn, cur
        if pinned is None:
            conn.commit()
    except Exception:
        if pinned is None:
            conn.rollback()
        raise
    finally:
        cur.close()
        if pinned is None:
            conn.close()


@contextmanager
def named_lock(conn_factory: DatabaseConnection, name: str, *, timeout: int = PAIR_LOCK_TIMEOUT_SECONDS) -> Iterator[None]:
    """Hold MySQL's GET_LOCK(name) for the length of one transaction."""

    with conn_factory.transaction():
        with db_cursor(conn_factory) as (_, cur):
            cur.execute("SELECT GET_LOCK(%s, %s) AS acquired", (name, int(timeout)))
            row = fetchone(cur)
        if not row or not row["acquired"]:
            logger.warning("Lock %s not acquired within %ss", name, timeout)
            raise TimeoutError(f"Could not acquire lock {name!r}")
        try:
            yield
        finally:
            with db_cursor(conn_factory) as (_, cur):
                cur.execute("SELECT RELEASE_LOCK(%s)", (name,))
                fetchall(cur)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Coerce a TIME column to `datetime.time`.

    mysql-connector hands TIME back as a timedelta (C extension and pure
    Python alike); some drivers and mocks return a time or an 'HH:MM[:SS]' string.
    """

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, seconds % 3600 // 60, seconds % 60)
    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(int(parts[0]), int(parts[1]), int(parts[2]) if len(parts) > 2 and parts[2] else 0)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
