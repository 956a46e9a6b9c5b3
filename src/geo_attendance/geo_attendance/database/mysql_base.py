from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import StorageFailure
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Connection + cursor for one unit of work; commits on success.

    Driver errors surface as ``StorageFailure``.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise StorageFailure(f"Database unavailable: {exc}") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        raise StorageFailure(str(exc)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
