from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import BackendUnavailable, ConstraintViolation
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_CONSTRAINT_ERRNOS = {
    errorcode.ER_DUP_ENTRY,
    errorcode.ER_NO_REFERENCED_ROW_2,
    errorcode.ER_ROW_IS_REFERENCED_2,
}


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` on a fresh connection; commit on success, roll back on error.

    Driver errors are translated into domain errors so callers never import
    mysql.connector themselves:

    - duplicate key / foreign key failures -> ConstraintViolation
    - connection loss, timeouts -> BackendUnavailable
    """
    try:
        conn = conn_factory.connect()
    except (mysql.connector.InterfaceError, mysql.connector.OperationalError) as e:
        logger.error("Database connection failed: %s", e)
        raise BackendUnavailable("Database is unavailable") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        conn.rollback()
        if e.errno in _CONSTRAINT_ERRNOS:
            raise ConstraintViolation(e.msg) from e
        raise ConstraintViolation(str(e)) from e
    except (mysql.connector.InterfaceError, mysql.connector.OperationalError) as e:
        conn.rollback()
        logger.error("Database call failed: %s", e)
        raise BackendUnavailable("Database is unavailable") from e
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


def new_uuid(cur) -> str:
    """Ask the server for a fresh UUID (same source as the column defaults)."""
    cur.execute("SELECT UUID() AS id")
    return str(cur.fetchone()["id"])
