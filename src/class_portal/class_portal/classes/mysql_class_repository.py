from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_uuid
from .model import SchoolClass
from .repository import ClassRepository


def _to_class(r: dict) -> SchoolClass:
    return SchoolClass(id=str(r["id"]), name=r["name"], created_at=r.get("created_at"))


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, created_at FROM classes WHERE id=%s", (class_id,))
            row = fetchone(cur)
            return _to_class(row) if row else None

    def get_by_name(self, name: str) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, created_at FROM classes WHERE name=%s ORDER BY created_at LIMIT 1", (name,))
            row = fetchone(cur)
            return _to_class(row) if row else None

    def find(self, *, class_id: Optional[str] = None) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            if class_id is not None:
                cur.execute("SELECT id, name, created_at FROM classes WHERE id=%s", (class_id,))
            else:
                cur.execute("SELECT id, name, created_at FROM classes ORDER BY name ASC")
            return [_to_class(r) for r in fetchall(cur)]

    def create(self, *, name: str) -> SchoolClass:
        with db_cursor(self._conn_factory) as (_, cur):
            class_id = new_uuid(cur)
            cur.execute("INSERT INTO classes(id, name) VALUES(%s,%s)", (class_id, name))
            cur.execute("SELECT id, name, created_at FROM classes WHERE id=%s", (class_id,))
            return _to_class(fetchone(cur))
