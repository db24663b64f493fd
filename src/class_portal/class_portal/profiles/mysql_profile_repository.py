from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Profile
from .repository import ProfileRepository

_COLUMNS = "id, name, role, class_id, created_at, updated_at"


def _to_profile(r: dict) -> Profile:
    return Profile(
        id=str(r["id"]),
        name=r["name"],
        role=Role(r["role"]),
        class_id=str(r["class_id"]) if r.get("class_id") else None,
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, profile_id: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE id=%s", (profile_id,))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def find(
        self,
        *,
        profile_id: Optional[str] = None,
        class_id: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> Sequence[Profile]:
        clauses: list[str] = []
        params: list[object] = []
        if profile_id is not None:
            clauses.append("id=%s")
            params.append(profile_id)
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(class_id)
        if role is not None:
            clauses.append("role=%s")
            params.append(role.value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles {where} ORDER BY name ASC", tuple(params))
            return [_to_profile(r) for r in fetchall(cur)]

    def create(self, *, profile_id: str, name: str, role: Role) -> Profile:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO profiles(id, name, role) VALUES(%s,%s,%s)",
                (profile_id, name, role.value),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE id=%s", (profile_id,))
            return _to_profile(fetchone(cur))

    def update_name(self, profile_id: str, name: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            # ON UPDATE CURRENT_TIMESTAMP only fires when a value changes.
            cur.execute(
                "UPDATE profiles SET name=%s, updated_at=CURRENT_TIMESTAMP WHERE id=%s",
                (name, profile_id),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE id=%s", (profile_id,))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def set_class(self, profile_id: str, class_id: Optional[str]) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE profiles SET class_id=%s, updated_at=CURRENT_TIMESTAMP WHERE id=%s",
                (class_id, profile_id),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE id=%s", (profile_id,))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def delete_by_id(self, profile_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM profiles WHERE id=%s", (profile_id,))
            return cur.rowcount > 0
