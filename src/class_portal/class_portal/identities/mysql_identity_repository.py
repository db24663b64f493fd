from __future__ import annotations

import json
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, new_uuid
from .model import Identity
from .repository import IdentityRepository


def _to_identity(r: dict) -> Identity:
    metadata = r.get("raw_user_meta_data") or {}
    if isinstance(metadata, (str, bytes, bytearray)):
        metadata = json.loads(metadata)
    return Identity(
        id=str(r["id"]),
        email=r["email"],
        password_hash=r["password_hash"],
        metadata=dict(metadata),
        created_at=r.get("created_at"),
    )


class MySQLIdentityRepository(IdentityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, identity_id: str) -> Optional[Identity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, email, password_hash, raw_user_meta_data, created_at
                FROM identities
                WHERE id=%s
                """,
                (identity_id,),
            )
            row = fetchone(cur)
            return _to_identity(row) if row else None

    def get_by_email(self, email: str) -> Optional[Identity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, email, password_hash, raw_user_meta_data, created_at
                FROM identities
                WHERE email=%s
                """,
                (email,),
            )
            row = fetchone(cur)
            return _to_identity(row) if row else None

    def create(self, *, email: str, password_hash: str, metadata: dict) -> Identity:
        with db_cursor(self._conn_factory) as (_, cur):
            identity_id = new_uuid(cur)
            cur.execute(
                """
                INSERT INTO identities(id, email, password_hash, raw_user_meta_data)
                VALUES(%s,%s,%s,%s)
                """,
                (identity_id, email, password_hash, json.dumps(metadata)),
            )
            cur.execute(
                "SELECT id, email, password_hash, raw_user_meta_data, created_at FROM identities WHERE id=%s",
                (identity_id,),
            )
            return _to_identity(fetchone(cur))

    def delete_by_id(self, identity_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM identities WHERE id=%s", (identity_id,))
            return cur.rowcount > 0
