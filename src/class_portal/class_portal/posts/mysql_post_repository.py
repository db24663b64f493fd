from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_uuid
from .model import Post
from .repository import PostRepository

_SELECT = """
    SELECT p.id, p.teacher_id, p.class_id, p.title, p.content, p.created_at,
           pr.name AS author_name
    FROM posts p
    LEFT JOIN profiles pr ON pr.id = p.teacher_id
"""


def _to_post(r: dict) -> Post:
    return Post(
        id=str(r["id"]),
        teacher_id=str(r["teacher_id"]),
        class_id=str(r["class_id"]),
        title=r["title"],
        content=r["content"],
        created_at=r.get("created_at"),
        author_name=r.get("author_name"),
    )


class MySQLPostRepository(PostRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, post_id: str) -> Optional[Post]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.id=%s", (post_id,))
            row = fetchone(cur)
            return _to_post(row) if row else None

    def find(
        self,
        *,
        post_id: Optional[str] = None,
        class_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> Sequence[Post]:
        clauses: list[str] = []
        params: list[object] = []
        if post_id is not None:
            clauses.append("p.id=%s")
            params.append(post_id)
        if class_id is not None:
            clauses.append("p.class_id=%s")
            params.append(class_id)
        if teacher_id is not None:
            clauses.append("p.teacher_id=%s")
            params.append(teacher_id)

        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + where + " ORDER BY p.created_at DESC", tuple(params))
            return [_to_post(r) for r in fetchall(cur)]

    def create(self, *, teacher_id: str, class_id: str, title: str, content: str) -> Post:
        with db_cursor(self._conn_factory) as (_, cur):
            post_id = new_uuid(cur)
            cur.execute(
                """
                INSERT INTO posts(id, teacher_id, class_id, title, content)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (post_id, teacher_id, class_id, title, content),
            )
            cur.execute(_SELECT + " WHERE p.id=%s", (post_id,))
            return _to_post(fetchone(cur))

    def update(self, post_id: str, *, title: str, content: str) -> Optional[Post]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE posts SET title=%s, content=%s WHERE id=%s", (title, content, post_id))
            cur.execute(_SELECT + " WHERE p.id=%s", (post_id,))
            row = fetchone(cur)
            return _to_post(row) if row else None

    def delete_by_id(self, post_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM posts WHERE id=%s", (post_id,))
            return cur.rowcount > 0
