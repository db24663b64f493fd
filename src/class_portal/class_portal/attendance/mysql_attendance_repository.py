from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_uuid
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "id, student_id, date, status, created_at"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        id=str(r["id"]),
        student_id=str(r["student_id"]),
        date=r["date"],
        status=AttendanceStatus(r["status"]),
        created_at=r.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_and_date(self, student_id: str, on_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE student_id=%s AND date=%s",
                (student_id, on_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find(
        self,
        *,
        student_id: Optional[str] = None,
        student_ids: Optional[Sequence[str]] = None,
        on_date: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(student_id)
        if student_ids is not None:
            if not student_ids:
                return []
            clauses.append(f"student_id IN ({', '.join(['%s'] * len(student_ids))})")
            params.extend(student_ids)
        if on_date is not None:
            clauses.append("date=%s")
            params.append(on_date)
        if start is not None:
            clauses.append("date>=%s")
            params.append(start)
        if end is not None:
            clauses.append("date<=%s")
            params.append(end)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance {where} ORDER BY date DESC", tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def upsert(self, *, student_id: str, on_date: date, status: AttendanceStatus) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            record_id = new_uuid(cur)
            cur.execute(
                """
                INSERT INTO attendance(id, student_id, date, status)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status)
                """,
                (record_id, student_id, on_date, status.value),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE student_id=%s AND date=%s",
                (student_id, on_date),
            )
            return _to_record(fetchone(cur))
