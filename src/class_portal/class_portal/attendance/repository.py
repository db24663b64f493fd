from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_student_and_date(self, student_id: str, on_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find(
        self,
        *,
        student_id: Optional[str] = None,
        student_ids: Optional[Sequence[str]] = None,
        on_date: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """Newest date first. ``student_ids`` restricts to those students; an empty list matches nothing."""
        raise NotImplementedError

    def upsert(self, *, student_id: str, on_date: date, status: AttendanceStatus) -> AttendanceRecord:
        """Insert, or overwrite the status of the existing (student_id, date) row."""
        raise NotImplementedError
