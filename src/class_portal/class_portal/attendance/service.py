from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from ..core.constants import RECENT_ATTENDANCE_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..policies.context import require_caller
from ..policies.secured import SecuredAttendance
from ..profiles.service import ProfileService
from .model import AttendanceRecord, AttendanceSummary, RosterRow

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(self, attendance: SecuredAttendance, profiles: ProfileService):
        self._attendance = attendance
        self._profiles = profiles

    def my_attendance(self, *, limit: Optional[int] = None) -> list[AttendanceRecord]:
        rows = self._attendance.select(student_id=require_caller())
        return rows[:limit] if limit else rows

    def recent_attendance(self) -> list[AttendanceRecord]:
        return self.my_attendance(limit=RECENT_ATTENDANCE_LIMIT)

    @staticmethod
    def summarize(records: Iterable[AttendanceRecord]) -> AttendanceSummary:
        present = absent = 0
        for r in records:
            if r.status == AttendanceStatus.PRESENT:
                present += 1
            else:
                absent += 1
        return AttendanceSummary(present=present, absent=absent)

    def my_summary(self) -> AttendanceSummary:
        return self.summarize(self.my_attendance())

    def roster_for_date(self, on_date: date) -> list[RosterRow]:
        students = self._profiles.list_roster()
        if not students:
            return []
        rows = self._attendance.select(on_date=on_date, student_ids=[s.id for s in students])
        marks = {r.student_id: r.status for r in rows}
        return [RosterRow(student_id=s.id, name=s.name, status=marks.get(s.id)) for s in students]

    def mark(self, *, student_id: str, on_date: date, status: str | AttendanceStatus) -> AttendanceRecord:
        if not student_id:
            raise ValidationError("Student is required")
        try:
            status = AttendanceStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown attendance status: {status}") from None

        record = self._attendance.upsert(student_id=student_id, on_date=on_date, status=status)
        logger.info("Marked student=%s %s on %s", student_id, status.value, on_date.isoformat())
        return record

    def export_rows(self, *, start: date, end: date) -> list[dict]:
        """Roster attendance in [start, end], for the CSV download."""
        if end < start:
            raise ValidationError("End date must not be before start date")

        names = {s.id: s.name for s in self._profiles.list_roster()}
        if not names:
            return []
        rows = []
        for r in self._attendance.select(start=start, end=end, student_ids=list(names)):
            rows.append(
                {
                    "date": r.date.strftime("%Y-%m-%d"),
                    "student_id": r.student_id,
                    "student_name": names[r.student_id],
                    "status": r.status.value,
                }
            )
        rows.sort(key=lambda x: (x["date"], x["student_name"]))
        return rows
