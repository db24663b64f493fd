from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One student on one calendar date. ``id`` is None before the row is stored."""

    id: Optional[str]
    student_id: str
    date: date
    status: AttendanceStatus
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceSummary:
    """Present/absent split backing the student attendance chart."""

    present: int
    absent: int

    @property
    def total(self) -> int:
        return self.present + self.absent

    @property
    def present_percent(self) -> int:
        return round(self.present * 100 / self.total) if self.total else 0

    @property
    def absent_percent(self) -> int:
        return round(self.absent * 100 / self.total) if self.total else 0


@dataclass(frozen=True)
class RosterRow:
    """Teacher grid row: a student and its status on the selected date (None = unmarked)."""

    student_id: str
    name: str
    status: Optional[AttendanceStatus]
