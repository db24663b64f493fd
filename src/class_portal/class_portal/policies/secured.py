"""Query-interception layer.

The secured tables are the only data access the services get. Every read is
passed through ``PolicyEngine.filter`` and every write through
``PolicyEngine.check`` before it reaches the raw repository, with the caller
taken from the request context.
"""
from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..classes.model import SchoolClass
from ..classes.repository import ClassRepository
from ..core.enums import AttendanceStatus, Operation, Role, Table
from ..core.exceptions import ValidationError
from ..posts.model import Post
from ..posts.repository import PostRepository
from ..profiles.model import Profile, RosterEntry
from ..profiles.repository import ProfileRepository
from .context import current_caller, require_caller
from .engine import PolicyEngine


class SecuredClasses:
    def __init__(self, raw: ClassRepository, engine: PolicyEngine):
        self._raw = raw
        self._engine = engine

    def select(self, *, class_id: Optional[str] = None) -> list[SchoolClass]:
        return self._engine.filter(Table.CLASSES, current_caller(), self._raw.find(class_id=class_id))


class SecuredProfiles:
    def __init__(self, raw: ProfileRepository, engine: PolicyEngine):
        self._raw = raw
        self._engine = engine

    def select(
        self,
        *,
        profile_id: Optional[str] = None,
        class_id: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> list[Profile]:
        rows = self._raw.find(profile_id=profile_id, class_id=class_id, role=role)
        return self._engine.filter(Table.PROFILES, current_caller(), rows)

    def update_name(self, profile_id: str, name: str) -> Profile:
        """Only the display name is writable here; role and class stay as provisioned."""
        caller = require_caller()
        existing = self._raw.get_by_id(profile_id)
        if not existing or not self._engine.allows(Table.PROFILES, Operation.SELECT, caller, existing):
            raise ValidationError("Profile not found")
        self._engine.check(Table.PROFILES, Operation.UPDATE, caller, existing)
        updated = self._raw.update_name(profile_id, name)
        if not updated:
            raise ValidationError("Profile not found")
        return updated


class SecuredRoster:
    """Student list of a class: id and name only, through its own policy."""

    def __init__(self, raw: ProfileRepository, engine: PolicyEngine):
        self._raw = raw
        self._engine = engine

    def select(self, *, class_id: Optional[str] = None) -> list[RosterEntry]:
        entries = [
            RosterEntry(id=p.id, name=p.name, class_id=p.class_id)
            for p in self._raw.find(class_id=class_id, role=Role.STUDENT)
            if p.class_id
        ]
        return self._engine.filter(Table.CLASS_ROSTER, current_caller(), entries)


class SecuredPosts:
    def __init__(self, raw: PostRepository, engine: PolicyEngine):
        self._raw = raw
        self._engine = engine

    def select(
        self,
        *,
        post_id: Optional[str] = None,
        class_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> list[Post]:
        rows = self._raw.find(post_id=post_id, class_id=class_id, teacher_id=teacher_id)
        return self._engine.filter(Table.POSTS, current_caller(), rows)

    def insert(self, *, teacher_id: str, class_id: str, title: str, content: str) -> Post:
        proposed = Post(id=None, teacher_id=teacher_id, class_id=class_id, title=title, content=content)
        self._engine.check(Table.POSTS, Operation.INSERT, current_caller(), proposed)
        return self._raw.create(teacher_id=teacher_id, class_id=class_id, title=title, content=content)

    def _existing(self, post_id: str, op: Operation) -> Post:
        caller = current_caller()
        existing = self._raw.get_by_id(post_id)
        if not existing:
            raise ValidationError("Post not found")
        self._engine.check(Table.POSTS, op, caller, existing)
        return existing

    def update(self, post_id: str, *, title: str, content: str) -> Post:
        existing = self._existing(post_id, Operation.UPDATE)
        proposed = Post(
            id=existing.id,
            teacher_id=existing.teacher_id,
            class_id=existing.class_id,
            title=title,
            content=content,
            created_at=existing.created_at,
        )
        self._engine.check(Table.POSTS, Operation.UPDATE, current_caller(), proposed)
        updated = self._raw.update(post_id, title=title, content=content)
        if not updated:
            raise ValidationError("Post not found")
        return updated

    def delete(self, post_id: str) -> None:
        self._existing(post_id, Operation.DELETE)
        if not self._raw.delete_by_id(post_id):
            raise ValidationError("Post not found")


class SecuredAttendance:
    def __init__(self, raw: AttendanceRepository, engine: PolicyEngine):
        self._raw = raw
        self._engine = engine

    def select(
        self,
        *,
        student_id: Optional[str] = None,
        student_ids: Optional[Sequence[str]] = None,
        on_date: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[AttendanceRecord]:
        rows = self._raw.find(student_id=student_id, student_ids=student_ids, on_date=on_date, start=start, end=end)
        return self._engine.filter(Table.ATTENDANCE, current_caller(), rows)

    def upsert(self, *, student_id: str, on_date: date, status: AttendanceStatus) -> AttendanceRecord:
        """Insert-or-update keyed on (student_id, date).

        The proposed row must pass INSERT; when a row already exists it must
        also pass UPDATE both as it is and as it will be.
        """
        caller = current_caller()
        proposed = AttendanceRecord(id=None, student_id=student_id, date=on_date, status=status)
        self._engine.check(Table.ATTENDANCE, Operation.INSERT, caller, proposed)

        existing = self._raw.get_for_student_and_date(student_id, on_date)
        if existing:
            self._engine.check(Table.ATTENDANCE, Operation.UPDATE, caller, existing)
            self._engine.check(
                Table.ATTENDANCE,
                Operation.UPDATE,
                caller,
                AttendanceRecord(
                    id=existing.id,
                    student_id=existing.student_id,
                    date=existing.date,
                    status=status,
                    created_at=existing.created_at,
                ),
            )
        return self._raw.upsert(student_id=student_id, on_date=on_date, status=status)
