from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Profile role. A profile is either a student or a teacher, never both."""

    STUDENT = "student"
    TEACHER = "teacher"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


class Table(str, Enum):
    """Tables (and read models) guarded by the policy layer."""

    CLASSES = "classes"
    PROFILES = "profiles"
    POSTS = "posts"
    ATTENDANCE = "attendance"
    CLASS_ROSTER = "class_roster"


class Operation(str, Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
