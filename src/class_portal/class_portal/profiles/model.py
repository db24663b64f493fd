from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Profile:
    """Application identity record, one per Identity (same id)."""

    id: str
    name: str
    role: Role
    class_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER


@dataclass(frozen=True)
class RosterEntry:
    """Read model: a student as seen from the teacher's roster grid."""

    id: str
    name: str
    class_id: str
