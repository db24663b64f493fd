from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Post:
    """Class announcement written by one teacher.

    ``id`` and ``created_at`` are None for a row that has not been stored yet;
    ``author_name`` is filled by reads that join the author profile.
    """

    id: Optional[str]
    teacher_id: str
    class_id: str
    title: str
    content: str
    created_at: Optional[datetime] = None
    author_name: Optional[str] = None
