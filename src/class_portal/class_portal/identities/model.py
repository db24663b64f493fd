from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """Authentication subject. Profiles share its id."""

    id: str
    email: str
    password_hash: str
    metadata: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None
