from __future__ import annotations

from typing import Optional

from ..policies.secured import SecuredClasses
from .model import SchoolClass


class ClassService:
    def __init__(self, classes: SecuredClasses):
        self._classes = classes

    def get_my_class(self) -> Optional[SchoolClass]:
        """The caller's class; the policy layer hides every other class row."""
        rows = self._classes.select()
        return rows[0] if rows else None
