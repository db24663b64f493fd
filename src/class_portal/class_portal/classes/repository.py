from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import SchoolClass


class ClassRepository(Protocol):
    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def find(self, *, class_id: Optional[str] = None) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def create(self, *, name: str) -> SchoolClass:
        raise NotImplementedError
