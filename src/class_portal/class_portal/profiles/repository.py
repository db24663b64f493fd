from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Profile


class ProfileRepository(Protocol):
    """Unrestricted access to profile rows.

    Services only see this through the policy layer; the raw
    repository is used directly by the policy lookups and by privileged
    bootstrap/admin code.
    """

    def get_by_id(self, profile_id: str) -> Optional[Profile]:
        raise NotImplementedError

    def find(
        self,
        *,
        profile_id: Optional[str] = None,
        class_id: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> Sequence[Profile]:
        raise NotImplementedError

    def create(self, *, profile_id: str, name: str, role: Role) -> Profile:
        raise NotImplementedError

    def update_name(self, profile_id: str, name: str) -> Optional[Profile]:
        raise NotImplementedError

    def set_class(self, profile_id: str, class_id: Optional[str]) -> Optional[Profile]:
        raise NotImplementedError

    def delete_by_id(self, profile_id: str) -> bool:
        raise NotImplementedError
