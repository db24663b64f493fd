from __future__ import annotations

from typing import Optional, Protocol

from .model import Identity


class IdentityRepository(Protocol):
    def get_by_id(self, identity_id: str) -> Optional[Identity]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Identity]:
        raise NotImplementedError

    def create(self, *, email: str, password_hash: str, metadata: dict) -> Identity:
        raise NotImplementedError

    def delete_by_id(self, identity_id: str) -> bool:
        raise NotImplementedError
