from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import normalize_email, require_min_length
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .model import Identity
from .repository import IdentityRepository

logger = logging.getLogger(__name__)

IdentityHook = Callable[[Identity], None]


@dataclass
class IdentityHooks:
    """Callbacks run synchronously by whoever owns identity creation/removal."""

    on_created: list[IdentityHook] = field(default_factory=list)
    on_deleted: list[IdentityHook] = field(default_factory=list)


class IdentityService:
    """Use case: sign up, sign in and remove authentication identities."""

    def __init__(self, identities: IdentityRepository, hooks: Optional[IdentityHooks] = None):
        self._identities = identities
        self._hooks = hooks or IdentityHooks()

    @property
    def hooks(self) -> IdentityHooks:
        return self._hooks

    def register(
        self,
        *,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Identity:
        email = normalize_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        metadata: dict = {}
        if name and name.strip():
            metadata["name"] = name.strip()
        if role:
            try:
                metadata["role"] = Role(role).value
            except ValueError:
                raise ValidationError(f"Unknown role: {role}") from None

        if self._identities.get_by_email(email):
            raise ValidationError("An account with this email already exists")

        identity = self._identities.create(
            email=email,
            password_hash=generate_password_hash(password),
            metadata=metadata,
        )

        try:
            for hook in self._hooks.on_created:
                hook(identity)
        except Exception:
            logger.exception("Post-registration hook failed for identity=%s, rolling back", identity.id)
            self._identities.delete_by_id(identity.id)
            raise

        logger.info("Registered identity=%s", identity.id)
        return identity

    def authenticate(self, email: str, password: str) -> Identity:
        try:
            email = normalize_email(email)
        except ValidationError:
            raise AuthenticationError("Invalid email or password") from None

        identity = self._identities.get_by_email(email)
        if not identity:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(identity.password_hash, password)
        except (TypeError, ValueError):
            # e.g. placeholder hashes or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return identity

    def delete_identity(self, identity_id: str) -> None:
        identity = self._identities.get_by_id(identity_id)
        if not identity:
            raise ValidationError("Identity not found")

        for hook in self._hooks.on_deleted:
            hook(identity)
        self._identities.delete_by_id(identity_id)
        logger.info("Deleted identity=%s", identity_id)
