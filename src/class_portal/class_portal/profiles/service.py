from __future__ import annotations

import logging
from typing import Optional

from ..classes.repository import ClassRepository
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import ConstraintViolation, ValidationError
from ..identities.model import Identity
from ..policies.context import require_caller
from ..policies.secured import SecuredProfiles, SecuredRoster
from .model import Profile, RosterEntry
from .repository import ProfileRepository

logger = logging.getLogger(__name__)


class ProfileService:
    """Use case: the signed-in user's own profile and, for teachers, the class roster."""

    def __init__(self, profiles: SecuredProfiles, roster: SecuredRoster):
        self._profiles = profiles
        self._roster = roster

    def get_me(self) -> Optional[Profile]:
        caller = require_caller()
        rows = self._profiles.select(profile_id=caller)
        return rows[0] if rows else None

    def rename_me(self, name: str) -> Profile:
        name = require_non_empty(name, "Name")
        return self._profiles.update_name(require_caller(), name)

    def list_roster(self) -> list[RosterEntry]:
        me = self.get_me()
        if not me or not me.class_id:
            return []
        return self._roster.select(class_id=me.class_id)


class ProfileProvisioning:
    """Privileged profile writes: identity bootstrap and class assignment.

    Not reachable from the views; called by identity hooks and admin scripts.
    """

    def __init__(self, profiles: ProfileRepository, classes: ClassRepository):
        self._profiles = profiles
        self._classes = classes

    def create_for_identity(self, identity: Identity) -> Profile:
        """Post-registration hook: exactly one profile per identity."""
        if self._profiles.get_by_id(identity.id):
            raise ConstraintViolation(f"Profile already exists for identity {identity.id}")

        name = (identity.metadata.get("name") or "").strip() or identity.email
        role = Role.TEACHER if identity.metadata.get("role") == Role.TEACHER.value else Role.STUDENT
        profile = self._profiles.create(profile_id=identity.id, name=name, role=role)
        logger.info("Created %s profile for identity=%s", role.value, identity.id)
        return profile

    def remove_for_identity(self, identity: Identity) -> None:
        """Deletion hook: the profile goes with its identity."""
        self._profiles.delete_by_id(identity.id)

    def assign_class(self, profile_id: str, class_id: Optional[str]) -> Profile:
        if class_id is not None and not self._classes.get_by_id(class_id):
            raise ValidationError("Class not found")
        profile = self._profiles.set_class(profile_id, class_id)
        if not profile:
            raise ValidationError("Profile not found")
        logger.info("Assigned profile=%s to class=%s", profile_id, class_id)
        return profile
