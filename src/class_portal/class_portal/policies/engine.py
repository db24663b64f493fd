from __future__ import annotations

import logging
from functools import cached_property
from typing import Any, Callable, Iterable, Optional

from ..core.enums import Operation, Table
from ..core.exceptions import AuthorizationError
from ..profiles.model import Profile
from ..profiles.repository import ProfileRepository

logger = logging.getLogger(__name__)


class PolicyContext:
    """What a predicate may look at: the caller and privileged profile lookups.

    Lookups are cached for the lifetime of one evaluation batch.
    """

    def __init__(self, caller_id: str, profiles: ProfileRepository):
        self.caller_id = caller_id
        self._profiles = profiles
        self._cache: dict[str, Optional[Profile]] = {}

    def profile_of(self, profile_id: Optional[str]) -> Optional[Profile]:
        if not profile_id:
            return None
        if profile_id not in self._cache:
            self._cache[profile_id] = self._profiles.get_by_id(profile_id)
        return self._cache[profile_id]

    @cached_property
    def caller(self) -> Optional[Profile]:
        return self.profile_of(self.caller_id)

    @property
    def caller_class_id(self) -> Optional[str]:
        return self.caller.class_id if self.caller else None


Predicate = Callable[[PolicyContext, Any], bool]


class PolicyEngine:
    """Registry of row predicates keyed by (table, operation).

    Several predicates on the same key are permissive: a row passes when any
    of them holds. A key with no predicate denies everything, as does a call
    without a caller.
    """

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles
        self._rules: dict[tuple[Table, Operation], list[tuple[str, Predicate]]] = {}

    def register(self, table: Table, *operations: Operation, name: Optional[str] = None):
        def decorator(predicate: Predicate) -> Predicate:
            for op in operations:
                self._rules.setdefault((table, op), []).append((name or predicate.__name__, predicate))
            return predicate

        return decorator

    def policies_for(self, table: Table, op: Operation) -> list[str]:
        return [name for name, _ in self._rules.get((table, op), [])]

    def context(self, caller_id: str) -> PolicyContext:
        return PolicyContext(caller_id, self._profiles)

    def allows(
        self,
        table: Table,
        op: Operation,
        caller_id: Optional[str],
        row: Any,
        *,
        ctx: Optional[PolicyContext] = None,
    ) -> bool:
        if not caller_id:
            return False
        rules = self._rules.get((table, op))
        if not rules:
            return False
        ctx = ctx or self.context(caller_id)
        return any(predicate(ctx, row) for _, predicate in rules)

    def filter(self, table: Table, caller_id: Optional[str], rows: Iterable[Any]) -> list:
        """SELECT: keep only the rows the caller may see."""
        if not caller_id:
            return []
        ctx = self.context(caller_id)
        return [r for r in rows if self.allows(table, Operation.SELECT, caller_id, r, ctx=ctx)]

    def check(self, table: Table, op: Operation, caller_id: Optional[str], row: Any) -> None:
        """Writes: raise AuthorizationError unless the row passes."""
        if not self.allows(table, op, caller_id, row):
            logger.warning("Policy denied %s on %s for caller=%s", op.value, table.value, caller_id)
            raise AuthorizationError(f"Not allowed to {op.value.lower()} this {_singular(table)}")


def _singular(table: Table) -> str:
    return {
        Table.CLASSES: "class",
        Table.PROFILES: "profile",
        Table.POSTS: "post",
        Table.ATTENDANCE: "attendance record",
        Table.CLASS_ROSTER: "roster entry",
    }[table]
