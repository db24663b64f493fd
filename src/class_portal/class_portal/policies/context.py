"""Request-scoped caller identity.

Every secured read/write takes the caller from here, the way the database
session context supplies ``auth.uid()``; views never pass it explicitly.
"""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Optional

from ..core.exceptions import AuthenticationError

_current_caller: ContextVar[Optional[str]] = ContextVar("current_caller", default=None)


def current_caller() -> Optional[str]:
    return _current_caller.get()


def require_caller() -> str:
    caller = _current_caller.get()
    if not caller:
        raise AuthenticationError("Please sign in to continue")
    return caller


def bind_caller(user_id: Optional[str]) -> Token:
    return _current_caller.set(str(user_id) if user_id else None)


def reset_caller(token: Token) -> None:
    _current_caller.reset(token)


@contextmanager
def acting_as(user_id: Optional[str]) -> Iterator[None]:
    token = bind_caller(user_id)
    try:
        yield
    finally:
        reset_caller(token)
