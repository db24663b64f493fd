from __future__ import annotations

from functools import wraps

from flask import flash, jsonify, redirect, render_template, session, url_for

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendUnavailable,
    ConstraintViolation,
    DomainError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ConstraintViolation, 409),
    (BackendUnavailable, 503),
)


def current_user() -> dict:
    return {"full_name": session.get("name"), "role": session.get("role")}


def render_forbidden() -> tuple[str, int]:
    return render_template("403.html", current_user=current_user()), 403


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            flash("Please sign in to continue", "warning")
            return redirect(url_for("auth"))
        return view(*args, **kwargs)

    return wrapper


def role_required(role: Role):
    """UI gate only; the policy layer still decides what each call may touch."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return redirect(url_for("auth"))
            if session.get("role") != role.value:
                return render_forbidden()
            return view(*args, **kwargs)

        return wrapper

    return decorator


teacher_required = role_required(Role.TEACHER)


def flash_failure(e: Exception, fallback: str) -> None:
    """One notification per failed call; input problems are shown as-is."""
    if isinstance(e, ValidationError):
        flash(str(e), "danger")
    else:
        flash(fallback, "danger")


def json_error(e: Exception, fallback: str):
    status = 500
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            status = code
            break
    message = str(e) if isinstance(e, DomainError) and str(e) else fallback
    return jsonify({"success": False, "message": message}), status
