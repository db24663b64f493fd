from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from ..policies.context import acting_as

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _start_session(identity, *, remember: bool) -> bool:
        with acting_as(identity.id):
            profile = container.profile_service.get_me()
        if not profile:
            logger.error("Identity %s has no profile", identity.id)
            return False

        session.clear()
        session.permanent = remember
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)
        session["user_id"] = identity.id
        session["email"] = identity.email
        session["name"] = profile.name
        session["role"] = profile.role.value
        return True

    @app.route("/", endpoint="index")
    def index():
        if "user_id" in session:
            return redirect(url_for("dashboard"))
        return render_template("index.html")

    @app.route("/auth", methods=["GET", "POST"], endpoint="auth")
    def auth():
        if "user_id" in session:
            return redirect(url_for("dashboard"))

        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            try:
                identity = container.identity_service.authenticate(email, password)
                if _start_session(identity, remember=bool(request.form.get("remember_me"))):
                    flash("Signed in successfully", "success")
                    return redirect(url_for("dashboard"))
                flash("Your account is not set up yet", "danger")
            except AuthenticationError as e:
                flash(str(e), "danger")
            except DomainError:
                flash("Failed to sign in", "danger")
            except Exception:
                logger.exception("Unexpected error during sign-in")
                flash("Failed to sign in", "danger")

        return render_template("auth.html", roles=[r.value for r in Role], active_tab="signin")

    @app.route("/auth/register", methods=["POST"], endpoint="register")
    def register_account():
        form = request.form
        try:
            identity = container.identity_service.register(
                email=form.get("email", ""),
                password=form.get("password", ""),
                name=form.get("name") or None,
                role=form.get("role") or None,
            )
            if _start_session(identity, remember=False):
                flash("Account created successfully", "success")
                return redirect(url_for("dashboard"))
            flash("Your account is not set up yet", "danger")
        except ValidationError as e:
            flash(str(e), "danger")
        except DomainError:
            flash("Failed to create account", "danger")
        except Exception:
            logger.exception("Unexpected error during sign-up")
            flash("Failed to create account", "danger")

        return render_template("auth.html", roles=[r.value for r in Role], active_tab="signup"), 400

    @app.route("/logout", methods=["GET", "POST"], endpoint="logout")
    def logout():
        session.clear()
        flash("Signed out successfully", "info")
        return redirect(url_for("index"))
