from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.datetime_utils import parse_iso_date, today_local
from ..common.web import flash_failure, login_required
from ..container import Container
from ..core.constants import RECENT_ATTENDANCE_LIMIT
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _student_page(profile, *, my_class=None, posts=(), records=()):
        records = list(records)
        return render_template(
            "student/dashboard.html",
            profile=profile,
            my_class=my_class,
            posts=list(posts),
            recent=records[:RECENT_ATTENDANCE_LIMIT],
            summary=container.attendance_service.summarize(records),
        )

    def _teacher_page(profile, selected_date, *, my_class=None, posts=(), roster=()):
        tab = request.args.get("tab", "posts")
        return render_template(
            "teacher/dashboard.html",
            profile=profile,
            my_class=my_class,
            active_tab="attendance" if tab == "attendance" else "posts",
            posts=list(posts),
            selected_date=selected_date.strftime("%Y-%m-%d"),
            roster=list(roster),
        )

    @app.route("/dashboard", endpoint="dashboard")
    @login_required
    def dashboard():
        try:
            profile = container.profile_service.get_me()
        except DomainError as e:
            flash_failure(e, "Failed to load dashboard")
            # Signed in but unreadable: empty page from what the session remembers.
            fallback = {"name": session.get("name")}
            if session.get("role") == Role.TEACHER.value:
                return _teacher_page(fallback, today_local())
            return _student_page(fallback)

        if not profile:
            session.clear()
            flash("Please sign in to continue", "warning")
            return redirect(url_for("auth"))

        if profile.role == Role.STUDENT:
            try:
                return _student_page(
                    profile,
                    my_class=container.class_service.get_my_class(),
                    posts=container.post_service.list_class_posts(),
                    records=container.attendance_service.my_attendance(),
                )
            except DomainError as e:
                flash_failure(e, "Failed to load dashboard")
                return _student_page(profile)

        try:
            selected_date = parse_iso_date(request.args["date"]) if request.args.get("date") else today_local()
        except ValidationError as e:
            flash(str(e), "warning")
            selected_date = today_local()

        try:
            return _teacher_page(
                profile,
                selected_date,
                my_class=container.class_service.get_my_class(),
                posts=container.post_service.list_my_posts(),
                roster=container.attendance_service.roster_for_date(selected_date),
            )
        except DomainError as e:
            flash_failure(e, "Failed to load dashboard")
            return _teacher_page(profile, selected_date)

    @app.route("/profile", methods=["POST"], endpoint="profile_update")
    @login_required
    def profile_update():
        try:
            profile = container.profile_service.rename_me(request.form.get("name", ""))
            session["name"] = profile.name
            flash("Profile updated", "success")
        except DomainError as e:
            flash_failure(e, "Failed to update profile")
        except Exception:
            logger.exception("Unexpected error while updating profile")
            flash("Failed to update profile", "danger")
        return redirect(url_for("dashboard"))
