from __future__ import annotations

from datetime import date

from src.class_portal.class_portal.core.enums import AttendanceStatus
from src.class_portal.class_portal.core.exceptions import BackendUnavailable
from src.class_portal.class_portal.policies.context import acting_as, current_caller


def test_index_and_auth_pages_render(client):
    assert b"Get Started" in client.get("/").data
    assert client.get("/auth").status_code == 200


def test_dashboard_requires_login(client):
    resp = client.get("/dashboard")
    assert resp.status_code == 302
    assert "/auth" in resp.headers["Location"]


def test_login_rejects_bad_password(client, world, login):
    resp = login("ann@school.test", "nope-nope")
    assert resp.status_code == 200
    assert b"Invalid email or password" in resp.data


def test_student_dashboard(client, container, world, login):
    with acting_as(world.teacher_a):
        container.post_service.create_post(title="Field trip", content="Bring lunch")
        container.attendance_service.mark(student_id=world.student_a1, on_date=date(2024, 1, 1), status="present")
    with acting_as(world.teacher_b):
        container.post_service.create_post(title="Other class news", content="x")

    login("ann@school.test")
    resp = client.get("/dashboard")

    assert resp.status_code == 200
    assert b"Student Dashboard" in resp.data
    assert b"Field trip" in resp.data
    assert b"Alice Teacher" in resp.data
    assert b"Other class news" not in resp.data
    assert b"Present: 1 (100%)" in resp.data


def test_caller_is_unbound_after_request(client, world, login):
    login("ann@school.test")
    client.get("/dashboard")
    assert current_caller() is None


def test_teacher_dashboard_attendance_tab(client, world, login):
    login("alice@school.test")
    resp = client.get("/dashboard?tab=attendance&date=2024-01-01")

    assert b"Teacher Dashboard" in resp.data
    assert b"Mark attendance for 2024-01-01" in resp.data
    assert b"Ann Student" in resp.data and b"Amy Student" in resp.data
    assert b"Ben Student" not in resp.data


def test_teacher_dashboard_bad_date_falls_back(client, world, login):
    login("alice@school.test")
    resp = client.get("/dashboard?tab=attendance&date=not-a-date")
    assert resp.status_code == 200
    assert b"Mark attendance for" in resp.data


def test_teacher_marks_attendance_through_form(client, repos, world, login):
    login("alice@school.test")
    for status in ("present", "absent"):
        resp = client.post(
            "/teacher/attendance",
            data={"student_id": world.student_a1, "date": "2024-01-01", "status": status},
        )
        assert resp.status_code == 302

    rows = [r for r in repos.attendance.rows.values() if r.student_id == world.student_a1]
    assert [r.status for r in rows] == [AttendanceStatus.ABSENT]


def test_teacher_cannot_mark_foreign_student(client, repos, world, login):
    login("alice@school.test")
    resp = client.post(
        "/teacher/attendance",
        data={"student_id": world.student_b1, "date": "2024-01-01", "status": "present"},
        follow_redirects=True,
    )
    assert b"Failed to mark attendance" in resp.data
    assert repos.attendance.rows == {}


def test_student_is_forbidden_from_teacher_pages(client, repos, world, login):
    login("ann@school.test")
    resp = client.post("/teacher/posts", data={"title": "t", "content": "c"})
    assert resp.status_code == 403
    assert b"403 - Forbidden" in resp.data
    assert client.get("/teacher/attendance.csv?start=2024-01-01&end=2024-01-02").status_code == 403
    assert repos.posts.rows == {}


def test_teacher_post_lifecycle(client, repos, world, login):
    login("alice@school.test")

    resp = client.post("/teacher/posts", data={"title": "Quiz", "content": "Friday"}, follow_redirects=True)
    assert b"Post created successfully" in resp.data
    (post_id,) = repos.posts.rows

    resp = client.post(f"/teacher/posts/{post_id}/edit", data={"title": "Quiz moved", "content": "Monday"})
    assert resp.status_code == 302
    assert repos.posts.rows[post_id].title == "Quiz moved"

    client.post(f"/teacher/posts/{post_id}/delete")
    assert repos.posts.rows == {}


def test_empty_post_shows_validation_message(client, repos, world, login):
    login("alice@school.test")
    resp = client.post("/teacher/posts", data={"title": "", "content": "x"}, follow_redirects=True)
    assert b"Title is required" in resp.data
    assert repos.posts.rows == {}


def test_co_teacher_cannot_delete_post(client, container, repos, world, login):
    with acting_as(world.teacher_a):
        post = container.post_service.create_post(title="Mine", content="x")

    login("andy@school.test")
    resp = client.post(f"/teacher/posts/{post.id}/delete", follow_redirects=True)
    assert b"Failed to delete post" in resp.data
    assert post.id in repos.posts.rows


def test_register_creates_student_and_signs_in(client, repos):
    resp = client.post(
        "/auth/register",
        data={"name": "Nia", "email": "nia@school.test", "password": "secret123", "role": "student"},
        follow_redirects=True,
    )
    assert b"Student Dashboard" in resp.data
    assert [p.name for p in repos.profiles.rows.values()] == ["Nia"]


def test_register_rejects_short_password(client, repos):
    resp = client.post("/auth/register", data={"email": "x@school.test", "password": "123"})
    assert resp.status_code == 400
    assert b"at least 6 characters" in resp.data
    assert repos.identities.rows == {}


def test_logout_clears_session(client, world, login):
    login("ann@school.test")
    client.post("/logout")
    assert client.get("/dashboard").status_code == 302


def test_rename_profile(client, repos, world, login):
    login("ann@school.test")
    client.post("/profile", data={"name": "Annie"})
    assert repos.profiles.get_by_id(world.student_a1).name == "Annie"


def test_csv_export(client, container, world, login):
    with acting_as(world.teacher_a):
        container.attendance_service.mark(student_id=world.student_a1, on_date=date(2024, 1, 1), status="present")

    login("alice@school.test")
    resp = client.get("/teacher/attendance.csv?start=2024-01-01&end=2024-01-31")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attendance_20240101_20240131.csv" in resp.headers["Content-Disposition"]
    text = resp.data.decode("utf-8-sig")
    lines = text.strip().splitlines()
    assert lines[0] == "date,student_id,student_name,status"
    assert lines[1] == f"2024-01-01,{world.student_a1},Ann Student,present"


def test_csv_export_requires_range(client, world, login):
    login("alice@school.test")
    resp = client.get("/teacher/attendance.csv?start=2024-01-01")
    assert resp.status_code == 302


def test_api_posts_requires_login(client):
    assert client.get("/api/posts").status_code == 302


def test_api_posts_roundtrip(client, world, login):
    login("alice@school.test")
    created = client.post("/api/posts", json={"title": "API", "content": "hello"})
    assert created.status_code == 201
    assert created.get_json()["post"]["author_name"] == "Alice Teacher"

    client.post("/logout")
    login("amy@school.test")
    body = client.get("/api/posts").get_json()
    assert body["success"] is True
    assert [p["title"] for p in body["posts"]] == ["API"]


def test_api_post_create_error_codes(client, world, login):
    login("ann@school.test")
    resp = client.post("/api/posts", json={"title": "t", "content": "c"})
    assert resp.status_code == 403
    assert resp.get_json()["success"] is False

    client.post("/logout")
    login("alice@school.test")
    resp = client.post("/api/posts", json={"title": "", "content": "c"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Title is required"


def test_api_attendance_student_view_and_summary(client, container, world, login):
    with acting_as(world.teacher_a):
        container.attendance_service.mark(student_id=world.student_a1, on_date=date(2024, 1, 1), status="present")
        container.attendance_service.mark(student_id=world.student_a1, on_date=date(2024, 1, 2), status="absent")
        container.attendance_service.mark(student_id=world.student_a2, on_date=date(2024, 1, 2), status="present")

    login("ann@school.test")
    body = client.get("/api/attendance").get_json()
    assert [(a["date"], a["status"]) for a in body["attendance"]] == [
        ("2024-01-02", "absent"),
        ("2024-01-01", "present"),
    ]

    summary = client.get("/api/attendance/summary").get_json()
    assert summary["pie"] == {"present": 1, "absent": 1}
    assert summary["percent"] == {"present": 50, "absent": 50}
    assert summary["total"] == 2


def test_api_attendance_roster_and_mark(client, world, login):
    login("alice@school.test")
    resp = client.post(
        "/api/attendance/mark",
        json={"student_id": world.student_a2, "date": "2024-03-04", "status": "present"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["attendance"]["status"] == "present"

    body = client.get("/api/attendance?date=2024-03-04").get_json()
    assert body["roster"] == [
        {"student_id": world.student_a2, "name": "Amy Student", "status": "present"},
        {"student_id": world.student_a1, "name": "Ann Student", "status": None},
    ]


def test_api_attendance_mark_errors(client, world, login):
    login("alice@school.test")
    foreign = client.post(
        "/api/attendance/mark",
        json={"student_id": world.student_b1, "date": "2024-03-04", "status": "present"},
    )
    assert foreign.status_code == 403

    bad = client.post(
        "/api/attendance/mark",
        json={"student_id": world.student_a1, "date": "2024-03-04", "status": "late"},
    )
    assert bad.status_code == 400

    bad_date = client.get("/api/attendance?date=2024-13-40")
    assert bad_date.status_code == 400


def _unavailable(**kwargs):
    raise BackendUnavailable("Database is unavailable")


def test_student_dashboard_survives_backend_failure(client, repos, world, login, monkeypatch):
    login("ann@school.test")
    monkeypatch.setattr(repos.attendance, "find", _unavailable)

    resp = client.get("/dashboard")

    assert resp.status_code == 200
    assert b"Failed to load dashboard" in resp.data
    assert b"No attendance data available" in resp.data
    assert b"No posts available" in resp.data


def test_teacher_dashboard_survives_backend_failure(client, repos, world, login, monkeypatch):
    login("alice@school.test")
    monkeypatch.setattr(repos.attendance, "find", _unavailable)

    resp = client.get("/dashboard?tab=attendance&date=2024-01-01")

    assert resp.status_code == 200
    assert b"Failed to load dashboard" in resp.data
    assert b"Mark attendance for 2024-01-01" in resp.data
    assert b"No students in your class" in resp.data


def test_dashboard_survives_unreadable_profile(client, repos, world, login, monkeypatch):
    login("ann@school.test")
    monkeypatch.setattr(repos.profiles, "find", _unavailable)

    resp = client.get("/dashboard")

    assert resp.status_code == 200
    assert b"Failed to load dashboard" in resp.data
    assert b"Welcome back, Ann Student" in resp.data


def test_register_without_profile_does_not_sign_in(client, container, repos):
    container.identity_service.hooks.on_created.append(lambda identity: repos.profiles.delete_by_id(identity.id))

    resp = client.post(
        "/auth/register",
        data={"name": "Nia", "email": "nia@school.test", "password": "secret123"},
    )

    assert resp.status_code == 400
    assert b"Your account is not set up yet" in resp.data
    assert b"Account created successfully" not in resp.data
    assert client.get("/dashboard").status_code == 302


def test_json_endpoints_reject_non_object_bodies(client, repos, world, login):
    login("alice@school.test")

    mark = client.post("/api/attendance/mark", json=["present"])
    assert mark.status_code == 400
    assert mark.get_json()["message"] == "Student is required"

    post = client.post("/api/posts", json=["title", "content"])
    assert post.status_code == 400
    assert repos.posts.rows == {}
    assert repos.attendance.rows == {}
