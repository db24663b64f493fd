from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from types import SimpleNamespace
from typing import Optional

import pytest

from src.class_portal.class_portal.attendance.model import AttendanceRecord
from src.class_portal.class_portal.classes.model import SchoolClass
from src.class_portal.class_portal.container import assemble_container
from src.class_portal.class_portal.core.enums import AttendanceStatus, Role
from src.class_portal.class_portal.identities.model import Identity
from src.class_portal.class_portal.posts.model import Post
from src.class_portal.class_portal.profiles.model import Profile

PASSWORD = "secret123"


class Clock:
    """Strictly increasing timestamps so "newest first" is deterministic."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 8, 0, 0)):
        self._now = start

    def tick(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryIdentities:
    def __init__(self, clock: Clock):
        self._clock = clock
        self.rows: dict[str, Identity] = {}

    def get_by_id(self, identity_id: str) -> Optional[Identity]:
        return self.rows.get(identity_id)

    def get_by_email(self, email: str) -> Optional[Identity]:
        return next((i for i in self.rows.values() if i.email == email), None)

    def create(self, *, email: str, password_hash: str, metadata: dict) -> Identity:
        identity = Identity(
            id=_new_id(),
            email=email,
            password_hash=password_hash,
            metadata=dict(metadata),
            created_at=self._clock.tick(),
        )
        self.rows[identity.id] = identity
        return identity

    def delete_by_id(self, identity_id: str) -> bool:
        return self.rows.pop(identity_id, None) is not None


class InMemoryProfiles:
    def __init__(self, clock: Clock):
        self._clock = clock
        self.rows: dict[str, Profile] = {}

    def get_by_id(self, profile_id: str) -> Optional[Profile]:
        return self.rows.get(profile_id)

    def find(self, *, profile_id=None, class_id=None, role=None):
        items = [
            p
            for p in self.rows.values()
            if (profile_id is None or p.id == profile_id)
            and (class_id is None or p.class_id == class_id)
            and (role is None or p.role == role)
        ]
        return sorted(items, key=lambda p: p.name)

    def create(self, *, profile_id: str, name: str, role: Role) -> Profile:
        now = self._clock.tick()
        profile = Profile(id=profile_id, name=name, role=role, class_id=None, created_at=now, updated_at=now)
        self.rows[profile_id] = profile
        return profile

    def update_name(self, profile_id: str, name: str) -> Optional[Profile]:
        if profile_id not in self.rows:
            return None
        self.rows[profile_id] = replace(self.rows[profile_id], name=name, updated_at=self._clock.tick())
        return self.rows[profile_id]

    def set_class(self, profile_id: str, class_id: Optional[str]) -> Optional[Profile]:
        if profile_id not in self.rows:
            return None
        self.rows[profile_id] = replace(self.rows[profile_id], class_id=class_id, updated_at=self._clock.tick())
        return self.rows[profile_id]

    def delete_by_id(self, profile_id: str) -> bool:
        return self.rows.pop(profile_id, None) is not None


class InMemoryClasses:
    def __init__(self, clock: Clock):
        self._clock = clock
        self.rows: dict[str, SchoolClass] = {}

    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        return self.rows.get(class_id)

    def get_by_name(self, name: str) -> Optional[SchoolClass]:
        return next((c for c in self.rows.values() if c.name == name), None)

    def find(self, *, class_id=None):
        if class_id is not None:
            return [self.rows[class_id]] if class_id in self.rows else []
        return sorted(self.rows.values(), key=lambda c: c.name)

    def create(self, *, name: str) -> SchoolClass:
        school_class = SchoolClass(id=_new_id(), name=name, created_at=self._clock.tick())
        self.rows[school_class.id] = school_class
        return school_class


class InMemoryPosts:
    def __init__(self, clock: Clock, profiles: InMemoryProfiles):
        self._clock = clock
        self._profiles = profiles
        self.rows: dict[str, Post] = {}

    def _with_author(self, p: Post) -> Post:
        author = self._profiles.get_by_id(p.teacher_id)
        return replace(p, author_name=author.name if author else None)

    def get_by_id(self, post_id: str) -> Optional[Post]:
        p = self.rows.get(post_id)
        return self._with_author(p) if p else None

    def find(self, *, post_id=None, class_id=None, teacher_id=None):
        items = [
            self._with_author(p)
            for p in self.rows.values()
            if (post_id is None or p.id == post_id)
            and (class_id is None or p.class_id == class_id)
            and (teacher_id is None or p.teacher_id == teacher_id)
        ]
        return sorted(items, key=lambda p: p.created_at, reverse=True)

    def create(self, *, teacher_id: str, class_id: str, title: str, content: str) -> Post:
        post = Post(
            id=_new_id(),
            teacher_id=teacher_id,
            class_id=class_id,
            title=title,
            content=content,
            created_at=self._clock.tick(),
        )
        self.rows[post.id] = post
        return self._with_author(post)

    def update(self, post_id: str, *, title: str, content: str) -> Optional[Post]:
        if post_id not in self.rows:
            return None
        self.rows[post_id] = replace(self.rows[post_id], title=title, content=content)
        return self._with_author(self.rows[post_id])

    def delete_by_id(self, post_id: str) -> bool:
        return self.rows.pop(post_id, None) is not None


class InMemoryAttendance:
    def __init__(self, clock: Clock):
        self._clock = clock
        self.rows: dict[tuple[str, date], AttendanceRecord] = {}

    def get_for_student_and_date(self, student_id: str, on_date: date) -> Optional[AttendanceRecord]:
        return self.rows.get((student_id, on_date))

    def find(self, *, student_id=None, student_ids=None, on_date=None, start=None, end=None):
        items = [
            r
            for r in self.rows.values()
            if (student_id is None or r.student_id == student_id)
            and (student_ids is None or r.student_id in student_ids)
            and (on_date is None or r.date == on_date)
            and (start is None or r.date >= start)
            and (end is None or r.date <= end)
        ]
        return sorted(items, key=lambda r: r.date, reverse=True)

    def upsert(self, *, student_id: str, on_date: date, status: AttendanceStatus) -> AttendanceRecord:
        existing = self.rows.get((student_id, on_date))
        if existing:
            record = replace(existing, status=status)
        else:
            record = AttendanceRecord(
                id=_new_id(),
                student_id=student_id,
                date=on_date,
                status=status,
                created_at=self._clock.tick(),
            )
        self.rows[(student_id, on_date)] = record
        return record


@pytest.fixture
def repos():
    clock = Clock()
    profiles = InMemoryProfiles(clock)
    return SimpleNamespace(
        clock=clock,
        identities=InMemoryIdentities(clock),
        profiles=profiles,
        classes=InMemoryClasses(clock),
        posts=InMemoryPosts(clock, profiles),
        attendance=InMemoryAttendance(clock),
    )


@pytest.fixture
def container(repos):
    return assemble_container(
        identities_repo=repos.identities,
        profiles_repo=repos.profiles,
        classes_repo=repos.classes,
        posts_repo=repos.posts,
        attendance_repo=repos.attendance,
    )


@pytest.fixture
def world(container, repos):
    """Class A: two teachers, two students. Class B: one teacher, one student. Plus a student with no class."""
    class_a = repos.classes.create(name="Class A")
    class_b = repos.classes.create(name="Class B")
    class_c = repos.classes.create(name="Class C")

    def account(email: str, name: str, role: Optional[str], school_class: Optional[SchoolClass]) -> str:
        identity = container.identity_service.register(email=email, password=PASSWORD, name=name, role=role)
        if school_class:
            container.provisioning.assign_class(identity.id, school_class.id)
        return identity.id

    return SimpleNamespace(
        class_a=class_a,
        class_b=class_b,
        class_c=class_c,
        teacher_a=account("alice@school.test", "Alice Teacher", "teacher", class_a),
        teacher_a2=account("andy@school.test", "Andy Teacher", "teacher", class_a),
        teacher_b=account("bob@school.test", "Bob Teacher", "teacher", class_b),
        student_a1=account("ann@school.test", "Ann Student", None, class_a),
        student_a2=account("amy@school.test", "Amy Student", None, class_a),
        student_b1=account("ben@school.test", "Ben Student", None, class_b),
        loner=account("lou@school.test", "Lou Student", None, None),
    )


@pytest.fixture
def fixed_date() -> date:
    return date(2024, 1, 1)


@pytest.fixture
def app(container):
    from src.class_portal.class_portal.main import create_app

    app = create_app(container, settings_module="config.testing")
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(email: str, password: str = PASSWORD):
        return client.post("/auth", data={"email": email, "password": password})

    return _login
