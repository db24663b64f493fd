from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .database.connection import DBConfig, DatabaseConnection
from .identities.mysql_identity_repository import MySQLIdentityRepository
from .identities.repository import IdentityRepository
from .identities.service import IdentityHooks, IdentityService
from .policies.engine import PolicyEngine
from .policies.rules import register_default_policies
from .policies.secured import SecuredAttendance, SecuredClasses, SecuredPosts, SecuredProfiles, SecuredRoster
from .posts.mysql_post_repository import MySQLPostRepository
from .posts.repository import PostRepository
from .posts.service import PostService
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.repository import ProfileRepository
from .profiles.service import ProfileProvisioning, ProfileService


@dataclass(frozen=True)
class Container:
    identities_repo: IdentityRepository
    profiles_repo: ProfileRepository
    classes_repo: ClassRepository
    posts_repo: PostRepository
    attendance_repo: AttendanceRepository

    policy_engine: PolicyEngine

    identity_service: IdentityService
    provisioning: ProfileProvisioning
    profile_service: ProfileService
    class_service: ClassService
    post_service: PostService
    attendance_service: AttendanceService


def assemble_container(
    *,
    identities_repo: IdentityRepository,
    profiles_repo: ProfileRepository,
    classes_repo: ClassRepository,
    posts_repo: PostRepository,
    attendance_repo: AttendanceRepository,
) -> Container:
    """Wire services on top of the given raw repositories.

    Services only receive secured tables; the raw repositories are reachable
    from the policy engine and from provisioning.
    """
    engine = register_default_policies(PolicyEngine(profiles_repo))

    provisioning = ProfileProvisioning(profiles_repo, classes_repo)
    hooks = IdentityHooks(
        on_created=[provisioning.create_for_identity],
        on_deleted=[provisioning.remove_for_identity],
    )
    identity_service = IdentityService(identities_repo, hooks)

    profile_service = ProfileService(
        SecuredProfiles(profiles_repo, engine),
        SecuredRoster(profiles_repo, engine),
    )
    class_service = ClassService(SecuredClasses(classes_repo, engine))
    post_service = PostService(SecuredPosts(posts_repo, engine), profile_service)
    attendance_service = AttendanceService(SecuredAttendance(attendance_repo, engine), profile_service)

    return Container(
        identities_repo=identities_repo,
        profiles_repo=profiles_repo,
        classes_repo=classes_repo,
        posts_repo=posts_repo,
        attendance_repo=attendance_repo,
        policy_engine=engine,
        identity_service=identity_service,
        provisioning=provisioning,
        profile_service=profile_service,
        class_service=class_service,
        post_service=post_service,
        attendance_service=attendance_service,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return assemble_container(
        identities_repo=MySQLIdentityRepository(conn),
        profiles_repo=MySQLProfileRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        posts_repo=MySQLPostRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
    )
