"""Row-level access rules, one per table and operation.

Each predicate receives the PolicyContext and the row being read, inserted,
updated or deleted. Keep them side-effect free.
"""
from __future__ import annotations

from ..attendance.model import AttendanceRecord
from ..classes.model import SchoolClass
from ..core.enums import Operation, Table
from ..posts.model import Post
from ..profiles.model import Profile, RosterEntry
from .engine import PolicyContext, PolicyEngine


# profiles -----------------------------------------------------------------

def own_profile(ctx: PolicyContext, row: Profile) -> bool:
    return row.id == ctx.caller_id


# classes ------------------------------------------------------------------

def own_class(ctx: PolicyContext, row: SchoolClass) -> bool:
    return ctx.caller_class_id is not None and row.id == ctx.caller_class_id


# posts --------------------------------------------------------------------

def posts_of_own_class(ctx: PolicyContext, row: Post) -> bool:
    return ctx.caller_class_id is not None and row.class_id == ctx.caller_class_id


def teacher_posts_to_own_class(ctx: PolicyContext, row: Post) -> bool:
    caller = ctx.caller
    return (
        row.teacher_id == ctx.caller_id
        and caller is not None
        and caller.is_teacher
        and caller.class_id is not None
        and caller.class_id == row.class_id
    )


def post_author(ctx: PolicyContext, row: Post) -> bool:
    return row.teacher_id == ctx.caller_id


# attendance ---------------------------------------------------------------

def own_attendance(ctx: PolicyContext, row: AttendanceRecord) -> bool:
    return row.student_id == ctx.caller_id


def _teacher_shares_class(ctx: PolicyContext, student_id: str) -> bool:
    caller = ctx.caller
    if caller is None or not caller.is_teacher or caller.class_id is None:
        return False
    target = ctx.profile_of(student_id)
    return target is not None and target.class_id == caller.class_id


def attendance_of_class_students(ctx: PolicyContext, row: AttendanceRecord) -> bool:
    return _teacher_shares_class(ctx, row.student_id)


# class roster (read model over profiles) ------------------------------------

def roster_of_own_class(ctx: PolicyContext, row: RosterEntry) -> bool:
    return _teacher_shares_class(ctx, row.id)


def register_default_policies(engine: PolicyEngine) -> PolicyEngine:
    """Install the portal's complete authorization surface on ``engine``.

    Anything not registered here (profile INSERT/DELETE, class writes,
    attendance DELETE) stays denied.
    """
    engine.register(Table.PROFILES, Operation.SELECT, name="Users can view their own profile")(own_profile)
    engine.register(Table.PROFILES, Operation.UPDATE, name="Users can update their own profile")(own_profile)

    engine.register(Table.CLASSES, Operation.SELECT, name="Users can view their class")(own_class)

    engine.register(Table.POSTS, Operation.SELECT, name="Students can view posts from their class")(posts_of_own_class)
    engine.register(Table.POSTS, Operation.INSERT, name="Teachers can create posts for their class")(
        teacher_posts_to_own_class
    )
    engine.register(Table.POSTS, Operation.UPDATE, name="Teachers can update their own posts")(post_author)
    engine.register(Table.POSTS, Operation.DELETE, name="Teachers can delete their own posts")(post_author)

    engine.register(Table.ATTENDANCE, Operation.SELECT, name="Students can view their own attendance")(own_attendance)
    engine.register(
        Table.ATTENDANCE,
        Operation.SELECT,
        Operation.INSERT,
        Operation.UPDATE,
        name="Teachers can manage attendance for their class students",
    )(attendance_of_class_students)

    engine.register(Table.CLASS_ROSTER, Operation.SELECT, name="Teachers can view their class roster")(
        roster_of_own_class
    )
    return engine
