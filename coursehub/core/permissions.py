from collections.abc import Iterable

from fastapi import Depends

from coursehub.core.current_user import get_current_user
from coursehub.core.errors import Forbidden, Unauthenticated
from coursehub.core.identity import Identity
from coursehub.models.course import Course
from coursehub.models.user import Role

ADMIN_ONLY = frozenset({Role.ADMIN})
TEACHER_OR_ADMIN = frozenset({Role.TEACHER, Role.ADMIN})
ANY_ROLE = frozenset(Role)


def is_authorized(role: Role, allowed_roles: Iterable[Role]) -> bool:
    return role in frozenset(allowed_roles)


def ensure_authorized(identity: Identity | None, allowed_roles: Iterable[Role]) -> Identity:
    if identity is None:
        raise Unauthenticated("User not authenticated")
    if not is_authorized(identity.role, allowed_roles):
        raise Forbidden()
    return identity


def authorize_roles(*roles: Role):
    allowed = frozenset(roles)

    def checker(identity: Identity = Depends(get_current_user)) -> Identity:
        return ensure_authorized(identity, allowed)

    return checker


require_admin = authorize_roles(*ADMIN_ONLY)
require_teacher_or_admin = authorize_roles(*TEACHER_OR_ADMIN)
require_auth = authorize_roles(*ANY_ROLE)


def ensure_course_manager(identity: Identity, course: Course) -> None:
    """Course instructor or any admin."""
    if identity.role == Role.ADMIN:
        return
    if course.instructor_id != identity.uid:
        raise Forbidden("Not course instructor")
