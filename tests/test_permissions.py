import pytest

from coursehub.core.errors import Forbidden, Unauthenticated
from coursehub.core.identity import Identity
from coursehub.core.permissions import (
    ADMIN_ONLY,
    ANY_ROLE,
    TEACHER_OR_ADMIN,
    ensure_authorized,
    is_authorized,
)
from coursehub.models.user import Role
from tests.conftest import auth_header


@pytest.mark.parametrize(
    "role,allowed,expected",
    [
        (Role.ADMIN, ADMIN_ONLY, True),
        (Role.TEACHER, ADMIN_ONLY, False),
        (Role.STUDENT, ADMIN_ONLY, False),
        (Role.TEACHER, TEACHER_OR_ADMIN, True),
        (Role.STUDENT, TEACHER_OR_ADMIN, False),
        (Role.STUDENT, ANY_ROLE, True),
    ],
)
def test_is_authorized(role, allowed, expected):
    assert is_authorized(role, allowed) is expected
    # same inputs, same answer
    assert is_authorized(role, allowed) is expected


def test_ensure_authorized_without_identity():
    with pytest.raises(Unauthenticated) as exc:
        ensure_authorized(None, ANY_ROLE)
    assert exc.value.status_code == 401


def test_ensure_authorized_wrong_role():
    student = Identity(uid="s", email="s@example.com", role=Role.STUDENT)
    with pytest.raises(Forbidden) as exc:
        ensure_authorized(student, TEACHER_OR_ADMIN)
    assert exc.value.status_code == 403


def test_ensure_authorized_returns_identity_unchanged():
    admin = Identity(uid="a", email="a@example.com", role=Role.ADMIN)
    assert ensure_authorized(admin, ADMIN_ONLY) is admin


def test_student_cannot_create_course(client):
    r = client.post(
        "/courses",
        headers=auth_header("student1-token"),
        json={"title": "Nope", "description": "Nope"},
    )
    assert r.status_code == 403
    assert r.json() == {"success": False, "message": "Insufficient permissions"}


def test_teacher_cannot_reach_admin_routes(client):
    r = client.get("/admin/ping", headers=auth_header("teacher-token"))
    assert r.status_code == 403


def test_admin_can_change_roles(client):
    r = client.patch(
        "/admin/users/student-2/role",
        headers=auth_header("admin-token"),
        json={"role": "teacher"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["data"]["role"] == "teacher"

    r = client.get("/auth/me", headers=auth_header("student2-token"))
    assert r.json()["data"]["role"] == "teacher"


def test_role_change_for_unknown_user(client):
    r = client.patch(
        "/admin/users/ghost/role",
        headers=auth_header("admin-token"),
        json={"role": "teacher"},
    )
    assert r.status_code == 404
