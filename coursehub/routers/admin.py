from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coursehub.core.deps import get_db
from coursehub.core.errors import UserNotFound
from coursehub.core.identity import Identity
from coursehub.core.permissions import require_admin
from coursehub.schemas.common import Envelope
from coursehub.schemas.course import CourseRead
from coursehub.schemas.user import RoleUpdate, UserRead
from coursehub.services import courses as course_service
from coursehub.services.user_directory import UserDirectory

router = APIRouter()


@router.get("/ping")
def admin_ping(current_user: Identity = Depends(require_admin)):
    return {"success": True, "message": "admin ok", "data": {"uid": current_user.uid}}


@router.patch("/users/{uid}/role", response_model=Envelope[UserRead])
def set_user_role(
    uid: str,
    payload: RoleUpdate,
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    directory = UserDirectory(db)
    user = directory.get(uid)
    if user is None:
        raise UserNotFound()
    user = directory.set_role(user, payload.role)
    return Envelope(data=UserRead.model_validate(user))


@router.get("/courses/pending", response_model=Envelope[list[CourseRead]])
def pending_courses(
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    courses = course_service.list_pending_courses(db)
    return Envelope(data=[CourseRead.model_validate(c) for c in courses])


@router.patch("/courses/{course_id}/approve", response_model=Envelope[CourseRead])
def approve_course(
    course_id: str,
    db: Session = Depends(get_db),
    admin: Identity = Depends(require_admin),
):
    course = course_service.get_course(db, course_id)
    course = course_service.approve_course(db, course)
    return Envelope(data=CourseRead.model_validate(course), message="Course approved")
