from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from coursehub.core.deps import get_db
from coursehub.core.errors import Forbidden, NotFound
from coursehub.core.identity import Identity
from coursehub.core.permissions import ensure_course_manager, require_auth, require_teacher_or_admin
from coursehub.models.enrollment import Enrollment
from coursehub.schemas.common import Envelope
from coursehub.schemas.enrollment import EnrollmentGradeUpdate, EnrollmentRead
from coursehub.services import enrollment as enrollment_service

router = APIRouter()


def _get_enrollment(db: Session, enrollment_id: str) -> Enrollment:
    enrollment = db.get(Enrollment, enrollment_id)
    if enrollment is None:
        raise NotFound("Enrollment not found")
    return enrollment


@router.get("/me", response_model=Envelope[list[EnrollmentRead]])
def my_enrollments(
    db: Session = Depends(get_db),
    me: Identity = Depends(require_auth),
):
    enrollments = db.scalars(
        select(Enrollment)
        .where(Enrollment.student_id == me.uid)
        .order_by(Enrollment.enrolled_at.desc())
    )
    return Envelope(data=[EnrollmentRead.model_validate(e) for e in enrollments])


@router.post(
    "/{enrollment_id}/lessons/{lesson_id}/complete",
    response_model=Envelope[EnrollmentRead],
)
def complete_lesson(
    enrollment_id: str,
    lesson_id: str,
    db: Session = Depends(get_db),
    me: Identity = Depends(require_auth),
):
    enrollment = _get_enrollment(db, enrollment_id)
    if enrollment.student_id != me.uid:
        raise Forbidden("Not your enrollment")

    enrollment = enrollment_service.complete_lesson(db, enrollment, lesson_id)
    return Envelope(data=EnrollmentRead.model_validate(enrollment))


@router.patch("/{enrollment_id}/grade", response_model=Envelope[EnrollmentRead])
def grade_enrollment(
    enrollment_id: str,
    payload: EnrollmentGradeUpdate,
    db: Session = Depends(get_db),
    me: Identity = Depends(require_teacher_or_admin),
):
    enrollment = _get_enrollment(db, enrollment_id)
    ensure_course_manager(me, enrollment.course)

    enrollment = enrollment_service.set_grade(db, enrollment, payload.grade)
    return Envelope(data=EnrollmentRead.model_validate(enrollment))
