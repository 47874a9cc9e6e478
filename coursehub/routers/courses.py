from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from coursehub.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from coursehub.core.deps import get_db
from coursehub.core.identity import Identity
from coursehub.core.permissions import (
    ensure_course_manager,
    require_auth,
    require_teacher_or_admin,
)
from coursehub.schemas.assignment import AssignmentCreate, AssignmentRead
from coursehub.schemas.common import Envelope
from coursehub.schemas.course import (
    CourseCreate,
    CourseDetail,
    CourseRead,
    CourseSummary,
    CourseUpdate,
)
from coursehub.schemas.enrollment import EnrollmentRead
from coursehub.schemas.lesson import LessonCreate, LessonRead
from coursehub.services import courses as course_service
from coursehub.services.enrollment import enroll_student

router = APIRouter()


@router.get("", response_model=Envelope[list[CourseSummary]])
def list_courses(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: str | None = Query(None, max_length=255),
    category: str | None = Query(None, max_length=100),
    db: Session = Depends(get_db),
):
    courses, pagination = course_service.list_public_courses(
        db, page=page, limit=limit, search=search, category=category
    )
    return Envelope(
        data=[CourseSummary.model_validate(c) for c in courses],
        pagination=pagination,
    )


@router.post(
    "",
    response_model=Envelope[CourseRead],
    status_code=status.HTTP_201_CREATED,
)
def create_course(
    payload: CourseCreate,
    db: Session = Depends(get_db),
    instructor: Identity = Depends(require_teacher_or_admin),
):
    course = course_service.create_course(db, payload, instructor)
    return Envelope(data=CourseRead.model_validate(course), message="Course created successfully")


@router.get("/mine", response_model=Envelope[list[CourseRead]])
def my_courses(
    db: Session = Depends(get_db),
    instructor: Identity = Depends(require_teacher_or_admin),
):
    courses = course_service.list_instructor_courses(db, instructor.uid)
    return Envelope(data=[CourseRead.model_validate(c) for c in courses])


@router.get("/{course_id}", response_model=Envelope[CourseDetail])
def course_detail(course_id: str, db: Session = Depends(get_db)):
    course = course_service.get_public_course(db, course_id)
    return Envelope(data=CourseDetail.model_validate(course))


@router.patch("/{course_id}", response_model=Envelope[CourseRead])
def update_course(
    course_id: str,
    payload: CourseUpdate,
    db: Session = Depends(get_db),
    me: Identity = Depends(require_teacher_or_admin),
):
    course = course_service.get_course(db, course_id)
    ensure_course_manager(me, course)
    course = course_service.update_course(db, course, payload)
    return Envelope(data=CourseRead.model_validate(course), message="Course updated")


@router.post(
    "/{course_id}/lessons",
    response_model=Envelope[LessonRead],
    status_code=status.HTTP_201_CREATED,
)
def create_lesson(
    course_id: str,
    payload: LessonCreate,
    db: Session = Depends(get_db),
    me: Identity = Depends(require_teacher_or_admin),
):
    course = course_service.get_course(db, course_id)
    ensure_course_manager(me, course)
    lesson = course_service.add_lesson(db, course, payload)
    return Envelope(data=LessonRead.model_validate(lesson))


@router.post(
    "/{course_id}/assignments",
    response_model=Envelope[AssignmentRead],
    status_code=status.HTTP_201_CREATED,
)
def create_assignment(
    course_id: str,
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    me: Identity = Depends(require_teacher_or_admin),
):
    course = course_service.get_course(db, course_id)
    ensure_course_manager(me, course)
    assignment = course_service.add_assignment(db, course, payload)
    return Envelope(data=AssignmentRead.model_validate(assignment))


@router.get("/{course_id}/enrollments", response_model=Envelope[list[EnrollmentRead]])
def course_roster(
    course_id: str,
    db: Session = Depends(get_db),
    me: Identity = Depends(require_teacher_or_admin),
):
    course = course_service.get_course(db, course_id)
    ensure_course_manager(me, course)
    return Envelope(data=[EnrollmentRead.model_validate(e) for e in course.enrollments])


@router.post("/{course_id}/enroll", response_model=Envelope[EnrollmentRead])
def enroll(
    course_id: str,
    db: Session = Depends(get_db),
    me: Identity = Depends(require_auth),
):
    enrollment = enroll_student(db, course_id, me.uid)
    return Envelope(
        data=EnrollmentRead.model_validate(enrollment),
        message="Successfully enrolled in course",
    )
