import logging
import math
from datetime import datetime, timezone

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from coursehub.core.errors import CourseNotFound, ValidationFailed
from coursehub.core.identity import Identity
from coursehub.models.assignment import Assignment
from coursehub.models.course import Course
from coursehub.models.lesson import Lesson
from coursehub.models.user import Role
from coursehub.schemas.assignment import AssignmentCreate
from coursehub.schemas.common import Pagination
from coursehub.schemas.course import CourseCreate, CourseUpdate
from coursehub.schemas.lesson import LessonCreate
from coursehub.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


def get_course(db: Session, course_id: str) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise CourseNotFound()
    return course


def list_public_courses(
    db: Session,
    page: int,
    limit: int,
    search: str | None = None,
    category: str | None = None,
) -> tuple[list[Course], Pagination]:
    """Active, approved courses, newest first."""
    conditions = [Course.is_active.is_(True), Course.is_approved.is_(True)]
    if search:
        term = search.strip()
        conditions.append(
            or_(
                Course.title.icontains(term, autoescape=True),
                Course.description.icontains(term, autoescape=True),
            )
        )
    if category:
        conditions.append(Course.category == category)

    total = db.scalar(select(func.count(Course.id)).where(*conditions)) or 0
    courses = list(
        db.scalars(
            select(Course)
            .where(*conditions)
            .order_by(Course.created_at.desc(), Course.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
    )
    pagination = Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=max(1, math.ceil(total / limit)),
    )
    return courses, pagination


def get_public_course(db: Session, course_id: str) -> Course:
    course = db.get(Course, course_id)
    if course is None or not course.is_approved:
        raise CourseNotFound()
    return course


def list_instructor_courses(db: Session, instructor_id: str) -> list[Course]:
    return list(
        db.scalars(
            select(Course)
            .where(Course.instructor_id == instructor_id)
            .order_by(Course.created_at.desc())
        )
    )


def list_pending_courses(db: Session) -> list[Course]:
    return list(
        db.scalars(
            select(Course)
            .where(Course.is_approved.is_(False))
            .order_by(Course.created_at.asc())
        )
    )


def create_course(db: Session, payload: CourseCreate, instructor: Identity) -> Course:
    course = Course(
        **payload.model_dump(),
        instructor_id=instructor.uid,
        instructor_name=UserDirectory(db).display_name_for(
            instructor.uid, fallback=instructor.email
        ),
        # admin-authored courses skip the review queue
        is_approved=instructor.role == Role.ADMIN,
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    logger.info("Course %s created by %s", course.id, instructor.uid)
    return course


def update_course(db: Session, course: Course, payload: CourseUpdate) -> Course:
    changes = payload.model_dump(exclude_unset=True)

    new_max = changes.pop("max_students", None)
    if new_max is not None:
        # checked against the live count so a concurrent enrollment cannot slip under it
        result = db.execute(
            update(Course)
            .where(Course.id == course.id, Course.enrolled_count <= new_max)
            .values(max_students=new_max, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.rollback()
            raise ValidationFailed("maxStudents cannot be lower than the current enrollment")

    for field, value in changes.items():
        if value is None and field not in ("syllabus", "price", "thumbnail_url"):
            continue
        setattr(course, field, value)

    db.commit()
    db.refresh(course)
    return course


def approve_course(db: Session, course: Course) -> Course:
    course.is_approved = True
    db.commit()
    db.refresh(course)
    logger.info("Course %s approved", course.id)
    return course


def add_lesson(db: Session, course: Course, payload: LessonCreate) -> Lesson:
    lesson = Lesson(course_id=course.id, **payload.model_dump())
    db.add(lesson)
    db.commit()
    db.refresh(lesson)
    return lesson


def add_assignment(db: Session, course: Course, payload: AssignmentCreate) -> Assignment:
    assignment = Assignment(course_id=course.id, **payload.model_dump())
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment
