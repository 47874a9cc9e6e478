"""
Enrollment writes and learner progress.

The capacity check and the seat increment are a single conditional UPDATE
against the course row, executed in the same transaction as the enrollment
insert, so concurrent requests for the last seat cannot both succeed.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursehub.core.errors import (
    CourseFull,
    CourseInactive,
    CourseNotFound,
    DuplicateEnrollment,
    NotFound,
)
from coursehub.models.course import Course
from coursehub.models.enrollment import Enrollment, LessonCompletion
from coursehub.models.lesson import Lesson

logger = logging.getLogger(__name__)


def find_enrollment(db: Session, course_id: str, student_id: str) -> Enrollment | None:
    return db.scalar(
        select(Enrollment).where(
            Enrollment.course_id == course_id,
            Enrollment.student_id == student_id,
        )
    )


def _claim_seat(db: Session, course_id: str) -> bool:
    result = db.execute(
        update(Course)
        .where(
            Course.id == course_id,
            Course.is_active.is_(True),
            Course.enrolled_count < Course.max_students,
        )
        .values(enrolled_count=Course.enrolled_count + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def enroll_student(db: Session, course_id: str, student_id: str) -> Enrollment:
    if db.get(Course, course_id) is None:
        raise CourseNotFound()

    if find_enrollment(db, course_id, student_id) is not None:
        raise DuplicateEnrollment()

    try:
        if not _claim_seat(db, course_id):
            course = db.get(Course, course_id, populate_existing=True)
            if course is None:
                raise CourseNotFound()
            if not course.is_active:
                raise CourseInactive()
            raise CourseFull()

        enrollment = Enrollment(student_id=student_id, course_id=course_id)
        db.add(enrollment)
        db.flush()
        db.commit()
    except IntegrityError:
        # lost a race with the same student's other request
        db.rollback()
        logger.info("Duplicate enrollment student=%s course=%s", student_id, course_id)
        raise DuplicateEnrollment()
    except (CourseFull, CourseInactive, CourseNotFound) as exc:
        db.rollback()
        logger.info(
            "Enrollment rejected student=%s course=%s: %s",
            student_id,
            course_id,
            exc.message,
        )
        raise

    db.refresh(enrollment)
    logger.info("Enrolled student=%s course=%s", student_id, course_id)
    return enrollment


def _recompute_progress(db: Session, enrollment: Enrollment) -> None:
    published = set(
        db.scalars(
            select(Lesson.id).where(
                Lesson.course_id == enrollment.course_id,
                Lesson.is_published.is_(True),
            )
        )
    )
    done = published.intersection(enrollment.completed_lessons)
    enrollment.progress = round(100 * len(done) / len(published)) if published else 0

    if enrollment.progress >= 100 and not enrollment.is_completed:
        enrollment.is_completed = True
        enrollment.completed_at = datetime.now(timezone.utc)


def complete_lesson(db: Session, enrollment: Enrollment, lesson_id: str) -> Enrollment:
    lesson = db.get(Lesson, lesson_id)
    if lesson is None or lesson.course_id != enrollment.course_id or not lesson.is_published:
        raise NotFound("Lesson not found")

    if lesson_id not in enrollment.completed_lessons:
        enrollment.lesson_completions.append(LessonCompletion(lesson_id=lesson_id))

    _recompute_progress(db, enrollment)
    db.commit()
    db.refresh(enrollment)
    return enrollment


def set_grade(db: Session, enrollment: Enrollment, grade: float) -> Enrollment:
    enrollment.grade = grade
    db.commit()
    db.refresh(enrollment)
    return enrollment
